"""StaticKit - static site toolkit with HTML imports and SVG sprites."""

from statickit.compiler.imports import ImportResolver, process_html_imports
from statickit.compiler.sprite import SpriteCompiler, generate_svg_sprite
from statickit.config import ProjectLayout, StaticKitConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "ImportResolver",
    "process_html_imports",
    "SpriteCompiler",
    "generate_svg_sprite",
    "ProjectLayout",
    "StaticKitConfig",
    "load_config",
]
