"""Compiler module."""

from statickit.compiler.imports import ImportResolver
from statickit.compiler.sprite import SpriteCompiler
from statickit.compiler.svg_optimizer import SvgOptimizer

__all__ = ["ImportResolver", "SpriteCompiler", "SvgOptimizer"]
