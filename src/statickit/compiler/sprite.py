"""SVG sprite generation."""
import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from lxml import etree

from statickit.compiler.svg_optimizer import SvgOptimizer
from statickit.exceptions import SvgOptimizeError
from statickit.scanner import scan_directory

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
SVG_EXTENSION = ".svg"

DEFAULT_PLUGINS = [
    {"name": "removeAttrs", "params": {"attrs": "data-name"}},
]


@dataclass
class IconSymbol:
    """A single icon converted to sprite <symbol> content."""

    name: str
    inner: str
    view_box: Optional[str] = None
    source: str = ""

    def render(self) -> str:
        view_box = f' viewBox="{html.escape(self.view_box)}"' if self.view_box is not None else ""
        return f'<symbol id="{html.escape(self.name)}"{view_box}>{self.inner}</symbol>'


def icon_name(relative_path: str) -> str:
    """Symbol id for an icon: its file name without the .svg extension."""
    name = relative_path.rsplit("/", 1)[-1]
    if name.endswith(SVG_EXTENSION):
        name = name[: -len(SVG_EXTENSION)]
    return name


def _strip_namespaces(root: etree._Element) -> etree._Element:
    """Move root's children under a namespace-free <svg> so they serialize without xmlns."""
    for element in root.iter(etree.Element):
        qname = etree.QName(element)
        if qname.namespace == SVG_NS:
            element.tag = qname.localname
        for attr in list(element.attrib):
            attr_qname = etree.QName(attr)
            if attr_qname.namespace == XLINK_NS:
                value = element.attrib.pop(attr)
                if attr_qname.localname not in element.attrib:
                    element.set(attr_qname.localname, value)

    bare = etree.Element("svg")
    bare.text = root.text
    for child in list(root):
        bare.append(child)
    etree.cleanup_namespaces(bare)
    return bare


def extract_symbol(name: str, svg: str, source: str = "") -> Optional[IconSymbol]:
    """
    Pull the drawable content and viewBox out of an optimized SVG document.

    Returns None when the document's root element is not <svg>.
    """
    root = SvgOptimizer.parse(svg, source)
    if etree.QName(root).localname != "svg":
        return None

    view_box = root.get("viewBox")
    bare = _strip_namespaces(root)

    parts = [html.escape(bare.text, quote=False)] if bare.text else []
    parts.extend(etree.tostring(child, encoding="unicode", with_tail=True) for child in bare)

    return IconSymbol(name=name, inner="".join(parts), view_box=view_box, source=source)


class SpriteCompiler:
    """Combines a directory of SVG icons into one <symbol> sprite."""

    def __init__(self, optimizer: Optional[SvgOptimizer] = None):
        self.optimizer = optimizer or SvgOptimizer(DEFAULT_PLUGINS)

    def build_symbol(self, icons_root: Path, relative_path: str) -> Optional[IconSymbol]:
        """Read, optimize and extract a single icon. Raises on unreadable or invalid input."""
        content = (icons_root / relative_path).read_text(encoding="utf-8")
        optimized = self.optimizer.optimize(content, source=relative_path)
        return extract_symbol(icon_name(relative_path), optimized, source=relative_path)

    def collect(self, icons_root: Path | str) -> List[IconSymbol]:
        """Build a symbol for every usable icon under icons_root, in sorted path order."""
        icons_root = Path(icons_root)
        symbols: Dict[str, IconSymbol] = {}

        for relative_path in scan_directory(icons_root, [SVG_EXTENSION]):
            try:
                symbol = self.build_symbol(icons_root, relative_path)
            except (OSError, UnicodeDecodeError, ValueError, etree.LxmlError, SvgOptimizeError) as e:
                logger.warning("Failed to process %s: %s", relative_path, e)
                continue

            if symbol is None:
                logger.warning("Skipping %s: root element is not <svg>", relative_path)
                continue

            previous = symbols.get(symbol.name)
            if previous is not None:
                logger.warning(
                    "Icon id '%s' from %s replaces the one from %s",
                    symbol.name, relative_path, previous.source,
                )
            symbols[symbol.name] = symbol

        return list(symbols.values())

    @staticmethod
    def render(symbols: List[IconSymbol]) -> str:
        body = "\n".join(symbol.render() for symbol in symbols)
        return f'<svg xmlns="{SVG_NS}" style="display: none;">\n{body}\n</svg>'

    def compile(self, icons_root: Path | str, output_path: Path | str) -> int:
        """
        Regenerate the sprite at output_path from the icons under icons_root.

        Nothing is written when no icon yields a symbol, so an existing sprite
        is left alone and no output directory is created.

        Returns the number of symbols written.
        """
        symbols = self.collect(icons_root)
        if not symbols:
            return 0

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render(symbols), encoding="utf-8")
        logger.info("Generated sprite with %d icons at %s", len(symbols), output_path)
        return len(symbols)


def generate_svg_sprite(icons_dir: Path | str, output_path: Path | str) -> int:
    """Compile a sprite with the default optimizer settings."""
    return SpriteCompiler().compile(icons_dir, output_path)
