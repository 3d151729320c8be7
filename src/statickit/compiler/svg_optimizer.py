"""Structural SVG optimizer built on lxml."""
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Type, Union

from lxml import etree

from statickit.exceptions import SvgOptimizeError

PluginSpec = Union[str, Mapping[str, Any]]


def _qualified_name(element: etree._Element, name: str) -> str:
    qname = etree.QName(name)
    if qname.namespace is None:
        return name
    for prefix, uri in element.nsmap.items():
        if uri == qname.namespace and prefix:
            return f"{prefix}:{qname.localname}"
    return qname.localname


class SvgTransform(ABC):
    """One optimization pass over a parsed SVG tree."""

    name: str = ""

    @abstractmethod
    def apply(self, root: etree._Element) -> None:
        """Mutate the tree in place."""
        pass


class RemoveAttrsTransform(SvgTransform):
    """Removes attributes whose names match the given patterns."""

    name = "removeAttrs"

    def __init__(self, attrs: Union[str, Iterable[str]] = ()):
        if isinstance(attrs, str):
            attrs = [attrs]
        self.patterns = [re.compile(f"^(?:{pattern})$") for pattern in attrs]

    def _matches(self, name: str) -> bool:
        return any(pattern.match(name) for pattern in self.patterns)

    def apply(self, root: etree._Element) -> None:
        if not self.patterns:
            return
        for element in root.iter(etree.Element):
            for attr in list(element.attrib):
                if self._matches(_qualified_name(element, attr)):
                    del element.attrib[attr]


TRANSFORMS: Dict[str, Type[SvgTransform]] = {
    RemoveAttrsTransform.name: RemoveAttrsTransform,
}


def build_transforms(plugins: Iterable[PluginSpec]) -> List[SvgTransform]:
    """
    Instantiate transforms from plugin specs.

    Each plugin is either a transform name or a mapping with 'name' and
    optional 'params', e.g. {"name": "removeAttrs", "params": {"attrs": "data-name"}}.
    """
    transforms = []
    for plugin in plugins:
        if isinstance(plugin, str):
            name, params = plugin, {}
        else:
            name, params = plugin["name"], dict(plugin.get("params") or {})

        transform_class = TRANSFORMS.get(name)
        if transform_class is None:
            raise ValueError(f"Unknown SVG transform: {name}")
        transforms.append(transform_class(**params))
    return transforms


class SvgOptimizer:
    """Parses SVG markup, runs transforms over it and serializes the result."""

    def __init__(self, plugins: Iterable[PluginSpec] = ()):
        self.transforms = build_transforms(plugins)

    @staticmethod
    def parse(svg: str, source: str = "") -> etree._Element:
        """Parse SVG text into an element tree, raising SvgOptimizeError on bad input."""
        # Whitespace-only text is kept, it matters inside <text>
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(svg.encode("utf-8"), parser=parser)
        except (etree.XMLSyntaxError, ValueError) as e:
            raise SvgOptimizeError(f"Invalid SVG: {e}", source=source) from e
        if root is None:
            raise SvgOptimizeError("Empty SVG document", source=source)
        return root

    def optimize(self, svg: str, source: str = "") -> str:
        """Return optimized markup for svg."""
        root = self.parse(svg, source)
        for transform in self.transforms:
            transform.apply(root)
        return etree.tostring(root, encoding="unicode")
