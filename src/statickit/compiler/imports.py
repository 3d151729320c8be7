"""HTML import directive expansion.

Pages and components pull in other HTML files with a comment directive::

    <!-- @import: ../partials/header.html -->
    <!-- @import: @components/button.html -->

Plain paths are relative to the importing file's directory. Paths starting
with ``@components/`` resolve against the project's components directory,
wherever the importing file lives. Imports are expanded recursively.

Broken imports never raise. A missing file or a circular import is replaced
by an HTML comment describing the problem, so the rest of the page still
renders.
"""
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import AbstractSet, List, Optional

logger = logging.getLogger(__name__)

IMPORT_PATTERN = re.compile(r"<!--\s*@import:\s*([\w./@-]+)\s*-->")

COMPONENT_ALIAS = "@components/"
COMPONENTS_DIRNAME = "components"
SOURCE_DIRNAME = "src"


@dataclass(frozen=True)
class ResolvedImport:
    """Absolute target of an import directive."""

    path: Path
    is_component: bool = False

    @property
    def kind(self) -> str:
        return "component" if self.is_component else "file"


def missing_import_comment(import_path: str, target: ResolvedImport) -> str:
    return (
        f'<!-- Import Error: Could not find {target.kind} "{import_path}"\n'
        f"     Looked for: {target.path}\n"
        f"     Check the path and make sure the file exists -->"
    )


def circular_import_comment(import_path: str, target: ResolvedImport) -> str:
    return (
        f'<!-- Import Error: Circular import detected for "{import_path}"\n'
        f"     File: {target.path}\n"
        f"     This file is already being processed in the import chain -->"
    )


def _absolute(path: Path) -> Path:
    # Normalize '..' segments without following symlinks
    return Path(os.path.abspath(path))


class ImportResolver:
    """Expands @import directives in HTML documents."""

    def __init__(
        self,
        source_root: Path | str | None = None,
        components_dir: Path | str | None = None,
        encoding: str = "utf-8",
    ):
        self.source_root = _absolute(Path(source_root)) if source_root is not None else None
        self.components_dir = (
            _absolute(Path(components_dir)) if components_dir is not None else None
        )
        self.encoding = encoding

    def find_source_root(self, base_dir: Path) -> Optional[Path]:
        """Return the configured source root, or the nearest 'src' ancestor of base_dir."""
        if self.source_root is not None:
            return self.source_root

        current = _absolute(base_dir)
        while current.name != SOURCE_DIRNAME and current != current.parent:
            current = current.parent
        if current.name == SOURCE_DIRNAME:
            return current
        return None

    def resolve(self, import_path: str, base_dir: Path) -> ResolvedImport:
        """Map a directive path to the file it refers to."""
        if import_path.startswith(COMPONENT_ALIAS):
            relative = import_path[len(COMPONENT_ALIAS):]
            if self.components_dir is not None:
                return ResolvedImport(_absolute(self.components_dir / relative), True)

            source_root = self.find_source_root(base_dir)
            if source_root is not None:
                return ResolvedImport(
                    _absolute(source_root / COMPONENTS_DIRNAME / relative), True
                )
            # No source root: fall through to a plain relative lookup

        return ResolvedImport(_absolute(Path(base_dir) / import_path))

    def expand(
        self,
        document: str,
        base_dir: Path | str,
        ancestry: AbstractSet[Path] = frozenset(),
    ) -> str:
        """
        Expand every import directive in document.

        Args:
            document: HTML source text.
            base_dir: Directory that relative import paths are resolved against.
            ancestry: Files currently being expanded above this document.
                Importing one of them again is reported as circular.

        Returns:
            The document with each directive replaced by the expanded content
            of its target, or by an error comment.
        """
        matches = list(IMPORT_PATTERN.finditer(document))
        if not matches:
            return document

        base_dir = Path(base_dir)
        parts: List[str] = []
        position = 0
        for match in matches:
            parts.append(document[position:match.start()])
            parts.append(self._expand_directive(match.group(1), base_dir, ancestry))
            position = match.end()
        parts.append(document[position:])

        return "".join(parts)

    def expand_file(self, path: Path | str) -> str:
        """Read an HTML file and expand its imports."""
        path = _absolute(Path(path))
        content = path.read_text(encoding=self.encoding)
        return self.expand(content, path.parent, frozenset({path}))

    def _expand_directive(
        self, import_path: str, base_dir: Path, ancestry: AbstractSet[Path]
    ) -> str:
        target = self.resolve(import_path, base_dir)

        if target.path in ancestry:
            logger.warning("Circular import of %s (%s)", import_path, target.path)
            return circular_import_comment(import_path, target)

        try:
            content = target.path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not import %s from %s: %s", import_path, base_dir, e)
            return missing_import_comment(import_path, target)

        # Each branch gets its own ancestry so siblings never see each other
        return self.expand(content, target.path.parent, ancestry | {target.path})


def process_html_imports(
    html: str,
    directory: Path | str,
    processed_files: Optional[AbstractSet[Path]] = None,
    source_root: Path | str | None = None,
) -> str:
    """Expand imports in html using a one-off resolver."""
    resolver = ImportResolver(source_root=source_root)
    ancestry = frozenset(_absolute(Path(p)) for p in processed_files or ())
    return resolver.expand(html, directory, ancestry)
