"""File discovery helpers."""
from pathlib import Path
from typing import Iterable, List

IGNORED_DIRS = {"node_modules"}


def scan_directory(directory: Path | str, extensions: Iterable[str]) -> List[str]:
    """
    Find files under directory whose names end with one of extensions.

    Returns POSIX paths relative to directory, sorted so that callers get
    the same order on every platform. A missing directory yields [].
    """
    root = Path(directory)
    if not root.is_dir():
        return []

    suffixes = tuple(extensions)
    found = []
    for path in root.rglob("*"):
        if not path.is_file() or not path.name.endswith(suffixes):
            continue
        relative = path.relative_to(root)
        if IGNORED_DIRS.intersection(relative.parts[:-1]):
            continue
        found.append(relative.as_posix())

    return sorted(found)


def list_pages(directory: Path | str) -> List[str]:
    """HTML pages under directory, without the .html suffix."""
    return [name[: -len(".html")] for name in scan_directory(directory, [".html"])]
