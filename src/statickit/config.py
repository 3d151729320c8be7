"""Configuration loader for StaticKit."""
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from statickit.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "static-kit.config.json"
LOCAL_CONFIG_FILENAME = "static-kit.local.json"
DEFAULT_BASE = "public/"


class BuildSettings(BaseModel):
    """Where built assets are emitted and served from."""

    base: str = DEFAULT_BASE  # e.g. "public/" or "assets/"
    output: str = "dist"


class TemplateSettings(BaseModel):
    language: str = "en"


class StaticKitConfig(BaseModel):
    """Project configuration as read from static-kit.config.json."""

    build: BuildSettings = BuildSettings()
    templates: TemplateSettings = TemplateSettings()

    @property
    def normalized_base(self) -> str:
        return normalize_base(self.build.base)


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring %s: invalid JSON (%s)", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return data


def load_config(root: Path | str | None = None) -> StaticKitConfig:
    """
    Load project configuration.

    Reads static-kit.config.json and then static-kit.local.json from the
    project root (cwd when omitted). Top-level keys of the local file replace
    those of the base file. Missing files are skipped.

    Raises ConfigError when the merged values fail validation.
    """
    project_root = Path(root) if root is not None else Path.cwd()

    merged: Dict[str, Any] = {}
    merged.update(_read_json(project_root / CONFIG_FILENAME))
    merged.update(_read_json(project_root / LOCAL_CONFIG_FILENAME))

    try:
        return StaticKitConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(str(e), path=project_root / CONFIG_FILENAME) from e


def normalize_base(base: Optional[str]) -> str:
    """Return the asset base with surrounding whitespace removed and a trailing slash."""
    if not base:
        return DEFAULT_BASE
    base = base.strip()
    if not base.endswith("/"):
        base = base + "/"
    return base


def time_stamp() -> str:
    """Cache-busting value: current time in whole epoch seconds."""
    return str(int(time.time() * 1000))[:10]


@dataclass
class ProjectLayout:
    """Resolved locations of a StaticKit project's sources."""

    root: Path
    source_root: Path
    pages_dir: Path
    components_dir: Path
    icons_dir: Path
    js_dir: Path
    styles_entry: Path
    public_dir: Path
    sprite_path: Path
    sprite_url: str = "/images/sprite.svg"

    @classmethod
    def from_root(
        cls,
        root: Path | str | None = None,
        pages_dir: str = "src/pages",
        components_dir: str = "src/components",
        icons_dir: str = "src/icons",
        js_dir: str = "src/js",
        styles_entry: str = "src/styles/main.css",
        public_dir: str = "public",
        source_root: str = "src",
    ) -> "ProjectLayout":
        """Build a layout with every directory resolved against the project root."""
        root_path = (Path(root) if root is not None else Path.cwd()).resolve()
        public = root_path / public_dir
        return cls(
            root=root_path,
            source_root=root_path / source_root,
            pages_dir=root_path / pages_dir,
            components_dir=root_path / components_dir,
            icons_dir=root_path / icons_dir,
            js_dir=root_path / js_dir,
            styles_entry=root_path / styles_entry,
            public_dir=public,
            sprite_path=public / "images" / "sprite.svg",
        )
