"""StaticKit exceptions."""
from pathlib import Path
from typing import Optional


class StaticKitError(Exception):
    """Base class for errors raised by StaticKit."""


class SvgOptimizeError(StaticKitError):
    """Raised when an SVG document cannot be parsed or optimized."""

    def __init__(self, message: str, source: str = ""):
        self.message = message
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class ConfigError(StaticKitError):
    """Raised when project configuration values are invalid."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message
