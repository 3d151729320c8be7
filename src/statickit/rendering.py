"""Jinja2 environment for the HTML shells StaticKit wraps pages in."""
from typing import Any, Optional

from jinja2 import Environment, PackageLoader, select_autoescape

_environment: Optional[Environment] = None


def get_environment() -> Environment:
    """Get the shared template environment."""
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=PackageLoader("statickit", "templates"),
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )
    return _environment


def render_template(name: str, **context: Any) -> str:
    return get_environment().get_template(name).render(**context)
