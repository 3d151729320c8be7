"""Runtime components."""

from statickit.runtime.app import StaticKitApp, create_app
from statickit.runtime.websocket import LiveReloadHandler

__all__ = ["StaticKitApp", "create_app", "LiveReloadHandler"]
