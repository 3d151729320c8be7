"""Development server with live reload and sprite regeneration."""
import asyncio
import logging
import signal
import time
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

import uvicorn
from watchfiles import Change, awatch

from statickit.compiler.sprite import SVG_EXTENSION, SpriteCompiler
from statickit.config import ProjectLayout, StaticKitConfig
from statickit.runtime.app import StaticKitApp
from statickit.runtime.websocket import LiveReloadHandler

logger = logging.getLogger(__name__)


def _is_under(path: Path, directory: Path) -> bool:
    return path == directory or path.is_relative_to(directory)


class DevWatcher:
    """Turns file-system changes into sprite rebuilds and browser notifications."""

    def __init__(
        self,
        layout: ProjectLayout,
        reload_handler: LiveReloadHandler,
        compiler: Optional[SpriteCompiler] = None,
    ):
        self.layout = layout
        self.reload_handler = reload_handler
        self.compiler = compiler or SpriteCompiler()

    @property
    def watch_paths(self) -> List[Path]:
        candidates = [
            self.layout.pages_dir,
            self.layout.components_dir,
            self.layout.icons_dir,
            self.layout.js_dir,
            self.layout.styles_entry.parent,
        ]
        paths: List[Path] = []
        for path in candidates:
            if path.is_dir() and path not in paths:
                paths.append(path)
        return paths

    def classify(self, changes: Iterable[Tuple[Change, str]]) -> Tuple[bool, bool]:
        """Return (icons_changed, pages_changed) for a batch of changes."""
        icons_changed = False
        pages_changed = False
        templates = (self.layout.pages_dir, self.layout.components_dir)
        assets = (self.layout.js_dir, self.layout.styles_entry.parent)

        for change, raw_path in changes:
            path = Path(raw_path).resolve()
            if _is_under(path, self.layout.icons_dir):
                if path.name.endswith(SVG_EXTENSION):
                    icons_changed = True
            elif any(_is_under(path, directory) for directory in templates):
                # New or removed files only matter once they are pages
                if change == Change.modified or path.suffix == ".html":
                    pages_changed = True
            elif any(_is_under(path, directory) for directory in assets):
                pages_changed = True

        return icons_changed, pages_changed

    def compile_sprite(self) -> int:
        return self.compiler.compile(self.layout.icons_dir, self.layout.sprite_path)

    async def handle_changes(self, changes: Set[Tuple[Change, str]]) -> None:
        """Process one batch of file changes."""
        icons_changed, pages_changed = self.classify(changes)

        if icons_changed:
            logger.info("SVG file changed, regenerating sprite...")
            self.compile_sprite()
            timestamp = int(time.time() * 1000)
            delivered = await self.reload_handler.broadcast_sprite_update(timestamp)
            logger.debug("Sprite update %s sent to %d clients", timestamp, delivered)

        if pages_changed:
            logger.info("Page sources changed, reloading clients...")
            await self.reload_handler.broadcast_reload()

    async def watch(self, stop_event: asyncio.Event) -> None:
        """Watch project sources until stop_event is set."""
        paths = self.watch_paths
        if not paths:
            logger.warning("Nothing to watch under %s", self.layout.root)
            return

        # Batches are handled one at a time, so sprite rebuilds never overlap
        async for changes in awatch(*paths, stop_event=stop_event):
            try:
                await self.handle_changes(changes)
            except Exception:
                logger.exception("Error while handling file changes")


async def run_dev_server(
    layout: ProjectLayout,
    config: StaticKitConfig,
    host: str = "127.0.0.1",
    port: int = 3000,
    reload: bool = True,
):
    """Run the development server until SIGINT/SIGTERM."""
    app = StaticKitApp(layout, config)
    watcher = DevWatcher(layout, app.reload_handler)

    count = watcher.compile_sprite()
    if count:
        logger.info("Sprite ready with %d icons", count)

    shutdown_event = asyncio.Event()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown_event.set)
    except NotImplementedError:
        pass

    server = uvicorn.Server(
        uvicorn.Config(app, host=host, port=port, reload=False, log_level="info")
    )
    # Shutdown is driven by our own signal handlers
    server.install_signal_handlers = lambda: None

    async def serve():
        try:
            await server.serve()
        finally:
            shutdown_event.set()

    async def stop_uvicorn():
        await shutdown_event.wait()
        server.should_exit = True

    async with asyncio.TaskGroup() as tg:
        logger.info("Running on http://%s:%s", host, port)
        tg.create_task(serve())
        tg.create_task(stop_uvicorn())
        if reload:
            tg.create_task(watcher.watch(shutdown_event))
