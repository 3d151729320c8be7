"""Development ASGI application: page preview with live reload."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import FileResponse, HTMLResponse
from starlette.routing import Mount, Route, WebSocketRoute
from starlette.staticfiles import StaticFiles

from statickit.compiler.imports import ImportResolver
from statickit.config import ProjectLayout, StaticKitConfig, load_config
from statickit.rendering import render_template
from statickit.runtime.websocket import LiveReloadHandler
from statickit.scanner import list_pages

CLIENT_SCRIPT_URL = "/_statickit/client.js"
CLIENT_SCRIPT_PATH = Path(__file__).parent.parent / "static" / "livereload.js"


@dataclass
class IndexEntry:
    name: str
    label: str


@dataclass
class IndexSection:
    title: str
    prefix: str
    entries: List[IndexEntry] = field(default_factory=list)


def build_sections(names: List[str], kind: str, prefix: str) -> List[IndexSection]:
    """Group page names by directory: top-level entries first, then directories sorted."""
    root = IndexSection(title=f"{kind.capitalize()}", prefix=prefix)
    nested = {}
    for name in sorted(names):
        directory, _, label = name.rpartition("/")
        if not directory:
            root.entries.append(IndexEntry(name=name, label=name))
            continue
        if directory not in nested:
            nested[directory] = IndexSection(title=f"{kind}/{directory}/", prefix=prefix)
        nested[directory].entries.append(IndexEntry(name=name, label=label))

    sections = [root] if root.entries else []
    sections.extend(nested[directory] for directory in sorted(nested))
    return sections


class StaticKitApp:
    """Serves pages and components with their imports expanded."""

    def __init__(
        self,
        layout: ProjectLayout,
        config: Optional[StaticKitConfig] = None,
        route_prefix: str = "/pages",
        components_route_prefix: str = "/components",
    ):
        self.layout = layout
        self.config = config or StaticKitConfig()
        self.route_prefix = route_prefix.rstrip("/")
        self.components_route_prefix = components_route_prefix.rstrip("/")

        self.resolver = ImportResolver(
            source_root=layout.source_root, components_dir=layout.components_dir
        )
        self.reload_handler = LiveReloadHandler()

        routes = [
            Route("/", self._handle_index, methods=["GET"]),
            Route(CLIENT_SCRIPT_URL, self._handle_client_script, methods=["GET"]),
            WebSocketRoute("/_statickit/ws", self.reload_handler.handle),
            Route(f"{self.route_prefix}/{{name:path}}", self._handle_page, methods=["GET"]),
            Route(
                f"{self.components_route_prefix}/{{name:path}}",
                self._handle_component,
                methods=["GET"],
            ),
        ]

        # Raw sources (stylesheet, scripts) are served as-is during development
        if layout.source_root.is_dir():
            routes.append(
                Mount("/src", app=StaticFiles(directory=str(layout.source_root)), name="src")
            )
        # Public directory last: it is mounted at the root and would shadow everything else
        if layout.public_dir.is_dir():
            routes.append(
                Mount("/", app=StaticFiles(directory=str(layout.public_dir)), name="public")
            )

        self.app = Starlette(routes=routes)
        self.app.state.statickit = self

    async def __call__(self, scope, receive, send):
        """ASGI interface."""
        await self.app(scope, receive, send)

    def _asset_url(self, path: Path) -> Optional[str]:
        if not path.is_file():
            return None
        return "/" + path.relative_to(self.layout.root).as_posix()

    def render_page(self, title: str, content: str) -> str:
        """Wrap expanded page content in the development shell."""
        return render_template(
            "page.html",
            language=self.config.templates.language,
            title=title,
            content=content,
            stylesheet=self._asset_url(self.layout.styles_entry),
            script=self._asset_url(self.layout.js_dir / "index.js"),
            client_script=CLIENT_SCRIPT_URL,
            sprite_url=self.layout.sprite_url,
        )

    def _find_source(self, directory: Path, name: str) -> Path:
        name = name.strip("/")
        if not name:
            raise HTTPException(status_code=404)

        source = (directory / f"{name}.html").resolve()
        # Keep lookups inside the directory being served
        if not source.is_relative_to(directory.resolve()) or not source.is_file():
            raise HTTPException(status_code=404)
        return source

    def _serve(self, directory: Path, name: str, title: str) -> HTMLResponse:
        source = self._find_source(directory, name)
        try:
            content = self.resolver.expand_file(source)
        except (OSError, UnicodeDecodeError):
            raise HTTPException(status_code=404)
        return HTMLResponse(self.render_page(title, content))

    async def _handle_index(self, request: Request) -> HTMLResponse:
        sections = build_sections(
            list_pages(self.layout.pages_dir), "pages", self.route_prefix
        ) + build_sections(
            list_pages(self.layout.components_dir), "components", self.components_route_prefix
        )
        return HTMLResponse(
            render_template(
                "index.html",
                sections=sections,
                client_script=CLIENT_SCRIPT_URL,
                sprite_url=self.layout.sprite_url,
            )
        )

    async def _handle_page(self, request: Request) -> HTMLResponse:
        name = request.path_params["name"].strip("/")
        return self._serve(self.layout.pages_dir, name, name)

    async def _handle_component(self, request: Request) -> HTMLResponse:
        name = request.path_params["name"].strip("/")
        return self._serve(self.layout.components_dir, name, f"component: {name}")

    async def _handle_client_script(self, request: Request) -> FileResponse:
        return FileResponse(CLIENT_SCRIPT_PATH, media_type="application/javascript")


def create_app(
    project_root: Path | str | None = None,
    config: Optional[StaticKitConfig] = None,
) -> StaticKitApp:
    """Create the dev application for a project directory."""
    layout = ProjectLayout.from_root(project_root)
    if config is None:
        config = load_config(layout.root)
    return StaticKitApp(layout, config)
