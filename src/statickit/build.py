"""Build system for production."""
import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from statickit.compiler.imports import ImportResolver
from statickit.compiler.sprite import SpriteCompiler
from statickit.config import ProjectLayout, StaticKitConfig, load_config, time_stamp
from statickit.exceptions import ConfigError
from statickit.rendering import render_template
from statickit.scanner import scan_directory

logger = logging.getLogger(__name__)

HTACCESS = (
    "DirectoryIndex index.html\n"
    "RewriteEngine On\n"
    "RewriteCond %{REQUEST_FILENAME} !-f\n"
    "RewriteCond %{REQUEST_FILENAME} !-d\n"
    "RewriteRule ^([^.]+)$ $1.html [L]"
)

STYLESHEET_LINK = re.compile(r"""<link[^>]*rel=["']stylesheet["'][^>]*>""")
SCRIPT_SRC = re.compile(r"<script[^>]*src=[^>]*></script>")


@dataclass
class BuildReport:
    """What a production build produced."""

    output_dir: Path
    pages: List[str] = field(default_factory=list)
    icons: int = 0
    assets: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def clean_page(html: str, base: str, stamp: str, sprite_url: str = "/sprite.svg") -> str:
    """
    Prepare expanded page content for the production shell.

    Drops stylesheet links and external scripts (the shell adds the built
    ones), points sprite references at the built sprite with a cache-busting
    query, and rewrites absolute /public/ and /images/ asset paths to the
    configured base.
    """
    html = STYLESHEET_LINK.sub("", html)
    html = SCRIPT_SRC.sub("", html)

    sprite_href = f'<use href="{base}images/sprite.svg?v={stamp}'
    for url in dict.fromkeys(["/sprite.svg", sprite_url]):
        html = html.replace(f'<use href="{url}', sprite_href)

    html = html.replace('src="/public/', f'src="{base}')
    html = html.replace('href="/public/', f'href="{base}')
    html = html.replace('src="/images/', f'src="{base}images/')
    html = html.replace('href="/images/', f'href="{base}images/')
    return html.strip()


class ProjectBuilder:
    """Emits a deployable site from a StaticKit project."""

    def __init__(self, layout: ProjectLayout, config: StaticKitConfig, output_dir: Optional[Path] = None):
        self.layout = layout
        self.config = config
        self.base = config.normalized_base
        self.output_dir = (output_dir or (layout.root / config.build.output)).resolve()
        self.asset_dir = (self.output_dir / self.base.lstrip("/")).resolve()
        self.resolver = ImportResolver(
            source_root=layout.source_root, components_dir=layout.components_dir
        )
        self.sprite_compiler = SpriteCompiler()

    def build(self) -> BuildReport:
        report = BuildReport(output_dir=self.output_dir)

        # The output directory is wiped, it must not contain the project or its sources
        if self.layout.root.is_relative_to(self.output_dir) or self.output_dir.is_relative_to(
            self.layout.source_root
        ):
            raise ConfigError(f"Refusing to build into {self.output_dir}")
        if not self.asset_dir.is_relative_to(self.output_dir):
            raise ConfigError(f"Asset base {self.base!r} points outside {self.output_dir}")

        if self.output_dir.exists():
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True)

        # Public files first so a sprite left there by the dev server is replaced
        self.copy_public(report)
        report.icons = self.sprite_compiler.compile(
            self.layout.icons_dir, self.asset_dir / "images" / "sprite.svg"
        )
        self.copy_scripts(report)
        self.copy_styles(report)
        self.build_pages(report)
        (self.output_dir / ".htaccess").write_text(HTACCESS, encoding="utf-8")

        logger.info(
            "Built %d pages, %d icons and %d assets into %s",
            len(report.pages), report.icons, len(report.assets), self.output_dir,
        )
        return report

    def _copy(self, source: Path, destination: Path, report: BuildReport) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
        report.assets.append(destination.relative_to(self.output_dir).as_posix())

    def copy_public(self, report: BuildReport) -> None:
        public_dir = self.layout.public_dir
        if not public_dir.is_dir():
            logger.warning("Could not copy public directory: %s does not exist", public_dir)
            return

        for path in sorted(public_dir.rglob("*")):
            if path.is_file():
                self._copy(path, self.asset_dir / path.relative_to(public_dir), report)

    def copy_scripts(self, report: BuildReport) -> None:
        js_dir = self.layout.js_dir
        for relative in scan_directory(js_dir, [".js", ".ts"]):
            if relative.endswith(".ts"):
                # TypeScript needs an external compiler
                report.skipped.append(relative)
                logger.warning("Skipping %s: TypeScript sources are not compiled", relative)
                continue
            self._copy(js_dir / relative, self.asset_dir / "js" / relative, report)

    def copy_styles(self, report: BuildReport) -> None:
        entry = self.layout.styles_entry
        if not entry.is_file():
            return
        if entry.suffix != ".css":
            report.skipped.append(entry.name)
            logger.warning("Skipping %s: only plain CSS is copied", entry.name)
            return
        self._copy(entry, self.asset_dir / "css" / "styles.css", report)

    def render_page(self, name: str, content: str, stamp: str) -> str:
        return render_template(
            "build_page.html",
            language=self.config.templates.language,
            title=name,
            content=content,
            stylesheet=f"{self.base}css/styles.css?v={stamp}",
            script=f"{self.base}js/index.js?v={stamp}",
        )

    def build_pages(self, report: BuildReport) -> None:
        stamp = time_stamp()
        for relative in scan_directory(self.layout.pages_dir, [".html"]):
            source = self.layout.pages_dir / relative
            try:
                content = self.resolver.expand_file(source)
            except (OSError, UnicodeDecodeError) as e:
                report.skipped.append(relative)
                logger.warning("Skipping page %s: %s", relative, e)
                continue
            content = clean_page(content, self.base, stamp, self.layout.sprite_url)

            name = relative[: -len(".html")]
            destination = self.output_dir / relative
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(self.render_page(name, content, stamp), encoding="utf-8")
            report.pages.append(relative)


def build_project(
    project_root: Path | str | None = None,
    config: Optional[StaticKitConfig] = None,
    layout: Optional[ProjectLayout] = None,
    output_dir: Path | str | None = None,
) -> BuildReport:
    """Build project for production."""
    if layout is None:
        layout = ProjectLayout.from_root(project_root)
    if config is None:
        config = load_config(layout.root)

    builder = ProjectBuilder(layout, config, Path(output_dir) if output_dir else None)
    return builder.build()
