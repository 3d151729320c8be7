"""Main CLI entry point."""
import logging
from pathlib import Path

import click

from statickit.config import ProjectLayout, StaticKitConfig, load_config
from statickit.exceptions import StaticKitError


def _load_project(root: str) -> tuple[ProjectLayout, StaticKitConfig]:
    layout = ProjectLayout.from_root(root)
    try:
        config = load_config(layout.root)
    except StaticKitError as e:
        raise click.ClickException(str(e))
    return layout, config


root_option = click.option(
    "--root",
    default=".",
    type=click.Path(file_okay=False),
    help="Project root directory",
)


@click.group()
@click.version_option(package_name="statickit")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """StaticKit CLI.

    Run 'statickit dev' to preview pages with live reload.
    Run 'statickit build' to emit the production site.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@root_option
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=3000, type=int, help="Port to bind to")
@click.option("--no-watch", is_flag=True, help="Do not watch sources for changes")
def dev(root, host, port, no_watch):
    """Start development server."""
    import asyncio

    from statickit.runtime.dev_server import run_dev_server

    layout, config = _load_project(root)
    click.echo(f"🚀 Starting StaticKit dev server on http://{host}:{port}")
    asyncio.run(run_dev_server(layout, config, host=host, port=port, reload=not no_watch))


@cli.command()
@root_option
@click.option("--output", default=None, type=click.Path(file_okay=False), help="Output directory")
def build(root, output):
    """Build the site for production."""
    from statickit.build import build_project

    layout, config = _load_project(root)
    click.echo(f"🔨 Building {layout.root}...")
    try:
        report = build_project(layout=layout, config=config, output_dir=output)
    except StaticKitError as e:
        raise click.ClickException(str(e))

    for page in report.pages:
        click.echo(f"  Built: {page}")
    for skipped in report.skipped:
        click.echo(f"  Skipped: {skipped}")
    click.echo(
        f"✅ Build complete: {len(report.pages)} page(s), {report.icons} icon(s) in {report.output_dir}"
    )


@cli.command()
@root_option
@click.option("--icons", default=None, type=click.Path(file_okay=False), help="Icons directory")
@click.option("--output", default=None, type=click.Path(dir_okay=False), help="Sprite file to write")
def sprite(root, icons, output):
    """Generate the SVG sprite once."""
    from statickit.compiler.sprite import generate_svg_sprite

    layout = ProjectLayout.from_root(root)
    icons_dir = Path(icons) if icons else layout.icons_dir
    output_path = Path(output) if output else layout.sprite_path

    count = generate_svg_sprite(icons_dir, output_path)
    if count:
        click.echo(f"📦 Generated sprite with {count} icons at {output_path}")
    else:
        click.echo(f"No icons found in {icons_dir}, sprite not written")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@root_option
def expand(file, root):
    """Print FILE with its @import directives expanded."""
    from statickit.compiler.imports import ImportResolver

    layout = ProjectLayout.from_root(root)
    resolver = ImportResolver(source_root=layout.source_root, components_dir=layout.components_dir)
    try:
        click.echo(resolver.expand_file(file), nl=False)
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {file}: {e}")


if __name__ == "__main__":
    cli()
