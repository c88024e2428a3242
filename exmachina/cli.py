"""Command line entry point: build the static site or run the preview server."""

import logging
from typing import Annotated, Optional

import typer
import uvicorn

from exmachina.errors import BuildError, ContentError, PluginConfigError
from exmachina.services.site_builder import SiteBuilder
from exmachina.settings import Settings, settings
from exmachina.site_config import site_config

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="exmachina",
    help="Build and preview the Ex Machina blog.",
    no_args_is_help=True,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _settings_with(output_dir: Optional[str] = None, drafts: Optional[bool] = None) -> Settings:
    update = {}
    if output_dir is not None:
        update["OUTPUT_DIR"] = output_dir
    if drafts is not None:
        update["INCLUDE_DRAFTS"] = drafts
    return settings.model_copy(update=update) if update else settings


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Override LOG_LEVEL for this run."),
    ] = None,
) -> None:
    """Ex Machina site tooling."""
    _configure_logging(log_level or settings.LOG_LEVEL)


@app.command()
def build(
    clean: Annotated[
        bool,
        typer.Option("--clean/--no-clean", help="Remove the output directory first."),
    ] = True,
    output_dir: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Output directory (defaults to OUTPUT_DIR)."),
    ] = None,
    drafts: Annotated[
        Optional[bool],
        typer.Option("--drafts/--no-drafts", help="Include posts marked as drafts."),
    ] = None,
) -> None:
    """Render every page, the feed and the manifest into the output directory."""
    current = _settings_with(output_dir, drafts)
    try:
        result = SiteBuilder(current, site_config).build(clean=clean)
    except (BuildError, ContentError, PluginConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"{result.summary_text()} -> {current.output_path}")


@app.command()
def clean(
    output_dir: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Output directory (defaults to OUTPUT_DIR)."),
    ] = None,
) -> None:
    """Remove the output directory."""
    current = _settings_with(output_dir)
    try:
        SiteBuilder(current, site_config).clean()
    except PluginConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Cleaned {current.output_path}")


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port.")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes.")] = False,
) -> None:
    """Run the live preview server."""
    uvicorn.run(
        "exmachina.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    app()
