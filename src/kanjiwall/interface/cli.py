"""kanjiwall CLI — wallpaper rendering, review projection and configuration."""

import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from pydantic import ValidationError

from kanjiwall.application.config import AppConfig, resolve_config
from kanjiwall.application.layout import StyleTable
from kanjiwall.application.reviews import ReviewProjection
from kanjiwall.application.service import (
    RefreshResult,
    RefreshService,
    paint_wallpaper,
    wallpaper_rect,
)
from kanjiwall.consts import VERSION
from kanjiwall.domain.study.models import ItemKind
from kanjiwall.domain.study.ports import FontSpec, SnapshotError
from kanjiwall.infrastructure.adapters import JsonSnapshotSource, PillowCanvas

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="kanjiwall: Paint your kanji progress onto your wallpaper.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage kanjiwall configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

SnapshotArg = Annotated[
    Path, typer.Argument(help="JSON snapshot of the user's study items.")
]
LOG_FILE_NAME = "kanjiwall.log"

NowOption = Annotated[
    int | None, typer.Option(help="Reference time (epoch seconds). Defaults to now.")
]


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for kanjiwall."""
    ctx.ensure_object(dict)
    ctx.obj["verbose_bonus"] = verbose


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _log_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def _resolve(ctx: typer.Context, overrides: dict[str, Any] | None = None) -> AppConfig:
    """Resolve the configuration and apply its verbosity plus any -v flags."""
    try:
        config = resolve_config(overrides)
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")
    verbose = config.verbose + (ctx.obj or {}).get("verbose_bonus", 0)
    logging.getLogger("kanjiwall").setLevel(_log_level(verbose))
    return config


def _make_service(snapshot: Path, config: AppConfig) -> RefreshService:
    return RefreshService(
        JsonSnapshotSource(snapshot),
        window_hours=config.window_hours,
        current_level_only=config.current_level_only,
    )


def _refresh(service: RefreshService, now: int | None, force: bool = False) -> RefreshResult:
    try:
        return asyncio.run(service.refresh(now=now, force=force))
    except SnapshotError as e:
        _fail(str(e))


def _font(config: AppConfig) -> FontSpec:
    return FontSpec(
        family=config.font_name, bold=config.bold_font, italic=config.italic_font
    )


def _styles(config: AppConfig) -> StyleTable:
    try:
        return StyleTable.from_hex(config.colors)
    except ValueError as e:
        _fail(f"Invalid color configuration: {e}")


def _render(result: RefreshResult, config: AppConfig) -> dict[str, Any]:
    if config.background is None:
        _fail("No background image. Pass --background or set 'background' in config.")
    try:
        canvas = PillowCanvas.open(config.background)
    except OSError as e:
        _fail(f"Cannot open background {config.background}: {e}")

    rect = wallpaper_rect(
        canvas.size, config.left_border, config.top_border, config.bottom_border
    )
    layout = paint_wallpaper(
        canvas,
        result.active_states,
        rect,
        _font(config),
        _styles(config),
        minor_gap=config.minor_gap,
        margin=config.margin,
    )
    try:
        canvas.save(config.output)
    except (OSError, ValueError) as e:
        _fail(f"Cannot save wallpaper {config.output}: {e}")
    return {"output": str(config.output), **dataclasses.asdict(layout)}


def _counts(summary) -> dict[str, Any]:
    data = {
        kind.value: dataclasses.asdict(summary[kind]) for kind in ItemKind
    }
    data["total"] = dataclasses.asdict(summary.total)
    return data


def projection_to_dict(projection: ReviewProjection) -> dict[str, Any]:
    return {
        "now": projection.now,
        "window_hours": projection.window_hours,
        "due_now": _counts(projection.due_now),
        "due_next_hour": _counts(projection.due_next_hour),
        "due_next_day": _counts(projection.due_next_day),
        "next_review_at": projection.next_review_at,
        "next_review_in": projection.next_review_in,
        "window": {
            kind.value: {str(ts): count for ts, count in window.all_levels.items()}
            for kind, window in projection.windows.items()
        },
    }


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def version():
    """Print the kanjiwall version."""
    typer.echo(VERSION)


@app.command()
def render(
    ctx: typer.Context,
    snapshot: SnapshotArg,
    background: Annotated[
        Path | None, typer.Option(help="Background image to paint onto.")
    ] = None,
    output: Annotated[Path | None, typer.Option(help="Where to save the wallpaper.")] = None,
    font: Annotated[str | None, typer.Option(help="Font family or font file.")] = None,
    bold: Annotated[bool | None, typer.Option("--bold/--no-bold", help="Bold font.")] = None,
    italic: Annotated[
        bool | None, typer.Option("--italic/--no-italic", help="Italic font.")
    ] = None,
    all_levels: Annotated[
        bool, typer.Option("--all-levels", help="Paint kanji of all levels.")
    ] = False,
    now: NowOption = None,
):
    """[bold green]Render[/bold green] the kanji wallpaper."""
    config = _resolve(
        ctx,
        {
            "background": background,
            "output": output,
            "font_name": font,
            "bold_font": bold,
            "italic_font": italic,
            "current_level_only": False if all_levels else None,
        },
    )
    result = _refresh(_make_service(snapshot, config), now, force=True)
    typer.echo(json.dumps(_render(result, config), indent=2))


@app.command()
def reviews(
    ctx: typer.Context,
    snapshot: SnapshotArg,
    window_hours: Annotated[
        int | None, typer.Option(help="Length of the forward review window.")
    ] = None,
    now: NowOption = None,
):
    """Show when reviews become due."""
    config = _resolve(ctx, {"window_hours": window_hours})
    result = _refresh(_make_service(snapshot, config), now)
    typer.echo(json.dumps(projection_to_dict(result.projection), indent=2))


@app.command()
def guru(ctx: typer.Context, snapshot: SnapshotArg, now: NowOption = None):
    """Estimate how long the current level's kanji need to reach Guru."""
    config = _resolve(ctx)
    result = _refresh(_make_service(snapshot, config), now)
    times = result.guru_times
    typer.echo(
        json.dumps(
            {
                "level": times.level,
                "items": len(times.seconds),
                "shortest": times.shortest,
                "median": times.at(0.5),
                "finish_level": result.finish_level_seconds,
                "longest": times.longest,
            },
            indent=2,
        )
    )


@app.command()
def stats(ctx: typer.Context, snapshot: SnapshotArg):
    """Show the SRS distribution."""
    config = _resolve(ctx)
    result = _refresh(_make_service(snapshot, config), None)
    distribution = result.distribution
    typer.echo(
        json.dumps(
            {
                state.value: {
                    **{kind.value: distribution.count(state, kind) for kind in ItemKind},
                    "total": distribution.total(state),
                }
                for state in distribution.counts
            },
            indent=2,
        )
    )


@app.command()
def watch(
    ctx: typer.Context,
    snapshot: SnapshotArg,
    iterations: Annotated[
        int | None, typer.Option(help="Stop after this many refreshes.")
    ] = None,
):
    """Refresh every 'interval' minutes, repainting when progress changes."""
    config = _resolve(ctx)
    service = _make_service(snapshot, config)

    async def _loop() -> None:
        count = 0
        while iterations is None or count < iterations:
            if count:
                await asyncio.sleep(config.interval * 60)
            count += 1
            try:
                result = await service.refresh()
            except SnapshotError as e:
                logger.error(f"Refresh failed: {e}")
                continue
            if result.repaint_needed:
                _render(result, config)
            else:
                logger.info("Progress unchanged, wallpaper kept")

    config.log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(config.log_dir / LOG_FILE_NAME, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s:%(name)s:%(message)s")
    )
    package_logger = logging.getLogger("kanjiwall")
    package_logger.addHandler(handler)
    try:
        asyncio.run(_loop())
    finally:
        package_logger.removeHandler(handler)
        handler.close()


@app.command()
def logs():
    """Open the log directory."""
    import os
    import subprocess

    config = resolve_config()
    if not config.log_dir.exists():
        config.log_dir.mkdir(parents=True, exist_ok=True)

    if sys.platform == "darwin":
        subprocess.run(["open", str(config.log_dir)])
    elif sys.platform == "win32":
        os.startfile(str(config.log_dir))
    else:
        subprocess.run(["xdg-open", str(config.log_dir)])


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Print the resolved configuration as JSON."""
    config = _resolve(ctx)
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    app()
