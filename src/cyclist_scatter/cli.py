"""Command line interface for the Cyclist Scatter package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer

from .loader import Err, load_records
from .logging_config import configure_logging
from .mapper import PlotPoint, map_records, points_to_frame
from .page import DEFAULT_PAGE_PATH, render_page_html
from .scales import ChartLayout
from .scatter import render_scatter
from .settings import Settings, get_settings

app = typer.Typer(
    add_completion=True,
    help="Render the Alpe d'Huez cyclist dataset as an interactive scatter plot.",
)

_LOGGER = logging.getLogger(__name__)
_DEFAULT_EXPORT_PATH = Path("output") / "cyclist_points.csv"
_NO_DATA_MESSAGE = "No plot data available; nothing rendered."


def _settings_from_context(ctx: typer.Context) -> Settings:
    ctx.ensure_object(dict)
    settings_obj = ctx.obj.get("settings")
    if isinstance(settings_obj, Settings):
        return settings_obj
    settings = get_settings()  # pragma: no cover - should not happen when callback executes
    ctx.obj["settings"] = settings
    return settings


def _load_points(source: Optional[str], settings: Settings) -> Optional[List[PlotPoint]]:
    resolved_source = source or settings.data_url
    result = load_records(resolved_source, timeout=settings.request_timeout)
    if isinstance(result, Err):
        _LOGGER.debug("Data loading failed (%s): %s", result.failure.kind, result.failure.message)
        return None
    points = map_records(result.records)
    _LOGGER.debug("Mapped %d records from %s", len(points), resolved_source)
    return points


def _export_points(frame: pd.DataFrame, destination: Path, fmt: str) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "csv":
        frame.to_csv(destination, index=False)
    elif fmt == "json":
        frame.to_json(destination, orient="records", date_format="iso")
    else:  # pragma: no cover - validated earlier
        raise ValueError(f"Unsupported output format: {fmt}")


def _render_plot(points: List[PlotPoint], layout: ChartLayout) -> None:
    try:
        import matplotlib.pyplot as plt
    except ImportError:  # pragma: no cover - optional dependency
        typer.echo("Matplotlib is not installed; skipping plot preview.")
        return

    frame = points_to_frame(points)
    fig, ax = plt.subplots(figsize=(layout.width / 100, layout.height / 100))
    for flagged, group in frame.groupby("flagged"):
        ax.scatter(
            group["year"],
            group["seconds"] / 60.0,
            color="#dc2626" if flagged else "#2563eb",
            label="Doping allegations" if flagged else "No doping allegations",
            alpha=0.8,
        )
    ax.invert_yaxis()
    ax.set_xlabel("Years")
    ax.set_ylabel("Time in minutes")
    ax.legend()
    fig.tight_layout()
    plt.show()


@app.callback()
def configure_cli(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        "-l",
        help="Logging verbosity. One of: CRITICAL, ERROR, WARNING, INFO, DEBUG.",
        show_default=True,
    ),
) -> None:
    """Configure application-wide dependencies for CLI commands."""

    ctx.ensure_object(dict)
    try:
        configure_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    settings = get_settings()
    ctx.obj["settings"] = settings
    _LOGGER.debug("Using data source %s", settings.data_url)


@app.command()
def render(
    ctx: typer.Context,
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="URL or local JSON file with cyclist records (defaults to the configured data URL).",
    ),
    output: Path = typer.Option(
        DEFAULT_PAGE_PATH,
        "--output",
        "-o",
        help="Where to write the interactive HTML page.",
        show_default=True,
    ),
    plotly_js: str = typer.Option(
        "cdn",
        "--plotly-js",
        help="How to load Plotly.js: 'cdn' or 'inline' (works offline).",
        show_default=True,
    ),
    open_html: bool = typer.Option(
        False,
        "--open-html/--no-open-html",
        help="Open the generated page in a browser.",
        show_default=False,
    ),
    plot: bool = typer.Option(
        False,
        "--plot/--no-plot",
        help="Also show a static matplotlib preview of the scatter plot.",
        show_default=False,
    ),
) -> None:
    """Fetch the dataset and write the interactive scatter plot page."""

    settings = _settings_from_context(ctx)
    mode = plotly_js.strip().lower()
    if mode not in {"cdn", "inline"}:
        raise typer.BadParameter("plotly-js must be either 'cdn' or 'inline'")

    points = _load_points(source, settings)
    if not points:
        typer.echo(_NO_DATA_MESSAGE)
        return

    layout = settings.layout()
    surface = render_scatter(points, layout=layout)
    try:
        destination = render_page_html(
            surface,
            output_path=output,
            plotly_js_mode=mode,
            open_browser=open_html,
        )
    except RuntimeError as exc:
        raise typer.BadParameter(str(exc)) from exc

    flagged = sum(1 for marker in surface.markers if marker.flagged)
    typer.echo(f"Plotted {len(surface.markers)} records ({flagged} with doping allegations).")
    typer.echo(f"Saved interactive scatter plot to {destination.resolve()}")

    if plot:
        _render_plot(points, layout)


@app.command()
def summary(
    ctx: typer.Context,
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="URL or local JSON file with cyclist records (defaults to the configured data URL).",
    ),
) -> None:
    """Print a short description of the dataset."""

    settings = _settings_from_context(ctx)
    points = _load_points(source, settings)
    if not points:
        typer.echo(_NO_DATA_MESSAGE)
        return

    fastest = min(points, key=lambda point: point.time)
    slowest = max(points, key=lambda point: point.time)
    years = [point.calendar_year for point in points]
    flagged = sum(1 for point in points if point.flagged)

    typer.echo(f"Loaded {len(points)} records.")
    typer.echo(f"Years: {min(years)} to {max(years)}")
    typer.echo(f"Fastest: {fastest.time_label} by {fastest.name} ({fastest.calendar_year})")
    typer.echo(f"Slowest: {slowest.time_label} by {slowest.name} ({slowest.calendar_year})")
    typer.echo(f"Doping allegations: {flagged}/{len(points)}")


@app.command()
def export(
    ctx: typer.Context,
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="URL or local JSON file with cyclist records (defaults to the configured data URL).",
    ),
    output: Path = typer.Option(
        _DEFAULT_EXPORT_PATH,
        "--output",
        "-o",
        help="Destination for the mapped plot points.",
        show_default=True,
    ),
    output_format: str = typer.Option(
        "csv",
        "--output-format",
        "-f",
        help="Format for the export (csv or json).",
        show_default=True,
    ),
) -> None:
    """Write the mapped plot points to CSV or JSON."""

    settings = _settings_from_context(ctx)
    fmt = output_format.strip().lower()
    if fmt not in {"csv", "json"}:
        raise typer.BadParameter("output-format must be either 'csv' or 'json'")

    points = _load_points(source, settings)
    if not points:
        typer.echo(_NO_DATA_MESSAGE)
        return

    _export_points(points_to_frame(points), output, fmt)
    typer.echo(f"Saved {len(points)} plot points to {output.resolve()}")


def main() -> None:
    """Invoke the Typer application."""

    app()
