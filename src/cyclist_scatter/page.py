from __future__ import annotations

import html
import json
import logging
from pathlib import Path
from typing import Any, Literal

import plotly.graph_objects as go
from plotly import io as pio

from .scatter import BASE_CLASS, FLAGGED_CLASS, DrawingSurface, Marker
from .tooltip import EMPTY_TOOLTIP, enter_tooltip

DEFAULT_PAGE_PATH = Path("output") / "cyclist_scatter.html"
DEFAULT_PLOTLY_CDN_URL = "https://cdn.plot.ly/plotly-2.35.2.min.js"
PAGE_TITLE = "Doping in Professional Bicycle Racing"

# Fixed geometry: no zoom, pan, scroll zoom or mode bar.
PLOT_CONFIG: dict[str, Any] = {
    "displaylogo": False,
    "displayModeBar": False,
    "responsive": False,
    "scrollZoom": False,
}

__all__ = [
    "DEFAULT_PAGE_PATH",
    "PlotPageBuilder",
    "build_figure",
    "render_page_html",
]

logger = logging.getLogger(__name__)

_TRACE_STYLES: dict[tuple[str, ...], dict[str, str]] = {
    (BASE_CLASS,): {"name": "No doping allegations", "color": "#2563eb"},
    (BASE_CLASS, FLAGGED_CLASS): {"name": "Riders with doping allegations", "color": "#dc2626"},
}


def _group_markers(markers: list[Marker]) -> dict[tuple[str, ...], list[tuple[int, Marker]]]:
    groups: dict[tuple[str, ...], list[tuple[int, Marker]]] = {}
    for index, marker in enumerate(markers):
        groups.setdefault(marker.classes, []).append((index, marker))
    return groups


def build_figure(surface: DrawingSurface) -> go.Figure:
    """Translate a drawing surface into a Plotly figure with the same geometry.

    Margins equal the layout padding and the axis ranges equal the scale domains,
    so Plotly places every marker at the pixel its scales computed.
    """

    layout = surface.layout
    scales = surface.scales
    fig = go.Figure()

    for classes, entries in _group_markers(surface.markers).items():
        style = _TRACE_STYLES.get(classes, {"name": " ".join(classes), "color": "#6b7280"})
        fig.add_trace(
            go.Scatter(
                x=[marker.point.year for _, marker in entries],
                y=[marker.point.time for _, marker in entries],
                mode="markers",
                name=style["name"],
                meta=" ".join(classes),
                customdata=[index for index, _ in entries],
                hoverinfo="none",
                marker=dict(
                    size=entries[0][1].r * 2,
                    color=style["color"],
                    opacity=0.8,
                    line=dict(width=1, color="#111827"),
                ),
            )
        )

    x_axis_kwargs: dict[str, Any] = {
        "type": "date",
        "range": [scales.x_scale.domain[0], scales.x_scale.domain[1]],
        "showgrid": False,
        "ticks": "outside",
        "showline": True,
        "linecolor": "#111827",
        "fixedrange": True,
    }
    y_axis_kwargs: dict[str, Any] = {
        "type": "date",
        "range": [scales.y_scale.domain[0], scales.y_scale.domain[1]],
        "showgrid": False,
        "ticks": "outside",
        "showline": True,
        "linecolor": "#111827",
        "fixedrange": True,
    }
    if surface.chart_axes is not None:
        x_axis = surface.chart_axes.x_axis
        y_axis = surface.chart_axes.y_axis
        x_axis_kwargs.update(tickmode="array", tickvals=x_axis.tick_values, ticktext=x_axis.tick_labels)
        y_axis_kwargs.update(tickmode="array", tickvals=y_axis.tick_values, ticktext=y_axis.tick_labels)

    annotations = []
    for label in surface.labels:
        if label.rotate:
            annotations.append(
                dict(
                    text=label.text,
                    xref="paper",
                    yref="paper",
                    x=0,
                    y=0.5,
                    xanchor="right",
                    xshift=-layout.padding + 15,
                    textangle=label.rotate,
                    showarrow=False,
                )
            )
        else:
            annotations.append(
                dict(
                    text=label.text,
                    xref="paper",
                    yref="paper",
                    x=0.5,
                    y=0,
                    yanchor="top",
                    yshift=-layout.padding + 20,
                    showarrow=False,
                )
            )

    fig.update_layout(
        width=layout.width,
        height=layout.height,
        autosize=False,
        margin=dict(l=layout.padding, r=layout.padding, t=layout.padding, b=layout.padding),
        xaxis=x_axis_kwargs,
        yaxis=y_axis_kwargs,
        annotations=annotations,
        hovermode="closest",
        plot_bgcolor="#ffffff",
        paper_bgcolor="#ffffff",
        legend=dict(
            x=1,
            y=1,
            xanchor="right",
            yanchor="top",
            bgcolor="rgba(255,255,255,0.85)",
            itemclick=False,
            itemdoubleclick=False,
        ),
    )
    return fig


def _script_json(payload: Any) -> str:
    return json.dumps(payload, allow_nan=False).replace("</", "<\\/")


class PlotPageBuilder:
    """Assembles the standalone HTML page hosting the scatter plot."""

    def __init__(
        self,
        surface: DrawingSurface,
        *,
        plotly_js_mode: Literal["cdn", "inline"] = "cdn",
        plotly_cdn_url: str | None = None,
        title: str = PAGE_TITLE,
    ) -> None:
        normalized_mode = plotly_js_mode.lower()
        if normalized_mode not in {"cdn", "inline"}:
            raise ValueError(f"Unsupported Plotly JS mode: {plotly_js_mode!r}")
        self._surface = surface
        self._plotly_js_mode = normalized_mode
        self._plotly_cdn_url = plotly_cdn_url
        self._title = title

    def figure_payload(self) -> dict[str, Any]:
        figure = build_figure(self._surface)
        try:
            return json.loads(pio.to_json(figure, validate=False))
        except Exception as exc:  # pragma: no cover - defensive guard around Plotly internals
            raise RuntimeError("Failed to serialize Plotly figure; try the inline Plotly mode.") from exc

    def tooltip_payload(self) -> list[dict[str, Any]]:
        """Tooltip state for each marker, in marker order."""

        scales = self._surface.scales
        return [
            enter_tooltip(EMPTY_TOOLTIP, marker.point, scales).to_dict()
            for marker in self._surface.markers
        ]

    def marker_attributes(self) -> list[dict[str, str]]:
        return [
            {
                "className": marker.class_name,
                "xvalue": marker.data_xvalue,
                "yvalue": marker.data_yvalue,
            }
            for marker in self._surface.markers
        ]

    def _plotly_loader_script(self) -> str:
        if self._plotly_js_mode == "cdn":
            url = self._plotly_cdn_url or DEFAULT_PLOTLY_CDN_URL
            return f'<script src="{url}" crossorigin="anonymous"></script>'
        try:
            from plotly.offline import get_plotlyjs
        except ImportError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError(
                "Plotly offline support is unavailable. Install 'plotly' or switch to the CDN backend."
            ) from exc
        return f"<script>{get_plotlyjs()}</script>"

    def build_html(self) -> str:
        surface = self._surface
        logger.debug("Building plot page with %d markers", len(surface.markers))
        html_figure = _script_json(self.figure_payload())
        html_tooltips = _script_json(self.tooltip_payload())
        html_markers = _script_json(self.marker_attributes())
        html_empty = _script_json(EMPTY_TOOLTIP.to_dict())
        html_marker_classes = _script_json([BASE_CLASS, FLAGGED_CLASS])
        plot_config = _script_json(PLOT_CONFIG)
        plotly_lib_js = self._plotly_loader_script()
        title = html.escape(self._title)

        return f"""<!DOCTYPE html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
  <title>{title}</title>
  <style>
    body {{
      margin: 0;
      padding: 2rem 1.25rem 4rem;
      font-family: 'Inter', 'Segoe UI', sans-serif;
      background: #f5f7fb;
      color: #111827;
    }}
    .container {{
      width: {surface.width}px;
      margin: 0 auto;
    }}
    header h1 {{
      margin: 0 0 0.35rem;
      font-size: 1.9rem;
      text-align: center;
    }}
    header p {{
      margin: 0 0 1.25rem;
      color: #4b5563;
      text-align: center;
    }}
    #plot-scatter {{
      position: relative;
      width: {surface.width}px;
      height: {surface.height}px;
      background: #ffffff;
      border-radius: 12px;
      box-shadow: 0 18px 30px rgba(15, 23, 42, 0.12);
    }}
    .plot-tooltip {{
      position: absolute;
      z-index: 10;
      visibility: hidden;
      pointer-events: none;
      transform: translate(12px, -50%);
      padding: 0.6rem 0.8rem;
      border-radius: 8px;
      background: rgba(17, 24, 39, 0.88);
      color: #f9fafb;
      font-size: 0.85rem;
      line-height: 1.35;
      max-width: 280px;
    }}
    .plot-tooltip p {{
      margin: 0;
    }}
    .plot-tooltip__doping:not(:empty) {{
      margin-top: 0.4rem;
      color: #fecaca;
    }}
    .tooltip_visibility_visible {{
      visibility: visible;
    }}
  </style>
</head>
<body>
  <div class=\"container\">
    <header>
      <h1 id=\"title\">{title}</h1>
      <p>{len(surface.markers)} fastest times up Alpe d'Huez</p>
    </header>
    <div id=\"plot-scatter\">
      <div id=\"tooltip\" class=\"plot-tooltip\">
        <p class=\"plot-tooltip__person\"></p>
        <p class=\"plot-tooltip__race-info\"></p>
        <p class=\"plot-tooltip__doping\"></p>
      </div>
    </div>
  </div>
  {plotly_lib_js}
  <script>
    const figure = {html_figure};
    const tooltipStates = {html_tooltips};
    const markerAttributes = {html_markers};
    const markerClasses = {html_marker_classes};
    const emptyTooltip = {html_empty};
    const plotConfig = {plot_config};

    function applyTooltipState(tooltip, state) {{
      tooltip.classList.toggle('tooltip_visibility_visible', state.visible);
      tooltip.style.left = state.left === null ? '' : `${{state.left}}%`;
      tooltip.style.top = state.top === null ? '' : `${{state.top}}%`;
      tooltip.querySelector('.plot-tooltip__person').textContent = state.person || '';
      tooltip.querySelector('.plot-tooltip__race-info').textContent = state.race_info || '';
      tooltip.querySelector('.plot-tooltip__doping').textContent = state.doping || '';
    }}

    function decorateMarkers(node) {{
      node.querySelectorAll('.scatterlayer .trace').forEach(traceNode => {{
        const calcdata = traceNode.__data__;
        const fullTrace = calcdata && calcdata[0] && calcdata[0].trace;
        if (!fullTrace) return;
        const trace = figure.data[fullTrace.index];
        if (!trace) return;
        traceNode.querySelectorAll('path.point').forEach(pointNode => {{
          const pointData = pointNode.__data__;
          if (!pointData || pointData.i === undefined) return;
          const attributes = markerAttributes[trace.customdata[pointData.i]];
          if (!attributes) return;
          pointNode.classList.remove(...markerClasses);
          attributes.className.split(' ').forEach(name => pointNode.classList.add(name));
          pointNode.setAttribute('data-xvalue', attributes.xvalue);
          pointNode.setAttribute('data-yvalue', attributes.yvalue);
        }});
      }});
    }}

    function initPlot() {{
      const container = document.getElementById('plot-scatter');
      const tooltip = document.getElementById('tooltip');
      const plotNode = document.createElement('div');
      container.insertBefore(plotNode, tooltip);
      Plotly.newPlot(plotNode, figure.data || [], figure.layout || {{}}, plotConfig).then(() => {{
        decorateMarkers(plotNode);
      }});
      plotNode.on('plotly_afterplot', () => decorateMarkers(plotNode));
      plotNode.on('plotly_hover', event => {{
        const point = event.points && event.points[0];
        if (!point) return;
        const state = tooltipStates[point.customdata];
        if (state) applyTooltipState(tooltip, state);
      }});
      plotNode.on('plotly_unhover', () => applyTooltipState(tooltip, emptyTooltip));
    }}

    document.addEventListener('DOMContentLoaded', initPlot);
  </script>
</body>
</html>
"""


def render_page_html(
    surface: DrawingSurface,
    *,
    output_path: Path,
    plotly_js_mode: Literal["cdn", "inline"] = "cdn",
    plotly_cdn_url: str | None = None,
    open_browser: bool = False,
) -> Path:
    """Write the interactive scatter plot page for ``surface``.

    Args:
        surface: Rendered drawing surface holding scales, axes and markers.
        output_path: Where to write the generated HTML.
        plotly_js_mode: ``"cdn"`` loads Plotly from the public CDN, ``"inline"``
            embeds the Plotly bundle so the page works offline.
        plotly_cdn_url: Override for the CDN script URL.
        open_browser: Whether to open the generated page in a browser tab.
    """

    builder = PlotPageBuilder(
        surface,
        plotly_js_mode=plotly_js_mode,
        plotly_cdn_url=plotly_cdn_url,
    )
    page = builder.build_html()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(page, encoding="utf-8")
    logger.info("Wrote scatter plot page to %s", output_path)

    if open_browser:
        import webbrowser

        if not webbrowser.open_new_tab(output_path.resolve().as_uri()):
            logger.warning("Could not open a browser for %s", output_path)
    return output_path
