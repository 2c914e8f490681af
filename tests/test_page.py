from __future__ import annotations

import json
import re
from pathlib import Path

import pytest
from plotly import io as pio

from cyclist_scatter.mapper import map_records
from cyclist_scatter.page import (
    DEFAULT_PAGE_PATH,
    DEFAULT_PLOTLY_CDN_URL,
    PlotPageBuilder,
    build_figure,
    render_page_html,
)
from cyclist_scatter.scatter import render_scatter

DATASET = [
    {"Year": 1994, "Seconds": 2175, "Doping": "", "Name": "A", "Nationality": "USA", "Place": 1, "URL": ""},
    {"Year": 1996, "Seconds": 2200, "Doping": "EPO", "Name": "B", "Nationality": "ITA", "Place": 2, "URL": ""},
    {"Year": 1997, "Seconds": 2230, "Doping": "", "Name": "C", "Nationality": "FRA", "Place": 3, "URL": ""},
]


def test_build_figure_groups_markers_by_class() -> None:
    surface = render_scatter(map_records(DATASET))

    figure = build_figure(surface)

    assert [trace.meta for trace in figure.data] == ["dot", "dot dot_background_red"]
    assert list(figure.data[0].customdata) == [0, 2]
    assert list(figure.data[1].customdata) == [1]
    assert figure.data[0].hoverinfo == "none"
    assert figure.data[0].marker.size == 10


def test_build_figure_matches_surface_geometry() -> None:
    surface = render_scatter(map_records(DATASET))

    layout = build_figure(surface).layout

    assert (layout.width, layout.height) == (1024, 600)
    assert (layout.margin.l, layout.margin.r, layout.margin.t, layout.margin.b) == (55, 55, 55, 55)
    assert list(layout.yaxis.ticktext) == ["36:15", "36:30", "36:45", "37:00"]
    assert list(layout.xaxis.ticktext)[:5] == ["1994", "April", "July", "October", "1995"]
    assert list(layout.xaxis.ticktext)[-1] == "1997"
    assert {annotation.text for annotation in layout.annotations} == {"Years", "Time in minutes"}


def test_builder_payloads() -> None:
    surface = render_scatter(map_records(DATASET))
    builder = PlotPageBuilder(surface, plotly_js_mode="cdn")

    tooltips = builder.tooltip_payload()
    attributes = builder.marker_attributes()

    assert [tooltip["person"] for tooltip in tooltips] == ["A: USA", "B: ITA", "C: FRA"]
    assert tooltips[1]["doping"] == "EPO"
    assert all(tooltip["visible"] for tooltip in tooltips)
    assert attributes[1]["className"] == "dot dot_background_red"
    assert attributes[0]["yvalue"] == "1970-01-01T00:36:15"

    figure = pio.from_json(json.dumps(builder.figure_payload()))
    assert len(figure.data) == 2


def test_render_page_html(tmp_path: Path) -> None:
    surface = render_scatter(map_records(DATASET))
    output_path = tmp_path / DEFAULT_PAGE_PATH.name

    generated = render_page_html(surface, output_path=output_path)

    assert generated == output_path
    content = output_path.read_text(encoding="utf-8")
    assert 'id="plot-scatter"' in content
    assert 'id="tooltip"' in content
    assert "plot-tooltip__person" in content
    assert "plot-tooltip__race-info" in content
    assert "plot-tooltip__doping" in content
    assert "tooltip_visibility_visible" in content
    assert "Year: 1994, Time: 36:15" in content
    assert "plotly_hover" in content
    assert "plotly_unhover" in content
    assert "DOMContentLoaded" in content
    assert f'<script src="{DEFAULT_PLOTLY_CDN_URL}"' in content


def test_inline_mode_embeds_plotly(tmp_path: Path) -> None:
    surface = render_scatter(map_records(DATASET))
    output_path = tmp_path / "nested" / "inline.html"

    render_page_html(surface, output_path=output_path, plotly_js_mode="inline")

    content = output_path.read_text(encoding="utf-8")
    assert f'<script src="{DEFAULT_PLOTLY_CDN_URL}"' not in content
    assert "Plotly" in content


def test_rejects_unknown_js_mode() -> None:
    surface = render_scatter(map_records(DATASET))

    with pytest.raises(ValueError, match="Unsupported Plotly JS mode"):
        PlotPageBuilder(surface, plotly_js_mode="bundle")  # type: ignore[arg-type]


def _script_constant(content: str, name: str):
    match = re.search(rf"const {name} = (.*?);\n", content)
    assert match is not None, name
    return json.loads(match.group(1))


def test_build_figure_locks_geometry() -> None:
    surface = render_scatter(map_records(DATASET))

    layout = build_figure(surface).layout

    assert layout.xaxis.fixedrange is True
    assert layout.yaxis.fixedrange is True
    assert layout.legend.itemclick is False
    assert layout.legend.itemdoubleclick is False


def test_page_disables_zoom_and_mode_bar(tmp_path: Path) -> None:
    surface = render_scatter(map_records(DATASET))
    output_path = render_page_html(surface, output_path=tmp_path / "plot.html")

    content = output_path.read_text(encoding="utf-8")
    config = _script_constant(content, "plotConfig")

    assert config["scrollZoom"] is False
    assert config["displayModeBar"] is False
    assert _script_constant(content, "markerClasses") == ["dot", "dot_background_red"]
    payload = _script_constant(content, "figure")
    assert payload["layout"]["xaxis"]["fixedrange"] is True
    assert payload["layout"]["yaxis"]["fixedrange"] is True


def test_page_resets_to_hidden_empty_tooltip(tmp_path: Path) -> None:
    surface = render_scatter(map_records(DATASET))
    output_path = render_page_html(surface, output_path=tmp_path / "plot.html")

    content = output_path.read_text(encoding="utf-8")

    assert _script_constant(content, "emptyTooltip") == {
        "visible": False,
        "left": None,
        "top": None,
        "person": None,
        "race_info": None,
        "doping": None,
    }
    states = _script_constant(content, "tooltipStates")
    assert len(states) == 3
    assert states[0]["race_info"] == "Year: 1994, Time: 36:15"
    assert "applyTooltipState(tooltip, emptyTooltip)" in content
