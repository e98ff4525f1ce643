from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
import tomllib
from typing import Any

from luvatrix_chart.chart import Chart
from luvatrix_chart.errors import ConfigurationError
from luvatrix_chart.legend import Legend
from luvatrix_chart.renderers import RENDERERS, ColumnChartRenderer, LineChartRenderer, PieChartRenderer
from luvatrix_chart.renderers.base import ChartRenderer
from luvatrix_chart.style import Color, parse_hex_color

AXIS_OPTIONS = ("value_axis_caption", "label_axis_caption", "value_axis_segments")
RENDERER_OPTIONS = {
    "column": AXIS_OPTIONS + ("shadows",),
    "line": AXIS_OPTIONS + ("shadows", "draw_points", "draw_lines"),
    "pie": ("shadows", "explosion_offset", "doughnut"),
}


@dataclass(frozen=True)
class SeriesConfig:
    name: str
    values: list[float]
    color: Color | None = None


@dataclass(frozen=True)
class ChartConfig:
    width: int
    height: int
    renderer: str
    series: list[SeriesConfig]
    title: str | None = None
    subtitle: str | None = None
    labels: list[str] = field(default_factory=list)
    legend_position: str | None = None
    renderer_options: dict[str, Any] = field(default_factory=dict)


def load_chart_config(path: str | Path) -> ChartConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"chart config not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    try:
        width = int(raw["width"])
        height = int(raw["height"])
        renderer = str(raw["renderer"])
        series = [_parse_series(entry, i) for i, entry in enumerate(raw["series"])]
    except KeyError as exc:
        raise ValueError(f"chart config missing required field: {exc.args[0]}") from exc
    if renderer not in RENDERERS:
        raise ConfigurationError(f"unknown renderer {renderer!r}; expected one of {sorted(RENDERERS)}")
    legend = raw.get("legend", {})
    if not isinstance(legend, dict):
        raise ValueError("legend must be a table")
    options = raw.get("renderer_options", {})
    if not isinstance(options, dict):
        raise ValueError("renderer_options must be a table")
    unknown = sorted(set(options) - set(RENDERER_OPTIONS[renderer]))
    if unknown:
        raise ConfigurationError(f"unsupported {renderer} renderer options: {', '.join(unknown)}")
    return ChartConfig(
        width=width,
        height=height,
        renderer=renderer,
        series=series,
        title=_coerce_optional_str(raw.get("title"), "title"),
        subtitle=_coerce_optional_str(raw.get("subtitle"), "subtitle"),
        labels=_coerce_string_list(raw.get("labels", []), "labels"),
        legend_position=_coerce_optional_str(legend.get("position"), "legend.position"),
        renderer_options=dict(options),
    )


def build_chart(config: ChartConfig) -> Chart:
    chart = Chart(width=config.width, height=config.height, title=config.title, subtitle=config.subtitle)
    if config.legend_position is not None and chart.legend is not None:
        chart.legend = replace(chart.legend, position=config.legend_position)
    for series in config.series:
        chart.add_series(series.name, series.values, series.color)
    chart.set_labels(config.labels)
    chart.renderer = build_renderer(config.renderer, config.renderer_options)
    return chart


def build_renderer(name: str, options: dict[str, Any]) -> ChartRenderer:
    if name not in RENDERERS:
        raise ConfigurationError(f"unknown renderer {name!r}; expected one of {sorted(RENDERERS)}")
    renderer = RENDERERS[name]()
    if "shadows" in options:
        renderer.style.shadows_on = bool(options["shadows"])
    if isinstance(renderer, (ColumnChartRenderer, LineChartRenderer)):
        if "value_axis_caption" in options:
            renderer.axis.value_axis_caption = str(options["value_axis_caption"])
        if "label_axis_caption" in options:
            renderer.axis.label_axis_caption = str(options["label_axis_caption"])
        if "value_axis_segments" in options:
            renderer.axis.set_value_axis_segments(options["value_axis_segments"])
    if isinstance(renderer, LineChartRenderer):
        renderer.draw_points = bool(options.get("draw_points", renderer.draw_points))
        renderer.draw_lines = bool(options.get("draw_lines", renderer.draw_lines))
    if isinstance(renderer, PieChartRenderer):
        renderer.explosion_offset = float(options.get("explosion_offset", renderer.explosion_offset))
        renderer.doughnut = bool(options.get("doughnut", renderer.doughnut))
    return renderer


def _parse_series(entry: object, index: int) -> SeriesConfig:
    if not isinstance(entry, dict):
        raise ValueError(f"series[{index}] must be a table")
    name = entry["name"]
    values = entry["values"]
    if not isinstance(name, str):
        raise ValueError(f"series[{index}].name must be a string")
    if not isinstance(values, list):
        raise ValueError(f"series[{index}].values must be a list")
    color = entry.get("color")
    if color is not None and not isinstance(color, str):
        raise ValueError(f"series[{index}].color must be a string if provided")
    return SeriesConfig(name=name, values=values, color=parse_hex_color(color) if color is not None else None)


def _coerce_string_list(value: object, field_name: str) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} entries must be strings")
        out.append(item)
    return out


def _coerce_optional_str(value: object, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string if provided")
    return value
