from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from luvatrix_chart.context import DrawContext
from luvatrix_chart.geometry import Ellipse, Path
from luvatrix_chart.renderers.base import ChartStyle
from luvatrix_chart.renderers.cartesian import AxisStyle, CartesianLayout, prepare_cartesian
from luvatrix_chart.series import CategoryLabels, DataSeries, SeriesCollection
from luvatrix_chart.style import Stroke


@dataclass
class LineChartRenderer:
    """One polyline per series over evenly spaced label slots.

    A missing value breaks the line; drawing resumes at the next present one.
    """

    name: ClassVar[str] = "line"

    style: ChartStyle = field(default_factory=ChartStyle)
    axis: AxisStyle = field(default_factory=AxisStyle)
    line_stroke: Stroke = field(default_factory=lambda: Stroke(4.0, cap="round", join="miter"))
    line_opacity: float = 1.0
    point_opacity: float = 1.0
    point_radius: float = 6.0
    draw_lines: bool = True
    draw_points: bool = False

    def draw(self, ctx: DrawContext, series: SeriesCollection, labels: CategoryLabels) -> None:
        style = self.style
        layout = prepare_cartesian(ctx, style, self.axis, series, labels, style.padding_top, style.padding_bottom)
        count = series.max_length()
        if not (self.draw_lines or self.draw_points) or count == 0:
            return

        with ctx.saved():
            if style.shadows_on:
                ctx.begin_shadowed_drawing()
            step = layout.width / count
            ctx.set_stroke(self.line_stroke)
            ctx.translate(step / 2.0, 0.0)
            for data in series:
                if self.draw_lines:
                    ctx.set_paint(data.color, self.line_opacity)
                    ctx.draw(series_path(data, layout, step))
                if self.draw_points:
                    ctx.set_paint(data.color, self.point_opacity)
                    for x, value in enumerate(data):
                        if value is None:
                            continue
                        r = self.point_radius
                        ctx.fill(Ellipse(x * step - r, layout.value_to_y(value) - r, 2 * r, 2 * r))
            if style.shadows_on:
                ctx.end_shadowed_drawing()


def series_path(data: DataSeries, layout: CartesianLayout, step: float) -> Path:
    path = Path()
    broken = True
    for x, value in enumerate(data):
        if value is None:
            broken = True
            continue
        y = layout.value_to_y(value)
        if broken:
            path.move_to(x * step, y)
        else:
            path.line_to(x * step, y)
        broken = False
    return path
