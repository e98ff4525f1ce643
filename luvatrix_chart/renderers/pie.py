from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import ClassVar

from luvatrix_chart.context import DrawContext
from luvatrix_chart.geometry import Arc, Ellipse
from luvatrix_chart.renderers.base import ChartStyle, draw_background
from luvatrix_chart.scales import format_value
from luvatrix_chart.series import CategoryLabels, DataSeries, SeriesCollection
from luvatrix_chart.style import WHITE, Paint, ShadowSpec, Stroke


def _pie_style() -> ChartStyle:
    return ChartStyle(
        series_name_rendering=False,
        value_rendering=False,
        shadow=ShadowSpec(blur_radius=3, paint=(0, 0, 0, 77)),
    )


@dataclass
class PieChartRenderer:
    """Pie of the first value of every series.

    Slices run clockwise from ``start_angle`` (degrees, 0 is three o'clock).
    Only positive values get a slice; ``total`` replaces their sum when set.
    """

    name: ClassVar[str] = "pie"

    style: ChartStyle = field(default_factory=_pie_style)
    border_color: Paint = WHITE
    border_stroke: Stroke = field(default_factory=lambda: Stroke(2.0, cap="round", join="round"))
    fill_opacity: float = 1.0
    start_angle: float = 0.0
    explosion_offset: float = 0.0
    total: float | None = None
    doughnut: bool = False

    def slice_text(self, data: DataSeries) -> str:
        style = self.style
        parts = []
        if style.series_name_rendering:
            parts.append(data.name)
        if style.value_rendering:
            parts.append(format_value(data.value_at(0), style.decimals))
        return " - ".join(parts)

    @property
    def labels_on(self) -> bool:
        return self.style.series_name_rendering or self.style.value_rendering

    def draw(self, ctx: DrawContext, series: SeriesCollection, labels: CategoryLabels) -> None:
        style = self.style
        draw_background(ctx, style)
        if len(series) == 0:
            return
        area_w = ctx.width - style.padding_left - style.padding_right
        area_h = ctx.height - style.padding_top - style.padding_bottom
        cx = area_w / 2.0
        cy = area_h / 2.0
        radius = min(cx, cy)
        if self.labels_on:
            radius -= ctx.widest_line((self.slice_text(s) for s in series), style.label_font) + style.label_margin
        total = self.total if self.total is not None else series.sum_of_positives_on_first_column()
        if total <= 0 or radius <= 0:
            return

        with ctx.saved():
            if style.shadows_on:
                ctx.begin_shadowed_drawing()
            ctx.translate(style.padding_left + cx, style.padding_top + cy)
            if len(series) == 1:
                self._draw_full_circle(ctx, series[0], radius)
            else:
                self._draw_slices(ctx, series, radius, total)
            if style.shadows_on:
                ctx.end_shadowed_drawing()

    def _draw_full_circle(self, ctx: DrawContext, data: DataSeries, radius: float) -> None:
        circle = Ellipse(-radius, -radius, 2 * radius, 2 * radius)
        ctx.set_paint(data.color, self.fill_opacity)
        ctx.fill(circle)
        ctx.set_stroke(self.border_stroke)
        ctx.set_paint(self.border_color)
        ctx.draw(circle)
        if self.labels_on:
            ctx.set_font(self.style.label_font)
            ctx.set_paint(self.style.label_color)
            ctx.draw_text(self.slice_text(data), radius + self.style.label_margin, 0.0, "left", "middle")

    def _draw_slices(self, ctx: DrawContext, series: SeriesCollection, radius: float, total: float) -> None:
        explosion = 0.0 if self.doughnut else self.explosion_offset
        radius -= explosion
        if radius <= 0:
            return
        angle = self.start_angle
        for data in series:
            value = data.value_at(0)
            if value is None or value <= 0:
                continue
            extent = value * 360.0 / total
            middle = angle + extent / 2.0
            with ctx.saved():
                mid = math.radians(middle)
                ctx.translate(explosion * math.cos(mid), explosion * math.sin(mid))
                wedge = Arc(0.0, 0.0, radius, -(angle + extent), extent, kind="pie")
                ctx.set_paint(data.color, self.fill_opacity)
                ctx.fill(wedge)
                ctx.set_stroke(self.border_stroke)
                ctx.set_paint(self.border_color)
                ctx.draw(wedge)
                if self.labels_on:
                    self._draw_slice_label(ctx, data, radius, middle)
            angle += extent

        if self.doughnut:
            hole = Ellipse(-radius / 2.0, -radius / 2.0, radius, radius)
            ctx.erase(hole)
            ctx.set_stroke(self.border_stroke)
            ctx.set_paint(self.border_color)
            ctx.draw(hole)

    def _draw_slice_label(self, ctx: DrawContext, data: DataSeries, radius: float, middle: float) -> None:
        ctx.set_font(self.style.label_font)
        ctx.set_paint(data.color)
        distance = radius + self.style.label_margin
        # left half: flip by 180 degrees so the text stays upright
        if 90.0 < middle % 360.0 < 270.0:
            ctx.rotate(math.radians(middle - 180.0))
            ctx.draw_text(self.slice_text(data), -distance, 0.0, "right", "middle")
        else:
            ctx.rotate(math.radians(middle))
            ctx.draw_text(self.slice_text(data), distance, 0.0, "left", "middle")
