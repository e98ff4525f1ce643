from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from luvatrix_chart.context import DrawContext
from luvatrix_chart.geometry import Rect
from luvatrix_chart.renderers.base import widest_text
from luvatrix_chart.series import SeriesCollection
from luvatrix_chart.style import BLACK, WHITE, Color, FontSpec, Paint, Stroke

LegendPosition = Literal["top", "bottom", "left", "right"]

ENTRY_SPACING_GAPS = 4


@dataclass(frozen=True)
class LegendLayout:
    width: float
    height: float
    font: FontSpec
    marker_size: float
    rows: tuple[tuple[int, ...], ...]


@dataclass
class Legend:
    """Series swatches with their names.

    Left/right legends stack one entry per line inside ``side_width``;
    top/bottom legends flow entries into rows inside ``band_width``.
    """

    position: LegendPosition = "bottom"
    side_width: float = 150.0
    band_width: float = 580.0
    horizontal_gap: float = 5.0
    vertical_gap: float = 5.0
    padding_horizontal: float = 10.0
    padding_vertical: float = 10.0
    font: FontSpec = FontSpec("SansSerif", "bold", 10.0)
    border_stroke: Stroke = Stroke()
    marker_border_stroke: Stroke = Stroke()
    border_color: Color = (153, 153, 153, 255)
    background: Paint = WHITE
    marker_border_color: Color = BLACK
    text_color: Color = BLACK

    def __post_init__(self) -> None:
        if self.position not in ("top", "bottom", "left", "right"):
            raise ValueError(f"unsupported legend position: {self.position!r}")

    @property
    def on_side(self) -> bool:
        return self.position in ("left", "right")

    @property
    def width(self) -> float:
        return self.side_width if self.on_side else self.band_width

    def measure(self, ctx: DrawContext, series: SeriesCollection) -> LegendLayout:
        """Fit the font to the series names and compute the legend box."""
        with ctx.saved():
            ctx.set_font(self.font)
            longest = widest_text(ctx, (s.name for s in series)) or ""
            if self.on_side:
                return self._measure_side(ctx, series, longest)
            return self._measure_band(ctx, series, longest)

    def _measure_side(self, ctx: DrawContext, series: SeriesCollection, longest: str) -> LegendLayout:
        room = self.side_width - 2 * self.padding_horizontal - self.horizontal_gap
        ctx.adjust_font_size_to_fit_text_in_width(longest, room)
        marker = ctx.standard_line_height()
        ctx.adjust_font_size_to_fit_text_in_width(longest, room - marker)
        marker = ctx.standard_line_height()
        height = len(series) * (marker + self.vertical_gap) + 2 * self.padding_vertical
        rows = tuple((i,) for i in range(len(series)))
        return LegendLayout(self.side_width, height, ctx.font, marker, rows)

    def _measure_band(self, ctx: DrawContext, series: SeriesCollection, longest: str) -> LegendLayout:
        max_line_width = self.band_width - 2 * self.padding_horizontal
        marker = ctx.standard_line_height()
        if marker + self.horizontal_gap + ctx.string_width(longest) > max_line_width:
            ctx.adjust_font_size_to_fit_text_in_width("   " + longest, max_line_width)
            marker = ctx.standard_line_height()

        rows: list[list[int]] = []
        used = 0.0
        for i, data in enumerate(series):
            entry = marker + self.horizontal_gap + ctx.string_width(data.name)
            if not rows or used + entry > max_line_width:
                rows.append([])
                used = 0.0
            rows[-1].append(i)
            used += entry + ENTRY_SPACING_GAPS * self.horizontal_gap

        height = 2 * self.padding_vertical
        if rows:
            height += len(rows) * marker + (len(rows) - 1) * self.vertical_gap
        return LegendLayout(self.band_width, height, ctx.font, marker, tuple(tuple(r) for r in rows))

    def draw(self, ctx: DrawContext, series: SeriesCollection, layout: LegendLayout | None = None) -> LegendLayout:
        """Paint the legend with its top-left corner at the context origin."""
        if layout is None:
            layout = self.measure(ctx, series)
        box = Rect(0.0, 0.0, layout.width, layout.height)
        with ctx.saved():
            ctx.set_stroke(self.border_stroke)
            ctx.set_paint(self.background)
            ctx.fill(box)
            ctx.set_paint(self.border_color)
            ctx.draw(box)
            ctx.set_font(layout.font)
            marker = layout.marker_size
            y = self.padding_vertical
            for row in layout.rows:
                x = self.padding_horizontal
                for index in row:
                    data = series[index]
                    self._draw_entry(ctx, data.color, data.name, x, y, marker)
                    x += marker + self.horizontal_gap + ctx.string_width(data.name)
                    x += ENTRY_SPACING_GAPS * self.horizontal_gap
                y += marker + self.vertical_gap
        return layout

    def _draw_entry(self, ctx: DrawContext, color: Color, name: str, x: float, y: float, marker: float) -> None:
        swatch = Rect(x, y, marker, marker)
        ctx.set_stroke(self.marker_border_stroke)
        ctx.set_paint(color)
        ctx.fill(swatch)
        ctx.set_paint(self.marker_border_color)
        ctx.draw(swatch)
        ctx.set_paint(self.text_color)
        ctx.draw_text(name, x + marker + self.horizontal_gap, y + marker / 2.0, "left", "middle")
