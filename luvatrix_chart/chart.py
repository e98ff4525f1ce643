from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Any, Iterable

import numpy as np
from PIL import Image

from luvatrix_chart.context import DrawContext
from luvatrix_chart.geometry import Rect
from luvatrix_chart.legend import Legend
from luvatrix_chart.renderers.base import ChartRenderer
from luvatrix_chart.series import CategoryLabels, DataSeries, SeriesCollection
from luvatrix_chart.style import TRANSPARENT, Color, ColorLike, FontSpec, Paint, Stroke

LOGGER = logging.getLogger(__name__)


@dataclass
class Chart:
    """Title, subtitle, legend and one renderer laid out on a fixed-size raster."""

    width: int
    height: int
    title: str | None = None
    subtitle: str | None = None
    series: SeriesCollection = field(default_factory=SeriesCollection)
    labels: CategoryLabels = field(default_factory=CategoryLabels)
    renderer: ChartRenderer | None = None
    legend: Legend | None = None
    padding_top: float = 10.0
    padding_bottom: float = 10.0
    padding_left: float = 10.0
    padding_right: float = 10.0
    title_margin: float = 18.0
    subtitle_margin: float = 2.0
    legend_margin: float = 10.0
    title_font: FontSpec = FontSpec("SansSerif", "bold", 16.0)
    subtitle_font: FontSpec = FontSpec("SansSerif", "bold", 14.0)
    title_color: Color = (51, 51, 51, 255)
    subtitle_color: Color = (88, 88, 88, 255)
    background: Paint = TRANSPARENT
    border_paint: Paint = TRANSPARENT
    border_stroke: Stroke = field(default_factory=Stroke)
    draw_legend: bool = True

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be > 0")
        if self.legend is None:
            self.legend = Legend(
                side_width=self.width / 4.0,
                band_width=self.width - self.padding_left - self.padding_right,
            )

    def add_series(self, name: str, values: Any, color: ColorLike | None = None) -> DataSeries:
        return self.series.add_values(name, values, color)

    def clear_series(self) -> None:
        self.series.clear()

    def set_labels(self, labels: Iterable[str]) -> None:
        self.labels = CategoryLabels(labels)

    def draw(self, ctx: DrawContext) -> None:
        ctx.set_paint(self.background)
        ctx.fill(Rect(0.0, 0.0, self.width, self.height))
        self._draw_border(ctx)
        self._draw_titles(ctx)
        legend_box = self._draw_legend(ctx)
        # renderers leave the context modified, so this goes last
        self._draw_chart(ctx, legend_box)

    def render(self) -> np.ndarray:
        start = time.perf_counter()
        with DrawContext(self.width, self.height) as ctx:
            self.draw(ctx)
            frame = ctx.surface
        LOGGER.debug("rendered %dx%d chart in %.1f ms", self.width, self.height, (time.perf_counter() - start) * 1000.0)
        return frame

    def save_png(self, path: str | Path) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(self.render()).save(out, format="PNG")
        return out

    def title_offset(self, ctx: DrawContext) -> float:
        """Distance from the top edge to the area below the title block."""
        offset = self.padding_top
        if self.title is not None:
            offset += ctx.line_height(self.title, self.title_font)
        if self.subtitle is not None:
            offset += ctx.line_height(self.subtitle, self.subtitle_font) + self.subtitle_margin
        if self.title is not None or self.subtitle is not None:
            offset += self.title_margin
        return offset

    def _draw_border(self, ctx: DrawContext) -> None:
        inset = self.border_stroke.width / 2.0
        ctx.set_stroke(self.border_stroke)
        ctx.set_paint(self.border_paint)
        ctx.draw(Rect(inset, inset, self.width - self.border_stroke.width, self.height - self.border_stroke.width))

    def _draw_titles(self, ctx: DrawContext) -> None:
        max_width = self.width - self.padding_left - self.padding_right
        with ctx.saved():
            ctx.translate(0.0, self.padding_top)
            if self.title is not None:
                self._draw_centered(ctx, self.title, self.title_font, self.title_color, max_width)
                ctx.translate(0.0, ctx.line_height(self.title, self.title_font))
            if self.subtitle is not None:
                ctx.translate(0.0, self.subtitle_margin)
                self._draw_centered(ctx, self.subtitle, self.subtitle_font, self.subtitle_color, max_width)

    def _draw_centered(self, ctx: DrawContext, text: str, font: FontSpec, color: Color, max_width: float) -> None:
        ctx.set_font(font)
        ctx.set_paint(color)
        ctx.draw_text(text, self.width / 2.0, 0.0, "center", "top", max_width=max_width)

    def _draw_legend(self, ctx: DrawContext) -> tuple[float, float] | None:
        legend = self.legend
        if legend is None or not self.draw_legend:
            return None
        layout = legend.measure(ctx, self.series)
        top = self.title_offset(ctx)
        if legend.position == "right":
            x, y = self.width - self.padding_right - layout.width, top
        elif legend.position == "bottom":
            x, y = self.padding_left, self.height - self.padding_bottom - layout.height
        else:
            x, y = self.padding_left, top
        with ctx.saved():
            ctx.translate(x, y)
            legend.draw(ctx, self.series, layout)
        return (layout.width, layout.height)

    def _draw_chart(self, ctx: DrawContext, legend_box: tuple[float, float] | None) -> None:
        if self.renderer is None:
            return
        top = self.title_offset(ctx)
        chart_w = self.width - self.padding_left - self.padding_right
        chart_h = self.height - top - self.padding_bottom
        with ctx.saved():
            ctx.translate(self.padding_left, top)
            if legend_box is not None and self.legend is not None:
                legend_w, legend_h = legend_box
                if self.legend.on_side:
                    chart_w -= legend_w + self.legend_margin
                    if self.legend.position == "left":
                        ctx.translate(legend_w + self.legend_margin, 0.0)
                else:
                    chart_h -= legend_h + self.legend_margin
                    if self.legend.position == "top":
                        ctx.translate(0.0, legend_h + self.legend_margin)
            ctx.resize(chart_w, chart_h)
            self.renderer.draw(ctx, self.series, self.labels)
