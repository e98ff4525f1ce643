from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol

from luvatrix_chart.context import DrawContext
from luvatrix_chart.geometry import Rect
from luvatrix_chart.scales import DEFAULT_DECIMALS, format_value
from luvatrix_chart.series import CategoryLabels, SeriesCollection
from luvatrix_chart.style import Color, FontSpec, LinearGradient, Paint, ShadowSpec, Stroke


BACKGROUND_TOP_COLOR: Color = (253, 253, 253, 255)
BACKGROUND_BOTTOM_COLOR: Color = (237, 237, 237, 255)


class ChartRenderer(Protocol):
    name: str

    def draw(self, ctx: DrawContext, series: SeriesCollection, labels: CategoryLabels) -> None:
        ...


@dataclass
class ChartStyle:
    """Settings shared by every renderer: paddings, caption fonts, shadows, background."""

    label_font: FontSpec = FontSpec("SansSerif", "bold", 12.0)
    label_color: Color = (33, 33, 33, 255)
    label_margin: float = 10.0
    value_font: FontSpec = FontSpec("SansSerif", "bold", 12.0)
    value_color: Color = (51, 51, 51, 255)
    value_margin: float = 10.0
    padding_top: float = 10.0
    padding_bottom: float = 10.0
    padding_left: float = 10.0
    padding_right: float = 10.0
    background: Paint | None = None
    border_paint: Paint = (153, 153, 153, 255)
    border_stroke: Stroke = field(default_factory=Stroke)
    shadows_on: bool = True
    shadow: ShadowSpec = field(default_factory=ShadowSpec)
    decimals: int = DEFAULT_DECIMALS
    series_name_rendering: bool = True
    value_rendering: bool = True


def default_background(height: float) -> LinearGradient:
    return LinearGradient(0.0, height * 0.2, BACKGROUND_TOP_COLOR, 0.0, height * 0.8, BACKGROUND_BOTTOM_COLOR)


def draw_background(ctx: DrawContext, style: ChartStyle) -> None:
    """Hand the shadow settings to ``ctx``, then fill and outline the renderer area."""
    ctx.shadow = style.shadow
    area = Rect(0.0, 0.0, ctx.width, ctx.height)
    ctx.set_paint(style.background if style.background is not None else default_background(ctx.height))
    ctx.fill(area)
    ctx.set_paint(style.border_paint)
    ctx.set_stroke(style.border_stroke)
    ctx.draw(area)


def widest_text(ctx: DrawContext, texts: Iterable[str | None], font: FontSpec | None = None) -> str | None:
    """The entry with the largest advance width, ``None`` when there is none."""
    best: str | None = None
    best_width = -1.0
    for text in texts:
        if text is None:
            continue
        width = ctx.string_width(text, font)
        if width > best_width:
            best = text
            best_width = width
    return best


def widest_value(ctx: DrawContext, series: SeriesCollection, decimals: int, font: FontSpec | None = None) -> str | None:
    return widest_text(ctx, (format_value(v, decimals) for s in series for v in s.present_values()), font)
