from __future__ import annotations

from dataclasses import dataclass, field
import math

from luvatrix_chart.context import DrawContext
from luvatrix_chart.errors import ConfigurationError
from luvatrix_chart.geometry import Line, Rect
from luvatrix_chart.renderers.base import ChartStyle, draw_background, widest_text
from luvatrix_chart.scales import AxisRange, format_ticks, generate_value_axis_ticks, positive_area_size, negative_area_size
from luvatrix_chart.series import CategoryLabels, SeriesCollection
from luvatrix_chart.style import Color, FontSpec, Stroke


GRID_COLOR: Color = (153, 153, 153, 255)
CAPTION_COLOR: Color = (200, 200, 200, 255)
AXIS_TEXT_COLOR: Color = (51, 51, 51, 255)


def _grid_stroke() -> Stroke:
    return Stroke(width=1.0, cap="butt", join="miter", miter_limit=10.0, dash=(2.0,))


@dataclass
class AxisStyle:
    """Value axis (left) and label axis (bottom) settings of cartesian charts."""

    value_axis_caption: str | None = None
    label_axis_caption: str | None = None
    value_axis_caption_font: FontSpec = FontSpec("SansSerif", "bold", 12.0)
    label_axis_caption_font: FontSpec = FontSpec("SansSerif", "bold", 12.0)
    value_axis_font: FontSpec = FontSpec("SansSerif", "plain", 10.0)
    label_axis_font: FontSpec = FontSpec("SansSerif", "bold", 10.0)
    value_axis_caption_color: Color = CAPTION_COLOR
    label_axis_caption_color: Color = CAPTION_COLOR
    value_axis_text_color: Color = AXIS_TEXT_COLOR
    label_axis_text_color: Color = AXIS_TEXT_COLOR
    value_axis_caption_margin: float = 5.0
    label_axis_caption_margin: float = 5.0
    value_axis_margin: float = 5.0
    label_axis_margin: float = 5.0
    axis_marker_size: float = 5.0
    value_axis_segments: int = 10
    draw_value_axis: bool = True
    draw_label_axis: bool = True
    draw_horizontal_lines: bool = True
    draw_vertical_lines: bool = True
    axis_marker_stroke: Stroke = field(default_factory=Stroke)
    axis_marker_stroke_for_zero: Stroke = field(default_factory=Stroke)
    horizontal_line_stroke: Stroke = field(default_factory=_grid_stroke)
    horizontal_line_stroke_for_zero: Stroke = field(default_factory=Stroke)
    vertical_line_stroke: Stroke = field(default_factory=_grid_stroke)
    axis_marker_color: Color = GRID_COLOR
    axis_marker_color_for_zero: Color = GRID_COLOR
    horizontal_line_color: Color = GRID_COLOR
    horizontal_line_color_for_zero: Color = GRID_COLOR
    vertical_line_color: Color = GRID_COLOR

    def __post_init__(self) -> None:
        self.set_value_axis_segments(self.value_axis_segments)

    def set_value_axis_segments(self, segments: int) -> None:
        if int(segments) != segments or segments < 1:
            raise ConfigurationError("value axis segments must be an integer >= 1")
        self.value_axis_segments = int(segments)


@dataclass(frozen=True)
class CartesianLayout:
    """Plot area left behind by ``prepare_cartesian``.

    The context origin sits on the zero line at the left edge of the plot
    area; positive values grow upwards (negative y).
    """

    width: float
    height: float
    positive_height: float
    negative_height: float
    axis_range: AxisRange
    ticks: tuple[float, ...]

    @property
    def data_distance(self) -> float:
        return self.axis_range.data_distance or 1.0

    def value_to_y(self, value: float) -> float:
        return -(value * self.height / self.data_distance)


def value_axis_offset(ctx: DrawContext, style: ChartStyle, axis: AxisStyle, ticks: list[float]) -> float:
    if not axis.draw_value_axis:
        return 0.0
    widest = ctx.widest_line(format_ticks(ticks, style.decimals), axis.value_axis_font)
    return widest + axis.value_axis_margin + axis.axis_marker_size


def label_axis_offset(ctx: DrawContext, axis: AxisStyle) -> float:
    if not axis.draw_label_axis:
        return 0.0
    return axis.label_axis_margin + ctx.standard_line_height(axis.label_axis_font)


def prepare_cartesian(
    ctx: DrawContext,
    style: ChartStyle,
    axis: AxisStyle,
    series: SeriesCollection,
    labels: CategoryLabels,
    padding_top: float,
    padding_bottom: float,
) -> CartesianLayout:
    """Draw captions, background, axes and grid, then move ``ctx`` into the plot area.

    On return the context is translated to the zero line, resized to the plot
    area and clipped to it. The caller owns that state; nothing is restored.
    """
    axis_range = series.axis_range()
    ticks = generate_value_axis_ticks(axis_range, axis.value_axis_segments)
    width = ctx.width
    height = ctx.height

    caption_x = _caption_offset(ctx, axis.value_axis_caption, axis.value_axis_caption_font, axis.value_axis_caption_margin)
    caption_y = _caption_offset(ctx, axis.label_axis_caption, axis.label_axis_caption_font, axis.label_axis_caption_margin)
    value_axis_w = value_axis_offset(ctx, style, axis, ticks)
    label_axis_h = label_axis_offset(ctx, axis)

    with ctx.saved():
        _draw_value_axis_caption(ctx, axis, 0.0, (height - caption_y - label_axis_h) / 2.0)
        _draw_label_axis_caption(
            ctx,
            axis,
            caption_x + value_axis_w + (width - caption_x - value_axis_w) / 2.0,
            height - caption_y + axis.label_axis_caption_margin,
        )

    width -= caption_x
    height -= caption_y
    ctx.translate(caption_x, 0.0)

    ctx.translate(value_axis_w, 0.0)
    ctx.resize(width - value_axis_w, height - label_axis_h)
    draw_background(ctx, style)
    ctx.translate(-value_axis_w, 0.0)
    ctx.resize(width, height)

    ctx.set_clip(Rect(0.0, 0.0, width + 1.0, height + 1.0))
    _draw_value_axis(ctx, style, axis, axis_range, ticks, padding_top, padding_bottom, value_axis_w, label_axis_h)
    _draw_label_axis(ctx, style, axis, series, labels, value_axis_w, label_axis_h)
    ctx.set_clip(Rect(value_axis_w, 0.0, width - value_axis_w + 1.0, height - label_axis_h + 1.0))

    plot_w = width - value_axis_w - style.padding_left - style.padding_right
    plot_h = height - label_axis_h - padding_top - padding_bottom
    pos_h = positive_area_size(axis_range, plot_h)
    ctx.translate(value_axis_w + style.padding_left, padding_top + pos_h)
    ctx.resize(plot_w, plot_h)
    return CartesianLayout(
        width=max(0.0, plot_w),
        height=max(0.0, plot_h),
        positive_height=pos_h,
        negative_height=negative_area_size(axis_range, plot_h),
        axis_range=axis_range,
        ticks=tuple(ticks),
    )


def _caption_offset(ctx: DrawContext, caption: str | None, font: FontSpec, margin: float) -> float:
    if caption is None:
        return 0.0
    return ctx.line_height(caption, font) + margin


def _draw_value_axis_caption(ctx: DrawContext, axis: AxisStyle, x: float, y: float) -> None:
    if axis.value_axis_caption is None:
        return
    ctx.set_font(axis.value_axis_caption_font)
    ctx.set_paint(axis.value_axis_caption_color)
    with ctx.saved():
        ctx.translate(x, y)
        ctx.rotate(math.radians(-90.0))
        ctx.draw_text(axis.value_axis_caption, 0.0, 0.0, "center", "top")


def _draw_label_axis_caption(ctx: DrawContext, axis: AxisStyle, x: float, y: float) -> None:
    if axis.label_axis_caption is None:
        return
    ctx.set_font(axis.label_axis_caption_font)
    ctx.set_paint(axis.label_axis_caption_color)
    with ctx.saved():
        ctx.translate(x, y)
        ctx.draw_text(axis.label_axis_caption, 0.0, 0.0, "center", "top")


def _draw_value_axis(
    ctx: DrawContext,
    style: ChartStyle,
    axis: AxisStyle,
    axis_range: AxisRange,
    ticks: list[float],
    padding_top: float,
    padding_bottom: float,
    value_axis_w: float,
    label_axis_h: float,
) -> None:
    if not (axis.draw_value_axis or axis.draw_horizontal_lines):
        return
    margin = axis.value_axis_margin if axis.draw_value_axis else 0.0
    marker = axis.axis_marker_size if axis.draw_value_axis else 0.0
    dd = axis_range.data_distance or 1.0
    height = ctx.height - padding_top - padding_bottom - label_axis_h
    width = ctx.width - value_axis_w
    pos_h = positive_area_size(axis_range, height)
    texts = format_ticks(ticks, style.decimals)
    text_w = ctx.widest_line(texts, axis.value_axis_font) if axis.draw_value_axis else 0.0

    if axis_range.max < 0:
        lo, hi = axis_range.min, 0.0
    elif axis_range.min > 0:
        lo, hi = 0.0, axis_range.max
    else:
        lo, hi = axis_range.min, axis_range.max

    with ctx.saved():
        ctx.set_font(axis.value_axis_font)
        ctx.translate(text_w, padding_top + pos_h)
        for value, text in zip(ticks, texts):
            if value < lo or value > hi:
                continue
            y = -(value * height / dd)
            zero = value == 0
            if axis.draw_horizontal_lines:
                ctx.set_paint(axis.horizontal_line_color_for_zero if zero else axis.horizontal_line_color)
                ctx.set_stroke(axis.horizontal_line_stroke_for_zero if zero else axis.horizontal_line_stroke)
                x = margin + marker
                ctx.draw(Line(x, y, x + width, y))
            if axis.draw_value_axis:
                ctx.set_paint(axis.axis_marker_color_for_zero if zero else axis.axis_marker_color)
                ctx.set_stroke(axis.axis_marker_stroke_for_zero if zero else axis.axis_marker_stroke)
                ctx.draw(Line(margin, y, margin + marker, y))
                ctx.set_paint(axis.value_axis_text_color)
                ctx.draw_text(text, 0.0, y, "right", "middle")


def _draw_label_axis(
    ctx: DrawContext,
    style: ChartStyle,
    axis: AxisStyle,
    series: SeriesCollection,
    labels: CategoryLabels,
    value_axis_w: float,
    label_axis_h: float,
) -> None:
    if not (axis.draw_label_axis or axis.draw_vertical_lines):
        return
    count = series.max_length()
    if count == 0:
        return
    margin = axis.label_axis_margin if axis.draw_label_axis else 0.0
    marker = axis.axis_marker_size if axis.draw_label_axis else 0.0
    width = ctx.width - style.padding_left - style.padding_right - value_axis_w
    height = ctx.height
    step = width / count

    with ctx.saved():
        ctx.set_font(axis.label_axis_font)
        longest = widest_text(ctx, (labels.get(i) for i in range(count)))
        if longest:
            ctx.adjust_font_size_to_fit_text_in_width(longest, step)
        ctx.translate(value_axis_w + style.padding_left, height - label_axis_h)
        x = step / 2.0
        for i in range(count):
            if axis.draw_vertical_lines:
                ctx.set_paint(axis.vertical_line_color)
                ctx.set_stroke(axis.vertical_line_stroke)
                ctx.draw(Line(x, 0.0, x, -height + label_axis_h))
            if axis.draw_label_axis:
                ctx.set_paint(axis.axis_marker_color)
                ctx.set_stroke(axis.axis_marker_stroke)
                ctx.draw(Line(x, 0.0, x, marker))
                ctx.set_paint(axis.label_axis_text_color)
                ctx.draw_text(labels.get(i), x, marker + margin, "center", "top", max_width=step)
            x += step
