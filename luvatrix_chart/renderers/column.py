from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar

from luvatrix_chart.context import DrawContext
from luvatrix_chart.geometry import Path, Rect
from luvatrix_chart.renderers.base import ChartStyle, widest_text, widest_value
from luvatrix_chart.renderers.cartesian import AxisStyle, prepare_cartesian
from luvatrix_chart.scales import format_value
from luvatrix_chart.series import CategoryLabels, SeriesCollection
from luvatrix_chart.style import WHITE, Paint, Stroke


def _column_axis() -> AxisStyle:
    return AxisStyle(draw_vertical_lines=False)


@dataclass
class ColumnChartRenderer:
    """Grouped vertical columns, one group per label slot and one column per series.

    With a single group the label axis is hidden and ``gap`` separates the
    columns instead of the groups.
    """

    name: ClassVar[str] = "column"

    style: ChartStyle = field(default_factory=ChartStyle)
    axis: AxisStyle = field(default_factory=_column_axis)
    gap: float = 20.0
    column_opacity: float = 1.0
    column_border_color: Paint = WHITE
    column_border_stroke: Stroke = field(default_factory=lambda: Stroke(2.0, cap="square", join="miter"))

    def gap_between_columns(self, groups: int) -> float:
        return self.gap if groups == 1 else 0.0

    def caption_space(self, ctx: DrawContext) -> float:
        """Height taken by the series name and value captions of one column."""
        space = 0.0
        if self.style.series_name_rendering:
            space += ctx.standard_line_height(self.style.label_font) + self.style.label_margin
        if self.style.value_rendering:
            space += ctx.standard_line_height(self.style.value_font) + self.style.value_margin
        return space

    def draw(self, ctx: DrawContext, series: SeriesCollection, labels: CategoryLabels) -> None:
        style = self.style
        groups = series.max_length()
        axis = replace(self.axis, draw_label_axis=False) if groups == 1 else self.axis
        captions = self.caption_space(ctx)
        padding_top = style.padding_top + (captions if series.max_value() > 0 else 0.0)
        padding_bottom = style.padding_bottom + (captions if series.min_value() < 0 else 0.0)
        layout = prepare_cartesian(ctx, style, axis, series, labels, padding_top, padding_bottom)
        per_group = len(series)
        if groups == 0 or per_group == 0:
            return

        with ctx.saved():
            if style.shadows_on:
                ctx.begin_shadowed_drawing()
            width = layout.width
            height = layout.height
            gap_between = self.gap_between_columns(groups)
            group_w = (width - (groups - 1) * self.gap) / groups
            column_w = (group_w - (per_group - 1) * gap_between) / per_group
            half_column_w = column_w / 2.0
            line_w = axis.horizontal_line_stroke_for_zero.width
            positive_clip = Rect(
                -style.padding_left,
                -layout.positive_height - padding_top,
                width + style.padding_left + style.padding_right,
                layout.positive_height + padding_top - line_w,
            )
            negative_clip = Rect(
                -style.padding_left,
                line_w,
                width + style.padding_left + style.padding_right,
                layout.negative_height + padding_bottom - line_w,
            )

            ctx.set_font(style.label_font)
            longest_name = widest_text(ctx, (s.name for s in series))
            if longest_name:
                ctx.adjust_font_size_to_fit_text_in_width(longest_name, column_w)
            name_font = ctx.font
            ctx.set_font(style.value_font)
            longest_value = widest_value(ctx, series, style.decimals)
            if longest_value:
                ctx.adjust_font_size_to_fit_text_in_width(longest_value, column_w)
            value_font = ctx.font
            name_lh = ctx.standard_line_height(name_font)

            for i in range(groups):
                for column_no, data in enumerate(series):
                    value = data.value_at(i)
                    if value is None:
                        continue
                    y = layout.value_to_y(value)
                    x = i * (group_w + self.gap) + (column_w + gap_between) * column_no
                    column = Path().move_to(x, 0.0).line_to(x, y).line_to(x + column_w, y).line_to(x + column_w, 0.0)
                    ctx.set_clip(positive_clip if value >= 0 else negative_clip)
                    ctx.set_paint(data.color, self.column_opacity)
                    ctx.fill(column)
                    ctx.set_stroke(self.column_border_stroke)
                    ctx.set_paint(self.column_border_color)
                    ctx.draw(column)

                    if style.series_name_rendering:
                        ctx.set_font(name_font)
                        ctx.set_paint(data.color)
                        y, v_align = _step_out(y, style.label_margin)
                        ctx.draw_text(data.name, x + half_column_w, y, "center", v_align)
                        y = y - name_lh if y < 0 else y + name_lh
                    if style.value_rendering:
                        ctx.set_font(value_font)
                        ctx.set_paint(style.value_color)
                        y, v_align = _step_out(y, style.value_margin)
                        ctx.draw_text(format_value(value, style.decimals), x + half_column_w, y, "center", v_align)

            if style.shadows_on:
                ctx.end_shadowed_drawing()


def _step_out(y: float, margin: float) -> tuple[float, str]:
    """Move away from the column end: up above positive columns, down below negative ones."""
    if y < 0:
        return (y - margin, "bottom")
    return (y + margin, "top")
