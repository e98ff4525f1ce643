from .base import ChartRenderer, ChartStyle, draw_background
from .cartesian import AxisStyle, CartesianLayout, prepare_cartesian
from .column import ColumnChartRenderer
from .line import LineChartRenderer
from .pie import PieChartRenderer

RENDERERS = {
    ColumnChartRenderer.name: ColumnChartRenderer,
    LineChartRenderer.name: LineChartRenderer,
    PieChartRenderer.name: PieChartRenderer,
}

__all__ = [
    "AxisStyle",
    "CartesianLayout",
    "ChartRenderer",
    "ChartStyle",
    "ColumnChartRenderer",
    "LineChartRenderer",
    "PieChartRenderer",
    "RENDERERS",
    "draw_background",
    "prepare_cartesian",
]
