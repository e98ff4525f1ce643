from luvatrix_chart.chart import Chart
from luvatrix_chart.config import ChartConfig, SeriesConfig, build_chart, load_chart_config
from luvatrix_chart.context import CanvasState, DrawContext
from luvatrix_chart.errors import ConfigurationError, ContextStateError, PlotDataError
from luvatrix_chart.geometry import Affine, Arc, Ellipse, Line, Path, Polygon, Rect
from luvatrix_chart.legend import Legend
from luvatrix_chart.renderers import (
    AxisStyle,
    ChartRenderer,
    ChartStyle,
    ColumnChartRenderer,
    LineChartRenderer,
    PieChartRenderer,
)
from luvatrix_chart.scales import AxisRange, format_value, generate_value_axis_ticks, value_axis_step
from luvatrix_chart.series import CategoryLabels, DataSeries, SeriesCollection, SeriesFactory
from luvatrix_chart.shadow import ShadowCompositor
from luvatrix_chart.style import FontSpec, LinearGradient, ShadowSpec, Stroke
from luvatrix_chart.text_fit import fit_font_to_width

__all__ = [
    "Affine",
    "Arc",
    "AxisRange",
    "AxisStyle",
    "CanvasState",
    "CategoryLabels",
    "Chart",
    "ChartConfig",
    "ChartRenderer",
    "ChartStyle",
    "ColumnChartRenderer",
    "ConfigurationError",
    "ContextStateError",
    "DataSeries",
    "DrawContext",
    "Ellipse",
    "FontSpec",
    "Legend",
    "Line",
    "LineChartRenderer",
    "LinearGradient",
    "Path",
    "PieChartRenderer",
    "PlotDataError",
    "Polygon",
    "Rect",
    "SeriesCollection",
    "SeriesConfig",
    "SeriesFactory",
    "ShadowCompositor",
    "ShadowSpec",
    "Stroke",
    "build_chart",
    "fit_font_to_width",
    "format_value",
    "generate_value_axis_ticks",
    "load_chart_config",
    "value_axis_step",
]
