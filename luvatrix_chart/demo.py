from __future__ import annotations

from luvatrix_chart.chart import Chart
from luvatrix_chart.renderers import RENDERERS, PieChartRenderer
from luvatrix_chart.errors import ConfigurationError

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Desktop browser market share, 2011 (percent).
BROWSER_SHARE_2011 = (
    ("IE", "#443769", (46, 45.44, 45.11, 44.52, 43.87, 43.58, 42.45, 41.89, 41.66, 40.18, 40.63, 38.65)),
    ("Firefox", "#FF2400", (30.68, 30.37, 29.98, 29.67, 29.29, 28.34, 27.95, 27.49, 26.79, 26.39, 25.23, 25.27)),
    ("Chrome", "#4A83BD", (15.68, 16.54, 17.37, 18.29, 19.36, 20.65, 22.14, 23.16, 23.61, 25, 25.69, 27.27)),
    ("Safari", "#FF8300", (5.09, 5.08, 5.02, 5.04, 5.01, 5.07, 5.17, 5.19, 5.6, 5.93, 5.92, 6.08)),
    ("Opera", "#FF0096", (2, 2, 1.97, 1.91, 1.84, 1.74, 1.66, 1.67, 1.72, 1.81, 1.82, 1.98)),
    ("Other", "#236A14", (0.55, 0.55, 0.54, 0.57, 0.63, 0.61, 0.63, 0.61, 0.62, 0.69, 0.71, 0.75)),
)


def demo_chart(kind: str, width: int = 600, height: int = 500) -> Chart:
    """Browser market share chart; pie demos show January only."""
    if kind not in RENDERERS:
        raise ConfigurationError(f"unknown renderer {kind!r}; expected one of {sorted(RENDERERS)}")
    renderer = RENDERERS[kind]()
    chart = Chart(width=width, height=height, renderer=renderer)
    if isinstance(renderer, PieChartRenderer):
        chart.title = "Desktop Browser Market Share"
        chart.subtitle = "January 2011"
        renderer.style.series_name_rendering = True
        renderer.style.value_rendering = True
        for name, color, values in BROWSER_SHARE_2011:
            chart.add_series(name, values[:1], color)
        return chart
    chart.title = "Desktop Browser Market Share 2011"
    renderer.axis.value_axis_caption = "Market share (%)"
    renderer.axis.label_axis_caption = "Month"
    chart.set_labels(MONTHS)
    for name, color, values in BROWSER_SHARE_2011:
        chart.add_series(name, values, color)
    return chart
