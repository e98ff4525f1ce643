from .blur import box_blur
from .canvas import blend_coverage, composite, erase_coverage, new_canvas
from .coverage import crop_coverage, full_coverage, polygon_coverage, stroke_polygons
from .draw_text import font_metrics, ink_bounds, load_font, text_advance, text_coverage

__all__ = [
    "blend_coverage",
    "box_blur",
    "composite",
    "crop_coverage",
    "erase_coverage",
    "font_metrics",
    "full_coverage",
    "ink_bounds",
    "load_font",
    "new_canvas",
    "polygon_coverage",
    "stroke_polygons",
    "text_advance",
    "text_coverage",
]
