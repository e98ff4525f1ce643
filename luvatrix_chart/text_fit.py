from __future__ import annotations

from typing import Callable

from luvatrix_chart.style import FontSpec


FONT_SIZE_STEP = 0.5

Measure = Callable[[str, FontSpec], float]


def fit_font_to_width(font: FontSpec, text: str, width_limit: float, measure: Measure) -> FontSpec:
    """Shrink ``font`` in half-point steps until ``text`` is at most ``width_limit`` wide.

    A negative limit leaves the font alone. There is no lower bound on the
    size: ``measure`` must report ``0`` for sizes at or below zero, which is
    what ends the loop for limits that no positive size can meet.
    """
    if width_limit < 0:
        return font
    fitted = font
    while measure(text, fitted) > width_limit:
        fitted = fitted.derive(fitted.size - FONT_SIZE_STEP)
    return fitted
