from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math
from typing import Iterable, Sequence

from luvatrix_chart.errors import ConfigurationError


DEFAULT_DECIMALS = 2


@dataclass(frozen=True)
class AxisRange:
    """Value-axis extent; any sign combination is allowed."""

    min: float
    max: float

    @classmethod
    def from_values(cls, values: Iterable[float | None]) -> "AxisRange":
        present = [float(v) for v in values if v is not None and math.isfinite(v)]
        if not present:
            return cls(min=0.0, max=0.0)
        return cls(min=min(present), max=max(present))

    @property
    def data_distance(self) -> float:
        return data_distance(self.max, self.min)

    @property
    def central_value(self) -> float:
        return central_value(self.max, self.min)

    def positive_area_size(self, total: float) -> float:
        return positive_area_size(self, total)

    def negative_area_size(self, total: float) -> float:
        return negative_area_size(self, total)

    def ticks(self, segments: int) -> list[float]:
        return generate_value_axis_ticks(self, segments)

    def step(self, segments: int) -> float:
        return value_axis_step(self, segments)


def data_distance(max_value: float, min_value: float) -> float:
    if max_value < 0:
        return -min_value
    if min_value > 0:
        return max_value
    return max_value - min_value


def central_value(max_value: float, min_value: float) -> float:
    if max_value < 0:
        return min_value / 2.0
    if min_value > 0:
        return max_value / 2.0
    return max_value / 2.0 + min_value / 2.0


def positive_area_size(axis_range: AxisRange, total: float) -> float:
    """Pixels of ``total`` that lie above the zero line."""
    if axis_range.max < 0:
        return 0.0
    if axis_range.min < 0 < axis_range.max:
        dd = axis_range.data_distance
        return total - (-axis_range.min) * total / dd
    return float(total)


def negative_area_size(axis_range: AxisRange, total: float) -> float:
    """Pixels of ``total`` that lie below the zero line."""
    if axis_range.max < 0:
        return float(total)
    if axis_range.min < 0 < axis_range.max:
        return total - positive_area_size(axis_range, total)
    return 0.0


def value_to_pixels(value: float, dd: float, total: float) -> float:
    return value * total / dd


def value_axis_step(axis_range: AxisRange, segments: int) -> float:
    """Data-space distance between neighbouring ticks used for layout."""
    n = _check_segments(segments)
    dd = axis_range.data_distance
    if axis_range.max <= 0 or axis_range.min >= 0:
        return dd / (n + 2)
    count = int((n + 2) * axis_range.max / dd)
    if count == 0:
        return axis_range.max
    return axis_range.max / count


def generate_value_axis_ticks(axis_range: AxisRange, segments: int) -> list[float]:
    """Tick values in ascending order.

    One-signed ranges are cut into ``N + 2`` equal steps from the far end to
    zero. Mixed ranges share one step sized from the positive part; the last
    tick on each side snaps to the range end when it overshoots by no more
    than half a step.
    """
    n = _check_segments(segments)
    lo = float(axis_range.min)
    hi = float(axis_range.max)
    dd = data_distance(hi, lo)
    ticks: list[float] = []

    if hi <= 0:
        step = dd / (n + 2)
        value = lo
        while value < 0 and step > 0:
            ticks.append(value)
            value += step
        ticks.append(0.0)
        return ticks

    if lo >= 0:
        step = dd / (n + 2)
        value = 0.0
        while value < hi and step > 0:
            ticks.append(value)
            value += step
        ticks.append(hi)
        return ticks

    pos_seg_n = math.floor(n * hi / dd)
    if pos_seg_n == 0:
        return [lo, 0.0, hi]
    step = hi / pos_seg_n
    threshold = step / 2.0

    negatives: list[float] = []
    value = -step
    while value > lo:
        negatives.append(value)
        value -= step
    if abs(lo - value) <= threshold:
        negatives.append(lo)
    negatives.reverse()

    positives: list[float] = []
    value = 0.0
    while value < hi:
        positives.append(value)
        value += step
    if abs(value - hi) <= threshold:
        positives.append(hi)

    return negatives + positives


def format_value(value: float | None, decimals: int = DEFAULT_DECIMALS) -> str:
    """At most ``decimals`` fraction digits, trailing zeros trimmed."""
    if value is None:
        return ""
    if not math.isfinite(value):
        return str(value)
    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks(ticks: Sequence[float], decimals: int = DEFAULT_DECIMALS) -> list[str]:
    return [format_value(float(v), decimals) for v in ticks]


def _check_segments(segments: int) -> int:
    if int(segments) != segments or segments < 1:
        raise ConfigurationError(f"value axis segments must be an integer >= 1, got {segments!r}")
    return int(segments)
