from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator

from luvatrix_chart.adapters import normalize_value, normalize_values
from luvatrix_chart.scales import AxisRange
from luvatrix_chart.style import Color, ColorLike, coerce_color


DEFAULT_SERIES_COLOR: Color = (220, 36, 0, 255)

OnChange = Callable[["DataSeries", int, "float | None"], None]


@dataclass(eq=False)
class DataSeries:
    """One named, colored sequence of values; ``None`` marks a missing point."""

    name: str
    values: list[float | None]
    color: Color = DEFAULT_SERIES_COLOR
    on_change: OnChange | None = None

    def __post_init__(self) -> None:
        self.values = normalize_values(self.values, label=f"series {self.name!r}")
        self.color = coerce_color(self.color)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[float | None]:
        return iter(self.values)

    def value_at(self, index: int) -> float | None:
        if index < 0 or index >= len(self.values):
            return None
        return self.values[index]

    def set_value(self, index: int, value: Any) -> None:
        if index < 0 or index >= len(self.values):
            raise IndexError(f"series {self.name!r} has no value at index {index}")
        stored = normalize_value(value, label=f"series {self.name!r} value")
        self.values[index] = stored
        if self.on_change is not None:
            self.on_change(self, index, stored)

    def present_values(self) -> list[float]:
        return [v for v in self.values if v is not None]

    def max_value(self) -> float:
        return max(self.present_values(), default=0.0)

    def min_value(self) -> float:
        return min(self.present_values(), default=0.0)


class SeriesFactory:
    """Builds series and hands out ``<prefix>-<n>`` names for unnamed ones."""

    def __init__(self, prefix: str = "series") -> None:
        self.prefix = prefix
        self._counter = 0

    def next_name(self) -> str:
        self._counter += 1
        return f"{self.prefix}-{self._counter}"

    def create(
        self,
        values: Any,
        name: str | None = None,
        color: ColorLike | None = None,
        on_change: OnChange | None = None,
    ) -> DataSeries:
        return DataSeries(
            name=name if name is not None else self.next_name(),
            values=values,
            color=coerce_color(color) if color is not None else DEFAULT_SERIES_COLOR,
            on_change=on_change,
        )


class SeriesCollection:
    def __init__(self, series: Iterable[DataSeries] = ()) -> None:
        self._series: list[DataSeries] = list(series)

    def __len__(self) -> int:
        return len(self._series)

    def __iter__(self) -> Iterator[DataSeries]:
        return iter(self._series)

    def __getitem__(self, index: int) -> DataSeries:
        return self._series[index]

    def add(self, series: DataSeries) -> DataSeries:
        self._series.append(series)
        return series

    def add_values(self, name: str, values: Any, color: ColorLike | None = None) -> DataSeries:
        return self.add(
            DataSeries(
                name=name,
                values=values,
                color=coerce_color(color) if color is not None else DEFAULT_SERIES_COLOR,
            )
        )

    def clear(self) -> None:
        self._series.clear()

    def _present(self) -> list[float]:
        return [v for s in self._series for v in s.present_values()]

    def max_value(self) -> float:
        return max(self._present(), default=0.0)

    def min_value(self) -> float:
        return min(self._present(), default=0.0)

    def axis_range(self) -> AxisRange:
        return AxisRange(min=self.min_value(), max=self.max_value())

    def max_length(self) -> int:
        return max((len(s) for s in self._series), default=0)

    def min_length(self) -> int:
        return min((len(s) for s in self._series), default=0)

    def first_column_values(self) -> list[float | None]:
        return [s.value_at(0) for s in self._series]

    def sum_of_positives_on_first_column(self) -> float:
        return sum(v for v in self.first_column_values() if v is not None and v > 0)

    def positive_count_on_first_column(self) -> int:
        return sum(1 for v in self.first_column_values() if v is not None and v > 0)

    def longest_name(self) -> str:
        return max((s.name for s in self._series), key=len, default="")


class CategoryLabels:
    """Captions for the shared value slots (one per column index)."""

    def __init__(self, labels: Iterable[str] = ()) -> None:
        self._labels = [str(label) for label in labels]

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def get(self, index: int) -> str | None:
        if index < 0 or index >= len(self._labels):
            return None
        return self._labels[index]

    def longest(self) -> str | None:
        return max(self._labels, key=len, default=None)
