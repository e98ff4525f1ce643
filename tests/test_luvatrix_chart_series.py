from __future__ import annotations

import importlib.util
import math
import unittest

import numpy as np
import torch

from luvatrix_chart import PlotDataError
from luvatrix_chart.adapters.normalize import normalize_value, normalize_values
from luvatrix_chart.series import CategoryLabels, DataSeries, SeriesCollection, SeriesFactory

_HAS_PANDAS = importlib.util.find_spec("pandas") is not None


class NormalizeTests(unittest.TestCase):
    def test_list_with_missing_points(self) -> None:
        self.assertEqual(normalize_values([1, None, 2.5, float("nan"), math.inf]), [1.0, None, 2.5, None, None])

    def test_numpy_and_torch_inputs(self) -> None:
        self.assertEqual(normalize_values(np.asarray([1, 2, 3], dtype=np.int32)), [1.0, 2.0, 3.0])
        self.assertEqual(normalize_values(torch.tensor([0.5, float("nan")])), [0.5, None])

    @unittest.skipUnless(_HAS_PANDAS, "pandas not installed")
    def test_pandas_series_input(self) -> None:
        import pandas as pd

        values = pd.Series([1.0, None, 3.0], dtype="Float64")
        self.assertEqual(normalize_values(values), [1.0, None, 3.0])

    def test_rejects_text_and_nested_input(self) -> None:
        with self.assertRaises(PlotDataError):
            normalize_values(["1", "abc"])
        with self.assertRaises(PlotDataError):
            normalize_values("123")
        with self.assertRaises(PlotDataError):
            normalize_values(np.zeros((2, 2)))
        with self.assertRaises(PlotDataError):
            normalize_value(object())

    def test_single_value(self) -> None:
        self.assertIsNone(normalize_value(None))
        self.assertIsNone(normalize_value(float("nan")))
        self.assertEqual(normalize_value(np.float32(2.0)), 2.0)


class DataSeriesTests(unittest.TestCase):
    def test_out_of_range_access_returns_none(self) -> None:
        s = DataSeries("a", [1.0, 2.0])
        self.assertIsNone(s.value_at(2))
        self.assertIsNone(s.value_at(-1))
        self.assertEqual(s.value_at(1), 2.0)

    def test_set_value_notifies_callback(self) -> None:
        seen = []
        s = DataSeries("a", [1.0, 2.0], on_change=lambda series, i, v: seen.append((series.name, i, v)))
        s.set_value(1, 5)
        s.set_value(0, None)
        self.assertEqual(seen, [("a", 1, 5.0), ("a", 0, None)])
        self.assertEqual(s.values, [None, 5.0])

    def test_set_value_out_of_range_raises(self) -> None:
        s = DataSeries("a", [1.0])
        with self.assertRaises(IndexError):
            s.set_value(3, 1.0)

    def test_color_is_normalized(self) -> None:
        self.assertEqual(DataSeries("a", [], color=(1, 2, 3)).color, (1, 2, 3, 255))
        self.assertEqual(DataSeries("a", [], color="#FF2400").color, (255, 36, 0, 255))

    def test_factory_names_are_owned_by_the_factory(self) -> None:
        first = SeriesFactory()
        second = SeriesFactory(prefix="s")
        self.assertEqual(first.create([1]).name, "series-1")
        self.assertEqual(first.create([1]).name, "series-2")
        self.assertEqual(second.create([1]).name, "s-1")
        self.assertEqual(first.create([1], name="named").name, "named")


class SeriesCollectionTests(unittest.TestCase):
    def _collection(self) -> SeriesCollection:
        c = SeriesCollection()
        c.add_values("IE", [46.0, None, -3.0])
        c.add_values("Firefox", [30.68, 30.37])
        c.add_values("Opera", [None])
        return c

    def test_extremes_skip_missing_points(self) -> None:
        c = self._collection()
        self.assertEqual(c.max_value(), 46.0)
        self.assertEqual(c.min_value(), -3.0)
        self.assertEqual(c.axis_range().max, 46.0)

    def test_lengths_and_names(self) -> None:
        c = self._collection()
        self.assertEqual(c.max_length(), 3)
        self.assertEqual(c.min_length(), 1)
        self.assertEqual(c.longest_name(), "Firefox")

    def test_first_column_statistics(self) -> None:
        c = self._collection()
        self.assertEqual(c.first_column_values(), [46.0, 30.68, None])
        self.assertAlmostEqual(c.sum_of_positives_on_first_column(), 76.68)
        self.assertEqual(c.positive_count_on_first_column(), 2)

    def test_empty_collection_defaults_to_zero(self) -> None:
        c = SeriesCollection()
        self.assertEqual((c.min_value(), c.max_value(), c.max_length()), (0.0, 0.0, 0))
        c = self._collection()
        c.clear()
        self.assertEqual(len(c), 0)

    def test_labels(self) -> None:
        labels = CategoryLabels(["Jan", "February", "Mar"])
        self.assertEqual(labels.get(1), "February")
        self.assertIsNone(labels.get(5))
        self.assertEqual(labels.longest(), "February")
        self.assertIsNone(CategoryLabels().longest())


if __name__ == "__main__":
    unittest.main()
