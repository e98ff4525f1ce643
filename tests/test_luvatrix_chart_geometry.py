from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_chart.geometry import Affine, Arc, ClipRegion, Ellipse, Line, Path, Polygon, Rect, has_extent, shape_area
from luvatrix_chart.raster.blur import box_blur
from luvatrix_chart.raster.coverage import polygon_coverage, stroke_polygons


class AffineTests(unittest.TestCase):
    def test_composition_applies_right_operand_first(self) -> None:
        m = Affine.translation(10.0, 0.0) @ Affine.scaling(2.0, 2.0)
        self.assertEqual(m.apply_point(1.0, 1.0), (12.0, 2.0))

    def test_positive_rotation_turns_clockwise_on_screen(self) -> None:
        x, y = Affine.rotation(math.pi / 2).apply_point(1.0, 0.0)
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, 1.0)

    def test_rotation_about_a_pivot_keeps_the_pivot(self) -> None:
        x, y = Affine.rotation(1.2, 5.0, 7.0).apply_point(5.0, 7.0)
        self.assertAlmostEqual(x, 5.0)
        self.assertAlmostEqual(y, 7.0)

    def test_inverse_round_trips_points(self) -> None:
        m = Affine.translation(3.0, -4.0) @ Affine.rotation(0.7) @ Affine.scaling(2.0, 0.5)
        pts = np.asarray([(0.0, 0.0), (1.5, -2.0), (10.0, 3.0)])
        back = m.inverse().apply(m.apply(pts))
        np.testing.assert_allclose(back, pts, atol=1e-9)

    def test_singular_inverse_raises(self) -> None:
        with self.assertRaises(ValueError):
            Affine.scaling(0.0, 1.0).inverse()

    def test_scale_factor(self) -> None:
        self.assertAlmostEqual(Affine.scaling(2.0, 8.0).scale_factor, 4.0)
        self.assertAlmostEqual(Affine.rotation(0.3).scale_factor, 1.0)


class ShapeTests(unittest.TestCase):
    def test_rect_area_and_extent(self) -> None:
        self.assertAlmostEqual(shape_area(Rect(0.0, 0.0, 4.0, 3.0)), 12.0)
        self.assertEqual(shape_area(Rect(0.0, 0.0, 0.0, 3.0)), 0.0)
        self.assertTrue(has_extent(Line(0.0, 0.0, 5.0, 0.0)))
        self.assertFalse(has_extent(Line(2.0, 2.0, 2.0, 2.0)))

    def test_ellipse_area_approximates_pi_r_squared(self) -> None:
        area = shape_area(Ellipse(0.0, 0.0, 20.0, 20.0))
        self.assertAlmostEqual(area, math.pi * 100.0, delta=3.0)

    def test_pie_arc_includes_center(self) -> None:
        wedge = Arc(0.0, 0.0, 10.0, 0.0, 90.0, kind="pie")
        part = wedge.subpaths()[0]
        self.assertTrue(part.closed)
        np.testing.assert_allclose(part.points[0], (0.0, 0.0))
        # counter-clockwise on screen: 90 degrees ends straight up
        np.testing.assert_allclose(part.points[-1], (0.0, -10.0), atol=1e-9)
        self.assertAlmostEqual(shape_area(wedge), math.pi * 25.0, delta=1.0)

    def test_path_move_to_starts_a_new_subpath(self) -> None:
        path = Path().move_to(0.0, 0.0).line_to(5.0, 0.0).move_to(10.0, 0.0).line_to(15.0, 5.0)
        parts = path.subpaths()
        self.assertEqual(len(parts), 2)
        self.assertFalse(parts[0].closed)

    def test_polygon_points_are_normalized(self) -> None:
        poly = Polygon([(0, 0), (4, 0), (4, 4)])
        self.assertEqual(poly.points[1], (4.0, 0.0))
        self.assertAlmostEqual(shape_area(poly), 8.0)

    def test_clip_region_is_hashable_and_transformable(self) -> None:
        region = ClipRegion.from_shape(Rect(0.0, 0.0, 2.0, 2.0), Affine.translation(1.0, 1.0))
        self.assertEqual(region.polygons[0][0], (1.0, 1.0))
        moved = region.transformed(Affine.translation(3.0, 0.0))
        self.assertEqual(moved.polygons[0][0], (4.0, 1.0))
        self.assertEqual(hash(region), hash(ClipRegion.from_shape(Rect(0.0, 0.0, 2.0, 2.0), Affine.translation(1.0, 1.0))))


class RasterTests(unittest.TestCase):
    def test_polygon_coverage_is_antialiased_on_fractional_edges(self) -> None:
        square = np.asarray([(1.5, 1.0), (6.5, 1.0), (6.5, 6.0), (1.5, 6.0)])
        x0, y0, cov = polygon_coverage([square], 10, 10)
        self.assertEqual((x0, y0), (1, 1))
        self.assertAlmostEqual(float(cov[2, 3]), 1.0)
        self.assertTrue(0.0 < float(cov[2, 0]) < 1.0)

    def test_polygon_coverage_off_canvas_is_none(self) -> None:
        square = np.asarray([(-10.0, -10.0), (-5.0, -10.0), (-5.0, -5.0)])
        self.assertIsNone(polygon_coverage([square], 10, 10))

    def test_dashed_stroke_splits_into_pieces(self) -> None:
        line = np.asarray([(0.0, 5.0), (20.0, 5.0)])
        solid = stroke_polygons([(line, False)], 1.0, cap="butt")
        dashed = stroke_polygons([(line, False)], 1.0, cap="butt", dash=(4.0, 4.0))
        self.assertGreater(len(dashed), len(solid))
        _, _, cov = polygon_coverage(dashed, 30, 10)
        self.assertTrue(np.any(cov[:, 5] < 0.5))

    def test_box_blur_spreads_and_preserves_color(self) -> None:
        src = np.zeros((11, 11, 4), dtype=np.uint8)
        src[5, 5] = (200, 10, 10, 255)
        out = box_blur(src, 1)
        self.assertEqual(int(out[5, 5, 3]), round(255 / 9))
        self.assertEqual(int(out[4, 4, 3]), round(255 / 9))
        self.assertEqual(int(out[3, 3, 3]), 0)
        self.assertEqual(tuple(int(v) for v in out[4, 6, :3]), (200, 10, 10))

    def test_box_blur_rejects_negative_radius(self) -> None:
        with self.assertRaises(ValueError):
            box_blur(np.zeros((2, 2, 4), dtype=np.uint8), -1)


if __name__ == "__main__":
    unittest.main()
