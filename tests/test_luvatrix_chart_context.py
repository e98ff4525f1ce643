from __future__ import annotations

import math
import unittest

import numpy as np

from luvatrix_chart.context import DrawContext
from luvatrix_chart.errors import ContextStateError
from luvatrix_chart.geometry import Affine, Ellipse, Line, Rect
from luvatrix_chart.raster.blur import box_blur
from luvatrix_chart.raster.canvas import composite, new_canvas
from luvatrix_chart.shadow import ShadowCompositor
from luvatrix_chart.style import FontSpec, LinearGradient, ShadowSpec, Stroke
from luvatrix_chart.text_fit import fit_font_to_width

RED = (255, 0, 0, 255)


def _ink_columns(frame: np.ndarray) -> np.ndarray:
    return np.nonzero(frame[:, :, 3].max(axis=0) > 0)[0]


def _ink_rows(frame: np.ndarray) -> np.ndarray:
    return np.nonzero(frame[:, :, 3].max(axis=1) > 0)[0]


class StateStackTests(unittest.TestCase):
    def test_restore_brings_back_saved_paint_and_transform(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_paint(RED)
        ctx.save()
        ctx.set_paint((0, 0, 255))
        ctx.translate(5.0, 5.0)
        self.assertEqual(ctx.depth, 2)
        ctx.restore()
        self.assertEqual(ctx.paint, RED)
        self.assertEqual(ctx.current_transform, Affine.identity())
        self.assertEqual(ctx.depth, 1)

    def test_saved_block_restores_on_exit(self) -> None:
        ctx = DrawContext(20, 20)
        with ctx.saved():
            ctx.set_stroke(Stroke(width=3.0))
            ctx.rotate(math.pi / 2)
        self.assertEqual(ctx.stroke, Stroke())
        self.assertEqual(ctx.current_transform, Affine.identity())

    def test_restore_past_root_is_rejected(self) -> None:
        ctx = DrawContext(10, 10)
        with self.assertRaises(ContextStateError):
            ctx.restore()

    def test_translate_moves_subsequent_drawing(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_paint(RED)
        ctx.translate(10.0, 10.0)
        ctx.fill(Rect(0.0, 0.0, 6.0, 6.0))
        frame = ctx.surface
        self.assertEqual(int(frame[13, 13, 3]), 255)
        self.assertEqual(tuple(int(v) for v in frame[13, 13, :3]), (255, 0, 0))
        self.assertEqual(int(frame[3, 3, 3]), 0)

    def test_resize_changes_layout_extents_only(self) -> None:
        ctx = DrawContext(40, 30)
        ctx.resize(12.5, -3.0)
        self.assertEqual((ctx.width, ctx.height), (12.5, 0.0))
        self.assertEqual((ctx.original_width, ctx.original_height), (40, 30))
        self.assertEqual(ctx.surface.shape, (30, 40, 4))


class ClipTests(unittest.TestCase):
    def test_set_clip_replaces_instead_of_intersecting(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_clip(Rect(0.0, 0.0, 10.0, 20.0))
        ctx.set_clip(Rect(10.0, 0.0, 10.0, 20.0))
        ctx.set_paint(RED)
        ctx.fill(Rect(0.0, 0.0, 20.0, 20.0))
        frame = ctx.surface
        self.assertEqual(int(frame[10, 4, 3]), 0)
        self.assertEqual(int(frame[10, 15, 3]), 255)

    def test_clip_is_fixed_in_device_space(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_clip(Rect(0.0, 0.0, 8.0, 8.0))
        ctx.translate(4.0, 4.0)
        ctx.set_paint(RED)
        ctx.fill(Rect(0.0, 0.0, 10.0, 10.0))
        frame = ctx.surface
        self.assertEqual(int(frame[6, 6, 3]), 255)
        self.assertEqual(int(frame[12, 12, 3]), 0)

    def test_clear_clip_and_restore(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_clip(Rect(0.0, 0.0, 5.0, 5.0))
        ctx.save()
        ctx.set_clip(None)
        self.assertIsNone(ctx.clip)
        ctx.restore()
        self.assertIsNotNone(ctx.clip)
        ctx.reset_clip()
        self.assertIsNone(ctx.clip)

    def test_reset_clip_restores_the_construction_region_after_a_translate(self) -> None:
        ctx = DrawContext(20, 20, clip=Rect(0.0, 0.0, 10.0, 10.0))
        ctx.translate(8.0, 8.0)
        ctx.set_clip(Rect(0.0, 0.0, 12.0, 12.0))
        ctx.reset_clip()
        ctx.set_paint(RED)
        ctx.fill(Rect(-8.0, -8.0, 20.0, 20.0))
        frame = ctx.surface
        self.assertEqual(int(frame[5, 5, 3]), 255)
        self.assertEqual(int(frame[15, 15, 3]), 0)
        self.assertEqual(int(frame[5, 15, 3]), 0)


class PaintTests(unittest.TestCase):
    def test_opacity_replaces_alpha(self) -> None:
        ctx = DrawContext(10, 10)
        ctx.set_paint((255, 0, 0), 0.5)
        self.assertEqual(ctx.paint, (255, 0, 0, 128))
        ctx.set_paint((0, 255, 0, 10), 1.0)
        self.assertEqual(ctx.paint, (0, 255, 0, 255))

    def test_opacity_with_gradient_is_rejected(self) -> None:
        ctx = DrawContext(10, 10)
        gradient = LinearGradient(0.0, 0.0, (0, 0, 0), 0.0, 10.0, (255, 255, 255))
        with self.assertRaises(ValueError):
            ctx.set_paint(gradient, 0.5)

    def test_half_opacity_fill_blends_with_background(self) -> None:
        ctx = DrawContext(10, 10, background=(255, 255, 255, 255))
        ctx.set_paint((0, 0, 0), 0.5)
        ctx.fill(Rect(0.0, 0.0, 10.0, 10.0))
        pixel = ctx.surface[5, 5]
        self.assertTrue(all(abs(int(v) - 127) <= 1 for v in pixel[:3]))
        self.assertEqual(int(pixel[3]), 255)

    def test_gradient_runs_between_its_points(self) -> None:
        ctx = DrawContext(10, 40)
        ctx.set_paint(LinearGradient(0.0, 0.0, (0, 0, 0), 0.0, 40.0, (255, 255, 255)))
        ctx.fill(Rect(0.0, 0.0, 10.0, 40.0))
        frame = ctx.surface
        self.assertLess(int(frame[2, 5, 0]), int(frame[20, 5, 0]))
        self.assertLess(int(frame[20, 5, 0]), int(frame[37, 5, 0]))

    def test_erase_clears_alpha(self) -> None:
        ctx = DrawContext(20, 20, background=(0, 0, 255, 255))
        ctx.erase(Rect(5.0, 5.0, 10.0, 10.0))
        self.assertEqual(int(ctx.surface[10, 10, 3]), 0)
        self.assertEqual(int(ctx.surface[1, 1, 3]), 255)

    def test_stroked_line_is_drawn(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_stroke(Stroke(width=4.0, cap="butt"))
        ctx.draw(Line(2.0, 10.0, 18.0, 10.0))
        self.assertEqual(int(ctx.surface[10, 10, 3]), 255)
        self.assertEqual(int(ctx.surface[3, 10, 3]), 0)


class TextTests(unittest.TestCase):
    def test_center_alignment_centers_ink_on_anchor(self) -> None:
        ctx = DrawContext(120, 40)
        ctx.set_font(FontSpec(size=16.0))
        ctx.draw_text("Hello", 60.0, 25.0, "center", "baseline")
        cols = _ink_columns(ctx.surface)
        self.assertGreater(cols.size, 0)
        self.assertLessEqual(abs((cols[0] + cols[-1]) / 2.0 - 60.0), 3.0)

    def test_right_alignment_ends_at_anchor(self) -> None:
        ctx = DrawContext(120, 40)
        ctx.set_font(FontSpec(size=16.0))
        ctx.draw_text("Hello", 80.0, 25.0, "right", "baseline")
        cols = _ink_columns(ctx.surface)
        self.assertLessEqual(cols[-1], 81)
        self.assertGreaterEqual(cols[-1], 74)

    def test_top_alignment_puts_ink_below_anchor(self) -> None:
        ctx = DrawContext(120, 60)
        ctx.set_font(FontSpec(size=16.0))
        ctx.draw_text("Hello", 10.0, 20.0, "left", "top")
        rows = _ink_rows(ctx.surface)
        self.assertGreaterEqual(rows[0], 19)
        self.assertLessEqual(rows[0], 21)

    def test_unknown_alignment_is_rejected(self) -> None:
        ctx = DrawContext(20, 20)
        with self.assertRaises(ValueError):
            ctx.draw_text("x", 0.0, 0.0, "middle")
        with self.assertRaises(ValueError):
            ctx.draw_text("x", 0.0, 0.0, "left", "center")

    def test_draw_text_with_max_width_keeps_the_font(self) -> None:
        ctx = DrawContext(200, 40)
        font = FontSpec(size=20.0)
        ctx.set_font(font)
        ctx.draw_text("a rather long caption", 0.0, 30.0, max_width=40.0)
        self.assertEqual(ctx.font, font)
        cols = _ink_columns(ctx.surface)
        self.assertLessEqual(cols[-1], 44)

    def test_adjust_font_size_keeps_the_fitted_font(self) -> None:
        ctx = DrawContext(200, 40)
        ctx.set_font(FontSpec(size=20.0))
        fitted = ctx.adjust_font_size_to_fit_text_in_width("a rather long caption", 50.0)
        self.assertEqual(ctx.font, fitted)
        self.assertLess(fitted.size, 20.0)
        self.assertLessEqual(ctx.string_width("a rather long caption"), 50.0)

    def test_line_height_of_missing_text_is_zero(self) -> None:
        ctx = DrawContext(20, 20)
        self.assertEqual(ctx.line_height(None), 0.0)
        self.assertGreater(ctx.line_height("Ag"), 0.0)
        self.assertEqual(ctx.string_width(""), 0.0)
        self.assertEqual(ctx.widest_line([]), 0.0)


class TextFitterTests(unittest.TestCase):
    @staticmethod
    def _measure(text: str, font: FontSpec) -> float:
        return len(text) * font.size * 0.5 if font.size > 0 else 0.0

    def test_shrinks_in_half_point_steps(self) -> None:
        fitted = fit_font_to_width(FontSpec(size=12.0), "abcd", 10.0, self._measure)
        self.assertEqual(fitted.size, 5.0)

    def test_fitting_twice_is_a_no_op(self) -> None:
        once = fit_font_to_width(FontSpec(size=12.0), "abcdef", 17.0, self._measure)
        twice = fit_font_to_width(once, "abcdef", 17.0, self._measure)
        self.assertEqual(once, twice)

    def test_negative_limit_disables_fitting(self) -> None:
        font = FontSpec(size=12.0)
        self.assertIs(fit_font_to_width(font, "abcd", -1.0, self._measure), font)

    def test_zero_limit_shrinks_to_zero_size(self) -> None:
        fitted = fit_font_to_width(FontSpec(size=3.0), "abcd", 0.0, self._measure)
        self.assertEqual(fitted.size, 0.0)


class ShadowPassTests(unittest.TestCase):
    def test_shadowed_circle_matches_blurred_offset_copy_under_sharp_shape(self) -> None:
        spec = ShadowSpec(offset_x=3.0, offset_y=0.0, blur_radius=2, paint=(0, 0, 0, 128))
        circle = Ellipse(10.0, 8.0, 14.0, 14.0)

        ctx = DrawContext(40, 30)
        ctx.shadow = spec
        ctx.set_paint(RED)
        ctx.begin_shadowed_drawing()
        ctx.fill(circle)
        ctx.end_shadowed_drawing()

        shadow_ctx = DrawContext(40, 30)
        shadow_ctx.set_paint(spec.paint)
        shadow_ctx.translate(3.0, 0.0)
        shadow_ctx.fill(circle)
        content_ctx = DrawContext(40, 30)
        content_ctx.set_paint(RED)
        content_ctx.fill(circle)
        expected = new_canvas(40, 30)
        composite(expected, box_blur(shadow_ctx.surface, 2))
        composite(expected, content_ctx.surface)

        diff = np.abs(ctx.surface.astype(np.int16) - expected.astype(np.int16))
        self.assertLessEqual(int(diff.max()), 1)
        # shadow shows to the right of the circle only
        self.assertGreater(int(ctx.surface[15, 26, 3]), 0)
        self.assertEqual(int(ctx.surface[15, 4, 3]), 0)

    def test_pass_composites_at_translated_origin(self) -> None:
        ctx = DrawContext(40, 30)
        ctx.shadow = ShadowSpec(offset_x=0.0, offset_y=4.0, blur_radius=0)
        ctx.translate(5.0, 5.0)
        ctx.set_paint(RED)
        with ctx.shadowed_drawing():
            ctx.fill(Rect(0.0, 0.0, 10.0, 10.0))
        frame = ctx.surface
        self.assertEqual(tuple(int(v) for v in frame[10, 10]), RED)
        # below the square only the shadow lands
        self.assertEqual(tuple(int(v) for v in frame[17, 10, :3]), (0, 0, 0))
        self.assertGreater(int(frame[17, 10, 3]), 0)

    def _pass_and_direct(self, setup) -> tuple[np.ndarray, np.ndarray]:
        frames = []
        for shadowed in (True, False):
            ctx = DrawContext(60, 60)
            ctx.shadow = ShadowSpec(offset_x=0.0, offset_y=0.0, blur_radius=0, paint=(0, 0, 0, 0))
            setup(ctx)
            ctx.set_paint(RED)
            if shadowed:
                with ctx.shadowed_drawing():
                    ctx.fill(Rect(0.0, 0.0, 10.0, 10.0))
            else:
                ctx.fill(Rect(0.0, 0.0, 10.0, 10.0))
            frames.append(ctx.surface)
        return frames[0], frames[1]

    def test_pass_under_scale_lands_where_drawn(self) -> None:
        def setup(ctx: DrawContext) -> None:
            ctx.translate(10.0, 10.0)
            ctx.scale(2.0, 2.0)

        shadowed, direct = self._pass_and_direct(setup)
        np.testing.assert_array_equal(_ink_columns(shadowed), _ink_columns(direct))
        np.testing.assert_array_equal(_ink_rows(shadowed), _ink_rows(direct))
        self.assertEqual((int(_ink_columns(direct)[0]), int(_ink_rows(direct)[0])), (10, 10))
        self.assertEqual(tuple(int(v) for v in shadowed[20, 20]), RED)

    def test_pass_under_rotation_lands_where_drawn(self) -> None:
        def setup(ctx: DrawContext) -> None:
            ctx.translate(30.0, 30.0)
            ctx.rotate(math.pi / 2)

        shadowed, direct = self._pass_and_direct(setup)
        self.assertGreater(_ink_columns(direct).size, 0)
        np.testing.assert_array_equal(_ink_columns(shadowed), _ink_columns(direct))
        np.testing.assert_array_equal(_ink_rows(shadowed), _ink_rows(direct))
        self.assertEqual(tuple(int(v) for v in shadowed[35, 25]), RED)

    def test_shadow_offset_follows_the_scale_at_begin(self) -> None:
        ctx = DrawContext(60, 60)
        ctx.shadow = ShadowSpec(offset_x=0.0, offset_y=4.0, blur_radius=0, paint=(0, 0, 0, 255))
        ctx.translate(10.0, 10.0)
        ctx.scale(2.0, 2.0)
        ctx.set_paint(RED)
        with ctx.shadowed_drawing():
            ctx.fill(Rect(0.0, 0.0, 10.0, 10.0))
        frame = ctx.surface
        self.assertEqual(tuple(int(v) for v in frame[20, 20]), RED)
        self.assertEqual(tuple(int(v) for v in frame[34, 20]), (0, 0, 0, 255))
        self.assertEqual(int(frame[39, 20, 3]), 0)

    def test_restore_cannot_pop_the_pass_frame(self) -> None:
        ctx = DrawContext(20, 20)
        depth = ctx.depth
        ctx.begin_shadowed_drawing()
        with ctx.saved():
            ctx.translate(1.0, 1.0)
        with self.assertRaises(ContextStateError):
            ctx.restore()
        ctx.end_shadowed_drawing()
        self.assertEqual(ctx.depth, depth)
        self.assertFalse(ctx.shadow_pass_active)

    def test_end_drops_frames_left_open_inside_the_pass(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_paint(RED)
        ctx.begin_shadowed_drawing()
        ctx.save()
        ctx.save()
        ctx.set_paint((0, 0, 255))
        ctx.end_shadowed_drawing()
        self.assertEqual(ctx.depth, 1)
        self.assertEqual(ctx.paint, RED)

    def test_shadow_spec_cannot_change_mid_pass(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.begin_shadowed_drawing()
        with self.assertRaises(ContextStateError):
            ctx.shadow = ShadowSpec(blur_radius=1)
        ctx.end_shadowed_drawing()
        ctx.shadow = ShadowSpec(blur_radius=1)
        self.assertEqual(ctx.shadow.blur_radius, 1)

    def test_end_without_begin_is_rejected(self) -> None:
        ctx = DrawContext(20, 20)
        with self.assertRaises(ContextStateError):
            ctx.end_shadowed_drawing()

    def test_failed_pass_leaves_surface_untouched(self) -> None:
        ctx = DrawContext(20, 20)
        ctx.set_paint(RED)
        with self.assertRaises(KeyError):
            with ctx.shadowed_drawing():
                ctx.fill(Rect(0.0, 0.0, 20.0, 20.0))
                raise KeyError("boom")
        self.assertFalse(ctx.shadow_pass_active)
        self.assertEqual(ctx.depth, 1)
        self.assertEqual(int(ctx.surface[:, :, 3].max()), 0)

    def test_compositor_surfaces_need_an_active_pass(self) -> None:
        compositor = ShadowCompositor()
        for name in ("spec", "content", "shadow"):
            with self.subTest(name=name):
                with self.assertRaises(ContextStateError):
                    getattr(compositor, name)

    def test_close_releases_an_open_pass(self) -> None:
        with DrawContext(20, 20) as ctx:
            ctx.begin_shadowed_drawing()
            self.assertTrue(ctx.shadow_pass_active)
        self.assertFalse(ctx.shadow_pass_active)
        self.assertEqual(ctx.depth, 1)


if __name__ == "__main__":
    unittest.main()
