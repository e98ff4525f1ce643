from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Callable, Iterable, Iterator, Literal

import numpy as np
from PIL import Image

from luvatrix_chart.errors import ContextStateError
from luvatrix_chart.geometry import Affine, ClipRegion, Shape, has_extent, shape_area
from luvatrix_chart.raster.canvas import blend_coverage, erase_coverage, new_canvas
from luvatrix_chart.raster.coverage import Coverage, crop_coverage, full_coverage, polygon_coverage, stroke_polygons
from luvatrix_chart.raster.draw_text import font_metrics, ink_bounds, text_advance, text_coverage
from luvatrix_chart.shadow import ShadowCompositor
from luvatrix_chart.style import (
    BLACK,
    ColorLike,
    FontSpec,
    LinearGradient,
    Paint,
    ShadowSpec,
    Stroke,
    coerce_color,
    coerce_paint,
    with_opacity,
)
from luvatrix_chart.text_fit import fit_font_to_width


HAlign = Literal["left", "center", "right"]
VAlign = Literal["top", "middle", "bottom", "baseline"]

_Render = Callable[[np.ndarray, Affine, "ClipRegion | None", Paint], None]


@dataclass(frozen=True)
class CanvasState:
    transform: Affine = Affine()
    clip: ClipRegion | None = None
    paint: Paint = BLACK
    stroke: Stroke = Stroke()
    font: FontSpec = FontSpec()


class DrawContext:
    """Stateful RGBA canvas with a save/restore stack and an optional shadow pass.

    Every setter replaces the top ``CanvasState``; ``save()`` pushes a copy of
    it and ``restore()`` pops back. Clips are kept in device space and each
    ``set_clip`` replaces the previous one.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        surface: np.ndarray | None = None,
        background: ColorLike = (0, 0, 0, 0),
        clip: Shape | None = None,
    ) -> None:
        if surface is None:
            surface = new_canvas(width, height, coerce_color(background))
        elif surface.dtype != np.uint8 or surface.shape != (height, width, 4):
            raise ValueError(f"surface must be a uint8 array shaped ({height}, {width}, 4)")
        self._surface = surface
        self._width = float(width)
        self._height = float(height)
        self._original_width = int(width)
        self._original_height = int(height)
        self._original_clip = ClipRegion.from_shape(clip, Affine.identity()) if clip is not None else None
        self._stack = [CanvasState(clip=self._original_clip)]
        self._shadow_spec = ShadowSpec()
        self._compositor = ShadowCompositor()
        self._pass_depth: int | None = None

    def __enter__(self) -> "DrawContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- sizing -------------------------------------------------------

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def original_width(self) -> int:
        return self._original_width

    @property
    def original_height(self) -> int:
        return self._original_height

    @property
    def surface(self) -> np.ndarray:
        return self._surface

    def resize(self, width: float, height: float) -> None:
        """Change the logical layout extents; the surface keeps its size."""
        self._width = max(0.0, float(width))
        self._height = max(0.0, float(height))

    # -- state stack --------------------------------------------------

    @property
    def state(self) -> CanvasState:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def current_transform(self) -> Affine:
        return self.state.transform

    @property
    def clip(self) -> ClipRegion | None:
        return self.state.clip

    @property
    def paint(self) -> Paint:
        return self.state.paint

    @property
    def stroke(self) -> Stroke:
        return self.state.stroke

    @property
    def font(self) -> FontSpec:
        return self.state.font

    def save(self) -> None:
        self._stack.append(self.state)

    def restore(self) -> None:
        if len(self._stack) <= 1:
            raise ContextStateError("restore() without a matching save()")
        if self._pass_depth is not None and len(self._stack) <= self._pass_depth:
            raise ContextStateError("restore() would pop the state saved by begin_shadowed_drawing()")
        self._stack.pop()

    @contextmanager
    def saved(self) -> Iterator["DrawContext"]:
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def _update(self, **changes) -> None:
        self._stack[-1] = replace(self._stack[-1], **changes)

    # -- transform ----------------------------------------------------

    def translate(self, x: float, y: float) -> None:
        self.transform(Affine.translation(x, y))

    def rotate(self, theta: float, x: float | None = None, y: float | None = None) -> None:
        self.transform(Affine.rotation(theta, x, y))

    def scale(self, sx: float, sy: float) -> None:
        self.transform(Affine.scaling(sx, sy))

    def transform(self, affine: Affine) -> None:
        """Compose ``affine`` onto the active transform (applied before it)."""
        self._update(transform=self.state.transform @ affine)

    # -- clip ---------------------------------------------------------

    def set_clip(self, shape: Shape | None) -> None:
        if shape is None:
            self.clear_clip()
            return
        self._update(clip=ClipRegion.from_shape(shape, self.state.transform))

    def reset_clip(self) -> None:
        self._update(clip=self._original_clip)

    def clear_clip(self) -> None:
        self._update(clip=None)

    # -- style --------------------------------------------------------

    def set_paint(self, paint: Paint | ColorLike, opacity: float | None = None) -> None:
        if opacity is not None:
            if isinstance(paint, LinearGradient):
                raise ValueError("opacity can only be combined with a solid color")
            self._update(paint=with_opacity(paint, opacity))
            return
        self._update(paint=coerce_paint(paint))

    def set_stroke(self, stroke: Stroke) -> None:
        self._update(stroke=stroke)

    def set_font(self, font: FontSpec) -> None:
        self._update(font=font)

    # -- shapes -------------------------------------------------------

    def fill(self, shape: Shape) -> None:
        if shape_area(shape) <= 0:
            return

        def render(surface: np.ndarray, transform: Affine, clip: ClipRegion | None, paint: Paint) -> None:
            polygons = [transform.apply(p.points) for p in shape.subpaths(scale=transform.scale_factor)]
            cov = polygon_coverage(polygons, surface.shape[1], surface.shape[0])
            self._blend(surface, cov, transform, clip, paint)

        self._emit(render)

    def draw(self, shape: Shape) -> None:
        if not has_extent(shape):
            return
        stroke = self.state.stroke

        def render(surface: np.ndarray, transform: Affine, clip: ClipRegion | None, paint: Paint) -> None:
            cov = polygon_coverage(self._stroke_outline(shape, stroke, transform), surface.shape[1], surface.shape[0])
            self._blend(surface, cov, transform, clip, paint)

        self._emit(render)

    def erase(self, shape: Shape) -> None:
        """Clear the pixels covered by ``shape`` (destination-out)."""
        if shape_area(shape) <= 0:
            return

        def render(surface: np.ndarray, transform: Affine, clip: ClipRegion | None, paint: Paint) -> None:
            polygons = [transform.apply(p.points) for p in shape.subpaths(scale=transform.scale_factor)]
            cov = polygon_coverage(polygons, surface.shape[1], surface.shape[0])
            if cov is None:
                return
            x0, y0, values = self._clipped(cov, clip, surface)
            erase_coverage(surface, x0, y0, values)

        self._emit(render)

    def _stroke_outline(self, shape: Shape, stroke: Stroke, transform: Affine) -> list[np.ndarray]:
        factor = transform.scale_factor
        subpaths = [(transform.apply(p.points), p.closed) for p in shape.subpaths(scale=factor)]
        dash = tuple(v * factor for v in stroke.dash) if stroke.dash else None
        return stroke_polygons(
            subpaths,
            max(0.5, stroke.width * factor / 2.0),
            cap=stroke.cap,
            join=stroke.join,
            miter_limit=stroke.miter_limit,
            dash=dash,
            dash_phase=stroke.dash_phase * factor,
        )

    # -- text ---------------------------------------------------------

    def draw_text(
        self,
        text: str | None,
        x: float,
        y: float,
        h_align: HAlign = "left",
        v_align: VAlign = "baseline",
        max_width: float | None = None,
    ) -> None:
        """Draw ``text`` anchored at ``(x, y)``.

        Vertical anchors use the ink bounds of the text, so ``top`` puts the
        highest drawn pixel at ``y``. With ``max_width`` the font is shrunk
        for this call only.
        """
        if not text:
            return
        if h_align not in ("left", "center", "right"):
            raise ValueError(f"unsupported h_align: {h_align!r}")
        if v_align not in ("top", "middle", "bottom", "baseline"):
            raise ValueError(f"unsupported v_align: {v_align!r}")

        font_before = self.state.font
        try:
            if max_width is not None and max_width >= 0 and self.string_width(text) > max_width:
                self.adjust_font_size_to_fit_text_in_width(text, max_width)
            font = self.state.font
            if font.size <= 0:
                return

            dx = x
            if h_align == "center":
                dx = x - self.string_width(text) / 2.0
            elif h_align == "right":
                dx = x - self.string_width(text)

            _, ink_top, _, ink_bottom = ink_bounds(text, font)
            ink_h = ink_bottom - ink_top
            dy = y
            if v_align == "top":
                dy = y - ink_top
            elif v_align == "middle":
                dy = y - ink_h / 2.0 - ink_top
            elif v_align == "bottom":
                dy = y - ink_top - ink_h

            def render(surface: np.ndarray, transform: Affine, clip: ClipRegion | None, paint: Paint) -> None:
                cov = text_coverage(text, font, dx, dy, transform, surface.shape[1], surface.shape[0])
                if cov is not None:
                    cov = crop_coverage(cov, surface.shape[1], surface.shape[0])
                self._blend(surface, cov, transform, clip, paint)

            self._emit(render)
        finally:
            self._update(font=font_before)

    def adjust_font_size_to_fit_text_in_width(self, text: str, width_limit: float) -> FontSpec:
        """Shrink the current font until ``text`` fits; the change is kept."""
        fitted = fit_font_to_width(self.state.font, text, width_limit, text_advance)
        self._update(font=fitted)
        return fitted

    def string_width(self, text: str | None, font: FontSpec | None = None) -> float:
        return text_advance(text, font or self.state.font)

    def line_height(self, text: str | None, font: FontSpec | None = None) -> float:
        if text is None:
            return 0.0
        return self.standard_line_height(font)

    def standard_line_height(self, font: FontSpec | None = None) -> float:
        ascent, descent = font_metrics(font or self.state.font)
        return ascent + descent

    def font_descent(self, font: FontSpec | None = None) -> float:
        return font_metrics(font or self.state.font)[1]

    def widest_line(self, lines: Iterable[str | None], font: FontSpec | None = None) -> float:
        return max((self.string_width(line, font) for line in lines), default=0.0)

    # -- shadow pass --------------------------------------------------

    @property
    def shadow(self) -> ShadowSpec:
        return self._shadow_spec

    @shadow.setter
    def shadow(self, spec: ShadowSpec) -> None:
        if self._compositor.active:
            raise ContextStateError("shadow settings cannot change during a shadow pass")
        self._shadow_spec = spec

    @property
    def shadow_pass_active(self) -> bool:
        return self._compositor.active

    def begin_shadowed_drawing(self) -> None:
        state = self.state
        self._compositor.begin(
            self._shadow_spec,
            state.transform,
            state.clip,
            self._original_width,
            self._original_height,
        )
        if self._pass_depth is None:
            self._stack.append(state)
            self._pass_depth = len(self._stack)

    def end_shadowed_drawing(self) -> None:
        if not self._compositor.active:
            raise ContextStateError("end_shadowed_drawing() without begin_shadowed_drawing()")
        clip = self._compositor.clip
        mask = _clip_mask(clip, self._original_width, self._original_height) if clip is not None else None
        try:
            self._compositor.end(self._surface, mask)
        finally:
            self._drop_pass_frame()

    @contextmanager
    def shadowed_drawing(self) -> Iterator["DrawContext"]:
        self.begin_shadowed_drawing()
        try:
            yield self
        except BaseException:
            self._discard_pass()
            raise
        self.end_shadowed_drawing()

    def close(self) -> None:
        """Release pass surfaces left by an unfinished shadow pass."""
        self._discard_pass()

    def _discard_pass(self) -> None:
        if self._compositor.active:
            self._compositor.release()
        self._drop_pass_frame()

    def _drop_pass_frame(self) -> None:
        if self._pass_depth is not None:
            del self._stack[self._pass_depth - 1 :]
            self._pass_depth = None

    # -- output -------------------------------------------------------

    def to_image(self) -> Image.Image:
        return Image.fromarray(self._surface)

    # -- internals ----------------------------------------------------

    def _emit(self, render: _Render) -> None:
        state = self.state
        if not self._compositor.active:
            render(self._surface, state.transform, state.clip, state.paint)
            return
        render(self._compositor.content, state.transform, state.clip, state.paint)
        render(
            self._compositor.shadow,
            self._compositor.shadow_transform(state.transform),
            self._compositor.shadow_clip(state.clip),
            self._compositor.spec.paint,
        )

    def _clipped(self, cov: Coverage, clip: ClipRegion | None, surface: np.ndarray) -> Coverage:
        x0, y0, values = cov
        if clip is None:
            return cov
        h, w = values.shape
        mask = _clip_mask(clip, surface.shape[1], surface.shape[0])
        return (x0, y0, values * mask[y0 : y0 + h, x0 : x0 + w])

    def _blend(
        self,
        surface: np.ndarray,
        cov: Coverage | None,
        transform: Affine,
        clip: ClipRegion | None,
        paint: Paint,
    ) -> None:
        if cov is None:
            return
        x0, y0, values = self._clipped(cov, clip, surface)
        if isinstance(paint, LinearGradient):
            colors = _gradient_colors(paint, transform, x0, y0, values.shape[1], values.shape[0])
            if colors is None:
                return
        else:
            colors = np.asarray(paint, dtype=np.float32)
        blend_coverage(surface, x0, y0, values, colors)


@lru_cache(maxsize=32)
def _clip_mask(clip: ClipRegion, width: int, height: int) -> np.ndarray:
    return full_coverage(clip.arrays(), width, height)


def _gradient_colors(
    gradient: LinearGradient,
    transform: Affine,
    x0: int,
    y0: int,
    w: int,
    h: int,
) -> np.ndarray | None:
    try:
        to_user = transform.inverse()
    except ValueError:
        return None
    xs, ys = np.meshgrid(np.arange(w, dtype=np.float64) + x0 + 0.5, np.arange(h, dtype=np.float64) + y0 + 0.5)
    device = np.stack([xs.ravel(), ys.ravel()], axis=1)
    return gradient.colors_at(to_user.apply(device)).reshape(h, w, 4)
