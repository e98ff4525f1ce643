from __future__ import annotations

import logging

import numpy as np

from luvatrix_chart.errors import ContextStateError
from luvatrix_chart.geometry import Affine, ClipRegion
from luvatrix_chart.raster.blur import box_blur
from luvatrix_chart.raster.canvas import composite, new_canvas
from luvatrix_chart.style import ShadowSpec


LOGGER = logging.getLogger(__name__)


class ShadowCompositor:
    """Offscreen content and shadow surfaces for one shadow pass.

    While a pass is active every draw lands on both surfaces: the content
    surface sees it as requested, the shadow surface sees it shifted by the
    shadow offset and painted in the shadow paint. ``end`` blurs the shadow and
    composites shadow then content onto the target.
    """

    def __init__(self) -> None:
        self._spec: ShadowSpec | None = None
        self._content: np.ndarray | None = None
        self._shadow: np.ndarray | None = None
        self._clip: ClipRegion | None = None
        self._delta = Affine.identity()

    @property
    def active(self) -> bool:
        return self._content is not None

    @property
    def spec(self) -> ShadowSpec:
        if self._spec is None:
            raise ContextStateError("shadow pass is not active")
        return self._spec

    @property
    def content(self) -> np.ndarray:
        if self._content is None:
            raise ContextStateError("shadow pass is not active")
        return self._content

    @property
    def shadow(self) -> np.ndarray:
        if self._shadow is None:
            raise ContextStateError("shadow pass is not active")
        return self._shadow

    @property
    def clip(self) -> ClipRegion | None:
        return self._clip

    def begin(self, spec: ShadowSpec, transform: Affine, clip: ClipRegion | None, width: int, height: int) -> None:
        if self.active:
            LOGGER.debug("shadow pass restarted; discarding the previous pass surfaces")
        self._spec = spec
        self._content = new_canvas(width, height)
        self._shadow = new_canvas(width, height)
        self._clip = clip
        offset = Affine.translation(spec.offset_x, spec.offset_y)
        try:
            self._delta = transform @ offset @ transform.inverse()
        except ValueError:
            self._delta = offset

    def shadow_transform(self, current: Affine) -> Affine:
        return self._delta @ current

    def shadow_clip(self, clip: ClipRegion | None) -> ClipRegion | None:
        if clip is None:
            return None
        return clip.transformed(self._delta)

    def end(self, target: np.ndarray, clip_mask: np.ndarray | None = None) -> None:
        try:
            blurred = box_blur(self.shadow, self.spec.blur_radius)
            # pass surfaces are already in device space
            composite(target, blurred, 0, 0, clip_mask)
            composite(target, self.content, 0, 0, clip_mask)
        finally:
            self.release()

    def release(self) -> None:
        self._spec = None
        self._content = None
        self._shadow = None
        self._clip = None
        self._delta = Affine.identity()
