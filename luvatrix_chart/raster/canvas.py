from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 0)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    canvas[:, :, 3] = color[3]
    return canvas


def blend_coverage(
    dst: np.ndarray,
    x: int,
    y: int,
    coverage: np.ndarray,
    color: np.ndarray,
) -> None:
    """Source-over blend of ``color`` weighted by ``coverage`` into ``dst`` at ``(x, y)``.

    ``color`` is either one RGBA value or a per-pixel ``(h, w, 4)`` array
    matching ``coverage``; both use straight alpha in 0..255.
    """
    h, w = coverage.shape
    if h <= 0 or w <= 0:
        return

    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return

    sx0 = x0 - x
    sy0 = y0 - y
    sx1 = sx0 + (x1 - x0)
    sy1 = sy0 + (y1 - y0)

    cov = coverage[sy0:sy1, sx0:sx1].astype(np.float32)
    src = np.asarray(color, dtype=np.float32)
    if src.ndim == 3:
        src = src[sy0:sy1, sx0:sx1]
        src_rgb = src[:, :, :3]
        src_alpha = (src[:, :, 3] / 255.0) * cov
    else:
        src_rgb = src[:3].reshape(1, 1, 3)
        src_alpha = (src[3] / 255.0) * cov
    if not np.any(src_alpha > 0):
        return

    patch = dst[y0:y1, x0:x1]
    dst_rgb = patch[:, :, :3].astype(np.float32)
    dst_alpha = patch[:, :, 3].astype(np.float32) / 255.0

    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    out_rgb_num = src_rgb * src_alpha[:, :, None] + dst_rgb * dst_alpha[:, :, None] * (1.0 - src_alpha[:, :, None])
    safe_alpha = np.where(out_alpha > 1e-6, out_alpha, 1.0)
    out_rgb = out_rgb_num / safe_alpha[:, :, None]

    patch[:, :, :3] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
    patch[:, :, 3] = np.clip(np.rint(out_alpha * 255.0), 0, 255).astype(np.uint8)


def composite(dst: np.ndarray, src: np.ndarray, x: int = 0, y: int = 0, mask: np.ndarray | None = None) -> None:
    """Draw the RGBA raster ``src`` over ``dst`` with its top-left corner at ``(x, y)``.

    ``mask`` is an optional full-size coverage of ``dst`` (a clip) that limits
    where ``src`` lands.
    """
    h, w, _ = src.shape
    coverage = np.ones((h, w), dtype=np.float32)
    if mask is not None:
        coverage = _crop_mask(mask, x, y, w, h)
    blend_coverage(dst, x, y, coverage, src)


def erase_coverage(dst: np.ndarray, x: int, y: int, coverage: np.ndarray) -> None:
    """Destination-out: reduce ``dst`` alpha by ``coverage``."""
    h, w = coverage.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    cov = coverage[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.float32)
    patch = dst[y0:y1, x0:x1]
    alpha = patch[:, :, 3].astype(np.float32) * (1.0 - cov)
    patch[:, :, 3] = np.clip(np.rint(alpha), 0, 255).astype(np.uint8)


def _crop_mask(mask: np.ndarray, x: int, y: int, w: int, h: int) -> np.ndarray:
    out = np.zeros((h, w), dtype=np.float32)
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(mask.shape[1], x + w)
    y1 = min(mask.shape[0], y + h)
    if x1 > x0 and y1 > y0:
        out[y0 - y : y1 - y, x0 - x : x1 - x] = mask[y0:y1, x0:x1]
    return out
