from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw

from luvatrix_chart.style import LineCap, LineJoin


SUPERSAMPLE = 4
Coverage = tuple[int, int, np.ndarray]


def polygon_coverage(
    polygons: Sequence[np.ndarray],
    width: int,
    height: int,
    *,
    supersample: int = SUPERSAMPLE,
) -> Coverage | None:
    """Anti-aliased union coverage of device-space polygons, cropped to the canvas.

    Returns ``(x0, y0, coverage)`` with coverage in 0..1, or ``None`` when
    nothing lands on the canvas.
    """
    usable = [p for p in polygons if p.shape[0] >= 3 and np.all(np.isfinite(p))]
    if not usable:
        return None
    pts = np.concatenate(usable, axis=0)
    x0 = max(0, int(math.floor(float(pts[:, 0].min()))))
    y0 = max(0, int(math.floor(float(pts[:, 1].min()))))
    x1 = min(width, int(math.ceil(float(pts[:, 0].max()))))
    y1 = min(height, int(math.ceil(float(pts[:, 1].max()))))
    if x1 <= x0 or y1 <= y0:
        return None

    ss = max(1, int(supersample))
    image = Image.new("L", ((x1 - x0) * ss, (y1 - y0) * ss), 0)
    draw = ImageDraw.Draw(image)
    origin = np.asarray([x0, y0], dtype=np.float64)
    for poly in usable:
        scaled = (poly - origin) * ss
        draw.polygon([(float(px), float(py)) for px, py in scaled], fill=255)
    if ss > 1:
        image = image.reduce(ss)
    return (x0, y0, np.asarray(image, dtype=np.float32) / 255.0)


def full_coverage(polygons: Sequence[np.ndarray], width: int, height: int) -> np.ndarray:
    """Canvas-sized coverage mask, used for clip regions."""
    mask = np.zeros((height, width), dtype=np.float32)
    cov = polygon_coverage(polygons, width, height)
    if cov is not None:
        x0, y0, values = cov
        h, w = values.shape
        mask[y0 : y0 + h, x0 : x0 + w] = values
    return mask


def stroke_polygons(
    subpaths: Sequence[tuple[np.ndarray, bool]],
    half_width: float,
    *,
    cap: LineCap = "square",
    join: LineJoin = "miter",
    miter_limit: float = 10.0,
    dash: Sequence[float] | None = None,
    dash_phase: float = 0.0,
) -> list[np.ndarray]:
    """Outline device-space polylines into fillable polygons."""
    out: list[np.ndarray] = []
    for pts, closed in subpaths:
        pts = _dedupe(pts)
        if pts.shape[0] < 2:
            continue
        if dash:
            if closed:
                pts = np.concatenate([pts, pts[:1]], axis=0)
            for piece in _dash_polyline(pts, dash, dash_phase):
                out.extend(_outline(piece, False, half_width, cap, join, miter_limit))
        else:
            out.extend(_outline(pts, closed, half_width, cap, join, miter_limit))
    return out


def _dedupe(pts: np.ndarray) -> np.ndarray:
    if pts.shape[0] < 2:
        return pts
    keep = np.ones(pts.shape[0], dtype=bool)
    keep[1:] = np.any(np.abs(np.diff(pts, axis=0)) > 1e-9, axis=1)
    return pts[keep]


def _dash_polyline(pts: np.ndarray, dash: Sequence[float], phase: float) -> list[np.ndarray]:
    total = float(sum(dash))
    offset = phase % total
    idx = 0
    while offset >= dash[idx]:
        offset -= dash[idx]
        idx = (idx + 1) % len(dash)
    remaining = dash[idx] - offset
    on = idx % 2 == 0

    pieces: list[np.ndarray] = []
    current: list[np.ndarray] = [pts[0]] if on else []
    for a, b in zip(pts[:-1], pts[1:]):
        seg = b - a
        length = float(math.hypot(seg[0], seg[1]))
        if length <= 0:
            continue
        pos = 0.0
        while length - pos > remaining:
            pos += remaining
            point = a + seg * (pos / length)
            if on:
                current.append(point)
                if len(current) >= 2:
                    pieces.append(np.asarray(current))
            else:
                current = [point]
            on = not on
            idx = (idx + 1) % len(dash)
            remaining = dash[idx]
        remaining -= length - pos
        if on:
            current.append(b)
    if on and len(current) >= 2:
        pieces.append(np.asarray(current))
    return [_dedupe(p) for p in pieces if _dedupe(p).shape[0] >= 2]


def _outline(
    pts: np.ndarray,
    closed: bool,
    hw: float,
    cap: LineCap,
    join: LineJoin,
    miter_limit: float,
) -> list[np.ndarray]:
    n = pts.shape[0]
    seg_count = n if closed and n > 2 else n - 1
    dirs = []
    polys: list[np.ndarray] = []
    for i in range(seg_count):
        a = pts[i]
        b = pts[(i + 1) % n]
        d = b - a
        length = float(math.hypot(d[0], d[1]))
        d = d / length
        nrm = np.asarray([-d[1], d[0]])
        dirs.append((d, nrm))
        polys.append(np.asarray([a + nrm * hw, b + nrm * hw, b - nrm * hw, a - nrm * hw]))

    if closed and n > 2:
        joints = [(pts[i], dirs[i - 1], dirs[i]) for i in range(seg_count)]
    else:
        joints = [(pts[i], dirs[i - 1], dirs[i]) for i in range(1, seg_count)]
    for v, (_, n1), (_, n2) in joints:
        polys.extend(_join(v, n1, n2, hw, join, miter_limit))

    if not (closed and n > 2):
        d0, n0 = dirs[0]
        d1, n1 = dirs[-1]
        start = pts[0]
        end = pts[-1]
        if cap == "square":
            polys.append(np.asarray([start + n0 * hw, start + n0 * hw - d0 * hw, start - n0 * hw - d0 * hw, start - n0 * hw]))
            polys.append(np.asarray([end + n1 * hw, end + n1 * hw + d1 * hw, end - n1 * hw + d1 * hw, end - n1 * hw]))
        elif cap == "round":
            polys.append(_circle(start, hw))
            polys.append(_circle(end, hw))
    return polys


def _join(v: np.ndarray, n1: np.ndarray, n2: np.ndarray, hw: float, join: LineJoin, miter_limit: float) -> list[np.ndarray]:
    if join == "round":
        return [_circle(v, hw)]
    out = []
    for side in (1.0, -1.0):
        p1 = v + side * n1 * hw
        p2 = v + side * n2 * hw
        if join == "miter":
            m = n1 + n2
            m_len = float(math.hypot(m[0], m[1]))
            if m_len > 1e-9:
                m = m / m_len
                cos_half = float(np.dot(m, n1))
                if cos_half > 1e-9 and 1.0 / cos_half <= miter_limit:
                    tip = v + side * m * (hw / cos_half)
                    out.append(np.asarray([v, p1, tip, p2]))
                    continue
        out.append(np.asarray([v, p1, p2]))
    return out


def _circle(center: np.ndarray, radius: float) -> np.ndarray:
    n = max(8, min(96, int(math.ceil(math.pi * radius))))
    angles = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
    return np.stack([center[0] + radius * np.cos(angles), center[1] + radius * np.sin(angles)], axis=1)


def crop_coverage(cov: Coverage, width: int, height: int) -> Coverage | None:
    """Restrict a coverage patch to the ``width`` x ``height`` canvas."""
    x, y, values = cov
    h, w = values.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(width, x + w)
    y1 = min(height, y + h)
    if x1 <= x0 or y1 <= y0:
        return None
    return (x0, y0, values[y0 - y : y1 - y, x0 - x : x1 - x])
