from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Literal, Protocol, Sequence

import numpy as np


ArcKind = Literal["open", "chord", "pie"]

_MIN_ARC_SEGMENTS = 8
_MAX_ARC_SEGMENTS = 720


@dataclass(frozen=True)
class Affine:
    """2D affine matrix ``[[a, c, e], [b, d, f], [0, 0, 1]]``.

    ``x' = a*x + c*y + e`` and ``y' = b*x + d*y + f``. ``m1 @ m2`` applies
    ``m2`` first, so composing an operation onto the active transform is
    ``active @ op``.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> "Affine":
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> "Affine":
        return cls(e=float(tx), f=float(ty))

    @classmethod
    def scaling(cls, sx: float, sy: float) -> "Affine":
        return cls(a=float(sx), d=float(sy))

    @classmethod
    def rotation(cls, theta: float, x: float | None = None, y: float | None = None) -> "Affine":
        cos_t = math.cos(theta)
        sin_t = math.sin(theta)
        rot = cls(a=cos_t, b=sin_t, c=-sin_t, d=cos_t)
        if x is None or y is None:
            return rot
        return cls.translation(x, y) @ rot @ cls.translation(-x, -y)

    def __matmul__(self, other: "Affine") -> "Affine":
        return Affine(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    @property
    def translate_x(self) -> float:
        return self.e

    @property
    def translate_y(self) -> float:
        return self.f

    @property
    def scale_factor(self) -> float:
        """Mean linear scale, used to size stroke widths and curve flattening."""
        return math.sqrt(abs(self.determinant))

    def inverse(self) -> "Affine":
        det = self.determinant
        if abs(det) < 1e-12:
            raise ValueError("affine transform is singular")
        return Affine(
            a=self.d / det,
            b=-self.b / det,
            c=-self.c / det,
            d=self.a / det,
            e=(self.c * self.f - self.d * self.e) / det,
            f=(self.b * self.e - self.a * self.f) / det,
        )

    def apply_point(self, x: float, y: float) -> tuple[float, float]:
        return (self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def apply(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        out = np.empty_like(pts)
        out[:, 0] = self.a * pts[:, 0] + self.c * pts[:, 1] + self.e
        out[:, 1] = self.b * pts[:, 0] + self.d * pts[:, 1] + self.f
        return out


@dataclass(frozen=True, eq=False)
class Subpath:
    points: np.ndarray
    closed: bool


class Shape(Protocol):
    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        ...


def shape_bounds(shape: Shape) -> tuple[float, float, float, float] | None:
    parts = [p.points for p in shape.subpaths() if p.points.size]
    if not parts:
        return None
    pts = np.concatenate(parts, axis=0)
    return (float(pts[:, 0].min()), float(pts[:, 1].min()), float(pts[:, 0].max()), float(pts[:, 1].max()))


def shape_area(shape: Shape) -> float:
    total = 0.0
    for part in shape.subpaths():
        pts = part.points
        if pts.shape[0] < 3:
            continue
        x = pts[:, 0]
        y = pts[:, 1]
        total += abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))) / 2.0
    return total


def has_extent(shape: Shape) -> bool:
    bounds = shape_bounds(shape)
    if bounds is None:
        return False
    x0, y0, x1, y1 = bounds
    return x1 > x0 or y1 > y0


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        if self.width < 0 or self.height < 0:
            return []
        x0, y0 = self.x, self.y
        x1, y1 = self.x + self.width, self.y + self.height
        pts = np.asarray([(x0, y0), (x1, y0), (x1, y1), (x0, y1)], dtype=np.float64)
        return [Subpath(points=pts, closed=True)]


@dataclass(frozen=True)
class Ellipse:
    x: float
    y: float
    width: float
    height: float

    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        if self.width <= 0 or self.height <= 0:
            return []
        rx = self.width / 2.0
        ry = self.height / 2.0
        pts = _arc_points(self.x + rx, self.y + ry, rx, ry, 0.0, 360.0, scale)
        return [Subpath(points=pts[:-1], closed=True)]


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float

    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        pts = np.asarray([(self.x1, self.y1), (self.x2, self.y2)], dtype=np.float64)
        return [Subpath(points=pts, closed=False)]


@dataclass(frozen=True)
class Polygon:
    points: Sequence[tuple[float, float]]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple((float(x), float(y)) for x, y in self.points))

    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        if not self.points:
            return []
        return [Subpath(points=np.asarray(self.points, dtype=np.float64), closed=True)]


@dataclass
class Path:
    """Mutable path builder made of straight sub-paths."""

    _parts: list[list[tuple[float, float]]] = field(default_factory=list)
    _closed: list[bool] = field(default_factory=list)

    def move_to(self, x: float, y: float) -> "Path":
        self._parts.append([(float(x), float(y))])
        self._closed.append(False)
        return self

    def line_to(self, x: float, y: float) -> "Path":
        if not self._parts or self._closed[-1]:
            return self.move_to(x, y)
        self._parts[-1].append((float(x), float(y)))
        return self

    def close_path(self) -> "Path":
        if self._parts:
            self._closed[-1] = True
        return self

    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        return [
            Subpath(points=np.asarray(part, dtype=np.float64), closed=closed)
            for part, closed in zip(self._parts, self._closed)
        ]


@dataclass(frozen=True)
class Arc:
    """Circular arc; angles in degrees, counter-clockwise on screen (y down)."""

    center_x: float
    center_y: float
    radius: float
    start: float
    extent: float
    kind: ArcKind = "open"

    def subpaths(self, scale: float = 1.0) -> list[Subpath]:
        if self.radius <= 0 or self.extent == 0:
            return []
        extent = max(-360.0, min(360.0, self.extent))
        pts = _arc_points(self.center_x, self.center_y, self.radius, self.radius, self.start, extent, scale)
        if self.kind == "pie":
            center = np.asarray([[self.center_x, self.center_y]], dtype=np.float64)
            return [Subpath(points=np.concatenate([center, pts], axis=0), closed=True)]
        return [Subpath(points=pts, closed=self.kind == "chord")]


def _arc_points(
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    start_deg: float,
    extent_deg: float,
    scale: float,
) -> np.ndarray:
    sweep = abs(extent_deg) / 360.0
    circumference = 2.0 * math.pi * max(rx, ry) * max(scale, 1e-6)
    n = int(math.ceil(sweep * circumference / 2.0))
    n = max(_MIN_ARC_SEGMENTS, min(_MAX_ARC_SEGMENTS, n))
    angles = np.radians(start_deg + extent_deg * np.arange(n + 1, dtype=np.float64) / n)
    pts = np.empty((n + 1, 2), dtype=np.float64)
    pts[:, 0] = cx + rx * np.cos(angles)
    pts[:, 1] = cy - ry * np.sin(angles)
    return pts


@dataclass(frozen=True)
class ClipRegion:
    """Device-space clip polygons; hashable so rasterized masks can be cached."""

    polygons: tuple[tuple[tuple[float, float], ...], ...]

    @classmethod
    def from_shape(cls, shape: Shape, transform: Affine) -> "ClipRegion":
        polygons = []
        for part in shape.subpaths(scale=transform.scale_factor):
            if part.points.shape[0] < 3:
                continue
            device = transform.apply(part.points)
            polygons.append(tuple((float(x), float(y)) for x, y in device))
        return cls(polygons=tuple(polygons))

    def transformed(self, transform: Affine) -> "ClipRegion":
        return ClipRegion(
            polygons=tuple(
                tuple(transform.apply_point(x, y) for x, y in polygon) for polygon in self.polygons
            )
        )

    def arrays(self) -> list[np.ndarray]:
        return [np.asarray(polygon, dtype=np.float64) for polygon in self.polygons]
