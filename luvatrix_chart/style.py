from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, Union

import numpy as np

from luvatrix_chart.errors import ConfigurationError


Color = tuple[int, int, int, int]
ColorLike = Union[tuple[int, int, int], tuple[int, int, int, int], str]
LineCap = Literal["butt", "round", "square"]
LineJoin = Literal["miter", "round", "bevel"]
FontStyle = Literal["plain", "bold", "italic", "bold-italic"]

BLACK: Color = (0, 0, 0, 255)
WHITE: Color = (255, 255, 255, 255)
TRANSPARENT: Color = (1, 1, 1, 0)


def coerce_color(color: ColorLike) -> Color:
    if isinstance(color, str):
        return parse_hex_color(color)
    if len(color) == 3:
        r, g, b = color
        return (int(r), int(g), int(b), 255)
    r, g, b, a = color
    return (int(r), int(g), int(b), int(a))


def with_opacity(color: ColorLike, opacity: float) -> Color:
    """Keep the RGB channels of ``color`` and replace its alpha with ``opacity``."""
    r, g, b, _ = coerce_color(color)
    a = int(round(max(0.0, min(1.0, float(opacity))) * 255))
    return (r, g, b, a)


def parse_hex_color(value: str) -> Color:
    raw = value.strip().lstrip("#")
    if raw.lower().startswith("0x"):
        raw = raw[2:]
    if len(raw) not in (6, 8):
        raise ConfigurationError(f"color must be #RRGGBB or #RRGGBBAA: {value!r}")
    try:
        channels = [int(raw[i : i + 2], 16) for i in range(0, len(raw), 2)]
    except ValueError as exc:
        raise ConfigurationError(f"invalid color: {value!r}") from exc
    if len(channels) == 3:
        channels.append(255)
    return (channels[0], channels[1], channels[2], channels[3])


@dataclass(frozen=True)
class LinearGradient:
    """Two-stop gradient between user-space points, clamped beyond the ends."""

    x1: float
    y1: float
    color1: Color
    x2: float
    y2: float
    color2: Color

    def __post_init__(self) -> None:
        object.__setattr__(self, "color1", coerce_color(self.color1))
        object.__setattr__(self, "color2", coerce_color(self.color2))

    def colors_at(self, points: np.ndarray) -> np.ndarray:
        dx = self.x2 - self.x1
        dy = self.y2 - self.y1
        denom = dx * dx + dy * dy
        if denom <= 0:
            t = np.zeros(points.shape[0], dtype=np.float32)
        else:
            t = ((points[:, 0] - self.x1) * dx + (points[:, 1] - self.y1) * dy) / denom
            t = np.clip(t, 0.0, 1.0).astype(np.float32)
        c1 = np.asarray(self.color1, dtype=np.float32)
        c2 = np.asarray(self.color2, dtype=np.float32)
        return c1[None, :] + (c2 - c1)[None, :] * t[:, None]


Paint = Union[Color, LinearGradient]


def coerce_paint(paint: Paint | tuple[int, int, int]) -> Paint:
    if isinstance(paint, LinearGradient):
        return paint
    return coerce_color(paint)


@dataclass(frozen=True)
class Stroke:
    width: float = 1.0
    cap: LineCap = "square"
    join: LineJoin = "miter"
    miter_limit: float = 10.0
    dash: tuple[float, ...] | None = None
    dash_phase: float = 0.0

    def __post_init__(self) -> None:
        if self.width < 0:
            raise ConfigurationError("stroke width must be >= 0")
        if self.dash is not None:
            dash = tuple(float(v) for v in self.dash)
            if not dash or any(v < 0 for v in dash) or sum(dash) <= 0:
                raise ConfigurationError("stroke dash lengths must be >= 0 with a positive total")
            object.__setattr__(self, "dash", dash)


@dataclass(frozen=True)
class FontSpec:
    family: str = "SansSerif"
    style: FontStyle = "plain"
    size: float = 12.0

    def derive(self, size: float) -> "FontSpec":
        return replace(self, size=float(size))

    @property
    def bold(self) -> bool:
        return self.style in ("bold", "bold-italic")

    @property
    def italic(self) -> bool:
        return self.style in ("italic", "bold-italic")


@dataclass(frozen=True)
class ShadowSpec:
    offset_x: float = 3.0
    offset_y: float = 0.0
    blur_radius: int = 5
    paint: Paint = (0, 0, 0, 128)

    def __post_init__(self) -> None:
        if int(self.blur_radius) != self.blur_radius or self.blur_radius < 0:
            raise ConfigurationError("shadow blur_radius must be an integer >= 0")
        object.__setattr__(self, "blur_radius", int(self.blur_radius))
        object.__setattr__(self, "paint", coerce_paint(self.paint))
