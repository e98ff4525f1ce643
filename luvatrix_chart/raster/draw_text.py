from __future__ import annotations

from functools import lru_cache
import logging
import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from luvatrix_chart.geometry import Affine
from luvatrix_chart.raster.coverage import Coverage
from luvatrix_chart.style import FontSpec, FontStyle


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "SansSerif"
SANS_FONT_PATTERNS = (
    "dejavusans",
    "liberationsans",
    "arial",
    "helvetica",
    "freesans",
    "notosans",
)
SERIF_FONT_PATTERNS = (
    "dejavuserif",
    "liberationserif",
    "timesnewroman",
    "times",
    "freeserif",
)
MONO_FONT_PATTERNS = (
    "dejavusansmono",
    "liberationmono",
    "menlo",
    "monaco",
    "couriernew",
    "courier",
)
FAMILY_ALIASES = {
    "sansserif": SANS_FONT_PATTERNS,
    "sans": SANS_FONT_PATTERNS,
    "dialog": SANS_FONT_PATTERNS,
    "serif": SERIF_FONT_PATTERNS,
    "monospaced": MONO_FONT_PATTERNS,
    "monospace": MONO_FONT_PATTERNS,
    "dialoginput": MONO_FONT_PATTERNS,
}
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
)
_MASK_PAD = 1


def text_advance(text: str | None, font: FontSpec) -> float:
    """Advance width of ``text``; ``0`` for empty text or a non-positive size."""
    if not text or font.size <= 0:
        return 0.0
    return float(load_font(font).getlength(text))


def ink_bounds(text: str | None, font: FontSpec) -> tuple[float, float, float, float]:
    """Visual bounds ``(left, top, right, bottom)`` relative to the left end of the baseline."""
    if not text or font.size <= 0:
        return (0.0, 0.0, 0.0, 0.0)
    left, top, right, bottom = load_font(font).getbbox(text, anchor="ls")
    return (float(left), float(top), float(right), float(bottom))


def font_metrics(font: FontSpec) -> tuple[float, float]:
    """``(ascent, descent)`` of the font, both positive."""
    if font.size <= 0:
        return (0.0, 0.0)
    ascent, descent = load_font(font).getmetrics()
    return (float(ascent), float(descent))


def text_coverage(
    text: str,
    font: FontSpec,
    x: float,
    y: float,
    to_device: Affine,
    width: int,
    height: int,
) -> Coverage | None:
    """Coverage of ``text`` drawn with its baseline origin at user-space ``(x, y)``."""
    if not text or font.size <= 0:
        return None
    mask, ox, oy = _render_mask(text, font)
    mask_to_device = to_device @ Affine.translation(x - ox, y - oy)
    if _is_translation(mask_to_device):
        return (int(round(mask_to_device.e)), int(round(mask_to_device.f)), mask.astype(np.float32) / 255.0)

    mh, mw = mask.shape
    corners = mask_to_device.apply(np.asarray([(0, 0), (mw, 0), (0, mh), (mw, mh)], dtype=np.float64))
    x0 = max(0, int(math.floor(float(corners[:, 0].min()))))
    y0 = max(0, int(math.floor(float(corners[:, 1].min()))))
    x1 = min(width, int(math.ceil(float(corners[:, 0].max()))))
    y1 = min(height, int(math.ceil(float(corners[:, 1].max()))))
    if x1 <= x0 or y1 <= y0:
        return None
    try:
        inv = mask_to_device.inverse() @ Affine.translation(x0, y0)
    except ValueError:
        return None
    warped = Image.fromarray(mask).transform(
        (x1 - x0, y1 - y0),
        Image.Transform.AFFINE,
        (inv.a, inv.c, inv.e, inv.b, inv.d, inv.f),
        resample=Image.Resampling.BILINEAR,
    )
    return (x0, y0, np.asarray(warped, dtype=np.float32) / 255.0)


def _is_translation(m: Affine) -> bool:
    return abs(m.a - 1.0) < 1e-9 and abs(m.d - 1.0) < 1e-9 and abs(m.b) < 1e-9 and abs(m.c) < 1e-9


@lru_cache(maxsize=256)
def _render_mask(text: str, font: FontSpec) -> tuple[np.ndarray, int, int]:
    pil_font = load_font(font)
    left, top, right, bottom = pil_font.getbbox(text, anchor="ls")
    origin_x = _MASK_PAD - int(left)
    origin_y = _MASK_PAD - int(top)
    width = max(1, int(right - left) + 2 * _MASK_PAD)
    height = max(1, int(bottom - top) + 2 * _MASK_PAD)
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((origin_x, origin_y), text, fill=255, font=pil_font, anchor="ls")
    return (np.asarray(image, dtype=np.uint8), origin_x, origin_y)


@lru_cache(maxsize=64)
def load_font(font: FontSpec) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    font_path = _resolve_font_path(font.family, font.style)
    if font_path is None:
        return ImageFont.load_default(size=font.size)
    try:
        return ImageFont.truetype(str(font_path), size=font.size)
    except Exception:
        LOGGER.warning("could not load font file %s; using Pillow's default font", font_path)
        return ImageFont.load_default(size=font.size)


@lru_cache(maxsize=64)
def _resolve_font_path(font_family: str, style: FontStyle) -> Path | None:
    wanted = _normalize(font_family) or _normalize(DEFAULT_FONT_FAMILY)
    candidates = _font_candidates()

    if wanted in FAMILY_ALIASES:
        found = _best_match(candidates, FAMILY_ALIASES[wanted], style)
    else:
        found = _best_match(candidates, (wanted,), style)
        if found is None:
            LOGGER.warning("font family %r not found; falling back to sans-serif", font_family)
            found = _best_match(candidates, SANS_FONT_PATTERNS, style)
    if found is None:
        LOGGER.warning("no font file found for family %r; using Pillow's default font", font_family)
    return found


@lru_cache(maxsize=1)
def _font_candidates() -> tuple[Path, ...]:
    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))
    return tuple(sorted(candidates))


def _best_match(candidates: tuple[Path, ...], patterns: tuple[str, ...], style: FontStyle) -> Path | None:
    for pattern in patterns:
        matches = [path for path in candidates if pattern in _normalize(path.stem)]
        if matches:
            return min(matches, key=lambda path: (_style_penalty(_normalize(path.stem), style), len(path.stem)))
    return None


def _style_penalty(stem: str, style: FontStyle) -> int:
    want_bold = style in ("bold", "bold-italic")
    want_italic = style in ("italic", "bold-italic")
    has_bold = "bold" in stem
    has_italic = "italic" in stem or "oblique" in stem
    return int(has_bold != want_bold) + int(has_italic != want_italic)


def _normalize(name: str) -> str:
    return name.strip().lower().replace(" ", "").replace("-", "").replace("_", "")
