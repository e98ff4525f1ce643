from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
import math
from typing import Any

import numpy as np
import torch

from luvatrix_chart.errors import PlotDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def normalize_values(values: Any, *, label: str = "values") -> list[float | None]:
    """Turn series input into a list of floats with ``None`` for missing points.

    Accepts sequences, 1-D numpy arrays, torch tensors and pandas Series.
    ``None``, NaN and infinities are treated as missing.
    """
    arr = _coerce_1d_numeric(values, label=label)
    return [float(v) if math.isfinite(v) else None for v in arr.tolist()]


def normalize_value(value: Any, *, label: str = "value") -> float | None:
    if value is None:
        return None
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise PlotDataError(f"{label} is not numeric: {value!r}") from exc
    return out if math.isfinite(out) else None


def _coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(list(value), dtype=object).reshape(-1), label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None or (pd is not None and raw is pd.NA):
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        if isinstance(raw, (str, bytes)):
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}")
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
