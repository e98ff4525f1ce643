from __future__ import annotations


class PlotDataError(ValueError):
    """Series input that cannot be turned into chart values."""


class ConfigurationError(ValueError):
    """Renderer, axis or chart configuration that is rejected at the setter."""


class ContextStateError(RuntimeError):
    """Corrupted DrawContext state: unbalanced restore or a mid-pass shadow change."""
