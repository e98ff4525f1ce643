from .normalize import normalize_value, normalize_values

__all__ = ["normalize_value", "normalize_values"]
