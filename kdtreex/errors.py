from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when points, radii, or query points violate the index contract."""


__all__ = ["InvalidArgument"]
