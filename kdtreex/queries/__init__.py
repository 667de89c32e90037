from .knn import Neighbor, nearest, nearest_within, radius_equivalent

__all__ = ["Neighbor", "nearest", "nearest_within", "radius_equivalent"]
