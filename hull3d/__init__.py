"""
hull3d — інкрементальна 3D опукла оболонка (Py 3.13).
Точки вставляються у фіксованому порядку (z, x, y); сітка — арена граней із сусідством по індексах.
"""

__version__ = "0.1.0"

from hull3d.geom import Pt, EPS, centroid, sort_points
from hull3d.errors import HullError, InsufficientPoints, DegenerateSeed, UnresolvedAdjacency, IllegalTransition
from hull3d.facets import Facet, FacetState, FacetStore, Snork
from hull3d.hull import ConvexHull3D
from hull3d.cloud import generate_point_cloud, DEFAULT_SEED
from hull3d.pipeline import generate_convex_hull, hull_mesh

__all__ = [
    "Pt", "EPS", "centroid", "sort_points",
    "HullError", "InsufficientPoints", "DegenerateSeed", "UnresolvedAdjacency", "IllegalTransition",
    "Facet", "FacetState", "FacetStore", "Snork",
    "ConvexHull3D", "generate_point_cloud", "DEFAULT_SEED",
    "generate_convex_hull", "hull_mesh", "__version__",
]
