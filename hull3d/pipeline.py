from __future__ import annotations
import logging
from typing import Iterable, List, Tuple

from .errors import HullError
from .geom import EPS, PointLike, Pt, cross, dot, sort_points, sub, to_array
from .hull import ConvexHull3D

log = logging.getLogger(__name__)


def generate_convex_hull(points: Iterable[PointLike], eps: float = EPS) -> List[Pt]:
    """
    Опукла оболонка як плаский список трикутників (3 точки на грань).
    Порожній список, якщо точок < 4, перші три (у порядку z, x, y) колінеарні
    або фіналізація знайшла незшите ребро. Причину пише лог (DEBUG);
    щоб отримати її як виняток, використовуй ConvexHull3D напряму.
    """
    try:
        return ConvexHull3D(points, eps=eps).triangles()
    except HullError as e:
        log.debug("no hull: %s: %s", type(e).__name__, e)
        return []


def hull_mesh(
    points: Iterable[PointLike],
    backend: str = "internal",
) -> Tuple[List[Pt], List[Tuple[int, int, int]]]:
    """
    Оболонка як (точки, трикутники):
      - "internal" — наш ConvexHull3D;
      - "scipy"    — Qhull через scipy.spatial.ConvexHull (для звірки).

    Повертає:
      pts   — точки, відсортовані за (z, x, y);
      faces — трикутники (індекси у pts), обхід назовні.
    """
    pts: List[Pt] = sort_points(points)

    if backend.lower() == "internal":
        hull = ConvexHull3D(pts)
        return hull.P, hull.faces()

    if backend.lower() == "scipy":
        try:
            from scipy.spatial import ConvexHull
        except ImportError as e:
            raise RuntimeError(
                "backend='scipy', but SciPy is not installed. "
                "Install scipy or use backend='internal'."
            ) from e

        arr = to_array(pts)
        qh = ConvexHull(arr)
        faces: List[Tuple[int, int, int]] = []
        for simplex, eq in zip(qh.simplices, qh.equations):
            a, b, c = (int(i) for i in simplex)
            # Qhull не гарантує обхід; звіряємо з нормаллю з equations
            w = cross(sub(pts[b], pts[a]), sub(pts[c], pts[a]))
            if dot(w, Pt(float(eq[0]), float(eq[1]), float(eq[2]))) < 0:
                b, c = c, b
            faces.append((a, b, c))
        return pts, faces

    raise ValueError(f"Unknown backend: {backend}")
