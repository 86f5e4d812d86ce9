# hull3d/predicates.py
from __future__ import annotations
from typing import Tuple
from .geom import Pt, sub, cross, dot, norm, EPS

def orient3d(a: Pt, b: Pt, c: Pt, d: Pt) -> float:
    """
    ((b-a) x (c-a)) . (d-a): > 0 — d з того боку, куди дивиться
    нормаль обходу (a, b, c); 0 — d у площині трикутника.
    """
    return dot(cross(sub(b, a), sub(c, a)), sub(d, a))

def signed_distance_to_plane(a: Pt, b: Pt, c: Pt, p: Pt) -> float:
    """Знакова відстань від p до площини (a, b, c); для виродженого трикутника — 0."""
    area2 = norm(cross(sub(b, a), sub(c, a)))
    if area2 == 0.0:
        return 0.0
    return orient3d(a, b, c, p) / area2

def plane_side(p: Pt, anchor: Pt, normal: Pt) -> float:
    """dot(p - anchor, normal): > 0 — точка перед площиною грані."""
    d = sub(p, anchor)
    return d.x*normal.x + d.y*normal.y + d.z*normal.z

def visible_from_point(p: Pt, anchor: Pt, normal: Pt, eps: float = EPS) -> bool:
    # рівність (точка на площині) — НЕ видно
    return plane_side(p, anchor, normal) > eps

def edge_cross_test(a: Pt, b: Pt, c: Pt, x: Pt) -> Tuple[float, Pt]:
    """
    Тест ребра (a,b) пласкої оболонки щодо нової точки x.
    Повертає (s, n2), де n2 = (b-a) x (x-a), s = ((b-a) x (c-a)) . n2.
    s < 0 — x і c по різні боки від прямої ab, тобто ребро видно з x.
    """
    ab = sub(b, a)
    n1 = cross(ab, sub(c, a))
    n2 = cross(ab, sub(x, a))
    return dot(n1, n2), n2

def same_direction(n1: Pt, n2: Pt) -> bool:
    """Нормалі співнапрямлені (кут < 90°)."""
    return dot(n1, n2) > 0.0
