from __future__ import annotations
from dataclasses import dataclass
from math import sqrt
from typing import Iterable, List, Sequence, Tuple, Union

import numpy as np

# Порівняння робимо точно (== 0, > 0). Додатне значення вмикає допуск
# для тестів видимості, ребер та колінеарності стартового трикутника.
EPS = 0.0

@dataclass(frozen=True)
class Pt:
    x: float
    y: float
    z: float
    def __iter__(self):
        yield self.x; yield self.y; yield self.z

PointLike = Union[Pt, Sequence[float]]

def as_pt(p: PointLike) -> Pt:
    if isinstance(p, Pt):
        return p
    x, y, z = p
    return Pt(float(x), float(y), float(z))

def add(a: Pt, b: Pt) -> Pt:
    return Pt(a.x + b.x, a.y + b.y, a.z + b.z)

def sub(a: Pt, b: Pt) -> Pt:
    return Pt(a.x - b.x, a.y - b.y, a.z - b.z)

def neg(a: Pt) -> Pt:
    return Pt(-a.x, -a.y, -a.z)

def scale(a: Pt, k: float) -> Pt:
    return Pt(a.x*k, a.y*k, a.z*k)

def dot(a: Pt, b: Pt) -> float:
    return a.x*b.x + a.y*b.y + a.z*b.z

def cross(a: Pt, b: Pt) -> Pt:
    return Pt(a.y*b.z - a.z*b.y,
              a.z*b.x - a.x*b.z,
              a.x*b.y - a.y*b.x)

def norm(a: Pt) -> float:
    return sqrt(dot(a, a))

def zxy_key(p: Pt) -> Tuple[float, float, float]:
    """Ключ порядку обробки: z, потім x, потім y (не геометричний зміст)."""
    return (p.z, p.x, p.y)

def sort_points(points: Iterable[PointLike]) -> List[Pt]:
    # sorted() стабільний: однакові точки лишаються у вхідному порядку
    return sorted((as_pt(p) for p in points), key=zxy_key)

def centroid(points: Iterable[Pt]) -> Pt:
    xs = ys = zs = 0.0
    n = 0
    for p in points:
        xs += p.x; ys += p.y; zs += p.z; n += 1
    if n == 0:
        raise ValueError("empty set")
    inv = 1.0 / n
    return Pt(xs*inv, ys*inv, zs*inv)

def to_array(points: Iterable[PointLike]) -> np.ndarray:
    """Точки -> масив (N, 3) float64."""
    arr = np.array([tuple(as_pt(p)) for p in points], dtype=float)
    return arr.reshape(-1, 3)

def from_array(arr: np.ndarray) -> List[Pt]:
    return [Pt(float(x), float(y), float(z)) for x, y, z in np.asarray(arr, dtype=float).reshape(-1, 3)]
