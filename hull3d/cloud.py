from __future__ import annotations
from typing import List

import numpy as np

from .geom import Pt, from_array

DEFAULT_SEED = 1234567890


def generate_point_cloud(scale: float, count: int, seed: int = DEFAULT_SEED) -> List[Pt]:
    """
    count точок, кожна координата рівномірно з [-scale, scale].
    Генератор — numpy PCG64 із заданим seed: однаковий результат на будь-якій
    платформі, але не той самий, що дає оригінальний C++ движок.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    rng = np.random.Generator(np.random.PCG64(seed))
    # по рядку на точку: x, y, z
    arr = rng.uniform(-scale, scale, size=(count, 3))
    return from_array(arr)
