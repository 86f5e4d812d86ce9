# hull3d/stitch.py
"""
Зшивка граней, створених за один крок вставки.

Кожна нова грань (p, b, c) має два незшиті ребра: p-b (поле ab) та p-c (поле ac).
Два такі ребра збігаються, коли в них однаковий другий кінець, тож досить
відсортувати Snork-и за (endpoint, side) і з'єднати сусідні пари.
"""
from __future__ import annotations
from typing import List, Tuple

from .facets import FacetState, FacetStore, Snork, SIDE_AB, SIDE_AC
from .predicates import same_direction


def collect_snorks(store: FacetStore, first_new: int) -> List[Snork]:
    """Snork-и для всіх PENDING граней з індексом >= first_new (від нових до старих); грані стають LIVE."""
    snorks: List[Snork] = []
    for fid in range(len(store) - 1, first_new - 1, -1):
        f = store[fid]
        if f.state is FacetState.PENDING:
            snorks.append(Snork(fid, f.b, SIDE_AB))
            snorks.append(Snork(fid, f.c, SIDE_AC))
            store.promote(fid)
    return snorks


def _write_side(store: FacetStore, s: Snork, other: int) -> None:
    f = store[s.facet_id]
    if s.side == SIDE_AB:
        f.ab = other
    else:
        f.ac = other


def link(store: FacetStore, s: Snork, t: Snork) -> None:
    _write_side(store, s, t.facet_id)
    _write_side(store, t, s.facet_id)


def pick_partner(store: FacetStore, s0: Snork, s1: Snork, s2: Snork, s3: Snork) -> Tuple[Snork, Snork, Snork]:
    """
    Вузол із чотирьох граней на одному endpoint.
    Партнер s0 — перший з s1, s2, s3, чия нормаль співнапрямлена з нормаллю s0
    (сусід по той самий бік пласкої оболонки, а не її дзеркальна копія).
    Повертає (партнер, інша пара...).
    """
    n0 = store[s0.facet_id].normal
    cands = [s1, s2, s3]
    for k, s in enumerate(cands):
        if same_direction(n0, store[s.facet_id].normal):
            rest = cands[:k] + cands[k + 1:]
            return s, rest[0], rest[1]
    return s1, s2, s3


def stitch(store: FacetStore, first_new: int) -> int:
    """Зшити нові грані між собою. Повертає кількість з'єднаних пар."""
    snorks = collect_snorks(store, first_new)
    if len(snorks) < 2:
        return 0

    snorks.sort(key=lambda s: (s.endpoint, s.side))
    n = len(snorks)
    links = 0
    i = 0
    while i < n - 1:
        s0, s1 = snorks[i], snorks[i + 1]
        if s0.endpoint != s1.endpoint:
            i += 1
            continue
        quad = i + 3 < n and snorks[i + 2].endpoint == s0.endpoint and snorks[i + 3].endpoint == s0.endpoint
        if not quad:
            # звичайне ребро: рівно дві грані
            link(store, s0, s1)
            links += 1
            i += 2
            continue
        partner, s2, s3 = pick_partner(store, s0, s1, snorks[i + 2], snorks[i + 3])
        link(store, s0, partner)
        link(store, s2, s3)
        links += 2
        i += 4
    return links
