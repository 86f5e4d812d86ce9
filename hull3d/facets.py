# hull3d/facets.py
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from .errors import IllegalTransition
from .geom import Pt

# сторона Snork: яке поле сусіда писати
SIDE_AC = 0
SIDE_AB = 1


class FacetState(Enum):
    DEAD = 0      # видима з поточної точки, викидається при фіналізації
    LIVE = 1      # частина поточної оболонки, всі сусіди прописані
    PENDING = 2   # щойно створена, сусіди ще не зшиті


@dataclass
class Facet:
    """
    Трикутна грань оболонки.
    a, b, c: індекси вершин (порядок = орієнтація).
    ab, bc, ac: сусідня грань через ребро a-b, b-c, a-c (None — ще не зшито).
    normal: ненормована нормаль площини; важить лише її знак.
    """
    a: int
    b: int
    c: int
    normal: Pt
    ab: Optional[int] = None
    bc: Optional[int] = None
    ac: Optional[int] = None
    state: FacetState = FacetState.LIVE

    def vertices(self) -> Tuple[int, int, int]:
        return (self.a, self.b, self.c)

    def neighbors(self) -> Tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.ab, self.bc, self.ac)

    def edges(self) -> List[Tuple[str, int, int]]:
        """(слот, u, v) у порядку обходу при розширенні горизонту."""
        return [("ab", self.a, self.b), ("ac", self.a, self.c), ("bc", self.b, self.c)]

    def slot_for_edge(self, u: int, v: int) -> Optional[str]:
        e = {u, v}
        if e == {self.a, self.b}:
            return "ab"
        if e == {self.a, self.c}:
            return "ac"
        if e == {self.b, self.c}:
            return "bc"
        return None

    def flipped(self) -> "Facet":
        # міняємо b<->c разом із полями ребер a-b / a-c
        return replace(self, b=self.c, c=self.b, ab=self.ac, ac=self.ab)


class Snork(NamedTuple):
    """Тимчасовий запис для зшивки нових граней по ребру (нова точка, endpoint)."""
    facet_id: int
    endpoint: int
    side: int


class FacetStore:
    """
    Арена граней: грань — це її індекс у списку, сусіди — індекси.
    Мертві грані лишаються на місці до фіналізації, щоб індекси не зсувались.
    """

    def __init__(self) -> None:
        self.facets: List[Facet] = []
        # не-мертві грані у порядку створення (dict зберігає порядок вставки)
        self._alive: Dict[int, None] = {}

    def __len__(self) -> int:
        return len(self.facets)

    def __getitem__(self, fid: int) -> Facet:
        return self.facets[fid]

    def add(self, facet: Facet) -> int:
        fid = len(self.facets)
        self.facets.append(facet)
        if facet.state is not FacetState.DEAD:
            self._alive[fid] = None
        return fid

    def kill(self, fid: int) -> None:
        f = self.facets[fid]
        if f.state is not FacetState.LIVE:
            raise IllegalTransition(f"facet {fid}: {f.state.name} -> DEAD")
        f.state = FacetState.DEAD
        del self._alive[fid]

    def promote(self, fid: int) -> None:
        f = self.facets[fid]
        if f.state is not FacetState.PENDING:
            raise IllegalTransition(f"facet {fid}: {f.state.name} -> LIVE")
        f.state = FacetState.LIVE

    def newest_first(self) -> Iterator[int]:
        """Не-мертві грані від найновішої до найстарішої (не змінювати store під час обходу)."""
        return reversed(self._alive)

    def alive_ids(self) -> List[int]:
        return list(self._alive)

    def count(self, state: FacetState) -> int:
        return sum(1 for f in self.facets if f.state is state)
