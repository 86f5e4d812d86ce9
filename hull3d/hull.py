from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from .errors import DegenerateSeed, InsufficientPoints, UnresolvedAdjacency
from .facets import Facet, FacetState, FacetStore
from .geom import EPS, PointLike, Pt, add, as_pt, centroid, cross, dot, neg, scale, sort_points, sub, to_array
from .predicates import edge_cross_test, orient3d, same_direction, signed_distance_to_plane, visible_from_point
from .stitch import stitch

log = logging.getLogger(__name__)

Edge = Tuple[int, int]          # орієнтоване ребро (u, v)
UEdge = Tuple[int, int]         # неорієнтоване ребро (min(u,v), max(u,v))

# слот ребра -> (перша вершина, друга вершина, протилежна вершина)
_EDGE_ATTRS = (("ab", "a", "b", "c"), ("bc", "b", "c", "a"), ("ac", "a", "c", "b"))


class ConvexHull3D:
    """
    Інкрементальна 3D опукла оболонка з фіксованим порядком вставки.

    Точки сортуються за (z, x, y) і додаються по одній:
      - перші три дають двосторонній плаский «трикутник» із двох граней;
      - якщо точку видно з якоїсь грані — видима область вирізається
        і дірка закривається віялом нових граней до горизонту;
      - якщо не видно і оболонка ще пласка — точку додаємо через граничні ребра.

    Вхід: щонайменше 4 точки (Pt або (x, y, z)).
    self.P — відсортовані точки; індекси вершин граней посилаються на них.
    """

    def __init__(self, points: Iterable[PointLike], eps: float = EPS):
        pts = sort_points(points)
        if len(pts) < 4:
            raise InsufficientPoints(f"Need at least 4 points, got {len(pts)}")
        self.P: List[Pt] = pts
        self.eps = eps
        self.store = FacetStore()

        self._sum = Pt(0.0, 0.0, 0.0)   # сума вже оброблених точок
        self._count = 0
        self._flat = True               # ще жодної вставки через видиму область
        self._final: Optional[List[Facet]] = None

        # 1) стартові дві грані
        self._build_seed()

        # 2) решта точок у відсортованому порядку
        for pid in range(3, len(self.P)):
            self._insert(pid)

        log.debug(
            "hull: %d points, %d facets created, %d alive",
            len(self.P), len(self.store), len(self.store.alive_ids()),
        )

    # ---------------- Публічний API ----------------
    def add_point(self, p: PointLike) -> bool:
        """Додати ще одну точку після побудови. True — оболонка змінилась."""
        self.P.append(as_pt(p))
        return self._insert(len(self.P) - 1)

    def facets(self) -> List[Facet]:
        """Фіналізовані грані: перенумеровані, сусіди переписані, обхід назовні."""
        if self._final is None:
            self._final = self._finalize()
        return [Facet(f.a, f.b, f.c, f.normal, f.ab, f.bc, f.ac, f.state) for f in self._final]

    def faces(self) -> List[Tuple[int, int, int]]:
        """Трикутники оболонки як індекси у self.P."""
        return [f.vertices() for f in self.facets()]

    def triangles(self) -> List[Pt]:
        """Плаский список вершин трикутників, по 3 на грань."""
        return [self.P[i] for f in self.facets() for i in f.vertices()]

    def vertex_indices(self) -> List[int]:
        return sorted({i for f in self.facets() for i in f.vertices()})

    @property
    def is_flat(self) -> bool:
        return self._flat

    # ---------------- Внутрішні методи ----------------
    def _accumulate(self, p: Pt) -> Pt:
        """Оновити суму і повернути центроїд усіх оброблених точок."""
        self._sum = add(self._sum, p)
        self._count += 1
        return scale(self._sum, 1.0 / self._count)

    def _neighbor(self, fid: int, slot: str) -> int:
        nid = getattr(self.store[fid], slot)
        if nid is None:
            raise UnresolvedAdjacency(f"facet {fid}: edge {slot} has no neighbor")
        return nid

    def _build_seed(self) -> None:
        """
        Дві протилежно напрямлені грані (0, 1, 2), сусідні одна одній по всіх ребрах.
        Колінеарні p0, p1, p2 (нульовий векторний добуток) — оболонки немає.
        """
        p0, p1, p2 = self.P[0], self.P[1], self.P[2]
        n = cross(sub(p1, p0), sub(p2, p0))
        if max(abs(n.x), abs(n.y), abs(n.z)) <= self.eps:
            raise DegenerateSeed("First three points are collinear: cannot form a base triangle")

        self.store.add(Facet(0, 1, 2, n, ab=1, bc=1, ac=1))
        self.store.add(Facet(0, 1, 2, neg(n), ab=0, bc=0, ac=0))
        for p in (p0, p1, p2):
            self._accumulate(p)

    def _insert(self, pid: int) -> bool:
        p = self.P[pid]
        middle = self._accumulate(p)
        self._final = None

        seed = self._find_visible(p)
        if seed is None:
            if not self._flat:
                return False  # всередині замкненої оболонки
            return self._add_coplanar(pid) > 0

        self._flat = False
        first_new = len(self.store)
        self._expand_horizon(seed, pid, middle)
        stitch(self.store, first_new)
        return True

    def _find_visible(self, p: Pt) -> Optional[int]:
        """Перша видима грань від найновішої до найстарішої; позначається мертвою."""
        found = None
        for fid in self.store.newest_first():
            f = self.store[fid]
            if visible_from_point(p, self.P[f.a], f.normal, self.eps):
                found = fid
                break
        if found is not None:
            self.store.kill(found)
        return found

    def _expand_horizon(self, seed: int, pid: int, middle: Pt) -> None:
        """
        Обхід видимої області від seed по спільних ребрах (черга індексів).
        Видимий сусід — вмирає і йде в чергу; невидимий — лишається,
        а на спільному ребрі з'являється нова грань до точки pid.
        """
        p = self.P[pid]
        work = [seed]
        i = 0
        while i < len(work):
            fid = work[i]
            i += 1
            for slot, u, v in self.store[fid].edges():
                nid = self._neighbor(fid, slot)
                nb = self.store[nid]
                if visible_from_point(p, self.P[nb.a], nb.normal, self.eps):
                    if nb.state is FacetState.LIVE:
                        self.store.kill(nid)
                        work.append(nid)
                else:
                    self._spawn_on_horizon(pid, u, v, nid, middle)

    def _spawn_on_horizon(self, pid: int, u: int, v: int, kept: int, middle: Pt) -> int:
        p = self.P[pid]
        n = cross(sub(p, self.P[u]), sub(p, self.P[v]))
        # нормаль має дивитись від центроїда вже оброблених точок
        if dot(sub(middle, p), n) > 0:
            n = neg(n)

        fid = self.store.add(Facet(pid, u, v, n, bc=kept, state=FacetState.PENDING))
        kept_f = self.store[kept]
        slot = kept_f.slot_for_edge(u, v)
        if slot is not None:
            setattr(kept_f, slot, fid)
        return fid

    def _add_coplanar(self, pid: int) -> int:
        """
        Точка в площині пласкої оболонки: шукаємо граничні ребра, які вона бачить,
        і на кожному ставимо дві нові протилежно напрямлені грані.
        Граничне ребро — те, де сусід через ребро є дзеркальною копією грані
        (та сама протилежна вершина у тому ж полі).
        """
        numh = len(self.store)
        created = 0
        for hid in range(numh):
            h = self.store[hid]
            if h.state is not FacetState.LIVE:
                continue
            for slot, ua, va, oa in _EDGE_ATTRS:
                mid = self._neighbor(hid, slot)
                mirror = self.store[mid]
                if getattr(h, oa) != getattr(mirror, oa):
                    continue
                created += self._split_boundary_edge(
                    pid, hid, slot, getattr(h, ua), getattr(h, va), getattr(h, oa), mid,
                )

        if created:
            stitch(self.store, numh)
            log.debug("coplanar point %d: %d facets added", pid, created)
        return created

    def _split_boundary_edge(
        self, pid: int, hid: int, slot: str, a: int, b: int, c: int, mirror_id: int
    ) -> int:
        s, n2 = edge_cross_test(self.P[a], self.P[b], self.P[c], self.P[pid])
        if not s < -self.eps:
            return 0

        h = self.store[hid]
        mirror = self.store[mirror_id]
        up_id = len(self.store)
        down_id = up_id + 1
        up = Facet(pid, a, b, n2, state=FacetState.PENDING)
        down = Facet(pid, a, b, neg(n2), state=FacetState.PENDING)
        # грань з тим самим напрямком, що й h, прилягає до h; інша — до дзеркала
        if same_direction(h.normal, n2):
            up.bc, down.bc = hid, mirror_id
            setattr(h, slot, up_id)
            setattr(mirror, slot, down_id)
        else:
            down.bc, up.bc = hid, mirror_id
            setattr(h, slot, down_id)
            setattr(mirror, slot, up_id)
        self.store.add(up)
        self.store.add(down)
        return 2

    def _finalize(self) -> List[Facet]:
        """
        Викинути мертві грані, перенумерувати решту (стабільно), переписати сусідів
        і розвернути обхід кожної грані так, щоб нормаль дивилась від центроїда.
        """
        alive = [fid for fid, f in enumerate(self.store.facets) if f.state is not FacetState.DEAD]
        remap: Dict[int, int] = {old: new for new, old in enumerate(alive)}
        O = centroid(self.P)

        out: List[Facet] = []
        for old in alive:
            f = self.store[old]
            nbrs = [remap.get(n) if n is not None else None for n in f.neighbors()]
            if any(n is None for n in nbrs):
                raise UnresolvedAdjacency(f"facet {old} links to a dead or missing facet: {f.neighbors()}")
            g = Facet(f.a, f.b, f.c, f.normal, nbrs[0], nbrs[1], nbrs[2], FacetState.LIVE)

            pa, pb, pc = self.P[g.a], self.P[g.b], self.P[g.c]
            w = cross(sub(pb, pa), sub(pc, pa))
            o = orient3d(pa, pb, pc, O)
            # пласка оболонка (o == 0): орієнтуємо за збереженою нормаллю
            if o > 0 or (o == 0 and dot(w, f.normal) < 0):
                g = g.flipped()
                w = neg(w)
            g.normal = w
            out.append(g)
        return out

    # ---------------- Діагностика / Експорт ----------------
    def validate(self, tol: float = 1e-9) -> dict:
        """
        Перевірка коректності фіналізованої оболонки:
          - кожне неорієнтоване ребро зустрічається рівно у 2 гранях,
            кожне орієнтоване — рівно раз (узгоджена орієнтація);
          - сусідства симетричні (зворотні посилання);
          - нормалі дивляться від центроїда;
          - жодна точка не лежить зовні площини грані далі ніж tol
            (відносно розміру обгорткової коробки).
        Пласка оболонка — двосторонній лист: ребра і Ейлер рахуються по одній
        стороні (диск: граничне ребро в 1 грані, внутрішнє в 2, euler == 1).
        Повертає словник із діагностикою (порожні списки = все ок).
        """
        faces = self.facets()
        O = centroid(self.P)

        # 1) кратність ребер
        side = faces
        if self._flat and faces:
            side = [f for f in faces if same_direction(f.normal, faces[0].normal)]
        edge_count: Dict[UEdge, int] = {}
        directed: Dict[Edge, int] = {}
        for f in side:
            a, b, c = f.vertices()
            for u, v in ((a, b), (b, c), (c, a)):
                key = (min(u, v), max(u, v))
                edge_count[key] = edge_count.get(key, 0) + 1
                directed[(u, v)] = directed.get((u, v), 0) + 1
        allowed = (1, 2) if self._flat else (2,)
        bad_edges = [(e, k) for e, k in edge_count.items() if k not in allowed]
        bad_winding = [e for e, k in directed.items() if k != 1]

        # 2) симетрія сусідств
        bad_nbr: List[Tuple[int, str, str]] = []
        for fid, f in enumerate(faces):
            for slot, u, v in f.edges():
                nb = getattr(f, slot)
                if not (0 <= nb < len(faces)):
                    bad_nbr.append((fid, slot, "invalid_neighbor"))
                    continue
                back = faces[nb].slot_for_edge(u, v)
                if back is None or getattr(faces[nb], back) != fid:
                    bad_nbr.append((fid, slot, f"no_backlink_to_{nb}"))

        # 3) орієнтація назовні
        bad_orient: List[int] = []
        for fid, f in enumerate(faces):
            pa, pb, pc = self.P[f.a], self.P[f.b], self.P[f.c]
            if signed_distance_to_plane(pa, pb, pc, O) > 0:
                bad_orient.append(fid)

        used = {i for f in side for i in f.vertices()}
        return {
            "is_flat": self._flat,
            "faces": len(faces),
            "unique_vertices": len(used),
            "edges": len(edge_count),
            "euler": len(used) - len(edge_count) + len(side),
            "bad_edges": bad_edges,
            "bad_winding": bad_winding,
            "bad_neighbors": bad_nbr,
            "bad_orient_faces": bad_orient,
            "points_outside": self._points_outside(faces, tol),
        }

    def _points_outside(self, faces: List[Facet], tol: float, chunk: int = 4096) -> List[int]:
        """Індекси точок, що лежать строго зовні хоча б однієї площини грані."""
        if not faces:
            return []
        pts = to_array(self.P)
        normals = np.array([tuple(f.normal) for f in faces], dtype=float)
        anchors = pts[[f.a for f in faces]]
        lengths = np.linalg.norm(normals, axis=1)
        lengths[lengths == 0.0] = 1.0
        normals /= lengths[:, None]
        offsets = np.einsum("ij,ij->i", normals, anchors)
        extent = float((pts.max(axis=0) - pts.min(axis=0)).max()) or 1.0

        outside: List[int] = []
        for start in range(0, len(pts), chunk):
            block = pts[start:start + chunk]
            dist = block @ normals.T - offsets
            hits = np.flatnonzero(dist.max(axis=1) > tol * extent)
            outside.extend(int(i) + start for i in hits)
        return outside

    def to_off(self) -> str:
        """
        Експорт опуклої оболонки у формат OFF (використані вершини + грані).
        """
        faces = self.faces()
        used = sorted({i for f in faces for i in f})
        remap = {old: new for new, old in enumerate(used)}
        lines = ["OFF", f"{len(used)} {len(faces)} 0"]
        for i in used:
            p = self.P[i]
            lines.append(f"{p.x} {p.y} {p.z}")
        for a, b, c in faces:
            lines.append(f"3 {remap[a]} {remap[b]} {remap[c]}")
        return "\n".join(lines)

    def write_off(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_off())
