import itertools

import pytest
import numpy as np

from hull3d.cloud import generate_point_cloud
from hull3d.errors import DegenerateSeed, InsufficientPoints, UnresolvedAdjacency
from hull3d.facets import FacetState
from hull3d.geom import Pt
from hull3d.hull import ConvexHull3D

TETRA = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)]
CUBE = [(x, y, z) for x in (0, 1) for y in (0, 1) for z in (0, 1)]


def assert_clean(report):
    for key in ("bad_edges", "bad_winding", "bad_neighbors", "bad_orient_faces", "points_outside"):
        assert report[key] == [], key
    assert report["euler"] == 2
    assert report["faces"] % 2 == 0
    assert report["edges"] * 2 == report["faces"] * 3


class TestTetrahedron:

    hull = ConvexHull3D(TETRA)

    def test_four_facets(self):
        assert len(self.hull.faces()) == 4
        assert self.hull.vertex_indices() == [0, 1, 2, 3]

    def test_each_vertex_in_three_facets(self):
        faces = self.hull.faces()
        for v in range(4):
            assert sum(1 for f in faces if v in f) == 3

    def test_each_pair_shares_one_edge(self):
        faces = self.hull.faces()
        for f, g in itertools.combinations(faces, 2):
            assert len(set(f) & set(g)) == 2

    def test_neighbors_are_the_other_three(self):
        for fid, f in enumerate(self.hull.facets()):
            assert sorted(f.neighbors()) == sorted(set(range(4)) - {fid})
            assert f.state is FacetState.LIVE

    def test_outward_winding(self):
        assert_clean(self.hull.validate())

    def test_triangles_are_flat_list(self):
        tris = self.hull.triangles()
        assert len(tris) == 12
        assert all(isinstance(p, Pt) for p in tris)
        assert set(tris) == {Pt(*map(float, p)) for p in TETRA}

    def test_off_export(self):
        lines = self.hull.to_off().splitlines()
        assert lines[0] == "OFF"
        assert lines[1] == "4 4 0"
        assert len(lines) == 2 + 4 + 4
        assert all(line.startswith("3 ") for line in lines[6:])


class TestCube:

    def test_twelve_facets_all_corners(self):
        hull = ConvexHull3D(CUBE)
        assert len(hull.faces()) == 12
        assert hull.vertex_indices() == list(range(8))
        assert_clean(hull.validate())

    def test_input_order_does_not_matter(self):
        a = ConvexHull3D(CUBE)
        b = ConvexHull3D(list(reversed(CUBE)))
        assert a.faces() == b.faces()


class TestDegenerate:

    def test_too_few_points(self):
        with pytest.raises(InsufficientPoints):
            ConvexHull3D(TETRA[:3])
        with pytest.raises(InsufficientPoints):
            ConvexHull3D([])

    def test_collinear_seed(self):
        with pytest.raises(DegenerateSeed):
            ConvexHull3D([(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0)])
        # перші три (за z, x, y) колінеарні, хоч решта — ні
        with pytest.raises(DegenerateSeed):
            ConvexHull3D([(0, 0, 0), (1, 0, 0), (2, 0, 0), (0, 1, 1)])

    def test_collinear_seed_with_tolerance(self):
        pts = [(0, 0, 0), (1, 0, 0), (2, 1e-12, 0), (0, 0, 1)]
        assert len(ConvexHull3D(pts).faces()) == 4
        with pytest.raises(DegenerateSeed):
            ConvexHull3D(pts, eps=1e-9)

    def test_flat_square_gives_two_sided_sheet(self):
        hull = ConvexHull3D([(0, 0, 0), (1, 0, 0), (0, 1, 0), (1, 1, 0)])
        assert hull.is_flat
        facets = hull.facets()
        assert len(facets) == 4
        assert hull.vertex_indices() == [0, 1, 2, 3]
        # дві сторони листа мають протилежний обхід
        assert sorted(f.normal.z for f in facets) == [-1.0, -1.0, 1.0, 1.0]


class TestCoplanarInsertion:

    # третя точка (1,1,0) опиняється всередині основи; (3,1,0) бачить два її ребра
    PTS = [(0, 0, 0), (0, 2, 0), (1, 1, 0), (3, 1, 0), (1, 1, 1)]

    def test_junction_closes_hull(self):
        hull = ConvexHull3D(self.PTS)
        assert not hull.is_flat
        assert len(hull.faces()) == 6
        assert_clean(hull.validate())

    def test_base_is_triangulated_around_inner_point(self):
        hull = ConvexHull3D(self.PTS)
        base = [f for f in hull.faces() if all(hull.P[i].z == 0 for i in f)]
        assert len(base) == 3
        assert all(2 in f for f in base)


class TestIncremental:

    def test_interior_point_changes_nothing(self):
        hull = ConvexHull3D(TETRA)
        before = hull.facets()
        created = len(hull.store)
        assert hull.add_point((0.1, 0.1, 0.1)) is False
        assert hull.facets() == before
        assert len(hull.store) == created

    def test_point_on_facet_changes_nothing(self):
        hull = ConvexHull3D(CUBE)
        before = hull.faces()
        assert hull.add_point((0.5, 0.5, 1.0)) is False
        assert hull.faces() == before

    def test_outside_point_is_added(self):
        hull = ConvexHull3D(TETRA)
        assert hull.add_point((1, 1, 1)) is True
        assert len(hull.faces()) == 6
        assert hull.vertex_indices() == [0, 1, 2, 3, 4]
        assert_clean(hull.validate())

    def test_interior_point_in_input_is_dropped(self):
        hull = ConvexHull3D(TETRA + [(0.1, 0.1, 0.1)])
        assert len(hull.faces()) == 4
        inner = hull.P.index(Pt(0.1, 0.1, 0.1))
        assert inner not in hull.vertex_indices()

    def test_dead_facets_stay_in_store(self):
        hull = ConvexHull3D(CUBE)
        assert hull.store.count(FacetState.DEAD) > 0
        assert hull.store.count(FacetState.PENDING) == 0
        assert len(hull.store.alive_ids()) == len(hull.faces())


class TestRandomClouds:

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_properties(self, seed):
        pts = generate_point_cloud(5.0, 400, seed)
        hull = ConvexHull3D(pts)
        assert_clean(hull.validate())

    def test_deterministic(self):
        pts = generate_point_cloud(1.0, 300, 7)
        a = ConvexHull3D(pts)
        b = ConvexHull3D(pts)
        assert a.faces() == b.faces()
        na = np.array([tuple(f.normal) for f in a.facets()])
        nb = np.array([tuple(f.normal) for f in b.facets()])
        assert np.allclose(na, nb)

    def test_matches_qhull(self):
        from scipy.spatial import ConvexHull

        pts = generate_point_cloud(3.0, 500, 11)
        hull = ConvexHull3D(pts)
        qh = ConvexHull(np.array([tuple(p) for p in hull.P]))
        assert hull.vertex_indices() == sorted(int(i) for i in qh.vertices)
        assert len(hull.faces()) == len(qh.simplices)

    def test_sphere_points_are_all_used(self):
        rng = np.random.default_rng(5)
        v = rng.normal(size=(200, 3))
        v /= np.linalg.norm(v, axis=1)[:, None]
        hull = ConvexHull3D([tuple(p) for p in v])
        assert len(hull.vertex_indices()) == 200
        assert len(hull.faces()) == 2 * 200 - 4
        assert_clean(hull.validate())


class TestUnresolvedAdjacency:

    def test_link_to_dead_facet(self):
        hull = ConvexHull3D(TETRA)
        dead = [i for i in range(len(hull.store)) if hull.store[i].state is FacetState.DEAD]
        live = hull.store.alive_ids()[0]
        hull.store[live].ab = dead[0]
        with pytest.raises(UnresolvedAdjacency):
            hull.facets()

    def test_missing_link(self):
        hull = ConvexHull3D(TETRA)
        hull.store[hull.store.alive_ids()[-1]].ac = None
        with pytest.raises(UnresolvedAdjacency):
            hull.faces()


class TestFlatReport:

    def test_square_counts_one_side(self):
        report = ConvexHull3D([(0, 0, 0), (1, 0, 0), (0, 1, 0), (1, 1, 0)]).validate()
        assert report["is_flat"] is True
        assert report["faces"] == 4
        assert report["edges"] == 5
        assert report["euler"] == 1
        for key in ("bad_edges", "bad_winding", "bad_neighbors", "bad_orient_faces", "points_outside"):
            assert report[key] == [], key

    def test_closed_hull_is_not_flat(self):
        assert ConvexHull3D(TETRA).validate()["is_flat"] is False
