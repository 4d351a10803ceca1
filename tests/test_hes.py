import numpy as np
import pytest

from ahfmesh.flags import FacetFlag
from ahfmesh.hes import EdgeTopologyBuilder, HalfEdge, Mesh, NonManifoldError
from ahfmesh.points import DimensionError


def test_single_tri_topology(single_tri):
    mesh = single_tri
    mesh._check()

    assert mesh.n_faces == 1
    assert mesh.half_edges[0] == (HalfEdge(0, 1), HalfEdge(1, 2), HalfEdge(2, 0))

    # Every halfedge lies on the boundary and gets its own pseudo-face.
    assert mesh.b2e == ((0, 0), (0, 1), (0, 2))
    assert mesh.e2e[0] == ((1, 0), (2, 0), (3, 0))
    assert len(mesh.half_edges) == 4

    for k, (f, l) in enumerate(mesh.b2e):
        h = mesh.half_edges[f][l]
        (bh,) = mesh.half_edges[1 + k]

        assert bh.boundary
        assert bh == HalfEdge(h.dest, h.origin, FacetFlag.BOUNDARY)

    assert mesh.size == (3, 3, 1)


def test_two_tris_topology(two_tris):
    mesh = two_tris
    mesh._check()

    interior = [
        (f, l)
        for f in range(mesh.n_faces)
        for l in range(3)
        if not mesh.is_boundary(mesh.e2e[f][l])
    ]

    # One shared edge, seen once from each side.
    assert interior == [(0, 2), (1, 0)]
    assert mesh.e2e[0][2] == (1, 0)
    assert mesh.e2e[1][0] == (0, 2)

    assert mesh.b2e == ((0, 0), (0, 1), (1, 1), (1, 2))
    assert len(mesh.half_edges) == 2 + 4
    assert mesh.size == (4, 5, 2)


def test_two_tris_v2e_first_in_traversal_order(two_tris):
    assert two_tris.v2e == ((0, 0), (0, 1), (0, 2), (1, 2))


def test_twin_symmetry(fan_mesh, quad_strip, tet_surface):
    for mesh in (fan_mesh, quad_strip, tet_surface):
        n, k = mesh.ec.shape

        for f in range(n):
            for l in range(k):
                assert mesh.twin(mesh.twin((f, l))) == (f, l)

        # Boundary pseudo-faces point back at their real halfedge.
        for b in range(n, len(mesh.half_edges)):
            assert mesh.twin(mesh.twin((b, 0))) == (b, 0)
            assert not mesh.is_boundary(mesh.twin((b, 0)))


def test_boundary_completeness(fan_mesh, quad_strip):
    for mesh in (fan_mesh, quad_strip):
        n, k = mesh.ec.shape

        no_twin = {
            (f, l)
            for f in range(n)
            for l in range(k)
            if (mesh.half_edges[f][l].dest, mesh.half_edges[f][l].origin)
            not in mesh.halfedges
        }

        assert no_twin == set(mesh.b2e)
        assert len(mesh.b2e) == len(set(mesh.b2e))
        assert len(mesh.half_edges) == n + len(mesh.b2e)


def test_closed_surface_has_no_boundary(tet_surface):
    mesh = tet_surface
    mesh._check()

    assert mesh.b2e == ()
    assert len(mesh.half_edges) == mesh.n_faces

    for row in mesh.e2e:
        for f, _ in row:
            assert 0 <= f < mesh.n_faces

    assert mesh.size == (4, 6, 4)


def test_quad_strip(quad_strip):
    mesh = quad_strip
    mesh._check()

    # Edge 1 -> 4 of the first quad is shared with 4 -> 1 of the second.
    assert mesh.e2e[0][1] == (1, 3)
    assert mesh.e2e[1][3] == (0, 1)
    assert len(mesh.b2e) == 6
    assert mesh.size == (6, 7, 2)


def test_vertex_coverage(fan_mesh, quad_strip, tet_surface):
    for mesh in (fan_mesh, quad_strip, tet_surface):
        for v in np.unique(mesh.ec):
            key = mesh.v2e[v]

            assert key is not None
            assert mesh.halfedge(key).origin == v


def test_unreferenced_vertex_stays_unset():
    mesh = Mesh([[0, 0], [1, 0], [0, 1], [5, 5]], [[0, 1, 2]])

    assert mesh.v2e[3] is None
    assert not mesh.boundary_vertex(3)


def test_navigation(quad_strip):
    mesh = quad_strip

    assert mesh.next((0, 3)) == (0, 0)
    assert mesh.prev((0, 0)) == (0, 3)
    assert mesh.next((2, 0)) == (2, 0)

    with pytest.raises(IndexError):
        mesh.halfedge((0, 4))

    with pytest.raises(IndexError):
        mesh.twin((len(mesh.half_edges), 0))


def test_find(two_tris):
    mesh = two_tris

    assert mesh.find(0, 2) == (1, 0)
    assert mesh.find(2, 0) == (0, 2)

    # 1 -> 0 lies outside the mesh.
    key = mesh.find(1, 0)
    assert mesh.is_boundary(key)
    assert tuple(mesh.halfedge(key)) == (1, 0)

    assert mesh.find(1, 3) is None


def test_boundary_vertices(fan_mesh):
    assert [fan_mesh.boundary_vertex(v) for v in range(5)] == [
        True, True, True, True, False
    ]


def test_connectivity_only_mesh():
    mesh = Mesh(3, [[0, 1, 2]])

    assert mesh.vertices is None
    assert mesh.points is None
    assert mesh.n_vertices == 3
    assert len(mesh.b2e) == 3


def test_tables_are_read_only(two_tris):
    with pytest.raises(ValueError):
        two_tris.ec[0, 0] = 3

    with pytest.raises(TypeError):
        two_tris.halfedges[5, 6] = (0, 0)

    with pytest.raises(TypeError):
        two_tris.e2e[0][0] = (1, 1)


def test_quiet_flag(capsys):
    Mesh([[0, 0], [1, 0], [0, 1]], [[0, 1, 2]], quiet=False)
    out = capsys.readouterr().out

    assert "half-edges" in out
    assert "3 boundary" in out

    Mesh([[0, 0], [1, 0], [0, 1]], [[0, 1, 2]])
    assert capsys.readouterr().out == ""


def test_out_of_range_vertex_index():
    with pytest.raises(IndexError):
        Mesh([[0, 0], [1, 0], [0, 1]], [[0, 1, 3]])

    with pytest.raises(IndexError):
        EdgeTopologyBuilder(3, [[0, 1, -1]])


def test_bad_vertex_dimension():
    with pytest.raises(DimensionError):
        Mesh([[0.0], [1.0], [2.0]], [[0, 1, 2]])


@pytest.mark.parametrize(
    "faces",
    [
        [[0, 1]],                       # less than three vertices
        [[0, 0, 1]],                    # duplicate vertex
        [0, 1, 2],                      # not a table
        [[0.0, 1.0, 2.0]],              # not integer
    ],
)
def test_malformed_connectivity(faces):
    with pytest.raises(ValueError):
        Mesh(4, faces)


def test_non_manifold_edge():
    # Both faces use the oriented edge 0 -> 1.
    with pytest.raises(NonManifoldError):
        Mesh(4, [[0, 1, 2], [0, 1, 3]])


def test_halfedge_record():
    h = HalfEdge(3, 7)

    assert tuple(h) == (3, 7)
    assert h[0] == 3 and h[1] == 7
    assert not h.boundary
    assert h != HalfEdge(3, 7, FacetFlag.BOUNDARY)

    with pytest.raises(IndexError):
        h[2]

    with pytest.raises(IndexError):
        HalfEdge(-1, 2)


def test_builder_is_independent_of_mesh():
    topo = EdgeTopologyBuilder(4, np.array([[0, 1, 2], [0, 2, 3]])).build()

    assert topo.e2e[0][2] == (1, 0)
    assert topo.halfedge_map[2, 0] == (0, 2)
    assert len(topo.b2e) == 4
