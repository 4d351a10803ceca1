import pytest

import ahfmesh.iterators as it
from ahfmesh.hes import Mesh


def test_interior_vertex_one_ring(fan_mesh):
    assert list(it.verts(fan_mesh, 4)) == [0, 1, 2, 3]
    assert list(it.faces(fan_mesh, 4)) == [0, 1, 2, 3]

    for h in it.halfedges(fan_mesh, 4):
        assert fan_mesh.halfedge(h).origin == 4


def test_boundary_vertex_one_ring(fan_mesh):
    # Counter-clockwise, starting at the boundary edge 0 -> 1.
    assert list(it.verts(fan_mesh, 0)) == [1, 4, 3]
    assert list(it.faces(fan_mesh, 0)) == [0, 3]


def test_closed_surface_one_ring(tet_surface):
    assert list(it.verts(tet_surface, 0)) == [1, 2, 3]
    assert list(it.faces(tet_surface, 0)) == [0, 3, 1]

    for v in range(4):
        assert sorted(it.verts(tet_surface, v)) == [w for w in range(4) if w != v]


def test_one_ring_of_single_tri(single_tri):
    assert list(it.verts(single_tri, 0)) == [1, 2]
    assert list(it.faces(single_tri, 2)) == [0]


def test_isolated_vertex_has_no_neighbors():
    mesh = Mesh(4, [[0, 1, 2]])

    assert list(it.halfedges(mesh, 3)) == []
    assert list(it.verts(mesh, 3)) == []


def test_cell_neighbors(single_tet, two_tets, two_hexes):
    assert list(it.cells(single_tet, 0)) == []
    assert list(it.cells(two_tets, 0)) == [1]
    assert list(it.cells(two_tets, 1)) == [0]
    assert list(it.cells(two_hexes, 1)) == [0]

    with pytest.raises(IndexError):
        list(it.cells(two_tets, 2))
