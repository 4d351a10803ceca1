import numpy as np
import pytest

from ahfmesh.ahf import VolumeMesh
from ahfmesh.hes import Mesh


@pytest.fixture
def single_tri():
    """
    A single counter-clockwise triangle.
    """
    return Mesh([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1, 2]])


@pytest.fixture
def two_tris():
    """
    The unit square split along the diagonal 0-2.
    """
    points = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
    return Mesh(points, [[0, 1, 2], [0, 2, 3]])


@pytest.fixture
def fan_mesh():
    """
    The unit square split into four triangles around its center vertex 4.
    """
    points = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0], [0.5, 0.5]]
    faces = [[0, 1, 4], [1, 2, 4], [2, 3, 4], [3, 0, 4]]
    return Mesh(points, faces)


@pytest.fixture
def quad_strip():
    """
    Two quads sharing the edge 1-4.
    """
    points = [[0, 0], [1, 0], [2, 0], [0, 1], [1, 1], [2, 1]]
    return Mesh(points, [[0, 1, 4, 3], [1, 2, 5, 4]])


@pytest.fixture
def tet_surface():
    """
    Closed, consistently oriented triangle surface of a tetrahedron.
    """
    points = np.array(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
    )
    faces = [[0, 1, 2], [0, 3, 1], [1, 3, 2], [2, 3, 0]]
    return Mesh(points, faces)


@pytest.fixture
def single_tet():
    points = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
    return VolumeMesh(points, [[0, 1, 2, 3]])


@pytest.fixture
def two_tets():
    """
    Two tetrahedra glued along the facet (0, 1, 2); vertex 4 is the apex
    of the second one.
    """
    points = [
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
        [0.3, 0.3, -1.0],
    ]
    return VolumeMesh(points, [[0, 1, 2, 3], [0, 2, 1, 4]])


@pytest.fixture
def single_hex():
    return VolumeMesh(8, [list(range(8))])


@pytest.fixture
def two_hexes():
    """
    Two hexahedra glued along the last facet (4, 7, 6, 5) of the first.
    The second cell lists the shared facet first, starting at vertex 5.
    """
    return VolumeMesh(12, [list(range(8)), [5, 6, 7, 4, 8, 9, 10, 11]])
