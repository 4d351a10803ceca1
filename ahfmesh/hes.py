# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Array-based halfedge data structure for surface meshes.

A uniform polygonal mesh (every face has the same number of vertices) is
described by two arrays:

    - a :class:`~ahfmesh.points.VertexStore` of vertex coordinates,
    - and an element connectivity table ``ec`` of shape ``(n_faces, k)``.

Instead of linking halfedge objects via references, the connectivity is
encoded by integer pairs ``(f, l)`` that address the halfedge
``ec[f, l] -> ec[f, (l + 1) % k]`` of face ``f``. The tables ``e2e`` (twin
halfedges), ``v2e`` (outgoing halfedge per vertex) and ``b2e`` (boundary
halfedges) are derived by :class:`EdgeTopologyBuilder` in a single pass
and managed by the :class:`Mesh` class.

Each boundary halfedge is paired with a synthesized boundary pseudo-face
that stands in for the outside of the mesh. The k-th pseudo-face gets the
id ``n_faces + k`` and holds a single reversed halfedge, so every halfedge
of the mesh has a valid twin reference.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

from collections import namedtuple
from time import time
from types import MappingProxyType

import numpy as np

import ahfmesh.flags as flags
from ahfmesh.points import VertexStore


EdgeTopology = namedtuple('EdgeTopology',
                          ['half_edges', 'v2e', 'e2e', 'b2e', 'halfedge_map'])
EdgeTopology.__doc__ = """ Frozen result of :meth:`EdgeTopologyBuilder.build`.
"""


class Mesh:
    """ Surface mesh kernel.

    The combinatorics of the mesh are built from a sequence of vertex
    coordinates and a table of face definitions when the mesh is created.
    The mesh is read-only afterwards.

    Parameters
    ----------
    points : array_like or int
        Vertex coordinates of shape (n, 2) or (n, 3). Passing an integer
        results in a connectivity-only mesh with the given number of
        vertices.
    faces : array_like, shape (n_faces, k)
        Face definitions, 0-based vertex indexing. All faces have the
        same number ``k >= 3`` of vertices and are oriented counter
        clockwise.
    quiet : bool, optional
        Suppress console output.

    Raises
    ------
    DimensionError
        If the vertex coordinates are neither 2D nor 3D.
    IndexError
        If a face refers to a vertex that does not exist.
    ValueError
        If `faces` does not define a valid connectivity table.
    NonManifoldError
        When trying to initialize a mesh from non-manifold data.
    """

    def __init__(self, points, faces, *, quiet=True):
        """ Initialize from vertex and face lists.
        """
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        self._verts, n_vertices = _vertex_store(points)

        builder = EdgeTopologyBuilder(n_vertices, faces)
        self._ec = builder.ec

        if not quiet:
            start = time()
            print(f'building {CBOLD}half-edges{CEND} '
                  f'({len(self._ec)} faces)', end=' ...')

        self._topo = builder.build()

        if not quiet:
            print(f' done ({time()-start:.3f} sec, '
                  f'{len(self._topo.b2e)} boundary)')

        # Vertices incident to a boundary halfedge. Boundary halfedges
        # and their real twins share the same pair of vertices.
        self._bverts = frozenset(v for f, l in self._topo.b2e
                                 for v in self._topo.half_edges[f][l])

    def __repr__(self):
        return (f'Mesh(n_vertices={self.n_vertices}, '
                f'n_faces={self.n_faces}, n_boundary={len(self.b2e)})')

    def __getitem__(self, index):
        # Treat a mesh like a tuple consisting of an array of geometric
        # vertices and the face definitions.
        if index == 0:
            return None if self._verts is None else self._verts.points
        elif index == 1:
            return self._ec

        raise IndexError(f'index must be 0 or 1, got {index}')

    @property
    def vertices(self):
        """ Vertex store.

        :obj:`None` for connectivity-only meshes.

        :type: ~ahfmesh.points.VertexStore
        """
        return self._verts

    @property
    def points(self):
        """ Vertex coordinate array (read-only).

        :type: ~numpy.ndarray
        """
        return None if self._verts is None else self._verts.points

    @property
    def ec(self):
        """ Element connectivity table of shape ``(n_faces, k)``.

        :type: ~numpy.ndarray
        """
        return self._ec

    @property
    def n_vertices(self):
        return len(self._topo.v2e)

    @property
    def n_faces(self):
        return self._ec.shape[0]

    @property
    def half_edges(self):
        """ Halfedge table.

        Indexed by ``[face][local]``. Rows ``n_faces`` and above hold the
        boundary pseudo-faces, each consisting of a single halfedge.

        :type: tuple[tuple[HalfEdge, ...], ...]
        """
        return self._topo.half_edges

    @property
    def v2e(self):
        """ Vertex to outgoing halfedge map.

        The entry of a vertex is the pair ``(f, l)`` of the first halfedge
        that originates at the vertex in face-major traversal order, or
        :obj:`None` if the vertex is not referenced by any face.

        :type: tuple[tuple[int, int] or None, ...]
        """
        return self._topo.v2e

    @property
    def e2e(self):
        """ Halfedge to twin halfedge map.

        Indexed by ``[face][local]``. Twins of boundary halfedges refer to
        a boundary pseudo-face ``(f, 0)`` with ``f >= n_faces``.

        :type: tuple[tuple[tuple[int, int], ...], ...]
        """
        return self._topo.e2e

    @property
    def b2e(self):
        """ Boundary halfedges.

        Entry ``k`` is the real halfedge paired with pseudo-face
        ``n_faces + k``.

        :type: tuple[tuple[int, int], ...]
        """
        return self._topo.b2e

    @property
    def halfedges(self):
        """ Halfedge dictionary.

        Read-only mapping of vertex index pairs ``(v, w)`` to the address
        ``(f, l)`` of the real halfedge ``v -> w``. Boundary halfedges are
        not part of this mapping, see :meth:`find`.

        .. code-block:: python

           (v, w) in mesh.halfedges                 # True or False
           f, l = mesh.halfedges[v, w]              # may raise KeyError

        :type: ~types.MappingProxyType
        """
        return self._topo.halfedge_map

    @property
    def size(self):
        """ Mesh size.

        The attribute value :math:`(v, e, f)` holds the number of vertices,
        the number of edges, and the number of faces. Boundary pseudo-faces
        are not counted.

        :type: (int, int, int)
        """
        n_half = self._ec.size
        n_boundary = len(self.b2e)

        assert (n_half + n_boundary) % 2 == 0

        return (self.n_vertices,
                (n_half + n_boundary) // 2,
                self.n_faces)

    def halfedge(self, key):
        """ Halfedge record.

        Parameters
        ----------
        key : tuple(int, int)
            Halfedge address ``(f, l)``, real or boundary.

        Raises
        ------
        IndexError
            If `key` does not address a halfedge.

        Returns
        -------
        HalfEdge
        """
        f, l = key

        if not 0 <= f < len(self.half_edges):
            raise IndexError(f'face index {f} out of range')

        if not 0 <= l < len(self.half_edges[f]):
            raise IndexError(f'local index {l} out of range for face {f}')

        return self.half_edges[f][l]

    def twin(self, key):
        """ Opposite halfedge.

        Symmetric for real and boundary halfedges alike, i.e.,
        ``mesh.twin(mesh.twin(key)) == key`` holds for all keys.

        Parameters
        ----------
        key : tuple(int, int)
            Halfedge address ``(f, l)``.

        Returns
        -------
        tuple(int, int)
        """
        self.halfedge(key)                  # may raise IndexError
        f, l = key

        if f < self.n_faces:
            return self.e2e[f][l]

        return self.b2e[f - self.n_faces]

    def next(self, key):
        """ Successor halfedge in the face loop of `key`.

        A boundary pseudo-face has a single halfedge, its successor is
        the halfedge itself.
        """
        self.halfedge(key)
        f, l = key
        return (f, (l + 1) % len(self.half_edges[f]))

    def prev(self, key):
        """ Predecessor halfedge in the face loop of `key`.
        """
        self.halfedge(key)
        f, l = key
        return (f, (l - 1) % len(self.half_edges[f]))

    def is_boundary(self, key):
        """ Check if `key` addresses a boundary pseudo-face halfedge.
        """
        return key[0] >= self.n_faces

    def boundary_vertex(self, vertex):
        """ Topological state.

        A vertex is a boundary vertex if it is incident to a boundary
        halfedge.

        Parameters
        ----------
        vertex : int
            Vertex index.

        Returns
        -------
        bool
        """
        if not 0 <= vertex < self.n_vertices:
            raise IndexError(f'vertex index {vertex} out of range')

        return vertex in self._bverts

    def find(self, v, w):
        """ Halfedge lookup.

        Parameters
        ----------
        v : int
            Origin vertex.
        w : int
            Destination vertex.

        Returns
        -------
        tuple(int, int) or None
            Address of the halfedge ``v -> w``, a boundary pseudo-face
            address if ``v -> w`` lies outside the mesh or :obj:`None` if
            the vertices are not adjacent.
        """
        key = self.halfedges.get((v, w))

        if key is not None:
            return key

        # The reversed halfedge may exist with a boundary twin.
        key = self.halfedges.get((w, v))

        if key is not None and self.is_boundary(self.e2e[key[0]][key[1]]):
            return self.e2e[key[0]][key[1]]

        return None

    def _check(self):
        """ Check halfedge tables for consistency.
        """
        n_faces, k = self._ec.shape

        assert len(self.half_edges) == n_faces + len(self.b2e)

        for f in range(n_faces):
            assert len(self.half_edges[f]) == k

            for l in range(k):
                h = self.half_edges[f][l]
                t = self.twin((f, l))

                assert not h.boundary
                assert self.twin(t) == (f, l)
                assert tuple(self.halfedge(t)) == (h.dest, h.origin)

        for i, (f, l) in enumerate(self.b2e):
            assert len(self.half_edges[n_faces + i]) == 1
            assert self.half_edges[n_faces + i][0].boundary
            assert self.e2e[f][l] == (n_faces + i, 0)

        for v, key in enumerate(self.v2e):
            assert key is None or self.halfedge(key).origin == v


class EdgeTopologyBuilder:
    """ Halfedge topology construction.

    Parameters
    ----------
    n_vertices : int
        Number of mesh vertices.
    ec : array_like, shape (n_faces, k)
        Face definitions, 0-based vertex indexing, ``k >= 3``.

    Raises
    ------
    IndexError
        If a face refers to a vertex outside ``range(n_vertices)``.
    ValueError
        If `ec` is not a valid connectivity table.
    """

    def __init__(self, n_vertices, ec):
        self._n = _vertex_count(n_vertices)
        self._ec = as_connectivity(ec, self._n)

        if self._ec.shape[1] < 3:
            raise ValueError('face has less than three vertices')

    @property
    def ec(self):
        """ Validated, read-only connectivity table.

        :type: ~numpy.ndarray
        """
        return self._ec

    def build(self):
        """ Derive halfedge, twin, vertex and boundary tables.

        Halfedges are visited in face-major, local-minor order. This order
        determines the boundary pseudo-face ids and the halfedge chosen
        for each vertex in ``v2e``.

        Raises
        ------
        NonManifoldError
            If two faces share a halfedge with the same orientation.

        Returns
        -------
        EdgeTopology
        """
        n_faces, k = self._ec.shape
        ec = self._ec.tolist()

        # Map ordered vertex pairs to halfedge addresses. Looking up the
        # reversed pair yields the twin in constant time.
        halfs = dict()
        half_edges = []

        for f, face in enumerate(ec):
            edge_loop = []

            for l in range(k):
                v, w = face[l], face[(l + 1) % k]

                if (v, w) in halfs:
                    g, _ = halfs[v, w]
                    msg = (f'edge ({v}, {w}) of face #{f} is non-manifold, '
                           f'already used by face #{g}')
                    raise NonManifoldError(msg)

                halfs[v, w] = (f, l)
                edge_loop.append(HalfEdge(v, w))

            half_edges.append(edge_loop)

        e2e = [[None] * k for _ in range(n_faces)]
        v2e = [None] * self._n
        b2e = []

        for f in range(n_faces):
            for l in range(k):
                h = half_edges[f][l]

                if v2e[h.origin] is None:
                    v2e[h.origin] = (f, l)

                twin = halfs.get((h.dest, h.origin))

                if twin is not None:
                    e2e[f][l] = twin
                    continue

                # No face on the other side: pair the halfedge with a new
                # boundary pseudo-face holding the reversed halfedge.
                b = n_faces + len(b2e)
                half_edges.append([HalfEdge(h.dest, h.origin,
                                            flags.FacetFlag.BOUNDARY)])
                e2e[f][l] = (b, 0)
                b2e.append((f, l))

        return EdgeTopology(tuple(tuple(row) for row in half_edges),
                            tuple(v2e),
                            tuple(tuple(row) for row in e2e),
                            tuple(b2e),
                            MappingProxyType(halfs))


class HalfEdge:
    """ Halfedge record.

    An ordered pair of vertex indices. Real halfedges are traversed
    counter-clockwise within their face.

    Parameters
    ----------
    origin : int
        Index of the vertex the halfedge originates from.
    dest : int
        Index of the vertex the halfedge points to.
    flags : FacetFlag, optional
        Item flags.

    Raises
    ------
    IndexError
        If one of the vertex indices is negative.
    """

    __slots__ = ['_origin', '_dest', '_flags']

    def __init__(self, origin, dest, flags=flags.FacetFlag(0)):
        if origin < 0 or dest < 0:
            raise IndexError(f'invalid halfedge ({origin}, {dest})')

        self._origin = int(origin)
        self._dest = int(dest)
        self._flags = flags

    def __repr__(self):
        return f'HalfEdge({self._origin}, {self._dest})'

    def __str__(self):
        if self._flags:
            return f'h ({self._origin}, {self._dest}) {self._flags}'

        return f'h ({self._origin}, {self._dest})'

    def __eq__(self, other):
        if not isinstance(other, HalfEdge):
            return NotImplemented

        return (self._origin, self._dest, self._flags) == \
            (other._origin, other._dest, other._flags)

    def __hash__(self):
        return hash((self._origin, self._dest, self._flags))

    def __iter__(self):
        """ Vertex iterator.

        Produces the origin and destination vertex of a halfedge.
        """
        yield self._origin
        yield self._dest

    def __getitem__(self, index):
        if index == 0:
            return self._origin
        elif index == 1:
            return self._dest

        raise IndexError(f'index {index} out of range(0, 2)')

    @property
    def origin(self):
        """ Halfedge origin vertex index.

        :type: int
        """
        return self._origin

    @property
    def dest(self):
        """ Halfedge destination vertex index.

        :type: int
        """
        return self._dest

    @property
    def flags(self):
        """ Halfedge flags.

        :type: FacetFlag
        """
        return self._flags

    @property
    def boundary(self):
        """ Topological state.

        :obj:`True` for the halfedge of a boundary pseudo-face.

        :type: bool
        """
        return bool(self._flags & flags.FacetFlag.BOUNDARY)


def as_connectivity(ec, n_vertices):
    """ Validate an element connectivity table.

    Parameters
    ----------
    ec : array_like, shape (n, k)
        Element definitions, 0-based vertex indexing.
    n_vertices : int
        Number of mesh vertices.

    Raises
    ------
    ValueError
        If `ec` is not a two-dimensional integer table or an element
        contains duplicate vertices.
    IndexError
        If a vertex index is outside ``range(n_vertices)``.

    Returns
    -------
    ~numpy.ndarray
        Read-only integer copy of `ec`.
    """
    ec = np.array(ec)

    if ec.ndim != 2:
        raise ValueError(f'expected connectivity table of shape (n, k), '
                         f'got {ec.shape}')

    # An empty table carries no values to infer an integer type from.
    if ec.size == 0:
        ec = ec.astype(np.int64)

    if not np.issubdtype(ec.dtype, np.integer):
        raise ValueError(f'vertex indices must be integers, got {ec.dtype}')

    ec = ec.astype(np.int64)
    bad = (ec < 0) | (ec >= n_vertices)

    if bad.any():
        e, j = np.argwhere(bad)[0]
        raise IndexError(f'vertex index {ec[e, j]} of element #{e} out of '
                         f'range(0, {n_vertices})')

    srt = np.sort(ec, axis=1)

    if (srt[:, 1:] == srt[:, :-1]).any():
        e = np.flatnonzero((srt[:, 1:] == srt[:, :-1]).any(axis=1))[0]
        raise ValueError(f'element #{e} contains duplicate vertices')

    ec.flags.writeable = False

    return ec


def _vertex_count(n_vertices):
    n_vertices = int(n_vertices)

    if n_vertices < 0:
        raise ValueError(f'invalid number of vertices {n_vertices}')

    return n_vertices


def _vertex_store(points):
    """ Vertex store and vertex count from coordinates or a count.
    """
    if isinstance(points, (int, np.integer)):
        return None, _vertex_count(points)

    verts = VertexStore(points)

    return verts, len(verts)


class NonManifoldError(Exception):
    """ Manifold exception base class.

    Raised if two elements claim the same oriented edge or facet, i.e.,
    the input is non-manifold or not consistently oriented.
    """

    pass
