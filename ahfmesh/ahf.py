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

""" Array-based half-facet (AHF) data structure for volume meshes.

Cells of a uniform volume mesh are described by an element connectivity
table ``ec`` of shape ``(n_cells, k)``. The facets of a cell follow from
the fixed local facet tables :data:`TET_FACETS` and :data:`HEX_FACETS`.

Every facet is materialized once per *anchor*, the local position of the
vertex its vertex cycle starts with. A half-face is therefore addressed
by a triple ``(c, l, a)``: cell, local facet and anchor. Twin half-faces
are found by hashing the reversed vertex cycle of each facet. Facets
without a twin are paired with boundary pseudo-cells ``n_cells + k`` that
consist of a single facet, again materialized once per anchor.

See Alumbaugh et al., *Compact Array-Based Mesh Data Structures* (2005).
"""

from collections import namedtuple
from time import time
from types import MappingProxyType

import ahfmesh.flags as flags
from ahfmesh.hes import NonManifoldError
from ahfmesh.hes import _vertex_count
from ahfmesh.hes import _vertex_store
from ahfmesh.hes import as_connectivity


TET_FACETS = ((0, 1, 2), (0, 3, 1), (1, 3, 2), (2, 3, 0))
""" Local facets of a tetrahedron, outward oriented. """

HEX_FACETS = ((0, 1, 2, 3), (0, 5, 6, 1), (1, 6, 7, 2),
              (2, 7, 4, 3), (0, 3, 4, 5), (4, 7, 6, 5))
""" Local facets of a hexahedron, outward oriented. """

CELL_FACETS = {4: TET_FACETS, 8: HEX_FACETS}
""" Local facet tables by number of vertices per cell. """


FaceTopology = namedtuple('FaceTopology',
                          ['half_faces', 'v2f', 'f2f', 'b2f', 'halfface_map'])
FaceTopology.__doc__ = """ Frozen result of :meth:`FaceTopologyBuilder.build`.
"""


def rotate(seq, k):
    """ Cyclic left rotation.

    Parameters
    ----------
    seq : sequence
        Vertex cycle.
    k : int
        Rotation offset, may be negative.

    Returns
    -------
    tuple
        The rotated cycle, ``rotate(seq, k)[0] == seq[k % len(seq)]``.
    """
    seq = tuple(seq)

    if not seq:
        return seq

    k %= len(seq)

    return seq[k:] + seq[:k]


def twin_key(seq):
    """ Reversed vertex cycle.

    The cycle ``(seq[0], seq[-1], ..., seq[1])``, i.e., the opposite
    orientation of a facet that still starts at ``seq[0]``. A neighboring
    cell traverses a shared facet in this order (up to rotation).
    """
    return rotate(reversed(seq), -1)


class VolumeMesh:
    """ Volume mesh kernel.

    Parameters
    ----------
    points : array_like or int
        Vertex coordinates of shape (n, 2) or (n, 3). Passing an integer
        results in a connectivity-only mesh with the given number of
        vertices.
    cells : array_like, shape (n_cells, k)
        Cell definitions, 0-based vertex indexing. Tetrahedra (``k = 4``)
        and hexahedra (``k = 8``) are supported, mixed meshes are not.
    quiet : bool, optional
        Suppress console output.

    Raises
    ------
    DimensionError
        If the vertex coordinates are neither 2D nor 3D.
    UnsupportedTopologyError
        If the number of vertices per cell does not match a supported
        cell type.
    IndexError
        If a cell refers to a vertex that does not exist.
    ValueError
        If `cells` does not define a valid connectivity table.
    NonManifoldError
        If two cells claim the same oriented facet.
    """

    def __init__(self, points, cells, *, quiet=True):
        CBOLD = '\33[1m'                    # bold text, white on black
        CEND = '\33[0m'

        self._verts, n_vertices = _vertex_store(points)

        builder = FaceTopologyBuilder(n_vertices, cells)
        self._ec = builder.ec
        self._facets = builder.facets

        if not quiet:
            start = time()
            print(f'building {CBOLD}half-faces{CEND} '
                  f'({len(self._ec)} cells)', end=' ...')

        self._topo = builder.build()

        if not quiet:
            print(f' done ({time()-start:.3f} sec, '
                  f'{len(self._topo.b2f)} boundary)')

    def __repr__(self):
        return (f'VolumeMesh(n_vertices={self.n_vertices}, '
                f'n_cells={self.n_cells}, n_boundary={len(self.b2f)})')

    def __getitem__(self, index):
        if index == 0:
            return self.points
        elif index == 1:
            return self._ec

        raise IndexError(f'index must be 0 or 1, got {index}')

    @property
    def vertices(self):
        """ Vertex store, :obj:`None` for connectivity-only meshes.

        :type: ~ahfmesh.points.VertexStore
        """
        return self._verts

    @property
    def points(self):
        return None if self._verts is None else self._verts.points

    @property
    def ec(self):
        """ Element connectivity table of shape ``(n_cells, k)``.

        :type: ~numpy.ndarray
        """
        return self._ec

    @property
    def facets(self):
        """ Local facet table of the cell type.

        :type: tuple[tuple[int, ...], ...]
        """
        return self._facets

    @property
    def n_vertices(self):
        return len(self._topo.v2f)

    @property
    def n_cells(self):
        return self._ec.shape[0]

    @property
    def half_faces(self):
        """ Half-face table.

        Indexed by ``[cell][local][anchor]``. Rows ``n_cells`` and above
        hold boundary pseudo-cells with a single local facet.

        :type: tuple[tuple[tuple[HalfFace, ...], ...], ...]
        """
        return self._topo.half_faces

    @property
    def v2f(self):
        """ Vertex to anchored half-face map.

        For every vertex referenced by a cell, a half-face ``(c, l, a)``
        whose anchor vertex is that vertex. :obj:`None` for unreferenced
        vertices.

        :type: tuple[tuple[int, int, int] or None, ...]
        """
        return self._topo.v2f

    @property
    def f2f(self):
        """ Half-face to twin half-face map.

        Indexed by ``[cell][local]``, refers to anchor 0 of the facet. The
        twin is anchored at the same vertex. Boundary facets map to
        ``(b, 0, 0)`` with ``b >= n_cells``.

        :type: tuple[tuple[tuple[int, int, int], ...], ...]
        """
        return self._topo.f2f

    @property
    def b2f(self):
        """ Boundary half-faces.

        Entry ``k`` is the real half-face (anchor 0) paired with
        pseudo-cell ``n_cells + k``.

        :type: tuple[tuple[int, int, int], ...]
        """
        return self._topo.b2f

    @property
    def halffaces(self):
        """ Half-face dictionary.

        Read-only mapping of rotated vertex cycles to the address
        ``(c, l, a)`` of the real half-face starting with that cycle.

        :type: ~types.MappingProxyType
        """
        return self._topo.halfface_map

    @property
    def size(self):
        """ Mesh size.

        The number of vertices, facets and cells :math:`(v, f, c)`.
        Boundary pseudo-cells are not counted.

        :type: (int, int, int)
        """
        n_half = self.n_cells * len(self._facets)
        n_boundary = len(self.b2f)

        assert (n_half + n_boundary) % 2 == 0

        return (self.n_vertices,
                (n_half + n_boundary) // 2,
                self.n_cells)

    def halfface(self, key):
        """ Half-face record.

        Parameters
        ----------
        key : tuple(int, int, int)
            Half-face address ``(c, l, a)``, real or boundary.

        Raises
        ------
        IndexError
            If `key` does not address a half-face.

        Returns
        -------
        HalfFace
        """
        c, l, a = key

        if not 0 <= c < len(self.half_faces):
            raise IndexError(f'cell index {c} out of range')

        if not 0 <= l < len(self.half_faces[c]):
            raise IndexError(f'local index {l} out of range for cell {c}')

        if not 0 <= a < len(self.half_faces[c][l]):
            raise IndexError(f'anchor {a} out of range')

        return self.half_faces[c][l][a]

    def twin(self, key):
        """ Opposite half-face anchored at the same vertex.

        Works for any anchor and for boundary half-faces, and is
        symmetric: ``mesh.twin(mesh.twin(key)) == key``.
        """
        hf = self.halfface(key)
        c, l, a = key

        if c < self.n_cells:
            tc, tl, ta = self.f2f[c][l]
        else:
            tc, tl, ta = self.b2f[c - self.n_cells]

        # The twin cycle at anchor ta starts at vertex hf.vertices[0] and
        # runs backwards, so vertex hf.vertices[a] sits a steps earlier.
        return (tc, tl, (ta - a) % len(hf))

    def is_boundary(self, key):
        """ Check if `key` addresses a boundary pseudo-cell half-face.
        """
        return key[0] >= self.n_cells

    def anchor(self, key, vertex):
        """ Re-anchor a half-face.

        Parameters
        ----------
        key : tuple(int, int, int)
            Any half-face address of the facet.
        vertex : int
            A vertex of the facet.

        Raises
        ------
        ValueError
            If `vertex` is not a vertex of the facet.

        Returns
        -------
        tuple(int, int, int)
            Address of the instance of the same facet whose anchor
            vertex is `vertex`.
        """
        hf = self.halfface(key)

        try:
            a = hf.vertices.index(vertex)
        except ValueError:
            msg = f'vertex {vertex} is not part of half-face {key}'
            raise ValueError(msg) from None

        return (key[0], key[1], a)

    def find(self, seq):
        """ Half-face lookup by vertex cycle.

        Parameters
        ----------
        seq : sequence of int
            Vertex cycle, the first vertex is the anchor vertex.

        Returns
        -------
        tuple(int, int, int) or None
            Address of the half-face whose rotated cycle equals `seq`, a
            boundary pseudo-cell address if `seq` is the outside of a
            boundary facet or :obj:`None` if there is no such facet.
        """
        seq = tuple(seq)
        key = self.halffaces.get(seq)

        if key is not None:
            return key

        key = self.halffaces.get(twin_key(seq))

        if key is not None and self.is_boundary(self.twin(key)):
            return self.twin(key)

        return None

    def _check(self):
        """ Check half-face tables for consistency.
        """
        n_cells = self.n_cells

        assert len(self.half_faces) == n_cells + len(self.b2f)

        for c in range(n_cells):
            assert len(self.half_faces[c]) == len(self._facets)

            for l, anchors in enumerate(self.half_faces[c]):
                vset = set(anchors[0].vertices)

                for a, hf in enumerate(anchors):
                    assert hf.anchor == a
                    assert not hf.boundary
                    assert set(hf.key) == vset
                    assert hf.key == rotate(anchors[0].key, a)

                    t = self.twin((c, l, a))

                    assert self.twin(t) == (c, l, a)
                    assert self.halfface(t).key == twin_key(hf.key)

        for i, (c, l, a) in enumerate(self.b2f):
            assert a == 0
            assert len(self.half_faces[n_cells + i]) == 1
            assert all(hf.boundary for hf in self.half_faces[n_cells + i][0])
            assert self.f2f[c][l] == (n_cells + i, 0, 0)

        for v, key in enumerate(self.v2f):
            assert key is None or self.halfface(key).anchor_vertex == v


class FaceTopologyBuilder:
    """ Half-face topology construction.

    Parameters
    ----------
    n_vertices : int
        Number of mesh vertices.
    ec : array_like, shape (n_cells, k)
        Cell definitions, 0-based vertex indexing.

    Raises
    ------
    UnsupportedTopologyError
        If `k` is not a key of :data:`CELL_FACETS`.
    IndexError
        If a cell refers to a vertex outside ``range(n_vertices)``.
    ValueError
        If `ec` is not a valid connectivity table.
    """

    def __init__(self, n_vertices, ec):
        self._n = _vertex_count(n_vertices)
        self._ec = as_connectivity(ec, self._n)

        if self._ec.shape[1] not in CELL_FACETS:
            raise UnsupportedTopologyError(
                f'cells with {self._ec.shape[1]} vertices are not supported, '
                f'expected one of {sorted(CELL_FACETS)}')

        self._facets = CELL_FACETS[self._ec.shape[1]]

    @property
    def ec(self):
        return self._ec

    @property
    def facets(self):
        return self._facets

    def build(self):
        """ Derive half-face, twin, vertex and boundary tables.

        Facets are visited in cell-major, local-minor order. Only anchor 0
        of a facet takes part in twin resolution, the remaining anchors
        follow by rotation.

        Raises
        ------
        NonManifoldError
            If two cells share a facet with the same orientation.

        Returns
        -------
        FaceTopology
        """
        n_cells = self._ec.shape[0]
        ec = self._ec.tolist()

        # Maps every rotation of every facet cycle to its half-face.
        halfs = dict()
        half_faces = []

        for c, cell in enumerate(ec):
            cell_half_faces = []

            for l, local in enumerate(self._facets):
                hf_ids = tuple(cell[i] for i in local)
                anchors = []

                for a in range(len(hf_ids)):
                    key = rotate(hf_ids, a)

                    if key in halfs:
                        g, _, _ = halfs[key]
                        msg = (f'facet {hf_ids} of cell #{c} is non-manifold, '
                               f'already used by cell #{g}')
                        raise NonManifoldError(msg)

                    halfs[key] = (c, l, a)
                    anchors.append(HalfFace(hf_ids, a))

                cell_half_faces.append(tuple(anchors))

            half_faces.append(cell_half_faces)

        f2f = [[None] * len(self._facets) for _ in range(n_cells)]
        v2f = [None] * self._n
        b2f = []

        for c in range(n_cells):
            for l in range(len(self._facets)):
                hf = half_faces[c][l][0]

                if v2f[hf.anchor_vertex] is None:
                    v2f[hf.anchor_vertex] = (c, l, 0)

                twin_vts = twin_key(hf.vertices)
                twin = halfs.get(twin_vts)

                if twin is not None:
                    f2f[c][l] = twin
                    continue

                # Boundary facet: a pseudo-cell holding the reversed
                # facet, one instance per anchor.
                b = n_cells + len(b2f)
                anchors = tuple(HalfFace(twin_vts, a, flags.FacetFlag.BOUNDARY)
                                for a in range(len(twin_vts)))

                for a, bhf in enumerate(anchors):
                    if v2f[bhf.anchor_vertex] is None:
                        v2f[bhf.anchor_vertex] = (b, 0, a)

                half_faces.append([anchors])
                f2f[c][l] = (b, 0, 0)
                b2f.append((c, l, 0))

        # Vertices that never lead a facet cycle and lie on no boundary
        # facet, e.g., the apex of an interior tetrahedron.
        for c in range(n_cells):
            for l, anchors in enumerate(half_faces[c]):
                for a, hf in enumerate(anchors):
                    if v2f[hf.anchor_vertex] is None:
                        v2f[hf.anchor_vertex] = (c, l, a)

        return FaceTopology(tuple(tuple(row) for row in half_faces),
                            tuple(v2f),
                            tuple(tuple(row) for row in f2f),
                            tuple(b2f),
                            MappingProxyType(halfs))


class HalfFace:
    """ Anchored half-face record.

    Parameters
    ----------
    vertices : sequence of int
        Vertex cycle of the facet as enumerated by its owning cell.
    anchor : int
        Local position of the anchor vertex, ``0 <= anchor < len(vertices)``.
    flags : FacetFlag, optional
        Item flags.

    Raises
    ------
    IndexError
        If a vertex index is negative or `anchor` is out of range.
    """

    __slots__ = ['_vertices', '_anchor', '_flags']

    def __init__(self, vertices, anchor, flags=flags.FacetFlag(0)):
        vertices = tuple(int(v) for v in vertices)

        if any(v < 0 for v in vertices):
            raise IndexError(f'invalid half-face {vertices}')

        if not 0 <= anchor < len(vertices):
            raise IndexError(f'anchor {anchor} out of range(0, {len(vertices)})')

        self._vertices = vertices
        self._anchor = int(anchor)
        self._flags = flags

    def __repr__(self):
        return f'HalfFace({self._vertices}, {self._anchor})'

    def __str__(self):
        if self._flags:
            return f'hf {self.key} {self._flags}'

        return f'hf {self.key}'

    def __len__(self):
        return len(self._vertices)

    def __eq__(self, other):
        if not isinstance(other, HalfFace):
            return NotImplemented

        return (self._vertices, self._anchor, self._flags) == \
            (other._vertices, other._anchor, other._flags)

    def __hash__(self):
        return hash((self._vertices, self._anchor, self._flags))

    def __iter__(self):
        """ Vertex iterator, starting at the anchor vertex.
        """
        return iter(self.key)

    @property
    def vertices(self):
        """ Un-rotated vertex cycle.

        Shared by all anchor instances of the facet.

        :type: tuple[int, ...]
        """
        return self._vertices

    @property
    def anchor(self):
        """ Local position of the anchor vertex.

        :type: int
        """
        return self._anchor

    @property
    def anchor_vertex(self):
        """ Vertex index of the anchor vertex.

        :type: int
        """
        return self._vertices[self._anchor]

    @property
    def key(self):
        """ Vertex cycle starting at the anchor vertex.

        :type: tuple[int, ...]
        """
        return rotate(self._vertices, self._anchor)

    @property
    def flags(self):
        return self._flags

    @property
    def boundary(self):
        """ :obj:`True` for the half-faces of a boundary pseudo-cell.

        :type: bool
        """
        return bool(self._flags & flags.FacetFlag.BOUNDARY)


class UnsupportedTopologyError(ValueError):
    """ Raised for cell types without a local facet table.
    """

    pass
