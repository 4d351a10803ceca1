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

""" Combinatorial mesh item neighborhood iterators.

Adjacent/incident mesh items are visited in counter-clockwise order as
determined by the face orientation of a surface mesh. All iterators only
consult the ``v2e``/``e2e`` (resp. ``f2f``) tables, every step takes
constant time.

Note
----
Around a non-manifold vertex (two or more fans of faces joined at a
single vertex) only the fan that contains ``mesh.v2e[v]`` is visited.
"""


def halfedges(mesh, vertex):
    """ Outgoing halfedge iterator.

    Visits the real halfedges that originate at `vertex` in
    counter-clockwise order. For a boundary vertex the traversal starts
    at the halfedge that follows the boundary (the clockwise-most one),
    otherwise at ``mesh.v2e[vertex]``.

    Parameters
    ----------
    mesh : ~ahfmesh.hes.Mesh
        Surface mesh.
    vertex : int
        Center vertex.

    Yields
    ------
    tuple(int, int)
        Halfedge address ``(f, l)``.
    """
    start = mesh.v2e[vertex]

    if start is None:
        return

    # Rotate clockwise, h -> next(twin(h)), until the boundary is hit or
    # we circulate back to the start.
    h = start

    while True:
        t = mesh.twin(h)

        if mesh.is_boundary(t):
            break

        h = mesh.next(t)

        if h == start:
            break

    first = h

    # Counter-clockwise rotation, h -> twin(prev(h)).
    while True:
        yield h

        h = mesh.twin(mesh.prev(h))

        if mesh.is_boundary(h) or h == first:
            return


def verts(mesh, vertex):
    """ Vertex iterator.

    Counter-clockwise traversal of the vertices adjacent to `vertex`.

    Parameters
    ----------
    mesh : ~ahfmesh.hes.Mesh
        Surface mesh.
    vertex : int
        Center vertex.

    Yields
    ------
    int
        Index of the next adjacent vertex.
    """
    last = None

    for h in halfedges(mesh, vertex):
        last = h
        yield mesh.halfedge(h).dest

    if last is None:
        return

    # At a boundary vertex the last neighbor is only reachable via an
    # incoming halfedge.
    p = mesh.prev(last)

    if mesh.is_boundary(mesh.twin(p)):
        yield mesh.halfedge(p).origin


def faces(mesh, vertex):
    """ Face iterator.

    Counter-clockwise traversal of the real faces incident to `vertex`.

    Yields
    ------
    int
        Face index.
    """
    for f, _ in halfedges(mesh, vertex):
        yield f


def cells(mesh, cell):
    """ Cell iterator.

    Visits the real cells that share a facet with `cell`, in local facet
    order.

    Parameters
    ----------
    mesh : ~ahfmesh.ahf.VolumeMesh
        Volume mesh.
    cell : int
        Cell index.

    Yields
    ------
    int
        Index of the next face-adjacent cell.
    """
    if not 0 <= cell < mesh.n_cells:
        raise IndexError(f'cell index {cell} out of range(0, {mesh.n_cells})')

    for key in mesh.f2f[cell]:
        if not mesh.is_boundary(key):
            yield key[0]
