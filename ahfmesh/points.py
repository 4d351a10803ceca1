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

""" Vertex coordinate storage.

Meshes reference vertices by index only. The coordinates themselves live
in a single :class:`VertexStore` owned by the mesh. Apart from checking
the dimension of the coordinate array no validation takes place, i.e.,
NaN or infinite coordinates are passed through unchanged.
"""

import numpy as np


class VertexStore:
    """ Read-only vertex coordinate container.

    Parameters
    ----------
    points : array_like, shape (n, 2) or (n, 3)
        Vertex coordinates, one vertex per row. The data is copied and
        converted to a floating point array.

    Raises
    ------
    DimensionError
        If `points` is not a two-dimensional array with two or three
        columns.
    """

    def __init__(self, points):
        points = np.array(points, dtype=np.float64)

        # An empty list of vertices still needs a valid coordinate
        # dimension, so the shape (0, ) is rejected as well.
        if points.ndim != 2:
            msg = f'expected array of shape (n, 2) or (n, 3), got {points.shape}'
            raise DimensionError(msg)

        if points.shape[1] < 2:
            raise DimensionError('dimension cannot be less than 2')

        if points.shape[1] > 3:
            raise DimensionError('dimension cannot be larger than 3')

        points.flags.writeable = False
        self._points = points

    def __repr__(self):
        return f'VertexStore(n={len(self)}, dim={self.dim})'

    def __len__(self):
        return self._points.shape[0]

    def __iter__(self):
        return iter(self._points)

    def __getitem__(self, index):
        """ Coordinates of a vertex.

        Parameters
        ----------
        index : int
            Vertex index, negative values are **not** wrapped around.

        Raises
        ------
        IndexError
            If `index` is out of bounds.

        Returns
        -------
        ~numpy.ndarray
            Read-only view of the vertex coordinates.
        """
        if not 0 <= index < len(self):
            raise IndexError(f'vertex index {index} out of range(0, {len(self)})')

        return self._points[index]

    def __array__(self, dtype=None, copy=None):
        if copy:
            return np.array(self._points, dtype=dtype, copy=True)

        return np.asarray(self._points, dtype=dtype)

    @property
    def points(self):
        """ Vertex coordinate array.

        :type: ~numpy.ndarray
        """
        return self._points

    @property
    def dim(self):
        """ Coordinate dimension, either 2 or 3.

        :type: int
        """
        return self._points.shape[1]


class DimensionError(ValueError):
    """ Raised for vertex coordinates that are neither 2D nor 3D.
    """

    pass
