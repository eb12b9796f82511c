# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

"""
.. currentmodule:: pyfdops

Grid
^^^^

.. autoclass:: Grid
    :no-show-inheritance:

.. autoclass:: UniformGrid
.. autoclass:: IrregularGrid

.. autofunction:: make_uniform_point_grid
.. autofunction:: make_grid_from_points
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jax.numpy as jnp

from pyfdops.tools import Array, ScalarLike

# {{{ grids


@dataclass(frozen=True)
class Grid:
    """A one-dimensional grid of points, including one layer of
    ghost (or boundary) points on each side.
    """

    a: float
    """Left boundary of the domain :math:`[a, b]`."""
    b: float
    """Right boundary of the domain :math:`[a, b]`."""
    x: Array
    """Array of point coordinates of shape ``(n + 2,)``."""

    @property
    def dtype(self) -> jnp.dtype[Any]:
        return jnp.dtype(self.x.dtype)

    @property
    def n(self) -> int:
        """Number of interior points, i.e. all points except one layer of
        ghost points on each side.
        """
        return int(self.x.size) - 2

    @property
    def i_(self) -> slice:
        """A :class:`slice` of the interior points."""
        return jnp.s_[1 : self.x.size - 1]


@dataclass(frozen=True)
class UniformGrid(Grid):
    """A grid of equally spaced points."""

    dx: float
    """Spacing between consecutive points."""


@dataclass(frozen=True)
class IrregularGrid(Grid):
    """A grid with varying spacing between points."""

    @property
    def dx(self) -> Array:
        return jnp.diff(self.x)


# }}}


# {{{ constructors


def make_uniform_point_grid(
    a: ScalarLike,
    b: ScalarLike,
    n: int,
    *,
    dtype: Any = None,
) -> UniformGrid:
    """
    :arg a: left boundary of the domain :math:`[a, b]`.
    :arg b: right boundary of the domain :math:`[a, b]`.
    :arg n: number of points that discretize the domain. One ghost point is
        added on each side, so the grid has ``n + 2`` points in total.
    """
    if b <= a:
        raise ValueError(f"Incorrect interval a >= b: '{a}' >= '{b}'.")

    if n < 2:
        raise ValueError(f"Number of points should be >= 2: '{n}'.")

    if dtype is None:
        dtype = jnp.dtype(jnp.float64)
    dtype = jnp.dtype(dtype)

    a = float(a)
    b = float(b)
    h = (b - a) / (n - 1)

    x = jnp.linspace(a - h, b + h, n + 2, dtype=dtype)
    assert jnp.linalg.norm(jnp.diff(x) - h) < 1.0e-8 * h * x.size

    return UniformGrid(a=a, b=b, x=x, dx=h)


def make_grid_from_points(x: Array, *, rtol: float = 1.0e-8) -> Grid:
    """Wrap an array of points into a :class:`Grid`.

    The first and last points of *x* are taken to be the ghost points. If
    all the spacings agree to within *rtol*, a :class:`UniformGrid` is
    returned and an :class:`IrregularGrid` otherwise.
    """
    x = jnp.asarray(x)
    if x.ndim != 1 or x.size < 3:
        raise ValueError(f"Expected at least 3 points: got shape {x.shape}.")

    dx = jnp.diff(x)
    if jnp.any(dx <= 0):
        raise ValueError("Points must be strictly increasing.")

    a, b = float(x[1]), float(x[-2])
    h = float(jnp.mean(dx))
    if jnp.all(jnp.abs(dx - h) <= rtol * h):
        return UniformGrid(a=a, b=b, x=x, dx=h)

    return IrregularGrid(a=a, b=b, x=x)


# }}}
