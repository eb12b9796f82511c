# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

r"""
.. currentmodule:: pyfdops.stencils

Stencil Operators
-----------------

Stencil operators act on a vector of :math:`m + 2` values on a uniform
grid, i.e. :math:`m` interior values and one ghost value on each side, and
return the :math:`m` interior values of the approximated derivative.

.. autoclass:: DiffusionStencil
.. autoclass:: UpwindStencil

.. autoclass:: Direction
    :undoc-members:
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

import jax.numpy as jnp

from pyfdops.operators import (
    Operator,
    ScalarCoefficient,
    ScalarT,
    apply_operator,
    as_scalar_coefficient,
    check_operator_input,
    operator_matrix,
    scale_operator,
)
from pyfdops.tools import Array


def _check_grid_size(m: int, dx: float) -> None:
    if m <= 0:
        raise ValueError(f"Number of interior points should be > 0: '{m}'.")

    if dx <= 0:
        raise ValueError(f"Grid spacing should be > 0: '{dx}'.")


# {{{ diffusion


@dataclass(frozen=True)
class DiffusionStencil(Operator):
    r"""Second-order centered approximation of the second derivative

    .. math::

        (L u)_i = \frac{c}{\Delta x^2} (u_{i - 1} - 2 u_i + u_{i + 1}),

    for :math:`i \in \{1, \dots, m\}`.
    """

    m: int
    """Number of interior points."""
    dx: float
    """Grid spacing."""
    coeff: ScalarCoefficient = ScalarCoefficient(1.0)
    """Coefficient :math:`c` multiplying the stencil."""

    def __post_init__(self) -> None:
        _check_grid_size(self.m, self.dx)
        object.__setattr__(self, "coeff", as_scalar_coefficient(self.coeff))

    @property
    def shape(self) -> tuple[int, int]:
        return (self.m, self.m + 2)


@apply_operator.register(DiffusionStencil)
def _apply_operator_diffusion(op: DiffusionStencil, x: Array) -> Array:
    check_operator_input(op, x)
    return (x[:-2] + x[2:] - 2.0 * x[1:-1]) * (op.coeff.value / op.dx**2)


@operator_matrix.register(DiffusionStencil)
def _operator_matrix_diffusion(op: DiffusionStencil) -> Array:
    # NOTE: jnp.diag only gives square matrices, so the bands are added by hand
    n, m = op.shape
    mat = sum(
        w * jnp.eye(n, m, k=k, dtype=jnp.float64)
        for k, w in enumerate((1.0, -2.0, 1.0))
    )

    return mat * (op.coeff.value / op.dx**2)


@scale_operator.register(DiffusionStencil)
def _scale_operator_diffusion(
    op: DiffusionStencil, alpha: ScalarT
) -> DiffusionStencil:
    return DiffusionStencil(
        m=op.m, dx=op.dx, coeff=as_scalar_coefficient(alpha) * op.coeff
    )


# }}}


# {{{ upwind


@enum.unique
class Direction(enum.Enum):
    """Side of the one-sided difference used by an :class:`UpwindStencil`."""

    #: Uses the point and its left neighbor, :math:`u_i - u_{i - 1}`.
    Backward = enum.auto()
    #: Uses the point and its right neighbor, :math:`u_{i + 1} - u_i`.
    Forward = enum.auto()


def upwind_direction(coeff: ScalarCoefficient) -> Direction:
    # NOTE: a zero coefficient uses forward differences
    return Direction.Backward if coeff.value > 0 else Direction.Forward


@dataclass(frozen=True)
class UpwindStencil(Operator):
    r"""First-order upwind approximation of the first derivative

    .. math::

        (L u)_i = \frac{c}{\Delta x}
        \begin{cases}
        u_i - u_{i - 1}, & \quad c > 0, \\
        u_{i + 1} - u_i, & \quad c \le 0,
        \end{cases}

    for :math:`i \in \{1, \dots, m\}`. The differences are weighted by
    :attr:`stencil`, so that the default ``(-1, 1)`` gives the expressions
    above.
    """

    stencil: tuple[float, ...]
    """Weights of the one-sided difference."""
    m: int
    """Number of interior points."""
    dx: float
    """Grid spacing."""
    coeff: ScalarCoefficient = ScalarCoefficient(1.0)
    """Coefficient :math:`c` multiplying the stencil. Its sign determines
    the :attr:`direction`.
    """

    direction: Direction = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_grid_size(self.m, self.dx)
        if not self.stencil:
            raise ValueError("Stencil weights cannot be empty.")

        object.__setattr__(self, "stencil", tuple(float(w) for w in self.stencil))
        object.__setattr__(self, "coeff", as_scalar_coefficient(self.coeff))
        object.__setattr__(self, "direction", upwind_direction(self.coeff))

    @property
    def offset(self) -> int:
        """Index of the first point used by the stencil for the first interior
        point, as an offset into the extended input vector.
        """
        return 0 if self.direction == Direction.Backward else 1

    @property
    def shape(self) -> tuple[int, int]:
        return (self.m, self.m + len(self.stencil))


@apply_operator.register(UpwindStencil)
def _apply_operator_upwind(op: UpwindStencil, x: Array) -> Array:
    check_operator_input(op, x)

    m, k = op.m, op.offset
    result = sum(w * x[k + j : k + j + m] for j, w in enumerate(op.stencil))

    return result * (op.coeff.value / op.dx)


@operator_matrix.register(UpwindStencil)
def _operator_matrix_upwind(op: UpwindStencil) -> Array:
    n, m = op.shape
    mat = sum(
        w * jnp.eye(n, m, k=op.offset + j, dtype=jnp.float64)
        for j, w in enumerate(op.stencil)
    )

    return mat * (op.coeff.value / op.dx)


@scale_operator.register(UpwindStencil)
def _scale_operator_upwind(op: UpwindStencil, alpha: ScalarT) -> UpwindStencil:
    return UpwindStencil(
        stencil=op.stencil,
        m=op.m,
        dx=op.dx,
        coeff=as_scalar_coefficient(alpha) * op.coeff,
    )


# }}}
