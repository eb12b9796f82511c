# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

r"""
.. currentmodule:: pyfdops.boundary

Boundary Conditions
-------------------

Boundary conditions are imposed by extending a vector of interior values
with one ghost value on each side. For the Robin conditions

.. math::

    \begin{aligned}
    a_l u(x_1) + b_l u'(x_1) = 0, \\
    a_r u(x_m) + b_r u'(x_m) = 0,
    \end{aligned}

a centered difference at the first and last interior points gives

.. math::

    u_0 = u_2 + \frac{2 a_l \Delta x}{b_l} u_1,
    \qquad
    u_{m + 1} = u_{m - 1} - \frac{2 a_r \Delta x}{b_r} u_m.

.. note::

    The ``a`` coefficients multiply the solution value and the ``b``
    coefficients multiply the derivative, i.e. the reverse of the convention
    where ``a`` denotes the derivative coefficient. The ghost values above
    are only defined for non-zero :math:`b_l` and :math:`b_r`.

.. autoclass:: BoundaryType
    :undoc-members:

.. autoclass:: Boundary
    :no-show-inheritance:
.. autoclass:: RobinBoundary

.. autofunction:: make_neumann_boundary

.. autoclass:: RobinExtension
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass

import jax.numpy as jnp

from pyfdops.operators import (
    Operator,
    apply_operator,
    check_operator_input,
    operator_matrix,
)
from pyfdops.tools import Array

# {{{ boundary descriptions


@enum.unique
class BoundaryType(enum.Enum):
    """An enumeration defining broad classes of boundary conditions."""

    #: Robin boundary conditions, i.e. a linear combination of the value and
    #: the normal derivative of the solution vanishes at the boundary.
    Robin = enum.auto()


@dataclass(frozen=True)
class Boundary(ABC):
    """Boundary conditions for one-dimensional domains."""

    @property
    @abstractmethod
    def boundary_type(self) -> BoundaryType:
        """A :class:`BoundaryType` describing the general form of the boundary
        condition.
        """


def _check_robin_coefficients(bl: float, br: float) -> None:
    if bl == 0:
        raise ValueError("Left derivative coefficient 'bl' cannot be zero.")

    if br == 0:
        raise ValueError("Right derivative coefficient 'br' cannot be zero.")


@dataclass(frozen=True)
class RobinBoundary(Boundary):
    """Homogeneous Robin boundary conditions on both sides of the domain."""

    al: float
    """Coefficient of the solution value on the left boundary."""
    bl: float
    """Coefficient of the derivative on the left boundary."""
    ar: float
    """Coefficient of the solution value on the right boundary."""
    br: float
    """Coefficient of the derivative on the right boundary."""

    def __post_init__(self) -> None:
        _check_robin_coefficients(self.bl, self.br)

    @property
    def boundary_type(self) -> BoundaryType:
        return BoundaryType.Robin


def make_neumann_boundary() -> RobinBoundary:
    """Construct homogeneous Neumann boundary conditions :math:`u' = 0`."""
    return RobinBoundary(al=0.0, bl=1.0, ar=0.0, br=1.0)


# }}}


# {{{ Robin extension operator


@dataclass(frozen=True)
class RobinExtension(Operator):
    """An operator that extends a vector of :attr:`m` interior values with
    ghost values that satisfy Robin boundary conditions.
    """

    m: int
    """Number of interior points."""
    dx: float
    """Grid spacing."""

    al: float
    bl: float
    ar: float
    br: float

    def __post_init__(self) -> None:
        if self.m < 2:
            raise ValueError(f"Number of interior points should be >= 2: '{self.m}'.")

        if self.dx <= 0:
            raise ValueError(f"Grid spacing should be > 0: '{self.dx}'.")

        _check_robin_coefficients(self.bl, self.br)

    @classmethod
    def from_boundary(cls, bc: RobinBoundary, m: int, dx: float) -> RobinExtension:
        return cls(m=m, dx=dx, al=bc.al, bl=bc.bl, ar=bc.ar, br=bc.br)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.m + 2, self.m)

    @property
    def left_weight(self) -> float:
        return 2.0 * self.al * self.dx / self.bl

    @property
    def right_weight(self) -> float:
        return -2.0 * self.ar * self.dx / self.br


@apply_operator.register(RobinExtension)
def _apply_operator_robin(op: RobinExtension, x: Array) -> Array:
    check_operator_input(op, x)

    xl = x[1] + op.left_weight * x[0]
    xr = x[-2] + op.right_weight * x[-1]

    return jnp.hstack([xl, x, xr])


@operator_matrix.register(RobinExtension)
def _operator_matrix_robin(op: RobinExtension) -> Array:
    n, m = op.shape

    mat = jnp.eye(n, m, k=-1, dtype=jnp.float64)
    mat = mat.at[0, :2].set(jnp.array([op.left_weight, 1.0]))
    mat = mat.at[-1, -2:].set(jnp.array([1.0, op.right_weight]))

    return mat


# }}}
