# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

"""
.. currentmodule:: pyfdops

Derivative Operators
^^^^^^^^^^^^^^^^^^^^

.. autofunction:: make_derivative_operator
.. autofunction:: derivative_operator_ids

.. autoexception:: UnsupportedDiscretizationError
.. autoexception:: UnsupportedGridError
"""

from __future__ import annotations

from collections.abc import Callable
from functools import singledispatch
from typing import Any

from pyfdops.boundary import Boundary, BoundaryType, RobinExtension
from pyfdops.grid import Grid, UniformGrid
from pyfdops.logging import get_logger
from pyfdops.operators import DerivativeOperator, Operator
from pyfdops.stencils import DiffusionStencil, UpwindStencil

logger = get_logger(__name__)


class UnsupportedDiscretizationError(NotImplementedError):
    """Raised when no stencil is available for a given derivative and
    order of accuracy.
    """


class UnsupportedGridError(NotImplementedError):
    """Raised for grids that have no available discretization."""


# {{{ stencils

# TODO: replace the fixed stencils by ones generated for arbitrary
# (derivative, order) pairs with Fornberg's algorithm
_STENCILS: dict[tuple[int, int], Callable[[int, float], Operator]] = {
    (1, 1): lambda m, dx: UpwindStencil(stencil=(-1.0, 1.0), m=m, dx=dx),
    (2, 2): lambda m, dx: DiffusionStencil(m=m, dx=dx),
}


_EXTENSIONS: dict[BoundaryType, Callable[[Any, int, float], Operator]] = {
    BoundaryType.Robin: RobinExtension.from_boundary,
}


def derivative_operator_ids() -> tuple[tuple[int, int], ...]:
    """
    :returns: a :class:`tuple` of supported ``(derivative, order)`` pairs.
    """
    return tuple(sorted(_STENCILS))


# }}}


# {{{ factory


@singledispatch
def make_derivative_operator(
    grid: Grid,
    derivative: int,
    order: int,
    bc: Boundary | None = None,
) -> Operator:
    """Construct an operator approximating a derivative on *grid*.

    If no boundary conditions are given, the result is a stencil operator of
    shape ``(n, n + 2)`` that expects the ghost values to be part of its
    input. Otherwise, the result is a :class:`~pyfdops.DerivativeOperator`
    of shape ``(n, n)`` that acts on the interior values only and computes
    the ghost values from *bc*. Here, ``n`` is :attr:`~pyfdops.Grid.n`.

    :arg derivative: order of the derivative, e.g. ``1`` for the first
        derivative.
    :arg order: order of accuracy of the approximation.
    :arg bc: boundary conditions used to construct ghost values.
    """
    if not isinstance(grid, Grid):
        raise TypeError(f"Unsupported grid type: '{type(grid).__name__}'.")

    raise UnsupportedGridError(
        f"Derivative operators are not available on '{type(grid).__name__}'."
    )


@make_derivative_operator.register(UniformGrid)
def _make_derivative_operator_uniform(
    grid: UniformGrid,
    derivative: int,
    order: int,
    bc: Boundary | None = None,
) -> Operator:
    make_stencil = _STENCILS.get((derivative, order))
    if make_stencil is None:
        from pyfdops.tools import join_or

        raise UnsupportedDiscretizationError(
            f"Unsupported discretization with derivative {derivative} and "
            f"order {order}. Try one of "
            f"{join_or([str(ids) for ids in derivative_operator_ids()])}."
        )

    m = grid.n
    dx = float(grid.dx)

    op = make_stencil(m, dx)
    if bc is not None:
        if not isinstance(bc, Boundary):
            raise TypeError(f"Unsupported boundary: '{type(bc).__name__}'.")

        make_extension = _EXTENSIONS.get(bc.boundary_type)
        if make_extension is None:
            raise TypeError(f"Unsupported boundary type: '{bc.boundary_type}'.")

        op = DerivativeOperator(op=op, qb=make_extension(bc, m, dx))

    logger.debug("derivative %d order %d: %r", derivative, order, op)
    return op


# }}}
