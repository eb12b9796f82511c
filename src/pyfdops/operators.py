# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

r"""
.. currentmodule:: pyfdops

Operators
^^^^^^^^^

All operators are linear maps :math:`\mathbb{R}^m \to \mathbb{R}^n` that
can be applied to a vector in a matrix-free fashion and can also be
materialized as a dense matrix. The two must agree, i.e.

.. code:: python

    apply_operator(op, x) == operator_matrix(op) @ x

for all vectors ``x`` of size ``op.shape[1]`` (up to rounding).
The interface relies on the :func:`~functools.singledispatch`
functionality, so new operators can be added by registering their
implementations.

.. autoclass:: Operator
    :no-show-inheritance:

.. autofunction:: apply_operator
.. autofunction:: operator_matrix
.. autofunction:: scale_operator

.. autoclass:: ScalarCoefficient
    :no-show-inheritance:

Composition
~~~~~~~~~~~

.. autoclass:: DerivativeOperator
.. autoclass:: CombinedOperator

.. autoexception:: DimensionMismatchError
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from functools import reduce, singledispatch

from pyfdops.tools import Array, ScalarLike


class DimensionMismatchError(ValueError):
    """Raised when the sizes of operators or vectors are not compatible."""


# {{{ scalars


@dataclass(frozen=True)
class ScalarCoefficient:
    """A scalar multiplying an operator.

    Multiplying coefficients (or a coefficient and a number) always produces
    a new :class:`ScalarCoefficient`.
    """

    value: float

    def __mul__(self, other: object) -> ScalarCoefficient:
        if isinstance(other, ScalarCoefficient):
            return ScalarCoefficient(self.value * other.value)

        if isinstance(other, (int, float)):
            return ScalarCoefficient(self.value * other)

        return NotImplemented

    __rmul__ = __mul__

    def __float__(self) -> float:
        return float(self.value)


ScalarT = ScalarCoefficient | ScalarLike


def as_scalar_coefficient(alpha: ScalarT) -> ScalarCoefficient:
    if isinstance(alpha, ScalarCoefficient):
        return alpha

    return ScalarCoefficient(float(alpha))


# }}}


# {{{ interface


@dataclass(frozen=True)
class Operator:
    """A linear operator. Subclasses are expected to register
    implementations for :func:`apply_operator` and :func:`operator_matrix`.

    Operators support ``alpha * op`` (see :func:`scale_operator`) and
    ``op1 + op2`` (see :class:`CombinedOperator`).
    """

    @property
    def shape(self) -> tuple[int, int]:
        """A tuple ``(n, m)`` of the output and input sizes."""
        raise NotImplementedError(type(self).__name__)

    def __mul__(self, alpha: object) -> Operator:
        if isinstance(alpha, (ScalarCoefficient, int, float)):
            return scale_operator(self, alpha)

        return NotImplemented

    __rmul__ = __mul__

    def __add__(self, other: object) -> Operator:
        if not isinstance(other, Operator):
            return NotImplemented

        lhs = self.operators if isinstance(self, CombinedOperator) else (self,)
        rhs = other.operators if isinstance(other, CombinedOperator) else (other,)

        return CombinedOperator((*lhs, *rhs))


def check_operator_input(op: Operator, x: Array) -> None:
    _, m = op.shape
    if x.shape != (m,):
        raise DimensionMismatchError(
            f"'{type(op).__name__}' expects an input of shape {(m,)}: "
            f"got {x.shape}."
        )


@singledispatch
def apply_operator(op: Operator, x: Array) -> Array:
    """Apply the operator *op* to the vector *x* without forming a matrix.

    :arg x: an array of shape ``(op.shape[1],)``.
    :returns: an array of shape ``(op.shape[0],)``.
    """
    raise NotImplementedError(type(op).__name__)


@singledispatch
def operator_matrix(op: Operator) -> Array:
    """Construct a dense matrix of shape :attr:`Operator.shape` for *op*."""
    raise NotImplementedError(type(op).__name__)


@singledispatch
def scale_operator(op: Operator, alpha: ScalarT) -> Operator:
    r"""Construct a new operator equivalent to :math:`\alpha` *op*."""
    raise NotImplementedError(type(op).__name__)


# }}}


# {{{ composition


@dataclass(frozen=True)
class DerivativeOperator(Operator):
    r"""An operator :math:`L Q_B` that first extends its input with boundary
    values using :attr:`qb` and then applies the stencil :attr:`op`.
    """

    op: Operator
    """Interior operator (usually a stencil)."""
    qb: Operator
    """Boundary extension operator."""

    def __post_init__(self) -> None:
        if self.op.shape[1] != self.qb.shape[0]:
            raise DimensionMismatchError(
                "Cannot compose operators of shape "
                f"{self.op.shape} and {self.qb.shape}."
            )

    @property
    def shape(self) -> tuple[int, int]:
        return (self.op.shape[0], self.qb.shape[1])


@apply_operator.register(DerivativeOperator)
def _apply_operator_derivative(op: DerivativeOperator, x: Array) -> Array:
    check_operator_input(op, x)
    return apply_operator(op.op, apply_operator(op.qb, x))


@operator_matrix.register(DerivativeOperator)
def _operator_matrix_derivative(op: DerivativeOperator) -> Array:
    return operator_matrix(op.op) @ operator_matrix(op.qb)


@scale_operator.register(DerivativeOperator)
def _scale_operator_derivative(
    op: DerivativeOperator, alpha: ScalarT
) -> DerivativeOperator:
    # NOTE: alpha (L Q_B) = (alpha L) Q_B, the extension is left as is
    return DerivativeOperator(op=scale_operator(op.op, alpha), qb=op.qb)


@dataclass(frozen=True)
class CombinedOperator(Operator):
    """A sum of operators with the same :attr:`~Operator.shape`."""

    operators: tuple[Operator, ...]

    def __post_init__(self) -> None:
        if len(self.operators) < 2:
            raise ValueError("A combination requires at least two operators.")

        shape = self.operators[0].shape
        for other in self.operators[1:]:
            if other.shape != shape:
                raise DimensionMismatchError(
                    f"Cannot add operators of shape {shape} and {other.shape}."
                )

    @property
    def shape(self) -> tuple[int, int]:
        return self.operators[0].shape


@apply_operator.register(CombinedOperator)
def _apply_operator_combined(op: CombinedOperator, x: Array) -> Array:
    check_operator_input(op, x)
    return reduce(operator.add, [apply_operator(term, x) for term in op.operators])


@operator_matrix.register(CombinedOperator)
def _operator_matrix_combined(op: CombinedOperator) -> Array:
    return reduce(operator.add, [operator_matrix(term) for term in op.operators])


@scale_operator.register(CombinedOperator)
def _scale_operator_combined(op: CombinedOperator, alpha: ScalarT) -> CombinedOperator:
    return CombinedOperator(tuple(scale_operator(term, alpha) for term in op.operators))


# }}}
