# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

"""
.. currentmodule:: pyfdops

Typing
------

.. class:: Array
    :canonical: pyfdops.tools.Array

    A :class:`jax.Array` like object.

.. class:: Scalar
    :canonical: pyfdops.tools.Scalar

    A :class:`jax.Array` object with an empty shape `()`.

Convergence
-----------

.. autoclass:: EOCRecorder
    :no-show-inheritance:
    :members:

.. autofunction:: estimate_order_of_convergence

Timing
------

.. autoclass:: BlockTimer
    :no-show-inheritance:
    :members:
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

import jax
import jax.numpy as jnp
import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType


Array: TypeAlias = jax.Array
Scalar: TypeAlias = jax.Array
ScalarLike = float | np.floating[Any] | Scalar


# {{{ eoc


def estimate_order_of_convergence(x: Array, y: Array) -> tuple[Scalar, Scalar]:
    """Computes an estimate of the order of convergence in the least-square sense.
    This assumes that the :math:`(x, y)` pair follows a law of the form

    .. math::

        y = m x^p

    and estimates the constant :math:`m` and power :math:`p`.
    """
    assert x.size == y.size
    if x.size <= 1:
        raise RuntimeError("Need at least two values to estimate order.")

    eps = jnp.finfo(x.dtype).eps
    c = jnp.polyfit(jnp.log10(x + eps), jnp.log10(y + eps), 1)
    return 10 ** c[-1], c[-2]


class EOCRecorder:
    """Keep track of the errors of a convergence study."""

    name: str
    """An identifier used for the data being estimated."""
    history: list[tuple[float, float]]
    """History of ``(h, error)``."""

    def __init__(self, *, name: str = "Error") -> None:
        self.name = name
        self.history = []

    @property
    def _history(self) -> Array:
        return jnp.array(self.history, dtype=jnp.float64).T

    def add_data_point(self, h: ScalarLike, error: ScalarLike) -> None:
        """
        :arg h: abscissa, a value representative of the grid size.
        :arg error: error at given *h*.
        """
        self.history.append((float(h), float(error)))

    @property
    def estimated_order(self) -> Scalar:
        """Estimated order of convergence for currently available data
        (see :func:`estimate_order_of_convergence`).
        """
        if not self.history:
            return jnp.array(np.nan, dtype=jnp.float64)

        h, error = self._history
        _, eoc = estimate_order_of_convergence(h, error)
        return eoc

    @property
    def max_error(self) -> float:
        """Largest error in the current data."""
        return max((error for _, error in self.history), default=0.0)

    def satisfied(
        self, order: float, atol: float | None = None, *, slack: float = 0
    ) -> bool:
        """
        :arg order: expected order of convergence of the data.
        :arg atol: expected maximum error.
        :arg slack: additional allowable slack in the order of convergence.

        :returns: *True* if the expected order or the maximum error are hit
            and *False* otherwise.
        """
        if not self.history:
            return True

        if atol is None:
            atol = 1.0e2 * float(jnp.finfo(jnp.float64).eps)

        return bool(self.estimated_order >= (order - slack) or self.max_error < atol)

    def __str__(self) -> str:
        lines = [("h", self.name, "EOC"), (":-:", ":-:", ":-:")]
        for i, (h, error) in enumerate(self.history):
            if i == 0:
                order = "---"
            else:
                hp, ep = self.history[i - 1]
                order = f"{np.log(error / ep) / np.log(h / hp):.3f}"

            lines.append((f"{h:.3e}", f"{error:.6e}", order))
        lines.append(("Overall", "", f"{float(self.estimated_order):.3f}"))

        widths = [max(len(line[i]) for line in lines) for i in range(3)]
        return "\n".join(
            " | ".join(value.ljust(w) for value, w in zip(line, widths, strict=True))
            for line in lines
        )


# }}}


# {{{ timer


@dataclass
class BlockTimer:
    """A context manager for timing blocks of code.

    .. code::

        with BlockTimer("my-code-block") as bt:
            # do some code

        print(bt)
    """

    name: str = "block"

    t_wall: float = field(default=-1, init=False)
    t_wall_start: float = field(default=-1, init=False)

    t_proc: float = field(default=-1, init=False)
    t_proc_start: float = field(default=-1, init=False)

    @property
    def t_cpu(self) -> float:
        return self.t_proc / self.t_wall

    def __enter__(self) -> BlockTimer:
        import time

        self.t_wall_start = time.perf_counter()
        self.t_proc_start = time.process_time()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        import time

        self.t_wall = time.perf_counter() - self.t_wall_start
        self.t_proc = time.process_time() - self.t_proc_start

    def __str__(self) -> str:
        return (
            f"{self.name}: completed ({self.t_wall:.3e}s wall, {self.t_cpu:.3f}x cpu)"
        )


# }}}


# {{{ strings


def join_or(strings: Sequence[str], *, preposition: str = "or") -> str:
    if len(strings) == 1:
        return f"'{strings[0]}'"

    *rest, last = strings

    return "'{}' {} '{}'".format("', '".join(rest), preposition.strip(), last)


# }}}


# {{{ environment


# fmt: off
BOOLEAN_STATES = {
    1: True, "1": True, "yes": True, "true": True, "on": True, "y": True,
    0: False, "0": False, "no": False, "false": False, "off": False, "n": False,
}
# fmt: on


def get_environ_bool(name: str) -> bool:
    value = os.environ.get(name)
    return BOOLEAN_STATES.get(value.lower(), False) if value else False


# }}}
