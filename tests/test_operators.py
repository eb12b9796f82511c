# SPDX-FileCopyrightText: 2022 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

from __future__ import annotations

from functools import partial

import jax
import jax.numpy as jnp
import pytest

from pyfdops import (
    BlockTimer,
    CombinedOperator,
    DerivativeOperator,
    DiffusionStencil,
    DimensionMismatchError,
    Direction,
    Operator,
    RobinExtension,
    ScalarCoefficient,
    UpwindStencil,
    apply_operator,
    get_logger,
    operator_matrix,
    scale_operator,
)
from pyfdops.tools import Array

logger = get_logger("test_operators")


def make_random_vector(n: int, *, seed: int = 42) -> Array:
    key = jax.random.PRNGKey(seed)
    return jax.random.normal(key, (n,), dtype=jnp.float64)


def make_test_operator(name: str, m: int, dx: float) -> Operator:
    robin = RobinExtension(m=m, dx=dx, al=0.5, bl=2.0, ar=-1.5, br=0.75)

    if name == "diffusion":
        return DiffusionStencil(m=m, dx=dx)
    if name == "upwind_backward":
        return UpwindStencil(stencil=(-1, 1), m=m, dx=dx, coeff=ScalarCoefficient(2.0))
    if name == "upwind_forward":
        return UpwindStencil(stencil=(-1, 1), m=m, dx=dx, coeff=ScalarCoefficient(-2.0))
    if name == "upwind_zero":
        return UpwindStencil(stencil=(-1, 1), m=m, dx=dx, coeff=ScalarCoefficient(0.0))
    if name == "robin":
        return robin
    if name == "composite_diffusion":
        return DerivativeOperator(op=DiffusionStencil(m=m, dx=dx), qb=robin)
    if name == "composite_upwind":
        return DerivativeOperator(
            op=UpwindStencil(stencil=(-1, 1), m=m, dx=dx, coeff=-0.5), qb=robin
        )
    if name == "combined":
        return (
            make_test_operator("composite_upwind", m, dx)
            + 0.1 * make_test_operator("composite_diffusion", m, dx)
        )

    raise ValueError(f"unknown operator name: '{name}'")


OPERATOR_NAMES = [
    "diffusion",
    "upwind_backward",
    "upwind_forward",
    "upwind_zero",
    "robin",
    "composite_diffusion",
    "composite_upwind",
    "combined",
]


# {{{ test_stencil_examples


def test_diffusion_stencil_example() -> None:
    op = DiffusionStencil(m=3, dx=1.0)
    assert op.shape == (3, 5)

    x = jnp.array([0.0, 1.0, 4.0, 9.0, 16.0])
    result = apply_operator(op, x)
    logger.info("result: %s", result)

    assert jnp.array_equal(result, jnp.array([2.0, 2.0, 2.0]))

    # NOTE: second derivative of x^2 / 2 with a larger spacing
    op = DiffusionStencil(m=3, dx=0.5)
    x = 0.5 * (0.5 * jnp.arange(5.0)) ** 2
    assert jnp.allclose(apply_operator(op, x), 1.0)


@pytest.mark.parametrize(
    ("coeff", "direction", "expected"),
    [
        (+1.0, Direction.Backward, [1.0, 3.0]),
        (-1.0, Direction.Forward, [-3.0, -5.0]),
        (+2.0, Direction.Backward, [2.0, 6.0]),
        (0.0, Direction.Forward, [0.0, 0.0]),
    ],
)
def test_upwind_stencil_example(
    coeff: float, direction: Direction, expected: list[float]
) -> None:
    op = UpwindStencil(stencil=(-1.0, 1.0), m=2, dx=1.0, coeff=coeff)
    assert op.shape == (2, 4)
    assert op.direction == direction

    # NOTE: linear functions give the same result in both directions
    x = jnp.array([0.0, 1.0, 2.0, 3.0])
    assert jnp.array_equal(apply_operator(op, x), jnp.full(2, coeff))

    x = jnp.array([0.0, 1.0, 4.0, 9.0])
    result = apply_operator(op, x)
    logger.info("result: %s", result)

    assert jnp.array_equal(result, jnp.array(expected))


def test_upwind_stencil_matrix_pattern() -> None:
    backward = UpwindStencil(stencil=(-1.0, 1.0), m=3, dx=0.5, coeff=1.0)
    assert jnp.array_equal(
        operator_matrix(backward),
        2.0 * jnp.array([
            [-1.0, 1.0, 0.0, 0.0, 0.0],
            [0.0, -1.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, -1.0, 1.0, 0.0],
        ]),
    )

    forward = UpwindStencil(stencil=(-1.0, 1.0), m=3, dx=0.5, coeff=-1.0)
    assert jnp.array_equal(
        operator_matrix(forward),
        -2.0 * jnp.array([
            [0.0, -1.0, 1.0, 0.0, 0.0],
            [0.0, 0.0, -1.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, -1.0, 1.0],
        ]),
    )


def test_robin_extension_example() -> None:
    op = RobinExtension(m=3, dx=1.0, al=0.0, bl=1.0, ar=0.0, br=1.0)
    assert op.shape == (5, 3)

    x = jnp.array([1.0, 2.0, 3.0])
    result = apply_operator(op, x)
    logger.info("result: %s", result)

    assert jnp.array_equal(result, jnp.array([2.0, 1.0, 2.0, 3.0, 2.0]))

    op = RobinExtension(m=3, dx=0.5, al=1.0, bl=2.0, ar=3.0, br=1.0)
    result = apply_operator(op, x)

    # xl = x[1] + 2 * 1 * 0.5 / 2 * x[0], xr = x[-2] - 2 * 3 * 0.5 / 1 * x[-1]
    assert jnp.allclose(result, jnp.array([2.5, 1.0, 2.0, 3.0, -7.0]))
    assert jnp.allclose(operator_matrix(op) @ x, result)


# }}}


# {{{ test_apply_vs_matrix


@pytest.mark.parametrize("name", OPERATOR_NAMES)
@pytest.mark.parametrize("m", [2, 7, 64])
def test_apply_vs_matrix(name: str, m: int) -> None:
    op = make_test_operator(name, m, 1.0 / (m + 1))
    n, mx = op.shape

    with BlockTimer("matrix") as bt:
        mat = operator_matrix(op)
    logger.info("%s", bt)

    assert mat.shape == op.shape
    assert mat.dtype == jnp.float64

    for seed in range(3):
        x = make_random_vector(mx, seed=seed)

        with BlockTimer("apply") as bt:
            result = apply_operator(op, x)
        logger.info("%s", bt)

        assert result.shape == (n,)

        # NOTE: the zero coefficient upwind stencil is identically zero
        error = jnp.linalg.norm(result - mat @ x)
        rnorm = max(1.0, float(jnp.linalg.norm(result)))
        logger.info("error: %s m %3d: %.12e", name, m, error / rnorm)
        assert error < 1.0e-13 * rnorm

    # NOTE: the matrix columns are the operator applied to the unit vectors
    basis = jnp.eye(mx, dtype=jnp.float64)
    columns = jnp.stack([apply_operator(op, basis[i]) for i in range(mx)]).T
    assert jnp.allclose(columns, mat, rtol=1.0e-13, atol=1.0e-12 * jnp.max(abs(mat)))


@pytest.mark.parametrize("name", OPERATOR_NAMES)
def test_apply_jit(name: str) -> None:
    op = make_test_operator(name, 32, 0.25)
    x = make_random_vector(op.shape[1])

    apply_operator_jitted = jax.jit(partial(apply_operator, op))
    _ = apply_operator_jitted(x)

    with BlockTimer() as bt:
        result_jit = apply_operator_jitted(x)
    logger.info("jax: %s", bt)

    assert jnp.allclose(result_jit, apply_operator(op, x), rtol=1.0e-14)


def test_composite_is_sequential() -> None:
    m = 16
    dx = 1.0 / (m + 1)

    L = DiffusionStencil(m=m, dx=dx)
    qb = RobinExtension(m=m, dx=dx, al=1.0, bl=3.0, ar=2.0, br=-1.0)
    op = DerivativeOperator(op=L, qb=qb)
    assert op.shape == (m, m)

    for seed in range(4):
        x = make_random_vector(m, seed=seed)
        assert jnp.array_equal(
            apply_operator(op, x), apply_operator(L, apply_operator(qb, x))
        )

    error = jnp.linalg.norm(
        operator_matrix(op) - operator_matrix(L) @ operator_matrix(qb)
    )
    assert error < 1.0e-15


# }}}


# {{{ test_scaling


def test_scalar_coefficient() -> None:
    a = ScalarCoefficient(2.0)
    b = ScalarCoefficient(-3.0)

    assert a * b == ScalarCoefficient(-6.0)
    assert 0.5 * a == ScalarCoefficient(1.0)
    assert a * 4 == ScalarCoefficient(8.0)
    assert float(b) == -3.0

    # NOTE: multiplication produces a new coefficient
    assert a == ScalarCoefficient(2.0)
    assert b == ScalarCoefficient(-3.0)


@pytest.mark.parametrize("alpha", [0.5, 3.0, ScalarCoefficient(2.5)])
@pytest.mark.parametrize(
    "name", ["upwind_backward", "upwind_forward", "composite_upwind"]
)
def test_upwind_scaling(name: str, alpha: float | ScalarCoefficient) -> None:
    op = make_test_operator(name, 16, 0.1)
    x = make_random_vector(op.shape[1])

    scaled_op = alpha * op
    assert type(scaled_op) is type(op)
    assert scaled_op.shape == op.shape
    assert scaled_op == scale_operator(op, alpha)

    a = float(alpha)
    assert jnp.allclose(
        apply_operator(scaled_op, x), a * apply_operator(op, x), rtol=1.0e-14
    )
    assert jnp.allclose(operator_matrix(scaled_op), a * operator_matrix(op))

    if isinstance(op, DerivativeOperator):
        assert isinstance(scaled_op, DerivativeOperator)
        assert scaled_op.qb is op.qb
        assert scaled_op.op.coeff == ScalarCoefficient(a) * op.op.coeff
    else:
        assert isinstance(scaled_op, UpwindStencil)
        assert scaled_op.stencil == op.stencil
        assert scaled_op.coeff == ScalarCoefficient(a) * op.coeff


def test_upwind_scaling_direction() -> None:
    op = UpwindStencil(stencil=(-1.0, 1.0), m=4, dx=0.25)
    assert op.coeff == ScalarCoefficient(1.0)
    assert op.direction == Direction.Backward

    flipped = -1.0 * op
    assert isinstance(flipped, UpwindStencil)
    assert flipped.direction == Direction.Forward
    assert op.direction == Direction.Backward

    assert (0.0 * op).direction == Direction.Forward
    assert (-1.0 * flipped).direction == Direction.Backward

    x = jnp.arange(6.0) ** 2
    assert jnp.array_equal(
        apply_operator(flipped, x), -4.0 * (x[2:] - x[1:-1])
    )


@pytest.mark.parametrize("alpha", [-2.0, 0.5, ScalarCoefficient(3.0)])
def test_diffusion_scaling(alpha: float | ScalarCoefficient) -> None:
    m = 16
    op = make_test_operator("composite_diffusion", m, 1.0 / (m + 1))
    x = make_random_vector(m)

    scaled_op = alpha * op
    assert isinstance(scaled_op, DerivativeOperator)
    assert isinstance(scaled_op.op, DiffusionStencil)

    a = float(alpha)
    assert jnp.allclose(apply_operator(scaled_op, x), a * apply_operator(op, x))
    assert jnp.allclose(operator_matrix(scaled_op), a * operator_matrix(op))


def test_scaling_unsupported() -> None:
    op = make_test_operator("robin", 8, 0.1)

    with pytest.raises(NotImplementedError):
        scale_operator(op, 2.0)

    with pytest.raises(TypeError):
        _ = op * "2"  # type: ignore[operator]


# }}}


# {{{ test_combined


def test_combined_operator() -> None:
    m = 32
    dx = 1.0 / (m + 1)

    ops = [
        make_test_operator("composite_upwind", m, dx),
        make_test_operator("composite_diffusion", m, dx),
        make_test_operator("composite_diffusion", m, dx),
    ]

    op = ops[0] + ops[1] + ops[2]
    assert isinstance(op, CombinedOperator)
    assert len(op.operators) == 3
    assert op.shape == (m, m)

    x = make_random_vector(m)
    expected = sum(apply_operator(term, x) for term in ops)
    assert jnp.allclose(apply_operator(op, x), expected, rtol=1.0e-14)

    scaled_op = 2.0 * op
    assert isinstance(scaled_op, CombinedOperator)
    assert jnp.allclose(apply_operator(scaled_op, x), 2.0 * expected, rtol=1.0e-14)

    with pytest.raises(ValueError, match="at least two"):
        CombinedOperator((ops[0],))


# }}}


# {{{ test_errors


@pytest.mark.parametrize("name", OPERATOR_NAMES)
def test_dimension_mismatch(name: str) -> None:
    op = make_test_operator(name, 8, 0.1)
    _, m = op.shape

    for x in [jnp.zeros(m - 1), jnp.zeros(m + 1), jnp.zeros((m, 1))]:
        with pytest.raises(DimensionMismatchError):
            apply_operator(op, x)

    # NOTE: also a ValueError, so it can be caught as such
    with pytest.raises(ValueError):
        apply_operator(op, jnp.zeros(m + 3))


def test_composition_mismatch() -> None:
    L = DiffusionStencil(m=8, dx=0.1)
    qb = RobinExtension(m=7, dx=0.1, al=0.0, bl=1.0, ar=0.0, br=1.0)

    with pytest.raises(DimensionMismatchError):
        DerivativeOperator(op=L, qb=qb)

    with pytest.raises(DimensionMismatchError):
        _ = DiffusionStencil(m=8, dx=0.1) + DiffusionStencil(m=7, dx=0.1)


@pytest.mark.parametrize(
    ("bl", "br"),
    [(0.0, 1.0), (1.0, 0.0), (0.0, 0.0)],
)
def test_robin_degenerate_coefficients(bl: float, br: float) -> None:
    with pytest.raises(ValueError, match="cannot be zero"):
        RobinExtension(m=4, dx=0.1, al=1.0, bl=bl, ar=1.0, br=br)


def test_invalid_construction() -> None:
    with pytest.raises(ValueError):
        DiffusionStencil(m=0, dx=0.1)

    with pytest.raises(ValueError):
        DiffusionStencil(m=4, dx=-0.1)

    with pytest.raises(ValueError):
        UpwindStencil(stencil=(), m=4, dx=0.1)

    with pytest.raises(ValueError):
        RobinExtension(m=1, dx=0.1, al=0.0, bl=1.0, ar=0.0, br=1.0)


# }}}


if __name__ == "__main__":
    import sys

    if len(sys.argv) > 1:
        exec(sys.argv[1])
    else:
        pytest.main([__file__])
