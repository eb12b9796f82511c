# SPDX-FileCopyrightText: 2022 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

import pathlib

import jax.numpy as jnp

from pyfdops import (
    EOCRecorder,
    RobinBoundary,
    apply_operator,
    get_logger,
    make_derivative_operator,
    make_uniform_point_grid,
    operator_matrix,
)

logger = get_logger("robin-boundary-value-problem")


def main(
    *,
    outdir: pathlib.Path,
    a: float = 0.0,
    b: float = 1.0,
    velocity: float = -1.0,
    diffusivity: float = 0.1,
    visualize: bool = True,
) -> None:
    r"""Solves the steady advection-diffusion problem

    .. math::

        \nu u'' + c u' - u = f,

    with the Robin boundary conditions :math:`u' - u = 0` on both sides. The
    exact solution is taken to be :math:`u(x) = e^x`.

    :arg velocity: advection velocity :math:`c`.
    :arg diffusivity: diffusion coefficient :math:`\nu`.
    """
    bc = RobinBoundary(al=-1.0, bl=1.0, ar=-1.0, br=1.0)
    eoc = EOCRecorder(name="Error")

    for n in [16, 32, 64, 128, 256, 512]:
        # {{{ setup

        grid = make_uniform_point_grid(a=a, b=b, n=n)
        x = grid.x[grid.i_]

        Dx = make_derivative_operator(grid, 1, 1, bc)
        Dxx = make_derivative_operator(grid, 2, 2, bc)
        op = velocity * Dx + diffusivity * Dxx

        u_ref = jnp.exp(x)
        f = (diffusivity + velocity - 1.0) * u_ref

        # }}}

        # {{{ solve

        A = operator_matrix(op) - jnp.eye(grid.n, dtype=jnp.float64)
        u = jnp.linalg.solve(A, f)

        residual = apply_operator(op, u) - u - f
        error = jnp.linalg.norm(u - u_ref) / jnp.linalg.norm(u_ref)
        logger.info(
            "n %4d error %.12e residual %.12e", n, error, jnp.linalg.norm(residual)
        )

        eoc.add_data_point(grid.dx, error)

        # }}}

    logger.info("\n%s", eoc)

    if not visualize:
        return

    import matplotlib.pyplot as plt

    fig = plt.figure()
    ax = fig.gca()

    ax.plot(x, u, label="$u_h$")
    ax.plot(x, u_ref, "k--", label="$u$")
    ax.set_xlabel("$x$")
    ax.legend()

    fig.savefig(outdir / "robin_boundary_value_problem")
    plt.close(fig)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--velocity", type=float, default=-1.0)
    parser.add_argument("--diffusivity", type=float, default=0.1)
    parser.add_argument("--outdir", type=pathlib.Path, default=pathlib.Path())
    parser.add_argument("--no-visualize", action="store_true")
    args = parser.parse_args()

    main(
        outdir=args.outdir,
        velocity=args.velocity,
        diffusivity=args.diffusivity,
        visualize=not args.no_visualize,
    )
