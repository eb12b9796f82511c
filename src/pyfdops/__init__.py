# SPDX-FileCopyrightText: 2020 Alexandru Fikl <alexfikl@gmail.com>
# SPDX-License-Identifier: MIT

from importlib import metadata

import jax

from pyfdops.boundary import (
    Boundary,
    BoundaryType,
    RobinBoundary,
    RobinExtension,
    make_neumann_boundary,
)
from pyfdops.derivatives import (
    UnsupportedDiscretizationError,
    UnsupportedGridError,
    derivative_operator_ids,
    make_derivative_operator,
)
from pyfdops.grid import (
    Grid,
    IrregularGrid,
    UniformGrid,
    make_grid_from_points,
    make_uniform_point_grid,
)
from pyfdops.logging import get_logger
from pyfdops.operators import (
    CombinedOperator,
    DerivativeOperator,
    DimensionMismatchError,
    Operator,
    ScalarCoefficient,
    apply_operator,
    operator_matrix,
    scale_operator,
)
from pyfdops.stencils import DiffusionStencil, Direction, UpwindStencil
from pyfdops.tools import BlockTimer, EOCRecorder, estimate_order_of_convergence

# {{{ config

__version__ = metadata.version("pyfdops")

# NOTE: without setting this flag, jax forcefully makes everything float32, even
# if the user requested float64, so it needs to stay on until this is fixed
#       https://github.com/google/jax/issues/8178
jax.config.update("jax_enable_x64", val=True)  # type: ignore[no-untyped-call]

# NOTE: forcing to "cpu" until anyone bothers even trying to test on GPUs
jax.config.update("jax_platforms", "cpu")  # type: ignore[no-untyped-call]

# NOTE: useful options while debugging
if __debug__:
    jax.config.update("jax_debug_infs", val=True)  # type: ignore[no-untyped-call]
    jax.config.update("jax_debug_nans", val=True)  # type: ignore[no-untyped-call]
    jax.config.update("jax_enable_checks", val=True)  # type: ignore[no-untyped-call]

# }}}

__all__ = (
    "BlockTimer",
    "Boundary",
    "BoundaryType",
    "CombinedOperator",
    "DerivativeOperator",
    "DiffusionStencil",
    "DimensionMismatchError",
    "Direction",
    "EOCRecorder",
    "Grid",
    "IrregularGrid",
    "Operator",
    "RobinBoundary",
    "RobinExtension",
    "ScalarCoefficient",
    "UniformGrid",
    "UnsupportedDiscretizationError",
    "UnsupportedGridError",
    "UpwindStencil",
    "apply_operator",
    "derivative_operator_ids",
    "estimate_order_of_convergence",
    "get_logger",
    "make_derivative_operator",
    "make_grid_from_points",
    "make_neumann_boundary",
    "make_uniform_point_grid",
    "operator_matrix",
    "scale_operator",
)
