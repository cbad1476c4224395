"""Internal solvers for GMC-regularized least squares.

This module contains low-level solver implementations. Most users should use
`pyGMC.srls_gmc` or the estimator classes in `pyGMC.linear_model`.

Modules
-------
proximal : Soft-thresholding and group soft-thresholding operators
problem : Step size, lambda_max and linear operators of a solve
saddle : Forward-backward operator of the GMC saddle-point problem
fixed_point : Accelerated fixed-point iteration (plain, Nesterov, inertial, Anderson)
gmc : Single-ratio GMC solver
"""

from pyGMC._solvers.fixed_point import Acceleration, FixedPointConfig, fixed_point_iteration
from pyGMC._solvers.gmc import GMCResult, srls_gmc
from pyGMC._solvers.problem import ProblemSetup, Structure, setup_problem
from pyGMC._solvers.proximal import (
    GroupPartition,
    proximal_operator_group,
    proximal_operator_lasso,
)
from pyGMC._solvers.saddle import SaddleOperator, saddle_objective

__all__ = [
    # Proximal operators
    "GroupPartition",
    "proximal_operator_group",
    "proximal_operator_lasso",
    # Problem setup
    "ProblemSetup",
    "Structure",
    "setup_problem",
    # Saddle operator
    "SaddleOperator",
    "saddle_objective",
    # Fixed-point iteration
    "Acceleration",
    "FixedPointConfig",
    "fixed_point_iteration",
    # GMC solver
    "GMCResult",
    "srls_gmc",
]
