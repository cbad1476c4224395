# emacs: -*- mode: python; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
"""pyGMC: sparse regularization with the generalized minimax-concave penalty.

pyGMC solves sparse-regularized least-squares problems with the generalized
minimax-concave (GMC) penalty, a sparsity penalty that reduces the bias of the
L1 (lasso) penalty while keeping the problem convex. The GMC problem is solved as
a saddle-point problem with accelerated forward-backward iterations.

Main entry points
-----------------
srls_gmc
    Solve one GMC problem at a given ratio of lambda_max.
GMCRegression
    scikit-learn compatible estimator, with elementwise or group sparsity.

Notes
-----
Importing pyGMC enables 64-bit mode in jax (``jax_enable_x64``) for the whole
Python process. jax arrays created by other code in the same process after this
import default to double precision.

Examples
--------
>>> import numpy as np
>>> from pyGMC import srls_gmc
>>> X = np.linalg.qr(np.random.randn(50, 10))[0]
>>> y = X[:, 0] - 0.5 * X[:, 3]
>>> result = srls_gmc(y, X, 0.3)
>>> np.flatnonzero(result.coef)
array([0, 3])

See Also
--------
pyGMC.base : Base classes and utilities.
pyGMC.linear_model : Estimators.
"""

from pyGMC.__about__ import __copyright__, __credits__, __packagename__, __version__
from pyGMC._solvers import (
    Acceleration,
    FixedPointConfig,
    GMCResult,
    GroupPartition,
    ProblemSetup,
    SaddleOperator,
    Structure,
    fixed_point_iteration,
    proximal_operator_group,
    proximal_operator_lasso,
    saddle_objective,
    setup_problem,
    srls_gmc,
)
from pyGMC.base import (
    BaseEstimator,
    LinearModelMixin,
    NotFittedError,
    RegressorMixin,
    check_is_fitted,
    clone,
)
from pyGMC.linear_model import GMCRegression

__all__ = [
    # Version info
    "__copyright__",
    "__credits__",
    "__packagename__",
    "__version__",
    # Solver
    "srls_gmc",
    "GMCResult",
    "setup_problem",
    "ProblemSetup",
    "Structure",
    "SaddleOperator",
    "saddle_objective",
    "fixed_point_iteration",
    "FixedPointConfig",
    "Acceleration",
    "proximal_operator_lasso",
    "proximal_operator_group",
    "GroupPartition",
    # Estimators
    "GMCRegression",
    # Base classes
    "BaseEstimator",
    "RegressorMixin",
    "LinearModelMixin",
    # Utilities
    "clone",
    "check_is_fitted",
    "NotFittedError",
]
