"""Sparse linear regression estimators with the GMC penalty.

This module contains:

- `GMCRegression`: least-squares regression regularized with the generalized
  minimax-concave (GMC) penalty, with elementwise or group sparsity.
"""

import logging
from numbers import Integral, Real

import numpy as np
from dask import compute
from dask import delayed as delayed_dask

from pyGMC._solvers.gmc import _ACCELERATIONS, _STRUCTURES, srls_gmc
from pyGMC._solvers.problem import Structure
from pyGMC._solvers.proximal import GroupPartition
from pyGMC._utils import check_X_y
from pyGMC.base import BaseEstimator, LinearModelMixin, RegressorMixin

LGR = logging.getLogger("GENERAL")

__all__ = ["GMCRegression"]


class GMCRegression(LinearModelMixin, RegressorMixin, BaseEstimator):
    """Least-squares regression with the GMC penalty.

    The generalized minimax-concave (GMC) penalty induces sparsity like the L1
    (lasso) penalty, but with less bias on the large coefficients, while keeping
    the overall problem convex. The estimate is the saddle point of

    .. math::

        F(x, v) = \\frac{1}{2} \\| y - X x \\|_2^2 + \\lambda P(x)
        - \\frac{\\gamma}{2} \\| X (x - v) \\|_2^2 - \\lambda P(v)

    with :math:`\\lambda = \\textrm{lambda\\_ratio} \\cdot \\lambda_{max}`.

    The estimator supports two sparsity structures:

    **Elementwise** (``structure="single"``, default):
        :math:`P` is the L1 norm and coefficients are selected one by one.

    **Grouped** (``structure="grouped"``):
        :math:`P` is the sum of the Euclidean norms of the coefficient groups, each
        weighted by the square root of its size, and groups are selected as a unit.

    The data are not centered or scaled: columns of ``X`` are expected to be
    centered with unit length, and ``y`` to be standardized.

    Parameters
    ----------
    lambda_ratio : float, default=0.5
        Ratio of lambda to lambda_max, in [0, 1].
    structure : {'single', 'grouped'} or Structure, default='single'
        Sparsity structure of the penalty.
    groups : list of list of int, 2D ndarray of int or GroupPartition, default=None
        Column groups. Required if ``structure="grouped"``.
    gamma : float, default=0.8
        Concavity of the penalty, in (0, 1). Values closer to 1 remove more bias.
    max_iter : int, default=10000
        Maximum number of iterations of each solve.
    tol : float, default=1e-5
        Tolerance on the fixed-point residual norm.
    acceleration : {'original', 'nesterov', 'inertia', 'aa2'} or Acceleration, default='nesterov'
        Acceleration of the forward-backward iterations.
    early_termination : bool, default=True
        Whether to stop once the tolerance is reached.
    mem_size : int, default=5
        Memory of Anderson acceleration (``acceleration="aa2"`` only).
    n_jobs : int, default=1
        Number of threads used to solve several targets. -1 uses all processors.

    Attributes
    ----------
    coef_ : ndarray of shape (n_features,) or (n_targets, n_features)
        Sparse coefficients.
    aux_ : ndarray of shape (n_features,) or (n_targets, n_features)
        Auxiliary saddle variable of each solve.
    lambda_ : float or ndarray of shape (n_targets,)
        Regularization parameter used for each target.
    lambda_max_ : float or ndarray of shape (n_targets,)
        Smallest lambda that zeroes the coefficients of each target.
    n_iter_ : int or ndarray of shape (n_targets,)
        Number of iterations run for each target.
    res_norm_hist_ : ndarray or list of ndarray
        Residual norm of each iteration, for each target.
    n_features_in_ : int
        Number of features seen during fit.

    Examples
    --------
    >>> import numpy as np
    >>> from pyGMC import GMCRegression
    >>> X = np.linalg.qr(np.random.randn(50, 10))[0]
    >>> y = X[:, 0] - 0.5 * X[:, 3]
    >>> model = GMCRegression(lambda_ratio=0.3)
    >>> model.fit(X, y)
    GMCRegression(lambda_ratio=0.3)
    >>> np.flatnonzero(model.coef_)
    array([0, 3])

    References
    ----------
    .. [1] Selesnick, I. (2017). "Sparse Regularization via Convex Analysis."
       IEEE Transactions on Signal Processing, 65(17), 4481-4494.
    """

    _parameter_constraints = {
        "lambda_ratio": [("interval", Real, 0, 1, "both")],
        "structure": [("options", _STRUCTURES)],
        "groups": [None, list, tuple, np.ndarray, GroupPartition],
        "gamma": [("interval", Real, 0, 1, "neither")],
        "max_iter": [("interval", Integral, 1, None, "left")],
        "tol": [("interval", Real, 0, None, "neither")],
        "acceleration": [("options", _ACCELERATIONS)],
        "early_termination": [bool],
        "mem_size": [("interval", Integral, 1, None, "left")],
        "n_jobs": [("interval", Integral, 1, None, "left"), ("options", frozenset([-1]))],
    }

    def __init__(
        self,
        *,
        lambda_ratio=0.5,
        structure="single",
        groups=None,
        gamma=0.8,
        max_iter=10000,
        tol=1e-5,
        acceleration="nesterov",
        early_termination=True,
        mem_size=5,
        n_jobs=1,
    ):
        self.lambda_ratio = lambda_ratio
        self.structure = structure
        self.groups = groups
        self.gamma = gamma
        self.max_iter = max_iter
        self.tol = tol
        self.acceleration = acceleration
        self.early_termination = early_termination
        self.mem_size = mem_size
        self.n_jobs = n_jobs

    def _solver_params(self):
        return {
            "structure": self.structure,
            "groups": self.groups,
            "gamma": self.gamma,
            "max_iter": self.max_iter,
            "tol_stop": self.tol,
            "acceleration": self.acceleration,
            "early_termination": self.early_termination,
            "mem_size": self.mem_size,
        }

    def fit(self, X, y):
        """Fit the GMC-regularized model.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Design matrix with centered, unit-length columns.
        y : array-like of shape (n_samples,) or (n_samples, n_targets)
            Standardized response(s). Targets are solved independently.

        Returns
        -------
        self : object
            Fitted estimator.
        """
        self._validate_params()
        if Structure(self.structure) is Structure.GROUPED and self.groups is None:
            raise ValueError("The 'groups' parameter is required when structure='grouped'.")

        X, y = check_X_y(X, y)
        self.n_features_in_ = X.shape[1]

        if y.ndim == 1:
            result = srls_gmc(y, X, self.lambda_ratio, **self._solver_params())

            self.coef_ = result.coef
            self.aux_ = result.aux
            self.lambda_ = result.lambda_
            self.lambda_max_ = result.lambda_max
            self.n_iter_ = result.n_iter
            self.res_norm_hist_ = result.res_norm_hist
        else:
            self._fit_multitarget(X, y)

        return self

    def _fit_multitarget(self, X, y):
        """Solve every target column independently."""
        n_targets = y.shape[1]
        LGR.info(f"Solving {n_targets} targets independently with n_jobs={self.n_jobs}")

        futures = []
        for target_idx in range(n_targets):
            fut = delayed_dask(srls_gmc, pure=False)(
                y[:, target_idx], X, self.lambda_ratio, **self._solver_params()
            )
            futures.append(fut)

        if self.n_jobs == 1:
            results = compute(futures, scheduler="synchronous")[0]
        else:
            num_workers = None if self.n_jobs == -1 else self.n_jobs
            results = compute(futures, scheduler="threads", num_workers=num_workers)[0]

        self.coef_ = np.vstack([result.coef for result in results])
        self.aux_ = np.vstack([result.aux for result in results])
        self.lambda_ = np.array([result.lambda_ for result in results])
        self.lambda_max_ = np.array([result.lambda_max for result in results])
        self.n_iter_ = np.array([result.n_iter for result in results])
        self.res_norm_hist_ = [result.res_norm_hist for result in results]
