"""Sparse-regularized least squares with the generalized minimax-concave (GMC) penalty."""

import logging
from numbers import Integral, Real
from typing import NamedTuple

import numpy as np

from pyGMC._solvers.fixed_point import Acceleration, FixedPointConfig, fixed_point_iteration
from pyGMC._solvers.problem import Structure, setup_problem
from pyGMC._solvers.proximal import GroupPartition
from pyGMC._solvers.saddle import SaddleOperator
from pyGMC._utils import validate_parameter_constraints

LGR = logging.getLogger("GENERAL")
RefLGR = logging.getLogger("REFERENCES")

_STRUCTURES = frozenset([s.value for s in Structure] + list(Structure))
_ACCELERATIONS = frozenset([a.value for a in Acceleration] + list(Acceleration))

_parameter_constraints = {
    "lambda_ratio": [("interval", Real, 0, 1, "both")],
    "structure": [("options", _STRUCTURES)],
    "groups": [None, list, tuple, np.ndarray, GroupPartition],
    "gamma": [("interval", Real, 0, 1, "neither")],
    "max_iter": [("interval", Integral, 1, None, "left")],
    "tol_stop": [("interval", Real, 0, None, "neither")],
    "acceleration": [("options", _ACCELERATIONS)],
    "early_termination": [bool],
    "mem_size": [("interval", Integral, 1, None, "left")],
    "verbose": [bool],
}


class GMCResult(NamedTuple):
    """Solution of a GMC-regularized least-squares problem.

    Attributes
    ----------
    coef : (p,) ndarray
        Sparse primal estimate.
    aux : (p,) ndarray
        Auxiliary (maximizing) variable of the saddle point.
    res_norm_hist : (n_iter,) ndarray
        Residual norm of each fixed-point iteration.
    lambda_ : float
        Regularization parameter used in the solve.
    lambda_max : float
        Smallest regularization parameter that zeroes the solution.
    n_iter : int
        Number of iterations performed.
    """

    coef: np.ndarray
    aux: np.ndarray
    res_norm_hist: np.ndarray
    lambda_: float
    lambda_max: float
    n_iter: int


def srls_gmc(
    y,
    X,
    lambda_ratio,
    *,
    structure="single",
    groups=None,
    gamma=0.8,
    max_iter=10000,
    tol_stop=1e-5,
    acceleration="nesterov",
    early_termination=True,
    mem_size=5,
    verbose=False,
):
    """Solve a sparse-regularized least-squares problem with the GMC penalty.

    The estimate is the saddle point

    .. math::

        \\arg\\min_x \\arg\\max_v \\; \\frac{1}{2} \\| y - X x \\|_2^2 + \\lambda P(x)
        - \\frac{\\gamma}{2} \\| X (x - v) \\|_2^2 - \\lambda P(v)

    found by accelerated forward-backward iterations on :math:`[x; v]`, starting
    from zero.

    Parameters
    ----------
    y : (n,) array_like
        Standardized response.
    X : (n x p) array_like
        Design matrix with centered, unit-length columns.
    lambda_ratio : float
        Ratio of lambda to lambda_max, in [0, 1].
    structure : str or Structure, optional
        "single" for an L1 penalty or "grouped" for a group-L2 penalty, by default
        "single"
    groups : list of list of int, 2D ndarray of int or GroupPartition, optional
        Column groups, required if ``structure`` is "grouped", by default None
    gamma : float, optional
        Concavity of the GMC penalty in (0, 1), by default 0.8
    max_iter : int, optional
        Maximum number of iterations, by default 10000
    tol_stop : float, optional
        Tolerance on the residual norm to stop the iterations, by default 1e-5
    acceleration : str or Acceleration, optional
        "original", "nesterov", "inertia" or "aa2", by default "nesterov"
    early_termination : bool, optional
        Whether to stop once the tolerance is reached, by default True
    mem_size : int, optional
        Memory of Anderson acceleration ("aa2" only), by default 5
    verbose : bool, optional
        Whether to log the residual during the iterations, by default False

    Returns
    -------
    result : GMCResult
        Primal estimate, auxiliary variable, residual history, lambda, lambda_max and
        number of iterations.

    Raises
    ------
    ValueError
        If any input is invalid. Nothing is computed in that case.

    Notes
    -----
    Reaching ``max_iter`` is not an error; inspect ``result.res_norm_hist`` to assess
    convergence.

    References
    ----------
    .. [1] Selesnick, I. (2017). "Sparse Regularization via Convex Analysis."
       IEEE Transactions on Signal Processing, 65(17), 4481-4494.
    .. [2] Bauschke, H. H. and Combettes, P. L. (2011). "Convex Analysis and
       Monotone Operator Theory in Hilbert Spaces." Springer.
    """
    validate_parameter_constraints(
        _parameter_constraints,
        {
            "lambda_ratio": lambda_ratio,
            "structure": structure,
            "groups": groups,
            "gamma": gamma,
            "max_iter": max_iter,
            "tol_stop": tol_stop,
            "acceleration": acceleration,
            "early_termination": early_termination,
            "mem_size": mem_size,
            "verbose": verbose,
        },
        caller_name="srls_gmc",
    )

    setup = setup_problem(X, y, structure=structure, groups=groups, gamma=gamma)
    lambda_ = setup.lambda_max * lambda_ratio

    config = FixedPointConfig(
        max_iter=max_iter,
        tol=tol_stop,
        early_termination=early_termination,
        mem_size=mem_size,
        verbose=verbose,
    )

    LGR.debug(
        f"Solving GMC ({setup.structure.value}) with {Acceleration(acceleration).value} "
        f"acceleration on a {setup.n_samples} x {setup.n_features} design matrix"
    )

    xv0 = np.zeros(2 * setup.n_features)
    xv_lambda, n_iter, res_norm_hist = fixed_point_iteration(
        SaddleOperator(setup, lambda_), xv0, config, acceleration
    )

    LGR.info(f"lambda = {lambda_:f} solved in {n_iter} iterations")
    RefLGR.info(
        "Selesnick, I. (2017). Sparse Regularization via Convex Analysis. "
        "IEEE Transactions on Signal Processing, 65(17), 4481-4494."
    )

    p = setup.n_features
    return GMCResult(
        coef=xv_lambda[:p],
        aux=xv_lambda[p:],
        res_norm_hist=res_norm_hist,
        lambda_=lambda_,
        lambda_max=setup.lambda_max,
        n_iter=n_iter,
    )
