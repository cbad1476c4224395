"""Problem setup of the GMC-regularized least-squares problem."""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
import pylops
from scipy.linalg import eigvalsh

from pyGMC._solvers.proximal import GroupPartition

LGR = logging.getLogger("GENERAL")

# Strictly inside the (0, 2) convergence interval of forward-backward splitting
STEP_FACTOR = 1.99


class Structure(Enum):
    """Sparsity structure of the penalty."""

    SINGLE = "single"
    GROUPED = "grouped"


@dataclass(frozen=True)
class ProblemSetup:
    """Fixed quantities of a GMC solve, shared by every step of the saddle operator.

    Attributes
    ----------
    mu : float
        Step size of the forward-backward iteration.
    rho : float
        Largest eigenvalue of ``X^T X``.
    lambda_max : float
        Smallest regularization level that makes the solution exactly zero.
    Xty : (p,) ndarray
        Correlation between the columns of the design matrix and the response.
    gamma : float
        Concavity parameter of the GMC penalty.
    structure : Structure
        Elementwise (L1) or grouped (group-L2) sparsity.
    partition : GroupPartition or None
        Column groups when ``structure`` is ``Structure.GROUPED``.
    use_gram : bool
        Whether the operator applies the precomputed ``X^T X`` (``p < n``) or ``X``
        followed by ``X^T``.
    op : pylops.LinearOperator
        Design matrix as a linear operator.
    gram_op : pylops.LinearOperator
        ``X^T X`` as a linear operator.
    """

    mu: float
    rho: float
    lambda_max: float
    Xty: np.ndarray
    gamma: float
    structure: Structure
    partition: GroupPartition
    use_gram: bool
    op: pylops.LinearOperator
    gram_op: pylops.LinearOperator

    @property
    def n_samples(self):
        return self.op.shape[0]

    @property
    def n_features(self):
        return self.op.shape[1]

    def normal(self, x):
        """Apply ``X^T X`` through the path selected for this problem."""
        if self.use_gram:
            return self.gram_op.matvec(x)
        return self.op.rmatvec(self.op.matvec(x))


def check_design(X, y):
    """Validate the design matrix and the response vector.

    Parameters
    ----------
    X : (n x p) array_like
        Design matrix.
    y : (n,) array_like
        Response vector.

    Returns
    -------
    X : (n x p) ndarray
        Design matrix as a float array.
    y : (n,) ndarray
        Response vector as a float array.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    if X.ndim != 2:
        raise ValueError(f"The design matrix must be 2D. Got an array with {X.ndim} dimensions.")
    if X.shape[0] == 0 or X.shape[1] == 0:
        raise ValueError(f"The design matrix must have rows and columns. Got shape {X.shape}.")

    if y.ndim == 2 and y.shape[1] == 1:
        y = y[:, 0]
    if y.ndim != 1:
        raise ValueError(f"The response must be a vector. Got an array of shape {y.shape}.")
    if y.shape[0] != X.shape[0]:
        raise ValueError(
            f"The response has {y.shape[0]} samples but the design matrix has {X.shape[0]} rows."
        )

    if not (np.all(np.isfinite(X)) and np.all(np.isfinite(y))):
        raise ValueError("The design matrix and the response must only contain finite values.")

    return X, y


def compute_lambda_max(Xty, structure, partition=None):
    """Compute the smallest lambda that zeroes the solution.

    Parameters
    ----------
    Xty : (p,) ndarray
        Correlation between the columns of the design matrix and the response.
    structure : Structure
        Sparsity structure of the penalty.
    partition : GroupPartition, optional
        Column groups, required for the grouped structure.

    Returns
    -------
    lambda_max : float
        ``max |X^T y|`` for the elementwise structure, and the maximum over groups of
        ``||(X^T y)_g|| / sqrt(|g|)`` for the grouped structure.
    """
    if structure is Structure.SINGLE:
        return float(np.max(np.abs(Xty)))

    return float(np.max(partition.norms(Xty) / np.sqrt(partition.sizes)))


def setup_problem(X, y, structure="single", groups=None, gamma=0.8):
    """Derive the step size, lambda_max and operators of a GMC solve.

    Parameters
    ----------
    X : (n x p) array_like
        Design matrix with centered, unit-length columns.
    y : (n,) array_like
        Standardized response.
    structure : str or Structure, optional
        "single" for elementwise sparsity or "grouped" for group sparsity, by default
        "single"
    groups : GroupPartition or sequence of sequence of int, optional
        Column groups. Required if and only if ``structure`` is "grouped".
    gamma : float, optional
        Concavity parameter in (0, 1), by default 0.8

    Returns
    -------
    setup : ProblemSetup
        Immutable problem setup.

    Notes
    -----
    The step size is :math:`\\mu = 1.99 / (\\rho \\max(1, \\gamma / (1 - \\gamma)))`, where
    :math:`\\rho` is the largest eigenvalue of :math:`X^T X`. It keeps the saddle-point
    formulation convex and the forward-backward map averaged for any gamma in (0, 1).
    """
    X, y = check_design(X, y)
    n_samples, n_features = X.shape

    try:
        structure = Structure(structure)
    except ValueError:
        raise ValueError(
            f"Invalid structure {structure!r}. Must be one of {[s.value for s in Structure]}."
        ) from None

    if not 0 < gamma < 1:
        raise ValueError(f"gamma must lie in the open interval (0, 1). Got {gamma}.")

    if structure is Structure.GROUPED:
        if groups is None:
            raise ValueError("Groups must be provided for the grouped structure.")
        partition = GroupPartition(groups, n_features)
    else:
        if groups is not None:
            LGR.warning("Groups are ignored with the single structure.")
        partition = None

    gram = np.dot(X.T, X)
    rho = float(eigvalsh(gram, subset_by_index=[n_features - 1, n_features - 1])[0])
    if rho <= 0:
        raise ValueError("The design matrix must not be identically zero.")

    mu = STEP_FACTOR / (rho * max(1, gamma / (1 - gamma)))
    Xty = np.dot(X.T, y)
    lambda_max = compute_lambda_max(Xty, structure, partition)

    LGR.debug(f"rho = {rho:.6g}, mu = {mu:.6g}, lambda_max = {lambda_max:.6g}")

    return ProblemSetup(
        mu=mu,
        rho=rho,
        lambda_max=lambda_max,
        Xty=Xty,
        gamma=gamma,
        structure=structure,
        partition=partition,
        use_gram=n_features < n_samples,
        op=pylops.MatrixMult(X, dtype="float64"),
        gram_op=pylops.MatrixMult(gram, dtype="float64"),
    )
