"""Forward-backward operator of the GMC saddle-point problem.

The GMC-regularized least-squares problem is solved as the saddle point

.. math::

    \\min_x \\max_v \\; F(x, v) = \\frac{1}{2} \\| y - X x \\|_2^2 + \\lambda P(x)
    - \\frac{\\gamma}{2} \\| X (x - v) \\|_2^2 - \\lambda P(v)

where :math:`P` is the L1 norm or the group-L2 norm. One application of
:class:`SaddleOperator` is a forward-backward step on the stacked vector
:math:`[x; v]` (Theorem 25.8 in Bauschke and Combettes, 2011).
"""

import logging

import numpy as np
import pyproximal

from pyGMC._solvers.problem import Structure
from pyGMC._solvers.proximal import _group_soft_threshold_jit, _proximal_operator_lasso_jit

LGR = logging.getLogger("GENERAL")


class SaddleOperator:
    """One forward-backward step over the stacked primal/auxiliary vector.

    Parameters
    ----------
    setup : ProblemSetup
        Fixed quantities of the problem.
    lambda_ : float
        Regularization parameter.

    Notes
    -----
    The operator is a pure function of its input. The proximal operator and the
    ``X^T X`` path follow the immutable setup. Every operator shares the same
    compiled proximal operators, with the threshold passed as an argument.

    Examples
    --------
    >>> setup = setup_problem(X, y, gamma=0.8)
    >>> step = SaddleOperator(setup, 0.5 * setup.lambda_max)
    >>> xv_next = step(np.zeros(2 * setup.n_features))
    """

    def __init__(self, setup, lambda_):
        if lambda_ < 0:
            raise ValueError(f"lambda must be non-negative. Got {lambda_}.")

        self.setup = setup
        self.lambda_ = lambda_
        self.thr = setup.mu * lambda_

        LGR.debug(
            f"Saddle operator with {setup.structure.value} proximal operator, "
            f"threshold {self.thr:.6g} and operator path "
            f"{'X^T X' if setup.use_gram else 'X then X^T'}"
        )

    def _prox(self, z):
        if self.setup.structure is Structure.GROUPED:
            partition = self.setup.partition
            return _group_soft_threshold_jit(z, self.thr, partition.segments, partition.sizes)

        return _proximal_operator_lasso_jit(z, self.thr)

    @property
    def n_features(self):
        return self.setup.n_features

    def split(self, xv):
        """Split a stacked vector into its primal and auxiliary halves."""
        p = self.n_features
        return xv[:p], xv[p:]

    def forward(self, x, v):
        """Gradient step on both variables, before thresholding.

        Returns
        -------
        zx : (p,) ndarray
            Descent step of the primal variable, taken at ``x + gamma (v - x)``.
        zv : (p,) ndarray
            Ascent step of the auxiliary variable, taken at ``v - x``.
        """
        mu = self.setup.mu
        gamma = self.setup.gamma

        zx = x - mu * (self.setup.normal(x + gamma * (v - x)) - self.setup.Xty)
        zv = v - mu * (gamma * self.setup.normal(v - x))

        return zx, zv

    def __call__(self, xv):
        xv = np.asarray(xv, dtype=np.float64)
        if xv.shape != (2 * self.n_features,):
            raise ValueError(
                f"The state vector must have shape ({2 * self.n_features},). Got {xv.shape}."
            )

        zx, zv = self.forward(*self.split(xv))

        x = np.asarray(self._prox(zx))
        v = np.asarray(self._prox(zv))

        return np.concatenate((x, v))


def penalty(setup, x):
    """Evaluate the sparsity penalty P(x) of the problem structure."""
    if setup.structure is Structure.GROUPED:
        return float(np.sum(np.sqrt(setup.partition.sizes) * setup.partition.norms(x)))

    return float(pyproximal.L1()(np.asarray(x, dtype=np.float64)))


def saddle_objective(setup, y, x, v, lambda_):
    """Evaluate the saddle function F(x, v).

    Parameters
    ----------
    setup : ProblemSetup
        Fixed quantities of the problem.
    y : (n,) ndarray
        Response vector.
    x : (p,) ndarray
        Primal variable.
    v : (p,) ndarray
        Auxiliary variable.
    lambda_ : float
        Regularization parameter.

    Returns
    -------
    float
        Value of F(x, v). A saddle point satisfies
        ``F(x_hat, v) <= F(x_hat, v_hat) <= F(x, v_hat)`` for every ``x`` and ``v``.
    """
    residual = y - setup.op.matvec(x)
    coupling = setup.op.matvec(x - v)

    return (
        0.5 * np.dot(residual, residual)
        + lambda_ * penalty(setup, x)
        - 0.5 * setup.gamma * np.dot(coupling, coupling)
        - lambda_ * penalty(setup, v)
    )
