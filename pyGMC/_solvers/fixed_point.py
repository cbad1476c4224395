"""Accelerated fixed-point iteration of averaged operators."""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum

import numpy as np
from scipy.linalg import LinAlgError, lstsq

LGR = logging.getLogger("GENERAL")

# Iterations between two progress messages in verbose mode
LOG_EVERY = 100


class Acceleration(Enum):
    """Acceleration strategy of the fixed-point iteration."""

    ORIGINAL = "original"
    NESTEROV = "nesterov"
    INERTIA = "inertia"
    AA2 = "aa2"


@dataclass(frozen=True)
class FixedPointConfig:
    """Stopping rule and acceleration settings of the fixed-point iteration.

    Attributes
    ----------
    max_iter : int
        Iteration budget.
    tol : float
        The iteration stops once the residual norm ``||T(y) - y||`` is below ``tol``.
    early_termination : bool
        Whether to stop at ``tol``. If False, all ``max_iter`` iterations are run.
    mem_size : int
        Number of past differences kept by Anderson acceleration.
    verbose : bool
        Whether to log the residual every 100 iterations.
    inertia : float
        Extrapolation weight of the inertial scheme.
    """

    max_iter: int = 10000
    tol: float = 1e-5
    early_termination: bool = True
    mem_size: int = 5
    verbose: bool = False
    inertia: float = 0.3


def _nesterov_update(t_fista, f, f_old):
    """Nesterov momentum step, same schedule as FISTA."""
    t_fista_old = t_fista
    t_fista = 0.5 * (1 + np.sqrt(1 + 4 * (t_fista_old**2)))

    return t_fista, f + (f - f_old) * (t_fista_old - 1) / t_fista


class _AndersonMemory:
    """Sliding window of differences used by Type-II Anderson acceleration."""

    def __init__(self, mem_size):
        self.delta_f = deque(maxlen=mem_size)
        self.delta_g = deque(maxlen=mem_size)
        self.f_old = None
        self.g_old = None

    def clear(self):
        self.delta_f.clear()
        self.delta_g.clear()
        self.f_old = None
        self.g_old = None

    def extrapolate(self, f, g):
        """Return the Anderson point combining the current and stored iterates."""
        if self.f_old is not None:
            self.delta_f.append(f - self.f_old)
            self.delta_g.append(g - self.g_old)
        self.f_old = f
        self.g_old = g

        if not self.delta_g:
            return f

        delta_g = np.column_stack(self.delta_g)
        delta_f = np.column_stack(self.delta_f)
        try:
            coefs = lstsq(delta_g, g)[0]
        except LinAlgError:
            LGR.debug("Anderson least-squares problem failed, taking a plain step")
            self.clear()
            return f

        y_next = f - np.dot(delta_f, coefs)
        if not np.all(np.isfinite(y_next)):
            self.clear()
            return f

        return y_next


def fixed_point_iteration(operator, x0, config=None, acceleration="nesterov"):
    """Find a fixed point of an averaged operator.

    Parameters
    ----------
    operator : callable
        Map from a state vector to a state vector of the same shape.
    x0 : ndarray
        Initial state.
    config : FixedPointConfig, optional
        Stopping rule and acceleration settings, by default ``FixedPointConfig()``
    acceleration : str or Acceleration, optional
        "original", "nesterov", "inertia" or "aa2", by default "nesterov"

    Returns
    -------
    x : ndarray
        Last operator output. It is a fixed point up to ``tol`` if the iteration
        converged before exhausting ``max_iter``.
    n_iter : int
        Number of operator evaluations performed.
    res_norm_hist : (n_iter,) ndarray
        Residual norm ``||T(y_k) - y_k||`` of each iteration.

    Notes
    -----
    Reaching ``max_iter`` is not an error: the last iterate and the full residual
    history are returned, and convergence is left to the caller to assess.

    - 'original': plain iteration :math:`y_{k+1} = T(y_k)`.
    - 'nesterov': FISTA momentum on the operator outputs, restarted whenever the
      residual increases.
    - 'inertia': fixed-weight extrapolation from the last two operator outputs.
    - 'aa2': Type-II Anderson acceleration over the last ``mem_size`` iterates,
      restarted whenever the residual exceeds the best one seen so far.
    """
    if config is None:
        config = FixedPointConfig()

    try:
        acceleration = Acceleration(acceleration)
    except ValueError:
        raise ValueError(
            f"Invalid acceleration {acceleration!r}. "
            f"Must be one of {[a.value for a in Acceleration]}."
        ) from None

    y = np.array(x0, dtype=np.float64)
    f = y
    f_old = y
    t_fista = 1
    res_old = np.inf
    res_best = np.inf
    memory = _AndersonMemory(config.mem_size) if acceleration is Acceleration.AA2 else None

    res_norm_hist = []
    num_iter = 0
    for num_iter in range(1, config.max_iter + 1):
        f = np.asarray(operator(y))
        g = f - y
        res = np.linalg.norm(g)
        res_norm_hist.append(res)

        if config.verbose and num_iter % LOG_EVERY == 0:
            LGR.info(f"Iteration {num_iter} / {config.max_iter}: residual {res:.6e}")
        else:
            LGR.debug(f"Iteration: {num_iter} / {config.max_iter}, residual: {res:.6e}")

        if config.early_termination and res <= config.tol:
            break

        if acceleration is Acceleration.ORIGINAL:
            y = f
        elif acceleration is Acceleration.NESTEROV:
            if res > res_old:
                t_fista = 1
                y = f
            else:
                t_fista, y = _nesterov_update(t_fista, f, f_old)
        elif acceleration is Acceleration.INERTIA:
            y = f + config.inertia * (f - f_old)
        else:
            if res > res_best:
                memory.clear()
            y = memory.extrapolate(f, g)

        f_old = f
        res_old = res
        res_best = min(res_best, res)
    else:
        if config.max_iter > 0:
            LGR.debug(f"Maximum number of iterations ({config.max_iter}) reached")

    return f, num_iter, np.asarray(res_norm_hist, dtype=np.float64)
