"""Validation and scoring helpers for pyGMC estimators and solvers."""

from collections.abc import Hashable
from inspect import Parameter, signature

import numpy as np


def _estimator_repr(estimator, N_CHAR_MAX=700):
    """Build a representation string for an estimator.

    Only the parameters that differ from their default value are shown.

    Parameters
    ----------
    estimator : estimator instance
        The estimator to represent.
    N_CHAR_MAX : int, default=700
        Maximum number of characters to display.

    Returns
    -------
    repr_str : str
        The string representation.
    """
    init_params = signature(estimator.__class__.__init__).parameters
    params = estimator.get_params(deep=False)

    param_strs = []
    for key, value in sorted(params.items()):
        default = init_params[key].default if key in init_params else Parameter.empty
        if _is_default(value, default):
            continue

        if isinstance(value, str):
            value_str = f"'{value}'"
        elif isinstance(value, float):
            value_str = f"{value:.4g}"
        elif isinstance(value, list | tuple) and len(value) > 3:
            value_str = f"[{value[0]!r}, {value[1]!r}, ..., {value[-1]!r}]"
        else:
            value_str = repr(value)
        param_strs.append(f"{key}={value_str}")

    repr_str = f"{estimator.__class__.__name__}({', '.join(param_strs)})"

    if len(repr_str) > N_CHAR_MAX:
        repr_str = repr_str[: N_CHAR_MAX - 3] + "..."

    return repr_str


def _is_default(value, default):
    """Check whether a parameter value equals its default."""
    if value is default:
        return True
    if isinstance(value, np.ndarray) or isinstance(default, np.ndarray):
        return False
    try:
        return bool(value == default) and type(value) is type(default)
    except (TypeError, ValueError):
        return False


def r2_score(y_true, y_pred, *, multioutput="uniform_average"):
    """Compute the R² (coefficient of determination) of a prediction.

    Parameters
    ----------
    y_true : array-like of shape (n_samples,) or (n_samples, n_targets)
        Observed responses.
    y_pred : array-like of shape (n_samples,) or (n_samples, n_targets)
        Predicted responses.
    multioutput : {'raw_values', 'uniform_average'}, default='uniform_average'
        Whether to return one score per target or their mean.

    Returns
    -------
    score : float or ndarray of floats
        The R² score. Targets with zero variance score 0.
    """
    if multioutput not in ("raw_values", "uniform_average"):
        raise ValueError(f"Invalid multioutput value: {multioutput}")

    y_true = check_array(y_true, ensure_2d=True)
    y_pred = check_array(y_pred, ensure_2d=True)
    if y_true.shape != y_pred.shape:
        raise ValueError(
            f"y_true and y_pred have different shapes: {y_true.shape} and {y_pred.shape}."
        )

    ss_res = np.sum((y_true - y_pred) ** 2, axis=0)
    ss_tot = np.sum((y_true - y_true.mean(axis=0)) ** 2, axis=0)

    scores = np.zeros(y_true.shape[1])
    valid = ss_tot != 0
    scores[valid] = 1 - ss_res[valid] / ss_tot[valid]

    if multioutput == "raw_values":
        return scores
    return float(np.mean(scores))


def check_array(array, *, ensure_2d=True, dtype=np.float64, allow_nd=False, copy=False):
    """Input validation on an array.

    Parameters
    ----------
    array : array-like
        Input object to check / convert.
    ensure_2d : bool, default=True
        Whether to reshape a 1D array into a single column.
    dtype : dtype, default=np.float64
        Data type of result. If None, the dtype of the input is preserved.
    allow_nd : bool, default=False
        Whether to allow array.ndim > 2.
    copy : bool, default=False
        Whether to force a copy.

    Returns
    -------
    array_converted : ndarray
        The converted and validated array.
    """
    array = np.array(array, dtype=dtype, copy=True) if copy else np.asarray(array, dtype=dtype)

    if array.ndim == 1 and ensure_2d:
        array = array.reshape(-1, 1)

    if array.ndim > 2 and not allow_nd:
        raise ValueError(f"Found array with dim {array.ndim}. Expected <= 2.")

    if array.size == 0:
        raise ValueError(f"Found empty array with shape {array.shape}.")

    if np.issubdtype(array.dtype, np.number) and not np.all(np.isfinite(array)):
        raise ValueError("Input contains NaN or infinity.")

    return array


def check_X_y(X, y):
    """Validate a design matrix and one or several responses.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Design matrix.
    y : array-like of shape (n_samples,) or (n_samples, n_targets)
        Responses.

    Returns
    -------
    X : ndarray of shape (n_samples, n_features)
        Validated design matrix.
    y : ndarray of shape (n_samples,) or (n_samples, n_targets)
        Validated responses.
    """
    X = check_array(X, ensure_2d=False)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2D design matrix. Got an array with {X.ndim} dimensions.")

    y = check_array(y, ensure_2d=False)
    if y.shape[0] != X.shape[0]:
        raise ValueError(
            f"X and y have inconsistent numbers of samples: {X.shape[0]} and {y.shape[0]}."
        )

    return X, y


def _satisfies(value, constraint):
    """Check one constraint of ``validate_parameter_constraints``."""
    if constraint is None:
        return value is None

    if isinstance(constraint, type):
        return isinstance(value, constraint)

    if isinstance(constraint, tuple):
        if constraint[0] == "interval":
            _, dtype, left, right, closed = constraint
            if isinstance(value, bool) or not isinstance(value, dtype):
                return False
            if left is None:
                lower_ok = True
            else:
                lower_ok = left <= value if closed in ("left", "both") else left < value
            if right is None:
                upper_ok = True
            else:
                upper_ok = value <= right if closed in ("right", "both") else value < right
            return bool(lower_ok and upper_ok)
        if constraint[0] == "options":
            return isinstance(value, Hashable) and value in constraint[1]
        raise ValueError(f"Unknown constraint type {constraint[0]!r}.")

    if callable(constraint):
        return bool(constraint(value))

    raise ValueError(f"Unknown constraint {constraint!r}.")


def validate_parameter_constraints(parameter_constraints, params, caller_name):
    """Validate parameters against constraints.

    Parameters
    ----------
    parameter_constraints : dict
        Dictionary mapping parameter names to a list of constraints. A parameter is
        valid if it satisfies any of its constraints. Constraints can be:

        - None: the value is None.
        - a type: the value is an instance of it.
        - ``("interval", dtype, left, right, closed)``: the value is an instance of
          ``dtype`` (booleans excluded) between ``left`` and ``right``. Either bound can
          be None, and ``closed`` is one of "left", "right", "both" or "neither".
        - ``("options", container)``: the value is one of the options.
        - a callable: it returns True for the value.
    params : dict
        Dictionary of parameter names and values.
    caller_name : str
        Name of the calling class or function.

    Raises
    ------
    ValueError
        If a parameter doesn't satisfy its constraints.
    """
    for param_name, constraints in parameter_constraints.items():
        if param_name not in params:
            continue

        param_value = params[param_name]
        if not any(_satisfies(param_value, constraint) for constraint in constraints):
            raise ValueError(
                f"The {param_name!r} parameter of {caller_name} must satisfy "
                f"the constraints {constraints}. Got {param_value!r} instead."
            )
