"""Base classes for pyGMC estimators.

This module provides the base classes of the estimators in pyGMC, following
the scikit-learn estimator API conventions:

- `BaseEstimator`: Base class with get_params/set_params and parameter validation.
- `RegressorMixin`: Mixin class providing score based on R².
- `LinearModelMixin`: Mixin class providing predict for fitted coefficients.

References
----------
.. [1] scikit-learn developers. "Developing scikit-learn estimators."
   https://scikit-learn.org/stable/developers/develop.html
"""

import copy
from inspect import signature

import numpy as np


__all__ = [
    "BaseEstimator",
    "RegressorMixin",
    "LinearModelMixin",
    "clone",
    "check_is_fitted",
    "NotFittedError",
]


class NotFittedError(ValueError, AttributeError):
    """Exception class to raise if estimator is used before fitting.

    This class inherits from both ValueError and AttributeError to help with
    exception handling and maintain compatibility with scikit-learn.

    Examples
    --------
    >>> from pyGMC import GMCRegression
    >>> from pyGMC.base import NotFittedError
    >>> try:
    ...     GMCRegression().predict([[1.0, 2.0], [3.0, 4.0]])
    ... except NotFittedError:
    ...     print("Not fitted!")
    Not fitted!
    """


def clone(estimator, *, safe=True):
    """Construct a new unfitted estimator with the same parameters.

    Parameters that are estimators are cloned recursively, and every other
    parameter is deep-copied, so the clone shares no state with the original.

    Parameters
    ----------
    estimator : estimator object
        The estimator to be cloned.
    safe : bool, default=True
        If False, objects that are not estimators are deep-copied instead of raising
        a TypeError.

    Returns
    -------
    estimator : estimator object
        An unfitted copy of the input estimator.

    Examples
    --------
    >>> from pyGMC import GMCRegression
    >>> from pyGMC.base import clone
    >>> estimator = GMCRegression(lambda_ratio=0.3, acceleration="aa2")
    >>> cloned = clone(estimator)
    >>> estimator is cloned
    False
    >>> estimator.get_params() == cloned.get_params()
    True
    """
    if not hasattr(estimator, "get_params") or isinstance(estimator, type):
        if not safe:
            return copy.deepcopy(estimator)
        raise TypeError(
            f"Cannot clone object {estimator!r}: it does not implement a 'get_params' method."
        )

    params = estimator.get_params(deep=False)
    new_params = {
        name: clone(value, safe=False) if hasattr(value, "get_params") else copy.deepcopy(value)
        for name, value in params.items()
    }

    return estimator.__class__(**new_params)


def check_is_fitted(estimator, attributes=None, *, msg=None, all_or_any=all):
    """Perform is_fitted validation for estimator.

    Checks if the estimator is fitted by verifying the presence of fitted attributes
    (ending with a trailing underscore) and otherwise raises a NotFittedError.

    Parameters
    ----------
    estimator : estimator instance
        Estimator instance for which the check is performed.
    attributes : str or list of str, default=None
        Attribute name(s) given as string or a list of strings. If None, any
        attribute ending with an underscore counts as a fitted attribute.
    msg : str, default=None
        Error message. It may contain ``%(name)s``, replaced by the estimator name.
    all_or_any : callable, default=all
        Specify whether all or any of the given attributes must exist.

    Raises
    ------
    TypeError
        If the estimator is not an estimator instance.
    NotFittedError
        If the attributes are not found.
    """
    if msg is None:
        msg = (
            "This %(name)s instance is not fitted yet. Call 'fit' with "
            "appropriate arguments before using this estimator."
        )

    if not hasattr(estimator, "fit"):
        raise TypeError(f"{estimator} is not an estimator instance.")

    if attributes is not None:
        if not isinstance(attributes, (list, tuple)):
            attributes = [attributes]
        fitted = all_or_any([hasattr(estimator, attr) for attr in attributes])
    else:
        fitted = any(v.endswith("_") and not v.startswith("__") for v in vars(estimator))

    if not fitted:
        raise NotFittedError(msg % {"name": type(estimator).__name__})


class BaseEstimator:
    """Base class for all estimators in pyGMC.

    All estimators should specify all the parameters that can be set at the
    class level in their ``__init__`` as explicit keyword arguments
    (no ``*args`` or ``**kwargs``). Attributes set during fit end with an
    underscore (e.g., ``coef_``).

    Constraints on the parameters are declared in the ``_parameter_constraints``
    class attribute and checked by ``_validate_params``, usually at the start of
    ``fit``.
    """

    @classmethod
    def _get_param_names(cls):
        """Get parameter names for the estimator."""
        init = cls.__init__
        if init is object.__init__:
            return []

        parameters = [
            p
            for p in signature(init).parameters.values()
            if p.name != "self" and p.kind != p.VAR_KEYWORD
        ]
        if any(p.kind == p.VAR_POSITIONAL for p in parameters):
            raise RuntimeError(
                f"pyGMC estimators should always specify their parameters in the signature "
                f"of their __init__ (no varargs). {cls} doesn't follow this convention."
            )

        return sorted(p.name for p in parameters)

    def get_params(self, deep=True):
        """Get parameters for this estimator.

        Parameters
        ----------
        deep : bool, default=True
            If True, will return the parameters for this estimator and
            contained subobjects that are estimators.

        Returns
        -------
        params : dict
            Parameter names mapped to their values.
        """
        out = {}
        for key in self._get_param_names():
            value = getattr(self, key)
            if deep and hasattr(value, "get_params") and not isinstance(value, type):
                out.update((f"{key}__{k}", val) for k, val in value.get_params().items())
            out[key] = value
        return out

    def set_params(self, **params):
        """Set the parameters of this estimator.

        Nested parameters have the form ``<component>__<parameter>``.

        Parameters
        ----------
        **params : dict
            Estimator parameters.

        Returns
        -------
        self : estimator instance
            Estimator instance.
        """
        valid_params = self._get_param_names()
        nested_params = {}

        for key, value in params.items():
            key, delim, sub_key = key.partition("__")
            if key not in valid_params:
                raise ValueError(
                    f"Invalid parameter {key!r} for estimator {self.__class__.__name__}. "
                    f"Valid parameters are: {valid_params!r}."
                )

            if delim:
                nested_params.setdefault(key, {})[sub_key] = value
            else:
                setattr(self, key, value)

        for key, sub_params in nested_params.items():
            getattr(self, key).set_params(**sub_params)

        return self

    def __repr__(self, N_CHAR_MAX=700):
        from pyGMC._utils import _estimator_repr

        return _estimator_repr(self, N_CHAR_MAX=N_CHAR_MAX)

    def _validate_params(self):
        """Validate types and values of constructor parameters."""
        if not hasattr(self, "_parameter_constraints"):
            return

        from pyGMC._utils import validate_parameter_constraints

        validate_parameter_constraints(
            self._parameter_constraints,
            self.get_params(deep=False),
            caller_name=self.__class__.__name__,
        )


class LinearModelMixin:
    """Mixin class for estimators with fitted linear coefficients ``coef_``."""

    def predict(self, X):
        """Predict responses with the fitted coefficients.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Design matrix.

        Returns
        -------
        y_pred : ndarray of shape (n_samples,) or (n_samples, n_targets)
            Predicted responses.
        """
        check_is_fitted(self, ["coef_"])

        X = np.asarray(X, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != self.n_features_in_:
            raise ValueError(
                f"X has shape {X.shape}, but {self.__class__.__name__} is expecting "
                f"{self.n_features_in_} features as input."
            )

        return np.dot(X, self.coef_.T)


class RegressorMixin:
    """Mixin class for all regressors in pyGMC.

    This mixin provides the ``score`` method based on R² (coefficient of
    determination).
    """

    def score(self, X, y):
        """Return the coefficient of determination of the prediction.

        The coefficient of determination :math:`R^2` is defined as
        :math:`(1 - \\frac{u}{v})`, where :math:`u` is the residual
        sum of squares ``((y_true - y_pred)** 2).sum()`` and :math:`v`
        is the total sum of squares ``((y_true - y_true.mean()) ** 2).sum()``.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Test samples.
        y : array-like of shape (n_samples,) or (n_samples, n_targets)
            True values for X.

        Returns
        -------
        score : float
            :math:`R^2` of ``self.predict(X)`` w.r.t. ``y``, averaged over targets.
        """
        from pyGMC._utils import r2_score

        return r2_score(y, self.predict(X))
