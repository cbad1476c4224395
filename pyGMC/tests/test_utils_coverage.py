"""Tests for _utils module."""

from numbers import Integral, Real

import numpy as np
import pytest

from pyGMC import GMCRegression
from pyGMC._utils import (
    _estimator_repr,
    check_array,
    check_X_y,
    r2_score,
    validate_parameter_constraints,
)


class TestEstimatorRepr:
    """Tests for _estimator_repr function."""

    def test_repr_with_string_param(self):
        """Test repr with string parameters."""
        repr_str = _estimator_repr(GMCRegression(structure="grouped"))
        assert repr_str == "GMCRegression(structure='grouped')"

    def test_repr_with_float_param(self):
        """Test repr with float parameters."""
        assert "gamma=0.65" in _estimator_repr(GMCRegression(gamma=0.65))

    def test_repr_with_long_list_param(self):
        """Test repr with long list parameters (>3 elements)."""
        model = GMCRegression(groups=[[0], [1], [2], [3, 4]])
        assert "groups=[[0], [1], ..., [3, 4]]" in _estimator_repr(model)

    def test_repr_truncation(self):
        """Test that very long repr is truncated."""
        model = GMCRegression(lambda_ratio=0.1, acceleration="aa2", structure="grouped")
        repr_str = _estimator_repr(model, N_CHAR_MAX=30)

        assert len(repr_str) == 30
        assert repr_str.endswith("...")


class TestR2Score:
    """Tests for r2_score function."""

    def test_r2_score_perfect(self):
        """Test R² of a perfect prediction."""
        y = np.array([1.0, 2.0, 3.0])
        assert r2_score(y, y) == 1.0

    def test_r2_score_mean_prediction(self):
        """Test that predicting the mean scores zero."""
        y = np.array([1.0, 2.0, 3.0])
        assert r2_score(y, np.full(3, 2.0)) == pytest.approx(0.0)

    def test_r2_score_multioutput(self):
        """Test raw and averaged scores of several targets."""
        y_true = np.array([[1.0, 1.0], [2.0, 3.0], [3.0, 5.0]])
        y_pred = np.array([[1.0, 3.0], [2.0, 3.0], [3.0, 3.0]])

        np.testing.assert_allclose(r2_score(y_true, y_pred, multioutput="raw_values"), [1.0, 0.0])
        assert r2_score(y_true, y_pred) == pytest.approx(0.5)

    def test_r2_score_zero_variance(self):
        """Test that a constant target scores zero."""
        assert r2_score(np.ones(4), np.zeros(4)) == 0.0

    def test_r2_score_invalid_multioutput(self):
        """Test invalid multioutput value."""
        with pytest.raises(ValueError, match="Invalid multioutput"):
            r2_score(np.ones(3), np.ones(3), multioutput="variance_weighted")

    def test_r2_score_shape_mismatch(self):
        """Test predictions with a different shape."""
        with pytest.raises(ValueError, match="different shapes"):
            r2_score(np.ones(3), np.ones(4))


class TestCheckArray:
    """Tests for check_array and check_X_y."""

    def test_check_array_1d_to_2d(self):
        """Test that 1D arrays become a column."""
        assert check_array([1, 2, 3]).shape == (3, 1)
        assert check_array([1, 2, 3], ensure_2d=False).shape == (3,)

    def test_check_array_dtype_conversion(self):
        """Test conversion to float64."""
        assert check_array(np.array([[1, 2]], dtype=np.int32)).dtype == np.float64

    def test_check_array_copy(self):
        """Test that copy=True returns a new array."""
        X = np.ones((2, 2))
        assert check_array(X, copy=True) is not X
        assert check_array(X) is X

    def test_check_array_nd(self):
        """Test arrays with more than two dimensions."""
        with pytest.raises(ValueError, match="Expected <= 2"):
            check_array(np.ones((2, 2, 2)))
        assert check_array(np.ones((2, 2, 2)), allow_nd=True).ndim == 3

    @pytest.mark.parametrize(
        "array, match",
        [
            (np.empty((0, 3)), "empty"),
            ([[1.0, np.nan]], "NaN or infinity"),
            ([[np.inf, 1.0]], "NaN or infinity"),
        ],
    )
    def test_check_array_invalid(self, array, match):
        """Test that empty and non-finite arrays are rejected."""
        with pytest.raises(ValueError, match=match):
            check_array(array)

    def test_check_X_y(self):
        """Test joint validation of the design matrix and responses."""
        X, y = check_X_y([[1, 2], [3, 4]], [1, 2])
        assert X.shape == (2, 2)
        assert y.shape == (2,)

        with pytest.raises(ValueError, match="Expected a 2D design matrix"):
            check_X_y([1, 2], [1, 2])
        with pytest.raises(ValueError, match="inconsistent numbers of samples"):
            check_X_y(np.ones((3, 2)), np.ones(2))


class TestValidateParameterConstraints:
    """Tests for validate_parameter_constraints function."""

    def test_validate_type_constraint(self):
        """Test type constraint validation."""
        constraints = {"param1": [int]}
        validate_parameter_constraints(constraints, {"param1": 5}, "TestClass")

        with pytest.raises(ValueError, match="must satisfy the constraints"):
            validate_parameter_constraints(constraints, {"param1": "string"}, "TestClass")

    def test_validate_none_constraint(self):
        """Test that None only accepts None."""
        constraints = {"param1": [None, list]}
        validate_parameter_constraints(constraints, {"param1": None}, "TestClass")
        validate_parameter_constraints(constraints, {"param1": [0, 1]}, "TestClass")

        with pytest.raises(ValueError):
            validate_parameter_constraints(constraints, {"param1": 0}, "TestClass")

    @pytest.mark.parametrize(
        "closed, valid, invalid",
        [
            ("both", [0.0, 0.5, 1.0], [-0.1, 1.1]),
            ("left", [0.0, 0.5], [1.0]),
            ("right", [0.5, 1.0], [0.0]),
            ("neither", [0.5], [0.0, 1.0]),
        ],
    )
    def test_validate_interval_constraint(self, closed, valid, invalid):
        """Test interval constraints for every kind of closed bounds."""
        constraints = {"param1": [("interval", Real, 0.0, 1.0, closed)]}

        for value in valid:
            validate_parameter_constraints(constraints, {"param1": value}, "TestClass")
        for value in invalid:
            with pytest.raises(ValueError):
                validate_parameter_constraints(constraints, {"param1": value}, "TestClass")

    def test_validate_unbounded_interval(self):
        """Test intervals without an upper bound."""
        constraints = {"param1": [("interval", Integral, 1, None, "left")]}
        validate_parameter_constraints(constraints, {"param1": 10**6}, "TestClass")

        for value in (0, 2.0, True):
            with pytest.raises(ValueError):
                validate_parameter_constraints(constraints, {"param1": value}, "TestClass")

    def test_validate_options_constraint(self):
        """Test options constraints, including unhashable values."""
        constraints = {"param1": [("options", frozenset(["a", "b"]))]}
        validate_parameter_constraints(constraints, {"param1": "a"}, "TestClass")

        for value in ("c", ["a"]):
            with pytest.raises(ValueError):
                validate_parameter_constraints(constraints, {"param1": value}, "TestClass")

    def test_validate_callable_constraint(self):
        """Test callable constraint validation."""
        constraints = {"param1": [lambda x: x > 0]}
        validate_parameter_constraints(constraints, {"param1": 5}, "TestClass")

        with pytest.raises(ValueError):
            validate_parameter_constraints(constraints, {"param1": -5}, "TestClass")

    def test_validate_missing_param(self):
        """Test that missing params are ignored."""
        constraints = {"param1": [int], "param2": [str]}
        validate_parameter_constraints(constraints, {"param1": 5}, "TestClass")

    def test_unknown_constraint(self):
        """Test that malformed constraints are reported."""
        with pytest.raises(ValueError, match="Unknown constraint type"):
            validate_parameter_constraints({"param1": [("range", 0, 1)]}, {"param1": 0}, "Test")
