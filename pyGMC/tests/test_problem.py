"""Tests for the problem setup."""

import numpy as np
import pytest

from pyGMC._solvers.problem import Structure, check_design, compute_lambda_max, setup_problem
from pyGMC._solvers.proximal import GroupPartition


class TestSetupProblem:
    """Tests for setup_problem."""

    def test_step_size(self, tall_problem):
        X, y = tall_problem
        rho = np.linalg.eigvalsh(np.dot(X.T, X))[-1]

        setup = setup_problem(X, y, gamma=0.8)
        assert np.isclose(setup.rho, rho)
        assert np.isclose(setup.mu, 1.99 / (rho * 4))

        # gamma / (1 - gamma) < 1 leaves the step at 1.99 / rho
        setup = setup_problem(X, y, gamma=0.3)
        assert np.isclose(setup.mu, 1.99 / rho)

    def test_lambda_max_single(self, tall_problem):
        X, y = tall_problem
        setup = setup_problem(X, y)

        np.testing.assert_allclose(setup.Xty, np.dot(X.T, y))
        assert np.isclose(setup.lambda_max, np.max(np.abs(np.dot(X.T, y))))
        assert setup.structure is Structure.SINGLE
        assert setup.partition is None

    def test_lambda_max_grouped(self, tall_problem):
        X, y = tall_problem
        groups = [[0, 1, 2], [3, 4], [5, 6, 7]]
        Xty = np.dot(X.T, y)

        setup = setup_problem(X, y, structure="grouped", groups=groups)

        expected = max(np.linalg.norm(Xty[g]) / np.sqrt(len(g)) for g in groups)
        assert np.isclose(setup.lambda_max, expected)
        assert setup.structure is Structure.GROUPED
        assert isinstance(setup.partition, GroupPartition)

    def test_identity_lambda_max(self, identity_problem):
        X, y = identity_problem
        assert setup_problem(X, y).lambda_max == 1.0

    def test_operator_path(self, tall_problem, wide_problem):
        X, y = tall_problem
        setup = setup_problem(X, y)
        assert setup.use_gram
        assert (setup.n_samples, setup.n_features) == X.shape

        X, y = wide_problem
        assert not setup_problem(X, y).use_gram

        # Square designs apply X then X^T
        assert not setup_problem(np.eye(3), np.ones(3)).use_gram

    def test_normal_operator(self, tall_problem, rng):
        X, y = tall_problem
        setup = setup_problem(X, y)
        x = rng.standard_normal(X.shape[1])

        np.testing.assert_allclose(setup.normal(x), np.dot(X.T, np.dot(X, x)))

    def test_structure_enum_accepted(self, tall_problem):
        X, y = tall_problem
        setup = setup_problem(X, y, structure=Structure.GROUPED, groups=[[0, 1, 2, 3, 4, 5, 6, 7]])
        assert setup.structure is Structure.GROUPED

    def test_inputs_are_not_modified(self, tall_problem):
        X, y = tall_problem
        X_copy, y_copy = X.copy(), y.copy()

        setup_problem(X, y)

        np.testing.assert_array_equal(X, X_copy)
        np.testing.assert_array_equal(y, y_copy)

    @pytest.mark.parametrize("gamma", [0.0, 1.0, 1.5, -0.2])
    def test_invalid_gamma(self, tall_problem, gamma):
        X, y = tall_problem
        with pytest.raises(ValueError, match="gamma"):
            setup_problem(X, y, gamma=gamma)

    def test_invalid_structure(self, tall_problem):
        X, y = tall_problem
        with pytest.raises(ValueError, match="Invalid structure"):
            setup_problem(X, y, structure="sparse")

    def test_grouped_requires_groups(self, tall_problem):
        X, y = tall_problem
        with pytest.raises(ValueError, match="Groups must be provided"):
            setup_problem(X, y, structure="grouped")

    def test_out_of_range_group(self, tall_problem):
        X, y = tall_problem
        with pytest.raises(ValueError, match="outside"):
            setup_problem(X, y, structure="grouped", groups=[[0, 1], [7, 8]])

    def test_zero_design(self):
        with pytest.raises(ValueError, match="identically zero"):
            setup_problem(np.zeros((4, 2)), np.ones(4))


class TestCheckDesign:
    """Tests for check_design."""

    def test_column_response(self, tall_problem):
        X, y = tall_problem
        _, y_checked = check_design(X, y[:, np.newaxis])
        assert y_checked.shape == y.shape

    @pytest.mark.parametrize(
        "X, y, match",
        [
            (np.ones(5), np.ones(5), "must be 2D"),
            (np.ones((5, 0)), np.ones(5), "rows and columns"),
            (np.ones((5, 2)), np.ones(4), "4 samples"),
            (np.ones((5, 2)), np.ones((5, 2)), "must be a vector"),
            (np.full((5, 2), np.nan), np.ones(5), "finite"),
        ],
    )
    def test_invalid_design(self, X, y, match):
        with pytest.raises(ValueError, match=match):
            check_design(X, y)


def test_compute_lambda_max_grouped():
    partition = GroupPartition([[0, 1], [2, 3]], 4)
    Xty = np.array([3.0, 4.0, 0.0, 0.0])

    assert np.isclose(compute_lambda_max(Xty, Structure.GROUPED, partition), 5 / np.sqrt(2))
    assert compute_lambda_max(Xty, Structure.SINGLE) == 4.0
