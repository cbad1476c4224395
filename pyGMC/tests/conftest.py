import numpy as np
import pytest


def standardize_columns(X):
    """Center the columns of a design matrix and scale them to unit length."""
    X = X - X.mean(axis=0)
    return X / np.linalg.norm(X, axis=0)


@pytest.fixture(scope="session")
def testpath(tmp_path_factory):
    """Test path that will be used to write all files"""
    return tmp_path_factory.getbasetemp()


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def identity_problem():
    """Identity design with the response on the first column."""
    X = np.eye(3)
    y = np.array([1.0, 0.0, 0.0])
    return X, y


@pytest.fixture
def tall_problem(rng):
    """Standardized design with more samples than features and a sparse ground truth."""
    n_samples, n_features = 40, 8
    X = standardize_columns(rng.standard_normal((n_samples, n_features)))

    coef = np.zeros(n_features)
    coef[[1, 4]] = [2.0, -1.5]
    y = np.dot(X, coef) + 0.05 * rng.standard_normal(n_samples)
    y = (y - y.mean()) / y.std()

    return X, y


@pytest.fixture
def wide_problem(rng):
    """Design with more features than samples."""
    n_samples, n_features = 10, 20
    X = standardize_columns(rng.standard_normal((n_samples, n_features)))
    y = rng.standard_normal(n_samples)
    y = (y - y.mean()) / y.std()

    return X, y


@pytest.fixture
def orthonormal_groups_problem(rng):
    """Orthonormal design with two groups, the second one uncorrelated with the response."""
    Q, _ = np.linalg.qr(rng.standard_normal((6, 4)))
    y = Q[:, 0] + 0.5 * Q[:, 1]
    groups = [[0, 1], [2, 3]]

    return Q, y, groups
