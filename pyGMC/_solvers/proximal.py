"""Proximal operators of the GMC penalties.

Importing this module enables 64-bit mode in jax (``jax_enable_x64``) for the
whole process, so jax arrays created afterwards default to double precision.
"""

import logging

import jax
import jax.numpy as jnp
import numpy as np

# Thresholds and residuals are compared against tolerances well below float32 precision
jax.config.update("jax_enable_x64", True)

LGR = logging.getLogger("GENERAL")


class GroupPartition:
    """Partition of the columns of a design matrix into penalized groups.

    Parameters
    ----------
    groups : sequence of sequence of int
        Column indices of each group. Groups do not need to be contiguous or of
        equal size, but they must be non-empty and must not overlap.
    n_features : int
        Number of columns of the design matrix.

    Attributes
    ----------
    groups : list of ndarray
        Validated column indices of each group.
    segments : (p,) ndarray of int
        Group id of every column. Columns that belong to no group are given the id
        ``n_groups``.
    sizes : (n_groups,) ndarray of int
        Number of columns in each group.

    Notes
    -----
    Columns that are not covered by any group are not penalized as a unit; the group
    proximal operator holds them at exactly zero.
    """

    def __init__(self, groups, n_features):
        if isinstance(groups, GroupPartition):
            groups = groups.groups

        if n_features < 1:
            raise ValueError("A group partition needs at least one column.")

        if groups is None or len(groups) == 0:
            raise ValueError("At least one group must be provided for the grouped structure.")

        segments = np.full(n_features, len(groups), dtype=np.int64)
        validated = []
        for group_idx, group in enumerate(groups):
            idxs = np.atleast_1d(np.asarray(group))
            if idxs.size == 0:
                raise ValueError(f"Group {group_idx} is empty.")
            if idxs.ndim != 1 or not np.issubdtype(idxs.dtype, np.integer):
                raise ValueError(f"Group {group_idx} must be a 1D sequence of integer indices.")
            if idxs.min() < 0 or idxs.max() >= n_features:
                raise ValueError(
                    f"Group {group_idx} references an index outside of [0, {n_features})."
                )
            if np.unique(idxs).size != idxs.size or np.any(segments[idxs] != len(groups)):
                raise ValueError(f"Group {group_idx} overlaps with another group.")

            segments[idxs] = group_idx
            validated.append(idxs)

        n_uncovered = np.count_nonzero(segments == len(groups))
        if n_uncovered > 0:
            LGR.warning(
                f"{n_uncovered} column(s) do not belong to any group and will be set to zero."
            )

        self.groups = validated
        self.n_features = n_features
        self.segments = segments
        self.sizes = np.array([idxs.size for idxs in validated], dtype=np.int64)

    @classmethod
    def from_labels(cls, labels):
        """Build a partition from a group label per column.

        Parameters
        ----------
        labels : (p,) array_like
            Group label of every column. Columns sharing a label form a group; groups
            are ordered by sorted label.

        Returns
        -------
        GroupPartition
            Partition covering every column.
        """
        labels = np.asarray(labels)
        if labels.ndim != 1:
            raise ValueError("Group labels must be a 1D array with one label per column.")

        groups = [np.flatnonzero(labels == label) for label in np.unique(labels)]
        return cls(groups, labels.size)

    @property
    def n_groups(self):
        """Number of groups."""
        return len(self.groups)

    def norms(self, z):
        """Euclidean norm of each group of ``z``."""
        z = np.asarray(z)
        return np.array([np.linalg.norm(z[idxs]) for idxs in self.groups])

    def __len__(self):
        return self.n_groups

    def __repr__(self):
        return f"GroupPartition(n_groups={self.n_groups}, n_features={self.n_features})"


def proximal_operator_lasso(y, thr):
    """Perform soft-thresholding.

    Parameters
    ----------
    y : ndarray
        Input data to be soft-thresholded.
    thr : float
        Thresholding value.

    Returns
    -------
    x : ndarray
        Soft-thresholded data. Entries with ``|y| <= thr`` are exactly zero.
    """
    return jnp.sign(y) * jnp.maximum(jnp.abs(y) - thr, 0.0)


def _group_soft_threshold(y, thr, segments, sizes):
    """Shrink every group of ``y`` as a unit.

    ``segments`` maps each entry to its group; the extra segment id ``len(sizes)``
    collects uncovered entries, which are zeroed.
    """
    n_groups = sizes.shape[0]

    squared_norms = jax.ops.segment_sum(y**2, segments, num_segments=n_groups + 1)
    norms = jnp.sqrt(squared_norms[:n_groups])
    group_thr = thr * jnp.sqrt(sizes.astype(y.dtype))

    # Zero-norm groups are zeroed without dividing by their norm
    safe_norms = jnp.where(norms > 0, norms, 1.0)
    scale = jnp.where(norms > group_thr, 1.0 - group_thr / safe_norms, 0.0)
    scale = jnp.append(scale, 0.0)

    return y * scale[segments]


_proximal_operator_lasso_jit = jax.jit(proximal_operator_lasso)
_group_soft_threshold_jit = jax.jit(_group_soft_threshold)


def proximal_operator_group(y, thr, groups):
    """Apply the proximal operator of the group-L2 penalty.

    Each group ``g`` of size ``k`` is scaled by ``1 - thr * sqrt(k) / ||y_g||`` when its
    norm exceeds ``thr * sqrt(k)`` and set to zero otherwise.

    Parameters
    ----------
    y : ndarray
        Input data to be thresholded.
    thr : float
        Thresholding value. It is weighted by the square root of each group size.
    groups : GroupPartition or sequence of sequence of int
        Column groups.

    Returns
    -------
    x : ndarray
        Data thresholded group-wise.
    """
    y = jnp.asarray(y, dtype=jnp.float64)
    if not isinstance(groups, GroupPartition):
        groups = GroupPartition(groups, y.shape[0])
    elif groups.n_features != y.shape[0]:
        raise ValueError(
            f"Input of length {y.shape[0]} does not match a partition of "
            f"{groups.n_features} columns."
        )

    return _group_soft_threshold_jit(y, thr, groups.segments, groups.sizes)
