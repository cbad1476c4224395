# emacs: -*- mode: python; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
"""Base module variables."""

__version__ = "0.1.0"
__packagename__ = "pyGMC"
__copyright__ = "Copyright 2026, The pyGMC developers"
__credits__ = ["The pyGMC developers"]
__description__ = (
    "Sparse-regularized least squares with the generalized minimax-concave (GMC) penalty."
)
