#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""pyGMC setup script"""
import os.path as op

from setuptools import find_packages, setup


def _get_about():
    about = {}
    with open(op.join(op.dirname(op.abspath(__file__)), "pyGMC", "__about__.py")) as f:
        exec(f.read(), about)
    return about


if __name__ == "__main__":
    about = _get_about()
    setup(
        name=about["__packagename__"],
        version=about["__version__"],
        description=about["__description__"],
        license="LGPL-2.1",
        python_requires=">=3.10",
        packages=find_packages(exclude=["pyGMC.tests"]),
        install_requires=[
            "dask",
            "jax",
            "numpy>=1.24",
            "pylops>=2.0",
            "pyproximal",
            "scipy>=1.9",
        ],
        extras_require={
            "tests": [
                "pytest",
                "pytest-cov",
            ],
        },
        zip_safe=False,
    )
