#!/usr/bin/env python

from setuptools import setup


VERSION = "0.1a1"

setup(
    name="domesque",
    version=VERSION,
    packages=["domesque"],
    python_requires=">=3.10",
    install_requires=[
        "cssselect",
        "lxml",
        'typing_extensions; python_version < "3.11"',
    ],
    extras_require={"test": ["pytest"]},
)
