#!/usr/bin/env python
# -*- encoding: utf-8 -*-

"""Setup Module for vabridge, the virtual account and notification dispatcher"""

import io
import re
from os.path import dirname, join

from setuptools import find_packages, setup


def read(*names, **kwargs):
    """Helper method to read files"""
    return io.open(
        join(dirname(__file__), *names),
        encoding=kwargs.get("encoding", "utf8"),
    ).read()


redis_requires = ["redis>=4.5.0"]

install_requires = [
    "marshmallow>=3.15.0",
    "rich>=13.0.0",
    "typer>=0.9.0",
    "typing-extensions>=4.0.0",
]

testing_requires = redis_requires + [
    "mock==5.1.0",
    "pytest-cov>=4.1.0",
    "pytest-mock==3.12.0",
    "pytest>=7.4.3",
]

dev_requires = testing_requires + [
    "black>=23.11.0",
    "coverage>=7.3.2",
    "isort>=5.12.0",
    "nox>=2023.4.22",
]

setup(
    name="vabridge",
    version="0.1.0",
    license="BSD 3-Clause License",
    description="Virtual account lifecycle and billing notification dispatcher",
    long_description="%s\n%s"
    % (
        read("README.rst"),
        re.sub(":[a-z]+:`~?(.*?)`", r"``\1``", read("CHANGELOG.rst")),
    ),
    long_description_content_type="text/x-rst",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Office/Business :: Financial",
    ],
    keywords=["virtual account", "billing", "payments", "redis streams"],
    install_requires=install_requires,
    extras_require={
        "redis": redis_requires,
        "test": testing_requires,
        "tests": testing_requires,
        "testing": testing_requires,
        "dev": dev_requires,
        "all": dev_requires,
    },
    entry_points={"console_scripts": ["vabridge = vabridge.cli:app"]},
)
