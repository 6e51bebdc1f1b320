#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from setuptools import setup, find_packages

setup(
    name="gradle_helper",
    version="1.0.0",
    description="Validation of Flutter Android application build configurations",
    packages=find_packages(include=["gradle_helper", "gradle_helper.*"]),
    python_requires=">=3.11",
    install_requires=[
        "loguru>=0.7.0",
        "pydantic>=2.0",
        "pyparsing>=3.0.9",
        "PyYAML>=6.0",
        "rich>=13.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gradle-helper=gradle_helper.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Build Tools",
    ],
)
