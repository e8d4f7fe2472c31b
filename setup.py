#!/usr/bin/env python3
"""
Setup script for crbh
"""

from setuptools import setup, find_packages

setup(
    name="crbh",
    version="0.1.0",
    description="Conditional Reciprocal Best BLAST hits for ortholog detection",
    author="CRBH Team",
    author_email="example@example.org",
    packages=find_packages(include=["crbh", "crbh.*"]),
    install_requires=[
        "pyyaml>=6.0",
        "biopython>=1.79",
        "numpy>=1.22.0",
        "pandas>=1.4.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'crbh=crbh.cli.main:main',
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Programming Language :: Python :: 3",
    ],
    python_requires=">=3.8",
)
