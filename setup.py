"""
Setup file for DLMM simulator package
"""

from setuptools import setup, find_packages

setup(
    name="dlmm_simulator",
    version="0.1.0",
    packages=find_packages(),
    install_requires=[
        "numpy",
        "pandas",
        "pyyaml",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["dlmm-simulator=dlmm_simulator.main:main"],
    },
    python_requires=">=3.8",
    description="Bin-based concentrated liquidity (DLMM) position simulator",
    keywords="defi, dlmm, meteora, liquidity-provision, simulation",
)
