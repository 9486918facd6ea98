"""
Setup script for hots_cells.
"""

from setuptools import setup, find_packages

setup(
    name="hots_cells",
    version="0.1.0",
    description="Event remapping and super-cell aggregation for event-based vision",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    install_requires=[
        "numpy>=1.20.0",
        "torch>=1.9.0",
        "matplotlib>=3.4.0",
        "tqdm>=4.60.0",
    ],
    extras_require={
        "test": ["pytest>=6.0"],
    },
    entry_points={
        "console_scripts": [
            "hots-cells=hots_cells.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Recognition",
    ],
    python_requires=">=3.8",
)
