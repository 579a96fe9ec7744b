#!/usr/bin/env python3
"""
Packaging for the ImageDisk reader.

Install with pip install -e . (add [test] for the test tools).
"""

from setuptools import setup, find_packages

setup(
    name="imagedisk-reader",
    version="1.0.0",
    description="Decoder for ImageDisk (.IMD) floppy disk images",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.5.0",
        "rich>=13.7.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "test": ["pytest>=7.4.0"],
    },
    entry_points={
        "console_scripts": [
            "imd-info=imagedisk.main:main",
        ],
    },
)
