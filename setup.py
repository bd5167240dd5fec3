"""setuptools packaging for SmartRest.

Install for development:
    pip install -e ".[test]"
"""

from setuptools import setup, find_packages

setup(
    name="smartrest",
    version="0.1.0",
    description="Adaptive rest timer: suggestions, countdown and rest analytics",
    packages=find_packages(include=["smartrest", "smartrest.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["smartrest=smartrest.__main__:main"],
    },
)
