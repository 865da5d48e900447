"""setuptools setup for WorkSession.

Install for development:
    pip install -e ".[test]"
    worksession
"""

from setuptools import setup, find_packages

setup(
    name="WorkSession",
    version="0.1.0",
    description="Alternating work/rest countdown timer with a persistent status button",
    packages=find_packages(include=["worksession", "worksession.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.4",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["worksession=worksession.__main__:main"],
    },
)
