[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nbalab"
version = "1.0.0"
description = "Data loading, odds handling and walk-forward backtesting tools for NBA betting models"
requires-python = ">=3.10"
dependencies = []
keywords = ["nba", "backtesting", "sports-betting", "walk-forward", "player-props"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nbalab = "nbalab.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["nbalab"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
