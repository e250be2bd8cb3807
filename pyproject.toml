[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "liveplotter"
version = "0.1.0"
description = "Serial-port live plotter and power-card monitor for a 921600-baud acquisition board"
requires-python = ">=3.10"
keywords = ["serial", "plotting", "live-plot", "power-monitor", "data-acquisition"]
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
    "Topic :: Scientific/Engineering :: Visualization",
]
dependencies = [
    "pyserial>=3.5",
    "matplotlib>=3.5",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
liveplotter = "liveplotter.app:main"

[tool.hatch.build.targets.wheel]
packages = ["liveplotter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
