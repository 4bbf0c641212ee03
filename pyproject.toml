[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apbscope"
version = "0.1.0"
description = "Analyze APB bus traffic in VCD waveform dumps and report transaction statistics and wiring faults"
requires-python = ">=3.10"
dependencies = []
keywords = ["apb", "amba", "vcd", "waveform", "bus", "verification", "eda"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
apbscope = "apbscope.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["apbscope"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
