[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qtracetools"
version = "0.1.0"
description = "Readers, dumpers and converters for ChampSim-style instruction traces, an ELF64 header inspector and plugin argument parsing"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "champsim",
    "trace",
    "simulation",
    "elf",
    "emulator",
    "plugin-arguments",
]
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
    "Topic :: System :: Emulators",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
qtrace-dump = "qtracetools.dump:main"
qtrace-convert = "qtracetools.convert:main"
qtrace-elfinfo = "qtracetools.elfinfo:main"

[tool.hatch.build.targets.wheel]
packages = ["qtracetools"]

[tool.hatch.build.targets.sdist]
include = ["qtracetools", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
