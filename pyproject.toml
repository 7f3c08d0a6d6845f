[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pdp"
version = "1.0.0"
description = "GDB/MI parsing and command processing library"
requires-python = ">=3.10"
dependencies = []
keywords = ["gdb", "mi", "debugger", "parser", "msgpack", "rpc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pdp = "pdp.gdb_driver:main"

[tool.hatch.build.targets.wheel]
packages = ["pdp"]

[tool.pytest.ini_options]
addopts = "-ra"
