[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyvm"
version = "1.0.0"
description = "A tiny byte-addressed virtual machine with a bytecode format, interpreter and disassembler"
requires-python = ">=3.10"
keywords = ["virtual machine", "bytecode", "interpreter", "disassembler"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Interpreters",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tvmi = "tinyvm.interpreter:main"
tvm-dis = "tinyvm.disasm:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyvm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
