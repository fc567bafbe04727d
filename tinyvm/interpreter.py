"""Load a bytecode file and run it on the machine."""

from __future__ import annotations

import getopt
import sys
from typing import Optional, Sequence

from .bytecode import BYTECODE_VERSION, load_bytecode
from .errors import (
    BytecodeEndError,
    InvalidCommandError,
    InvalidExtensionError,
    MemoryAccessError,
    TooManyExtensionsError,
    TvmError,
    UnsupportedExtensionError,
)
from .memory import StaticMemory
from .vm import LoadResult, Machine

PROGRAM_NAME = "tvmi"
DEFAULT_MEMORY_SIZE = 4096

USAGE_SMALL = "tvmi [-h] [-m] file\n"
USAGE = USAGE_SMALL + "\t-h\tprint usage\n\t-m\tset program memory size (default 4096)\n"


class _LoadFailure(TvmError):
    """The bytecode file could not be read into memory."""


def _warn(message: str) -> None:
    sys.stderr.write(f"{PROGRAM_NAME}: {message}\n")


def execute_file(
    bytecode_path: str,
    memory_size: int = DEFAULT_MEMORY_SIZE,
    machine: Optional[Machine] = None,
) -> StaticMemory:
    """Load the bytecode at ``bytecode_path``, load its extensions and run it.

    Returns the memory as the program left it.
    """
    machine = machine if machine is not None else Machine()
    mem = StaticMemory(memory_size)

    with open(bytecode_path, "rb") as stream:
        try:
            header = load_bytecode(stream, mem)
        except (BytecodeEndError, TooManyExtensionsError) as exc:
            raise _LoadFailure("can't load bytecode file") from exc

    if header.version != BYTECODE_VERSION:
        raise TvmError("incompatible bytecode version")

    for name in header.exts:
        machine.stdout.write(f"loading {name}...")
        try:
            result = machine.load_ext(name)
        except (UnsupportedExtensionError, TooManyExtensionsError) as exc:
            raise UnsupportedExtensionError(f"can't load {name} extension") from exc
        if result is not LoadResult.BUILTIN:
            raise UnsupportedExtensionError(f"can't load {name} extension")
        machine.stdout.write("builtin ok\n")

    machine.execute(mem, header.program_start_addr)
    return mem


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)

    try:
        options, operands = getopt.gnu_getopt(args, "hm:")
    except getopt.GetoptError as exc:
        _warn(f"invalid flag {exc.opt}")
        sys.stderr.write(USAGE_SMALL)
        return 1

    memory_size = DEFAULT_MEMORY_SIZE
    for flag, value in options:
        if flag == "-h":
            sys.stdout.write(USAGE)
            return 0
        if flag == "-m":
            try:
                memory_size = int(value)
            except ValueError:
                _warn(f"invalid memory size {value}")
                sys.stderr.write(USAGE_SMALL)
                return 1

    if not operands:
        _warn("bytecode file unspecified")
        sys.stderr.write(USAGE)
        return 1

    try:
        execute_file(operands[0], memory_size)
    except OSError as exc:
        _warn(f"can't open bytecode file: {exc.strerror}")
        return 1
    except ValueError as exc:
        _warn(str(exc))
        return 1
    except InvalidCommandError:
        _warn("invalid command in bytecode")
        return 1
    except InvalidExtensionError:
        _warn("invalid extension in bytecode")
        return 1
    except MemoryAccessError as exc:
        _warn(f"tvm static memory error: {exc}")
        return 1
    except TvmError as exc:
        _warn(str(exc))
        return 1
    return 0