"""Turn a bytecode file back into assembler text."""

from __future__ import annotations

import getopt
import sys
from typing import Optional, Sequence

from .bytecode import BYTECODE_VERSION, BytecodeHeader, load_bytecode
from .errors import BytecodeEndError, MemoryAccessError, TooManyExtensionsError, TvmError
from .memory import StaticMemory

PROGRAM_NAME = "tvm-dis"
DISASSEMBLY_MEMORY_SIZE = 4096

USAGE_SMALL = "tvm-dis [-h] input output\n"
USAGE = USAGE_SMALL + "\t-h\tprint usage\n"


def _warn(message: str) -> None:
    sys.stderr.write(f"{PROGRAM_NAME}: {message}\n")


def _load(path: str, mem: StaticMemory) -> BytecodeHeader:
    with open(path, "rb") as stream:
        header = load_bytecode(stream, mem)
    if header.version != BYTECODE_VERSION:
        raise TvmError("incompatible bytecode version")
    return header


def disassemble(input_path: str, output_path: str) -> None:
    """Read the bytecode at ``input_path`` and write its assembler form to ``output_path``."""
    mem = StaticMemory(DISASSEMBLY_MEMORY_SIZE)
    header = _load(input_path, mem)

    lines = [f"@require {name}" for name in header.exts]
    lines.append(f"@start #{header.program_start_addr}")
    lines.extend(f".byte {cell}" for cell in mem.read(0, header.data_size))

    with open(output_path, "w", encoding="utf-8", newline="\n") as out:
        out.write("".join(f"{line}\n" for line in lines))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)

    try:
        options, operands = getopt.gnu_getopt(args, "h")
    except getopt.GetoptError as exc:
        _warn(f"invalid flag {exc.opt}")
        sys.stderr.write(USAGE_SMALL)
        return 1

    if any(flag == "-h" for flag, _ in options):
        sys.stdout.write(USAGE)
        return 0

    if not operands:
        _warn("bytecode file unspecified")
        sys.stderr.write(USAGE)
        return 1
    if len(operands) < 2:
        _warn("assembler file unspecified")
        sys.stderr.write(USAGE)
        return 1

    bytecode_file, assembler_file = operands[0], operands[1]
    try:
        disassemble(bytecode_file, assembler_file)
    except OSError as exc:
        _warn(f"can't open {exc.filename}: {exc.strerror}")
        return 1
    except (BytecodeEndError, TooManyExtensionsError):
        _warn("can't load bytecode file")
        return 1
    except MemoryAccessError as exc:
        _warn(f"tvm static memory error: {exc}")
        return 1
    except TvmError as exc:
        _warn(str(exc))
        return 1
    return 0