"""The command interpreter and its extensions."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Callable, Optional, TextIO

from .bytecode import MAX_EXT_COUNT
from .errors import (
    InvalidCommandError,
    InvalidExtensionError,
    TooManyExtensionsError,
    UnsupportedExtensionError,
)
from .memory import COMMAND_SIZE, MAX_ADDRESS, Command, ExtCode, Opcode, StaticMemory, get_command

PACKAGE_STRING = "tvm 1.0"

# An extension returns True when it handled the command, False to pass it on.
ExtensionCallback = Callable[[Command, StaticMemory], bool]

_EXTMATH = {
    ExtCode.EXTMATH_INT16_ADD: (2, 1),
    ExtCode.EXTMATH_INT16_SUB: (2, -1),
    ExtCode.EXTMATH_INT32_ADD: (4, 1),
    ExtCode.EXTMATH_INT32_SUB: (4, -1),
    ExtCode.EXTMATH_INT64_ADD: (8, 1),
    ExtCode.EXTMATH_INT64_SUB: (8, -1),
}


class LoadResult(Enum):
    """How an extension was made available."""

    OK = "ok"
    BUILTIN = "builtin"


def _read_cstring(mem: StaticMemory, addr: int) -> str:
    data = bytearray()
    while (cell := mem[addr]) != 0:
        data.append(cell)
        addr += 1
    return data.decode("utf-8", errors="replace")


class Machine:
    """Executes commands held in memory, with a set of loaded extensions."""

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        package_string: str = PACKAGE_STRING,
    ) -> None:
        self._stdin = stdin
        self._stdout = stdout
        self.package_string = package_string
        self._extensions: list[ExtensionCallback] = []

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def _ensure_room(self) -> None:
        if len(self._extensions) >= MAX_EXT_COUNT:
            raise TooManyExtensionsError(f"at most {MAX_EXT_COUNT} extensions can be loaded")

    def load_ext(self, name: str) -> LoadResult:
        """Load a built-in extension by name."""
        self._ensure_room()
        builtins = {
            "ext_io": self._io_ext,
            "ext_runtime_info": self._runtime_info_ext,
            "ext_extmath": self._extmath_ext,
        }
        extension = builtins.get(name)
        if extension is None:
            raise UnsupportedExtensionError(f"unsupported extension: {name}")
        self._extensions.append(extension)
        return LoadResult.BUILTIN

    def load_custom_ext(self, callback: ExtensionCallback) -> LoadResult:
        """Add a caller-supplied extension after those already loaded."""
        self._ensure_room()
        self._extensions.append(callback)
        return LoadResult.OK

    def execute(self, mem: StaticMemory, start_address: int = 0) -> None:
        """Run commands from ``start_address`` until EXIT or the end of memory."""
        address = start_address & MAX_ADDRESS
        while address < mem.end():
            command = get_command(mem, address)
            try:
                opcode = Opcode(command.command)
            except ValueError:
                raise InvalidCommandError(
                    f"invalid command {command.command} at address {address}"
                ) from None
            target = command.address & MAX_ADDRESS

            if opcode is Opcode.ADD:
                mem[target] = mem[target] + command.arg0
            elif opcode is Opcode.SUB:
                mem[target] = mem[target] - command.arg0
            elif opcode is Opcode.GOTO:
                address = (command.address - COMMAND_SIZE) & MAX_ADDRESS
            elif opcode is Opcode.IF:
                # The condition tests the cell's location, which always exists,
                # so the cell is only checked and execution carries on.
                mem.read(target, 1)
            elif opcode is Opcode.EXIT:
                return
            elif opcode is Opcode.EXT:
                self._run_extension(command, mem)

            address = (address + COMMAND_SIZE) & MAX_ADDRESS

    def _run_extension(self, command: Command, mem: StaticMemory) -> None:
        for extension in self._extensions:
            if extension(command, mem):
                return
        raise InvalidExtensionError(f"no extension handles code {command.arg0}")

    def _io_ext(self, command: Command, mem: StaticMemory) -> bool:
        target = command.address & MAX_ADDRESS
        if command.arg0 == ExtCode.IO_PRINT:
            self.stdout.write(_read_cstring(mem, target))
        elif command.arg0 == ExtCode.IO_PRINTLN:
            self.stdout.write(_read_cstring(mem, target) + "\n")
        elif command.arg0 == ExtCode.IO_GETLINE:
            self._getline(mem, target, command.arg1)
        else:
            return False
        return True

    def _getline(self, mem: StaticMemory, target: int, limit: int) -> None:
        if limit <= 0:
            return
        if limit == 1:
            mem.write(target, b"\0")
            return
        line = self.stdin.readline(limit - 1)
        if not line:
            return
        mem.write(target, line.encode("utf-8")[: limit - 1] + b"\0")

    def _runtime_info_ext(self, command: Command, mem: StaticMemory) -> bool:
        if command.arg0 != ExtCode.RUNTIME_INFO_NAME:
            return False
        mem.write(command.address & MAX_ADDRESS, self.package_string.encode("utf-8") + b"\0")
        return True

    def _extmath_ext(self, command: Command, mem: StaticMemory) -> bool:
        spec = _EXTMATH.get(command.arg0)
        if spec is None:
            return False
        width, sign = spec
        target = command.address & MAX_ADDRESS
        value = int.from_bytes(mem.read(target, width), "little") + sign * command.arg1
        mem.write(target, (value % (1 << (8 * width))).to_bytes(width, "little"))
        return True