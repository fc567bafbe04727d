"""Byte-addressed machine memory and the in-memory encoding of commands."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterator, Optional

from .errors import MemoryAccessError

COMMAND_SIZE = 8
MAX_ADDRESS = 0xFFFF

# address:int16, command:int8, one padding byte, arg0:int16, arg1:int16
_COMMAND_LAYOUT = struct.Struct("<hbxhh")

ErrorCallback = Callable[[str], None]


class Opcode(IntEnum):
    """Operations understood by the machine."""

    ADD = 0
    SUB = 1
    GOTO = 2
    IF = 3
    EXT = 4
    EXIT = 5


class ExtCode(IntEnum):
    """Operation codes handled by the built-in extensions."""

    IO_PRINT = 100
    IO_PRINTLN = 101
    IO_GETLINE = 102

    RUNTIME_INFO_NAME = 200

    EXTMATH_INT16_ADD = 300
    EXTMATH_INT16_SUB = 301
    EXTMATH_INT32_ADD = 302
    EXTMATH_INT32_SUB = 303
    EXTMATH_INT64_ADD = 304
    EXTMATH_INT64_SUB = 305


def _to_signed(value: int, bits: int, name: str) -> int:
    """Accept a signed or unsigned value of the given width and return it signed."""
    value = int(value)
    span = 1 << bits
    if not -(span >> 1) <= value < span:
        raise ValueError(f"{name} {value} does not fit in {bits} bits")
    return value - span if value >= span >> 1 else value


@dataclass(frozen=True)
class Command:
    """One machine command as stored in eight bytes of memory."""

    address: int
    command: int
    arg0: int = 0
    arg1: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "Command":
        """Decode a command from the first eight bytes of ``data``."""
        if len(data) < COMMAND_SIZE:
            raise ValueError(f"a command needs {COMMAND_SIZE} bytes, got {len(data)}")
        address, command, arg0, arg1 = _COMMAND_LAYOUT.unpack_from(bytes(data[:COMMAND_SIZE]))
        return cls(address, command, arg0, arg1)

    def to_bytes(self) -> bytes:
        """Encode the command into its eight-byte memory form."""
        return _COMMAND_LAYOUT.pack(
            _to_signed(self.address, 16, "address"),
            _to_signed(self.command, 8, "command"),
            _to_signed(self.arg0, 16, "arg0"),
            _to_signed(self.arg1, 16, "arg1"),
        )


class StaticMemory:
    """A fixed-size block of byte cells, all zero when created."""

    def __init__(self, size: int, error_callback: Optional[ErrorCallback] = None) -> None:
        if not 0 <= size <= MAX_ADDRESS:
            raise ValueError(f"memory size must be between 0 and {MAX_ADDRESS}, got {size}")
        self._cells = bytearray(size)
        self._error_callback = error_callback

    def _fail(self, message: str = "invalid memory address") -> None:
        if self._error_callback is not None:
            self._error_callback(message)
        raise MemoryAccessError(message)

    def _check(self, addr: int) -> None:
        if not 0 <= addr < len(self._cells):
            self._fail()

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[int]:
        return iter(bytes(self._cells))

    def __bytes__(self) -> bytes:
        return bytes(self._cells)

    def __getitem__(self, addr: int) -> int:
        self._check(addr)
        return self._cells[addr]

    def __setitem__(self, addr: int, value: int) -> None:
        self._check(addr)
        self._cells[addr] = value & 0xFF

    def read(self, addr: int, count: int) -> bytes:
        """Return ``count`` bytes starting at ``addr``."""
        if count < 0:
            raise ValueError("count must not be negative")
        if count:
            self._check(addr)
            self._check(addr + count - 1)
        return bytes(self._cells[addr:addr + count])

    def write(self, addr: int, data: bytes) -> None:
        """Store ``data`` starting at ``addr``."""
        data = bytes(data)
        if data:
            self._check(addr)
            self._check(addr + len(data) - 1)
        self._cells[addr:addr + len(data)] = data

    def end(self) -> int:
        """Return the first address past the end of memory."""
        return len(self._cells)


def get_command(mem: StaticMemory, addr: int) -> Command:
    """Decode the command stored at ``addr``."""
    return Command.from_bytes(mem.read(addr, COMMAND_SIZE))