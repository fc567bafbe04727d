"""Reading and writing bytecode files: a header followed by a memory image."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from .errors import BytecodeEndError, TooManyExtensionsError
from .memory import StaticMemory

BYTECODE_VERSION = 2
MAX_EXT_COUNT = 1024
MAX_EXT_NAME = 64

# version:uint8, data_size:uint16, program_start_addr:uint16, ext_count:uint16
_HEADER_FIELDS = struct.Struct("<BHHH")


@dataclass
class BytecodeHeader:
    """Metadata stored at the start of a bytecode file."""

    version: int = BYTECODE_VERSION
    data_size: int = 0
    program_start_addr: int = 0
    exts: list[str] = field(default_factory=list)

    @property
    def ext_count(self) -> int:
        return len(self.exts)


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise BytecodeEndError("unexpected end of bytecode")
    return data


def _encode_ext_name(name: str) -> bytes:
    data = name.encode("utf-8")
    if len(data) >= MAX_EXT_NAME:
        raise ValueError(f"extension name {name!r} is longer than {MAX_EXT_NAME - 1} bytes")
    return data.ljust(MAX_EXT_NAME, b"\0")


def _decode_ext_name(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def load_bytecode(stream: BinaryIO, mem: StaticMemory) -> BytecodeHeader:
    """Read a header from ``stream`` and load the program image into ``mem``."""
    version, data_size, start, ext_count = _HEADER_FIELDS.unpack(
        _read_exact(stream, _HEADER_FIELDS.size)
    )
    if ext_count > MAX_EXT_COUNT:
        raise TooManyExtensionsError(f"bytecode requires {ext_count} extensions")
    exts = [_decode_ext_name(_read_exact(stream, MAX_EXT_NAME)) for _ in range(ext_count)]
    mem.write(0, _read_exact(stream, data_size))
    return BytecodeHeader(
        version=version,
        data_size=data_size,
        program_start_addr=start,
        exts=exts,
    )


def write_bytecode(stream: BinaryIO, header: BytecodeHeader, mem: StaticMemory) -> None:
    """Write ``header`` and the first ``header.data_size`` bytes of ``mem``."""
    if header.ext_count > MAX_EXT_COUNT:
        raise TooManyExtensionsError(f"header lists {header.ext_count} extensions")
    try:
        head = _HEADER_FIELDS.pack(
            header.version, header.data_size, header.program_start_addr, header.ext_count
        )
    except struct.error as exc:
        raise ValueError(f"header field out of range: {exc}") from exc
    names = b"".join(_encode_ext_name(name) for name in header.exts)
    image = mem.read(0, header.data_size)
    stream.write(head + names + image)