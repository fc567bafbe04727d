import io

import pytest

from tinyvm.bytecode import MAX_EXT_COUNT, load_bytecode
from tinyvm.errors import (
    BytecodeEndError,
    InvalidCommandError,
    InvalidExtensionError,
    MemoryAccessError,
    TooManyExtensionsError,
    TvmError,
    UnsupportedExtensionError,
)
from tinyvm.memory import Command, ExtCode, Opcode, StaticMemory
from tinyvm.vm import Machine


def _memory_with(command):
    mem = StaticMemory(32)
    mem.write(0, command.to_bytes())
    return mem


def test_memory_access_error_is_tvm_error():
    messages = []
    mem = StaticMemory(4, messages.append)
    with pytest.raises(TvmError) as info:
        mem.read(4, 1)
    assert info.type is MemoryAccessError
    assert str(info.value) == "invalid memory address"
    assert messages == ["invalid memory address"]
    assert bytes(mem) == bytes(4)


def test_bytecode_end_error_is_tvm_error():
    with pytest.raises(TvmError) as info:
        load_bytecode(io.BytesIO(b""), StaticMemory(8))
    assert info.type is BytecodeEndError


def test_unsupported_extension_error_is_tvm_error():
    machine = Machine()
    with pytest.raises(TvmError) as info:
        machine.load_ext("ext_missing")
    assert info.type is UnsupportedExtensionError


def test_invalid_command_error_is_tvm_error():
    mem = _memory_with(Command(0, 42))
    with pytest.raises(TvmError) as info:
        Machine().execute(mem)
    assert info.type is InvalidCommandError


def test_invalid_extension_error_is_tvm_error():
    mem = _memory_with(Command(0, Opcode.EXT, ExtCode.IO_PRINT))
    with pytest.raises(TvmError) as info:
        Machine().execute(mem)
    assert info.type is InvalidExtensionError


def test_too_many_extensions_error_is_tvm_error():
    machine = Machine()
    for _ in range(MAX_EXT_COUNT):
        machine.load_ext("ext_io")
    with pytest.raises(TvmError) as info:
        machine.load_ext("ext_io")
    assert info.type is TooManyExtensionsError


def test_memory_error_is_index_error():
    with pytest.raises(IndexError) as info:
        StaticMemory(4)[9]
    assert str(info.value) == "invalid memory address"


def test_unsupported_extension_names_it():
    with pytest.raises(UnsupportedExtensionError) as info:
        Machine().load_ext("ext_missing")
    assert "ext_missing" in str(info.value)