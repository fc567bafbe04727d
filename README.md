# tinyvm

A tiny virtual machine with its own bytecode format. Memory is a flat array of
bytes, and programs are made of 8-byte commands (`ADD`, `SUB`, `GOTO`, `IF`,
`EXT`, `EXIT`). Built-in extensions add console I/O (`ext_io`), runtime
information (`ext_runtime_info`) and wide-integer arithmetic (`ext_extmath`).

## Installing

```
pip install .
```

To run the tests, install the `test` extra and then run `pytest`:

```
pip install ".[test]"
pytest
```

## Command-line tools

Run a bytecode file:

```
tvmi program.tvm
tvmi -m 8192 program.tvm      # set program memory size (default 4096)
```

For every extension the file requires, `tvmi` prints `loading <name>...` and
then `builtin ok`, and then runs the program from its start address. On an
error it prints a message to standard error and exits with status 1.

Turn a bytecode file into an assembler listing:

```
tvm-dis program.tvm program.s
```

The listing gives each required extension as `@require <name>`, then the start
address as `@start #<addr>`, and then each data byte as `.byte <value>`.
The disassembler loads into 4096 bytes of memory.

Both tools accept `-h` for usage.

## The machine

- `tinyvm.memory.StaticMemory(size, error_callback=None)` is a zeroed block of
  byte cells. Indexing, `read(addr, count)` and `write(addr, data)` check
  addresses and raise `MemoryAccessError` (after calling `error_callback`, if
  one was given) when an address is out of range. Values stored with `[]` are
  truncated to a byte.
- `tinyvm.memory.Command(address, command, arg0=0, arg1=0)` is one command;
  `to_bytes()` and `Command.from_bytes(data)` convert it to and from its 8-byte
  little-endian form (int16 address, int8 opcode, one pad byte, int16 `arg0`,
  int16 `arg1`). `get_command(mem, addr)` decodes the command at an address.
- `tinyvm.memory.Opcode` and `tinyvm.memory.ExtCode` list the opcodes and the
  built-in extension codes.
- `tinyvm.vm.Machine(stdin=None, stdout=None, package_string="tvm 1.0")` runs
  programs. `execute(mem, start_address=0)` steps through memory 8 bytes at a
  time until `EXIT` or the end of memory:
  - `ADD` / `SUB` add or subtract `arg0` at the byte at `address`;
  - `GOTO` continues at `address`;
  - `IF` checks that `address` is valid and always carries on;
  - `EXT` passes the command to the loaded extensions in the order they were
    loaded; the first that handles it wins, otherwise `InvalidExtensionError`;
  - any other opcode raises `InvalidCommandError`.
- `Machine.load_ext(name)` loads a built-in extension and returns
  `LoadResult.BUILTIN`; an unknown name raises `UnsupportedExtensionError`.
  `Machine.load_custom_ext(callback)` adds a callable `callback(command, mem)`
  that returns `True` when it handled the command, and returns `LoadResult.OK`.
  At most 1024 extensions can be loaded (`TooManyExtensionsError`).

Built-in extension codes (`arg0` of an `EXT` command):

- `ext_io`: `IO_PRINT` / `IO_PRINTLN` write the NUL-terminated string at
  `address` (the latter adds a newline); `IO_GETLINE` reads a line of at most
  `arg1 - 1` characters into `address`, NUL-terminated.
- `ext_runtime_info`: `RUNTIME_INFO_NAME` writes the machine's package string,
  NUL-terminated, at `address`.
- `ext_extmath`: `EXTMATH_INT16/32/64_ADD/SUB` add or subtract `arg1` at the
  little-endian unsigned integer of that width at `address`, wrapping around.

## Bytecode files

`tinyvm.bytecode.write_bytecode(stream, header, mem)` writes a
`BytecodeHeader` and the first `header.data_size` bytes of memory;
`load_bytecode(stream, mem)` reads them back into memory starting at address 0
and returns the header. The header is little-endian: version (uint8, currently
2), data size, start address and extension count (uint16 each), followed by one
64-byte NUL-padded name per required extension. A stream that ends early
raises `BytecodeEndError`.

## Library use

```python
import io

from tinyvm.memory import StaticMemory, Command, Opcode
from tinyvm.bytecode import BytecodeHeader, load_bytecode, write_bytecode
from tinyvm.vm import Machine

mem = StaticMemory(4096)
mem.write(0, Command(address=100, command=Opcode.ADD, arg0=5).to_bytes())
mem.write(8, Command(address=0, command=Opcode.EXIT).to_bytes())

machine = Machine()
machine.execute(mem, 0)
assert mem[100] == 5

buf = io.BytesIO()
write_bytecode(buf, BytecodeHeader(data_size=16), mem)
buf.seek(0)
header = load_bytecode(buf, StaticMemory(4096))
assert header.data_size == 16
```

`tinyvm.interpreter.execute_file(path, memory_size=4096, machine=None)` does
what `tvmi` does and returns the memory as the program left it;
`tinyvm.disasm.disassemble(input_path, output_path)` does what `tvm-dis` does.

Errors are raised as subclasses of `tinyvm.errors.TvmError`:
`InvalidCommandError`, `InvalidExtensionError`, `UnsupportedExtensionError`,
`BytecodeEndError`, `TooManyExtensionsError` and `MemoryAccessError`.

## What it does not do

There is no assembler: the package cannot turn assembler text (such as the
listings `tvm-dis` writes) back into bytecode. Bytecode files are built with
`write_bytecode` from memory filled in through the library.