"""Exceptions raised by the virtual machine, its memory and its loaders."""


class TvmError(Exception):
    """Base class for every error the machine reports."""


class InvalidCommandError(TvmError):
    """A command in memory carries an opcode the machine does not know."""


class InvalidExtensionError(TvmError):
    """No loaded extension handles an extension call."""


class UnsupportedExtensionError(TvmError):
    """An extension was requested by a name the machine does not provide."""


class BytecodeEndError(TvmError):
    """A bytecode stream ended before everything it announced was read."""


class TooManyExtensionsError(TvmError):
    """More extensions were requested than the machine can hold."""


class MemoryAccessError(TvmError, IndexError):
    """An address outside the machine's memory was used."""