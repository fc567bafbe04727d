"""A tiny byte-addressed virtual machine: memory, bytecode files, interpreter and disassembler."""

__version__ = "1.0.0"

__all__ = ["errors", "memory", "bytecode", "vm", "disasm", "interpreter"]