"""ELF64 file and program header records."""

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar, List

ELF_MAGIC = 0x464C457F  # "\x7FELF" read little-endian
ELF_PROG_LOAD = 1


class ProgFlag(enum.IntFlag):
    """Permission bits of a program header."""

    EXEC = 1
    WRITE = 2
    READ = 4


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a well-formed ELF header."""


@dataclass
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    elf: bytes = field(default=bytes(12))
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIQQQIHHHHHH")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def unpack(cls, data):
        """Parse a header from the start of ``data``; the magic must match."""
        if len(data) < cls.SIZE:
            raise ElfFormatError("truncated ELF header")
        header = cls(*cls._STRUCT.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError("bad ELF magic")
        return header

    def pack(self):
        """Serialise the header to little-endian bytes."""
        try:
            return self._STRUCT.pack(
                self.magic, bytes(self.elf), self.type, self.machine,
                self.version, self.entry, self.phoff, self.shoff, self.flags,
                self.ehsize, self.phentsize, self.phnum, self.shentsize,
                self.shnum, self.shstrndx,
            )
        except struct.error as exc:
            raise ElfFormatError(str(exc)) from exc


@dataclass
class ProgramHeader:
    """An ELF program (segment) header."""

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def unpack(cls, data):
        """Parse a program header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ElfFormatError("truncated program header")
        return cls(*cls._STRUCT.unpack_from(data))

    def pack(self):
        """Serialise the program header to little-endian bytes."""
        try:
            return self._STRUCT.pack(
                self.type, self.flags, self.off, self.vaddr, self.paddr,
                self.filesz, self.memsz, self.align,
            )
        except struct.error as exc:
            raise ElfFormatError(str(exc)) from exc

    @property
    def loadable(self):
        return self.type == ELF_PROG_LOAD


def read_program_headers(data) -> List[ProgramHeader]:
    """Parse the file header of ``data`` and return its program headers."""
    header = ElfHeader.unpack(data)
    size = ProgramHeader.SIZE
    start = header.phoff
    return [
        ProgramHeader.unpack(data[off:off + size])
        for off in range(start, start + header.phnum * size, size)
    ]