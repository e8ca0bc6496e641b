"""Reading and reporting the section and program headers of ELF64 files."""

from __future__ import annotations

import argparse
import struct
import sys
from dataclasses import dataclass, field
from typing import Optional, Sequence

__all__ = [
    "ElfFormatError",
    "SectionHeader",
    "ProgramHeader",
    "ElfInfo",
    "section_flag_letters",
    "section_type_name",
    "segment_type_name",
    "is_elf",
    "parse_elf",
    "format_section_table",
    "format_program_table",
    "format_elf_report",
    "main",
]

ELF_MAGIC = b"\x7fELF"

SHF_WRITE = 0x1
SHF_ALLOC = 0x2
SHF_EXECINSTR = 0x4

PF_X = 0x1
PF_W = 0x2
PF_R = 0x4

_EHDR = struct.Struct("<16sHHIQQQIHHHHHH")
_SHDR = struct.Struct("<IIQQQQIIQQ")
_PHDR = struct.Struct("<IIQQQQQQ")

_FLAG_LETTERS = ((SHF_WRITE, "W"), (SHF_ALLOC, "A"), (SHF_EXECINSTR, "X"))

_SECTION_TYPES = {
    0: "NULL",
    1: "PROGBITS",
    2: "SYMTAB",
    3: "STRTAB",
    4: "RELA",
    5: "HASH",
    6: "DYNAMIC",
    7: "NOTE",
    8: "NOBITS",
    9: "REL",
    10: "SHLIB",
    11: "DYNSYM",
    14: "INIT_ARRAY",
    15: "FINI_ARRAY",
    16: "PREINIT_ARRAY",
    17: "GROUP",
    18: "SYMTAB SECTION INDICES",
    0x6FFFFFF0: "VERSYM",
    0x6FFFFFFC: "VERDEF",
    0x7FFFFFFD: "AUXILIARY",
    0x7FFFFFFF: "FILTER",
}

_SEGMENT_TYPES = {
    0: "NULL",
    1: "LOAD",
    2: "DYNAMIC",
    3: "INTERP",
    4: "NOTE",
    5: "SHLIB",
    6: "PHDR",
    7: "TLS",
    0x6474E553: "GNU_PROPERTY",
}

_SECTION_COLUMNS = (
    "  [Nr] Name              Type            Address          Off    Size   ES Flg Lk Inf Al"
)
_PROGRAM_COLUMNS = (
    "Type           Offset   VirtAddr           PhysAddr           FileSiz  MemSiz   Flg Align"
)


class ElfFormatError(ValueError):
    """Raised when data is not a readable ELF64 image."""


def section_flag_letters(flags: int) -> str:
    """Return the W/A/X letters for a section's flags.

    The letters stop at the first set flag that has no letter.
    """
    letters = []
    for bit in range(16):
        mask = 1 << bit
        if not flags & mask:
            continue
        letter = dict(_FLAG_LETTERS).get(mask)
        if letter is None:
            break
        letters.append(letter)
    return "".join(letters)


def section_type_name(sh_type: int) -> str:
    """Return the display name of a section type, ``"UNKNOWN"`` if unknown."""
    return _SECTION_TYPES.get(sh_type & 0xFFFFFFFF, "UNKNOWN")


def segment_type_name(p_type: int) -> str:
    """Return the display name of a segment type, ``"UNKNOWN"`` if unknown."""
    return _SEGMENT_TYPES.get(p_type, "UNKNOWN")


def is_elf(data: bytes) -> bool:
    """Whether ``data`` starts with the ELF magic number."""
    return data[:4] == ELF_MAGIC


@dataclass(frozen=True)
class SectionHeader:
    """One entry of the section header table."""

    name: int
    sh_type: int
    flags: int
    addr: int
    offset: int
    size: int
    link: int
    info: int
    addralign: int
    entsize: int

    @property
    def is_executable(self) -> bool:
        return bool(self.flags & SHF_EXECINSTR)


@dataclass(frozen=True)
class ProgramHeader:
    """One entry of the program header table."""

    p_type: int
    flags: int
    offset: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    align: int


@dataclass(frozen=True)
class ElfInfo:
    """The header fields of an ELF64 file that the report shows."""

    entry: int
    shoff: int
    phoff: int
    sections: list[SectionHeader] = field(default_factory=list)
    segments: list[ProgramHeader] = field(default_factory=list)

    def exec_sections(self) -> list[SectionHeader]:
        """Sections that hold executable instructions, in table order."""
        return [sh for sh in self.sections if sh.is_executable]


def _table(data: bytes, offset: int, count: int, packer: struct.Struct, what: str):
    end = offset + count * packer.size
    if count and end > len(data):
        raise ElfFormatError(
            f"{what} table at offset {offset:#x} runs past the end of the file"
        )
    return [packer.unpack_from(data, offset + i * packer.size) for i in range(count)]


def parse_elf(data: bytes) -> ElfInfo:
    """Read the ELF header and its section and program header tables."""
    if not is_elf(data):
        raise ElfFormatError("not an ELF file")
    if len(data) < _EHDR.size:
        raise ElfFormatError("file too short for an ELF header")
    (
        _ident, _type, _machine, _version, entry, phoff, shoff,
        _flags, _ehsize, _phentsize, phnum, _shentsize, shnum, _shstrndx,
    ) = _EHDR.unpack_from(data)
    sections = [
        SectionHeader(*values)
        for values in _table(data, shoff, shnum, _SHDR, "section header")
    ]
    segments = [
        ProgramHeader(*values)
        for values in _table(data, phoff, phnum, _PHDR, "program header")
    ]
    return ElfInfo(entry=entry, shoff=shoff, phoff=phoff,
                   sections=sections, segments=segments)


def format_section_table(info: ElfInfo) -> str:
    """Render the section header table."""
    lines = [
        "There are %d section headers, starting at offset 0x%x"
        % (len(info.sections), info.shoff),
        "",
        "Section Headers:",
        _SECTION_COLUMNS,
    ]
    for index, sh in enumerate(info.sections):
        lines.append(
            "  [%2d] %-15s   %-15s %016x %06x %06x 0x%x %s %x %x %x"
            % (
                index, "NAME", section_type_name(sh.sh_type), sh.addr,
                sh.offset, sh.size, sh.entsize, section_flag_letters(sh.flags),
                sh.link, sh.info, sh.addralign,
            )
        )
    return "\n".join(lines) + "\n"


def format_program_table(info: ElfInfo) -> str:
    """Render the program header table."""
    lines = [
        "There are %d program headers, starting at offset %d"
        % (len(info.segments), info.phoff),
        "",
        "Program Headers:",
        _PROGRAM_COLUMNS,
    ]
    for ph in info.segments:
        lines.append(
            "%-15s0x%06x 0x%016x 0x%016x 0x%06x 0x%06x %s%s%s 0x%x"
            % (
                segment_type_name(ph.p_type), ph.offset, ph.vaddr, ph.paddr,
                ph.filesz, ph.memsz,
                "R" if ph.flags & PF_R else " ",
                "W" if ph.flags & PF_W else " ",
                "E" if ph.flags & PF_X else " ",
                ph.align,
            )
        )
    return "\n".join(lines) + "\n"


def format_elf_report(info: ElfInfo, file_size: int) -> str:
    """Render the whole header report for a file of ``file_size`` bytes."""
    return (
        f"Elf File Size {file_size}\n"
        f"Entry point {info.entry:x}\n"
        + format_section_table(info)
        + "\n\n\n"
        + format_program_table(info)
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print the header report of an ELF file; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="objdump",
        usage="objdump -d filename",
        description="Show the section and program headers of an ELF64 file.",
    )
    parser.add_argument("-d", dest="option_file", metavar="filename")
    parser.add_argument("filename", nargs="?")
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    filename = args.option_file or args.filename
    if filename is None:
        parser.print_usage(sys.stdout)
        return 0
    try:
        with open(filename, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        print(f"can not open {filename}, error:{exc.strerror}", file=sys.stderr)
        return 1
    try:
        info = parse_elf(data)
    except ElfFormatError as exc:
        print(f"{filename}: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write(format_elf_report(info, len(data)))
    return 0


if __name__ == "__main__":
    sys.exit(main())