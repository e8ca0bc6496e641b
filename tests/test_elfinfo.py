import struct

import pytest

from qtracetools.elfinfo import (
    ElfFormatError,
    ElfInfo,
    ProgramHeader,
    SectionHeader,
    format_elf_report,
    format_program_table,
    format_section_table,
    is_elf,
    main,
    parse_elf,
    section_flag_letters,
    section_type_name,
    segment_type_name,
)

EHDR = struct.Struct("<16sHHIQQQIHHHHHH")
SHDR = struct.Struct("<IIQQQQIIQQ")
PHDR = struct.Struct("<IIQQQQQQ")


def _build_elf(entry, sections, segments):
    phoff = EHDR.size
    shoff = phoff + PHDR.size * len(segments)
    ident = b"\x7fELF" + bytes([2, 1, 1]) + bytes(9)
    header = EHDR.pack(ident, 2, 258, 1, entry, phoff, shoff, 0, EHDR.size,
                       PHDR.size, len(segments), SHDR.size, len(sections), 0)
    body = b"".join(PHDR.pack(*seg) for seg in segments)
    body += b"".join(SHDR.pack(*sec) for sec in sections)
    return header + body


SECTIONS = [
    (0, 0, 0, 0, 0, 0, 0, 0, 0, 0),
    (1, 1, 0x6, 0x120000000, 0x1000, 0x200, 0, 0, 16, 0),
    (7, 1, 0x3, 0x120004000, 0x2000, 0x80, 0, 0, 8, 0),
]
SEGMENTS = [
    (1, 0x5, 0, 0x120000000, 0x120000000, 0x2000, 0x2000, 0x4000),
    (0x6474E553, 0x4, 0x100, 0x100, 0x100, 0x20, 0x20, 8),
]


@pytest.fixture
def image():
    return _build_elf(0x120000100, SECTIONS, SEGMENTS)


@pytest.mark.parametrize(
    "flags,expected",
    [(0x6, "AX"), (0x7, "WAX"), (0x3, "WA"), (0x0, ""), (0x12, "A")],
)
def test_section_flag_letters(flags, expected):
    assert section_flag_letters(flags) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(1, "PROGBITS"), (8, "NOBITS"), (18, "SYMTAB SECTION INDICES"),
     (0x6FFFFFF0, "VERSYM"), (0x7FFFFFFF, "FILTER"), (12, "UNKNOWN")],
)
def test_section_type_name(value, expected):
    assert section_type_name(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(1, "LOAD"), (7, "TLS"), (0x6474E553, "GNU_PROPERTY"), (99, "UNKNOWN")],
)
def test_segment_type_name(value, expected):
    assert segment_type_name(value) == expected


def test_is_elf(image):
    assert is_elf(image)
    assert not is_elf(b"MZ\x90\x00")
    assert not is_elf(b"")


def test_parse_round_trip(image):
    info = parse_elf(image)
    assert info.entry == 0x120000100
    assert info.sections == [SectionHeader(*s) for s in SECTIONS]
    assert info.segments == [ProgramHeader(*s) for s in SEGMENTS]


def test_exec_sections(image):
    info = parse_elf(image)
    assert info.exec_sections() == [SectionHeader(*SECTIONS[1])]


def test_parse_rejects_non_elf():
    with pytest.raises(ElfFormatError):
        parse_elf(b"\x00" * 128)


def test_parse_rejects_truncated_tables(image):
    with pytest.raises(ElfFormatError):
        parse_elf(image[:-10])


def test_parse_rejects_short_header():
    with pytest.raises(ElfFormatError):
        parse_elf(b"\x7fELF" + bytes(20))


def test_program_table(image):
    lines = format_program_table(parse_elf(image)).splitlines()
    assert lines[2] == "Program Headers:"
    assert lines[4].startswith("LOAD")
    assert " R E " in lines[4]
    assert lines[5].startswith("GNU_PROPERTY")


def test_empty_tables():
    info = ElfInfo(entry=0, shoff=0, phoff=0)
    assert format_section_table(info).splitlines()[-1].startswith("  [Nr] Name")
    assert format_program_table(info).splitlines()[-1].startswith("Type")


def test_report_order(image):
    info = parse_elf(image)
    report = format_elf_report(info, len(image))
    assert report.startswith(f"Elf File Size {len(image)}\nEntry point 120000100\n")
    assert report.index("Section Headers:") < report.index("Program Headers:")


def test_main_prints_report(image, tmp_path, capsys):
    path = tmp_path / "a.out"
    path.write_bytes(image)
    assert main(["-d", str(path)]) == 0
    out = capsys.readouterr().out
    assert out == format_elf_report(parse_elf(image), len(image))


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing")]) == 1
    assert "can not open" in capsys.readouterr().err


def test_main_not_elf(tmp_path):
    path = tmp_path / "raw.bin"
    path.write_bytes(b"\x13\x00\x00\x00" * 4)
    assert main([str(path)]) == 1


def test_main_without_file(capsys):
    assert main([]) == 0
    assert "objdump -d filename" in capsys.readouterr().out