# qtracetools

Small tools for working with binary instruction traces in ChampSim-style
record layouts, for inspecting the headers of ELF64 executables, and for
parsing `key=value` plugin argument lists.

## Installing

```
pip install .
```

For running the test suite:

```
pip install .[test]
pytest
```

## Command-line tools

### `qtrace-dump`

Lists every record of a trace file, one line per instruction: the
instruction pointer, the instruction word (for layouts that carry it),
whether a branch was taken, the branch kind, the registers written and
read, and the memory addresses written and read. The listing goes to
standard error.

```
qtrace-dump [-f {champsim,champsim-inst,la-with-reg}] TRACE_FILE
```

`-f`/`--format` selects the record layout and defaults to `champsim`.
A file whose size is not a whole number of records is rejected with exit
status 1. Run without a file name, the command prints its usage and
exits with status 0.

### `qtrace-convert`

Reads a trace in the `champsim-inst` layout (records that also carry the
instruction word) and writes it out in the plain 64-byte `champsim`
layout. It stops with an error, exit status 1, on the first record whose
instruction pointer is zero; records written before that stay in the
output file.

```
qtrace-convert IN_TRACE OUT_TRACE
```

### `qtrace-elfinfo`

Prints the file size, the entry point, the section header table and the
program header table of a little-endian ELF64 file, in a layout close to
that of `readelf`.

```
qtrace-elfinfo FILE
qtrace-elfinfo -d FILE
```

Section names are not resolved; every section is shown as `NAME`.

## Library use

### Trace records

`qtracetools.records` describes the record layouts (`TraceFormat`:
`CHAMPSIM`, `CHAMPSIM_INST`, `LA_WITH_REG`) and the records themselves
(`TraceRecord`, with `BranchType` for the branch kind and
`branch_type_name` for its display name):

```python
from qtracetools.records import TraceFormat, read_records

for record in read_records("trace.champsim", TraceFormat.CHAMPSIM):
    print(hex(record.ip), record.taken_label())
```

`TraceFormat.record_size()` gives the size of one record.
`TraceRecord.pack` turns a record into bytes, `unpack_record` and
`parse_records` do the reverse, and `TraceFormatError` is raised for data
that does not fit the chosen layout.

`qtracetools.dump.format_record` and `dump_records` produce the same text
as `qtrace-dump` (`dump_records` writes to standard error unless given a
stream, and returns the number of lines written).
`qtracetools.convert.convert_records` and `convert_trace` do the work of
`qtrace-convert` and raise `ZeroIpError` on a zero instruction pointer.

### ELF headers

```python
from pathlib import Path
from qtracetools.elfinfo import parse_elf, format_elf_report

data = Path("a.out").read_bytes()
info = parse_elf(data)
print(format_elf_report(info, len(data)))
for section in info.exec_sections():
    print(hex(section.addr), section.size)
```

`is_elf` checks the magic bytes; `section_flag_letters`,
`section_type_name` and `segment_type_name` give the display forms used
in the tables, and `format_section_table` and `format_program_table`
render each table alone. Data that is not ELF, or whose header tables run
past its end, raises `ElfFormatError`.

### Plugin arguments

`qtracetools.pluginargs` parses `key=value` option lists of the kind
passed to emulator plugins:

```python
from qtracetools.pluginargs import (
    plugin_args_get,
    plugin_args_get_bool_or_else,
    plugin_args_get_u64_or_else,
    parse_size,
)

argv = ["output=trace.bin", "limit=4M", "verbose=on"]
plugin_args_get(argv, "output")                       # "trace.bin"
plugin_args_get_u64_or_else(argv, "limit", 0)         # 4194304
plugin_args_get_bool_or_else(argv, "verbose", False)  # True
parse_size("16k")                                     # 16384
```

`parse_size` accepts decimal, octal (leading `0`) and hexadecimal
(leading `0x`) numbers with an optional `k`, `m` or `g` suffix in either
case; anything after a `:` is ignored. An unknown suffix or a value that
overflows 64 bits raises `ArgumentError`. Boolean values accept
`1/on/yes/true` and `0/off/no/false`; any other word issues a warning and
the default is returned.

The stricter helpers `find_arg`, `find_arg_in`, `find_arg_or_else` and
`get_u64_or_else` match the key exactly and read plain decimal numbers.

## What it does not do

- `qtrace-elfinfo` only reports headers; it does not disassemble
  executable sections or raw binaries into instructions.
- There is no tool that records traces; the package only reads, lists
  and converts trace files that already exist.
- Only little-endian ELF64 files are read.