"""Human-readable listing of binary trace records."""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, Optional, Sequence, TextIO

from .records import (
    TraceFormat,
    TraceFormatError,
    TraceRecord,
    branch_type_name,
    read_records,
)

__all__ = ["format_record", "dump_records", "main"]


def _slots(values: Sequence[int], count: int) -> tuple[int, ...]:
    items = tuple(values)[:count]
    return items + (0,) * (count - len(items))


def _register_text(record: TraceRecord, fmt: TraceFormat) -> str:
    dest = _slots(record.destination_registers, fmt.destinations)
    src = _slots(record.source_registers, fmt.sources)
    parts = ["register: "]
    for reg in dest:
        if reg:
            if fmt.has_ret_val:
                parts.append(f"{reg}(0x{record.ret_val:x}) ")
            else:
                parts.append(f"{reg} ")
    parts.append(" <= " if fmt is TraceFormat.CHAMPSIM_INST else "<= ")
    parts.extend(f"{reg} " for reg in src if reg)
    return "".join(parts)


def _memory_text(label: str, addresses: Sequence[int], always: bool) -> str:
    if not always and not addresses[0]:
        return ""
    cells = "".join(f"{addr:x} " if addr else " " for addr in addresses)
    return label + cells


def format_record(record: TraceRecord, fmt: TraceFormat) -> str:
    """Render one record as a single line, without the line ending."""
    head = f"ip:{record.ip:x} "
    if fmt.has_inst:
        head += f"{record.inst:08x} "
    head += f"{record.taken_label():<10} {branch_type_name(record.is_branch):<15}"

    width = 28 if fmt is TraceFormat.CHAMPSIM_INST else 27
    regs = f"{_register_text(record, fmt):<{width}} "

    always = fmt is TraceFormat.CHAMPSIM_INST
    dmem = _slots(record.destination_memory, fmt.destinations)
    smem = _slots(record.source_memory, fmt.sources)
    memory = _memory_text("write memory:", dmem, always) + _memory_text(
        "read  memory:", smem, always
    )
    return head + regs + memory


def dump_records(
    records: Iterable[TraceRecord],
    fmt: TraceFormat,
    out: Optional[TextIO] = None,
) -> int:
    """Write one line per record to ``out`` (standard error by default).

    Returns the number of records written.
    """
    stream = sys.stderr if out is None else out
    count = 0
    for record in records:
        stream.write(format_record(record, fmt) + "\n")
        count += 1
    return count


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="champsim_trace_dump",
        description="List the records of a binary instruction trace.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[fmt.value for fmt in TraceFormat],
        default=TraceFormat.CHAMPSIM.value,
        help="record layout of the trace file",
    )
    parser.add_argument("trace_filename", nargs="?")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Dump a trace file to standard error; return the exit status."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else list(argv))
    if args.trace_filename is None:
        parser.print_usage(sys.stdout)
        return 0
    fmt = TraceFormat(args.format)
    try:
        records = read_records(args.trace_filename, fmt)
        dump_records(records, fmt, sys.stderr)
    except TraceFormatError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f'errno={exc.errno}, err_msg="{exc.strerror}"', file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())