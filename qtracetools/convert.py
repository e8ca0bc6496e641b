"""Conversion of instruction-carrying traces to the plain record layout."""

from __future__ import annotations

import os
import sys
from typing import Iterable, Iterator, Optional, Sequence, Union

from .records import TraceFormat, TraceFormatError, TraceRecord, read_records

__all__ = ["ZeroIpError", "convert_records", "convert_trace", "main"]

_USAGE = "usage: champsim_trace_util in_trace_filename out_trace_filename"


class ZeroIpError(TraceFormatError):
    """Raised when a record has an instruction pointer of zero."""

    def __init__(self, index: int) -> None:
        super().__init__(f"index:{index} ip = 0")
        self.index = index


def convert_records(records: Iterable[TraceRecord]) -> Iterator[bytes]:
    """Yield each record encoded in the plain champsim layout.

    Raises ZeroIpError on reaching a record whose ip is zero.
    """
    for index, record in enumerate(records):
        if record.ip == 0:
            raise ZeroIpError(index)
        yield record.pack(TraceFormat.CHAMPSIM)


def convert_trace(
    src_path: Union[str, os.PathLike], dst_path: Union[str, os.PathLike]
) -> int:
    """Convert an instruction-carrying trace file into a plain one.

    Records written before a ZeroIpError stay in the output file.
    Returns the number of records written.
    """
    records = read_records(src_path, TraceFormat.CHAMPSIM_INST)
    count = 0
    with open(dst_path, "wb") as out:
        for chunk in convert_records(records):
            out.write(chunk)
            count += 1
    return count


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the converter from the command line; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) < 2:
        print(_USAGE)
        return 0
    try:
        convert_trace(args[0], args[1])
    except TraceFormatError as exc:
        print(exc, file=sys.stderr)
        return 1
    except OSError as exc:
        print(f'errno={exc.errno}, err_msg="{exc.strerror}"', file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())