"""Binary trace record formats and their readers."""

from __future__ import annotations

import enum
import os
import struct
from dataclasses import dataclass
from itertools import islice
from typing import Iterable, Iterator, Sequence, Union

__all__ = [
    "BranchType",
    "TraceFormat",
    "TraceRecord",
    "TraceFormatError",
    "branch_type_name",
    "unpack_record",
    "parse_records",
    "read_records",
]


class TraceFormatError(ValueError):
    """Raised when trace data does not fit the expected record format."""


class BranchType(enum.IntEnum):
    """Branch kinds as stored in a record's ``is_branch`` byte."""

    NOT_BRANCH = 0
    BRANCH_DIRECT_JUMP = 1
    BRANCH_INDIRECT = 2
    BRANCH_CONDITIONAL = 3
    BRANCH_DIRECT_CALL = 4
    BRANCH_INDIRECT_CALL = 5
    BRANCH_RETURN = 6
    BRANCH_OTHER = 7


_BRANCH_NAMES = {
    BranchType.NOT_BRANCH: "",
    BranchType.BRANCH_DIRECT_JUMP: "direct_jump",
    BranchType.BRANCH_INDIRECT: "indirect_jump",
    BranchType.BRANCH_CONDITIONAL: "conditional",
    BranchType.BRANCH_DIRECT_CALL: "direct_call",
    BranchType.BRANCH_INDIRECT_CALL: "indirect_call",
    BranchType.BRANCH_RETURN: "return",
    BranchType.BRANCH_OTHER: "other",
}


def branch_type_name(value: int) -> str:
    """Return the display name of a branch type, ``"NULL"`` if unknown."""
    return _BRANCH_NAMES.get(value, "NULL")


@dataclass(frozen=True)
class _Layout:
    packer: struct.Struct
    destinations: int
    sources: int
    has_inst: bool
    has_ret_val: bool


class TraceFormat(enum.Enum):
    """The on-disk record layouts understood by the tools."""

    CHAMPSIM = "champsim"
    CHAMPSIM_INST = "champsim-inst"
    LA_WITH_REG = "la-with-reg"

    @property
    def _layout(self) -> _Layout:
        return _LAYOUTS[self]

    @property
    def destinations(self) -> int:
        """Number of destination register and memory slots."""
        return self._layout.destinations

    @property
    def sources(self) -> int:
        """Number of source register and memory slots."""
        return self._layout.sources

    @property
    def has_inst(self) -> bool:
        """Whether records carry the raw instruction word."""
        return self._layout.has_inst

    @property
    def has_ret_val(self) -> bool:
        """Whether records carry the destination register's value."""
        return self._layout.has_ret_val

    def record_size(self) -> int:
        """Size of one record in bytes."""
        return self._layout.packer.size


_LAYOUTS = {
    TraceFormat.CHAMPSIM: _Layout(struct.Struct("<QBB2B4B2Q4Q"), 2, 4, False, False),
    TraceFormat.CHAMPSIM_INST: _Layout(
        struct.Struct("<QBB2B4B2Q4QI4x"), 2, 4, True, False
    ),
    TraceFormat.LA_WITH_REG: _Layout(
        struct.Struct("<QQ3QQIBBB3B6x"), 1, 3, True, True
    ),
}


def _fit(values: Iterable[int], count: int, label: str) -> tuple[int, ...]:
    items = tuple(values)
    if len(items) > count:
        raise TraceFormatError(
            f"{label} holds {len(items)} entries, the format allows {count}"
        )
    return items + (0,) * (count - len(items))


@dataclass(frozen=True)
class TraceRecord:
    """One traced instruction.

    Register and memory tuples shorter than the format's slot count are
    padded with zeros when packed; fields a format lacks are not stored.
    """

    ip: int = 0
    is_branch: int = 0
    branch_taken: int = 0
    destination_registers: tuple[int, ...] = ()
    source_registers: tuple[int, ...] = ()
    destination_memory: tuple[int, ...] = ()
    source_memory: tuple[int, ...] = ()
    inst: int = 0
    ret_val: int = 0

    def taken_label(self) -> str:
        """Return ``"taken"``, ``"not taken"`` or ``""`` for non-branches."""
        if not self.is_branch:
            return ""
        return "taken" if self.branch_taken else "not taken"

    def pack(self, fmt: TraceFormat) -> bytes:
        """Encode the record in the given format."""
        nd, ns = fmt.destinations, fmt.sources
        dregs = _fit(self.destination_registers, nd, "destination_registers")
        sregs = _fit(self.source_registers, ns, "source_registers")
        dmem = _fit(self.destination_memory, nd, "destination_memory")
        smem = _fit(self.source_memory, ns, "source_memory")
        if fmt is TraceFormat.LA_WITH_REG:
            values = (
                self.ip, *dmem, *smem, self.ret_val, self.inst,
                self.is_branch, self.branch_taken, *dregs, *sregs,
            )
        else:
            values = (
                self.ip, self.is_branch, self.branch_taken,
                *dregs, *sregs, *dmem, *smem,
            )
            if fmt.has_inst:
                values += (self.inst,)
        try:
            return fmt._layout.packer.pack(*values)
        except struct.error as exc:
            raise TraceFormatError(f"record does not fit {fmt.value}: {exc}") from exc


def _record_from_values(values: Sequence[int], fmt: TraceFormat) -> TraceRecord:
    nd, ns = fmt.destinations, fmt.sources
    it = iter(values)

    def take(count: int) -> tuple[int, ...]:
        return tuple(islice(it, count))

    if fmt is TraceFormat.LA_WITH_REG:
        ip = next(it)
        dmem, smem = take(nd), take(ns)
        ret_val, inst, is_branch, taken = take(4)
        dregs, sregs = take(nd), take(ns)
    else:
        ip, is_branch, taken = take(3)
        dregs, sregs = take(nd), take(ns)
        dmem, smem = take(nd), take(ns)
        inst = next(it) if fmt.has_inst else 0
        ret_val = 0
    return TraceRecord(
        ip=ip,
        is_branch=is_branch,
        branch_taken=taken,
        destination_registers=dregs,
        source_registers=sregs,
        destination_memory=dmem,
        source_memory=smem,
        inst=inst,
        ret_val=ret_val,
    )


def unpack_record(data: bytes, fmt: TraceFormat) -> TraceRecord:
    """Decode exactly one record from ``data``."""
    size = fmt.record_size()
    if len(data) != size:
        raise TraceFormatError(
            f"expected {size} bytes for a {fmt.value} record, got {len(data)}"
        )
    return _record_from_values(fmt._layout.packer.unpack(data), fmt)


def _iter_buffer(data: bytes, fmt: TraceFormat) -> Iterator[TraceRecord]:
    for values in fmt._layout.packer.iter_unpack(data):
        yield _record_from_values(values, fmt)


def parse_records(data: bytes, fmt: TraceFormat) -> Iterator[TraceRecord]:
    """Iterate over the records held in ``data``.

    The length is checked before iteration starts.
    """
    if len(data) % fmt.record_size():
        raise TraceFormatError(
            f"data of {len(data)} bytes is not a valid {fmt.value} trace"
        )
    return _iter_buffer(data, fmt)


_CHUNK_RECORDS = 4096


def _stream_file(path: Union[str, os.PathLike], fmt: TraceFormat) -> Iterator[TraceRecord]:
    chunk_size = fmt.record_size() * _CHUNK_RECORDS
    with open(path, "rb") as handle:
        while chunk := handle.read(chunk_size):
            yield from parse_records(chunk, fmt)


def read_records(path: Union[str, os.PathLike], fmt: TraceFormat) -> Iterator[TraceRecord]:
    """Iterate over the records of a trace file.

    The file size is checked before iteration starts.
    """
    size = os.stat(path).st_size
    if size % fmt.record_size():
        raise TraceFormatError(f"{os.fspath(path)} is not a valid {fmt.value} trace")
    return _stream_file(path, fmt)