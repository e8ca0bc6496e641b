import io

import pytest

from qtracetools.dump import dump_records, format_record, main
from qtracetools.records import TraceFormat, TraceRecord


def test_champsim_line_layout():
    record = TraceRecord(
        ip=0x401000,
        is_branch=3,
        branch_taken=1,
        destination_registers=(5,),
        source_registers=(6, 7),
        source_memory=(0x1000,),
    )
    expected = (
        "ip:401000 "
        + "taken".ljust(10)
        + " "
        + "conditional".ljust(15)
        + "register: 5 <= 6 7 ".ljust(27)
        + " "
        + "read  memory:1000    "
    )
    assert format_record(record, TraceFormat.CHAMPSIM) == expected


def test_la_with_reg_line_shows_ret_val():
    record = TraceRecord(
        ip=0x1200000,
        inst=0x02BFFC0D,
        destination_registers=(4,),
        source_registers=(1,),
        ret_val=0xFF,
    )
    expected = (
        "ip:1200000 02bffc0d "
        + "".ljust(10)
        + " "
        + "".ljust(15)
        + "register: 4(0xff) <= 1 ".ljust(27)
        + " "
    )
    assert format_record(record, TraceFormat.LA_WITH_REG) == expected


def test_champsim_inst_always_prints_memory():
    record = TraceRecord(ip=1)
    expected = (
        "ip:1 00000000 "
        + " " * 10
        + " "
        + " " * 15
        + "register:  <= ".ljust(28)
        + " "
        + "write memory:  "
        + "read  memory:    "
    )
    assert format_record(record, TraceFormat.CHAMPSIM_INST) == expected


def test_plain_format_skips_empty_memory():
    line = format_record(TraceRecord(ip=0x10), TraceFormat.CHAMPSIM)
    assert "write memory:" not in line
    assert "read  memory:" not in line


def test_write_memory_shown_when_first_slot_set():
    record = TraceRecord(ip=0x10, destination_memory=(0xABC,))
    line = format_record(record, TraceFormat.CHAMPSIM)
    assert "write memory:abc " in line


def test_not_taken_branch_label():
    record = TraceRecord(ip=8, is_branch=4, branch_taken=0)
    line = format_record(record, TraceFormat.CHAMPSIM)
    assert "not taken" in line
    assert "direct_call" in line


def test_unknown_branch_type_shows_null():
    record = TraceRecord(ip=8, is_branch=9, branch_taken=1)
    assert "NULL" in format_record(record, TraceFormat.CHAMPSIM)


@pytest.mark.parametrize("fmt", list(TraceFormat))
def test_dump_records_one_line_per_record(fmt):
    records = [TraceRecord(ip=i + 1) for i in range(5)]
    out = io.StringIO()
    count = dump_records(records, fmt, out)
    lines = out.getvalue().splitlines()
    assert count == 5
    assert lines == [format_record(r, fmt) for r in records]


def test_main_without_arguments_prints_usage(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_main_dumps_file_to_stderr(tmp_path, capsys):
    records = [
        TraceRecord(ip=0x100, inst=0x1234, destination_registers=(2,), ret_val=7),
        TraceRecord(ip=0x104, is_branch=6, branch_taken=1),
    ]
    path = tmp_path / "trace.bin"
    path.write_bytes(b"".join(r.pack(TraceFormat.LA_WITH_REG) for r in records))
    assert main(["--format", "la-with-reg", str(path)]) == 0
    err_lines = capsys.readouterr().err.splitlines()
    assert err_lines == [format_record(r, TraceFormat.LA_WITH_REG) for r in records]


def test_main_rejects_bad_size(tmp_path, capsys):
    path = tmp_path / "bad.bin"
    path.write_bytes(b"\x00" * (TraceFormat.CHAMPSIM.record_size() + 1))
    assert main([str(path)]) == 1
    assert "bad.bin" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.bin")]) == 1
    assert "errno=" in capsys.readouterr().err