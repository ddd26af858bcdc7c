# tests/test_cli.py
import importlib
import contextlib
import io
import sys

import pandas as pd

import trimws
from trimws.main import main


def _run_main(*args):
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf), contextlib.redirect_stderr(buf):
        exit_code = main(list(args))
    return exit_code, buf.getvalue()


def _run_main_split(*args):
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        exit_code = main(list(args))
    return exit_code, out.getvalue(), err.getvalue()


def _fake_stdin(monkeypatch, data: bytes):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


def test_cli_help_smoke():
    exit_code, out = _run_main("-h")
    assert exit_code == 0
    assert "usage" in out.lower()
    assert "--in-place" in out


def test_cli_version_option():
    exit_code, out = _run_main("--version")
    assert exit_code == 0
    assert trimws.__version__ in out


def test_version_falls_back_without_metadata(monkeypatch):
    from importlib import metadata, reload

    from trimws import _version

    def missing(name):
        raise metadata.PackageNotFoundError(name)

    monkeypatch.setattr(metadata, "version", missing)
    try:
        reloaded = reload(_version)
        assert reloaded.__version__ == reloaded.VERSION
    finally:
        monkeypatch.undo()
        reload(_version)


def test_cli_in_place_rejects_stdin():
    exit_code, out = _run_main("-i", "-")
    assert exit_code == 2
    assert "usage" in out.lower()


def test_cli_rejects_zero_jobs(tmp_path):
    exit_code, _ = _run_main("-i", "-j", "0", str(tmp_path / "a.txt"))
    assert exit_code == 2


def test_cli_stdin_to_stdout(monkeypatch):
    _fake_stdin(monkeypatch, b"ab  \n\n  \ncd\t\n\n\n")

    exit_code, out, err = _run_main_split()

    assert exit_code == 0
    assert out == "ab\n\n\ncd\n"
    assert "     1|ab__" in err
    assert "     3|__" in err
    assert "bytes saved overall" in err


def test_cli_dash_reads_stdin(monkeypatch):
    _fake_stdin(monkeypatch, b"x \n")

    exit_code, out, err = _run_main_split("-N", "-V", "-S", "-")

    assert exit_code == 0
    assert out == "x"
    assert err == ""


def test_cli_files_to_stdout(tmp_path):
    first = tmp_path / "first.txt"
    second = tmp_path / "second.txt"
    first.write_bytes(b"one   \n")
    second.write_bytes(b"two\n\n")

    exit_code, out, err = _run_main_split("-V", str(first), str(second))

    assert exit_code == 0
    assert out == "one\ntwo\n"
    assert first.read_bytes() == b"one   \n"
    assert "first.txt" in err and "second.txt" in err
    assert "     1 trailing newlines trimmed" in err
    assert "     4 bytes saved overall" in err


def test_cli_in_place(tmp_path):
    path = tmp_path / "notes.md"
    path.write_bytes(b"# Title  \n\ntext \t\n\n\n")

    exit_code, out, err = _run_main_split("-i", str(path))

    assert exit_code == 0
    assert out == ""
    assert path.read_bytes() == b"# Title\n\ntext\n"
    assert "|" not in err
    assert "     6 bytes saved overall" in err


def test_cli_reports_failures_and_keeps_going(tmp_path):
    good = tmp_path / "good.txt"
    good.write_bytes(b"fine  \n")
    missing = tmp_path / "missing.txt"

    exit_code, _, err = _run_main_split("-i", "-S", str(missing), str(good))

    assert exit_code == 1
    assert f"ERROR: {missing}" in err
    assert good.read_bytes() == b"fine\n"
    assert "bytes saved overall" not in err


def test_cli_summary_csv(tmp_path):
    path = tmp_path / "data.txt"
    path.write_bytes(b"a \nb \n")
    report = tmp_path / "summary.csv"

    exit_code, _, _ = _run_main_split("-i", "-S", "--summary-csv", str(report), str(path))

    assert exit_code == 0
    table = pd.read_csv(report, keep_default_na=False)
    assert table.loc[0, "path"] == str(path)
    assert table.loc[0, "status"] == "trimmed"
    assert table.loc[0, "bytes_saved"] == 2


def test_cli_unexpected_error(monkeypatch, tmp_path):
    main_module = importlib.import_module("trimws.main")

    def explode(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(main_module, "run_batch", explode)

    exit_code, out = _run_main("-i", str(tmp_path / "a.txt"))

    assert exit_code == 1
    assert "Unexpected error: kaboom" in out
