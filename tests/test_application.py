"""
Test suite for the command-line application

Tests the three exit paths: full snapshot, fatal record, critical input failure.
"""

import subprocess
import sys

import pytest

from txn_engine.application import (
    EXIT_CRITICAL, EXIT_OK, EXIT_PROCESSING_FAILED, build_parser, main
)


VALID = """type,client,tx,amount
deposit,1,1,10.0000
deposit,1,2,5.0000
deposit,2,3,2.0
withdrawal,2,4,3.0
dispute,1,1,
chargeback,1,1,
deposit,1,5,100
"""


@pytest.fixture
def write_csv(tmp_path):
    def _write(content: str, name: str = "transactions.csv"):
        path = tmp_path / name
        path.write_text(content)
        return path
    return _write


class TestMain:
    """Test main() exit codes and output"""

    def test_success(self, write_csv, capsys):
        """Test a valid file prints the full snapshot"""
        path = write_csv(VALID)

        exit_code = main([str(path)])
        captured = capsys.readouterr()

        assert exit_code == EXIT_OK
        assert captured.out == (
            "client,available,held,total,locked\n"
            "1,5.0000,0.0000,5.0000,true\n"
            "2,2.0000,0.0000,2.0000,false\n"
        )

    def test_malformed_record_emits_no_snapshot(self, write_csv, capsys):
        """Test an unrecognised kind aborts with no output"""
        path = write_csv("type,client,tx,amount\ndeposit,1,1,1\nrefund,1,2,1\ndeposit,1,3,1\n")

        exit_code = main([str(path)])
        captured = capsys.readouterr()

        assert exit_code == EXIT_PROCESSING_FAILED
        assert captured.out == ""
        assert "App failed during process: unrecognised transaction type: 'refund'" in captured.err

    def test_missing_amount_emits_no_snapshot(self, write_csv, capsys):
        path = write_csv("type,client,tx,amount\ndeposit,1,1,\n")

        assert main([str(path)]) == EXIT_PROCESSING_FAILED
        assert capsys.readouterr().out == ""

    def test_unparseable_row_emits_no_snapshot(self, write_csv, capsys):
        path = write_csv("type,client,tx,amount\ndeposit,1,1,1.23456\n")

        assert main([str(path)]) == EXIT_PROCESSING_FAILED
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "line 2" in captured.err

    def test_invalid_utf8_emits_no_snapshot(self, tmp_path, capsys):
        """Test undecodable input fails like a malformed record"""
        path = tmp_path / "transactions.csv"
        path.write_bytes(b"type,client,tx,amount\ndeposit,1,1,1\ndeposit,1,2,\xff\xfe\n")

        exit_code = main([str(path)])
        captured = capsys.readouterr()

        assert exit_code == EXIT_PROCESSING_FAILED
        assert captured.out == ""
        assert "App failed during process: " in captured.err
        assert "unreadable input" in captured.err

    def test_oversized_amount_field_emits_no_snapshot(self, write_csv, capsys):
        path = write_csv("type,client,tx,amount\ndeposit,1,1," + "1" * 200000 + "\n")

        assert main([str(path)]) == EXIT_PROCESSING_FAILED
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "field larger than field limit" in captured.err

    def test_overlong_amount_emits_no_snapshot(self, write_csv, capsys):
        """Test an amount too long to convert is a malformed record"""
        path = write_csv("type,client,tx,amount\ndeposit,1,1," + "1" * 5000 + "\n")

        assert main([str(path)]) == EXIT_PROCESSING_FAILED
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "line 2" in captured.err

    def test_missing_file_is_critical(self, tmp_path, capsys):
        """Test an unreadable input fails before processing with no output"""
        exit_code = main([str(tmp_path / "nope.csv")])
        captured = capsys.readouterr()

        assert exit_code == EXIT_CRITICAL
        assert captured.out == ""
        assert "Critical error: Cannot open input file" in captured.err

    def test_empty_file(self, write_csv, capsys):
        path = write_csv("")

        assert main([str(path)]) == EXIT_OK
        assert capsys.readouterr().out == "client,available,held,total,locked\n"

    def test_usage_error(self, capsys):
        """Test a missing argument is rejected by the parser"""
        with pytest.raises(SystemExit) as excinfo:
            main([])

        assert excinfo.value.code == 2
        assert "usage" in capsys.readouterr().err


class TestParser:
    """Test argument parsing"""

    def test_options(self):
        args = build_parser().parse_args(["in.csv", "--log-level", "debug", "--log-format", "text"])

        assert str(args.transactions) == "in.csv"
        assert args.log_level == "DEBUG"
        assert args.log_format == "text"

    def test_defaults(self):
        args = build_parser().parse_args(["in.csv"])

        assert args.log_level is None
        assert args.log_format is None


def test_module_entry_point(write_csv):
    """Test python -m txn_engine end to end"""
    path = write_csv(VALID)

    result = subprocess.run(
        [sys.executable, "-m", "txn_engine", str(path)],
        capture_output=True, text=True
    )

    assert result.returncode == 0
    assert result.stdout.splitlines()[0] == "client,available,held,total,locked"
    assert len(result.stdout.splitlines()) == 3
