"""Tests for the command line entry point."""

import logging

import pytest

from config.settings import Settings
from ledger import __version__
from ledger.cli import build_runner, configure_logging, main
from ledger.models.exceptions import StorageError

ENV_VARS = (
    'LEDGER_TRANSACTION_DB',
    'LEDGER_DISPUTE_CACHE_SIZE',
    'LEDGER_LOG_LEVEL',
    'LEDGER_LOG_FILE',
    'LEDGER_OUTPUT_FORMAT',
)


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Run without ledger environment variables, .env files or leftover handlers."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr('ledger.cli.load_dotenv', lambda: False)
    yield
    ledger_logger = logging.getLogger('ledger')
    for handler in list(ledger_logger.handlers):
        ledger_logger.removeHandler(handler)
        handler.close()
    ledger_logger.setLevel(logging.NOTSET)


def write_input(tmp_path, *lines):
    path = tmp_path / "transactions.csv"
    path.write_text("\n".join(lines) + "\n")
    return str(path)


def test_main_prints_accounts(tmp_path, capsys):
    path = write_input(
        tmp_path,
        "type, client, tx, amount",
        "deposit, 2, 1, 2.0",
        "deposit, 1, 2, 1.0",
        "deposit, 1, 3, 2.0",
        "withdrawal, 1, 4, 1.5",
        "withdrawal, 2, 5, 3.0",
        "dispute, 2, 1,",
        "chargeback, 2, 1,",
    )

    assert main([path]) == 0

    captured = capsys.readouterr()
    assert captured.out == (
        "client,available,held,total,locked\n"
        "1,1.5,0,1.5,false\n"
        "2,0,0,0,true\n"
    )
    # The rejected withdrawal is reported on stderr only
    assert "Insufficient funds" in captured.err


def test_main_table_output(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv('LEDGER_OUTPUT_FORMAT', 'table')
    path = write_input(tmp_path, "type,client,tx,amount", "deposit,1,1,3")

    assert main([path]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split() == ["client", "available", "held", "total", "locked"]
    assert lines[2].split() == ["1", "3", "0", "3", "false"]


def test_main_missing_file(tmp_path, capsys):
    """A fatal error is logged and nothing is printed."""
    assert main([str(tmp_path / "missing.csv")]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Fatal error importing CSV file" in captured.err


def test_main_missing_header_column(tmp_path, capsys):
    path = write_input(tmp_path, "type,client,amount", "deposit,1,5")

    assert main([path]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "missing required columns" in captured.err


def test_main_invalid_configuration(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv('LEDGER_DISPUTE_CACHE_SIZE', 'lots')
    path = write_input(tmp_path, "type,client,tx,amount", "deposit,1,1,3")

    assert main([path]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Fatal invalid configuration" in captured.err


def test_main_log_file(tmp_path, capsys, monkeypatch):
    log_path = tmp_path / "ledger.log"
    monkeypatch.setenv('LEDGER_LOG_FILE', str(log_path))
    monkeypatch.setenv('LEDGER_LOG_LEVEL', 'INFO')
    path = write_input(tmp_path, "type,client,tx,amount", "resolve,1,1,")

    assert main([path]) == 0

    logging.getLogger('ledger').handlers[0].flush()
    content = log_path.read_text()
    assert "Starting transaction processing" in content
    assert ":WARNING:ledger.services.ledger_runner: Line 2" in content
    assert capsys.readouterr().err == ""


def test_main_resets_database_file(tmp_path, capsys, monkeypatch):
    """A database file left by a previous run does not leak into the next."""
    monkeypatch.setenv('LEDGER_TRANSACTION_DB', str(tmp_path / "transactions.db"))
    path = write_input(tmp_path, "type,client,tx,amount", "deposit,1,1,3")

    assert main([path]) == 0
    assert main([path]) == 0

    out = capsys.readouterr().out
    assert out.count("1,3,0,3,false") == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(['--version'])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_input_argument_required(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])

    assert exc_info.value.code == 2


def test_build_runner_unopenable_database(tmp_path):
    settings = Settings(transaction_db_path=str(tmp_path / "missing" / "dir" / "tx.db"))

    with pytest.raises(StorageError):
        build_runner(settings)


def test_configure_logging_replaces_handlers():
    configure_logging(Settings(log_level='DEBUG'))
    configure_logging(Settings(log_level='ERROR'))

    ledger_logger = logging.getLogger('ledger')
    assert len(ledger_logger.handlers) == 1
    assert ledger_logger.level == logging.ERROR


def test_main_skips_undecodable_row(tmp_path, capsys):
    """Rows around one with invalid UTF-8 bytes are still applied."""
    path = tmp_path / "transactions.csv"
    path.write_bytes(
        b"type,client,tx,amount\n"
        b"deposit,1,1,10\n"
        b"deposit,2,2,\xff5\n"
        b"deposit,1,3,5\n"
    )

    assert main([str(path)]) == 0

    captured = capsys.readouterr()
    assert captured.out == (
        "client,available,held,total,locked\n"
        "1,15,0,15,false\n"
    )
    assert "Line 3: record is not valid UTF-8" in captured.err


def test_main_skips_amount_beyond_precision(tmp_path, capsys):
    path = write_input(
        tmp_path,
        "type,client,tx,amount",
        "deposit,1,1,10",
        "deposit,1,2,1e40",
        "deposit,1,3,5",
    )

    assert main([path]) == 0

    captured = capsys.readouterr()
    assert captured.out.splitlines()[1] == "1,15,0,15,false"
    assert "out of range" in captured.err
