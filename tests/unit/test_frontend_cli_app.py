"""Unit tests for the command-line front end."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from ctrcrypt.core.exceptions import CipherError
from ctrcrypt.frontend.cli.app import EXIT_FAILURE, EXIT_SUCCESS, EXIT_USAGE, main


@pytest.fixture(autouse=True)
def fast_kdf(monkeypatch):
    """Keep Argon2 cheap for CLI runs."""
    monkeypatch.setenv("CTRCRYPT_KDF_TIME_COST", "1")
    monkeypatch.setenv("CTRCRYPT_KDF_MEMORY_COST", "8")
    monkeypatch.delenv("CTRCRYPT_CIPHER", raising=False)
    monkeypatch.delenv("CTRCRYPT_CHUNK_SIZE", raising=False)


@pytest.fixture
def plain_file(tmp_path: Path) -> Path:
    path = tmp_path / "report.txt"
    path.write_bytes(b"quarterly numbers\n" * 50)
    return path


# ==============================================================================
# Usage errors
# ==============================================================================

@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["-i", "x", "-p", "pw"],  # no mode
        ["-e", "-d", "-i", "x", "-p", "pw"],  # both modes
        ["-e", "-p", "pw"],  # no input
        ["-e", "-i", "x"],  # no password
        ["-e", "-i", "x", "-p", "pw", "--bogus"],  # unknown flag
        ["-e", "-i", "x", "-p", "pw", "--chunk-size", "100"],
        ["-e", "-i", "x", "-p", "pw", "--cipher", "des"],
        ["-e", "-i", "x", "-p", ""],  # empty password
    ],
)
def test_usage_errors(argv, capsys):
    assert main(argv) == EXIT_USAGE
    err = capsys.readouterr().err
    assert "usage:" in err
    assert "Error:" in err


def test_usage_error_touches_no_files(tmp_path: Path, plain_file: Path):
    assert main(["-i", str(plain_file), "-p", "pw"]) == EXIT_USAGE
    assert sorted(p.name for p in tmp_path.iterdir()) == ["report.txt"]


# ==============================================================================
# Successful runs
# ==============================================================================

def test_encrypt_then_decrypt(plain_file: Path):
    assert main(["-e", "-i", str(plain_file), "-p", "pw"]) == EXIT_SUCCESS
    enc = Path(str(plain_file) + ".enc")
    assert enc.exists()
    assert enc.stat().st_size == plain_file.stat().st_size
    assert enc.read_bytes() != plain_file.read_bytes()

    assert main(["-d", "-i", str(enc), "-p", "pw"]) == EXIT_SUCCESS
    dec = plain_file.with_name("report.txt.dec")
    assert dec.read_bytes() == plain_file.read_bytes()


def test_decrypt_name_without_marker(tmp_path: Path):
    src = tmp_path / "data.bin"
    src.write_bytes(b"\x00\x01\x02")
    assert main(["-d", "-i", str(src), "-p", "pw"]) == EXIT_SUCCESS
    assert (tmp_path / "data.bin.dec").exists()


def test_output_override(tmp_path: Path, plain_file: Path):
    target = tmp_path / "custom.out"
    assert main(["-e", "-i", str(plain_file), "-p", "pw", "-o", str(target)]) == EXIT_SUCCESS
    assert target.exists()
    assert not Path(str(plain_file) + ".enc").exists()


def test_chunk_size_flag_does_not_change_output(tmp_path: Path, plain_file: Path):
    a = tmp_path / "a.enc"
    b = tmp_path / "b.enc"
    assert main(["-e", "-i", str(plain_file), "-p", "pw", "-o", str(a)]) == EXIT_SUCCESS
    assert main(
        ["-e", "-i", str(plain_file), "-p", "pw", "-o", str(b), "--chunk-size", "48"]
    ) == EXIT_SUCCESS
    assert a.read_bytes() == b.read_bytes()


def test_verbose_logs_debug(plain_file: Path, caplog):
    caplog.set_level("DEBUG")
    assert main(["-e", "-v", "-i", str(plain_file), "-p", "secret-pw"]) == EXIT_SUCCESS
    assert "CTR transform finished" in caplog.text
    assert "secret-pw" not in caplog.text


# ==============================================================================
# Runtime failures
# ==============================================================================

def test_missing_input_file(tmp_path: Path, capsys):
    missing = tmp_path / "missing.bin"
    assert main(["-e", "-i", str(missing), "-p", "pw"]) == EXIT_FAILURE
    assert "cannot open input file" in capsys.readouterr().err
    assert not Path(str(missing) + ".enc").exists()


def test_empty_input_name(capsys):
    assert main(["-e", "-i", "", "-p", "pw"]) == EXIT_FAILURE
    assert "Error:" in capsys.readouterr().err


def test_bad_environment_setting(plain_file: Path, monkeypatch, capsys):
    monkeypatch.setenv("CTRCRYPT_CHUNK_SIZE", "nope")
    assert main(["-e", "-i", str(plain_file), "-p", "pw"]) == EXIT_FAILURE
    assert "CTRCRYPT_CHUNK_SIZE" in capsys.readouterr().err


def test_cipher_failure_reports_nonzero(plain_file: Path, capsys):
    with patch(
        "ctrcrypt.security.stream.StreamCipherDriver.transform_chunk",
        side_effect=CipherError("backend failure"),
    ):
        assert main(["-e", "-i", str(plain_file), "-p", "pw"]) == EXIT_FAILURE
    assert "backend failure" in capsys.readouterr().err
    # partial output is left in place
    assert Path(str(plain_file) + ".enc").exists()


def test_output_same_as_input_keeps_input(plain_file: Path, capsys):
    before = plain_file.read_bytes()
    assert main(["-e", "-i", str(plain_file), "-p", "pw", "-o", str(plain_file)]) == EXIT_FAILURE
    assert "is the input file" in capsys.readouterr().err
    assert plain_file.read_bytes() == before


def test_bad_log_level_setting(plain_file: Path, monkeypatch, capsys):
    monkeypatch.setenv("CTRCRYPT_LOG_LEVEL", "ROOT")
    assert main(["-e", "-i", str(plain_file), "-p", "pw"]) == EXIT_FAILURE
    assert "CTRCRYPT_LOG_LEVEL" in capsys.readouterr().err
    assert not Path(str(plain_file) + ".enc").exists()
