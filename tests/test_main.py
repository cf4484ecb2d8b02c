import io
import pytest

from fcbc.main import (main, parse_args)

KEY = "0123456789abcdef" * 4


class CountingReader(io.BytesIO):
    def __init__(self, data: bytes = b""):
        super().__init__(data)
        self.reads = 0

    def read(self, *args):
        self.reads += 1
        return super().read(*args)


def run(argv, data: bytes = b""):
    """Run the CLI over in-memory stdin/stdout; returns (status, stdout bytes, reader)."""
    stdin, stdout = CountingReader(data), io.BytesIO()
    status = main(argv, stdin=stdin, stdout=stdout)
    return status, stdout.getvalue(), stdin

# -----------------------------
# Usage
# -----------------------------
@pytest.mark.parametrize("argv", [[], ["-d", KEY, "extra"], ["a", "b", "c", "d"]])
def test_bad_argument_count_prints_usage(argv, capsys):
    status, out, stdin = run(argv, b"ignored")
    assert status == 0
    assert out == b""
    assert stdin.reads == 0
    assert "usage: fcbc [-d] <key>" in capsys.readouterr().out


def test_parse_args_flags():
    assert parse_args(["-d", KEY]) == (True, KEY)
    assert parse_args([KEY]) == (False, KEY)
    assert parse_args(["-dx", KEY]) == (True, KEY)
    assert parse_args(["-x", KEY]) == (False, KEY)


def test_parse_args_stops_at_key():
    # Flags after the key are not flags
    assert parse_args([KEY, "-d"]) == (False, KEY)


def test_parse_args_dash_key_comes_last():
    dash_key = "-" + "k" * 63
    assert parse_args([dash_key]) == (False, dash_key)
    assert parse_args(["-d", dash_key]) == (True, dash_key)

# -----------------------------
# Key Validation
# -----------------------------
@pytest.mark.parametrize("argv", [["short"], ["-d", "short"], ["-d"]])
def test_bad_key_reads_nothing(argv, capsys):
    status, out, stdin = run(argv, b"plaintext")
    assert status == 1
    assert out == b""
    assert stdin.reads == 0
    assert "64 bytes/characters" in capsys.readouterr().err

# -----------------------------
# Encrypt / Decrypt
# -----------------------------
def test_encrypt_then_decrypt(capsys):
    status, ciphertext, _ = run([KEY], b"0123456789")
    assert status == 0
    assert len(ciphertext) == 18
    assert "10 bytes processed." in capsys.readouterr().err

    status, plaintext, _ = run(["-d", KEY], ciphertext)
    assert status == 0
    assert plaintext == b"0123456789"
    assert "10 bytes processed." in capsys.readouterr().err


def test_failure_reported(capsys):
    status, out, _ = run(["-d", KEY], b"abc")
    assert status == 1
    assert out == b""
    err = capsys.readouterr().err
    assert "Procedure failure" in err
    assert "0 bytes processed" in err


def test_debug_output(monkeypatch, capsys):
    monkeypatch.setenv("FCBC_DEBUG", "1")
    status, _, _ = run([KEY], b"hello")
    assert status == 0
    err = capsys.readouterr().err
    assert "DEBUG: -d = 0, key = 64 bytes" in err
    assert "DEBUG: Encrypting..." in err
    assert "DEBUG: Wrote last block..." in err
    assert KEY not in err


def test_no_debug_by_default(monkeypatch, capsys):
    monkeypatch.delenv("FCBC_DEBUG", raising=False)
    run([KEY], b"hello")
    assert "DEBUG" not in capsys.readouterr().err

# -----------------------------
# Argument Order
# -----------------------------
def test_key_starting_with_dash():
    dash_key = "-" + "k" * 63
    status, ciphertext, _ = run([dash_key], b"hello")
    assert status == 0
    assert len(ciphertext) == 13

    status, plaintext, _ = run(["-d", dash_key], ciphertext)
    assert status == 0
    assert plaintext == b"hello"


def test_decrypt_flag_with_trailing_characters():
    _, ciphertext, _ = run([KEY], b"hello")
    status, plaintext, _ = run(["-dx", KEY], ciphertext)
    assert status == 0
    assert plaintext == b"hello"


def test_flag_after_key_still_encrypts():
    status, ciphertext, _ = run([KEY, "-d"], b"hello")
    assert status == 0
    assert len(ciphertext) == 13
    _, plaintext, _ = run(["-d", KEY], ciphertext)
    assert plaintext == b"hello"
