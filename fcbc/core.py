import io
import sys
import secrets
from typing import BinaryIO, Callable, Optional, Union

from fcbc.models import (CipherParams, Direction, StreamIOError, bcolors)
from fcbc.utils.keygen import (RoundKey, generate_iv)
from fcbc.utils.encryption import (ChainEngine)

KeyLike = Union[bytes, bytearray, str, RoundKey]
Hook = Optional[Callable[[str], None]]

# -----------------------------
# Observability
# -----------------------------
def debug_hook(event: str):
    """Progress hook printing debug events to stderr (stdout carries the data)."""
    print(f"{bcolors.GREY}DEBUG: {event}{bcolors.ENDC}", file=sys.stderr)

# -----------------------------
# Stream I/O Helpers
# -----------------------------
def _read(instream: BinaryIO, n: int, processed: int) -> bytes:
    try:
        data = instream.read(n)
    except OSError as e:
        raise StreamIOError(f"read failed: {e}", processed) from e
    if data is None:
        raise StreamIOError("read returned no data on a non-blocking stream", processed)
    return data


def _write(outstream: BinaryIO, data: bytes, processed: int):
    if not data:
        return
    try:
        written = outstream.write(data)
    except OSError as e:
        raise StreamIOError(f"write failed: {e}", processed) from e
    if written is None:
        raise StreamIOError("write accepted no data on a non-blocking stream", processed)
    if written != len(data):
        raise StreamIOError(f"short write: {written} of {len(data)} bytes", processed)

# -----------------------------
# Stream Framer
# -----------------------------
def transform_stream(instream: BinaryIO, outstream: BinaryIO, key: KeyLike,
                     direction: Direction = Direction.ENCRYPT, vp: CipherParams = CipherParams(),
                     hook: Hook = None, entropy: Callable[[int], bytes] = secrets.token_bytes) -> int:
    """
    Push a whole byte stream through the chained cipher.

    Reads block_size chunks until a short read. A full chunk goes through
    the chain as a block; a non-empty short chunk is the final partial
    block; an empty read is a clean end of stream. Reads are single calls,
    so instream should be buffered (sys.stdin.buffer, open(..., "rb")) to
    avoid mistaking a short pipe read for the end of the data.

    Output format: E(IV) || C[1] || ... || C[n-1] || tail, where the tail
    is len(plaintext) % block_size bytes. Decrypting consumes that format.

    Args:
        instream: Binary input stream
        outstream: Binary output stream; flushed on success
        key: Raw key (validated before any I/O) or a prepared RoundKey
        direction: Direction.ENCRYPT or Direction.DECRYPT
        vp: Cipher parameters, ignored when key is already a RoundKey
        hook: Optional callable receiving progress events
        entropy: Random source for the IV (encryption only)

    Returns:
        Plaintext bytes processed; the IV block is not counted

    Raises:
        KeyLengthError: Key has the wrong length (nothing read or written)
        EntropySourceError: No IV could be drawn (nothing written)
        StreamIOError: Read failure, short or failed write, or a ciphertext
            shorter than one IV block
    """
    round_key = key if isinstance(key, RoundKey) else RoundKey(key, vp)
    bs = round_key.params.block_size
    emit = hook or (lambda *_: None)
    engine = ChainEngine(round_key, direction)
    n = 0

    if direction is Direction.ENCRYPT:
        emit("Encrypting...")
        _write(outstream, engine.seed(generate_iv(round_key.params, entropy)), n)
        emit("Initialized IV...")
    else:
        emit("Decrypting...")
        iv = _read(instream, bs, n)
        if len(iv) != bs:
            raise StreamIOError(f"ciphertext holds {len(iv)} bytes, less than the {bs}-byte IV", n)
        engine.seed(iv)
        emit("Read IV...")

    chunk = _read(instream, bs, n)
    while len(chunk) == bs:
        _write(outstream, engine.process(chunk), n)
        n += bs
        chunk = _read(instream, bs, n)
    emit("Wrote bytes...")

    if chunk:
        _write(outstream, engine.finish(chunk), n)
        n += len(chunk)
    emit("Wrote last block...")

    try:
        outstream.flush()
    except OSError as e:
        raise StreamIOError(f"flush failed: {e}", n) from e
    return n


def encrypt_stream(instream: BinaryIO, outstream: BinaryIO, key: KeyLike, **kwargs) -> int:
    return transform_stream(instream, outstream, key, Direction.ENCRYPT, **kwargs)


def decrypt_stream(instream: BinaryIO, outstream: BinaryIO, key: KeyLike, **kwargs) -> int:
    return transform_stream(instream, outstream, key, Direction.DECRYPT, **kwargs)

# -----------------------------
# In-memory Helpers
# -----------------------------
def encrypt_bytes(plaintext: bytes, key: KeyLike, **kwargs) -> bytes:
    """Encrypt a byte string; returns E(IV) followed by the chained blocks."""
    out = io.BytesIO()
    encrypt_stream(io.BytesIO(plaintext), out, key, **kwargs)
    return out.getvalue()


def decrypt_bytes(ciphertext: bytes, key: KeyLike, **kwargs) -> bytes:
    """Decrypt a byte string produced by encrypt_bytes with the same key."""
    out = io.BytesIO()
    decrypt_stream(io.BytesIO(ciphertext), out, key, **kwargs)
    return out.getvalue()
