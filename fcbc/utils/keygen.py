import os
import secrets
import numpy as np
from typing import Callable, Union

from fcbc.models import (CipherParams, KeyLengthError, EntropySourceError)

# -----------------------------
# Key Schedule
# -----------------------------
class RoundKey:
    """
    Round key schedule for the Feistel transform.

    There is no expansion or hashing step: the key bytes are consumed
    directly, half a block per round. Round r reads
    key[r * half:(r + 1) * half], forwards while encrypting and backwards
    while decrypting.

    Args:
        key: Raw key material, exactly params.key_length bytes. A str is
            encoded the way the OS hands command-line arguments over.
        params: Cipher parameters

    Raises:
        KeyLengthError: If the key has the wrong length
    """

    def __init__(self, key: Union[bytes, bytearray, str], params: CipherParams = CipherParams()):
        if isinstance(key, str):
            key = os.fsencode(key)
        if len(key) != params.key_length:
            raise KeyLengthError(
                f"key must be {params.key_length} bytes/characters long, got {len(key)}"
            )
        self.params = params
        self._bytes = np.frombuffer(bytes(key), dtype=np.uint8)  # read-only view

    def __len__(self) -> int:
        return len(self._bytes)

    def round_key(self, r: int) -> np.ndarray:
        """Key bytes consumed by round r (a read-only view)."""
        if not 0 <= r < self.params.rounds:
            raise IndexError(f"round {r} out of range [0, {self.params.rounds})")
        h = self.params.half
        return self._bytes[r * h:(r + 1) * h]

    def to_bytes(self) -> bytes:
        return self._bytes.tobytes()

# -----------------------------
# Initialization Vectors
# -----------------------------
def generate_iv(params: CipherParams = CipherParams(),
                entropy: Callable[[int], bytes] = secrets.token_bytes) -> bytes:
    """
    Draw a fresh random IV of one block from the entropy source.

    Args:
        params: Cipher parameters (fixes the IV length)
        entropy: Callable returning n random bytes; the OS CSPRNG by default

    Returns:
        block_size random bytes

    Raises:
        EntropySourceError: If the source fails or returns a short read
    """
    try:
        iv = entropy(params.block_size)
    except OSError as e:
        raise EntropySourceError(f"entropy source unavailable: {e}") from e
    if iv is None or len(iv) != params.block_size:
        got = 0 if iv is None else len(iv)
        raise EntropySourceError(
            f"entropy source returned {got} of {params.block_size} bytes"
        )
    return bytes(iv)
