import numpy as np
from typing import Optional

from fcbc.models import (CipherParams, Direction)
from fcbc.utils.keygen import (RoundKey)

# -----------------------------
# Round Function
# -----------------------------
def round_function(half: np.ndarray, key_bytes: np.ndarray) -> np.ndarray:
    """
    Feistel round function F(R, K).

    Returns the key bytes unchanged and ignores the half-block entirely.
    This is deliberately weak: ciphertext produced by other implementations
    of the cipher only decrypts if F is exactly this.

    Args:
        half: Half-block bytes the round is mixing (unused)
        key_bytes: Round key bytes for this round

    Returns:
        Bytes to XOR into the other half
    """
    return key_bytes

# -----------------------------
# Block Transform
# -----------------------------
def encrypt_block(block: np.ndarray, key: RoundKey, scratch: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Encrypt one block in place with the Feistel network.

    Each round r, per byte i of the half-blocks:
        t = R[i]; R[i] = L[i] ^ F(R[i], K[r*h + i]); L[i] = t

    The half swap is folded into the assignment, so there is no separate
    swap step. The bytes of a half are independent within a round, so the
    whole half is updated at once.

    Args:
        block: uint8 array of block_size bytes, modified in place
        key: Round key schedule
        scratch: Optional uint8 buffer of half bytes to avoid allocation

    Returns:
        The same block, for chaining convenience
    """
    h = key.params.half
    left, right = block[:h], block[h:]
    t = scratch if scratch is not None else np.empty(h, dtype=np.uint8)
    for r in range(key.params.rounds):
        np.copyto(t, right)
        np.bitwise_xor(left, round_function(right, key.round_key(r)), out=right)
        np.copyto(left, t)
    return block


def decrypt_block(block: np.ndarray, key: RoundKey, scratch: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Decrypt one block in place; exact inverse of encrypt_block.

    Round keys are consumed from the last round back to the first, and the
    half update is mirrored:
        t = L[i]; L[i] = R[i] ^ F(L[i], K[r*h + i]); R[i] = t
    """
    h = key.params.half
    left, right = block[:h], block[h:]
    t = scratch if scratch is not None else np.empty(h, dtype=np.uint8)
    for r in reversed(range(key.params.rounds)):
        np.copyto(t, left)
        np.bitwise_xor(right, round_function(left, key.round_key(r)), out=left)
        np.copyto(right, t)
    return block

# -----------------------------
# Block Helpers
# -----------------------------
def bytes_to_block(b: bytes, params: CipherParams = CipherParams(),
                   out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Copy bytes into a block buffer, zero-padding short input.

    Args:
        b: Up to block_size bytes
        params: Cipher parameters
        out: Existing block_size buffer to fill instead of allocating one

    Returns:
        Writable uint8 array of block_size bytes (out, when given)
    """
    if len(b) > params.block_size:
        raise ValueError(f"{len(b)} bytes do not fit a {params.block_size}-byte block")
    block = out if out is not None else np.empty(params.block_size, dtype=np.uint8)
    block[:len(b)] = np.frombuffer(b, dtype=np.uint8)
    block[len(b):] = 0
    return block

# -----------------------------
# Chaining Engine
# -----------------------------
class ChainEngine:
    """
    Cipher block chaining over the Feistel transform.

    Encrypt: C[0] = E(IV), C[i] = E(P[i] ^ C[i-1])
    Decrypt: P[i] = D(C[i]) ^ C[i-1], with C[0] read but never emitted

    The final partial block is zero-padded, XORed with the chain state and
    transformed in both directions, and only its original length is
    emitted. On the decrypt side this means XOR before the inverse
    transform, the reverse of the order used for full blocks. With F being
    the identity of the key byte both orders give the same bytes; keep the
    tail order as is when touching this code.

    All block buffers are allocated once and rotated between blocks.

    Args:
        key: Round key schedule
        direction: Direction.ENCRYPT or Direction.DECRYPT
    """

    def __init__(self, key: RoundKey, direction: Direction):
        self.key = key
        self.direction = direction
        self.params = key.params
        self._buf = np.zeros((3, self.params.block_size), dtype=np.uint8)
        self._prev, self._cur, self._work = self._buf[0], self._buf[1], self._buf[2]
        self._scratch = np.empty(self.params.half, dtype=np.uint8)
        self._seeded = False
        self._finished = False

    def _transform(self, block: np.ndarray) -> np.ndarray:
        if self.direction is Direction.ENCRYPT:
            return encrypt_block(block, self.key, self._scratch)
        return decrypt_block(block, self.key, self._scratch)

    def _check_ready(self):
        if not self._seeded:
            raise RuntimeError("chain has not been seeded with an IV")
        if self._finished:
            raise RuntimeError("chain already finished with a partial block")

    def seed(self, iv: bytes) -> bytes:
        """
        Start the chain.

        Encrypting, iv is the plaintext IV: it is transformed and returned
        for emission unchained. Decrypting, iv is the encrypted IV read from
        the stream: it only becomes the chain state and nothing is returned.
        """
        if self._seeded:
            raise RuntimeError("chain already seeded")
        if len(iv) != self.params.block_size:
            raise ValueError(f"IV must be {self.params.block_size} bytes, got {len(iv)}")
        self._prev[:] = np.frombuffer(iv, dtype=np.uint8)
        self._seeded = True
        if self.direction is Direction.ENCRYPT:
            return encrypt_block(self._prev, self.key, self._scratch).tobytes()
        return b""

    def process(self, chunk: bytes) -> bytes:
        """Transform one full block and advance the chain."""
        self._check_ready()
        if len(chunk) != self.params.block_size:
            raise ValueError(f"full block must be {self.params.block_size} bytes, got {len(chunk)}")
        self._cur[:] = np.frombuffer(chunk, dtype=np.uint8)
        if self.direction is Direction.ENCRYPT:
            np.bitwise_xor(self._cur, self._prev, out=self._cur)
            out = encrypt_block(self._cur, self.key, self._scratch).tobytes()
        else:
            np.copyto(self._work, self._cur)
            decrypt_block(self._work, self.key, self._scratch)
            np.bitwise_xor(self._work, self._prev, out=self._work)
            out = self._work.tobytes()
        # The block just emitted (encrypt) or just read (decrypt) is the new chain state
        self._prev, self._cur = self._cur, self._prev
        return out

    def finish(self, tail: bytes) -> bytes:
        """Transform the final partial block; the chain is closed afterwards."""
        self._check_ready()
        n = len(tail)
        if not 0 < n < self.params.block_size:
            raise ValueError(f"partial block must be 1..{self.params.block_size - 1} bytes, got {n}")
        bytes_to_block(tail, self.params, out=self._cur)
        np.bitwise_xor(self._cur, self._prev, out=self._cur)
        self._transform(self._cur)
        self._finished = True
        return self._cur[:n].tobytes()
