"""
FCBC - Feistel Chained Block Cipher

Cryptographic Principles Documented:
Block Cipher Construction:

Balanced Feistel network over 8-byte blocks split into two 4-byte halves
16 rounds, each consuming 4 bytes of a 64-byte key (no key expansion)
Round function F(R, K) = K, so decryption is the same network run backwards

Mode of Operation:

Cipher block chaining: every plaintext block is XORed with the previous
ciphertext block before encryption
A random IV, itself encrypted, is the first block of every ciphertext
The final partial block is zero-padded and truncated back, so ciphertext is
exactly 8 bytes longer than the plaintext

Stream Processing:

Data is read and written block by block, so input size is unbounded
Fixed scratch buffers are rotated between blocks instead of reallocated

This implementation is for educational purposes and is not cryptographically secure.
The round function provides no confusion at all and nothing is authenticated.
"""
from fcbc.models import (
    CipherParams, Direction, CipherError, KeyLengthError, EntropySourceError, StreamIOError, bcolors
)

from fcbc.utils.keygen import (
    RoundKey, generate_iv
)

from fcbc.utils.encryption import (
    round_function, encrypt_block, decrypt_block, bytes_to_block, ChainEngine
)

from fcbc.core import (
    transform_stream, encrypt_stream, decrypt_stream, encrypt_bytes, decrypt_bytes, debug_hook
)
