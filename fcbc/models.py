from dataclasses import dataclass
from enum import Enum

# -----------------------------
# CLI Colors
# -----------------------------
class bcolors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    GREY = '\033[90m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'

# -----------------------------
# Core Parameters
# -----------------------------
@dataclass(frozen=True)
class CipherParams:
    """
    Core parameters for the chained Feistel block cipher.

    The construction is a balanced Feistel network over small blocks:
    - Each block is split into a left and right half of block_size // 2 bytes
    - Every round consumes one half-block worth of key bytes
    - The key is exactly half * rounds bytes long, indexed directly per round

    Both values must be even. An even round count leaves the halves in their
    original positions, which keeps a truncated final block recoverable.
    """
    block_size: int = 8  # Bytes per block
    rounds: int = 16     # Feistel rounds per block

    def __post_init__(self):
        if self.block_size < 2 or self.block_size % 2:
            raise ValueError(f"block_size must be a positive even number, got {self.block_size}")
        if self.rounds < 2 or self.rounds % 2:
            raise ValueError(f"rounds must be a positive even number, got {self.rounds}")

    @property
    def half(self) -> int:
        return self.block_size // 2

    @property
    def key_length(self) -> int:
        return self.half * self.rounds


class Direction(Enum):
    """Which way a stream is pushed through the cipher."""
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"

# -----------------------------
# Errors
# -----------------------------
class CipherError(Exception):
    """
    Base class for failures of a stream operation.

    Every failure is fatal for the current stream. bytes_processed is the
    best-effort count of plaintext bytes handled before the failure and is
    only meant for diagnostics.
    """
    def __init__(self, message: str, bytes_processed: int = 0):
        super().__init__(message)
        self.bytes_processed = bytes_processed


class KeyLengthError(CipherError, ValueError):
    """Key is not exactly CipherParams.key_length bytes long."""


class EntropySourceError(CipherError):
    """The random source could not supply a full IV block."""


class StreamIOError(CipherError, OSError):
    """A read or write on the data streams did not complete as expected."""
