import os
import sys
import argparse
from typing import BinaryIO, List, Optional, Tuple

from fcbc.models import (CipherParams, Direction, CipherError, KeyLengthError, bcolors)
from fcbc.utils.keygen import (RoundKey)
from fcbc.core import (transform_stream, debug_hook)

TRUTHY = ("1", "true", "yes", "on")


def debug_enabled() -> bool:
    """FCBC_DEBUG turns on DEBUG progress lines on stderr."""
    return os.getenv("FCBC_DEBUG", "").strip().lower() in TRUTHY


def build_parser() -> argparse.ArgumentParser:
    """Parser used for the usage and help text only; see parse_args."""
    key_length = CipherParams().key_length
    parser = argparse.ArgumentParser(
        prog="fcbc",
        usage="%(prog)s [-d] <key>",
        description="A chained block feistel cipher. Reads stdin, writes stdout.",
    )
    parser.add_argument("-d", dest="decrypt", action="store_true",
                        help="(OPTIONAL) If set, decrypts input.")
    parser.add_argument("key", nargs="?", default="",
                        help=f"A {key_length} byte/character encryption key.")
    return parser


def parse_args(argv: List[str]) -> Tuple[bool, str]:
    """
    Split argv into (decrypt, key).

    Leading tokens starting with '-' are flags; any flag whose second
    character is 'd' selects decryption and other flags are ignored. The
    scan stops at the first token not starting with '-', which is the key.
    When every token is a flag, the last one is the key, so keys that begin
    with '-' work as long as they come last.
    """
    decrypt, key = False, ""
    for arg in argv:
        key = arg
        if not arg.startswith("-"):
            break
        if arg[1:2] == "d":
            decrypt = True
    return decrypt, key


def main(argv: Optional[List[str]] = None, stdin: Optional[BinaryIO] = None,
         stdout: Optional[BinaryIO] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not 1 <= len(argv) <= 2:
        build_parser().print_help(sys.stdout)
        return 0

    decrypt, raw_key = parse_args(argv)
    direction = Direction.DECRYPT if decrypt else Direction.ENCRYPT
    hook = debug_hook if debug_enabled() else None

    try:
        key = RoundKey(raw_key)
        if hook:
            hook(f"-d = {int(decrypt)}, key = {len(key)} bytes")
        n = transform_stream(
            stdin if stdin is not None else sys.stdin.buffer,
            stdout if stdout is not None else sys.stdout.buffer,
            key,
            direction,
            hook=hook,
        )
    except KeyLengthError as e:
        print(f"{bcolors.FAIL}ERROR:{bcolors.ENDC} {e}", file=sys.stderr)
        return 1
    except CipherError as e:
        print(f"{bcolors.FAIL}ERROR:{bcolors.ENDC} Procedure failure. Check permissions! "
              f"({e}; {e.bytes_processed} bytes processed)", file=sys.stderr)
        return 1

    print(f"{bcolors.OKGREEN}{n} bytes processed.{bcolors.ENDC}", file=sys.stderr)
    return 0

if __name__ == "__main__":
    sys.exit(main())
