"""Small helpers used by the user programs: open modes and string routines."""

import enum
from itertools import zip_longest


class OpenMode(enum.IntFlag):
    """Flags accepted by open()."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200
    TRUNC = 0x400


def atoi(s):
    """Parse an optional leading '-' and the decimal digits that follow.

    Parsing stops at the first non-digit; the result wraps to a 32-bit int.
    """
    sign = 1
    if s.startswith("-"):
        sign, s = -1, s[1:]
    n = 0
    for ch in s:
        if not "0" <= ch <= "9":
            break
        n = n * 10 + ord(ch) - ord("0")
    n = (sign * n) & 0xFFFFFFFF
    return n - (1 << 32) if n & (1 << 31) else n


def _codes(s):
    if isinstance(s, str):
        s = s.encode("latin-1", "replace")
    return bytes(s).split(b"\0", 1)[0]


def strcmp(p, q):
    """Compare two strings bytewise, returning the first difference or 0."""
    for a, b in zip_longest(_codes(p), _codes(q), fillvalue=0):
        if a != b:
            return a - b
    return 0


def gets(stream, max):
    """Read one line from a text stream, keeping at most ``max - 1`` chars.

    The line ends after a '\\n' or '\\r', which is kept; an empty string
    means end of input.
    """
    chars = []
    while len(chars) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        chars.append(c)
        if c in ("\n", "\r"):
            break
    return "".join(chars)