"""A small grep that understands only the ^ . * $ operators."""

import sys

from .fmt import fprintf

_BUFSIZE = 1024


def match(re, text):
    """Return True if the pattern ``re`` matches anywhere in ``text``."""
    if re.startswith("^"):
        return _matchhere(re, 1, text, 0)
    return any(_matchhere(re, 0, text, start) for start in range(len(text) + 1))


def _matchhere(re, ri, text, ti):
    if ri == len(re):
        return True
    if ri + 1 < len(re) and re[ri + 1] == "*":
        return _matchstar(re[ri], re, ri + 2, text, ti)
    if re[ri] == "$" and ri + 1 == len(re):
        return ti == len(text)
    if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
        return _matchhere(re, ri + 1, text, ti + 1)
    return False


def _matchstar(c, re, ri, text, ti):
    while True:
        if _matchhere(re, ri, text, ti):
            return True
        if ti >= len(text) or not (text[ti] == c or c == "."):
            return False
        ti += 1


def grep(pattern, stream, out):
    """Write every newline-terminated line of ``stream`` that matches.

    Input is consumed through a fixed-size buffer, so a trailing line with
    no newline is never printed and a line that fills the whole buffer
    ends the search.
    """
    pending = ""
    while True:
        room = _BUFSIZE - 1 - len(pending)
        if room <= 0:
            break
        chunk = stream.read(room)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")


def _open(path):
    return open(path, encoding="latin-1", newline="")


def main(argv=None):
    """Run grep on the given arguments and return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        fprintf(sys.stderr, "usage: grep pattern [file ...]\n")
        return 1
    pattern, files = argv[0], argv[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in files:
        try:
            stream = _open(name)
        except OSError:
            fprintf(sys.stdout, "grep: cannot open %s\n", name)
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0