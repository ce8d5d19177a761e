"""The small file utilities: cat, echo, wc and ls."""

import enum
import os
import stat as _stat
import sys
from dataclasses import dataclass

from .fmt import format, fprintf

DIRSIZ = 14
_BUFSIZE = 512
_WC_SPACE = " \r\t\n\v\0"


class FileType(enum.IntEnum):
    """Kinds of file reported by ls."""

    DIR = 1
    FILE = 2
    DEVICE = 3


@dataclass(frozen=True)
class WordCount:
    """Line, word and character totals of a stream."""

    lines: int
    words: int
    chars: int


def cat(stream, out):
    """Copy ``stream`` to ``out``."""
    while chunk := stream.read(_BUFSIZE):
        out.write(chunk)


def echo(args, out):
    """Write the arguments separated by spaces and ended by a newline."""
    if args:
        out.write(" ".join(args) + "\n")


def wc(stream):
    """Count lines, words and characters of ``stream``."""
    lines = words = chars = 0
    inword = False
    while chunk := stream.read(_BUFSIZE):
        for c in chunk:
            chars += 1
            if c == "\n":
                lines += 1
            if c in _WC_SPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return WordCount(lines, words, chars)


def fmtname(path):
    """Last component of ``path``, blank-padded to DIRSIZ characters."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _file_type(st):
    if _stat.S_ISDIR(st.st_mode):
        return FileType.DIR
    if _stat.S_ISREG(st.st_mode):
        return FileType.FILE
    if _stat.S_ISCHR(st.st_mode) or _stat.S_ISBLK(st.st_mode):
        return FileType.DEVICE
    return None


def ls(path, out):
    """List a file, or each entry of a directory, to ``out``."""
    try:
        st = os.stat(path)
        kind = _file_type(st)
        names = os.listdir(path) if kind is FileType.DIR else []
    except OSError:
        fprintf(sys.stderr, "ls: cannot open %s\n", path)
        return
    if kind in (FileType.FILE, FileType.DEVICE):
        fprintf(out, "%s %d %d %l\n", fmtname(path), int(kind), st.st_ino, st.st_size)
        return
    if kind is not FileType.DIR:
        return
    if len(path) + 1 + DIRSIZ + 1 > _BUFSIZE:
        out.write("ls: path too long\n")
        return
    for name in [".", ".."] + sorted(names):
        full = f"{path}/{name}"
        try:
            entry = os.stat(full)
        except OSError:
            fprintf(out, "ls: cannot stat %s\n", full)
            continue
        entry_kind = _file_type(entry)
        out.write(format("%s %d %d %d\n", fmtname(full),
                         int(entry_kind) if entry_kind is not None else 0,
                         entry.st_ino, entry.st_size))


def _open(path):
    return open(path, encoding="latin-1", newline="")


def cat_main(argv=None):
    """Concatenate the named files, or standard input, to standard output."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        cat(sys.stdin, sys.stdout)
        return 0
    for name in argv:
        try:
            stream = _open(name)
        except OSError:
            fprintf(sys.stderr, "cat: cannot open %s\n", name)
            return 1
        with stream:
            cat(stream, sys.stdout)
    return 0


def echo_main(argv=None):
    """Print the arguments."""
    if argv is None:
        argv = sys.argv[1:]
    echo(argv, sys.stdout)
    return 0


def _print_count(count, name):
    fprintf(sys.stdout, "%d %d %d %s\n", count.lines, count.words, count.chars, name)


def wc_main(argv=None):
    """Print line, word and character counts of each file or of standard input."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        _print_count(wc(sys.stdin), "")
        return 0
    for name in argv:
        try:
            stream = _open(name)
        except OSError:
            fprintf(sys.stdout, "wc: cannot open %s\n", name)
            return 1
        with stream:
            _print_count(wc(stream), name)
    return 0


def ls_main(argv=None):
    """List each path given, or the current directory."""
    if argv is None:
        argv = sys.argv[1:]
    for path in argv or ["."]:
        ls(path, sys.stdout)
    return 0