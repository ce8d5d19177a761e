"""The small file and process utilities: kill, ln, mkdir and rm."""

import os
import signal
import sys

from .fmt import fprintf
from .ulib import atoi

_SIGKILL = getattr(signal, "SIGKILL", signal.SIGTERM)


def kill_main(argv=None):
    """Kill each process whose id is given; unknown ids are ignored."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        fprintf(sys.stderr, "usage: kill pid...\n")
        return 1
    for arg in argv:
        pid = atoi(arg)
        # There is no process with an id below 1; never signal a group.
        if pid <= 0:
            continue
        try:
            os.kill(pid, _SIGKILL)
        except OSError:
            pass
    return 0


def ln_main(argv=None):
    """Create a hard link ``new`` to ``old``."""
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 2:
        fprintf(sys.stderr, "Usage: ln old new\n")
        return 1
    old, new = argv
    try:
        os.link(old, new)
    except OSError:
        fprintf(sys.stderr, "link %s %s: failed\n", old, new)
    return 0


def mkdir_main(argv=None):
    """Create each directory named, stopping at the first failure."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        fprintf(sys.stderr, "Usage: mkdir files...\n")
        return 1
    for name in argv:
        try:
            os.mkdir(name)
        except OSError:
            fprintf(sys.stderr, "mkdir: %s failed to create\n", name)
            break
    return 0


def _unlink(path):
    if os.path.isdir(path) and not os.path.islink(path):
        os.rmdir(path)
    else:
        os.unlink(path)


def rm_main(argv=None):
    """Remove each file or empty directory named, stopping at the first failure."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        fprintf(sys.stderr, "Usage: rm files...\n")
        return 1
    for name in argv:
        try:
            _unlink(name)
        except OSError:
            fprintf(sys.stderr, "rm: %s failed to delete\n", name)
            break
    return 0