"""Parser for the shell's command language: words, < > >>, |, ;, & and ( )."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .ulib import OpenMode

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ShellSyntaxError(ValueError):
    """The command line could not be parsed."""

    def __init__(self, message, leftovers=None):
        super().__init__(message if leftovers is None else f"{message}: leftovers: {leftovers}")
        self.leftovers = leftovers


@dataclass
class ExecCmd:
    """Run a program with arguments."""

    argv: List[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` reopened on ``file``."""

    cmd: "Command"
    file: str
    mode: OpenMode
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class ListCmd:
    """Run ``left`` to completion, then ``right``."""

    left: "Command"
    right: "Command"


@dataclass
class BackCmd:
    """Run ``cmd`` in the background."""

    cmd: "Command"


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


class _Parser:
    def __init__(self, s):
        self.s = s
        self.pos = 0
        self.end = len(s)

    def _char(self):
        return self.s[self.pos] if self.pos < self.end else ""

    def _skip(self):
        while self.pos < self.end and self.s[self.pos] in WHITESPACE:
            self.pos += 1

    def peek(self, toks):
        self._skip()
        c = self._char()
        return bool(c) and c in toks

    def gettoken(self):
        """Return (kind, text); kind is '' at the end, 'a' for a word, '+' for >>."""
        self._skip()
        start = self.pos
        c = self._char()
        if not c:
            kind = ""
        elif c in "|();&<":
            kind = c
            self.pos += 1
        elif c == ">":
            self.pos += 1
            kind = ">"
            if self._char() == ">":
                kind = "+"
                self.pos += 1
        else:
            kind = "a"
            while (self.pos < self.end and self.s[self.pos] not in WHITESPACE
                   and self.s[self.pos] not in SYMBOLS):
                self.pos += 1
        text = self.s[start:self.pos]
        self._skip()
        return kind, text

    def parse_line(self):
        cmd = self.parse_pipe()
        while self.peek("&"):
            self.gettoken()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.gettoken()
            cmd = ListCmd(cmd, self.parse_line())
        return cmd

    def parse_pipe(self):
        cmd = self.parse_exec()
        if self.peek("|"):
            self.gettoken()
            cmd = PipeCmd(cmd, self.parse_pipe())
        return cmd

    def parse_redirs(self, cmd):
        while self.peek("<>"):
            kind, _ = self.gettoken()
            word_kind, file = self.gettoken()
            if word_kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if kind == "<":
                cmd = RedirCmd(cmd, file, OpenMode.RDONLY, 0)
            elif kind == ">":
                cmd = RedirCmd(cmd, file, OpenMode.WRONLY | OpenMode.CREATE | OpenMode.TRUNC, 1)
            else:
                cmd = RedirCmd(cmd, file, OpenMode.WRONLY | OpenMode.CREATE, 1)
        return cmd

    def parse_block(self):
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.gettoken()
        cmd = self.parse_line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.gettoken()
        return self.parse_redirs(cmd)

    def parse_exec(self):
        if self.peek("("):
            return self.parse_block()
        exec_cmd = ExecCmd()
        ret = self.parse_redirs(exec_cmd)
        while not self.peek("|)&;"):
            kind, word = self.gettoken()
            if not kind:
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            exec_cmd.argv.append(word)
            if len(exec_cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.parse_redirs(ret)
        return ret


def parse_cmd(s) -> Optional[Command]:
    """Parse a whole command line into a command tree."""
    s = s.split("\0", 1)[0]
    parser = _Parser(s)
    cmd = parser.parse_line()
    parser.peek("")
    if parser.pos != parser.end:
        raise ShellSyntaxError("syntax", leftovers=s[parser.pos:])
    return cmd