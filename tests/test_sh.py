import pytest

from tinyunix.sh import (
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse_cmd,
)
from tinyunix.ulib import OpenMode


def test_simple_exec():
    assert parse_cmd("echo hi there\n") == ExecCmd(["echo", "hi", "there"])


def test_empty_line():
    assert parse_cmd("\n") == ExecCmd([])


def test_redirections_nest_in_order():
    cmd = parse_cmd("cat < in > out")
    inner = RedirCmd(ExecCmd(["cat"]), "in", OpenMode.RDONLY, 0)
    assert cmd == RedirCmd(inner, "out", OpenMode.WRONLY | OpenMode.CREATE | OpenMode.TRUNC, 1)


def test_append_redirection():
    cmd = parse_cmd("echo x >> log")
    assert cmd == RedirCmd(ExecCmd(["echo", "x"]), "log", OpenMode.WRONLY | OpenMode.CREATE, 1)


def test_redirection_without_spaces():
    cmd = parse_cmd("ls>f")
    assert cmd.file == "f"
    assert cmd.cmd == ExecCmd(["ls"])


def test_pipe_is_right_associative():
    cmd = parse_cmd("a | b | c")
    assert cmd == PipeCmd(ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"])))


def test_list_and_background():
    cmd = parse_cmd("a & ; b")
    assert cmd == ListCmd(BackCmd(ExecCmd(["a"])), ExecCmd(["b"]))


def test_double_background():
    assert parse_cmd("a & &") == BackCmd(BackCmd(ExecCmd(["a"])))


def test_block_with_redirect():
    cmd = parse_cmd("(a ; b) > f")
    assert isinstance(cmd, RedirCmd)
    assert cmd.cmd == ListCmd(ExecCmd(["a"]), ExecCmd(["b"]))
    assert cmd.fd == 1


def test_missing_redirect_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_cmd("echo >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse_cmd("(a ; b")


def test_leftovers():
    with pytest.raises(ShellSyntaxError) as info:
        parse_cmd("a ) b")
    assert info.value.leftovers == ") b"


def test_paren_inside_words_is_syntax_error():
    with pytest.raises(ShellSyntaxError, match="syntax"):
        parse_cmd("a ( b")


def test_argument_limit():
    words = [f"w{i}" for i in range(9)]
    assert parse_cmd(" ".join(words)).argv == words
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_cmd(" ".join(words + ["extra"]))


def test_nul_ends_line():
    assert parse_cmd("ls\0 | wc") == ExecCmd(["ls"])