import io

import pytest

from tinyunix.grep import grep, main, match


@pytest.mark.parametrize(
    "pattern, text, expected",
    [
        ("abc", "xxabcxx", True),
        ("abc", "xxabxx", False),
        ("^ab", "abc", True),
        ("^ab", "cab", False),
        ("bc$", "abc", True),
        ("bc$", "abcd", False),
        ("a.c", "zabcz", True),
        ("a.c", "ac", False),
        ("ab*c", "ac", True),
        ("ab*c", "abbbbc", True),
        ("ab*c", "abxc", False),
        ("^.*$", "", True),
        ("", "anything", True),
        ("x*", "", True),
        ("^a.*z$", "abcz", True),
        ("^a.*z$", "abczq", False),
    ],
)
def test_match(pattern, text, expected):
    assert match(pattern, text) is expected


def test_grep_prints_matching_lines():
    out = io.StringIO()
    grep("o", io.StringIO("one\ntwo\nthree\nfour\n"), out)
    assert out.getvalue() == "one\ntwo\nfour\n"


def test_grep_drops_unterminated_last_line():
    out = io.StringIO()
    grep("a", io.StringIO("a1\na2"), out)
    assert out.getvalue() == "a1\n"


def test_grep_lines_spanning_reads():
    text = "".join(f"line{i}\n" for i in range(500))
    out = io.StringIO()
    grep("^line4.*9$", io.StringIO(text), out)
    lines = out.getvalue().splitlines()
    assert lines == [f"line{i}" for i in range(500) if str(i).startswith("4") and str(i).endswith("9")]


def test_grep_every_output_line_matches():
    text = "abc\nxyz\naxc\nab\n"
    out = io.StringIO()
    grep("a.c", io.StringIO(text), out)
    for line in out.getvalue().splitlines():
        assert match("a.c", line)
    assert out.getvalue().count("\n") == 2


def test_main_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().err == "usage: grep pattern [file ...]\n"


def test_main_files(tmp_path, capsys):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("cat\ndog\n")
    second.write_text("cow\nbird\n")
    assert main(["^c", str(first), str(second)]) == 0
    assert capsys.readouterr().out == "cat\ncow\n"


def test_main_missing_file(tmp_path, capsys):
    missing = str(tmp_path / "nope")
    assert main(["x", missing]) == 1
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"