from __future__ import annotations

import pytest

from cliplaunch.tokens import join_for_display, shell_quote, tokenize


def test_tokenize_keeps_quoted_spans():
    assert tokenize('--filename "my file" --x') == ["--filename", "my file", "--x"]


@pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
def test_tokenize_blank(raw):
    assert tokenize(raw) == []


def test_tokenize_collapses_whitespace():
    assert tokenize("  --a   b\t--c ") == ["--a", "b", "--c"]


def test_tokenize_quote_inside_token_is_kept():
    assert tokenize('--name="a b"') == ['--name="a b']


def test_tokenize_empty_quotes():
    assert tokenize('--x ""') == ["--x", ""]


def test_quote_leaves_safe_tokens():
    assert shell_quote("abc-1.png") == "abc-1.png"
    assert shell_quote("/tmp/out_dir/x") == "/tmp/out_dir/x"


def test_quote_wraps_unsafe_tokens():
    assert shell_quote("hello world") == '"hello world"'
    assert shell_quote('say "hi"') == '"say \\"hi\\""'
    assert shell_quote("") == '""'


def test_join_for_display():
    assert join_for_display("clipaste", ["copy", "hello world"]) == 'clipaste copy "hello world"'


@pytest.mark.parametrize("token", ["abc\n", "hello\n", "a\tb", "x;y"])
def test_quote_wraps_control_and_shell_characters(token):
    assert shell_quote(token) == f'"{token}"'
