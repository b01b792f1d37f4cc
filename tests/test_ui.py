import io
import sys

import pytest

from rustlings import ui


@pytest.fixture
def plain(monkeypatch):
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)


@pytest.fixture
def forced(monkeypatch):
    monkeypatch.setenv("CLICOLOR_FORCE", "1")


def test_no_emoji_follows_environment(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert ui.no_emoji() is False
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.no_emoji() is True


def test_styles_are_plain_without_terminal(plain):
    for style in (ui.red, ui.green, ui.blue, ui.bold):
        assert style("text") == "text"


def test_styles_wrap_text_when_forced(forced):
    styled = {style("text") for style in (ui.red, ui.green, ui.blue, ui.bold)}
    assert len(styled) == 4
    for value in styled:
        assert "text" in value
        assert value.startswith("\x1b[")
        assert value.endswith("\x1b[0m")


def test_clicolor_zero_disables(monkeypatch):
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)
    monkeypatch.setenv("CLICOLOR", "0")
    assert ui.red(42) == "42"


def test_emoji_fallback_on_ascii_output(monkeypatch):
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(io.BytesIO(), encoding="ascii"))
    assert ui.emoji("✅", "✓") == "✓"


def test_emoji_symbol_on_utf8_output(monkeypatch):
    monkeypatch.setattr(sys, "stdout", io.TextIOWrapper(io.BytesIO(), encoding="utf-8"))
    assert ui.emoji("✅", "✓") == "✅"


def test_warn_without_emoji(plain, monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran thing with errors")
    assert capsys.readouterr().out == "! Ran thing with errors\n"


def test_success_without_emoji(plain, monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran thing")
    assert capsys.readouterr().out == "✓ Successfully ran thing\n"


def test_success_with_emoji_contains_message(plain, monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.success("done")
    out = capsys.readouterr().out
    assert out.endswith(" done\n")
    assert out.split(" ")[0] in {"✅", "✓"}