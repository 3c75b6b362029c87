"""Tests for the console front end."""
from __future__ import annotations

import json
import math

import pytest

import password_analyzer
from password_analyzer import (
    BAR_LENGTH,
    display_password,
    format_report,
    main,
    run_interactive_mode,
    score_bar,
)
from password_guard import MSG_REPEATS, analyze


def _reader(entries):
    it = iter(entries)

    def read(prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return read


def test_short_password_is_shown_in_full() -> None:
    password = "x" * 20
    assert display_password(password) == password


def test_long_password_is_truncated() -> None:
    password = "abcdefghijklmnopqrstu"
    assert display_password(password) == "abcdefghijklmnopq..."
    assert len(display_password(password)) == 20


@pytest.mark.parametrize("score, filled", [(0, 0), (20, 6), (50, 15), (85, 25), (100, 30)])
def test_score_bar(score, filled) -> None:
    bar = score_bar(score)
    assert len(bar) == BAR_LENGTH
    assert bar.count("█") == filled


def test_report_for_strong_password() -> None:
    password = "Xk9#mQ2$vL7!pR4&"
    lines = format_report(password, analyze(password))
    assert f"Password:     {password}" in lines
    assert f"Entropy:      {16 * math.log2(92):.1f} bits" in lines
    assert f"Score:        [{'█' * 25}{'░' * 5}] 85/100" in lines
    assert "Rating:       🟩 Very Strong" in lines
    assert "✅ Excellent! Your password is very strong." in lines
    assert "💡 Suggestions:" not in lines


def test_report_lists_feedback() -> None:
    lines = format_report("aaaa", analyze("aaaa"))
    assert "Rating:       🔴 Very Weak" in lines
    assert "💡 Suggestions:" in lines
    assert f"   • {MSG_REPEATS}" in lines
    assert "Lowercase:    ✓ Yes" in lines
    assert "Digits:       ✗ No" in lines


def test_main_with_positional_password(capsys) -> None:
    assert main(["abc123"]) == 0
    out = capsys.readouterr().out
    assert "ANALYSIS RESULT" in out
    assert "20/100" in out


def test_main_json_output(capsys) -> None:
    assert main(["--json", "abc123"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["score"] == 20
    assert payload["rating"] == "Very Weak"
    assert "abc123" not in json.dumps(payload)


def test_main_help_exits_cleanly(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    assert "interactive mode" in capsys.readouterr().out


def test_main_with_config(tmp_path, capsys) -> None:
    config = tmp_path / "guard.yaml"
    config.write_text("hyperparameters:\n  repeat_penalty: 0\n", encoding="utf-8")
    assert main(["--config", str(config), "--json", "AAAAbbbb1!"]) == 0
    assert json.loads(capsys.readouterr().out)["score"] == 65


def test_interactive_loop_commands(capsys) -> None:
    read = _reader(["", "   ", "help", "abc123", "QUIT", "never read"])
    assert run_interactive_mode(read_password=read) == 1
    out = capsys.readouterr().out
    assert out.count("No password entered. Try again.") == 2
    assert "=== Password Tips ===" in out
    assert "20/100" in out
    assert out.rstrip().endswith("Goodbye!")


def test_interactive_loop_quits_on_q(capsys) -> None:
    assert run_interactive_mode(read_password=_reader(["q"])) == 0
    assert "Goodbye!" in capsys.readouterr().out


def test_interactive_loop_ends_on_eof(capsys) -> None:
    assert run_interactive_mode(read_password=_reader(["Password1!"])) == 1
    out = capsys.readouterr().out
    assert "45/100" in out
    assert "Goodbye!" in out


def test_main_without_arguments_enters_interactive_mode(monkeypatch, capsys) -> None:
    monkeypatch.setattr(password_analyzer, "getpass", _reader(["quit"]))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "=== Password Strength Analyzer ===" in out
    assert "Goodbye!" in out
