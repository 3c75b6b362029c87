"""Tests for batch wordlist analysis."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from analyze_passwords import (
    analyze_passwords,
    generate_summary_statistics,
    load_passwords,
    main,
    plot_length_analysis,
    plot_rule_frequency,
    plot_score_distributions,
    rule_hit_frequency,
)

WORDLIST = ["abc123", "Password1!", "Xk9#mQ2$vL7!pR4&", "aaaa", "AAAAbbbb1!", "hunter2!"]


def test_load_text_wordlist(tmp_path) -> None:
    path = tmp_path / "words.txt"
    path.write_bytes(b"abc123\r\n\r\n  spaced  \nlast")
    assert load_passwords(str(path)) == ["abc123", "  spaced  ", "last"]


def test_load_json_wordlist(tmp_path) -> None:
    path = tmp_path / "words.json"
    path.write_text(json.dumps(["one", None, "two"]), encoding="utf-8")
    assert load_passwords(str(path)) == ["one", "two"]


def test_load_json_requires_list(tmp_path) -> None:
    path = tmp_path / "words.json"
    path.write_text(json.dumps({"not": "a list"}), encoding="utf-8")
    with pytest.raises(ValueError, match="JSON list"):
        load_passwords(str(path))


def test_frame_has_one_row_per_sample_and_no_passwords() -> None:
    df = analyze_passwords(WORDLIST)
    assert list(df['sample_id']) == list(range(len(WORDLIST)))
    assert 'password' not in df.columns
    assert list(df['score']) == [20, 45, 85, 0, 55, 50]
    assert list(df['rating']) == ["Very Weak", "Weak", "Very Strong", "Very Weak", "Fair", "Fair"]


def test_frame_rule_columns() -> None:
    df = analyze_passwords(WORDLIST)
    assert bool(df.loc[0, 'rule_sequential'])
    assert bool(df.loc[1, 'rule_common_pattern'])
    assert bool(df.loc[3, 'rule_repetition'])
    assert not df.loc[2, [c for c in df.columns if c.startswith('rule_')]].any()
    assert 'rule_uniqueness' not in df.columns


def test_invalid_entries_are_skipped(capsys) -> None:
    df = analyze_passwords(["abc123", None, "aaaa"])
    assert list(df['sample_id']) == [0, 2]
    assert "Skipping sample 1" in capsys.readouterr().out


def test_include_passwords_is_opt_in() -> None:
    df = analyze_passwords(["abc123"], include_passwords=True)
    assert list(df['password']) == ["abc123"]


def test_rule_hit_frequency() -> None:
    freq = rule_hit_frequency(analyze_passwords(WORDLIST))
    hits = dict(zip(freq['rule'], freq['hits']))
    assert hits['common_pattern'] == 1
    assert hits['repetition'] == 2
    assert hits['sequential'] == 1
    assert freq['hits'].is_monotonic_decreasing


def test_summary_statistics(capsys) -> None:
    stats = generate_summary_statistics(analyze_passwords(WORDLIST))
    assert stats['total_samples'] == len(WORDLIST)
    assert stats['min_score'] == 0
    assert stats['max_score'] == 85
    assert list(stats['rating_counts']) == ["Very Weak", "Weak", "Fair", "Strong", "Very Strong"]
    assert stats['rating_counts']["Very Weak"] == 2
    assert stats['rating_counts']["Strong"] == 0
    assert "SUMMARY STATISTICS" in capsys.readouterr().out


def test_summary_of_empty_frame() -> None:
    assert generate_summary_statistics(analyze_passwords([])) == {'total_samples': 0}


def test_plots_are_written(tmp_path) -> None:
    df = analyze_passwords(WORDLIST)
    files = [
        plot_score_distributions(df, str(tmp_path)),
        plot_rule_frequency(rule_hit_frequency(df), str(tmp_path)),
        plot_length_analysis(df, str(tmp_path)),
    ]
    for filename in files:
        assert Path(filename).stat().st_size > 0


def test_main_writes_csv(tmp_path, capsys) -> None:
    wordlist = tmp_path / "words.txt"
    wordlist.write_text("\n".join(WORDLIST), encoding="utf-8")
    out_dir = tmp_path / "out"

    assert main([str(wordlist), "--output-dir", str(out_dir), "--no-plots"]) == 0

    csv_files = list(out_dir.glob("password_analysis_*.csv"))
    assert len(csv_files) == 1
    assert "hunter2!" not in csv_files[0].read_text(encoding="utf-8")
    assert "Analysis complete!" in capsys.readouterr().out


def test_main_reports_missing_file(tmp_path, capsys) -> None:
    assert main([str(tmp_path / "missing.txt")]) == 1
    assert "Could not load" in capsys.readouterr().out
