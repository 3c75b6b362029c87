"""Tests for the calibration check and the optuna weight sweep."""
from __future__ import annotations

import json

import numpy as np
import optuna
import pandas as pd
import pytest

from optuna_weight_sweep import (
    DEFAULT_PARAMETERS,
    DEFAULT_WEAK_SAMPLES,
    OptunaWeightSweep,
    ordering_accuracy,
    parse_parameter_space,
)
from password_guard import HYPERPARAMETERS, load_hyperparameters
from verify_calibration import RANDOM_ALPHABET, compare, generate_random, load_weak

optuna.logging.set_verbosity(optuna.logging.WARNING)


# ---------------------------------------------------------------------------
# verify_calibration
# ---------------------------------------------------------------------------

def test_generate_random_is_seeded() -> None:
    first = generate_random(20, seed=7)
    assert first == generate_random(20, seed=7)
    assert first != generate_random(20, seed=8)


def test_generate_random_respects_lengths_and_alphabet() -> None:
    for password in generate_random(50, seed=1, lengths=(8, 12)):
        assert 8 <= len(password) <= 12
        assert set(password) <= set(RANDOM_ALPHABET)


def test_load_weak_includes_denylist(tmp_path) -> None:
    wordlist = tmp_path / "weak.txt"
    wordlist.write_text("hunter2\n", encoding="utf-8")
    weak = load_weak(str(wordlist))
    assert set(HYPERPARAMETERS.common_patterns) <= set(weak)
    assert weak[-1] == "hunter2"


def test_random_passwords_outscore_weak_ones(capsys) -> None:
    weak_m, strong_m = compare(load_weak(), generate_random(100, seed=3))
    assert strong_m['score'] > weak_m['score']
    assert strong_m['estimated_entropy_bits'] > weak_m['estimated_entropy_bits']
    assert "COMPARISON SUMMARY" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# optuna_weight_sweep
# ---------------------------------------------------------------------------

def test_parse_parameter_space_types() -> None:
    parsed = parse_parameter_space({
        'repeat_penalty': [-20, 0],
        'class_bonus': [5, 15, "int"],
        'symbol_pool': [20.0, 40.0],
    })
    assert [p['type'] for p in parsed] == ['int', 'int', 'float']


@pytest.mark.parametrize("params, message", [
    ({'not_a_field': [0, 1]}, "not a password_guard hyperparameter"),
    ({'repeat_penalty': [0]}, "must be a list"),
    ({'repeat_penalty': 5}, "must be a list"),
    ({'repeat_penalty': [0, -5]}, "greater than max"),
    ({'repeat_penalty': [-5, 0, "complex"]}, "unknown type"),
])
def test_parse_parameter_space_rejects(params, message) -> None:
    with pytest.raises(ValueError, match=message):
        parse_parameter_space(params)


def test_default_space_parses() -> None:
    assert len(parse_parameter_space(DEFAULT_PARAMETERS)) == len(DEFAULT_PARAMETERS)


def test_ordering_accuracy() -> None:
    assert ordering_accuracy(np.array([50, 60]), np.array([10, 60])) == 0.5
    assert ordering_accuracy(np.array([90]), np.array([0, 10])) == 1.0
    assert ordering_accuracy(np.array([]), np.array([1])) == 0.0


def test_sweep_runs_and_writes_loadable_config(tmp_path, capsys) -> None:
    sweep = OptunaWeightSweep(
        weak_samples=DEFAULT_WEAK_SAMPLES,
        strong_samples=generate_random(30, seed=5),
        max_trials=4,
        seed=11,
        label="unit test",
    )
    assert sweep.run_suffix == "unit_test"

    study = sweep.run_study()
    assert 0.0 <= study.best_value <= 1.0

    results_file = sweep.save_results(study, str(tmp_path / "results.json"))
    with open(results_file, encoding="utf-8") as f:
        assert len(json.load(f)) == 4

    df = sweep.analyze_results(study)
    assert len(df) == 4
    summary = sweep.generate_summary(df)
    assert set(summary['best_parameters']) == set(DEFAULT_PARAMETERS)
    sweep.print_summary(summary)

    config_file = sweep.save_best_config(summary['best_parameters'], str(tmp_path / "tuned.yaml"))
    tuned = load_hyperparameters(config_file)
    for name, value in summary['best_parameters'].items():
        assert getattr(tuned, name) == value
    assert "OPTUNA WEIGHT SWEEP SUMMARY" in capsys.readouterr().out


def test_default_weights_already_order_samples() -> None:
    sweep = OptunaWeightSweep(DEFAULT_WEAK_SAMPLES, generate_random(50, seed=2))
    strong = sweep.score_all(HYPERPARAMETERS, sweep.strong_samples)
    weak = sweep.score_all(HYPERPARAMETERS, sweep.weak_samples)
    assert ordering_accuracy(strong, weak) > 0.8


@pytest.mark.parametrize("weak, strong", [([], ["Xk9#mQ2$vL7!pR4&"]), (["password"], [])])
def test_sweep_rejects_empty_sample_sets(weak, strong) -> None:
    with pytest.raises(ValueError, match="at least one weak and one strong"):
        OptunaWeightSweep(weak_samples=weak, strong_samples=strong, max_trials=1)


def test_top_results_report_ranks_and_limits(tmp_path, capsys) -> None:
    sweep = OptunaWeightSweep(
        weak_samples=DEFAULT_WEAK_SAMPLES,
        strong_samples=generate_random(20, seed=9),
        max_trials=5,
        seed=4,
    )
    study = sweep.run_study()
    df = sweep.analyze_results(study)

    report = sweep.generate_top_results_report(study, df, top_n=2,
                                               filename=str(tmp_path / "top.md"))
    with open(report, encoding="utf-8") as f:
        text = f.read()
    assert text.startswith("# Sweep Top 2 Results")
    rows = [line for line in text.splitlines() if line.startswith("| ") and line[2].isdigit()]
    assert len(rows) == 2

    best = df.sort_values(['value', 'score_gap'], ascending=False).iloc[0]
    assert rows[0].startswith(f"| 1 | #{int(best['trial'])} | {best['value']:.4f} |")
    assert "Top results report saved to" in capsys.readouterr().out


def test_top_results_report_without_trials(tmp_path) -> None:
    sweep = OptunaWeightSweep(DEFAULT_WEAK_SAMPLES, ["Xk9#mQ2$vL7!pR4&"])
    report = sweep.generate_top_results_report(None, pd.DataFrame(), filename=str(tmp_path / "top.md"))
    with open(report, encoding="utf-8") as f:
        assert "No completed trials." in f.read()
