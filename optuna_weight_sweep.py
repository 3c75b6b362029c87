#!/usr/bin/env python3
"""
Optuna-based sweep over password_guard scoring weights

This script uses Optuna to search bonuses and penalties in password_guard's
Hyperparameters so that strong samples outrank weak ones as often as possible.
The best set is written out as a YAML file that every tool accepts via --config.

Usage:
    uv run optuna_weight_sweep.py --config sweep_config.yaml
    uv run optuna_weight_sweep.py   # uses defaults / env vars

Dependencies:
    optuna, pandas, numpy, pyyaml
"""

import argparse
import json
import os
import re
import time
from typing import Any, Dict, List, Optional

import numpy as np
import optuna
import pandas as pd
import yaml

from analyze_passwords import load_passwords
from password_guard import (
    HYPERPARAMETERS,
    Hyperparameters,
    analyze,
    hyperparameters_from_dict,
    hyperparameters_to_dict,
)
from verify_calibration import generate_random


# ------------------------------------------------------------------
# Default search space (used when no config file is provided)
# ------------------------------------------------------------------
DEFAULT_PARAMETERS = {
    'class_bonus': [5, 15],
    'unique_high_bonus': [0, 15],
    'common_pattern_penalty': [-40, -10],
    'single_class_penalty': [-30, 0],
    'repeat_penalty': [-20, 0],
    'sequential_penalty': [-20, 0],
}

# Known-weak samples used when no weak wordlist is configured
DEFAULT_WEAK_SAMPLES = [
    "password123", "Password1", "qwerty123", "letmein!", "aaaaaa",
    "111111", "abc123", "iloveyou2", "dragon99", "Summer2024",
    "welcome1", "admin@123", "monkey12", "11111111", "football!",
    "abcdef", "zxcvbnm", "Qwerty!1", "sunshine7", "master00",
]


def load_config(config_path: str) -> Dict[str, Any]:
    """Load sweep configuration from a YAML file."""
    with open(config_path, 'r') as f:
        cfg = yaml.safe_load(f)
    return cfg or {}


def parse_parameter_space(params_dict: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Parse parameter definitions from config into a structured list.

    Each entry in params_dict maps a Hyperparameters field to a range:
        repeat_penalty: [-20, 0]            -> int  (both bounds are int)
        class_bonus: [5, 15, "int"]         -> int  (explicit)
        symbol_pool: [20.0, 40.0, "float"]  -> float (explicit)
    """
    known = set(hyperparameters_to_dict(HYPERPARAMETERS))
    parsed = []
    for name, spec in params_dict.items():
        if name not in known:
            raise ValueError(f"Parameter '{name}' is not a password_guard hyperparameter")
        if not isinstance(spec, list) or len(spec) < 2:
            raise ValueError(f"Parameter '{name}' must be a list of [min, max] or [min, max, type]")
        lo, hi = spec[0], spec[1]
        if lo > hi:
            raise ValueError(f"Parameter '{name}' has min {lo} greater than max {hi}")
        if len(spec) >= 3 and isinstance(spec[2], str):
            ptype = spec[2].lower()
        elif isinstance(lo, int) and isinstance(hi, int):
            ptype = 'int'
        else:
            ptype = 'float'
        if ptype not in ('int', 'float'):
            raise ValueError(f"Parameter '{name}' has unknown type '{ptype}'")
        parsed.append({'name': name, 'low': lo, 'high': hi, 'type': ptype})
    return parsed


def ordering_accuracy(strong_scores: np.ndarray, weak_scores: np.ndarray) -> float:
    """Fraction of (strong, weak) pairs where the strong sample scores strictly higher."""
    if len(strong_scores) == 0 or len(weak_scores) == 0:
        return 0.0
    wins = np.asarray(strong_scores)[:, None] > np.asarray(weak_scores)[None, :]
    return float(wins.mean())


class OptunaWeightSweep:
    """Optuna-based sweep over password_guard hyperparameters"""

    def __init__(self,
                 weak_samples: List[str],
                 strong_samples: List[str],
                 parameter_space: Optional[List[Dict[str, Any]]] = None,
                 base: Hyperparameters = HYPERPARAMETERS,
                 max_trials: int = 100,
                 timeout: Optional[int] = None,
                 n_jobs: int = 1,
                 study_name: str = "password_weight_optimization",
                 storage: Optional[str] = None,
                 seed: Optional[int] = 42,
                 label: str = ""):
        self.weak_samples = list(weak_samples)
        self.strong_samples = list(strong_samples)
        if not self.weak_samples or not self.strong_samples:
            raise ValueError(
                f"Sweep needs at least one weak and one strong sample "
                f"(got {len(self.weak_samples)} weak, {len(self.strong_samples)} strong)"
            )
        self.base = base
        self.max_trials = max_trials
        self.timeout = timeout
        self.n_jobs = n_jobs
        self.study_name = study_name
        self.storage = storage
        self.seed = seed
        self.label = label
        self.parameter_space = parameter_space or parse_parameter_space(DEFAULT_PARAMETERS)

    @property
    def run_suffix(self) -> str:
        """File-name suffix: label > timestamp."""
        if self.label:
            safe = re.sub(r'[^a-zA-Z0-9._-]', '_', self.label)
            safe = re.sub(r'_+', '_', safe).strip('_')
            if safe:
                return safe
        return time.strftime("%Y%m%d_%H%M%S")

    def score_all(self, hyperparameters: Hyperparameters, samples: List[str]) -> np.ndarray:
        return np.array([analyze(p, hyperparameters).score for p in samples], dtype=float)

    # ------------------------------------------------------------------
    # Optuna objective
    # ------------------------------------------------------------------
    def objective(self, trial: optuna.Trial) -> float:
        """Objective function for Optuna optimization."""
        params = {}
        for p in self.parameter_space:
            if p['type'] == 'int':
                params[p['name']] = trial.suggest_int(p['name'], int(p['low']), int(p['high']))
            else:
                params[p['name']] = trial.suggest_float(p['name'], float(p['low']), float(p['high']))

        try:
            hyperparameters = hyperparameters_from_dict(params, self.base)
        except ValueError as e:
            raise optuna.exceptions.TrialPruned(f"Invalid hyperparameters: {e}")

        strong_scores = self.score_all(hyperparameters, self.strong_samples)
        weak_scores = self.score_all(hyperparameters, self.weak_samples)
        accuracy = ordering_accuracy(strong_scores, weak_scores)

        trial.set_user_attr('mean_strong_score', float(strong_scores.mean()))
        trial.set_user_attr('mean_weak_score', float(weak_scores.mean()))
        trial.set_user_attr('score_gap', float(strong_scores.mean() - weak_scores.mean()))
        trial.set_user_attr('weak_max_score', float(weak_scores.max()))

        return accuracy

    # ------------------------------------------------------------------
    # Study runner
    # ------------------------------------------------------------------
    def run_study(self) -> optuna.Study:
        """Run the Optuna optimization study."""
        print(f"Starting Optuna weight sweep")
        print(f"   Weak samples: {len(self.weak_samples)}")
        print(f"   Strong samples: {len(self.strong_samples)}")
        print(f"   Max trials: {self.max_trials}")
        print(f"   Parallel jobs: {self.n_jobs}")
        print(f"   Study name: {self.study_name}")
        print()

        sampler = optuna.samplers.TPESampler(seed=self.seed,
                                             n_startup_trials=min(10, self.max_trials))

        study = optuna.create_study(
            study_name=self.study_name,
            sampler=sampler,
            direction='maximize',
            storage=self.storage,
            load_if_exists=True,
        )

        study.optimize(
            self.objective,
            n_trials=self.max_trials,
            timeout=self.timeout,
            n_jobs=self.n_jobs,
            callbacks=[self._progress_callback],
        )

        return study

    def _progress_callback(self, study: optuna.Study, trial: optuna.trial.FrozenTrial) -> None:
        """Print progress every 5 trials."""
        completed = study.get_trials(deepcopy=False, states=[optuna.trial.TrialState.COMPLETE])
        if not completed:
            return
        if trial.number % 5 == 0:
            pruned = len(study.get_trials(deepcopy=False, states=[optuna.trial.TrialState.PRUNED]))
            print(f"[{trial.number + 1}/{self.max_trials}]  "
                  f"best={study.best_value:.4f}  pruned={pruned}  "
                  f"params={study.best_params}")

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def save_results(self, study: optuna.Study, filename: Optional[str] = None) -> str:
        """Save optimization results to JSON file."""
        if filename is None:
            filename = f"optuna_weight_sweep_results_{self.run_suffix}.json"

        results = []
        for trial in study.trials:
            results.append({
                'trial_number': trial.number,
                'state': trial.state.name,
                'value': trial.value,
                'parameters': trial.params,
                'user_attrs': dict(trial.user_attrs),
                'datetime_start': trial.datetime_start.isoformat() if trial.datetime_start else None,
                'datetime_complete': trial.datetime_complete.isoformat() if trial.datetime_complete else None,
            })

        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(results, f, indent=2, ensure_ascii=False)

        print(f"Results saved to: {filename}")
        return filename

    def analyze_results(self, study: optuna.Study) -> pd.DataFrame:
        """Convert completed trials into a DataFrame for analysis."""
        data = []
        for trial in study.trials:
            if trial.state == optuna.trial.TrialState.COMPLETE:
                data.append({
                    'trial': trial.number,
                    'value': trial.value,
                    **trial.params,
                    'mean_strong_score': trial.user_attrs.get('mean_strong_score', 0.0),
                    'mean_weak_score': trial.user_attrs.get('mean_weak_score', 0.0),
                    'score_gap': trial.user_attrs.get('score_gap', 0.0),
                    'weak_max_score': trial.user_attrs.get('weak_max_score', 0.0),
                })
        return pd.DataFrame(data)

    def generate_summary(self, df: pd.DataFrame) -> Dict[str, Any]:
        """Generate summary statistics from results."""
        if len(df) == 0:
            return {'completed_trials': 0}

        # Ties on accuracy go to the wider score gap
        best_idx = df.sort_values(['value', 'score_gap'], ascending=False).index[0]
        best_params = {}
        for p in self.parameter_space:
            if p['name'] in df.columns:
                cast = int if p['type'] == 'int' else float
                best_params[p['name']] = cast(df.loc[best_idx, p['name']])

        return {
            'completed_trials': len(df),
            'best_accuracy': df['value'].max(),
            'avg_accuracy': df['value'].mean(),
            'best_score_gap': df.loc[best_idx, 'score_gap'],
            'avg_score_gap': df['score_gap'].mean(),
            'avg_mean_weak_score': df['mean_weak_score'].mean(),
            'avg_mean_strong_score': df['mean_strong_score'].mean(),
            'best_parameters': best_params,
        }

    def print_summary(self, summary: Dict[str, Any]) -> None:
        """Print summary statistics."""
        print("=" * 60)
        print("OPTUNA WEIGHT SWEEP SUMMARY")
        print("=" * 60)
        print()

        print("GENERAL:")
        print(f"   Total completed trials: {summary['completed_trials']}")
        print()

        print("ORDERING METRICS:")
        print(f"   Best accuracy:          {summary['best_accuracy']:.4f}")
        print(f"   Avg accuracy:           {summary['avg_accuracy']:.4f}")
        print(f"   Best score gap:         {summary['best_score_gap']:.2f}")
        print(f"   Avg score gap:          {summary['avg_score_gap']:.2f}")
        print(f"   Avg weak mean score:    {summary['avg_mean_weak_score']:.2f}")
        print(f"   Avg strong mean score:  {summary['avg_mean_strong_score']:.2f}")
        print()

        print("BEST PARAMETERS:")
        for param, value in summary['best_parameters'].items():
            if isinstance(value, float):
                print(f"   {param}: {value:.4f}")
            else:
                print(f"   {param}: {value}")
        print()
        print("=" * 60)

    def save_best_config(self, best_params: Dict[str, Any], filename: Optional[str] = None) -> str:
        """Write the best parameters as a password_guard YAML config."""
        if filename is None:
            filename = f"password_guard_tuned_{self.run_suffix}.yaml"

        # Round-trip through the dataclass so the file is known to load
        tuned = hyperparameters_from_dict(best_params, self.base)
        overrides = {k: v for k, v in hyperparameters_to_dict(tuned).items() if k in best_params}

        with open(filename, 'w', encoding='utf-8') as f:
            f.write(f"# Generated by optuna_weight_sweep.py on {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
            yaml.safe_dump({'hyperparameters': overrides}, f, sort_keys=False)

        print(f"Tuned config saved to: {filename}")
        return filename

    def generate_top_results_report(self, study: optuna.Study, df: pd.DataFrame,
                                    top_n: int = 10,
                                    filename: Optional[str] = None) -> str:
        """Write a markdown table of the top N trials and print it.

        Trials are ranked by ordering accuracy, ties broken by score gap.
        """
        if filename is None:
            filename = f"optuna_weight_sweep_top_{self.run_suffix}.md"

        if len(df) == 0:
            with open(filename, 'w', encoding='utf-8') as f:
                f.write("# Sweep Results\n\nNo completed trials.\n")
            return filename

        top = df.sort_values(['value', 'score_gap'], ascending=False).head(top_n)
        param_cols = [p['name'] for p in self.parameter_space if p['name'] in df.columns]

        lines: list[str] = []
        lines.append(f"# Sweep Top {len(top)} Results")
        lines.append("")
        lines.append(f"**Study:** {study.study_name}  ")
        lines.append(f"**Total trials:** {len(df)}  ")
        lines.append(f"**Accuracy range:** {df['value'].min():.4f} -- {df['value'].max():.4f}  ")
        lines.append(f"**Parameters swept:** {', '.join(param_cols)}")
        lines.append("")

        header = "| Rank | Trial | Accuracy | Gap |"
        sep = "|---:|---:|---:|---:|"
        for col in param_cols:
            header += f" {col} |"
            sep += "---:|"
        lines.append(header)
        lines.append(sep)

        for rank, (_, row) in enumerate(top.iterrows(), 1):
            line = f"| {rank} | #{int(row['trial'])} | {row['value']:.4f} | {row['score_gap']:.2f} |"
            for col in param_cols:
                line += f" {row[col]:g} |"
            lines.append(line)
        lines.append("")

        with open(filename, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines))

        print("\n".join(lines))
        print(f"Top results report saved to: {filename}")
        return filename


def main(argv=None):
    """Main function to run the weight sweep."""
    parser = argparse.ArgumentParser(description="Optuna password_guard weight sweep")
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to YAML config file")
    args = parser.parse_args(argv)

    # --- Defaults (overridden by env vars, then by config file) ----------
    max_trials = int(os.environ.get("SWEEP_MAX_TRIALS", "50"))
    n_jobs = 1
    study_name = "password_weight_optimization"
    seed = 42
    label = ""
    top_n = 10
    weak_path = None
    strong_path = None
    random_count = 200
    params_dict = dict(DEFAULT_PARAMETERS)

    # --- Load config file if provided ------------------------------------
    if args.config:
        cfg = load_config(args.config)
        sweep_cfg = cfg.get('sweep', {})
        max_trials = sweep_cfg.get('max_trials', max_trials)
        n_jobs = sweep_cfg.get('n_jobs', n_jobs)
        study_name = sweep_cfg.get('study_name', study_name)
        seed = sweep_cfg.get('seed', seed)
        label = sweep_cfg.get('label', label)
        top_n = sweep_cfg.get('top_n', top_n)

        samples_cfg = cfg.get('samples', {})
        weak_path = samples_cfg.get('weak', weak_path)
        strong_path = samples_cfg.get('strong', strong_path)
        random_count = samples_cfg.get('random_count', random_count)

        if 'parameters' in cfg:
            params_dict = cfg['parameters']

        print(f"Loaded config from: {args.config}")

    parameter_space = parse_parameter_space(params_dict)

    weak_samples = load_passwords(weak_path) if weak_path else list(DEFAULT_WEAK_SAMPLES)
    strong_samples = load_passwords(strong_path) if strong_path else []
    strong_samples += generate_random(random_count, seed if seed is not None else 42)

    print("OPTUNA WEIGHT SWEEP FOR PASSWORD SCORING")
    print("=" * 60)
    print(f"Parameters: {', '.join(p['name'] for p in parameter_space)}")
    print()

    sweep = OptunaWeightSweep(
        weak_samples=weak_samples,
        strong_samples=strong_samples,
        parameter_space=parameter_space,
        max_trials=max_trials,
        n_jobs=n_jobs,
        study_name=study_name,
        seed=seed,
        label=label,
    )

    study = sweep.run_study()

    results_filename = sweep.save_results(study)

    df = sweep.analyze_results(study)
    if len(df) > 0:
        summary = sweep.generate_summary(df)
        sweep.print_summary(summary)

        analyzed_filename = f"optuna_weight_sweep_analyzed_{sweep.run_suffix}.csv"
        df.to_csv(analyzed_filename, index=False)
        print(f"Analyzed results saved to: {analyzed_filename}")

        sweep.save_best_config(summary['best_parameters'])
        sweep.generate_top_results_report(study, df, top_n=top_n)
    else:
        print("No completed trials to analyze.")

    print()
    print(f"Optimization complete!  Results: {results_filename}")


if __name__ == "__main__":
    main()
