#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Batch analysis of a password wordlist

Scores every entry with password_guard, then prints summary statistics,
rule hit frequencies, writes plots and a CSV of the per-sample metrics.
Raw passwords are left out of every output unless --include-passwords is given.

Usage with UV:
    uv run analyze_passwords.py wordlist.txt
    uv run analyze_passwords.py leaked.json --config password_guard.yaml --no-plots

Dependencies (automatically handled by UV):
    pandas
    matplotlib
    seaborn
    numpy
    pyyaml
"""

import argparse
import json
import os
import sys
import time
from typing import Any, Dict, Iterable, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from password_guard import (
    HYPERPARAMETERS,
    RULE_NAMES,
    Hyperparameters,
    InvalidInput,
    Rating,
    analyze,
    load_hyperparameters,
)

RATING_ORDER = [r.label for r in Rating]


def load_passwords(filename: str) -> List[str]:
    """Load passwords from a JSON list or a newline-separated wordlist."""
    with open(filename, 'r', encoding='utf-8') as f:
        if filename.endswith('.json'):
            data = json.load(f)
            if not isinstance(data, list):
                raise ValueError(f"{filename}: expected a JSON list of strings")
            return [str(p) for p in data if p is not None]
        passwords = []
        for line in f:
            line = line.rstrip('\r\n')
            if line:
                passwords.append(line)
        return passwords


def analyze_passwords(passwords: Iterable[str],
                      hyperparameters: Hyperparameters = HYPERPARAMETERS,
                      include_passwords: bool = False) -> pd.DataFrame:
    """Convert passwords to a DataFrame of strength metrics, one row per sample"""

    data = []

    for sample_id, password in enumerate(passwords):
        try:
            analysis = analyze(password, hyperparameters)
        except InvalidInput as e:
            print(f"Skipping sample {sample_id}: {e}")
            continue

        # A rule "fires" when it attached a message; class rules do so on a missing class
        fired = {a.rule for a in analysis.adjustments if a.message}
        row: Dict[str, Any] = {
            'sample_id': sample_id,
            'length': analysis.length,
            'has_lower': analysis.has_lower,
            'has_upper': analysis.has_upper,
            'has_digit': analysis.has_digit,
            'has_symbol': analysis.has_symbol,
            'class_count': sum([analysis.has_lower, analysis.has_upper,
                                analysis.has_digit, analysis.has_symbol]),
            'unique_char_count': analysis.unique_char_count,
            'entropy_bits': analysis.estimated_entropy_bits,
            'raw_score': analysis.raw_score,
            'score': analysis.score,
            'rating': analysis.rating.label,
            'feedback_count': len(analysis.feedback),
        }
        for rule in RULE_NAMES:
            if rule == 'uniqueness':
                continue
            row[f'rule_{rule}'] = rule in fired
        if include_passwords:
            row['password'] = password
        data.append(row)

    return pd.DataFrame(data)


def rule_hit_frequency(df: pd.DataFrame) -> pd.DataFrame:
    """Count how often each feedback-producing rule fired across the samples"""
    rule_columns = [c for c in df.columns if c.startswith('rule_')]
    total = len(df)
    rows = []
    for column in rule_columns:
        hits = int(df[column].sum()) if total else 0
        rows.append({
            'rule': column[len('rule_'):],
            'hits': hits,
            'pct_samples': 100.0 * hits / total if total else 0.0,
        })
    freq = pd.DataFrame(rows, columns=['rule', 'hits', 'pct_samples'])
    return freq.sort_values('hits', ascending=False, kind='stable').reset_index(drop=True)


def generate_summary_statistics(df: pd.DataFrame) -> Dict[str, Any]:
    """Generate summary statistics"""

    if len(df) == 0:
        print("No samples to summarize.")
        return {'total_samples': 0}

    rating_counts = (
        df['rating'].value_counts()
        .reindex(RATING_ORDER, fill_value=0)
        .astype(int)
        .to_dict()
    )

    stats = {
        'total_samples': len(df),
        'avg_score': df['score'].mean(),
        'median_score': df['score'].median(),
        'min_score': int(df['score'].min()),
        'max_score': int(df['score'].max()),
        'avg_entropy_bits': df['entropy_bits'].mean(),
        'median_entropy_bits': df['entropy_bits'].median(),
        'avg_length': df['length'].mean(),
        'score_entropy_corr': (
            float(np.corrcoef(df['score'], df['entropy_bits'])[0, 1])
            if len(df) > 1 and df['score'].std() > 0 and df['entropy_bits'].std() > 0
            else 0.0
        ),
        'rating_counts': rating_counts,
    }

    print("\n" + "=" * 60)
    print("SUMMARY STATISTICS")
    print("=" * 60)

    print("BASIC STATISTICS:")
    print(f"  {'total_samples':>20}: {stats['total_samples']}")
    print(f"  {'avg_length':>20}: {stats['avg_length']:.1f}")

    print("\nSTRENGTH METRICS:")
    for key in ['avg_score', 'median_score', 'avg_entropy_bits',
                'median_entropy_bits', 'score_entropy_corr']:
        print(f"  {key:>20}: {stats[key]:.3f}")
    print(f"  {'score_range':>20}: {stats['min_score']} - {stats['max_score']}")

    print("\nRATING DISTRIBUTION:")
    for label, count in rating_counts.items():
        pct = 100.0 * count / stats['total_samples']
        print(f"  {label:>20}: {count:>6}  ({pct:5.1f}%)")

    print("=" * 60)

    return stats


def print_rule_summary(freq: pd.DataFrame) -> None:
    print()
    print("=" * 60)
    print("RULE HIT FREQUENCY")
    print("=" * 60)
    print(f"  {'Rule':<20} {'Hits':>8}  {'%Samples':>8}")
    print(f"  {'-'*20} {'-'*8}  {'-'*8}")
    for _, row in freq.iterrows():
        print(f"  {row['rule']:<20} {row['hits']:>8}  {row['pct_samples']:>7.1f}%")
    print("=" * 60)


def plot_score_distributions(df: pd.DataFrame, output_dir: str = '.') -> str:
    """Plot score, entropy and rating distributions"""

    plt.figure(figsize=(16, 12))

    plt.subplot(2, 2, 1)
    sns.histplot(df['score'], bins=20, kde=len(df) > 1)
    plt.title('Score Distribution')
    plt.xlabel('Score')
    plt.ylabel('Count')

    plt.subplot(2, 2, 2)
    sns.histplot(df['entropy_bits'], bins=20, kde=len(df) > 1, color='orange')
    plt.title('Estimated Entropy Distribution')
    plt.xlabel('Entropy (bits)')
    plt.ylabel('Count')

    plt.subplot(2, 2, 3)
    sns.scatterplot(x='entropy_bits', y='score', hue='class_count',
                    palette='viridis', data=df)
    plt.title('Score vs Entropy (colored by class count)')
    plt.xlabel('Entropy (bits)')
    plt.ylabel('Score')

    plt.subplot(2, 2, 4)
    sns.countplot(x='rating', data=df, order=RATING_ORDER)
    plt.title('Rating Counts')
    plt.xlabel('Rating')
    plt.ylabel('Count')

    plt.tight_layout()
    filename = os.path.join(output_dir, 'score_distributions.png')
    plt.savefig(filename, dpi=150, bbox_inches='tight')
    plt.close()

    print(f"Saved score distributions plot to {filename}")
    return filename


def plot_rule_frequency(freq: pd.DataFrame, output_dir: str = '.') -> str:
    """Bar chart of how often each rule fired"""

    plt.figure(figsize=(12, 6))
    sns.barplot(x='pct_samples', y='rule', data=freq, color='steelblue')
    plt.title('Rule Hit Frequency')
    plt.xlabel('% of samples')
    plt.ylabel('Rule')

    plt.tight_layout()
    filename = os.path.join(output_dir, 'rule_frequency.png')
    plt.savefig(filename, dpi=150, bbox_inches='tight')
    plt.close()

    print(f"Saved rule frequency plot to {filename}")
    return filename


def plot_length_analysis(df: pd.DataFrame, output_dir: str = '.') -> str:
    """Score by length, one box per length"""

    plt.figure(figsize=(14, 6))
    sns.boxplot(x='length', y='score', data=df)
    plt.title('Score by Password Length')
    plt.xlabel('Length')
    plt.ylabel('Score')

    plt.tight_layout()
    filename = os.path.join(output_dir, 'length_analysis.png')
    plt.savefig(filename, dpi=150, bbox_inches='tight')
    plt.close()

    print(f"Saved length analysis plot to {filename}")
    return filename


def main(argv=None) -> int:
    """Main analysis function"""
    parser = argparse.ArgumentParser(description="Batch password strength analysis")
    parser.add_argument("wordlist", help="Wordlist (.txt, one per line) or JSON list")
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to YAML config file with hyperparameter overrides")
    parser.add_argument("--output-dir", "-o", type=str, default=".",
                        help="Directory for plots and the CSV")
    parser.add_argument("--no-plots", action="store_true", help="Skip plot generation")
    parser.add_argument("--include-passwords", action="store_true",
                        help="Keep the raw passwords in the CSV (off by default)")
    args = parser.parse_args(argv)

    hyperparameters = HYPERPARAMETERS
    if args.config:
        hyperparameters = load_hyperparameters(args.config)
        print(f"Loaded config from: {args.config}")

    try:
        passwords = load_passwords(args.wordlist)
    except (OSError, ValueError) as e:
        print(f"Could not load {args.wordlist}: {e}")
        return 1

    print(f"Loaded {len(passwords)} passwords from: {args.wordlist}")
    if not passwords:
        print("Nothing to analyze.")
        return 1

    df = analyze_passwords(passwords, hyperparameters,
                           include_passwords=args.include_passwords)

    generate_summary_statistics(df)
    freq = rule_hit_frequency(df)
    print_rule_summary(freq)

    os.makedirs(args.output_dir, exist_ok=True)
    if not args.no_plots:
        plot_score_distributions(df, args.output_dir)
        plot_rule_frequency(freq, args.output_dir)
        plot_length_analysis(df, args.output_dir)

    timestamp = time.strftime("%Y%m%d_%H%M%S")
    processed_filename = os.path.join(args.output_dir, f"password_analysis_{timestamp}.csv")
    df.to_csv(processed_filename, index=False)
    print(f"\nProcessed data saved to: {processed_filename}")

    print("\nAnalysis complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
