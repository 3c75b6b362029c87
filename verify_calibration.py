#!/usr/bin/env python3
"""Verify scoring calibration against known-weak and randomly generated passwords."""

import argparse
import string

import numpy as np

from analyze_passwords import load_passwords
from password_guard import HYPERPARAMETERS, analyze, load_hyperparameters

N_SAMPLES = 200
SEED = 42
RANDOM_ALPHABET = string.ascii_letters + string.digits + string.punctuation
RANDOM_LENGTHS = (8, 20)

METRIC_KEYS = ['score', 'estimated_entropy_bits', 'length', 'unique_char_count', 'feedback_count']


def load_weak(wordlist=None, hyperparameters=HYPERPARAMETERS):
    samples = list(hyperparameters.common_patterns)
    if wordlist:
        samples.extend(load_passwords(wordlist))
    return samples


def generate_random(n=N_SAMPLES, seed=SEED, lengths=RANDOM_LENGTHS):
    rng = np.random.default_rng(seed)
    alphabet = np.array(list(RANDOM_ALPHABET))
    samples = []
    for _ in range(n):
        length = int(rng.integers(lengths[0], lengths[1] + 1))
        samples.append("".join(rng.choice(alphabet, size=length)))
    return samples


def score_samples(samples, label, hyperparameters=HYPERPARAMETERS):
    metrics = []
    for password in samples:
        payload = analyze(password, hyperparameters).to_payload()
        payload['feedback_count'] = len(payload['feedback'])
        metrics.append(payload)

    print(f"\n{'='*60}")
    print(f"  {label} ({len(samples)} samples)")
    print(f"{'='*60}")
    print(f"  {'Metric':<25} {'Mean':>8} {'Std':>8} {'Min':>8} {'Max':>8}")
    print(f"  {'-'*25} {'-'*8} {'-'*8} {'-'*8} {'-'*8}")

    means = {}
    for k in METRIC_KEYS:
        vals = [m[k] for m in metrics] or [0]
        mn = float(np.mean(vals))
        means[k] = mn
        print(f"  {k:<25} {mn:>8.3f} {np.std(vals):>8.3f} {np.min(vals):>8.3f} {np.max(vals):>8.3f}")

    return means


def compare(weak, strong, hyperparameters=HYPERPARAMETERS):
    weak_m = score_samples(weak, "WEAK (denylist + wordlist)", hyperparameters)
    strong_m = score_samples(strong, "RANDOM (uniform printable ASCII)", hyperparameters)

    print(f"\n{'='*60}")
    print("  COMPARISON SUMMARY")
    print(f"{'='*60}")
    print(f"  {'Metric':<25} {'Weak':>8} {'Random':>8} {'Gap':>8}")
    print(f"  {'-'*25} {'-'*8} {'-'*8} {'-'*8}")
    for k in METRIC_KEYS:
        gap = strong_m[k] - weak_m[k]
        print(f"  {k:<25} {weak_m[k]:>8.3f} {strong_m[k]:>8.3f} {gap:>+8.3f}")

    return weak_m, strong_m


def main(argv=None):
    parser = argparse.ArgumentParser(description="Compare score distributions of weak and random passwords")
    parser.add_argument("--weak", type=str, default=None,
                        help="Extra wordlist of known-weak passwords")
    parser.add_argument("--samples", "-n", type=int, default=N_SAMPLES,
                        help="Number of random passwords to generate")
    parser.add_argument("--seed", type=int, default=SEED)
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to YAML config file with hyperparameter overrides")
    args = parser.parse_args(argv)

    hyperparameters = HYPERPARAMETERS
    if args.config:
        hyperparameters = load_hyperparameters(args.config)
        print(f"Loaded config from: {args.config}")

    print("Loading samples...")
    weak = load_weak(args.weak, hyperparameters)
    strong = generate_random(args.samples, args.seed)
    print(f"  Weak: {len(weak)}, Random: {len(strong)}")

    compare(weak, strong, hyperparameters)


if __name__ == "__main__":
    main()
