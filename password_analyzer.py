#!/usr/bin/env python3
"""
Password Strength Analyzer: console front end for password_guard.

Usage:
    uv run password_analyzer.py 'MyP@ssw0rd!'     # analyze one password
    uv run password_analyzer.py                   # interactive mode
    uv run password_analyzer.py --json 'hunter2'  # machine-readable output
    uv run password_analyzer.py --config password_guard.yaml
"""

import argparse
import json
import sys
from getpass import getpass
from typing import Callable, List, Optional

from password_guard import (
    HYPERPARAMETERS,
    AnalysisResult,
    Hyperparameters,
    Rating,
    analyze,
    load_hyperparameters,
)

MAX_PASSWORD_DISPLAY_LENGTH = 20
PASSWORD_TRUNCATE_LENGTH = 17
BAR_LENGTH = 30
RULE = "═" * 35

RATING_GLYPHS = {
    Rating.VERY_WEAK: "🔴",
    Rating.WEAK: "🟠",
    Rating.FAIR: "🟡",
    Rating.STRONG: "🟢",
    Rating.VERY_STRONG: "🟩",
}

QUIT_COMMANDS = {"q", "quit"}

TIPS = [
    "Use at least 12 characters",
    "Mix uppercase and lowercase letters",
    "Include numbers and special characters",
    "Avoid common words and patterns",
    "Use unique characters (avoid repetition)",
    "Consider using a passphrase instead",
]


def display_password(password: str) -> str:
    if len(password) <= MAX_PASSWORD_DISPLAY_LENGTH:
        return password
    return password[:PASSWORD_TRUNCATE_LENGTH] + "..."


def score_bar(score: int, width: int = BAR_LENGTH) -> str:
    filled = int(width * score / 100.0)
    filled = max(0, min(width, filled))
    return "█" * filled + "░" * (width - filled)


def _yes_no(flag: bool) -> str:
    return "✓ Yes" if flag else "✗ No"


def format_report(password: str, analysis: AnalysisResult) -> List[str]:
    """Render an analysis as console lines (no trailing newlines)."""
    lines = [
        "",
        RULE,
        "           ANALYSIS RESULT",
        RULE,
        f"Password:     {display_password(password)}",
        f"Length:       {analysis.length} characters",
        f"Lowercase:    {_yes_no(analysis.has_lower)}",
        f"Uppercase:    {_yes_no(analysis.has_upper)}",
        f"Digits:       {_yes_no(analysis.has_digit)}",
        f"Symbols:      {_yes_no(analysis.has_symbol)}",
        f"Unique chars: {analysis.unique_char_count}",
        f"Entropy:      {analysis.estimated_entropy_bits:.1f} bits",
        "",
        f"Score:        [{score_bar(analysis.score)}] {analysis.score}/100",
        f"Rating:       {RATING_GLYPHS[analysis.rating]} {analysis.rating.label}",
        "",
    ]

    if analysis.feedback:
        lines.append("💡 Suggestions:")
        lines.extend(f"   • {tip}" for tip in analysis.feedback)
    else:
        lines.append("✅ Excellent! Your password is very strong.")

    lines.append(RULE)
    return lines


def analyze_and_display(password: str, hyperparameters: Hyperparameters = HYPERPARAMETERS,
                        as_json: bool = False) -> AnalysisResult:
    analysis = analyze(password, hyperparameters)
    if as_json:
        print(json.dumps(analysis.to_payload(), indent=2, ensure_ascii=False))
    else:
        print("\n".join(format_report(password, analysis)))
    return analysis


def show_tips():
    print()
    print("=== Password Tips ===")
    for tip in TIPS:
        print(f"✓ {tip}")
    print()


def run_interactive_mode(hyperparameters: Hyperparameters = HYPERPARAMETERS,
                         read_password: Optional[Callable[[str], str]] = None) -> int:
    """Prompt for passwords until the user quits; returns the number analyzed."""
    read_password = read_password or getpass
    print("=== Password Strength Analyzer ===")
    print("Enter a password to analyze (or 'q' to quit, 'help' for tips).")
    print()

    analyzed = 0
    while True:
        try:
            password = read_password("Enter password: ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not password or not password.strip():
            print("No password entered. Try again.")
            print()
            continue

        command = password.lower()
        if command in QUIT_COMMANDS:
            break

        if command == "help":
            show_tips()
            print()
            continue

        analyze_and_display(password, hyperparameters)
        analyzed += 1
        print()

    print("Goodbye!")
    return analyzed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="password-analyzer",
        description="Password Strength Analyzer: scores a password out of 100 "
                    "and suggests improvements.",
        epilog="Examples:\n"
               "  password-analyzer 'MyP@ssw0rd!'\n"
               "  password-analyzer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("password", nargs="?", default=None,
                        help="Password to analyze (omit for interactive mode)")
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to YAML config file with hyperparameter overrides")
    parser.add_argument("--json", action="store_true",
                        help="Print the analysis as JSON instead of a report")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    hyperparameters = HYPERPARAMETERS
    if args.config:
        hyperparameters = load_hyperparameters(args.config)

    if args.password is not None:
        analyze_and_display(args.password, hyperparameters, as_json=args.json)
        return 0

    run_interactive_mode(hyperparameters)
    return 0


if __name__ == "__main__":
    sys.exit(main())
