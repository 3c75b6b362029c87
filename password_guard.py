"""Password strength analysis: scores a password and suggests improvements.

Single entry point: analyze(password) returns an AnalysisResult with the
extracted character features, an entropy estimate, a score (0-100, higher =
stronger), a rating band, and ordered feedback.

The engine is pure: it keeps no state between calls, performs no I/O and never
stores or echoes the password it was given.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import IntEnum
from functools import partial, reduce
from typing import Callable

import yaml

# ---------------------------------------------------------------------------
# Hyperparameters
# ---------------------------------------------------------------------------

DEFAULT_COMMON_PATTERNS = (
    "password", "1234", "12345", "123456", "qwerty",
    "letmein", "admin", "welcome", "monkey", "dragon",
    "master", "sunshine", "princess", "football", "shadow",
    "password1", "iloveyou", "trustno1",
)


@dataclass(frozen=True)
class Hyperparameters:
    """Tunable pool sizes, thresholds, bonuses and penalties used by the analyzer."""

    # Character pool sizes for the entropy estimate
    lower_pool: int = 26
    upper_pool: int = 26
    digit_pool: int = 10
    symbol_pool: int = 30

    # Length bands (inclusive upper bounds) and their bonuses
    length_short_max: int = 6
    length_short_bonus: int = 5
    length_fair_max: int = 9
    length_fair_bonus: int = 15
    length_good_max: int = 12
    length_good_bonus: int = 25
    length_long_max: int = 16
    length_long_bonus: int = 35
    length_max_bonus: int = 40

    # Variety and uniqueness
    class_bonus: int = 10
    unique_low_min: int = 6
    unique_low_bonus: int = 5
    unique_high_min: int = 10
    unique_high_bonus: int = 10

    # Pattern detection and penalties
    common_patterns: tuple[str, ...] = field(default_factory=lambda: DEFAULT_COMMON_PATTERNS)
    common_pattern_penalty: int = -25
    single_class_penalty: int = -15
    repeat_run_min: int = 4
    repeat_penalty: int = -10
    sequence_length: int = 3
    sequential_penalty: int = -10

    # Score clamping and rating bands
    score_min: int = 0
    score_max: int = 100
    band_weak_min: int = 25
    band_fair_min: int = 50
    band_strong_min: int = 70
    band_very_strong_min: int = 85

    def __post_init__(self):
        # Matching is case-insensitive, so patterns are stored lowercased
        object.__setattr__(
            self, "common_patterns", tuple(str(p).lower() for p in self.common_patterns),
        )


HYPERPARAMETERS = Hyperparameters()


class InvalidInput(ValueError):
    """Raised when the analyzer is handed something other than a string."""


class Rating(IntEnum):
    VERY_WEAK = 0
    WEAK = 1
    FAIR = 2
    STRONG = 3
    VERY_STRONG = 4

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True)
class Adjustment:
    rule: str
    delta: int
    message: str | None = None

    def to_payload(self) -> dict[str, object]:
        return {"rule": self.rule, "delta": self.delta, "message": self.message}


@dataclass(frozen=True)
class PasswordFeatures:
    """Everything the scoring rules look at, extracted once per call."""

    length: int
    has_lower: bool
    has_upper: bool
    has_digit: bool
    has_symbol: bool
    unique_char_count: int
    estimated_entropy_bits: float
    has_common_pattern: bool
    is_single_class: bool
    has_repeated_run: bool
    has_sequential_pattern: bool
    hyperparameters: Hyperparameters


@dataclass(frozen=True)
class RuleResult:
    adjustments: tuple[Adjustment, ...] = ()

    @property
    def advice(self) -> tuple[str, ...]:
        return tuple(a.message for a in self.adjustments if a.message)


@dataclass(frozen=True)
class AnalysisState:
    adjustments: tuple[Adjustment, ...]
    advice: tuple[str, ...]
    raw_score: int

    @classmethod
    def initial(cls) -> "AnalysisState":
        return cls(adjustments=(), advice=(), raw_score=0)

    def merge(self, result: RuleResult) -> "AnalysisState":
        return AnalysisState(
            adjustments=self.adjustments + result.adjustments,
            advice=self.advice + result.advice,
            raw_score=self.raw_score + sum(a.delta for a in result.adjustments),
        )


@dataclass(frozen=True)
class AnalysisResult:
    length: int
    has_lower: bool
    has_upper: bool
    has_digit: bool
    has_symbol: bool
    unique_char_count: int
    estimated_entropy_bits: float
    score: int
    rating: Rating
    feedback: tuple[str, ...]
    adjustments: tuple[Adjustment, ...] = ()
    raw_score: int = 0

    def to_payload(self) -> dict[str, object]:
        return {
            "length": self.length,
            "has_lower": self.has_lower,
            "has_upper": self.has_upper,
            "has_digit": self.has_digit,
            "has_symbol": self.has_symbol,
            "unique_char_count": self.unique_char_count,
            "estimated_entropy_bits": round(self.estimated_entropy_bits, 2),
            "score": self.score,
            "raw_score": self.raw_score,
            "rating": self.rating.label,
            "feedback": list(self.feedback),
            "adjustments": [a.to_payload() for a in self.adjustments],
        }


RulePrototype = Callable[[PasswordFeatures], RuleResult]

# ---------------------------------------------------------------------------
# Feedback messages
# ---------------------------------------------------------------------------

MSG_TOO_SHORT = "Use a longer password (at least 10-12 characters recommended)."
MSG_SHORT = "Consider increasing length to 12+ characters for better security."
MSG_ADD_LOWER = "Add lowercase letters (a-z)."
MSG_ADD_UPPER = "Add UPPERCASE letters (A-Z)."
MSG_ADD_DIGIT = "Add digits (0-9)."
MSG_ADD_SYMBOL = "Add special characters (!, @, #, $, %, etc.)."
MSG_COMMON = "Avoid common words or patterns (e.g., 'password', '1234', 'qwerty')."
MSG_SINGLE_CLASS = "Mix different character types (letters, digits, symbols)."
MSG_REPEATS = "Avoid repeating the same character multiple times."
MSG_SEQUENTIAL = "Avoid sequential patterns (e.g., 'abc', '123')."

# ---------------------------------------------------------------------------
# Feature extraction and detectors
# ---------------------------------------------------------------------------

def _is_symbol(ch: str) -> bool:
    return not ch.isalpha() and not ch.isdecimal()


def _fold(ch: str) -> str:
    # Some characters lowercase to more than one code point; keep those as-is
    lowered = ch.lower()
    return lowered if len(lowered) == 1 else ch


def estimate_entropy(
    password: str, has_lower: bool, has_upper: bool, has_digit: bool,
    has_symbol: bool, hyperparameters: Hyperparameters = HYPERPARAMETERS,
) -> float:
    """Estimate entropy in bits as ``length * log2(pool size)``.

    The pool is the sum of fixed per-class sizes for the classes present.
    This is an upper bound that assumes every character was drawn uniformly at
    random from that pool; it says nothing about how predictable this
    particular string is. It rewards length and class diversity only.
    """
    hp = hyperparameters
    pool = 0
    if has_lower:
        pool += hp.lower_pool
    if has_upper:
        pool += hp.upper_pool
    if has_digit:
        pool += hp.digit_pool
    if has_symbol:
        pool += hp.symbol_pool

    if pool == 0 or not password:
        return 0.0
    return len(password) * math.log2(pool)


def has_repeated_run(password: str, run_min: int = HYPERPARAMETERS.repeat_run_min) -> bool:
    """True if a single character repeats ``run_min`` or more times in a row."""
    if len(password) < run_min:
        return False

    longest = 1
    current = 1
    for prev, ch in zip(password, password[1:]):
        if ch == prev:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest >= run_min


def has_sequential_pattern(password: str, window: int = HYPERPARAMETERS.sequence_length) -> bool:
    """True if any window of letters or digits ascends one code point at a time.

    Case-insensitive. Descending and non-contiguous runs are not detected.
    """
    if len(password) < window:
        return False

    folded = [_fold(ch) for ch in password]
    for i in range(len(folded) - window + 1):
        chunk = folded[i : i + window]
        if not (all(c.isalpha() for c in chunk) or all(c.isdecimal() for c in chunk)):
            continue
        if all(ord(b) == ord(a) + 1 for a, b in zip(chunk, chunk[1:])):
            return True
    return False


def has_common_pattern(password: str, patterns: tuple[str, ...] = DEFAULT_COMMON_PATTERNS) -> bool:
    lowered = password.lower()
    return any(p in lowered for p in patterns)


def is_single_class(password: str) -> bool:
    """True if every character is a digit or every character is a letter."""
    return all(ch.isdecimal() for ch in password) or all(ch.isalpha() for ch in password)


def extract_features(
    password: str, hyperparameters: Hyperparameters = HYPERPARAMETERS,
) -> PasswordFeatures:
    hp = hyperparameters
    has_lower = any(ch.islower() for ch in password)
    has_upper = any(ch.isupper() for ch in password)
    has_digit = any(ch.isdecimal() for ch in password)
    has_symbol = any(_is_symbol(ch) for ch in password)

    return PasswordFeatures(
        length=len(password),
        has_lower=has_lower,
        has_upper=has_upper,
        has_digit=has_digit,
        has_symbol=has_symbol,
        unique_char_count=len(set(password)),
        estimated_entropy_bits=estimate_entropy(
            password, has_lower, has_upper, has_digit, has_symbol, hp,
        ),
        has_common_pattern=has_common_pattern(password, hp.common_patterns),
        is_single_class=is_single_class(password),
        has_repeated_run=has_repeated_run(password, hp.repeat_run_min),
        has_sequential_pattern=has_sequential_pattern(password, hp.sequence_length),
        hyperparameters=hp,
    )


# ---------------------------------------------------------------------------
# Rule implementations
# ---------------------------------------------------------------------------

def _single(rule: str, delta: int, message: str | None = None) -> RuleResult:
    return RuleResult(adjustments=(Adjustment(rule=rule, delta=delta, message=message),))


def _apply_length_rule(features: PasswordFeatures) -> RuleResult:
    hp, n = features.hyperparameters, features.length
    if n <= hp.length_short_max:
        return _single("length", hp.length_short_bonus, MSG_TOO_SHORT)
    if n <= hp.length_fair_max:
        return _single("length", hp.length_fair_bonus, MSG_SHORT)
    if n <= hp.length_good_max:
        return _single("length", hp.length_good_bonus)
    if n <= hp.length_long_max:
        return _single("length", hp.length_long_bonus)
    return _single("length", hp.length_max_bonus)


def _class_rule(flag: str, message: str) -> RulePrototype:
    def _rule(features: PasswordFeatures) -> RuleResult:
        if getattr(features, flag):
            return _single(flag, features.hyperparameters.class_bonus)
        return _single(flag, 0, message)
    _rule.__name__ = f"_apply_{flag}_rule"
    return _rule


_apply_lower_rule = _class_rule("has_lower", MSG_ADD_LOWER)
_apply_upper_rule = _class_rule("has_upper", MSG_ADD_UPPER)
_apply_digit_rule = _class_rule("has_digit", MSG_ADD_DIGIT)
_apply_symbol_rule = _class_rule("has_symbol", MSG_ADD_SYMBOL)


def _apply_uniqueness_rule(features: PasswordFeatures) -> RuleResult:
    hp, unique = features.hyperparameters, features.unique_char_count
    if unique >= hp.unique_high_min:
        return _single("uniqueness", hp.unique_high_bonus)
    if unique >= hp.unique_low_min:
        return _single("uniqueness", hp.unique_low_bonus)
    return RuleResult()


def _penalty_rule(flag: str, rule: str, penalty_field: str, message: str) -> RulePrototype:
    def _rule(features: PasswordFeatures) -> RuleResult:
        if not getattr(features, flag):
            return RuleResult()
        return _single(rule, getattr(features.hyperparameters, penalty_field), message)
    _rule.__name__ = f"_apply_{rule}_rule"
    return _rule


_apply_common_pattern_rule = _penalty_rule(
    "has_common_pattern", "common_pattern", "common_pattern_penalty", MSG_COMMON)
_apply_single_class_rule = _penalty_rule(
    "is_single_class", "single_class", "single_class_penalty", MSG_SINGLE_CLASS)
_apply_repetition_rule = _penalty_rule(
    "has_repeated_run", "repetition", "repeat_penalty", MSG_REPEATS)
_apply_sequential_rule = _penalty_rule(
    "has_sequential_pattern", "sequential", "sequential_penalty", MSG_SEQUENTIAL)

PIPELINE: tuple[RulePrototype, ...] = (
    _apply_length_rule,
    _apply_lower_rule, _apply_upper_rule, _apply_digit_rule, _apply_symbol_rule,
    _apply_uniqueness_rule,
    _apply_common_pattern_rule,
    _apply_single_class_rule,
    _apply_repetition_rule,
    _apply_sequential_rule,
)

# Rule names that can appear on an Adjustment, in pipeline order
RULE_NAMES = (
    "length", "has_lower", "has_upper", "has_digit", "has_symbol", "uniqueness",
    "common_pattern", "single_class", "repetition", "sequential",
)


# ---------------------------------------------------------------------------
# Core analysis
# ---------------------------------------------------------------------------

def _run_analysis_pipeline(features, pipeline):
    curried_rules = [partial(rule, features) for rule in pipeline]

    def _merge_rule_result(state, curried_rule):
        return state.merge(curried_rule())

    return reduce(_merge_rule_result, curried_rules, AnalysisState.initial())


def rating_for_score(score: int, hyperparameters: Hyperparameters = HYPERPARAMETERS) -> Rating:
    hp = hyperparameters
    if score < hp.band_weak_min:
        return Rating.VERY_WEAK
    if score < hp.band_fair_min:
        return Rating.WEAK
    if score < hp.band_strong_min:
        return Rating.FAIR
    if score < hp.band_very_strong_min:
        return Rating.STRONG
    return Rating.VERY_STRONG


def _deduplicate_advice(advice):
    seen = set()
    unique = []
    for item in advice:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(Hyperparameters))


def _check_bands(hp: Hyperparameters) -> None:
    bands = [hp.band_weak_min, hp.band_fair_min, hp.band_strong_min, hp.band_very_strong_min]
    if any(lo >= hi for lo, hi in zip(bands, bands[1:])):
        raise ValueError(f"Rating band thresholds must be strictly increasing, got {bands}")


def hyperparameters_from_dict(
    overrides: dict, base: Hyperparameters = HYPERPARAMETERS,
) -> Hyperparameters:
    """Return a copy of ``base`` with the given fields replaced."""
    unknown = sorted(set(overrides) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"Unknown hyperparameter(s): {', '.join(unknown)}")

    values = dict(overrides)
    if "common_patterns" in values:
        patterns = values["common_patterns"]
        if not isinstance(patterns, (list, tuple)):
            raise ValueError(
                f"common_patterns must be a list of strings, got {type(patterns).__name__}"
            )
        values["common_patterns"] = tuple(patterns)
    hp = dataclasses.replace(base, **values)
    _check_bands(hp)
    return hp


def hyperparameters_to_dict(hp: Hyperparameters) -> dict[str, object]:
    values = dataclasses.asdict(hp)
    values["common_patterns"] = list(hp.common_patterns)
    return values


def load_hyperparameters(config_path: str) -> Hyperparameters:
    """Load hyperparameter overrides from a YAML file.

    The overrides are read from a ``hyperparameters:`` section when present,
    otherwise from the top-level mapping. Fields not mentioned keep their
    defaults.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{config_path}: expected a mapping at the top level")

    section = cfg.get("hyperparameters", cfg)
    if not isinstance(section, dict):
        raise ValueError(f"{config_path}: 'hyperparameters' must be a mapping")
    return hyperparameters_from_dict(section)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze(password: str, hyperparameters: Hyperparameters = HYPERPARAMETERS) -> AnalysisResult:
    """Run all strength checks and return score, rating, entropy and feedback.

    Raises InvalidInput when ``password`` is None or not a string. The empty
    string is valid and scores 0.
    """
    if password is None:
        raise InvalidInput("password must not be None")
    if not isinstance(password, str):
        raise InvalidInput(f"password must be a str, not {type(password).__name__}")

    hp = hyperparameters
    features = extract_features(password, hp)
    state = _run_analysis_pipeline(features, PIPELINE)
    score = max(hp.score_min, min(hp.score_max, state.raw_score))

    return AnalysisResult(
        length=features.length,
        has_lower=features.has_lower,
        has_upper=features.has_upper,
        has_digit=features.has_digit,
        has_symbol=features.has_symbol,
        unique_char_count=features.unique_char_count,
        estimated_entropy_bits=features.estimated_entropy_bits,
        score=score,
        rating=rating_for_score(score, hp),
        feedback=tuple(_deduplicate_advice(state.advice)),
        adjustments=state.adjustments,
        raw_score=state.raw_score,
    )
