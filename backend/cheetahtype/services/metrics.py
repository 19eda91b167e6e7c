"""Typing metrics derived from raw counters.

Every function here is total: missing counters count as 0 and degenerate
inputs (zero duration, nothing typed, no speed samples) give 0 instead of
raising or returning NaN/Infinity.
"""
import math
from typing import Iterable, Optional

CHARS_PER_WORD = 5
SPEED_BASELINE = 50.0  # characters per minute

ACCURACY_WEIGHT = 0.4
ERROR_RATE_WEIGHT = 0.4
SPEED_WEIGHT = 0.2


def as_number(value) -> float:
    """Coalesce None, garbage and non-finite values to 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator does (2.5 -> 3), not banker's rounding."""
    factor = 10 ** digits
    return math.floor(as_number(value) * factor + 0.5) / factor


def round2(value: float) -> float:
    return round_half_up(value, 2)


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, as_number(value)))


def words_per_minute(characters, duration_seconds) -> float:
    """(characters / 5) / minutes, 0 when the duration is not positive."""
    chars = as_number(characters)
    seconds = as_number(duration_seconds)
    if seconds <= 0:
        return 0.0
    return (chars / CHARS_PER_WORD) / (seconds / 60.0)


def net_wpm(correct_characters, duration_seconds) -> float:
    return words_per_minute(correct_characters, duration_seconds)


def raw_wpm(total_characters, duration_seconds) -> float:
    """Gross throughput: every typed character counts, right or wrong."""
    return words_per_minute(total_characters, duration_seconds)


def accuracy(correct_typed, total_typed) -> float:
    total = as_number(total_typed)
    if total <= 0:
        return 0.0
    return round2(clamp_percent(as_number(correct_typed) / total * 100))


def error_rate(incorrect_typed, total_typed) -> float:
    total = as_number(total_typed)
    if total <= 0:
        return 0.0
    return round2(clamp_percent(as_number(incorrect_typed) / total * 100))


def average_speed(speeds: Optional[Iterable]) -> float:
    samples = [as_number(s) for s in (speeds or [])]
    if not samples:
        return 0.0
    return sum(samples) / len(samples)


def weakness_score(accuracy_pct, error_rate_pct, avg_speed) -> float:
    """Composite need-for-practice score; higher means weaker.

    Low accuracy and high error rate weigh 40% each, speed below the
    50 cpm baseline weighs 20%.
    """
    score = (
        ACCURACY_WEIGHT * (100 - as_number(accuracy_pct))
        + ERROR_RATE_WEIGHT * as_number(error_rate_pct)
        + SPEED_WEIGHT * max(0.0, SPEED_BASELINE - as_number(avg_speed))
    )
    return round2(score)


def consistency(wpm_samples: Optional[Iterable]) -> float:
    """Speed stability over a test as a 0-100 percentage.

    Outliers outside 1.5 IQR are dropped as long as more than half of the
    samples survive; the score is 100 minus the coefficient of variation.
    """
    samples = [as_number(s) for s in (wpm_samples or [])]
    if len(samples) < 2:
        return 100.0

    ordered = sorted(samples)
    q1 = ordered[int(len(ordered) * 0.25)]
    q3 = ordered[int(len(ordered) * 0.75)]
    iqr = q3 - q1
    filtered = [s for s in ordered if q1 - 1.5 * iqr <= s <= q3 + 1.5 * iqr]
    data = filtered if len(filtered) > len(samples) / 2 else samples

    mean = sum(data) / len(data)
    variance = sum((s - mean) ** 2 for s in data) / len(data)
    stddev = math.sqrt(variance)
    score = max(0.0, 100 - min(100.0, stddev / (mean or 1) * 100))
    return round_half_up(score)


def errors_from_accuracy(total_characters, accuracy_pct) -> int:
    """Characters lost to mistakes, reconstructed from stored accuracy."""
    total = as_number(total_characters)
    return int(total - round_half_up(total * as_number(accuracy_pct) / 100))
