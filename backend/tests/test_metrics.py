import math

import pytest

from cheetahtype.services import metrics


class TestWordsPerMinute:

    def test_basic(self):
        # 250 chars = 50 words in one minute
        assert metrics.words_per_minute(250, 60) == pytest.approx(50.0)

    def test_half_minute(self):
        assert metrics.net_wpm(100, 30) == pytest.approx(40.0)

    @pytest.mark.parametrize('duration', [0, -5, None])
    def test_non_positive_duration_is_zero(self, duration):
        assert metrics.words_per_minute(500, duration) == 0.0
        assert metrics.raw_wpm(500, duration) == 0.0

    def test_missing_characters_count_as_zero(self):
        assert metrics.raw_wpm(None, 60) == 0.0

    def test_never_nan(self):
        value = metrics.raw_wpm(float('nan'), 60)
        assert value == 0.0 and not math.isnan(value)

    def test_raw_wpm_scenario(self):
        assert metrics.round_half_up(metrics.raw_wpm(500, 60)) == 100


class TestAccuracyAndErrorRate:

    def test_nothing_typed(self):
        assert metrics.accuracy(0, 0) == 0
        assert metrics.error_rate(0, 0) == 0

    def test_rounded_to_two_places(self):
        assert metrics.accuracy(2, 3) == 66.67
        assert metrics.error_rate(1, 3) == 33.33

    def test_clamped(self):
        assert metrics.accuracy(12, 10) == 100.0
        assert metrics.accuracy(-3, 10) == 0.0

    @pytest.mark.parametrize('correct,total', [(0, 1), (1, 1), (7, 9), (5, 1000)])
    def test_always_in_range(self, correct, total):
        assert 0 <= metrics.accuracy(correct, total) <= 100

    def test_error_rate_scenario(self):
        assert metrics.error_rate(25, 500) == 5.0


class TestWeaknessScore:

    def test_untyped_character(self):
        # 0.4 * 100 + 0.4 * 0 + 0.2 * 50
        assert metrics.weakness_score(0, 0, 0) == 50.0

    def test_perfect_fast_character(self):
        assert metrics.weakness_score(100, 0, 80) == 0.0

    def test_speed_only_counts_below_baseline(self):
        assert metrics.weakness_score(100, 0, 40) == 2.0

    def test_missing_inputs(self):
        assert metrics.weakness_score(None, None, None) == 50.0


class TestAverageSpeed:

    def test_empty(self):
        assert metrics.average_speed([]) == 0.0
        assert metrics.average_speed(None) == 0.0

    def test_mean(self):
        assert metrics.average_speed([40, 50, 60]) == pytest.approx(50.0)


class TestConsistency:

    def test_too_few_samples(self):
        assert metrics.consistency([]) == 100
        assert metrics.consistency([80]) == 100

    def test_steady_speed(self):
        assert metrics.consistency([70, 70, 70, 70]) == 100

    def test_uneven_speed_is_lower(self):
        assert metrics.consistency([40, 80, 40, 80]) < metrics.consistency([58, 62, 59, 61])

    def test_bounded(self):
        assert 0 <= metrics.consistency([0, 200, 1, 150, 3]) <= 100


def test_errors_from_accuracy():
    assert metrics.errors_from_accuracy(200, 95) == 10
    assert metrics.errors_from_accuracy(0, 95) == 0


def test_round_half_up():
    assert metrics.round_half_up(2.5) == 3
    assert metrics.round2(66.666) == 66.67
