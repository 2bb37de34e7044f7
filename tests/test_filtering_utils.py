import pytest

from yinx.filtering.utils import change_score, percentile, shannon_entropy


def test_shannon_entropy_uniform():
    high = shannon_entropy("abcdefghijklmnop")
    low = shannon_entropy("aaaaaaaaaaaaaaaa")
    assert high > low
    assert high > 3.0
    assert low < 1.0


def test_shannon_entropy_empty():
    assert shannon_entropy("") == 0.0


def test_shannon_entropy_two_symbols():
    assert shannon_entropy("ab") == pytest.approx(1.0)


def test_shannon_entropy_single_symbol_is_zero():
    assert shannon_entropy("zzzz") == 0.0


def test_change_score_identical():
    assert change_score("hello", "hello") == 0.0


def test_change_score_different():
    score = change_score("hello", "world")
    assert score > 0.5
    assert score < 1.0


def test_change_score_completely_different():
    assert change_score("abc", "xyz") > 0.9


def test_change_score_is_symmetric():
    assert change_score("hello", "world") == change_score("world", "hello")


def test_change_score_same_characters_different_order():
    assert change_score("abc", "cba") == 0.0


def test_percentile_basic():
    scores = [1.0, 2.0, 3.0, 4.0, 5.0]
    assert percentile(scores, 0.0) == 1.0
    assert percentile(scores, 0.5) == 3.0
    assert percentile(scores, 1.0) == 5.0


def test_percentile_empty():
    assert percentile([], 0.5) == 0.0


def test_percentile_80th():
    scores = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0]
    p80 = percentile(scores, 0.8)
    assert 8.0 <= p80 <= 9.0


def test_percentile_unsorted_input():
    assert percentile([5.0, 1.0, 3.0, 2.0, 4.0], 0.5) == 3.0


def test_percentile_does_not_modify_input():
    scores = [3.0, 1.0, 2.0]
    percentile(scores, 1.0)
    assert scores == [3.0, 1.0, 2.0]