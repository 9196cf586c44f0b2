import pytest

from languages import DEFAULT_COLOR, language_color, language_shares, top_languages

TOTALS = {
    "Python": 6000,
    "JavaScript": 2500,
    "Shell": 900,
    "Makefile": 400,
    "HCL": 150,
    "Dockerfile": 50,
    "Nix": 0,
}


def test_shares_sum_to_hundred_across_all_languages():
    shares = language_shares(TOTALS)
    assert sum(s.percent for s in shares) == pytest.approx(100.0)


def test_shares_sorted_by_bytes_and_skip_empty():
    shares = language_shares(TOTALS)
    assert [s.name for s in shares] == ["Python", "JavaScript", "Shell", "Makefile", "HCL", "Dockerfile"]
    assert shares[0].percent == pytest.approx(60.0)


def test_ties_are_ordered_by_name():
    shares = language_shares({"Rust": 10, "Go": 10})
    assert [s.name for s in shares] == ["Go", "Rust"]


def test_top_languages_limits_count():
    top = top_languages(TOTALS, 3)
    assert [s.name for s in top] == ["Python", "JavaScript", "Shell"]
    assert top_languages(TOTALS, 0) == []


def test_colors_with_fallback():
    assert language_color("Python") == "#3572A5"
    assert language_color("Brainfuck") == DEFAULT_COLOR
    assert top_languages({"Makefile": 1}, 1)[0].color == DEFAULT_COLOR


def test_empty_totals():
    assert language_shares({}) == []
