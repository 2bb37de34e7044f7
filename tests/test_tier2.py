import pytest

from yinx.filtering.tier2 import Tier2Filter
from yinx.patterns import (
    EntitiesConfig,
    FiltersConfig,
    PatternRegistry,
    TechnicalPattern,
    Tier1Config,
    Tier2Config,
    Tier3Config,
    ToolsConfig,
)


def make_patterns(threshold=0.8):
    filters = FiltersConfig(
        tier1=Tier1Config(max_occurrences=3, normalization_patterns=[]),
        tier2=Tier2Config(
            entropy_weight=0.25,
            uniqueness_weight=0.25,
            technical_weight=0.25,
            change_weight=0.25,
            score_threshold_percentile=threshold,
            technical_patterns=[
                TechnicalPattern(name="cve", pattern=r"CVE-\d{4}-\d{4,}", weight=2.0),
                TechnicalPattern(
                    name="ip",
                    pattern=r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b",
                    weight=1.0,
                ),
            ],
            max_technical_score=10.0,
        ),
        tier3=Tier3Config(
            cluster_min_size=2,
            max_cluster_size=1000,
            representative_strategy="highest_entropy",
            cluster_patterns=[],
            preserve_metadata=[],
        ),
    )
    return PatternRegistry.from_configs(EntitiesConfig(entity=[]), ToolsConfig(tool=[]), filters)


@pytest.fixture
def tier2():
    return Tier2Filter(make_patterns())


def test_tier2_entropy_scoring(tier2):
    scored = tier2.filter_lines(["aaaaaaaaaaaa", "a1b2c3d4e5f6"])
    assert len(scored) == 1
    assert scored[0].line == "a1b2c3d4e5f6"


def test_tier2_uniqueness_scoring(tier2):
    lines = ["common line", "common line", "common line", "rare line with unique content"]
    scored = tier2.filter_lines(lines)
    assert len(scored) == 1
    assert "rare" in scored[0].line


def test_tier2_technical_scoring(tier2):
    scored = tier2.filter_lines(["Just some text", "Found CVE-2024-1234 at 192.168.1.1:80"])
    assert len(scored) == 1
    assert "CVE-2024-1234" in scored[0].line


def test_tier2_percentile_threshold(tier2):
    lines = [f"line with {i} unique content" for i in range(10)]
    scored = tier2.filter_lines(lines)
    assert 1 <= len(scored) <= 10


def test_tier2_empty_input(tier2):
    assert tier2.filter_lines([]) == []


def test_tier2_single_line(tier2):
    scored = tier2.filter_lines(["single line"])
    assert len(scored) == 1
    assert scored[0].line == "single line"


def test_tier2_first_line_gets_full_change_weight(tier2):
    scored = tier2.filter_lines(["single line"])
    assert scored[0].components.change == 0.25


def test_tier2_scores_are_component_totals(tier2):
    scored = Tier2Filter(make_patterns(threshold=0.0)).filter_lines(
        ["alpha", "beta", "CVE-2021-44228"])
    assert all(s.score == s.components.total() for s in scored)


def test_tier2_zero_threshold_keeps_all_in_order():
    lines = ["one", "two", "three", "two"]
    scored = Tier2Filter(make_patterns(threshold=0.0)).filter_lines(lines)
    assert [s.line for s in scored] == lines


def test_tier2_repeated_line_has_zero_change():
    scored = Tier2Filter(make_patterns(threshold=0.0)).filter_lines(["same", "same"])
    assert scored[1].components.change == 0.0
    assert scored[1].components.uniqueness == 0.0