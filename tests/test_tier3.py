import pytest

from yinx.errors import ConfigError
from yinx.filtering.tier3 import RepresentativeStrategy, Tier3Filter
from yinx.patterns import (
    EntitiesConfig,
    FiltersConfig,
    NormalizationPattern,
    PatternRegistry,
    Tier1Config,
    Tier2Config,
    Tier3Config,
    ToolsConfig,
)


def make_registry(*, min_size=2, max_size=1000, strategy="highest_entropy",
                  cluster_patterns=None):
    if cluster_patterns is None:
        cluster_patterns = [NormalizationPattern(
            name="numbers", pattern=r"\d+", replacement="__NUM__", priority=1)]
    filters = FiltersConfig(
        tier1=Tier1Config(max_occurrences=3, normalization_patterns=[]),
        tier2=Tier2Config(
            entropy_weight=0.25,
            uniqueness_weight=0.25,
            technical_weight=0.25,
            change_weight=0.25,
            score_threshold_percentile=0.8,
            technical_patterns=[],
            max_technical_score=10.0,
        ),
        tier3=Tier3Config(
            cluster_min_size=min_size,
            max_cluster_size=max_size,
            representative_strategy=strategy,
            cluster_patterns=cluster_patterns,
            preserve_metadata=[],
        ),
    )
    return PatternRegistry.from_configs(EntitiesConfig(entity=[]), ToolsConfig(tool=[]),
                                        filters)


def test_clustering():
    tier3 = Tier3Filter(make_registry())
    clusters = tier3.cluster_lines([
        "Port 80 open",
        "Port 443 open",
        "Port 8080 open",
        "Different line entirely",
    ])
    port = [c for c in clusters if "Port" in c.pattern and c.size == 3]
    assert len(port) == 1
    assert port[0].pattern == "Port __NUM__ open"
    assert port[0].metadata == {"count": 3}
    assert port[0].members == ["Port 80 open", "Port 443 open", "Port 8080 open"]


def test_representative_strategies():
    tier3 = Tier3Filter(make_registry())
    members = ["short", "medium length", "very long line with more text"]
    assert tier3.select_representative(
        members, RepresentativeStrategy.LONGEST) == "very long line with more text"
    assert tier3.select_representative(members, RepresentativeStrategy.FIRST) == "short"
    rep = tier3.select_representative(members, RepresentativeStrategy.HIGHEST_ENTROPY)
    assert len(rep) > 5


def test_longest_prefers_last_among_equals():
    tier3 = Tier3Filter(make_registry())
    assert tier3.select_representative(["abc", "xyz"],
                                       RepresentativeStrategy.LONGEST) == "xyz"


def test_select_from_no_members_raises():
    tier3 = Tier3Filter(make_registry())
    with pytest.raises(ValueError):
        tier3.select_representative([], RepresentativeStrategy.FIRST)


def test_cluster_size_limits():
    tier3 = Tier3Filter(make_registry(min_size=3, strategy="first", cluster_patterns=[]))
    clusters = tier3.cluster_lines(["line1", "line1", "line2", "line2", "line2"])
    singletons = [c for c in clusters if "singleton" in c.metadata]
    assert len(singletons) == 2
    assert all(c.size == 1 and c.representative == "line1" for c in singletons)
    big = [c for c in clusters if c.size == 3]
    assert len(big) == 1
    assert big[0].representative == "line2"


def test_large_cluster_is_split():
    tier3 = Tier3Filter(make_registry(max_size=2, strategy="first"))
    clusters = tier3.cluster_lines(["item 1", "item 2", "item 3", "item 4", "item 5"])
    assert [c.size for c in clusters] == [2, 2, 1]
    assert all(c.metadata == {"split": True} for c in clusters)
    assert [c.representative for c in clusters] == ["item 1", "item 3", "item 5"]


def test_empty_input():
    assert Tier3Filter(make_registry()).cluster_lines([]) == []


def test_single_line():
    clusters = Tier3Filter(make_registry()).cluster_lines(["single line"])
    assert len(clusters) == 1
    assert clusters[0].size == 1
    assert clusters[0].representative == "single line"


def test_zero_max_size_raises():
    tier3 = Tier3Filter(make_registry(max_size=0))
    with pytest.raises(ConfigError):
        tier3.cluster_lines(["a 1", "a 2"])


@pytest.mark.parametrize("name, expected", [
    ("first", RepresentativeStrategy.FIRST),
    ("longest", RepresentativeStrategy.LONGEST),
    ("highest_entropy", RepresentativeStrategy.HIGHEST_ENTROPY),
    ("LONGEST", RepresentativeStrategy.LONGEST),
    ("invalid", RepresentativeStrategy.HIGHEST_ENTROPY),
])
def test_strategy_parsing(name, expected):
    assert RepresentativeStrategy.parse(name) is expected