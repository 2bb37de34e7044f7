"""Configuration-driven pattern registry for entities, tools and filtering."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Mapping

from yinx.errors import ConfigError, TomlError, YinxIOError

_MISSING = object()


def _get(data: Mapping[str, Any], key: str, kind: type, *, default: Any = _MISSING,
         unsigned: bool = False) -> Any:
    if key not in data:
        if default is _MISSING:
            raise TomlError(f"missing field `{key}`")
        return default
    value = data[key]
    if kind is float:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok:
            value = float(value)
    elif kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, kind)
    if not ok:
        raise TomlError(f"invalid type for field `{key}`: expected {kind.__name__}")
    if unsigned and value < 0:
        raise TomlError(f"invalid value for field `{key}`: expected a non-negative number")
    return value


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TomlError(f"invalid type for {what}: expected a table")
    return data


def _tables(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    return [_mapping(item, f"entry of `{key}`") for item in _get(data, key, list)]


def _strings(data: Mapping[str, Any], key: str) -> list[str]:
    items = _get(data, key, list)
    if not all(isinstance(item, str) for item in items):
        raise TomlError(f"invalid type for field `{key}`: expected a list of strings")
    return list(items)


@dataclass
class EntityConfig:
    """One entity pattern as written in the entities file."""

    type_name: str
    pattern: str
    confidence: float
    context_window: int
    redact: bool = False
    description: str = ""

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> EntityConfig:
        return cls(
            type_name=_get(data, "type", str),
            pattern=_get(data, "pattern", str),
            confidence=_get(data, "confidence", float),
            context_window=_get(data, "context_window", int, unsigned=True),
            redact=_get(data, "redact", bool, default=False),
            description=_get(data, "description", str, default=""),
        )


@dataclass
class EntitiesConfig:
    """Contents of the entities configuration file."""

    entity: list[EntityConfig]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EntitiesConfig:
        data = _mapping(data, "entities config")
        return cls(entity=[EntityConfig._from_dict(t) for t in _tables(data, "entity")])


@dataclass
class OutputPatternConfig:
    """A pattern marking a section of a tool's output."""

    pattern: str
    section: str

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> OutputPatternConfig:
        return cls(pattern=_get(data, "pattern", str), section=_get(data, "section", str))


@dataclass
class ToolConfig:
    """Detection rules for one tool."""

    name: str
    command_patterns: list[str]
    entity_hints: list[str]
    output_patterns: list[OutputPatternConfig]

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> ToolConfig:
        return cls(
            name=_get(data, "name", str),
            command_patterns=_strings(data, "command_patterns"),
            entity_hints=_strings(data, "entity_hints"),
            output_patterns=[
                OutputPatternConfig._from_dict(t) for t in _tables(data, "output_patterns")
            ],
        )


@dataclass
class ToolsConfig:
    """Contents of the tools configuration file."""

    tool: list[ToolConfig]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolsConfig:
        data = _mapping(data, "tools config")
        return cls(tool=[ToolConfig._from_dict(t) for t in _tables(data, "tool")])


@dataclass
class NormalizationPattern:
    """A regex and its replacement used to normalise lines."""

    name: str
    pattern: str
    replacement: str
    priority: int = 0

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> NormalizationPattern:
        priority = _get(data, "priority", int, default=0, unsigned=True)
        if priority > 255:
            raise TomlError("invalid value for field `priority`: expected a value up to 255")
        return cls(
            name=_get(data, "name", str),
            pattern=_get(data, "pattern", str),
            replacement=_get(data, "replacement", str),
            priority=priority,
        )


@dataclass
class TechnicalPattern:
    """A weighted regex that marks technically interesting content."""

    name: str
    pattern: str
    weight: float

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> TechnicalPattern:
        return cls(
            name=_get(data, "name", str),
            pattern=_get(data, "pattern", str),
            weight=_get(data, "weight", float),
        )


@dataclass
class Tier1Config:
    """Settings for hash-based deduplication."""

    max_occurrences: int
    normalization_patterns: list[NormalizationPattern]

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> Tier1Config:
        return cls(
            max_occurrences=_get(data, "max_occurrences", int, unsigned=True),
            normalization_patterns=[
                NormalizationPattern._from_dict(t)
                for t in _tables(data, "normalization_patterns")
            ],
        )


@dataclass
class Tier2Config:
    """Settings for statistical scoring."""

    entropy_weight: float
    uniqueness_weight: float
    technical_weight: float
    change_weight: float
    score_threshold_percentile: float
    technical_patterns: list[TechnicalPattern]
    max_technical_score: float

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> Tier2Config:
        return cls(
            entropy_weight=_get(data, "entropy_weight", float),
            uniqueness_weight=_get(data, "uniqueness_weight", float),
            technical_weight=_get(data, "technical_weight", float),
            change_weight=_get(data, "change_weight", float),
            score_threshold_percentile=_get(data, "score_threshold_percentile", float),
            technical_patterns=[
                TechnicalPattern._from_dict(t) for t in _tables(data, "technical_patterns")
            ],
            max_technical_score=_get(data, "max_technical_score", float),
        )


@dataclass
class Tier3Config:
    """Settings for semantic clustering."""

    cluster_min_size: int
    max_cluster_size: int
    representative_strategy: str
    cluster_patterns: list[NormalizationPattern]
    preserve_metadata: list[str]

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any]) -> Tier3Config:
        return cls(
            cluster_min_size=_get(data, "cluster_min_size", int, unsigned=True),
            max_cluster_size=_get(data, "max_cluster_size", int, unsigned=True),
            representative_strategy=_get(data, "representative_strategy", str),
            cluster_patterns=[
                NormalizationPattern._from_dict(t) for t in _tables(data, "cluster_patterns")
            ],
            preserve_metadata=_strings(data, "preserve_metadata"),
        )


@dataclass
class FiltersConfig:
    """Contents of the filters configuration file."""

    tier1: Tier1Config
    tier2: Tier2Config
    tier3: Tier3Config

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FiltersConfig:
        data = _mapping(data, "filters config")
        return cls(
            tier1=Tier1Config._from_dict(_mapping(_get(data, "tier1", Mapping), "tier1")),
            tier2=Tier2Config._from_dict(_mapping(_get(data, "tier2", Mapping), "tier2")),
            tier3=Tier3Config._from_dict(_mapping(_get(data, "tier3", Mapping), "tier3")),
        )


def _template_regex() -> re.Pattern[str]:
    # "$$" is a literal dollar, "${name}" and "$name" refer to capture groups.
    return re.compile(r"\$(?:(?P<dollar>\$)|\{(?P<braced>[^}]*)\}|(?P<bare>[_0-9A-Za-z]+))")


_TEMPLATE_REF = _template_regex()


def _parse_template(template: str) -> tuple[Any, ...]:
    """Split a replacement template into literal text and group references.

    Group references are wrapped in a one-element tuple to tell them apart.
    """
    parts: list[Any] = []
    pos = 0
    for ref_match in _TEMPLATE_REF.finditer(template):
        parts.append(template[pos:ref_match.start()])
        if ref_match.group("dollar"):
            parts.append("$")
        else:
            name = ref_match.group("braced")
            if name is None:
                name = ref_match.group("bare")
            ref: str | int = int(name) if name.isascii() and name.isdigit() else name
            parts.append((ref,))
        pos = ref_match.end()
    parts.append(template[pos:])
    return tuple(p for p in parts if p != "")


def _expand(parts: tuple[Any, ...], match: re.Match[str]) -> str:
    pieces = []
    for part in parts:
        if isinstance(part, str):
            pieces.append(part)
            continue
        try:
            value = match.group(part[0])
        except IndexError:
            value = None
        pieces.append(value or "")
    return "".join(pieces)


@dataclass
class CompiledEntityPattern:
    """An entity pattern with its regex compiled."""

    type_name: str
    regex: re.Pattern[str]
    confidence: float
    context_window: int
    redact: bool
    description: str


@dataclass
class CompiledToolMatcher:
    """A tool's detection rules with regexes compiled."""

    name: str
    command_patterns: list[re.Pattern[str]]
    entity_hints: list[str]
    output_patterns: list[tuple[re.Pattern[str], str]]


@dataclass
class CompiledNormalizationPattern:
    """A normalisation pattern with its regex and replacement prepared."""

    name: str
    regex: re.Pattern[str]
    replacement: str
    priority: int
    _template: tuple[Any, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._template = _parse_template(self.replacement)

    def _apply(self, text: str) -> str:
        return self.regex.sub(lambda m: _expand(self._template, m), text)


@dataclass
class CompiledTechnicalPattern:
    """A weighted technical pattern with its regex compiled."""

    name: str
    regex: re.Pattern[str]
    weight: float


@dataclass
class ExtractedEntity:
    """An entity found in text, with its position and surroundings."""

    type_name: str
    value: str
    start: int
    end: int
    context: str
    confidence: float
    redact: bool


def _compile(pattern: str, describe: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigError(f"{describe}: {exc}") from exc


def _load_toml(path: Path, what: str) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise YinxIOError(f"Failed to read {what} config: {str(path)!r}", exc) from exc
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise TomlError(str(exc)) from exc


@dataclass
class PatternRegistry:
    """All configured patterns, compiled and ready for use."""

    entities: list[CompiledEntityPattern]
    entities_by_type: dict[str, int]
    tools: list[CompiledToolMatcher]
    tools_by_name: dict[str, int]
    tier1_normalization: list[CompiledNormalizationPattern]
    tier2_technical: list[CompiledTechnicalPattern]
    tier3_cluster: list[CompiledNormalizationPattern]
    tier1_config: Tier1Config
    tier2_config: Tier2Config
    tier3_config: Tier3Config

    @classmethod
    def from_config_files(cls, entities_path: str | PathLike[str],
                          tools_path: str | PathLike[str],
                          filters_path: str | PathLike[str]) -> PatternRegistry:
        """Read the three TOML files and build a registry from them."""
        entities = EntitiesConfig.from_dict(_load_toml(Path(entities_path), "entities"))
        tools = ToolsConfig.from_dict(_load_toml(Path(tools_path), "tools"))
        filters = FiltersConfig.from_dict(_load_toml(Path(filters_path), "filters"))
        return cls.from_configs(entities, tools, filters)

    @classmethod
    def from_configs(cls, entities_config: EntitiesConfig, tools_config: ToolsConfig,
                     filters_config: FiltersConfig) -> PatternRegistry:
        """Compile every pattern in the given configurations."""
        entities = []
        entities_by_type = {}
        for idx, cfg in enumerate(entities_config.entity):
            regex = _compile(cfg.pattern, f"Invalid regex for entity '{cfg.type_name}'")
            entities.append(CompiledEntityPattern(
                type_name=cfg.type_name,
                regex=regex,
                confidence=cfg.confidence,
                context_window=cfg.context_window,
                redact=cfg.redact,
                description=cfg.description,
            ))
            entities_by_type[cfg.type_name] = idx

        tools = []
        tools_by_name = {}
        for idx, cfg in enumerate(tools_config.tool):
            command_patterns = [
                _compile(p, f"Invalid command pattern for tool '{cfg.name}'")
                for p in cfg.command_patterns
            ]
            output_patterns = [
                (_compile(op.pattern, f"Invalid output pattern for tool '{cfg.name}'"),
                 op.section)
                for op in cfg.output_patterns
            ]
            tools.append(CompiledToolMatcher(
                name=cfg.name,
                command_patterns=command_patterns,
                entity_hints=list(cfg.entity_hints),
                output_patterns=output_patterns,
            ))
            tools_by_name[cfg.name] = idx

        tier1 = sorted(
            (
                CompiledNormalizationPattern(
                    name=np.name,
                    regex=_compile(np.pattern,
                                   f"Invalid tier1 normalization pattern '{np.name}'"),
                    replacement=np.replacement,
                    priority=np.priority,
                )
                for np in filters_config.tier1.normalization_patterns
            ),
            key=lambda p: p.priority,
        )

        tier2 = [
            CompiledTechnicalPattern(
                name=tp.name,
                regex=_compile(tp.pattern, f"Invalid tier2 technical pattern '{tp.name}'"),
                weight=tp.weight,
            )
            for tp in filters_config.tier2.technical_patterns
        ]

        # Cluster patterns keep their configured order.
        tier3 = [
            CompiledNormalizationPattern(
                name=cp.name,
                regex=_compile(cp.pattern, f"Invalid tier3 cluster pattern '{cp.name}'"),
                replacement=cp.replacement,
                priority=0,
            )
            for cp in filters_config.tier3.cluster_patterns
        ]

        return cls(
            entities=entities,
            entities_by_type=entities_by_type,
            tools=tools,
            tools_by_name=tools_by_name,
            tier1_normalization=tier1,
            tier2_technical=tier2,
            tier3_cluster=tier3,
            tier1_config=filters_config.tier1,
            tier2_config=filters_config.tier2,
            tier3_config=filters_config.tier3,
        )

    def detect_tool(self, command: str) -> CompiledToolMatcher | None:
        """Return the first tool whose command patterns match, if any."""
        return next(
            (tool for tool in self.tools
             if any(p.search(command) for p in tool.command_patterns)),
            None,
        )

    def extract_entities(self, text: str) -> list[ExtractedEntity]:
        """Find every configured entity in the text, pattern by pattern."""
        return [
            ExtractedEntity(
                type_name=pattern.type_name,
                value=m.group(),
                start=m.start(),
                end=m.end(),
                context=self._context(text, m.start(), m.end(), pattern.context_window),
                confidence=pattern.confidence,
                redact=pattern.redact,
            )
            for pattern in self.entities
            for m in pattern.regex.finditer(text)
        ]

    @staticmethod
    def _context(text: str, start: int, end: int, window: int) -> str:
        return text[max(start - window, 0):min(end + window, len(text))]

    def normalize_tier1(self, line: str) -> str:
        """Apply the tier 1 normalisation patterns in priority order."""
        for pattern in self.tier1_normalization:
            line = pattern._apply(line)
        return line

    def calculate_technical_score(self, line: str, max_score: float) -> float:
        """Weighted count of technical matches, scaled by max_score and capped at 1."""
        weighted_sum = sum(
            sum(1 for _ in p.regex.finditer(line)) * p.weight for p in self.tier2_technical
        )
        if max_score == 0:
            return 1.0 if weighted_sum >= 0 else float("-inf")
        return min(weighted_sum / max_score, 1.0)

    def normalize_tier3(self, line: str) -> str:
        """Apply the tier 3 cluster patterns in order."""
        for pattern in self.tier3_cluster:
            line = pattern._apply(line)
        return line