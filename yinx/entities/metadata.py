"""Metadata built from extracted entities for captures and chunks."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from yinx.entities.graph import CorrelationGraph, Entity
from yinx.errors import JsonError

_HOST_TYPES = frozenset({"ip_address", "hostname"})
_MISSING = object()


def _field(data: Mapping[str, Any], key: str, kind: type | tuple[type, ...], *,
           default: Any = _MISSING, optional: bool = False) -> Any:
    """Fetch a typed value from decoded JSON, raising ValueError when it is unusable."""
    if key not in data:
        if optional:
            return None
        if default is _MISSING:
            raise ValueError(f"missing field `{key}`")
        return default
    value = data[key]
    if value is None and optional:
        return None
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"invalid type for field `{key}`: expected a number")
        return float(value)
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"invalid type for field `{key}`: expected an unsigned integer")
        return value
    if not isinstance(value, kind):
        raise ValueError(f"invalid type for field `{key}`")
    return value


def _table(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"invalid type for {what}: expected an object")
    return value


def _strings(data: Mapping[str, Any], key: str) -> list[str]:
    items = _field(data, key, list)
    if not all(isinstance(item, str) for item in items):
        raise ValueError(f"invalid type for field `{key}`: expected a list of strings")
    return list(items)


def _entity_to_dict(entity: Entity) -> dict[str, Any]:
    return {
        "entity_type": entity.entity_type,
        "value": entity.value,
        "context": entity.context,
        "confidence": entity.confidence,
        "should_redact": entity.should_redact,
    }


def _entity_from_dict(data: Any) -> Entity:
    data = _table(data, "entity")
    return Entity(
        entity_type=_field(data, "entity_type", str),
        value=_field(data, "value", str),
        context=_field(data, "context", str),
        confidence=_field(data, "confidence", float),
        should_redact=_field(data, "should_redact", bool, default=False),
    )


def _decode(text: str, what: str, build) -> Any:
    try:
        return build(_table(json.loads(text), what))
    except (ValueError, TypeError) as exc:
        raise JsonError(f"Failed to parse {what}", exc) from exc


def _encode(data: dict[str, Any]) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


@dataclass
class CaptureMetadata:
    """Summary of the entities found in one capture."""

    tool: str | None
    entity_types: list[str]
    entity_count: int
    hosts: list[str]
    vulnerabilities: list[str]
    has_sensitive_data: bool

    @classmethod
    def from_entities(cls, entities: Iterable[Entity],
                      tool: str | None = None) -> CaptureMetadata:
        """Summarise a capture's entities."""
        entities = list(entities)
        return cls(
            tool=tool,
            entity_types=sorted({e.entity_type for e in entities}),
            entity_count=len(entities),
            hosts=[e.value for e in entities if e.entity_type in _HOST_TYPES],
            vulnerabilities=[e.value for e in entities if e.entity_type == "cve"],
            has_sensitive_data=any(e.should_redact for e in entities),
        )

    def to_json(self) -> str:
        """Compact JSON text of this metadata."""
        return _encode({
            "tool": self.tool,
            "entity_types": list(self.entity_types),
            "entity_count": self.entity_count,
            "hosts": list(self.hosts),
            "vulnerabilities": list(self.vulnerabilities),
            "has_sensitive_data": self.has_sensitive_data,
        })

    @classmethod
    def from_json(cls, text: str) -> CaptureMetadata:
        """Read metadata written by to_json."""
        def build(data: Mapping[str, Any]) -> CaptureMetadata:
            return cls(
                tool=_field(data, "tool", str, optional=True),
                entity_types=_strings(data, "entity_types"),
                entity_count=_field(data, "entity_count", int),
                hosts=_strings(data, "hosts"),
                vulnerabilities=_strings(data, "vulnerabilities"),
                has_sensitive_data=_field(data, "has_sensitive_data", bool),
            )
        return _decode(text, "capture metadata", build)


@dataclass
class ClusterInfo:
    """How a tier 3 chunk was clustered."""

    cluster_size: int
    strategy: str
    pattern: str

    def _to_dict(self) -> dict[str, Any]:
        return {
            "cluster_size": self.cluster_size,
            "strategy": self.strategy,
            "pattern": self.pattern,
        }

    @classmethod
    def _from_dict(cls, data: Any) -> ClusterInfo:
        data = _table(data, "cluster info")
        return cls(
            cluster_size=_field(data, "cluster_size", int),
            strategy=_field(data, "strategy", str),
            pattern=_field(data, "pattern", str),
        )


@dataclass
class ChunkMetadata:
    """Entities and filtering details for one chunk."""

    entities: list[Entity] = field(default_factory=list)
    relevance_score: float = 0.0
    selected_by_tier: int = 1
    cluster_info: ClusterInfo | None = None

    def to_json(self) -> str:
        """Compact JSON text of this metadata."""
        return _encode({
            "entities": [_entity_to_dict(e) for e in self.entities],
            "relevance_score": self.relevance_score,
            "selected_by_tier": self.selected_by_tier,
            "cluster_info": None if self.cluster_info is None else self.cluster_info._to_dict(),
        })

    @classmethod
    def from_json(cls, text: str) -> ChunkMetadata:
        """Read metadata written by to_json."""
        def build(data: Mapping[str, Any]) -> ChunkMetadata:
            tier = _field(data, "selected_by_tier", int)
            if tier > 255:
                raise ValueError("invalid value for field `selected_by_tier`")
            raw_cluster = _field(data, "cluster_info", Mapping, optional=True)
            return cls(
                entities=[_entity_from_dict(e) for e in _field(data, "entities", list)],
                relevance_score=_field(data, "relevance_score", float),
                selected_by_tier=tier,
                cluster_info=None if raw_cluster is None else ClusterInfo._from_dict(raw_cluster),
            )
        return _decode(text, "chunk metadata", build)

    def entity_count(self) -> int:
        return len(self.entities)

    def has_sensitive_data(self) -> bool:
        return any(e.should_redact for e in self.entities)


class MetadataEnricher:
    """Builds metadata and keeps a correlation graph up to date."""

    def __init__(self, graph: CorrelationGraph | None = None) -> None:
        self.graph = graph if graph is not None else CorrelationGraph()

    def enrich_capture(self, entities: Iterable[Entity], tool: str | None,
                       timestamp: int) -> CaptureMetadata:
        """Feed a capture's entities into the graph and summarise them."""
        entities = list(entities)
        self.graph.process_entities(entities, timestamp)
        return CaptureMetadata.from_entities(entities, tool)

    def create_chunk_metadata(self, chunk_text: str, entities: Iterable[Entity],
                              relevance_score: float, selected_by_tier: int,
                              cluster_info: ClusterInfo | None = None) -> ChunkMetadata:
        """Metadata for one chunk; the chunk text itself is not inspected."""
        return ChunkMetadata(
            entities=list(entities),
            relevance_score=relevance_score,
            selected_by_tier=selected_by_tier,
            cluster_info=cluster_info,
        )

    def export_stats(self) -> dict[str, int]:
        """Graph counts keyed by short names."""
        stats = self.graph.stats()
        return {
            "hosts": stats.host_count,
            "services": stats.service_count,
            "vulnerabilities": stats.vulnerability_count,
            "total_ports": stats.total_ports,
            "total_credentials": stats.total_credentials,
        }

    def get_all_hosts(self) -> list[dict[str, Any]]:
        """A plain summary of every host in the graph."""
        return [
            {
                "identifier": host.identifier,
                "ports": sorted(host.ports),
                "vulnerabilities": sorted(host.vulnerabilities),
                "first_seen": host.first_seen,
                "last_seen": host.last_seen,
            }
            for host in self.graph.get_all_hosts()
        ]