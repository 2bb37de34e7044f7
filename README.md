# yinx

The analysis core of a penetration-testing companion. It takes raw terminal
output captured during an engagement, cuts it down to the lines worth keeping,
pulls out technical entities (hosts, ports, CVEs, credentials, paths) and
correlates them into a picture of the hosts and services you have found.

Everything is driven by configuration: entity patterns, tool detection rules
and filter tuning are read from TOML files or plain dictionaries, so nothing
about a particular tool or output format is hard-wired.

The package uses only the Python standard library and needs Python 3.11 or
later.

## Modules

| Module | What it holds |
| --- | --- |
| `yinx.patterns` | Config dataclasses and `PatternRegistry`, which compiles entity, tool and filter patterns. |
| `yinx.filtering.tier1` | `Tier1Filter`: deduplication of normalised lines, with state kept across calls. |
| `yinx.filtering.tier2` | `Tier2Filter`: scores lines by entropy, uniqueness, technical content and change, keeps those at or above a percentile. |
| `yinx.filtering.tier3` | `Tier3Filter` and `RepresentativeStrategy`: groups similar lines into clusters and picks a representative. |
| `yinx.filtering.pipeline` | `FilterPipeline`: runs all three tiers, with Tier 1 state kept per session. |
| `yinx.filtering.types` | `FilterDecision`, `ScoreComponents`, `ScoredLine`, `Cluster`, `FilterStats`. |
| `yinx.filtering.utils` | `shannon_entropy`, `change_score`, `percentile`. |
| `yinx.entities.graph` | `Entity` and `CorrelationGraph`, linking hosts, ports, services, vulnerabilities, credentials and paths. |
| `yinx.entities.metadata` | `CaptureMetadata`, `ChunkMetadata`, `ClusterInfo` and `MetadataEnricher`, with JSON round trips. |
| `yinx.errors` | `YinxError` and its subclasses. |

## Loading patterns

Three TOML files describe the patterns:

* **entities** – `[[entity]]` tables, each with `type`, `pattern`,
  `confidence`, `context_window` and optionally `redact` (default false) and
  `description`.
* **tools** – `[[tool]]` tables with `name`, `command_patterns`,
  `entity_hints` and `output_patterns` (each with `pattern` and `section`).
* **filters** – `[tier1]` (`max_occurrences`, `normalization_patterns`),
  `[tier2]` (the four weights, `score_threshold_percentile`,
  `max_technical_score`, `technical_patterns`) and `[tier3]`
  (`cluster_min_size`, `max_cluster_size`, `representative_strategy`,
  `cluster_patterns`, `preserve_metadata`).

```python
from pathlib import Path

from yinx.patterns import PatternRegistry

config_dir = Path("patterns")
registry = PatternRegistry.from_config_files(
    config_dir / "entities.toml",
    config_dir / "tools.toml",
    config_dir / "filters.toml",
)

tool = registry.detect_tool("nmap -sV 10.0.0.5")
if tool is not None:
    print(tool.name)

for found in registry.extract_entities("Found host at 192.168.1.1"):
    print(found.type_name, found.value, found.start, found.end, found.context)
```

Configurations already held as dictionaries can be turned into config objects
with `EntitiesConfig.from_dict`, `ToolsConfig.from_dict` and
`FiltersConfig.from_dict`, then compiled with `PatternRegistry.from_configs`.

`detect_tool` returns the first tool with a command pattern that matches
anywhere in the command. `extract_entities` returns matches pattern by
pattern, each with `context_window` characters of text on either side.
Tier 1 normalisation patterns are applied in `priority` order, Tier 3 cluster
patterns in the order given; replacements may refer to groups as `$1`,
`${name}`, and `$$` is a literal dollar.

Errors:

* a pattern that is not a valid regular expression raises `ConfigError`;
* a file that cannot be read raises `YinxIOError`;
* malformed TOML, or a missing or wrongly typed field, raises `TomlError`.

## Filtering captured output

```python
from yinx.filtering.pipeline import FilterPipeline

pipeline = FilterPipeline(registry)

clusters, stats = pipeline.process_capture("session-1", captured_output)
print(stats.input_lines, stats.tier1_output, stats.tier2_output, stats.tier3_clusters)
print(stats.processing_time_ms)

for cluster in clusters:
    print(cluster.size, cluster.representative, cluster.metadata)

# When the session is over, drop its deduplication state.
pipeline.clear_session("session-1")
```

Tier 1 counts how often each normalised line has appeared in a session and
drops it once that count passes `max_occurrences`, so repeated noise across
several captures of the same session is filtered too. Sessions are independent
of each other; `active_sessions()` reports how many are being tracked.

The tiers can also be used on their own:

* `Tier1Filter.process_line` returns `FilterDecision.KEEP` or
  `FilterDecision.DISCARD`; `filter_lines` returns the kept lines, `stats()`
  a `Tier1Stats`, and `reset()` forgets everything seen.
* `Tier2Filter.filter_lines` returns `ScoredLine` objects, in input order,
  whose score is at or above the configured percentile of all scores.
* `Tier3Filter.cluster_lines` returns `Cluster` objects. Groups smaller than
  `cluster_min_size` come back as singletons (`{"singleton": True}`), groups
  larger than `max_cluster_size` are split into chunks (`{"split": True}`),
  others carry `{"count": size}`. The representative is chosen by a
  `RepresentativeStrategy`: `first`, `longest` or `highest_entropy`;
  `RepresentativeStrategy.parse` falls back to `highest_entropy` for any other
  name.

## Correlating findings

```python
from yinx.entities.graph import Entity
from yinx.entities.metadata import MetadataEnricher

enricher = MetadataEnricher()

entities = [
    Entity(entity_type="ip_address", value="192.168.1.1",
           context="Host 192.168.1.1 is up", confidence=0.95),
    Entity(entity_type="port", value="22/tcp",
           context="22/tcp open ssh", confidence=0.9),
    Entity(entity_type="cve", value="CVE-2021-44228",
           context="vulnerable to CVE-2021-44228", confidence=0.9),
]

metadata = enricher.enrich_capture(entities, "nmap", 1000)
print(metadata.to_json())
print(enricher.export_stats())
print(enricher.get_all_hosts())
```

Entities passed together are linked: every host (`ip_address` or `hostname`)
gains the ports, `service_version` services, `cve` vulnerabilities,
`credential_*` credentials and file paths found alongside it.
`CorrelationGraph.get_vulnerable_hosts("CVE-2021-44228")` lists every host
seen with that CVE, `get_all_vulnerabilities()` returns the sorted CVE ids,
and `stats()` returns a `GraphStats` summary.

`CaptureMetadata` and `ChunkMetadata` write compact JSON with `to_json()` and
read it back with `from_json()`; text that cannot be read raises `JsonError`.

## What this package does not do

It analyses text handed to it. It does not capture terminal sessions, run as
a background service, store sessions or findings on disk, offer a command
line, or search and report on past findings; the `errors` module defines
exception types for those areas, but nothing in the package raises them.

## Tests

The test suite uses pytest and lives in `tests/`; install the `test` extra to
get it.