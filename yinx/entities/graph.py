"""Correlation graph of hosts, services, ports and vulnerabilities."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

_HOST_TYPES = frozenset({"ip_address", "hostname"})
_PATH_TYPES = frozenset({"file_path_unix", "file_path_windows"})
_PORT_NUMBER = re.compile(r"\+?[0-9]+")
_MAX_PORT = 65535


@dataclass
class Entity:
    """A typed value found in captured output."""

    entity_type: str
    value: str
    context: str
    confidence: float
    should_redact: bool = False


@dataclass
class HostInfo:
    """Everything discovered about one host."""

    identifier: str
    first_seen: int
    last_seen: int
    ports: set[int] = field(default_factory=set)
    services: dict[int, str] = field(default_factory=dict)
    vulnerabilities: set[str] = field(default_factory=set)
    credentials: list[str] = field(default_factory=list)
    paths: set[str] = field(default_factory=set)

    @classmethod
    def new(cls, identifier: str, timestamp: int) -> HostInfo:
        """A host first and last seen at the given time."""
        return cls(identifier=identifier, first_seen=timestamp, last_seen=timestamp)

    def update_timestamp(self, timestamp: int) -> None:
        """Move last_seen forward if the timestamp is later."""
        if timestamp > self.last_seen:
            self.last_seen = timestamp

    def add_port(self, port: int) -> None:
        self.ports.add(port)

    def add_service(self, port: int, service: str) -> None:
        """Record a service on a port; the port is marked open too."""
        self.ports.add(port)
        self.services[port] = service

    def add_vulnerability(self, vuln: str) -> None:
        self.vulnerabilities.add(vuln)

    def add_credential(self, cred: str) -> None:
        self.credentials.append(cred)

    def add_path(self, path: str) -> None:
        self.paths.add(path)


@dataclass
class ServiceInfo:
    """Hosts, versions and vulnerabilities seen for one service."""

    name: str
    hosts: set[str] = field(default_factory=set)
    versions: set[str] = field(default_factory=set)
    vulnerabilities: set[str] = field(default_factory=set)

    def add_host(self, host: str) -> None:
        self.hosts.add(host)

    def add_version(self, version: str) -> None:
        self.versions.add(version)

    def add_vulnerability(self, vuln: str) -> None:
        self.vulnerabilities.add(vuln)


@dataclass(frozen=True)
class GraphStats:
    """Counts over the whole correlation graph."""

    host_count: int
    service_count: int
    vulnerability_count: int
    total_ports: int
    total_credentials: int


def _parse_port(value: str) -> int | None:
    """Port number from values such as "22/tcp"."""
    head = value.split("/", 1)[0]
    if not _PORT_NUMBER.fullmatch(head):
        return None
    port = int(head)
    return port if port <= _MAX_PORT else None


def _parse_service(value: str) -> tuple[str, str] | None:
    """Name and version from values such as "Apache/2.4.41"."""
    parts = value.split("/")
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


class CorrelationGraph:
    """Relates entities found together in the same capture."""

    def __init__(self) -> None:
        self._hosts: dict[str, HostInfo] = {}
        self._services: dict[str, ServiceInfo] = {}
        self._vulnerabilities: dict[str, set[str]] = {}

    def process_entities(self, entities: Iterable[Entity], timestamp: int) -> None:
        """Attach every non-host entity to every host found alongside it."""
        entities = list(entities)
        hosts = [e for e in entities if e.entity_type in _HOST_TYPES]
        ports = [e for e in entities if e.entity_type == "port"]
        services = [e for e in entities if e.entity_type == "service_version"]
        vulns = [e for e in entities if e.entity_type == "cve"]
        creds = [e for e in entities if e.entity_type.startswith("credential_")]
        paths = [e for e in entities if e.entity_type in _PATH_TYPES]

        for host_entity in hosts:
            host_id = host_entity.value
            host = self._hosts.get(host_id)
            if host is None:
                host = HostInfo.new(host_id, timestamp)
                self._hosts[host_id] = host
            host.update_timestamp(timestamp)

            for port_entity in ports:
                port = _parse_port(port_entity.value)
                if port is not None:
                    host.add_port(port)

            for service_entity in services:
                parsed = _parse_service(service_entity.value)
                if parsed is None:
                    continue
                name, version = parsed
                if host.ports:
                    host.add_service(min(host.ports), name)
                service = self._services.get(name)
                if service is None:
                    service = ServiceInfo(name)
                    self._services[name] = service
                service.add_host(host_id)
                service.add_version(version)

            for vuln_entity in vulns:
                vuln_id = vuln_entity.value
                host.add_vulnerability(vuln_id)
                self._vulnerabilities.setdefault(vuln_id, set()).add(host_id)
                for service in self._services.values():
                    if host_id in service.hosts:
                        service.add_vulnerability(vuln_id)

            for cred_entity in creds:
                host.add_credential(cred_entity.value)

            for path_entity in paths:
                host.add_path(path_entity.value)

    def get_host(self, identifier: str) -> HostInfo | None:
        return self._hosts.get(identifier)

    def get_all_hosts(self) -> list[HostInfo]:
        return list(self._hosts.values())

    def get_service(self, name: str) -> ServiceInfo | None:
        return self._services.get(name)

    def get_all_services(self) -> list[ServiceInfo]:
        return list(self._services.values())

    def get_vulnerable_hosts(self, cve: str) -> list[HostInfo]:
        """Hosts on which the given vulnerability was seen."""
        return [self._hosts[h] for h in self._vulnerabilities.get(cve, ()) if h in self._hosts]

    def get_all_vulnerabilities(self) -> list[str]:
        """Every vulnerability identifier seen, sorted."""
        return sorted(self._vulnerabilities)

    def stats(self) -> GraphStats:
        return GraphStats(
            host_count=len(self._hosts),
            service_count=len(self._services),
            vulnerability_count=len(self._vulnerabilities),
            total_ports=sum(len(h.ports) for h in self._hosts.values()),
            total_credentials=sum(len(h.credentials) for h in self._hosts.values()),
        )