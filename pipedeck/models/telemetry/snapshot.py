"""Telemetry snapshot returned by the execution service's status endpoint."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pipedeck.utils.resource_parser import leading_number


def _keyed(value: Any, key_field: str) -> Any:
    """Accept a list of entries as well as a mapping keyed by name."""
    if not isinstance(value, list):
        return value
    keyed: dict[str, Any] = {}
    for index, entry in enumerate(value):
        key = entry.get(key_field) if isinstance(entry, dict) else None
        keyed[str(key or index)] = entry
    return keyed


class ContainerStatus(BaseModel):
    """State of one container inside a pod. ``id`` is the diagram node id."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    state: str = ""
    reason: str = ""


class PodStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    state: str = ""
    containers: dict[str, ContainerStatus] = Field(default_factory=dict)

    @field_validator("containers", mode="before")
    @classmethod
    def _containers_as_mapping(cls, value: Any) -> Any:
        return {} if value is None else _keyed(value, "name")


class GroupStatus(BaseModel):
    """State of one deployment group and its pods."""

    model_config = ConfigDict(extra="ignore")

    state: str = ""
    pods: dict[str, PodStatus] = Field(default_factory=dict)

    @field_validator("pods", mode="before")
    @classmethod
    def _pods_as_mapping(cls, value: Any) -> Any:
        return {} if value is None else _keyed(value, "name")


class NodeResources(BaseModel):
    """Cluster node capacity and allocation.

    CPU figures are millicores and memory figures are bytes; values arrive as
    numbers or numeric strings and anything unreadable becomes NaN.
    """

    model_config = ConfigDict(extra="ignore")

    cpucapacity: float = 0.0
    cpurequests: float = 0.0
    cpulimits: float = 0.0
    memorycapacity: float = 0.0
    memoryrequests: float = 0.0
    memorylimits: float = 0.0

    @field_validator(
        "cpucapacity",
        "cpurequests",
        "cpulimits",
        "memorycapacity",
        "memoryrequests",
        "memorylimits",
        mode="before",
    )
    @classmethod
    def _numeric(cls, value: Any) -> float:
        if value is None:
            return 0.0
        if isinstance(value, (int, float)):
            return float(value)
        return leading_number(value)


class TelemetrySnapshot(BaseModel):
    """One status poll: overall status, per-group states and cluster nodes."""

    model_config = ConfigDict(extra="ignore")

    status: str = ""
    groups: dict[str, GroupStatus] = Field(default_factory=dict)
    nodes: dict[str, NodeResources] = Field(default_factory=dict)

    @field_validator("groups", "nodes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def from_payload(cls, payload: Any) -> TelemetrySnapshot:
        """Build a snapshot from a raw status payload; non-mappings are empty."""
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)

    def total(self, field: str) -> float:
        """Sum a NodeResources field across nodes, counting NaN as zero."""
        values = (getattr(node, field) for node in self.nodes.values())
        return sum(v for v in values if not math.isnan(v))
