"""Node models placed on a pipeline diagram.

Three variants share a common geometry base and are told apart by ``kind``:

- ``SourceNode``: a data feed; never a parent, has no resource footprint.
- ``ContainerNode``: an executable step; may sit in one ``KubernetesGroup``.
- ``KubernetesGroup``: a deployment group; holds containers, never nested.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from pipedeck.constants.defaults import (
    CONTAINER_CPU_DEFAULT,
    CONTAINER_EXPOSE_PORT_DEFAULT,
    CONTAINER_MEMORY_DEFAULT,
    CONTAINER_TIMEOUT_DEFAULT,
    GROUP_SIZE_DEFAULT,
    NODE_POSITION_DEFAULT,
    NODE_SIZE_DEFAULT,
)
from pipedeck.constants.enums import NodeKind
from pipedeck.constants.limits import SCALE_MIN
from pipedeck.constants.values import IN_PORTS, OUT_PORTS


class Point(BaseModel):
    """A point in diagram coordinates."""

    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    width: float = 0.0
    height: float = 0.0


def _default_position() -> Point:
    return Point(x=NODE_POSITION_DEFAULT[0], y=NODE_POSITION_DEFAULT[1])


def _default_size() -> Size:
    return Size(width=NODE_SIZE_DEFAULT[0], height=NODE_SIZE_DEFAULT[1])


def _group_size() -> Size:
    return Size(width=GROUP_SIZE_DEFAULT[0], height=GROUP_SIZE_DEFAULT[1])


class BaseNode(BaseModel):
    """Fields every node carries: identity, parent and absolute geometry."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    parent: str | None = None
    position: Point = Field(default_factory=_default_position)
    size: Size = Field(default_factory=_default_size)

    def contains(self, point: Point) -> bool:
        """Return True when the point lies inside the node's bounding box."""
        return (
            self.position.x <= point.x <= self.position.x + self.size.width
            and self.position.y <= point.y <= self.position.y + self.size.height
        )

    def center(self) -> Point:
        return Point(
            x=self.position.x + self.size.width / 2,
            y=self.position.y + self.size.height / 2,
        )

    @property
    def in_ports(self) -> tuple[str, ...]:
        return IN_PORTS

    @property
    def out_ports(self) -> tuple[str, ...]:
        return OUT_PORTS


class SourceNode(BaseNode):
    """A data feed such as a bucket or an inbound endpoint."""

    kind: Literal["source"] = NodeKind.SOURCE.value
    sourcetype: str = ""


class GitRepo(BaseModel):
    """Repository a container is built from. ``password`` is stored encrypted."""

    repo: str = ""
    branch: str = ""
    username: str = ""
    password: str = ""
    entrypoint: str = ""


class ContainerNode(BaseNode):
    """An executable pipeline step."""

    kind: Literal["container"] = NodeKind.CONTAINER.value
    element: str = ""
    command: str = ""
    arguments: str = ""
    version: str = ""
    timeout: int = CONTAINER_TIMEOUT_DEFAULT
    autostart: bool = False
    script: bool = False
    scriptcontent: str = ""  # base64
    custom: bool = False
    existing: bool = False
    cpu: str = CONTAINER_CPU_DEFAULT
    memory: str = CONTAINER_MEMORY_DEFAULT
    exposeport: int = CONTAINER_EXPOSE_PORT_DEFAULT
    isudp: bool = False
    environment: list[str] = Field(default_factory=list)
    gitrepo: GitRepo = Field(default_factory=GitRepo)


class KubernetesGroup(BaseNode):
    """A deployment group scaled to ``scale`` replicas of its containers."""

    kind: Literal["kubernetes"] = NodeKind.KUBERNETES.value
    size: Size = Field(default_factory=_group_size)
    settype: str = ""
    scale: int = Field(default=0, ge=SCALE_MIN)
    embeds: list[str] = Field(default_factory=list)
    environment: list[str] = Field(default_factory=list)

    @property
    def in_ports(self) -> tuple[str, ...]:
        return ()

    @property
    def out_ports(self) -> tuple[str, ...]:
        return ()


Node = Annotated[
    Union[SourceNode, ContainerNode, KubernetesGroup],
    Field(discriminator="kind"),
]

NODE_ADAPTER: TypeAdapter[Node] = TypeAdapter(Node)

# Fields owned by the graph; property edits may not touch them.
STRUCTURAL_NODE_FIELDS: frozenset[str] = frozenset({"id", "kind", "parent", "embeds"})


def can_embed(parent: BaseNode, child: BaseNode) -> str | None:
    """Return the reason an embed is illegal, or None when it is allowed."""
    if parent.id == child.id:
        return "a node cannot contain itself"
    if not isinstance(parent, KubernetesGroup):
        return f"parent is a {parent.kind} node, not a group"
    if isinstance(child, KubernetesGroup):
        return "groups cannot be nested"
    return None
