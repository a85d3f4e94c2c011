"""Link models connecting pipeline nodes."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from pipedeck.constants.defaults import TCP_DEST_PORT_DEFAULT, UDP_DEST_PORT_DEFAULT
from pipedeck.constants.enums import LinkType
from pipedeck.models.graph.nodes import Point


class Endpoint(BaseModel):
    """One end of a link: a node (and optional port) or a free point."""

    id: str | None = None
    port: str | None = None
    point: Point | None = None

    @property
    def attached(self) -> bool:
        return self.id is not None


class BaseLink(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    source: Endpoint = Field(default_factory=Endpoint)
    target: Endpoint = Field(default_factory=Endpoint)

    @property
    def attached(self) -> bool:
        """True when both ends sit on nodes; only attached links are stored."""
        return self.source.attached and self.target.attached


class FileLink(BaseLink):
    """Files written by the source are read by the target."""

    type: Literal["file"] = LinkType.FILE.value
    path: str = ""
    pattern: str = ""
    watch: bool = False


class TcpLink(BaseLink):
    type: Literal["tcp"] = LinkType.TCP.value
    source_port: int = 0
    dest_port: int = TCP_DEST_PORT_DEFAULT
    address: str = ""


class UdpLink(BaseLink):
    type: Literal["udp"] = LinkType.UDP.value
    source_port: int = 0
    dest_port: int = UDP_DEST_PORT_DEFAULT
    address: str = ""


class SocketLink(BaseLink):
    """A unix domain socket shared by both ends."""

    type: Literal["socket"] = LinkType.SOCKET.value
    path: str = ""


Link = Annotated[
    Union[FileLink, TcpLink, UdpLink, SocketLink],
    Field(discriminator="type"),
]

LINK_ADAPTER: TypeAdapter[Link] = TypeAdapter(Link)

STRUCTURAL_LINK_FIELDS: frozenset[str] = frozenset({"id", "type", "source", "target"})
