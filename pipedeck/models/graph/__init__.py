"""Pipeline graph model: nodes, links, embedding and the stored document."""

from pipedeck.models.graph.document import decode_document, encode_document
from pipedeck.models.graph.graph import PipelineGraph, WatchItem, bucket_name
from pipedeck.models.graph.links import (
    Endpoint,
    FileLink,
    Link,
    SocketLink,
    TcpLink,
    UdpLink,
)
from pipedeck.models.graph.nodes import (
    ContainerNode,
    GitRepo,
    KubernetesGroup,
    Node,
    Point,
    Size,
    SourceNode,
)

__all__ = [
    "ContainerNode",
    "Endpoint",
    "FileLink",
    "GitRepo",
    "KubernetesGroup",
    "Link",
    "Node",
    "PipelineGraph",
    "Point",
    "Size",
    "SocketLink",
    "SourceNode",
    "TcpLink",
    "UdpLink",
    "WatchItem",
    "bucket_name",
    "decode_document",
    "encode_document",
]
