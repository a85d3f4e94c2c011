"""Pipeline graph: nodes, links, embedding rules and traversal queries.

``PipelineGraph`` owns every node and link of one pipeline. Insertion order
is kept and doubles as the z-order used for hit-testing (later is on top).
Relations are held twice, as ``node.parent`` and as ``group.embeds``; every
mutator keeps both sides in step.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable, Iterable, Mapping
from typing import Any, NamedTuple

from pydantic import ValidationError

from pipedeck.constants.enums import LinkType
from pipedeck.constants.values import UNTITLED_PIPELINE
from pipedeck.models.errors import InvalidEmbedding, InvalidLink, MalformedDocument
from pipedeck.models.graph.links import (
    LINK_ADAPTER,
    STRUCTURAL_LINK_FIELDS,
    Endpoint,
    FileLink,
    Link,
)
from pipedeck.models.graph.nodes import (
    NODE_ADAPTER,
    STRUCTURAL_NODE_FIELDS,
    ContainerNode,
    KubernetesGroup,
    Node,
    Point,
    SourceNode,
    can_embed,
)

logger = logging.getLogger(__name__)

HitTest = Callable[[Point], Iterable[str]]

_MATCH_ALL = ".*"


class WatchItem(NamedTuple):
    """A directory (relative to the pipeline bucket) and a file pattern."""

    path: str
    pattern: str


def bucket_name(title: str) -> str:
    """Name of the per-pipeline file store: lower-cased, spaces to underscores."""
    return title.lower().replace(" ", "_")


def _new_id() -> str:
    return uuid.uuid4().hex


def _as_endpoint(value: Endpoint | Mapping[str, Any] | Point | str | None) -> Endpoint:
    if isinstance(value, Endpoint):
        return value.model_copy(deep=True)
    if isinstance(value, Point):
        return Endpoint(point=value)
    if isinstance(value, str):
        return Endpoint(id=value)
    if value is None:
        return Endpoint()
    return Endpoint.model_validate(value)


def _valid_pattern(pattern: str) -> str:
    if not pattern:
        return _MATCH_ALL
    try:
        re.compile(pattern)
    except re.error as exc:
        logger.warning(f"Cannot compile pattern {pattern!r} ({exc}), using {_MATCH_ALL}")
        return _MATCH_ALL
    return pattern


class PipelineGraph:
    """A pipeline diagram: typed nodes joined by typed links."""

    def __init__(self, title: str = UNTITLED_PIPELINE) -> None:
        self.title = title
        self._nodes: dict[str, Node] = {}
        self._links: dict[str, Link] = {}
        self.load_problems: list[MalformedDocument] = []

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def links(self) -> list[Link]:
        return list(self._links.values())

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    @property
    def bucket_name(self) -> str:
        return bucket_name(self.title)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PipelineGraph):
            return NotImplemented
        return (
            self.title == other.title
            and self.nodes == other.nodes
            and self.links == other.links
        )

    __hash__ = None  # type: ignore[assignment]

    def node(self, node_id: str) -> Node:
        """Return a node by id, raising KeyError when it is unknown."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Unknown node: {node_id}") from None

    def get_node(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def link(self, link_id: str) -> Link:
        try:
            return self._links[link_id]
        except KeyError:
            raise KeyError(f"Unknown link: {link_id}") from None

    def groups(self) -> list[KubernetesGroup]:
        return [n for n in self._nodes.values() if isinstance(n, KubernetesGroup)]

    def containers(self) -> list[ContainerNode]:
        return [n for n in self._nodes.values() if isinstance(n, ContainerNode)]

    def sources(self) -> list[SourceNode]:
        return [n for n in self._nodes.values() if isinstance(n, SourceNode)]

    def children(self, group_id: str) -> list[Node]:
        """Embedded children of a group, in embed order."""
        group = self.node(group_id)
        if not isinstance(group, KubernetesGroup):
            return []
        return [self._nodes[cid] for cid in group.embeds if cid in self._nodes]

    # =========================================================================
    # Nodes and embedding
    # =========================================================================

    def add_node(self, node: Node | Mapping[str, Any]) -> str:
        """Insert a node under a fresh id, with no parent. Returns the id."""
        if isinstance(node, Mapping):
            node = NODE_ADAPTER.validate_python(dict(node))
        node_id = _new_id()
        updates: dict[str, Any] = {"id": node_id, "parent": None}
        if isinstance(node, KubernetesGroup):
            updates["embeds"] = []
        self._nodes[node_id] = node.model_copy(update=updates, deep=True)
        logger.debug(f"Added {self._nodes[node_id].kind} node {node_id}")
        return node_id

    def embed(self, parent_id: str, child_id: str) -> None:
        """Embed ``child_id`` in group ``parent_id``.

        A child embedded elsewhere is moved. Embedding under the current
        parent is a no-op.

        Raises:
            InvalidEmbedding: If either id is unknown or the type rule is
                violated. The graph is left unchanged.
        """
        parent = self._nodes.get(parent_id)
        child = self._nodes.get(child_id)
        if parent is None or child is None:
            raise InvalidEmbedding(parent_id, child_id, "unknown node")
        reason = can_embed(parent, child)
        if reason is not None:
            raise InvalidEmbedding(parent_id, child_id, reason)
        if child.parent == parent_id:
            return
        if child.parent is not None:
            self.unembed(child_id)
        child.parent = parent_id
        parent.embeds.append(child_id)  # type: ignore[union-attr]

    def unembed(self, child_id: str) -> None:
        """Detach a node from its parent. Absolute coordinates are kept."""
        child = self.node(child_id)
        if child.parent is None:
            return
        parent = self._nodes.get(child.parent)
        if isinstance(parent, KubernetesGroup) and child_id in parent.embeds:
            parent.embeds.remove(child_id)
        child.parent = None

    def resolve_embed_target(
        self,
        point: Point,
        placing_id: str,
        hit_test: HitTest | None = None,
    ) -> Node | None:
        """Find the group a node dropped at ``point`` would be embedded in.

        The topmost node under the point is considered, skipping the node
        being placed and any node whose parent is the placed node. Returns
        it only when it is a legal parent for the placed node.
        """
        placing = self.node(placing_id)
        if hit_test is not None:
            candidates = set(hit_test(point))
        else:
            candidates = {nid for nid, n in self._nodes.items() if n.contains(point)}

        for node_id in reversed(self._nodes):
            if node_id not in candidates or node_id == placing_id:
                continue
            below = self._nodes[node_id]
            if below.parent == placing_id:
                continue
            if can_embed(below, placing) is None:
                return below
            return None
        return None

    def drop_node(
        self,
        node_id: str,
        point: Point,
        hit_test: HitTest | None = None,
    ) -> str | None:
        """Move a node so it is centred on ``point`` and embed it there.

        The node is first detached from its old parent. A drop over anything
        but a legal parent leaves it unembedded. Returns the new parent id.
        """
        node = self.node(node_id)
        center = node.center()
        self._translate(node, point.x - center.x, point.y - center.y)
        if node.parent is not None:
            self.unembed(node_id)

        target = self.resolve_embed_target(point, node_id, hit_test)
        if target is None:
            return None
        self.embed(target.id, node_id)
        return target.id

    def _translate(self, node: Node, dx: float, dy: float) -> None:
        node.position = node.position.model_copy(
            update={"x": node.position.x + dx, "y": node.position.y + dy}
        )
        if isinstance(node, KubernetesGroup):
            for child in self.children(node.id):
                self._translate(child, dx, dy)

    def remove_node(self, node_id: str) -> None:
        """Remove a node and its links. A group's children are released."""
        node = self.node(node_id)
        if isinstance(node, KubernetesGroup):
            for child_id in node.embeds:
                child = self._nodes.get(child_id)
                if child is not None:
                    child.parent = None
            node.embeds.clear()
        elif node.parent is not None:
            self.unembed(node_id)

        attached = [
            lid
            for lid, link in self._links.items()
            if node_id in (link.source.id, link.target.id)
        ]
        for link_id in attached:
            del self._links[link_id]
        del self._nodes[node_id]
        logger.debug(f"Removed node {node_id} and {len(attached)} link(s)")

    def update_node(self, node_id: str, **changes: Any) -> Node:
        """Apply validated property edits to a node.

        Raises:
            ValueError: If a structural field is edited or validation fails.
        """
        node = self.node(node_id)
        blocked = STRUCTURAL_NODE_FIELDS.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot edit node fields: {', '.join(sorted(blocked))}")
        data = node.model_dump()
        data.update(changes)
        updated = type(node).model_validate(data)
        self._nodes[node_id] = updated
        return updated

    # =========================================================================
    # Links
    # =========================================================================

    def _validate_connection(self, source: Endpoint, target: Endpoint) -> None:
        if not source.attached:
            raise InvalidLink("A link must start on a node")
        start = self._nodes.get(source.id)  # type: ignore[arg-type]
        if start is None:
            raise InvalidLink(f"Unknown source node: {source.id}")
        if isinstance(start, KubernetesGroup):
            raise InvalidLink("Groups cannot be linked")
        if source.port is not None and source.port in start.in_ports:
            raise InvalidLink(f"A link cannot start on in-port {source.port!r}")

        if not target.attached:
            return
        end = self._nodes.get(target.id)  # type: ignore[arg-type]
        if end is None:
            raise InvalidLink(f"Unknown target node: {target.id}")
        if end.id == start.id:
            raise InvalidLink("A node cannot be linked to itself")
        if isinstance(end, KubernetesGroup):
            raise InvalidLink("Groups cannot be linked")
        if target.port is not None and target.port not in end.in_ports:
            raise InvalidLink(f"A link must end on an in-port, not {target.port!r}")

    def add_link(
        self,
        source: Endpoint | Mapping[str, Any] | str,
        target: Endpoint | Mapping[str, Any] | Point | str | None,
        link_type: LinkType | str = LinkType.FILE,
        attrs: Mapping[str, Any] | None = None,
    ) -> str:
        """Add a link and return its id.

        ``target`` may be a free point while a drag is in progress; such a
        link is kept in memory but never serialized.

        Raises:
            InvalidLink: If the endpoints break the connection rule.
        """
        src = _as_endpoint(source)
        dst = _as_endpoint(target)
        self._validate_connection(src, dst)

        data = dict(attrs or {})
        link_id = _new_id()
        data.update(
            id=link_id,
            type=LinkType(link_type).value,
            source=src.model_dump(),
            target=dst.model_dump(),
        )
        self._links[link_id] = LINK_ADAPTER.validate_python(data)
        return link_id

    def connect_link(
        self, link_id: str, target: Endpoint | Mapping[str, Any] | Point | str
    ) -> Link:
        """Move the target end of an existing link, e.g. when a drag ends."""
        link = self.link(link_id)
        dst = _as_endpoint(target)
        self._validate_connection(link.source, dst)
        link.target = dst
        return link

    def remove_link(self, link_id: str) -> None:
        self.link(link_id)
        del self._links[link_id]

    def update_link(self, link_id: str, **changes: Any) -> Link:
        """Apply validated property edits to a link."""
        link = self.link(link_id)
        blocked = STRUCTURAL_LINK_FIELDS.intersection(changes)
        if blocked:
            raise ValueError(f"Cannot edit link fields: {', '.join(sorted(blocked))}")
        data = link.model_dump()
        data.update(changes)
        updated = type(link).model_validate(data)
        self._links[link_id] = updated
        return updated

    # =========================================================================
    # Traversal
    # =========================================================================

    def links_to(self, node_id: str) -> list[Link]:
        return [l for l in self._links.values() if l.target.id == node_id]

    def links_from(self, node_id: str) -> list[Link]:
        return [l for l in self._links.values() if l.source.id == node_id]

    def next_ids(self, node_id: str) -> list[str]:
        return [l.target.id for l in self.links_from(node_id) if l.target.id]

    def previous_ids(self, node_id: str) -> list[str]:
        return [l.source.id for l in self.links_to(node_id) if l.source.id]

    def start_ids(self) -> list[str]:
        """Containers with no incoming link from another container.

        Links fed by sources do not count, so a container reading straight
        from a feed is still a starting point.
        """
        containers = {c.id for c in self.containers()}
        fed = {
            l.target.id for l in self._links.values() if l.source.id in containers
        }
        return [cid for cid in self._container_ids() if cid not in fed]

    def end_ids(self) -> list[str]:
        """Containers that are not the source of any link."""
        feeding = {l.source.id for l in self._links.values()}
        return [cid for cid in self._container_ids() if cid not in feeding]

    def _container_ids(self) -> list[str]:
        return [c.id for c in self.containers()]

    def is_convergence(self, node_id: str) -> bool:
        """True when more than one path flows into the node."""
        return len(self.previous_ids(node_id)) > 1

    def connection(self, source_id: str, dest_id: str) -> Link | None:
        for link in self._links.values():
            if link.source.id == source_id and link.target.id == dest_id:
                return link
        return None

    def watch_items(self) -> list[WatchItem]:
        """Directories and patterns to watch for new files.

        Only file links with ``watch`` set contribute. An empty path (or one
        naming the pipeline bucket) resolves to the upstream node's name, and
        to the bucket root when that name is the bucket itself. With no
        watched links the bucket root is watched for everything.
        """
        watched = [
            l for l in self._links.values() if isinstance(l, FileLink) and l.watch
        ]
        if not watched:
            return [WatchItem("", _MATCH_ALL)]

        root = self.bucket_name
        items: list[WatchItem] = []
        for link in watched:
            path = link.path
            if not path or path == root:
                upstream = self.get_node(link.source.id)
                path = upstream.name if upstream is not None else ""
                if path == root:
                    path = ""
            item = WatchItem(path, _valid_pattern(link.pattern))
            if item not in items:
                items.append(item)
        return items

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize(self) -> dict[str, Any]:
        """Return the portable document ``{title, nodes, links, embeddings}``.

        Output is insertion-ordered. Links with a free endpoint are skipped.
        """
        nodes = [
            n.model_dump(mode="json", exclude={"parent", "embeds"})
            for n in self._nodes.values()
        ]
        links = [l.model_dump(mode="json") for l in self._links.values() if l.attached]
        embeddings = [
            {"parent": group.id, "child": child_id}
            for group in self.groups()
            for child_id in group.embeds
        ]
        return {
            "title": self.title,
            "nodes": nodes,
            "links": links,
            "embeddings": embeddings,
        }

    def _record_problem(
        self, message: str, *, node_id: str | None, strict: bool
    ) -> None:
        problem = MalformedDocument(message, node_id=node_id)
        if strict:
            raise problem
        logger.warning(f"Pipeline '{self.title}': {message}")
        self.load_problems.append(problem)

    @classmethod
    def deserialize(
        cls, document: Mapping[str, Any], *, strict: bool = False
    ) -> PipelineGraph:
        """Rebuild a graph from a stored document.

        Relations that reference missing ids or break the embedding rule are
        dropped and recorded in ``load_problems``; the affected nodes come back
        unembedded. With ``strict`` the first such problem is raised.

        Raises:
            MalformedDocument: If the document or one of its entries cannot
                be parsed at all, or on any problem when ``strict``.
        """
        if not isinstance(document, Mapping):
            raise MalformedDocument("Pipeline document must be a mapping")

        graph = cls(title=str(document.get("title") or UNTITLED_PIPELINE))
        declared: list[dict[str, Any]] = []

        for index, raw in enumerate(_entries(document, "nodes")):
            data = dict(raw)
            parent_id = data.pop("parent", None)
            data.pop("embeds", None)
            try:
                node = NODE_ADAPTER.validate_python(data)
            except ValidationError as exc:
                raise MalformedDocument(f"Node entry {index} is invalid: {exc}") from exc
            if not node.id:
                node.id = _new_id()
            if node.id in graph._nodes:
                raise MalformedDocument(f"Duplicate node id {node.id}", node_id=node.id)
            graph._nodes[node.id] = node
            if parent_id:
                declared.append({"parent": parent_id, "child": node.id})

        embeddings = document.get("embeddings")
        for raw in declared if embeddings is None else _entries(document, "embeddings"):
            graph._restore_embedding(raw.get("parent"), raw.get("child"), strict)

        for index, raw in enumerate(_entries(document, "links")):
            try:
                link = LINK_ADAPTER.validate_python(dict(raw))
            except ValidationError as exc:
                raise MalformedDocument(f"Link entry {index} is invalid: {exc}") from exc
            if not link.attached:
                logger.debug(f"Skipping unattached link entry {index}")
                continue
            try:
                graph._validate_connection(link.source, link.target)
            except InvalidLink as exc:
                graph._record_problem(
                    f"Dropped link {link.id or index}: {exc}",
                    node_id=link.source.id,
                    strict=strict,
                )
                continue
            if not link.id:
                link.id = _new_id()
            graph._links[link.id] = link

        if graph.load_problems:
            logger.info(
                f"Loaded pipeline '{graph.title}' with {len(graph.load_problems)} problem(s)"
            )
        return graph

    def _restore_embedding(self, parent_id: Any, child_id: Any, strict: bool) -> None:
        # Ids that are not strings cannot name a node.
        parent = self.get_node(parent_id) if isinstance(parent_id, str) else None
        child = self.get_node(child_id) if isinstance(child_id, str) else None
        if parent is None or child is None:
            self._record_problem(
                f"Embedding {parent_id!r} -> {child_id!r} references an unknown node",
                node_id=child_id if isinstance(child_id, str) else None,
                strict=strict,
            )
            return
        reason = can_embed(parent, child)
        if reason is not None:
            self._record_problem(
                f"Embedding {parent_id} -> {child_id} is invalid: {reason}",
                node_id=child_id,
                strict=strict,
            )
            return
        if child.parent == parent.id:
            return
        if child.parent is not None:
            self._record_problem(
                f"Node {child_id} is embedded in both {child.parent} and {parent_id}",
                node_id=child_id,
                strict=strict,
            )
            return
        child.parent = parent.id
        parent.embeds.append(child.id)  # type: ignore[union-attr]


def _entries(document: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    raw = document.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedDocument(f"'{key}' must be a list")
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            raise MalformedDocument(f"Entry {index} of '{key}' must be a mapping")
    return raw
