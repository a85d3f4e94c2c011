"""Stored pipeline document codec.

Pipelines are stored as base64 text wrapping compact JSON of
``PipelineGraph.serialize()``.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging

from pipedeck.models.errors import MalformedDocument
from pipedeck.models.graph.graph import PipelineGraph

logger = logging.getLogger(__name__)


def encode_document(graph: PipelineGraph) -> str:
    payload = json.dumps(graph.serialize(), separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_document(text: str | bytes, *, strict: bool = False) -> PipelineGraph:
    """Decode stored text back into a graph.

    Raises:
        MalformedDocument: If the text is not base64-wrapped JSON, or as
            raised by ``PipelineGraph.deserialize``.
    """
    try:
        raw = base64.b64decode(text, validate=True)
        document = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        logger.warning(f"Cannot decode stored pipeline: {exc}")
        raise MalformedDocument(f"Stored pipeline is not readable: {exc}") from exc
    return PipelineGraph.deserialize(document, strict=strict)
