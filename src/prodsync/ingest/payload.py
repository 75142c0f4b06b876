"""Decode request bodies that may hold several JSON documents.

Some upstream senders write documents back to back without a separator
(``{...}{...}``). A plain ``json.loads`` rejects those, so a bounded scanner
splits the text wherever the bracket depth returns to zero and parses each
slice on its own.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator, List, Tuple

from prodsync.errors import EmptyPayload, UnparsablePayload

logger = logging.getLogger(__name__)

DEFAULT_MAX_DOCUMENTS = 10
PREVIEW_LENGTH = 200

_OPENERS = "{["
_CLOSERS = "}]"


def _as_text(body: bytes | str | None) -> str:
    if body is None:
        return ""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body).decode("utf-8-sig", errors="replace")
    return body.lstrip("\ufeff")


def _segment_end(text: str, start: int) -> int | None:
    """Return the index just past the value opening at ``start``.

    ``None`` means the value never closes or the brackets are unbalanced.
    """

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth < 0:
                return None
            if depth == 0:
                return index + 1
    return None


def iter_segments(text: str, *, max_documents: int = DEFAULT_MAX_DOCUMENTS) -> Iterator[Tuple[int, str]]:
    """Yield ``(offset, slice)`` for each balanced top-level value in ``text``."""

    position = 0
    produced = 0
    length = len(text)
    while produced < max_documents:
        while position < length and text[position].isspace():
            position += 1
        if position >= length:
            return
        if text[position] not in _OPENERS:
            logger.warning("Stray text at offset %d, stopping scan", position)
            return
        end = _segment_end(text, position)
        if end is None:
            logger.warning("Unbalanced JSON starting at offset %d, stopping scan", position)
            return
        yield position, text[position:end]
        produced += 1
        position = end
    if position < length and text[position:].strip():
        logger.warning("Reached %d documents, ignoring the rest of the body", max_documents)


def decode_payload(body: bytes | str | None, *, max_documents: int = DEFAULT_MAX_DOCUMENTS) -> List[Any]:
    """Parse a request body into one or more JSON documents.

    Raises ``EmptyPayload`` for a blank body and ``UnparsablePayload`` when no
    document can be recovered. A segment that fails to parse stops the scan
    but keeps the documents parsed before it.
    """

    text = _as_text(body)
    logger.info("Raw body length: %d", len(text))
    if not text.strip():
        raise EmptyPayload()

    try:
        return [json.loads(text)]
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.info("Whole-body parse failed (%s), scanning for concatenated documents", exc)

    documents: List[Any] = []
    for offset, segment in iter_segments(text, max_documents=max_documents):
        try:
            documents.append(json.loads(segment))
        except (json.JSONDecodeError, RecursionError) as exc:
            logger.warning("Failed to parse JSON segment at offset %d: %s", offset, exc)
            break
        logger.debug("Parsed JSON document %d, length %d", len(documents), len(segment))

    if not documents:
        preview = text[:PREVIEW_LENGTH]
        logger.error("No JSON document recovered; body preview: %r", preview)
        raise UnparsablePayload(preview)

    logger.info("Parsed %d JSON document(s) from request", len(documents))
    return documents
