"""Chunk payload schema, collection setup and payload builder."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from qdrant_client.models import PayloadSchemaType

from ragcore.core.exceptions import PersistenceError
from ragcore.infra.vectorstore.client import QdrantManager
from ragcore.rag.types import ChunkRecord

logger = logging.getLogger(__name__)


class PayloadField:
    CHUNK_ID = "chunk_id"
    DOCUMENT_ID = "document_id"
    KB_ID = "kb_id"
    CHUNK_INDEX = "chunk_index"
    CONTENT = "content"
    CONTENT_HASH = "content_hash"
    TOKEN_COUNT = "token_count"
    LEXICAL_TOKENS = "lexical_tokens"


CHUNK_PAYLOAD_SCHEMA: Dict[str, PayloadSchemaType] = {
    PayloadField.CHUNK_ID: PayloadSchemaType.KEYWORD,
    PayloadField.DOCUMENT_ID: PayloadSchemaType.KEYWORD,
    PayloadField.KB_ID: PayloadSchemaType.KEYWORD,
    PayloadField.CHUNK_INDEX: PayloadSchemaType.INTEGER,
    # Lexical prefilter matches query terms against this keyword array
    PayloadField.LEXICAL_TOKENS: PayloadSchemaType.KEYWORD,
}


async def ensure_collection_exists(manager: QdrantManager, *, collection_name: Optional[str] = None) -> str:
    config = manager.config
    name = collection_name or config.collection_name
    if await manager.collection_exists(name):
        logger.debug("Collection '%s' already exists.", name)
        return name
    logger.info("Creating collection '%s' vector_size=%d distance=%s", name, config.vector_size, config.distance)
    await manager.create_collection(name, vector_size=config.vector_size, distance=config.distance)
    for field_name, schema in CHUNK_PAYLOAD_SCHEMA.items():
        try:
            await manager.create_payload_index(name, field_name, schema)
        except PersistenceError as exc:
            # Filters still work unindexed, only slower
            logger.warning("Payload index '%s' on '%s' not created: %s", field_name, name, exc)
    logger.info("Collection '%s' ready.", name)
    return name


def build_chunk_payload(record: ChunkRecord) -> Dict[str, Any]:
    return {
        PayloadField.CHUNK_ID: record.id,
        PayloadField.DOCUMENT_ID: record.document_id,
        PayloadField.KB_ID: record.kb_id,
        PayloadField.CHUNK_INDEX: record.chunk_index,
        PayloadField.CONTENT: record.content,
        PayloadField.CONTENT_HASH: record.content_hash,
        PayloadField.TOKEN_COUNT: record.token_count,
        PayloadField.LEXICAL_TOKENS: list(record.lexical_tokens),
    }
