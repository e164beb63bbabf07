# ABOUTME: Catalog sink interface the entity providers hand their mutations to
# ABOUTME: Includes a JSON lines sink used by the okta-catalog-sync command

"""Catalog connections."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Protocol, TextIO

import structlog

if TYPE_CHECKING:
    from backstage_plugins.catalog.entities import EntityMutation

logger = structlog.get_logger(__name__)


class EntityProviderConnection(Protocol):
    """
    The catalog side of an entity provider.

    How a full mutation is reconciled with what the catalog already holds is
    entirely up to the implementation.
    """

    async def apply_mutation(self, mutation: EntityMutation) -> None: ...


class JsonLinesConnection:
    """Writes each mutation as one JSON document per line."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    async def apply_mutation(self, mutation: EntityMutation) -> None:
        self._stream.write(json.dumps(mutation.to_dict()) + "\n")
        self._stream.flush()
        logger.info("Wrote catalog mutation", type=mutation.type, entities=len(mutation.entities))
