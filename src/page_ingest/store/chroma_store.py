"""Chroma implementation of the record-store abstraction."""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

import chromadb

from page_ingest.config import SimilarityMetric, settings
from page_ingest.errors import InsertError, ProvisionError
from page_ingest.ingestion.models import StoredRecord
from page_ingest.store.base import RecordStore

logger = logging.getLogger(__name__)

# Similarity metric name -> Chroma HNSW space.
METRIC_TO_SPACE: dict[str, str] = {
    "dot_product": "ip",
    "cosine": "cosine",
    "euclidean": "l2",
}
# Chroma's space when a collection was created without one.
DEFAULT_SPACE = "l2"


class ChromaRecordStore(RecordStore):
    """Chroma-backed record store.

    Parameters
    ----------
    host / port / ssl:
        Chroma server connection details.
    auth_token:
        Bearer token sent with every request; empty disables the header.
    tenant / database:
        Chroma tenant and the database records are written to.
    client:
        Pre-built client, mainly for tests.  Skips building one from the
        connection arguments.
    """

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        ssl: bool = settings.chroma_ssl,
        auth_token: str = settings.chroma_auth_token,
        tenant: str = settings.chroma_tenant,
        database: str = settings.chroma_database,
        client: Any | None = None,
    ) -> None:
        if client is None:
            headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else None
            client = chromadb.HttpClient(
                host=host,
                port=port,
                ssl=ssl,
                headers=headers,
                tenant=tenant,
                database=database,
            )
        self._client = client
        self._collections: dict[str, Any] = {}

    def _existing_names(self) -> set[str]:
        # Depending on the chromadb release this yields names or Collection objects.
        return {getattr(c, "name", c) for c in self._client.list_collections()}

    def provision_collection(
        self,
        name: str,
        dimension: int,
        metric: SimilarityMetric,
    ) -> None:
        space = METRIC_TO_SPACE.get(metric)
        if space is None:
            raise ProvisionError(f"Unsupported similarity metric: {metric!r}")

        try:
            if name in self._existing_names():
                collection = self._client.get_collection(name)
                self._check_compatible(name, collection, space, dimension)
            else:
                collection = self._create(name, space, dimension)
        except ProvisionError:
            raise
        except Exception as exc:
            raise ProvisionError(f"Could not provision collection {name!r}: {exc}") from exc
        self._collections[name] = collection

    def _create(self, name: str, space: str, dimension: int) -> Any:
        try:
            collection = self._client.create_collection(
                name=name,
                metadata={"hnsw:space": space, "dimension": dimension},
            )
        except Exception as exc:
            # Another run created it between the listing and this call.
            if "already exists" not in str(exc):
                raise
            collection = self._client.get_collection(name)
            self._check_compatible(name, collection, space, dimension)
            return collection
        logger.info("Collection %s created successfully (dimension=%d, space=%s)",
                    name, dimension, space)
        return collection

    @staticmethod
    def _check_compatible(name: str, collection: Any, space: str, dimension: int) -> None:
        meta = collection.metadata or {}
        found_space = meta.get("hnsw:space", DEFAULT_SPACE)
        found_dim = meta.get("dimension")
        if found_space != space or (found_dim is not None and found_dim != dimension):
            raise ProvisionError(
                f"Collection {name!r} already exists with space={found_space!r}, "
                f"dimension={found_dim!r}; expected space={space!r}, dimension={dimension}"
            )
        logger.info("Collection %s already exists", name)

    def _collection(self, name: str) -> Any:
        if name not in self._collections:
            self._collections[name] = self._client.get_collection(name)
        return self._collections[name]

    def insert(self, collection_name: str, record: StoredRecord) -> None:
        try:
            collection = self._collection(collection_name)
            expected = (collection.metadata or {}).get("dimension")
            if expected is not None and len(record.vector) != expected:
                raise InsertError(
                    f"Vector has {len(record.vector)} dimensions, "
                    f"collection {collection_name!r} expects {expected}"
                )
            # Random ids: re-ingesting a page adds new records rather than overwriting.
            collection.add(
                ids=[uuid4().hex],
                embeddings=[record.vector],
                documents=[record.text],
                metadatas=[record.metadata()],
            )
        except InsertError:
            raise
        except Exception as exc:
            raise InsertError(f"Insert into {collection_name!r} failed: {exc}") from exc
