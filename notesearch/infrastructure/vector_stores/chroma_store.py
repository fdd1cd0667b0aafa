import logging
from typing import Any, Optional

import requests

from notesearch.core.exceptions import IndexUnavailableError
from notesearch.core.models.document import Document, TimeRange

logger = logging.getLogger(__name__)


class ChromaVectorStore:
    """Vector store using ChromaDB HTTP API."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "vault_notes",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 30.0,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            tenant: Tenant name.
            database: Database name.
            timeout: Request timeout in seconds.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._timeout = timeout
        self._collection_id: Optional[str] = None

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request; any transport or HTTP error means the index is down."""
        try:
            resp = requests.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise IndexUnavailableError(f"ChromaDB unreachable: {e}") from e

        if resp.status_code != 200:
            raise IndexUnavailableError(
                f"ChromaDB {method} {url} failed with HTTP {resp.status_code}"
            )
        return resp

    def _ensure_collection(self) -> str:
        """Get or create collection, return ID."""
        if self._collection_id:
            return self._collection_id

        resp = self._request("GET", self._collections_url)
        for col in resp.json():
            if col["name"] == self._collection_name:
                self._collection_id = col["id"]
                return self._collection_id

        resp = self._request(
            "POST",
            self._collections_url,
            json={"name": self._collection_name, "metadata": {"hnsw:space": "cosine"}},
        )
        self._collection_id = resp.json()["id"]
        logger.info(f"Created collection: {self._collection_name}")
        return self._collection_id

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict],
    ) -> None:
        """Insert or replace chunks by ID."""
        col_id = self._ensure_collection()
        self._request(
            "POST",
            f"{self._collections_url}/{col_id}/upsert",
            json={
                "ids": ids,
                "embeddings": embeddings,
                "documents": documents,
                "metadatas": metadatas,
            },
        )

    def delete_paths(self, paths: list[str]) -> None:
        """Delete all chunks of the given notes."""
        col_id = self._ensure_collection()
        self._request(
            "POST",
            f"{self._collections_url}/{col_id}/delete",
            json={"where": {"path": {"$in": paths}}},
        )

    def query(
        self,
        query_embedding: list[float],
        n_results: int = 5,
        time_range: Optional[TimeRange] = None,
    ) -> list[Document]:
        """Search by embedding."""
        col_id = self._ensure_collection()
        payload: dict[str, Any] = {
            "query_embeddings": [query_embedding],
            "n_results": n_results,
            "include": ["documents", "metadatas", "distances"],
        }
        if time_range is not None:
            payload["where"] = {
                "$and": [
                    {"mtime": {"$gte": time_range.start_ms}},
                    {"mtime": {"$lt": time_range.end_ms}},
                ]
            }

        resp = self._request("POST", f"{self._collections_url}/{col_id}/query", json=payload)
        data = resp.json()
        results = []

        if data.get("ids") and data["ids"][0]:
            for i in range(len(data["ids"][0])):
                distance = data["distances"][0][i]
                meta = data["metadatas"][0][i] or {}

                results.append(
                    Document(
                        content=data["documents"][0][i],
                        path=meta.get("path", ""),
                        title=meta.get("title", ""),
                        score=1.0 - distance,
                        mtime=meta.get("mtime") or None,
                        ctime=meta.get("ctime") or None,
                        chunk_id=meta.get("chunk_id"),
                        is_chunk=True,
                        tags=(meta.get("tags") or "").split(),
                    )
                )

        return results

    def count(self) -> int:
        """Get chunk count."""
        col_id = self._ensure_collection()
        resp = self._request("GET", f"{self._collections_url}/{col_id}/count")
        return resp.json()

    def get_all_metadatas(self) -> list[dict]:
        """Get all chunk metadatas."""
        col_id = self._ensure_collection()
        resp = self._request(
            "POST", f"{self._collections_url}/{col_id}/get", json={"include": ["metadatas"]}
        )
        return resp.json().get("metadatas", [])
