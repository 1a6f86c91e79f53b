"""
FAISS Index - Product embedding similarity search.

Features:
- Cosine similarity via inner product over L2-normalised vectors
- Blocking FAISS calls run in a worker thread
- Index persistence with per-vector metadata
- Optional metadata predicate applied while collecting hits
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import faiss
import numpy as np

logger = logging.getLogger(__name__)

__all__ = ["FAISSIndex"]

INDEX_FILE = "faiss_index.bin"
METADATA_FILE = "metadata.json"


class FAISSIndex:
    """
    FAISS vector index for product embeddings.

    Each vector position carries a metadata dict (``shop_id`` and
    ``product_id`` for the product store).

    Example:
        >>> index = FAISSIndex(dimension=384)
        >>> ids = await index.add_vectors(embeddings, [{"shop_id": "s", "product_id": "p"}])
        >>> hits = await index.search(query_embedding, k=10)
    """

    def __init__(
        self,
        dimension: int = 384,
        index_type: str = "Flat",
        nlist: int = 100,
    ) -> None:
        """
        Initialize FAISS index.

        Args:
            dimension: Vector dimension (384 for MiniLM, 768 for MPNet)
            index_type: Index type ("Flat", "IVFFlat", "HNSW")
            nlist: Number of clusters for IVF index
        """
        self.dimension = dimension
        self.index_type = index_type
        self.nlist = nlist

        self._index: faiss.Index | None = None
        self._metadata: list[dict[str, Any]] = []

    def _create_index(self) -> faiss.Index:
        """Create FAISS index based on type."""
        if self.index_type == "IVFFlat":
            quantizer = faiss.IndexFlatIP(self.dimension)
            return faiss.IndexIVFFlat(
                quantizer, self.dimension, self.nlist, faiss.METRIC_INNER_PRODUCT
            )
        if self.index_type == "HNSW":
            return faiss.IndexHNSWFlat(self.dimension, 32, faiss.METRIC_INNER_PRODUCT)
        return faiss.IndexFlatIP(self.dimension)

    async def initialize(self) -> None:
        """Initialize empty index."""
        self._index = self._create_index()
        self._metadata = []
        logger.info(
            "FAISS index initialized: dimension=%d, type=%s",
            self.dimension,
            self.index_type,
        )

    def _prepare(self, vectors: np.ndarray) -> np.ndarray:
        if vectors.ndim == 1:
            vectors = vectors.reshape(1, -1)
        if vectors.shape[1] != self.dimension:
            raise ValueError(
                f"Expected vectors of dimension {self.dimension}, got {vectors.shape[1]}"
            )
        vectors = np.ascontiguousarray(vectors.astype("float32"))
        faiss.normalize_L2(vectors)
        return vectors

    async def add_vectors(
        self,
        vectors: np.ndarray,
        metadata: list[dict[str, Any]],
    ) -> list[int]:
        """
        Add vectors with metadata.

        Args:
            vectors: numpy array of shape (n, dimension)
            metadata: List of metadata dicts (same length as vectors)

        Returns:
            Index positions assigned to the new vectors
        """
        if self._index is None:
            await self.initialize()
        assert self._index is not None

        vectors = self._prepare(vectors)
        if len(vectors) != len(metadata):
            raise ValueError("vectors and metadata must have the same length")

        if not self._index.is_trained:
            if len(vectors) < self.nlist:
                logger.warning(
                    "Not enough vectors to train %s (%d < %d), using Flat",
                    self.index_type,
                    len(vectors),
                    self.nlist,
                )
                self.index_type = "Flat"
                self._index = self._create_index()
            else:
                await asyncio.to_thread(self._index.train, vectors)

        start = self._index.ntotal
        await asyncio.to_thread(self._index.add, vectors)
        self._metadata.extend(metadata)

        logger.debug("Added %d vectors to index", len(vectors))
        return list(range(start, start + len(vectors)))

    async def search(
        self,
        query_vector: np.ndarray,
        k: int = 10,
        predicate: Callable[[dict[str, Any]], bool] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Search for similar vectors.

        Args:
            query_vector: Query vector of shape (dimension,) or (1, dimension)
            k: Number of nearest positions to scan
            predicate: Optional metadata filter applied to the hits

        Returns:
            List of dicts with 'score', 'metadata', and 'index', best first
        """
        if self._index is None or self._index.ntotal == 0:
            return []

        query = self._prepare(query_vector)

        scores, indices = await asyncio.to_thread(
            self._index.search, query, min(k, self._index.ntotal)
        )

        results = []
        for score, idx in zip(scores[0], indices[0]):
            if idx < 0 or idx >= len(self._metadata):
                continue
            metadata = self._metadata[idx]
            if predicate is not None and not predicate(metadata):
                continue
            results.append(
                {
                    "score": float(score),
                    "index": int(idx),
                    "metadata": metadata,
                }
            )

        return results

    async def save(self, path: str | Path) -> None:
        """
        Save index to disk.

        Args:
            path: Directory to save index
        """
        if self._index is None:
            return

        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

        await asyncio.to_thread(faiss.write_index, self._index, str(path / INDEX_FILE))

        metadata = {
            "dimension": self.dimension,
            "index_type": self.index_type,
            "nlist": self.nlist,
            "metadata": self._metadata,
        }
        await asyncio.to_thread(self._write_json, path / METADATA_FILE, metadata)

        logger.info("Index saved to %s (%d vectors)", path, self._index.ntotal)

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        """Write JSON file (sync helper for to_thread)."""
        with open(path, "w") as f:
            json.dump(data, f)

    async def load(self, path: str | Path) -> None:
        """
        Load index from disk.

        Args:
            path: Directory containing saved index
        """
        path = Path(path)

        self._index = await asyncio.to_thread(faiss.read_index, str(path / INDEX_FILE))

        data = await asyncio.to_thread(self._read_json, path / METADATA_FILE)
        self.dimension = data["dimension"]
        self.index_type = data["index_type"]
        self.nlist = data["nlist"]
        self._metadata = data["metadata"]

        logger.info("Index loaded from %s (%d vectors)", path, self.size)

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        """Read JSON file (sync helper for to_thread)."""
        with open(path) as f:
            result: dict[str, Any] = json.load(f)
            return result

    @staticmethod
    def exists(path: str | Path) -> bool:
        """Check whether a saved index lives at ``path``."""
        path = Path(path)
        return (path / INDEX_FILE).exists() and (path / METADATA_FILE).exists()

    @property
    def size(self) -> int:
        """Get number of vectors in index."""
        return self._index.ntotal if self._index else 0
