"""Hybrid search: query preparation, query embedding and the backend call."""

import numpy as np
from loguru import logger

from tentacle.domain.search import HybridSearchRequest, SearchHit, rank_hits
from tentacle.embedders.base import Embedder
from tentacle.search.backend import SearchBackend
from tentacle.search.query_preprocessor import (
    WeightPolicy,
    adaptive_semantic_weight,
    preprocess_query,
)


class HybridSearchService:
    """Prepares search requests and forwards them to a search backend."""

    def __init__(
        self,
        *,
        embedder: Embedder,
        backend: SearchBackend | None = None,
        weight_policy: WeightPolicy = adaptive_semantic_weight,
        default_limit: int = 20,
        default_min_score: float = 0.0,
    ):
        self.embedder = embedder
        self.backend = backend
        self.weight_policy = weight_policy
        self.default_limit = default_limit
        self.default_min_score = default_min_score

    def prepare(
        self,
        query: str,
        *,
        limit: int | None = None,
        min_score: float | None = None,
        exclude_document_id: str | None = None,
    ) -> HybridSearchRequest:
        """Build the request the backend receives for ``query``.

        When the normalized query cannot be embedded, the request carries a zero
        vector and BM25-only weights.
        """
        processed = preprocess_query(query, weight_policy=self.weight_policy)
        semantic_weight, bm25_weight = processed.semantic_weight, processed.bm25_weight

        try:
            query_vector = self.embedder.embed(processed.normalized)
        except ValueError as e:
            logger.warning(f"Query embedding failed, falling back to BM25-only search: {e}")
            query_vector = np.zeros(self.embedder.dimensions, dtype=np.float32)
            semantic_weight, bm25_weight = 0.0, 1.0

        return HybridSearchRequest(
            query_vector=query_vector,
            query_text=processed.fts_query,
            semantic_query_text=processed.normalized,
            semantic_weight=semantic_weight,
            bm25_weight=bm25_weight,
            limit=self.default_limit if limit is None else limit,
            min_score=self.default_min_score if min_score is None else min_score,
            exclude_document_id=exclude_document_id,
        )

    def search(
        self,
        query: str,
        *,
        limit: int | None = None,
        min_score: float | None = None,
        exclude_document_id: str | None = None,
    ) -> list[SearchHit]:
        """Run a hybrid search.

        Args:
            query: Raw user query
            limit: Maximum number of hits; non-positive values use the default
            min_score: Minimum blended score, clamped to [0, 1]
            exclude_document_id: Document to leave out, typically the one being viewed

        Returns:
            Hits ordered by score, highest first. An empty query returns no hits.

        Raises:
            RuntimeError: If no search backend is configured
        """
        if self.backend is None:
            raise RuntimeError("No search backend configured")
        if not query or not query.strip():
            return []

        request = self.prepare(
            query, limit=limit, min_score=min_score, exclude_document_id=exclude_document_id
        )
        hits = self.backend.hybrid_search(request)
        kept = [hit for hit in hits if hit.document_id != request.exclude_document_id]
        return rank_hits(kept)[: request.limit]
