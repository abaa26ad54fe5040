"""Hybrid search models."""

import math
from typing import Annotated, Any

import numpy as np
from pydantic import BaseModel, BeforeValidator

from tentacle.domain.records import NumPyArray

DEFAULT_SEARCH_LIMIT = 20


class ProcessedQuery(BaseModel):
    """A query prepared for hybrid retrieval.

    Attributes:
        normalized: Abbreviation-expanded form used for embedding
        fts_query: Trimmed original text used for lexical matching
        semantic_weight: Blend weight of vector similarity
        bm25_weight: Blend weight of lexical matching, always ``1 - semantic_weight``
    """

    normalized: str
    fts_query: str
    semantic_weight: float
    bm25_weight: float


def _coerce_limit(value: Any) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return DEFAULT_SEARCH_LIMIT
    return limit if limit > 0 else DEFAULT_SEARCH_LIMIT


def _clamp_unit(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return min(1.0, max(0.0, number))


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class HybridSearchRequest(BaseModel):
    """Search inputs forwarded to the search backend."""

    query_vector: NumPyArray
    query_text: str
    semantic_query_text: str
    semantic_weight: Annotated[float, BeforeValidator(_clamp_unit)] = 0.5
    bm25_weight: Annotated[float, BeforeValidator(_clamp_unit)] = 0.5
    limit: Annotated[int, BeforeValidator(_coerce_limit)] = DEFAULT_SEARCH_LIMIT
    min_score: Annotated[float, BeforeValidator(_clamp_unit)] = 0.0
    exclude_document_id: Annotated[str | None, BeforeValidator(_blank_to_none)] = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def has_vector(self) -> bool:
        return bool(np.any(self.query_vector))


class SearchHit(BaseModel):
    document_id: str
    score: float


def rank_hits(hits: list[SearchHit]) -> list[SearchHit]:
    """Order hits by score, highest first, ties broken by document id."""
    return sorted(hits, key=lambda hit: (-hit.score, hit.document_id))
