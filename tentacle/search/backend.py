from typing import Protocol

from tentacle.domain.search import HybridSearchRequest, SearchHit


class SearchBackend(Protocol):
    def hybrid_search(self, request: HybridSearchRequest) -> list[SearchHit]:
        """Rank documents by the blended semantic and BM25 score of the request."""
        ...
