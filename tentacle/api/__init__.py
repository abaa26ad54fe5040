from typing import AsyncContextManager, Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tentacle.api.endpoints import get_endpoints_router
from tentacle.search.service import HybridSearchService
from tentacle.storage.repository import DocumentRepository


def create_app(
    *,
    repository: DocumentRepository,
    search_service: HybridSearchService | None = None,
    lifespan: Callable[[FastAPI], AsyncContextManager[None]] | None = None,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        router=get_endpoints_router(repository=repository, search_service=search_service)
    )

    return app
