from __future__ import annotations

"""
FastAPI application for the skin catalog search service.

- ``GET /search``: ranked, paginated name search (empty query -> empty page)
- ``GET /skins``: catalog-order browse filtered by category / name substring
- ``GET /skins/categories``: distinct categories, ``"all"`` first
- ``GET /health``: liveness plus loaded catalog size

Pagination values arrive as raw strings and are parsed leniently: junk,
zero or negative values fall back to defaults and oversized limits are
capped.  Failures are rendered as ``{"error": "..."}`` with a 5xx status.
"""

from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .catalog_build import load_catalog_snapshot
from .config import (
    BROWSE_DEFAULT_PAGE_SIZE,
    CATALOG_SNAPSHOT_PATH,
    DEFAULT_PAGE_SIZE,
    BrowseResponse,
    CategoriesResponse,
    ErrorResponse,
    HealthResponse,
    SearchResponse,
)
from .errors import CatalogError, CatalogUnavailableError, SearchError
from .retrieval import DataFrameCatalogStore
from .search import SkinSearchEngine, parse_int

# =============================================================================
# FastAPI app + startup
# =============================================================================

app = FastAPI(title="Skin catalog search")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_engine: Optional[SkinSearchEngine] = None
_catalog_size = 0


def load_engine(path=CATALOG_SNAPSHOT_PATH) -> SkinSearchEngine:
    """Build an engine over the snapshot at ``path``."""
    store = DataFrameCatalogStore(load_catalog_snapshot(path))
    logger.info(
        "Catalog store ready: {} items ({} published)",
        len(store),
        store.published_count,
    )
    return SkinSearchEngine(store)


def install_engine(engine: SkinSearchEngine) -> None:
    global _engine, _catalog_size
    _engine = engine
    _catalog_size = len(engine.store)


@app.on_event("startup")
def startup_event() -> None:
    global _engine, _catalog_size
    if _engine is not None:
        # preloaded by `skinsearch serve --catalog ...`
        return
    logger.info("Starting app warmup...")
    try:
        _engine = load_engine()
        _catalog_size = len(_engine.store)
    except CatalogUnavailableError as e:
        _engine = None
        logger.warning("Catalog not loaded, search will answer 503: {}", e)
    logger.info("Warmup complete.")


def get_engine() -> SkinSearchEngine:
    if _engine is None:
        raise CatalogUnavailableError("Catalog not loaded")
    return _engine


# =============================================================================
# Error rendering
# =============================================================================

@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status = 503 if isinstance(exc, CatalogUnavailableError) else 500
    message = str(exc) if isinstance(exc, (SearchError, CatalogUnavailableError)) else "Internal error"
    logger.warning("{} {} -> {} ({})", request.method, request.url.path, status, message)
    return JSONResponse(status_code=status, content=ErrorResponse(error=message).model_dump())


# =============================================================================
# Routes
# =============================================================================

@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy", catalog_items=_catalog_size if _engine else 0)


@app.get("/search", response_model=SearchResponse)
def search(
    q: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    engine: SkinSearchEngine = Depends(get_engine),
) -> SearchResponse:
    result = engine.search(
        q or "",
        page=parse_int(page, 1),
        limit=parse_int(limit, DEFAULT_PAGE_SIZE),
    )
    return SearchResponse(items=result.items, has_more=result.has_more, total=result.total)


@app.get("/skins", response_model=BrowseResponse)
def browse(
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    engine: SkinSearchEngine = Depends(get_engine),
) -> BrowseResponse:
    result = engine.browse(
        category=category,
        search=search,
        page=parse_int(page, 1),
        limit=parse_int(limit, BROWSE_DEFAULT_PAGE_SIZE),
    )
    return BrowseResponse(items=result.items, has_more=result.has_more, total_count=result.total_count)


@app.get("/skins/categories", response_model=CategoriesResponse)
def categories(engine: SkinSearchEngine = Depends(get_engine)) -> CategoriesResponse:
    return CategoriesResponse(categories=engine.categories())

