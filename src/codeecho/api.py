"""HTTP API mirroring the dashboard's JSON endpoints."""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from fastapi import APIRouter, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .adapters import create_source
from .adapters.base import RepositorySource
from .core.analyzer import RepositoryAggregator
from .core.exceptions import AuthenticationError, UpstreamLookupError
from .core.models import Config
from .utils.file_filter import ExclusionFilter

logger = logging.getLogger(__name__)

SourceFactory = Callable[[Optional[str], Config], RepositorySource]


class ErrorResponse(BaseModel):
    error: str


class ExportResponse(BaseModel):
    text: str
    totalTokens: int


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Accept ``token <t>``, ``Bearer <t>`` or a bare token."""
    if not authorization:
        return None
    scheme, _, value = authorization.strip().partition(" ")
    if scheme.lower() in ("token", "bearer"):
        return value.strip() or None
    if not value:
        return scheme or None
    return None


def _run(request: Request, authorization: Optional[str], action: Callable[[RepositoryAggregator], Any]) -> JSONResponse:
    """Run ``action`` against a request-scoped aggregator, mapping errors to status codes."""
    token = _token_from_header(authorization)
    if not token:
        return _error(401, "Unauthorized")

    config: Config = request.app.state.config
    try:
        source = request.app.state.source_factory(token, config)
        return JSONResponse(content=action(RepositoryAggregator(source, config)))
    except AuthenticationError as e:
        return _error(e.status_code, e.message)
    except UpstreamLookupError as e:
        return _error(e.status_code, e.message)
    except Exception:
        logger.exception(f"Unexpected failure handling {request.url.path}")
        return _error(500, "Internal Server Error")


router = APIRouter(prefix="/api")


@router.get("/repos")
def repos(request: Request, authorization: Optional[str] = Header(None)) -> JSONResponse:
    return _run(request, authorization, lambda agg: agg.repositories())


@router.get("/branches")
def branches(
    request: Request,
    owner: str = Query(...),
    repo: str = Query(...),
    authorization: Optional[str] = Header(None),
) -> JSONResponse:
    return _run(
        request,
        authorization,
        lambda agg: [{"name": name} for name in agg.branches(owner, repo)],
    )


@router.get("/folderStructure")
def folder_structure(
    request: Request,
    owner: str = Query(...),
    repo: str = Query(...),
    branch: str = Query(...),
    authorization: Optional[str] = Header(None),
) -> JSONResponse:
    return _run(
        request,
        authorization,
        lambda agg: agg.folder_structure(owner, repo, branch).to_dict(),
    )


@router.get("/fetchRepo")
def fetch_repo(
    request: Request,
    owner: str = Query(...),
    repo: str = Query(...),
    branch: str = Query(...),
    exclusions: Optional[str] = Query(None),
    authorization: Optional[str] = Header(None),
) -> JSONResponse:
    excluded = ExclusionFilter.parse(exclusions)

    def export(agg: RepositoryAggregator) -> Any:
        result = agg.export(owner, repo, branch, excluded)
        return ExportResponse(**result.to_response()).model_dump()

    return _run(request, authorization, export)


def create_app(config: Optional[Config] = None, source_factory: Optional[SourceFactory] = None) -> FastAPI:
    """FastAPI app factory."""
    app = FastAPI(title="codeecho", docs_url="/docs", redoc_url=None)
    app.state.config = config or Config()
    app.state.source_factory = source_factory or create_source
    app.include_router(router)
    return app
