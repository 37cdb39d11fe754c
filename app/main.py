"""FastAPI application serving the comparison report over HTTP."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse

from .config import settings
from .grouping import MATCH_CRITERIA, MatchCriterion, find_criterion
from .pipeline import Comparison, compare_users, open_loader
from .report import render_report
from .services.loader import ListLoader
from .services.myanimelist import ListFetchError
from .utils import unique_usernames

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    async with open_loader(settings) as loader:
        fastapi_app.state.loader = loader
        yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Side-by-side comparison of MyAnimeList anime lists",
        version="1.0.0",
        lifespan=lifespan,
    )
    register_routes(fastapi_app)
    return fastapi_app


def get_loader(fastapi_app: FastAPI) -> ListLoader:
    loader = getattr(fastapi_app.state, "loader", None)
    if not isinstance(loader, ListLoader):
        raise RuntimeError("List loader not initialised")
    return loader


def _resolve_criterion(value: str | None) -> MatchCriterion:
    if not value:
        return settings.criterion
    criterion = find_criterion(value)
    if criterion is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown criterion {value!r}; expected one of {sorted(MATCH_CRITERIA)}",
        )
    return criterion


def register_routes(fastapi_app: FastAPI) -> None:
    async def _compare(
        users: list[str], criterion: str | None, refresh: bool
    ) -> Comparison:
        usernames = unique_usernames(users) or list(settings.usernames)
        if not usernames:
            raise HTTPException(status_code=400, detail="No usernames configured.")
        resolved = _resolve_criterion(criterion)
        loader = get_loader(fastapi_app)
        try:
            return await compare_users(loader, usernames, resolved, refresh=refresh)
        except ListFetchError as exc:
            logger.warning("Report generation failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/report", response_class=HTMLResponse)
    async def report(
        user: list[str] = Query(default=[]),
        criterion: str | None = None,
        refresh: bool = False,
    ) -> HTMLResponse:
        comparison = await _compare(user, criterion, refresh)
        return HTMLResponse(render_report(comparison, title=settings.report_title))

    @fastapi_app.get("/api/comparison")
    async def comparison(
        user: list[str] = Query(default=[]),
        criterion: str | None = None,
        refresh: bool = False,
    ) -> JSONResponse:
        result = await _compare(user, criterion, refresh)
        return JSONResponse(result.to_payload())


app = create_app()
