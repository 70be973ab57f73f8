"""
FastAPI application exposing the orchestration engine.

Endpoints:
  POST /orchestrate - Find verified statistics for a topic
  GET /health       - Liveness probe, plain "OK"
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from stats_agent import __version__
from stats_agent.config.logging import get_logger
from stats_agent.config.settings import Settings, settings as default_settings
from stats_agent.errors import (
    CollaboratorUnavailableError,
    InvalidRequestError,
    OrchestrationTimeoutError,
)
from stats_agent.orchestration.engine import OrchestrationEngine
from stats_agent.orchestration.factory import build_engine, close_engine
from stats_agent.schemas import OrchestrationRequest, OrchestrationResponse

logger = get_logger("API")

router = APIRouter()


class OrchestrateBody(BaseModel):
    """Request body for POST /orchestrate. Omitted fields take service defaults."""

    topic: str = ""
    min_verified_stats: int = 10
    max_candidates: Optional[int] = 30
    reputable_only: bool = False

    def to_request(self) -> OrchestrationRequest:
        return OrchestrationRequest(
            topic=self.topic,
            min_verified=self.min_verified_stats,
            max_candidates=self.max_candidates,
            reputable_only=self.reputable_only,
        )


@router.post("/orchestrate", response_model=OrchestrationResponse, tags=["Orchestration"])
async def orchestrate(body: OrchestrateBody, request: Request) -> OrchestrationResponse:
    """
    Run discovery, extraction and verification until the target is met.

    Returns 200 with partial=true when fewer statistics than requested
    could be verified.
    """
    engine: OrchestrationEngine = request.app.state.engine
    deadline: float = request.app.state.settings.orchestration_deadline

    try:
        return await engine.orchestrate(body.to_request(), timeout=deadline)
    except InvalidRequestError as e:
        logger.info(f"Rejected orchestration request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except CollaboratorUnavailableError as e:
        logger.error(f"Orchestration failed, collaborators unavailable: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except OrchestrationTimeoutError as e:
        logger.error(f"Orchestration timed out: {e}")
        raise HTTPException(status_code=504, detail=str(e))


@router.get("/health", response_class=PlainTextResponse, tags=["Health"])
async def health() -> str:
    return "OK"


def create_app(
    engine: Optional[OrchestrationEngine] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        engine: Pre-built engine. When omitted, one is built from settings on
            startup and its HTTP clients are closed on shutdown.
        settings: Settings to use; defaults to the module singleton.
    """
    app_settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = engine is None
        app.state.engine = engine if engine is not None else build_engine(app_settings)
        app.state.settings = app_settings
        logger.info(
            f"Orchestration service ready (search={app_settings.search_provider}, "
            f"verifier={app_settings.verifier}, deadline={app_settings.orchestration_deadline}s)"
        )
        try:
            yield
        finally:
            if owned:
                await close_engine(app.state.engine)
                logger.info("Collaborator clients closed")

    app = FastAPI(title="Statistics Orchestration Service", version=__version__, lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
