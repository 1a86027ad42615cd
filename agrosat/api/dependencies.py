"""
Request dependencies for process-wide collaborators

The application lifespan builds these once and stores them on app.state;
tests replace them through app.dependency_overrides.
"""

from fastapi import Request

from agrosat.api.config import settings
from agrosat.api.core.auth_provider import SupabaseAuthClient
from agrosat.api.core.llm import LLMClient, build_llm_client
from agrosat.analysis.orchestrator import AnalysisOrchestrator, build_orchestrator


def get_llm_client(request: Request) -> LLMClient:
    state = request.app.state
    if getattr(state, "llm_client", None) is None:
        state.llm_client = build_llm_client(settings)
    return state.llm_client


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    state = request.app.state
    if getattr(state, "orchestrator", None) is None:
        state.orchestrator = build_orchestrator(
            settings,
            get_llm_client(request),
            getattr(state, "cache", None)
        )
    return state.orchestrator


def get_auth_client(request: Request) -> SupabaseAuthClient:
    state = request.app.state
    if getattr(state, "auth_client", None) is None:
        state.auth_client = SupabaseAuthClient.from_settings(settings)
    return state.auth_client
