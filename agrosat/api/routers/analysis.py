from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import logging

from agrosat.api.core.security import get_current_user, CurrentUser
from agrosat.api.dependencies import get_orchestrator
from agrosat.api.schemas.analysis import AnalysisErrorResponse
from agrosat.api.store import FieldStore, get_store
from agrosat.analysis.models import AnalysisRequest, AnalysisOutcome
from agrosat.analysis.orchestrator import (
    AnalysisOrchestrator,
    AnalysisInputError,
    FieldNotFoundError
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=AnalysisErrorResponse(error=message).model_dump()
    )


@router.post(
    "/analyze",
    response_model=AnalysisOutcome,
    responses={
        400: {"model": AnalysisErrorResponse},
        404: {"model": AnalysisErrorResponse},
        500: {"model": AnalysisErrorResponse},
    }
)
async def analyze_field(
    request: AnalysisRequest,
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)
):
    """
    Analyse a field

    Combines satellite imagery (or a synthetic estimate), current weather,
    the seasonal NDVI norm and an AI insight, and stores the result.
    Every call creates a new analysis record.
    """
    try:
        return await orchestrator.run(request, user.id, store)
    except AnalysisInputError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except FieldNotFoundError as e:
        return _error(status.HTTP_404_NOT_FOUND, str(e))
    except Exception as e:
        logger.error(f"Analysis failed for field {request.field_id}: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
