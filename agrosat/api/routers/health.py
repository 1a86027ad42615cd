from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError
import logging

from agrosat.api.store import FieldStore, get_store

router = APIRouter()
logger = logging.getLogger(__name__)

UNDEFINED_TABLE = "42P01"


def _missing_table(exc: DBAPIError) -> bool:
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    return code == UNDEFINED_TABLE or "does not exist" in str(exc.orig)


@router.get("/health")
async def health_check(store: FieldStore = Depends(get_store)):
    """Health check; reports when the database schema has not been created"""
    try:
        await store.ping()
    except DBAPIError as e:
        if _missing_table(e):
            logger.error("Database tables missing; run init_database.py")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "needs_setup", "message": "Database tables missing"}
            )
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": str(e.orig)}
        )
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error", "message": str(e)}
        )

    return {"status": "ok"}
