from fastapi import APIRouter, Depends
from typing import List

from agrosat.api.core.security import get_current_user, CurrentUser
from agrosat.api.schemas.activity import ActivityResponse
from agrosat.api.store import FieldStore, get_store

router = APIRouter()


@router.get("", response_model=List[ActivityResponse])
async def list_activity(
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """Activity feed, newest first"""
    return await store.list_activity(user.id)
