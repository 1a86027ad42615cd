from fastapi import APIRouter, Depends, HTTPException, status

from agrosat.api.core.security import get_current_user, CurrentUser
from agrosat.api.schemas.auth import SettingsUpdate, ProfileResponse
from agrosat.api.store import FieldStore, get_store

router = APIRouter()


@router.put("/settings", response_model=ProfileResponse)
async def update_settings(
    update: SettingsUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """
    Update display name and dashboard settings

    Email changes go through the auth provider and are not applied here.
    """
    profile = await store.update_profile(user.id, name=update.name, settings=update.settings)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )
    return profile
