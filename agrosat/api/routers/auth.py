from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from typing import Dict, Any
from uuid import UUID
import logging

from agrosat.api.core.auth_provider import SupabaseAuthClient, AuthProviderError
from agrosat.api.core.security import get_current_user, CurrentUser
from agrosat.api.dependencies import get_auth_client
from agrosat.api.models.profile import Profile
from agrosat.api.schemas.auth import (
    RegisterRequest,
    RegisterResponse,
    LoginRequest,
    LoginResponse,
    ProfileResponse
)
from agrosat.api.store import FieldStore, get_store

router = APIRouter()
logger = logging.getLogger(__name__)


def profile_dict(profile: Profile) -> Dict[str, Any]:
    return ProfileResponse.model_validate(profile).model_dump(mode="json")


def _bad_gateway(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


@router.post("/register", response_model=RegisterResponse)
async def register(
    user_data: RegisterRequest,
    auth_client: SupabaseAuthClient = Depends(get_auth_client)
):
    """
    Register a new user with the auth provider

    The provider returns a session only when email confirmation is off.
    """
    try:
        data = await run_in_threadpool(
            auth_client.sign_up,
            user_data.email,
            user_data.password,
            user_data.name
        )
    except AuthProviderError as e:
        logger.warning(f"Registration failed for {user_data.email}: {e.message}")
        raise HTTPException(
            status_code=e.status_code if e.status_code >= 500 else status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )

    # With confirmation off the provider answers with a session that embeds the user
    if "access_token" in data:
        return {"user": data.get("user"), "session": data}
    return {"user": data.get("user") or data, "session": None}


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    store: FieldStore = Depends(get_store)
):
    """
    Password login

    Returns the provider's access token and the user merged with their profile.
    """
    try:
        session = await run_in_threadpool(auth_client.sign_in, credentials.email, credentials.password)
    except AuthProviderError as e:
        logger.warning(f"Login failed for {credentials.email}: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = session.get("access_token") if isinstance(session, dict) else None
    if not token:
        logger.error(f"Auth provider returned no access token for {credentials.email}")
        raise _bad_gateway("Auth provider returned no session")

    user = session.get("user") or {}
    merged = dict(user)
    if user.get("id"):
        try:
            user_id = UUID(str(user["id"]))
        except ValueError:
            logger.error(f"Auth provider returned malformed user id {user['id']!r}")
            raise _bad_gateway("Auth provider returned an invalid user")
        profile = await store.get_profile(user_id)
        if profile is not None:
            merged.update(profile_dict(profile))

    return {"token": token, "user": merged}


@router.post("/logout")
async def logout():
    """Tokens are discarded client-side; nothing to revoke here"""
    return {"success": True}


@router.get("/me")
async def read_current_user(
    user: CurrentUser = Depends(get_current_user),
    store: FieldStore = Depends(get_store)
):
    """Get current user merged with their profile, creating a default profile if missing"""
    profile = await store.get_profile(user.id)
    if profile is None:
        logger.info(f"Creating default profile for user {user.id}")
        profile = await store.create_profile(user.id, user.email, user.display_name)

    return {**user.as_dict(), **profile_dict(profile)}
