"""User API: registration, profiles, profile pictures and rated places."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile

from touristreview.api.v1.dependencies import (
    CurrentUserId,
    get_place_resolver,
    get_profile_service,
)
from touristreview.application.dtos.user import ProfileUpdate
from touristreview.application.services import PlaceResolver, ProfileService
from touristreview.core.limiter import limit_upload, limit_writes
from touristreview.schemas.place import ResolvedPlaceResponse
from touristreview.schemas.user import (
    ProfileUpdateRequest,
    UserProfileResponse,
    UserRegisterRequest,
    UserSummaryResponse,
)

router = APIRouter()

ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]


@router.post("", response_model=UserProfileResponse, status_code=201)
@limit_writes
async def register_user(
    request: Request,
    body: UserRegisterRequest,
    user_id: CurrentUserId,
    profiles: ProfileServiceDep,
) -> UserProfileResponse:
    """Create the caller's user document (uid from the ID token)."""
    await profiles.register(user_id, body.name, body.email, body.visibility)
    return UserProfileResponse.from_profile(await profiles.get_profile(user_id, user_id))


@router.get("", response_model=list[UserSummaryResponse])
async def list_users(
    user_id: CurrentUserId,
    profiles: ProfileServiceDep,
    search: Annotated[str | None, Query(max_length=100)] = None,
) -> list[UserSummaryResponse]:
    """Every other user, optionally filtered by name."""
    users = await profiles.list_users(user_id, search)
    return [UserSummaryResponse.model_validate(u) for u in users]


@router.get("/me", response_model=UserProfileResponse)
async def get_me(user_id: CurrentUserId, profiles: ProfileServiceDep) -> UserProfileResponse:
    return UserProfileResponse.from_profile(await profiles.get_profile(user_id, user_id))


@router.patch("/me", response_model=UserProfileResponse)
@limit_writes
async def update_me(
    request: Request,
    body: ProfileUpdateRequest,
    user_id: CurrentUserId,
    profiles: ProfileServiceDep,
) -> UserProfileResponse:
    profile = await profiles.update_profile(
        user_id,
        ProfileUpdate(name=body.name, bio=body.bio, visibility=body.visibility),
    )
    return UserProfileResponse.from_profile(profile)


@router.put("/me/picture", response_model=UserProfileResponse)
@limit_upload
async def set_picture(
    request: Request,
    user_id: CurrentUserId,
    profiles: ProfileServiceDep,
    file: Annotated[UploadFile, File(description="JPEG image")],
) -> UserProfileResponse:
    """Replace the caller's profile picture (JPEG only)."""
    data = await file.read()
    return UserProfileResponse.from_profile(await profiles.set_profile_picture(user_id, data))


@router.get("/{uid}", response_model=UserProfileResponse)
async def get_user(
    uid: str, user_id: CurrentUserId, profiles: ProfileServiceDep
) -> UserProfileResponse:
    """Another user's profile; bio and rated places are hidden by Friends-Only profiles."""
    return UserProfileResponse.from_profile(await profiles.get_profile(user_id, uid))


@router.get("/{uid}/rated-places", response_model=list[ResolvedPlaceResponse])
async def get_user_rated_places(
    uid: str,
    user_id: CurrentUserId,
    resolver: Annotated[PlaceResolver, Depends(get_place_resolver)],
) -> list[ResolvedPlaceResponse]:
    resolved = await resolver.user_rated_places(user_id, uid)
    return [ResolvedPlaceResponse.from_resolved(r) for r in resolved]
