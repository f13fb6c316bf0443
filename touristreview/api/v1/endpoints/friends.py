"""Friends API: requests, friendships and friends' rated places."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from touristreview.api.v1.dependencies import (
    CurrentUserId,
    get_place_resolver,
    get_social_graph_service,
)
from touristreview.application.services import PlaceResolver, SocialGraphService
from touristreview.core.limiter import limit_writes
from touristreview.schemas.place import ResolvedPlaceResponse
from touristreview.schemas.user import (
    FriendRequestsResponse,
    FriendshipStatusResponse,
    UserSummaryResponse,
)

router = APIRouter()

SocialGraphDep = Annotated[SocialGraphService, Depends(get_social_graph_service)]


@router.get("", response_model=list[UserSummaryResponse])
async def list_friends(user_id: CurrentUserId, graph: SocialGraphDep) -> list[UserSummaryResponse]:
    friends = await graph.list_friends(user_id)
    return [UserSummaryResponse.model_validate(u) for u in friends]


@router.get("/requests", response_model=FriendRequestsResponse)
async def list_requests(user_id: CurrentUserId, graph: SocialGraphDep) -> FriendRequestsResponse:
    """Pending requests the caller has received and sent."""
    return FriendRequestsResponse.from_requests(await graph.list_requests(user_id))


@router.get("/rated-places", response_model=list[ResolvedPlaceResponse])
async def friends_rated_places(
    user_id: CurrentUserId,
    resolver: Annotated[PlaceResolver, Depends(get_place_resolver)],
) -> list[ResolvedPlaceResponse]:
    """Places the caller's friends have rated, resolved against the map."""
    resolved = await resolver.friends_rated_places(user_id)
    return [ResolvedPlaceResponse.from_resolved(r) for r in resolved]


@router.get("/status/{uid}", response_model=FriendshipStatusResponse)
async def friendship_status(
    uid: str, user_id: CurrentUserId, graph: SocialGraphDep
) -> FriendshipStatusResponse:
    return FriendshipStatusResponse(
        user_id=uid, status=await graph.friendship_status(user_id, uid)
    )


@router.post("/requests/{uid}", response_model=FriendshipStatusResponse)
@limit_writes
async def send_request(
    request: Request, uid: str, user_id: CurrentUserId, graph: SocialGraphDep
) -> FriendshipStatusResponse:
    """Send a friend request; answers with the resulting status (may already be friends)."""
    return FriendshipStatusResponse(user_id=uid, status=await graph.send_request(user_id, uid))


@router.delete("/requests/{uid}", response_model=FriendshipStatusResponse)
@limit_writes
async def cancel_request(
    request: Request, uid: str, user_id: CurrentUserId, graph: SocialGraphDep
) -> FriendshipStatusResponse:
    return FriendshipStatusResponse(user_id=uid, status=await graph.cancel_request(user_id, uid))


@router.post("/requests/{uid}/accept", response_model=FriendshipStatusResponse)
@limit_writes
async def accept_request(
    request: Request, uid: str, user_id: CurrentUserId, graph: SocialGraphDep
) -> FriendshipStatusResponse:
    return FriendshipStatusResponse(user_id=uid, status=await graph.accept_request(user_id, uid))


@router.post("/requests/{uid}/reject", response_model=FriendshipStatusResponse)
@limit_writes
async def reject_request(
    request: Request, uid: str, user_id: CurrentUserId, graph: SocialGraphDep
) -> FriendshipStatusResponse:
    return FriendshipStatusResponse(user_id=uid, status=await graph.reject_request(user_id, uid))


@router.delete("/{uid}", response_model=FriendshipStatusResponse)
@limit_writes
async def remove_friend(
    request: Request, uid: str, user_id: CurrentUserId, graph: SocialGraphDep
) -> FriendshipStatusResponse:
    return FriendshipStatusResponse(user_id=uid, status=await graph.remove_friend(user_id, uid))
