"""Profile and user-administration endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ...errors import ValidationError
from ...permissions import USER_ADMINS
from ...services.common import require_capability
from ...services.patches import ProfilePatch
from ...services.user_service import UserService
from ..dependencies import RequestUserContext, get_authenticated_user, get_user_service
from ..schemas import MessageResponse, UserListResponse, UserResponse

router = APIRouter()


@router.get("", response_model=UserResponse | UserListResponse)
def get_users(
    action: str = Query(default=""),
    user_id: Optional[int] = Query(default=None, alias="id"),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    role: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    offset: Optional[int] = Query(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    user_service: UserService = Depends(get_user_service),
):
    if action == "profile":
        return UserResponse(user=user_service.get_profile(request_user, user_id))
    if action == "list":
        users = user_service.list_users(
            request_user, status=status_filter, role=role, limit=limit, offset=offset
        )
        return UserListResponse(users=users)
    raise ValidationError("Invalid action")


@router.put("", response_model=MessageResponse)
def update_user(
    action: str = Query(default=""),
    user_id: Optional[int] = Query(default=None, alias="id"),
    payload: Optional[ProfilePatch] = Body(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    if action != "profile":
        raise ValidationError("Invalid action")
    if user_id:
        require_capability(request_user, USER_ADMINS)
    user_service.update_profile(request_user, payload or ProfilePatch(), user_id)
    return MessageResponse(message="Profile updated successfully")


@router.delete("", response_model=MessageResponse)
def delete_user(
    user_id: Optional[int] = Query(default=None, alias="id"),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    require_capability(request_user, USER_ADMINS)
    if not user_id:
        raise ValidationError("User ID required")
    user_service.delete_user(request_user, user_id)
    return MessageResponse(message="User deleted successfully")
