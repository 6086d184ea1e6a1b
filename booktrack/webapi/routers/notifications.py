"""Notification inbox endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ...errors import ValidationError
from ...services.notification_service import NotificationService
from ...services.patches import NotificationPatch
from ..dependencies import RequestUserContext, get_authenticated_user, get_notification_service
from ..schemas import MessageResponse, NotificationListResponse, NotificationResponse

router = APIRouter()


@router.get("", response_model=NotificationResponse | NotificationListResponse)
def get_notifications(
    notification_id: Optional[int] = Query(default=None, alias="id"),
    filter_name: Optional[str] = Query(default=None, alias="filter"),
    limit: Optional[int] = Query(default=None),
    offset: Optional[int] = Query(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    notification_service: NotificationService = Depends(get_notification_service),
):
    if notification_id:
        return NotificationResponse(
            notification=notification_service.get_notification(request_user, notification_id)
        )
    inbox = notification_service.list_notifications(
        request_user, filter_name=filter_name, limit=limit, offset=offset
    )
    return NotificationListResponse(**inbox)


@router.put("", response_model=MessageResponse)
def update_notifications(
    notification_id: Optional[int] = Query(default=None, alias="id"),
    action: str = Query(default=""),
    payload: Optional[NotificationPatch] = Body(default=None),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    if notification_id:
        if action == "read":
            notification_service.mark_read(request_user, notification_id)
            return MessageResponse(message="Notification marked as read")
        notification_service.update_notification(
            request_user, notification_id, payload or NotificationPatch()
        )
        return MessageResponse(message="Notification updated")
    if action == "read-all":
        notification_service.mark_all_read(request_user)
        return MessageResponse(message="All notifications marked as read")
    raise ValidationError("Invalid action")


@router.delete("", response_model=MessageResponse)
def delete_notifications(
    notification_id: Optional[int] = Query(default=None, alias="id"),
    action: str = Query(default=""),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    if notification_id:
        notification_service.delete_notification(request_user, notification_id)
        return MessageResponse(message="Notification deleted")
    if action == "clear-all":
        notification_service.clear_all(request_user)
        return MessageResponse(message="All notifications cleared")
    raise ValidationError("Notification ID or action required")
