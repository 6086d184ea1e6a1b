"""Audit-trail endpoints for log administrators."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...errors import ValidationError
from ...permissions import LOG_ADMINS
from ...services.common import require_capability
from ...services.system_log_service import SystemLogService
from ..dependencies import RequestUserContext, get_request_user, get_system_log_service
from ..schemas import MessageResponse, SystemLogListResponse, SystemLogResponse

router = APIRouter()


def _numeric(value: Optional[str]) -> Optional[int]:
    candidate = (value or "").strip()
    return int(candidate) if candidate.isdigit() else None


@router.get("", response_model=SystemLogResponse | SystemLogListResponse)
def get_logs(
    log_id: Optional[int] = Query(default=None, alias="id"),
    level: Optional[str] = Query(default=None),
    user_id: Optional[str] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    offset: Optional[int] = Query(default=None),
    request_user: RequestUserContext = Depends(get_request_user),
    log_service: SystemLogService = Depends(get_system_log_service),
):
    if log_id:
        return SystemLogResponse(log=log_service.get_log(request_user, log_id))
    logs = log_service.list_logs(
        request_user, level=level, user_id=_numeric(user_id), limit=limit, offset=offset
    )
    return SystemLogListResponse(logs=logs, count=len(logs))


@router.delete("", response_model=MessageResponse)
def delete_log(
    log_id: Optional[int] = Query(default=None, alias="id"),
    request_user: RequestUserContext = Depends(get_request_user),
    log_service: SystemLogService = Depends(get_system_log_service),
) -> MessageResponse:
    require_capability(request_user, LOG_ADMINS)
    if not log_id:
        raise ValidationError("Log ID required")
    log_service.delete_log(request_user, log_id)
    return MessageResponse(message="Log deleted successfully")
