"""Dashboard statistics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ...services.dashboard_service import DashboardService
from ..dependencies import RequestUserContext, get_authenticated_user, get_dashboard_service
from ..schemas import DashboardResponse

router = APIRouter()


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    dashboard_type: str = Query(default="user", alias="type"),
    request_user: RequestUserContext = Depends(get_authenticated_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    if dashboard_type == "admin":
        return DashboardResponse(dashboard=dashboard_service.admin_dashboard(request_user))
    return DashboardResponse(dashboard=dashboard_service.user_dashboard(request_user))
