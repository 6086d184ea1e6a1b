"""Schemas for user, notification, dashboard and audit-log endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from .common import SuccessEnvelope


class UserResponse(SuccessEnvelope):
    user: Dict[str, Any]


class UserListResponse(SuccessEnvelope):
    users: List[Dict[str, Any]]


class NotificationListResponse(SuccessEnvelope):
    notifications: List[Dict[str, Any]]
    unread_count: int


class NotificationResponse(SuccessEnvelope):
    notification: Dict[str, Any]


class DashboardResponse(SuccessEnvelope):
    dashboard: Dict[str, Any]


class SystemLogListResponse(SuccessEnvelope):
    logs: List[Dict[str, Any]]
    count: int


class SystemLogResponse(SuccessEnvelope):
    log: Dict[str, Any]
