# quack_companion/dependencies.py
from fastapi import Request

from .services.assistant import AssistantService
from .services.auth import AuthService
from .services.guidelines import GuidelineService
from .services.notifications import NotificationCenter


async def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def get_guideline_service(request: Request) -> GuidelineService:
    return request.app.state.guideline_service


async def get_assistant_service(request: Request) -> AssistantService:
    return request.app.state.assistant_service


async def get_notification_center(request: Request) -> NotificationCenter:
    return request.app.state.notifier
