# quack_companion/api/diagnostics.py
from fastapi import APIRouter, Depends, Request

from ..dependencies import get_auth_service
from ..schemas.diagnostics import EnvInfo
from ..services.auth import AuthService
from ..services.diagnostics import get_env_info

router = APIRouter(prefix="/diagnostics")


@router.get("/env")
async def env_info(
        request: Request,
        auth_service: AuthService = Depends(get_auth_service)
) -> EnvInfo:
    return get_env_info(request.app.state.settings, request.app.state.session_id, auth_service.endpoint_url)
