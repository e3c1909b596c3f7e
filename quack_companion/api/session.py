# quack_companion/api/session.py
from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_auth_service
from ..schemas.auth import EndpointUpdate, LoginRequest, SessionStatus
from ..services.auth import AuthService

router = APIRouter(prefix="/session")


@router.get("")
async def get_status(
        auth_service: AuthService = Depends(get_auth_service)
) -> SessionStatus:
    return auth_service.status()


@router.put("/endpoint")
async def set_endpoint(
        update: EndpointUpdate,
        auth_service: AuthService = Depends(get_auth_service)
) -> SessionStatus:
    if not await auth_service.set_endpoint(update.endpoint_url):
        raise HTTPException(status_code=400, detail=f"Invalid endpoint: {update.endpoint_url}")
    return auth_service.status()


@router.post("/login")
async def login(
        request: LoginRequest,
        auth_service: AuthService = Depends(get_auth_service)
) -> SessionStatus:
    await auth_service.login(request.github_token)
    return auth_service.status()


@router.post("/logout")
async def logout(
        auth_service: AuthService = Depends(get_auth_service)
) -> SessionStatus:
    auth_service.logout()
    return auth_service.status()


@router.post("/refresh")
async def refresh(
        auth_service: AuthService = Depends(get_auth_service)
) -> SessionStatus:
    return await auth_service.prepare_api_access()
