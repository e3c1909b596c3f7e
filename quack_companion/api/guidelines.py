# quack_companion/api/guidelines.py
from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_guideline_service
from ..schemas.guideline import Guideline, GuidelineContent
from ..services.guidelines import GuidelineService

router = APIRouter(prefix="/guidelines")


@router.get("")
async def list_guidelines(
        guideline_service: GuidelineService = Depends(get_guideline_service)
) -> list[Guideline]:
    return guideline_service.list_guidelines()


@router.post("/pull")
async def pull_guidelines(
        guideline_service: GuidelineService = Depends(get_guideline_service)
) -> list[Guideline]:
    return await guideline_service.pull_guidelines()


@router.post("")
async def create_guideline(
        request: GuidelineContent,
        guideline_service: GuidelineService = Depends(get_guideline_service)
) -> Guideline:
    try:
        return await guideline_service.create_guideline(request.content)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.patch("/{index}")
async def edit_guideline(
        index: int,
        request: GuidelineContent,
        guideline_service: GuidelineService = Depends(get_guideline_service)
) -> Guideline:
    try:
        return await guideline_service.edit_guideline(index, request.content)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{index}")
async def delete_guideline(
        index: int,
        guideline_service: GuidelineService = Depends(get_guideline_service)
) -> Guideline:
    try:
        return await guideline_service.remove_guideline(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
