# api/routes/license_offerings.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas import OfferingOut, OfferingRequest
from models.database import get_session
from models.profile import Profile
from services.offerings import configure_offering, create_offering, list_offerings
from services.royalty_splits import SplitTotalError, WorkNotFoundError

router = APIRouter()


def _translate(e: Exception) -> HTTPException:
    if isinstance(e, SplitTotalError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creative work not found")


@router.post("/license-offerings/create", status_code=status.HTTP_201_CREATED)
async def create_license_offering(
    body: OfferingRequest,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    try:
        offering = await create_offering(session, user.id, body.to_input(), body.split_inputs())
    except (SplitTotalError, WorkNotFoundError) as e:
        raise _translate(e)
    return {"success": True, "license": OfferingOut.model_validate(offering)}


@router.get("/license-offerings/list")
async def list_license_offerings(
    work_id: Optional[UUID] = Query(None),
    session: AsyncSession = Depends(get_session),
):
    offerings = await list_offerings(session, work_id)
    return {"success": True, "data": [OfferingOut.model_validate(o) for o in offerings]}


@router.post("/licenses/configure", status_code=status.HTTP_201_CREATED)
async def configure_license(
    body: OfferingRequest,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    splits = body.split_inputs() if body.royalty_splits is not None else None
    try:
        offering = await configure_offering(session, user.id, body.to_input(), splits)
    except (SplitTotalError, WorkNotFoundError) as e:
        raise _translate(e)
    return {"success": True, "license": OfferingOut.model_validate(offering)}
