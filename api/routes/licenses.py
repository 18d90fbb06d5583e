# api/routes/licenses.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas import LicenseOut
from models.creative_work import CreativeWork
from models.database import get_session
from models.license import License
from models.license_offering import LicenseOffering
from models.profile import Profile

router = APIRouter(prefix="/licenses")


@router.get("/my-licenses")
async def my_licenses(
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(License, LicenseOffering.license_type, LicenseOffering.title, CreativeWork.title)
        .outerjoin(LicenseOffering, LicenseOffering.id == License.license_offering_id)
        .outerjoin(CreativeWork, CreativeWork.id == License.work_id)
        .where(License.buyer_id == user.id)
        .order_by(License.purchased_at.desc())
    )
    data = [
        {
            **LicenseOut.model_validate(license).model_dump(mode="json"),
            "license_type": license_type,
            "license_title": offering_title,
            "work_title": work_title,
        }
        for license, license_type, offering_title, work_title in result.all()
    ]
    return {"success": True, "data": data, "count": len(data)}


@router.get("/history/{work_id}")
async def license_history(work_id: UUID, session: AsyncSession = Depends(get_session)):
    """Public sales history of a work, newest first."""
    result = await session.execute(
        select(License, LicenseOffering.license_type, Profile.username)
        .outerjoin(LicenseOffering, LicenseOffering.id == License.license_offering_id)
        .outerjoin(Profile, Profile.id == License.buyer_id)
        .where(License.work_id == work_id)
        .order_by(License.purchased_at.desc())
    )
    data = [
        {
            **LicenseOut.model_validate(license).model_dump(mode="json"),
            "license_type": license_type,
            "buyer_username": username or "Unknown",
        }
        for license, license_type, username in result.all()
    ]
    return {"success": True, "data": data, "count": len(data), "work_id": str(work_id)}
