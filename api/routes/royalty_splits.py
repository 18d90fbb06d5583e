# api/routes/royalty_splits.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas import ConfigureSplitsRequest, SplitOut
from models.database import get_session
from models.profile import Profile
from services.royalty_splits import (
    SplitTotalError,
    WorkNotFoundError,
    list_royalty_splits,
    replace_royalty_splits,
)

router = APIRouter(prefix="/royalty-splits")


@router.post("/configure", status_code=status.HTTP_201_CREATED)
async def configure_splits(
    body: ConfigureSplitsRequest,
    user: Profile = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    try:
        rows = await replace_royalty_splits(
            session, body.work_id, user.id, [s.to_input() for s in body.splits]
        )
    except SplitTotalError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except WorkNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Creative work not found")

    return {"success": True, "splits": [SplitOut.model_validate(r) for r in rows]}


@router.get("/{work_id}")
async def get_splits(work_id: UUID, session: AsyncSession = Depends(get_session)):
    rows = await list_royalty_splits(session, work_id)
    return {"success": True, "data": [SplitOut.model_validate(r) for r in rows]}
