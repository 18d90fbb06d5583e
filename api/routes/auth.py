# api/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_current_user
from api.schemas import LoginRequest, ProfileOut, SignupRequest, TokenResponse
from models.database import get_session
from models.profile import Profile
from services.auth import create_access_token, hash_password, verify_password_async

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


def _token_response(profile: Profile) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(profile.id, profile.email, profile.role),
        user=ProfileOut.model_validate(profile),
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=TokenResponse)
async def signup(body: SignupRequest, session: AsyncSession = Depends(get_session)):
    email = body.email.lower()
    result = await session.execute(
        select(Profile).where(or_(Profile.email == email, Profile.username == body.username))
    )
    existing = result.scalars().first()
    if existing is not None:
        field = "Email" if existing.email == email else "Username"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} already registered")

    profile = Profile(
        email=email,
        password_hash=hash_password(body.password),
        username=body.username,
        full_name=body.full_name,
        role=body.role,
        wallet_address=body.wallet_address,
    )
    session.add(profile)
    await session.commit()
    await session.refresh(profile)

    logger.info(f"New {profile.role} profile {profile.id}")
    return _token_response(profile)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(Profile).where(Profile.email == body.email.lower()))
    profile = result.scalar_one_or_none()

    if profile is None or not await verify_password_async(body.password, profile.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return _token_response(profile)


@router.get("/me", response_model=ProfileOut)
async def me(user: Profile = Depends(get_current_user)):
    return user
