# api/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, PlainSerializer

from services.offerings import OfferingInput
from services.royalty_splits import SplitInput

# Rupiah amounts go out as JSON numbers rather than strings
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# =============================================================================
# AUTH
# =============================================================================

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    username: str = Field(min_length=3, max_length=50)
    full_name: Optional[str] = None
    role: Literal["creator", "buyer"] = "creator"
    wallet_address: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    full_name: Optional[str] = None
    role: str
    wallet_address: Optional[str] = None
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: ProfileOut


# =============================================================================
# ROYALTY SPLITS
# =============================================================================

class SplitIn(BaseModel):
    recipient_address: str = Field(min_length=1, max_length=100)
    split_percentage: Decimal = Field(gt=0, le=100)
    split_contract_address: Optional[str] = None

    def to_input(self) -> SplitInput:
        return SplitInput(
            recipient_address=self.recipient_address,
            split_percentage=self.split_percentage,
            split_contract_address=self.split_contract_address,
        )


class ConfigureSplitsRequest(BaseModel):
    work_id: UUID
    splits: List[SplitIn]


class SplitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    work_id: UUID
    recipient_address: str
    split_percentage: Money
    split_contract_address: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# LICENSE OFFERINGS
# =============================================================================

class OfferingRequest(BaseModel):
    work_id: UUID
    license_type: str = Field(min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    # price_bidr is the legacy spelling of the same rupiah amount
    price_idr: Decimal = Field(ge=0, validation_alias=AliasChoices("price_idr", "price_bidr"))
    usage_limit: Optional[int] = Field(default=None, ge=1)
    duration_days: Optional[int] = Field(default=None, ge=1)
    terms: Optional[str] = None
    royalty_splits: Optional[List[SplitIn]] = None

    def to_input(self) -> OfferingInput:
        return OfferingInput(
            work_id=self.work_id,
            license_type=self.license_type,
            title=self.title,
            price_idr=self.price_idr,
            description=self.description,
            usage_limit=self.usage_limit,
            duration_days=self.duration_days,
            terms=self.terms,
        )

    def split_inputs(self) -> List[SplitInput]:
        return [s.to_input() for s in self.royalty_splits or []]


class OfferingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    work_id: UUID
    license_type: str
    title: str
    description: Optional[str] = None
    price_idr: Money
    usage_limit: Optional[int] = None
    duration_days: Optional[int] = None
    terms: Optional[str] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# CREATIVE WORKS
# =============================================================================

class WorkCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    file_url: Optional[str] = None


class WorkUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)


class WorkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    creator_id: UUID
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    file_url: Optional[str] = None
    views: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# ORDERS / LICENSES
# =============================================================================

class OrderCreateRequest(BaseModel):
    license_offering_id: UUID


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    buyer_id: UUID
    license_offering_id: Optional[UUID] = None
    amount_idr: Money
    status: str
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentWebhookRequest(BaseModel):
    order_id: UUID


class LicenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: UUID
    license_offering_id: Optional[UUID] = None
    work_id: Optional[UUID] = None
    buyer_id: UUID
    price_idr: Money
    purchased_at: datetime
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = None
    usage_count: Optional[int] = None
    nft_token_id: Optional[str] = None
    nft_transaction_hash: Optional[str] = None
