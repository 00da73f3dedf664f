from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from tixly.models.deposit import DepositStatus


class DepositCreate(BaseModel):
    amount: int = Field(gt=0)


class DepositSession(BaseModel):
    deposit_id: int
    checkout_url: str


class DepositResponse(BaseModel):
    id: int
    account_id: int
    amount: int
    stripe_payment_id: Optional[str]
    status: DepositStatus
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
