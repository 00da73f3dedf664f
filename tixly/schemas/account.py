from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Optional


class AccountCreate(BaseModel):
    email: EmailStr
    username: str
    password: str


class AccountLogin(BaseModel):
    email: EmailStr
    password: str


class AccountResponse(BaseModel):
    id: int
    address: str
    username: Optional[str]
    email: Optional[str]
    balance: int
    payable: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str
    address: str


class TokenData(BaseModel):
    address: Optional[str] = None
