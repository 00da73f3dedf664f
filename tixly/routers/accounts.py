import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address

from tixly.config import get_settings
from tixly.database import get_db
from tixly.services.auth import AuthService, get_current_account_required
from tixly.services.accounts import AccountService
from tixly.schemas.account import AccountCreate, AccountLogin, AccountResponse, Token
from tixly.models.account import Account

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")  # Max 5 registration attempts per minute per IP
async def register(
    request: Request,
    account_data: AccountCreate,
    db: Session = Depends(get_db)
):
    if AccountService.get_by_email(db, account_data.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    if AccountService.get_by_username(db, account_data.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    if len(account_data.password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")

    account = AuthService.create_account(db, account_data)
    logger.info(f"Registered account {account.address} for {account.username}")
    return account


@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
async def login(
    request: Request,
    credentials: AccountLogin,
    db: Session = Depends(get_db)
):
    account = AuthService.authenticate(db, credentials.email, credentials.password)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    access_token = AuthService.create_access_token(data={"sub": account.address})
    return Token(access_token=access_token, token_type="bearer", address=account.address)


@router.get("/me", response_model=AccountResponse)
async def me(account: Account = Depends(get_current_account_required)):
    return account
