from datetime import timedelta
from typing import Optional
import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from tixly.clock import utcnow
from tixly.config import get_settings
from tixly.database import get_db
from tixly.models.account import Account
from tixly.schemas.account import AccountCreate, TokenData
from tixly.services.accounts import AccountService

settings = get_settings()
security = HTTPBearer(auto_error=False)


class AuthService:
    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )

    @staticmethod
    def get_password_hash(password: str) -> str:
        return bcrypt.hashpw(
            password.encode('utf-8'),
            bcrypt.gensalt()
        ).decode('utf-8')

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        if expires_delta:
            expire = utcnow() + expires_delta
        else:
            expire = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
        return encoded_jwt

    @staticmethod
    def decode_token(token: str) -> Optional[TokenData]:
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
            address: str = payload.get("sub")
            if address is None:
                return None
            return TokenData(address=address)
        except JWTError:
            return None

    @staticmethod
    def create_account(db: Session, account_data: AccountCreate) -> Account:
        db_account = Account(
            address=AccountService.generate_address(),
            email=account_data.email,
            username=account_data.username,
            hashed_password=AuthService.get_password_hash(account_data.password),
            balance=0,
            payable=True
        )
        db.add(db_account)
        db.commit()
        db.refresh(db_account)
        return db_account

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[Account]:
        account = AccountService.get_by_email(db, email)
        if not account or not account.hashed_password:
            return None
        if not AuthService.verify_password(password, account.hashed_password):
            return None
        return account


def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[Account]:
    if credentials is None:
        return None

    token_data = AuthService.decode_token(credentials.credentials)
    if token_data is None or token_data.address is None:
        return None

    return AccountService.get_by_address(db, token_data.address)


def get_current_account_required(
    account: Optional[Account] = Depends(get_current_account)
) -> Account:
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return account
