import logging
import secrets
from typing import Optional
from sqlalchemy.orm import Session

from tixly.models.account import Account

logger = logging.getLogger(__name__)


class AccountService:
    @staticmethod
    def generate_address() -> str:
        return "0x" + secrets.token_hex(20)

    @staticmethod
    def get_by_address(db: Session, address: str) -> Optional[Account]:
        return db.query(Account).filter(Account.address == address).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Account]:
        return db.query(Account).filter(Account.email == email).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[Account]:
        return db.query(Account).filter(Account.username == username).first()

    @staticmethod
    def ensure_account(db: Session, address: str, username: Optional[str] = None) -> Account:
        """Get the account for `address`, creating an empty payable one if needed."""
        account = AccountService.get_by_address(db, address)
        if account:
            return account

        account = Account(address=address, username=username, balance=0, payable=True)
        db.add(account)
        db.commit()
        db.refresh(account)
        logger.info(f"Created account {address}")
        return account

