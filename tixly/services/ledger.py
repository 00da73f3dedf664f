"""
Native-asset balances and value transfers.

A sale collects the buyer's payment into escrow, then pays the organizer,
the platform owner and any refund out of it. Each payout can be refused;
the caller treats a refusal as fatal and rolls the session back.

Balances are moved with SQL-side increments so a row loaded earlier in the
session can never write an old value back.
"""
import logging
from typing import Callable, Optional
from sqlalchemy.orm import Session

from tixly.errors import TransferFailed, ValidationFailed
from tixly.models.account import Account
from tixly.models.ledger import LedgerEntry

logger = logging.getLogger(__name__)

ESCROW_ADDRESS = "escrow"

# Called with (amount, memo) after a recipient is credited
ReceiveHook = Callable[[int, str], None]


class AccountLedger:
    def __init__(self, db: Session, hooks: Optional[dict[str, ReceiveHook]] = None):
        self.db = db
        self.hooks = hooks or {}

    def debit(self, address: str, amount: int, memo: str = "") -> None:
        """Move `amount` from an account into escrow."""
        charged = self.db.query(Account).filter(
            Account.address == address,
            Account.balance >= amount
        ).update({Account.balance: Account.balance - amount}, synchronize_session="fetch")
        if not charged:
            raise ValidationFailed("Insufficient balance")
        self.db.add(LedgerEntry(sender=address, recipient=ESCROW_ADDRESS, amount=amount, memo=memo))

    def transfer(self, recipient: str, amount: int, memo: str = "") -> None:
        """Pay `amount` out of escrow. Raises TransferFailed if the recipient refuses it."""
        account = self.db.query(Account).filter(
            Account.address == recipient
        ).populate_existing().first()
        if account is None:
            raise TransferFailed(f"No account for {recipient}")
        if not account.payable:
            raise TransferFailed(f"{recipient} does not accept payments")

        self.db.query(Account).filter(Account.id == account.id).update(
            {Account.balance: Account.balance + amount}, synchronize_session="fetch"
        )
        self.db.add(LedgerEntry(sender=ESCROW_ADDRESS, recipient=recipient, amount=amount, memo=memo))

        hook = self.hooks.get(recipient)
        if hook is not None:
            try:
                hook(amount, memo)
            except Exception as e:
                logger.warning(f"Receive hook for {recipient} failed: {e}")
                raise TransferFailed(f"{recipient} rejected the payment") from e
