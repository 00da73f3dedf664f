from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from tixly.config import get_settings
from tixly.database import get_db
from tixly.services.auth import get_current_account_required
from tixly.services.payment import PaymentService
from tixly.models.account import Account
from tixly.models.event import Event
from tixly.models.ledger import LedgerEntry
from tixly.models.ticket import Ticket

router = APIRouter(prefix="/admin", tags=["admin"])
settings = get_settings()


def get_current_admin(
    account: Account = Depends(get_current_account_required)
) -> Account:
    if not account.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return account


@router.get("")
async def admin_dashboard(
    account: Account = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    total_fees = db.query(func.coalesce(func.sum(LedgerEntry.amount), 0)).filter(
        LedgerEntry.recipient == settings.platform_owner_address
    ).scalar()

    return {
        "total_accounts": db.query(Account).count(),
        "total_events": db.query(Event).count(),
        "tickets_sold": db.query(Ticket).count(),
        "tickets_used": db.query(Ticket).filter(Ticket.used.is_(True)).count(),
        "platform_owner": settings.platform_owner_address,
        "fee_bps": settings.fee_bps,
        "total_fees": total_fees
    }


@router.post("/deposits/{deposit_id}/refund")
async def refund_deposit(
    deposit_id: int,
    account: Account = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    if not PaymentService.refund_deposit(db, deposit_id):
        raise HTTPException(status_code=400, detail="Deposit cannot be refunded")
    return {"status": "refunded", "deposit_id": deposit_id}
