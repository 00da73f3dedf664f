from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tixly.database import get_db
from tixly.errors import NotFound
from tixly.services.auth import get_current_account_required
from tixly.services.registry import SQLCertificateRegistry
from tixly.services.redemption import RedemptionService
from tixly.services.sales import SaleService
from tixly.models.account import Account
from tixly.models.ticket import Ticket
from tixly.schemas.ticket import TicketPurchase, TicketResponse

router = APIRouter(prefix="/tickets", tags=["tickets"])


def _ticket_response(db: Session, ticket: Ticket) -> TicketResponse:
    registry = SQLCertificateRegistry(db)
    return TicketResponse(
        id=ticket.id,
        event_id=ticket.event_id,
        used=ticket.used,
        purchased_at=ticket.purchased_at,
        owner=registry.owner_of(ticket.id),
        descriptor=registry.descriptor_of(ticket.id)
    )


@router.post("/purchase", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def purchase_ticket(
    purchase: TicketPurchase,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    ticket = SaleService.buy_ticket(
        db,
        buyer=account.address,
        event_id=purchase.event_id,
        certificate_metadata=purchase.certificate_metadata,
        label=purchase.label,
        payment=purchase.payment
    )
    return _ticket_response(db, ticket)


@router.post("/{token_id}/use", response_model=TicketResponse)
async def use_ticket(
    token_id: int,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    ticket = RedemptionService.use_ticket(db, caller=account.address, token_id=token_id)
    return _ticket_response(db, ticket)


@router.get("/{token_id}", response_model=TicketResponse)
async def get_ticket(token_id: int, db: Session = Depends(get_db)):
    ticket = db.get(Ticket, token_id)
    if ticket is None:
        raise NotFound("Ticket does not exist")
    return _ticket_response(db, ticket)


@router.get("/{token_id}/used")
async def is_ticket_used(token_id: int, db: Session = Depends(get_db)):
    return {"token_id": token_id, "used": RedemptionService.is_ticket_used(db, token_id)}
