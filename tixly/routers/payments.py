from fastapi import APIRouter, Depends, HTTPException, Request, Header
from sqlalchemy.orm import Session

from tixly.config import get_settings
from tixly.database import get_db
from tixly.services.auth import get_current_account_required
from tixly.services.payment import PaymentError, PaymentService
from tixly.models.account import Account
from tixly.schemas.payment import DepositCreate, DepositResponse, DepositSession

router = APIRouter(prefix="/payments", tags=["payments"])
settings = get_settings()


@router.post("/deposit", response_model=DepositSession)
async def create_deposit(
    deposit_data: DepositCreate,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    success_url = f"{settings.frontend_url}/payments/success?session_id={{CHECKOUT_SESSION_ID}}"
    cancel_url = f"{settings.frontend_url}/accounts/me"

    try:
        deposit, checkout_url = PaymentService.create_deposit_session(
            db=db,
            account=account,
            amount=deposit_data.amount,
            success_url=success_url,
            cancel_url=cancel_url
        )
    except PaymentError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return DepositSession(deposit_id=deposit.id, checkout_url=checkout_url)


@router.get("/success", response_model=DepositResponse)
async def deposit_success(
    session_id: str,
    account: Account = Depends(get_current_account_required),
    db: Session = Depends(get_db)
):
    deposit = PaymentService.get_deposit_by_session_id(db, session_id)
    if not deposit or deposit.account_id != account.id:
        raise HTTPException(status_code=404, detail="Deposit not found")
    return deposit


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None, alias="stripe-signature"),
    db: Session = Depends(get_db)
):
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing signature")

    payload = await request.body()

    try:
        event = PaymentService.verify_webhook_signature(payload, stripe_signature)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    if event["type"] == "checkout.session.completed":
        session = event["data"]["object"]
        PaymentService.handle_checkout_completed(db, session)

    return {"status": "success"}
