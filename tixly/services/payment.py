import logging
import stripe
from typing import Optional
from sqlalchemy.orm import Session

from tixly.config import get_settings
from tixly.models.account import Account
from tixly.models.deposit import Deposit, DepositStatus
from tixly.models.ledger import LedgerEntry
from tixly.services.guards import ledger_guard

settings = get_settings()
stripe.api_key = settings.stripe_secret_key
logger = logging.getLogger(__name__)

STRIPE_ADDRESS = "stripe"


class PaymentError(Exception):
    pass


class PaymentService:
    @staticmethod
    def create_deposit_session(
        db: Session,
        account: Account,
        amount: int,
        success_url: str,
        cancel_url: str
    ) -> tuple[Deposit, str]:
        """
        Create a Stripe checkout session that tops up an account balance.
        `amount` is in the smallest unit (cents) and is credited 1:1.
        Returns the pending deposit and the checkout session URL.
        """
        deposit = Deposit(
            account_id=account.id,
            amount=amount,
            status=DepositStatus.PENDING
        )
        db.add(deposit)
        db.commit()
        db.refresh(deposit)

        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[{
                    "price_data": {
                        "currency": "usd",
                        "product_data": {
                            "name": "Tixly balance top-up",
                            "description": f"Balance top-up for {account.address}"
                        },
                        "unit_amount": amount
                    },
                    "quantity": 1
                }],
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata={
                    "deposit_id": str(deposit.id),
                    "account_id": str(account.id)
                }
            )

            deposit.stripe_session_id = session.id
            db.commit()

            return deposit, session.url

        except stripe.StripeError as e:
            deposit.status = DepositStatus.REFUNDED
            db.commit()
            logger.error(f"Stripe error creating deposit {deposit.id}: {e}")
            raise PaymentError(f"Stripe error: {str(e)}")

    @staticmethod
    def handle_checkout_completed(db: Session, session: dict) -> bool:
        """
        Handle successful checkout completion from Stripe webhook.
        Credits the account once; repeated deliveries are ignored.
        """
        metadata = session.get("metadata", {})
        deposit_id = int(metadata.get("deposit_id"))

        with ledger_guard:
            db.expire_all()
            try:
                deposit = db.query(Deposit).filter(Deposit.id == deposit_id).first()
                if not deposit:
                    return False
                if deposit.status == DepositStatus.COMPLETED:
                    return True

                deposit.stripe_payment_id = session.get("payment_intent")
                deposit.status = DepositStatus.COMPLETED
                db.query(Account).filter(Account.id == deposit.account_id).update(
                    {Account.balance: Account.balance + deposit.amount}, synchronize_session="fetch"
                )
                db.add(LedgerEntry(
                    sender=STRIPE_ADDRESS,
                    recipient=deposit.account.address,
                    amount=deposit.amount,
                    memo=f"deposit {deposit.id}"
                ))
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"Deposit {deposit.id} credited {deposit.amount} to {deposit.account.address}")
        return True

    @staticmethod
    def verify_webhook_signature(payload: bytes, signature: str) -> dict:
        """Verify Stripe webhook signature and return the event."""
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                settings.stripe_webhook_secret
            )
            return event
        except stripe.SignatureVerificationError:
            raise ValueError("Invalid signature")

    @staticmethod
    def get_deposit_by_session_id(db: Session, session_id: str) -> Optional[Deposit]:
        """Get a deposit by its Stripe session ID."""
        return db.query(Deposit).filter(
            Deposit.stripe_session_id == session_id
        ).first()

    @staticmethod
    def refund_deposit(db: Session, deposit_id: int) -> bool:
        """
        Refund a completed deposit via Stripe, provided the account still
        holds the deposited amount.

        The balance is debited and the deposit marked refunded before Stripe
        is called; a Stripe failure rolls both back.
        """
        with ledger_guard:
            db.expire_all()
            try:
                deposit = db.query(Deposit).filter(Deposit.id == deposit_id).first()
                if not deposit or not deposit.stripe_payment_id:
                    return False
                if deposit.status != DepositStatus.COMPLETED:
                    return False

                debited = db.query(Account).filter(
                    Account.id == deposit.account_id,
                    Account.balance >= deposit.amount
                ).update({Account.balance: Account.balance - deposit.amount}, synchronize_session="fetch")
                if not debited:
                    return False

                deposit.status = DepositStatus.REFUNDED
                db.add(LedgerEntry(
                    sender=deposit.account.address,
                    recipient=STRIPE_ADDRESS,
                    amount=deposit.amount,
                    memo=f"refund of deposit {deposit.id}"
                ))
                db.flush()

                try:
                    stripe.Refund.create(payment_intent=deposit.stripe_payment_id)
                except stripe.StripeError as e:
                    db.rollback()
                    logger.error(f"Stripe refund failed for deposit {deposit_id}: {e}")
                    return False

                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info(f"Deposit {deposit_id} refunded")
        return True
