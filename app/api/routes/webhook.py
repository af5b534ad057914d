"""Payment processor callbacks. Authenticated by signature, not by bearer token."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import Payments
from app.db.session import get_db
from app.services import purchase_service

router = APIRouter(tags=["webhook"])


@router.post("/webhook")
async def payment_webhook(request: Request, payments: Payments, db: Session = Depends(get_db)) -> dict:
    payload = await request.body()
    purchase_service.handle_payment_webhook(
        db,
        payload,
        request.headers.get("stripe-signature"),
        payments=payments,
    )
    return {"received": True}
