from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.error_codes import ErrorCode
from app.core.errors import ApiError
from app.db import repository
from app.db.session import transaction
from app.models import PaymentCustomer, ProcessedWebhookEvent, Purchase
from app.services.course_service import get_course_or_404
from app.services.payments import PaymentService

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


def _ensure_payment_customer(db: Session, payments: PaymentService, user_id: str, email: str | None) -> str:
    customer = repository.get_payment_customer(db, user_id)
    if customer:
        return customer.stripe_customer_id

    stripe_customer_id = payments.create_customer(email)
    try:
        with transaction(db):
            db.add(PaymentCustomer(user_id=user_id, stripe_customer_id=stripe_customer_id))
    except IntegrityError:
        # Another request registered this user first; use its customer.
        customer = repository.get_payment_customer(db, user_id)
        if customer is None:
            raise
        return customer.stripe_customer_id
    return stripe_customer_id


def checkout(
    db: Session,
    course_id: str,
    user_id: str,
    email: str | None,
    *,
    payments: PaymentService,
    settings: Settings,
) -> str:
    """Open a payment session and return its redirect url.

    The purchase itself is recorded only by the webhook once payment completes.
    """
    course = get_course_or_404(db, course_id)
    if repository.purchase_exists(db, course.id, user_id):
        raise ApiError(ErrorCode.PURCHASE_ALREADY_EXISTS)
    if course.price is None:
        raise ApiError(ErrorCode.COURSE_REQUIRED_FIELDS_EMPTY, "Course has no price")

    customer_id = _ensure_payment_customer(db, payments, user_id, email)

    product_data: dict[str, Any] = {"name": course.title}
    if course.description:
        product_data["description"] = course.description
    base_url = settings.app_public_url.rstrip("/")

    url = payments.create_checkout_session(
        customer_id=customer_id,
        line_items=[
            {
                "quantity": 1,
                "price_data": {
                    "currency": settings.payment_currency,
                    "product_data": product_data,
                    "unit_amount": course.price,
                },
            }
        ],
        success_url=f"{base_url}/courses/{course.id}?success=1",
        cancel_url=f"{base_url}/courses/{course.id}?canceled=1",
        metadata={"courseId": course.id, "userId": user_id},
    )
    logger.info("Checkout session created for course %s user %s", course.id, user_id)
    return url


def checkout_free(db: Session, course_id: str, user_id: str) -> Purchase:
    course = get_course_or_404(db, course_id)
    if course.price != 0:
        raise ApiError(ErrorCode.COURSE_NOT_FREE)
    if repository.purchase_exists(db, course.id, user_id):
        raise ApiError(ErrorCode.PURCHASE_ALREADY_EXISTS)

    purchase = Purchase(course_id=course.id, user_id=user_id)
    try:
        with transaction(db):
            db.add(purchase)
    except IntegrityError as exc:
        raise ApiError(ErrorCode.PURCHASE_ALREADY_EXISTS) from exc
    db.refresh(purchase)
    return purchase


def handle_payment_webhook(db: Session, payload: bytes, signature: str | None, *, payments: PaymentService) -> None:
    """Record purchases from verified payment events.

    Safe to call repeatedly with the same event: the processor delivers at
    least once, so both the event id and (course, user) are deduplicated.
    """
    event = payments.verify_webhook(payload, signature)
    event_id = event.get("id")
    event_type = event.get("type") or ""

    if event_id and repository.webhook_event_processed(db, event_id):
        logger.info("Webhook event %s already processed", event_id)
        return

    if event_type != CHECKOUT_COMPLETED:
        logger.info("Ignoring webhook event type %s", event_type)
        return

    session = (event.get("data") or {}).get("object") or {}
    metadata = session.get("metadata") or {}
    course_id = metadata.get("courseId")
    user_id = metadata.get("userId")
    if not course_id or not user_id:
        raise ApiError(ErrorCode.WEBHOOK_PROCESSING_FAILED, "Event processing error: missing metadata")

    try:
        with transaction(db):
            if not repository.purchase_exists(db, course_id, user_id):
                db.add(Purchase(course_id=course_id, user_id=user_id))
            if event_id:
                db.add(ProcessedWebhookEvent(event_id=event_id, event_type=event_type))
    except IntegrityError:
        # A concurrent delivery of the same event got there first.
        if repository.purchase_exists(db, course_id, user_id):
            logger.info("Purchase for course %s user %s already recorded", course_id, user_id)
            return
        raise
    logger.info("Purchase recorded: user %s course %s", user_id, course_id)
