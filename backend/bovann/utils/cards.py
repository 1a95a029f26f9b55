from flask import current_app
from sqlalchemy.exc import IntegrityError

from bovann.extensions import db
from bovann.models import Student, Payment, AccessCard, PaymentStatusEnum
from bovann.utils.errors import StudentNotFound
from bovann.utils.qr import encode_payload, render_qr_image


def history_url(student_id):
    base = current_app.config["FRONTEND_URL"].rstrip("/")
    return f"{base}/history/{student_id}"


def valid_payments_for(student_id):
    return (
        Payment.query
        .filter_by(student_id=student_id, status=PaymentStatusEnum.VALID)
        .order_by(Payment.created_at.desc())
        .all()
    )


def issue_or_refresh_card(student_id, new_payment):
    """
    Create or refresh the single access card of a student after a payment.

    The card snapshots the cumulative amount of VALID payments together with
    the triggering payment's window and status. The caller commits.
    """
    student = db.session.get(Student, student_id)
    if not student:
        raise StudentNotFound()

    payments = valid_payments_for(student_id)
    total_amount = sum(p.amount for p in payments)

    payload = encode_payload(
        student_id=student.id,
        total_amount=total_amount,
        valid_from=new_payment.valid_from,
        valid_until=new_payment.valid_until,
        status=new_payment.status.value,
    )
    qr_image = render_qr_image(payload)

    card = _find_card(student_id)
    if card is None:
        card = AccessCard(student_id=student_id)
        try:
            with db.session.begin_nested():
                _apply_snapshot(card, new_payment, payload, qr_image, total_amount)
                db.session.add(card)
        except IntegrityError:
            # a concurrent request created the card first; refresh that one
            current_app.logger.warning("Access card for student %s created concurrently", student_id)
            card = _find_card(student_id)
            _apply_snapshot(card, new_payment, payload, qr_image, total_amount)
    else:
        _apply_snapshot(card, new_payment, payload, qr_image, total_amount)

    db.session.flush()
    current_app.logger.debug(
        "Access card %s refreshed for student %s (total %s)", card.id, student_id, total_amount
    )
    return card


def _apply_snapshot(card, payment, payload, qr_image, total_amount):
    card.payment_id = payment.id
    card.payload = payload
    card.qr_data = qr_image
    card.total_amount = total_amount


def _find_card(student_id):
    return AccessCard.query.filter_by(student_id=student_id).first()
