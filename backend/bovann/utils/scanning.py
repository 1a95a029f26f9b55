"""
Guard-side verification of scanned access cards.

``scan_card`` never raises for business rejections: it returns a
``ScanOutcome`` tagged ``AUTHORIZED`` or ``REJECTED``. Malformed scans come
back tagged ``INVALID`` and the HTTP layer answers them with a 400.
"""
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from bovann.extensions import db
from bovann.models import Student, AccessCard, ScanLog, Payment, PaymentStatusEnum
from bovann.utils.errors import InvalidPayload
from bovann.utils.qr import decode_payload

AUTHORIZED = "AUTHORIZED"
REJECTED = "REJECTED"
INVALID = "INVALID"

# rejection reasons
STUDENT_NOT_FOUND = "student_not_found"
NOT_YET_VALID = "not_yet_valid"
EXPIRED = "expired"
PAYMENT_NOT_VALIDATED = "payment_not_validated"
NO_VALID_PAYMENT = "no_valid_payment"
NO_ACCESS_CARD = "no_access_card"
ALREADY_USED_TODAY = "already_used_today"


@dataclass
class ScanOutcome:
    kind: str
    message: str
    reason: Optional[str] = None
    status: str = "REFUSED"
    student: Optional[Student] = None
    payload: dict = field(default_factory=dict)
    scan_log: Optional[ScanLog] = None

    @property
    def authorized(self):
        return self.kind == AUTHORIZED

    @classmethod
    def rejected(cls, reason, message, student=None, payload=None, status="REFUSED"):
        return cls(REJECTED, message, reason=reason, status=status,
                   student=student, payload=payload or {})

    def to_response(self):
        """Map the outcome onto ``(body, http_status)``."""
        if self.kind == INVALID:
            return {"success": False, "message": self.message}, 400

        body = {
            "success": self.authorized,
            "message": self.message,
            "status": self.status,
        }
        if self.reason:
            body["reason"] = self.reason
        if self.student is not None:
            body["student"] = {
                "id": self.student.id,
                "name": self.student.full_name,
                "institution": self.student.institution,
                "amount": self.payload.get("totalAmount"),
            }
        if self.authorized:
            body["validUntil"] = self.payload["validUntil"].isoformat()
            body["scanId"] = self.scan_log.id
        return body, 200


def day_bounds(moment):
    start = datetime.combine(moment.date(), time.min)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def _fr_date(value):
    return value.strftime("%d/%m/%Y")


def scan_card(qr_data, guardian_id, now=None):
    now = now or datetime.now()

    try:
        payload = decode_payload(qr_data)
    except InvalidPayload as err:
        return ScanOutcome(INVALID, err.message, reason="invalid_payload")

    student = db.session.get(Student, payload["studentId"])
    if not student:
        return ScanOutcome.rejected(STUDENT_NOT_FOUND, "Étudiant non trouvé", payload=payload)

    if now < payload["validFrom"]:
        return ScanOutcome.rejected(
            NOT_YET_VALID,
            f"Accès non encore valide. Valide à partir du {_fr_date(payload['validFrom'])}.",
            student, payload,
        )

    if now > payload["validUntil"]:
        return ScanOutcome.rejected(
            EXPIRED,
            f"Accès expiré. Valide jusqu'au {_fr_date(payload['validUntil'])}.",
            student, payload, status="EXPIRED",
        )

    if payload["status"] != PaymentStatusEnum.VALID.value:
        return ScanOutcome.rejected(PAYMENT_NOT_VALIDATED, "Paiement non validé.", student, payload)

    # the payload is a snapshot; a payment cancelled since then must not open the gate
    has_valid_payment = db.session.query(
        Payment.query.filter_by(student_id=student.id, status=PaymentStatusEnum.VALID).exists()
    ).scalar()
    if not has_valid_payment:
        return ScanOutcome.rejected(NO_VALID_PAYMENT, "Aucun paiement validé.", student, payload)

    card = (
        AccessCard.query
        .filter_by(student_id=student.id)
        .order_by(AccessCard.created_at.desc())
        .first()
    )
    if not card:
        return ScanOutcome.rejected(NO_ACCESS_CARD, "Aucune carte d'accès trouvée.", student, payload)

    start_of_day, end_of_day = day_bounds(now)
    todays_scans = ScanLog.query.filter(
        ScanLog.card_id == card.id,
        ScanLog.scanned_at >= start_of_day,
        ScanLog.scanned_at <= end_of_day,
    ).count()
    if todays_scans >= 1:
        return ScanOutcome.rejected(ALREADY_USED_TODAY, "Accès déjà utilisé aujourd'hui.", student, payload)

    scan_log = ScanLog(card_id=card.id, guardian_id=guardian_id, scanned_at=now, scan_date=now.date())
    db.session.add(scan_log)
    try:
        db.session.commit()
    except IntegrityError:
        # lost the race against a simultaneous scan of the same card
        db.session.rollback()
        current_app.logger.info("Concurrent scan rejected for card %s", card.id)
        return ScanOutcome.rejected(ALREADY_USED_TODAY, "Accès déjà utilisé aujourd'hui.", student, payload)

    message = (
        f"Accès autorisé. {student.full_name} ({student.institution}) - "
        f"{_format_amount(payload['totalAmount'])} {current_app.config['DEFAULT_CURRENCY']}"
    )
    return ScanOutcome(AUTHORIZED, message, status="AUTHORIZED", student=student,
                       payload=payload, scan_log=scan_log)


def _format_amount(amount):
    if float(amount).is_integer():
        return f"{int(amount):,}".replace(",", " ")
    return f"{amount:,.2f}".replace(",", " ")


def verify_student(student_id, now=None):
    """
    Live re-verification of a student's access rights, independent of any card
    snapshot and of scan logging. Returns ``(body, http_status)``.
    """
    now = now or datetime.now()

    if not student_id:
        return {"success": False, "message": "ID étudiant requis"}, 400

    student = db.session.get(Student, student_id)
    if not student:
        return {"success": False, "message": "Étudiant non trouvé"}, 404

    latest = (
        Payment.query
        .filter_by(student_id=student.id, status=PaymentStatusEnum.VALID)
        .order_by(Payment.valid_until.desc())
        .first()
    )

    body = {
        "studentName": student.full_name,
        "institution": student.institution,
    }

    if latest is None:
        body.update({
            "success": False,
            "message": "Aucun paiement valide trouvé",
            "status": "REFUSED",
        })
        return body, 200

    is_valid = latest.valid_from <= now <= latest.valid_until
    body.update({
        "success": is_valid,
        "amount": latest.amount,
        "validFrom": latest.valid_from.isoformat(),
        "validUntil": latest.valid_until.isoformat(),
        "message": "Accès AUTORISÉ" if is_valid else "Paiement expiré",
        "status": "AUTHORIZED" if is_valid else "EXPIRED",
    })
    return body, 200
