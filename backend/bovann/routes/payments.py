from datetime import datetime
from flask import Blueprint, request, jsonify, current_app, g
from bovann.extensions import db
from bovann.models import Student, Payment, PaymentStatusEnum
from bovann.utils.decorators import role_required
from bovann.utils.validators import validate_payment_data
from bovann.utils.cards import issue_or_refresh_card, history_url, valid_payments_for
from bovann.utils.errors import StudentNotFound, PaymentNotFound, PaymentLocked
from bovann.utils.audit import log_event

payments_bp = Blueprint('payments', __name__)

UPDATABLE_STATUSES = ("PENDING", "VALID", "EXPIRED")


@payments_bp.route('', methods=['POST'])
@role_required('ACCOUNTANT')
def create_payment():
    data = request.get_json(silent=True) or {}
    cleaned, error = validate_payment_data(data)
    if error:
        return jsonify({"success": False, "message": error}), 400

    student = db.session.get(Student, cleaned["student_id"])
    if not student:
        raise StudentNotFound()

    payment = Payment(
        student_id=student.id,
        amount=cleaned["amount"],
        currency=cleaned["currency"] or current_app.config["DEFAULT_CURRENCY"],
        reference=cleaned["reference"],
        details=cleaned["details"],
        valid_from=cleaned["valid_from"],
        valid_until=cleaned["valid_until"],
        status=PaymentStatusEnum.VALID,
        validated_at=datetime.utcnow(),
    )
    db.session.add(payment)
    db.session.flush()

    card = issue_or_refresh_card(student.id, payment)
    db.session.commit()

    log_event("PAYMENT_CREATED", user_id=g.current_user.id, ip=request.remote_addr,
              description=f"{payment.amount} {payment.currency} for student {student.id}")
    log_event("CARD_ISSUED", user_id=g.current_user.id, ip=request.remote_addr,
              description=f"card {card.id} total {card.total_amount}")

    return jsonify({
        "success": True,
        "payment": payment.to_dict(),
        "accessCard": card.to_dict(),
        "summary": {
            "totalPayments": len(valid_payments_for(student.id)),
            "totalAmount": card.total_amount,
            "historyUrl": history_url(student.id),
        }
    }), 201


@payments_bp.route('', methods=['GET'])
@role_required('ACCOUNTANT')
def get_payments_by_student():
    student_id = request.args.get("studentId")
    if not student_id:
        return jsonify({"success": False, "message": "Student ID is required"}), 400

    payments = (
        Payment.query
        .filter_by(student_id=student_id)
        .order_by(Payment.created_at.desc())
        .all()
    )
    return jsonify({"success": True, "payments": [p.to_dict() for p in payments]}), 200


def _get_mutable_payment(payment_id):
    payment = db.session.get(Payment, payment_id)
    if not payment:
        raise PaymentNotFound()
    if payment.status == PaymentStatusEnum.CANCELLED:
        raise PaymentLocked()
    return payment


@payments_bp.route('/<payment_id>/status', methods=['PATCH'])
@role_required('ACCOUNTANT')
def update_payment_status(payment_id):
    data = request.get_json(silent=True) or {}
    status = data.get("status")

    if status not in UPDATABLE_STATUSES:
        return jsonify({
            "success": False,
            "message": f"Invalid status value. Must be one of: {', '.join(UPDATABLE_STATUSES)}"
        }), 400

    payment = _get_mutable_payment(payment_id)
    previous = payment.status.value
    payment.status = PaymentStatusEnum(status)
    if payment.status == PaymentStatusEnum.VALID:
        payment.validated_at = datetime.utcnow()
    db.session.commit()

    log_event("PAYMENT_STATUS_CHANGED", user_id=g.current_user.id, ip=request.remote_addr,
              description=f"{payment.id}: {previous} -> {status}")
    return jsonify({"success": True, "payment": payment.to_dict()}), 200


@payments_bp.route('/<payment_id>/cancel', methods=['POST'])
@role_required('ACCOUNTANT')
def cancel_payment(payment_id):
    payment = _get_mutable_payment(payment_id)
    payment.status = PaymentStatusEnum.CANCELLED
    db.session.commit()

    log_event("PAYMENT_CANCELLED", user_id=g.current_user.id, ip=request.remote_addr, description=payment.id)
    return jsonify({"success": True, "payment": payment.to_dict()}), 200
