from datetime import datetime
from flask import Blueprint, jsonify
from bovann.extensions import db
from bovann.models import Student, PaymentStatusEnum

public_bp = Blueprint("public", __name__)


@public_bp.route("/history/<student_id>", methods=["GET"])
def student_history(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"success": False, "message": "Étudiant non trouvé"}), 404

    now = datetime.now()
    payments = []
    for payment in student.payments:
        entry = payment.to_dict()
        entry["active"] = (
            payment.status == PaymentStatusEnum.VALID
            and payment.valid_from <= now <= payment.valid_until
        )
        payments.append(entry)

    valid = [p for p in student.payments if p.status == PaymentStatusEnum.VALID]

    return jsonify({
        "success": True,
        "student": {
            "id": student.id,
            "name": student.full_name,
            "institution": student.institution,
            "studyLevel": student.study_level.value,
            "domain": student.domain.value,
        },
        "payments": payments,
        "totalAmount": sum(p.amount for p in valid),
        "totalPayments": len(valid),
    }), 200
