from datetime import datetime
from flask import Blueprint, request, jsonify, g
from bovann.extensions import db, limiter
from bovann.models import AccessCard, ScanLog
from bovann.utils.decorators import role_required
from bovann.utils.scanning import scan_card, verify_student, day_bounds
from bovann.utils.audit import log_event

cards_bp = Blueprint('cards', __name__)


@cards_bp.route('/scan', methods=['POST'])
@limiter.limit("60 per minute")
@role_required('GUARD')
def scan():
    data = request.get_json(silent=True) or {}
    qr_data = data.get("qrData")
    if not qr_data:
        return jsonify({"success": False, "message": "QR data is required"}), 400

    outcome = scan_card(qr_data, g.current_user.id)
    body, status_code = outcome.to_response()

    if outcome.authorized:
        description = f"scan {outcome.scan_log.id} for student {outcome.student.id}"
    else:
        description = outcome.reason
    log_event(f"SCAN_{outcome.kind}", user_id=g.current_user.id, ip=request.remote_addr,
              description=description)
    return jsonify(body), status_code


@cards_bp.route('/verify', methods=['GET'])
def verify():
    body, status_code = verify_student(request.args.get("studentId"))
    return jsonify(body), status_code


@cards_bp.route('/student/<student_id>', methods=['GET'])
@role_required('ADMIN', 'SECRETARY', 'ACCOUNTANT')
def get_student_card(student_id):
    card = (
        AccessCard.query
        .filter_by(student_id=student_id)
        .order_by(AccessCard.created_at.desc())
        .first()
    )
    if not card:
        return jsonify({"success": False, "message": "Aucune carte d'accès trouvée."}), 404
    return jsonify({"success": True, "accessCard": card.to_dict()}), 200


@cards_bp.route('/scans', methods=['GET'])
@role_required('GUARD', 'ADMIN')
def list_scans():
    date_str = request.args.get("date")
    try:
        day = datetime.strptime(date_str, "%Y-%m-%d") if date_str else datetime.now()
    except ValueError:
        return jsonify({"success": False, "message": "Invalid date format, expected YYYY-MM-DD"}), 400

    start_of_day, end_of_day = day_bounds(day)
    scans = (
        ScanLog.query
        .filter(ScanLog.scanned_at >= start_of_day, ScanLog.scanned_at <= end_of_day)
        .order_by(ScanLog.scanned_at.desc())
        .all()
    )
    return jsonify({
        "success": True,
        "date": start_of_day.date().isoformat(),
        "total": len(scans),
        "scans": [s.to_dict() for s in scans],
    }), 200
