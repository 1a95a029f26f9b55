from flask import request, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from datetime import datetime

def log_rate_limit_violation(request_limit):
    from bovann.extensions import db
    from bovann.models import AuditLog

    try:
        verify_jwt_in_request(optional=True)
        user_id = get_jwt_identity()
    except Exception:
        user_id = None

    log = AuditLog(
        user_id=user_id,
        action=f"RATE_LIMIT_EXCEEDED: {request.method} {request.path}",
        ip_address=request.remote_addr,
        timestamp=datetime.utcnow(),
    )
    db.session.add(log)
    db.session.commit()

    response = jsonify({
        "success": False,
        "message": "Rate limit exceeded. Please slow down."
    })
    response.status_code = 429
    return response
