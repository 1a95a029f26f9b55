from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask import jsonify, g
from bovann.extensions import db
from bovann.models import User

def role_required(*allowed_roles):
    """
    Restrict access to authenticated users holding one of the given roles.
    Usage: @role_required("ADMIN", "SECRETARY")

    SUPER_ADMIN passes every gate. The resolved user is stored on ``g.current_user``.
    """
    allowed_roles = set(role.upper() for role in allowed_roles)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            user_id = get_jwt_identity()
            if not user_id:
                return jsonify({"success": False, "message": "Missing or invalid JWT token"}), 401

            user = db.session.get(User, user_id)
            if not user or not user.is_active:
                return jsonify({"success": False, "message": "User not found"}), 401

            user_role_name = user.role.name.upper() if user.role else ""
            if user_role_name not in allowed_roles and user_role_name != "SUPER_ADMIN":
                return jsonify({"success": False, "message": "Access denied"}), 403

            g.current_user = user
            return fn(*args, **kwargs)
        return wrapper
    return decorator
