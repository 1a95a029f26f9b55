from flask import Blueprint, request, jsonify, current_app, make_response
from flask_jwt_extended import (
    create_access_token, create_refresh_token, jwt_required,
    get_jwt_identity, get_jwt
)
from bovann.models import User, TokenBlocklist
from bovann.extensions import db, limiter
from bovann.utils.audit import log_event
from datetime import datetime

auth_bp = Blueprint('auth', __name__)


def _access_token_for(user):
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role.name if user.role else None}
    )


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute", override_defaults=False)
def login():
    data = request.get_json(silent=True) or {}
    email = str(data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    ip = request.remote_addr

    if not email or not password:
        return jsonify({"success": False, "message": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()

    if user and user.is_active and user.check_password(password):
        access_token = _access_token_for(user)
        refresh_token = create_refresh_token(identity=str(user.id))

        user.last_login = datetime.utcnow()
        db.session.commit()

        response = make_response(jsonify({
            "success": True,
            "token": access_token,
            "refreshToken": refresh_token,
            "user": {"id": user.id, "email": user.email, "role": user.role.name},
        }))
        response.set_cookie(
            "access_token_cookie",
            access_token,
            max_age=int(current_app.config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds()),
            httponly=True,
            secure=current_app.config["JWT_COOKIE_SECURE"],
            samesite=current_app.config["JWT_COOKIE_SAMESITE"],
            path="/"
        )

        log_event("LOGIN_SUCCESS", user_id=user.id, ip=ip, description=f"{email} logged in")
        return response

    log_event("LOGIN_FAILED", ip=ip, description=f"Failed login attempt for {email}", level="WARNING")
    return jsonify({"success": False, "message": "Invalid credentials"}), 401


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    user = db.session.get(User, get_jwt_identity())
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404

    return jsonify({"success": True, "user": user.to_dict()}), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_access_token():
    user = db.session.get(User, get_jwt_identity())
    if not user or not user.is_active:
        return jsonify({"success": False, "message": "User not found"}), 404

    access_token = _access_token_for(user)
    log_event("REFRESH_TOKEN", user_id=user.id, ip=request.remote_addr)
    return jsonify({"success": True, "token": access_token}), 200


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    claims = get_jwt()
    user_id = get_jwt_identity()

    token_block = TokenBlocklist(
        jti=claims["jti"],
        token_type=claims.get("type", "access"),
        user_id=user_id,
        expires_at=datetime.fromtimestamp(claims["exp"]),
    )
    db.session.add(token_block)
    db.session.commit()

    response = make_response(jsonify({"success": True, "message": "Successfully logged out"}))
    response.delete_cookie("access_token_cookie", path="/")

    log_event("LOGOUT", user_id=user_id, ip=request.remote_addr)
    return response
