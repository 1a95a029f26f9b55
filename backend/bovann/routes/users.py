from flask import Blueprint, request, jsonify, g
from bovann.models import User, Role
from bovann.extensions import db
from bovann.utils.decorators import role_required
from bovann.utils.pagination import apply_pagination_and_search
from bovann.utils.validators import validate_user_data
from bovann.utils.audit import log_event


users_bp = Blueprint('users', __name__)


@users_bp.route('', methods=['POST'])
@role_required('ADMIN')
def create_user():
    data = request.get_json(silent=True) or {}
    if not data:
        return jsonify({"success": False, "message": "No input data provided"}), 400

    cleaned, error = validate_user_data(data)
    if error:
        return jsonify({"success": False, "message": error}), 400

    if User.query.filter_by(email=cleaned["email"]).first():
        return jsonify({"success": False, "message": "User already exists"}), 409

    role = Role.query.filter_by(name=cleaned["role"]).first()
    if not role:
        return jsonify({"success": False, "message": "Invalid role"}), 400

    new_user = User(email=cleaned["email"], role=role)
    new_user.set_password(cleaned["password"])

    db.session.add(new_user)
    db.session.commit()

    log_event("USER_CREATED", user_id=g.current_user.id, ip=request.remote_addr,
              description=f"{new_user.email} ({role.name})")
    return jsonify({"success": True, "user": new_user.to_dict()}), 201


@users_bp.route('', methods=['GET'])
@role_required('ADMIN')
def list_users():
    page = request.args.get("page", 1, type=int)
    per_page = request.args.get("per_page", 50, type=int)
    search_term = request.args.get("search", type=str)

    query = User.query.order_by(User.created_at.desc())
    paginated = apply_pagination_and_search(query, User, search_term, ["email"], page, per_page)

    return jsonify({
        "success": True,
        "users": [u.to_dict() for u in paginated.items],
        "total": paginated.total,
        "page": paginated.page,
        "pages": paginated.pages
    }), 200


@users_bp.route('/<user_id>', methods=['GET'])
@role_required('ADMIN')
def get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404
    return jsonify({"success": True, "user": user.to_dict()}), 200


@users_bp.route('/<user_id>', methods=['PATCH'])
@role_required('ADMIN')
def update_user(user_id):
    if g.current_user.id == user_id:
        return jsonify({"success": False, "message": "You cannot modify your own account via this endpoint"}), 403

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404

    data = request.get_json(silent=True) or {}
    cleaned, error = validate_user_data(data, partial=True)
    if error:
        return jsonify({"success": False, "message": error}), 400

    if "email" in cleaned and cleaned["email"] != user.email:
        if User.query.filter_by(email=cleaned["email"]).first():
            return jsonify({"success": False, "message": "User already exists"}), 409
        user.email = cleaned["email"]

    if "role" in cleaned:
        user.role = Role.query.filter_by(name=cleaned["role"]).first()

    if "password" in cleaned:
        user.set_password(cleaned["password"])

    if "is_active" in cleaned:
        user.is_active = cleaned["is_active"]

    db.session.commit()
    return jsonify({"success": True, "user": user.to_dict()}), 200


@users_bp.route('/<user_id>', methods=['DELETE'])
@role_required('ADMIN')
def delete_user(user_id):
    if g.current_user.id == user_id:
        return jsonify({"success": False, "message": "You cannot delete your own account"}), 403

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"success": False, "message": "User not found"}), 404

    db.session.delete(user)
    db.session.commit()

    log_event("USER_DELETED", user_id=g.current_user.id, ip=request.remote_addr, description=user.email)
    return jsonify({"success": True, "message": "User deleted successfully"}), 200
