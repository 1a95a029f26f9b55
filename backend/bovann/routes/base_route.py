from flask import Blueprint, jsonify
from sqlalchemy import text
from bovann.extensions import db

base_bp = Blueprint("base", __name__)

@base_bp.route("/")
def home():
    return jsonify({"message": "Bovann Payment Platform API"})

@base_bp.route("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        return jsonify({"success": True, "database": "ok"}), 200
    except Exception as e:
        return jsonify({"success": False, "database": "error", "message": str(e)}), 503
