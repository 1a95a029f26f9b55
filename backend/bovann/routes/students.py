from flask import Blueprint, request, jsonify, g
from sqlalchemy import or_
from bovann.extensions import db
from bovann.models import Student
from bovann.utils.decorators import role_required
from bovann.utils.pagination import apply_pagination_and_search
from bovann.utils.validators import validate_student_data
from bovann.utils.audit import log_event

students_bp = Blueprint("students", __name__)

FIELD_MAP = {
    "lastName": "last_name",
    "firstName": "first_name",
    "institution": "institution",
    "studyLevel": "study_level",
    "profession": "profession",
    "phone": "phone",
    "email": "email",
    "photo": "photo",
    "domain": "domain",
    "infoChannel": "info_channel",
}


def _duplicate_exists(email=None, phone=None, exclude_id=None):
    filters = []
    if email:
        filters.append(Student.email == email)
    if phone:
        filters.append(Student.phone == phone)
    if not filters:
        return False
    query = Student.query.filter(or_(*filters))
    if exclude_id:
        query = query.filter(Student.id != exclude_id)
    return db.session.query(query.exists()).scalar()


@students_bp.route('', methods=['POST'])
@role_required("SECRETARY", "ADMIN")
def create_student():
    data = request.get_json(silent=True) or {}

    cleaned, error = validate_student_data(data)
    if error:
        return jsonify({"success": False, "message": error}), 400

    if _duplicate_exists(email=cleaned["email"], phone=cleaned["phone"]):
        return jsonify({"success": False, "message": "Un étudiant avec cet email ou téléphone existe déjà"}), 409

    student = Student(**{FIELD_MAP[key]: value for key, value in cleaned.items()})
    db.session.add(student)
    db.session.commit()

    log_event("STUDENT_CREATED", user_id=g.current_user.id, ip=request.remote_addr,
              description=f"{student.full_name} ({student.id})")
    return jsonify({"success": True, "student": student.to_dict()}), 201


@students_bp.route('', methods=['GET'])
@role_required("SECRETARY", "ADMIN", "ACCOUNTANT")
def list_students():
    page = request.args.get("page", 1, type=int)
    per_page = request.args.get("per_page", 50, type=int)
    search_term = request.args.get("search", type=str)
    institution = request.args.get("institution", type=str)

    query = Student.query.order_by(Student.created_at.desc())
    if institution:
        query = query.filter(Student.institution == institution)

    paginated = apply_pagination_and_search(
        query,
        Student,
        search_term,
        ["last_name", "first_name", "email", "phone"],
        page,
        per_page
    )

    return jsonify({
        "success": True,
        "students": [s.to_dict() for s in paginated.items],
        "total": paginated.total,
        "page": paginated.page,
        "pages": paginated.pages
    }), 200


@students_bp.route('/<student_id>', methods=['GET'])
@role_required("SECRETARY", "ADMIN", "ACCOUNTANT")
def get_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"success": False, "message": "Étudiant non trouvé"}), 404

    return jsonify({"success": True, "student": student.to_dict(include_related=True)}), 200


@students_bp.route('/<student_id>', methods=['PUT'])
@role_required("SECRETARY", "ADMIN")
def update_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"success": False, "message": "Étudiant non trouvé"}), 404

    data = request.get_json(silent=True) or {}
    cleaned, error = validate_student_data(data, partial=True)
    if error:
        return jsonify({"success": False, "message": error}), 400

    if _duplicate_exists(email=cleaned.get("email"), phone=cleaned.get("phone"), exclude_id=student.id):
        return jsonify({"success": False, "message": "Un étudiant avec cet email ou téléphone existe déjà"}), 409

    for key, value in cleaned.items():
        setattr(student, FIELD_MAP[key], value)

    db.session.commit()
    return jsonify({"success": True, "student": student.to_dict()}), 200


@students_bp.route("/<student_id>", methods=["DELETE"])
@role_required("ADMIN")
def delete_student(student_id):
    student = db.session.get(Student, student_id)
    if not student:
        return jsonify({"success": False, "message": "Étudiant non trouvé"}), 404

    db.session.delete(student)
    db.session.commit()

    log_event("STUDENT_DELETED", user_id=g.current_user.id, ip=request.remote_addr, description=student_id)
    return jsonify({"success": True, "message": "Student deleted successfully"}), 200
