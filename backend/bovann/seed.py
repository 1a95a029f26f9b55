from bovann.extensions import db
from bovann.models import Role, RoleEnum, User


def ensure_roles():
    """Create any missing role rows. Safe to run on every start-up."""
    existing = {role.name for role in Role.query.all()}
    missing = [r.value for r in RoleEnum if r.value not in existing]
    for role_name in missing:
        db.session.add(Role(name=role_name))
    if missing:
        db.session.commit()
    return missing


def seed_admin(email, password):
    """Create the first ADMIN account unless one already exists. Returns the user or None."""
    ensure_roles()
    admin_role = Role.query.filter_by(name=RoleEnum.ADMIN.value).first()

    if User.query.filter_by(role_id=admin_role.id).first():
        return None

    admin = User(email=email.strip().lower(), role=admin_role)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    return admin
