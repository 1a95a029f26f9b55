import enum
import uuid
from datetime import datetime
from bovann.extensions import db


def generate_uuid():
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class RoleEnum(enum.Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    SECRETARY = "SECRETARY"
    ACCOUNTANT = "ACCOUNTANT"
    GUARD = "GUARD"


class PaymentStatusEnum(enum.Enum):
    PENDING = "PENDING"
    VALID = "VALID"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class StudyLevelEnum(enum.Enum):
    BEPC = "BEPC"
    PROBATOIRE = "PROBATOIRE"
    BAC = "BAC"
    LICENCE = "LICENCE"
    MASTER = "MASTER"
    DOCTORAT = "DOCTORAT"


class DomainEnum(enum.Enum):
    GENIE_INFORMATIQUE = "GENIE_INFORMATIQUE"
    MULTIMEDIA_MARKETING_DIGITAL = "MULTIMEDIA_MARKETING_DIGITAL"
    CREATION_SITE_DEVELOPPEMENT_LOGICIEL = "CREATION_SITE_DEVELOPPEMENT_LOGICIEL"


class InfoChannelEnum(enum.Enum):
    TIKTOK = "TIKTOK"
    FACEBOOK = "FACEBOOK"
    INSTAGRAM = "INSTAGRAM"
    LINKEDIN = "LINKEDIN"
    WHATSAPP = "WHATSAPP"
    AUTRE = "AUTRE"
