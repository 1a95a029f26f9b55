from bovann.extensions import db
from .base import TimestampMixin, StudyLevelEnum, DomainEnum, InfoChannelEnum, generate_uuid
from .Payment import Payment
from .AccessCard import AccessCard

class Student(db.Model, TimestampMixin):
    __tablename__ = 'students'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    last_name = db.Column(db.String(100), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    institution = db.Column(db.String(150), nullable=False, index=True)
    study_level = db.Column(db.Enum(StudyLevelEnum), nullable=False)
    profession = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    photo = db.Column(db.Text, nullable=True)
    domain = db.Column(db.Enum(DomainEnum), nullable=False, index=True)
    info_channel = db.Column(db.Enum(InfoChannelEnum), nullable=False)

    payments = db.relationship(
        'Payment', back_populates='student', lazy=True,
        cascade="all, delete-orphan", order_by=Payment.created_at.desc()
    )
    access_cards = db.relationship(
        'AccessCard', back_populates='student', lazy=True,
        cascade="all, delete-orphan", order_by=AccessCard.created_at.desc()
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self, include_related=False):
        data = {
            "id": self.id,
            "lastName": self.last_name,
            "firstName": self.first_name,
            "institution": self.institution,
            "studyLevel": self.study_level.value if self.study_level else None,
            "profession": self.profession,
            "phone": self.phone,
            "email": self.email,
            "photo": self.photo,
            "domain": self.domain.value if self.domain else None,
            "infoChannel": self.info_channel.value if self.info_channel else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_related:
            data["payments"] = [p.to_dict() for p in self.payments]
            card = self.access_cards[0] if self.access_cards else None
            data["accessCard"] = card.to_dict() if card else None

        return data
