from bovann.extensions import db
from .base import TimestampMixin, PaymentStatusEnum, generate_uuid

class Payment(db.Model, TimestampMixin):
    __tablename__ = 'payments'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    student_id = db.Column(db.String(36), db.ForeignKey('students.id', ondelete="CASCADE"), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="XOF")
    reference = db.Column(db.String(100), nullable=True)
    details = db.Column(db.Text, nullable=True)
    valid_from = db.Column(db.DateTime, nullable=False)
    valid_until = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.Enum(PaymentStatusEnum), nullable=False, default=PaymentStatusEnum.VALID, index=True)
    validated_at = db.Column(db.DateTime, nullable=True)

    student = db.relationship('Student', back_populates='payments')

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "amount": self.amount,
            "currency": self.currency,
            "reference": self.reference or f"PAY-{self.id[:8].upper()}",
            "details": self.details,
            "validFrom": self.valid_from.isoformat() if self.valid_from else None,
            "validUntil": self.valid_until.isoformat() if self.valid_until else None,
            "status": self.status.value if self.status else None,
            "validationDate": self.validated_at.isoformat() if self.validated_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
