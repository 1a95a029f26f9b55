from datetime import datetime
from bovann.extensions import db
from .base import TimestampMixin, generate_uuid

class AccessCard(db.Model, TimestampMixin):
    __tablename__ = 'access_cards'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    # one card per student, enforced here rather than by the issuing code
    student_id = db.Column(db.String(36), db.ForeignKey('students.id', ondelete="CASCADE"), nullable=False, unique=True)
    payment_id = db.Column(db.String(36), db.ForeignKey('payments.id', ondelete="SET NULL"), nullable=True)
    qr_data = db.Column(db.Text, nullable=False)
    payload = db.Column(db.Text, nullable=False)
    total_amount = db.Column(db.Float, nullable=False, default=0)

    student = db.relationship('Student', back_populates='access_cards')
    payment = db.relationship('Payment')
    scans = db.relationship('ScanLog', back_populates='card', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "paymentId": self.payment_id,
            "qrData": self.qr_data,
            "payload": self.payload,
            "totalAmount": self.total_amount,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class ScanLog(db.Model):
    __tablename__ = 'scan_logs'

    id = db.Column(db.Integer, primary_key=True)
    card_id = db.Column(db.String(36), db.ForeignKey('access_cards.id', ondelete="CASCADE"), nullable=False, index=True)
    guardian_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete="SET NULL"), nullable=True)
    # server local time, the daily limit is counted midnight to midnight
    scanned_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)
    scan_date = db.Column(db.Date, nullable=False)

    card = db.relationship('AccessCard', back_populates='scans')
    guardian = db.relationship('User', back_populates='scans')

    __table_args__ = (
        db.UniqueConstraint('card_id', 'scan_date', name='uq_scan_card_day'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "cardId": self.card_id,
            "guardianId": self.guardian_id,
            "scannedAt": self.scanned_at.isoformat(),
            "studentName": self.card.student.full_name if self.card and self.card.student else None,
        }
