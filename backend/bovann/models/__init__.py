from .User import User, Role, TokenBlocklist
from .Payment import Payment
from .AccessCard import AccessCard, ScanLog
from .Student import Student
from .base import TimestampMixin, RoleEnum, PaymentStatusEnum, StudyLevelEnum, DomainEnum, InfoChannelEnum
from .AuditLog import AuditLog
