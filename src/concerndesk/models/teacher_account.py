"""Teacher account model, including usage quota and subscription state."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, UniqueConstraint

from ..core.database import Base


class TeacherAccount(Base):
    """A teacher login together with its monthly support request allowance."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="users_email_unique"),
        CheckConstraint("support_requests_used_this_month >= 0", name="users_usage_non_negative"),
        CheckConstraint("support_requests_limit >= 0", name="users_limit_non_negative"),
        CheckConstraint("additional_packages >= 0", name="users_packages_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, index=True)
    name = Column(String)
    password_hash = Column(String)

    school_name = Column(String)
    school_district = Column(String)
    primary_grade = Column(String)
    primary_subject = Column(String)
    teacher_type = Column(String, nullable=False, default="classroom")

    support_requests_used_this_month = Column(Integer, nullable=False, default=0)
    support_requests_limit = Column(Integer, nullable=False, default=20)
    additional_packages = Column(Integer, nullable=False, default=0)
    usage_reset_at = Column(DateTime)

    subscription_start_date = Column(DateTime)
    subscription_end_date = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def total_limit(self, package_size: int) -> int:
        return (self.support_requests_limit or 0) + (self.additional_packages or 0) * package_size

    def subscription_active(self, now: datetime) -> bool:
        return self.subscription_end_date is not None and self.subscription_end_date > now
