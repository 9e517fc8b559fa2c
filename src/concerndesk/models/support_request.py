"""Student support request model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from ..core.database import Base


class SupportRequest(Base):
    """A teacher's report about a student concern.

    Rows keep the author's email rather than a foreign key so that deleting
    an account leaves its requests untouched.
    """

    __tablename__ = "referrals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_email = Column(String, nullable=False, index=True)
    teacher = Column(String, nullable=False)
    student_first_name = Column(String, nullable=False)
    student_last_initial = Column(String(1), nullable=False)
    grade = Column(String, nullable=False)
    concern_description = Column(Text, nullable=False)
    additional_info = Column(Text)
    ai_recommendations = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
