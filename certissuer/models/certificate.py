"""
Certificate Model
Issued certificates and their public verification codes
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, func, Text
from sqlalchemy.orm import relationship
import uuid
from certissuer.database import Base


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    template_id = Column(String(36), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)

    # Student data
    student_name = Column(String(200), nullable=False)
    course_name = Column(String(200), nullable=False)
    completion_date = Column(String(50), nullable=False)

    # Verification
    verification_code = Column(String(50), unique=True, nullable=False, index=True)
    status = Column(String(10), nullable=False, default="active")

    # Generated artifact, NULL until the render succeeds
    pdf_path = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    template = relationship("CertificateTemplate", backref="certificates")
