"""
Certificate Template Models
Background image, design canvas size and the positioned text fields
"""

from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, ForeignKey, func, Text
from sqlalchemy.orm import relationship
import uuid
from certissuer.database import Base


class CertificateTemplate(Base):
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)

    # Template info
    name = Column(String(100), nullable=False)
    template_image_path = Column(Text, nullable=False)

    # Display size of the image in the designer when fields were positioned
    canvas_width = Column(Integer, default=0)
    canvas_height = Column(Integer, default=0)

    # Sample values shown by the designer preview
    preview_certificate_id = Column(String(20), nullable=True)
    preview_verification_code = Column(String(50), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    fields = relationship("TemplateFieldRow", backref="template", cascade="all, delete-orphan")


class TemplateFieldRow(Base):
    __tablename__ = "template_fields"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    template_id = Column(String(36), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)

    # Insertion order of the field in the designer
    sort_order = Column(Integer, nullable=False, default=0)

    field_type = Column(String(50), nullable=False)
    label = Column(String(200), nullable=True)

    # Design canvas pixels, top-left origin
    position_x = Column(Float, nullable=False, default=0)
    position_y = Column(Float, nullable=False, default=0)

    # Style
    font_size = Column(Integer, nullable=False, default=16)
    font_color = Column(String(7), nullable=False, default="#000000")
    font_family = Column(String(50), nullable=False, default="Helvetica")
    is_bold = Column(Boolean, default=False)
    is_italic = Column(Boolean, default=False)
    text_align = Column(String(10), default="left")
