"""
Certificate Request/Response Models
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from certissuer.schemas.template import TemplateBundle, TemplateField


class CertificateStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class CertificateBundle(BaseModel):
    """Certificate values the renderer binds into the layout"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    student_name: str = ""
    course_name: str = ""
    completion_date: str = ""
    verification_code: str = ""


class CertificateRenderData(BaseModel):
    """Everything needed to render one certificate"""
    model_config = ConfigDict(frozen=True)

    certificate: CertificateBundle
    template: TemplateBundle
    fields: List[TemplateField] = Field(default_factory=list)


class CertificateRecord(BaseModel):
    """Certificate as stored"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_id: str
    user_id: str
    student_name: str
    course_name: str
    completion_date: str
    verification_code: str
    status: CertificateStatus = CertificateStatus.ACTIVE
    pdf_path: Optional[str] = None
    created_at: Optional[datetime] = None

    def bundle(self) -> CertificateBundle:
        return CertificateBundle(
            id=self.id,
            student_name=self.student_name,
            course_name=self.course_name,
            completion_date=self.completion_date,
            verification_code=self.verification_code,
        )


class StudentRow(BaseModel):
    """One parsed row of a bulk CSV"""
    row: int = Field(..., description="Row number in the file, header is row 1")
    student_name: str = ""
    course_name: str = ""
    completion_date: str = ""
    email: Optional[str] = None


class SingleGenerationResult(BaseModel):
    certificate: CertificateRecord
    pdf_reference: str


class BulkRowFailure(BaseModel):
    """A row whose certificate could not be rendered"""
    row: int
    student_name: str
    certificate_id: Optional[str] = None
    error: str


class BulkGenerationResult(BaseModel):
    count: int
    message: str
    certificates: List[CertificateRecord]
    failures: List[BulkRowFailure] = Field(default_factory=list)
    archive_reference: str


class CertificateDownload(BaseModel):
    """Resolved PDF on disk and the filename offered to the user"""
    path: str
    filename: str


class VerifiedCertificate(BaseModel):
    student_name: str
    course_name: str
    completion_date: str
    certificate_id: str
    issue_date: Optional[datetime] = None


class VerificationResult(BaseModel):
    verified: bool
    error: Optional[str] = None
    certificate: Optional[VerifiedCertificate] = None
