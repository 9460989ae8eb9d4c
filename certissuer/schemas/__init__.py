"""
Pydantic schemas for service inputs and outputs
"""

from certissuer.schemas.template import (
    FieldType,
    TextAlign,
    TemplateField,
    TemplateBundle,
    TemplateResponse,
    TemplateDetailResponse,
    UpdateTemplateFieldsResponse,
)
from certissuer.schemas.certificate import (
    CertificateStatus,
    CertificateBundle,
    CertificateRenderData,
    CertificateRecord,
    StudentRow,
    SingleGenerationResult,
    BulkRowFailure,
    BulkGenerationResult,
    CertificateDownload,
    VerifiedCertificate,
    VerificationResult,
)

__all__ = [
    "FieldType",
    "TextAlign",
    "TemplateField",
    "TemplateBundle",
    "TemplateResponse",
    "TemplateDetailResponse",
    "UpdateTemplateFieldsResponse",
    "CertificateStatus",
    "CertificateBundle",
    "CertificateRenderData",
    "CertificateRecord",
    "StudentRow",
    "SingleGenerationResult",
    "BulkRowFailure",
    "BulkGenerationResult",
    "CertificateDownload",
    "VerifiedCertificate",
    "VerificationResult",
]
