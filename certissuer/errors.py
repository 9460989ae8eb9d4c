"""
Error Types
Failures raised by the rendering and issuing services

Each error carries the HTTP status an outer API layer should answer with.
"""

from fastapi import status


class CertIssuerError(Exception):
    """Base class for all certificate issuing failures"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class TemplateAssetMissingError(CertIssuerError):
    """Background image file is absent at the resolved path"""

    status_code = status.HTTP_404_NOT_FOUND


class ImageDecodeError(CertIssuerError):
    """Image bytes are neither a readable PNG nor a readable JPEG"""

    status_code = status.HTTP_400_BAD_REQUEST


class PdfWriteError(CertIssuerError):
    """Generated artifact could not be written"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InvalidCSVError(CertIssuerError):
    """Bulk input is not a usable CSV"""

    status_code = status.HTTP_400_BAD_REQUEST


class EmptyBatchError(InvalidCSVError):
    """Bulk input parsed to zero student rows"""


class TemplateNotFoundError(CertIssuerError):
    status_code = status.HTTP_404_NOT_FOUND


class CertificateNotFoundError(CertIssuerError):
    status_code = status.HTTP_404_NOT_FOUND


class TemplateInUseError(CertIssuerError):
    """Template is held by a render in flight"""

    status_code = status.HTTP_409_CONFLICT
