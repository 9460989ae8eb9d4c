"""
Verification Service
Public lookup of certificates by verification code
"""

import logging

from certissuer.database import database
from certissuer.schemas.certificate import CertificateStatus, VerificationResult, VerifiedCertificate

logger = logging.getLogger(__name__)


class VerifyService:
    """Service for public certificate verification"""

    @staticmethod
    async def verify_certificate(verification_code: str) -> VerificationResult:
        """Verify a certificate by its code

        Unknown codes and disabled certificates both fail; the disabled record
        itself is kept.
        """
        code = (verification_code or "").strip().upper()
        cert = None
        if code:
            cert = await database.fetch_one(
                "SELECT * FROM certificates WHERE verification_code = :code",
                {"code": code}
            )

        if not cert:
            logger.info("[VERIFY] unknown code %r", verification_code)
            return VerificationResult(
                verified=False,
                error="Certificate not found. Invalid verification code.",
            )

        if cert["status"] != CertificateStatus.ACTIVE.value:
            logger.info("[VERIFY] code %s belongs to a %s certificate", code, cert["status"])
            return VerificationResult(
                verified=False,
                error="This certificate has been revoked or disabled.",
            )

        return VerificationResult(
            verified=True,
            certificate=VerifiedCertificate(
                student_name=cert["student_name"],
                course_name=cert["course_name"],
                completion_date=cert["completion_date"],
                certificate_id=cert["id"],
                issue_date=cert["created_at"],
            ),
        )


# Create singleton instance
verify_service = VerifyService()
