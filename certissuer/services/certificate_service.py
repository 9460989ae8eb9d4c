"""
Certificate Service
Issuing certificates one at a time or in bulk from a CSV
"""

import logging
import time
import uuid
from typing import List, Optional, Union

from certissuer.database import database
from certissuer.errors import CertIssuerError, CertificateNotFoundError
from certissuer.schemas.certificate import (
    BulkGenerationResult,
    BulkRowFailure,
    CertificateDownload,
    CertificateRecord,
    CertificateRenderData,
    CertificateStatus,
    SingleGenerationResult,
)
from certissuer.schemas.template import TemplateBundle, TemplateField
from certissuer.services.csv_parser import CSVParser
from certissuer.services.pdf_renderer import render_certificate_pdf
from certissuer.services.storage_service import StorageService
from certissuer.services.template_service import TemplateService, generate_short_code

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


class CertificateService:
    """Service for issuing and looking up certificates"""

    @staticmethod
    async def _unused_verification_code() -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_short_code()
            existing = await database.fetch_val(
                "SELECT COUNT(*) FROM certificates WHERE verification_code = :code",
                {"code": code}
            )
            if not existing:
                return code
            logger.warning("[CERT] verification code collision on %s, retrying", code)
        raise CertIssuerError("Could not allocate a unique verification code.")

    @staticmethod
    async def create_certificate(
        template_id: str,
        user_id: str,
        student_name: str,
        course_name: str,
        completion_date: str,
    ) -> CertificateRecord:
        """Insert a certificate with a fresh verification code and no PDF yet"""
        certificate_id = str(uuid.uuid4())
        verification_code = await CertificateService._unused_verification_code()
        await database.execute(
            """
            INSERT INTO certificates
            (id, template_id, user_id, student_name, course_name, completion_date, verification_code, status)
            VALUES (:id, :template_id, :user_id, :student_name, :course_name, :completion_date, :verification_code, :status)
            """,
            {
                "id": certificate_id,
                "template_id": template_id,
                "user_id": user_id,
                "student_name": student_name,
                "course_name": course_name,
                "completion_date": completion_date,
                "verification_code": verification_code,
                "status": CertificateStatus.ACTIVE.value,
            }
        )
        return await CertificateService.get_certificate(certificate_id)

    @staticmethod
    async def update_pdf_path(certificate_id: str, pdf_path: str) -> None:
        await database.execute(
            "UPDATE certificates SET pdf_path = :pdf_path WHERE id = :id",
            {"pdf_path": pdf_path, "id": certificate_id}
        )

    @staticmethod
    def _render(certificate: CertificateRecord, template: TemplateBundle, fields: List[TemplateField]) -> str:
        return render_certificate_pdf(
            CertificateRenderData(certificate=certificate.bundle(), template=template, fields=fields)
        )

    @staticmethod
    async def generate_single_certificate(
        user_id: str,
        template_id: str,
        student_name: str,
        course_name: str,
        completion_date: str,
    ) -> SingleGenerationResult:
        """Issue one certificate and render its PDF

        A render failure propagates; the certificate row stays without a PDF.
        """
        async with TemplateService.in_use(template_id):
            template, fields = await TemplateService.get_template_bundle(template_id, user_id)
            certificate = await CertificateService.create_certificate(
                template_id, user_id, student_name, course_name, completion_date
            )
            pdf_reference = CertificateService._render(certificate, template, fields)
            await CertificateService.update_pdf_path(certificate.id, pdf_reference)
        logger.info("[CERT] issued %s code=%s", certificate.id, certificate.verification_code)
        return SingleGenerationResult(
            certificate=certificate.model_copy(update={"pdf_path": pdf_reference}),
            pdf_reference=pdf_reference,
        )

    @staticmethod
    async def generate_bulk_certificates(
        user_id: str,
        template_id: str,
        csv_content: Union[bytes, str],
    ) -> BulkGenerationResult:
        """Issue one certificate per CSV row and zip the PDFs

        Rows are processed in file order. A row whose create or render fails,
        for any reason, is recorded in `failures` and the batch continues.
        """
        students = CSVParser.parse_student_csv(csv_content)

        generated: List[CertificateRecord] = []
        failures: List[BulkRowFailure] = []
        pdf_files: List[str] = []

        async with TemplateService.in_use(template_id):
            template, fields = await TemplateService.get_template_bundle(template_id, user_id)
            logger.info("[BULK] template=%s rows=%d", template_id, len(students))

            for student in students:
                certificate: Optional[CertificateRecord] = None
                try:
                    certificate = await CertificateService.create_certificate(
                        template_id, user_id, student.student_name, student.course_name, student.completion_date
                    )
                    pdf_reference = CertificateService._render(certificate, template, fields)
                except CertIssuerError as e:
                    logger.error("[BULK] row %d (%s) failed: %s", student.row, student.student_name, e.detail)
                    failures.append(BulkRowFailure(
                        row=student.row,
                        student_name=student.student_name,
                        certificate_id=certificate.id if certificate else None,
                        error=e.detail,
                    ))
                    continue
                except Exception as e:
                    logger.exception("[BULK] row %d (%s) failed unexpectedly", student.row, student.student_name)
                    failures.append(BulkRowFailure(
                        row=student.row,
                        student_name=student.student_name,
                        certificate_id=certificate.id if certificate else None,
                        error=str(e) or e.__class__.__name__,
                    ))
                    continue

                await CertificateService.update_pdf_path(certificate.id, pdf_reference)
                generated.append(certificate.model_copy(update={"pdf_path": pdf_reference}))
                pdf_files.append(str(StorageService.resolve_generated_path(pdf_reference)))

        archive_name = f"certificates_bulk_{int(time.time() * 1000)}.zip"
        archive_path = StorageService.resolve_generated_path(archive_name)
        entries = StorageService.write_archive(archive_path, pdf_files)
        logger.info(
            "[BULK] archive %s entries=%d failures=%d", archive_name, entries, len(failures)
        )

        return BulkGenerationResult(
            count=len(generated),
            message=f"{len(generated)} certificates generated.",
            certificates=generated,
            failures=failures,
            archive_reference=StorageService.generated_reference(archive_name),
        )

    @staticmethod
    async def get_certificates(user_id: str) -> List[CertificateRecord]:
        rows = await database.fetch_all(
            "SELECT * FROM certificates WHERE user_id = :user_id ORDER BY created_at DESC",
            {"user_id": user_id}
        )
        return [CertificateRecord.model_validate(dict(row)) for row in rows]

    @staticmethod
    async def get_certificate(certificate_id: str) -> CertificateRecord:
        row = await database.fetch_one(
            "SELECT * FROM certificates WHERE id = :id",
            {"id": certificate_id}
        )
        if not row:
            raise CertificateNotFoundError("Certificate not found.")
        return CertificateRecord.model_validate(dict(row))

    @staticmethod
    async def get_certificate_pdf(certificate_id: str) -> Optional[CertificateDownload]:
        """PDF location on disk and a download filename, None if there is no file"""
        certificate = await CertificateService.get_certificate(certificate_id)
        if not certificate.pdf_path:
            return None
        path = StorageService.resolve_generated_path(certificate.pdf_path)
        if not path.is_file():
            return None
        return CertificateDownload(path=str(path), filename=f"certificate_{certificate.student_name}.pdf")

    @staticmethod
    async def set_certificate_status(certificate_id: str, status: Union[CertificateStatus, str]) -> CertificateRecord:
        """Enable or disable a certificate; disabled ones fail verification"""
        status = CertificateStatus(status)
        await CertificateService.get_certificate(certificate_id)
        await database.execute(
            "UPDATE certificates SET status = :status WHERE id = :id",
            {"status": status.value, "id": certificate_id}
        )
        logger.info("[CERT] %s status=%s", certificate_id, status.value)
        return await CertificateService.get_certificate(certificate_id)


# Create singleton instance
certificate_service = CertificateService()
