import zipfile

import pytest
import pytest_asyncio
from PIL import Image
from pypdf import PdfReader

from certissuer.errors import CertificateNotFoundError, EmptyBatchError, PdfWriteError, TemplateNotFoundError
from certissuer.schemas.certificate import CertificateStatus
from certissuer.schemas.template import TemplateField
from certissuer.services import certificate_service as certificate_module
from certissuer.services.certificate_service import CertificateService
from certissuer.services.storage_service import StorageService
from certissuer.services.template_service import TemplateService
from certissuer.services.verify_service import VerifyService

USER = "user-1"

CSV = (
    "Name,Course,Completion Date\n"
    "Ada Lovelace,Engines,2026-01-15\n"
    "Alan Turing,Computability,2026-02-01\n"
    "Grace Hopper,Compilers,2026-03-10\n"
)


@pytest_asyncio.fixture
async def template_id(db, make_image):
    template = await TemplateService.create_template(USER, "Course Completion", make_image())
    await TemplateService.update_template_fields(
        template.id,
        USER,
        [
            TemplateField(field_type="student_name", x=100, y=100, font_size=24),
            TemplateField(field_type="course_name", x=100, y=150),
            TemplateField(field_type="completion_date", x=100, y=200),
            TemplateField(field_type="certificate_id", x=100, y=250),
        ],
        width=500,
        height=500,
    )
    return template.id


@pytest.mark.asyncio
async def test_single_certificate(template_id, artifact_dirs):
    result = await CertificateService.generate_single_certificate(
        USER, template_id, "Ada Lovelace", "Engines", "2026-01-15"
    )

    certificate = result.certificate
    assert result.pdf_reference == f"/generated/cert_{certificate.id}.pdf"
    assert certificate.pdf_path == result.pdf_reference
    assert certificate.status == CertificateStatus.ACTIVE
    assert len(certificate.verification_code) == 8
    assert certificate.verification_code == certificate.verification_code.upper()

    text = PdfReader(artifact_dirs["generated"] / f"cert_{certificate.id}.pdf").pages[0].extract_text()
    assert "Ada Lovelace" in text
    assert "January 15, 2026" in text
    assert f"CERT-{certificate.id.split('-')[0].upper()}" in text

    stored = await CertificateService.get_certificate(certificate.id)
    assert stored.pdf_path == result.pdf_reference


@pytest.mark.asyncio
async def test_single_certificate_unknown_template(db):
    with pytest.raises(TemplateNotFoundError):
        await CertificateService.generate_single_certificate(USER, "missing", "A", "B", "2026-01-01")
    assert await CertificateService.get_certificates(USER) == []


@pytest.mark.asyncio
async def test_bulk_generates_one_pdf_per_row(template_id, artifact_dirs):
    result = await CertificateService.generate_bulk_certificates(USER, template_id, CSV.encode("utf-8"))

    assert result.count == 3
    assert result.message == "3 certificates generated."
    assert result.failures == []
    assert [c.student_name for c in result.certificates] == ["Ada Lovelace", "Alan Turing", "Grace Hopper"]
    assert len({c.verification_code for c in result.certificates}) == 3

    assert result.archive_reference.startswith("/generated/certificates_bulk_")
    assert result.archive_reference.endswith(".zip")
    archive_path = StorageService.resolve_generated_path(result.archive_reference)
    with zipfile.ZipFile(archive_path) as archive:
        names = archive.namelist()
    assert sorted(names) == sorted(f"cert_{c.id}.pdf" for c in result.certificates)

    for certificate in result.certificates:
        assert (artifact_dirs["generated"] / f"cert_{certificate.id}.pdf").is_file()


@pytest.mark.asyncio
async def test_bulk_empty_csv_creates_nothing(template_id, artifact_dirs):
    with pytest.raises(EmptyBatchError) as exc:
        await CertificateService.generate_bulk_certificates(USER, template_id, "Name,Course,Completion Date\n")

    assert exc.value.status_code == 400
    assert await CertificateService.get_certificates(USER) == []
    assert not artifact_dirs["generated"].exists() or not any(artifact_dirs["generated"].iterdir())


@pytest.mark.asyncio
async def test_bulk_continues_past_failed_row(template_id, monkeypatch, caplog):
    real_render = certificate_module.render_certificate_pdf

    def flaky_render(data):
        if data.certificate.student_name == "Alan Turing":
            raise PdfWriteError("disk full")
        return real_render(data)

    monkeypatch.setattr(certificate_module, "render_certificate_pdf", flaky_render)

    result = await CertificateService.generate_bulk_certificates(USER, template_id, CSV)

    assert result.count == 2
    assert [c.student_name for c in result.certificates] == ["Ada Lovelace", "Grace Hopper"]
    assert len(result.failures) == 1
    failure = result.failures[0]
    assert (failure.row, failure.student_name, failure.error) == (3, "Alan Turing", "disk full")
    assert "row 3 (Alan Turing) failed" in caplog.text

    with zipfile.ZipFile(StorageService.resolve_generated_path(result.archive_reference)) as archive:
        assert len(archive.namelist()) == 2

    orphan = await CertificateService.get_certificate(failure.certificate_id)
    assert orphan.pdf_path is None


@pytest.mark.asyncio
async def test_download_lookup(template_id, artifact_dirs):
    issued = await CertificateService.generate_single_certificate(
        USER, template_id, "Grace Hopper", "Compilers", "2026-03-10"
    )

    download = await CertificateService.get_certificate_pdf(issued.certificate.id)
    assert download.filename == "certificate_Grace Hopper.pdf"
    assert download.path == str(artifact_dirs["generated"] / f"cert_{issued.certificate.id}.pdf")

    (artifact_dirs["generated"] / f"cert_{issued.certificate.id}.pdf").unlink()
    assert await CertificateService.get_certificate_pdf(issued.certificate.id) is None

    with pytest.raises(CertificateNotFoundError):
        await CertificateService.get_certificate_pdf("missing")


@pytest.mark.asyncio
async def test_verification_follows_status(template_id):
    issued = await CertificateService.generate_single_certificate(
        USER, template_id, "Ada Lovelace", "Engines", "2026-01-15"
    )
    code = issued.certificate.verification_code

    ok = await VerifyService.verify_certificate(f"  {code.lower()} ")
    assert ok.verified
    assert ok.certificate.student_name == "Ada Lovelace"
    assert ok.certificate.certificate_id == issued.certificate.id

    disabled = await CertificateService.set_certificate_status(issued.certificate.id, "disabled")
    assert disabled.status == CertificateStatus.DISABLED

    revoked = await VerifyService.verify_certificate(code)
    assert not revoked.verified
    assert revoked.error == "This certificate has been revoked or disabled."
    assert revoked.certificate is None
    # the record itself is kept
    assert (await CertificateService.get_certificate(issued.certificate.id)).status == CertificateStatus.DISABLED

    await CertificateService.set_certificate_status(issued.certificate.id, CertificateStatus.ACTIVE)
    assert (await VerifyService.verify_certificate(code)).verified


@pytest.mark.asyncio
async def test_verify_unknown_code(db):
    result = await VerifyService.verify_certificate("ZZZZ9999")
    assert not result.verified
    assert result.error == "Certificate not found. Invalid verification code."

    assert not (await VerifyService.verify_certificate("")).verified


@pytest.mark.asyncio
async def test_bulk_survives_unexpected_render_error(template_id, monkeypatch, caplog):
    real_render = certificate_module.render_certificate_pdf

    def broken_render(data):
        if data.certificate.student_name == "Ada Lovelace":
            raise RuntimeError("reportlab exploded")
        return real_render(data)

    monkeypatch.setattr(certificate_module, "render_certificate_pdf", broken_render)

    result = await CertificateService.generate_bulk_certificates(USER, template_id, CSV)

    assert result.count == 2
    assert [(f.row, f.error) for f in result.failures] == [(2, "reportlab exploded")]
    assert "row 2 (Ada Lovelace) failed unexpectedly" in caplog.text
    with zipfile.ZipFile(StorageService.resolve_generated_path(result.archive_reference)) as archive:
        assert len(archive.namelist()) == 2


@pytest.mark.asyncio
async def test_bulk_with_oversized_template_records_every_row(template_id, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    result = await CertificateService.generate_bulk_certificates(USER, template_id, CSV)

    assert result.count == 0
    assert [f.row for f in result.failures] == [2, 3, 4]
    assert all("not a readable" in f.error for f in result.failures)
