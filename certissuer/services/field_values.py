"""
Field Value Resolution
Computes the text a field displays from the certificate it is rendered for
"""

from datetime import date, datetime, timezone
from typing import Optional

from certissuer.config import settings
from certissuer.schemas.certificate import CertificateBundle
from certissuer.schemas.template import FieldType

_DATE_FORMATS = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def parse_completion_date(value: str) -> Optional[date]:
    """Parse the date formats operators type or spreadsheets export"""
    raw = (value or "").strip()
    if not raw:
        return None
    if raw.isdigit() and len(raw) >= 10:
        # epoch milliseconds, as exported by the web designer
        try:
            return datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def format_completion_date(value: str) -> str:
    """`2026-01-15` -> `January 15, 2026`; unparseable input comes back unchanged"""
    parsed = parse_completion_date(value)
    if parsed is None:
        return value or ""
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def certificate_label(certificate_id: str) -> str:
    """Short public label: first segment of the UUID, upper-cased"""
    return f"CERT-{(certificate_id or '').split('-')[0].upper()}"


def verification_link(verification_code: str) -> str:
    return f"{settings.VERIFY_URL_PREFIX.rstrip('/')}/{verification_code}"


def resolve_field_text(field_type: str, certificate: CertificateBundle, label: Optional[str] = None) -> str:
    """Text shown for a field of `field_type` on `certificate`

    Derived fields are computed here and never stored with the layout.
    Unknown types are custom text and show their label.
    """
    if field_type == FieldType.STUDENT_NAME.value:
        return certificate.student_name or ""
    if field_type == FieldType.COURSE_NAME.value:
        return certificate.course_name or ""
    if field_type == FieldType.COMPLETION_DATE.value:
        if not certificate.completion_date:
            return ""
        return format_completion_date(certificate.completion_date)
    if field_type == FieldType.CERTIFICATE_ID.value:
        return certificate_label(certificate.id)
    if field_type == FieldType.VERIFICATION_LINK.value:
        return verification_link(certificate.verification_code)
    return label or field_type
