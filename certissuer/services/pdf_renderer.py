"""
PDF Renderer
Draws a certificate's fields over its template image into a one-page PDF
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import List, NamedTuple, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from certissuer.config import settings
from certissuer.errors import ImageDecodeError, TemplateAssetMissingError
from certissuer.schemas.certificate import CertificateRenderData
from certissuer.schemas.template import TemplateField
from certissuer.services.field_values import resolve_field_text
from certissuer.services.fonts import hex_to_rgb, resolve_font
from certissuer.services.layout import FieldPlacement, ScaleFactors, compute_scale, is_on_page, place_field
from certissuer.services.storage_service import StorageService

logger = logging.getLogger(__name__)

_DECODE_ERRORS = (OSError, SyntaxError, ValueError, Image.DecompressionBombError)


class DrawnField(NamedTuple):
    field_type: str
    text: str
    font_name: str
    color: Tuple[float, float, float]
    placement: FieldPlacement


class SkippedField(NamedTuple):
    field_type: str
    reason: str


class RenderReport(NamedTuple):
    reference: str
    path: str
    page_width: int
    page_height: int
    scale: ScaleFactors
    drawn: List[DrawnField]
    skipped: List[SkippedField]


def _decode(image_bytes: bytes, image_format: str) -> Image.Image:
    image = Image.open(BytesIO(image_bytes), formats=[image_format])
    image.load()
    return image


def load_template_image(reference: str) -> Image.Image:
    """Read and decode a template background image

    The extension picks the first decoder (PNG for `.png`, JPEG otherwise);
    files saved with the wrong extension are retried as the other format.
    Images with transparency come back as RGBA, everything else as RGB.
    """
    path = StorageService.resolve_upload_path(reference)
    if not path.is_file():
        logger.error("[PDF] template image not found: %s", path)
        raise TemplateAssetMissingError(f"Template image not found: {path}")

    image_bytes = path.read_bytes()
    primary, alternate = ("PNG", "JPEG") if path.suffix.lower() == ".png" else ("JPEG", "PNG")
    try:
        image = _decode(image_bytes, primary)
    except _DECODE_ERRORS as primary_error:
        logger.warning("[PDF] decoding %s as %s failed (%s), trying %s", path.name, primary, primary_error, alternate)
        try:
            image = _decode(image_bytes, alternate)
        except _DECODE_ERRORS:
            raise ImageDecodeError(
                f"Template image {path.name} is not a readable {primary} or {alternate}: {primary_error}"
            ) from primary_error
        logger.info("[PDF] fallback decode as %s succeeded", alternate)

    has_alpha = image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info)
    target_mode = "RGBA" if has_alpha else "RGB"
    if image.mode != target_mode:
        image = image.convert(target_mode)
    return image


class PdfRenderer:
    """Renders certificates; keeps no state between renders"""

    @staticmethod
    def output_filename(certificate_id: str) -> str:
        return f"cert_{certificate_id}.pdf"

    @staticmethod
    def _layout_field(
        field: TemplateField,
        data: CertificateRenderData,
        scale: ScaleFactors,
        page_width: int,
        page_height: int,
    ):
        text = resolve_field_text(field.field_type, data.certificate, field.label)
        if not text:
            logger.warning("[PDF] skipping empty field %r", field.field_type)
            return SkippedField(field.field_type, "empty")

        placement = place_field(field.position_x, field.position_y, field.font_size, scale, page_height)
        logger.debug(
            "[PDF] %r display=(%.1f, %.1f) size=%s pdf=(%.1f, %.1f) size=%s",
            text,
            field.position_x,
            field.position_y,
            field.font_size,
            placement.x,
            placement.y,
            placement.font_size,
        )
        if placement.font_size <= 0:
            logger.warning("[PDF] skipping %r, scaled font size is %s", text, placement.font_size)
            return SkippedField(field.field_type, "zero-size")
        if not is_on_page(placement, page_width, page_height):
            logger.warning(
                "[PDF] skipping %r, off-page at pdf(%.0f, %.0f)", text, placement.x, placement.y
            )
            return SkippedField(field.field_type, "off-page")

        return DrawnField(
            field_type=field.field_type,
            text=text,
            font_name=resolve_font(field.font_family, field.is_bold),
            color=hex_to_rgb(field.font_color),
            placement=placement,
        )

    @staticmethod
    def build_pdf(data: CertificateRenderData) -> Tuple[bytes, RenderReport]:
        """Produce the PDF bytes in memory; nothing is written to disk"""
        certificate = data.certificate
        template = data.template
        logger.info(
            "[PDF] rendering certificate=%s template_image=%s fields=%d",
            certificate.id,
            template.template_image_path,
            len(data.fields),
        )
        if not data.fields:
            logger.warning("[PDF] no fields on template, the PDF will only show the background")

        image = load_template_image(template.template_image_path)
        page_width, page_height = image.size
        scale = compute_scale(page_width, page_height, template.canvas_width, template.canvas_height)
        logger.info(
            "[PDF] page=%sx%s canvas=%sx%s scale=(%.3f, %.3f)",
            page_width,
            page_height,
            scale.canvas_width,
            scale.canvas_height,
            scale.scale_x,
            scale.scale_y,
        )

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
        pdf.setTitle(f"Certificate {certificate.id}")
        pdf.setCreator(settings.APP_NAME)
        # transparent areas show the white page
        pdf.drawImage(ImageReader(image), 0, 0, width=page_width, height=page_height, mask="auto")

        drawn: List[DrawnField] = []
        skipped: List[SkippedField] = []
        for field in data.fields:
            outcome = PdfRenderer._layout_field(field, data, scale, page_width, page_height)
            if isinstance(outcome, SkippedField):
                skipped.append(outcome)
                continue
            pdf.setFont(outcome.font_name, outcome.placement.font_size)
            pdf.setFillColorRGB(*outcome.color)
            pdf.drawString(outcome.placement.x, outcome.placement.y, outcome.text)
            drawn.append(outcome)

        pdf.showPage()
        pdf.save()

        filename = PdfRenderer.output_filename(certificate.id)
        report = RenderReport(
            reference=StorageService.generated_reference(filename),
            path=str(StorageService.resolve_generated_path(filename)),
            page_width=page_width,
            page_height=page_height,
            scale=scale,
            drawn=drawn,
            skipped=skipped,
        )
        return buffer.getvalue(), report

    @staticmethod
    def render(data: CertificateRenderData) -> RenderReport:
        """Render and persist `cert_{id}.pdf`; the file is complete or absent"""
        pdf_bytes, report = PdfRenderer.build_pdf(data)
        StorageService.write_atomic(Path(report.path), pdf_bytes)
        logger.info(
            "[PDF] saved %s (%d drawn, %d skipped)", report.path, len(report.drawn), len(report.skipped)
        )
        return report


def render_certificate_pdf(data: CertificateRenderData) -> str:
    """Render a certificate and return the artifact reference `/generated/cert_{id}.pdf`"""
    return PdfRenderer.render(data).reference


pdf_renderer = PdfRenderer()
