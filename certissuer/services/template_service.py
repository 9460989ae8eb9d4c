"""
Template Service
Business logic for certificate template management
"""

import logging
import uuid
from collections import Counter
from contextlib import asynccontextmanager
from typing import List, Optional, Set, Tuple

from certissuer.database import database
from certissuer.errors import TemplateInUseError, TemplateNotFoundError
from certissuer.schemas.template import (
    TemplateBundle,
    TemplateDetailResponse,
    TemplateField,
    TemplateResponse,
    UpdateTemplateFieldsResponse,
)
from certissuer.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def generate_short_code() -> str:
    """8 upper-case hex characters taken from a random UUID"""
    return uuid.uuid4().hex[:8].upper()


class TemplateService:
    """Service for template management operations"""

    # template_id -> number of renders currently reading the template
    _in_use: Counter = Counter()
    # templates whose delete is in progress
    _deleting: Set[str] = set()

    @staticmethod
    @asynccontextmanager
    async def in_use(template_id: str):
        """Mark a template as read by an in-flight render

        Enter before reading the template; refused while it is being deleted.
        The check and the mark happen without awaiting in between.
        """
        if template_id in TemplateService._deleting:
            raise TemplateInUseError("Template is being deleted.")
        TemplateService._in_use[template_id] += 1
        try:
            yield
        finally:
            TemplateService._in_use[template_id] -= 1
            if TemplateService._in_use[template_id] <= 0:
                del TemplateService._in_use[template_id]

    @staticmethod
    def is_in_use(template_id: str) -> bool:
        return TemplateService._in_use.get(template_id, 0) > 0

    @staticmethod
    async def create_template(user_id: str, name: str, image_path: str) -> TemplateResponse:
        """Create a template record for an uploaded background image"""
        template_id = str(uuid.uuid4())
        await database.execute(
            """
            INSERT INTO templates (id, user_id, name, template_image_path, canvas_width, canvas_height)
            VALUES (:id, :user_id, :name, :template_image_path, 0, 0)
            """,
            {
                "id": template_id,
                "user_id": user_id,
                "name": name,
                "template_image_path": image_path,
            }
        )
        logger.info("[TEMPLATE] created id=%s name=%r", template_id, name)
        return await TemplateService.get_template(template_id, user_id)

    @staticmethod
    async def list_templates(user_id: str) -> List[TemplateResponse]:
        rows = await database.fetch_all(
            "SELECT * FROM templates WHERE user_id = :user_id ORDER BY created_at DESC",
            {"user_id": user_id}
        )
        return [TemplateResponse.model_validate(dict(row)) for row in rows]

    @staticmethod
    async def get_template(template_id: str, user_id: str) -> TemplateResponse:
        """Get template by ID, scoped to its owner"""
        template = await database.fetch_one(
            "SELECT * FROM templates WHERE id = :template_id AND user_id = :user_id",
            {"template_id": template_id, "user_id": user_id}
        )
        if not template:
            raise TemplateNotFoundError("Template not found.")
        return TemplateResponse.model_validate(dict(template))

    @staticmethod
    async def get_template_fields(template_id: str) -> List[TemplateField]:
        rows = await database.fetch_all(
            "SELECT * FROM template_fields WHERE template_id = :template_id ORDER BY sort_order",
            {"template_id": template_id}
        )
        return [TemplateField.model_validate(dict(row)) for row in rows]

    @staticmethod
    async def get_template_details(template_id: str, user_id: str) -> TemplateDetailResponse:
        template = await TemplateService.get_template(template_id, user_id)
        fields = await TemplateService.get_template_fields(template_id)
        return TemplateDetailResponse(template=template, fields=fields)

    @staticmethod
    async def get_template_bundle(template_id: str, user_id: str) -> Tuple[TemplateBundle, List[TemplateField]]:
        """Snapshot of the template and its layout for rendering"""
        details = await TemplateService.get_template_details(template_id, user_id)
        return details.template.bundle(), details.fields

    @staticmethod
    async def update_template_fields(
        template_id: str,
        user_id: str,
        fields: List[TemplateField],
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> UpdateTemplateFieldsResponse:
        """Replace a template's whole layout as saved by the designer

        The canvas size is stored only when both dimensions are given.
        """
        await TemplateService.get_template(template_id, user_id)

        preview_certificate_id = f"CERT-{generate_short_code()}"
        preview_verification_code = generate_short_code()

        saved: List[TemplateField] = []
        async with database.transaction():
            params = {
                "template_id": template_id,
                "preview_certificate_id": preview_certificate_id,
                "preview_verification_code": preview_verification_code,
            }
            canvas_sql = ""
            if width and height:
                canvas_sql = ", canvas_width = :canvas_width, canvas_height = :canvas_height"
                params["canvas_width"] = int(width)
                params["canvas_height"] = int(height)
            await database.execute(
                f"""
                UPDATE templates
                SET preview_certificate_id = :preview_certificate_id,
                    preview_verification_code = :preview_verification_code{canvas_sql}
                WHERE id = :template_id
                """,
                params
            )

            await database.execute(
                "DELETE FROM template_fields WHERE template_id = :template_id",
                {"template_id": template_id}
            )

            for order, field in enumerate(fields):
                field_id = str(uuid.uuid4())
                await database.execute(
                    """
                    INSERT INTO template_fields
                    (id, template_id, sort_order, field_type, label, position_x, position_y,
                     font_size, font_color, font_family, is_bold, is_italic, text_align)
                    VALUES (:id, :template_id, :sort_order, :field_type, :label, :position_x, :position_y,
                            :font_size, :font_color, :font_family, :is_bold, :is_italic, :text_align)
                    """,
                    {
                        "id": field_id,
                        "template_id": template_id,
                        "sort_order": order,
                        "field_type": field.field_type,
                        "label": field.label or field.field_type,
                        "position_x": float(field.position_x),
                        "position_y": float(field.position_y),
                        "font_size": field.font_size,
                        "font_color": field.font_color,
                        "font_family": field.font_family,
                        "is_bold": bool(field.is_bold),
                        "is_italic": bool(field.is_italic),
                        "text_align": field.text_align.value,
                    }
                )
                saved.append(field.model_copy(update={"id": field_id, "label": field.label or field.field_type}))

        logger.info(
            "[TEMPLATE] saved %d fields for template=%s canvas=%sx%s",
            len(saved),
            template_id,
            width,
            height,
        )
        return UpdateTemplateFieldsResponse(
            fields=saved,
            preview_certificate_id=preview_certificate_id,
            preview_verification_code=preview_verification_code,
        )

    @staticmethod
    async def delete_template(template_id: str, user_id: str) -> None:
        """Delete a template, its certificates, their PDFs and the background image

        Refused while a render is reading the template. Renders asking for the
        template while the delete runs are refused in turn.
        """
        if TemplateService.is_in_use(template_id) or template_id in TemplateService._deleting:
            raise TemplateInUseError("Template is being used to generate certificates. Try again later.")
        TemplateService._deleting.add(template_id)
        try:
            template = await TemplateService.get_template(template_id, user_id)

            certificates = await database.fetch_all(
                "SELECT pdf_path FROM certificates WHERE template_id = :template_id",
                {"template_id": template_id}
            )

            async with database.transaction():
                await database.execute(
                    "DELETE FROM certificates WHERE template_id = :template_id",
                    {"template_id": template_id}
                )
                await database.execute(
                    "DELETE FROM template_fields WHERE template_id = :template_id",
                    {"template_id": template_id}
                )
                await database.execute(
                    "DELETE FROM templates WHERE id = :template_id",
                    {"template_id": template_id}
                )

            for row in certificates:
                if row["pdf_path"]:
                    StorageService.delete_file(StorageService.resolve_generated_path(row["pdf_path"]))
            if template.template_image_path:
                StorageService.delete_file(StorageService.resolve_upload_path(template.template_image_path))
        finally:
            TemplateService._deleting.discard(template_id)

        logger.info("[TEMPLATE] deleted id=%s certificates=%d", template_id, len(certificates))


# Create singleton instance
template_service = TemplateService()
