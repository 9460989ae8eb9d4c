"""
Certificate Template Request/Response Models
"""

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
import re

from certissuer.config import settings

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class FieldType(str, Enum):
    """Built-in field types; any other value is a custom text field"""
    STUDENT_NAME = "student_name"
    COURSE_NAME = "course_name"
    COMPLETION_DATE = "completion_date"
    CERTIFICATE_ID = "certificate_id"
    VERIFICATION_LINK = "verification_link"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TemplateField(BaseModel):
    """A positioned, styled text field on the certificate

    Instances are immutable; editing a layout replaces the whole list.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True, populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Stable field identifier")
    field_type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        validation_alias=AliasChoices("field_type", "field"),
        description="student_name, course_name, completion_date, certificate_id, verification_link or a custom key"
    )
    label: Optional[str] = Field(default=None, max_length=200, description="Literal text of custom fields")
    position_x: float = Field(
        default=0,
        validation_alias=AliasChoices("position_x", "x"),
        description="X in design canvas pixels"
    )
    position_y: float = Field(
        default=0,
        validation_alias=AliasChoices("position_y", "y"),
        description="Y in design canvas pixels, measured downward"
    )
    font_size: int = Field(
        default_factory=lambda: settings.DEFAULT_FONT_SIZE,
        gt=0,
        le=500,
        description="Font size in canvas units"
    )
    font_color: str = Field(
        default="#000000",
        validation_alias=AliasChoices("font_color", "color"),
        description="Hex color code (e.g., #000000)"
    )
    font_family: str = Field(default="Helvetica", description="Font family name")
    is_bold: bool = False
    is_italic: bool = False
    text_align: TextAlign = Field(
        default=TextAlign.LEFT,
        validation_alias=AliasChoices("text_align", "align"),
    )

    @field_validator("font_color")
    @classmethod
    def validate_color(cls, value: str) -> str:
        if not _HEX_COLOR.match(value or ""):
            raise ValueError("font_color must look like #RRGGBB")
        return value


class TemplateBundle(BaseModel):
    """What the renderer needs to know about a template"""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    template_image_path: str
    canvas_width: Optional[int] = Field(default=None, description="Designer display width, 0/None if never saved")
    canvas_height: Optional[int] = Field(default=None, description="Designer display height, 0/None if never saved")


class TemplateResponse(BaseModel):
    """Certificate template details"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    template_image_path: str
    canvas_width: Optional[int] = 0
    canvas_height: Optional[int] = 0
    preview_certificate_id: Optional[str] = None
    preview_verification_code: Optional[str] = None
    created_at: Optional[datetime] = None

    def bundle(self) -> TemplateBundle:
        return TemplateBundle(
            template_image_path=self.template_image_path,
            canvas_width=self.canvas_width,
            canvas_height=self.canvas_height,
        )


class TemplateDetailResponse(BaseModel):
    """Template with its ordered field layout"""
    template: TemplateResponse
    fields: List[TemplateField]


class UpdateTemplateFieldsResponse(BaseModel):
    """Result of saving a layout from the designer"""
    fields: List[TemplateField]
    preview_certificate_id: str
    preview_verification_code: str
