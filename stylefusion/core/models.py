"""Core data models for identity-preserving style transfer."""

import base64
import re
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

# data:<type>/<subtype>;base64,<payload>
DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime_type>[a-zA-Z0-9]+/[a-zA-Z0-9\-.+]+);base64,(?P<data>.*)$",
    re.DOTALL
)

DEFAULT_MIME_TYPE = "image/jpeg"


class TransformationMode(Enum):
    """How far the subject may be pulled into the reference style."""
    REALISTIC = "REALISTIC"
    FULL_STYLE = "FULL_STYLE"

    @property
    def label(self) -> str:
        """Short label shown in the mode selector."""
        return "Realistic" if self is TransformationMode.REALISTIC else "Full Style"

    @property
    def help_text(self) -> str:
        """One-line explanation of the mode for the UI."""
        if self is TransformationMode.REALISTIC:
            return "Maintains human anatomy and realism while applying style shaders."
        return "Transforms the subject into the art style (anime, cartoon, 3D, etc.)."

    @classmethod
    def from_label(cls, label: str) -> "TransformationMode":
        """Resolve a mode from its label or its value.

        Raises:
            ValueError: If the label matches no mode
        """
        for mode in cls:
            if label in (mode.label, mode.value):
                return mode
        raise ValueError(f"Unknown transformation mode: {label}")


class EncodedImage(BaseModel):
    """An image held in memory as base64 text plus its media type.

    Attributes:
        data: Base64-encoded image bytes (without any data URI prefix)
        mime_type: Detected media type, e.g. "image/png"
        preview_path: Optional local file the image was read from
    """

    model_config = ConfigDict(frozen=True)

    data: str = Field(
        ...,
        min_length=1,
        description="Base64-encoded image bytes"
    )
    mime_type: str = Field(
        default=DEFAULT_MIME_TYPE,
        description="Media type of the encoded image"
    )
    preview_path: Optional[str] = Field(
        default=None,
        description="Local file the image was read from, if any"
    )

    @field_validator("data", mode="before")
    @classmethod
    def strip_data_uri_prefix(cls, value: Any) -> Any:
        """Accept a full data URL and keep only its payload."""
        if isinstance(value, str):
            match = DATA_URI_PATTERN.match(value)
            if match:
                return match.group("data")
        return value

    def to_bytes(self) -> bytes:
        """Decode the payload back to raw image bytes."""
        return base64.b64decode(self.data)

    def to_data_uri(self) -> str:
        """Format the image as a self-describing data URI."""
        return f"data:{self.mime_type};base64,{self.data}"

    def __repr__(self) -> str:
        return f"EncodedImage(mime_type='{self.mime_type}', size={len(self.data)})"


class GenerationRequest(BaseModel):
    """One style transfer attempt, built fresh at submission time.

    Attributes:
        identity_image: Photo whose subject's face and identity must be kept
        style_image: Optional reference whose visual style should be imitated
        mode: Realistic or fully stylized framing
        user_instruction: Optional free-text request from the user
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "identity_image": {"data": "iVBORw0KGgo...", "mime_type": "image/png"},
                "style_image": {"data": "/9j/4AAQSkZJRg...", "mime_type": "image/jpeg"},
                "mode": "REALISTIC",
                "user_instruction": "Make the lighting darker"
            }
        }
    )

    identity_image: EncodedImage = Field(
        ...,
        description="Photo providing the subject's identity"
    )
    style_image: Optional[EncodedImage] = Field(
        default=None,
        description="Reference photo providing the visual style"
    )
    mode: TransformationMode = Field(
        default=TransformationMode.REALISTIC,
        description="Transformation framing"
    )
    user_instruction: str = Field(
        default="",
        description="Additional free-text instructions"
    )


class GeneratedImage(BaseModel):
    """Result of a successful style transfer.

    Attributes:
        image_data_uri: The generated image as a data URI
        timestamp: When the image was generated
        style_description: Style guide text used for the final generation
        prompt: The full instruction sent with the identity image
        backend: Name of the backend that generated the image
        metadata: Additional information about the generation
    """

    image_data_uri: str = Field(
        ...,
        pattern=r"^data:",
        description="Generated image as a data URI"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the image was generated"
    )
    style_description: str = Field(
        default="",
        description="Style guide used for the final generation"
    )
    prompt: str = Field(
        default="",
        description="Instruction sent to the generation model"
    )
    backend: str = Field(
        default="",
        description="Name of the backend that generated the image"
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional information about the generation"
    )

    def _parts(self) -> tuple[str, str]:
        match = DATA_URI_PATTERN.match(self.image_data_uri)
        if not match:
            raise ValueError("Generated image is not a base64 data URI")
        return match.group("mime_type"), match.group("data")

    @property
    def mime_type(self) -> str:
        return self._parts()[0]

    def to_bytes(self) -> bytes:
        """Decode the generated image to raw bytes."""
        return base64.b64decode(self._parts()[1])

    def download_filename(self) -> str:
        """File name for saving the image, e.g. stylefusion-1700000000000.png."""
        millis = int(self.timestamp.timestamp() * 1000)
        extension = self.mime_type.split("/")[-1]
        return f"stylefusion-{millis}.{extension}"
