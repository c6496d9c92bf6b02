"""Two-stage style transfer: describe the reference, then regenerate the subject."""

import base64
import logging
from datetime import datetime
from typing import Any, Optional

from stylefusion.core.base_backend import BaseBackend
from stylefusion.core.models import GenerationRequest, GeneratedImage
from stylefusion.core.prompts import (
    ANALYSIS_FAILED_FALLBACK,
    NO_STYLE_FALLBACK,
    build_analysis_prompt,
    build_generation_prompt,
)

logger = logging.getLogger(__name__)


class NoImageProducedError(RuntimeError):
    """The generation call succeeded but returned no inline image."""

    def __init__(self, message: str = "Generation completed but no image data was returned."):
        super().__init__(message)


def extract_image_data_uri(response: Any) -> Optional[str]:
    """Find the first inline image in a generation response.

    Candidates and their content parts are scanned in order.

    Args:
        response: Response whose candidates carry content parts

    Returns:
        The image as a data URI, or None if no part holds image data
    """
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        if content is None:
            continue
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            data = getattr(inline_data, "data", None) if inline_data is not None else None
            if not data:
                continue
            if isinstance(data, bytes):
                data = base64.b64encode(data).decode("ascii")
            mime_type = getattr(inline_data, "mime_type", None) or "image/png"
            return f"data:{mime_type};base64,{data}"
    return None


class StyleTransferPipeline:
    """Orchestrates style analysis and identity-preserving generation.

    Stage A turns the optional style reference into a text description.
    Its failures are absorbed with a fallback description. Stage B sends only
    the identity image and the composed instruction to the image model; its
    failures propagate to the caller. Each call is a single attempt.

    Attributes:
        backend: The generative backend used for both stages
    """

    def __init__(self, backend: BaseBackend):
        """Initialize the pipeline.

        Args:
            backend: Backend providing analyze() and generate()
        """
        self.backend = backend
        logger.info(f"Initialized StyleTransferPipeline with backend: {backend.name}")

    def describe_style(self, request: GenerationRequest) -> str:
        """Stage A: describe the reference style, never raising.

        Args:
            request: The generation request

        Returns:
            A style description paragraph or one of the fallback sentences
        """
        if request.style_image is None:
            logger.info("No style reference supplied, using default style description")
            return NO_STYLE_FALLBACK

        try:
            logger.info(f"Analyzing style reference (mode={request.mode.value})")
            description = self.backend.analyze(
                request.style_image,
                build_analysis_prompt(request.mode)
            )
        except Exception as e:
            logger.warning(f"Style analysis failed, falling back to default styling: {e}")
            return ANALYSIS_FAILED_FALLBACK

        if not description or not description.strip():
            logger.warning("Style analysis returned no text, falling back to default styling")
            return ANALYSIS_FAILED_FALLBACK

        return description.strip()

    def generate_transformed_image(self, request: GenerationRequest) -> GeneratedImage:
        """Generate a new image of the identity subject in the requested style.

        Args:
            request: The generation request

        Returns:
            The generated image as a data URI with its prompt and metadata

        Raises:
            ValueError: If the request carries no identity image
            NoImageProducedError: If the response contains no image part
            RuntimeError: If the generation call fails
            ConnectionError: If authentication fails
        """
        if request.identity_image is None:
            raise ValueError("Please upload a User Identity Image.")

        style_description = self.describe_style(request)
        prompt = build_generation_prompt(
            style_description,
            request.user_instruction,
            request.mode
        )

        # Only the identity image goes to the image model
        logger.info(f"Generating transformed image with {self.backend.name}")
        try:
            response = self.backend.generate(request.identity_image, prompt)
        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            raise

        image_data_uri = extract_image_data_uri(response)
        if image_data_uri is None:
            error = NoImageProducedError()
            logger.error(str(error))
            raise error

        result = GeneratedImage(
            image_data_uri=image_data_uri,
            timestamp=datetime.now(),
            style_description=style_description,
            prompt=prompt,
            backend=self.backend.name,
            metadata={
                "mode": request.mode.value,
                "style_reference": request.style_image is not None,
                "fallback_style": style_description in (
                    NO_STYLE_FALLBACK,
                    ANALYSIS_FAILED_FALLBACK,
                ),
                "user_instruction": request.user_instruction,
            }
        )

        logger.info(f"Successfully generated image ({len(image_data_uri)} chars)")
        return result
