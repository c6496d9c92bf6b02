"""Google Gemini backend implementation."""

import logging
from typing import Any, Optional
from google import genai
from google.genai import errors, types

from stylefusion.core.base_backend import BaseBackend
from stylefusion.core.models import EncodedImage

logger = logging.getLogger(__name__)


class GeminiBackend(BaseBackend):
    """Backend implementation using the Gemini API via google-genai.

    A fast multimodal text model reads style references and an image model
    produces the final picture. Every request carries a single inline image
    followed by the instruction text.

    Attributes:
        api_key: Gemini API key
        analysis_model: Model used to describe reference images
        generation_model: Model used to generate the final image
        client: google-genai client instance
    """

    DEFAULT_ANALYSIS_MODEL = "gemini-3-flash-preview"
    DEFAULT_GENERATION_MODEL = "gemini-2.5-flash-image"

    def __init__(
        self,
        api_key: str,
        analysis_model: Optional[str] = None,
        generation_model: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """Initialize the Gemini backend.

        Args:
            api_key: Gemini API key
            analysis_model: Optional model for style analysis
            generation_model: Optional model for image generation
            timeout: Optional request timeout in seconds

        Raises:
            ValueError: If API key is empty
        """
        super().__init__(api_key)

        if not api_key:
            raise ValueError("Gemini API key is required")

        self.analysis_model = analysis_model or self.DEFAULT_ANALYSIS_MODEL
        self.generation_model = generation_model or self.DEFAULT_GENERATION_MODEL
        self.timeout = timeout

        http_options = None
        if timeout:
            # SDK timeouts are in milliseconds
            http_options = types.HttpOptions(timeout=timeout * 1000)

        self.client = genai.Client(api_key=api_key, http_options=http_options)
        logger.info(
            f"Initialized Gemini backend with analysis model: {self.analysis_model}, "
            f"generation model: {self.generation_model}"
        )

    @staticmethod
    def _build_contents(image: EncodedImage, instruction: str) -> list:
        """Image part first, then the instruction text."""
        return [
            types.Part.from_bytes(data=image.to_bytes(), mime_type=image.mime_type),
            instruction,
        ]

    def _call(self, model: str, image: EncodedImage, instruction: str) -> Any:
        """Send one multimodal request and translate SDK errors.

        Raises:
            ConnectionError: If the API key is rejected
            RuntimeError: For rate limiting and any other failure
        """
        try:
            logger.debug(
                f"Calling {model} with {image.mime_type} image "
                f"({len(image.data)} base64 chars) and {len(instruction)} chars of text"
            )
            return self.client.models.generate_content(
                model=model,
                contents=self._build_contents(image, instruction)
            )

        except errors.APIError as e:
            logger.error(f"Gemini API error ({e.code}): {e}")

            if e.code in (401, 403):
                raise ConnectionError(
                    "Invalid Gemini API key. Please check your API_KEY."
                ) from e
            elif e.code == 429:
                raise RuntimeError(
                    "Rate limit exceeded. Please try again later."
                ) from e
            else:
                raise RuntimeError(f"Gemini API error: {e.message or e}") from e

        except ConnectionError:
            raise

        except Exception as e:
            logger.error(f"Unexpected error calling {model}: {e}")
            raise RuntimeError(f"Failed to reach Gemini: {e}") from e

    def analyze(self, image: EncodedImage, instruction: str) -> str:
        """Describe an image with the analysis model.

        Args:
            image: The reference image
            instruction: What to extract from the image

        Returns:
            The response text, or an empty string if the model returned none
        """
        response = self._call(self.analysis_model, image, instruction)
        text = response.text or ""
        logger.info(f"Analysis returned {len(text)} characters")
        return text

    def generate(self, image: EncodedImage, instruction: str) -> Any:
        """Run the image model and return its raw response.

        Args:
            image: The identity image
            instruction: The full generation instruction

        Returns:
            The GenerateContentResponse from the SDK
        """
        return self._call(self.generation_model, image, instruction)

    def health_check(self) -> bool:
        """Check if the Gemini API is accessible.

        Returns:
            True if the backend is healthy, False otherwise
        """
        try:
            logger.debug("Performing health check...")
            # Listing models verifies both the key and connectivity
            next(iter(self.client.models.list()))
            logger.debug("Health check passed")
            return True
        except Exception as e:
            logger.warning(f"Health check failed: {e}")
            return False

    @property
    def name(self) -> str:
        """Get the backend name.

        Returns:
            The string "Gemini"
        """
        return "Gemini"

    @property
    def supported_models(self) -> list[str]:
        """Models known to accept an inline image plus text."""
        return [
            "gemini-3-flash-preview",
            "gemini-2.5-flash",
            "gemini-2.5-flash-image",
            "gemini-3-pro-image-preview",
        ]
