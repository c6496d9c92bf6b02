"""Abstract base class for generative model backends."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from .models import EncodedImage


class BaseBackend(ABC):
    """Abstract interface that all generative backends must implement.

    The style transfer pipeline only talks to this contract, so a backend for
    another multimodal service can be dropped in without touching the
    orchestration logic.

    Attributes:
        api_key: Optional API key for cloud-based backends
    """

    def __init__(self, api_key: Optional[str] = None):
        """Initialize the backend.

        Args:
            api_key: Optional API key for authentication with cloud services
        """
        self.api_key = api_key

    @abstractmethod
    def analyze(self, image: EncodedImage, instruction: str) -> str:
        """Describe an image in text following an instruction.

        Args:
            image: The image to analyze
            instruction: What to extract from the image

        Returns:
            Best-effort text answer, possibly empty

        Raises:
            RuntimeError: If the request fails
            ConnectionError: If authentication with the service fails
        """
        pass

    @abstractmethod
    def generate(self, image: EncodedImage, instruction: str) -> Any:
        """Generate a new image from a source image and an instruction.

        Args:
            image: The source image sent alongside the instruction
            instruction: The full generation instruction

        Returns:
            Raw service response: candidates whose content parts carry either
            text or inline image data

        Raises:
            RuntimeError: If the request fails
            ConnectionError: If authentication with the service fails
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the backend is reachable and the credential is accepted.

        Returns:
            True if the backend is healthy, False otherwise
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the human-readable name of this backend."""
        pass

    @property
    @abstractmethod
    def supported_models(self) -> list[str]:
        """Get a list of models this backend is known to work with."""
        pass

    def __repr__(self) -> str:
        """String representation of the backend."""
        return f"{self.__class__.__name__}(name='{self.name}')"
