"""Shared test fixtures and configuration."""

import io
import os
import pytest
from unittest.mock import Mock
from PIL import Image
from google.genai import types

from stylefusion.core.models import GenerationRequest, TransformationMode
from stylefusion.utils.image_utils import encode_image_bytes


def _image_bytes(color: str, format: str) -> bytes:
    img_byte_arr = io.BytesIO()
    Image.new('RGB', (64, 64), color=color).save(img_byte_arr, format=format)
    return img_byte_arr.getvalue()


@pytest.fixture
def sample_png_bytes():
    """Return a small PNG as bytes."""
    return _image_bytes('red', 'PNG')


@pytest.fixture
def sample_jpeg_bytes():
    """Return a small JPEG as bytes."""
    return _image_bytes('blue', 'JPEG')


@pytest.fixture
def identity_image(sample_png_bytes):
    """Return an encoded identity photo."""
    return encode_image_bytes(sample_png_bytes)


@pytest.fixture
def style_image(sample_jpeg_bytes):
    """Return an encoded style reference."""
    return encode_image_bytes(sample_jpeg_bytes)


@pytest.fixture
def sample_request(identity_image, style_image):
    """Return a request with both images."""
    return GenerationRequest(
        identity_image=identity_image,
        style_image=style_image,
        mode=TransformationMode.REALISTIC,
        user_instruction="Make the lighting darker"
    )


@pytest.fixture
def make_response():
    """Return a builder for generation responses.

    Each argument is the list of parts for one candidate.
    """
    def _make(*candidate_parts):
        return types.GenerateContentResponse(
            candidates=[
                types.Candidate(content=types.Content(role="model", parts=parts))
                for parts in candidate_parts
            ]
        )
    return _make


@pytest.fixture
def image_part():
    """Return a part carrying three zero bytes of PNG data ("AAAA" in base64)."""
    return types.Part(inline_data=types.Blob(mime_type="image/png", data=b"\x00\x00\x00"))


@pytest.fixture
def mock_backend(make_response, image_part):
    """Return a mocked backend whose generate() yields one image."""
    backend = Mock()
    backend.name = "MockBackend"
    backend.analyze.return_value = "Neon-lit cyberpunk portrait with teal and orange tones."
    backend.generate.return_value = make_response([image_part])
    return backend


@pytest.fixture
def test_api_key():
    """Return a test API key."""
    return "test_gemini_key_12345"


# Skip integration tests unless explicitly requested
def pytest_collection_modifyitems(config, items):
    """Automatically skip integration tests unless RUN_INTEGRATION_TESTS is set."""
    skip_integration = pytest.mark.skip(reason="Integration tests disabled (set RUN_INTEGRATION_TESTS=true to enable)")

    for item in items:
        if "integration" in item.keywords:
            if not os.getenv("RUN_INTEGRATION_TESTS", "").lower() == "true":
                item.add_marker(skip_integration)
