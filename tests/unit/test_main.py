"""Unit tests for main application logic."""

import os
import pytest
from unittest.mock import Mock, patch
from PIL import Image

import app.main as main
from stylefusion.core.models import GeneratedImage, GenerationRequest, TransformationMode
from stylefusion.core.pipeline import NoImageProducedError


@pytest.fixture
def identity_path(tmp_path, sample_png_bytes):
    path = tmp_path / "identity.png"
    path.write_bytes(sample_png_bytes)
    return str(path)


@pytest.fixture
def style_path(tmp_path, sample_jpeg_bytes):
    path = tmp_path / "style.jpg"
    path.write_bytes(sample_jpeg_bytes)
    return str(path)


@pytest.fixture
def generated_image(identity_path):
    from stylefusion.utils.image_utils import encode_image_file

    return GeneratedImage(
        image_data_uri=encode_image_file(identity_path).to_data_uri(),
        style_description="Soft watercolor washes.",
        backend="MockBackend"
    )


@pytest.fixture
def mock_pipeline(generated_image):
    pipeline = Mock()
    pipeline.generate_transformed_image.return_value = generated_image
    return pipeline


class TestCreatePipeline:
    """Tests for create_pipeline."""

    def test_missing_key_fails_fast(self):
        """Test that no backend is built without an API key."""
        with patch.object(main.settings, "api_key", ""), \
                patch('app.main.GeminiBackend') as mock_backend_class:
            with pytest.raises(ValueError, match="API_KEY is required"):
                main.create_pipeline()

            mock_backend_class.assert_not_called()

    def test_builds_gemini_pipeline(self):
        """Test pipeline creation from settings."""
        with patch.object(main.settings, "api_key", "test_key"), \
                patch('app.main.GeminiBackend') as mock_backend_class:
            mock_backend_class.return_value.name = "Gemini"

            pipeline = main.create_pipeline()

            assert pipeline.backend is mock_backend_class.return_value
            mock_backend_class.assert_called_once_with(
                "test_key",
                analysis_model=main.settings.analysis_model,
                generation_model=main.settings.generation_model,
                timeout=main.settings.timeout or None
            )


class TestGenerateTransformedImage:
    """Tests for the generate button handler."""

    def test_missing_identity_image(self, mock_pipeline, style_path):
        """Test that nothing is dispatched without an identity image."""
        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(None, style_path)

        assert image is None
        assert download is None
        assert message == "Error: Please upload a User Identity Image."
        mock_pipeline.generate_transformed_image.assert_not_called()

    def test_pipeline_not_initialized(self, identity_path):
        """Test the message shown when configuration failed."""
        with patch.object(main, "pipeline", None):
            image, message, download = main.generate_transformed_image(identity_path, None)

        assert image is None
        assert "not initialized" in message

    def test_success(self, mock_pipeline, identity_path, style_path):
        """Test a successful generation."""
        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(
                identity_path, style_path, "Full Style", "  add a hat  "
            )

        assert isinstance(image, Image.Image)
        assert "✅" in message
        assert "Soft watercolor washes." in message
        assert download is not None
        assert os.path.basename(download).startswith("stylefusion-")
        assert os.path.exists(download)

        request = mock_pipeline.generate_transformed_image.call_args.args[0]
        assert isinstance(request, GenerationRequest)
        assert request.mode is TransformationMode.FULL_STYLE
        assert request.user_instruction == "add a hat"
        assert request.identity_image.mime_type == "image/png"
        assert request.style_image.mime_type == "image/jpeg"

    def test_without_style_image(self, mock_pipeline, identity_path):
        """Test that the style image is optional."""
        with patch.object(main, "pipeline", mock_pipeline):
            main.generate_transformed_image(identity_path, None)

        request = mock_pipeline.generate_transformed_image.call_args.args[0]
        assert request.style_image is None
        assert request.mode is TransformationMode.REALISTIC

    def test_no_image_produced(self, mock_pipeline, identity_path):
        """Test that the pipeline's message is shown verbatim."""
        mock_pipeline.generate_transformed_image.side_effect = NoImageProducedError()

        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(identity_path, None)

        assert image is None
        assert message == "❌ Generation failed: Generation completed but no image data was returned."

    def test_empty_error_message_uses_default(self, mock_pipeline, identity_path):
        """Test that a failure without a message still explains itself."""
        mock_pipeline.generate_transformed_image.side_effect = RuntimeError("")

        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(identity_path, None)

        assert image is None
        assert download is None
        assert message == "❌ Generation failed: Failed to generate image."

    def test_long_instruction_passed_through(self, mock_pipeline, identity_path):
        """Test that long instructions are not truncated or rejected."""
        instruction = "Add neon rim lighting. " * 300

        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(
                identity_path, None, "Realistic", instruction
            )

        assert message.startswith("✅")
        request = mock_pipeline.generate_transformed_image.call_args.args[0]
        assert request.user_instruction == instruction.strip()

    def test_connection_error(self, mock_pipeline, identity_path):
        """Test authentication failures."""
        mock_pipeline.generate_transformed_image.side_effect = ConnectionError("Invalid Gemini API key.")

        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(identity_path, None)

        assert image is None
        assert "Connection error: Invalid Gemini API key." in message

    def test_unreadable_file(self, mock_pipeline, tmp_path):
        """Test that read failures are reported instead of hanging."""
        with patch.object(main, "pipeline", mock_pipeline):
            image, message, download = main.generate_transformed_image(
                str(tmp_path / "gone.png"), None
            )

        assert image is None
        assert "Failed to read image file" in message
        mock_pipeline.generate_transformed_image.assert_not_called()


class TestDescribeMode:
    """Tests for describe_mode."""

    def test_known_modes(self):
        """Test help text per mode."""
        assert main.describe_mode("Realistic") == TransformationMode.REALISTIC.help_text
        assert main.describe_mode("Full Style") == TransformationMode.FULL_STYLE.help_text

    def test_unknown_mode(self):
        """Test that unknown labels produce no help text."""
        assert main.describe_mode("Other") == ""


class TestGetHealthStatus:
    """Tests for get_health_status."""

    @pytest.fixture
    def health_pipeline(self):
        pipeline = Mock()
        pipeline.backend.name = "Gemini"
        pipeline.backend.supported_models = ["gemini-3-flash-preview", "gemini-2.5-flash-image"]
        return pipeline

    def test_pipeline_not_initialized(self):
        """Test status before the pipeline exists."""
        with patch.object(main, "pipeline", None):
            assert main.get_health_status() == "❌ Pipeline not initialized"

    def test_healthy_backend(self, health_pipeline):
        """Test status for a reachable backend."""
        health_pipeline.backend.health_check.return_value = True

        with patch.object(main, "pipeline", health_pipeline):
            status = main.get_health_status()

        assert status.startswith("✅ Gemini")
        assert "gemini-3-flash-preview, gemini-2.5-flash-image" in status
        health_pipeline.backend.health_check.assert_called_once()

    def test_unhealthy_backend(self, health_pipeline):
        """Test status for an unreachable backend."""
        health_pipeline.backend.health_check.return_value = False

        with patch.object(main, "pipeline", health_pipeline):
            status = main.get_health_status()

        assert status.startswith("❌ Gemini")

    def test_health_check_error(self, health_pipeline):
        """Test that errors while checking are reported."""
        health_pipeline.backend.health_check.side_effect = RuntimeError("boom")

        with patch.object(main, "pipeline", health_pipeline):
            status = main.get_health_status()

        assert status == "❌ Error checking health: boom"
