"""Main Gradio application for identity-preserving style transfer."""

import logging
import os
import tempfile
from typing import Optional, Tuple
from PIL import Image
import gradio as gr

from app.config import settings
from stylefusion.backends.gemini import GeminiBackend
from stylefusion.core.models import GenerationRequest, GeneratedImage, TransformationMode
from stylefusion.core.pipeline import StyleTransferPipeline
from stylefusion.utils.image_utils import (
    create_downloadable_image,
    decode_generated_image,
    encode_image_file,
)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


MODE_CHOICES = [mode.label for mode in TransformationMode]

# Global pipeline instance
pipeline: Optional[StyleTransferPipeline] = None


def create_pipeline() -> StyleTransferPipeline:
    """Create the style transfer pipeline with the Gemini backend.

    Returns:
        Initialized StyleTransferPipeline

    Raises:
        ValueError: If required configuration is missing
    """
    try:
        settings.validate_required_keys()

        backend = GeminiBackend(
            settings.api_key,
            analysis_model=settings.analysis_model,
            generation_model=settings.generation_model,
            timeout=settings.timeout or None
        )

        style_pipeline = StyleTransferPipeline(backend)
        logger.info(f"Initialized pipeline with backend: {backend.name}")
        return style_pipeline

    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise


def save_download(generated_image: GeneratedImage) -> Optional[str]:
    """Write a generated image to a temporary file for the download button.

    Args:
        generated_image: The image to save

    Returns:
        Path to the temporary file, or None if it could not be written
    """
    try:
        image_bytes, filename = create_downloadable_image(generated_image)
        temp_path = os.path.join(tempfile.gettempdir(), filename)

        with open(temp_path, 'wb') as f:
            f.write(image_bytes)

        logger.info(f"Created download: {filename} ({len(image_bytes)} bytes) at {temp_path}")
        return temp_path

    except (OSError, ValueError) as e:
        logger.error(f"Failed to create download: {e}")
        return None


def get_health_status() -> str:
    """Get health status of the Gemini backend.

    Returns:
        Formatted health status string
    """
    if pipeline is None:
        return "❌ Pipeline not initialized"

    try:
        backend = pipeline.backend
        icon = "✅" if backend.health_check() else "❌"
        return (
            f"{icon} {backend.name}\n"
            f"Models: {', '.join(backend.supported_models)}"
        )
    except Exception as e:
        return f"❌ Error checking health: {e}"


def generate_transformed_image(
    identity_image_path: Optional[str],
    style_image_path: Optional[str],
    mode_label: str = TransformationMode.REALISTIC.label,
    instruction: str = ""
) -> Tuple[Optional[Image.Image], str, Optional[str]]:
    """Generate a styled image of the uploaded subject.

    Args:
        identity_image_path: Uploaded photo of the subject (required)
        style_image_path: Uploaded style reference (optional)
        mode_label: Selected transformation mode label
        instruction: Additional free-text instructions

    Returns:
        Tuple of (PIL Image or None, status message, download path or None)
    """
    if not identity_image_path:
        return None, "Error: Please upload a User Identity Image.", None

    if pipeline is None:
        return None, "❌ Error: Pipeline not initialized. Check your API_KEY.", None

    try:
        request = GenerationRequest(
            identity_image=encode_image_file(identity_image_path),
            style_image=encode_image_file(style_image_path) if style_image_path else None,
            mode=TransformationMode.from_label(mode_label),
            user_instruction=(instruction or "").strip()
        )

        result = pipeline.generate_transformed_image(request)

        output_image = decode_generated_image(result)
        download_path = save_download(result)

        info_message = (
            f"✅ Image generated successfully!\n"
            f"Backend: {result.backend}\n"
            f"Mode: {request.mode.label}\n"
            f"Style reference: {'yes' if request.style_image else 'no'}\n\n"
            f"Style guide:\n{result.style_description}"
        )

        return output_image, info_message, download_path

    except ValueError as e:
        error_msg = f"❌ Invalid input: {e}"
        logger.error(error_msg)
        return None, error_msg, None

    except ConnectionError as e:
        error_msg = f"❌ Connection error: {e}"
        logger.error(error_msg)
        return None, error_msg, None

    except RuntimeError as e:
        error_msg = f"❌ Generation failed: {str(e) or 'Failed to generate image.'}"
        logger.error(error_msg)
        return None, error_msg, None

    except Exception as e:
        error_msg = f"❌ Something went wrong during generation: {e}"
        logger.exception(error_msg)
        return None, error_msg, None


def describe_mode(mode_label: str) -> str:
    """Help text for the selected mode."""
    try:
        return TransformationMode.from_label(mode_label).help_text
    except ValueError:
        return ""


# Initialize pipeline on startup
try:
    pipeline = create_pipeline()
except Exception as e:
    logger.critical(f"Failed to initialize pipeline: {e}")
    pipeline = None


def create_ui():
    """Create the Gradio interface.

    Returns:
        Gradio Blocks interface
    """
    with gr.Blocks(title="StyleFusion AI") as demo:
        gr.Markdown(
            """
            # 🧪 StyleFusion AI

            Keep the subject's identity, borrow the look of any reference image.
            """
        )

        if pipeline is None:
            gr.Markdown(
                """
                ## ⚠️ Configuration Error

                The application could not initialize. Please check:
                1. Your `.env` file exists and contains `API_KEY`
                2. Get a Gemini API key from https://aistudio.google.com/apikey
                """
            )
            return demo

        # Backend health status
        with gr.Row():
            health_display = gr.Textbox(
                label="Backend Health Status",
                value=get_health_status(),
                interactive=False,
                lines=3
            )
            refresh_health = gr.Button("🔄 Refresh Health")

        with gr.Row():
            with gr.Column(scale=5):
                gr.Markdown("## Input Configuration")

                identity_input = gr.Image(
                    label="1. User Identity Image (required)",
                    type="filepath",
                    sources=["upload", "clipboard"],
                    show_label=True
                )

                style_input = gr.Image(
                    label="2. Reference Style Image (optional for text-only edits)",
                    type="filepath",
                    sources=["upload", "clipboard"],
                    show_label=True
                )

                mode_selector = gr.Radio(
                    choices=MODE_CHOICES,
                    value=TransformationMode.REALISTIC.label,
                    label="Transformation Mode"
                )
                mode_help = gr.Markdown(TransformationMode.REALISTIC.help_text)

                instruction_input = gr.Textbox(
                    label="Additional Instructions (Text Prompt)",
                    placeholder="E.g., Make the lighting darker, add a retro filter, remove the background...",
                    lines=3
                )

                generate_btn = gr.Button("🧪 Generate Image", variant="primary", size="lg")

            with gr.Column(scale=7):
                gr.Markdown("## Generated Result")

                output_image = gr.Image(
                    label="Generated Image",
                    type="pil",
                    show_label=True
                )

                output_info = gr.Textbox(
                    label="Generation Info",
                    lines=8,
                    interactive=False
                )

                download_btn = gr.DownloadButton(
                    label="💾 Download Image",
                    variant="secondary",
                    size="lg"
                )

        # Event handlers
        generate_btn.click(
            fn=generate_transformed_image,
            inputs=[identity_input, style_input, mode_selector, instruction_input],
            outputs=[output_image, output_info, download_btn],
            concurrency_limit=1
        )

        mode_selector.change(
            fn=describe_mode,
            inputs=[mode_selector],
            outputs=[mode_help]
        )

        refresh_health.click(
            fn=get_health_status,
            outputs=[health_display]
        )

        # Footer
        gr.Markdown(
            """
            ---
            **How it works:**
            1. **Upload Identity**: the photo of the person to transform. Face and pose are preserved.
            2. **Upload Style (optional)**: a reference image (art, anime, game) whose look is described and copied.
            3. **Pick a mode**: *Realistic* keeps anatomy and photorealism, *Full Style* transforms the subject into the art style.
            4. **Generate**: the reference is turned into a style guide, then the subject is regenerated from scratch.
            """
        )

    return demo


if __name__ == "__main__":
    # Create and launch the UI
    demo = create_ui()

    logger.info("Launching Gradio application...")
    demo.launch(
        server_name=settings.server_name,
        server_port=settings.server_port,
        share=False
    )
