"""Instruction templates for style analysis and identity-preserving generation."""

import logging
from dataclasses import dataclass
from typing import List

from stylefusion.core.models import TransformationMode

logger = logging.getLogger(__name__)


# Style description used when no reference image was supplied
NO_STYLE_FALLBACK = "A high-quality, professional portrait."

# Style description used when the analysis call failed or returned no text
ANALYSIS_FAILED_FALLBACK = "A cinematic high-quality masterpiece."

NO_USER_INSTRUCTION = "No additional requests."


@dataclass(frozen=True)
class StyleDimension:
    """One attribute the art director extracts from the reference image."""
    name: str
    examples: str

    def format(self) -> str:
        return f"- {self.name}: (e.g., {self.examples})"


STYLE_DIMENSIONS: List[StyleDimension] = [
    StyleDimension(
        "ARTISTIC STYLE",
        "Cyberpunk, Oil Painting, 1950s Film Noir, Studio Ghibli Anime, 3D Octane Render"
    ),
    StyleDimension(
        "LIGHTING",
        "Volumetric fog, rim lighting, neon highlights, soft natural sun"
    ),
    StyleDimension(
        "COLOR PALETTE",
        "Duotone teal and orange, monochromatic sepia, vibrant primary colors"
    ),
    StyleDimension(
        "TEXTURE & MEDIUM",
        "Grainy film, canvas texture, smooth vector, hyper-detailed skin"
    ),
    StyleDimension(
        "OUTFIT & PROPS",
        "Techwear, Victorian armor, casual hoodie"
    ),
    StyleDimension(
        "BACKGROUND & ENVIRONMENT",
        "Futuristic Tokyo, overgrown forest, abstract geometric shapes"
    ),
    StyleDimension(
        "CAMERA ANGLE & MOOD",
        "Low angle hero shot, melancholic close-up, high-octane action blur"
    ),
    StyleDimension(
        "TYPOGRAPHY & OVERLAYS",
        "If any, describe them"
    ),
]

ANALYSIS_MODE_DIRECTIVES = {
    TransformationMode.REALISTIC: "Mode: Photorealistic/Cinematic.",
    TransformationMode.FULL_STYLE: "Mode: Stylized/Artistic.",
}

GENERATION_MODE_DIRECTIVES = {
    TransformationMode.REALISTIC: (
        "Ensure photorealism, natural skin pores, and accurate light bounce."
    ),
    TransformationMode.FULL_STYLE: (
        "Ensure full artistic transformation matching the style's unique "
        "brushwork or rendering."
    ),
}

GENERATION_DIRECTIVES = [
    "LOCK IDENTITY: Use the provided image ONLY to learn the face, bone structure, "
    "and identity of the subject.",
    "SYNTHESIZE: Generate a COMPLETELY NEW image from scratch.",
    "NO COMPOSITING: Do not overlay, blend, or use the original background of the "
    "identity image.",
    "APPLY STYLE: The new image must perfectly reflect the \"STYLE GUIDE\" attributes "
    "in every pixel.",
    "QUALITY: Ensure the subject is seamlessly integrated into the new environment "
    "with matching lighting and texture.",
]


def build_analysis_prompt(mode: TransformationMode) -> str:
    """Build the art-director instruction sent with the style reference image.

    The eight extracted dimensions are the same for every mode; only the
    closing mode line changes.

    Args:
        mode: Transformation mode selected by the user

    Returns:
        Instruction text for the analysis model
    """
    dimensions = "\n".join(dimension.format() for dimension in STYLE_DIMENSIONS)
    return (
        "ACT AS A WORLD-CLASS ART DIRECTOR.\n"
        "Analyze this reference image and extract the following structured attributes "
        "to create a detailed prompt for a generative image model:\n"
        f"{dimensions}\n\n"
        "FORMAT: Output ONLY a single, highly-detailed paragraph that summarizes all "
        "these attributes.\n"
        "Target the description to be used as a style-guide for a NEW image generation.\n"
        f"{ANALYSIS_MODE_DIRECTIVES[mode]}"
    )


def build_generation_prompt(
    style_description: str,
    user_instruction: str,
    mode: TransformationMode
) -> str:
    """Build the regeneration instruction sent with the identity image.

    Args:
        style_description: Style guide paragraph, embedded verbatim
        user_instruction: Free-text request; a placeholder is used when blank
        mode: Transformation mode selected by the user

    Returns:
        Instruction text for the generation model
    """
    request_text = user_instruction.strip() if user_instruction else ""
    directives = "\n".join(
        f"{i}. {directive}" for i, directive in enumerate(GENERATION_DIRECTIVES, 1)
    )

    prompt = (
        "TASK: FULL LATENT SPACE REGENERATION.\n"
        "IDENTITY SOURCE: Provided Image.\n"
        f"STYLE GUIDE: {style_description}\n"
        f"USER REQUEST: {request_text or NO_USER_INSTRUCTION}\n\n"
        "INSTRUCTIONS:\n"
        f"{directives}\n\n"
        f"{GENERATION_MODE_DIRECTIVES[mode]}"
    )

    logger.debug(f"Built generation prompt ({len(prompt)} chars, mode={mode.value})")
    return prompt
