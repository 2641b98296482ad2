"""Prompt builders for script segmentation, panel synthesis, and the assistant."""

SYNTHESIS_TEMPLATE = "Create a cinematic, photorealistic storyboard panel for this scene: {description}"

CHAT_SYSTEM_INSTRUCTION = (
    "You are a helpful assistant for a storyboard generation app. "
    "You can answer questions about filmmaking, scriptwriting, or the app itself."
)

CHAT_GREETING = "Hello! How can I help you with your storyboard or script?"

CHAT_FALLBACK_REPLY = "Sorry, I encountered an error. Please try again."


def build_segmentation_system_prompt() -> str:
    """Return the system prompt for the scene segmenter."""
    return (
        "You are a storyboard artist's assistant. You read scripts and split them into "
        "the visual beats a storyboard panel would show."
    )


def build_segmentation_prompt(script: str) -> str:
    """Return the user prompt that asks for one description per visual scene."""
    return (
        "Analyze the following script and break it down into a sequence of distinct visual scenes. "
        "For each scene, provide a detailed, one-sentence description suitable for an image generation model. "
        "The description should be concise but evocative, focusing on characters, setting, and key actions.\n\n"
        "Script:\n"
        "---\n"
        f"{script}\n"
        "---\n"
    )


def build_synthesis_prompt(description: str) -> str:
    """Wrap a scene description in the storyboard panel template."""
    return SYNTHESIS_TEMPLATE.format(description=description)
