"""System instructions and prompt templates for layout generation."""

from ...schema import LayoutPreference

DESIGN_SYSTEM_INSTRUCTION = """You are an expert Visual Designer.
Your task is to analyze the "Style Request" and "Content Sample" to generate a JSON "Design System" (CSS classes).

RULES:
1. Return strictly a JSON object matching the design system schema.
2. Use valid Tailwind CSS v3 utility classes.
3. Visual style:
   - WeChat/Social: decorative H2s (pills, borders), relaxed leading.
   - Tech: dark or gradient themes, mono fonts.
   - Classic: serif fonts, paper textures.
4. H2 styling: be creative (gradients, capsules, borders), it is the main visual anchor.
5. layout_type is one of "single-container" (one floating card), "seamless"
   (content directly on the page) or "multi-container-grid" (sections as a grid of cards).
6. heading1 carries color, weight, alignment and spacing only; its size goes in title_size.
7. highlight_color is a hex color code."""

CONTENT_SYSTEM_INSTRUCTION = """You are a Senior Content Editor.
Your task is to ENHANCE the input text segment to match a specific style (e.g., WeChat Official Account, Tech Blog).

RULES:
1. Output strictly Markdown. No JSON. No wrapping text like "Here is the rewritten text".
2. Formatting:
   - Auto-generate H2 (##) titles if the text lacks structure.
   - Add relevant emojis to headers (e.g., "## 🚀 Title").
   - Use **bolding** for key phrases.
   - Keep paragraphs readable (short and punchy).
3. Context awareness:
   - This is part of a larger document.
   - If a previous context is provided, ensure flow continuity.
   - Do NOT add a document main H1 title unless it is the very first segment."""


def build_design_prompt(
    style_prompt: str,
    layout_preference: LayoutPreference,
    content_sample: str,
) -> str:
    """Build the prompt for a single design system."""
    return (
        f"STYLE REQUEST: {style_prompt}\n"
        f"LAYOUT PREFERENCE: {layout_preference.value}\n"
        f"CONTENT SAMPLE: {content_sample}"
    )


def build_variations_prompt(
    style_prompt: str,
    layout_preference: LayoutPreference,
    count: int,
) -> str:
    """Build the prompt for several distinct design systems."""
    return (
        f'Create {count} DISTINCT design variations based on this request: "{style_prompt}".\n'
        "The first should be closest to the literal request; the others should be "
        "creative interpretations.\n"
        f"Layout Preference: {layout_preference.value}.\n"
        "Ensure every design has a different theme_name, colors, and heading2 style.\n"
        f'Return an object whose "designs" array holds exactly {count} designs.'
    )


def build_rewrite_prompt(
    style_prompt: str,
    previous_context: str,
    segment_text: str,
    is_first: bool,
) -> str:
    """Build the prompt for rewriting one content segment.

    Args:
        style_prompt: The user's style request.
        previous_context: Tail of the previous segment's output ("" for the first).
        segment_text: Segment to rewrite.
        is_first: Whether this is the start of the document.

    Returns:
        Prompt text.
    """
    return (
        f"STYLE REQUEST: {style_prompt}\n"
        f'PREVIOUS CONTEXT (End of last segment): "{previous_context}"\n'
        f"IS START OF DOCUMENT: {str(is_first).lower()}\n"
        "\n"
        "TEXT SEGMENT TO REWRITE:\n"
        f"{segment_text}"
    )


__all__ = [
    "DESIGN_SYSTEM_INSTRUCTION",
    "CONTENT_SYSTEM_INSTRUCTION",
    "build_design_prompt",
    "build_variations_prompt",
    "build_rewrite_prompt",
]
