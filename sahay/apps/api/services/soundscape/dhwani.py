"""Guided meditation scripts and ambient soundscape descriptions."""

from __future__ import annotations

from sahay.apps.api.core.llm import generate_text
from sahay.libs.llm_router import LLMRouter


def meditation_prompt(theme: str, duration: int, mood: str | None = None, background: str | None = None) -> str:
    mood_line = f"The user is currently feeling: {mood}. Incorporate this into the guidance." if mood else ""
    background_line = f"Background context: {background}" if background else ""
    return f"""Create a {duration}-minute guided meditation script for the theme "{theme}".

{mood_line}
{background_line}

Guidelines:
- Structure: Opening (1 min), Main guidance (3-4 min), Closing (1 min)
- Use soothing, present-moment language
- Include breathing exercises and body awareness
- Keep it compassionate and non-judgmental
- End with gentle return to awareness
- Format as a script with timing cues like [0:00], [1:00], etc.
- Make it suitable for audio narration

Return the script as plain text with timing markers."""


def soundscape_prompt(environment: str, duration: int, mood: str | None = None) -> str:
    mood_line = f"Adapt the sounds to enhance this mood: {mood}" if mood else ""
    return f"""Create a {duration}-minute ambient soundscape description for "{environment}" environment.

{mood_line}

Describe the sounds in a way that can be used for audio generation or imagination:
- Layer multiple sound elements
- Include natural transitions
- Use descriptive, immersive language
- Structure by time segments
- Focus on calming, therapeutic sounds

Format as a script with timing cues."""


async def meditation_script(
    router: LLMRouter, *, theme: str, duration: int = 5, mood: str | None = None, background: str | None = None
) -> str:
    """Raises :class:`LLMError`; there is no canned script to fall back on."""

    return await generate_text(
        router, meditation_prompt(theme, duration, mood, background), temperature=0.8, max_tokens=1000
    )


async def ambient_soundscape(
    router: LLMRouter, *, environment: str, duration: int = 10, mood: str | None = None
) -> str:
    return await generate_text(
        router, soundscape_prompt(environment, duration, mood), temperature=0.7, max_tokens=800
    )


__all__ = ["ambient_soundscape", "meditation_prompt", "meditation_script", "soundscape_prompt"]
