from typing import Iterable, Optional, Tuple

import discord

from studyforge.constants import COLOR_ERROR, COLOR_PRIMARY
from studyforge.errors import (
    GenerationInProgressError,
    GenerationTimeoutError,
    ParseError,
    SourceError,
)
from studyforge.utils.text import limit

# (name, value, inline)
Field = Tuple[str, str, bool]

MAX_FIELDS = 25


def make_embed(
    title: str,
    description: str = "",
    *,
    footer: str = "",
    fields: Optional[Iterable[Field]] = None,
    color: int = COLOR_PRIMARY,
) -> discord.Embed:
    e = discord.Embed(
        title=limit(title, 256),
        description=limit(description, 4096),
        color=discord.Color(color),
        timestamp=discord.utils.utcnow(),
    )
    for name, value, inline in list(fields or [])[:MAX_FIELDS]:
        e.add_field(name=limit(name, 256) or "-", value=limit(value, 1024) or "-", inline=inline)

    if footer:
        e.set_footer(text=limit(footer, 2048))
    return e


async def send_embed(interaction: discord.Interaction, embed: discord.Embed, *, ephemeral: bool = False) -> None:
    if interaction.response.is_done():
        await interaction.followup.send(embed=embed, ephemeral=ephemeral)
    else:
        await interaction.response.send_message(embed=embed, ephemeral=ephemeral)


async def reply_error(interaction: discord.Interaction, message: str, *, hint: str = "") -> None:
    fields = [("Error", message, False)]
    if hint:
        fields.append(("Hint", hint, False))
    embed = make_embed(
        "⚠️ Something went wrong",
        "Nothing was changed. You can try again.",
        fields=fields,
        color=COLOR_ERROR,
        footer="If this keeps happening, check the LLM settings and the bot log.",
    )
    await send_embed(interaction, embed, ephemeral=True)


def _error_text(exc: Exception) -> Tuple[str, str]:
    if isinstance(exc, ParseError):
        return "I could not read the AI response.", f"Reason: {exc.reason.value}. Generating again usually fixes it."
    if isinstance(exc, GenerationTimeoutError):
        return str(exc), "Try fewer questions or a shorter source."
    if isinstance(exc, SourceError):
        return str(exc), "Use a topic, or a PDF with selectable text."
    if isinstance(exc, GenerationInProgressError):
        return str(exc), ""
    return str(exc) or "Generation failed.", ""


async def reply_study_error(interaction: discord.Interaction, exc: Exception) -> None:
    message, hint = _error_text(exc)
    await reply_error(interaction, message, hint=hint)
