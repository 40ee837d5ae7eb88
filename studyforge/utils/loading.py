from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import discord

NOTICES = {
    "quiz": "🧪 Assembling the quiz…",
    "flashcards": "🗃️ Turning your notes into cards…",
}


@asynccontextmanager
async def loading_notice(interaction: discord.Interaction, kind: str) -> AsyncIterator[Optional[discord.Message]]:
    """Ephemeral 'working' message shown while a generation runs; removed on exit."""
    msg: Optional[discord.Message] = None
    try:
        msg = await interaction.followup.send(NOTICES.get(kind, "⚙️ Working…"), ephemeral=True, wait=True)
    except discord.HTTPException:
        msg = None

    try:
        yield msg
    finally:
        if msg is not None:
            try:
                await msg.delete()
            except discord.HTTPException:
                pass
