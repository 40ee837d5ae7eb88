from typing import List, Optional, Set

import discord

from studyforge.constants import AI_FOOTER
from studyforge.models.cards import Flashcard
from studyforge.utils.discord_ui import pretty_bar
from studyforge.utils.text import limit
from studyforge.views.components.flashcards_buttons import (
    BackCardButton,
    FlipButton,
    NextCardButton,
)


def flashcard_embed(*, idx: int, total: int, card: Flashcard, flipped: bool, flipped_count: int) -> discord.Embed:
    side = "Answer" if flipped else "Question"
    text = card.answer if flipped else card.question

    e = discord.Embed(
        title="🧠 Flashcards",
        description=(
            f"**Card {idx + 1}/{total}** • {side}\n\n"
            f"{limit(' '.join(text.split()), 1800) or '-'}"
        ),
    )
    e.set_footer(
        text=f"{idx + 1}/{total} {pretty_bar(idx + 1, total, width=10)} • Flipped {flipped_count}/{total}\n{AI_FOOTER}"
    )
    return e


class FlashcardsView(discord.ui.View):
    """Cards flip independently; Back/Next only move the cursor."""

    def __init__(self, owner_id: int, cards: List[Flashcard]):
        super().__init__(timeout=900)

        self.owner_id = owner_id
        self.cards = cards

        self.i = 0
        self.flipped: Set[int] = set()
        self._message: Optional[discord.Message] = None

        self.btn_back = BackCardButton()
        self.btn_flip = FlipButton()
        self.btn_next = NextCardButton()
        self.add_item(self.btn_back)
        self.add_item(self.btn_flip)
        self.add_item(self.btn_next)

        self._refresh_buttons()

    def attach_message(self, msg: discord.Message) -> None:
        self._message = msg

    def _owner_only(self, interaction: discord.Interaction) -> bool:
        return getattr(interaction.user, "id", None) == self.owner_id

    def _refresh_buttons(self) -> None:
        self.btn_back.disabled = self.i == 0
        self.btn_next.disabled = self.i >= len(self.cards) - 1

    def current_embed(self) -> discord.Embed:
        return flashcard_embed(
            idx=self.i,
            total=len(self.cards),
            card=self.cards[self.i],
            flipped=self.i in self.flipped,
            flipped_count=len(self.flipped),
        )

    async def flip(self, interaction: discord.Interaction):
        if not self._owner_only(interaction):
            await interaction.response.send_message("❌ These flashcards are not yours.", ephemeral=True)
            return

        if self.i in self.flipped:
            self.flipped.discard(self.i)
        else:
            self.flipped.add(self.i)
        await interaction.response.edit_message(embed=self.current_embed(), view=self)

    async def move(self, interaction: discord.Interaction, step: int):
        if not self._owner_only(interaction):
            await interaction.response.send_message("❌ These flashcards are not yours.", ephemeral=True)
            return

        self.i = max(0, min(self.i + step, len(self.cards) - 1))
        self._refresh_buttons()
        await interaction.response.edit_message(embed=self.current_embed(), view=self)

    async def on_timeout(self):
        for item in self.children:
            item.disabled = True
        if self._message:
            try:
                await self._message.edit(view=self)
            except discord.HTTPException:
                pass
