import logging

import discord
from discord import app_commands

from studyforge.constants import AI_FOOTER
from studyforge.errors import StudyForgeError
from studyforge.services.flashcards_gen import generate_flashcards
from studyforge.utils.embeds import make_embed, reply_error, reply_study_error, send_embed
from studyforge.utils.loading import loading_notice
from studyforge.views.flashcards_view import FlashcardsView

log = logging.getLogger("StudyForge")


def register_flashcards_commands(client: discord.Client, llm) -> None:
    @client.tree.command(
        name="flashcards",
        description="Turn your study notes into flip cards.",
    )
    @app_commands.describe(notes="Paste the notes to convert")
    async def flashcards(interaction: discord.Interaction, notes: str):
        if not (notes or "").strip():
            await reply_error(interaction, "Please enter some study notes first.")
            return

        await interaction.response.defer(thinking=True)
        try:
            async with loading_notice(interaction, "flashcards"):
                cards = await generate_flashcards(llm, notes=notes)
        except StudyForgeError as e:
            log.warning("/flashcards failed for %s: %s", interaction.user.id, e)
            await reply_study_error(interaction, e)
            return
        except Exception:
            log.exception("LLM /flashcards failed")
            await reply_error(interaction, "Flashcards generation failed. Check logs.")
            return

        view = FlashcardsView(owner_id=interaction.user.id, cards=cards)

        intro = make_embed(
            "🧠 Flashcards",
            "• **Flip** shows the other side\n• **Back / Next** move between cards",
            fields=[("Cards", f"• {len(cards)}", True)],
            footer="Recall first, then check with /quiz\n" + AI_FOOTER,
        )
        await send_embed(interaction, intro)

        msg = await interaction.followup.send(embed=view.current_embed(), view=view, wait=True)
        view.attach_message(msg)
