from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

import config
from studyforge.constants import AI_FOOTER
from studyforge.errors import SourceError, StudyForgeError
from studyforge.services.pdf_text import QuizSource, source_from_pdf, source_from_topic
from studyforge.services.quiz_parse import MAX_QUESTIONS, MIN_QUESTIONS
from studyforge.services.quiz_workspace import WorkspaceRegistry
from studyforge.utils.embeds import make_embed, reply_error, reply_study_error, send_embed
from studyforge.utils.loading import loading_notice
from studyforge.utils.text import clean_topic
from studyforge.views.quiz_view import QuizView

log = logging.getLogger(__name__)


def discord_owner_key(user_id: int) -> str:
    return f"discord:{int(user_id)}"


async def _read_source(topic: Optional[str], pdf: Optional[discord.Attachment]) -> QuizSource:
    if pdf is not None:
        if pdf.size > config.PDF_MAX_BYTES:
            raise SourceError(f"PDF too large (max {config.PDF_MAX_BYTES // 1_000_000}MB).")
        data = await pdf.read()
        return source_from_pdf(
            pdf.filename,
            data,
            max_bytes=config.PDF_MAX_BYTES,
            max_chars=config.SOURCE_CHARS_MAX,
        )
    return source_from_topic(clean_topic(topic or "", max_len=200), max_chars=config.SOURCE_CHARS_MAX)


def register_quiz_commands(client: discord.Client, workspaces: WorkspaceRegistry) -> None:
    @client.tree.command(
        name="quiz",
        description="Generate a multiple-choice quiz from a topic or a PDF.",
    )
    @app_commands.describe(
        topic="What the quiz should be about",
        questions=f"How many questions ({MIN_QUESTIONS}–{MAX_QUESTIONS})",
        pdf="Optional PDF with selectable text to quiz yourself on",
    )
    async def quiz(
        interaction: discord.Interaction,
        topic: Optional[str] = None,
        questions: app_commands.Range[int, MIN_QUESTIONS, MAX_QUESTIONS] = config.QUIZ_DEFAULT_QUESTIONS,
        pdf: Optional[discord.Attachment] = None,
    ) -> None:
        if not (topic or "").strip() and pdf is None:
            await reply_error(interaction, "Please enter a topic or attach a PDF.")
            return

        try:
            if not interaction.response.is_done():
                await interaction.response.defer(thinking=True)
        except (discord.NotFound, discord.InteractionResponded):
            return

        ws = workspaces.get(discord_owner_key(interaction.user.id))
        if ws.loading:
            await reply_error(interaction, "A quiz is already being generated. Please wait.")
            return

        try:
            async with loading_notice(interaction, "quiz"):
                source = await _read_source(topic, pdf)
                await ws.generate(source, int(questions))
        except StudyForgeError as e:
            log.warning("/quiz failed for %s: %s", interaction.user.id, e)
            await reply_study_error(interaction, e)
            return
        except Exception:
            log.exception("/quiz failed unexpectedly")
            await reply_error(interaction, "Quiz generation failed. Check logs.")
            return

        view = QuizView(workspace=ws, owner_id=interaction.user.id)

        try:
            intro = make_embed(
                "🧪 Quiz session",
                (
                    "• Pick an answer with **A–D**, change it any time\n"
                    "• Move with **Back / Next**\n"
                    "• **Submit** once every question is answered"
                ),
                fields=[
                    ("Topic", f"• {source.title or '-'}", False),
                    ("Questions", f"• {len(ws.session)}", True),
                    ("Source", f"• {source.file_name or 'topic'}", True),
                ],
                footer=AI_FOOTER,
            )
            await send_embed(interaction, intro)
            msg = await interaction.followup.send(embed=view.build_embed(), view=view, wait=True)
        except discord.NotFound:
            return

        view.attach_message(msg)
