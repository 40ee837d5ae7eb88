import asyncio
import logging
from typing import List, Optional

import discord

from studyforge.constants import AI_FOOTER, OPTION_LABELS
from studyforge.errors import IncompleteAnswersError, InvalidStateError
from studyforge.services.quiz_workspace import QuizWorkspace
from studyforge.utils.discord_ui import pretty_bar, send_ephemeral
from studyforge.utils.text import limit
from studyforge.views.components.quiz_buttons import (
    AnswerButton,
    BackButton,
    NextButton,
    SubmitButton,
)

log = logging.getLogger("StudyForge")

# -----------------------------
# Discord embed safe limits
# -----------------------------
FIELD_VALUE_MAX = 1024
OPTIONS_FIELD_SOFT_MAX = 950

REVIEW_MAX_ITEMS = 8


def _safe_two_lines(text: str) -> str:
    s = (text or "").strip()
    if not s:
        return "-"
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(" ".join(ln.split()) for ln in s.split("\n") if ln.strip())


class QuizView(discord.ui.View):
    """
    One question at a time, answers can be changed until Submit.
    - A/B/C/D picks (or re-picks) the answer for the current question
    - Back / Next move between questions
    - Submit grades only when every question has an answer
    """

    def __init__(self, *, workspace: QuizWorkspace, owner_id: int):
        super().__init__(timeout=1800)

        self.workspace = workspace
        self.owner_id = owner_id
        self.current = 0

        # the attempt this message renders; a later /quiz replaces the workspace's session
        self.session = workspace.session
        self.source = workspace.source

        self._message: Optional[discord.Message] = None
        self._lock = asyncio.Lock()

        self.answer_buttons: List[AnswerButton] = []
        for i, label in enumerate(OPTION_LABELS):
            btn = AnswerButton(label=label, idx=i)
            self.answer_buttons.append(btn)
            self.add_item(btn)

        self.back_button = BackButton()
        self.next_button = NextButton()
        self.submit_button = SubmitButton()
        self.add_item(self.back_button)
        self.add_item(self.next_button)
        self.add_item(self.submit_button)

        self._refresh_controls()

    # -----------------------------
    # helpers / guards
    # -----------------------------
    def _is_owner(self, interaction: discord.Interaction) -> bool:
        return getattr(interaction.user, "id", None) == self.owner_id

    async def _guard_owner(self, interaction: discord.Interaction) -> bool:
        if self._is_owner(interaction):
            return True
        await interaction.response.send_message("❌ This quiz is not yours.", ephemeral=True)
        return False

    def _replaced(self) -> bool:
        return self.workspace.session is not self.session

    async def _retire(self, interaction: discord.Interaction) -> None:
        for item in self.children:
            item.disabled = True
        self.stop()
        await send_ephemeral(interaction, "🔁 This quiz was replaced by a newer one. Use the latest quiz message.")
        if self._message:
            try:
                await self._message.edit(view=self)
            except discord.HTTPException:
                log.debug("Could not disable replaced quiz message")

    async def _ack(self, interaction: discord.Interaction) -> None:
        if interaction.response.is_done():
            return
        try:
            await interaction.response.defer()
        except discord.HTTPException:
            pass

    async def _edit(self, interaction: discord.Interaction, *, embed: discord.Embed) -> None:
        if self._message:
            try:
                await self._message.edit(embed=embed, view=self)
                return
            except discord.HTTPException:
                log.debug("Quiz message edit failed; falling back to interaction edit")

        try:
            await interaction.edit_original_response(embed=embed, view=self)
        except discord.HTTPException:
            log.warning("Could not refresh quiz message (owner=%s)", self.owner_id)

    def attach_message(self, message: discord.Message) -> None:
        self._message = message

    def _refresh_controls(self) -> None:
        graded = self.session.graded
        q = self.session.questions[self.current]

        for i, btn in enumerate(self.answer_buttons):
            btn.disabled = graded
            if graded and i == q.correct_index:
                btn.style = discord.ButtonStyle.success
            elif graded and i == q.selected_index:
                btn.style = discord.ButtonStyle.danger
            elif not graded and i == q.selected_index:
                btn.style = discord.ButtonStyle.primary
            else:
                btn.style = discord.ButtonStyle.secondary

        self.back_button.disabled = graded or self.current == 0
        self.next_button.disabled = graded or self.current >= len(self.session) - 1
        self.submit_button.disabled = graded

    # -----------------------------
    # embeds
    # -----------------------------
    def build_embed(self) -> discord.Embed:
        s = self.session
        q = s.questions[self.current]
        title = self.source.title if self.source else "Quiz"

        opt_lines: List[str] = []
        for i, opt in enumerate(q.options):
            mark = " ◀" if q.selected_index == i else ""
            opt_lines.append(f"**{OPTION_LABELS[i]}.**  {_safe_two_lines(opt)}{mark}")
        opt_value = limit("\n".join(opt_lines), OPTIONS_FIELD_SOFT_MAX)

        e = discord.Embed(title="🧪 Quiz")
        e.description = (
            f"**Topic:** {limit(title, 80)}\n\n"
            f"**Q{self.current + 1}/{len(s)}**\n\n"
            f"**{limit(q.text, 800)}**\n\n"
            f"{opt_value}"
        )

        answered = len(s) - len(s.unanswered())
        bar = pretty_bar(answered, len(s), width=min(12, max(6, len(s))))
        e.set_footer(text=f"Answered {answered}/{len(s)} {bar}\n{AI_FOOTER}")
        return e

    def build_result_embed(self, result: dict) -> discord.Embed:
        s = self.session
        score, total = result["score"], result["total"]
        acc = (score / total) * 100.0 if total else 0.0

        e = discord.Embed(
            title="🏁 Quiz finished",
            description=f"🎯 Final Score: **{score}/{total}**\n📊 Accuracy: **{acc:.0f}%**",
        )

        wrong = [(i, q) for i, q in enumerate(s.questions) if not q.is_correct]
        if wrong:
            lines: List[str] = []
            for i, q in wrong[:REVIEW_MAX_ITEMS]:
                yours = OPTION_LABELS[q.selected_index] if q.selected_index is not None else "-"
                lines.append(
                    f"• Q{i + 1}: **{yours}** → **{OPTION_LABELS[q.correct_index]}** "
                    f"({limit(q.correct_option, 80)})"
                )
            if len(wrong) > REVIEW_MAX_ITEMS:
                lines.append(f"• …and {len(wrong) - REVIEW_MAX_ITEMS} more.")
            e.add_field(
                name="📝 Review (wrong answers)",
                value=limit("\n".join(lines), FIELD_VALUE_MAX),
                inline=False,
            )
        else:
            e.add_field(name="✅ Review", value="Perfect score. Nice work!", inline=False)

        if not result.get("saved"):
            e.add_field(name="History", value="⚠️ This attempt could not be saved.", inline=False)

        e.set_footer(text=AI_FOOTER)
        return e

    # -----------------------------
    # interactions
    # -----------------------------
    async def pick(self, interaction: discord.Interaction, idx: int) -> None:
        if not await self._guard_owner(interaction):
            return
        await self._ack(interaction)

        async with self._lock:
            if self._replaced():
                await self._retire(interaction)
                return
            try:
                applied = self.workspace.select_option(self.current, idx)
            except ValueError as e:
                log.warning("Quiz pick rejected (owner=%s): %s", self.owner_id, e)
                return
            if not applied:
                return
            self._refresh_controls()
            await self._edit(interaction, embed=self.build_embed())

    async def go_to(self, interaction: discord.Interaction, step: int) -> None:
        if not await self._guard_owner(interaction):
            return
        await self._ack(interaction)

        async with self._lock:
            if self._replaced():
                await self._retire(interaction)
                return
            if self.session.graded:
                return
            self.current = max(0, min(self.current + step, len(self.session) - 1))
            self._refresh_controls()
            await self._edit(interaction, embed=self.build_embed())

    async def submit(self, interaction: discord.Interaction) -> None:
        if not await self._guard_owner(interaction):
            return

        async with self._lock:
            if self._replaced():
                await self._retire(interaction)
                return
            try:
                result = self.workspace.submit()
            except IncompleteAnswersError as e:
                numbers = ", ".join(f"Q{i + 1}" for i in e.unanswered)
                await send_ephemeral(interaction, f"✋ Please answer every question first. Missing: {numbers}")
                return
            except InvalidStateError as e:
                log.info("Submit ignored: %s", e)
                await self._ack(interaction)
                return

            await self._ack(interaction)
            self._refresh_controls()
            for item in self.children:
                item.disabled = True
            self.stop()

            end = self.build_result_embed(result)
            try:
                if self._message:
                    await self._message.edit(embed=end, view=self)
                else:
                    await interaction.edit_original_response(embed=end, view=self)
            except discord.HTTPException:
                log.warning("Could not show quiz results (owner=%s)", self.owner_id)

    async def on_timeout(self) -> None:
        for item in self.children:
            item.disabled = True
        if self._message:
            try:
                await self._message.edit(view=self)
            except discord.HTTPException:
                pass
