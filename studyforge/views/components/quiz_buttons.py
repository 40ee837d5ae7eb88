import discord
from studyforge.utils.discord_ui import internal_error

BACK_LABEL = "⬅ Back"
NEXT_LABEL = "Next ➜"
SUBMIT_LABEL = "Submit ✅"


class AnswerButton(discord.ui.Button):
    def __init__(self, label: str, idx: int):
        super().__init__(label=label, style=discord.ButtonStyle.secondary, row=0)
        self.idx = idx

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "pick"):
            return await internal_error(interaction)
        await view.pick(interaction, self.idx)


class BackButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label=BACK_LABEL, style=discord.ButtonStyle.secondary, row=1)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "go_to"):
            return await internal_error(interaction)
        await view.go_to(interaction, -1)


class NextButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label=NEXT_LABEL, style=discord.ButtonStyle.secondary, row=1)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "go_to"):
            return await internal_error(interaction)
        await view.go_to(interaction, +1)


class SubmitButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label=SUBMIT_LABEL, style=discord.ButtonStyle.success, row=1)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "submit"):
            return await internal_error(interaction)
        await view.submit(interaction)
