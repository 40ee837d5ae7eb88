import discord
from studyforge.utils.discord_ui import internal_error


class BackCardButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label="Back ⬅", style=discord.ButtonStyle.secondary)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "move"):
            return await internal_error(interaction)
        await view.move(interaction, -1)


class FlipButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label="Flip 🔄", style=discord.ButtonStyle.primary)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "flip"):
            return await internal_error(interaction)
        await view.flip(interaction)


class NextCardButton(discord.ui.Button):
    def __init__(self):
        super().__init__(label="Next ➜", style=discord.ButtonStyle.secondary)

    async def callback(self, interaction: discord.Interaction):
        view = self.view
        if not view or not hasattr(view, "move"):
            return await internal_error(interaction)
        await view.move(interaction, +1)
