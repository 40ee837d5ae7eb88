import discord


def pretty_bar(current: int, total: int, width: int = 12) -> str:
    if total <= 0:
        return ""

    w = max(3, min(int(width), 16))
    current = max(0, min(int(current), int(total)))
    filled = int(round(current / total * w))
    filled = max(0, min(filled, w))

    return f"[{'#' * filled + '-' * (w - filled)}]"


async def internal_error(interaction: discord.Interaction) -> None:
    if not interaction.response.is_done():
        await interaction.response.send_message("❌ Internal error.", ephemeral=True)


async def send_ephemeral(interaction: discord.Interaction, text: str) -> None:
    if interaction.response.is_done():
        await interaction.followup.send(text, ephemeral=True)
    else:
        await interaction.response.send_message(text, ephemeral=True)
