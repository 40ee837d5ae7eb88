import logging

import discord
from discord import app_commands

from studyforge.commands import register_flashcards_commands, register_quiz_commands
from studyforge.constants import APP_MODE, APP_VERSION
from studyforge.db import StudyStore
from studyforge.services.llm import build_llm_client
from studyforge.services.quiz_workspace import QuizWorkspace, WorkspaceRegistry
from studyforge.utils.logger_setup import setup_logging
from studyforge.utils.startup_banner import startup_banner

import config

log = logging.getLogger("StudyForge")


def build_client():
    intents = discord.Intents.default()

    store = StudyStore(config.DB_PATH)
    llm = build_llm_client()

    def _workspace(owner_key: str) -> QuizWorkspace:
        return QuizWorkspace(
            llm=llm,
            store=store,
            owner_key=owner_key,
            mode=config.QUIZ_MODE,
            shuffle=config.QUIZ_SHUFFLE,
            timeout=config.GENERATION_TIMEOUT_SEC,
        )

    workspaces = WorkspaceRegistry(_workspace)

    class StudyBot(discord.Client):
        def __init__(self) -> None:
            super().__init__(intents=intents)
            self.tree = app_commands.CommandTree(self)

        async def setup_hook(self) -> None:
            register_quiz_commands(self, workspaces)
            register_flashcards_commands(self, llm)

            if config.GUILD_ID:
                guild = discord.Object(id=config.GUILD_ID)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
            else:
                await self.tree.sync()

    client = StudyBot()

    @client.event
    async def on_ready() -> None:
        if getattr(client, "_ready_once", False):
            return
        client._ready_once = True

        startup_banner(
            provider=llm.provider,
            model=llm.default_model,
            commands=len(client.tree.get_commands()),
            version=APP_VERSION,
            mode=APP_MODE,
        )

    return client


def main() -> None:
    setup_logging()

    if not config.DISCORD_TOKEN:
        raise SystemExit("DISCORD_TOKEN missing in .env")

    client = build_client()
    client.run(config.DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
