from .quiz_commands import register_quiz_commands
from .flashcards_commands import register_flashcards_commands

__all__ = [
    "register_quiz_commands",
    "register_flashcards_commands",
]
