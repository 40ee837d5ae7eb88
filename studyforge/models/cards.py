from dataclasses import dataclass


@dataclass
class Flashcard:
    question: str
    answer: str

    def to_dict(self) -> dict:
        return {"question": self.question, "answer": self.answer}
