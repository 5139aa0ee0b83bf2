"""
Cooking session - the recipe being cooked, its step cursor and the
conversation transcript.
"""

from dataclasses import dataclass, field
from typing import Literal

from models.recipe import Recipe

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class TranscriptEntry:
    """One line of the cooking conversation."""
    role: Role
    text: str

    def as_message(self) -> dict:
        """Chat-message dict for the view ({"role": ..., "content": ...})."""
        return {"role": self.role, "content": self.text}


@dataclass
class CookingSession:
    """
    In-memory record of the recipe currently being cooked.

    The step index always points at an existing instruction, so a recipe
    without instructions cannot be cooked.
    """
    recipe: Recipe
    current_step_index: int = 0
    transcript_log: list[TranscriptEntry] = field(default_factory=list)

    def __post_init__(self):
        if not self.recipe.instructions:
            raise ValueError(f"Recipe '{self.recipe.name}' has no instructions to cook")
        if not 0 <= self.current_step_index < len(self.recipe.instructions):
            raise ValueError(f"Step index {self.current_step_index} out of range")

    @property
    def step_count(self) -> int:
        return len(self.recipe.instructions)

    @property
    def current_step(self) -> str:
        return self.recipe.instructions[self.current_step_index]

    @property
    def step_number(self) -> int:
        """1-based number of the current step."""
        return self.current_step_index + 1

    def is_first_step(self) -> bool:
        return self.current_step_index == 0

    def is_last_step(self) -> bool:
        return self.current_step_index == self.step_count - 1

    def advance(self) -> bool:
        """Move to the next step. Returns False (and stays put) at the last step."""
        if self.is_last_step():
            return False
        self.current_step_index += 1
        return True

    def go_back(self) -> bool:
        """Move to the previous step. Returns False (and stays put) at the first step."""
        if self.is_first_step():
            return False
        self.current_step_index -= 1
        return True

    def jump_to(self, index: int) -> None:
        """Explicit step control from the UI; clamped to the instruction range."""
        self.current_step_index = max(0, min(index, self.step_count - 1))

    def announcement(self) -> str:
        """Current step prefixed with its 1-based number."""
        return f"Step {self.step_number}: {self.current_step}"

    def log(self, role: Role, text: str) -> None:
        self.transcript_log.append(TranscriptEntry(role=role, text=text))

    def messages(self) -> list[dict]:
        return [entry.as_message() for entry in self.transcript_log]
