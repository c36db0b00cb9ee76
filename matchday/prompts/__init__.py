from .commentary import (
    COMMENTATOR_SYSTEM_PROMPT,
    commentary_prompt,
)

__all__ = [
    "COMMENTATOR_SYSTEM_PROMPT",
    "commentary_prompt",
]
