from __future__ import annotations

"""Non-LLM answerer used offline and as the LLM fallback."""

from dataclasses import dataclass

from resume_chat.rag.types import SearchResult

NO_INFORMATION_ANSWER = "I don't have that information in this resume."


@dataclass
class ExtractiveAnswerer:
    """Return a short extract from the most relevant resume chunk."""
    max_chars: int = 480

    def generate(self, question: str, results: list[SearchResult]) -> str:
        """Generate an extractive answer from ranked chunks."""
        if not results:
            return NO_INFORMATION_ANSWER
        best = results[0]
        snippet = self._truncate(best.text.strip())
        if not snippet:
            return NO_INFORMATION_ANSWER
        return f"From the resume: {snippet}"

    def _truncate(self, text: str) -> str:
        """Trim text to the max character budget without cutting words."""
        if len(text) <= self.max_chars:
            return text
        return text[: self.max_chars].rsplit(" ", 1)[0] + "..."
