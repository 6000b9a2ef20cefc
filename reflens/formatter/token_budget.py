"""Count tokens and truncate snapshot text to fit within a limit."""

from __future__ import annotations

import tiktoken

_enc = tiktoken.get_encoding("cl100k_base")


class TokenBudget:
    """Counts cl100k tokens in a string and truncates text to fit within a budget."""

    def count(self, text: str) -> int:
        return len(_enc.encode(text))

    def truncate(self, text: str, max_tokens: int) -> tuple[str, bool]:
        """
        Truncate text to fit within max_tokens, cutting at a line boundary.
        Returns (truncated_text, was_truncated).
        """
        tokens = _enc.encode(text)
        if len(tokens) <= max_tokens:
            return text, False

        truncated = _enc.decode(tokens[:max_tokens])
        if "\n" in truncated:
            truncated = truncated[: truncated.rindex("\n")]

        return truncated + "\n[... truncated to fit token budget ...]", True
