"""Token-budget truncation for README text sent to the summariser.

Uses ``tiktoken`` so the cut matches what the model actually counts.
"""

from __future__ import annotations

import tiktoken

_ENCODING_NAME = "cl100k_base"  # GPT-4o family

_encoder: tiktoken.Encoding | None = None


def _get_encoder() -> tiktoken.Encoding:
    global _encoder  # noqa: PLW0603
    if _encoder is None:
        _encoder = tiktoken.get_encoding(_ENCODING_NAME)
    return _encoder


def truncate_to_budget(text: str, max_tokens: int) -> str:
    """Truncate *text* to fit within *max_tokens*, cutting at line boundaries."""
    # A token always covers at least one byte.
    if len(text.encode("utf-8")) <= max_tokens:
        return text

    tokens = _get_encoder().encode(text)
    if len(tokens) <= max_tokens:
        return text

    truncated = _get_encoder().decode(tokens[:max_tokens])

    last_nl = truncated.rfind("\n")
    if last_nl > len(truncated) // 2:
        truncated = truncated[: last_nl + 1]

    return truncated + "\n[… truncated]"
