"""Shared helpers for handling raw LLM output."""


def strip_code_fences(response: str) -> str:
    """Remove a markdown code fence (```json ... ```) wrapped around a response.

    Text without a fence is returned stripped but otherwise unchanged.
    """
    text = response.strip()

    if text.startswith("```"):
        # Remove opening fence and optional language identifier
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()

    return text
