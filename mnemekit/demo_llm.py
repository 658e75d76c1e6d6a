"""Content-derived stand-in for an LLM backend, used by the demo.

Answers vary with the prompt's content, so each memory gets distinct
enrichment without any external model.
"""

from __future__ import annotations

import re

_NOTE_PREFIX = "Read the following memory"
_LINK_PREFIX = "A new memory was just recorded"
_EVOLVE_PREFIX = "An existing memory and its current annotations"
_REFLECT_PREFIX = "You are reviewing a recent batch"
_PROPOSE_PREFIX = "You are revising a system prompt"

_STOP_WORDS = frozenset(
    {"the", "and", "for", "are", "but", "was", "with", "from", "this", "that", "into"}
)
_NON_ALPHA = re.compile(r"[^A-Za-z]+")
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)

_DEFAULT_BODY = "You are a helpful assistant."
_REASONING_SIGNALS = ("address each", "each part", "multiple parts")
_EPISTEMIC_SIGNALS = ("be precise", "uncertain", "say so rather than guessing")


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


class DemoLlmClient:
    """Returns deterministic, prompt-derived completions."""

    async def complete(self, prompt: str) -> str:
        """Answer one prompt; unrecognised prompts yield an empty string."""
        if prompt.startswith(_NOTE_PREFIX):
            return note_response(prompt)
        if prompt.startswith(_LINK_PREFIX):
            return "1"
        if prompt.startswith(_EVOLVE_PREFIX):
            return "TAGS_ADD: related\nKEYWORDS_ADD: linked"
        if prompt.startswith(_REFLECT_PREFIX):
            return reflection_response(prompt)
        if prompt.startswith(_PROPOSE_PREFIX):
            return proposal_response(prompt)
        return ""


def note_response(prompt: str) -> str:
    """Keywords, tag and context lines derived from the memory in the prompt."""
    content = extract_memory_content(prompt)
    keywords = top_words(content, 5)
    context = content[:80].strip()
    return (
        f"KEYWORDS: {', '.join(keywords)}\n"
        "TAGS: auto-enriched\n"
        f"CONTEXT: {context}"
    )


def reflection_response(prompt: str) -> str:
    """One or two findings based on how many failed outcomes the prompt lists."""
    failures = prompt.count("success=false")
    if failures == 0:
        return "FINDING: none"
    findings = [
        f"FINDING: {failures} recent outcomes failed — the prompt may be too terse"
    ]
    if failures >= 2:
        findings.append(
            "FINDING: compound questions appear to be a recurring failure mode"
        )
    return "\n".join(findings)


def proposal_response(prompt: str) -> str:
    """Two candidate revisions; the first adds the next missing improvement."""
    body = extract_system_prompt_body(prompt)
    lowered = _ascii_lower(body)
    has_reasoning = any(signal in lowered for signal in _REASONING_SIGNALS)
    has_epistemics = any(signal in lowered for signal in _EPISTEMIC_SIGNALS)

    if not has_reasoning:
        primary = (
            f"{body} For any question with multiple parts, address each one "
            "explicitly and walk through your reasoning step by step."
        )
    elif not has_epistemics:
        primary = (
            f"{body} Be precise. When you are uncertain about a factual claim, "
            'say so rather than guessing — "I\'m uncertain" is always a valid answer.'
        )
    else:
        primary = f"{body} Stay concise unless the question genuinely requires depth."
    alt = f"{body} Always provide a brief direct answer before any elaboration."
    return f"--- CANDIDATE 1 ---\n{primary}\n--- CANDIDATE 2 ---\n{alt}"


def extract_system_prompt_body(prompt: str) -> str:
    """The active system prompt between ``---`` fences, or a neutral default."""
    _, sep, rest = prompt.partition("Current system prompt:\n---\n")
    body = rest.split("\n---", 1)[0] if sep else ""
    trimmed = body.strip()
    return trimmed or _DEFAULT_BODY


def extract_memory_content(prompt: str) -> str:
    """Text after ``Memory:`` and before the ``Respond with EXACTLY`` sentinel."""
    _, sep, rest = prompt.partition("Memory:\n")
    after_marker = rest if sep else ""
    return after_marker.split("Respond with EXACTLY", 1)[0].strip()


def top_words(text: str, n: int) -> list[str]:
    """First ``n`` distinct lower-cased alphabetic words of three or more letters.

    Stop words are skipped. Returns ``["memory"]`` when nothing qualifies.
    """
    out: list[str] = []
    for word in _NON_ALPHA.split(text):
        if len(word) < 3:
            continue
        lowered = _ascii_lower(word)
        if lowered in _STOP_WORDS:
            continue
        if lowered not in out:
            out.append(lowered)
        if len(out) == n:
            break
    return out or ["memory"]