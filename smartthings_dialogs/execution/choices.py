"""
Prompt rendering and answer recognition for text, choice and confirm prompts.
"""

from typing import Any, List, Optional, Tuple

from ..domain.models import FoundChoice, PromptSpec, PromptType
from ..schemas.activities import Activity

YES_WORDS = frozenset({"yes", "y", "yeah", "yep", "yup", "sure", "ok", "okay", "correct", "right", "true"})
NO_WORDS = frozenset({"no", "n", "nope", "nah", "wrong", "false"})
CONFIRM_CHOICES = ["Yes", "No"]


def _inline_list(choices: List[str]) -> str:
    numbered = [f"({i}) {label}" for i, label in enumerate(choices, start=1)]
    if len(numbered) <= 2:
        return " or ".join(numbered)
    return ", ".join(numbered[:-1]) + f", or {numbered[-1]}"


def render_prompt(spec: PromptSpec, retry: bool = False) -> str:
    text = spec.retry_prompt if retry and spec.retry_prompt else spec.prompt
    if spec.type == PromptType.CHOICE and spec.choices:
        return f"{text} {_inline_list(spec.choices)}"
    if spec.type == PromptType.CONFIRM:
        return f"{text} {_inline_list(CONFIRM_CHOICES)}"
    return text


def recognize_choice(text: str, choices: List[str]) -> Optional[FoundChoice]:
    """
    Accepts a 1-based number, an exact label or a fragment matching exactly
    one label, all case-insensitive.
    """
    answer = text.strip().lower()
    if not answer:
        return None

    if answer.isdigit():
        index = int(answer) - 1
        if 0 <= index < len(choices):
            return FoundChoice(index=index, value=choices[index])
        return None

    for index, label in enumerate(choices):
        if label.lower() == answer:
            return FoundChoice(index=index, value=label)

    partial = [i for i, label in enumerate(choices) if answer in label.lower()]
    if len(partial) == 1:
        return FoundChoice(index=partial[0], value=choices[partial[0]])
    return None


def recognize_confirm(text: str) -> Optional[bool]:
    answer = text.strip().lower().rstrip(".!")
    if answer in YES_WORDS or answer == "1":
        return True
    if answer in NO_WORDS or answer == "2":
        return False
    return None


def recognize_answer(spec: PromptSpec, activity: Activity) -> Tuple[bool, Any]:
    """
    Returns (valid, value) for the user's answer to `spec`. Card button
    clicks carry their answer in `activity.value["answer"]`.
    """
    text = activity.text or ""
    if activity.value and isinstance(activity.value.get("answer"), str):
        text = activity.value["answer"]

    if spec.type == PromptType.TEXT:
        text = text.strip()
        return bool(text), text

    if spec.type == PromptType.CHOICE:
        found = recognize_choice(text, spec.choices)
        return found is not None, found

    confirmed = recognize_confirm(text)
    return confirmed is not None, confirmed
