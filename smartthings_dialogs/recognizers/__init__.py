"""
Recognizers - Intent and Entity Extraction

Adapters that turn an utterance into a RecognizerResult. The dialog engine
only depends on the IntentRecognizer interface.
"""

from smartthings_dialogs.recognizers.interface import (
    IntentRecognizer,
    IntentScore,
    RecognizerResult,
    get_capability,
    get_room,
    top_intent,
)

__all__ = [
    "IntentRecognizer",
    "IntentScore",
    "RecognizerResult",
    "get_capability",
    "get_room",
    "top_intent",
]
