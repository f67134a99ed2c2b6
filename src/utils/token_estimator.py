"""
Token Estimation

Cheap heuristics for sizing message payloads before they are handed to a robot.
These are budgeting estimates, not tokenizer-accurate counts.
"""
import json
import math
from typing import Callable, Optional

from src.config import get_settings
from src.models.content import MessageContent, TextContent, JsonContent

TokenEstimator = Callable[[MessageContent], int]


def estimate_text_tokens(text: str, chars_per_token: Optional[int] = None) -> int:
    """ceil(len(text) / chars_per_token); empty text is zero tokens."""
    divisor = chars_per_token or get_settings().chars_per_token
    return math.ceil(len(text) / divisor)


def estimate_tokens(content: MessageContent) -> int:
    """
    Default token estimator.

    - text: ceil(len / chars_per_token)
    - json: same heuristic over the compact JSON encoding
    - image / file buffers: flat `binary_token_estimate`
    """
    if isinstance(content, TextContent):
        return estimate_text_tokens(content.payload)
    if isinstance(content, JsonContent):
        encoded = json.dumps(content.payload, separators=(",", ":"), default=str)
        return estimate_text_tokens(encoded)
    return get_settings().binary_token_estimate
