"""
translator.py
-------------
Turns the model's text into OBS calls.

  • `OpenAITranslator.complete()` sends the system prompt plus the whole
    conversation (role-tagged turns) and returns the first choice's text.
  • `parse_calls_from_response()` strips an optional ``` fence and parses a
    JSON array of {"requestType", "requestData"?} objects.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from common.config import get_openai_api_key, get_openai_model
from common.errors import MalformedTranslatorOutput, TranslatorUnavailable
from common.io_utils import to_json


# ----------------------------
# Call model
# ----------------------------
@dataclass
class ActionCall:
    request_type: str
    request_data: Optional[Dict[str, Any]] = None

    def describe(self) -> str:
        if self.request_data is None:
            return self.request_type
        return f"{self.request_type} {to_json(self.request_data)}"


# ----------------------------
# LLM client
# ----------------------------
class OpenAITranslator:
    """Chat-completion wrapper; one request per `complete()` call, no streaming."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 temperature: float = 0.2, client: Optional[OpenAI] = None):
        if client is None:
            api_key = api_key or get_openai_api_key()
            if not api_key:
                raise TranslatorUnavailable(
                    "OPENAI_API_KEY environment variable is required for the yolo command."
                )
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model or get_openai_model()
        self.temperature = temperature

    def complete(self, system_prompt: str, conversation: List[Dict[str, str]]) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": system_prompt}, *conversation],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise TranslatorUnavailable(f"Model request failed: {e}") from e
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()


# ----------------------------
# Response parsing
# ----------------------------
_OPEN_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?```$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json and a trailing ``` fence, each only if present."""
    t = _OPEN_FENCE_RE.sub("", text.strip(), count=1)
    return _CLOSE_FENCE_RE.sub("", t.rstrip(), count=1).strip()


def parse_calls_from_response(text: str) -> List[ActionCall]:
    if not text or not text.strip():
        raise MalformedTranslatorOutput("Empty response from the model")

    try:
        parsed = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise MalformedTranslatorOutput(f"Response is not valid JSON: {e}") from e

    if not isinstance(parsed, list):
        raise MalformedTranslatorOutput("Expected a JSON array of OBS calls")

    calls: List[ActionCall] = []
    for i, item in enumerate(parsed):
        if not isinstance(item, dict) or not isinstance(item.get("requestType"), str):
            raise MalformedTranslatorOutput(f'Call at index {i} is missing "requestType"')
        data = item.get("requestData")
        if data is not None and not isinstance(data, dict):
            raise MalformedTranslatorOutput(f'Call at index {i} has a non-object "requestData"')
        calls.append(ActionCall(request_type=item["requestType"], request_data=data))
    return calls
