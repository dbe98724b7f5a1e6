"""
Natural-language assistant for obsx.

This package handles:
  • Prompting the model with the current OBS state
  • Parsing its reply into OBS requests
  • Executing the requests with bounded, error-fed retries

Usage:
    from assistant import OpenAITranslator, translate_and_execute

    report = translate_and_execute(client, OpenAITranslator(), "switch to the Gaming scene")
"""

from .translator import ActionCall, OpenAITranslator, parse_calls_from_response, strip_code_fence
from .executor import (
    MAX_ATTEMPTS,
    ActionOutcome,
    AttemptRecord,
    ExecutionReport,
    ExecutionStatus,
    execute_calls,
    translate_and_execute,
)
from .prompts import SYSTEM_PROMPT, format_failure

__all__ = [
    "ActionCall",
    "OpenAITranslator",
    "parse_calls_from_response",
    "strip_code_fence",
    "MAX_ATTEMPTS",
    "ActionOutcome",
    "AttemptRecord",
    "ExecutionReport",
    "ExecutionStatus",
    "execute_calls",
    "translate_and_execute",
    "SYSTEM_PROMPT",
    "format_failure",
]
