"""
executor.py
-----------
Bounded retry loop behind `obsx yolo`.

Each attempt:
1. Gather a fresh text snapshot of OBS.
2. Ask the model for calls (first attempt: the instruction; later attempts:
   the failed calls with their errors). The whole conversation is resent.
3. Parse the reply. A malformed reply ends the run immediately.
4. Execute every call in order; a failing call never stops the batch.
5. Stop when nothing failed, otherwise retry until MAX_ATTEMPTS.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from common.errors import MalformedTranslatorOutput, RemoteCallFailed
from common.io_utils import log, to_json
from scene.inventory import describe_state

from .prompts import SYSTEM_PROMPT, build_request_turn, build_retry_turn, format_failure
from .translator import ActionCall, parse_calls_from_response

MAX_ATTEMPTS = 3

Conversation = List[Dict[str, str]]


class ExecutionStatus(Enum):
    DONE = "done"
    NOTHING_TO_DO = "nothing_to_do"
    EXHAUSTED = "exhausted"


@dataclass
class ActionOutcome:
    call: ActionCall
    error: Optional[str] = None
    result: Optional[dict] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AttemptRecord:
    attempt: int
    calls: List[ActionCall]
    outcomes: List[ActionOutcome]

    @property
    def failures(self) -> List[ActionOutcome]:
        return [o for o in self.outcomes if not o.ok]


@dataclass
class ExecutionReport:
    status: ExecutionStatus
    attempts: List[AttemptRecord] = field(default_factory=list)
    conversation: Conversation = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is not ExecutionStatus.EXHAUSTED

    @property
    def failures(self) -> List[ActionOutcome]:
        return self.attempts[-1].failures if self.attempts else []


# ----------------------------
# Batch execution
# ----------------------------
def execute_calls(client, calls: List[ActionCall]) -> List[ActionOutcome]:
    """Run every call once, in order, recording failures instead of stopping."""
    outcomes: List[ActionOutcome] = []
    for call in calls:
        log(f"  {call.describe()}", "INFO")
        try:
            result = client.call(call.request_type, call.request_data)
        except RemoteCallFailed as e:
            log(f"    !! Error: {e.message}", "ERROR")
            outcomes.append(ActionOutcome(call=call, error=e.message))
            continue
        if result:
            log(f"    -> {to_json(result)}", "INFO")
        outcomes.append(ActionOutcome(call=call, result=result))
    return outcomes


def _next_turn(attempt: int, instruction: str, state_text: str,
               failures: List[ActionOutcome]) -> str:
    if attempt == 1:
        return build_request_turn(state_text, instruction)
    lines = [format_failure(o.call.request_type, o.call.request_data, o.error) for o in failures]
    return build_retry_turn(lines, state_text)


# ----------------------------
# Retry loop
# ----------------------------
def translate_and_execute(
    client,
    translator,
    instruction: str,
    max_attempts: int = MAX_ATTEMPTS,
    gather_state: Callable[[object], str] = describe_state,
) -> ExecutionReport:
    """
    Translate `instruction` into OBS calls and run them, feeding failures back
    to the model up to `max_attempts` times.

    Raises MalformedTranslatorOutput when a reply cannot be parsed; that is
    never retried.
    """
    conversation: Conversation = []
    attempts: List[AttemptRecord] = []
    failures: List[ActionOutcome] = []

    for attempt in range(1, max_attempts + 1):
        state_text = gather_state(client)
        if attempt == 1:
            log("🤖 Asking the model...", "INFO")

        conversation = conversation + [
            {"role": "user", "content": _next_turn(attempt, instruction, state_text, failures)}
        ]
        response_text = translator.complete(SYSTEM_PROMPT, list(conversation))
        # kept even when unparseable so a later turn stays coherent
        conversation = conversation + [{"role": "assistant", "content": response_text}]

        try:
            calls = parse_calls_from_response(response_text)
        except MalformedTranslatorOutput as e:
            log(f"Failed to parse the model's response as OBS calls:\n{response_text}", "ERROR")
            log(str(e), "ERROR")
            raise

        if not calls:
            log("No OBS calls to execute.", "INFO")
            return ExecutionReport(ExecutionStatus.NOTHING_TO_DO, attempts, conversation)

        label = f" (attempt {attempt}/{max_attempts})" if attempt > 1 else ""
        log(f"Executing {len(calls)} OBS call(s){label}:", "INFO")

        record = AttemptRecord(attempt=attempt, calls=calls, outcomes=execute_calls(client, calls))
        attempts.append(record)
        failures = record.failures

        if not failures:
            log("🎉 Done.", "OK")
            return ExecutionReport(ExecutionStatus.DONE, attempts, conversation)

        if attempt < max_attempts:
            log(f"{len(failures)} call(s) failed. Retrying with error feedback...", "WARNING")
        else:
            log(f"{len(failures)} call(s) still failing after {max_attempts} attempts.", "ERROR")

    return ExecutionReport(ExecutionStatus.EXHAUSTED, attempts, conversation)
