"""
common/obs_client.py
--------------------
OBS integration for obsx.

Wraps an obs-websocket-py connection behind a single
`call(request_type, request_data) -> dict` operation so the
reconciler, provisioner and executor never touch the library
directly (tests swap in an in-memory fake with the same method).

`obsws.call()` only hands back `responseData` and the result flag, so
the error comment and code OBS sends in `requestStatus` would be lost.
`ObsSocket.request()` sends the v5 request itself over the same socket
and receive thread and returns the whole answer.
"""

import json
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import websocket
from obswebsocket import obsws, exceptions as obsexc

from .config import ObsConnectionOptions
from .errors import RemoteCallFailed
from .io_utils import log

OP_REQUEST = 6


# -------------------------------------------------------
# Socket
# -------------------------------------------------------

class ObsSocket(obsws):
    """`obsws` (v5 protocol) that keeps `requestStatus` in request answers."""

    def request(self, request_type: str, request_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        message_id = str(self.id)
        self.id += 1
        event = threading.Event()
        self.events[message_id] = event

        payload = {
            "op": OP_REQUEST,
            "d": {
                "requestId": message_id,
                "requestType": request_type,
                "requestData": request_data or {},
            },
        }
        try:
            self.ws.send(json.dumps(payload))
            event.wait(self.timeout)
        finally:
            self.events.pop(message_id, None)

        answer = self.answers.pop(message_id, None)
        if answer is None:
            raise obsexc.MessageTimeout(f"No answer for message {message_id}")
        return answer


# -------------------------------------------------------
# Request wrapper
# -------------------------------------------------------

def _failure_message(request_type: str, status: Dict[str, Any]) -> str:
    comment = status.get("comment")
    if comment:
        return str(comment)
    code = status.get("code")
    if code is not None:
        return f"{request_type} failed with status code {code}"
    return f"{request_type} request failed"


class ObsClient:
    """Thin request/response adapter over an `ObsSocket` connection."""

    def __init__(self, ws: ObsSocket):
        self.ws = ws

    def call(self, request_type: str, request_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            answer = self.ws.request(request_type, request_data)
        except (obsexc.ConnectionFailure, obsexc.MessageTimeout) as e:
            raise RemoteCallFailed(request_type, f"{type(e).__name__}: {e}") from e
        except (websocket.WebSocketException, OSError) as e:
            raise RemoteCallFailed(request_type, f"Connection to OBS lost: {e}") from e

        status = answer.get("requestStatus") or {}
        if not status.get("result"):
            raise RemoteCallFailed(
                request_type, _failure_message(request_type, status), code=status.get("code")
            )

        data = answer.get("responseData")
        return dict(data) if isinstance(data, dict) else {}


# -------------------------------------------------------
# Connection lifecycle
# -------------------------------------------------------

@contextmanager
def obs_session(options: ObsConnectionOptions) -> Iterator[ObsClient]:
    """Connect for the lifetime of one command; always disconnect."""
    host, port = options.host_port()
    # legacy=False: obsws guesses the v4 protocol whenever the port is 4444
    ws = ObsSocket(host=host, port=port, password=options.password or "", legacy=False)
    try:
        ws.connect()
    except (obsexc.ConnectionFailure, websocket.WebSocketException, OSError) as e:
        raise RemoteCallFailed("Connect", f"Could not connect to OBS at {options.url}: {e}") from e
    log(f"🔌 Connected to OBS at {options.url}", "DEBUG")

    try:
        yield ObsClient(ws)
    finally:
        try:
            ws.disconnect()
        except Exception as e:
            log(f"⚠️ Disconnect from OBS failed: {e}", "DEBUG")
