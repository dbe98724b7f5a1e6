"""
inventory.py
------------
Read-only view of the remote OBS state used by the reconciliation passes.

Two consumers:
  • `Inventory` answers the structured questions the image reconciler and
    the webcam provisioner ask (scene members, global names, file paths).
  • `describe_state()` renders a best-effort text snapshot for the
    natural-language assistant.

Nothing here is transactional: OBS has no locking primitive, so a snapshot
may be stale by the time it is acted on.
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from common.errors import RemoteCallFailed
from common.io_utils import log, normalize_file_path
from common.transformations import canvas_size


# ----------------------------
# Structured inventory
# ----------------------------
class Inventory:
    """Queries against one OBS connection. Every call hits the remote side."""

    def __init__(self, client):
        self.client = client

    def current_scene(self) -> str:
        res = self.client.call("GetCurrentProgramScene")
        return res.get("currentProgramSceneName") or res.get("sceneName") or ""

    def canvas_size(self) -> Tuple[float, float]:
        return canvas_size(self.client.call("GetVideoSettings"))

    def input_kinds(self) -> List[str]:
        return list(self.client.call("GetInputKindList").get("inputKinds") or [])

    def list_container_members(self, scene_name: str) -> Set[str]:
        """Source names placed in `scene_name`, deduplicated."""
        res = self.client.call("GetSceneItemList", {"sceneName": scene_name})
        names = {str(item.get("sourceName") or "") for item in res.get("sceneItems") or []}
        names.discard("")
        return names

    def list_all_object_names(self) -> Set[str]:
        """
        Every name in OBS's global source namespace: all inputs across all
        scenes, plus the scenes themselves (a scene name blocks an input name).
        """
        inputs = self.client.call("GetInputList").get("inputs") or []
        names = {str(i.get("inputName") or "") for i in inputs}
        scenes = self.client.call("GetSceneList").get("scenes") or []
        names.update(str(s.get("sceneName") or "") for s in scenes)
        names.discard("")
        return names

    def file_backed_path(self, name: str) -> Optional[str]:
        """Normalised `file` setting of an input, or None when it has none."""
        try:
            res = self.client.call("GetInputSettings", {"inputName": name})
        except RemoteCallFailed:
            # Not an input with settings (e.g. a nested scene).
            return None
        file = (res.get("inputSettings") or {}).get("file")
        if isinstance(file, str) and file.strip():
            return normalize_file_path(file)
        return None

    def file_backed_paths_of(self, names: Iterable[str]) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for name in names:
            path = self.file_backed_path(name)
            if path is not None:
                out[name] = path
        return out


# ----------------------------
# Text snapshot for the assistant
# ----------------------------
def _best_effort(client, request_type: str, request_data: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    try:
        return client.call(request_type, request_data)
    except RemoteCallFailed as e:
        log(f"State field {request_type} unavailable: {e}", "DEBUG")
        return None


def describe_state(client) -> str:
    """
    Render scenes, scene items, inputs and output status as text.
    A field that cannot be read is left out; the snapshot itself never fails.
    """
    parts: List[str] = []

    version = _best_effort(client, "GetVersion")
    if version is not None:
        parts.append(f"OBS Version: {version.get('obsVersion')}, Platform: {version.get('platform')}")

    video = _best_effort(client, "GetVideoSettings")
    if video is not None:
        parts.append(
            f"Canvas: {video.get('baseWidth')}x{video.get('baseHeight')}, "
            f"Output: {video.get('outputWidth')}x{video.get('outputHeight')}"
        )

    scenes = _best_effort(client, "GetSceneList")
    if scenes is not None:
        scene_list = scenes.get("scenes") or []
        parts.append(f"Current scene: {scenes.get('currentProgramSceneName')}")
        parts.append(f"Scenes: {json.dumps(scene_list)}")
        for scene in scene_list:
            name = scene.get("sceneName")
            items = _best_effort(client, "GetSceneItemList", {"sceneName": name})
            if items is not None:
                parts.append(f'Scene items in "{name}": {json.dumps(items.get("sceneItems") or [])}')

    inputs = _best_effort(client, "GetInputList")
    if inputs is not None:
        parts.append(f"Inputs: {json.dumps(inputs.get('inputs') or [])}")

    stream = _best_effort(client, "GetStreamStatus")
    if stream is not None:
        parts.append(f"Stream: active={stream.get('outputActive')}")

    record = _best_effort(client, "GetRecordStatus")
    if record is not None:
        parts.append(f"Record: active={record.get('outputActive')}, paused={record.get('outputPaused')}")

    return "\n".join(parts)
