"""
Pytest fixtures for obsx tests.

`FakeObs` is an in-memory stand-in for the OBS websocket: it keeps scenes,
inputs, filters and device lists, logs every call, and can be told to fail
specific requests.
"""

import pytest
from typing import Any, Dict, List, Optional

from common.errors import RemoteCallFailed


class FakeObs:
    def __init__(self, current_scene: str = "Main", canvas=(1920, 1080), input_kinds=None):
        self.current_scene = current_scene
        self.canvas = canvas
        self.input_kinds = input_kinds if input_kinds is not None else [
            "image_source", "av_capture_input", "color_source_v3",
        ]
        self.scenes: Dict[str, List[Dict[str, Any]]] = {current_scene: []}
        self.inputs: Dict[str, Dict[str, Any]] = {}
        self.filters: Dict[str, List[Dict[str, Any]]] = {}
        self.property_items: Dict[str, List[Dict[str, Any]]] = {}
        self.transforms: Dict[int, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_queue: Dict[str, List[str]] = {}
        self._next_item_id = 1

    # --- setup helpers ---
    def add_scene(self, name: str):
        self.scenes.setdefault(name, [])

    def add_input(self, name: str, kind: str = "image_source",
                  settings: Optional[Dict[str, Any]] = None, scenes=()):
        self.inputs[name] = {"kind": kind, "settings": dict(settings or {})}
        for scene in scenes:
            self._place(scene, name)

    def fail_next(self, request_type: str, message: str, times: int = 1):
        self.fail_queue.setdefault(request_type, []).extend([message] * times)

    def calls_of(self, request_type: str) -> List[Dict[str, Any]]:
        return [data for rt, data in self.calls if rt == request_type]

    def members(self, scene: str) -> List[str]:
        return [item["sourceName"] for item in self.scenes[scene]]

    def _place(self, scene: str, source: str) -> int:
        item_id = self._next_item_id
        self._next_item_id += 1
        self.scenes[scene].append({"sceneItemId": item_id, "sourceName": source})
        return item_id

    def _require_scene(self, request_type: str, name: str):
        if name not in self.scenes:
            raise RemoteCallFailed(request_type, f"No source was found by the name of `{name}`.")

    def _require_input(self, request_type: str, name: str):
        if name not in self.inputs:
            raise RemoteCallFailed(request_type, f"No source was found by the name of `{name}`.")

    # --- protocol ---
    def call(self, request_type: str, request_data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = request_data or {}
        self.calls.append((request_type, data))
        queued = self.fail_queue.get(request_type)
        if queued:
            raise RemoteCallFailed(request_type, queued.pop(0))
        handler = self.HANDLERS.get(request_type)
        if handler is None:
            raise RemoteCallFailed(request_type, f"Your request type is not valid: {request_type}")
        return handler(self, data)

    def _get_version(self, data):
        return {"obsVersion": "30.1.2", "platform": "macos"}

    def _get_current_program_scene(self, data):
        return {"currentProgramSceneName": self.current_scene}

    def _set_current_program_scene(self, data):
        self._require_scene("SetCurrentProgramScene", data["sceneName"])
        self.current_scene = data["sceneName"]
        return {}

    def _get_video_settings(self, data):
        w, h = self.canvas
        return {"baseWidth": w, "baseHeight": h, "outputWidth": w, "outputHeight": h}

    def _get_input_kind_list(self, data):
        return {"inputKinds": list(self.input_kinds)}

    def _get_scene_list(self, data):
        return {
            "currentProgramSceneName": self.current_scene,
            "scenes": [{"sceneName": name} for name in self.scenes],
        }

    def _get_scene_item_list(self, data):
        self._require_scene("GetSceneItemList", data["sceneName"])
        return {"sceneItems": [dict(item) for item in self.scenes[data["sceneName"]]]}

    def _get_input_list(self, data):
        return {"inputs": [{"inputName": n, "inputKind": i["kind"]} for n, i in self.inputs.items()]}

    def _get_input_settings(self, data):
        self._require_input("GetInputSettings", data["inputName"])
        entry = self.inputs[data["inputName"]]
        return {"inputSettings": dict(entry["settings"]), "inputKind": entry["kind"]}

    def _set_input_settings(self, data):
        self._require_input("SetInputSettings", data["inputName"])
        entry = self.inputs[data["inputName"]]
        if data.get("overlay", True):
            entry["settings"].update(data["inputSettings"])
        else:
            entry["settings"] = dict(data["inputSettings"])
        return {}

    def _create_input(self, data):
        name = data["inputName"]
        if name in self.inputs or name in self.scenes:
            raise RemoteCallFailed("CreateInput", "A source already exists by that input name.")
        self._require_scene("CreateInput", data["sceneName"])
        self.inputs[name] = {"kind": data["inputKind"], "settings": dict(data.get("inputSettings") or {})}
        item_id = self._place(data["sceneName"], name)
        return {"inputUuid": f"uuid-{name}", "sceneItemId": item_id}

    def _create_scene_item(self, data):
        self._require_scene("CreateSceneItem", data["sceneName"])
        self._require_input("CreateSceneItem", data["sourceName"])
        return {"sceneItemId": self._place(data["sceneName"], data["sourceName"])}

    def _set_scene_item_transform(self, data):
        self.transforms[data["sceneItemId"]] = dict(data["sceneItemTransform"])
        return {}

    def _get_input_properties_list_property_items(self, data):
        self._require_input("GetInputPropertiesListPropertyItems", data["inputName"])
        if data["propertyName"] not in self.property_items:
            raise RemoteCallFailed(
                "GetInputPropertiesListPropertyItems", "Unable to find a property by that name."
            )
        return {"propertyItems": [dict(i) for i in self.property_items[data["propertyName"]]]}

    def _create_source_filter(self, data):
        self._require_input("CreateSourceFilter", data["sourceName"])
        self.filters.setdefault(data["sourceName"], []).append({
            "filterName": data["filterName"],
            "filterKind": data["filterKind"],
            "filterSettings": dict(data.get("filterSettings") or {}),
            "filterEnabled": True,
        })
        return {}

    def _get_source_filter_list(self, data):
        return {"filters": [dict(f) for f in self.filters.get(data["sourceName"], [])]}

    def _get_stream_status(self, data):
        return {"outputActive": False}

    def _get_record_status(self, data):
        return {"outputActive": False, "outputPaused": False}

    def _start_record(self, data):
        return {}

    HANDLERS = {
        "GetVersion": _get_version,
        "GetCurrentProgramScene": _get_current_program_scene,
        "SetCurrentProgramScene": _set_current_program_scene,
        "GetVideoSettings": _get_video_settings,
        "GetInputKindList": _get_input_kind_list,
        "GetSceneList": _get_scene_list,
        "GetSceneItemList": _get_scene_item_list,
        "GetInputList": _get_input_list,
        "GetInputSettings": _get_input_settings,
        "SetInputSettings": _set_input_settings,
        "CreateInput": _create_input,
        "CreateSceneItem": _create_scene_item,
        "SetSceneItemTransform": _set_scene_item_transform,
        "GetInputPropertiesListPropertyItems": _get_input_properties_list_property_items,
        "CreateSourceFilter": _create_source_filter,
        "GetSourceFilterList": _get_source_filter_list,
        "GetStreamStatus": _get_stream_status,
        "GetRecordStatus": _get_record_status,
        "StartRecord": _start_record,
    }


class ScriptedTranslator:
    """Returns canned model replies and keeps a copy of every conversation it saw."""

    def __init__(self, responses: List[str]):
        self.responses = list(responses)
        self.requests: List[tuple] = []

    def complete(self, system_prompt: str, conversation: List[Dict[str, str]]) -> str:
        self.requests.append((system_prompt, [dict(turn) for turn in conversation]))
        return self.responses.pop(0)


@pytest.fixture
def fake_obs() -> FakeObs:
    """Empty OBS with a single 'Main' scene on a 1920x1080 canvas."""
    return FakeObs()


@pytest.fixture
def image_dir(tmp_path):
    """Directory with three images and one non-image file."""
    for name in ["b.png", "a.jpg", "c.txt", "d.gif"]:
        (tmp_path / name).write_bytes(b"")
    return tmp_path
