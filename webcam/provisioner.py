"""
provisioner.py
--------------
Adds a configured webcam input to the current OBS scene.

Steps (each depends on the previous one succeeding):
1. Resolve the capture input kind.
2. Resolve a free input name (`base`, `base-2`, `base-3`, ...).
3. Create the input with empty settings in the current scene.
4. Enumerate capture devices by probing candidate property keys.
5. Pick a device (selection hint, then preference list, then first).
6. Merge the device id into the input settings.
7. Optionally attach chroma-key and colour-correction filters.

A failure aborts the remaining steps. The created input is not rolled back,
and nothing re-checks the input between creation and device enumeration.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from pydantic import BaseModel

from common.errors import (
    InvalidNumericParameter,
    NoCaptureDevicesFound,
    NoCaptureKindFound,
    RemoteCallFailed,
)
from common.io_utils import log
from scene.inventory import Inventory

# ----------------------------
# Preferences
# ----------------------------
DEFAULT_BASE_NAME = "Video Capture Device"

INPUT_KIND_PREFERENCE = [
    "av_capture_input",
    "macos-avcapture",
    "avf_capture_input",
    "avfoundation_input",
    "video_capture_device",
]

DEVICE_PRIORITY = [
    "iphone camera",
    "studio display camera",
    "facetime hd camera",
]

DEVICE_PROPERTY_CANDIDATES = [
    "device_id",
    "device",
    "device_name",
    "video_device",
    "source",
    "input",
]

CHROMA_KEY_FILTER = {"filterName": "Chroma Key", "filterKind": "chroma_key_filter"}
COLOR_CORRECTION_FILTER = {"filterName": "Color Correction", "filterKind": "color_filter"}

MISSING_PROPERTY_MESSAGE = "unable to find a property"


# ----------------------------
# Input schema
# ----------------------------
class WebcamConfig(BaseModel):
    base_name: str = DEFAULT_BASE_NAME
    input_kind: Optional[str] = None
    device_selection: Optional[str] = None
    add_chroma_key: bool = True
    add_color_correction: bool = True
    saturation: float = -1.0
    contrast: float = 0.7
    interactive: bool = False


@dataclass(frozen=True)
class CaptureDeviceChoice:
    property_key: str
    display_name: str
    device_value: str

    @property
    def label(self) -> str:
        return self.display_name or self.device_value


@dataclass
class ProvisionResult:
    object_name: str
    kind_used: str
    device_chosen: CaptureDeviceChoice
    scene: str
    filters: List[str] = field(default_factory=list)


# A chooser receives the enumerated choices plus the default index and
# returns the index to use (interactive front ends plug in here).
DeviceChooser = Callable[[List[CaptureDeviceChoice], int], int]


# ----------------------------
# Pure selection helpers
# ----------------------------
def pick_capture_kind(kinds: List[str], explicit: Optional[str] = None) -> str:
    if explicit:
        return explicit
    for preferred in INPUT_KIND_PREFERENCE:
        if preferred in kinds:
            return preferred
    for kind in kinds:
        if "capture" in kind.lower():
            return kind
    raise NoCaptureKindFound(f"No supported capture input kinds found: {', '.join(kinds)}")


def unique_input_name(base_name: str, taken: Set[str]) -> str:
    if base_name not in taken:
        return base_name
    suffix = 2
    while f"{base_name}-{suffix}" in taken:
        suffix += 1
    return f"{base_name}-{suffix}"


def pick_default_index_from_needles(labels: List[str], needles: List[str]) -> int:
    """Index of the first label matching the highest-priority needle, else 0."""
    lowered = [label.lower() for label in labels]
    for needle in needles:
        for idx, label in enumerate(lowered):
            if needle in label:
                return idx
    return 0


def find_device_index_by_selection(choices: List[CaptureDeviceChoice], selection: Optional[str]) -> int:
    """Case-insensitive substring match on name, value and property key; -1 if none."""
    needle = (selection or "").strip().lower()
    if not needle:
        return -1
    for idx, choice in enumerate(choices):
        hay = f"{choice.display_name} {choice.device_value} {choice.property_key}".lower()
        if needle in hay:
            return idx
    return -1


def check_filter_numbers(config: WebcamConfig) -> None:
    if not config.add_color_correction:
        return
    for label, value in (("saturation", config.saturation), ("contrast", config.contrast)):
        if not math.isfinite(value):
            raise InvalidNumericParameter(f"Invalid {label} value: {value}")


# ----------------------------
# Remote steps
# ----------------------------
def enumerate_device_choices(client, input_name: str) -> List[CaptureDeviceChoice]:
    """First property key that yields a non-empty item list wins."""
    for property_key in DEVICE_PROPERTY_CANDIDATES:
        try:
            res = client.call("GetInputPropertiesListPropertyItems", {
                "inputName": input_name,
                "propertyName": property_key,
            })
        except RemoteCallFailed as e:
            if MISSING_PROPERTY_MESSAGE not in e.message.lower():
                raise
            continue

        choices = [
            CaptureDeviceChoice(
                property_key=property_key,
                display_name=str(item.get("itemName") or ""),
                device_value=str(item.get("itemValue") or ""),
            )
            for item in res.get("propertyItems") or []
        ]
        if choices:
            return choices
    return []


def _settings_keys(client, input_name: str) -> List[str]:
    try:
        res = client.call("GetInputSettings", {"inputName": input_name})
    except RemoteCallFailed:
        return []
    return sorted((res.get("inputSettings") or {}).keys())


def _choose_device(choices: List[CaptureDeviceChoice], config: WebcamConfig,
                   chooser: Optional[DeviceChooser]) -> CaptureDeviceChoice:
    if config.device_selection:
        index = find_device_index_by_selection(choices, config.device_selection)
        if index < 0:
            available = ", ".join(c.label for c in choices)
            raise NoCaptureDevicesFound(
                f"No capture device matches '{config.device_selection}'. Available: {available}"
            )
    else:
        index = pick_default_index_from_needles([c.display_name for c in choices], DEVICE_PRIORITY)

    if chooser is not None:
        index = chooser(choices, index)
    return choices[index]


def provision(client, config: WebcamConfig, chooser: Optional[DeviceChooser] = None) -> ProvisionResult:
    """Create and configure one webcam input in the current program scene."""
    check_filter_numbers(config)

    inventory = Inventory(client)
    scene_name = inventory.current_scene()
    kinds = [] if config.input_kind else inventory.input_kinds()
    input_kind = pick_capture_kind(kinds, config.input_kind)
    input_name = unique_input_name(config.base_name, inventory.list_all_object_names())

    client.call("CreateInput", {
        "sceneName": scene_name,
        "inputName": input_name,
        "inputKind": input_kind,
        "inputSettings": {},
        "sceneItemEnabled": True,
    })
    log(f"✅ Created input {input_name} ({input_kind}) in {scene_name}", "OK")

    choices = enumerate_device_choices(client, input_name)
    if not choices:
        keys = _settings_keys(client, input_name)
        raise NoCaptureDevicesFound(
            f"No capture devices found for {input_kind}. Available input settings keys: {keys}"
        )

    device = _choose_device(choices, config, chooser)
    if not device.device_value:
        raise NoCaptureDevicesFound(f"Capture device '{device.label}' has no identifier")

    client.call("SetInputSettings", {
        "inputName": input_name,
        "inputSettings": {device.property_key: device.device_value},
        "overlay": True,
    })
    log(f"🎥 Using device {device.label} ({device.property_key}={device.device_value})", "INFO")

    filters: List[str] = []
    if config.add_chroma_key:
        client.call("CreateSourceFilter", {
            "sourceName": input_name,
            **CHROMA_KEY_FILTER,
            "filterSettings": {},
        })
        filters.append(CHROMA_KEY_FILTER["filterName"])

    if config.add_color_correction:
        client.call("CreateSourceFilter", {
            "sourceName": input_name,
            **COLOR_CORRECTION_FILTER,
            "filterSettings": {
                "saturation": config.saturation,
                "contrast": config.contrast,
            },
        })
        filters.append(COLOR_CORRECTION_FILTER["filterName"])

    _log_filters(client, input_name)

    return ProvisionResult(
        object_name=input_name,
        kind_used=input_kind,
        device_chosen=device,
        scene=scene_name,
        filters=filters,
    )


def _log_filters(client, input_name: str) -> None:
    try:
        res = client.call("GetSourceFilterList", {"sourceName": input_name})
    except RemoteCallFailed as e:
        log(f"Could not list filters for {input_name}: {e}", "DEBUG")
        return
    summaries = [
        {"name": f.get("filterName"), "kind": f.get("filterKind"), "enabled": f.get("filterEnabled")}
        for f in res.get("filters") or []
    ]
    log(f"Filters: {summaries}", "INFO")
