"""
Webcam provisioning for obsx.
"""
from .provisioner import (
    CaptureDeviceChoice,
    DEFAULT_BASE_NAME,
    DEVICE_PRIORITY,
    ProvisionResult,
    WebcamConfig,
    enumerate_device_choices,
    find_device_index_by_selection,
    pick_capture_kind,
    pick_default_index_from_needles,
    provision,
    unique_input_name,
)

__all__ = [
    "CaptureDeviceChoice",
    "DEFAULT_BASE_NAME",
    "DEVICE_PRIORITY",
    "ProvisionResult",
    "WebcamConfig",
    "enumerate_device_choices",
    "find_device_index_by_selection",
    "pick_capture_kind",
    "pick_default_index_from_needles",
    "provision",
    "unique_input_name",
]
