"""
common/errors.py
----------------
Error taxonomy shared by the reconciler, the webcam provisioner
and the natural-language executor.
"""

from typing import Optional


class ObsxError(Exception):
    """Base class for every failure the CLI reports without a traceback."""


class RemoteCallFailed(ObsxError):
    """An OBS request failed (non-OK status, timeout or dropped connection)."""

    def __init__(self, request_type: str, message: str, code: Optional[int] = None):
        self.request_type = request_type
        self.message = message
        self.code = code
        super().__init__(message)


class NoImageKindFound(ObsxError):
    pass


class NoCaptureKindFound(ObsxError):
    pass


class NoCaptureDevicesFound(ObsxError):
    pass


class InvalidNumericParameter(ObsxError, ValueError):
    pass


class NameConflict(ObsxError):
    """A name is already taken by an unrelated object; the caller skips it."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"{name}: {reason}")


class MalformedTranslatorOutput(ObsxError):
    pass


class TranslatorUnavailable(ObsxError):
    pass
