"""Capture: запись GPS-пути и замыкание полигона."""

from .state_machine import (
    CaptureConfig,
    CaptureStartResult,
    CaptureState,
    CaptureStopResult,
    PathRecorder,
    SampleResult,
)

__all__ = [
    "PathRecorder",
    "CaptureState",
    "CaptureConfig",
    "CaptureStartResult",
    "CaptureStopResult",
    "SampleResult",
]
