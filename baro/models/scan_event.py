# baro/models/scan_event.py

"""Scan event emitted by the camera layer."""

from dataclasses import dataclass

from baro.models.product import ScanKind


@dataclass(frozen=True)
class ScanEvent:
    """A single capture: a decoded barcode, OCR text, or an image tag."""

    kind: ScanKind
    payload: str
    captured_at: int                  # epoch ms
