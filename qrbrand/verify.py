"""Scan verification: decode a rendered code and compare it with the payload."""

import time
from dataclasses import dataclass

import cv2
import numpy as np
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from qrbrand.canvas import Canvas
from qrbrand.logging import audit, get_logger, trace

log = get_logger("verify")


@dataclass
class ScanResult:
    """Outcome of one decoder run."""
    success: bool
    decoded_data: str | None = None
    decode_time_ms: float = 0.0
    decoder: str = ""
    error: str | None = None


def _as_rgb(image: Image.Image | Canvas) -> Image.Image:
    if isinstance(image, Canvas):
        image = image.to_image()
    return image.convert("RGB")


def _finish(decoder: str, data: str | None, start: float) -> ScanResult:
    elapsed = (time.perf_counter() - start) * 1000
    if data:
        audit("scan.verified", logger=log, decoder=decoder, success=True,
              time_ms=round(elapsed, 1), data=data[:80])
        return ScanResult(success=True, decoded_data=data, decode_time_ms=elapsed, decoder=decoder)
    audit("scan.verified", logger=log, decoder=decoder, success=False,
          time_ms=round(elapsed, 1), error="No QR code detected")
    return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error="No QR code detected")


def _failed(decoder: str, e: Exception, start: float) -> ScanResult:
    elapsed = (time.perf_counter() - start) * 1000
    audit("scan.error", logger=log, decoder=decoder, error=str(e), time_ms=round(elapsed, 1))
    return ScanResult(success=False, decode_time_ms=elapsed, decoder=decoder, error=str(e))


@trace
def scan_pyzbar(image: Image.Image | Canvas) -> ScanResult:
    """Decode with pyzbar (ZBar)."""
    start = time.perf_counter()
    try:
        results = pyzbar_decode(_as_rgb(image))
        data = results[0].data.decode("utf-8", errors="replace") if results else None
    except Exception as e:
        return _failed("pyzbar/zbar", e, start)
    return _finish("pyzbar/zbar", data, start)


@trace
def scan_opencv(image: Image.Image | Canvas) -> ScanResult:
    """Decode with OpenCV's QRCodeDetector."""
    start = time.perf_counter()
    try:
        gray = cv2.cvtColor(np.array(_as_rgb(image)), cv2.COLOR_RGB2GRAY)
        data, _points, _ = cv2.QRCodeDetector().detectAndDecode(gray)
    except Exception as e:
        return _failed("opencv", e, start)
    return _finish("opencv", data or None, start)


@trace
def verify(image: Image.Image | Canvas, expected_data: str | None = None) -> list[ScanResult]:
    """Run every decoder on *image*.

    A decode that differs from *expected_data* is reported as a failure.
    """
    results = []
    for scanner in [scan_pyzbar, scan_opencv]:
        result = scanner(image)
        if result.success and expected_data and result.decoded_data != expected_data:
            result.success = False
            result.error = f"Data mismatch: got '{result.decoded_data}', expected '{expected_data}'"
        results.append(result)
    return results
