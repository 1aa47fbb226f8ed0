"""Receipt OCR helpers.

This module turns a receipt photo into text and hands that text to the
extraction engine.  Images can be supplied as raw bytes, a base64 string or an
``http(s)://`` URL.  Recognition uses a local Tesseract backend by default;
RapidOCR can be selected with ``OCR_ENGINE=rapidocr`` and falls back to
Tesseract when it fails.

Callers may pass a ``progress`` callback receiving ``(message, fraction)``
pairs while the scan runs.
"""
from __future__ import annotations

import base64
import binascii
import importlib.util
import logging
from io import BytesIO
from typing import Callable, List, Optional, Tuple, Union

import numpy as np
import pytesseract
import requests
from PIL import Image, UnidentifiedImageError

from .extraction import ExtractionResult, extract
from .settings import Settings, get_settings

_RAPIDOCR_AVAILABLE = importlib.util.find_spec("rapidocr_onnxruntime") is not None
if _RAPIDOCR_AVAILABLE:
    from rapidocr_onnxruntime import RapidOCR  # type: ignore
else:  # pragma: no cover - rapidocr is an optional extra
    RapidOCR = None  # type: ignore[assignment]

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]
ImageInput = Union[str, bytes, bytearray]

_RAPIDOCR_ENGINE: Optional[RapidOCR] = None  # type: ignore[assignment]


class ImageFetchError(RuntimeError):
    """Raised when the input image cannot be retrieved."""


class OCRServiceError(RuntimeError):
    """Raised when the OCR engine is missing or fails."""


class OCRDecodeError(RuntimeError):
    """Raised when the input or the OCR output cannot be interpreted."""


class UnsupportedFileError(OCRDecodeError):
    """Raised when the supplied bytes are not a readable image."""


class EmptyOCRTextError(OCRDecodeError):
    """Raised when OCR completes without recognising any text."""


def _ignore_progress(message: str, fraction: float) -> None:
    del message, fraction


def _reporter(progress: Optional[ProgressCallback]) -> ProgressCallback:
    callback = progress or _ignore_progress

    def report(message: str, fraction: float) -> None:
        callback(message, max(0.0, min(1.0, fraction)))

    return report


def scan_receipt(
    image_input: ImageInput,
    *,
    settings: Optional[Settings] = None,
    progress: Optional[ProgressCallback] = None,
) -> ExtractionResult:
    """Run OCR on ``image_input`` and extract date, merchant and total.

    Raises
    ------
    ImageFetchError
        No input was supplied or the URL could not be downloaded.
    UnsupportedFileError
        The input is not an image Pillow can decode.
    EmptyOCRTextError
        The OCR engine returned no text.
    OCRServiceError
        The OCR engine is unavailable or failed.
    """

    settings = settings or get_settings()
    report = _reporter(progress)

    report("Loading image…", 0.0)
    binary, source = _load_bytes(image_input, timeout=settings.ocr_timeout)

    report("Running OCR…", 0.05)
    raw_text = _perform_ocr(binary, settings, report)
    if not raw_text or not raw_text.strip():
        raise EmptyOCRTextError("empty_ocr_text")

    report("Parsing text…", 0.98)
    result = extract(raw_text)
    LOGGER.info(
        "Scanned receipt source=%s date=%s merchant=%s total=%s",
        source,
        bool(result.date),
        bool(result.merchant),
        bool(result.total),
    )
    return result


def _load_bytes(image_input: ImageInput, timeout: int) -> Tuple[bytes, str]:
    if isinstance(image_input, (bytes, bytearray)):
        if not image_input:
            raise ImageFetchError("no_file_selected")
        return bytes(image_input), "bytes"

    if isinstance(image_input, str):
        trimmed = image_input.strip()
        if not trimmed:
            raise ImageFetchError("no_file_selected")
        if trimmed.startswith("http://") or trimmed.startswith("https://"):
            try:
                response = requests.get(trimmed, timeout=timeout)
                response.raise_for_status()
            except requests.RequestException as exc:
                raise ImageFetchError("fetch_failed") from exc
            return response.content, trimmed

        # Treat as base64 payload
        try:
            return base64.b64decode(trimmed, validate=True), "base64"
        except (binascii.Error, ValueError) as exc:
            raise OCRDecodeError("invalid_base64") from exc

    raise OCRDecodeError("unsupported_input_type")


def _perform_ocr(binary: bytes, settings: Settings, report: ProgressCallback) -> str:
    engine = settings.ocr_engine
    if engine == "rapidocr":
        try:
            return _ocr_rapidocr(binary, report)
        except UnsupportedFileError:
            raise
        except (OCRServiceError, OCRDecodeError) as exc:
            LOGGER.warning(
                "rapidocr_failed_falling_back: %s",
                exc,
                exc_info=LOGGER.isEnabledFor(logging.DEBUG),
            )
            return _ocr_local(binary, settings.ocr_language, report)
    if engine == "local":
        return _ocr_local(binary, settings.ocr_language, report)
    raise OCRServiceError(f"unknown_ocr_engine:{engine}")


def _ocr_local(binary: bytes, language: str, report: ProgressCallback = _ignore_progress) -> str:
    image = _image_from_bytes(binary)
    report("Initializing OCR…", 0.15)
    report("Loading language data…", 0.2)
    try:
        text = pytesseract.image_to_string(image, lang=language)
    except pytesseract.TesseractNotFoundError as exc:
        raise OCRServiceError("tesseract_not_found") from exc
    except pytesseract.TesseractError as exc:
        raise OCRServiceError(f"tesseract_error:{exc}") from exc
    report("Recognizing text…", 0.95)
    return text


def _ocr_rapidocr(binary: bytes, report: ProgressCallback = _ignore_progress) -> str:
    if not _RAPIDOCR_AVAILABLE or RapidOCR is None:
        raise OCRServiceError("rapidocr_not_installed")
    image = _image_from_bytes(binary)
    report("Loading OCR engine…", 0.1)
    engine = _get_rapidocr()
    report("Initializing OCR…", 0.15)
    try:
        result, _ = engine(np.array(image))
    except Exception as exc:  # pragma: no cover - rapidocr runtime failure
        raise OCRServiceError("rapidocr_execution_failed") from exc
    if not result:
        raise OCRDecodeError("rapidocr_empty_result")
    texts: List[str] = []
    for entry in result:
        if not entry:
            continue
        if isinstance(entry, (list, tuple)) and len(entry) >= 2:
            candidate = entry[1]
        else:
            candidate = entry
        if isinstance(candidate, (list, tuple)) and candidate:
            candidate = candidate[0]
        if isinstance(candidate, str) and candidate.strip():
            texts.append(candidate.strip())
    if not texts:
        raise OCRDecodeError("rapidocr_no_text")
    report("Recognizing text…", 0.95)
    return "\n".join(texts)


def _get_rapidocr() -> RapidOCR:
    global _RAPIDOCR_ENGINE
    if _RAPIDOCR_ENGINE is None:
        _RAPIDOCR_ENGINE = RapidOCR(det_use_cuda=False, rec_use_cuda=False, cls_use_cuda=False)
    return _RAPIDOCR_ENGINE


def _image_from_bytes(binary: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(binary))
        image.load()
    except UnidentifiedImageError as exc:
        raise UnsupportedFileError("unsupported_image_format") from exc
    except OSError as exc:
        raise UnsupportedFileError("image_open_failed") from exc
    return image.convert("RGB")


__all__ = [
    "EmptyOCRTextError",
    "ImageFetchError",
    "OCRDecodeError",
    "OCRServiceError",
    "ProgressCallback",
    "UnsupportedFileError",
    "scan_receipt",
]
