"""FastAPI router definitions for the receipt scanner service."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Response, UploadFile, status
from pydantic import BaseModel

from .export import CSV_MEDIA_TYPE, export_filename, to_csv
from .extraction import EXPORT_FIELDS, ExtractionResult, extract
from .ocr_extract import (
    EmptyOCRTextError,
    ImageFetchError,
    OCRDecodeError,
    OCRServiceError,
    UnsupportedFileError,
    scan_receipt,
)
from .settings import Settings, get_settings

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Receipt Scanner Service")

EMPTY_PLACEHOLDER = "—"


class ScanResponse(BaseModel):
    date: str
    merchant: str
    total: str
    raw: str
    display: Dict[str, str]
    exportable: bool


class ExtractRequest(BaseModel):
    text: str = ""


class ExportRequest(BaseModel):
    date: str = ""
    merchant: str = ""
    total: str = ""


def _to_response(result: ExtractionResult) -> ScanResponse:
    values = result.as_dict()
    return ScanResponse(
        date=result.date,
        merchant=result.merchant,
        total=result.total,
        raw=result.raw,
        display={field: values[field] or EMPTY_PLACEHOLDER for field in EXPORT_FIELDS},
        exportable=result.has_fields,
    )


async def _read_upload(file: Optional[UploadFile], settings: Settings) -> bytes:
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="no_file_selected")
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="unsupported_file_type")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="empty_file")
    if len(data) > settings.max_upload_size:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="file_too_large")
    return data


@app.post("/scan", response_model=ScanResponse)
async def scan(
    file: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_settings),
) -> ScanResponse:
    data = await _read_upload(file, settings)

    try:
        result = scan_receipt(data, settings=settings)
    except ImageFetchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="no_file_selected") from exc
    except UnsupportedFileError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="unsupported_image") from exc
    except EmptyOCRTextError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="ocr_no_text") from exc
    except OCRDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="ocr_decode_failed") from exc
    except OCRServiceError as exc:
        LOGGER.exception("OCR service error: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="ocr_service_error") from exc

    return _to_response(result)


@app.post("/extract", response_model=ScanResponse)
async def extract_text(payload: ExtractRequest) -> ScanResponse:
    return _to_response(extract(payload.text))


@app.post("/export/csv")
async def export_csv(payload: ExportRequest) -> Response:
    result = ExtractionResult(date=payload.date, merchant=payload.merchant, total=payload.total)
    if not result.has_fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="nothing_to_export")
    return Response(
        content=to_csv(result),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


__all__ = ["app"]
