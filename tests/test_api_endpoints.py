from __future__ import annotations

import csv
import io
from typing import Any, Optional

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from receipt_scanner import ocr_extract
from receipt_scanner.extraction import ExtractionResult
from receipt_scanner.main import ExportRequest, ExtractRequest, export_csv, extract_text, scan
from receipt_scanner.settings import Settings


def _upload(data: bytes = b"image", content_type: str = "image/png", filename: Optional[str] = "receipt.png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.mark.asyncio
async def test_scan_returns_extracted_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict = {}

    def fake_scan(data: bytes, **kwargs: Any) -> ExtractionResult:
        captured["data"] = data
        captured["settings"] = kwargs.get("settings")
        return ExtractionResult(date="2024-01-15", merchant="Corner Deli", total="", raw="Corner Deli\n2024-01-15")

    monkeypatch.setattr("receipt_scanner.main.scan_receipt", fake_scan)
    settings = Settings()

    response = await scan(file=_upload(b"png-bytes"), settings=settings)

    assert captured == {"data": b"png-bytes", "settings": settings}
    assert response.date == "2024-01-15"
    assert response.merchant == "Corner Deli"
    assert response.total == ""
    assert response.display == {"date": "2024-01-15", "merchant": "Corner Deli", "total": "—"}
    assert response.exportable is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "upload,detail",
    [
        (None, "no_file_selected"),
        (_upload(filename=None), "no_file_selected"),
        (_upload(content_type="application/pdf", filename="receipt.pdf"), "unsupported_file_type"),
        (_upload(data=b""), "empty_file"),
    ],
)
async def test_scan_validates_upload(upload: Optional[UploadFile], detail: str) -> None:
    with pytest.raises(HTTPException) as exc:
        await scan(file=upload, settings=Settings())

    assert exc.value.status_code == 400
    assert exc.value.detail == detail


@pytest.mark.asyncio
async def test_scan_rejects_large_uploads() -> None:
    with pytest.raises(HTTPException) as exc:
        await scan(file=_upload(b"12345"), settings=Settings(max_upload_size=4))

    assert exc.value.status_code == 400
    assert exc.value.detail == "file_too_large"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,status_code,detail",
    [
        (ocr_extract.UnsupportedFileError("unsupported_image_format"), 422, "unsupported_image"),
        (ocr_extract.EmptyOCRTextError("empty_ocr_text"), 422, "ocr_no_text"),
        (ocr_extract.OCRDecodeError("rapidocr_no_text"), 422, "ocr_decode_failed"),
        (ocr_extract.OCRServiceError("tesseract_not_found"), 500, "ocr_service_error"),
    ],
)
async def test_scan_maps_ocr_errors(
    monkeypatch: pytest.MonkeyPatch, error: Exception, status_code: int, detail: str
) -> None:
    def fake_scan(*_: Any, **__: Any) -> ExtractionResult:
        raise error

    monkeypatch.setattr("receipt_scanner.main.scan_receipt", fake_scan)

    with pytest.raises(HTTPException) as exc:
        await scan(file=_upload(), settings=Settings())

    assert exc.value.status_code == status_code
    assert exc.value.detail == detail


@pytest.mark.asyncio
async def test_extract_endpoint_runs_engine() -> None:
    response = await extract_text(ExtractRequest(text="Corner Deli\nSubtotal 7.50\nTotal $8.10"))

    assert response.merchant == "Corner Deli"
    assert response.total == "$8.10"
    assert response.date == ""
    assert response.display["date"] == "—"
    assert response.exportable is True


@pytest.mark.asyncio
async def test_extract_endpoint_blank_text() -> None:
    response = await extract_text(ExtractRequest(text="   "))

    assert response.display == {"date": "—", "merchant": "—", "total": "—"}
    assert response.exportable is False


@pytest.mark.asyncio
async def test_export_csv_returns_attachment() -> None:
    response = await export_csv(ExportRequest(date="2024-01-15", merchant='Joe\'s "Diner", Inc.', total="$8.10"))

    assert response.headers["content-disposition"].startswith("attachment; filename=receipt_data_")
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(io.StringIO(response.body.decode("utf-8"))))
    assert rows == [["Date", "Merchant", "Total"], ["2024-01-15", 'Joe\'s "Diner", Inc.', "$8.10"]]


@pytest.mark.asyncio
async def test_export_csv_requires_a_field() -> None:
    with pytest.raises(HTTPException) as exc:
        await export_csv(ExportRequest())

    assert exc.value.status_code == 400
    assert exc.value.detail == "nothing_to_export"
