"""
PDF text extraction client.

The extraction itself runs on an external service: we POST the raw PDF bytes
and get back JSON of the form {"text": "..."}. Nothing here inspects the PDF.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import requests

from schedplanner.config import pdf_endpoint
from schedplanner.errors import PdfExtractionError

log = logging.getLogger(__name__)


def _read_bytes(source: Union[bytes, str, Path]) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    return Path(source).read_bytes()


def extract_pdf_text(
    source: Union[bytes, str, Path],
    endpoint: Optional[str] = None,
    timeout: float = 30,
) -> str:
    """
    Send a PDF (bytes or file path) to the extraction endpoint and return its text.

    Raises requests exceptions for network/HTTP errors and PdfExtractionError
    if the answer has no "text" field.
    """
    url = endpoint or pdf_endpoint()
    data = _read_bytes(source)

    log.debug("POST %s (%d bytes)", url, len(data))
    resp = requests.post(
        url,
        data=data,
        headers={"Content-Type": "application/pdf"},
        timeout=timeout,
    )
    resp.raise_for_status()

    try:
        payload = resp.json()
    except ValueError as exc:
        raise PdfExtractionError(f"Extraction endpoint returned invalid JSON: {exc}") from exc

    text = payload.get("text") if isinstance(payload, dict) else None
    if not isinstance(text, str):
        raise PdfExtractionError("Extraction endpoint response has no 'text' field")
    return text
