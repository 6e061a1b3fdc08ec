"""FastAPI surface for the Certificate of Currency verifier."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from coc_verifier.engines.abn_validator import format_abn, validate_abn
from coc_verifier.engines.fraud_analyzer import compute_document_hash
from coc_verifier.models.fraud import DocumentMetadata, PriorSubmission
from coc_verifier.plugins.exif_reader import read_image_metadata
from coc_verifier.plugins.pdf_metadata import read_pdf_metadata
from coc_verifier.utils.config import Config
from coc_verifier.utils.errors import (
    DocumentProcessingError,
    InvalidInputError,
    VerificationError,
)
from coc_verifier.utils.logging import setup_logging
from coc_verifier.verifier import (
    CertificateVerifier,
    get_verifier,
    parse_extracted_data,
    run_verification,
)

ALLOWED_IMAGE_TYPES = {"png", "jpg", "jpeg", "tif", "tiff", "webp"}
ALLOWED_DOC_TYPES = {"pdf"}

config = Config.load()
MAX_FILE_SIZE_MB = config.server.max_file_size_mb

setup_logging(config.logging.level, config.logging.format, config.logging.file)
logger = logging.getLogger(__name__)

app = FastAPI(title=config.server.title)


def verifier_dependency() -> CertificateVerifier:
    return get_verifier()


@app.exception_handler(VerificationError)
async def verification_error_handler(request: Request, exc: VerificationError) -> JSONResponse:
    if isinstance(exc, InvalidInputError):
        status_code = 400
    elif isinstance(exc, DocumentProcessingError):
        status_code = 422
    else:
        status_code = 500
    logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(status_code=status_code, content={"error": exc.to_dict()})


@app.post("/api/verify")
async def verify(
    payload: Dict[str, Any] = Body(...),
    verifier: CertificateVerifier = Depends(verifier_dependency),
) -> JSONResponse:
    result = run_verification(payload, verifier=verifier)
    return JSONResponse(jsonable_encoder(result))


@app.post("/api/fraud-analysis")
async def fraud_analysis(
    payload: Dict[str, Any] = Body(...),
    verifier: CertificateVerifier = Depends(verifier_dependency),
) -> JSONResponse:
    data = parse_extracted_data(payload)
    result = verifier.analyzer.analyze(
        data,
        metadata=DocumentMetadata.from_dict(payload.get("metadata")),
        file_name=payload.get("file_name", payload.get("fileName")),
        prior_submissions=PriorSubmission.list_from_dicts(
            payload.get("prior_submissions", payload.get("priorSubmissions"))
        ),
        document_hash=payload.get("document_hash", payload.get("documentHash")),
    )
    return JSONResponse(jsonable_encoder(result.to_dict()))


@app.post("/api/documents/metadata")
async def document_metadata(file: UploadFile = File(...)) -> JSONResponse:
    data = await file.read()
    filename = file.filename or "upload"
    if not data:
        raise HTTPException(status_code=400, detail=f"{filename} is empty.")
    if len(data) > MAX_FILE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"{filename} exceeds the per-file limit of {MAX_FILE_SIZE_MB} MB.",
        )

    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension in ALLOWED_DOC_TYPES:
        metadata = read_pdf_metadata(data, filename=filename)
    elif extension in ALLOWED_IMAGE_TYPES:
        metadata = read_image_metadata(data, filename=filename)
    else:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {filename}")

    return JSONResponse({
        "file_name": filename,
        "document_hash": compute_document_hash(data),
        "metadata": metadata.to_dict(),
    })


@app.get("/api/abn/{abn}")
async def check_abn(abn: str) -> JSONResponse:
    result = validate_abn(abn)
    body = {"abn": format_abn(abn), **result.to_dict()}
    return JSONResponse(status_code=200 if result.valid else 400, content=body)


@app.get("/health")
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
