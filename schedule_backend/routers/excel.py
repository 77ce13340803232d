import zipfile
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import ValidationError

from schedule_backend.config import settings
from schedule_backend.deps import get_canonical_spans, get_extractor
from schedule_backend.schemas.extraction import CanonicalSpanIn, FileInfo, GridIn, ParseData, ParseOut
from schedule_backend.utils.canonical_spans import CanonicalSpan, CanonicalSpanRegistry
from schedule_backend.utils.grid_extractor import GridBlockExtractor, GridFormatError
from schedule_backend.utils.grid_reader import read_grid

import logging
logger = logging.getLogger("schedule_backend.excel")


router = APIRouter(prefix="/excel", tags=["Excel"])


#timetable upload -> course groups
@router.post("/parse", response_model=ParseOut)
def parse_excel(
    file: UploadFile = File(...),
    extractor: GridBlockExtractor = Depends(get_extractor),
):
    filename = file.filename or ""
    ext = Path(filename).suffix.lower()
    if ext not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are allowed",
        )

    content = file.file.read()
    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(status_code=400, detail=f"File too large. Maximum size is {settings.MAX_UPLOAD_MB}MB.")
    file.file.seek(0)

    logger.info("Parsing timetable file %s (%d bytes)", filename, len(content))
    try:
        grid = read_grid(file.file, filename)
        result = extractor.extract(grid)
    except GridFormatError as e:
        raise HTTPException(status_code=400, detail={"message": "Excel parsing failed", "details": str(e)})
    except (ValueError, zipfile.BadZipFile) as e:
        # pandas / openpyxl reject corrupt or non-spreadsheet content with ValueError
        raise HTTPException(status_code=400, detail={"message": "Failed to read spreadsheet", "details": str(e)})

    logger.info("Parsed %d course groups from %s", len(result.course_groups), filename)
    return ParseOut(
        data=ParseData(
            parsing=result,
            file_info=FileInfo(
                original_name=filename,
                size=len(content),
                uploaded_at=datetime.now(timezone.utc).isoformat(),
            ),
        )
    )


@router.post("/extract", response_model=ParseOut)
def extract_grid(body: GridIn, extractor: GridBlockExtractor = Depends(get_extractor)):
    try:
        result = extractor.extract(body.grid)
    except GridFormatError as e:
        raise HTTPException(status_code=400, detail={"message": "Invalid grid", "details": str(e)})
    return ParseOut(data=ParseData(parsing=result))


@router.get("/canonical-spans")
def list_canonical_spans(registry: CanonicalSpanRegistry = Depends(get_canonical_spans)):
    return {"success": True, "data": {code: s.model_dump() for code, s in sorted(registry.table.items())}}


@router.put("/canonical-spans/{course_code}")
def update_canonical_spans(
    course_code: str,
    body: CanonicalSpanIn,
    registry: CanonicalSpanRegistry = Depends(get_canonical_spans),
):
    try:
        span = CanonicalSpan.model_validate(body.model_dump())
    except ValidationError:
        raise HTTPException(status_code=400, detail={"message": "Lecture + Lab spans must equal total spans"})

    code = registry.update(course_code, span)
    return {"success": True, "data": {"course_code": code, "spans": span.model_dump()}}
