from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from schedule_backend.schemas.schedule import ExportIn
from schedule_backend.utils.excel_export import make_filename, weekly_table_to_xlsx_bytes

import logging
logger = logging.getLogger("schedule_backend.export")


router = APIRouter(prefix="/export", tags=["Export"])


@router.post("/excel")
def export_schedule_excel(body: ExportIn):
    """
    Weekly table from /schedule/generate-personalized -> .xlsx download
    """
    xlsx_bytes = weekly_table_to_xlsx_bytes(body.weekly_table, sheet_name="Schedule")
    filename = make_filename("schedule")
    logger.info("Exported schedule %s (%d bytes)", filename, len(xlsx_bytes))

    return StreamingResponse(
        iter([xlsx_bytes]),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
