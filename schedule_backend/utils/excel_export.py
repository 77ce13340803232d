from __future__ import annotations
from io import BytesIO
from datetime import datetime

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.styles import Font, Alignment, PatternFill

from schedule_backend.schemas.schedule import WeeklyTable

HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
LECTURE_FILL = PatternFill(fill_type="solid", fgColor="FFDDEBF7")
LAB_FILL = PatternFill(fill_type="solid", fgColor="FFE2EFDA")

DAY_NAMES_AR = {
    "Saturday": "السبت",
    "Sunday": "الأحد",
    "Monday": "الاثنين",
    "Tuesday": "الثلاثاء",
    "Wednesday": "الأربعاء",
    "Thursday": "الخميس",
    "Friday": "الجمعة",
}


def weekly_table_to_xlsx_bytes(table: WeeklyTable, sheet_name: str = "Schedule") -> bytes:
    """
    days down column A, the eight slots across row 1
    every session is one cell (3 lines) merged across its span
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]
    ws.sheet_view.rightToLeft = True

    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)

    ws.cell(row=1, column=1, value="اليوم / Day")
    for col_idx, label in enumerate(table.structure.time_slots, start=2):
        ws.cell(row=1, column=col_idx, value=label)
    for col_idx in range(1, len(table.structure.time_slots) + 2):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = header_font
        cell.alignment = center
        cell.fill = HEADER_FILL

    for row_idx, day in enumerate(table.structure.days, start=2):
        day_cell = ws.cell(row=row_idx, column=1, value=f"{DAY_NAMES_AR.get(day, day)}\n{day}")
        day_cell.font = header_font
        day_cell.alignment = center

        cells = table.schedule.get(day) or []
        for slot_idx, block in enumerate(cells):
            if block is None or block.is_continuation:
                continue
            col_idx = slot_idx + 2
            cell = ws.cell(row=row_idx, column=col_idx, value="\n".join(block.display_lines()))
            cell.alignment = center
            cell.fill = LECTURE_FILL if block.session_metadata.session_type == "lecture" else LAB_FILL

            # merge only over the continuation cells that really follow
            last = slot_idx
            while last + 1 < len(cells) and cells[last + 1] is not None and cells[last + 1].is_continuation:
                last += 1
            if last > slot_idx:
                ws.merge_cells(start_row=row_idx, start_column=col_idx, end_row=row_idx, end_column=last + 2)

        ws.row_dimensions[row_idx].height = 60

    ws.column_dimensions["A"].width = 16
    for col_idx in range(2, len(table.structure.time_slots) + 2):
        ws.column_dimensions[get_column_letter(col_idx)].width = 22

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def make_filename(prefix: str = "schedule") -> str:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{ts}.xlsx"
