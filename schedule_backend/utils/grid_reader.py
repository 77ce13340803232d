from pathlib import Path
from typing import BinaryIO, List

import pandas as pd

EXCEL_EXTENSIONS = {".xlsx", ".xls", ".xlsm"}


def to_str(v) -> str:
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return ""
    s = str(v).strip()
    return "" if s.lower() == "nan" else s


def dataframe_to_grid(df_raw: pd.DataFrame) -> List[List[str]]:
    """Headerless sheet -> rows of stripped strings, blanks as ""."""
    return [[to_str(v) for v in row] for row in df_raw.itertuples(index=False, name=None)]


def read_grid(file: BinaryIO, filename: str) -> List[List[str]]:
    """
    First sheet of an Excel workbook (or a CSV file) as a RawGrid.
    Merged cells come back as one value + blanks, which is what the
    extractor's span lookahead expects.
    """
    ext = Path(filename or "").suffix.lower()
    if ext == ".csv":
        df_raw = pd.read_csv(file, header=None, dtype=str, keep_default_na=False)
    elif ext in EXCEL_EXTENSIONS:
        df_raw = pd.read_excel(file, header=None, dtype=str, sheet_name=0)
    else:
        raise ValueError(f"Unsupported file type: {ext or filename}")
    return dataframe_to_grid(df_raw)
