import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, model_validator

from schedule_backend.utils.cell_patterns import normalize_course_code

logger = logging.getLogger("schedule_backend.canonical_spans")


class CanonicalSpan(BaseModel):
    model_config = ConfigDict(frozen=True)

    lecture: int
    lab: int = 0
    total: int

    @model_validator(mode="before")
    @classmethod
    def _from_bare_total(cls, data):
        # 3 -> lecture-only total; missing total -> lecture + lab
        if isinstance(data, int) and not isinstance(data, bool):
            return {"lecture": data, "lab": 0, "total": data}
        if isinstance(data, dict) and "total" not in data:
            lecture, lab = data.get("lecture", 0), data.get("lab", 0)
            if isinstance(lecture, int) and isinstance(lab, int):
                data = {**data, "total": lecture + lab}
        return data

    @model_validator(mode="after")
    def _parts_sum_to_total(self):
        if self.lecture + self.lab != self.total:
            raise ValueError("Lecture + Lab spans must equal total spans")
        return self


SpanTable = TypeAdapter(Dict[str, CanonicalSpan])


BUILTIN_SPANS: Mapping[str, CanonicalSpan] = MappingProxyType({
    "EEC 101": CanonicalSpan(lecture=2, lab=1, total=3),
    "EEC 113": CanonicalSpan(lecture=2, lab=1, total=3),
    "EEC 121": CanonicalSpan(lecture=2, lab=3, total=5),
    "EEC 125": CanonicalSpan(lecture=2, lab=3, total=5),
    "EEC 142": CanonicalSpan(lecture=3, lab=3, total=6),
    "EEC 212": CanonicalSpan(lecture=3, lab=2, total=5),
    "EEC 284": CanonicalSpan(lecture=2, lab=2, total=4),
})


def load_canonical_spans(path: Optional[str] = None) -> Mapping[str, CanonicalSpan]:
    """
    Built-in table, extended/overridden by the JSON file at `path` if given.
    A malformed file raises pydantic's ValidationError (a ValueError).
    """
    table: Dict[str, CanonicalSpan] = dict(BUILTIN_SPANS)
    if path:
        loaded = SpanTable.validate_json(Path(path).read_text(encoding="utf-8"))
        for code, span in loaded.items():
            table[normalize_course_code(code)] = span
        logger.info("Loaded %d canonical spans from %s", len(loaded), path)
    return MappingProxyType(table)


def expected_totals(table: Mapping[str, CanonicalSpan]) -> Mapping[str, int]:
    """course_code -> expected total span, the only number the assembler needs."""
    return MappingProxyType({code: span.total for code, span in table.items()})


class CanonicalSpanRegistry:
    """
    The live span table of the running app. Updates swap in a new read-only
    mapping, so a table handed out earlier never changes under its reader.
    """

    def __init__(self, table: Mapping[str, CanonicalSpan] = BUILTIN_SPANS):
        self._table: Mapping[str, CanonicalSpan] = MappingProxyType(dict(table))

    @property
    def table(self) -> Mapping[str, CanonicalSpan]:
        return self._table

    def update(self, course_code: str, span: CanonicalSpan) -> str:
        code = normalize_course_code(course_code)
        table = dict(self._table)
        table[code] = span
        self._table = MappingProxyType(table)
        logger.info("Canonical span for %s set to %s", code, span.model_dump())
        return code

    def totals(self) -> Mapping[str, int]:
        return expected_totals(self._table)
