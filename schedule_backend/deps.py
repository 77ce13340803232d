from functools import lru_cache

from fastapi import Depends

from schedule_backend.config import settings
from schedule_backend.utils.canonical_spans import CanonicalSpanRegistry, load_canonical_spans
from schedule_backend.utils.grid_extractor import GridBlockExtractor
from schedule_backend.utils.schedule_assembler import ScheduleAssembler
from schedule_backend.utils.timeslots import DEFAULT_LAYOUT, TimetableLayout


def get_layout() -> TimetableLayout:
    return DEFAULT_LAYOUT


@lru_cache
def get_canonical_spans() -> CanonicalSpanRegistry:
    # one live table per process; PUT /excel/canonical-spans/{code} edits it
    return CanonicalSpanRegistry(load_canonical_spans(settings.CANONICAL_SPANS_FILE))


def get_extractor(layout: TimetableLayout = Depends(get_layout)) -> GridBlockExtractor:
    return GridBlockExtractor(layout=layout)


def get_assembler(
    layout: TimetableLayout = Depends(get_layout),
    spans: CanonicalSpanRegistry = Depends(get_canonical_spans),
) -> ScheduleAssembler:
    return ScheduleAssembler(layout=layout, true_spans=spans.totals())
