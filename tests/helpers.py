from schedule_backend.schemas.extraction import SessionOut

WIDTH = 10


def row(*cells, width=WIDTH):
    cells = list(cells)
    return cells + [""] * (width - len(cells))


def session(day, start, end, span=1, session_type="lab", location="", instructor="", time_slot=None):
    return SessionOut(
        day_of_week=day,
        start_time=start,
        end_time=end,
        span=span,
        session_type=session_type,
        location=location,
        instructor=instructor,
        time_slot=time_slot,
    )
