import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

COURSE_CODE_RE = re.compile(r"^([A-Z]{2,4})\s*(\d{3})$")                      # "EEC 113"
SHARED_GROUP_RE = re.compile(r"^([A-Z]{2,4})\s*(\d{3})(\d{2}),(\d{2})$")       # "EEC 12305,06"
SINGLE_WITH_ROOM_RE = re.compile(r"^([A-Z]{2,4})\s*(\d{3})(\d{2})\s+(C\d{3,4})$")  # "EEC 11302 C401"
FALLBACK_RE = re.compile(r"([A-Z]{2,4})\s*(\d{3,5})")
CODE_PREFIX_RE = re.compile(r"^[A-Z]{2,4}\s*\d")
ROOM_RE = re.compile(r"\bC\d{3,4}\b")

SELECTION_RE = re.compile(r"^([A-Z]{2,4})\s*(\d{3})(\d{2})?((?:,\d{2})*)$")


@dataclass(frozen=True)
class Shared:
    course_code: str
    groups: Tuple[str, ...]
    room: str = ""


@dataclass(frozen=True)
class SingleWithRoom:
    course_code: str
    groups: Tuple[str, ...]
    room: str = ""


@dataclass(frozen=True)
class Basic:
    course_code: str
    groups: Tuple[str, ...]
    room: str = ""


@dataclass(frozen=True)
class Fallback:
    course_code: str
    groups: Tuple[str, ...]
    room: str = ""


ParsedCell = Union[Shared, SingleWithRoom, Basic, Fallback, None]


def pad_group(group) -> str:
    return str(group).strip().zfill(2)


def _match_shared(text: str) -> ParsedCell:
    m = SHARED_GROUP_RE.match(text)
    if not m:
        return None
    dept, num, g1, g2 = m.groups()
    return Shared(f"{dept} {num}", (g1, g2))


def _match_single_with_room(text: str) -> ParsedCell:
    m = SINGLE_WITH_ROOM_RE.match(text)
    if not m:
        return None
    dept, num, group, room = m.groups()
    return SingleWithRoom(f"{dept} {num}", (group,), room)


def _match_basic(text: str) -> ParsedCell:
    # "EEC 113": no separate group, the last two digits double as the group
    m = COURSE_CODE_RE.match(text)
    if not m:
        return None
    dept, num = m.groups()
    return Basic(f"{dept} {num}", (num[-2:],))


def _match_fallback(text: str) -> ParsedCell:
    m = FALLBACK_RE.search(text)
    if not m:
        return None
    dept, digits = m.groups()
    if len(digits) == 5:
        return Fallback(f"{dept} {digits[:3]}", (digits[3:],))
    return Fallback(f"{dept} {digits}", (digits[-2:],))


CELL_MATCHERS: Tuple[Callable[[str], ParsedCell], ...] = (
    _match_shared,
    _match_single_with_room,
    _match_basic,
    _match_fallback,
)


def parse_course_cell(text: Optional[str]) -> ParsedCell:
    """Try every matcher in order; the first hit wins, no hit -> None."""
    text = (text or "").strip()
    if not text:
        return None
    for matcher in CELL_MATCHERS:
        parsed = matcher(text)
        if parsed is not None:
            return parsed
    return None


def starts_course_block(text: str) -> bool:
    """A cell that opens a new block; used to stop a horizontal span."""
    return parse_course_cell(text) is not None


def find_room(text: Optional[str]) -> str:
    m = ROOM_RE.search(text or "")
    return m.group(0) if m else ""


def is_room(text: str) -> bool:
    return bool(ROOM_RE.search(text))


def looks_like_course_name(text: str) -> bool:
    return bool(text) and not (
        COURSE_CODE_RE.match(text) or is_room(text) or CODE_PREFIX_RE.match(text)
    )


def normalize_course_code(text: Optional[str]) -> str:
    """
    "eec101" -> "EEC 101"
    " EEC   101 " -> "EEC 101"
    anything else: upper-cased, whitespace collapsed
    """
    s = " ".join((text or "").split()).upper()
    m = COURSE_CODE_RE.match(s)
    if m:
        return f"{m.group(1)} {m.group(2)}"
    return s


def parse_selection_text(text: str) -> Tuple[str, Optional[str]]:
    """
    "EEC 101"      -> ("EEC 101", None)
    "EEC 10105"    -> ("EEC 101", "05")
    "EEC 10105,06" -> ("EEC 101", "05")
    other text     -> (normalized text, None)
    """
    s = " ".join(text.split()).upper()
    m = SELECTION_RE.match(s)
    if not m:
        return normalize_course_code(s), None
    dept, num, group, _rest = m.groups()
    return f"{dept} {num}", group
