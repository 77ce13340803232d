from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class Placement:
    """One session laid on the week grid; slots are 1-based and inclusive."""
    day: str
    start_slot: int
    end_slot: int
    label: str
    session_key: Tuple = ()


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # inclusive ranges
    return not (a_end < b_start or b_end < a_start)


def overlap_length(a: Placement, b: Placement) -> int:
    if a.day != b.day:
        return 0
    return max(0, min(a.end_slot, b.end_slot) - max(a.start_slot, b.start_slot) + 1)


def find_overlaps(placements: Iterable[Placement]) -> List[Tuple[Placement, Placement]]:
    """
    Per day: sort by start slot, then compare each placement with the ones
    starting before it ends. Every overlapping pair is reported once.
    Placements with the same non-empty session_key are the same class
    (co-taught groups) and never clash with each other.
    """
    by_day: Dict[str, List[Placement]] = defaultdict(list)
    for p in placements:
        by_day[p.day].append(p)

    pairs = []
    for day_items in by_day.values():
        day_items.sort(key=lambda p: (p.start_slot, p.end_slot))
        for i, a in enumerate(day_items):
            for b in day_items[i + 1:]:
                if b.start_slot > a.end_slot:
                    break
                if a.session_key and a.session_key == b.session_key:
                    continue
                if ranges_overlap(a.start_slot, a.end_slot, b.start_slot, b.end_slot):
                    pairs.append((a, b))
    return pairs
