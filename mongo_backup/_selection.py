"""Resolution of free-form selection answers ("3", "alpha,beta", "all")."""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

ALL_KEYWORD = "all"

_INDEX_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Selection:
    """Ordered, deduplicated names picked from a candidate list.

    ``all_selected`` records that the user answered ``all``; callers use it
    to skip the finer-grained prompt for the next level (collections of a
    database chosen with ``all``).
    """
    names: Tuple[str, ...]
    all_selected: bool = False

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.names


def select_all(candidates: Sequence[str]) -> Selection:
    """Select every candidate, in candidate order."""
    return Selection(names=tuple(candidates), all_selected=True)


def resolve_selection(text: str, candidates: Sequence[str]) -> Optional[Selection]:
    """Resolve one line of user input against an ordered candidate list.

    Tokens are comma separated. A purely numeric token is a 1-based index
    into ``candidates``; any other token must match a candidate exactly.
    Unknown names and out-of-range indices are dropped.

    Returns:
        The resolved Selection, or None when nothing valid was chosen and
        the caller should ask again
    """
    if not candidates:
        return None

    answer = (text or "").strip()
    if answer.lower() == ALL_KEYWORD:
        return select_all(candidates)

    selected: List[str] = []
    for token in (part.strip() for part in answer.split(",")):
        if not token:
            continue
        if _INDEX_PATTERN.fullmatch(token):
            index = int(token)
            if 1 <= index <= len(candidates):
                name = candidates[index - 1]
            else:
                continue
        elif token in candidates:
            name = token
        else:
            continue

        if name not in selected:
            selected.append(name)

    if not selected:
        return None
    return Selection(names=tuple(selected))


def resolve_single(text: str, candidates: Sequence[str]) -> Optional[str]:
    """Resolve an answer that must name exactly one candidate.

    ``all`` and multi-valued answers are rejected.
    """
    selection = resolve_selection(text, candidates)
    if selection is None or len(selection) != 1 or selection.all_selected:
        return None
    return selection.names[0]
