"""Wikilink parsing and link-set reconciliation helpers.

Link tokens use ``[[target]]`` or ``[[target|display]]``. Anything that does not
match that shape (unclosed brackets, nested brackets, an empty target) is left
as plain text; there is no escape syntax for a literal ``]]``.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, List, Optional, Tuple

# Target may not contain brackets or a pipe; display may not contain brackets.
WIKILINK_PATTERN = re.compile(r"\[\[([^\[\]|]+)(?:\|([^\[\]]+))?\]\]")


@dataclass(frozen=True)
class WikiLink:
    """A single link token occurrence inside note content."""

    target: str
    display: Optional[str]
    start: int
    end: int

    @property
    def text(self) -> str:
        """Text a reader sees for this token."""
        return self.display or self.target


@dataclass(frozen=True)
class LinkSyncPlan:
    """Edge operations that bring a persisted link set in line with content."""

    desired: Tuple[str, ...]
    to_delete: Tuple[str, ...]
    to_insert: Tuple[str, ...]

    @property
    def is_noop(self) -> bool:
        return not self.to_delete and not self.to_insert


def parse_wikilinks(content: str | None) -> List[WikiLink]:
    """Return every well-formed link token in left-to-right order."""
    links: List[WikiLink] = []
    for match in WIKILINK_PATTERN.finditer(content or ""):
        target = match.group(1).strip()
        if not target:
            continue
        display = match.group(2)
        display = display.strip() if display is not None else None
        links.append(WikiLink(target, display or None, match.start(), match.end()))
    return links


def extract_wikilinks(content: str | None) -> List[str]:
    """Extract distinct link targets, preserving first-occurrence order."""
    seen: dict[str, None] = {}
    for link in parse_wikilinks(content):
        if link.target not in seen:
            seen[link.target] = None
    return list(seen.keys())


def plan_link_sync(current_targets: Iterable[str], content: str | None) -> LinkSyncPlan:
    """
    Diff the persisted targets of one source against its current content.

    Targets no longer mentioned are deleted; newly mentioned targets are
    inserted in the order they first appear in the content.
    """
    desired = extract_wikilinks(content)
    desired_set = set(desired)
    current = list(dict.fromkeys(current_targets))
    current_set = set(current)
    return LinkSyncPlan(
        desired=tuple(desired),
        to_delete=tuple(sorted(t for t in current if t not in desired_set)),
        to_insert=tuple(t for t in desired if t not in current_set),
    )


def unlink_references(content: str | None, target: str, fallback: str | None = None) -> str:
    """
    Replace every link token pointing at ``target`` with plain text.

    The token's display text is kept when present; otherwise ``fallback`` (or
    the target itself) is used.
    """
    if not content:
        return content or ""
    replacement = fallback or target
    pieces: List[str] = []
    cursor = 0
    for link in parse_wikilinks(content):
        if link.target != target:
            continue
        pieces.append(content[cursor:link.start])
        pieces.append(link.display or replacement)
        cursor = link.end
    if not pieces:
        return content
    pieces.append(content[cursor:])
    return "".join(pieces)


__all__ = [
    "WIKILINK_PATTERN",
    "WikiLink",
    "LinkSyncPlan",
    "parse_wikilinks",
    "extract_wikilinks",
    "plan_link_sync",
    "unlink_references",
]
