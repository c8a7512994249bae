"""Line-level diff engine.

Computes a longest-common-subsequence alignment between two texts and
renders it with the ``++``/``--`` prefix convention used by ``groot show``.
"""

from itertools import groupby
from operator import itemgetter
from typing import Dict, List, NamedTuple, Tuple

from groot.constants import ADDED_PREFIX, REMOVED_PREFIX

UNCHANGED = "unchanged"
ADDED = "added"
REMOVED = "removed"

SEGMENT_KINDS = (UNCHANGED, ADDED, REMOVED)


class DiffSegment:
    """A maximal run of contiguous lines sharing one classification.

    Attributes:
        kind: One of "unchanged", "added", "removed"
        text: Concatenated lines, terminators included
    """

    def __init__(self, kind: str, text: str):
        if kind not in SEGMENT_KINDS:
            raise ValueError(f"Unknown segment kind: {kind}")
        self.kind = kind
        self.text = text

    def __repr__(self) -> str:
        return f"DiffSegment({self.kind}, {self.text!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiffSegment):
            return NotImplemented
        return self.kind == other.kind and self.text == other.text

    @property
    def lines(self) -> List[str]:
        return split_lines(self.text)


class RenderedLine(NamedTuple):
    """One display line: its segment kind and the prefixed text."""

    kind: str
    text: str


def split_lines(text: str) -> List[str]:
    """Split on "\\n", keeping terminators. A trailing partial line is kept."""
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def diff_lines(old_text: str, new_text: str) -> List[DiffSegment]:
    """Compute a minimal line-level edit script between two texts.

    Lines shared at the start and at the end of both texts are kept as
    unchanged runs without entering the LCS table. The differing middle is
    aligned with a suffix LCS table walked forward: equal lines are matched
    as soon as they line up, otherwise a removal is taken before an
    addition whenever both keep the LCS length. The result is deterministic.

    Args:
        old_text: Previous version
        new_text: New version

    Returns:
        Segments in order, adjacent lines of one kind merged
    """
    if old_text == new_text:
        return [DiffSegment(UNCHANGED, old_text)]

    old = split_lines(old_text)
    new = split_lines(new_text)
    n, m = len(old), len(new)

    limit = min(n, m)
    head = 0
    while head < limit and old[head] == new[head]:
        head += 1
    tail = 0
    while tail < limit - head and old[n - 1 - tail] == new[m - 1 - tail]:
        tail += 1

    ops = [(UNCHANGED, line) for line in old[:head]]
    ops.extend(_align(old[head:n - tail], new[head:m - tail]))
    ops.extend((UNCHANGED, line) for line in old[n - tail:])

    return _merge(ops)


def _align(old: List[str], new: List[str]) -> List[Tuple[str, str]]:
    n, m = len(old), len(new)

    # lcs[i][j] = LCS length of old[i:] and new[j:]
    lcs = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = lcs[i], lcs[i + 1]
        for j in range(m - 1, -1, -1):
            if old[i] == new[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    ops = []
    i = j = 0
    while i < n and j < m:
        if old[i] == new[j]:
            ops.append((UNCHANGED, old[i]))
            i += 1
            j += 1
        elif lcs[i + 1][j] >= lcs[i][j + 1]:
            ops.append((REMOVED, old[i]))
            i += 1
        else:
            ops.append((ADDED, new[j]))
            j += 1
    ops.extend((REMOVED, line) for line in old[i:])
    ops.extend((ADDED, line) for line in new[j:])
    return ops


def _merge(ops: List[Tuple[str, str]]) -> List[DiffSegment]:
    return [
        DiffSegment(kind, "".join(line for _, line in run))
        for kind, run in groupby(ops, key=itemgetter(0))
    ]


def render(segments: List[DiffSegment]) -> List[RenderedLine]:
    """Format segments for display, one entry per line.

    Unchanged lines pass through, added lines are prefixed with "++" and
    removed lines with "--". Line terminators are dropped.
    """
    prefixes = {UNCHANGED: "", ADDED: ADDED_PREFIX, REMOVED: REMOVED_PREFIX}
    rendered = []
    for segment in segments:
        prefix = prefixes[segment.kind]
        for line in segment.lines:
            rendered.append(RenderedLine(segment.kind, prefix + line.rstrip("\r\n")))
    return rendered


class DiffEngine:
    """Entry point bundling line diffing, rendering and summaries."""

    def diff_lines(self, old_text: str, new_text: str) -> List[DiffSegment]:
        return diff_lines(old_text, new_text)

    def render(self, segments: List[DiffSegment]) -> List[RenderedLine]:
        return render(segments)

    def summarize(self, segments: List[DiffSegment]) -> Dict[str, int]:
        """Count lines per segment kind.

        Returns:
            {"added": n, "removed": n, "unchanged": n}
        """
        counts = {kind: 0 for kind in SEGMENT_KINDS}
        for segment in segments:
            counts[segment.kind] += len(segment.lines)
        return counts

    def has_changes(self, segments: List[DiffSegment]) -> bool:
        return any(segment.kind != UNCHANGED for segment in segments)
