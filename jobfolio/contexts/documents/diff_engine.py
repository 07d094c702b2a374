"""
Line-based comparison of two document versions, for display only.

Lines are aligned with difflib.SequenceMatcher; no attempt is made to
understand the LaTeX structure.
"""

import difflib
from dataclasses import dataclass, field
from typing import List


@dataclass
class DiffChunk:
    """Run of consecutive lines with the same change kind ("added", "removed", "unchanged")."""

    kind: str
    lines: List[str]


@dataclass
class DiffResult:
    """Aligned chunks plus per-kind line counts."""

    changes: List[DiffChunk] = field(default_factory=list)
    added_lines: int = 0
    removed_lines: int = 0
    unchanged_lines: int = 0

    @property
    def has_changes(self) -> bool:
        return self.added_lines > 0 or self.removed_lines > 0


def compare_versions(old_content: str, new_content: str) -> DiffResult:
    """
    Compare two texts line by line.

    Replaced runs are reported as a removed chunk followed by an added chunk.

    Example:
        >>> result = compare_versions("a\\nb\\n", "a\\nc\\n")
        >>> result.added_lines, result.removed_lines, result.unchanged_lines
        (1, 1, 1)
    """
    old_lines = old_content.splitlines()
    new_lines = new_content.splitlines()

    # No junk filtering: every line takes part in the alignment
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    result = DiffResult()
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            result.changes.append(DiffChunk("unchanged", old_lines[i1:i2]))
            result.unchanged_lines += i2 - i1
            continue

        if tag in ("replace", "delete"):
            result.changes.append(DiffChunk("removed", old_lines[i1:i2]))
            result.removed_lines += i2 - i1
        if tag in ("replace", "insert"):
            result.changes.append(DiffChunk("added", new_lines[j1:j2]))
            result.added_lines += j2 - j1

    return result


def format_diff_for_display(changes: List[DiffChunk]) -> str:
    """
    Render chunks as text with "+ ", "- " or "  " line prefixes.

    Empty lines are dropped from the rendering.
    """
    prefixes = {"added": "+ ", "removed": "- ", "unchanged": "  "}
    rendered = []
    for chunk in changes:
        prefix = prefixes[chunk.kind]
        rendered.extend(f"{prefix}{line}" for line in chunk.lines if line)
    return "\n".join(rendered)


def get_diff_stats(result: DiffResult) -> str:
    """
    One-line summary, e.g. "+3 additions, -1 deletions" or "No changes".
    """
    if not result.has_changes:
        return "No changes"

    parts = []
    if result.added_lines > 0:
        parts.append(f"+{result.added_lines} additions")
    if result.removed_lines > 0:
        parts.append(f"-{result.removed_lines} deletions")
    return ", ".join(parts)
