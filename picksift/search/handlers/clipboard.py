"""
Clipboard Source - cclip history rows as ranking candidates.

Rows come from `cclip list rowid,mime_type,preview,tag`, one per line,
tab separated; tags are comma separated. Older cclip versions don't know
the tag field, in which case the list is fetched again without it.

Requires: cclip (https://github.com/heather7283/cclip)
"""

import subprocess
from typing import Iterable, Optional

from loguru import logger

from ..candidates import ClipCandidate

LIST_FIELDS = "rowid,mime_type,preview,tag"
LIST_FIELDS_NO_TAG = "rowid,mime_type,preview"


class ClipboardError(RuntimeError):
    """cclip is missing or failed."""


def parse_line(line: str) -> ClipCandidate:
    """
    Parse one `cclip list` line.

    Raises:
        ValueError: if the line has fewer than three fields
    """
    parts = line.rstrip("\r\n").split("\t", 3)
    if len(parts) < 3:
        raise ValueError(f"expected at least 3 tab-separated fields, got {len(parts)}")

    tags = ()
    if len(parts) == 4:
        tags = tuple(tag.strip() for tag in parts[3].split(",") if tag.strip())

    return ClipCandidate(rowid=parts[0], mime_type=parts[1], preview=parts[2], tags=tags)


class ClipboardSource:
    """Clipboard history, optionally restricted to one tag."""

    name = "clip"

    def __init__(self, tag: Optional[str] = None):
        self.tag = tag

    def from_lines(self, lines: Iterable[str]) -> list[ClipCandidate]:
        """Parse rows, skipping malformed ones and applying the tag filter."""
        candidates = []
        for line in lines:
            if not line.strip():
                continue
            try:
                candidate = parse_line(line)
            except ValueError as e:
                logger.warning(f"Failed to parse cclip line {line!r}: {e}")
                continue
            if self.tag and self.tag not in candidate.tags:
                continue
            candidates.append(candidate)
        return candidates

    def load(self) -> list[ClipCandidate]:
        """
        Fetch the clipboard history from cclip.

        Raises:
            ClipboardError: if cclip is not installed or exits non-zero
        """
        result = self._run_list(LIST_FIELDS)
        if result.returncode != 0 and "invalid field: tag" in result.stderr:
            logger.debug("cclip has no tag support, listing without tags")
            result = self._run_list(LIST_FIELDS_NO_TAG)

        if result.returncode != 0:
            raise ClipboardError(f"cclip list failed: {result.stderr.strip()}")

        return self.from_lines(result.stdout.splitlines())

    def _run_list(self, fields: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["cclip", "list", fields],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except FileNotFoundError:
            raise ClipboardError("cclip not found, is it installed?") from None
        except subprocess.TimeoutExpired:
            raise ClipboardError("cclip list timed out") from None
