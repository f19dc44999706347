"""
App Source - Desktop entries as ranking candidates.

Desktop files are discovered and parsed elsewhere; this source takes the
parsed key/value mappings (keys as in the [Desktop Entry] group plus an
"id" for the desktop file id) and turns them into AppCandidates.

Entries marked NoDisplay or Hidden are skipped. With filter_desktop on,
OnlyShowIn/NotShowIn are checked against $XDG_CURRENT_DESKTOP.
"""

import os
import re
import threading
from typing import Iterable, Mapping, Optional

from loguru import logger

from ..candidates import AppCandidate

# Exec field codes from the desktop entry spec (%% is a literal percent)
_FIELD_CODE = re.compile(r"%[fFuUdDnNickvm]")


def strip_field_codes(command: str) -> str:
    """Remove %f/%U/... placeholders from an Exec value."""
    stripped = _FIELD_CODE.sub("", command).replace("%%", "%")
    return " ".join(stripped.split())


def extract_exec_name(command: str) -> str:
    """
    Executable name from a command line.

    "/usr/bin/firefox --new-window" -> "firefox"
    """
    parts = command.split()
    if not parts:
        return ""
    return parts[0].rsplit("/", 1)[-1]


def _as_list(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(";")
    return tuple(item.strip() for item in value if item and item.strip())


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


class AppSource:
    """Collect desktop entries as they're discovered."""

    name = "apps"

    def __init__(
        self,
        entries: Iterable[Mapping] = (),
        filter_desktop: bool = False,
        current_desktops: Optional[Iterable[str]] = None,
    ):
        self.filter_desktop = filter_desktop
        if current_desktops is None:
            current_desktops = [
                d for d in os.environ.get("XDG_CURRENT_DESKTOP", "").split(":") if d
            ]
        self.current_desktops = {d.lower() for d in current_desktops}

        self._lock = threading.Lock()
        self._candidates: list[AppCandidate] = []
        self._seen: set[str] = set()
        self.add_entries(entries)

    def candidates(self) -> list[AppCandidate]:
        """Snapshot of everything discovered so far."""
        with self._lock:
            return list(self._candidates)

    def add_entries(self, entries: Iterable[Mapping]) -> list[AppCandidate]:
        """
        Add parsed desktop entries.

        Safe to call from a discovery thread while the UI ranks. An id
        seen before is ignored, so earlier XDG directories take precedence.

        Returns:
            The candidates that were actually added
        """
        added = []
        for entry in entries:
            candidate = self.candidate_from_entry(entry)
            if candidate is None:
                continue
            with self._lock:
                if candidate.app_id in self._seen:
                    continue
                self._seen.add(candidate.app_id)
                self._candidates.append(candidate)
            added.append(candidate)
        return added

    def candidate_from_entry(self, entry: Mapping) -> Optional[AppCandidate]:
        """Convert one entry, or None if it should not be shown."""
        app_id = entry.get("id") or ""
        name = (entry.get("Name") or "").strip()
        if not app_id or not name:
            logger.warning(f"Skipping desktop entry without id or Name: {dict(entry)!r}")
            return None

        if _as_bool(entry.get("NoDisplay")) or _as_bool(entry.get("Hidden")):
            return None
        if self.filter_desktop and not self._shown_here(entry):
            return None

        command = strip_field_codes(entry.get("Exec") or "")
        return AppCandidate(
            app_id=app_id,
            name=name,
            exec_name=extract_exec_name(command),
            generic_name=(entry.get("GenericName") or "").strip(),
            keywords=_as_list(entry.get("Keywords")),
            categories=_as_list(entry.get("Categories")),
            description=(entry.get("Comment") or "").strip(),
            command=command,
            icon=entry.get("Icon") or None,
            terminal=_as_bool(entry.get("Terminal")),
        )

    def _shown_here(self, entry: Mapping) -> bool:
        only = {d.lower() for d in _as_list(entry.get("OnlyShowIn"))}
        hidden = {d.lower() for d in _as_list(entry.get("NotShowIn"))}
        if hidden & self.current_desktops:
            return False
        if only and not only & self.current_desktops:
            return False
        return True
