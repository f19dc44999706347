"""
Engine configuration.

Settings come from TOML (see utils.helpers.load_settings) and CLI flags;
this module turns them into validated EngineConfig objects. The ranking
engine assumes it only ever sees values that passed validation here.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from loguru import logger

MATCH_MODES = ("fuzzy", "exact")


class SettingsError(ValueError):
    """Raised when a configuration value is out of range."""


def parse_column_spec(spec: Any) -> Optional[tuple[int, ...]]:
    """
    Parse a column list such as "1,3" or [1, 3].

    Indices are 1-based, the way dmenu-style tools number columns.

    Returns:
        Tuple of indices, or None for an empty spec (meaning "all").

    Raises:
        SettingsError: on non-integer or < 1 entries
    """
    if spec is None:
        return None
    if isinstance(spec, str):
        parts = [p.strip() for p in spec.split(",") if p.strip()]
    else:
        parts = list(spec)
    if not parts:
        return None

    columns = []
    for part in parts:
        try:
            index = int(part)
        except (TypeError, ValueError):
            raise SettingsError(f"Invalid column specification: {spec!r}") from None
        if index < 1:
            raise SettingsError(f"Column indices start at 1, got {index}")
        columns.append(index)
    return tuple(columns)


@dataclass(frozen=True)
class DmenuConfig:
    """Column projection settings for dmenu mode."""
    delimiter: str = " "
    match_fields: Optional[tuple[int, ...]] = None
    display_fields: Optional[tuple[int, ...]] = None
    output_fields: Optional[tuple[int, ...]] = None

    def __post_init__(self):
        if not self.delimiter:
            raise SettingsError("Delimiter must not be empty")
        for name in ("match_fields", "display_fields", "output_fields"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, parse_column_spec(value))


@dataclass(frozen=True)
class EngineConfig:
    """Inputs the ranking engine consumes on every call."""
    prefix_depth: int = 3
    match_mode: str = "fuzzy"
    half_life_days: float = 3.0
    frecency_weight: float = 100.0
    dmenu: DmenuConfig = field(default_factory=DmenuConfig)

    def __post_init__(self):
        if isinstance(self.prefix_depth, bool) or not isinstance(self.prefix_depth, int):
            raise SettingsError(f"prefix_depth must be an integer, got {self.prefix_depth!r}")
        if self.prefix_depth < 0:
            raise SettingsError(f"prefix_depth must be >= 0, got {self.prefix_depth}")
        if self.match_mode not in MATCH_MODES:
            raise SettingsError(
                f"match_mode must be one of {', '.join(MATCH_MODES)}, got {self.match_mode!r}"
            )
        if self.half_life_days <= 0:
            raise SettingsError(f"half_life_days must be positive, got {self.half_life_days}")
        if self.frecency_weight < 0:
            raise SettingsError(f"frecency weight must be >= 0, got {self.frecency_weight}")

    @property
    def exact(self) -> bool:
        return self.match_mode == "exact"

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a copy with non-None overrides applied (CLI flags)."""
        dmenu_changes = {
            k: changes.pop(k)
            for k in ("delimiter", "match_fields", "display_fields", "output_fields")
            if k in changes
        }
        config = replace(self, **{k: v for k, v in changes.items() if v is not None})
        dmenu_changes = {k: v for k, v in dmenu_changes.items() if v is not None}
        if dmenu_changes:
            config = replace(config, dmenu=replace(config.dmenu, **dmenu_changes))
        return config

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "EngineConfig":
        """
        Build a validated config from a settings dictionary.

        Args:
            settings: Output of load_settings()

        Raises:
            SettingsError: if any value is out of range
        """
        general = settings.get("general", {})
        frecency = settings.get("frecency", {})
        dmenu = settings.get("dmenu", {})

        try:
            config = cls(
                prefix_depth=general.get("prefix_depth", 3),
                match_mode=str(general.get("match_mode", "fuzzy")).lower(),
                half_life_days=float(frecency.get("half_life_days", 3.0)),
                frecency_weight=float(frecency.get("weight", 100.0)),
                dmenu=DmenuConfig(
                    delimiter=dmenu.get("delimiter", " "),
                    match_fields=parse_column_spec(dmenu.get("match_nth")),
                    display_fields=parse_column_spec(dmenu.get("with_nth")),
                    output_fields=parse_column_spec(dmenu.get("accept_nth")),
                ),
            )
        except SettingsError:
            raise
        except (TypeError, ValueError) as e:
            raise SettingsError(str(e)) from e

        logger.debug(f"Engine config: {config}")
        return config

