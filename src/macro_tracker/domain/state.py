"""Application state owned by the tracker service."""

from dataclasses import dataclass, field

from macro_tracker.domain.ledger import DailyRecord, WeightEntry
from macro_tracker.domain.profile import EMPTY_TARGETS, Profile, Targets


@dataclass
class AppSettings:
    """User-editable settings."""

    ai_api_key: str | None = None


@dataclass
class AppState:
    """Everything persisted between sessions."""

    selected_date: str
    profile: Profile | None = None
    targets: Targets = EMPTY_TARGETS
    ledger: dict[str, DailyRecord] = field(default_factory=dict)
    weight_history: list[WeightEntry] = field(default_factory=list)
    settings: AppSettings = field(default_factory=AppSettings)
