"""
Weekly pick rules

A week is played under a ``WeekRules`` object: how many picks in total, how
many per slot, whether the Thursday/Monday slots exist and how many locks.
The season's final regular-season week drops the special slots.
"""

from typing import Dict

from flask import current_app, has_app_context
from pydantic import BaseModel, ConfigDict, Field

from pickem.utils.errors import RejectionReason
from pickem.utils.slots import Slot, classify_slot

DEFAULT_FINAL_WEEK = 18

# Reason reported when a slot goes over its cap
SLOT_CAP_REASONS = {
    Slot.THURSDAY: RejectionReason.THURSDAY_CAP_EXCEEDED,
    Slot.MONDAY: RejectionReason.MONDAY_CAP_EXCEEDED,
    Slot.FLEX: RejectionReason.FLEX_CAP_EXCEEDED,
}

# Order in which slot caps are checked
SLOT_ORDER = (Slot.THURSDAY, Slot.MONDAY, Slot.FLEX)


class WeekRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "standard"
    max_total: int = Field(default=5, ge=0)
    special_slots: bool = True
    slot_caps: Dict[Slot, int] = Field(
        default_factory=lambda: {Slot.THURSDAY: 1, Slot.MONDAY: 1, Slot.FLEX: 3}
    )
    max_locks: int = Field(default=1, ge=0)

    def slot_for(self, kickoff, tz=None):
        """Slot a game counts against under these rules"""
        if not self.special_slots:
            return Slot.FLEX
        return classify_slot(kickoff, tz)

    def cap_for(self, slot):
        return self.slot_caps.get(slot, 0)


DEFAULT_RULES = WeekRules()

FINAL_WEEK_RULES = WeekRules(
    name="final-week",
    special_slots=False,
    slot_caps={Slot.FLEX: 5},
)


def get_final_week():
    if has_app_context():
        return current_app.config.get("PICKEM_FINAL_WEEK", DEFAULT_FINAL_WEEK)
    return DEFAULT_FINAL_WEEK


def rules_for_week(week, final_week=None):
    """Rules a given week is played under"""
    if final_week is None:
        final_week = get_final_week()

    if week == final_week:
        return FINAL_WEEK_RULES
    return DEFAULT_RULES


def rejection_message(reason, rules=DEFAULT_RULES):
    """User-facing message for a rejection reason under the given rules"""
    reason = RejectionReason(reason)
    messages = {
        RejectionReason.TOTAL_CAP_EXCEEDED: f"You can only pick up to {rules.max_total} games total.",
        RejectionReason.THURSDAY_CAP_EXCEEDED: f"Only {rules.cap_for(Slot.THURSDAY)} Thursday pick allowed.",
        RejectionReason.MONDAY_CAP_EXCEEDED: f"Only {rules.cap_for(Slot.MONDAY)} Monday pick allowed.",
        RejectionReason.FLEX_CAP_EXCEEDED: f"Only {rules.cap_for(Slot.FLEX)} flex picks allowed.",
        RejectionReason.LOCK_NOT_IN_SELECTION: "Your lock must be one of your picks.",
        RejectionReason.LOCK_CAP_EXCEEDED: f"Only {rules.max_locks} lock allowed per week.",
        RejectionReason.GAME_ALREADY_STARTED: "That game has already started.",
        RejectionReason.NO_PICKS_SELECTED: "Please select at least one game.",
    }
    return messages[reason]
