"""
Pick validation for the Spread Pick'em application

Two entry points share the same rules: ``toggle_pick``/``toggle_lock`` check
picks one at a time as a member builds a selection, and
``validate_submission`` re-checks a complete set at submit time (picks may
also arrive in bulk without passing through the incremental path).

Neither raises for a rejected pick; they return a ``ValidationResult``.
Unknown games and teams that are not playing in the game are caller errors
and raise ``MalformedInputError``.
"""

from collections import Counter
from typing import Optional

from pydantic import BaseModel, ConfigDict

from pickem.schemas import PickSelection
from pickem.utils.errors import MalformedInputError, RejectionReason
from pickem.utils.logging_config import get_logger
from pickem.utils.rules import (
    DEFAULT_RULES,
    SLOT_CAP_REASONS,
    SLOT_ORDER,
    rejection_message,
)
from pickem.utils.timezone_utils import get_utc_time, has_kickoff_passed

logger = get_logger(__name__)


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    accepted: bool
    selection: PickSelection
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    def to_dict(self):
        data = {"accepted": self.accepted, "resultingSet": self.selection.to_dict()}
        if self.reason is not None:
            data["reason"] = self.reason.value
            data["message"] = self.message
        return data


def _accept(selection):
    return ValidationResult(accepted=True, selection=selection)


def _reject(reason, selection, rules):
    logger.debug(f"Pick rejected: {reason.value}")
    return ValidationResult(
        accepted=False,
        selection=selection,
        reason=reason,
        message=rejection_message(reason, rules),
    )


def _game_for(games, game_id):
    game = games.get(game_id)
    if game is None:
        raise MalformedInputError(f"Unknown game {game_id!r} for this week")
    return game


def _check_team(game, team):
    team = (team or "").strip()
    if not game.has_team(team):
        raise MalformedInputError(
            f"{team!r} is not playing in {game.away_team} @ {game.home_team}"
        )
    return team


def count_slots(games, picks, rules=DEFAULT_RULES, tz=None):
    """Count picks per slot

    Args:
        games: Mapping of game id -> GameRecord
        picks: Iterable of game ids
        rules: WeekRules deciding whether special slots exist
        tz: Timezone for kickoff weekdays (default: app timezone)
    """
    counts = Counter()
    for game_id in picks:
        game = _game_for(games, game_id)
        counts[rules.slot_for(game.kickoff, tz)] += 1
    return counts


def check_caps(games, picks, rules=DEFAULT_RULES, tz=None):
    """Return the first cap the pick set breaks, or None if it fits"""
    if len(picks) > rules.max_total:
        return RejectionReason.TOTAL_CAP_EXCEEDED

    counts = count_slots(games, picks, rules, tz)
    for slot in SLOT_ORDER:
        if counts[slot] > rules.cap_for(slot):
            return SLOT_CAP_REASONS[slot]
    return None


def toggle_pick(
    games, selection, game_id, team, rules=DEFAULT_RULES, now=None, existing=None, tz=None
):
    """
    Add, swap or remove one pick in a selection.

    Picking the team that is already selected for a game removes it. Picking
    the other team of a selected game swaps the team. Anything else is an
    addition and is checked against the resulting set (existing picks
    included); a rejected addition leaves the selection unchanged.

    Args:
        games: Mapping of game id -> GameRecord for the week
        selection: Current PickSelection
        game_id: Game being toggled
        team: Team being picked
        rules: WeekRules for the week
        now: Instant used for the kickoff cutoff (default: current time)
        existing: Mapping of game id -> team already submitted this week
        tz: Timezone for kickoff weekdays

    Returns:
        ValidationResult
    """
    game = _game_for(games, game_id)
    team = _check_team(game, team)
    existing = existing or {}

    if selection.picks.get(game_id) == team:
        return _accept(selection.without_pick(game_id))

    if has_kickoff_passed(game.kickoff, now or get_utc_time()):
        return _reject(RejectionReason.GAME_ALREADY_STARTED, selection, rules)

    candidate = selection.with_pick(game_id, team)
    resulting = dict(existing)
    resulting.update(candidate.picks)

    reason = check_caps(games, resulting, rules, tz)
    if reason is not None:
        return _reject(reason, selection, rules)

    return _accept(candidate)


def toggle_lock(games, selection, game_id, rules=DEFAULT_RULES, now=None, existing=None):
    """Set the lock on a selected game, or clear it if it is already there"""
    existing = existing or {}

    if game_id is None or selection.lock == game_id:
        return _accept(selection.with_lock(None))

    if game_id not in selection.picks and game_id not in existing:
        return _reject(RejectionReason.LOCK_NOT_IN_SELECTION, selection, rules)

    game = _game_for(games, game_id)
    if has_kickoff_passed(game.kickoff, now or get_utc_time()):
        return _reject(RejectionReason.GAME_ALREADY_STARTED, selection, rules)

    return _accept(selection.with_lock(game_id))


def validate_submission(
    games,
    picks,
    locks=(),
    rules=DEFAULT_RULES,
    now=None,
    existing=None,
    existing_lock=None,
    tz=None,
):
    """
    Validate a complete pick set before it is written.

    Args:
        games: Mapping of game id -> GameRecord for the week
        picks: Mapping of game id -> team being submitted
        locks: Game ids flagged as locks in the submission
        rules: WeekRules for the week
        now: Submission instant (default: current time, read on each call)
        existing: Mapping of game id -> team already stored for this user/week
        existing_lock: Game id currently stored as the lock, if any
        tz: Timezone for kickoff weekdays

    Returns:
        ValidationResult whose selection holds the normalized picks and lock
    """
    if now is None:
        now = get_utc_time()
    existing = dict(existing or {})

    normalized = {}
    for game_id, team in picks.items():
        normalized[game_id] = _check_team(_game_for(games, game_id), team)

    lock_ids = list(dict.fromkeys(gid for gid in locks if gid is not None))
    lock = lock_ids[0] if lock_ids else None
    selection = PickSelection(picks=normalized, lock=lock)

    if not normalized and lock is None:
        return _reject(RejectionReason.NO_PICKS_SELECTED, selection, rules)

    for game_id, team in normalized.items():
        # Resubmitting an unchanged pick is allowed after kickoff
        if existing.get(game_id) == team:
            continue
        if has_kickoff_passed(games[game_id].kickoff, now):
            return _reject(RejectionReason.GAME_ALREADY_STARTED, selection, rules)

    resulting = dict(existing)
    resulting.update(normalized)

    reason = check_caps(games, resulting, rules, tz)
    if reason is not None:
        return _reject(reason, selection, rules)

    if len(lock_ids) > rules.max_locks:
        return _reject(RejectionReason.LOCK_CAP_EXCEEDED, selection, rules)

    if lock is not None and lock != existing_lock:
        if lock not in resulting:
            return _reject(RejectionReason.LOCK_NOT_IN_SELECTION, selection, rules)
        if has_kickoff_passed(_game_for(games, lock).kickoff, now):
            return _reject(RejectionReason.GAME_ALREADY_STARTED, selection, rules)
        # Moving the lock off a game that has kicked off changes that pick
        if existing_lock is not None and has_kickoff_passed(
            _game_for(games, existing_lock).kickoff, now
        ):
            return _reject(RejectionReason.GAME_ALREADY_STARTED, selection, rules)

    return _accept(selection)
