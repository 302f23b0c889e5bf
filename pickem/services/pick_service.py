"""
Pick service: validation previews and pick submission

Submission is read-validate-write. The week's games and the member's stored
picks are re-read inside the call and the kickoff cutoff uses the instant of
the call, so a form left open does not carry a stale clock. A write that
collides on the (user, game) constraint is reported as a retryable
SubmissionConflict rather than merged.
"""

from sqlalchemy.exc import IntegrityError

from pickem import db
from pickem.models import Game, Pick
from pickem.utils.cache_utils import invalidate_model_cache
from pickem.utils.errors import MalformedInputError, PickRejected, SubmissionConflict
from pickem.utils.logging_config import ContextualLogger
from pickem.utils.rules import rules_for_week
from pickem.utils.timezone_utils import get_utc_time
from pickem.utils.validation import toggle_lock, toggle_pick, validate_submission


def _clean_email(user_email):
    user_email = (user_email or "").strip()
    if not user_email:
        raise MalformedInputError("A member email is required")
    return user_email


def _week_games(week):
    return {game.id: game.to_record() for game in Game.get_games_for_week(week)}


def _stored_picks(rows):
    existing = {row.game_id: row.selected_team for row in rows}
    existing_lock = next((row.game_id for row in rows if row.is_lock), None)
    return existing, existing_lock


def preview_selection(
    week, selection, candidate=None, lock_toggle=None, user_email=None, now=None
):
    """
    Apply one pick or lock toggle to an in-progress selection

    Args:
        week: Week number
        selection: PickSelection built so far
        candidate: Optional (game_id, team) to toggle
        lock_toggle: Optional game id whose lock to toggle
        user_email: Member whose stored picks count against the caps
        now: Instant for the kickoff cutoff (default: current time)

    Returns:
        ValidationResult
    """
    games = _week_games(week)
    rules = rules_for_week(week)
    now = now or get_utc_time()

    existing = {}
    if user_email:
        existing, _ = _stored_picks(Pick.get_user_picks_for_week(user_email, week))

    if candidate is None and lock_toggle is None:
        return validate_submission(
            games,
            selection.picks,
            locks=[selection.lock],
            rules=rules,
            now=now,
            existing=existing,
        )

    result = None
    if candidate is not None:
        game_id, team = candidate
        result = toggle_pick(
            games, selection, game_id, team, rules=rules, now=now, existing=existing
        )
        if not result.accepted:
            return result
        selection = result.selection

    if lock_toggle is not None:
        result = toggle_lock(
            games, selection, lock_toggle, rules=rules, now=now, existing=existing
        )

    return result


def submit_picks(user_email, week, picks, locks=(), now=None):
    """
    Validate and store a member's picks for a week

    Existing picks for the same games are overwritten. When the submission
    names a lock it replaces the stored lock; otherwise the stored lock stays.

    Args:
        user_email: Member identifier
        week: Week number
        picks: Mapping of game id -> team
        locks: Game ids flagged as the lock
        now: Submission instant (default: read at call time)

    Returns:
        list: Stored picks for the week as dictionaries

    Raises:
        PickRejected: The set breaks a pick rule
        SubmissionConflict: A concurrent submission wrote the same pick first
    """
    user_email = _clean_email(user_email)
    log = ContextualLogger(__name__, {"user": user_email, "week": week})

    games = _week_games(week)
    rules = rules_for_week(week)
    rows = Pick.get_user_picks_for_week(user_email, week, for_update=True)
    existing, existing_lock = _stored_picks(rows)

    result = validate_submission(
        games,
        picks,
        locks=locks,
        rules=rules,
        now=now or get_utc_time(),
        existing=existing,
        existing_lock=existing_lock,
    )
    if not result.accepted:
        db.session.rollback()
        log.info(f"Submission rejected: {result.reason.value}")
        raise PickRejected(result.reason, result.message)

    rows_by_game = {row.game_id: row for row in rows}
    for game_id, team in result.selection.picks.items():
        row = rows_by_game.get(game_id)
        if row is None:
            row = Pick(user_email=user_email, game_id=game_id, selected_team=team)
            db.session.add(row)
            rows_by_game[game_id] = row
        else:
            row.selected_team = team

    if result.selection.lock is not None:
        for game_id, row in rows_by_game.items():
            row.is_lock = game_id == result.selection.lock

    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        log.warning(f"Submission conflict: {e.orig}")
        raise SubmissionConflict(
            "Your picks changed while saving. Reload and submit again."
        ) from e

    log.info(f"Saved {len(result.selection.picks)} pick(s)")

    # Scores and standings depend on the stored picks
    invalidate_model_cache("pick")

    return [
        row.to_dict() for row in Pick.get_user_picks_for_week(user_email, week)
    ]
