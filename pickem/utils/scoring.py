"""
Scoring Engine for Spread Pick'em Application

This module scores one week of picks against the spread. Season standings built
from these weekly scores live in pickem/utils/leaderboard.py.

Everything here is a pure function of the snapshot passed in: no database
access and no clock reads.
"""

from collections import Counter, OrderedDict

from pickem.schemas import ScoreReport, WeeklyScore
from pickem.utils.logging_config import get_logger
from pickem.utils.outcomes import match_result, orient_scores, resolve
from pickem.utils.rules import rules_for_week

logger = get_logger(__name__)

CORRECT_POINTS = 1
LOCK_CORRECT_POINTS = 3  # 1 base point + 2 lock bonus
LOCK_INCORRECT_POINTS = -2
PERFECT_WEEK_PICKS = 5
PERFECT_WEEK_BONUS = 3


def calculate_pick_score(pick, outcome):
    """
    Calculate score for a single pick.

    Returns:
        3 for a correct lock (a push counts as correct)
        1 for a correct pick
        -2 for a lock that did not cover
        0 for a missed pick or a game without a result

    Args:
        pick: PickRecord
        outcome: Outcome of the pick's game
    """
    if not outcome.resolved:
        return 0

    if outcome.covers(pick.selected_team):
        return LOCK_CORRECT_POINTS if pick.is_lock else CORRECT_POINTS

    return LOCK_INCORRECT_POINTS if pick.is_lock else 0


def weekly_points(score):
    return (
        score.correct * CORRECT_POINTS
        + score.lock_correct * LOCK_CORRECT_POINTS
        + score.lock_incorrect * LOCK_INCORRECT_POINTS
        + score.perfect_bonus
    )


def _index_games(games):
    if hasattr(games, "values"):
        return dict(games)
    return {game.id: game for game in games}


def retain_picks(user_picks, games_by_id, rules, tz=None):
    """
    Keep one user's picks in order until a slot cap or the weekly total is reached.

    Locks past ``rules.max_locks`` among the kept picks are scored as plain
    picks.

    Returns:
        tuple: (kept PickRecords, number dropped)
    """
    counts = Counter()
    kept = []
    dropped = 0
    locks = 0

    for pick in user_picks:
        slot = rules.slot_for(games_by_id[pick.game_id].kickoff, tz)
        if len(kept) >= rules.max_total or counts[slot] >= rules.cap_for(slot):
            dropped += 1
            continue
        counts[slot] += 1
        if pick.is_lock:
            if locks >= rules.max_locks:
                logger.info(
                    f"Scoring extra lock by {pick.user_id} on game {pick.game_id!r} as a plain pick"
                )
                pick = pick.model_copy(update={"is_lock": False})
            else:
                locks += 1
        kept.append(pick)

    return kept, dropped


def _tally(score, pick, outcome):
    if not outcome.resolved:
        score.unresolved += 1
        return

    score.scored += 1
    correct = outcome.covers(pick.selected_team)

    if pick.is_lock:
        if correct:
            score.lock_correct += 1
        else:
            score.lock_incorrect += 1
    elif correct:
        score.correct += 1


def score_week(week, picks, games, results, rules=None, users=None, tz=None):
    """
    Score every user's picks for one week.

    Args:
        week: Week number to score
        picks: Iterable of PickRecord (any weeks; later rows win on duplicates)
        games: GameRecords, as a mapping by id or an iterable
        results: Iterable of ResultRecord
        rules: WeekRules used to cap picks per slot (default: rules for the week)
        users: Optional roster of user ids; members without picks get a zero row
        tz: Timezone for kickoff weekdays

    Returns:
        ScoreReport with one WeeklyScore per user who picked this week, then
        one per roster member who did not
    """
    games_by_id = _index_games(games)
    if rules is None:
        rules = rules_for_week(week)

    report = ScoreReport(week=week)

    week_picks = []
    for pick in picks:
        game = games_by_id.get(pick.game_id)
        if game is None:
            report.orphaned_picks += 1
            logger.warning(
                f"Skipping pick by {pick.user_id}: game {pick.game_id!r} not found"
            )
            continue
        if game.week == week:
            week_picks.append(pick)

    # First occurrence fixes the position, the last row wins
    latest = OrderedDict()
    for pick in week_picks:
        latest[(pick.user_id, pick.game_id)] = pick
    report.duplicate_picks = len(week_picks) - len(latest)
    if report.duplicate_picks:
        logger.warning(
            f"Week {week}: ignored {report.duplicate_picks} duplicate pick(s); "
            "kept the last one written per user and game"
        )

    picks_by_user = OrderedDict()
    for pick in latest.values():
        picks_by_user.setdefault(pick.user_id, []).append(pick)

    week_games = [game for game in games_by_id.values() if game.week == week]
    week_results = [r for r in results if r.week is None or r.week == week]
    outcomes = {
        game.id: resolve(game, match_result(game, week_results)) for game in week_games
    }

    report.unmatched_results = sum(
        1
        for result in week_results
        if result.week == week
        and not any(orient_scores(game, result) for game in week_games)
    )
    if report.unmatched_results:
        logger.warning(
            f"Week {week}: {report.unmatched_results} result(s) match no game"
        )

    # One result per game; a second one, in either orientation, is ignored
    for game in week_games:
        matching = [r for r in week_results if orient_scores(game, r)]
        report.duplicate_results += max(len(matching) - 1, 0)
    if report.duplicate_results:
        logger.warning(
            f"Week {week}: ignored {report.duplicate_results} extra result(s) for games "
            "that already have one"
        )

    for user_id, user_picks in picks_by_user.items():
        score = WeeklyScore(user_id=user_id, week=week)
        kept, score.dropped = retain_picks(user_picks, games_by_id, rules, tz)
        if score.dropped:
            logger.info(
                f"Week {week}: dropped {score.dropped} pick(s) over the slot caps for {user_id}"
            )

        for pick in kept:
            _tally(score, pick, outcomes[pick.game_id])

        if (
            score.scored == PERFECT_WEEK_PICKS
            and score.correct + score.lock_correct == score.scored
        ):
            score.perfect_bonus = PERFECT_WEEK_BONUS

        score.weekly_points = weekly_points(score)
        report.scores.append(score)

    for user_id in users or ():
        if user_id not in picks_by_user:
            report.scores.append(WeeklyScore(user_id=user_id, week=week))
            picks_by_user[user_id] = []

    logger.debug(
        f"Scored week {week}: {len(report.scores)} user(s), "
        f"{report.skipped_records} record(s) skipped"
    )
    return report


def score_season(picks, games, results, weeks=None, users=None, final_week=None, tz=None):
    """Score each week that has games, in ascending order

    Returns:
        list of ScoreReport
    """
    games_by_id = _index_games(games)
    picks = list(picks)
    results = list(results)

    if weeks is None:
        weeks = sorted({game.week for game in games_by_id.values()})

    return [
        score_week(
            week,
            picks,
            games_by_id,
            results,
            rules=rules_for_week(week, final_week),
            users=users,
            tz=tz,
        )
        for week in weeks
    ]
