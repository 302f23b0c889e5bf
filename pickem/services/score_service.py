"""
Score service: loads snapshots from the database and runs the scoring engine
"""

from pickem.models import Game, Pick, Profile, Result
from pickem.utils.cache_utils import cached_query
from pickem.utils.errors import ResultsNotFound
from pickem.utils.leaderboard import season_leaderboard
from pickem.utils.logging_config import get_logger
from pickem.utils.outcomes import match_result, resolve
from pickem.utils.rules import rules_for_week
from pickem.utils.scoring import retain_picks, score_season, score_week

logger = get_logger(__name__)


def load_week_snapshot(week):
    """
    Read one week's games, results and picks as engine records

    Returns:
        tuple: (games, results, picks)
    """
    games = [game.to_record() for game in Game.get_games_for_week(week)]
    results = [result.to_record() for result in Result.get_results_for_week(week)]
    picks = (
        Pick.query.join(Game)
        .filter(Game.week == week)
        .order_by(Pick.created_at, Pick.id)
        .all()
    )
    return games, results, [pick.to_record() for pick in picks]


@cached_query("weekly_scores", timeout=300)
def get_weekly_scores(week, all_users=False):
    """
    Weekly scores for every member who picked that week

    Args:
        week: Week number
        all_users: Also list every profile, with zeros for members who did not pick

    Returns:
        dict: ScoreReport as a dictionary
    """
    games, results, picks = load_week_snapshot(week)
    if not results:
        raise ResultsNotFound(f"No results for week {week}")

    users = None
    if all_users:
        users = [profile.email for profile in Profile.get_all_in_join_order()]

    report = score_week(week, picks, games, results, users=users)
    if report.skipped_records:
        logger.warning(
            f"Week {week} scored with {report.skipped_records} inconsistent record(s) skipped"
        )
    return report.to_dict()


@cached_query("leaderboard", timeout=300)
def get_leaderboard():
    """Season standings across every week with games"""
    games = [game.to_record() for game in Game.query.order_by(Game.week, Game.id).all()]
    results = [
        result.to_record()
        for result in Result.query.order_by(Result.week, Result.id).all()
    ]
    picks = [pick.to_record() for pick in Pick.get_all_in_submission_order()]
    profiles = [profile.to_record() for profile in Profile.get_all_in_join_order()]

    reports = score_season(picks, games, results)
    return [entry.to_dict() for entry in season_leaderboard(reports, profiles)]


def get_user_week_picks(user_email, week):
    """
    A member's picks for a week with each pick's outcome and points

    Picks are capped in submission order exactly as the weekly score does;
    a pick over the caps is listed with ``retained`` False and no points.
    """
    rows = Pick.get_user_picks_for_week(user_email, week)
    results = [result.to_record() for result in Result.get_results_for_week(week)]
    games_by_id = {row.game_id: row.game.to_record() for row in rows}

    submitted = sorted(rows, key=lambda row: (row.created_at, row.id))
    kept, _ = retain_picks(
        [row.to_record() for row in submitted], games_by_id, rules_for_week(week)
    )
    kept_by_game = {pick.game_id: pick for pick in kept}

    picks = []
    for row in rows:
        game = games_by_id[row.game_id]
        outcome = resolve(game, match_result(game, results))
        record = kept_by_game.get(row.game_id)
        data = row.to_dict(outcome=outcome, record=record)
        data["retained"] = record is not None
        if record is None:
            data["points"] = 0
        picks.append(data)
    return picks


def get_week_games(week, upcoming=False, now=None):
    """Games for a week ordered by kickoff; ``upcoming`` hides started games"""
    games = Game.get_games_for_week(week)
    if upcoming:
        games = [game for game in games if game.is_pickable(now)]
    return [game.to_dict(now) for game in games]


def get_week_results(week):
    return [result.to_dict() for result in Result.get_results_for_week(week)]
