from functools import wraps

from flask import current_app, jsonify, request

from pickem.routes.api import bp
from pickem.schemas import PickSelection
from pickem.services import pick_service, score_service
from pickem.utils.errors import MalformedInputError, ResultsNotFound


def add_security_headers(f):
    """Add security headers to API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if isinstance(response, tuple):
            response, status = response[0], response[1:]
        else:
            status = ()
        if hasattr(response, "headers"):
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return (response, *status) if status else response

    return decorated_function


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MalformedInputError("Request body must be a JSON object")
    return data


def _parse_week(value):
    try:
        week = int(value)
    except (TypeError, ValueError):
        raise MalformedInputError("week must be a positive integer")
    if week < 1:
        raise MalformedInputError("week must be a positive integer")
    return week


def _parse_game_id(value):
    """Game ids arrive as JSON numbers or object keys; the store uses integers"""
    if value is None:
        return None
    if isinstance(value, bool):
        raise MalformedInputError(f"Invalid game id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedInputError(f"Invalid game id: {value!r}")


def _flag(name):
    return request.args.get(name, "").lower() in ("1", "true", "yes")


def _parse_selection(data):
    selection = data.get("selection") or {}
    if not isinstance(selection, dict):
        raise MalformedInputError("selection must map game ids to teams")
    picks = {_parse_game_id(gid): team for gid, team in selection.items()}
    return PickSelection(picks=picks, lock=_parse_game_id(data.get("lock")))


def _parse_submission(data):
    """Accept picks as a list of {gameId, team, isLock} or a {gameId: team} map"""
    raw = data.get("picks")
    picks = {}
    locks = []

    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict):
                raise MalformedInputError("Each pick must be an object")
            game_id = _parse_game_id(item.get("gameId"))
            if game_id is None:
                raise MalformedInputError("Each pick needs a gameId")
            picks[game_id] = item.get("team")
            if item.get("isLock"):
                locks.append(game_id)
    elif isinstance(raw, dict):
        picks = {_parse_game_id(gid): team for gid, team in raw.items()}
    elif raw is not None:
        raise MalformedInputError("picks must be a list or an object")

    for game_id, team in picks.items():
        if not isinstance(team, str):
            raise MalformedInputError(f"Pick for game {game_id} needs a team name")

    lock = _parse_game_id(data.get("lock"))
    if lock is not None and lock not in locks:
        locks.append(lock)

    return picks, locks


@bp.route("/weekly-scores")
def weekly_scores():
    """Scores for one week; 404 until results are in"""
    week = _parse_week(request.args.get("week"))
    email = request.args.get("email")

    report = score_service.get_weekly_scores(week, all_users=_flag("all_users"))

    scores = report["scores"]
    if email:
        email = email.strip()
        scores = [score for score in scores if score["userId"] == email]
        if not scores:
            raise ResultsNotFound(f"No scores for {email} in week {week}")

    response = jsonify(scores)
    response.headers["X-Orphaned-Picks"] = str(report["orphanedPicks"])
    response.headers["X-Unmatched-Results"] = str(report["unmatchedResults"])
    response.headers["X-Duplicate-Picks"] = str(report["duplicatePicks"])
    response.headers["X-Duplicate-Results"] = str(report["duplicateResults"])
    return response


@bp.route("/leaderboard")
def leaderboard():
    """Season standings"""
    return jsonify(score_service.get_leaderboard())


@bp.route("/games/week/<int:week>")
def week_games(week):
    """Games for a week; ?upcoming=1 lists only games still open for picks"""
    return jsonify(
        score_service.get_week_games(_parse_week(week), upcoming=_flag("upcoming"))
    )


@bp.route("/results/week/<int:week>")
def week_results(week):
    return jsonify(score_service.get_week_results(_parse_week(week)))


@bp.route("/picks", methods=["GET"])
@add_security_headers
def user_picks():
    """A member's picks for a week, with outcomes once results are in"""
    email = (request.args.get("email") or "").strip()
    if not email:
        raise MalformedInputError("email is required")
    week = _parse_week(request.args.get("week"))
    return jsonify(score_service.get_user_week_picks(email, week))


@bp.route("/picks/validate", methods=["POST"])
@add_security_headers
def validate_picks():
    """Check one pick or lock toggle against the current selection"""
    data = _json_body()
    week = _parse_week(data.get("week"))
    selection = _parse_selection(data)

    candidate = data.get("candidate")
    if candidate is not None:
        if not isinstance(candidate, dict):
            raise MalformedInputError("candidate must be an object")
        candidate = (_parse_game_id(candidate.get("gameId")), candidate.get("team"))

    lock_toggle = None
    if "lockToggle" in data:
        lock_toggle = _parse_game_id(data.get("lockToggle"))
        # null clears the lock
        if lock_toggle is None and selection.lock is not None:
            lock_toggle = selection.lock

    result = pick_service.preview_selection(
        week,
        selection,
        candidate=candidate,
        lock_toggle=lock_toggle,
        user_email=(data.get("email") or "").strip() or None,
    )
    return jsonify(result.to_dict())


@bp.route("/picks", methods=["POST"])
@add_security_headers
def submit_picks():
    """Store a member's picks for a week"""
    data = _json_body()
    week = _parse_week(data.get("week"))
    picks, locks = _parse_submission(data)

    saved = pick_service.submit_picks(data.get("email"), week, picks, locks=locks)
    current_app.logger.info(f"Picks saved for week {week}: {len(saved)} stored")
    return jsonify({"saved": len(picks), "picks": saved}), 201
