from datetime import datetime, timezone

import pytest

from pickem import create_app
from pickem import db as _db
from pickem.models import Game, Pick, Profile, Result
from pickem.schemas import GameRecord, PickRecord, ResultRecord

# Week 1 of the 2025 season. Evening kickoffs fall on the next UTC day, so
# these also check that slots follow the New York weekday.
THURSDAY_NIGHT = datetime(2025, 9, 5, 0, 20, tzinfo=timezone.utc)  # Thu 8:20pm ET
SUNDAY_EARLY = datetime(2025, 9, 7, 17, 0, tzinfo=timezone.utc)  # Sun 1:00pm ET
SUNDAY_LATE = datetime(2025, 9, 7, 20, 25, tzinfo=timezone.utc)  # Sun 4:25pm ET
SUNDAY_NIGHT = datetime(2025, 9, 8, 0, 20, tzinfo=timezone.utc)  # Sun 8:20pm ET
MONDAY_NIGHT = datetime(2025, 9, 9, 0, 15, tzinfo=timezone.utc)  # Mon 8:15pm ET

BEFORE_WEEK = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)
AFTER_THURSDAY = datetime(2025, 9, 6, 12, 0, tzinfo=timezone.utc)

# (id, home, away, spread, kickoff)
WEEK_ONE_GAMES = [
    (1, "Eagles", "Cowboys", -7.0, THURSDAY_NIGHT),
    (2, "Jets", "Steelers", 3.0, SUNDAY_EARLY),
    (3, "Bills", "Ravens", -1.5, SUNDAY_NIGHT),
    (4, "Packers", "Lions", -2.5, SUNDAY_LATE),
    (5, "Broncos", "Titans", -8.0, SUNDAY_LATE),
    (6, "Cardinals", "Saints", -6.5, SUNDAY_EARLY),
    (7, "Bears", "Vikings", 1.5, MONDAY_NIGHT),
]

# (home, away, home score, away score)
WEEK_ONE_RESULTS = [
    ("Eagles", "Cowboys", 24, 20),  # 17 vs 20: Cowboys cover
    ("Jets", "Steelers", 32, 34),  # 35 vs 34: Jets cover
    ("Bills", "Ravens", 41, 40),  # 39.5 vs 40: Ravens cover
    ("Packers", "Lions", 27, 13),  # 24.5 vs 13: Packers cover
    ("Broncos", "Titans", 20, 12),  # 12 vs 12: push
    ("Cardinals", "Saints", 20, 13),  # 13.5 vs 13: Cardinals cover
    ("Bears", "Vikings", 24, 27),  # 25.5 vs 27: Vikings cover
]


@pytest.fixture
def app():
    app = create_app("testing")

    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def games():
    return {
        game_id: GameRecord(
            id=game_id,
            week=1,
            home_team=home,
            away_team=away,
            spread=spread,
            kickoff=kickoff,
        )
        for game_id, home, away, spread, kickoff in WEEK_ONE_GAMES
    }


@pytest.fixture
def results():
    return [
        ResultRecord(
            week=1, home_team=home, away_team=away, home_score=hs, away_score=aws
        )
        for home, away, hs, aws in WEEK_ONE_RESULTS
    ]


@pytest.fixture
def make_pick():
    def _make_pick(user_id, game_id, team, is_lock=False):
        return PickRecord(
            user_id=user_id, game_id=game_id, selected_team=team, is_lock=is_lock
        )

    return _make_pick


@pytest.fixture
def seeded(app):
    """Week 1 games, results and two members in the database"""
    for game_id, home, away, spread, kickoff in WEEK_ONE_GAMES:
        _db.session.add(
            Game(
                id=game_id,
                week=1,
                home_team=home,
                away_team=away,
                spread=spread,
                kickoff_time=kickoff,
            )
        )
    for home, away, home_score, away_score in WEEK_ONE_RESULTS:
        _db.session.add(
            Result(
                week=1,
                home_team=home,
                away_team=away,
                home_score=home_score,
                away_score=away_score,
            )
        )
    _db.session.add(Profile(email="alice@example.com", username="alice"))
    _db.session.add(Profile(email="bob@example.com", username="bob"))
    _db.session.add(Profile(email="carol@example.com"))
    _db.session.commit()
    return app


@pytest.fixture
def add_picks(app):
    def _add_picks(user_email, picks, lock=None):
        for game_id, team in picks.items():
            _db.session.add(
                Pick(
                    user_email=user_email,
                    game_id=game_id,
                    selected_team=team,
                    is_lock=game_id == lock,
                )
            )
        _db.session.commit()

    return _add_picks
