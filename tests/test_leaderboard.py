from pickem.schemas import ProfileRecord, ScoreReport, WeeklyScore
from pickem.utils.leaderboard import aggregate, season_leaderboard


def weekly(user_id, week, correct, points, lock_correct=0, scored=None):
    return WeeklyScore(
        user_id=user_id,
        week=week,
        correct=correct,
        lock_correct=lock_correct,
        weekly_points=points,
        scored=correct + lock_correct if scored is None else scored,
    )


def test_points_then_correct_picks():
    scores = [
        weekly("user4", 1, 4, 10),
        weekly("user5", 1, 5, 10),
        weekly("user7", 1, 7, 7),
    ]
    board = aggregate(scores)

    assert [e.user_id for e in board] == ["user5", "user4", "user7"]
    assert [e.rank for e in board] == [1, 2, 3]


def test_exact_ties_keep_encounter_order_with_distinct_ranks():
    board = aggregate([weekly("b", 1, 3, 3), weekly("a", 1, 3, 3)])

    assert [e.user_id for e in board] == ["b", "a"]
    assert [e.rank for e in board] == [1, 2]


def test_totals_across_weeks():
    board = aggregate(
        [
            weekly("alice", 1, 3, 6, lock_correct=1),
            weekly("alice", 2, 2, 0, scored=4),
            weekly("bob", 1, 1, 1),
        ]
    )
    alice = board[0]

    assert alice.user_id == "alice"
    assert alice.total_points == 6
    assert alice.total_correct == 6
    assert alice.weeks_played == 2


def test_profiles_without_scores_are_listed():
    profiles = [
        ProfileRecord(email="zoe@example.com", username="zoe"),
        ProfileRecord(email="al@example.com"),
    ]
    board = aggregate([weekly("al@example.com", 1, 1, 1)], profiles=profiles)

    assert [e.display_name for e in board] == ["al@example.com", "zoe"]
    assert board[1].total_points == 0
    assert board[1].weeks_played == 0


def test_negative_totals_rank_below_members_without_picks():
    profiles = [ProfileRecord(email="idle@example.com", username="idle")]
    board = aggregate([weekly("loser", 1, 0, -2, scored=1)], profiles=profiles)

    assert [e.user_id for e in board] == ["idle@example.com", "loser"]


def test_season_leaderboard_from_reports():
    reports = [
        ScoreReport(week=1, scores=[weekly("a", 1, 2, 2), weekly("b", 1, 1, 4, lock_correct=1)]),
        ScoreReport(week=2, scores=[weekly("a", 2, 1, 1)]),
    ]
    board = season_leaderboard(reports)

    assert [(e.user_id, e.total_points) for e in board] == [("b", 4), ("a", 3)]
    assert board[0].to_dict() == {
        "rank": 1,
        "userId": "b",
        "displayName": "b",
        "totalCorrect": 2,
        "totalPoints": 4,
        "weeksPlayed": 1,
    }
