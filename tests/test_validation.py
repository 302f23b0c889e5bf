from datetime import datetime, timezone

import pytest

from pickem.schemas import GameRecord, PickSelection
from pickem.utils.errors import MalformedInputError, RejectionReason
from pickem.utils.rules import DEFAULT_RULES, FINAL_WEEK_RULES
from pickem.utils.validation import (
    check_caps,
    toggle_lock,
    toggle_pick,
    validate_submission,
)

BEFORE_WEEK = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)
AFTER_THURSDAY = datetime(2025, 9, 6, 12, 0, tzinfo=timezone.utc)
TZ = "America/New_York"


@pytest.fixture
def week_games(games):
    # A second Thursday game for the Thursday cap
    games[8] = GameRecord(
        id=8,
        week=1,
        home_team="Chargers",
        away_team="Chiefs",
        spread=2.5,
        kickoff=datetime(2025, 9, 4, 23, 0, tzinfo=timezone.utc),
    )
    return games


def toggle(games, selection, game_id, team, **kwargs):
    kwargs.setdefault("now", BEFORE_WEEK)
    kwargs.setdefault("tz", TZ)
    return toggle_pick(games, selection, game_id, team, **kwargs)


def select(games, *picks):
    selection = PickSelection()
    for game_id, team in picks:
        result = toggle(games, selection, game_id, team)
        assert result.accepted
        selection = result.selection
    return selection


class TestTogglePick:
    def test_adds_pick(self, week_games):
        result = toggle(week_games, PickSelection(), 1, "Cowboys")
        assert result.accepted
        assert result.selection.picks == {1: "Cowboys"}
        assert result.reason is None

    def test_same_team_deselects(self, week_games):
        selection = select(week_games, (1, "Cowboys"), (2, "Jets"))
        result = toggle(week_games, selection, 1, "Cowboys")
        assert result.accepted
        assert result.selection.picks == {2: "Jets"}

    def test_deselect_allowed_after_kickoff(self, week_games):
        selection = select(week_games, (1, "Cowboys"))
        result = toggle(week_games, selection, 1, "Cowboys", now=AFTER_THURSDAY)
        assert result.accepted
        assert result.selection.picks == {}

    def test_second_thursday_pick_rejected(self, week_games):
        selection = select(week_games, (1, "Cowboys"))
        result = toggle(week_games, selection, 8, "Chiefs")
        assert not result.accepted
        assert result.reason == RejectionReason.THURSDAY_CAP_EXCEEDED
        assert result.selection == selection
        assert result.message == "Only 1 Thursday pick allowed."

    def test_fourth_flex_pick_rejected(self, week_games):
        selection = select(week_games, (2, "Jets"), (4, "Packers"), (5, "Titans"))
        result = toggle(week_games, selection, 6, "Saints")
        assert result.reason == RejectionReason.FLEX_CAP_EXCEEDED
        assert result.selection.picks == {2: "Jets", 4: "Packers", 5: "Titans"}

    def test_total_cap_checked_before_slots(self, week_games):
        selection = select(
            week_games,
            (1, "Cowboys"),
            (2, "Jets"),
            (4, "Packers"),
            (5, "Titans"),
            (7, "Vikings"),
        )
        result = toggle(week_games, selection, 6, "Saints")
        assert result.reason == RejectionReason.TOTAL_CAP_EXCEEDED

    def test_swapping_team_is_not_an_addition(self, week_games):
        selection = select(week_games, (2, "Jets"), (4, "Packers"), (5, "Titans"))
        result = toggle(week_games, selection, 2, "Steelers")
        assert result.accepted
        assert result.selection.picks[2] == "Steelers"

    def test_started_game_rejected(self, week_games):
        result = toggle(week_games, PickSelection(), 1, "Cowboys", now=AFTER_THURSDAY)
        assert result.reason == RejectionReason.GAME_ALREADY_STARTED

    def test_existing_picks_count_against_caps(self, week_games):
        existing = {2: "Jets", 4: "Packers", 5: "Titans"}
        result = toggle(week_games, PickSelection(), 6, "Saints", existing=existing)
        assert result.reason == RejectionReason.FLEX_CAP_EXCEEDED

    def test_final_week_allows_five_flex_picks(self, week_games):
        selection = PickSelection()
        for game_id, team in [(1, "Cowboys"), (8, "Chiefs"), (2, "Jets"), (4, "Lions"), (5, "Titans")]:
            result = toggle(week_games, selection, game_id, team, rules=FINAL_WEEK_RULES)
            assert result.accepted
            selection = result.selection

        result = toggle(week_games, selection, 6, "Saints", rules=FINAL_WEEK_RULES)
        assert result.reason == RejectionReason.TOTAL_CAP_EXCEEDED

    def test_unknown_game(self, week_games):
        with pytest.raises(MalformedInputError):
            toggle(week_games, PickSelection(), 99, "Cowboys")

    def test_team_not_in_game(self, week_games):
        with pytest.raises(MalformedInputError):
            toggle(week_games, PickSelection(), 1, "Giants")


class TestToggleLock:
    def test_lock_must_be_selected(self, week_games):
        selection = select(week_games, (2, "Jets"))
        result = toggle_lock(week_games, selection, 4, now=BEFORE_WEEK)
        assert result.reason == RejectionReason.LOCK_NOT_IN_SELECTION
        assert result.selection.lock is None

    def test_set_and_clear_lock(self, week_games):
        selection = select(week_games, (2, "Jets"), (4, "Packers"))
        locked = toggle_lock(week_games, selection, 2, now=BEFORE_WEEK)
        assert locked.accepted
        assert locked.selection.lock == 2

        moved = toggle_lock(week_games, locked.selection, 4, now=BEFORE_WEEK)
        assert moved.selection.lock == 4

        cleared = toggle_lock(week_games, moved.selection, 4, now=BEFORE_WEEK)
        assert cleared.selection.lock is None

    def test_deselecting_locked_pick_clears_lock(self, week_games):
        selection = select(week_games, (2, "Jets"))
        selection = toggle_lock(week_games, selection, 2, now=BEFORE_WEEK).selection
        result = toggle(week_games, selection, 2, "Jets")
        assert result.selection.lock is None

    def test_lock_on_started_game(self, week_games):
        selection = select(week_games, (1, "Cowboys"))
        result = toggle_lock(week_games, selection, 1, now=AFTER_THURSDAY)
        assert result.reason == RejectionReason.GAME_ALREADY_STARTED


class TestValidateSubmission:
    def submit(self, games, picks, **kwargs):
        kwargs.setdefault("now", BEFORE_WEEK)
        kwargs.setdefault("tz", TZ)
        return validate_submission(games, picks, **kwargs)

    def test_valid_set(self, week_games):
        picks = {1: " Cowboys ", 2: "Jets", 4: "Packers", 5: "Titans", 7: "Vikings"}
        result = self.submit(week_games, picks, locks=[4])
        assert result.accepted
        assert result.selection.picks[1] == "Cowboys"
        assert result.selection.lock == 4

    def test_empty_submission(self, week_games):
        result = self.submit(week_games, {})
        assert result.reason == RejectionReason.NO_PICKS_SELECTED
        assert result.message == "Please select at least one game."

    def test_bulk_set_over_flex_cap(self, week_games):
        picks = {2: "Jets", 4: "Packers", 5: "Titans", 6: "Saints"}
        result = self.submit(week_games, picks)
        assert result.reason == RejectionReason.FLEX_CAP_EXCEEDED

    def test_existing_picks_over_thursday_cap(self, week_games):
        result = self.submit(week_games, {7: "Vikings"}, existing={1: "Cowboys", 8: "Chiefs"})
        assert result.reason == RejectionReason.THURSDAY_CAP_EXCEEDED

    def test_more_than_one_lock(self, week_games):
        result = self.submit(week_games, {2: "Jets", 4: "Packers"}, locks=[2, 4])
        assert result.reason == RejectionReason.LOCK_CAP_EXCEEDED

    def test_lock_outside_selection(self, week_games):
        result = self.submit(week_games, {2: "Jets"}, locks=[4])
        assert result.reason == RejectionReason.LOCK_NOT_IN_SELECTION

    def test_lock_on_existing_pick(self, week_games):
        result = self.submit(week_games, {2: "Jets"}, locks=[4], existing={4: "Lions"})
        assert result.accepted

    def test_changed_pick_after_kickoff(self, week_games):
        result = self.submit(
            week_games,
            {1: "Eagles", 2: "Jets"},
            existing={1: "Cowboys"},
            now=AFTER_THURSDAY,
        )
        assert result.reason == RejectionReason.GAME_ALREADY_STARTED

    def test_unchanged_pick_after_kickoff(self, week_games):
        result = self.submit(
            week_games,
            {1: "Cowboys", 2: "Jets"},
            existing={1: "Cowboys"},
            now=AFTER_THURSDAY,
        )
        assert result.accepted

    def test_moving_lock_off_started_game(self, week_games):
        result = self.submit(
            week_games,
            {2: "Jets"},
            locks=[2],
            existing={1: "Cowboys"},
            existing_lock=1,
            now=AFTER_THURSDAY,
        )
        assert result.reason == RejectionReason.GAME_ALREADY_STARTED

    def test_clock_read_per_call(self, week_games):
        # Without an explicit instant the current time is used; 2025 games
        # have all kicked off
        result = validate_submission(week_games, {2: "Jets"})
        assert result.reason == RejectionReason.GAME_ALREADY_STARTED


def test_check_caps_order(week_games):
    picks = {1: "Cowboys", 8: "Chiefs", 2: "Jets", 4: "Packers", 5: "Titans", 6: "Saints"}
    assert check_caps(week_games, picks, DEFAULT_RULES, TZ) == RejectionReason.TOTAL_CAP_EXCEEDED
    assert check_caps(week_games, {1: "Cowboys", 8: "Chiefs"}, DEFAULT_RULES, TZ) == (
        RejectionReason.THURSDAY_CAP_EXCEEDED
    )
    assert check_caps(week_games, {7: "Vikings", 2: "Jets"}, DEFAULT_RULES, TZ) is None
