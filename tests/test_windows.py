"""Tests for week windows and per-team fixture selection."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from uclrace.windows import (
    build_result_label,
    compute_week_windows,
    format_kickoff,
    map_fixture_for_team,
    pick_current_week_fixture,
    pick_last_week_fixture,
    resolve_team_fixtures,
)

NOW = datetime(2026, 2, 26, 10, 0, tzinfo=timezone.utc)  # Thursday
TEAM_ID = 571


def _fixture(fixture_id, kickoff, home_id=TEAM_ID, away_id=637, status='NS', goals=(None, None)):
    return {
        'fixture': {'id': fixture_id, 'date': kickoff, 'status': {'short': status, 'long': status}},
        'teams': {
            'home': {'id': home_id, 'name': f'Team {home_id}', 'logo': f'https://logo/{home_id}.png'},
            'away': {'id': away_id, 'name': f'Team {away_id}', 'logo': f'https://logo/{away_id}.png'},
        },
        'goals': {'home': goals[0], 'away': goals[1]},
    }


@pytest.fixture
def windows():
    return compute_week_windows(NOW, 'UTC')


class TestComputeWeekWindows:
    """Tests for Monday-aligned windows."""

    def test_thursday(self, windows):
        assert windows.current_week.start == date(2026, 2, 23)
        assert windows.current_week.end == date(2026, 3, 1)
        assert windows.last_week.start == date(2026, 2, 16)
        assert windows.last_week.end == date(2026, 2, 22)

    def test_monday_starts_its_own_week(self):
        windows = compute_week_windows(datetime(2026, 2, 23, 0, 0, tzinfo=timezone.utc))
        assert windows.current_week.start == date(2026, 2, 23)

    def test_sunday_belongs_to_previous_monday(self):
        windows = compute_week_windows(datetime(2026, 3, 1, 23, 59, tzinfo=timezone.utc))
        assert windows.current_week.start == date(2026, 2, 23)

    def test_reference_time_zone(self):
        """Test that the window follows the calendar day in the reference zone."""
        late_sunday_utc = datetime(2026, 3, 1, 23, 30, tzinfo=timezone.utc)
        windows = compute_week_windows(late_sunday_utc, 'Europe/Vienna')
        assert windows.current_week.start == date(2026, 3, 2)

    def test_fetch_range_and_schema(self, windows):
        assert windows.fetch_from == '2026-02-16'
        assert windows.fetch_to == '2026-03-01'
        schema = windows.as_schema().model_dump(by_alias=True)
        assert schema['currentWeek'] == {'from': '2026-02-23', 'to': '2026-03-01'}
        assert schema['lastWeek'] == {'from': '2026-02-16', 'to': '2026-02-22'}


class TestCurrentWeekSelection:
    """Tests for pick_current_week_fixture."""

    def test_only_fixture_in_window(self, windows):
        """Test that a past in-window fixture wins over one in the next week."""
        fixtures = [
            _fixture(1, '2026-02-23T18:00:00+00:00', status='FT', goals=(1, 0)),
            _fixture(2, '2026-03-02T18:00:00+00:00'),
        ]
        assert pick_current_week_fixture(fixtures, TEAM_ID, windows)['fixture']['id'] == 1

    def test_nearest_upcoming_preferred(self, windows):
        fixtures = [
            _fixture(1, '2026-02-23T18:00:00+00:00', status='FT', goals=(1, 0)),
            _fixture(2, '2026-02-27T18:00:00+00:00'),
        ]
        assert pick_current_week_fixture(fixtures, TEAM_ID, windows)['fixture']['id'] == 2

    def test_earliest_upcoming(self, windows):
        fixtures = [
            _fixture(3, '2026-03-01T15:00:00+00:00'),
            _fixture(2, '2026-02-27T18:00:00+00:00'),
        ]
        assert pick_current_week_fixture(fixtures, TEAM_ID, windows)['fixture']['id'] == 2

    def test_latest_played_when_nothing_upcoming(self, windows):
        fixtures = [
            _fixture(1, '2026-02-23T18:00:00+00:00', status='FT', goals=(1, 0)),
            _fixture(2, '2026-02-25T18:00:00+00:00', status='FT', goals=(0, 0)),
        ]
        assert pick_current_week_fixture(fixtures, TEAM_ID, windows)['fixture']['id'] == 2

    def test_no_fixture(self, windows):
        fixtures = [_fixture(1, '2026-02-27T18:00:00+00:00', home_id=1, away_id=2)]
        assert pick_current_week_fixture(fixtures, TEAM_ID, windows) is None


class TestLastWeekSelection:

    def test_latest_in_last_week(self, windows):
        fixtures = [
            _fixture(1, '2026-02-17T18:00:00+00:00', status='FT', goals=(1, 0)),
            _fixture(2, '2026-02-22T14:00:00+00:00', status='FT', goals=(2, 2)),
            _fixture(3, '2026-02-24T18:00:00+00:00'),
        ]
        assert pick_last_week_fixture(fixtures, TEAM_ID, windows)['fixture']['id'] == 2

    def test_empty(self, windows):
        assert pick_last_week_fixture([], TEAM_ID, windows) is None


class TestResultLabel:
    """Tests for build_result_label."""

    def test_away_loss(self):
        """Test that home 2 - away 1 reads '1-2 L' for the away team."""
        fixture = _fixture(1, '2026-02-22T14:00:00+00:00', home_id=637, away_id=TEAM_ID, status='FT', goals=(2, 1))
        assert build_result_label(fixture, TEAM_ID) == '1-2 L'

    def test_home_win(self):
        fixture = _fixture(1, '2026-02-22T14:00:00+00:00', status='AET', goals=(3, 2))
        assert build_result_label(fixture, TEAM_ID) == '3-2 W'

    def test_draw(self):
        fixture = _fixture(1, '2026-02-22T14:00:00+00:00', home_id=637, away_id=TEAM_ID, status='PEN', goals=(1, 1))
        assert build_result_label(fixture, TEAM_ID) == '1-1 D'

    def test_not_finished(self):
        fixture = _fixture(1, '2026-02-22T14:00:00+00:00', status='2H', goals=(1, 0))
        assert build_result_label(fixture, TEAM_ID) is None

    def test_non_numeric_goals(self):
        fixture = _fixture(1, '2026-02-22T14:00:00+00:00', status='FT', goals=(None, 0))
        assert build_result_label(fixture, TEAM_ID) is None


class TestFixtureRow:
    """Tests for mapping a fixture from the tracked team's side."""

    def test_away_row(self):
        fixture = _fixture(7, '2026-02-22T14:00:00+00:00', home_id=637, away_id=TEAM_ID, status='FT', goals=(2, 1))
        row = map_fixture_for_team(fixture, TEAM_ID, ZoneInfo('Europe/Vienna'))

        assert row.venue == 'away'
        assert row.opponent == 'Team 637'
        assert row.kickoff == '15:00'
        assert row.result == '1-2 L'

    def test_team_not_in_fixture(self):
        fixture = _fixture(7, '2026-02-22T14:00:00+00:00', home_id=1, away_id=2)
        assert map_fixture_for_team(fixture, TEAM_ID, ZoneInfo('UTC')) is None

    def test_kickoff_tbd(self):
        assert format_kickoff(None, ZoneInfo('UTC')) == 'TBD'

    def test_resolve_team_fixtures(self, windows):
        fixtures = [
            _fixture(1, '2026-02-21T18:00:00+00:00', status='FT', goals=(0, 1)),
            _fixture(2, '2026-02-28T18:00:00+00:00'),
        ]
        resolved = resolve_team_fixtures(fixtures, TEAM_ID, windows, ZoneInfo('UTC'))

        assert resolved.current_week.fixture_id == 2
        assert resolved.current_week.result is None
        assert resolved.last_week.fixture_id == 1
        assert resolved.last_week.result == '0-1 L'
