"""Tests for European-activity resolution."""

from datetime import datetime, timedelta, timezone

import pytest

from uclrace.errors import PartialCoverageWarning
from uclrace.europe import (
    CompetitionFixtures,
    describe_activity,
    is_fixture_still_active,
    resolve_european_activity,
    summarize_competitions,
)
from uclrace.schemas import RaceEntry
from uclrace.utils import iso_utc

NOW = datetime(2026, 2, 26, 10, 0, tzinfo=timezone.utc)


def _entry(team_id, name):
    return RaceEntry(
        league_id=286,
        league_name='Super Liga',
        team_id=team_id,
        team_name=name,
        rank=1,
        points=50,
        points_to_first=0,
        points_delta_to_comparison=3,
        focus_is_first=True,
        summary=f'{name} top the table',
    )


def _fixture(fixture_id, when, home, away, status='NS', league_name='UEFA Europa League', round_name='Round of 16'):
    return {
        'fixture': {'id': fixture_id, 'date': iso_utc(when), 'status': {'short': status}},
        'league': {'name': league_name, 'round': round_name},
        'teams': {
            'home': {'id': home[0], 'name': home[1], 'logo': f'https://logo/{home[0]}.png'},
            'away': {'id': away[0], 'name': away[1], 'logo': f'https://logo/{away[0]}.png'},
        },
    }


class TestIsFixtureStillActive:
    """Tests for the live / terminal / future classification."""

    def test_finished_in_past(self):
        assert is_fixture_still_active(NOW - timedelta(days=1), 'FT', NOW) is False

    def test_not_started_tomorrow(self):
        assert is_fixture_still_active(NOW + timedelta(days=1), 'NS', NOW) is True

    def test_unknown_status_yesterday(self):
        assert is_fixture_still_active(NOW - timedelta(days=1), 'XYZ', NOW) is False

    def test_unknown_status_tomorrow(self):
        assert is_fixture_still_active(NOW + timedelta(days=1), 'XYZ', NOW) is True

    def test_live_in_past(self):
        """Test that a live match counts even though it kicked off earlier."""
        assert is_fixture_still_active(NOW - timedelta(hours=1), '2H', NOW) is True

    def test_cancelled_in_future(self):
        assert is_fixture_still_active(NOW + timedelta(days=3), 'CANC', NOW) is False

    def test_missing_date(self):
        assert is_fixture_still_active(None, 'NS', NOW) is False


class TestResolveEuropeanActivity:
    """Tests for resolve_european_activity."""

    def test_match_by_id_and_name(self):
        """Test id-first matching with a normalized-name fallback."""
        tracked = [_entry(598, 'FK Crvena Zvezda'), _entry(571, 'Red Bull Salzburg')]
        fixtures = CompetitionFixtures(3, [
            _fixture(1, NOW + timedelta(days=7), (598, 'Crvena Zvezda'), (50, 'Roma')),
            _fixture(2, NOW + timedelta(days=8), (51, 'Lazio'), (None, 'Red Bull  Salzburg')),
        ])

        teams = resolve_european_activity([fixtures], tracked, NOW)

        by_name = {team.team_name: team for team in teams}
        assert by_name['FK Crvena Zvezda'].is_active_in_europe
        assert by_name['FK Crvena Zvezda'].next_opponent_name == 'Roma'
        assert by_name['Red Bull Salzburg'].next_opponent_name == 'Lazio'
        assert by_name['Red Bull Salzburg'].next_fixture_label == 'Lazio vs Red Bull  Salzburg'

    def test_one_record_per_team(self):
        """Test that a team in several competitions still gets one record."""
        tracked = [_entry(571, 'Red Bull Salzburg')]
        competitions = [
            CompetitionFixtures(2, [
                _fixture(1, NOW - timedelta(days=30), (571, 'Red Bull Salzburg'), (50, 'Brest'),
                         status='FT', league_name='UEFA Champions League'),
            ]),
            CompetitionFixtures(3, [
                _fixture(2, NOW + timedelta(days=7), (571, 'Red Bull Salzburg'), (51, 'Ajax')),
                _fixture(3, NOW + timedelta(days=14), (51, 'Ajax'), (571, 'Red Bull Salzburg')),
            ]),
        ]

        teams = resolve_european_activity(competitions, tracked, NOW)

        assert len(teams) == 1
        assert [c.league_id for c in teams[0].competitions] == [2, 3]
        assert teams[0].is_active_in_europe

    def test_next_fixtures_limited_sorted_and_distinct(self):
        tracked = [_entry(571, 'Red Bull Salzburg')]
        later = _fixture(3, NOW + timedelta(days=21), (571, 'Red Bull Salzburg'), (53, 'C'))
        soonest = _fixture(1, NOW + timedelta(days=7), (571, 'Red Bull Salzburg'), (51, 'A'))
        middle = _fixture(2, NOW + timedelta(days=14), (52, 'B'), (571, 'Red Bull Salzburg'))
        competitions = [CompetitionFixtures(3, [later, soonest, middle, soonest])]

        team = resolve_european_activity(competitions, tracked, NOW)[0]

        assert [f.fixture_id for f in team.next_fixtures] == [1, 2]
        assert team.next_fixture_date == team.next_fixtures[0].fixture_date
        assert team.next_fixtures[0].round == 'Round of 16'

    def test_eliminated_team(self):
        """Test that only finished fixtures leave a team inactive with its competition listed."""
        tracked = [_entry(565, 'BSC Young Boys')]
        competitions = [CompetitionFixtures(2, [
            _fixture(1, NOW - timedelta(days=30), (565, 'BSC Young Boys'), (50, 'Inter'),
                     status='FT', league_name='UEFA Champions League'),
        ])]

        team = resolve_european_activity(competitions, tracked, NOW)[0]

        assert team.is_active_in_europe is False
        assert team.next_fixtures == []
        assert team.competitions[0].league_name == 'UEFA Champions League'
        assert describe_activity(team)['europe_status_note'] == 'Out of UEFA Champions League'

    def test_sorted_by_name_and_untouched_teams_kept(self):
        tracked = [_entry(2, 'Sparta Praha'), _entry(1, 'Celtic')]
        teams = resolve_european_activity([CompetitionFixtures(2, [])], tracked, NOW)

        assert [team.team_name for team in teams] == ['Celtic', 'Sparta Praha']
        assert not any(team.is_active_in_europe for team in teams)


class TestSummarizeCompetitions:

    def test_counts_and_warning(self):
        tracked = [_entry(571, 'Red Bull Salzburg')]
        competitions = [
            CompetitionFixtures(3, [
                _fixture(1, NOW + timedelta(days=7), (571, 'Red Bull Salzburg'), (51, 'Ajax')),
                _fixture(2, NOW + timedelta(days=7), (52, 'Roma'), (53, 'Porto')),
            ]),
            CompetitionFixtures(848, [
                _fixture(3, NOW + timedelta(days=7), (54, 'Betis'), (55, 'Gent'), league_name='Conference League'),
            ]),
        ]

        with pytest.warns(PartialCoverageWarning):
            summaries = summarize_competitions(competitions, tracked)

        assert summaries[0].fixtures == 2
        assert summaries[0].matched_fixtures == 1
        assert summaries[0].league_name == 'UEFA Europa League'
        assert summaries[1].matched_fixtures == 0


class TestDescribeActivity:

    def test_no_record(self):
        assert all(value is None for value in describe_activity(None).values())

    def test_active_team(self):
        tracked = [_entry(571, 'Red Bull Salzburg')]
        competitions = [CompetitionFixtures(3, [
            _fixture(1, NOW + timedelta(days=7), (571, 'Red Bull Salzburg'), (51, 'Ajax')),
        ])]
        fields = describe_activity(resolve_european_activity(competitions, tracked, NOW)[0])

        assert fields['is_active_in_europe'] is True
        assert fields['europe_competition'] == 'UEFA Europa League'
        assert fields['europe_stage'] == 'Round of 16'
        assert fields['europe_status_note'] == 'Next: Red Bull Salzburg vs Ajax'
