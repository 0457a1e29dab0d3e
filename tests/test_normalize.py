"""Tests for mapping upstream payloads onto snapshot schemas."""

import pytest

from uclrace.errors import SchemaViolationError
from uclrace.normalize import (
    extract_response,
    map_coefficient_entry,
    map_coefficients,
    map_league_info,
    map_result_row,
    map_standing_row,
    map_standings,
)


def _row(rank, team_id, name, points, **extra):
    row = {'rank': rank, 'team': {'id': team_id, 'name': name, 'logo': f'https://logo/{team_id}.png'}, 'points': points}
    row.update(extra)
    return row


def _standings_payload(rows):
    return {
        'response': [{
            'league': {
                'id': 218,
                'name': 'Bundesliga',
                'country': 'Austria',
                'logo': 'https://logo/218.png',
                'flag': 'https://flag/at.svg',
                'season': 2025,
                'standings': [rows],
            },
        }],
        'errors': [],
    }


class TestStandingRow:
    """Tests for map_standing_row."""

    def test_defaults_for_missing_counts(self):
        """Test that played and goalsDiff default to 0 but form stays None."""
        row = map_standing_row(_row(1, 571, 'Red Bull Salzburg', 40))

        assert row.played == 0
        assert row.goals_diff == 0
        assert row.form is None
        assert row.updated_at is None
        assert row.is_highlighted is False
        assert row.coefficient is None

    def test_full_row(self):
        row = map_standing_row(_row(
            2, 637, 'Sturm Graz', 38,
            form='WWDLWLW', goalsDiff=12, all={'played': 20}, update='2026-02-22T00:00:00+00:00',
        ))

        assert row.form == 'WWDLW'
        assert row.goals_diff == 12
        assert row.played == 20
        assert row.updated_at == '2026-02-22T00:00:00+00:00'

    def test_missing_points_raises(self):
        with pytest.raises(SchemaViolationError):
            map_standing_row({'rank': 1, 'team': {'id': 1, 'name': 'A'}})

    def test_rank_zero_raises_schema_violation(self):
        """Test that an out-of-range rank is a schema violation, not a raw validation error."""
        with pytest.raises(SchemaViolationError, match='rank'):
            map_standings(_standings_payload([_row(0, 1, 'A', 40)]), 218)

    def test_non_string_team_name_raises_schema_violation(self):
        with pytest.raises(SchemaViolationError, match='team_name'):
            map_standing_row(_row(1, 571, 123, 40))

    def test_malformed_result_row(self):
        fixture = {'fixture': {'id': 1}, 'teams': {'home': {'name': ['Celtic']}, 'away': {'name': 'Hearts'}}}
        with pytest.raises(SchemaViolationError):
            map_result_row(fixture)


class TestStandings:
    """Tests for map_standings and map_league_info."""

    def test_sorted_by_rank(self):
        """Test that rows come back in contiguous rank order."""
        rows = map_standings(_standings_payload([
            _row(3, 3, 'C', 30),
            _row(1, 1, 'A', 40),
            _row(2, 2, 'B', 35),
        ]), 218)

        assert [row.rank for row in rows] == [1, 2, 3]
        assert [row.team_name for row in rows] == ['A', 'B', 'C']

    def test_gap_in_ranks_raises(self):
        with pytest.raises(SchemaViolationError):
            map_standings(_standings_payload([_row(1, 1, 'A', 40), _row(3, 3, 'C', 30)]), 218)

    def test_missing_response_raises(self):
        with pytest.raises(SchemaViolationError):
            map_standings({'errors': []}, 218)

    def test_empty_response_raises(self):
        with pytest.raises(SchemaViolationError):
            map_standings({'response': [], 'errors': []}, 218)

    def test_league_info(self):
        payload = _standings_payload([_row(1, 1, 'A', 40, update='2026-02-22T00:00:00+00:00')])
        info = map_league_info(payload, 218, 2025)

        assert info.id == 218
        assert info.name == 'Bundesliga'
        assert info.country == 'Austria'
        assert info.season == 2025
        assert info.updated_at == '2026-02-22T00:00:00+00:00'

    def test_extract_response_requires_list(self):
        with pytest.raises(SchemaViolationError):
            extract_response({'response': None}, 'Fixtures')
        assert extract_response({'response': [1]}, 'Fixtures') == [1]


class TestResultRow:

    def test_result_row(self):
        row = map_result_row({
            'fixture': {'id': 99, 'date': '2026-02-21T15:00:00+00:00', 'status': {'short': 'FT'}},
            'teams': {'home': {'name': 'Celtic'}, 'away': {'name': 'Rangers'}},
            'goals': {'home': 2, 'away': 1},
        })

        assert row.fixture_id == 99
        assert row.home_team == 'Celtic'
        assert row.away_goals == 1
        assert row.status_short == 'FT'


class TestCoefficientEntry:
    """Tests for map_coefficient_entry."""

    def test_display_name_preferred(self):
        entry = map_coefficient_entry({
            'member': {'id': 50064, 'displayName': 'Salzburg', 'internationalName': 'FC Salzburg'},
            'overallRanking': {'position': 29, 'totalPoints': 56.0, 'trend': 'UP'},
        }, fallback_rank=1)

        assert entry.team_name == 'Salzburg'
        assert entry.rank == 29
        assert entry.coefficient == 56.0
        assert entry.trend == 'UP'

    def test_international_name_fallback(self):
        entry = map_coefficient_entry({'member': {'internationalName': 'Crvena Zvezda'}}, fallback_rank=7)

        assert entry.team_name == 'Crvena Zvezda'
        assert entry.rank == 7
        assert entry.coefficient is None

    def test_coefficients_sorted_and_limited(self):
        members = [
            {'member': {'displayName': 'B'}, 'overallRanking': {'position': 2}},
            {'member': {'displayName': 'A'}, 'overallRanking': {'position': 1}},
            {'member': {'displayName': 'C'}, 'overallRanking': {'position': 3}},
        ]
        clubs = map_coefficients(members, limit=2)

        assert [club.team_name for club in clubs] == ['A', 'B']
