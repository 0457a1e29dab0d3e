"""European-activity resolution for tracked teams."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .constants import LIVE_STATUSES, NEXT_FIXTURES_LIMIT, TERMINAL_STATUSES
from .name_matcher import TeamNameIndex
from .schemas import (
    CompetitionRef,
    CompetitionSummary,
    EuropeanActiveTeamStatus,
    EuropeanFixture,
    RaceEntry,
)
from .utils import build_model, iso_utc, parse_instant, warn_partial_coverage

logger = logging.getLogger('uclrace.europe')


@dataclass
class CompetitionFixtures:
    """Raw fixtures fetched for one European competition."""

    league_id: int
    fixtures: list[dict[str, Any]]

    @property
    def league_name(self) -> str:
        for fixture in self.fixtures:
            name = (fixture.get('league') or {}).get('name')
            if name:
                return name
        return f'League {self.league_id}'


def is_fixture_still_active(fixture_date: Optional[datetime], status_short: Optional[str], now: datetime) -> bool:
    """
    Classify a fixture as still relevant for European activity.

    Live codes are always active and terminal codes never are. Any other
    code, including ones this module does not know, is active only if
    the fixture is scheduled at or after ``now``.
    """
    if status_short in LIVE_STATUSES:
        return True
    if status_short in TERMINAL_STATUSES:
        return False
    if fixture_date is None:
        return False
    return fixture_date >= now


def _fixture_sides(fixture: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    teams = fixture.get('teams') or {}
    return teams.get('home') or {}, teams.get('away') or {}


def _build_index(tracked: list[RaceEntry]) -> TeamNameIndex[RaceEntry]:
    index: TeamNameIndex[RaceEntry] = TeamNameIndex()
    for entry in tracked:
        index.add(entry, entry.team_id, entry.team_name)
    return index


def _empty_status(entry: RaceEntry) -> EuropeanActiveTeamStatus:
    return EuropeanActiveTeamStatus(team_id=entry.team_id, team_name=entry.team_name, team_logo=entry.team_logo)


def resolve_european_activity(
    competitions: list[CompetitionFixtures],
    tracked: list[RaceEntry],
    now: datetime,
) -> list[EuropeanActiveTeamStatus]:
    """
    Build one activity record per tracked team.

    Fixture sides are matched to tracked teams by provider id first and
    by normalized name second. A team is active if any matched fixture is
    still active; its next fixtures keep the two soonest distinct active
    fixtures in date order.

    Returns:
        Team statuses sorted by team name
    """
    index = _build_index(tracked)
    statuses: dict[int, EuropeanActiveTeamStatus] = {}
    for entry in tracked:
        statuses.setdefault(entry.team_id, _empty_status(entry))
    upcoming: dict[int, dict[Any, tuple[datetime, EuropeanFixture]]] = {team_id: {} for team_id in statuses}

    for competition in competitions:
        for fixture in competition.fixtures:
            info = fixture.get('fixture') or {}
            fixture_date = parse_instant(info.get('date'))
            status_short = (info.get('status') or {}).get('short') or ''
            league = fixture.get('league') or {}
            league_name = league.get('name') or f'League {competition.league_id}'
            home, away = _fixture_sides(fixture)
            label = f'{home.get("name") or "TBD"} vs {away.get("name") or "TBD"}'
            active = is_fixture_still_active(fixture_date, status_short, now)

            for side, opponent in ((home, away), (away, home)):
                entry = index.find(side.get('id'), side.get('name')) if side else None
                if entry is None:
                    continue
                status = statuses[entry.team_id]

                if not any(c.league_id == competition.league_id for c in status.competitions):
                    status.competitions.append(CompetitionRef(league_id=competition.league_id, league_name=league_name))

                if not active:
                    continue
                status.is_active_in_europe = True

                fixture_id = info.get('id')
                if fixture_date is None or fixture_id in upcoming[entry.team_id]:
                    continue
                upcoming[entry.team_id][fixture_id] = (
                    fixture_date,
                    build_model(
                        EuropeanFixture,
                        f'European fixture {fixture_id}',
                        fixture_id=fixture_id,
                        league_id=competition.league_id,
                        league_name=league_name,
                        round=league.get('round'),
                        fixture_date=iso_utc(fixture_date),
                        fixture_label=label,
                        opponent_name=opponent.get('name'),
                        opponent_logo=opponent.get('logo'),
                        status_short=status_short or None,
                    ),
                )

    for team_id, status in statuses.items():
        ordered = sorted(upcoming[team_id].values(), key=lambda item: item[0])[:NEXT_FIXTURES_LIMIT]
        status.next_fixtures = [fixture for _, fixture in ordered]
        if status.next_fixtures:
            first = status.next_fixtures[0]
            status.next_fixture_date = first.fixture_date
            status.next_fixture_label = first.fixture_label
            status.next_opponent_name = first.opponent_name
            status.next_opponent_logo = first.opponent_logo

    return sorted(statuses.values(), key=lambda status: status.team_name.casefold())


def summarize_competitions(
    competitions: list[CompetitionFixtures],
    tracked: list[RaceEntry],
) -> list[CompetitionSummary]:
    """
    Count fixtures per competition and how many involve a tracked team.

    A competition without any tracked team is reported as partial
    coverage, not as an error.
    """
    index = _build_index(tracked)
    summaries = []
    for competition in competitions:
        matched = 0
        for fixture in competition.fixtures:
            if any(side and index.find(side.get('id'), side.get('name')) for side in _fixture_sides(fixture)):
                matched += 1
        summaries.append(CompetitionSummary(
            league_id=competition.league_id,
            league_name=competition.league_name,
            fixtures=len(competition.fixtures),
            matched_fixtures=matched,
        ))
        if matched == 0:
            warn_partial_coverage(
                f'No tracked team found in {len(competition.fixtures)} fixture(s) of competition {competition.league_id}',
                logger,
            )
    return summaries


def describe_activity(status: Optional[EuropeanActiveTeamStatus]) -> dict[str, Any]:
    """
    Flatten a team's activity into the europe* fields of standings and race rows.

    Returns all-None values when no activity record exists.
    """
    if status is None:
        return {
            'is_active_in_europe': None,
            'europe_competition': None,
            'europe_stage': None,
            'europe_next_fixture_date': None,
            'europe_next_fixture_label': None,
            'europe_status_note': None,
        }

    competitions = ', '.join(c.league_name for c in status.competitions) or None
    next_fixture = status.next_fixtures[0] if status.next_fixtures else None

    if status.is_active_in_europe and next_fixture:
        note = f'Next: {next_fixture.fixture_label}'
    elif status.is_active_in_europe:
        note = 'Active in Europe'
    elif status.competitions:
        note = f'Out of {competitions}'
    else:
        note = 'No European fixtures'

    return {
        'is_active_in_europe': status.is_active_in_europe,
        'europe_competition': next_fixture.league_name if next_fixture else competitions,
        'europe_stage': next_fixture.round if next_fixture else None,
        'europe_next_fixture_date': status.next_fixture_date,
        'europe_next_fixture_label': status.next_fixture_label,
        'europe_status_note': note,
    }
