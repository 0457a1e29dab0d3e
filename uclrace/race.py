"""Cross-league race aggregation.

Per-league standings are reduced to highlighted rows for the tracked
teams, enriched with coefficients and European activity, and lifted into
one race list with two orderings:

- rank-priority: domestic leaders first, then coefficient order
- coefficient: coefficient descending, then the manual tie-break list,
  then team name
"""

import logging
from typing import Optional

from .config import TrackedTeam
from .constants import TOP_STANDINGS
from .europe import describe_activity
from .name_matcher import CoefficientMatcher, TeamNameIndex, normalize_name
from .schemas import (
    CoefficientEntry,
    CoefficientProvenance,
    EuropeanActiveTeamStatus,
    HeadlineTeam,
    HighlightedTeamRow,
    LeagueInfo,
    RaceEntry,
    RaceLeagueSummary,
    StandingRow,
)
from .utils import warn_partial_coverage

logger = logging.getLogger('uclrace.race')


def _points(value: int) -> str:
    return f'{value} pt' if value == 1 else f'{value} pts'


def describe_standing(row: StandingRow, leader: StandingRow, comparison: Optional[StandingRow], delta: int) -> str:
    """Human-readable one-line summary of a team's table position."""
    if row.rank == 1:
        if comparison is None:
            return f'{row.team_name} top the table'
        if delta == 0:
            return f'{row.team_name} top the table on equal points with {comparison.team_name}'
        return f'{row.team_name} lead {comparison.team_name} by {_points(delta)}'

    if delta == 0:
        return f'{row.team_name} are level on points with {leader.team_name} (rank {row.rank})'
    return f'{row.team_name} trail {leader.team_name} by {_points(abs(delta))} (rank {row.rank})'


def compare_to_table(row: StandingRow, standings: list[StandingRow]) -> HighlightedTeamRow:
    """
    Add comparison analysis to one standing row.

    The comparison team is the leader for everyone else and the
    second-placed team for the leader itself.
    """
    leader = standings[0]
    if row.rank == 1:
        comparison = standings[1] if len(standings) > 1 else None
    else:
        comparison = leader

    delta = row.points - comparison.points if comparison else 0
    return HighlightedTeamRow(
        **row.model_dump(exclude={'is_highlighted'}),
        is_highlighted=True,
        focus_is_first=row.rank == 1,
        points_to_first=0 if row.rank == 1 else max(leader.points - row.points, 0),
        points_delta_to_comparison=delta,
        comparison_team_name=comparison.team_name if comparison else None,
        summary=describe_standing(row, leader, comparison, delta),
    )


def build_highlighted_rows(
    standings: list[StandingRow], tracked: list[TrackedTeam], league_id: Optional[int] = None
) -> tuple[list[HighlightedTeamRow], list[str]]:
    """
    Find each tracked team in a rank-ordered table.

    Teams are matched by provider id when configured, else by normalized
    name. A tracked team missing from the table is reported, not fatal.

    Returns:
        (highlighted rows in rank order, names of tracked teams not found)
    """
    index: TeamNameIndex[StandingRow] = TeamNameIndex()
    for row in standings:
        index.add(row, row.team_id, row.team_name)

    found: dict[int, StandingRow] = {}
    missing: list[str] = []
    for team in tracked:
        row = index.find(team.team_id, team.name)
        if row is None:
            missing.append(team.name)
            continue
        found.setdefault(row.team_id, row)

    if missing:
        where = f'league {league_id}' if league_id is not None else 'standings'
        warn_partial_coverage(f'Tracked team(s) not found in {where}: {", ".join(missing)}', logger)

    rows = [compare_to_table(row, standings) for row in sorted(found.values(), key=lambda r: r.rank)]
    return rows, missing


def mark_highlighted(standings: list[StandingRow], highlighted: list[HighlightedTeamRow]) -> list[StandingRow]:
    ids = {row.team_id for row in highlighted}
    return [row.model_copy(update={'is_highlighted': row.team_id in ids}) for row in standings]


def build_coefficient_matcher(
    clubs: list[CoefficientEntry], aliases: Optional[dict[str, list[str]]] = None
) -> CoefficientMatcher[CoefficientEntry]:
    return CoefficientMatcher(((club.team_name, club) for club in clubs), aliases)


def build_activity_index(teams: list[EuropeanActiveTeamStatus]) -> TeamNameIndex[EuropeanActiveTeamStatus]:
    index: TeamNameIndex[EuropeanActiveTeamStatus] = TeamNameIndex()
    for status in teams:
        index.add(status, status.team_id, status.team_name)
    return index


def enrich_standings(
    standings: list[StandingRow],
    matcher: Optional[CoefficientMatcher[CoefficientEntry]] = None,
    activity: Optional[TeamNameIndex[EuropeanActiveTeamStatus]] = None,
) -> list[StandingRow]:
    """Copy matched coefficients and European activity onto standing rows."""
    enriched = []
    for row in standings:
        update = {}
        if matcher is not None:
            club = matcher.match(row.team_name)
            update['coefficient'] = club.coefficient if club else None
        if activity is not None:
            update.update(describe_activity(activity.find(row.team_id, row.team_name)))
        enriched.append(row.model_copy(update=update))
    return enriched


def build_league_summary(
    league: LeagueInfo,
    standings: list[StandingRow],
    highlighted: list[HighlightedTeamRow],
    file_path: str,
) -> RaceLeagueSummary:
    return RaceLeagueSummary(
        league_id=league.id,
        league_name=league.name,
        league_country=league.country,
        league_logo=league.logo,
        league_flag=league.flag,
        league_updated_at=league.updated_at,
        file_path=file_path,
        top5=standings[:TOP_STANDINGS],
        highlighted_teams=highlighted,
    )


def build_race_entries(leagues: list[RaceLeagueSummary]) -> list[RaceEntry]:
    """
    Lift every league's highlighted rows into race entries.

    Unmatched coefficients become 0 and unknown European activity becomes
    inactive. A team listed by two leagues is only taken once.
    """
    entries: list[RaceEntry] = []
    seen: set[int] = set()
    for league in leagues:
        for row in league.highlighted_teams:
            if row.team_id in seen:
                logger.warning(f'{row.team_name} is highlighted in more than one league; keeping the first')
                continue
            seen.add(row.team_id)
            entries.append(RaceEntry(
                league_id=league.league_id,
                league_name=league.league_name,
                league_country=league.league_country,
                league_logo=league.league_logo,
                league_flag=league.league_flag,
                team_id=row.team_id,
                team_name=row.team_name,
                team_logo=row.team_logo,
                rank=row.rank,
                points=row.points,
                played=row.played,
                goals_diff=row.goals_diff,
                points_to_first=row.points_to_first,
                points_delta_to_comparison=row.points_delta_to_comparison,
                coefficient=row.coefficient if row.coefficient is not None else 0.0,
                is_active_in_europe=bool(row.is_active_in_europe),
                europe_competition=row.europe_competition,
                europe_stage=row.europe_stage,
                europe_next_fixture_date=row.europe_next_fixture_date,
                europe_next_fixture_label=row.europe_next_fixture_label,
                europe_status_note=row.europe_status_note,
                comparison_team_name=row.comparison_team_name,
                focus_is_first=row.focus_is_first,
                summary=row.summary,
            ))
    return entries


def summarize_coefficient_matches(
    leagues: list[RaceLeagueSummary], source: Optional[str], generated_at: Optional[str]
) -> CoefficientProvenance:
    """Record how many highlighted teams got a coefficient and which fell back to 0."""
    rows = [row for league in leagues for row in league.highlighted_teams]
    fallback = [row.team_name for row in rows if row.coefficient is None]
    if fallback and source:
        warn_partial_coverage(f'No coefficient match for: {", ".join(fallback)}', logger)
    return CoefficientProvenance(
        source=source,
        generated_at=generated_at,
        matched_teams=len(rows) - len(fallback),
        fallback_teams=fallback,
    )


def tie_break_key(tie_break_order: list[str]):
    """
    Sort key for coefficient order.

    Equal coefficients are separated by position in ``tie_break_order``
    (listed teams first), then by case-folded name, then by team id.
    """
    positions: dict[str, int] = {}
    for position, name in enumerate(tie_break_order):
        positions.setdefault(normalize_name(name), position)
    unlisted = len(tie_break_order)

    def key(entry: RaceEntry):
        return (
            -entry.coefficient,
            positions.get(normalize_name(entry.team_name), unlisted),
            entry.team_name.casefold(),
            entry.team_id,
        )

    return key


def coefficient_order(entries: list[RaceEntry], tie_break_order: Optional[list[str]] = None) -> list[RaceEntry]:
    """Entries by coefficient descending with the tie-break chain applied."""
    return sorted(entries, key=tie_break_key(tie_break_order or []))


def rank_priority_order(entries: list[RaceEntry], tie_break_order: Optional[list[str]] = None) -> list[RaceEntry]:
    """Domestic leaders first; each group in coefficient order."""
    key = tie_break_key(tie_break_order or [])
    return sorted(entries, key=lambda entry: (0 if entry.rank == 1 else 1, key(entry)))


def best_domestic_leader(
    entries: list[RaceEntry], tie_break_order: Optional[list[str]] = None
) -> Optional[HeadlineTeam]:
    """The rank-1 entry with the highest coefficient, or None if no tracked team leads its league."""
    leaders = [entry for entry in entries if entry.rank == 1]
    if not leaders:
        return None
    best = coefficient_order(leaders, tie_break_order)[0]
    return HeadlineTeam(
        team_id=best.team_id,
        team_name=best.team_name,
        league_id=best.league_id,
        league_name=best.league_name,
        coefficient=best.coefficient,
    )
