"""Map upstream payload shapes onto the snapshot schemas.

Every mapper is total over well-formed input. Missing required
containers raise SchemaViolationError; optional fields fall back to
documented defaults.
"""

from typing import Any, Optional

from .constants import MAX_FORM_LENGTH
from .errors import SchemaViolationError
from .schemas import CoefficientEntry, LeagueInfo, ResultRow, StandingRow
from .utils import build_model


def _dig(obj: Any, *path) -> Any:
    """Safely navigate nested dicts/lists; None if any step is missing."""
    current = obj
    for key in path:
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list) and isinstance(key, int):
            current = current[key] if -len(current) <= key < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _safe_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def _safe_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def extract_response(payload: Any, context: str) -> list[Any]:
    """
    Return the ``response`` array of an API envelope.

    Raises:
        SchemaViolationError: If the envelope has no response array
    """
    response = payload.get('response') if isinstance(payload, dict) else None
    if not isinstance(response, list):
        raise SchemaViolationError(f'{context}: response[] is missing')
    return response


def _league_block(payload: Any, context: str) -> dict[str, Any]:
    league = _dig(extract_response(payload, context), 0, 'league')
    if not isinstance(league, dict):
        raise SchemaViolationError(f'{context}: response[0].league is missing')
    return league


def map_standing_row(raw: dict[str, Any]) -> StandingRow:
    """
    Map one provider standings row.

    ``played`` and ``goalsDiff`` default to 0; ``form`` and ``updatedAt``
    stay None when the provider omits them.

    Raises:
        SchemaViolationError: If rank, team id, team name or points are missing
    """
    rank = _safe_int(raw.get('rank'))
    team_id = _safe_int(_dig(raw, 'team', 'id'))
    team_name = _dig(raw, 'team', 'name')
    points = _safe_int(raw.get('points'))
    if rank is None or team_id is None or not team_name or points is None:
        raise SchemaViolationError(f'Standing row is missing rank, team or points: {raw!r}'[:300])

    form = raw.get('form')
    form = form[:MAX_FORM_LENGTH] if isinstance(form, str) and form else None

    played = _safe_int(_dig(raw, 'all', 'played'))
    goals_diff = _safe_int(raw.get('goalsDiff'))

    return build_model(
        StandingRow,
        f'Standing row for team {team_id}',
        rank=rank,
        team_id=team_id,
        team_name=team_name,
        team_logo=_dig(raw, 'team', 'logo'),
        points=points,
        played=played if played is not None else 0,
        goals_diff=goals_diff if goals_diff is not None else 0,
        form=form,
        updated_at=raw.get('update') or None,
    )


def map_standings(payload: Any, league_id: int) -> list[StandingRow]:
    """
    Map a /standings envelope to rank-ordered rows of the first table.

    Ranks must form 1..n with no gaps or duplicates.

    Raises:
        SchemaViolationError: If the table is missing, empty or mis-ranked
    """
    context = f'Standings for league {league_id}'
    table = _dig(_league_block(payload, context), 'standings', 0)
    if not isinstance(table, list) or not table:
        raise SchemaViolationError(f'{context}: standings table is missing')

    rows = sorted((map_standing_row(raw) for raw in table), key=lambda row: row.rank)
    ranks = [row.rank for row in rows]
    if ranks != list(range(1, len(rows) + 1)):
        raise SchemaViolationError(f'{context}: ranks are not contiguous from 1: {ranks}')
    return rows


def map_league_info(payload: Any, league_id: int, season: int) -> LeagueInfo:
    """League identity fields from a /standings envelope."""
    league = _league_block(payload, f'Standings for league {league_id}')
    first_row = _dig(league, 'standings', 0, 0) or {}
    return build_model(
        LeagueInfo,
        f'League info for league {league_id}',
        id=_safe_int(league.get('id')) or league_id,
        name=league.get('name') or f'League {league_id}',
        country=league.get('country') or '',
        logo=league.get('logo'),
        flag=league.get('flag'),
        season=_safe_int(league.get('season')) or season,
        updated_at=first_row.get('update') if isinstance(first_row, dict) else None,
    )


def map_result_row(raw: dict[str, Any]) -> ResultRow:
    return build_model(
        ResultRow,
        'Result fixture',
        fixture_id=_safe_int(_dig(raw, 'fixture', 'id')),
        date=_dig(raw, 'fixture', 'date'),
        home_team=_dig(raw, 'teams', 'home', 'name') or 'TBD',
        away_team=_dig(raw, 'teams', 'away', 'name') or 'TBD',
        home_goals=_safe_int(_dig(raw, 'goals', 'home')),
        away_goals=_safe_int(_dig(raw, 'goals', 'away')),
        status_short=_dig(raw, 'fixture', 'status', 'short'),
    )


def map_results(payload: Any, league_id: int) -> list[ResultRow]:
    fixtures = extract_response(payload, f'Results for league {league_id}')
    return [map_result_row(raw) for raw in fixtures if isinstance(raw, dict)]


def map_coefficient_entry(raw: dict[str, Any], fallback_rank: int) -> CoefficientEntry:
    """
    Map one coefficient ranking member.

    The team name falls back from ``displayName`` to ``internationalName``;
    the rank is the provider's position, or ``fallback_rank`` (the item's
    1-based position in the collected list) when absent.
    """
    member = raw.get('member') or {}
    overall = raw.get('overallRanking') or {}
    competition = raw.get('competition') or {}

    position = overall.get('position')
    rank = position if isinstance(position, int) and not isinstance(position, bool) else fallback_rank

    return build_model(
        CoefficientEntry,
        f'Coefficient entry {fallback_rank}',
        rank=rank,
        team_id=_safe_int(member.get('id')),
        team_name=member.get('displayName') or member.get('internationalName'),
        team_official_name=member.get('displayOfficialName'),
        team_code=member.get('teamCode') or member.get('displayTeamCode'),
        country_code=member.get('countryCode'),
        country_name=member.get('countryName'),
        team_logo=member.get('logoUrl'),
        team_logo_medium=member.get('mediumLogoUrl'),
        team_logo_large=member.get('bigLogoUrl'),
        association_id=_safe_int(member.get('associationId')),
        association_logo=member.get('associationLogoUrl'),
        competition_id=_safe_int(competition.get('id')),
        competition_name=competition.get('displayName'),
        competition_type=competition.get('type'),
        coefficient=_safe_float(overall.get('totalPoints')),
        national_association_coefficient=_safe_float(overall.get('nationalAssociationPoints')),
        trend=overall.get('trend'),
        base_season_year=_safe_int(overall.get('baseSeasonYear')),
        target_season_year=_safe_int(overall.get('targetSeasonYear')),
    )


def map_coefficients(members: list[dict[str, Any]], limit: int) -> list[CoefficientEntry]:
    """Map collected members, order by rank and keep the top ``limit``."""
    clubs = [map_coefficient_entry(raw, index) for index, raw in enumerate(members, start=1)]
    clubs.sort(key=lambda club: club.rank)
    return clubs[:limit]
