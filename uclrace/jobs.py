"""Batch sync jobs.

Standings and rankings:
    sync_coefficients       -> coefficients.json
    sync_standings          -> leagues/{id}.json + race.json

Fixture jobs (read race.json):
    sync_domestic_fixtures      -> domestic-fixtures.json
    sync_european_active_teams  -> european-active-teams.json

Every job takes an explicit SyncConfig and fails on the first upstream
error; nothing is written unless all fetches succeeded.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

import requests
from pydantic import ValidationError

from .coefficients_api import CoefficientsClient, make_config_resolver
from .config import SyncConfig
from .constants import (
    COEFFICIENT_RANGE,
    COEFFICIENT_TYPE,
    COEFFICIENTS_FILE,
    DOMESTIC_FIXTURES_FILE,
    ERROR_BODY_LIMIT,
    EUROPE_ACTIVE_FILE,
    LEAGUES_DIR,
    RACE_FILE,
    TOP_STANDINGS,
)
from .errors import ConfigurationError, SchemaViolationError, UpstreamRequestError
from .europe import CompetitionFixtures, resolve_european_activity, summarize_competitions
from .football_api import FootballApiClient, decode_json
from .normalize import extract_response, map_coefficients, map_league_info, map_results, map_standings
from .race import (
    best_domestic_leader,
    build_activity_index,
    build_coefficient_matcher,
    build_highlighted_rows,
    build_league_summary,
    build_race_entries,
    coefficient_order,
    enrich_standings,
    mark_highlighted,
    rank_priority_order,
    summarize_coefficient_matches,
)
from .schemas import (
    CoefficientsSnapshot,
    CoefficientsSource,
    DomesticFixturesSnapshot,
    DomesticFixturesSource,
    EuropeanActiveSnapshot,
    EuropeanActiveSource,
    EuropeanActiveSummary,
    FixtureCoverage,
    LeagueSnapshot,
    LeagueSource,
    RaceEntry,
    RaceHeadline,
    RaceSnapshot,
)
from .utils import iso_utc, load_json, load_json_safe, run_concurrently, save_json, utc_now, write_snapshots
from .windows import compute_week_windows, resolve_team_fixtures

logger = logging.getLogger('uclrace.jobs')


def _football_client(config: SyncConfig, session: Optional[requests.Session] = None) -> FootballApiClient:
    return FootballApiClient(
        config.require_football_key(),
        base_url=config.api_base_url,
        host=config.football_host,
        session=session,
        timeout=config.request_timeout,
    )


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(('http://', 'https://'))


def load_race_snapshot(
    source: str | Path,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> list[RaceEntry]:
    """
    Read the tracked-team race entries from a race.json path or URL.

    Raises:
        UpstreamRequestError: If the snapshot cannot be downloaded
        SchemaViolationError: If the document has no valid race list
    """
    if _is_url(source):
        logger.debug(f'GET {source}')
        response = (session or requests.Session()).get(source, timeout=timeout)
        if not response.ok:
            raise UpstreamRequestError(
                response.status_code, source, response.text[:ERROR_BODY_LIMIT], context='Race snapshot request'
            )
        payload = decode_json(response, source, context='Race snapshot request')
    else:
        try:
            payload = load_json(source)
        except FileNotFoundError as e:
            raise SchemaViolationError(f'Race snapshot not found at {source}; run the standings job first') from e
        except ValueError as e:
            raise SchemaViolationError(f'Invalid race snapshot at {source}: {e}') from e

    race = payload.get('race') if isinstance(payload, dict) else None
    if not isinstance(race, list):
        raise SchemaViolationError(f'Invalid race snapshot at {source}: race[] is missing.')

    try:
        entries = [RaceEntry.model_validate(item) for item in race]
    except ValidationError as e:
        raise SchemaViolationError(f'Invalid race entry in {source}:\n{e}') from e

    logger.info(f'Loaded {len(entries)} tracked team(s) from {source}')
    return entries


def sync_coefficients(
    config: SyncConfig,
    session: Optional[requests.Session] = None,
    now: Optional[datetime] = None,
) -> CoefficientsSnapshot:
    """Fetch the club coefficient ranking and write coefficients.json."""
    now = now or utc_now()
    session = session or requests.Session()

    resolver = make_config_resolver(
        config.rankings_page_url,
        api_key=config.uefa_api_key,
        comp_api_url=config.uefa_comp_api_url,
        session=session,
        timeout=config.request_timeout,
    )
    api_config = resolver.resolve()
    client = CoefficientsClient(
        api_config,
        season_year=config.rankings_year,
        page_size=config.uefa_page_size,
        language=config.uefa_language,
        session=session,
        timeout=config.request_timeout,
    )

    fetched = client.fetch_top(config.uefa_coeff_limit)
    clubs = map_coefficients(fetched.members, config.uefa_coeff_limit)
    if not clubs:
        raise SchemaViolationError('No coefficient entries were returned by the ranking API.')

    snapshot = CoefficientsSnapshot(
        generated_at=iso_utc(now),
        source=CoefficientsSource(
            rankings_page_url=config.rankings_page_url,
            endpoint=client.endpoint,
            last_request_url=fetched.last_request_url,
            config_source=api_config.config_source,
            season_year=config.rankings_year,
            coefficient_range=COEFFICIENT_RANGE,
            coefficient_type=COEFFICIENT_TYPE,
            language=config.uefa_language,
            page_size=config.uefa_page_size,
            requested_limit=config.uefa_coeff_limit,
            total_available=fetched.total_available,
            fetched=len(clubs),
            last_update_date=fetched.last_update_date,
        ),
        clubs=clubs,
    )

    output_path = config.output_dir / COEFFICIENTS_FILE
    save_json(output_path, snapshot)
    logger.info(f'Saved {len(clubs)} coefficient entries to {output_path} (config: {api_config.config_source})')
    return snapshot


def sync_standings(
    config: SyncConfig,
    client: Optional[FootballApiClient] = None,
    now: Optional[datetime] = None,
) -> RaceSnapshot:
    """
    Fetch standings and recent results for every tracked league and
    write one league snapshot per league plus race.json.

    Coefficients and European activity come from the previous
    coefficients.json and european-active-teams.json when present.
    """
    now = now or utc_now()
    client = client or _football_client(config)
    generated_at = iso_utc(now)

    if not config.leagues:
        raise ConfigurationError('No tracked leagues configured')

    tasks = {}
    for league in config.leagues:
        tasks[(league.id, 'standings')] = lambda league_id=league.id: client.get_standings(league_id, config.season)
        tasks[(league.id, 'results')] = lambda league_id=league.id: client.get_fixtures(
            league_id, config.season, status=config.results_status, last=config.results_limit
        )
    logger.info(f'Fetching standings and results for {len(config.leagues)} league(s), season {config.season}')
    payloads = run_concurrently(tasks)

    coefficients = load_json_safe(config.output_dir / COEFFICIENTS_FILE, schema=CoefficientsSnapshot)
    matcher = build_coefficient_matcher(coefficients.clubs, config.coefficient_aliases) if coefficients else None
    activity_snapshot = load_json_safe(config.output_dir / EUROPE_ACTIVE_FILE, schema=EuropeanActiveSnapshot)
    activity = build_activity_index(activity_snapshot.teams) if activity_snapshot else None

    writes: list[tuple[Path, object]] = []
    summaries = []
    for league in config.leagues:
        standings_payload = payloads[(league.id, 'standings')]
        info = map_league_info(standings_payload, league.id, config.season)
        standings = enrich_standings(map_standings(standings_payload, league.id), matcher, activity)
        highlighted, missing = build_highlighted_rows(standings, league.teams, league.id)
        standings = mark_highlighted(standings, highlighted)

        file_path = f'{LEAGUES_DIR}/{league.id}.json'
        league_snapshot = LeagueSnapshot(
            generated_at=generated_at,
            source=LeagueSource(endpoint=client.standings_endpoint, league_id=league.id, season=config.season),
            league=info,
            highlight_teams=[team.name for team in league.teams],
            missing_teams=missing,
            top5=standings[:TOP_STANDINGS],
            highlighted_teams=highlighted,
            standings=standings,
            recent_results=map_results(payloads[(league.id, 'results')], league.id),
        )
        writes.append((config.output_dir / file_path, league_snapshot))
        summaries.append(build_league_summary(info, standings, highlighted, file_path))
        logger.info(f'{info.name}: {len(standings)} rows, {len(highlighted)}/{len(league.teams)} tracked team(s) found')

    entries = build_race_entries(summaries)
    race = RaceSnapshot(
        generated_at=generated_at,
        season=config.season,
        coefficients=summarize_coefficient_matches(
            summaries,
            source=str(config.output_dir / COEFFICIENTS_FILE) if coefficients else None,
            generated_at=coefficients.generated_at if coefficients else None,
        ),
        headline=RaceHeadline(best_domestic_leader=best_domestic_leader(entries, config.tie_break_order)),
        leagues=summaries,
        race=rank_priority_order(entries, config.tie_break_order),
        coefficient_ranking=[entry.team_name for entry in coefficient_order(entries, config.tie_break_order)],
    )
    writes.append((config.output_dir / RACE_FILE, race))

    write_snapshots(writes)
    logger.info(f'Race: {len(entries)} tracked team(s) across {len(summaries)} league(s)')
    return race


def sync_domestic_fixtures(
    config: SyncConfig,
    client: Optional[FootballApiClient] = None,
    now: Optional[datetime] = None,
    session: Optional[requests.Session] = None,
) -> DomesticFixturesSnapshot:
    """Resolve each tracked team's current-week and last-week domestic fixture."""
    now = now or utc_now()
    client = client or _football_client(config, session)
    entries = load_race_snapshot(config.race_source, session=session, timeout=config.request_timeout)

    windows = compute_week_windows(now, config.window_timezone)
    display_tz = ZoneInfo(config.fixtures_timezone)
    league_ids = list(dict.fromkeys(entry.league_id for entry in entries))

    fixtures_by_league = run_concurrently({
        league_id: lambda league_id=league_id: extract_response(
            client.get_fixtures(
                league_id,
                config.season,
                from_date=windows.fetch_from,
                to_date=windows.fetch_to,
                timezone=config.fixtures_timezone,
            ),
            f'Fixtures for league {league_id}',
        )
        for league_id in league_ids
    })

    teams = {}
    for entry in entries:
        teams[entry.team_name] = resolve_team_fixtures(
            fixtures_by_league.get(entry.league_id, []), entry.team_id, windows, display_tz
        )

    coverage = FixtureCoverage(
        tracked_teams=len(entries),
        current_week_resolved=sum(1 for team in teams.values() if team.current_week),
        last_week_resolved=sum(1 for team in teams.values() if team.last_week),
    )
    snapshot = DomesticFixturesSnapshot(
        generated_at=iso_utc(now),
        source=DomesticFixturesSource(
            endpoint=client.fixtures_endpoint,
            race_snapshot_url=str(config.race_source),
            season=config.season,
            timezone=config.fixtures_timezone,
            window_timezone=config.window_timezone,
            leagues_fetched=len(league_ids),
        ),
        windows=windows.as_schema(),
        coverage=coverage,
        teams=teams,
    )

    output_path = config.output_dir / DOMESTIC_FIXTURES_FILE
    save_json(output_path, snapshot)
    logger.info(f'Saved domestic fixtures snapshot to {output_path}')
    logger.info(
        f'Coverage: current={coverage.current_week_resolved}/{coverage.tracked_teams}, '
        f'last={coverage.last_week_resolved}/{coverage.tracked_teams}'
    )
    return snapshot


def sync_european_active_teams(
    config: SyncConfig,
    client: Optional[FootballApiClient] = None,
    now: Optional[datetime] = None,
    session: Optional[requests.Session] = None,
) -> EuropeanActiveSnapshot:
    """Classify each tracked team as active or out of European competition."""
    now = now or utc_now()
    client = client or _football_client(config, session)
    entries = load_race_snapshot(config.race_source, session=session, timeout=config.request_timeout)

    from_date = now.astimezone(ZoneInfo(config.europe_timezone)).date().isoformat()
    to_date = config.europe_until

    fetched = run_concurrently({
        league_id: lambda league_id=league_id: extract_response(
            client.get_fixtures(
                league_id,
                config.season,
                from_date=from_date,
                to_date=to_date,
                timezone=config.europe_timezone,
            ),
            f'Fixtures for competition {league_id}',
        )
        for league_id in config.europe_competition_ids
    })
    competitions = [CompetitionFixtures(league_id, fixtures) for league_id, fixtures in fetched.items()]

    teams = resolve_european_activity(competitions, entries, now)
    active = sum(1 for team in teams if team.is_active_in_europe)
    snapshot = EuropeanActiveSnapshot(
        generated_at=iso_utc(now),
        source=EuropeanActiveSource(
            endpoint=client.fixtures_endpoint,
            race_snapshot_url=str(config.race_source),
            season=config.season,
            timezone=config.europe_timezone,
            from_=from_date,
            to=to_date,
            competition_ids=config.europe_competition_ids,
        ),
        competitions=summarize_competitions(competitions, entries),
        summary=EuropeanActiveSummary(tracked_teams=len(teams), active_teams=active),
        teams=teams,
    )

    output_path = config.output_dir / EUROPE_ACTIVE_FILE
    save_json(output_path, snapshot)
    logger.info(f'Saved european active teams snapshot to {output_path}')
    logger.info(f'Coverage: active={active}/{len(teams)}')
    return snapshot
