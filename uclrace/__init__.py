from .errors import (
    RaceSyncError,
    ConfigurationError,
    UpstreamRequestError,
    UpstreamApiError,
    SchemaViolationError,
    PartialCoverageWarning,
)
from .config import SyncConfig, RaceSettings, TrackedLeague, TrackedTeam, load_config, load_race_settings
from .logging_config import setup_logging, get_logger
from .football_api import FootballApiClient, build_api_url, parse_api_errors
from .coefficients_api import (
    ApiConfig,
    ExplicitApiConfigResolver,
    ScrapedApiConfigResolver,
    CoefficientsClient,
    make_config_resolver,
)
from .name_matcher import normalize_name, names_match, TeamNameIndex, CoefficientMatcher
from .windows import compute_week_windows, build_result_label, resolve_team_fixtures
from .europe import is_fixture_still_active, resolve_european_activity, summarize_competitions
from .race import (
    build_highlighted_rows,
    build_league_summary,
    build_race_entries,
    rank_priority_order,
    coefficient_order,
    best_domestic_leader,
)
from .jobs import (
    load_race_snapshot,
    sync_coefficients,
    sync_standings,
    sync_domestic_fixtures,
    sync_european_active_teams,
)

__all__ = [
    # Errors
    'RaceSyncError',
    'ConfigurationError',
    'UpstreamRequestError',
    'UpstreamApiError',
    'SchemaViolationError',
    'PartialCoverageWarning',
    # Configuration
    'SyncConfig',
    'RaceSettings',
    'TrackedLeague',
    'TrackedTeam',
    'load_config',
    'load_race_settings',
    'setup_logging',
    'get_logger',
    # Upstream clients
    'FootballApiClient',
    'build_api_url',
    'parse_api_errors',
    'ApiConfig',
    'ExplicitApiConfigResolver',
    'ScrapedApiConfigResolver',
    'CoefficientsClient',
    'make_config_resolver',
    # Matching
    'normalize_name',
    'names_match',
    'TeamNameIndex',
    'CoefficientMatcher',
    # Windows and European activity
    'compute_week_windows',
    'build_result_label',
    'resolve_team_fixtures',
    'is_fixture_still_active',
    'resolve_european_activity',
    'summarize_competitions',
    # Race
    'build_highlighted_rows',
    'build_league_summary',
    'build_race_entries',
    'rank_priority_order',
    'coefficient_order',
    'best_domestic_leader',
    # Jobs
    'load_race_snapshot',
    'sync_coefficients',
    'sync_standings',
    'sync_domestic_fixtures',
    'sync_european_active_teams',
]
