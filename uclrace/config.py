"""Job configuration: environment options plus the versioned race settings file."""

import os
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_EUROPE_COMPETITION_IDS,
    RACE_FILE,
    RANKINGS_PAGE_TEMPLATE,
)
from .errors import ConfigurationError, SchemaViolationError
from .utils import load_json

DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / 'data' / 'race_config.json'


class TrackedTeam(BaseModel):
    """A club followed in the replacement-slot race."""

    name: str = Field(..., min_length=1)
    team_id: int | None = Field(None, alias='teamId')

    class Config:
        extra = 'forbid'
        populate_by_name = True


class TrackedLeague(BaseModel):
    """A domestic league and the tracked clubs inside it."""

    id: int = Field(..., gt=0)
    teams: list[TrackedTeam] = Field(..., min_length=1)

    class Config:
        extra = 'forbid'


class RaceSettings(BaseModel):
    """Complete race_config.json file structure."""

    leagues: list[TrackedLeague] = Field(..., min_length=1)
    tie_break_order: list[str] = Field(default_factory=list, alias='tieBreakOrder')
    coefficient_aliases: dict[str, list[str]] = Field(default_factory=dict, alias='coefficientAliases')

    @field_validator('leagues')
    @classmethod
    def validate_unique_leagues(cls, v):
        """Ensure each league is configured once."""
        seen = set()
        for league in v:
            if league.id in seen:
                raise ValueError(f'League {league.id} is configured more than once')
            seen.add(league.id)
        return v

    class Config:
        extra = 'forbid'
        populate_by_name = True


class SyncConfig(BaseModel):
    """Options shared by all sync jobs. Passed explicitly into each job."""

    api_football_key: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    api_football_host: Optional[str] = None
    season: int = Field(..., ge=1990, le=2100)
    output_dir: Path = Path('data')
    race_url: Optional[str] = None
    request_timeout: float = Field(30.0, gt=0)

    # Domestic fixtures
    fixtures_timezone: str = 'Europe/Vienna'
    window_timezone: str = 'UTC'
    results_limit: int = Field(10, gt=0)
    results_status: str = 'FT'

    # European activity
    europe_competition_ids: list[int] = Field(default_factory=lambda: list(DEFAULT_EUROPE_COMPETITION_IDS))
    europe_to_date: Optional[str] = None
    europe_timezone: str = 'UTC'

    # Club coefficients
    uefa_rankings_year: Optional[int] = Field(None, gt=0)
    uefa_coeff_limit: int = Field(100, gt=0)
    uefa_page_size: int = Field(50, gt=0)
    uefa_language: str = 'DE'
    uefa_rankings_page_url: Optional[str] = None
    uefa_api_key: Optional[str] = None
    uefa_comp_api_url: Optional[str] = None

    # From race_config.json
    leagues: list[TrackedLeague] = Field(default_factory=list)
    tie_break_order: list[str] = Field(default_factory=list)
    coefficient_aliases: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator('fixtures_timezone', 'window_timezone', 'europe_timezone')
    @classmethod
    def validate_timezone(cls, v):
        """Ensure time zone names resolve."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f'Unknown time zone: {v}') from e
        return v

    @field_validator('europe_competition_ids')
    @classmethod
    def validate_competition_ids(cls, v):
        """Require at least one id and drop duplicates, keeping order."""
        unique = list(dict.fromkeys(v))
        if not unique:
            raise ValueError('At least one European competition id is required')
        if any(item <= 0 for item in unique):
            raise ValueError(f'Competition ids must be positive, got {unique}')
        return unique

    @property
    def football_host(self) -> str:
        """Host header value for the football API."""
        return self.api_football_host or urlparse(self.api_base_url).netloc

    @property
    def rankings_year(self) -> int:
        """UEFA ranking year: the calendar year the tracked season ends in."""
        return self.uefa_rankings_year or self.season + 1

    @property
    def rankings_page_url(self) -> str:
        return self.uefa_rankings_page_url or RANKINGS_PAGE_TEMPLATE.format(year=self.rankings_year)

    @property
    def europe_until(self) -> str:
        return self.europe_to_date or f'{self.season + 1}-08-27'

    @property
    def race_source(self) -> str | Path:
        """Where the fixture and European jobs read the race snapshot from."""
        return self.race_url or self.output_dir / RACE_FILE

    def require_football_key(self) -> str:
        """Return the football API key or fail before any network call."""
        if not self.api_football_key:
            raise ConfigurationError('Missing required environment variable: API_FOOTBALL_KEY')
        return self.api_football_key


def default_season(today: datetime | None = None) -> int:
    """The year the current European season started (seasons turn over in July)."""
    today = today or datetime.now(timezone.utc)
    return today.year if today.month >= 7 else today.year - 1


def load_race_settings(path: Path | str = DEFAULT_SETTINGS_PATH) -> RaceSettings:
    """
    Load tracked leagues, tie-break order and aliases from race_config.json.

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    try:
        return load_json(path, schema=RaceSettings)
    except FileNotFoundError as e:
        raise ConfigurationError(f'Race settings file not found: {path}') from e
    except SchemaViolationError as e:
        raise ConfigurationError(str(e)) from e
    except ValueError as e:
        raise ConfigurationError(f'Race settings file {path} is not valid JSON: {e}') from e


def _env_value(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_positive_int(name: str, value: str | None) -> int | None:
    if value is None:
        return None
    try:
        parsed = int(value, 10)
    except ValueError:
        parsed = 0
    if parsed <= 0:
        raise ConfigurationError(f'{name} must be a positive integer, received "{value}"')
    return parsed


def _parse_id_list(name: str, value: str | None) -> list[int] | None:
    if value is None:
        return None
    ids = []
    for item in value.split(','):
        item = item.strip()
        if item.isdigit() and int(item) > 0:
            ids.append(int(item))
    if not ids:
        raise ConfigurationError(f'{name} must contain at least one numeric id, received "{value}"')
    return ids


_STRING_OPTIONS = {
    'API_FOOTBALL_KEY': 'api_football_key',
    'API_BASE_URL': 'api_base_url',
    'API_FOOTBALL_HOST': 'api_football_host',
    'OUTPUT_DIR': 'output_dir',
    'RACE_URL': 'race_url',
    'DOMESTIC_FIXTURES_TIMEZONE': 'fixtures_timezone',
    'WINDOW_TIMEZONE': 'window_timezone',
    'RESULTS_STATUS': 'results_status',
    'EUROPE_ACTIVE_TO_DATE': 'europe_to_date',
    'EUROPE_ACTIVE_TIMEZONE': 'europe_timezone',
    'UEFA_RANKINGS_PAGE_URL': 'uefa_rankings_page_url',
    'UEFA_API_KEY': 'uefa_api_key',
    'UEFA_COMP_API_URL': 'uefa_comp_api_url',
}

_INT_OPTIONS = {
    'SEASON': 'season',
    'RESULTS_LIMIT': 'results_limit',
    'UEFA_RANKINGS_YEAR': 'uefa_rankings_year',
    'UEFA_COEFF_LIMIT': 'uefa_coeff_limit',
    'UEFA_COEFF_PAGE_SIZE': 'uefa_page_size',
    'REQUEST_TIMEOUT': 'request_timeout',
}


def load_config(
    env: Mapping[str, str] | None = None,
    settings_path: Path | str | None = None,
    **overrides,
) -> SyncConfig:
    """
    Build a SyncConfig from environment variables and race_config.json.

    Blank environment values count as unset. When ``env`` is None the
    process environment is used, after loading an optional ``.env`` file.

    Args:
        env: Environment mapping (default: os.environ)
        settings_path: race_config.json location (default: RACE_CONFIG_PATH or data/race_config.json)
        **overrides: Field values that win over the environment (e.g. from CLI flags)

    Returns:
        Validated SyncConfig

    Raises:
        ConfigurationError: If any option is invalid
    """
    if env is None:
        load_dotenv()
        env = os.environ

    values: dict = {}
    for key, field in _STRING_OPTIONS.items():
        value = _env_value(env, key)
        if value is not None:
            values[field] = value
    for key, field in _INT_OPTIONS.items():
        value = _parse_positive_int(key, _env_value(env, key))
        if value is not None:
            values[field] = value

    competition_ids = _parse_id_list('EUROPE_ACTIVE_LEAGUE_IDS', _env_value(env, 'EUROPE_ACTIVE_LEAGUE_IDS'))
    if competition_ids is not None:
        values['europe_competition_ids'] = competition_ids
    language = _env_value(env, 'UEFA_LANGUAGE')
    if language:
        values['uefa_language'] = language.upper()

    values.setdefault('season', default_season())
    values.update({key: value for key, value in overrides.items() if value is not None})

    settings_path = settings_path or _env_value(env, 'RACE_CONFIG_PATH') or DEFAULT_SETTINGS_PATH
    settings = load_race_settings(settings_path)
    values['leagues'] = settings.leagues
    values['tie_break_order'] = settings.tie_break_order
    values['coefficient_aliases'] = settings.coefficient_aliases

    try:
        return SyncConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f'Invalid configuration:\n{e}') from e
