"""Pydantic schemas for every JSON snapshot the sync jobs produce.

Field names are snake_case in Python and camelCase on disk.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Base for snapshot documents: camelCase aliases, extra keys tolerated on read."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'


# ---------------------------------------------------------------------------
# Standings
# ---------------------------------------------------------------------------


class StandingRow(SnapshotModel):
    """One team's position in one domestic league table at fetch time."""

    rank: int = Field(..., ge=1)
    team_id: int
    team_name: str
    team_logo: Optional[str] = None
    points: int
    played: int = 0
    goals_diff: int = 0
    form: Optional[str] = None
    updated_at: Optional[str] = None
    is_highlighted: bool = False
    coefficient: Optional[float] = None
    is_active_in_europe: Optional[bool] = None
    europe_competition: Optional[str] = None
    europe_stage: Optional[str] = None
    europe_next_fixture_date: Optional[str] = None
    europe_next_fixture_label: Optional[str] = None
    europe_status_note: Optional[str] = None


class HighlightedTeamRow(StandingRow):
    """A tracked team's standing plus its comparison against the table."""

    focus_is_first: bool
    points_to_first: int = Field(..., ge=0)
    points_delta_to_comparison: int
    comparison_team_name: Optional[str] = None
    summary: str


class LeagueInfo(SnapshotModel):
    id: int
    name: str
    country: str = ''
    logo: Optional[str] = None
    flag: Optional[str] = None
    season: int
    updated_at: Optional[str] = None


class ResultRow(SnapshotModel):
    """A finished fixture from the league's recent results."""

    fixture_id: Optional[int] = None
    date: Optional[str] = None
    home_team: str
    away_team: str
    home_goals: Optional[int] = None
    away_goals: Optional[int] = None
    status_short: Optional[str] = None


class LeagueSource(SnapshotModel):
    endpoint: str
    league_id: int
    season: int


class LeagueSnapshot(SnapshotModel):
    """data/leagues/{leagueId}.json"""

    generated_at: str
    source: LeagueSource
    league: LeagueInfo
    highlight_teams: list[str]
    missing_teams: list[str] = Field(default_factory=list)
    top5: list[StandingRow]
    highlighted_teams: list[HighlightedTeamRow]
    standings: list[StandingRow]
    recent_results: list[ResultRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Race
# ---------------------------------------------------------------------------


class RaceEntry(SnapshotModel):
    """One tracked team in the cross-league race."""

    league_id: int
    league_name: str
    league_country: str = ''
    league_logo: Optional[str] = None
    league_flag: Optional[str] = None
    team_id: int
    team_name: str
    team_logo: Optional[str] = None
    rank: int
    points: int
    played: int = 0
    goals_diff: int = 0
    points_to_first: int
    points_delta_to_comparison: int
    coefficient: float = 0.0
    is_active_in_europe: bool = False
    europe_competition: Optional[str] = None
    europe_stage: Optional[str] = None
    europe_next_fixture_date: Optional[str] = None
    europe_next_fixture_label: Optional[str] = None
    europe_status_note: Optional[str] = None
    comparison_team_name: Optional[str] = None
    focus_is_first: bool
    summary: str


class RaceLeagueSummary(SnapshotModel):
    league_id: int
    league_name: str
    league_country: str = ''
    league_logo: Optional[str] = None
    league_flag: Optional[str] = None
    league_updated_at: Optional[str] = None
    file_path: str
    top5: list[StandingRow]
    highlighted_teams: list[HighlightedTeamRow]


class CoefficientProvenance(SnapshotModel):
    source: Optional[str] = None
    generated_at: Optional[str] = None
    matched_teams: int = 0
    fallback_teams: list[str] = Field(default_factory=list)


class HeadlineTeam(SnapshotModel):
    team_id: int
    team_name: str
    league_id: int
    league_name: str
    coefficient: float


class RaceHeadline(SnapshotModel):
    best_domestic_leader: Optional[HeadlineTeam] = None


class RaceSnapshot(SnapshotModel):
    """data/race.json"""

    generated_at: str
    season: int
    coefficients: Optional[CoefficientProvenance] = None
    headline: RaceHeadline = Field(default_factory=RaceHeadline)
    leagues: list[RaceLeagueSummary]
    race: list[RaceEntry]
    coefficient_ranking: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Coefficients
# ---------------------------------------------------------------------------


class CoefficientEntry(SnapshotModel):
    rank: int
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    team_official_name: Optional[str] = None
    team_code: Optional[str] = None
    country_code: Optional[str] = None
    country_name: Optional[str] = None
    team_logo: Optional[str] = None
    team_logo_medium: Optional[str] = None
    team_logo_large: Optional[str] = None
    association_id: Optional[int] = None
    association_logo: Optional[str] = None
    competition_id: Optional[int] = None
    competition_name: Optional[str] = None
    competition_type: Optional[str] = None
    coefficient: Optional[float] = None
    national_association_coefficient: Optional[float] = None
    trend: Optional[str] = None
    base_season_year: Optional[int] = None
    target_season_year: Optional[int] = None


class CoefficientsSource(SnapshotModel):
    rankings_page_url: str
    endpoint: str
    last_request_url: Optional[str] = None
    config_source: Literal['env', 'scraped', 'mixed']
    season_year: int
    coefficient_range: str
    coefficient_type: str
    language: str
    page_size: int
    requested_limit: int
    total_available: Optional[int] = None
    fetched: int
    last_update_date: Optional[str] = None


class CoefficientsSnapshot(SnapshotModel):
    """data/coefficients.json"""

    generated_at: str
    source: CoefficientsSource
    clubs: list[CoefficientEntry]


# ---------------------------------------------------------------------------
# Domestic fixtures
# ---------------------------------------------------------------------------


class DomesticFixtureRow(SnapshotModel):
    fixture_id: Optional[int] = None
    opponent: str
    opponent_logo: Optional[str] = None
    date: Optional[str] = None
    kickoff: str
    venue: Literal['home', 'away']
    result: Optional[str] = None
    status_short: Optional[str] = None
    status_long: Optional[str] = None


class TeamDomesticFixtures(SnapshotModel):
    current_week: Optional[DomesticFixtureRow] = None
    last_week: Optional[DomesticFixtureRow] = None


class DateRange(SnapshotModel):
    from_: str = Field(..., alias='from')
    to: str


class FixtureWindows(SnapshotModel):
    current_week: DateRange
    last_week: DateRange


class DomesticFixturesSource(SnapshotModel):
    endpoint: str
    race_snapshot_url: str
    season: int
    timezone: str
    window_timezone: str
    leagues_fetched: int


class FixtureCoverage(SnapshotModel):
    tracked_teams: int
    current_week_resolved: int
    last_week_resolved: int


class DomesticFixturesSnapshot(SnapshotModel):
    """data/domestic-fixtures.json"""

    generated_at: str
    source: DomesticFixturesSource
    windows: FixtureWindows
    coverage: FixtureCoverage
    teams: dict[str, TeamDomesticFixtures]


# ---------------------------------------------------------------------------
# European activity
# ---------------------------------------------------------------------------


class CompetitionRef(SnapshotModel):
    league_id: int
    league_name: str


class EuropeanFixture(SnapshotModel):
    fixture_id: Optional[int] = None
    league_id: int
    league_name: str
    round: Optional[str] = None
    fixture_date: str
    fixture_label: str
    opponent_name: Optional[str] = None
    opponent_logo: Optional[str] = None
    status_short: Optional[str] = None


class EuropeanActiveTeamStatus(SnapshotModel):
    team_id: int
    team_name: str
    team_logo: Optional[str] = None
    is_active_in_europe: bool = False
    competitions: list[CompetitionRef] = Field(default_factory=list)
    next_fixture_date: Optional[str] = None
    next_fixture_label: Optional[str] = None
    next_opponent_name: Optional[str] = None
    next_opponent_logo: Optional[str] = None
    next_fixtures: list[EuropeanFixture] = Field(default_factory=list)


class CompetitionSummary(SnapshotModel):
    league_id: int
    league_name: str
    fixtures: int
    matched_fixtures: int


class EuropeanActiveSource(SnapshotModel):
    endpoint: str
    race_snapshot_url: str
    season: int
    timezone: str
    from_: str = Field(..., alias='from')
    to: str
    competition_ids: list[int]


class EuropeanActiveSummary(SnapshotModel):
    tracked_teams: int
    active_teams: int


class EuropeanActiveSnapshot(SnapshotModel):
    """data/european-active-teams.json"""

    generated_at: str
    source: EuropeanActiveSource
    competitions: list[CompetitionSummary]
    summary: EuropeanActiveSummary
    teams: list[EuropeanActiveTeamStatus]
