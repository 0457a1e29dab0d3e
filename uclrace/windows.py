"""Week windows and per-team fixture selection for domestic fixtures."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

from .constants import FINISHED_STATUSES
from .schemas import DateRange, DomesticFixtureRow, FixtureWindows, TeamDomesticFixtures
from .utils import build_model, parse_instant


@dataclass(frozen=True)
class FixtureWindow:
    """A Monday-aligned 7-day calendar block, inclusive on both ends."""

    start: date
    end: date

    def as_range(self) -> DateRange:
        return DateRange(from_=self.start.isoformat(), to=self.end.isoformat())


@dataclass(frozen=True)
class WeekWindows:
    """Current and last week, computed once per run from one reference instant."""

    now: datetime
    tz: ZoneInfo
    current_week: FixtureWindow
    last_week: FixtureWindow

    @property
    def fetch_from(self) -> str:
        return self.last_week.start.isoformat()

    @property
    def fetch_to(self) -> str:
        return self.current_week.end.isoformat()

    def as_schema(self) -> FixtureWindows:
        return FixtureWindows(current_week=self.current_week.as_range(), last_week=self.last_week.as_range())


def compute_week_windows(now: datetime, tz_name: str = 'UTC') -> WeekWindows:
    """
    Compute the current and last week windows for ``now``.

    The current week starts on the Monday of the week containing ``now``
    in ``tz_name``; last week is the 7 days before it.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    tz = ZoneInfo(tz_name)
    today = now.astimezone(tz).date()
    current_start = today - timedelta(days=today.weekday())
    last_start = current_start - timedelta(days=7)
    return WeekWindows(
        now=now,
        tz=tz,
        current_week=FixtureWindow(current_start, current_start + timedelta(days=6)),
        last_week=FixtureWindow(last_start, last_start + timedelta(days=6)),
    )


def is_in_window(kickoff: Optional[datetime], window: FixtureWindow, tz: ZoneInfo) -> bool:
    """True if the kickoff's calendar day in ``tz`` falls inside the window."""
    if kickoff is None:
        return False
    return window.start <= kickoff.astimezone(tz).date() <= window.end


def _team_side(fixture: dict[str, Any], team_id: int) -> Optional[str]:
    teams = fixture.get('teams') or {}
    if (teams.get('home') or {}).get('id') == team_id:
        return 'home'
    if (teams.get('away') or {}).get('id') == team_id:
        return 'away'
    return None


def _is_goal_count(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def build_result_label(fixture: dict[str, Any], team_id: int) -> Optional[str]:
    """
    Result from the tracked team's perspective, e.g. ``"1-2 L"``.

    Only finished fixtures with numeric goal counts on both sides get a
    label.
    """
    status = ((fixture.get('fixture') or {}).get('status') or {}).get('short')
    if status not in FINISHED_STATUSES:
        return None

    goals = fixture.get('goals') or {}
    home_goals, away_goals = goals.get('home'), goals.get('away')
    if not _is_goal_count(home_goals) or not _is_goal_count(away_goals):
        return None

    side = _team_side(fixture, team_id)
    if side is None:
        return None

    own, other = (home_goals, away_goals) if side == 'home' else (away_goals, home_goals)
    outcome = 'W' if own > other else 'L' if own < other else 'D'
    return f'{int(own)}-{int(other)} {outcome}'


def format_kickoff(value: Any, tz: ZoneInfo) -> str:
    kickoff = parse_instant(value)
    if kickoff is None:
        return 'TBD'
    return kickoff.astimezone(tz).strftime('%H:%M')


def map_fixture_for_team(fixture: dict[str, Any], team_id: int, display_tz: ZoneInfo) -> Optional[DomesticFixtureRow]:
    """Describe a fixture from the tracked team's side; None if the team isn't in it."""
    side = _team_side(fixture, team_id)
    if side is None:
        return None

    teams = fixture.get('teams') or {}
    opponent = teams.get('away' if side == 'home' else 'home') or {}
    info = fixture.get('fixture') or {}
    status = info.get('status') or {}

    return build_model(
        DomesticFixtureRow,
        f'Fixture {info.get("id")}',
        fixture_id=info.get('id'),
        opponent=opponent.get('name') or 'TBD',
        opponent_logo=opponent.get('logo'),
        date=info.get('date'),
        kickoff=format_kickoff(info.get('date'), display_tz),
        venue=side,
        result=build_result_label(fixture, team_id),
        status_short=status.get('short'),
        status_long=status.get('long'),
    )


def _window_candidates(
    fixtures: list[dict[str, Any]], team_id: int, window: FixtureWindow, tz: ZoneInfo
) -> list[tuple[datetime, dict[str, Any]]]:
    """Team's fixtures inside the window, oldest first."""
    candidates = []
    for fixture in fixtures:
        if _team_side(fixture, team_id) is None:
            continue
        kickoff = parse_instant((fixture.get('fixture') or {}).get('date'))
        if is_in_window(kickoff, window, tz):
            candidates.append((kickoff, fixture))
    candidates.sort(key=lambda item: item[0])
    return candidates


def pick_current_week_fixture(
    fixtures: list[dict[str, Any]], team_id: int, windows: WeekWindows
) -> Optional[dict[str, Any]]:
    """
    The next upcoming fixture this week, else the latest one already played.

    Returns None when the team has no fixture in the current week.
    """
    candidates = _window_candidates(fixtures, team_id, windows.current_week, windows.tz)
    if not candidates:
        return None
    for kickoff, fixture in candidates:
        if kickoff >= windows.now:
            return fixture
    return candidates[-1][1]


def pick_last_week_fixture(
    fixtures: list[dict[str, Any]], team_id: int, windows: WeekWindows
) -> Optional[dict[str, Any]]:
    """The chronologically last fixture of last week, or None."""
    candidates = _window_candidates(fixtures, team_id, windows.last_week, windows.tz)
    return candidates[-1][1] if candidates else None


def resolve_team_fixtures(
    fixtures: list[dict[str, Any]], team_id: int, windows: WeekWindows, display_tz: ZoneInfo
) -> TeamDomesticFixtures:
    current = pick_current_week_fixture(fixtures, team_id, windows)
    last = pick_last_week_fixture(fixtures, team_id, windows)
    return TeamDomesticFixtures(
        current_week=map_fixture_for_team(current, team_id, display_tz) if current else None,
        last_week=map_fixture_for_team(last, team_id, display_tz) if last else None,
    )
