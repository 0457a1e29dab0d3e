"""Client for the football-statistics API (api-sports v3)."""

import logging
import threading
from typing import Any, Mapping, Optional
from urllib.parse import urlencode, urljoin

import requests

from .constants import DEFAULT_API_BASE_URL, ERROR_BODY_LIMIT
from .errors import SchemaViolationError, UpstreamApiError, UpstreamRequestError

logger = logging.getLogger('uclrace.football_api')

Json = dict[str, Any]


def _query_value(value: Any) -> Optional[str]:
    """Serialize a query value, or None if it should be left out."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    text = str(value)
    return text if text != '' else None


def build_api_url(base_url: str, endpoint: str, query: Optional[Mapping[str, Any]] = None) -> str:
    """
    Join an endpoint onto the base URL and append the non-empty query values.

    Numbers are sent as their string form; None and empty strings are
    dropped rather than sent as empty parameters.

    Example:
        >>> build_api_url('https://v3.football.api-sports.io', '/standings', {'league': 286, 'season': 2025})
        'https://v3.football.api-sports.io/standings?league=286&season=2025'
    """
    base = base_url if base_url.endswith('/') else f'{base_url}/'
    url = urljoin(base, endpoint.lstrip('/'))

    params = []
    for key, value in (query or {}).items():
        text = _query_value(value)
        if text is not None:
            params.append((key, text))

    return f'{url}?{urlencode(params)}' if params else url


def parse_api_errors(errors: Any) -> list[str]:
    """
    Flatten the provider's ``errors`` field into a list of messages.

    The provider sends ``[]`` on success, but reports failures either as
    a list or as an object keyed by parameter name.
    """
    if not errors:
        return []
    if isinstance(errors, list):
        return [str(item) for item in errors if item]
    if isinstance(errors, dict):
        return [str(item) for item in errors.values() if item]
    return [str(errors)]


def decode_json(response: requests.Response, url: str, context: Optional[str] = None) -> Any:
    """
    Parse a successful response body as JSON.

    Raises:
        SchemaViolationError: If the body is not valid JSON
    """
    try:
        return response.json()
    except ValueError as e:
        where = context or url
        raise SchemaViolationError(f'Response for {where} is not valid JSON ({url}): {e}') from e


class FootballApiClient:
    """
    Authenticated GET requests against the football-statistics API.

    Jobs call one client from several worker threads. Without an injected
    session each thread lazily opens its own requests.Session; an injected
    session is shared as-is.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE_URL,
        host: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._session = session
        self._local = threading.local()
        self.headers = {'x-apisports-key': api_key}
        if host:
            self.headers['x-apisports-host'] = host

    @property
    def session(self) -> requests.Session:
        if self._session is not None:
            return self._session
        if not hasattr(self._local, 'session'):
            self._local.session = requests.Session()
        return self._local.session

    @property
    def fixtures_endpoint(self) -> str:
        return build_api_url(self.base_url, '/fixtures')

    @property
    def standings_endpoint(self) -> str:
        return build_api_url(self.base_url, '/standings')

    def fetch(self, endpoint: str, query: Optional[Mapping[str, Any]] = None, context: Optional[str] = None) -> Json:
        """
        Issue an authenticated request and return the parsed JSON envelope.

        Args:
            endpoint: Path relative to the base URL (e.g. '/standings')
            query: Query parameters; empty values are omitted
            context: Label used in error messages (e.g. 'league 286')

        Returns:
            The decoded response envelope

        Raises:
            UpstreamRequestError: For non-2xx responses
            UpstreamApiError: If the envelope carries provider errors
        """
        url = build_api_url(self.base_url, endpoint, query)
        logger.debug(f'GET {url}')

        response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        if not response.ok:
            raise UpstreamRequestError(response.status_code, url, response.text[:ERROR_BODY_LIMIT], context=context)

        payload = decode_json(response, url, context=context)
        messages = parse_api_errors(payload.get('errors') if isinstance(payload, dict) else None)
        if messages:
            raise UpstreamApiError(url, messages, context=context)

        return payload

    def get_standings(self, league_id: int, season: int) -> Json:
        return self.fetch('/standings', {'league': league_id, 'season': season}, context=f'standings for league {league_id}')

    def get_fixtures(
        self,
        league_id: int,
        season: int,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        timezone: Optional[str] = None,
        status: Optional[str] = None,
        last: Optional[int] = None,
    ) -> Json:
        """Fetch fixtures for one league, optionally bounded by date range or count."""
        query = {
            'league': league_id,
            'season': season,
            'from': from_date,
            'to': to_date,
            'timezone': timezone,
            'status': status,
            'last': last,
        }
        return self.fetch('/fixtures', query, context=f'fixtures for league {league_id}')
