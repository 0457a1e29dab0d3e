"""Client for the club-coefficients ranking API.

The API key and base URL are normally embedded in the public rankings
page as inline script variables. Resolving them is hidden behind
``ApiConfigResolver`` so callers can use explicit credentials or the
scraping fallback interchangeably.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import requests

from .constants import (
    COEFFICIENT_RANGE,
    COEFFICIENT_TYPE,
    COEFFICIENTS_ENDPOINT,
    ERROR_BODY_LIMIT,
    HTML_ACCEPT,
    MAX_COEFFICIENT_PAGES,
    USER_AGENT,
)
from .errors import ConfigurationError, SchemaViolationError, UpstreamRequestError
from .football_api import build_api_url, decode_json

logger = logging.getLogger('uclrace.coefficients_api')


@dataclass(frozen=True)
class ApiConfig:
    """Resolved coefficients API credentials."""

    api_key: str
    comp_api_url: str
    config_source: str  # 'env', 'scraped' or 'mixed'


@dataclass
class CoefficientPage:
    """One page of raw coefficient members."""

    members: list[dict[str, Any]]
    last_update_date: Optional[str]
    total_elements: Optional[int]
    request_url: str


@dataclass
class CoefficientFetch:
    """All pages collected by one paginated fetch."""

    members: list[dict[str, Any]] = field(default_factory=list)
    last_update_date: Optional[str] = None
    total_available: Optional[int] = None
    last_request_url: Optional[str] = None
    pages: int = 0


def normalize_base_url(value: str) -> str:
    return value if value.endswith('/') else f'{value}/'


def extract_window_value(html: str, key: str) -> Optional[str]:
    """Return the string assigned to ``window.<key>`` in an inline script, if any."""
    match = re.search(rf"window\.{re.escape(key)}\s*=\s*['\"]([^'\"]+)['\"]", html)
    return match.group(1) if match else None


class ApiConfigResolver(Protocol):
    def resolve(self) -> ApiConfig: ...


class ExplicitApiConfigResolver:
    """Credentials supplied directly through configuration."""

    def __init__(self, api_key: str, comp_api_url: str):
        if not api_key or not comp_api_url:
            raise ConfigurationError('Both UEFA_API_KEY and UEFA_COMP_API_URL are required for explicit credentials')
        self.api_key = api_key
        self.comp_api_url = comp_api_url

    def resolve(self) -> ApiConfig:
        return ApiConfig(self.api_key, normalize_base_url(self.comp_api_url), 'env')


class ScrapedApiConfigResolver:
    """Reads ``window.apiKey`` / ``window.compApiUrl`` from the rankings page.

    Either value may be pinned through configuration; the page is then
    only used for the missing one.
    """

    def __init__(
        self,
        page_url: str,
        session: Optional[requests.Session] = None,
        api_key: Optional[str] = None,
        comp_api_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.page_url = page_url
        self.session = session or requests.Session()
        self.api_key = api_key
        self.comp_api_url = comp_api_url
        self.timeout = timeout

    def resolve(self) -> ApiConfig:
        logger.debug(f'GET {self.page_url}')
        response = self.session.get(
            self.page_url,
            headers={'user-agent': USER_AGENT, 'accept': HTML_ACCEPT},
            timeout=self.timeout,
        )
        if not response.ok:
            raise UpstreamRequestError(
                response.status_code, self.page_url, response.text[:ERROR_BODY_LIMIT], context='Rankings page request'
            )

        html = response.text
        api_key = self.api_key or extract_window_value(html, 'apiKey')
        comp_api_url = self.comp_api_url or extract_window_value(html, 'compApiUrl')

        if not api_key or not comp_api_url:
            raise ConfigurationError(
                'Could not resolve coefficients API config from ranking page. '
                'Set UEFA_API_KEY and UEFA_COMP_API_URL explicitly.'
            )

        source = 'mixed' if (self.api_key or self.comp_api_url) else 'scraped'
        logger.info(f'Resolved coefficients API config ({source})')
        return ApiConfig(api_key, normalize_base_url(comp_api_url), source)


def make_config_resolver(
    page_url: str,
    api_key: Optional[str] = None,
    comp_api_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> ApiConfigResolver:
    """Pick explicit credentials when both are configured, otherwise scrape."""
    if api_key and comp_api_url:
        return ExplicitApiConfigResolver(api_key, comp_api_url)
    return ScrapedApiConfigResolver(page_url, session=session, api_key=api_key, comp_api_url=comp_api_url, timeout=timeout)


def _parse_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (ValueError, TypeError):
        return None


class CoefficientsClient:
    """Paginated reader for the club coefficient ranking."""

    def __init__(
        self,
        config: ApiConfig,
        season_year: int,
        page_size: int = 50,
        language: str = 'DE',
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        self.config = config
        self.season_year = season_year
        self.page_size = page_size
        self.language = language
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return build_api_url(self.config.comp_api_url, COEFFICIENTS_ENDPOINT)

    def fetch_page(self, page: int) -> CoefficientPage:
        """
        Fetch one page of the ranking.

        Raises:
            UpstreamRequestError: For non-2xx responses
            SchemaViolationError: If ``data.members`` is not a list
        """
        url = build_api_url(
            self.config.comp_api_url,
            COEFFICIENTS_ENDPOINT,
            {
                'coefficientRange': COEFFICIENT_RANGE,
                'coefficientType': COEFFICIENT_TYPE,
                'seasonYear': self.season_year,
                'page': page,
                'pagesize': self.page_size,
                'language': self.language,
            },
        )
        logger.debug(f'GET {url}')
        response = self.session.get(
            url,
            headers={'x-api-key': self.config.api_key, 'accept': 'application/json', 'user-agent': USER_AGENT},
            timeout=self.timeout,
        )
        if not response.ok:
            raise UpstreamRequestError(
                response.status_code, url, response.text[:ERROR_BODY_LIMIT], context=f'Coefficients page {page}'
            )

        payload = decode_json(response, url, context=f'Coefficients page {page}')
        data = payload.get('data') if isinstance(payload, dict) else None
        members = data.get('members') if isinstance(data, dict) else None
        if not isinstance(members, list):
            raise SchemaViolationError(f'Unexpected coefficients payload for page {page}: members array is missing.')

        collection = (payload.get('meta') or {}).get('collection') or {}
        return CoefficientPage(
            members=members,
            last_update_date=data.get('lastUpdateDate'),
            total_elements=_parse_int(collection.get('totalElements')),
            request_url=url,
        )

    def fetch_top(self, limit: int, max_pages: int = MAX_COEFFICIENT_PAGES) -> CoefficientFetch:
        """
        Collect pages until ``limit`` members are gathered.

        An empty page or a page shorter than the page size ends pagination,
        even if the provider reports more elements.
        """
        result = CoefficientFetch()
        page = 1

        while len(result.members) < limit and page <= max_pages:
            page_result = self.fetch_page(page)
            result.pages += 1
            result.last_update_date = page_result.last_update_date or result.last_update_date
            result.total_available = page_result.total_elements or result.total_available
            result.last_request_url = page_result.request_url

            if not page_result.members:
                break

            result.members.extend(page_result.members)

            if len(page_result.members) < self.page_size:
                break

            page += 1

        logger.info(f'Fetched {len(result.members)} coefficient members over {result.pages} page(s)')
        return result
