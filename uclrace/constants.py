"""Constants and status-code tables for the race sync jobs."""

# Football-statistics API (api-sports v3)
DEFAULT_API_BASE_URL = 'https://v3.football.api-sports.io'

# Fixture status codes, as reported in fixture.status.short
FINISHED_STATUSES = frozenset({'FT', 'AET', 'PEN', 'AWD', 'WO'})
TERMINAL_STATUSES = FINISHED_STATUSES | {'CANC', 'ABD'}
LIVE_STATUSES = frozenset({'1H', 'HT', '2H', 'ET', 'P', 'BT', 'INT', 'SUSP', 'LIVE'})

# Club-coefficients API (UEFA)
COEFFICIENT_RANGE = 'OVERALL'
COEFFICIENT_TYPE = 'MEN_CLUB'
COEFFICIENTS_ENDPOINT = 'v2/coefficients'
MAX_COEFFICIENT_PAGES = 10
RANKINGS_PAGE_TEMPLATE = 'https://de.uefa.com/nationalassociations/uefarankings/club/?year={year}'

USER_AGENT = 'Mozilla/5.0 (compatible; UCL-Replacement-Spot-Race/1.0)'
HTML_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'

# Upstream error bodies are cut to this many characters
ERROR_BODY_LIMIT = 500

# Snapshot shapes
TOP_STANDINGS = 5
MAX_FORM_LENGTH = 5
NEXT_FIXTURES_LIMIT = 2

# Default European competitions: Champions League, Europa League, Conference League
DEFAULT_EUROPE_COMPETITION_IDS = (2, 3, 848)

# Output file names, relative to the output directory
RACE_FILE = 'race.json'
LEAGUES_DIR = 'leagues'
COEFFICIENTS_FILE = 'coefficients.json'
DOMESTIC_FIXTURES_FILE = 'domestic-fixtures.json'
EUROPE_ACTIVE_FILE = 'european-active-teams.json'
