# constants.py
import logging

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Browser
TIMEOUT = 30000
VIEWPORT_WIDTH = 1280
VIEWPORT_HEIGHT = 720
SETTLE_DELAY = 500
BROWSER_ARGS = ['--no-sandbox', '--disable-dev-shm-usage']

DEFAULT_LOCALES = ['en', 'pseudo']
SOURCE_LOCALE = 'en'
LOCALE_QUERY_PARAM = 'lang'

# Detection
EXCLUDED_TAGS = ['script', 'style', 'noscript', 'svg', 'path']
OVERFLOW_TOLERANCE = 1
ERROR_THRESHOLD = 50
WARNING_THRESHOLD = 20
MAX_TEXT_LENGTH = 50
MAX_SELECTOR_CLASSES = 2

SEVERITY_RANK = {'error': 3, 'warning': 2, 'info': 1}

# Locale transforms
PSEUDO_EXPANSION_FACTOR = 0.35
GERMAN_EXPANSION_FACTOR = 0.30
RTL_LOCALES = ['ar', 'he', 'fa', 'ur', 'yi', 'ps', 'sd', 'ug']
CJK_LOCALES = ['ja', 'zh', 'ko']
PSEUDO_SKIP_TAGS = ['script', 'style', 'noscript', 'svg', 'textarea', 'input']
PSEUDO_ATTRIBUTES = ['placeholder', 'title', 'aria-label']

CHAR_MAP = {
    'a': 'à', 'b': 'ƀ', 'c': 'ç', 'd': 'ð', 'e': 'è', 'f': 'ƒ', 'g': 'ĝ',
    'h': 'ĥ', 'i': 'ï', 'j': 'ĵ', 'k': 'ķ', 'l': 'ĺ', 'm': 'ɱ', 'n': 'ñ',
    'o': 'ö', 'p': 'þ', 'q': 'ǫ', 'r': 'ŕ', 's': 'š', 't': 'ţ', 'u': 'ü',
    'v': 'ṿ', 'w': 'ŵ', 'x': 'ẋ', 'y': 'ÿ', 'z': 'ž',
    'A': 'À', 'B': 'Ɓ', 'C': 'Ç', 'D': 'Ð', 'E': 'È', 'F': 'Ƒ', 'G': 'Ĝ',
    'H': 'Ĥ', 'I': 'Ï', 'J': 'Ĵ', 'K': 'Ķ', 'L': 'Ĺ', 'M': 'Ṃ', 'N': 'Ñ',
    'O': 'Ö', 'P': 'Þ', 'Q': 'Ǫ', 'R': 'Ŕ', 'S': 'Š', 'T': 'Ţ', 'U': 'Ü',
    'V': 'Ṿ', 'W': 'Ŵ', 'X': 'Ẋ', 'Y': 'Ÿ', 'Z': 'Ž',
}
PADDING_CHARS = ['ẍ', 'ỳ', 'ẑ', 'ẅ']

# Source scanning
SOURCE_EXTENSIONS = ['.tsx', '.jsx', '.ts', '.js', '.vue', '.svelte', '.html']
SKIP_DIRS = ['node_modules', '.next', 'dist', 'build', '.git', 'coverage']
MIN_TEXT_LENGTH = 3

INTERNAL_COMPONENTS = [
    'SegmentViewNode', 'OuterLayoutRouter', 'InnerLayoutRouter',
    'AppRouter', 'HotReload', 'ErrorBoundary', 'Suspense',
    'RenderFromTemplateContext', 'ScrollAndFocusHandler',
    'RedirectBoundary', 'NotFoundBoundary', 'LoadingBoundary',
]

# Translation provider
LOCALES_DIR = 'locales'
PROVIDER_CONFIG_FILES = ['i18n.json', 'lingo.config.json', 'lingo.config.js']
PROVIDER_API_KEY_ENV = 'LINGODOTDEV_API_KEY'
PROVIDER_COMMAND = ['npx', 'lingo.dev@latest']

# Config / output
CONFIG_FILE = 'layoutlint.yaml'
OUTPUT_DIR = './layoutlint-reports'
REPORT_PREFIX = 'layoutlint-report'
WATCH_INTERVAL = 2000

NEO4J_URI = "bolt://localhost:7687"
NEO4J_USER = "neo4j"
NEO4J_PASSWORD = "testpassword"

# Exit codes
EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_ISSUES_FOUND = 2
EXIT_INVALID_ARGUMENTS = 3
