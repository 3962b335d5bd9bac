"""
Configuration constants for the virtual hockey league transaction service.
"""

# League Settings
NUM_TEAMS = 32
POINTS_PER_WIN = 2
POINTS_PER_OT_LOSS = 1

# ===== DRAFT CONFIGURATION =====

DRAFT_PICK_TIME_LIMIT = 300  # seconds per pick (5 minutes)
DRAFT_TOTAL_ROUNDS = 5
DRAFT_PICKS_PER_ROUND = NUM_TEAMS  # 32
DRAFT_ORDER_STYLE = 'straight'  # 'straight' or 'snake'

# A slot whose timer expires is moved to the end of its round once;
# a second expiry forfeits the slot.
DRAFT_MAX_REQUEUES = 1

# Scouting rating bounds for prospects
MIN_RATING = 1
MAX_RATING = 10

# ===== WAIVER CONFIGURATION =====

# Claims are processed at 2:00 PM Eastern daily
WAIVER_PROCESS_HOUR = 14
WAIVER_PROCESS_MINUTE = 0
WAIVER_TIMEZONE = 'America/New_York'

# ===== BACKGROUND CLOCK =====

CLOCK_TICK_SECONDS = 1      # draft countdown resolution
WAIVER_CHECK_SECONDS = 60   # how often due waiver windows are looked for

# ===== CONTENT GENERATION SERVICE =====

CONTENT_API_BASE_URL = "https://api.openai.com/v1"
CONTENT_TEXT_MODEL = "gpt-4o"
CONTENT_IMAGE_MODEL = "dall-e-3"
CONTENT_IMAGE_SIZE = "1024x1024"
CONTENT_REQUEST_TIMEOUT = 60  # seconds
CONTENT_API_KEY_ENV = "CONTENT_API_KEY"

# ===== API SERVER =====

API_HOST = '127.0.0.1'
API_PORT = 8000
API_TITLE = "Virtual Hockey League API"
API_VERSION = "1.0.0"

# Logging
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
