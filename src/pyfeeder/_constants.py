"""Internal constants shared across the library."""

USER_AGENT = "pyfeeder/1.0"

LINE_API_URL = "https://api.line.me"
LINE_SIGNATURE_HEADER = "X-Line-Signature"

DEFAULT_POLL_INTERVAL: float = 30.0
DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_WEBHOOK_PATH = "/callback"

#: Food level above which feeding is refused.
FOOD_THRESHOLD = 30

# ------------------------------------------------------------------
# Remote store paths
# ------------------------------------------------------------------

LED_PATH = "led/state"
MOTOR_PATH = "motor/state"
FOOD_PATH = "food/state"

#: Paths this system is allowed to write.
ACTUATOR_PATHS: frozenset[str] = frozenset({LED_PATH, MOTOR_PATH})
