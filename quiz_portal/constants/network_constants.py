"""Network configuration constants for the quiz portal."""

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000
API_PREFIX: str = "/api"
DEFAULT_API_BASE_URL: str = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}{API_PREFIX}"
CANDIDATE_QUIZZES_PATH: str = "/candidate/quizzes"
REQUEST_TIMEOUT_SECONDS: float = 10.0
