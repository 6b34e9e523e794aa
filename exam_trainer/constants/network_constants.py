"""Network configuration constants for the exam trainer."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
SESSION_COOKIE: str = "trainer_session"
SESSION_COOKIE_MAX_AGE: int = 60 * 60 * 12
