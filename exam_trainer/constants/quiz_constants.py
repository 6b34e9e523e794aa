"""Quiz-related constants shared across UI, server and core layers."""

PASSING_PERCENTAGE: int = 80
QUESTION_COUNT_CHOICES: tuple[int, ...] = (5, 10, 20, 60)
DEFAULT_QUESTION_COUNT: int = 5
QUIZ_TOPIC: str = "Dog handler licence theory exam"

# Categories offered as module filter on the start screen.
MODULE_CHOICES: tuple[str, ...] = ("Hundeführerschein", "Schulhund")
ASSOCIATION_CHOICES: tuple[str, ...] = ("DZKB", "ProHunde")
DEFAULT_CATEGORY: str = "Allgemein"

MAX_IMPORT_OPTIONS: int = 8
ACCESS_CODE_MAX_AGE_DAYS: int = 365
STUDY_GUIDE_KEY: str = "studienleitfaden.pdf"

SELF_SERVICE_EMAIL_LIMIT: int = 3
SELF_SERVICE_IP_LIMIT: int = 6
SELF_SERVICE_WINDOW_SECONDS: int = 15 * 60
