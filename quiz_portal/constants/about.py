"""Static metadata describing QuizPortal."""

APP_NAME = "QuizPortal"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizPortal is a timed assessment client built with Qt. Candidates answer "
    "quizzes against a countdown and their attempt is scored by the quiz service."
)
