"""Qt UI constants and candidate-facing messages."""

WINDOW_TITLE: str = "QuizPortal Candidate"
LOADING_MESSAGE: str = "Loading quiz..."
TIME_LEFT_LABEL: str = "Time Left"
QUESTION_POSITION_TEMPLATE: str = "Question {number} of {count}"
SHORT_ANSWER_PLACEHOLDER: str = "Type your answer here..."

BUTTON_SAVE_NEXT: str = "Save && Next"
BUTTON_SAVE: str = "Save"
BUTTON_CLEAR: str = "Clear Response"
BUTTON_SUBMIT: str = "Submit Quiz"
BUTTON_SUBMITTING: str = "Submitting..."
BUTTON_CLOSE: str = "Close"

PROGRESS_TEMPLATE: str = "Answered: {answered}   Unanswered: {unanswered}   Not Visited: {not_visited}"
NAVIGATOR_COLUMNS: int = 4

CONFIRM_SUBMIT_TITLE: str = "Submit Quiz"
CONFIRM_SUBMIT_MESSAGE: str = (
    "Are you sure you want to submit the quiz? You cannot change your answers after submission."
)
ANSWER_REQUIRED_TITLE: str = "Answer Required"
ANSWER_REQUIRED_MESSAGE: str = "Please provide an answer before saving."
LAST_QUESTION_TITLE: str = "Last Question"
LAST_QUESTION_MESSAGE: str = "This is the last question. You can now submit the quiz."
SUBMIT_FAILED_TITLE: str = "Submission Failed"
START_FAILED_TITLE: str = "Unable to Start Quiz"
TIME_UP_FAILED_TITLE: str = "Time Is Up"
TIME_UP_FAILED_MESSAGE: str = (
    "Time ran out and your answers could not be submitted automatically.\n\n{detail}"
)
RESULTS_TITLE: str = "Quiz Results"
RESULTS_LOAD_FAILED_MESSAGE: str = "Your quiz was submitted but the results could not be loaded."
