"""Qt main window hosting one candidate's timed quiz attempt."""

from __future__ import annotations

import asyncio
from datetime import timedelta
import logging
from typing import Coroutine

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QCloseEvent
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QButtonGroup,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPlainTextEdit,
    QPushButton,
    QRadioButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quiz_portal.constants.session_constants import LOW_TIME_WARNING_SECONDS
from quiz_portal.constants.ui_constants import (
    BUTTON_CLEAR,
    BUTTON_SAVE,
    BUTTON_SAVE_NEXT,
    BUTTON_SUBMIT,
    BUTTON_SUBMITTING,
    LOADING_MESSAGE,
    NAVIGATOR_COLUMNS,
    PROGRESS_TEMPLATE,
    QUESTION_POSITION_TEMPLATE,
    RESULTS_LOAD_FAILED_MESSAGE,
    SHORT_ANSWER_PLACEHOLDER,
    START_FAILED_TITLE,
    TIME_LEFT_LABEL,
    TIME_UP_FAILED_MESSAGE,
    TIME_UP_FAILED_TITLE,
    WINDOW_TITLE,
)
from quiz_portal.core.errors import BootstrapFailure, ScoringServiceError, SubmissionFailure
from quiz_portal.core.markdown_renderer import renderer
from quiz_portal.core.models import Attempt, AuthContext
from quiz_portal.core.session_controller import (
    SaveOutcome,
    ScoringService,
    SessionStage,
    SessionController,
)
from quiz_portal.core.services.submission_coordinator import SubmissionPhase
from quiz_portal.styling.color_palette import Theme
from quiz_portal.styling.styles import Styles
from quiz_portal.ui.dialog_helpers import QtPrompt, show_error
from quiz_portal.ui.qt_scheduler import QtTickScheduler
from quiz_portal.ui.results_panel import ResultsPanel

logger = logging.getLogger(__name__)


def format_remaining(remaining: timedelta) -> str:
    total = max(0, int(-(-remaining.total_seconds() // 1)))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class CandidateQuizWindow(QMainWindow):
    """Question view, navigator grid and countdown for a single attempt."""

    closed = Signal()

    def __init__(
        self,
        service: ScoringService,
        auth: AuthContext,
        quiz_id: int,
        theme: Theme = Theme.LIGHT,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self._auth = auth
        self._theme = theme
        self._tasks: set[asyncio.Task] = set()
        self._rendering = False
        self._navigator_buttons: list[QPushButton] = []

        self.controller = SessionController(
            service,
            auth,
            quiz_id,
            prompt=QtPrompt(self),
            scheduler=QtTickScheduler(self),
            on_tick=self._update_timer,
            on_finished=self._handle_finished,
            on_terminal_error=self._handle_terminal_error,
            on_phase_changed=self._handle_phase_changed,
        )

        self._build_ui()
        self.setStyleSheet(Styles.get_main_window_style(theme))

    # --- Layout ---

    def _build_ui(self) -> None:
        self.stack = QStackedWidget(self)
        self.setCentralWidget(self.stack)

        self.loading_label = QLabel(LOADING_MESSAGE, self)
        self.loading_label.setAlignment(Qt.AlignCenter)
        self.stack.addWidget(self.loading_label)

        self.quiz_page = QWidget(self)
        self._build_quiz_page(self.quiz_page)
        self.stack.addWidget(self.quiz_page)

        self.results_panel = ResultsPanel(on_close=self.close, parent=self)
        self.stack.addWidget(self.results_panel)

    def _build_quiz_page(self, page: QWidget) -> None:
        root_layout = QVBoxLayout()
        page.setLayout(root_layout)

        header = QHBoxLayout()
        self.title_label = QLabel("", page)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        header.addWidget(self.title_label)
        header.addStretch()
        header.addWidget(QLabel(TIME_LEFT_LABEL, page))
        self.timer_label = QLabel("--:--:--", page)
        self.timer_label.setStyleSheet(Styles.get_timer_style(False, self._theme))
        header.addWidget(self.timer_label)
        root_layout.addLayout(header)

        body = QHBoxLayout()
        root_layout.addLayout(body, stretch=1)

        main_column = QVBoxLayout()
        body.addLayout(main_column, stretch=3)

        self.question_view = QWebEngineView(page)
        main_column.addWidget(self.question_view, stretch=2)

        self.options_box = QGroupBox(page)
        self.options_layout = QVBoxLayout()
        self.options_box.setLayout(self.options_layout)
        self.option_group = QButtonGroup(self)
        self.option_group.idClicked.connect(self._handle_option_clicked)
        main_column.addWidget(self.options_box, stretch=1)

        self.text_answer = QPlainTextEdit(page)
        self.text_answer.setPlaceholderText(SHORT_ANSWER_PLACEHOLDER)
        self.text_answer.textChanged.connect(self._handle_text_changed)
        main_column.addWidget(self.text_answer, stretch=1)

        actions = QHBoxLayout()
        self.save_button = QPushButton(BUTTON_SAVE_NEXT, page)
        self.save_button.setStyleSheet(Styles.get_primary_button_style(self._theme))
        self.save_button.clicked.connect(self._handle_save_and_next)
        actions.addWidget(self.save_button)

        self.clear_button = QPushButton(BUTTON_CLEAR, page)
        self.clear_button.clicked.connect(self._handle_clear)
        actions.addWidget(self.clear_button)

        actions.addStretch()
        self.submit_button = QPushButton(BUTTON_SUBMIT, page)
        self.submit_button.setStyleSheet(Styles.get_submit_button_style(self._theme))
        self.submit_button.clicked.connect(self._handle_submit)
        actions.addWidget(self.submit_button)
        main_column.addLayout(actions)

        sidebar = QVBoxLayout()
        body.addLayout(sidebar, stretch=1)
        navigator_box = QGroupBox("Questions", page)
        self.navigator_grid = QGridLayout()
        navigator_box.setLayout(self.navigator_grid)
        sidebar.addWidget(navigator_box)
        self.progress_label = QLabel("", page)
        self.progress_label.setWordWrap(True)
        sidebar.addWidget(self.progress_label)
        sidebar.addStretch()

    # --- Lifecycle ---

    def begin(self) -> None:
        """Start the attempt. Requires a running asyncio loop."""
        self._spawn(self._bootstrap())

    async def _bootstrap(self) -> None:
        try:
            await self.controller.start()
        except BootstrapFailure as exc:
            show_error(self, START_FAILED_TITLE, str(exc))
            self.close()
            return
        if self.controller.stage is not SessionStage.IN_PROGRESS:
            return
        self.title_label.setText(self.controller.quiz.title)
        self._build_navigator()
        self._render_current_question()
        self.stack.setCurrentWidget(self.quiz_page)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.controller.dispose()
        for task in list(self._tasks):
            task.cancel()
        self.closed.emit()
        super().closeEvent(event)

    def _spawn(self, coroutine: Coroutine) -> None:
        task = asyncio.ensure_future(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # --- Rendering ---

    def _build_navigator(self) -> None:
        for index in range(self.controller.quiz.question_count):
            button = QPushButton(str(index + 1), self.quiz_page)
            button.clicked.connect(lambda _checked=False, i=index: self._handle_navigate(i))
            row, column = divmod(index, NAVIGATOR_COLUMNS)
            self.navigator_grid.addWidget(button, row, column)
            self._navigator_buttons.append(button)

    def _refresh_navigator(self) -> None:
        statuses = self.controller.statuses()
        current = self.controller.current_index
        for index, button in enumerate(self._navigator_buttons):
            button.setStyleSheet(
                Styles.get_navigator_button_style(statuses[index], index == current, self._theme)
            )
        progress = self.controller.progress()
        self.progress_label.setText(
            PROGRESS_TEMPLATE.format(
                answered=progress.answered,
                unanswered=progress.unanswered,
                not_visited=progress.not_visited,
            )
        )

    def _render_current_question(self) -> None:
        controller = self.controller
        question = controller.current_question
        entry = controller.answers.get_entry(question.id)
        heading = QUESTION_POSITION_TEMPLATE.format(
            number=controller.current_index + 1,
            count=controller.quiz.question_count,
        )
        points = "pt" if question.points == 1 else "pts"
        self.question_view.setHtml(
            renderer.render_question(question.text, heading=f"{heading} - {question.points} {points}")
        )

        self._rendering = True
        try:
            for button in self.option_group.buttons():
                self.option_group.removeButton(button)
                self.options_layout.removeWidget(button)
                button.deleteLater()
            for option in question.options:
                radio = QRadioButton(option.text, self.options_box)
                radio.setChecked(entry.selected_option_id == option.id)
                self.option_group.addButton(radio, option.id)
                self.options_layout.addWidget(radio)
            self.options_box.setVisible(question.type.is_choice)
            self.text_answer.setVisible(not question.type.is_choice)
            self.text_answer.setPlainText(entry.text_answer or "")
        finally:
            self._rendering = False

        is_last = controller.current_index == controller.quiz.question_count - 1
        self.save_button.setText(BUTTON_SAVE if is_last else BUTTON_SAVE_NEXT)
        self._refresh_navigator()

    def _update_timer(self, remaining: timedelta) -> None:
        self.timer_label.setText(format_remaining(remaining))
        low_time = remaining.total_seconds() < LOW_TIME_WARNING_SECONDS
        self.timer_label.setStyleSheet(Styles.get_timer_style(low_time, self._theme))

    def _set_controls_enabled(self, enabled: bool) -> None:
        for widget in (self.save_button, self.clear_button, self.submit_button, self.options_box, self.text_answer):
            widget.setEnabled(enabled)
        for button in self._navigator_buttons:
            button.setEnabled(enabled)

    # --- Candidate actions ---

    def _handle_option_clicked(self, option_id: int) -> None:
        if self._rendering:
            return
        self.controller.select_option(option_id)
        self._refresh_navigator()

    def _handle_text_changed(self) -> None:
        if self._rendering or self.controller.is_locked():
            return
        self.controller.set_text(self.text_answer.toPlainText())
        self._refresh_navigator()

    def _handle_save_and_next(self) -> None:
        if self.controller.save_and_next() is SaveOutcome.ADVANCED:
            self._render_current_question()
        else:
            self._refresh_navigator()

    def _handle_clear(self) -> None:
        self.controller.clear_response()
        self._render_current_question()

    def _handle_navigate(self, index: int) -> None:
        if self.controller.go_to(index):
            self._render_current_question()

    def _handle_submit(self) -> None:
        self.controller.submit_now()

    # --- Session events ---

    def _handle_phase_changed(self, phase: SubmissionPhase) -> None:
        submitting = phase is SubmissionPhase.SUBMITTING
        self._set_controls_enabled(phase is SubmissionPhase.IDLE)
        self.submit_button.setText(BUTTON_SUBMITTING if submitting else BUTTON_SUBMIT)

    def _handle_finished(self, attempt: Attempt) -> None:
        logger.info("Attempt %s submitted, loading results", attempt.id)
        self._spawn(self._show_results())

    async def _show_results(self) -> None:
        self.stack.setCurrentWidget(self.results_panel)
        try:
            result = await self.controller.load_result()
        except ScoringServiceError as exc:
            logger.error("Failed to load results: %s", exc)
            self.results_panel.show_summary_only(RESULTS_LOAD_FAILED_MESSAGE)
            return
        self.results_panel.show_result(result)

    def _handle_terminal_error(self, failure: SubmissionFailure) -> None:
        self._set_controls_enabled(False)
        show_error(self, TIME_UP_FAILED_TITLE, TIME_UP_FAILED_MESSAGE.format(detail=failure))
