from __future__ import annotations

import logging
import os
import random
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from cornerthief.core.levels import LevelRepository
from cornerthief.core.progress import ProgressStore
from cornerthief.core.session import GameState, LossReason, PursuitSession, Rejection
from cornerthief.ui.board_widget import BoardWidget
from cornerthief.ui.colors import BoardColors, star_text
from cornerthief.ui.level_cards import LevelGridWidget
from cornerthief.ui.models import build_level_states

logger = logging.getLogger(__name__)

RULES_TEXT = (
    "Move one police unit per turn along an edge.\n\n"
    "After each move the thief runs to a neighbouring node.\n\n"
    "You win by landing on the thief or leaving it no free neighbour.\n"
    "You lose if the thief reaches an orange exit or the steps run out.\n\n"
    "Fewer steps earn more stars."
)

LOSS_MESSAGES = {
    LossReason.ESCAPED: "The thief escaped!",
    LossReason.STEPS_EXHAUSTED: "Out of steps!",
}


def _thief_rng() -> random.Random:
    seed = os.environ.get("CORNERTHIEF_SEED")
    if seed is None:
        return random.Random()
    try:
        return random.Random(int(seed))
    except ValueError:
        logger.warning("Ignoring non-integer CORNERTHIEF_SEED=%r", seed)
        return random.Random()


class MainWindow(QMainWindow):
    """Main application window: level selection screen and the pursuit board.

    Owns the session and forwards node clicks to it; progress is merged and
    saved here whenever a level is won.
    """

    def __init__(self, levels: LevelRepository, progress_store: ProgressStore) -> None:
        super().__init__()
        self._levels_repo = levels
        self._progress_store = progress_store
        self._session = PursuitSession(rng=_thief_rng())
        self._selected_unit: Optional[int] = None
        self._unlock_all_levels = os.environ.get("CORNERTHIEF_UNLOCK_ALL") == "1"

        self.setWindowTitle("Corner the Thief")
        self._stack = QStackedWidget()
        self._home_screen = self._build_home_screen()
        self._game_screen = self._build_game_screen()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._game_screen)
        self.setCentralWidget(self._stack)
        self.setStyleSheet(f"QMainWindow {{ background: {BoardColors.BG}; }}")
        self._refresh_levels_list()

    def _button(self, text: str, handler) -> QPushButton:
        button = QPushButton(text)
        button.setCursor(Qt.PointingHandCursor)
        button.setStyleSheet(
            f"""
            QPushButton {{
                background: {BoardColors.BUTTON};
                color: {BoardColors.BUTTON_TEXT};
                border: none;
                border-radius: 10px;
                padding: 8px 16px;
                font-weight: 700;
            }}
            QPushButton:hover {{ background: {BoardColors.BUTTON_DARK}; }}
            """
        )
        button.clicked.connect(handler)
        return button

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(30, 30, 30, 30)

        title = QLabel("Corner the Thief")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet(f"color: {BoardColors.TITLE}; font-size: 32px; font-weight: 900;")
        layout.addWidget(title)

        self._level_grid = LevelGridWidget(on_level_clicked=self._start_level)
        layout.addWidget(self._level_grid, 1, Qt.AlignCenter)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        buttons.addWidget(self._button("Rules", self._show_rules))
        buttons.addWidget(self._button("Reset progress", self._reset_progress))
        buttons.addStretch(1)
        layout.addLayout(buttons)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)

        top = QHBoxLayout()
        top.addWidget(self._button("Restart", self._restart_level))
        top.addWidget(self._button("Levels", self._show_home_screen))
        self._title_label = QLabel("")
        self._title_label.setAlignment(Qt.AlignCenter)
        self._title_label.setStyleSheet(f"color: {BoardColors.TITLE}; font-size: 18px; font-weight: 800;")
        top.addWidget(self._title_label, 1)
        self._steps_label = QLabel("")
        self._steps_label.setStyleSheet(f"color: {BoardColors.TEXT}; font-size: 15px;")
        top.addWidget(self._steps_label)
        top.addWidget(self._button("Rules", self._show_rules))
        layout.addLayout(top)

        self._board = BoardWidget(on_node_clicked=self._on_node_clicked)
        layout.addWidget(self._board, 1)

        bottom = QHBoxLayout()
        self._status_label = QLabel("")
        bottom.addWidget(self._status_label, 1)
        self._retry_button = self._button("Try again", self._restart_level)
        self._next_button = self._button("Next level", self._next_level)
        bottom.addWidget(self._retry_button)
        bottom.addWidget(self._next_button)
        layout.addLayout(bottom)
        return screen

    def _refresh_levels_list(self) -> None:
        states = build_level_states(self._levels_repo.all(), self._progress_store, self._unlock_all_levels)
        self._level_grid.set_states(states)

    def _show_home_screen(self) -> None:
        self._refresh_levels_list()
        self._stack.setCurrentWidget(self._home_screen)

    def _start_level(self, index: int) -> None:
        level = self._levels_repo.get(index)
        result = self._session.start(level)
        if not result.started:
            QMessageBox.warning(self, "Level unavailable", "\n".join(result.problems))
            return
        self._board.set_board(level.positions, self._session.graph.edges())
        self._title_label.setText(f"Level {level.index}: {level.name} ({level.tier.label})")
        self._clear_selection()
        self._update_game_view()
        self._stack.setCurrentWidget(self._game_screen)

    def _restart_level(self) -> None:
        if self._session.level is not None:
            self._start_level(self._session.level.index)

    def _next_level(self) -> None:
        level = self._session.level
        if level is not None and self._levels_repo.has(level.index + 1):
            self._start_level(level.index + 1)

    def _clear_selection(self) -> None:
        self._selected_unit = None
        self._board.set_selection(None, frozenset())

    def _on_node_clicked(self, node: int) -> None:
        if self._session.state is not GameState.PLAYING:
            return
        unit = self._session.unit_at(node)
        if unit is not None:
            self._selected_unit = unit
            self._board.set_selection(node, self._session.legal_targets(unit))
            return
        if self._selected_unit is None:
            return

        result = self._session.attempt_move(self._selected_unit, node)
        self._clear_selection()
        if not result.accepted:
            # Clicking a non-neighbour just drops the selection.
            if result.rejection is not Rejection.NOT_ADJACENT:
                self._set_status("That node is not available.")
            return
        self._update_game_view()

    def _set_status(self, text: str, color: str = BoardColors.TEXT_LIGHT) -> None:
        self._status_label.setText(text)
        self._status_label.setStyleSheet(f"color: {color}; font-size: 15px; font-weight: 700;")

    def _update_game_view(self) -> None:
        snapshot = self._session.snapshot()
        self._board.set_snapshot(snapshot)
        self._steps_label.setText(f"Steps: {snapshot.steps}/{snapshot.step_limit}")
        self._retry_button.setVisible(snapshot.state is not GameState.PLAYING)
        self._next_button.setVisible(False)

        if snapshot.state is GameState.PLAYING:
            self._set_status("Select a police unit, then a highlighted node.")
        elif snapshot.state is GameState.WON:
            self._set_status(f"Thief cornered! {star_text(snapshot.stars)}", BoardColors.WIN)
            self._level_won()
        else:
            self._set_status(LOSS_MESSAGES[snapshot.loss_reason], BoardColors.LOSE)

    def _level_won(self) -> None:
        won = self._session.result()
        if won is None:
            return
        self._progress_store.record_win(won.level_index, won.stars, self._levels_repo.last_index)
        has_next = self._levels_repo.has(won.level_index + 1)
        self._next_button.setVisible(
            has_next and (self._unlock_all_levels or self._progress_store.is_unlocked(won.level_index + 1))
        )

    def _show_rules(self) -> None:
        QMessageBox.information(self, "How to play", RULES_TEXT)

    def _reset_progress(self) -> None:
        answer = QMessageBox.question(self, "Reset progress", "Clear all stars and unlocked levels?")
        if answer == QMessageBox.StandardButton.Yes:
            self._progress_store.reset()
            self._refresh_levels_list()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Persist progress when closing the app."""
        if self._progress_store is not None:
            self._progress_store.save()
        super().closeEvent(event)
