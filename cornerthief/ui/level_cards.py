"""Level selection UI: LevelCard and LevelGridWidget."""

from __future__ import annotations

from typing import Callable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QGraphicsDropShadowEffect,
    QGridLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from cornerthief.ui.colors import BoardColors, blend_hex, star_text
from cornerthief.ui.models import LevelState


class LevelCard(QWidget):
    """A clickable level card showing number, name, tier and best stars."""

    def __init__(self, on_click: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_click = on_click
        self._level_index = 0
        self._unlocked = True

        self.setObjectName("levelCard")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setFixedSize(150, 130)

        self._number = QLabel("")
        self._number.setObjectName("levelCardNumber")
        self._number.setAlignment(Qt.AlignCenter)
        self._name = QLabel("")
        self._name.setObjectName("levelCardName")
        self._name.setAlignment(Qt.AlignCenter)
        self._name.setWordWrap(True)
        self._stars = QLabel("")
        self._stars.setObjectName("levelCardStars")
        self._stars.setAlignment(Qt.AlignCenter)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(4)
        layout.addWidget(self._number)
        layout.addWidget(self._name)
        layout.addWidget(self._stars)

        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(18)
        shadow.setOffset(0, 6)
        shadow.setColor(QColor(15, 23, 42, 70))
        self.setGraphicsEffect(shadow)

    def _apply_styles(self, is_current: bool) -> None:
        base = BoardColors.BUTTON if self._unlocked else BoardColors.STAR_EMPTY
        top = blend_hex(base, "#FFFFFF", 0.18)
        bottom = blend_hex(base, "#000000", 0.08)
        border = BoardColors.HIGHLIGHT if is_current else "rgba(255, 255, 255, 0.40)"
        self.setStyleSheet(
            f"""
            QWidget#levelCard {{
                background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                    stop:0 {top},
                    stop:1 {bottom}
                );
                border-radius: 14px;
                border: 2px solid {border};
            }}
            QLabel#levelCardNumber {{
                color: {BoardColors.BUTTON_TEXT};
                font-weight: 900;
                font-size: 26px;
            }}
            QLabel#levelCardName {{
                color: {BoardColors.BUTTON_TEXT};
                font-size: 12px;
            }}
            QLabel#levelCardStars {{
                color: {BoardColors.STAR};
                font-size: 16px;
            }}
            """
        )

    def set_state(self, state: LevelState) -> None:
        self._level_index = state.level.index
        self._unlocked = bool(state.unlocked)
        self._number.setText(str(state.level.index) if self._unlocked else "🔒")
        self._name.setText(f"{state.level.name}\n{state.level.tier.label}")
        self._stars.setText(star_text(state.stars) if state.stars else "")
        self.setCursor(Qt.PointingHandCursor if self._unlocked else Qt.ArrowCursor)
        self._apply_styles(state.is_current)

    def mousePressEvent(self, event) -> None:
        if self._unlocked and self._level_index:
            self._on_click(self._level_index)
        super().mousePressEvent(event)


class LevelGridWidget(QWidget):
    """Grid of level cards, rebuilt whenever progress changes."""

    COLUMNS = 3

    def __init__(self, on_level_clicked: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_level_clicked = on_level_clicked
        self._cards: List[LevelCard] = []
        self._layout = QGridLayout(self)
        self._layout.setSpacing(16)

    def set_states(self, states: List[LevelState]) -> None:
        while len(self._cards) < len(states):
            card = LevelCard(on_click=self._on_level_clicked, parent=self)
            idx = len(self._cards)
            self._layout.addWidget(card, idx // self.COLUMNS, idx % self.COLUMNS)
            self._cards.append(card)
        for card, state in zip(self._cards, states):
            card.set_state(state)
            card.setVisible(True)
        for card in self._cards[len(states):]:
            card.setVisible(False)
