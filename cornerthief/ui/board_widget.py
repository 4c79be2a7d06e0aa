"""Pursuit board: draws the graph and tokens, turns clicks into node picks."""

from __future__ import annotations

from typing import Callable, FrozenSet, Optional, Sequence, Tuple

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen
from PySide6.QtWidgets import QWidget

from cornerthief.core.session import Snapshot
from cornerthief.ui.colors import BoardColors, blend_hex

NODE_RADIUS = 20
TOKEN_RADIUS = 16
PADDING = 35
HIT_SLOP = 12


class BoardWidget(QWidget):
    """Paints edges, nodes, exits, police and thief for the current snapshot."""

    def __init__(self, on_node_clicked: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._on_node_clicked = on_node_clicked
        self._positions: Tuple[Tuple[float, float], ...] = ()
        self._edges: Sequence[Tuple[int, int]] = ()
        self._snapshot: Optional[Snapshot] = None
        self._selected_node: Optional[int] = None
        self._targets: FrozenSet[int] = frozenset()
        self.setMinimumSize(360, 360)

    def set_board(self, positions: Tuple[Tuple[float, float], ...], edges: Sequence[Tuple[int, int]]) -> None:
        self._positions = positions
        self._edges = edges
        self._selected_node = None
        self._targets = frozenset()
        self.update()

    def set_snapshot(self, snapshot: Optional[Snapshot]) -> None:
        self._snapshot = snapshot
        self.update()

    def set_selection(self, node: Optional[int], targets: FrozenSet[int]) -> None:
        """Highlight the selected police node and the nodes it may move to."""
        self._selected_node = node
        self._targets = targets
        self.update()

    def _screen_pos(self, node: int) -> QPointF:
        x, y = self._positions[node]
        w = max(1, self.width() - PADDING * 2)
        h = max(1, self.height() - PADDING * 2)
        return QPointF(PADDING + x * w, PADDING + y * h)

    def node_at(self, point: QPointF) -> Optional[int]:
        reach = (NODE_RADIUS + HIT_SLOP) ** 2
        for node in range(len(self._positions)):
            p = self._screen_pos(node)
            dx, dy = point.x() - p.x(), point.y() - p.y()
            if dx * dx + dy * dy <= reach:
                return node
        return None

    def mousePressEvent(self, event) -> None:
        node = self.node_at(event.position())
        if node is not None:
            self._on_node_clicked(node)
        super().mousePressEvent(event)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(self.rect(), QColor(BoardColors.BG))
        if not self._positions:
            return

        shadow = QPen(QColor(BoardColors.EDGE_SHADOW), 7, Qt.SolidLine, Qt.RoundCap)
        edge = QPen(QColor(BoardColors.EDGE), 7, Qt.SolidLine, Qt.RoundCap)
        for a, b in self._edges:
            start, end = self._screen_pos(a), self._screen_pos(b)
            painter.setPen(shadow)
            painter.drawLine(start + QPointF(0, 2), end + QPointF(0, 2))
            painter.setPen(edge)
            painter.drawLine(start, end)

        exits = self._snapshot.exits if self._snapshot else frozenset()
        for node in range(len(self._positions)):
            center = self._screen_pos(node)
            if node in self._targets:
                glow = QColor(BoardColors.VALID_MOVE)
                glow.setAlpha(110)
                painter.setPen(Qt.NoPen)
                painter.setBrush(glow)
                painter.drawEllipse(center, NODE_RADIUS + 8, NODE_RADIUS + 8)
            if node in exits:
                glow = QColor(BoardColors.EXIT_GLOW)
                glow.setAlpha(140)
                painter.setPen(Qt.NoPen)
                painter.setBrush(glow)
                painter.drawEllipse(center, NODE_RADIUS + 5, NODE_RADIUS + 5)
                fill = QColor(BoardColors.EXIT)
                stroke = QColor(blend_hex(BoardColors.EXIT, "#000000", 0.25))
            else:
                fill = QColor(BoardColors.NODE_FILL)
                stroke = QColor(BoardColors.NODE_STROKE)
            painter.setBrush(QBrush(fill))
            painter.setPen(QPen(stroke, 3))
            painter.drawEllipse(center, NODE_RADIUS, NODE_RADIUS)

        if self._snapshot is None:
            return
        for node in self._snapshot.police:
            self._draw_token(painter, node, BoardColors.POLICE, BoardColors.POLICE_DARK, "P",
                             selected=node == self._selected_node)
        self._draw_token(painter, self._snapshot.thief, BoardColors.THIEF, BoardColors.THIEF_DARK, "T")

    def _draw_token(self, painter: QPainter, node: int, fill: str, stroke: str, text: str,
                    selected: bool = False) -> None:
        center = self._screen_pos(node)
        if selected:
            painter.setPen(QPen(QColor(BoardColors.HIGHLIGHT), 4))
            painter.setBrush(Qt.NoBrush)
            painter.drawEllipse(center, TOKEN_RADIUS + 6, TOKEN_RADIUS + 6)
        painter.setPen(QPen(QColor(stroke), 2))
        painter.setBrush(QColor(fill))
        painter.drawEllipse(center, TOKEN_RADIUS, TOKEN_RADIUS)
        painter.setPen(QColor(BoardColors.BUTTON_TEXT))
        font = painter.font()
        font.setBold(True)
        font.setPointSize(11)
        painter.setFont(font)
        r = TOKEN_RADIUS
        painter.drawText(int(center.x() - r), int(center.y() - r), 2 * r, 2 * r, Qt.AlignCenter, text)
