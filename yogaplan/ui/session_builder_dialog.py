"""
Session Builder Dialog

Provides UI for creating and editing a session:
- Title, description, story, duration, category and level
- Card palette with search, kind and tag filters
- Palette click/tap appends, drag or long-press inserts at a position
- Running order with drag and touch reordering and confirmed removal
- Story books appended in book order
"""

import logging
from typing import Callable, List, Optional

from PyQt6.QtCore import QEvent, QMimeData, Qt, QTimer
from PyQt6.QtWidgets import (
    QAbstractItemView, QCheckBox, QComboBox, QDialog, QDialogButtonBox,
    QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QListWidgetItem, QMessageBox, QPushButton, QSpinBox, QTextEdit,
    QVBoxLayout,
)

from ..data.defaults import SESSION_CATEGORIES, SESSION_LEVELS
from ..session.builder import CardSummary, SessionDraft, all_tags, filter_cards, summarize_cards
from ..session.events import SessionEventType
from ..session.items import ItemKind
from ..session.reorder import LONG_PRESS_MS, PaletteTouchGesture
from ..session.scheduling import monotonic_ms
from .timeline_list import CARD_MIME, KIND_ICONS, TimelineListWidget, format_minutes, item_bounds

ALL_TAGS = "All tags"


class CardPaletteList(QListWidget):
    """Filtered card palette.

    Mouse drags carry the card id as ``CARD_MIME``; touch input goes
    through a ``PaletteTouchGesture`` whose drop indicator lives on the
    target order list.
    """

    def __init__(
        self,
        gesture: PaletteTouchGesture,
        target: QListWidget,
        parent=None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.gesture = gesture
        self.target = target
        self.clock = clock

        self.setDragEnabled(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.DragOnly)
        self.viewport().setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)

        self._hold_timer = QTimer(self)
        self._hold_timer.setSingleShot(True)
        self._hold_timer.setInterval(LONG_PRESS_MS)
        self._hold_timer.timeout.connect(lambda: self.gesture.arm(self.clock()))

    def show_cards(self, cards: List[CardSummary]) -> None:
        self.clear()
        for card in cards:
            tags = f"  [{', '.join(card.tags)}]" if card.tags else ""
            item = QListWidgetItem(f"{KIND_ICONS[card.kind]} {card.title} ({format_minutes(card.time)}){tags}")
            item.setData(Qt.ItemDataRole.UserRole, card.id)
            if card.category:
                item.setToolTip(card.category)
            self.addItem(item)

    def mimeData(self, items):
        mime = QMimeData()
        if items:
            card_id = items[0].data(Qt.ItemDataRole.UserRole)
            mime.setData(CARD_MIME, str(card_id).encode("utf-8"))
        return mime

    def viewportEvent(self, event):
        kind = event.type()
        if kind not in (
            QEvent.Type.TouchBegin,
            QEvent.Type.TouchUpdate,
            QEvent.Type.TouchEnd,
            QEvent.Type.TouchCancel,
        ):
            return super().viewportEvent(event)

        points = event.points()
        point = points[0] if points else None
        if kind == QEvent.Type.TouchBegin and point is not None:
            item = self.itemAt(point.position().toPoint())
            if item is not None:
                self.gesture.press(item.data(Qt.ItemDataRole.UserRole), self.clock())
                self._hold_timer.start()
        elif kind == QEvent.Type.TouchUpdate and point is not None:
            if not self.gesture.armed:
                self._hold_timer.stop()
            local = self.target.viewport().mapFromGlobal(point.globalPosition().toPoint())
            self.gesture.move(local.y(), item_bounds(self.target))
        elif kind == QEvent.Type.TouchEnd:
            self._hold_timer.stop()
            index = self.gesture.release(self.clock())
            if index is not None:
                self.logger.debug(f"[ui] Palette card inserted at {index}")
        else:
            self._hold_timer.stop()
            self.gesture.cancel()
        event.accept()
        return True


class SessionBuilderDialog(QDialog):
    """Create a new session or edit an existing one."""

    def __init__(self, library, session=None, parent=None, clock: Callable[[], float] = monotonic_ms):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)
        self.library = library
        self.clock = clock
        self.resolver = library.resolver()
        self.draft = SessionDraft.from_session(session) if session is not None else SessionDraft()
        self.saved_session_id: Optional[str] = None
        self.cards = summarize_cards(library.all_cards())

        self._refresh_pending = False
        self.draft.engine.emitter.subscribe(SessionEventType.ORDER_CHANGE, lambda _e: self._schedule_refresh())

        editing = self.draft.session_id is not None
        self.setWindowTitle("Edit Session" if editing else "New Session")
        self.setMinimumSize(900, 600)

        self._init_ui()
        self._load_draft()
        self._apply_filter()
        self._refresh_order()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        columns = QHBoxLayout()
        columns.addWidget(self._create_details_section(), 1)
        columns.addWidget(self._create_palette_section(), 1)
        columns.addWidget(self._create_order_section(), 1)
        layout.addLayout(columns, 1)

        self.label_errors = QLabel("")
        self.label_errors.setWordWrap(True)
        self.label_errors.setStyleSheet("color: #c0392b;")
        self.label_errors.setVisible(False)
        layout.addWidget(self.label_errors)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._on_save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _create_details_section(self) -> QGroupBox:
        group = QGroupBox("Details")
        form = QFormLayout()

        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Session title")
        form.addRow("Title:", self.title_edit)

        self.description_edit = QTextEdit()
        self.description_edit.setMaximumHeight(80)
        form.addRow("Description:", self.description_edit)

        self.story_edit = QTextEdit()
        self.story_edit.setMaximumHeight(80)
        self.story_edit.setPlaceholderText("Optional story read before the session")
        form.addRow("Story:", self.story_edit)

        self.duration_spin = QSpinBox()
        self.duration_spin.setRange(1, 300)
        self.duration_spin.setSuffix(" min")
        form.addRow("Duration:", self.duration_spin)

        self.category_combo = QComboBox()
        self.category_combo.addItems(SESSION_CATEGORIES)
        form.addRow("Category:", self.category_combo)

        self.level_combo = QComboBox()
        self.level_combo.addItems(SESSION_LEVELS)
        form.addRow("Level:", self.level_combo)

        group.setLayout(form)
        return group

    def _create_palette_section(self) -> QGroupBox:
        group = QGroupBox("Cards")
        layout = QVBoxLayout()

        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search cards...")
        self.search_edit.textChanged.connect(self._apply_filter)
        layout.addWidget(self.search_edit)

        kinds_row = QHBoxLayout()
        self.kind_checks = {}
        for kind, label in (
            (ItemKind.EXERCISE, "Exercises"),
            (ItemKind.STORY, "Stories"),
            (ItemKind.PRACTICAL, "Practicals"),
        ):
            check = QCheckBox(label)
            check.setChecked(True)
            check.toggled.connect(self._apply_filter)
            kinds_row.addWidget(check)
            self.kind_checks[kind] = check
        layout.addLayout(kinds_row)

        self.tag_combo = QComboBox()
        self.tag_combo.addItem(ALL_TAGS)
        self.tag_combo.addItems(all_tags(self.cards))
        self.tag_combo.currentIndexChanged.connect(self._apply_filter)
        layout.addWidget(self.tag_combo)

        # Order list is created first so the palette can target it.
        self.order_list = TimelineListWidget(self.draft.engine, clock=self.clock)
        self.palette_gesture = PaletteTouchGesture(self.draft.engine)
        self.palette = CardPaletteList(self.palette_gesture, self.order_list, clock=self.clock)
        self.palette.itemClicked.connect(self._on_palette_clicked)
        layout.addWidget(self.palette, 1)

        books_row = QHBoxLayout()
        self.book_combo = QComboBox()
        for book in self.library.story_books.list():
            self.book_combo.addItem(f"📚 {book.title} ({len(book.story_ids)})", book.id)
        books_row.addWidget(self.book_combo, 1)
        self.btn_add_book = QPushButton("Add Book")
        self.btn_add_book.setEnabled(self.book_combo.count() > 0)
        self.btn_add_book.clicked.connect(self._on_add_story_book)
        books_row.addWidget(self.btn_add_book)
        layout.addLayout(books_row)

        group.setLayout(layout)
        return group

    def _create_order_section(self) -> QGroupBox:
        group = QGroupBox("Running Order")
        layout = QVBoxLayout()

        layout.addWidget(self.order_list, 1)

        self.label_counts = QLabel("")
        layout.addWidget(self.label_counts)

        row = QHBoxLayout()
        self.btn_remove = QPushButton("🗑️ Remove")
        self.btn_remove.clicked.connect(self._on_remove_card)
        row.addWidget(self.btn_remove)
        row.addStretch()
        layout.addLayout(row)

        group.setLayout(layout)
        return group

    # === Draft <-> form ===

    def _load_draft(self):
        self.title_edit.setText(self.draft.title)
        self.description_edit.setPlainText(self.draft.description)
        self.story_edit.setPlainText(self.draft.story)
        self.duration_spin.setValue(int(self.draft.duration_minutes))
        self._select_text(self.category_combo, self.draft.category)
        self._select_text(self.level_combo, self.draft.level)

    @staticmethod
    def _select_text(combo: QComboBox, text: str):
        index = combo.findText(text)
        if index < 0:
            combo.addItem(text)
            index = combo.count() - 1
        combo.setCurrentIndex(index)

    def _store_form(self):
        self.draft.title = self.title_edit.text()
        self.draft.description = self.description_edit.toPlainText()
        self.draft.story = self.story_edit.toPlainText()
        self.draft.duration_minutes = self.duration_spin.value()
        self.draft.category = self.category_combo.currentText()
        self.draft.level = self.level_combo.currentText()

    # === Palette ===

    def _apply_filter(self, *_args):
        kinds = [kind for kind, check in self.kind_checks.items() if check.isChecked()]
        tag = self.tag_combo.currentText()
        tags = () if tag == ALL_TAGS else (tag,)
        self.palette.show_cards(filter_cards(self.cards, self.search_edit.text(), kinds, tags))

    def _on_palette_clicked(self, item: QListWidgetItem):
        self.draft.add_card(item.data(Qt.ItemDataRole.UserRole))

    def _on_add_story_book(self):
        book = self.library.story_books.get(self.book_combo.currentData())
        if book is None:
            return
        added = self.draft.add_story_book(book.story_ids)
        self.logger.info(f"[ui] Added {added} stories from book {book.id}")

    # === Order ===

    def _schedule_refresh(self):
        if self._refresh_pending:
            return
        self._refresh_pending = True
        QTimer.singleShot(0, self._refresh_order)

    def _refresh_order(self):
        self._refresh_pending = False
        self.order_list.show_entries(self.draft.entries(self.resolver))
        counts = self.draft.kind_counts()
        self.label_counts.setText(
            f"{counts[ItemKind.EXERCISE]} exercises, {counts[ItemKind.STORY]} stories, "
            f"{counts[ItemKind.PRACTICAL]} practicals"
        )

    def _on_remove_card(self):
        row = self.order_list.currentRow()
        if row < 0:
            return
        item = self.order_list.item(row)
        reply = QMessageBox.question(
            self,
            "Remove Card",
            f"Remove '{item.text()}' from the session?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.draft.remove_card(row)

    # === Save ===

    def _on_save(self):
        self._store_form()
        result = self.draft.submit(self.library.sessions)
        if not result.success:
            self.label_errors.setText("\n".join(result.errors))
            self.label_errors.setVisible(True)
            return
        self.saved_session_id = result.item.id
        self.logger.info(f"[ui] Saved session {self.saved_session_id}")
        self.accept()
