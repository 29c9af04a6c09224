"""
Library Panel - grouped artifact browser with type / scope / text filters
"""

import logging

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel,
    QLineEdit, QComboBox, QTreeWidget, QTreeWidgetItem,
    QAbstractItemView,
)
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont

from skills_studio import library
from skills_studio.models import ARTIFACT_TYPES, SCOPES, SCOPE_LABELS, TYPE_LABELS, Artifact, Library
from skills_studio.theme import (
    BG_MEDIUM, FG_SECONDARY, FG_DIM,
    BTN_STYLE, INPUT_STYLE, LIST_STYLE, TYPE_COLORS,
)

logger = logging.getLogger(__name__)

ARTIFACT_ROLE = Qt.ItemDataRole.UserRole


class LibraryPanel(QWidget):
    open_artifact   = pyqtSignal(object)   # Artifact
    delete_artifact = pyqtSignal(object)   # Artifact
    install_artifact   = pyqtSignal(object)   # Artifact
    uninstall_artifact = pyqtSignal(object)   # Artifact
    export_artifact    = pyqtSignal(object)   # Artifact
    refresh_requested = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._library = Library()
        self._selected_id: str | None = None
        self._build_ui()

    # ── Build UI ──────────────────────────────────────────────────────────────

    def _build_ui(self):
        self.setStyleSheet(f"background: {BG_MEDIUM};")
        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(4)

        self._filter_edit = QLineEdit()
        self._filter_edit.setPlaceholderText("Filter...")
        self._filter_edit.setStyleSheet(INPUT_STYLE)
        self._filter_edit.textChanged.connect(self._render)
        layout.addWidget(self._filter_edit)

        combos = QHBoxLayout()
        self._type_combo = QComboBox()
        self._type_combo.setStyleSheet(INPUT_STYLE)
        self._type_combo.addItem("All types", library.ALL)
        for t in ARTIFACT_TYPES:
            self._type_combo.addItem(TYPE_LABELS[t] + "s", t)
        self._type_combo.currentIndexChanged.connect(self._render)

        self._scope_combo = QComboBox()
        self._scope_combo.setStyleSheet(INPUT_STYLE)
        self._scope_combo.addItem("All scopes", library.ALL)
        for s in SCOPES:
            self._scope_combo.addItem(SCOPE_LABELS[s], s)
        self._scope_combo.currentIndexChanged.connect(self._render)

        combos.addWidget(self._type_combo)
        combos.addWidget(self._scope_combo)
        layout.addLayout(combos)

        self._tree = QTreeWidget()
        self._tree.setHeaderHidden(True)
        self._tree.setStyleSheet(LIST_STYLE)
        self._tree.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._tree.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self._tree, 1)

        self._counts_label = QLabel("")
        self._counts_label.setStyleSheet(f"color: {FG_DIM}; font-size: 11px;")
        layout.addWidget(self._counts_label)

        btn_row = QHBoxLayout()
        refresh_btn = QPushButton("Refresh")
        refresh_btn.setStyleSheet(BTN_STYLE)
        refresh_btn.setToolTip("Reload the library from the server (F5)")
        refresh_btn.clicked.connect(self.refresh_requested.emit)
        self._delete_btn = QPushButton("Delete")
        self._delete_btn.setStyleSheet(BTN_STYLE)
        self._delete_btn.setToolTip("Delete the selected artifact")
        self._delete_btn.setEnabled(False)
        self._delete_btn.clicked.connect(self._on_delete_clicked)
        self._install_btn = QPushButton("Install")
        self._install_btn.setStyleSheet(BTN_STYLE)
        self._install_btn.setEnabled(False)
        self._install_btn.clicked.connect(self._on_install_clicked)
        self._export_btn = QPushButton("Export")
        self._export_btn.setStyleSheet(BTN_STYLE)
        self._export_btn.setToolTip("Download the selected artifact as an archive")
        self._export_btn.setEnabled(False)
        self._export_btn.clicked.connect(self._on_export_clicked)
        btn_row.addWidget(refresh_btn)
        btn_row.addStretch()
        btn_row.addWidget(self._install_btn)
        btn_row.addWidget(self._export_btn)
        btn_row.addWidget(self._delete_btn)
        layout.addLayout(btn_row)

    # ── Data ─────────────────────────────────────────────────────────────────

    def set_library(self, lib: Library):
        self._library = lib
        self._render()

    def select(self, artifact_id: str | None):
        self._selected_id = artifact_id
        self._render()

    def _render(self, *_):
        items = library.filter_artifacts(
            self._library.artifacts,
            type  = self._type_combo.currentData(),
            scope = self._scope_combo.currentData(),
            query = self._filter_edit.text(),
        )
        self._tree.clear()
        bold = QFont()
        bold.setBold(True)
        selected_item = None
        for label, artifacts in library.group_by_scope(items):
            group = QTreeWidgetItem([f"{label}  ({len(artifacts)})"])
            group.setFont(0, bold)
            group.setForeground(0, QColor(FG_SECONDARY))
            group.setFlags(Qt.ItemFlag.ItemIsEnabled)
            self._tree.addTopLevelItem(group)
            for a in artifacts:
                item = QTreeWidgetItem([self._item_text(a)])
                item.setData(0, ARTIFACT_ROLE, a)
                item.setForeground(0, QColor(TYPE_COLORS.get(a.type, FG_SECONDARY)))
                item.setToolTip(0, a.description)
                group.addChild(item)
                if a.id == self._selected_id:
                    selected_item = item
            group.setExpanded(True)
        if selected_item is not None:
            self._tree.setCurrentItem(selected_item)
        self._update_buttons()

        counts = library.count_by_type(self._library.artifacts)
        self._counts_label.setText(
            "   ".join(f"{TYPE_LABELS[t]}s: {counts[t]}" for t in ARTIFACT_TYPES)
        )

    @staticmethod
    def _item_text(a: Artifact) -> str:
        text = a.name
        if a.scope == "bundled" and not a.installed:
            text += "  [not installed]"
        elif a.bundled_source:
            text += "  [bundled]"
        return text

    # ── Events ───────────────────────────────────────────────────────────────

    def _current_artifact(self) -> Artifact | None:
        item = self._tree.currentItem()
        return item.data(0, ARTIFACT_ROLE) if item else None

    def _update_buttons(self):
        a = self._current_artifact()
        self._delete_btn.setEnabled(a is not None and not a.read_only)
        self._export_btn.setEnabled(a is not None)
        self._install_btn.setEnabled(a is not None and (a.can_install or a.can_uninstall))
        if a is not None and a.can_uninstall:
            self._install_btn.setText("Uninstall")
            self._install_btn.setToolTip("Remove the installed copy of this bundled skill")
        else:
            self._install_btn.setText("Install")
            self._install_btn.setToolTip("Install this bundled skill so it can be edited")

    def _on_item_clicked(self, item: QTreeWidgetItem, _column: int):
        artifact = item.data(0, ARTIFACT_ROLE)
        if artifact is None:
            return
        self._selected_id = artifact.id
        self._update_buttons()
        self.open_artifact.emit(artifact)

    def _on_delete_clicked(self):
        artifact = self._current_artifact()
        if artifact is not None:
            self.delete_artifact.emit(artifact)

    def _on_install_clicked(self):
        artifact = self._current_artifact()
        if artifact is None:
            return
        if artifact.can_uninstall:
            self.uninstall_artifact.emit(artifact)
        elif artifact.can_install:
            self.install_artifact.emit(artifact)

    def _on_export_clicked(self):
        artifact = self._current_artifact()
        if artifact is not None:
            self.export_artifact.emit(artifact)
