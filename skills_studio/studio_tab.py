"""
Studio Tab - multi-document artifact editor (tab bar, metadata form, sub-files, raw text)

All state lives in the SkillsStudio controller and its EditorSession; this
widget renders what the session reports and forwards user input to it.
"""

import logging

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QSplitter, QStackedWidget,
    QPushButton, QLabel, QLineEdit, QPlainTextEdit, QTextBrowser,
    QScrollArea, QGridLayout, QCheckBox, QComboBox, QSpinBox,
    QTabBar, QListWidget, QListWidgetItem, QMessageBox, QInputDialog, QFileDialog, QFrame,
)
from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QColor, QFont

from skills_studio.api_client import StudioClient
from skills_studio.content_sync import EditingSurface
from skills_studio.editor_session import EditorSession, StudioListener
from skills_studio.errors import ConfirmationDeclined, SaveInProgress, StudioError
from skills_studio.form_state import AGENT_MODELS, SKILL_TOOLS, FormState
from skills_studio.models import TYPE_LABELS, Artifact
from skills_studio.studio import SkillsStudio
from skills_studio.syntax_highlighter import ArtifactHighlighter
from skills_studio.tasks import TaskRunner
from skills_studio.theme import (
    BG_DARK, BG_MEDIUM, BG_LIGHT,
    FG_PRIMARY, FG_SECONDARY, FG_DIM,
    ACCENT_GREEN, ERROR_RED, WARN_ORANGE, TYPE_COLORS,
    BTN_STYLE, INPUT_STYLE, LIST_STYLE, FORM_LABEL_STYLE, SECTION_STYLE,
)

logger = logging.getLogger(__name__)

EDITOR_STYLE = f"""
    QPlainTextEdit, QTextBrowser {{
        background-color: {BG_DARK};
        color: {FG_PRIMARY};
        border: none;
        padding: 8px;
    }}
"""

PAGE_EMPTY  = 0
PAGE_EDITOR = 1


# ─────────────────────────────────────────────────────────────────────────────
# Editing surface
# ─────────────────────────────────────────────────────────────────────────────

class QtEditorSurface(EditingSurface):
    """Presents the raw text editor (plus preview and toolbar) to the session."""

    def __init__(self, editor: QPlainTextEdit, preview: QTextBrowser, stack: QStackedWidget,
                 toolbar: QWidget):
        self._editor  = editor
        self._preview = preview
        self._stack   = stack
        self._toolbar = toolbar

    def text(self) -> str:
        return self._editor.toPlainText()

    def set_text(self, text: str) -> None:
        if text == self._editor.toPlainText():
            return
        pos = self._editor.textCursor().position()
        self._editor.blockSignals(True)
        try:
            self._editor.setPlainText(text)
        finally:
            self._editor.blockSignals(False)
        cursor = self._editor.textCursor()
        cursor.setPosition(min(pos, len(text)))
        self._editor.setTextCursor(cursor)

    def reset_preview(self) -> None:
        self._stack.setCurrentWidget(self._editor)

    def show_toolbar(self) -> None:
        self._toolbar.setVisible(True)

    def show_preview(self) -> None:
        self._preview.setMarkdown(self.text())
        self._stack.setCurrentWidget(self._preview)
        self._toolbar.setVisible(False)

    @property
    def previewing(self) -> bool:
        return self._stack.currentWidget() is self._preview


# ─────────────────────────────────────────────────────────────────────────────
# Studio Tab
# ─────────────────────────────────────────────────────────────────────────────

class StudioTab(QWidget, StudioListener):
    library_loaded   = pyqtSignal(object)   # Library
    artifact_focused = pyqtSignal(object)   # Artifact | None
    status_message   = pyqtSignal(str, str) # message, level

    def __init__(self, config, client: StudioClient, runner: TaskRunner, parent=None):
        super().__init__(parent)
        self.config = config
        self._rendering = False

        self._sync_timer = QTimer(self)
        self._sync_timer.setSingleShot(True)
        self._sync_timer.setInterval(int(config.get("editor.sync_delay_ms", 600)))
        self._sync_timer.timeout.connect(self._raw_to_form)

        self._build_ui()

        self.surface = QtEditorSurface(self.raw_editor, self.preview, self._doc_stack, self._editor_toolbar)
        self.studio = SkillsStudio(
            client,
            runner,
            surface=self.surface,
            listener=self,
            confirm=self._confirm,
            reuse_clean_tabs=bool(config.get("studio.reuse_clean_tabs", True)),
        )
        self._show_empty()

    @property
    def session(self) -> EditorSession:
        return self.studio.session

    # ── Build UI ─────────────────────────────────────────────────────────────

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.tab_bar = QTabBar()
        self.tab_bar.setTabsClosable(True)
        self.tab_bar.setExpanding(False)
        self.tab_bar.setDocumentMode(True)
        self.tab_bar.currentChanged.connect(self._on_tab_changed)
        self.tab_bar.tabCloseRequested.connect(self._on_tab_close)
        layout.addWidget(self.tab_bar)
        layout.addWidget(self._build_toolbar())

        self._pages = QStackedWidget()
        empty = QLabel("Select a skill, command or agent from the library.")
        empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
        empty.setStyleSheet(f"color: {FG_DIM}; font-size: 13px; background: {BG_DARK};")
        self._pages.addWidget(empty)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.setHandleWidth(4)
        splitter.setStyleSheet(f"QSplitter::handle {{ background: {BG_LIGHT}; }}")
        splitter.addWidget(self._build_form_panel())
        splitter.addWidget(self._build_raw_panel())
        splitter.setSizes([360, 740])
        splitter.setCollapsible(1, False)
        self._pages.addWidget(splitter)

        layout.addWidget(self._pages, 1)

    def _build_toolbar(self) -> QWidget:
        bar = QWidget()
        bar.setStyleSheet(f"background: {BG_MEDIUM}; border-bottom: 1px solid {BG_LIGHT};")
        row = QHBoxLayout(bar)
        row.setContentsMargins(8, 4, 8, 4)
        row.setSpacing(4)

        def btn(label, tip, slot):
            b = QPushButton(label)
            b.setToolTip(tip)
            b.setStyleSheet(BTN_STYLE)
            b.clicked.connect(slot)
            row.addWidget(b)
            return b

        self._save_btn     = btn("Save",     "Save this tab (Ctrl+S)",         self.action_save)
        self._discard_btn  = btn("Discard",  "Revert this tab to its last saved text", self.action_discard)
        row.addWidget(self._vsep())
        self._validate_btn = btn("Validate", "Check the metadata (Ctrl+Shift+V)", self.action_validate)
        self._preview_btn  = btn("Preview",  "Toggle rendered Markdown preview", self._toggle_preview)
        row.addStretch()
        self._loading_label = QLabel("")
        self._loading_label.setStyleSheet(f"color: {FG_DIM}; font-size: 11px;")
        row.addWidget(self._loading_label)
        self._delete_btn = btn("Delete", "Delete this artifact", lambda: self.action_delete())
        return bar

    # ── Form panel ───────────────────────────────────────────────────────────

    def _build_form_panel(self) -> QWidget:
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        scroll.setStyleSheet(f"QScrollArea {{ border: none; background: {BG_MEDIUM}; }}")

        inner = QWidget()
        inner.setStyleSheet(f"background: {BG_MEDIUM};")
        layout = QVBoxLayout(inner)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(6)

        self._header_label = QLabel("")
        self._header_label.setStyleSheet(f"color: {FG_PRIMARY}; font-size: 14px; font-weight: bold;")
        self._header_label.setWordWrap(True)
        layout.addWidget(self._header_label)
        self._badge_label = QLabel("")
        layout.addWidget(self._badge_label)

        layout.addWidget(self._section_label("Metadata"))
        self._field_rows: dict[str, list[QWidget]] = {}

        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("my-skill")
        self.name_edit.textChanged.connect(lambda v: self._edit(lambda f: f.set_name(v)))
        self._add_field(layout, "name", "Name *", self.name_edit)

        self.desc_edit = QPlainTextEdit()
        self.desc_edit.setPlaceholderText("What it does, and when it should be used.")
        self.desc_edit.setMaximumHeight(90)
        self.desc_edit.textChanged.connect(
            lambda: self._edit(lambda f: f.set_description(self.desc_edit.toPlainText()))
        )
        self._add_field(layout, "description", "Description", self.desc_edit)

        self.arg_hint_edit = QLineEdit()
        self.arg_hint_edit.setPlaceholderText("[task description]")
        self.arg_hint_edit.textChanged.connect(lambda v: self._edit(lambda f: f.set_argument_hint(v)))
        self._add_field(layout, "argument-hint", "Argument hint", self.arg_hint_edit)

        tools_widget = QWidget()
        tools_widget.setStyleSheet(f"background: {BG_DARK}; border-radius: 3px;")
        grid = QGridLayout(tools_widget)
        grid.setSpacing(2)
        grid.setContentsMargins(4, 4, 4, 4)
        self.tool_checkboxes: dict[str, QCheckBox] = {}
        for i, tool in enumerate(SKILL_TOOLS):
            cb = QCheckBox(tool)
            cb.setStyleSheet(f"color: {FG_PRIMARY}; font-size: 12px;")
            cb.toggled.connect(lambda on, t=tool: self._edit(
                lambda f: f.add_tool(t) if on else f.remove_tool(t)
            ))
            self.tool_checkboxes[tool] = cb
            grid.addWidget(cb, i // 3, i % 3)
        self.extra_tools_edit = QLineEdit()
        self.extra_tools_edit.setPlaceholderText("Other tools, e.g. Bash(git:*) mcp__server__tool")
        self.extra_tools_edit.editingFinished.connect(self._on_extra_tools)
        self._add_field(layout, "allowed-tools", "Allowed tools", tools_widget, self.extra_tools_edit)

        self.user_invocable_cb = QCheckBox("User can invoke with /name")
        self.user_invocable_cb.toggled.connect(lambda on: self._edit(lambda f: f.set_user_invocable(on)))
        self.disable_model_cb = QCheckBox("Model may not invoke automatically")
        self.disable_model_cb.toggled.connect(
            lambda on: self._edit(lambda f: f.set_disable_model_invocation(on))
        )
        for cb in (self.user_invocable_cb, self.disable_model_cb):
            cb.setStyleSheet(f"color: {FG_PRIMARY}; font-size: 12px;")
        self._add_field(layout, "invocation", "Invocation", self.user_invocable_cb, self.disable_model_cb)

        self.model_combo = QComboBox()
        for m in AGENT_MODELS:
            self.model_combo.addItem(m or "inherit", m)
        self.model_combo.currentIndexChanged.connect(
            lambda _i: self._edit(lambda f: f.set_model(self.model_combo.currentData()))
        )
        self._add_field(layout, "model", "Model", self.model_combo)

        self.agent_tools_edit = QLineEdit()
        self.agent_tools_edit.setPlaceholderText("Read, Grep, Glob")
        self.agent_tools_edit.textChanged.connect(lambda v: self._edit(lambda f: f.set_tools(v)))
        self._add_field(layout, "tools", "Tools", self.agent_tools_edit)

        self.turns_spin = QSpinBox()
        self.turns_spin.setRange(0, 1000)
        self.turns_spin.setSpecialValueText("unlimited")
        self.turns_spin.valueChanged.connect(lambda v: self._edit(lambda f: f.set_max_turns(v)))
        self._add_field(layout, "maxTurns", "Max turns", self.turns_spin)

        self.color_edit = QLineEdit()
        self.color_edit.setPlaceholderText("blue")
        self.color_edit.textChanged.connect(lambda v: self._edit(lambda f: f.set_color(v)))
        self._add_field(layout, "color", "Color", self.color_edit)

        # ── files ──
        layout.addWidget(self._section_label("Files"))
        self.files_list = QListWidget()
        self.files_list.setStyleSheet(LIST_STYLE)
        self.files_list.setMaximumHeight(160)
        self.files_list.itemClicked.connect(self._on_file_clicked)
        layout.addWidget(self.files_list)
        files_row = QHBoxLayout()
        self._new_file_btn = QPushButton("+ New file")
        self._new_file_btn.setStyleSheet(BTN_STYLE)
        self._new_file_btn.clicked.connect(self._on_new_file)
        self._del_file_btn = QPushButton("- Delete file")
        self._del_file_btn.setStyleSheet(BTN_STYLE)
        self._del_file_btn.clicked.connect(self._on_delete_file)
        files_row.addWidget(self._new_file_btn)
        files_row.addWidget(self._del_file_btn)
        files_row.addStretch()
        layout.addLayout(files_row)

        # ── validation panel ──
        layout.addWidget(self._section_label("Validation"))
        self.validation_label = QLabel("-")
        self.validation_label.setWordWrap(True)
        self._set_validation_colour(FG_SECONDARY)
        layout.addWidget(self.validation_label)

        layout.addStretch()
        inner.setStyleSheet(inner.styleSheet() + INPUT_STYLE)
        scroll.setWidget(inner)
        return scroll

    def _add_field(self, layout: QVBoxLayout, key: str, label: str, *widgets: QWidget):
        title = QLabel(label, styleSheet=FORM_LABEL_STYLE)
        layout.addWidget(title)
        for w in widgets:
            layout.addWidget(w)
        self._field_rows[key] = [title, *widgets]

    # ── Raw editor panel ─────────────────────────────────────────────────────

    def _build_raw_panel(self) -> QWidget:
        panel = QWidget()
        panel.setStyleSheet(f"background: {BG_DARK};")
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self._editor_toolbar = QWidget()
        self._editor_toolbar.setStyleSheet(f"background: {BG_MEDIUM}; border-bottom: 1px solid {BG_LIGHT};")
        hrow = QHBoxLayout(self._editor_toolbar)
        hrow.setContentsMargins(8, 3, 8, 3)
        self._raw_title = QLabel("")
        self._raw_title.setStyleSheet(f"color: {FG_SECONDARY}; font-size: 12px;")
        hrow.addWidget(self._raw_title)
        hrow.addStretch()
        self._cursor_label = QLabel("Ln 1, Col 1")
        self._cursor_label.setStyleSheet(f"color: {FG_DIM}; font-size: 11px;")
        hrow.addWidget(self._cursor_label)
        wrap_cb = QCheckBox("Wrap")
        wrap_cb.setStyleSheet(f"color: {FG_SECONDARY}; font-size: 11px;")
        wrap_cb.setChecked(self.config.get("editor.wrap_lines", True))
        wrap_cb.toggled.connect(self._on_wrap_changed)
        hrow.addWidget(wrap_cb)
        layout.addWidget(self._editor_toolbar)

        self._doc_stack = QStackedWidget()
        self.raw_editor = QPlainTextEdit()
        self.raw_editor.setStyleSheet(EDITOR_STYLE)
        self.raw_editor.setFont(QFont(
            self.config.get("editor.font_family", "Consolas"),
            self.config.get("editor.font_size", 13),
        ))
        self._apply_wrap(self.config.get("editor.wrap_lines", True))
        self.highlighter = ArtifactHighlighter(self.raw_editor.document())
        self.raw_editor.textChanged.connect(self._on_raw_changed)
        self.raw_editor.cursorPositionChanged.connect(self._update_cursor_pos)

        self.preview = QTextBrowser()
        self.preview.setStyleSheet(EDITOR_STYLE)
        self.preview.setOpenExternalLinks(True)

        self._doc_stack.addWidget(self.raw_editor)
        self._doc_stack.addWidget(self.preview)
        layout.addWidget(self._doc_stack, 1)
        return panel

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet(SECTION_STYLE)
        return lbl

    @staticmethod
    def _vsep() -> QFrame:
        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.VLine)
        sep.setStyleSheet(f"color: {BG_LIGHT};")
        return sep

    def _apply_wrap(self, wrap: bool):
        mode = QPlainTextEdit.LineWrapMode.WidgetWidth if wrap else QPlainTextEdit.LineWrapMode.NoWrap
        self.raw_editor.setLineWrapMode(mode)

    def _on_wrap_changed(self, wrap: bool):
        self._apply_wrap(wrap)
        self.config.set("editor.wrap_lines", wrap)

    def _update_cursor_pos(self):
        cursor = self.raw_editor.textCursor()
        self._cursor_label.setText(f"Ln {cursor.blockNumber() + 1}, Col {cursor.columnNumber() + 1}")

    def _set_validation_colour(self, colour: str):
        self.validation_label.setStyleSheet(
            f"color: {colour}; font-size: 12px; "
            f"background: {BG_DARK}; padding: 6px; border-radius: 3px;"
        )

    def _confirm(self, message: str) -> bool:
        reply = QMessageBox.question(
            self, "Unsaved changes", message,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.Cancel,
            QMessageBox.StandardButton.Cancel,
        )
        return reply == QMessageBox.StandardButton.Yes

    # ── Form <-> session ─────────────────────────────────────────────────────

    def _edit(self, change):
        if self._rendering:
            return
        try:
            self.session.edit_form(change)
        except ValueError as e:
            self.notify(str(e), "error")

    def _on_extra_tools(self):
        form = self.session.form
        if form is None:
            return
        custom = [t for t in form.allowed_tools if t not in SKILL_TOOLS]
        wanted = self.extra_tools_edit.text().replace(",", " ").split()
        for tool in custom:
            if tool not in wanted:
                self._edit(lambda f, t=tool: f.remove_tool(t))
        for tool in wanted:
            self._edit(lambda f, t=tool: f.add_tool(t))

    def _populate_form(self, form: FormState | None, artifact: Artifact):
        self._rendering = True
        try:
            visible = {
                "skill":   {"name", "description", "argument-hint", "allowed-tools", "invocation"},
                "agent":   {"name", "description", "model", "tools", "maxTurns", "color"},
                "command": {"description"},
            }.get(artifact.type, {"description"})
            for key, widgets in self._field_rows.items():
                for w in widgets:
                    w.setVisible(key in visible)
            if form is None:
                return
            self.name_edit.setText(form.name)
            if self.desc_edit.toPlainText() != form.description:
                self.desc_edit.setPlainText(form.description)
            self.arg_hint_edit.setText(form.argument_hint)
            for tool, cb in self.tool_checkboxes.items():
                cb.setChecked(tool in form.allowed_tools)
            self.extra_tools_edit.setText(
                " ".join(t for t in form.allowed_tools if t not in SKILL_TOOLS)
            )
            self.user_invocable_cb.setChecked(form.user_invocable)
            self.disable_model_cb.setChecked(form.disable_model_invocation)
            self.model_combo.setCurrentIndex(max(0, self.model_combo.findData(form.model)))
            self.agent_tools_edit.setText(form.tools)
            self.turns_spin.setValue(form.max_turns or 0)
            self.color_edit.setText(form.color)
        finally:
            self._rendering = False

    def _on_raw_changed(self):
        self.session.text_edited()
        self._update_buttons()
        self._sync_timer.start()

    def _raw_to_form(self):
        tab = self.session.active_tab
        if tab is not None and self.session.refresh_form_from_surface():
            self._populate_form(self.session.form, tab.artifact)

    # ── StudioListener ───────────────────────────────────────────────────────

    def tabs_changed(self, session):
        self._render_tabs()
        self._update_buttons()

    def editor_rebuilt(self, session):
        tab = session.active_tab
        if tab is None:
            self._show_empty()
            return
        self._pages.setCurrentIndex(PAGE_EDITOR)
        self._render_tabs()
        self._render_header(tab.artifact)
        self._populate_form(session.form, tab.artifact)
        self._render_files()
        self._set_validation_colour(FG_SECONDARY)
        self.validation_label.setText("-")
        self._update_buttons()
        self.artifact_focused.emit(tab.artifact)

    def document_closed(self, session):
        self._show_empty()
        self.artifact_focused.emit(None)

    def loading(self, session, artifact):
        self._loading_label.setText(f"Loading {artifact.name}..." if artifact else "")

    def notify(self, message: str, level: str = "info"):
        self.status_message.emit(message, level)

    def library_changed(self, library):
        self.library_loaded.emit(library)

    def validation_finished(self, result):
        lines = [f"✖ {e}" for e in result.errors] + [f"⚠ {w}" for w in result.warnings]
        if result.errors:
            colour = ERROR_RED
        elif result.warnings:
            colour = WARN_ORANGE
        else:
            colour = ACCENT_GREEN
            lines = ["✔ Valid"]
        self._set_validation_colour(colour)
        self.validation_label.setText("\n".join(lines))

    # ── Rendering ────────────────────────────────────────────────────────────

    def _show_empty(self):
        self._render_tabs()
        self._pages.setCurrentIndex(PAGE_EMPTY)
        self._update_buttons()

    def _render_tabs(self):
        self._rendering = True
        try:
            views = self.session.tab_views()
            while self.tab_bar.count() > len(views):
                self.tab_bar.removeTab(self.tab_bar.count() - 1)
            while self.tab_bar.count() < len(views):
                self.tab_bar.addTab("")
            active = 0
            for i, view in enumerate(views):
                text = view.label + (" ●" if view.dirty else "")
                if view.saving:
                    text += " (saving)"
                self.tab_bar.setTabText(i, text)
                self.tab_bar.setTabTextColor(i, self.palette().text().color() if not view.is_main
                                             else self._type_colour(view.artifact_type))
                if view.active:
                    active = i
            if views:
                self.tab_bar.setCurrentIndex(active)
            self.tab_bar.setVisible(bool(views))
        finally:
            self._rendering = False
        tab = self.session.active_tab
        if tab is not None:
            self._raw_title.setText(tab.path or f"{tab.artifact.name} ({TYPE_LABELS[tab.artifact.type]})")

    @staticmethod
    def _type_colour(artifact_type: str) -> QColor:
        return QColor(TYPE_COLORS.get(artifact_type, FG_PRIMARY))

    def _render_header(self, artifact: Artifact):
        self._header_label.setText(artifact.name)
        colour = TYPE_COLORS.get(artifact.type, FG_SECONDARY)
        badge = f"<span style='color:{colour}'>{TYPE_LABELS[artifact.type]}</span>"
        badge += f" &nbsp; <span style='color:{FG_SECONDARY}'>{artifact.display_scope}</span>"
        if artifact.read_only:
            badge += f" &nbsp; <span style='color:{WARN_ORANGE}'>read-only</span>"
        self._badge_label.setText(badge)
        for widgets in self._field_rows.values():
            for w in widgets:
                w.setEnabled(not artifact.read_only)
        self.raw_editor.setReadOnly(artifact.read_only)

    def _render_files(self):
        self.files_list.clear()
        tab = self.session.active_tab
        if tab is None:
            return
        main = QListWidgetItem("Main document")
        main.setData(Qt.ItemDataRole.UserRole, None)
        self.files_list.addItem(main)
        for sub in tab.artifact_content.sub_files:
            for f in sub.iter_files():
                item = QListWidgetItem(f"{f.path}   {f.size_label}")
                item.setData(Qt.ItemDataRole.UserRole, f.path)
                self.files_list.addItem(item)

    def _update_buttons(self):
        tab = self.session.active_tab
        read_only = tab is not None and tab.artifact.read_only
        self._save_btn.setEnabled(self.session.can_save() and not read_only)
        self._discard_btn.setEnabled(self.session.can_discard())
        self._validate_btn.setEnabled(tab is not None)
        self._preview_btn.setEnabled(tab is not None)
        self._delete_btn.setEnabled(tab is not None and not read_only)
        self._new_file_btn.setEnabled(tab is not None and not read_only)
        self._del_file_btn.setEnabled(tab is not None and not read_only)

    # ── Events ───────────────────────────────────────────────────────────────

    def _on_tab_changed(self, index: int):
        if self._rendering or index < 0:
            return
        self.studio.switch_tab(index)

    def _on_tab_close(self, index: int):
        try:
            self.studio.close_tab(index)
        except ConfirmationDeclined:
            self._render_tabs()

    def _on_file_clicked(self, item: QListWidgetItem):
        path = item.data(Qt.ItemDataRole.UserRole)
        tab = self.session.active_tab
        if tab is None:
            return
        if path is None:
            self.studio.navigate(tab.artifact)
        else:
            self.studio.open_sub_file(path)

    def _on_new_file(self):
        path, ok = QInputDialog.getText(self, "New file", "Path (e.g. references/guide.md):")
        if not ok or not path.strip():
            return
        try:
            self.studio.create_sub_file(path)
        except StudioError as e:
            self.notify(str(e), "error")

    def _on_delete_file(self):
        item = self.files_list.currentItem()
        path = item.data(Qt.ItemDataRole.UserRole) if item else None
        if not path:
            self.notify("Select a file to delete", "warning")
            return
        try:
            self.studio.delete_sub_file(path)
        except ConfirmationDeclined:
            pass
        except StudioError as e:
            self.notify(str(e), "error")

    def _toggle_preview(self):
        if self.surface.previewing:
            self.surface.reset_preview()
            self.surface.show_toolbar()
        else:
            self.session.checkpoint()
            self.surface.show_preview()

    # ── Public API (called from main_window) ─────────────────────────────────

    def open_artifact(self, artifact: Artifact):
        self.studio.navigate(artifact)

    def refresh_library(self):
        self.studio.refresh_library()

    def action_save(self):
        try:
            self.studio.save_active()
        except SaveInProgress:
            self.notify("Save already in progress", "warning")

    def action_discard(self):
        try:
            self.studio.discard_active()
        except ConfirmationDeclined:
            pass

    def action_validate(self):
        self.studio.validate_active()

    def action_delete(self, artifact: Artifact | None = None):
        artifact = artifact or self.session.current_artifact
        if artifact is None:
            return
        try:
            self.studio.delete_artifact(artifact)
        except ConfirmationDeclined:
            pass
        except StudioError as e:
            self.notify(str(e), "error")

    def close_active(self):
        if self.session.has_document:
            self._on_tab_close(self.session.registry.active_index)

    def can_close(self) -> bool:
        return self.studio.can_close_panel()

    def action_install(self, artifact: Artifact):
        try:
            self.studio.install_bundled(artifact)
        except StudioError as e:
            self.notify(str(e), "error")

    def action_uninstall(self, artifact: Artifact):
        try:
            self.studio.uninstall_bundled(artifact)
        except ConfirmationDeclined:
            pass
        except StudioError as e:
            self.notify(str(e), "error")

    def action_export(self, artifact: Artifact | None = None):
        artifact = artifact or self.session.current_artifact
        if artifact is None:
            return
        folder = QFileDialog.getExistingDirectory(
            self, f"Export {artifact.name} to", self.config.get("app.export_dir", "")
        )
        if not folder:
            return
        self.config.set("app.export_dir", folder)
        self.studio.export_artifact(artifact, folder)
