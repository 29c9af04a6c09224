"""
Main Window - Skills Studio application shell
"""

import logging

from PyQt6.QtWidgets import QApplication, QMainWindow, QSplitter, QLabel, QMenu, QMessageBox
from PyQt6.QtGui import QAction, QColor, QPalette
from PyQt6.QtCore import Qt, QTimer

from skills_studio.api_client import StudioClient
from skills_studio.config_manager import ConfigManager
from skills_studio.library_panel import LibraryPanel
from skills_studio.models import Library
from skills_studio.studio_tab import StudioTab
from skills_studio.tasks import TaskRunner
from skills_studio.theme import (
    BG_DARK, BG_MEDIUM, BG_LIGHT,
    FG_PRIMARY, FG_SECONDARY, FG_DIM,
    ACCENT, ERROR_RED, WARN_ORANGE,
)

logger = logging.getLogger(__name__)

APP_STYLESHEET = f"""
QMainWindow, QDialog {{
    background-color: {BG_DARK};
    color: {FG_PRIMARY};
}}
QTabBar::tab {{
    background-color: {BG_MEDIUM};
    color: {FG_SECONDARY};
    padding: 6px 14px;
    border: 1px solid {BG_LIGHT};
    border-bottom: none;
    margin-right: 2px;
}}
QTabBar::tab:selected {{
    background-color: {BG_DARK};
    border-bottom: 2px solid {ACCENT};
}}
QTabBar::tab:hover:!selected {{
    background-color: {BG_LIGHT};
}}
QMenuBar {{
    background-color: {BG_MEDIUM};
    color: {FG_PRIMARY};
    border-bottom: 1px solid {BG_LIGHT};
}}
QMenuBar::item:selected {{
    background-color: {BG_LIGHT};
}}
QMenu {{
    background-color: {BG_MEDIUM};
    color: {FG_PRIMARY};
    border: 1px solid {BG_LIGHT};
}}
QMenu::item:selected {{
    background-color: {ACCENT};
    color: #ffffff;
}}
QStatusBar {{
    background-color: {BG_MEDIUM};
    color: {FG_SECONDARY};
    border-top: 1px solid {BG_LIGHT};
}}
QStatusBar QLabel {{
    padding: 0 8px;
    color: {FG_SECONDARY};
}}
"""

LEVEL_COLOURS = {"error": ERROR_RED, "warning": WARN_ORANGE}

PALETTE_ROLES = {
    QPalette.ColorRole.Window:          BG_DARK,
    QPalette.ColorRole.WindowText:      FG_PRIMARY,
    QPalette.ColorRole.Base:            BG_MEDIUM,
    QPalette.ColorRole.AlternateBase:   BG_LIGHT,
    QPalette.ColorRole.Text:            FG_PRIMARY,
    QPalette.ColorRole.Button:          BG_MEDIUM,
    QPalette.ColorRole.ButtonText:      FG_PRIMARY,
    QPalette.ColorRole.Highlight:       ACCENT,
    QPalette.ColorRole.HighlightedText: "#ffffff",
    QPalette.ColorRole.Link:            ACCENT,
    QPalette.ColorRole.PlaceholderText: FG_DIM,
}


def apply_app_theme(app: QApplication):
    """Fusion style with the dark palette; disabled text is dimmed."""
    app.setStyle("Fusion")
    palette = QPalette()
    for role, colour in PALETTE_ROLES.items():
        palette.setColor(role, QColor(colour))
    for role in (QPalette.ColorRole.Text, QPalette.ColorRole.ButtonText, QPalette.ColorRole.WindowText):
        palette.setColor(QPalette.ColorGroup.Disabled, role, QColor(FG_DIM))
    app.setPalette(palette)
    app.setStyleSheet(APP_STYLESHEET)


class MainWindow(QMainWindow):
    def __init__(self, config: ConfigManager, client: StudioClient, runner: TaskRunner):
        super().__init__()
        self.config = config

        self._build_window()
        self._build_central(client, runner)
        self._build_menu()
        self._build_status_bar()

        logger.info("MainWindow initialised")
        self.studio_tab.refresh_library()

    # ── Window setup ─────────────────────────────────────────────────────────

    def _build_window(self):
        from main import APP_NAME, APP_VERSION
        self.setWindowTitle(f"{APP_NAME} v{APP_VERSION}")
        self.setMinimumSize(900, 600)
        self.resize(self.config.get("app.window_width", 1280),
                    self.config.get("app.window_height", 820))
        x = self.config.get("app.window_x", -1)
        y = self.config.get("app.window_y", -1)
        if x >= 0 and y >= 0:
            self.move(x, y)

    def _build_central(self, client, runner):
        self.library_panel = LibraryPanel(parent=self)
        self.studio_tab = StudioTab(self.config, client, runner, parent=self)

        self.library_panel.open_artifact.connect(self.studio_tab.open_artifact)
        self.library_panel.delete_artifact.connect(self.studio_tab.action_delete)
        self.library_panel.install_artifact.connect(self.studio_tab.action_install)
        self.library_panel.uninstall_artifact.connect(self.studio_tab.action_uninstall)
        self.library_panel.export_artifact.connect(self.studio_tab.action_export)
        self.library_panel.refresh_requested.connect(self.studio_tab.refresh_library)
        self.studio_tab.library_loaded.connect(self._on_library_loaded)
        self.studio_tab.artifact_focused.connect(
            lambda a: self.library_panel.select(a.id if a else None)
        )
        self.studio_tab.status_message.connect(self.set_status)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.setHandleWidth(4)
        splitter.setStyleSheet(f"QSplitter::handle {{ background: {BG_LIGHT}; }}")
        splitter.addWidget(self.library_panel)
        splitter.addWidget(self.studio_tab)
        splitter.setSizes([280, 1000])
        splitter.setCollapsible(1, False)
        self.setCentralWidget(splitter)

    # ── Menu bar ─────────────────────────────────────────────────────────────

    def _build_menu(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("File")
        self._add_action(file_menu, "Save",          "Ctrl+S", self.studio_tab.action_save)
        self._add_action(file_menu, "Discard Changes", None,   self.studio_tab.action_discard)
        self._add_action(file_menu, "Close Tab",     "Ctrl+W", self._on_close_tab)
        self._add_action(file_menu, "Export...",     None,     self.studio_tab.action_export)
        file_menu.addSeparator()
        self._add_action(file_menu, "Exit",          "Ctrl+Q", self.close)

        tools_menu = menubar.addMenu("Tools")
        self._add_action(tools_menu, "Validate",        "Ctrl+Shift+V", self.studio_tab.action_validate)
        self._add_action(tools_menu, "Refresh Library", "F5",           self.studio_tab.refresh_library)

        help_menu = menubar.addMenu("Help")
        self._add_action(help_menu, "About", None, self._on_about)

    def _add_action(self, menu: QMenu, text: str, shortcut: str | None, slot) -> QAction:
        action = QAction(text, self)
        if shortcut:
            action.setShortcut(shortcut)
        action.triggered.connect(lambda _checked=False: slot())
        menu.addAction(action)
        return action

    # ── Status bar ───────────────────────────────────────────────────────────

    def _build_status_bar(self):
        sb = self.statusBar()

        self.status_message = QLabel("Ready")
        self.status_server  = QLabel(f"Server: {self.studio_tab.studio.client.base_url}")
        self.status_library = QLabel("")

        sb.addWidget(self.status_message, 1)
        sb.addPermanentWidget(self._vsep())
        sb.addPermanentWidget(self.status_server)
        sb.addPermanentWidget(self._vsep())
        sb.addPermanentWidget(self.status_library)

        self._status_timer = QTimer(self)
        self._status_timer.setSingleShot(True)
        self._status_timer.timeout.connect(lambda: self.set_status("Ready", timeout_ms=0))

    @staticmethod
    def _vsep() -> QLabel:
        sep = QLabel("|")
        sep.setStyleSheet(f"color: {BG_LIGHT}; padding: 0 2px;")
        return sep

    def set_status(self, message: str, level: str = "info", timeout_ms: int = 4000):
        """Show a transient status message."""
        colour = LEVEL_COLOURS.get(level, FG_SECONDARY)
        self.status_message.setStyleSheet(f"color: {colour}; padding: 0 8px;")
        self.status_message.setText(message)
        if timeout_ms > 0:
            self._status_timer.start(timeout_ms)

    def _on_library_loaded(self, library: Library):
        self.library_panel.set_library(library)
        self.status_library.setText(f"{len(library.artifacts)} artifacts")

    # ── State save/restore ───────────────────────────────────────────────────

    def _save_state(self):
        geo = self.geometry()
        self.config.set("app.window_width",  geo.width())
        self.config.set("app.window_height", geo.height())
        self.config.set("app.window_x",      geo.x())
        self.config.set("app.window_y",      geo.y())
        self.config.save()

    def closeEvent(self, event):
        if not self.studio_tab.can_close():
            event.ignore()
            return
        self._save_state()
        logger.info("Application closing")
        event.accept()

    # ── Menu handlers ────────────────────────────────────────────────────────

    def _on_close_tab(self):
        self.studio_tab.close_active()

    def _on_about(self):
        from main import APP_NAME, APP_VERSION
        QMessageBox.about(
            self,
            f"About {APP_NAME}",
            f"<b>{APP_NAME}</b> v{APP_VERSION}<br><br>"
            "Multi-document editor for skills, commands and agents.<br><br>"
            f"Server: {self.studio_tab.studio.client.base_url}<br>"
            f"Config: {self.config.path}"
        )
