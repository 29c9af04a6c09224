"""
Skills Studio - multi-document editor for skills, commands and agents

Startup order: config, then logging (its level and folder come from the
config), then Qt, the REST client and the background task runner.
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from skills_studio.api_client import StudioClient
from skills_studio.config_manager import ConfigManager
from skills_studio.main_window import MainWindow, apply_app_theme
from skills_studio.workers import QtTaskRunner

APP_NAME    = "Skills Studio"
APP_VERSION = "0.1.0"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("skills_studio")


def _setup_logging(config: ConfigManager) -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    log_dir = config.get_log_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "skills_studio.log", encoding="utf-8"))
    except OSError as e:
        print(f"Logging to console only, cannot write to {log_dir}: {e}", file=sys.stderr)
    logging.basicConfig(level=config.get_log_level(), format=LOG_FORMAT, handlers=handlers)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(config.get_log_level(), logging.INFO))


def _excepthook(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
    if QApplication.instance():
        QMessageBox.critical(None, APP_NAME, f"{exc_type.__name__}: {exc_value}\n\n"
                                             "Details were written to the log.")


def main():
    config = ConfigManager()
    _setup_logging(config)
    sys.excepthook = _excepthook

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    apply_app_theme(app)

    client = StudioClient.from_config(config)
    load_timeout, save_timeout = config.get_timeouts()
    logger.info("Config %s; server %s (load timeout %.0fs, save timeout %.0fs)",
                config.path, client.base_url, load_timeout, save_timeout)
    runner = QtTaskRunner(app)

    window = MainWindow(config, client, runner)
    window.show()
    logger.info("%s v%s started", APP_NAME, APP_VERSION)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
