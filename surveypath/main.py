import sys
import os
import logging

from PySide6.QtWidgets import QApplication
from PySide6.QtQml import QQmlApplicationEngine
from PySide6.QtCore import QUrl
from PySide6 import QtAsyncio

from surveypath.config import load_config, resolve_path
from surveypath.core.app import App


def setup_global_logging(config):
    """Configure logging for the entire application."""
    device_options = config.get("device_options", {})
    log_file_path = resolve_path(device_options.get("log_file_path", "data/logs/surveypath_log.txt"))
    log_level = str(device_options.get("log_level", "INFO")).upper()

    # Create directory if it doesn't exist
    os.makedirs(os.path.dirname(log_file_path), exist_ok=True)

    # Configure logging globally
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file_path, mode='a'),
            logging.StreamHandler()  # Also log to console
        ]
    )

    # Log the startup
    logger = logging.getLogger("SURVEY.Main")
    logger.info("Survey Path Planner logging initialized")
    logger.info(f"Log file: {log_file_path}")


def main():
    # Set Qt style before creating QApplication
    os.environ['QT_QUICK_CONTROLS_STYLE'] = 'Fusion'

    # Initialize Qt Application
    app = QApplication(sys.argv)
    app.setStyle("Fusion")

    # Load configuration
    config = load_config()

    # Setup global logging first
    setup_global_logging(config)

    # Get logger for main
    logger = logging.getLogger("SURVEY.Main")
    logger.info("Starting Survey Path Planner...")

    # Initialize Backend
    logger.info("Initializing backend...")
    backend = App(config)

    # Initialize QML Frontend
    logger.info("Initializing QML frontend...")
    engine = QQmlApplicationEngine()

    # Expose backend to QML
    engine.rootContext().setContextProperty("backend", backend)

    # Load main QML file
    qml_file = os.path.join(os.path.dirname(__file__), "qml", "MainWindow.qml")

    if not os.path.exists(qml_file):
        logger.error(f"QML file not found: {qml_file}")
        return

    engine.load(QUrl.fromLocalFile(qml_file))

    # Check if the QML loaded successfully
    if not engine.rootObjects():
        logger.error("Failed to load QML file")
        return

    logger.info("Frontend started successfully")

    # Closing the window saves outstanding changes before the loop stops
    app.setQuitOnLastWindowClosed(False)
    app.lastWindowClosed.connect(backend.quit)

    # Run the Qt event loop with asyncio on top; the stored path loads once it starts
    logger.info("Starting application event loop...")
    QtAsyncio.run(backend.start(), keep_running=True, handle_sigint=True)

    # Anything still running here was interrupted (e.g. Ctrl+C)
    logger.info("Shutting down...")
    backend.stop()


if __name__ == "__main__":
    main()
