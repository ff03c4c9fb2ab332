"""
Application Entry Point.

Runs the map widget demo. Loads .env settings, configures logging, and
prepares Qt for Qt WebEngine before the QApplication exists.
"""

import sys

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Qt WebEngine requires shared OpenGL contexts, set before QApplication exists.
from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

QApplication.setAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts)

from petmap.core.logging_config import (  # noqa: E402
    get_logger,
    setup_logging,
    shutdown_logging,
)

logger = get_logger(__name__)


def main() -> None:
    """Application entry point."""
    debug_mode = "--debug" in sys.argv
    setup_logging(debug_mode=debug_mode)

    try:
        logger.info("Starting PetMap demo...")

        app = QApplication(sys.argv)
        app.setOrganizationName("PetMap")
        app.setApplicationName("PetMap Demo")
        app.setStyle("Fusion")

        # Imported after logging is configured
        from petmap.app.demo_window import MapDemoWindow

        window = MapDemoWindow()
        window.show()

        logger.info("Entering Event Loop...")
        exit_code = app.exec()
        cleanup_app()
        sys.exit(exit_code)
    except Exception:
        logger.exception("CRITICAL: Unhandled exception in main application loop")
        sys.exit(1)


def cleanup_app() -> None:
    """Performs global cleanup operations before exit."""
    logger.info("Shutting down logging.")
    shutdown_logging()


if __name__ == "__main__":
    main()
