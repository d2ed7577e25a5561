"""
Canvas Image Editor - crop, rotate, resize and annotate images.

This is the main entry point for the application.
Run with: python -m image_editor.app [image]
"""

import sys

from PySide6.QtGui import QImage
from PySide6.QtWidgets import QApplication

from image_editor import __version__
from image_editor.editor.editor_widget import EditorWidget
from image_editor.services.config_service import ConfigService
from image_editor.services.logging_service import get_logger, setup_logging


def main() -> int:
    """
    Main entry point for the editor.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    # Initialize basic logging first to catch early errors
    setup_logging()
    logger = get_logger(__name__)

    try:
        logger.info("Starting image editor...")

        app = QApplication(sys.argv)
        app.setApplicationName("Canvas Image Editor")
        app.setApplicationVersion(__version__)

        config = ConfigService()
        editor = EditorWidget(config)
        editor.setWindowTitle("Canvas Image Editor")
        editor.resize(config.max_width + 80, config.max_height + 160)

        arguments = app.arguments()[1:]
        if arguments:
            image = QImage(arguments[0])
            if image.isNull():
                logger.warning(f"Could not load image from {arguments[0]}")
            else:
                editor.set_image(image)

        editor.show()
        logger.info("Editor ready. Entering event loop...")

        exit_code = app.exec()

        logger.info(f"Editor exiting with code {exit_code}")
        return exit_code

    except Exception as e:
        # Log any unhandled exceptions
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
