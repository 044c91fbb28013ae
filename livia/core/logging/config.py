"""
Logging configuration for the Livia chat service.

Plain text formatting with Unicode escape decoding, console output always and
file output when LOG_DIR is set.
"""

import logging
import os
import json
import re


LOGGER_NAME = "livia"


class UnicodeFormatter(logging.Formatter):
    """
    Formatter that turns \\uXXXX escape sequences back into characters.

    Provider error bodies are usually JSON with escaped non-ASCII text, which
    is unreadable in plain logs.
    """

    unicode_pattern = re.compile(r'\\u([0-9a-fA-F]{4})')

    def _decode_unicode_escapes(self, text):
        if not text or '\\u' not in text:
            return text

        try:
            if text.startswith('{') and text.endswith('}'):
                decoded = json.loads(text)
                if isinstance(decoded, dict):
                    return json.dumps(decoded, ensure_ascii=False)
        except (json.JSONDecodeError, ValueError):
            pass

        def replace_unicode(match):
            try:
                return chr(int(match.group(1), 16))
            except ValueError:
                return match.group(0)

        return self.unicode_pattern.sub(replace_unicode, text)

    def format(self, record):
        return self._decode_unicode_escapes(super().format(record))


def setup_logging():
    """
    Единая настройка логирования для всего проекта.

    Returns:
        logging.Logger: Configured "livia" logger
    """
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if not isinstance(getattr(logging, log_level, None), int):
        log_level = "INFO"

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level))
    logger.handlers.clear()
    logger.propagate = True

    formatter = UnicodeFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z"
    )

    # Файловый обработчик только при заданном LOG_DIR
    log_dir = os.environ.get("LOG_DIR")
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, "livia.log"))
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG if log_level == "DEBUG" else logging.INFO)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if log_level == "DEBUG" else logging.INFO)
    logger.addHandler(console_handler)

    return logger
