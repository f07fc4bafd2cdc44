"""Errors raised while reading ~/.sdprofile/config.json.

A config file that is not JSON raises ConfigFileInvalidError; JSON that fails
AppConfig validation (history_depth, max_pages, default_template, ...)
raises ConfigValidationError naming the offending setting.
"""

from typing import Any

from .base import SDProfileError

_SETTING_HINTS = {
    "default_template": "Run 'sdprofile templates' for the list of device ids.",
    "history_depth": "history_depth is the undo limit and must be 1-1000.",
    "max_pages": "max_pages caps visible pages per profile and must be 1-100.",
    "work_dir": "work_dir must be a folder path, or null for the system temp folder.",
}


class ConfigurationError(SDProfileError):
    """The sdprofile settings could not be loaded."""


class ConfigFileInvalidError(ConfigurationError):
    """The settings file is empty, unreadable or not JSON."""

    def __init__(self, file_path: str, parse_error: str):
        """
        Args:
            file_path: Settings file that failed to parse
            parse_error: Parser or I/O message
        """
        lowered = parse_error.lower()
        if "trailing comma" in lowered:
            user_msg = "sdprofile settings contain a trailing comma"
        elif "empty" in lowered:
            user_msg = "sdprofile settings file is empty"
        else:
            user_msg = "sdprofile settings file is not valid JSON"

        super().__init__(
            user_message=user_msg,
            technical_message=f"Cannot parse settings {file_path}: {parse_error}",
            recoverable=True,
            recovery_hint=(
                f"Fix or delete {file_path}; "
                "'sdprofile config reset' writes a fresh file with the defaults."
            ),
        )
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """A setting in the file has a value AppConfig rejects."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: str | None = None):
        """
        Args:
            field: Setting name ("multiple fields" when several failed)
            value: The rejected value
            error_msg: Validator message
            file_path: Settings file the value came from, if any
        """
        hint = _SETTING_HINTS.get(field, f"Change '{field}' with 'sdprofile config set'.")
        if file_path:
            hint += f"\nSettings file: {file_path}"

        super().__init__(
            user_message=f"Bad sdprofile setting '{field}': {error_msg}",
            technical_message=f"Settings validation failed for {field}={value!r}: {error_msg}",
            recoverable=True,
            recovery_hint=hint,
        )
        self.field = field
        self.value = value
        self.file_path = file_path
