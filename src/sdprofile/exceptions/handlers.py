"""
Centralized error handling utilities.

This module provides a layered approach to error handling:

1. **Custom Exceptions** - Typed, user-friendly error classes (see base, archive, config modules)
2. **Error Context** - Preserve technical details for logging, show friendly messages to users
3. **Recovery Hints** - Tell users what to do when things fail
4. **Error Isolation** - One failed asset copy must not block saving the rest of a profile

## Quick Reference

| Scenario | Use This | Example |
|----------|----------|---------|
| Archive lacks package.json | `InvalidArchiveError` | `raise InvalidArchiveError("Invalid archive: missing package.json", path)` |
| Zip is corrupt | `wrap_archive_error` | `raise wrap_archive_error(e, path) from e` |
| Config file syntax error | `ConfigFileInvalidError` | `raise ConfigFileInvalidError(path, "trailing comma")` |
| Config value invalid | `ConfigValidationError` | `raise ConfigValidationError("history_depth", 0, "must be >= 1")` |

## Handling Patterns

| Pattern | Code |
|---------|------|
| Show error to user, continue | `@handle_errors(operation_name="load", user_notification=self.set_status, re_raise=False)` |
| Log and re-raise | `@handle_errors(operation_name="save", re_raise=True)` |
| Try multiple ops, collect errors | `collector = collect_errors("copy assets"); with collector.try_operation(...): ...` |
| Critical section with auto-logging | `with ErrorContext("stage archive"): ...` |

## Architecture

```
USER LAYER (CLI / embedding UI)
  - Formats error.user_message and error.recovery_hint
        ^
        | SDProfileError
APPLICATION LAYER (services)
  - Catches low-level exceptions and converts them
        ^
        | OSError, zipfile.BadZipFile, ValidationError
LOW LEVEL (zip, filesystem, JSON)
```
"""

import logging
import zipfile
from functools import wraps
from typing import Callable, Optional, TypeVar

from .archive import ArchiveError, InvalidArchiveError
from .base import SDProfileError
from .config import ConfigFileInvalidError, ConfigValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def handle_errors(
    *,
    operation_name: str,
    user_notification: Optional[Callable[[str], None]] = None,
    fallback_value: Optional[T] = None,
    re_raise: bool = True,
    log_level: int = logging.ERROR
) -> Callable:
    """
    Decorator for consistent error handling.

    Args:
        operation_name: Name of the operation for logging (e.g., "load profile")
        user_notification: Optional callback to notify user (e.g., a status setter)
        fallback_value: Value to return if error occurs and re_raise=False
        re_raise: Whether to re-raise the exception after handling
        log_level: Logging level for the error (default: ERROR)

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)

            except SDProfileError as e:
                logger.log(log_level, f"Failed to {operation_name}: {e.technical_message}")

                if user_notification:
                    user_notification(e.get_full_message())

                if re_raise:
                    raise
                return fallback_value

            except Exception as e:
                logger.log(
                    log_level,
                    f"Unexpected error during {operation_name}: {e}",
                    exc_info=True
                )

                if user_notification:
                    user_notification(f"Error: {e}")

                if re_raise:
                    raise
                return fallback_value

        return wrapper
    return decorator


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Example:
        ```python
        with ErrorContext("stage archive", re_raise=False) as ctx:
            shutil.copytree(src, dst)

        if ctx.error:
            print(f"Failed: {ctx.error}")
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger_instance: Logger to use (defaults to module logger)
            re_raise: Whether to re-raise exceptions
        """
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[Exception] = None

    def __enter__(self):
        """Enter the context."""
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Exit the context and handle any exceptions.

        Returns:
            True if exception should be suppressed, False otherwise
        """
        if exc_type is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val

        if isinstance(exc_val, SDProfileError):
            self.logger.error(
                f"Failed to {self.operation}: {exc_val.technical_message}"
            )
        else:
            self.logger.error(
                f"Failed to {self.operation}: {exc_val}",
                exc_info=True
            )

        return not self.re_raise


def wrap_pydantic_error(error: Exception, file_path: str) -> SDProfileError:
    """
    Convert Pydantic validation errors to sdprofile exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    # Format: "Invalid JSON: <actual error> [type=json_invalid, ..."
    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg

        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if errors:
            if len(errors) == 1:
                first_error = errors[0]
                field = ".".join(str(loc) for loc in first_error.get('loc', ('unknown',)))
                reason = first_error.get('msg', 'validation failed')
                value = first_error.get('input', None)

                return ConfigValidationError(
                    field=field,
                    value=value,
                    error_msg=reason,
                    file_path=file_path
                )

            error_lines = []
            for err in errors:
                field = ".".join(str(loc) for loc in err.get('loc', ('unknown',)))
                msg = err.get('msg', 'validation failed')
                error_lines.append(f"  - {field}: {msg}")

            combined_msg = f"{len(errors)} validation errors:\n" + "\n".join(error_lines)

            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=combined_msg,
                file_path=file_path
            )

    return ConfigValidationError(
        field="unknown",
        value=None,
        error_msg=error_msg,
        file_path=file_path
    )


def wrap_archive_error(error: Exception, path: Optional[str] = None) -> ArchiveError:
    """
    Convert low-level zip and filesystem errors to archive exceptions.

    Args:
        error: The original exception from zipfile or the filesystem
        path: The archive path involved in the error

    Returns:
        An ArchiveError with appropriate type and message
    """
    if isinstance(error, ArchiveError):
        return error

    if isinstance(error, zipfile.BadZipFile):
        return InvalidArchiveError(
            "Invalid archive: not a readable profile container.",
            path=path,
            original_error=str(error),
        )

    if isinstance(error, FileNotFoundError):
        return InvalidArchiveError(
            f"Profile file not found: {path or error.filename}",
            path=path,
            original_error=str(error),
        )

    return ArchiveError(
        user_message=f"Archive error: {error}",
        path=path,
        technical_message=f"Archive {path} error: {error!r}",
        recoverable=True,
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """
    Format an exception for user display.

    Args:
        error: The exception to format

    Returns:
        Tuple of (user_message, recovery_hint or None)
    """
    if isinstance(error, SDProfileError):
        return error.user_message, error.recovery_hint

    error_type = type(error).__name__
    return f"{error_type}: {error}", None


def collect_errors(operation: str) -> "ErrorCollector":
    """
    Create an error collector for batch operations.

    Example:
        ```python
        collector = collect_errors("copy referenced files")

        for ref in references:
            with collector.try_operation(f"copy {ref}"):
                copy_file(ref)

        if collector.has_errors:
            logger.warning(collector.get_summary())
        ```

    Args:
        operation: Description of the overall operation

    Returns:
        ErrorCollector instance
    """
    return ErrorCollector(operation)


class ErrorCollector:
    """
    Collects multiple errors during batch operations.

    Allows operations to continue even if some fail, then
    report all failures at once.
    """

    def __init__(self, operation: str):
        """
        Initialize error collector.

        Args:
            operation: Description of the overall operation
        """
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        """Check if any errors were collected."""
        return len(self.errors) > 0

    @property
    def error_count(self) -> int:
        """Get the number of errors collected."""
        return len(self.errors)

    def try_operation(self, sub_operation: str):
        """
        Context manager for a single operation within the batch.

        Args:
            sub_operation: Description of this specific operation

        Returns:
            Context manager that catches and stores errors
        """
        return self._OperationContext(self, sub_operation)

    def get_summary(self) -> str:
        """
        Get a summary of collected errors.

        Returns:
            Multi-line summary string
        """
        if not self.has_errors:
            return f"All operations completed successfully ({self.success_count} total)"

        summary = f"Failed {self.error_count} of {self.error_count + self.success_count} operations during {self.operation}:\n"
        for sub_op, error in self.errors:
            if isinstance(error, SDProfileError):
                summary += f"  - {sub_op}: {error.user_message}\n"
            else:
                summary += f"  - {sub_op}: {error}\n"

        return summary.rstrip()

    class _OperationContext:
        """Internal context manager for individual operations."""

        def __init__(self, collector: "ErrorCollector", sub_operation: str):
            self.collector = collector
            self.sub_operation = sub_operation

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_type is None:
                self.collector.success_count += 1
                return False

            self.collector.errors.append((self.sub_operation, exc_val))
            return True
