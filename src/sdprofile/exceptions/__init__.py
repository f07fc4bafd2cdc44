"""
Custom exception hierarchy for sdprofile.

## Exception Hierarchy

```
SDProfileError (base)
├── ArchiveError
│   ├── InvalidArchiveError
│   └── ArchiveSaveError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

All custom exceptions inherit from `SDProfileError`, which provides:

- `user_message`: Human-friendly message for display to users
- `technical_message`: Detailed message for logging
- `recoverable`: Whether the error can be recovered from
- `recovery_hint`: Optional suggestion for how to fix the issue

### Example: Invalid Archive

```python
from sdprofile.exceptions import InvalidArchiveError

raise InvalidArchiveError("Invalid archive: missing package.json", path="Gaming.streamDeckProfile")
```

Operations on absent page ids are not errors: model methods return
False or None instead of raising.

See `sdprofile.exceptions.handlers` for utilities to handle these exceptions systematically.
"""

from .archive import ArchiveError, ArchiveSaveError, InvalidArchiveError
from .base import SDProfileError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    handle_errors,
    wrap_archive_error,
    wrap_pydantic_error,
)

__all__ = [
    # Archive
    "ArchiveError",
    "ArchiveSaveError",
    "InvalidArchiveError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Base
    "SDProfileError",
    # Handlers
    "ErrorCollector",
    "ErrorContext",
    "collect_errors",
    "format_error_for_display",
    "handle_errors",
    "wrap_archive_error",
    "wrap_pydantic_error",
]
