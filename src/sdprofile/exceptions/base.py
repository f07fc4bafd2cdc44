"""Root of the sdprofile exception tree.

Every error the profile manager raises on purpose derives from SDProfileError,
so the CLI can catch that one class, print `user_message` plus the optional
`recovery_hint`, and leave `technical_message` to the log file.
"""

from typing import Optional


class SDProfileError(Exception):
    """
    Error raised while loading, editing or saving a Stream Deck profile.

    Attributes:
        user_message: One line shown in the terminal, e.g.
            "Invalid archive: missing package.json"
        technical_message: Log text with paths and the underlying cause
        recoverable: True when retrying with a fixed file or setting can work
        recovery_hint: What to do next, e.g. "Export the profile again"
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
        *args,
        **kwargs
    ):
        super().__init__(user_message, *args, **kwargs)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """The terminal message followed by the hint, when there is one."""
        if not self.recovery_hint:
            return self.user_message
        return f"{self.user_message}\n\nHint: {self.recovery_hint}"
