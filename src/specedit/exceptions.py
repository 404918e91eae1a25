"""Exception hierarchy for specedit.

All exceptions inherit from :class:`SpeceditError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specedit.exit_codes`.
The top-level error handler in :func:`specedit.app.main` catches
``SpeceditError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Validation violations are never raised; :func:`specedit.validation.validate`
returns them as data.

Subclass hierarchy::

    SpeceditError (exit 1)
    +-- InvalidValueError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- DuplicateError      (exit 5)
    +-- LoadError           (exit 6)
    +-- FormatError         (exit 7)
    +-- ConfigError         (exit 1)
    +-- OverwriteRefusedError (exit 2)
"""

from specedit.exit_codes import (
    EXIT_DUPLICATE,
    EXIT_FORMAT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LOAD_ERROR,
    EXIT_NOT_FOUND,
)


class SpeceditError(Exception):
    """Base exception for all specedit errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specedit.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidValueError(SpeceditError):
    """Raised for malformed endpoint data, tag names, or schema defaults."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(SpeceditError):
    """Raised when an endpoint id or tag name that must exist does not."""

    exit_code = EXIT_NOT_FOUND


class DuplicateError(SpeceditError):
    """Raised when creating or renaming a tag onto a name already in use."""

    exit_code = EXIT_DUPLICATE


class LoadError(SpeceditError):
    """Raised when a document source cannot be read or parsed as JSON/YAML."""

    exit_code = EXIT_LOAD_ERROR


class FormatError(SpeceditError):
    """Raised when a document lacks ``openapi``, ``info`` or ``paths``, or is not a mapping."""

    exit_code = EXIT_FORMAT_ERROR


class ConfigError(SpeceditError):
    """Raised for configuration problems (invalid JSON, unreadable config files)."""

    exit_code = EXIT_GENERIC_FAILURE


class OverwriteRefusedError(SpeceditError):
    """Raised when an import would replace a stored document without ``--force``."""

    exit_code = EXIT_INVALID_USAGE
