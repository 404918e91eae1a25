"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specedit.exceptions.SpeceditError` subclass.
Shell scripts can inspect the exit code to tell an invalid document apart
from a missing endpoint without parsing stderr.

Example::

    $ specedit validate
    $ echo $?
    8   # EXIT_INVALID_DOCUMENT -- the document has violations
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or values."""

EXIT_NOT_FOUND = 4
"""The referenced endpoint or tag does not exist."""

EXIT_DUPLICATE = 5
"""A tag with the requested name already exists."""

EXIT_LOAD_ERROR = 6
"""The document source could not be read or parsed."""

EXIT_FORMAT_ERROR = 7
"""The document lacks the structure required for import."""

EXIT_INVALID_DOCUMENT = 8
"""Validation ran and reported at least one violation."""

EXIT_INTERRUPTED = 130
"""Ctrl-C; 128 + SIGINT, as shells report it."""
