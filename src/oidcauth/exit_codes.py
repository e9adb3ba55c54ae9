"""Numeric process exit codes for the ``oidcauth`` command line.

Each constant maps to an error category and is referenced by the
corresponding :class:`~oidcauth.exceptions.OIDCAuthError` subclass.
Scripts driving ``oidcauth`` can branch on the exit status without parsing
stderr.

Example::

    $ oidcauth callback corp --code abc123
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the provider rejected the code
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including settings problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unknown provider."""

EXIT_AUTH_FAILURE = 3
"""The authentication flow recorded a failure."""

EXIT_CONNECTION_ERROR = 6
"""The identity provider could not be reached or answered unexpectedly."""
