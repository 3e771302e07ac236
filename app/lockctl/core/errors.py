"""Exceptions raised by the reconciliation engine."""


class PolicyConfigError(Exception):
    """Raised when a policy carries an unrecognized mode.

    This is the only error that aborts a run.
    """
