"""
Execution Layer Exceptions

Raised by the dialog stack when it is asked to do something impossible.
These are programming errors, not user-facing failures.
"""


class FlowNotFoundError(LookupError):
    """Raised when a flow id is not registered in the FlowSet."""
    pass


class DialogStackOverflowError(RuntimeError):
    """Raised when beginning a flow would exceed the configured stack depth."""
    pass
