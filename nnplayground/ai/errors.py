"""
Engine Errors
=============

ConfigError   - The layer configuration list breaks an architecture rule.
                Raised to the caller, never silently corrected.
DisposedError - A NetworkModel was used after dispose().

An uninitialized model is not an error: train_step() returns zero metrics
while the model or its dataset is missing.
"""


class ConfigError(ValueError):
    """Invalid LayerConfig list."""


class DisposedError(RuntimeError):
    """Operation invoked on a disposed NetworkModel."""

    def __init__(self, operation: str = 'operation'):
        super().__init__(f"Cannot call {operation}() on a disposed NetworkModel")
        self.operation = operation
