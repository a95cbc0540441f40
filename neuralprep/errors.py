"""
Exception hierarchy for NeuralPrep.

Pure scheduling and selection functions never raise on bad numeric input;
only the storage boundary and misuse of the session runtime do.
"""


class NeuralPrepError(Exception):
    """Base exception for all NeuralPrep errors."""
    pass


class ConfigurationError(NeuralPrepError):
    """Raised when required environment configuration is missing."""
    pass


class PersistenceFailure(NeuralPrepError):
    """Raised when a backing store read or write fails."""
    pass


class SessionStateError(NeuralPrepError):
    """Raised when a session operation is invalid in the current lifecycle state."""
    pass
