"""Secret loading helpers."""
from .secrets import MissingSecretError, is_placeholder, optional_env, require_secret

__all__ = ["MissingSecretError", "is_placeholder", "optional_env", "require_secret"]
