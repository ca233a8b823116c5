"""Connection resolution exceptions."""

from typing import Optional


class ConfigurationError(Exception):
    """A required connection property is missing.

    Fatal for the feature being wired: it can only be fixed by supplying
    configuration, so callers abort initialization instead of retrying.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        feature_name: Optional[str] = None,
        shared_property: Optional[str] = None,
        feature_property: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.feature_name = feature_name
        self.shared_property = shared_property
        self.feature_property = feature_property
