"""Errors raised while preparing a signed POST form"""


class SigningError(ValueError):
    """Base class for every error the signer reports to its callers"""


class ConfigurationMissing(SigningError):
    """A required configuration value is not set"""

    def __init__(self, names):
        self.names = list(names)
        super().__init__(f"Missing configuration: {', '.join(self.names)}")


class InvalidConfiguration(SigningError):
    pass


class InvalidParameters(SigningError):
    pass


class ClientAccessDenied(SigningError):
    pass
