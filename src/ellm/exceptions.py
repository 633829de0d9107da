"""ellm exception hierarchy.

All ellm-specific exceptions inherit from EllmError.
"""


class EllmError(Exception):
    """Base exception for all ellm errors."""


class ConfigError(EllmError):
    """Base for configuration errors.

    Configuration errors are always raised before any network activity.
    """


class ApiKeyNotFoundError(ConfigError):
    """Raised when no API key is found in any configuration source.

    Attributes:
        config_path: The config file location that was consulted.
    """

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        super().__init__(
            "API key not found. Please set ANTHROPIC_API_KEY environment "
            "variable, provide --api-key argument, or create a config file "
            f"at {config_path}"
        )


class InvalidApiKeyError(ConfigError):
    """Raised when the configured API key is empty."""

    def __init__(self) -> None:
        super().__init__("Invalid API key format")


class ConfigFileError(ConfigError):
    """Raised when the config file exists but cannot be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse config file {path}: {reason}")


class MalformedJSONError(EllmError):
    """Raised when a candidate response is not syntactically valid JSON.

    Named MalformedJSONError (not JSONDecodeError) to avoid
    collision with json.JSONDecodeError.
    """

    def __init__(self, msg: str, lineno: int, colno: int) -> None:
        self.msg = msg
        self.lineno = lineno
        self.colno = colno
        super().__init__(f"{msg}: line {lineno} column {colno}")


class RetryExhaustedError(EllmError):
    """All retry attempts failed."""

    def __init__(
        self, attempts: int, last_diagnosis: str, last_result: object = None
    ) -> None:
        self.attempts = attempts
        self.last_diagnosis = last_diagnosis
        self.last_result = last_result
        super().__init__(
            f"All {attempts} retry attempts failed. Last diagnosis: {last_diagnosis}"
        )
