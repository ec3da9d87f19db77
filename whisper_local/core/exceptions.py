"""
Custom exceptions for the whisper-local STT provider
"""


class WhisperLocalError(Exception):
    """Base exception for whisper-local errors"""
    pass


class ConfigurationError(WhisperLocalError):
    """Raised when configuration is invalid"""
    pass


class ContainerInitializationError(WhisperLocalError):
    """Raised when the dependency injection container fails to initialize"""
    pass


class InvalidModelError(ConfigurationError):
    """Raised when the configured model is not a known whisper model"""

    def __init__(self, model, valid_models):
        self.model = model
        self.valid_models = list(valid_models)
        super().__init__(
            f"Invalid model: {model}. Valid: {', '.join(self.valid_models)}"
        )


class InvalidPortError(ConfigurationError):
    """Raised when the configured port is outside 1024-65535"""

    def __init__(self, port):
        self.port = port
        super().__init__(f"Invalid port: {port}")


class OperationTimeoutError(WhisperLocalError):
    """Raised when a bounded operation exceeds its time limit"""

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout
        super().__init__(f"{name} timed out after {timeout}s")


class ServerStartTimeoutError(OperationTimeoutError):
    """Raised when the inference server does not become healthy in time"""
    pass


class TranscriptTimeoutError(OperationTimeoutError):
    """Raised when audio stream was not ended within the wait window"""
    pass


class RequestTimeoutError(OperationTimeoutError):
    """Raised when an HTTP request to the inference server exceeds its bound"""
    pass


class SessionClosedError(WhisperLocalError):
    """Raised when audio is sent to a session that has already ended"""
    pass


class TranscriptionError(WhisperLocalError):
    """Raised when speech-to-text conversion fails"""
    pass


class RemoteServerError(TranscriptionError):
    """Raised when the inference server answers with a non-success status"""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Whisper server error: {status_code} - {body}")


class ContainerError(WhisperLocalError):
    """Raised when the container runtime fails"""
    pass


class ProviderNotInitializedError(WhisperLocalError):
    """Raised when the plugin is used before init()"""
    pass
