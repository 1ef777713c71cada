class WildwatchError(RuntimeError):
    """Base class for session errors."""


class ModelLoadError(WildwatchError):
    pass


class InferenceError(WildwatchError):
    pass


class VideoSourceError(WildwatchError):
    pass


class PermissionDenied(VideoSourceError):
    pass


class NoDevice(VideoSourceError):
    pass


class VideoReadError(VideoSourceError):
    pass


class TemperatureFetchError(WildwatchError):
    pass
