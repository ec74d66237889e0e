"""
Guided Breathing - Exceptions
"""


class BreathingError(Exception):
    """Base exception for the guided breathing package"""
    pass


class UnknownTechniqueError(BreathingError, KeyError):
    """Requested breathing technique does not exist"""

    def __str__(self):
        return Exception.__str__(self)


class InvalidDurationError(BreathingError, ValueError):
    """Session duration is not a positive number of seconds"""
    pass


class ConfigError(BreathingError, ValueError):
    """Environment configuration could not be parsed"""
    pass


class ConnectionError(BreathingError):
    """Failed to connect to the glasses"""
    pass


class DeviceNotFoundError(BreathingError):
    """No glasses found while scanning"""
    pass


class CommandError(BreathingError):
    """Failed to write a lens level to the glasses"""
    pass


class TimeoutError(BreathingError):
    """BLE operation timed out"""
    pass
