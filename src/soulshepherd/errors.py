class SoulShepherdError(Exception):
    """Base error for Soul Shepherd domain exceptions."""


class ConfigError(SoulShepherdError):
    """Raised when the formula table or boss catalog is malformed."""


class StateNotLoadedError(SoulShepherdError):
    """Raised when the state store is used before load_state() has completed."""


class StorageError(SoulShepherdError):
    """Raised when a storage operation keeps failing after all retries."""


class UnknownStat(SoulShepherdError, ValueError):
    """Raised when a stat name is not one of spirit, harmony or soulflow."""


class InsufficientEmbers(SoulShepherdError):
    """Raised when the player cannot afford a stat upgrade."""


class NoSkillPointsAvailable(SoulShepherdError):
    """Raised when allocating a skill point with none left to spend."""


class StatAtMaximum(SoulShepherdError):
    """Raised when a bounded stat (harmony) cannot be raised any further."""
