from .user import User, UserSettings

__all__ = ["User", "UserSettings"]
