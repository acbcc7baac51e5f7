from .user import User
from .member import Member

__all__ = ["User", "Member"]
