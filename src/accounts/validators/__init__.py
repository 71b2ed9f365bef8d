from .user_validator import UserValidator, UserLookup, coerce_gender, ATOM

__all__ = ["UserValidator", "UserLookup", "coerce_gender", "ATOM"]
