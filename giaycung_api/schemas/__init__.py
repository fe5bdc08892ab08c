from .auth import LoginRequest, LoginUser

__all__ = ["LoginRequest", "LoginUser"]
