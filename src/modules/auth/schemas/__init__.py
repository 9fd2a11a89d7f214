from .auth_schemas import SessionResponse

__all__ = ['SessionResponse']
