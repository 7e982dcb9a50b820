from .encode import encode_router

__all__ = ["encode_router"]
