from .parse import Parse

__all__ = ["Parse"]
