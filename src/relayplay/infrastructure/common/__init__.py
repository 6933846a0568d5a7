from .deadline import with_deadline

__all__ = ["with_deadline"]
