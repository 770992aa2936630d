from taskboard.core.services.base import BaseService

__all__ = ["BaseService"]
