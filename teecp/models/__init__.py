"""teecp data models — pydantic v2, frozen."""

from teecp.models.role import ConfigurationError, Role, RoleConfig

__all__ = ["ConfigurationError", "Role", "RoleConfig"]
