"""DTO validation package."""

from .client_params import ClientParams

__all__ = ["ClientParams"]
