from __future__ import annotations

from typing import Optional, Protocol

from .model import ReferencePhoto


class ReferencePhotoRepository(Protocol):
    def get_primary(self, *, company_id: str, user_id: str) -> Optional[ReferencePhoto]:
        raise NotImplementedError

    def create_primary(self, *, company_id: str, user_id: str, photo_ref: str) -> int:
        """Insert the primary reference; raises ReferenceAlreadyEnrolled if one exists."""
        raise NotImplementedError

    def delete_for_user(self, *, company_id: str, user_id: str) -> int:
        raise NotImplementedError


class ReferenceAlreadyEnrolled(Exception):
    """Another request stored the primary reference first."""
