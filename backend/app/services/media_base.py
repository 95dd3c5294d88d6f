"""
Gatherly Backend — Abstract Media Gateway Interface
=====================================================

What:  The contract for storing and deleting images on an external host.
Why:   Photo workflows depend on "upload these bytes, get an id and a URL
       back", not on a particular vendor. Tests substitute a fake.
How:   Concrete gateways inherit from MediaGateway; see
       CloudinaryMediaGateway in app.services.media_gateway.

Failure contract:
    Every vendor-specific failure (network, quota, rejected format) is
    raised as MediaGatewayError. Callers branch on that single type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PhotoUploadResult:
    """Identifier and URL assigned by the image host."""

    public_id: str
    url: str


class MediaGateway(ABC):
    """Abstract interface to an external image hosting service."""

    @abstractmethod
    async def upload(self, content: bytes, filename: str) -> PhotoUploadResult:
        """
        Store an image and return its public identifier and URL.

        Size and format limits are enforced by the host, not by this
        interface or its callers.

        Raises:
            MediaGatewayError: the host rejected the file or could not be reached.
        """
        ...

    @abstractmethod
    async def delete(self, public_id: str) -> bool:
        """
        Delete a previously uploaded image.

        Returns:
            True if the host confirmed deletion, False if it reported the
            image as unknown.

        Raises:
            MediaGatewayError: the host could not be reached or refused.
        """
        ...

    def is_configured(self) -> bool:
        """Whether credentials are present. Used by the health check."""
        return True
