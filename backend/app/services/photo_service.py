"""
Gatherly Backend — Photo Workflows
====================================

What:  Attach an uploaded image to the caller, choose the main photo, and
       delete photos.
Who:   Called by the photo routes with a request-scoped UserRepository and
       the process-wide media gateway and lock registry.

Outcome convention (all three workflows):
    None              → the caller (or the photo) does not exist
    Result.success()  → persisted
    Result.failure()  → expected problem with a user-facing message

Attach flow:
    1. Resolve the username from the injected UserAccessor
    2. Load the user with photos                  (await: DB)
    3. Upload the bytes                           (await: image host)
    4. Build the Photo from the host's id + URL
    5. Mark it main if no photo is main yet
    6. Append to user.photos and commit           (await: DB)
    7. changed > 0 → Success(photo); otherwise Failure, and the uploaded
       image is deleted again so it does not linger on the host

Steps 2-6 run under the caller's per-user lock, so the main-photo check in
step 5 cannot interleave with another workflow for the same user.
asyncio.CancelledError is never caught: a cancelled request unwinds
immediately and skips compensation.
"""

import logging
from typing import Optional

from app.core.result import Result
from app.exceptions import DatabaseError, MediaGatewayError
from app.models.photo import Photo
from app.repositories.users import UserRepository
from app.services.media_base import MediaGateway
from app.services.user_accessor import UserAccessor
from app.services.user_locks import UserLockRegistry, user_locks

logger = logging.getLogger(__name__)


class PhotoService:
    """Photo workflows for the current user."""

    def __init__(
        self,
        users: UserRepository,
        media: MediaGateway,
        user_accessor: UserAccessor,
        locks: Optional[UserLockRegistry] = None,
    ):
        self.users = users
        self.media = media
        self.user_accessor = user_accessor
        self.locks = locks or user_locks

    # ── Attach ────────────────────────────────────────────────────────────

    async def add_photo(self, content: bytes, filename: str) -> Optional[Result[Photo]]:
        """
        Upload an image and attach it to the current user.

        Returns:
            None if the current user has no record, Success(photo) once the
            photo is persisted, or a Failure:
              "Problem uploading photo"  the host rejected or never answered
              "Unable to upload photo!"  nothing was saved
        """
        username = self.user_accessor.get_username()

        async with self.locks.hold(username):
            user = await self.users.get_with_photos(username)
            if user is None:
                logger.info("Photo upload for unknown user '%s'", username)
                return None

            try:
                uploaded = await self.media.upload(content, filename)
            except MediaGatewayError as e:
                logger.warning("Upload for '%s' failed: %s", username, e.message)
                return Result.failure("Problem uploading photo")

            photo = Photo(id=uploaded.public_id, url=uploaded.url, is_main=False)
            if not any(p.is_main for p in user.photos):
                photo.is_main = True
            user.photos.append(photo)

            try:
                changed = await self.users.save_changes()
            except DatabaseError:
                changed = 0

            if changed > 0:
                logger.info(
                    "Attached photo %s to '%s' (main=%s)", photo.id, username, photo.is_main
                )
                return Result.success(photo)

            await self.users.discard_changes()
            await self._discard_upload(uploaded.public_id)
            return Result.failure("Unable to upload photo!")

    async def _discard_upload(self, public_id: str) -> None:
        """Best-effort removal of an image whose row was never saved."""
        try:
            removed = await self.media.delete(public_id)
        except MediaGatewayError as e:
            logger.error("Orphaned image %s could not be removed: %s", public_id, e.message)
            return
        if not removed:
            logger.error("Image host did not remove orphaned image %s", public_id)

    # ── Set main ──────────────────────────────────────────────────────────

    async def set_main_photo(self, photo_id: str) -> Optional[Result[None]]:
        username = self.user_accessor.get_username()

        async with self.locks.hold(username):
            user = await self.users.get_with_photos(username)
            if user is None:
                return None

            photo = next((p for p in user.photos if p.id == photo_id), None)
            if photo is None:
                return None
            if photo.is_main:
                return Result.failure("This is already your main photo")

            current = next((p for p in user.photos if p.is_main), None)
            if current is not None:
                # Demote first: the partial unique index allows one main row.
                current.is_main = False
                await self.users.flush()
            photo.is_main = True

            if await self.users.save_changes() > 0:
                logger.info("'%s' set main photo to %s", username, photo_id)
                return Result.success()
            await self.users.discard_changes()
            return Result.failure("Problem setting main photo")

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_photo(self, photo_id: str) -> Optional[Result[None]]:
        """
        Remove a non-main photo from the host and from the user.

        The host copy is deleted before the row; if the host refuses, the
        row stays so the user can retry.
        """
        username = self.user_accessor.get_username()

        async with self.locks.hold(username):
            user = await self.users.get_with_photos(username)
            if user is None:
                return None

            photo = next((p for p in user.photos if p.id == photo_id), None)
            if photo is None:
                return None
            if photo.is_main:
                return Result.failure("You cannot delete your main photo")

            try:
                removed = await self.media.delete(photo.id)
            except MediaGatewayError as e:
                logger.warning("Host delete of %s failed: %s", photo.id, e.message)
                removed = False
            if not removed:
                return Result.failure("Problem deleting photo from media storage")

            user.photos.remove(photo)

            if await self.users.save_changes() > 0:
                logger.info("'%s' deleted photo %s", username, photo_id)
                return Result.success()
            await self.users.discard_changes()
            return Result.failure("Problem deleting photo")
