"""
Wiring for the repositories.

Build one `Container` at process start and pass it (or the repositories it hands
out) down explicitly:

    container = Container.from_settings(get_settings())
    galleries = container.gallery_repository()

Presentation code that prefers accessor functions can register the container once
with `initialize(...)` and then call `use_gallery_repository()` and friends.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .config.settings import Settings
from .database.session import create_engine_from_settings, create_session_factory
from .repositories.gallery_repository import GalleryRepository
from .repositories.inquiry_repository import InquiryRepository
from .repositories.interfaces import IGalleryRepository, IInquiryRepository, IPhotoRepository
from .repositories.photo_repository import PhotoRepository
from .storage.base import ObjectStore
from .storage.cloudinary_store import CloudinaryObjectStore

logger = logging.getLogger(__name__)


class ContainerNotInitializedError(RuntimeError):
    """An accessor was called before `initialize()`."""


class Container:
    """
    Builds each repository on first request and returns that same instance afterwards.

    Repositories hold no per-call state, so sharing them between concurrent tasks is
    fine. `reset()` must not run while an operation is in flight.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        object_store: ObjectStore,
        engine: AsyncEngine | None = None,
    ):
        self.settings = settings
        self.session_factory = session_factory
        self.object_store = object_store
        # only set when the container created the engine itself, see `dispose()`
        self._engine = engine
        self._gallery_repository: IGalleryRepository | None = None
        self._photo_repository: IPhotoRepository | None = None
        self._inquiry_repository: IInquiryRepository | None = None

    @classmethod
    def from_settings(cls, settings: Settings, object_store: ObjectStore | None = None) -> "Container":
        """Create the async engine, session factory and (unless given) the Cloudinary store."""
        if object_store is None:
            if not settings.cloudinary_configured:
                raise ValueError("CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be set")
            object_store = CloudinaryObjectStore.from_settings(settings)
        engine = create_engine_from_settings(settings)

        logger.info("container.created", extra={"env": settings.ENV, "store": type(object_store).__name__})
        return cls(settings, create_session_factory(engine), object_store, engine=engine)

    def gallery_repository(self) -> IGalleryRepository:
        if self._gallery_repository is None:
            self._gallery_repository = GalleryRepository(
                self.session_factory,
                object_store=self.object_store,
                photo_bucket=self.settings.STORAGE_PHOTO_BUCKET,
            )
        return self._gallery_repository

    def photo_repository(self) -> IPhotoRepository:
        if self._photo_repository is None:
            self._photo_repository = PhotoRepository(
                self.session_factory,
                self.object_store,
                photo_bucket=self.settings.STORAGE_PHOTO_BUCKET,
                thumbnail_bucket=self.settings.STORAGE_THUMBNAIL_BUCKET,
                signed_url_expires_in=self.settings.SIGNED_URL_EXPIRES_IN,
                max_upload_bytes=self.settings.UPLOAD_MAX_BYTES,
                allowed_mime_types=self.settings.allowed_mime_types,
            )
        return self._photo_repository

    def inquiry_repository(self) -> IInquiryRepository:
        if self._inquiry_repository is None:
            self._inquiry_repository = InquiryRepository(self.session_factory)
        return self._inquiry_repository

    def reset(self) -> None:
        """Drop cached repositories; the next request builds fresh ones."""
        self._gallery_repository = None
        self._photo_repository = None
        self._inquiry_repository = None

    async def dispose(self) -> None:
        self.reset()
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None


# =================================================================================================================
# Accessor functions over one registered container
# =================================================================================================================

_default_container: Container | None = None


def initialize(container: Container) -> Container:
    """Register the container used by the `use_*` accessors. Call once at process start."""
    global _default_container
    if _default_container is not None and _default_container is not container:
        logger.warning("container.reinitialized")
    _default_container = container
    return container


def get_container() -> Container:
    if _default_container is None:
        raise ContainerNotInitializedError("Container not initialized; call initialize() at startup")
    return _default_container


def use_gallery_repository() -> IGalleryRepository:
    return get_container().gallery_repository()


def use_photo_repository() -> IPhotoRepository:
    return get_container().photo_repository()


def use_inquiry_repository() -> IInquiryRepository:
    return get_container().inquiry_repository()


def reset_container() -> None:
    """Forget the registered container (tests)."""
    global _default_container
    _default_container = None
