import pytest

from studio_data import container as container_module
from studio_data.container import Container, ContainerNotInitializedError
from studio_data.repositories.interfaces import IGalleryRepository, IInquiryRepository, IPhotoRepository

from .test_fixtures.settings_fixtures import make_test_settings
from .test_fixtures.repository_fixtures import InMemoryObjectStore


@pytest.fixture
def container(session_factory) -> Container:
    return Container(make_test_settings(), session_factory, InMemoryObjectStore())


@pytest.fixture(autouse=True)
def clean_default_container():
    container_module.reset_container()
    yield
    container_module.reset_container()


class TestContainer:
    def test_repositories_are_built_once(self, container: Container):
        galleries = container.gallery_repository()

        assert isinstance(galleries, IGalleryRepository)
        assert isinstance(container.photo_repository(), IPhotoRepository)
        assert isinstance(container.inquiry_repository(), IInquiryRepository)
        assert container.gallery_repository() is galleries

    def test_reset_builds_fresh_instances(self, container: Container):
        before = container.photo_repository()
        container.reset()
        assert container.photo_repository() is not before

    def test_settings_reach_the_photo_repository(self, session_factory):
        settings = make_test_settings(STORAGE_PHOTO_BUCKET="originals", UPLOAD_MAX_BYTES=1024)
        repo = Container(settings, session_factory, InMemoryObjectStore()).photo_repository()

        assert repo.photo_bucket == "originals"
        assert repo.max_upload_bytes == 1024

    async def test_from_settings_with_store(self):
        built = Container.from_settings(make_test_settings(), object_store=InMemoryObjectStore())
        assert built.gallery_repository() is built.gallery_repository()
        await built.dispose()

    def test_from_settings_requires_cloudinary(self):
        with pytest.raises(ValueError):
            Container.from_settings(make_test_settings())


class TestAccessors:
    def test_before_initialize(self):
        with pytest.raises(ContainerNotInitializedError):
            container_module.use_gallery_repository()

    def test_after_initialize(self, container: Container):
        container_module.initialize(container)

        assert container_module.get_container() is container
        assert container_module.use_gallery_repository() is container.gallery_repository()
        assert container_module.use_photo_repository() is container.photo_repository()
        assert container_module.use_inquiry_repository() is container.inquiry_repository()
