"""Unit tests for ImageCacheService."""

import pytest

from sdprofile.services import ImageCacheService

PAGE_A = "aaaaaaaa-0000-4000-8000-000000000001"


@pytest.fixture
def icon_path(memory_fs, memory_archive):
    images = memory_archive.pages_root_path / PAGE_A.upper() / "Images"
    memory_fs.make_dirs(images)
    memory_fs.write_bytes(images / "icon.png", b"png")
    return images / "icon.png"


@pytest.mark.unit
class TestImageCacheService:
    """Test resolution caching."""

    def test_resolves_path(self, memory_archive, icon_path):
        cache = ImageCacheService()
        assert cache.get_image(memory_archive, "Images/icon.png") == icon_path
        assert len(cache) == 1

    def test_key_ignores_reference_case(self, memory_archive, icon_path):
        cache = ImageCacheService()
        cache.get_image(memory_archive, "Images/icon.png")
        cache.get_image(memory_archive, "IMAGES/ICON.PNG", PAGE_A)
        assert len(cache) == 1

    def test_misses_cached(self, memory_fs, memory_archive):
        cache = ImageCacheService()
        assert cache.get_image(memory_archive, "Images/later.png") is None

        images = memory_archive.pages_root_path / PAGE_A.upper() / "Images"
        memory_fs.make_dirs(images)
        memory_fs.write_bytes(images / "later.png", b"png")
        assert cache.get_image(memory_archive, "Images/later.png") is None

        cache.clear()
        assert cache.get_image(memory_archive, "Images/later.png") == images / "later.png"

    def test_loader_result_cached(self, memory_archive, icon_path):
        calls = []

        def loader(path):
            calls.append(path)
            return f"decoded:{path.name}"

        cache = ImageCacheService(loader=loader)
        assert cache.get_image(memory_archive, "Images/icon.png") == "decoded:icon.png"
        assert cache.get_image(memory_archive, "Images/icon.png") == "decoded:icon.png"
        assert calls == [icon_path]

    def test_loader_failure_cached_as_miss(self, memory_archive, icon_path):
        def loader(path):
            raise ValueError("corrupt")

        cache = ImageCacheService(loader=loader)
        assert cache.get_image(memory_archive, "Images/icon.png") is None
        assert len(cache) == 1

    def test_action_image(self, memory_archive, icon_path, make_action):
        cache = ImageCacheService()
        assert cache.get_action_image(memory_archive, make_action(image="Images/icon.png")) == icon_path
        assert cache.get_action_image(memory_archive, make_action()) is None

    def test_archives_do_not_share_entries(self, memory_archive, icon_path):
        cache = ImageCacheService()
        clone = memory_archive.clone()
        cache.get_image(memory_archive, "Images/icon.png")
        cache.get_image(clone, "Images/icon.png")
        assert len(cache) == 2

    def test_key_ignores_page_id_case(self, memory_archive, icon_path):
        cache = ImageCacheService()
        assert ImageCacheService.cache_key(memory_archive, "Images/icon.png", PAGE_A.upper()) == (
            ImageCacheService.cache_key(memory_archive, "Images/icon.png", PAGE_A)
        )

        cache.get_image(memory_archive, "Images/icon.png", PAGE_A.upper())
        cache.get_image(memory_archive, "Images/icon.png", PAGE_A)
        assert len(cache) == 1
