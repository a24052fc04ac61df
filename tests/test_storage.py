import io

import pytest

from myclass.errors import FileTooLarge, UnsupportedFileType
from myclass.storage import FileStorage


@pytest.fixture
def storage(tmp_path):
    return FileStorage(str(tmp_path / "uploads"), max_bytes=16)


def test_stage_writes_file_with_generated_name(storage):
    staged = storage.stage("teacher_image", io.BytesIO(b"img"), "Photo.JPG", "image/jpeg")
    assert staged.url.startswith("/uploads/teacher_image-")
    assert staged.url.endswith(".jpg")
    assert staged.kind == "image"
    assert staged.size == 3
    assert staged.path.read_bytes() == b"img"
    assert storage.exists(staged.url)


def test_stage_rejects_wrong_mime(storage):
    with pytest.raises(UnsupportedFileType):
        storage.stage("course_file", io.BytesIO(b"x"), "a.png", "image/png")
    assert not storage.root.exists() or list(storage.root.iterdir()) == []


def test_stage_too_large_leaves_nothing(storage):
    with pytest.raises(FileTooLarge):
        storage.stage("course_file", io.BytesIO(b"x" * 17), "a.pdf", "application/pdf")
    assert list(storage.root.iterdir()) == []


def test_odd_extension_dropped(storage):
    name = storage.generate_name("profile_photo", "evil.p/hp")
    assert "/" not in name
    assert storage.generate_name("profile_photo", None).startswith("profile_photo-")


def test_remove_refuses_paths_outside_root(storage, tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep")
    assert storage.remove("/uploads/../secret.txt") is False
    assert storage.remove("/etc/passwd") is False
    assert outside.exists()


def test_remove_and_discard(storage):
    staged = storage.stage("course_file", io.BytesIO(b"%PDF"), "a.pdf", "application/pdf")
    assert storage.remove(staged.url) is True
    assert storage.remove(staged.url) is False
    storage.discard(staged)
    storage.discard(None)


def test_file_too_large_maps_to_413():
    assert FileTooLarge.status_code == 413
    assert FileTooLarge().status_code == 413
