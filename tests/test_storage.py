import pytest

from preview_generator import config
from preview_generator.exceptions import NotFoundError, StorageNotAvailableError
from preview_generator.models import User
from preview_generator.storage.nodes import File, Folder
from preview_generator.storage.root import RootFolder


@pytest.fixture
def root(tmp_path):
    files = tmp_path / "alice" / "files"
    (files / "Photos").mkdir(parents=True)
    (files / "Photos" / "a.JPG").write_bytes(b"x")
    return RootFolder(tmp_path)


def test_user_folder_path(root):
    with root.user_session(User("alice")) as folder:
        assert folder.path == "/alice/files"
        assert folder.real_path == root.data_dir / "alice" / "files"


@pytest.mark.parametrize("path,expected", [
    ("/alice/files", "/"),
    ("/alice/files/Photos", "/Photos"),
    ("alice/files/Photos/", "/Photos"),
    ("/alice/files/../files/Photos", "/Photos"),
    ("/alice", None),
    ("/alice/filesystem", None),
    ("/bob/files/Photos", None),
])
def test_get_relative_path(root, path, expected):
    with root.user_session(User("alice")) as folder:
        assert folder.get_relative_path(path) == expected


def test_get_resolves_nodes(root):
    with root.user_session(User("alice")) as folder:
        photos = folder.get("/Photos")
        assert isinstance(photos, Folder)
        photo = folder.get("/Photos/a.JPG")
        assert isinstance(photo, File)
        assert photo.mime_type == "image/jpeg"
        assert folder.get("/Photos/missing.jpg") is None
        assert folder.get("/../../etc") is None


def test_listing_and_marker(root):
    with root.user_session(User("alice")) as folder:
        photos = folder.get("/Photos")
        assert [n.name for n in photos.get_directory_listing()] == ["a.JPG"]
        assert not photos.node_exists(config.SKIP_MARKER)
        (photos.real_path / config.SKIP_MARKER).write_text("")
        assert photos.node_exists(config.SKIP_MARKER)
        assert not photos.node_exists("../Photos")


def test_symlinks_are_not_listed(root):
    files = root.data_dir / "alice" / "files"
    (files / "loop").symlink_to(files, target_is_directory=True)
    with root.user_session(User("alice")) as folder:
        assert [n.name for n in folder.get_directory_listing()] == ["Photos"]
        assert folder.get("/loop") is None


def test_unknown_extension_mime(root):
    (root.data_dir / "alice" / "files" / "blob.xyz").write_bytes(b"x")
    with root.user_session(User("alice")) as folder:
        assert folder.get("/blob.xyz").mime_type == config.DEFAULT_MIME


def test_vanished_file_stat_raises_not_found(root):
    with root.user_session(User("alice")) as folder:
        photo = folder.get("/Photos/a.JPG")
        photo.real_path.unlink()
        with pytest.raises(NotFoundError):
            photo.stat()


def test_nodes_unusable_after_session(root):
    with root.user_session(User("alice")) as folder:
        photos = folder.get("/Photos")
    with pytest.raises(StorageNotAvailableError):
        photos.get_directory_listing()


def test_session_closed_on_error(root):
    with pytest.raises(ValueError):
        with root.user_session(User("alice")) as folder:
            raise ValueError("boom")
    assert folder.session.active is False


def test_missing_user_folder_is_not_available(tmp_path):
    with pytest.raises(StorageNotAvailableError) as exc:
        with RootFolder(tmp_path).user_session(User("dave")):
            pass
    assert exc.value.hint == "No such file or directory"
    assert not (tmp_path / "dave").exists()


def test_user_root_that_is_a_file_is_not_available(tmp_path):
    (tmp_path / "dave").write_text("x")
    with pytest.raises(StorageNotAvailableError):
        with RootFolder(tmp_path).user_session(User("dave")):
            pass

    (tmp_path / "erin" / "files").parent.mkdir()
    (tmp_path / "erin" / "files").write_text("x")
    with pytest.raises(StorageNotAvailableError) as exc:
        with RootFolder(tmp_path).user_session(User("erin")):
            pass
    assert exc.value.hint == "Not a directory"


def test_get_does_not_follow_symlinked_components(root):
    outside = root.data_dir / "outside" / "sub"
    outside.mkdir(parents=True)
    (outside / "secret.jpg").write_bytes(b"x")
    files = root.data_dir / "alice" / "files"
    (files / "link").symlink_to(root.data_dir / "outside", target_is_directory=True)
    (files / "Photos" / "inner").symlink_to(files / "Photos", target_is_directory=True)

    with root.user_session(User("alice")) as folder:
        assert folder.get("/link/sub") is None
        assert folder.get("/link/sub/secret.jpg") is None
        assert folder.get("/Photos/inner/a.JPG") is None
        assert folder.get("/Photos/a.JPG/more") is None
        assert isinstance(folder.get("/Photos/a.JPG"), File)
