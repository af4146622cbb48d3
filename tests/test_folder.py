"""Tests for storage bags, folders and the project entry point."""

import json

import pytest
import respx
from httpx import Response

from twintag.core.common import BagNotCreatedError
from twintag.core.folder import Folder
from twintag.core.storage_bag import StorageBag
from twintag.core.twintag import Twintag
from twintag.core.view import View

VIEW_URL = "https://api.test/api/v1/views/v1"

ROOT_ENTRIES = [
    {"FileQid": "f1", "Name": "readme.txt", "Size": 5, "FileMode": "420"},
    {"FileQid": "d1", "Name": "docs", "Size": 0, "FileMode": "493"},
]


@pytest.fixture
def twt(environment) -> Twintag:
    return Twintag("project-key", "template", "acme", environment=environment)


@pytest.fixture
def bag(twt: Twintag) -> View:
    return View("v1", client=twt.project._client, project=twt.project,
                data={"id": "v1", "bagQid": "b1"})


@pytest.fixture
def root(twt: Twintag, bag: View) -> Folder:
    return StorageBag(twt, bag).root_folder


class TestTwintag:
    def test_root_url_points_at_template(self, twt: Twintag) -> None:
        assert twt.url("/") == "https://acme.twintag.io/template"

    def test_path_url(self, twt: Twintag) -> None:
        assert twt.url("/shop/item") == "https://acme.twintag.io/shop/item"

    def test_relative_path_rejected(self, twt: Twintag) -> None:
        with pytest.raises(ValueError, match="bad path; have 'shop'; must start with '/'"):
            twt.url("shop")

    def test_host_setters(self, twt: Twintag) -> None:
        twt.set_host("https://other.test")
        twt.set_admin_host("https://adm.other.test")

        assert twt.environment.host == "https://other.test"
        assert twt.project.environment.admin_host == "https://adm.other.test"
        assert twt.set_log_level("single") == "none"


class TestStorageBag:
    @respx.mock
    def test_create_returns_root(self, twt: Twintag) -> None:
        route = respx.put("https://api.test/api/v1/views").mock(
            return_value=Response(200, json={"id": "v1", "bagQid": "b1"})
        )
        storage = StorageBag(twt)

        root = storage.create()

        assert root.name == "/"
        assert root.parent_qid == ""
        assert storage.root_folder is root
        assert storage.bag.qid == "v1"
        assert route.calls.last.request.headers["Authorization"] == "Bearer project-key"

    def test_delete_before_create(self, twt: Twintag) -> None:
        with pytest.raises(BagNotCreatedError):
            StorageBag(twt).delete()

    @respx.mock
    def test_delete(self, twt: Twintag, bag: View) -> None:
        route = respx.delete("https://api.test/api/v1/twintags/b1").mock(return_value=Response(204))

        StorageBag(twt, bag).delete()

        assert route.called

    def test_folder_without_bag(self, twt: Twintag) -> None:
        with pytest.raises(BagNotCreatedError):
            Folder(twt, None, "/", "").list_files()


class TestListing:
    @respx.mock
    def test_files_and_folders(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=ROOT_ENTRIES))

        assert [f.name for f in root.list_files()] == ["readme.txt"]
        folders = root.list_folders()
        assert [f.name for f in folders] == ["docs"]
        assert folders[0].parent == ""

    @respx.mock
    def test_sub_folder_lists_its_own_content(self, twt: Twintag, bag: View) -> None:
        route = respx.get(f"{VIEW_URL}/folders/d1").mock(return_value=Response(200, json=[
            {"FileQid": "f9", "Name": "a.pdf", "FileMode": "420", "Parent": "d1"},
        ]))

        found = Folder(twt, bag, "docs", "d1").find_file("a.pdf")

        assert found.file_qid == "f9"
        assert route.called

    @respx.mock
    def test_find_missing(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=ROOT_ENTRIES))

        assert root.find_folder("nope") is None

    @respx.mock
    def test_remove_file(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=ROOT_ENTRIES))
        route = respx.delete(f"{VIEW_URL}/files").mock(return_value=Response(204))

        assert root.remove_file("readme.txt")
        assert not root.remove_file("missing.txt")
        assert route.call_count == 1
        assert json.loads(route.calls.last.request.content) == ["f1"]

    @respx.mock
    def test_remove_folder(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=ROOT_ENTRIES))
        route = respx.delete(f"{VIEW_URL}/files").mock(return_value=Response(204))

        assert root.remove_folder("docs")
        assert json.loads(route.calls.last.request.content) == ["d1"]


class TestResolve:
    @respx.mock
    def test_nested_path(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=ROOT_ENTRIES))
        respx.get(f"{VIEW_URL}/folders/d1").mock(return_value=Response(200, json=[
            {"FileQid": "d2", "Name": "2024", "FileMode": "493", "Parent": "d1"},
        ]))

        folder = root.resolve("/docs/2024/")

        assert folder.name == "2024"
        assert folder.parent_qid == "d2"

    @respx.mock
    def test_missing_component(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=ROOT_ENTRIES))

        assert root.resolve("/readme.txt") is None

    def test_root_path(self, root: Folder) -> None:
        folder = root.resolve("/")

        assert folder.name == "/"
        assert folder.parent_qid == ""

    def test_empty_path(self, root: Folder) -> None:
        with pytest.raises(ValueError, match="empty path"):
            root.resolve("")


class TestReadWrite:
    @respx.mock
    def test_write_json_into_folder(self, twt: Twintag, bag: View) -> None:
        start = respx.put(f"{VIEW_URL}/files").mock(return_value=Response(200, json={
            "uploadUrl": "https://storage.test/u",
            "metafest": {"fileQid": "f5", "fileName": "conf.json", "size": 8, "fileMode": 420},
        }))
        storage = respx.put("https://storage.test/u").mock(return_value=Response(200))
        respx.put(f"{VIEW_URL}/files/f5/end").mock(return_value=Response(200))

        info = Folder(twt, bag, "docs", "d1").write_json("conf.json", {"a": 1})

        assert json.loads(start.calls.last.request.content)["parent"] == "d1"
        assert json.loads(storage.calls.last.request.content) == {"a": 1}
        assert info.file_qid == "f5"
        assert info.parent == "d1"

    @respx.mock
    def test_read_text_and_json(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/web/conf.json").mock(return_value=Response(200, content=b'{"a": 1}'))

        assert root.read_text("conf.json") == '{"a": 1}'
        assert root.read_json("conf.json") == {"a": 1}

    @respx.mock
    def test_read_empty_file(self, root: Folder) -> None:
        respx.get(f"{VIEW_URL}/web/empty.txt").mock(return_value=Response(200, content=b""))

        assert root.read_bytes("empty.txt") == b""

    @respx.mock
    def test_create_folder(self, root: Folder) -> None:
        route = respx.put(f"{VIEW_URL}/folders").mock(
            return_value=Response(200, json={"fileQid": "d3", "fileName": "new", "fileMode": 493})
        )

        info = root.create_folder("new")

        assert info.is_folder
        assert info.name == "new"
        assert info.parent == ""
        assert json.loads(route.calls.last.request.content) == {"name": "new", "parent": None}
