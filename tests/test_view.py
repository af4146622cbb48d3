"""Tests for views: bag files, metadata and notifications."""

import json

import pytest
import respx
from httpx import Response

from twintag.core.common import TwintagError, ViewNotInProjectError
from twintag.core.files import FileInfo
from twintag.core.list_object import ListObject
from twintag.core.view import View, create_bag
from twintag.core.virtual import Link
from twintag.network.client import Client

VIEW_URL = "https://api.test/api/v1/views/q1"

VIEW_DATA = {
    "id": "q1",
    "type": "owner",
    "bagQid": "b1",
    "authToken": "tok",
    "uploadsession": "s1",
    "data": {"rights": ["owner"], "project": {"projectId": "p1"}},
}


@pytest.fixture
def view(environment) -> View:
    return View("q1", environment=environment)


def mock_view_data(data=None):
    return respx.get(VIEW_URL).mock(return_value=Response(200, json=data or VIEW_DATA))


class TestViewData:
    @respx.mock
    def test_data_is_fetched_once(self, view: View) -> None:
        route = mock_view_data()

        assert view.data()["bagQid"] == "b1"
        assert view.data()["bagQid"] == "b1"
        assert route.call_count == 1
        assert "Authorization" not in route.calls.last.request.headers

    @respx.mock
    def test_token_comes_from_view_data(self, view: View) -> None:
        mock_view_data()
        route = respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=[]))

        view.list()

        assert route.calls.last.request.headers["Authorization"] == "Bearer tok"

    @respx.mock
    def test_explicit_token_skips_fetch(self, view: View) -> None:
        route = respx.get(f"{VIEW_URL}/folders").mock(return_value=Response(200, json=[]))

        view.set_token("project-key")
        view.list()

        assert route.calls.last.request.headers["Authorization"] == "Bearer project-key"

    @respx.mock
    def test_data_error_gets_context(self, view: View) -> None:
        respx.get(VIEW_URL).mock(return_value=Response(404, json=[{"status": 404, "title": "NF", "detail": "no view"}]))

        with pytest.raises(TwintagError) as exc_info:
            view.data()

        assert exc_info.value.message == "failed to get twintag data"
        assert exc_info.value.errors[0].detail == "no view"


class TestCreateBag:
    @respx.mock
    def test_owner_bag(self, environment) -> None:
        route = respx.put("https://api.test/api/v1/views").mock(
            return_value=Response(200, json={"id": "new", "authToken": "t2"})
        )

        view = create_bag(environment=environment)

        assert view.qid == "new"
        assert json.loads(route.calls.last.request.content) == {"type": "owner", "data": None}
        assert view.data()["authToken"] == "t2"

    @respx.mock
    def test_canonical_user_bag(self, environment) -> None:
        route = respx.put("https://api.test/api/v1/views").mock(return_value=Response(200, json={"id": "fixed"}))

        create_bag("fixed", environment=environment)

        assert json.loads(route.calls.last.request.content) == {
            "id": "fixed",
            "type": "user",
            "data": {"rights": ["read", "list"], "isCanocical": 1},
        }

    @respx.mock
    def test_failure_raises(self, environment) -> None:
        respx.put("https://api.test/api/v1/views").mock(return_value=Response(500))

        with pytest.raises(TwintagError, match="failed to create a twintag"):
            create_bag(environment=environment)


class TestFiles:
    @respx.mock
    def test_upload_bytes(self, view: View) -> None:
        mock_view_data()
        start = respx.put(f"{VIEW_URL}/files?uploadsession=s1").mock(return_value=Response(200, json={
            "uploadUrl": "https://storage.test/put/f1",
            "metafest": {"fileQid": "f1", "fileName": "a.txt", "size": 5,
                         "modTime": "2024-01-01T00:00:00Z", "fileMode": 420},
        }))
        storage = respx.put("https://storage.test/put/f1").mock(return_value=Response(200))
        end = respx.put(f"{VIEW_URL}/files/f1/end?uploadsession=s1").mock(return_value=Response(200))

        info = view.upload(b"hello", name="a.txt", parent="d1")

        assert json.loads(start.calls.last.request.content) == {
            "mode": 420, "name": "a.txt", "size": 5, "parent": "d1",
        }
        storage_request = storage.calls.last.request
        assert storage_request.content == b"hello"
        assert storage_request.headers["Content-Length"] == "5"
        assert "Authorization" not in storage_request.headers
        assert end.calls.last.request.content == b"{}"
        assert end.calls.last.request.headers["Authorization"] == "Bearer tok"
        assert info.file_qid == "f1"
        assert info.name == "a.txt"
        assert info.file_mode == "420"
        assert info.parent == "d1"

    @respx.mock
    def test_upload_path_uses_file_name(self, view: View, tmp_path) -> None:
        path = tmp_path / "notes.txt"
        path.write_bytes(b"some notes")
        view.set_token("tok")
        mock_view_data()
        start = respx.put(f"{VIEW_URL}/files?uploadsession=s1").mock(return_value=Response(200, json={
            "uploadUrl": "https://storage.test/put/f2",
            "metafest": {"fileQid": "f2", "fileName": "notes.txt", "size": 10, "fileMode": 420},
        }))
        sent = []

        def storage(request):
            sent.append((request.headers["Content-Length"], request.read()))
            return Response(200)

        respx.put("https://storage.test/put/f2").mock(side_effect=storage)
        respx.put(f"{VIEW_URL}/files/f2/end?uploadsession=s1").mock(return_value=Response(200))

        view.upload(path)

        start_req = json.loads(start.calls.last.request.content)
        assert start_req["name"] == "notes.txt"
        assert "parent" not in start_req
        assert sent == [("10", b"some notes")]

    @respx.mock
    def test_upload_storage_failure(self, view: View) -> None:
        mock_view_data()
        respx.put(f"{VIEW_URL}/files?uploadsession=s1").mock(return_value=Response(200, json={
            "uploadUrl": "https://storage.test/put/f1",
            "metafest": {"fileQid": "f1", "fileName": "a.txt", "size": 5, "fileMode": 420},
        }))
        respx.put("https://storage.test/put/f1").mock(return_value=Response(403, content=b"<Error/>"))

        with pytest.raises(TwintagError, match="failed to upload file to twintag"):
            view.upload(b"hello", name="a.txt")

    @respx.mock
    def test_upload_virtual_link(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/virtual?uploadsession=s1").mock(return_value=Response(200, json={}))

        view.upload_virtual(Link("https://example.com"), "Example")

        request = route.calls.last.request
        assert "Authorization" not in request.headers
        assert json.loads(request.content) == {
            "mode": 50,
            "name": "Example",
            "size": 0,
            "fileContent": {
                "specversion": "1.0",
                "definition": {"type": "web-link", "data": {"url": "https://example.com", "target": "_blank"}},
            },
        }

    @respx.mock
    def test_download_streams_without_auth(self, view: View) -> None:
        mock_view_data()
        route = respx.get(f"{VIEW_URL}/web/a.txt").mock(return_value=Response(200, content=b"hello"))

        stream = view.download("a.txt")

        with stream:
            assert stream.read() == b"hello"
        request = route.calls.last.request
        assert "Authorization" not in request.headers
        assert request.headers["Content-Type"] == "application/octet-stream"

    @respx.mock
    def test_download_json(self, view: View) -> None:
        mock_view_data()
        respx.get(f"{VIEW_URL}/web/conf.json").mock(return_value=Response(200, json={"k": "v"}))

        assert view.download_json("conf.json") == {"k": "v"}

    @respx.mock
    def test_list_returns_file_infos(self, view: View) -> None:
        mock_view_data()
        respx.get(f"{VIEW_URL}/folders/d1").mock(return_value=Response(200, json=[
            {"FileQid": "f1", "Parent": "d1", "Name": "a.txt", "Size": 5,
             "MTime": "2024-01-01T00:00:00Z", "FileMode": "420"},
            {"FileQid": "d2", "Parent": "d1", "Name": "sub", "Size": 0, "FileMode": 493},
        ]))

        files = view.list("d1")

        assert [f.name for f in files] == ["a.txt", "sub"]
        assert not files[0].is_folder
        assert files[1].is_folder
        assert files[0].mtime.year == 2024

    @respx.mock
    def test_rename_moves_in_place(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/files/f1/move").mock(return_value=Response(200, json={"FileQid": "f1"}))

        view.rename(FileInfo(file_qid="f1", name="a.txt"), "b.txt")

        assert json.loads(route.calls.last.request.content) == {
            "fileQid": "f1", "targetBag": "", "targetFolder": "", "targetName": "b.txt", "isCopy": False,
        }

    @respx.mock
    def test_copy_to_other_bag(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/files/f1/move").mock(return_value=Response(200, json={}))

        view.copy(FileInfo(file_qid="f1"), parent="d9", view="q2")

        body = json.loads(route.calls.last.request.content)
        assert body["isCopy"] is True
        assert body["targetBag"] == "q2"
        assert body["targetFolder"] == "d9"

    @respx.mock
    def test_delete_file(self, view: View) -> None:
        mock_view_data()
        route = respx.delete(f"{VIEW_URL}/files").mock(return_value=Response(204))

        view.delete(FileInfo(file_qid="f1"))

        assert json.loads(route.calls.last.request.content) == ["f1"]

    @respx.mock
    def test_delete_bag(self, view: View) -> None:
        mock_view_data()
        route = respx.delete(VIEW_URL).mock(return_value=Response(204))

        view.delete_bag()

        assert route.called

    @respx.mock
    def test_delete_project_twintag(self, view: View) -> None:
        mock_view_data()
        route = respx.delete("https://api.test/api/v1/twintags/b1").mock(return_value=Response(200, content=b"ok"))

        view.delete_project_twintag()

        assert route.called

    def test_add_folder_rejects_blank_name(self, view: View) -> None:
        with pytest.raises(ValueError, match="Invalid folder name."):
            view.add_folder("   ")

    @respx.mock
    def test_add_folder(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/folders").mock(
            return_value=Response(200, json={"fileQid": "d1", "fileName": "docs", "fileMode": 493})
        )

        res = view.add_folder("docs")

        assert res["fileQid"] == "d1"
        assert json.loads(route.calls.last.request.content) == {"name": "docs", "parent": None}

    @respx.mock
    def test_seal_sends_empty_object(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/seal").mock(return_value=Response(200, json={}))

        view.seal()

        assert json.loads(route.calls.last.request.content) == {}

    @respx.mock
    def test_move_to_folder(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/files/f1/move").mock(return_value=Response(200, json={}))

        view.move(FileInfo(file_qid="f1"), parent="d2")

        body = json.loads(route.calls.last.request.content)
        assert body["targetFolder"] == "d2"
        assert body["isCopy"] is False

    @respx.mock
    def test_get_user_view(self, view: View) -> None:
        mock_view_data()
        route = respx.put("https://api.test/api/v1/views").mock(return_value=Response(200, json={"id": "u1"}))

        user_view = view.get_user_view(["download"])

        assert user_view.qid == "u1"
        assert json.loads(route.calls.last.request.content) == {
            "type": "user",
            "data": {"ownerId": "q1", "rights": ["download"], "isCanocical": 1},
            "bagStorageQid": "b1",
        }


class TestData:
    @respx.mock
    def test_get_metadata_all_languages(self, view: View) -> None:
        mock_view_data()
        respx.get(f"{VIEW_URL}/data/metadata?language=*").mock(return_value=Response(200, json={
            "name": "bag", "created": "2024-03-01T10:00:00Z", "$createdType": "dateTime",
        }))

        metadata = view.get_metadata("all")

        assert metadata["name"] == "bag"
        assert metadata["created"].month == 3

    @respx.mock
    def test_get_metadata_uses_caching_host(self, view: View) -> None:
        mock_view_data()
        route = respx.get("https://cache.api.test/api/v1/views/q1/data/metadata").mock(
            return_value=Response(200, json={})
        )

        view.use_caching(True)
        view.get_metadata()

        assert route.called

    @respx.mock
    def test_get_metadata_failure(self, view: View) -> None:
        mock_view_data()
        respx.get(f"{VIEW_URL}/data/metadata").mock(
            return_value=Response(500, json=[{"status": 500, "title": "T", "detail": "D"}])
        )

        with pytest.raises(TwintagError) as exc_info:
            view.get_metadata()

        assert exc_info.value.message == "failed to get metadata of twintag"
        assert exc_info.value.status == 500

    @respx.mock
    def test_set_metadata(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/data/metadata").mock(return_value=Response(200, json={"name": "x"}))

        assert view.set_metadata({"name": "x"}) == {"name": "x"}
        assert route.calls.last.request.headers["Content-Type"] == "application/json"

    @respx.mock
    def test_get_data_attribute(self, view: View) -> None:
        mock_view_data()
        respx.get(f"{VIEW_URL}/data/product?property=price").mock(return_value=Response(200, json={"price": 3}))

        assert view.get_data("product", "price") == {"price": 3}

    @respx.mock
    def test_set_data(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/data/product").mock(return_value=Response(200, json={"price": 4}))

        view.set_data("product", {"price": 4})

        assert json.loads(route.calls.last.request.content) == {"price": 4}

    @respx.mock
    def test_object_requires_project(self, view: View) -> None:
        mock_view_data({**VIEW_DATA, "data": {"rights": ["owner"], "project": None}})

        with pytest.raises(ViewNotInProjectError):
            view.object("product")

    @respx.mock
    def test_object_is_scoped_to_view(self, view: View) -> None:
        mock_view_data()

        obj = view.object("product")

        assert isinstance(obj, ListObject)
        assert obj.view_id == "q1"


class TestNotifications:
    @respx.mock
    def test_notify_with_message(self, view: View) -> None:
        mock_view_data()
        route = respx.post(f"{VIEW_URL}/notification?type=email").mock(return_value=Response(200, json={}))

        view.notify("hello")

        assert json.loads(route.calls.last.request.content) == {"message": "hello"}

    @respx.mock
    def test_send_feedback(self, view: View) -> None:
        mock_view_data()
        route = respx.put(f"{VIEW_URL}/feedback").mock(return_value=Response(200, json={}))

        view.send_feedback({"content": "great", "rating": 5})

        assert json.loads(route.calls.last.request.content) == {"content": "great", "rating": 5}

    @respx.mock
    def test_send_to_subscribers(self, view: View) -> None:
        mock_view_data()
        route = respx.post(f"{VIEW_URL}/notification?type=customEmail").mock(return_value=Response(200, json={}))

        view.send_to_subscribers({"recipients": ["to@mail.test"], "body": "b"})

        assert route.called


def test_view_shares_client(environment) -> None:
    client = Client("key", environment=environment)

    view = View("q1", client=client)

    assert view.client() is client
    assert view.environment is environment
