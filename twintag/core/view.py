"""
Views into bags.

A view is identified by its qid, the string seen in its URL
(``https://twintag.io/<qid>``). A bag can have many views, each with its
own rights: owner, download-only, upload-only, ...

```python
view = View(view_qid)
for info in view.list():
    print(info.name)
```
"""
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from twintag.config.environment import Environment
from twintag.core.common import ViewNotInProjectError, logger
from twintag.core.files import FILE_MODE, FileInfo, upload_source
from twintag.core.list_object import ListObject, language_query
from twintag.core.parser import Parser
from twintag.core.virtual import VirtualFile
from twintag.network.client import Client
from twintag.network.streams import ResponseStream, release

if TYPE_CHECKING:
    from twintag.core.project import Project

_JSON_HEADERS = {"Content-Type": "application/json"}


def create_bag(qid: Optional[str] = None, client: Optional[Client] = None,
               project: Optional["Project"] = None, environment: Optional[Environment] = None) -> "View":
    """
    Create a bag and return its owner view.

    Without a client this creates a free bag, not associated with a project.

    Args:
        qid: Optional qid for a canonical user view instead of an owner view
        client: Transport to use, e.g. one carrying a project API key
        project: Project the bag is created for
        environment: Hosts to use when no client is given

    Returns:
        The new view
    """
    client = client or Client(environment=environment)

    if qid:
        view_req: Dict[str, Any] = {
            "id": qid,
            "type": "user",
            "data": {"rights": ["read", "list"], "isCanocical": 1},
        }
    else:
        view_req = {"type": "owner", "data": None}

    res, err = client.put(f"{client.environment.host}/api/v1/views", view_req)
    if err:
        err.set_message("failed to create a twintag")
        raise err

    logger.debug(f"Created bag view {res.get('id')}")
    return View(res["id"], client=client, project=project, data=res)


class View:
    """
    A view into a bag.

    The view fetches its own definition on first use and authorizes with
    the token it contains, unless a token was set explicitly.
    """

    def __init__(self, qid: str, client: Optional[Client] = None, project: Optional["Project"] = None,
                 data: Optional[Dict[str, Any]] = None, environment: Optional[Environment] = None):
        """
        Args:
            qid: View qid
            client: Transport shared with the creator of the view
            project: Project the view was obtained from
            data: View definition, when already known
            environment: Hosts to use when no client is given
        """
        self.qid = qid
        self.project = project
        self._client = client or Client(environment=environment)
        self._data = data
        self._use_caching = False

    @property
    def environment(self) -> Environment:
        return self._client.environment

    def use_caching(self, value: bool) -> None:
        """Route reads of structured data through the caching host."""
        self._use_caching = value

    def _view_url(self) -> str:
        return f"{self.environment.host}/api/v1/views/{self.qid}"

    def _twintag_url(self) -> str:
        return f"{self.environment.host}/api/v1/twintags/{self.data().get('bagQid')}"

    def _file_url(self, obj: str, qid: Optional[str] = None, op: Optional[str] = None,
                  use_caching_host: bool = False) -> str:
        host = self.environment.caching_host if use_caching_host and self._use_caching else self.environment.host
        url = f"{host}/api/v1/views/{self.qid}/{obj}"
        if qid:
            url += "/" + qid
        if op:
            url += "/" + op
        return url

    def _file_url_upload(self, obj: str, qid: Optional[str] = None, op: Optional[str] = None) -> str:
        url = self._file_url(obj, qid, op)
        session = self.data().get("uploadsession")
        if session:
            url += "?uploadsession=" + session
        return url

    def client(self) -> Client:
        """Return the transport, authorized with the view's token."""
        if not self._client.token:
            self.set_token(self.data().get("authToken"))
        return self._client

    def data(self) -> Dict[str, Any]:
        """Get the view definition, including its rights. Fetched once."""
        if self._data is not None:
            return self._data

        res, err = self._client.get(self._view_url())
        if err:
            err.set_message("failed to get twintag data")
            raise err
        self._data = res
        return self._data

    def set_token(self, token: Optional[str]) -> None:
        """
        Set the token used for authorization, e.g. a project API key instead
        of the view's own token.
        """
        self._client.token = token

    # File management

    def upload(self, f: Any, name: Optional[str] = None, parent: Optional[str] = None) -> FileInfo:
        """
        Upload a file into the bag.

        Required rights: upload.

        Args:
            f: Path, bytes or binary file object
            name: Name to store the file under (defaults to the file's name)
            parent: Qid of the folder to upload into

        Returns:
            Description of the uploaded file
        """
        client = self.client()
        with upload_source(f, name) as source:
            start_req = {"mode": int(FILE_MODE), "name": source.name, "size": source.size}
            if parent is not None:
                start_req["parent"] = parent
            start, err = client.put(self._file_url_upload("files"), start_req)
            if err:
                err.set_message("failed to start upload file to twintag")
                raise err

            payload, err = client.execute(start["uploadUrl"], "PUT", headers=source.headers,
                                          body=source.body, skip_parse=True, skip_auth=True)
            release(payload)
            if err:
                err.set_message("failed to upload file to twintag")
                raise err

        metafest = start["metafest"]
        url = self._file_url_upload("files", metafest["fileQid"], "end")
        payload, err = client.execute(url, "PUT", body="{}", skip_parse=True)
        release(payload)
        if err:
            err.set_message("failed to complete the file upload to twintag")
            raise err

        logger.debug(f"Uploaded {source.name} ({source.size} bytes) to view {self.qid}")
        return FileInfo.from_new_file(metafest, parent=parent)

    def upload_virtual(self, f: VirtualFile, name: str) -> Any:
        """
        Upload a virtual file into the bag.

        Required rights: owner.
        """
        req = {"mode": f.mode, "name": name, "size": 0, "fileContent": f.get_definition()}
        res, err = self.client().put(self._file_url_upload("virtual"), req, skip_auth=True)
        if err:
            err.set_message("failed to upload virtual file to twintag")
            raise err
        return res

    def download(self, name: str) -> Optional[ResponseStream]:
        """
        Download a file from the bag.

        Required rights: download.

        Returns:
            Stream of the file content, None for an empty file. Close the
            stream when done with it.
        """
        res, err = self.client().execute(self._file_url("web", name), "GET",
                                         headers={"Content-Type": "application/octet-stream"},
                                         skip_parse=True, skip_auth=True)
        if err:
            err.set_message("failed to download file from twintag")
            raise err
        return res

    def download_json(self, name: str) -> Any:
        """Download a JSON file from the bag and decode it."""
        res, err = self.client().get(self._file_url("web", name), headers=_JSON_HEADERS, skip_auth=True)
        if err:
            err.set_message("failed to download JSON file from twintag")
            raise err
        return res

    def rename(self, source: FileInfo, name: str) -> Any:
        """Rename a file. Required rights: upload and download."""
        return self._do_move(source, name=name)

    def move(self, source: FileInfo, name: Optional[str] = None, parent: Optional[str] = None,
             view: Optional[str] = None) -> Any:
        """
        Move a file to another folder or, with owner rights, another bag.
        """
        return self._do_move(source, name, parent, view)

    def copy(self, source: FileInfo, name: Optional[str] = None, parent: Optional[str] = None,
             view: Optional[str] = None) -> Any:
        return self._do_move(source, name, parent, view, is_copy=True)

    def _do_move(self, source: FileInfo, name: Optional[str] = None, parent: Optional[str] = None,
                 view: Optional[str] = None, is_copy: bool = False) -> Any:
        req = {
            "fileQid": source.file_qid,
            "targetBag": view or "",
            "targetFolder": parent or "",
            "targetName": name or "",
            "isCopy": is_copy,
        }
        res, err = self.client().put(self._file_url(f"files/{source.file_qid}/move"), req)
        if err:
            err.set_message("failed to move file in twintag")
            raise err
        return res

    def delete(self, file: FileInfo) -> None:
        """Delete a file from the bag. Required rights: delete."""
        payload, err = self.client().delete(self._file_url("files"), [str(file.file_qid)])
        release(payload)
        if err:
            err.set_message("failed to delete file from twintag")
            raise err

    def delete_bag(self) -> None:
        """Delete the entire bag. Required rights: owner."""
        payload, err = self.client().delete(self._view_url())
        release(payload)
        if err:
            err.set_message("failed to delete twintag")
            raise err

    def delete_project_twintag(self) -> None:
        """
        Delete a project twintag along with its metadata.

        The view should be obtained from its project:

        ```python
        project.get_view(view_id).delete_project_twintag()
        ```
        """
        url = self._twintag_url()
        payload, err = self.client().delete(url)
        release(payload)
        if err:
            err.set_message("failed to delete project twintag")
            raise err

    def get_user_view(self, rights: List[str]) -> "View":
        """Create a view with limited rights on the same bag. Required rights: owner."""
        req = {
            "type": "user",
            "data": {"ownerId": self.qid, "rights": rights, "isCanocical": 1},
            "bagStorageQid": self.data().get("bagQid"),
        }
        res, err = self.client().put(f"{self.environment.host}/api/v1/views", req)
        if err:
            err.set_message("failed to get view information")
            raise err
        return View(res["id"], project=self.project, data=res, environment=self.environment)

    def list(self, folder: Optional[str] = None) -> List[FileInfo]:
        """
        List the files in the bag or in a sub-folder.

        Required rights: list.

        Args:
            folder: Qid of the folder to list, root when omitted
        """
        res, err = self.client().get(self._file_url("folders", folder))
        if err:
            err.set_message("failed to get list of files from twintag")
            raise err
        return [FileInfo.model_validate(item) for item in res or []]

    def add_folder(self, name: str, parent: Optional[str] = None) -> Any:
        """
        Create a folder.

        Raises:
            ValueError: If the name is blank
        """
        if not name.strip():
            raise ValueError("Invalid folder name.")
        res, err = self.client().put(self._file_url("folders"), {"name": name, "parent": parent or None})
        if err:
            err.set_message(f"failed to create folder: {err.message}")
            raise err
        return res

    def seal(self) -> None:
        res, err = self.client().put(self._file_url("seal"), {})
        if err:
            err.set_message("failed to seal")
            raise err

    # Metadata and structured data

    def get_metadata(self, lang: Optional[str] = None) -> Any:
        """
        Get the metadata of this bag.

        Required rights: download.

        Args:
            lang: ``all`` or any language of the project; the project's
                default language when omitted
        """
        url = self._file_url("data/metadata", use_caching_host=True)
        query = language_query(lang)
        if query:
            url += "?" + query
        res, err = self.client().get(url)
        if err:
            err.set_message("failed to get metadata of twintag")
            raise err
        return Parser.parse_special_types(res)

    def set_metadata(self, data: Dict[str, Any]) -> Any:
        """Set the metadata of this bag and return the resulting metadata. Required rights: owner."""
        res, err = self.client().put(self._file_url("data/metadata"), data, headers=_JSON_HEADERS)
        if err:
            err.set_message("failed to set metadata to twintag")
            raise err
        return res

    def get_data(self, object_api_name: str, attribute: Optional[str] = None) -> Any:
        """
        Get the data of an object for this bag.

        Args:
            object_api_name: API name of the object
            attribute: Only return this attribute
        """
        url = self._file_url("data/" + object_api_name, use_caching_host=True)
        if attribute:
            url += "?property=" + attribute
        res, err = self.client().get(url)
        if err:
            err.set_message(f"failed to get data to twintag object: {object_api_name}")
            raise err
        return Parser.parse_special_types(res)

    def set_data(self, object_api_name: str, data: Dict[str, Any]) -> Any:
        res, err = self.client().put(self._file_url("data/" + object_api_name), data, headers=_JSON_HEADERS)
        if err:
            err.set_message(f"failed to set data to twintag object: {object_api_name}")
            raise err
        return res

    def object(self, object_api_name: str) -> ListObject:
        """
        Get the data of one object, scoped to this bag.

        Raises:
            ViewNotInProjectError: If the bag is not tagged to a project
        """
        client = self.client()
        data = self.data()
        project = (data.get("data") or {}).get("project") or {}
        if not project.get("projectId"):
            raise ViewNotInProjectError()
        return ListObject(object_api_name, client, view_id=data["id"], use_caching=self._use_caching)

    # Notifications

    def notify(self, request: Union[str, Dict[str, Any]], channel: str = "email") -> Any:
        """
        Send a notification to the registered users of the view.

        Required rights: owner.

        Args:
            request: Message, or a mapping with ``message``, ``subject``,
                ``bagAlias``, ``showBagReport`` and ``language``
            channel: Notification channel
        """
        body = {"message": request} if isinstance(request, str) else request
        url = f"{self._view_url()}/notification?type={channel or 'email'}"
        res, err = self.client().post(url, body, headers=_JSON_HEADERS)
        if err:
            err.set_message("failed to notify to all subcribers of twintag")
            raise err
        return res

    def send_feedback(self, request: Union[str, Dict[str, Any]]) -> Any:
        """Send feedback: content, with optional ``email``, ``subject`` and ``rating``."""
        body = {"content": request} if isinstance(request, str) else request
        res, err = self.client().put(self._view_url() + "/feedback", body, headers=_JSON_HEADERS)
        if err:
            err.set_message("failed to submit feedback")
            raise err
        return res

    def send_to_subscribers(self, request: Dict[str, Any]) -> Any:
        """
        Send a custom email.

        Args:
            request: Mapping with ``recipients``, ``body``, ``subject``, ``cc``,
                ``bcc``, ``toSubscribers``, ``mergeVars`` and ``template``
        """
        url = self._view_url() + "/notification?type=customEmail"
        res, err = self.client().post(url, request, headers=_JSON_HEADERS)
        if err:
            err.set_message("failed to notify to all subcribers of twintag through custom email")
            raise err
        return res

    def __repr__(self) -> str:
        return f"View({self.qid!r})"
