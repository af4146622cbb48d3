"""
Structured data access for one object of a view or a project.
"""
import copy
import os
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from twintag.core.common import TwintagError
from twintag.core.file_uploader import FileUploader
from twintag.core.files import stream_size
from twintag.core.parser import Parser
from twintag.network.client import Client
from twintag.network.streams import release

Custom = Union[str, int, float, datetime]
"""Value types accepted in filters."""

FilterExpression = Mapping[str, Custom]
"""Comparison filter, e.g. ``{"gt": 3, "lte": 10}``."""

Filter = Mapping[str, Union[Custom, FilterExpression]]
"""
Filter on object attributes: plain values match by equality, mappings
compare with ``gt``, ``lt``, ``gte`` and ``lte``.

Example:
```python
{"name": "foo", "count": {"gte": 3}}
```
"""

_OPERATORS = (("gt", ">"), ("lt", "<"), ("gte", ">="), ("lte", "<="))
_JSON_HEADERS = {"Content-Type": "application/json"}


def _encode_component(value: str) -> str:
    return quote(value, safe="-_.!~*'()")


def _handle_types(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}"
    if isinstance(value, bool):
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def build_filter_query(f: Optional[Filter]) -> str:
    """
    Render a filter as ``filter=`` query arguments.

    Returns:
        Query string fragment without a leading separator, empty for no filter
    """
    parts = []
    for name, value in (f or {}).items():
        if isinstance(value, Mapping):
            for key, op in _OPERATORS:
                rendered = _handle_types(value.get(key)) if value.get(key) is not None else ""
                if rendered:
                    parts.append(f"filter={name}{op}{_encode_component(rendered)}")
        else:
            parts.append(f"filter={name}={_encode_component(_handle_types(value))}")
    return "&".join(parts)


def _append_query(url: str, query: str) -> str:
    if not query:
        return url
    return url + ("&" if "?" in url else "?") + query


def language_query(lang: Optional[str]) -> str:
    if not lang:
        return ""
    return "language=" + ("*" if lang == "all" else lang)


def _is_file(value: Any) -> bool:
    return hasattr(value, "read")


class ListObject:
    """
    Data of one structured object, scoped to a view or to a whole project.

    Instances come from ``View.object`` or ``Project.object``.
    """

    def __init__(self, object_api_name: str, client: Client, view_id: str = "",
                 project_id: str = "", use_caching: bool = False):
        self._client = client
        self.view_id = view_id
        self.object_api_name = object_api_name
        self._project_id = project_id
        self._use_caching = use_caching

    def _data_url(self, instance_id: Optional[str] = None, query: str = "") -> str:
        env = self._client.environment
        if not self.view_id:
            url = f"{env.admin_host}/api/v1/data/{self.object_api_name}"
        else:
            url = f"{env.host}/api/v1/views/{self.view_id}/data/{self.object_api_name}"
        if instance_id:
            url += "/" + instance_id
        return _append_query(url, query)

    def _read_url(self, instance_id: Optional[str] = None, query: str = "") -> str:
        """URL for reads, going through the caching host when enabled."""
        if not self._use_caching:
            return self._data_url(instance_id, query)
        cache = self._client.environment.caching_host
        suffix = "/" + instance_id if instance_id else ""
        if not self.view_id:
            url = f"{cache}/data/{self.object_api_name}{suffix}?schemaScope={self._project_id}"
        else:
            url = f"{cache}/api/v1/views/{self.view_id}/data/{self.object_api_name}{suffix}"
        return _append_query(url, query)

    @staticmethod
    def _raise(err: TwintagError, message: str) -> None:
        err.set_message(message)
        raise err

    def get(self, instance_id: str, lang: Optional[str] = None) -> Any:
        """
        Get one instance by id.

        Args:
            instance_id: Instance qid, or key value for objects with a key property
            lang: Optional language, ``all`` for every language
        """
        url = _append_query(self._read_url(instance_id), language_query(lang))
        res, err = self._client.get(url)
        if err:
            self._raise(err, f"failed to get data: {err.message}")
        return Parser.parse_special_types(res)

    def insert(self, data: Dict[str, Any]) -> Any:
        """
        Insert an instance. File-like attribute values are uploaded once the
        instance exists and replaced by their file description.
        """
        body, files = self._split_files(data)
        res, err = self._client.put(self._data_url(), body, headers=_JSON_HEADERS)
        if err:
            self._raise(err, f"failed to insert data: {err.message}")
        return self._upload_files(res, files)

    def insert_in_bulk(self, data: Any) -> Any:
        """Insert many instances in one request."""
        res, err = self._client.put(self._data_url() + "/import", data, headers=_JSON_HEADERS)
        if err:
            self._raise(err, f"failed to insert bulk data: {err.message}")
        return res

    def update(self, data: Dict[str, Any]) -> Any:
        """Update an instance identified by its ``$qid`` or key property."""
        body, files = self._split_files(data)
        res, err = self._client.put(self._data_url(), body, headers=_JSON_HEADERS)
        if err:
            self._raise(err, f"failed to update data: {err.message}")
        return self._upload_files(res, files)

    def delete(self, instance_id: str, data_scope: str = "") -> None:
        """Delete an instance."""
        req = {"id": instance_id, "$dataScope": data_scope}
        payload, err = self._client.delete(self._data_url(), req, headers=_JSON_HEADERS)
        release(payload)
        if err:
            self._raise(err, f"failed to delete data: {err.message}")

    def match(self, f: Optional[Filter] = None, lang: Optional[str] = None) -> Any:
        """
        Get the instances matching a filter.

        Example:
        ```python
        rows = obj.match({"price": {"gt": 10}, "color": "red"})
        ```
        """
        url = self._read_url(query=build_filter_query(f))
        url = _append_query(url, language_query(lang))
        res, err = self._client.get(url)
        if err:
            self._raise(err, "failed to get data")
        return Parser.parse_special_types(res)

    def get_file(self, instance_qid: str, file_qid: str, force_download: bool = False) -> Any:
        """
        Get a file attribute of an instance.

        Returns:
            The file description, or the live download stream when
            ``force_download`` is set
        """
        url = self._data_url(instance_qid) + "/files/" + file_qid
        if force_download:
            url += "?forcedownload=true"

        res, err = self._client.get(url)
        if err:
            self._raise(err, f"failed to get data: {err.message}")

        if force_download:
            res, err = self._client.execute(res["fileURL"], "GET",
                                            headers={"Content-Type": "application/octet-stream"},
                                            skip_parse=True, skip_auth=True)
            if err:
                self._raise(err, f"failed to get data: {err.message}")
        return res

    @staticmethod
    def _split_files(data: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Tuple[str, Any]]]:
        body = copy.copy(data)
        files = []
        for key, value in data.items():
            if _is_file(value):
                files.append((key, value))
                body[key] = {"name": os.path.basename(getattr(value, "name", "") or key), "size": stream_size(value)}
        return body, files

    def _upload_files(self, res: Any, files: List[Tuple[str, Any]]) -> Any:
        for api_name, file in files:
            file_resp = res[api_name]
            uploader = FileUploader(self._client, self.view_id, file_resp["uploadUrl"],
                                    file_resp["metafest"]["fileQid"], res["$qid"])
            uploader.upload(file)
            res[api_name] = file_resp["metafest"]
        return res

    def __repr__(self) -> str:
        return f"ListObject({self.object_api_name!r}, view_id={self.view_id!r})"


