"""
Projects: bags, objects and languages managed with a project API key.

```python
project = Project("<project API key>")
view = project.create_bag()
view.set_metadata({"name": "Alice"})
```
"""
import enum
from typing import Any, Dict, List, Optional

import jwt

from twintag.config.environment import Environment
from twintag.core.common import logger
from twintag.core.list_object import ListObject, language_query
from twintag.core.structured_object import StructuredObject
from twintag.core.view import View, create_bag
from twintag.network.client import Client
from twintag.network.streams import release

_JSON_HEADERS = {"Content-Type": "application/json"}


class BagType(str, enum.Enum):
    """Types of bag, used in object access definitions."""

    DOWNLOAD = "download"
    UPLOAD = "upload"
    UPLOAD_DOWNLOAD = "upload-download"
    OWNER = "owner"


Access = Dict[str, List[BagType]]
"""
Bag types allowed per operation (``read``, ``insert``, ``update``, ``delete``).

Example:
```python
{"read": [BagType.DOWNLOAD, BagType.OWNER]}
```
"""


def project_id_from_key(api_key: str) -> str:
    """
    Extract the ``ProjectId`` claim from a project API key.

    Returns:
        The project id, empty if the key is not a JWT carrying one
    """
    try:
        claim = jwt.decode(api_key, options={"verify_signature": False})
    except jwt.DecodeError as e:
        logger.warning(f"Could not decode project API key claim: {e}")
        return ""
    return claim.get("ProjectId") or ""


class Project:
    """
    A Twintag project.

    The API key found on the project page authorizes every call made
    through the project, including the views it hands out.
    """

    def __init__(self, api_key: str, environment: Optional[Environment] = None):
        self.api_key = api_key
        self._client = Client(api_key, environment=environment)
        self._project_id = ""
        self._use_caching = False

    @property
    def environment(self) -> Environment:
        return self._client.environment

    @property
    def project_id(self) -> str:
        return self._project_id

    def use_caching(self, value: bool) -> None:
        """Route reads through the caching host, scoped by the key's project id."""
        self._use_caching = value
        self._project_id = project_id_from_key(self.api_key)

    def _admin_url(self, path: str) -> str:
        return f"{self.environment.admin_host}/api/v1{path}"

    def _read_url(self, path: str, argument_preset: bool, lang_param: str = "") -> str:
        if self._use_caching:
            url = f"{self.environment.caching_host}{path}"
            url += ("&" if argument_preset else "?") + f"schemaScope={self._project_id}"
            return url + ("&" + lang_param if lang_param else "")
        url = self._admin_url(path)
        if lang_param:
            url += ("&" if argument_preset else "?") + lang_param
        return url

    def create_bag(self) -> View:
        """Create a bag linked to the project."""
        return create_bag(client=self._client, project=self)

    def get_view(self, qid: str) -> View:
        """
        Get a view with project-level privileges; the API key authorizes
        all of its calls.
        """
        return View(qid, client=self._client, project=self)

    def get_metadata(self, lang: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get the metadata of all bags of the project.

        Args:
            lang: ``all`` or any language of the project
        """
        url = self._read_url("/data/metadata", False, language_query(lang))
        res, err = self._client.get(url)
        if err:
            err.set_message("failed to get metadata")
            raise err
        return res

    def new_object(self, object_name: str, object_api_name: str = "", is_list: bool = False,
                   is_global: bool = False, key_property: Optional[str] = None,
                   access: Optional[Access] = None) -> StructuredObject:
        """
        Create an object in the project.

        Args:
            object_name: Display name
            object_api_name: Name used in API paths, derived by the service when empty
            is_list: Whether a bag holds many instances
            is_global: Whether the object is shared by all bags
            key_property: Attribute used as instance key
            access: Bag types allowed per operation
        """
        req = {
            "name": object_name,
            "apiName": object_api_name,
            "isList": bool(is_list),
            "isGlobal": bool(is_global),
            "keyProperty": key_property or "",
            "access": access,
        }
        res, err = self._client.put(self._admin_url("/object"), req)
        if err:
            err.set_message("failed to create object")
            raise err
        return StructuredObject.from_response(self._client, res, self._use_caching)

    def get_object(self, object_api_name: str) -> StructuredObject:
        res, err = self._client.get(self._read_url(f"/object?object={object_api_name}", True))
        if err:
            err.set_message("failed to get object")
            raise err
        return StructuredObject.from_response(self._client, res, self._use_caching)

    def delete_object(self, object_api_name: str) -> None:
        payload, err = self._client.delete(self._admin_url(f"/object?object={object_api_name}"),
                                           {"apiName": object_api_name})
        release(payload)
        if err:
            err.set_message("failed to delete object")
            raise err

    def delete_twintag(self, view_id: str) -> None:
        """Delete a twintag of the project along with its metadata."""
        data = View(view_id, environment=self.environment).data()
        payload, err = self._client.delete(f"{self.environment.host}/api/v1/twintags/{data.get('bagQid')}")
        release(payload)
        if err:
            err.set_message("failed to delete project twintag")
            raise err

    def object(self, object_api_name: str) -> ListObject:
        """Get the data of one object across all bags of the project."""
        return ListObject(object_api_name, self._client, project_id=self._project_id,
                          use_caching=self._use_caching)

    def get_bags(self) -> List[Dict[str, Any]]:
        res, err = self._client.get(self._admin_url("/twintags"))
        if err:
            err.set_message("failed to get bag details for the project")
            raise err
        return res

    def send_to_subscribers(self, request: Dict[str, Any]) -> Any:
        """Send a custom email to the subscribers of the project."""
        res, err = self._client.post(self._admin_url("/subscribers/send"), request, headers=_JSON_HEADERS)
        if err:
            err.set_message("failed to notify to all the subsribers")
            raise err
        return res

    # Languages

    def set_allowed_languages(self, languages: List[str], default_language: Optional[str] = None) -> Any:
        """
        Set the languages of the project, and optionally its default one.

        ```python
        project.set_allowed_languages(["en", "nl"], "nl")
        ```
        """
        res, err = self._client.put(self._admin_url("/project/allowedLanguages"),
                                    {"allowedLanguages": languages})
        if err:
            err.set_message(f"failed to add languages: {err.message}")
            raise err
        if default_language:
            self.set_default_language(default_language)
        return res

    def get_allowed_languages(self) -> Any:
        res, err = self._client.get(self._admin_url("/project/allowedLanguages"))
        if err:
            err.set_message(f"failed to get allowed languages: {err.message}")
            raise err
        return res

    def set_default_language(self, language: str) -> Any:
        res, err = self._client.put(self._admin_url("/project/defaultLanguage"), {"defaultLanguage": language})
        if err:
            err.set_message(f"failed to set default language: {err.message}")
            raise err
        return res

    def get_default_language(self) -> Any:
        res, err = self._client.get(self._admin_url("/project/defaultLanguage"))
        if err:
            err.set_message(f"failed to get default language: {err.message}")
            raise err
        return res

    def __repr__(self) -> str:
        return f"Project(project_id={self._project_id!r}, caching={self._use_caching})"
