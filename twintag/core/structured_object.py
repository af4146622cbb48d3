"""
Schema management of structured data objects.

A ``StructuredObject`` describes an object of a project: its attributes,
key attribute and access rules. Instances are obtained through
``Project.new_object`` and ``Project.get_object``.
"""
import enum
from typing import Any, Dict, List, Mapping, Optional, Union

from twintag.core.common import logger
from twintag.network.client import Client
from twintag.network.streams import release


class AttributeType(str, enum.Enum):
    """Types of object attributes."""

    STRING = "string"
    NUMBER = "number"
    DATETIME = "datetime"
    RICHTEXT = "richtext"
    FILE = "file"
    BOOLEAN = "boolean"


# Wire codes of attribute types; unknown names map to string
_TYPE_CODES = {
    AttributeType.STRING: 1,
    AttributeType.NUMBER: 2,
    AttributeType.DATETIME: 3,
    AttributeType.RICHTEXT: 4,
    AttributeType.FILE: 5,
    AttributeType.BOOLEAN: 6,
}


def type_code(attribute_type: Optional[Union[str, AttributeType]]) -> int:
    """Return the wire code for an attribute type name."""
    if attribute_type is None:
        return 1
    try:
        return _TYPE_CODES[AttributeType(str(getattr(attribute_type, "value", attribute_type)).lower())]
    except ValueError:
        return 1


class StructuredObject:
    """
    A structured data object of a project.

    Attributes:
        qid: Object qid
        schema_scope: Project the object belongs to
        name: Display name
        api_name: Name used in API paths
        is_list: Whether a bag holds many instances of the object
        is_global: Whether the object is shared by all bags of the project
        key_property: Attribute used as instance key, if any
        access: Access definition per operation
    """

    def __init__(self, client: Client, use_caching: bool = False):
        self._client = client
        self._use_caching = use_caching
        self.qid: Optional[str] = None
        self.schema_scope: Optional[str] = None
        self.name = ""
        self.api_name = ""
        self.is_list = False
        self.is_global = False
        self.key_property: Optional[str] = None
        self.access: Optional[Dict[str, List[str]]] = None

    @classmethod
    def from_response(cls, client: Client, data: Mapping[str, Any], use_caching: bool = False) -> "StructuredObject":
        obj = cls(client, use_caching)
        obj._update(data)
        return obj

    def _update(self, data: Mapping[str, Any]) -> None:
        self.qid = data.get("$qid", self.qid)
        self.schema_scope = data.get("$schemaScope", self.schema_scope)
        self.name = data.get("name", self.name)
        self.api_name = data.get("apiName", self.api_name)
        self.is_list = data.get("isList", self.is_list)
        self.is_global = data.get("isGlobal", self.is_global)
        self.key_property = data.get("keyProperty", self.key_property)
        self.access = data.get("access", self.access)

    def _admin_url(self, path: str) -> str:
        return f"{self._client.environment.admin_host}/api/v1{path}"

    def get_url(self, url: str, schema_scope: Optional[str] = None) -> str:
        """
        Build a read URL, through the caching host when caching is enabled.

        Args:
            url: Path with query, ending in ``&`` or ``?``
            schema_scope: Project scope appended for the caching host
        """
        if self._use_caching:
            return f"{self._client.environment.caching_host}{url}schemaScope={schema_scope}"
        return self._admin_url(url)

    def get_attributes(self) -> List[Dict[str, Any]]:
        """Get all attributes of the object."""
        url = self.get_url(f"/property?object={self.api_name}&", self.schema_scope)
        res, err = self._client.get(url)
        if err:
            err.set_message(f"failed to get attributes: {err.message}")
            raise err
        return res

    def get_attribute(self, attribute_name: str) -> Dict[str, Any]:
        """Get one attribute by name."""
        url = self.get_url(f"/property?object={self.api_name}&property={attribute_name}&", self.schema_scope)
        res, err = self._client.get(url)
        if err:
            err.set_message(f"failed to get attribute for {attribute_name}: {err.message}")
            raise err
        return res

    def new_attribute(self, attribute_name: str, attribute_type: Optional[Union[str, AttributeType]] = None,
                      position_before: Optional[str] = None) -> Dict[str, Any]:
        """
        Create an attribute.

        Args:
            attribute_name: Name of the new attribute
            attribute_type: Attribute type, string by default
            position_before: Name of the attribute to insert before
        """
        req = {
            "$object": self.api_name,
            "name": attribute_name,
            "type": type_code(attribute_type),
            "nextProperty": position_before,
        }
        res, err = self._client.put(self._admin_url("/property"), req)
        if err:
            err.set_message(f"failed to create new attribute: {err.message}")
            raise err
        return res

    def delete_attribute(self, attribute_name: str) -> None:
        req = {"$object": self.api_name, "name": attribute_name}
        payload, err = self._client.delete(self._admin_url("/property"), req)
        release(payload)
        if err:
            err.set_message(f"failed to delete attribute: {attribute_name}: {err.message}")
            raise err

    def update_attribute(self, attribute: Mapping[str, Any]) -> Dict[str, Any]:
        """Rename or move an attribute; ``attribute`` must carry its ``$qid``."""
        if not attribute.get("$qid"):
            raise ValueError("$qid is not provided in the request object")
        req = {
            "$object": self.api_name,
            "$qid": attribute["$qid"],
            "name": attribute.get("name"),
            "nextProperty": attribute.get("nextProperty"),
            "apiName": attribute.get("apiName"),
        }
        res, err = self._client.put(self._admin_url("/property"), req)
        if err:
            err.set_message(f"failed to update attribute: {attribute.get('name')}: {err.message}")
            raise err
        return res

    def _update_object(self, req: Dict[str, Any], context: str) -> "StructuredObject":
        res, err = self._client.put(self._admin_url("/object"), req)
        if err:
            err.set_message(f"{context}: {err.message}")
            raise err
        self._update(res)
        return self

    def rename(self, new_name: str) -> "StructuredObject":
        return self._update_object({"$qid": self.qid, "name": new_name},
                                   "failed to rename structured object")

    def update_key_attribute(self, attribute_name: str) -> "StructuredObject":
        return self._update_object({"$qid": self.qid, "keyProperty": attribute_name},
                                   "failed to update key property of object")

    def update_access(self, access: Mapping[str, Any]) -> "StructuredObject":
        return self._update_object({"$qid": self.qid, "access": dict(access)},
                                   "failed to update access of object")

    def add_translation_attribute(self, lang_attributes: Optional[Mapping[str, str]],
                                  parent: str) -> List[Dict[str, Any]]:
        """
        Add one string attribute per language as translations of ``parent``.

        Args:
            lang_attributes: Mapping of language to attribute name
            parent: Name of the attribute being translated

        Returns:
            The attributes that were created; failed languages are logged and skipped
        """
        created = []
        for language, column_name in (lang_attributes or {}).items():
            req = {
                "$object": self.api_name,
                "$schemaScope": self.schema_scope,
                "name": column_name,
                "parent": parent,
                "language": language,
                "type": type_code(AttributeType.STRING),
            }
            res, err = self._client.put(self._admin_url("/property"), req)
            if err:
                logger.warning(f"failed to add translation attribute {column_name}: {err.message}")
                continue
            if res:
                created.append(res)
        return created

    def __repr__(self) -> str:
        return f"StructuredObject(api_name={self.api_name!r}, qid={self.qid!r})"
