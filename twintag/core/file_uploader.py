"""
Upload of files attached to structured data instances.
"""
from typing import Any

from twintag.core.common import logger
from twintag.core.files import upload_source
from twintag.network.client import Client
from twintag.network.streams import release
from twintag.utils.serializer import serialize_to_json


class FileUploader:
    """
    Sends a file to the signed storage URL returned for a file attribute
    and reports the upload as complete.
    """

    def __init__(self, client: Client, view_id: str, signed_url: str, file_qid: str, instance_qid: str):
        """
        Args:
            client: Transport of the owning list object
            view_id: View the instance belongs to, empty for project-level data
            signed_url: Pre-signed storage upload URL
            file_qid: Qid of the file being uploaded
            instance_qid: Qid of the structured data instance
        """
        self._client = client
        self.view_id = view_id
        self.signed_url = signed_url
        self.file_qid = file_qid
        self.instance_qid = instance_qid

    def upload(self, file: Any) -> None:
        """
        Upload a file (path, bytes or binary file object) to its attribute.
        """
        self._upload_to_storage(file)
        self._end_upload()

    def _upload_to_storage(self, file: Any) -> None:
        with upload_source(file, name=self.file_qid) as source:
            payload, err = self._client.execute(self.signed_url, "PUT", headers=source.headers,
                                                body=source.body, skip_parse=True, skip_auth=True)
        release(payload)
        if err:
            err.set_message(f"failed to upload file: {err.message}")
            raise err
        logger.debug(f"Uploaded {source.size} bytes for file {self.file_qid}")

    def _end_upload(self) -> None:
        body = serialize_to_json({"fileQid": self.file_qid, "fileContext": self.instance_qid})
        # Completion responses carry no document to decode
        payload, err = self._client.execute(self._file_url() + "/end", "PUT",
                                            headers={"Content-Type": "application/json"},
                                            body=body, skip_parse=True)
        release(payload)
        if err:
            err.set_message(f"failed to complete file upload: {err.message}")
            raise err

    def _file_url(self) -> str:
        env = self._client.environment
        if self.view_id:
            return f"{env.host}/api/v1/views/{self.view_id}/data/files"
        return f"{env.admin_host}/api/v1/data/files"
