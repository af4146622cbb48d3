"""
Twintag SDK main components.

This package contains the resources of the SDK: views into bags,
projects and their structured data, and path-oriented file storage.
"""
from twintag.core.common import (
    TwintagError,
    ErrorKind,
    ErrorValue,
    BagNotCreatedError,
    ViewNotInProjectError
)
from twintag.core.files import FileInfo, FILE_MODE, FOLDER_MODE
from twintag.core.parser import Parser
from twintag.core.virtual import VirtualFile, Link
from twintag.core.file_uploader import FileUploader
from twintag.core.list_object import ListObject, build_filter_query
from twintag.core.structured_object import StructuredObject, AttributeType
from twintag.core.view import View, create_bag
from twintag.core.project import Project, BagType, Access
from twintag.core.twintag import Twintag
from twintag.core.folder import Folder
from twintag.core.storage_bag import StorageBag

__all__ = [
    'TwintagError',
    'ErrorKind',
    'ErrorValue',
    'BagNotCreatedError',
    'ViewNotInProjectError',
    'FileInfo',
    'FILE_MODE',
    'FOLDER_MODE',
    'Parser',
    'VirtualFile',
    'Link',
    'FileUploader',
    'ListObject',
    'build_filter_query',
    'StructuredObject',
    'AttributeType',
    'View',
    'create_bag',
    'Project',
    'BagType',
    'Access',
    'Twintag',
    'Folder',
    'StorageBag'
]
