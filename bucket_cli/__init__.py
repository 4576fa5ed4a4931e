"""bucket-cli - Manage bucket profiles and upload files to cloud object storage."""

import logging

from bucket_cli.cli import cli
from bucket_cli.keys import generate_object_key, generate_object_url
from bucket_cli.profiles import JsonFileProfileStore, MemoryProfileStore, Profile
from bucket_cli.upload import put_file, upload_folder

__all__ = [
    "JsonFileProfileStore",
    "MemoryProfileStore",
    "Profile",
    "cli",
    "generate_object_key",
    "generate_object_url",
    "put_file",
    "upload_folder",
]

# Library modules log; only the CLI's --verbose flag installs a handler
logging.getLogger(__name__).addHandler(logging.NullHandler())
