"""Utility modules."""
from api.utils.file_utils import save_upload_file
from api.utils.json_utils import json_dump, json_load, read_json_file, write_json_file
from api.utils.time_utils import from_epoch_ms, parse_iso_timestamp, to_epoch_ms
from api.utils.validation import validate_id, validate_upload_name

__all__ = [
    "save_upload_file",
    "json_dump",
    "json_load",
    "read_json_file",
    "write_json_file",
    "from_epoch_ms",
    "parse_iso_timestamp",
    "to_epoch_ms",
    "validate_id",
    "validate_upload_name",
]
