from .ids import new_file_id, new_folder_id, new_item_id
from .mime import DEFAULT_MIME, decode_data_url, encode_data_url, guess_file_type
from .time import from_wire, normalize_dt, now_utc, parse_rfc3339, to_rfc3339

__all__ = [
    "new_item_id",
    "new_file_id",
    "new_folder_id",
    "DEFAULT_MIME",
    "guess_file_type",
    "encode_data_url",
    "decode_data_url",
    "now_utc",
    "parse_rfc3339",
    "to_rfc3339",
    "normalize_dt",
    "from_wire",
]
