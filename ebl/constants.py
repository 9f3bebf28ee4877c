# Magic and version
MAGIC = b"EBL0"  # 4 bytes: "EBL0"
VERSION = 1

PREAMBLE_SIZE = len(MAGIC) + 1


# Record field limits
MAX_NONCE_LEN = 64
MAX_ID_LEN = 256
MAX_BLOB_LEN = 100 * 1024 * 1024 * 1024  # 100 GiB


# Field names used in error context
FIELD_MAGIC = "magic"
FIELD_VERSION = "version"
FIELD_NONCE_LEN = "nonce_len"
FIELD_NONCE = "nonce"
FIELD_ID_LEN = "id_len"
FIELD_ID = "id"
FIELD_BLOB_LEN = "blob_len"
FIELD_BLOB = "blob"


DEFAULT_COPY_CHUNK = 1_048_576  # 1 MiB
