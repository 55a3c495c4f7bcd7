"""Constants for the MS3D binary format."""

# File identifier at offset 0
MS3D_MAGIC = b"MS3D000000"

# Only format revision understood by the reader
MS3D_VERSION = 4

# Fixed-size byte slots holding optional NUL-terminated strings
NAME_SIZE = 32
PATH_SIZE = 128

# Sub-version tags of the trailing sections
COMMENTS_SUB_VERSION = 1
VERTEX_EX_SUB_VERSIONS = (1, 2, 3)
JOINT_EX_SUB_VERSION = 1
MODEL_EX_SUB_VERSION = 1

# Sub-version value of an ex-info section missing from the file
ABSENT_SUB_VERSION = 0

# Per-section count limits (u16 prefixes)
MAX_SECTION_COUNT = 0xFFFF

# Only one model comment may follow its count field
MAX_MODEL_COMMENTS = 1
