"""Entity flag bits shared by vertices, triangles, groups and joints."""

from enum import IntFlag

from .ms3d_errors import InvalidFlagsError


class Flags(IntFlag):
    """Editor state bits stored in the first byte of most records."""
    NONE = 0

    SELECTED = 1 << 0
    HIDDEN = 1 << 1
    SELECTED2 = 1 << 2
    DIRTY = 1 << 3


# Per-entity subsets
VERTEX_FLAGS = Flags.SELECTED | Flags.HIDDEN | Flags.SELECTED2
TRIANGLE_FLAGS = Flags.SELECTED | Flags.HIDDEN | Flags.SELECTED2
GROUP_FLAGS = Flags.SELECTED | Flags.HIDDEN
JOINT_FLAGS = Flags.SELECTED | Flags.DIRTY


def convert_flags(bits, allowed, entity, offset=None):
    """Validate a raw flag byte against an entity's allowed mask.

    Args:
        bits: raw integer value (already truncated to the meaningful byte)
        allowed: Flags mask of bits the entity may carry
        entity: record kind, used in the error message
        offset: source offset of the record, for error context

    Returns:
        Flags value equal to ``bits``

    Raises:
        InvalidFlagsError: if any bit is unknown or outside ``allowed``
    """
    # Plain int: ~ on an IntFlag only inverts within its declared members.
    # Every mask is a subset of the declared bits, so unknown bits fail too.
    if bits & ~int(allowed):
        raise InvalidFlagsError(bits, entity, allowed, offset)
    return Flags(bits)
