"""Byte-exact layouts of the on-disk MS3D records.

All records are little-endian and packed: there is no padding between
fields, so numeric fields may start at any byte offset. Every layout is
compiled to a ``struct.Struct`` with the ``<`` prefix, which disables
native alignment, and values are copied out with ``unpack_from``.
"""

import re
import struct
from collections import namedtuple

from .ms3d_constants import NAME_SIZE, PATH_SIZE


_CODE_RE = re.compile(r"(\d*)([a-zA-Z?])")


class RawLayout:
    """A fixed-size record made of named struct fields.

    Each field is a ``(name, code)`` pair using struct format codes. A
    repeat count on a numeric code (``"3f"``) groups the values into a
    tuple; ``"32s"`` stays a single bytes value.

    Usage:
        VERTEX = RawLayout("Vertex", [("flags", "B"), ("vertex", "3f")])
        record = VERTEX.unpack(data)
        record.vertex  # (x, y, z)
    """

    def __init__(self, name, fields):
        self.name = name
        self.fields = list(fields)

        # Number of flat struct values per field; None = scalar
        self._counts = []
        for field_name, code in self.fields:
            match = _CODE_RE.fullmatch(code)
            if match is None:
                raise ValueError(f"Bad format code {code!r} for {name}.{field_name}")
            repeat, kind = match.groups()
            if repeat and kind not in "sp":
                self._counts.append(int(repeat))
            else:
                self._counts.append(None)

        self.struct = struct.Struct("<" + "".join(code for _, code in self.fields))
        self.size = self.struct.size
        self.record_type = namedtuple(name, [field_name for field_name, _ in self.fields])

    def unpack(self, data, offset=0):
        """Decode one record from ``data`` starting at ``offset``."""
        flat = self.struct.unpack_from(data, offset)
        values = []
        pos = 0
        for count in self._counts:
            if count is None:
                values.append(flat[pos])
                pos += 1
            else:
                values.append(tuple(flat[pos:pos + count]))
                pos += count
        return self.record_type(*values)

    def pack(self, *values):
        """Encode one record; values follow field order, grouped as in unpack."""
        flat = []
        for value, count in zip(values, self._counts):
            if count is None:
                flat.append(value)
            else:
                if len(value) != count:
                    raise ValueError(
                        f"{self.name}: expected {count} values, got {len(value)}"
                    )
                flat.extend(value)
        return self.struct.pack(*flat)

    def __repr__(self):
        return f"RawLayout({self.name}, size={self.size})"


HEADER = RawLayout("Header", [
    ("id", "10s"),
    ("version", "i"),
])

VERTEX = RawLayout("Vertex", [
    ("flags", "B"),
    ("vertex", "3f"),
    ("bone_id", "b"),
    ("reference_count", "B"),
])

# Flags are stored as u16 but only the low byte carries meaning.
# The 3x3 normals are stored flat; the reader regroups them per corner.
TRIANGLE = RawLayout("Triangle", [
    ("flags", "H"),
    ("vertex_indices", "3H"),
    ("vertex_normals", "9f"),
    ("s", "3f"),
    ("t", "3f"),
    ("smoothing_group", "B"),
    ("group_index", "B"),
])

GROUP_PREFIX = RawLayout("GroupPrefix", [
    ("flags", "B"),
    ("name", f"{NAME_SIZE}s"),
    ("num_triangles", "H"),
])

GROUP_SUFFIX = RawLayout("GroupSuffix", [
    ("material_index", "b"),
])

MATERIAL = RawLayout("Material", [
    ("name", f"{NAME_SIZE}s"),
    ("ambient", "4f"),
    ("diffuse", "4f"),
    ("specular", "4f"),
    ("emissive", "4f"),
    ("shininess", "f"),
    ("transparency", "f"),
    ("mode", "B"),
    ("texture", f"{PATH_SIZE}s"),
    ("alphamap", f"{PATH_SIZE}s"),
])

KEY_FRAME_DATA = RawLayout("KeyFrameData", [
    ("animation_fps", "f"),
    ("current_time", "f"),
    ("total_frames", "i"),
])

KEY_FRAME_ROT = RawLayout("KeyFrameRot", [
    ("time", "f"),
    ("rotation", "3f"),
])

KEY_FRAME_POS = RawLayout("KeyFramePos", [
    ("time", "f"),
    ("position", "3f"),
])

JOINT_PREFIX = RawLayout("JointPrefix", [
    ("flags", "B"),
    ("name", f"{NAME_SIZE}s"),
    ("parent_name", f"{NAME_SIZE}s"),
    ("rotation", "3f"),
    ("position", "3f"),
    ("num_key_frames_rot", "H"),
    ("num_key_frames_trans", "H"),
])

COMMENT_PREFIX = RawLayout("CommentPrefix", [
    ("index", "i"),
    ("comment_length", "i"),
])

VERTEX_EX_1 = RawLayout("VertexEx1", [
    ("bone_ids", "3b"),
    ("weights", "3B"),
])

VERTEX_EX_2 = RawLayout("VertexEx2", [
    ("bone_ids", "3b"),
    ("weights", "3B"),
    ("extra", "I"),
])

VERTEX_EX_3 = RawLayout("VertexEx3", [
    ("bone_ids", "3b"),
    ("weights", "3B"),
    ("extra", "2I"),
])

JOINT_EX = RawLayout("JointEx", [
    ("color", "3f"),
])

MODEL_EX = RawLayout("ModelEx", [
    ("joint_size", "f"),
    ("transparency_mode", "i"),
    ("alpha_ref", "f"),
])

# Scalar prefixes (section counts, sub-version tags)
U16 = struct.Struct("<H")
U32 = struct.Struct("<I")
I32 = struct.Struct("<i")
