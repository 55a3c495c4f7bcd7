"""Full MS3D binary file reader.

Reads a MilkShape 3D model (format version 4) section by section and
produces an immutable Model tree. Sections are read strictly in file order
because each one's size depends on counts or sub-version tags read before
it:

    header, vertices, triangles, groups, materials, key-frame data,
    joints, comments, [vertex ex-info, [joint ex-info, [model ex-info]]]

The three ex-info sections were added in later MilkShape releases. A file
that ends exactly before one of them decodes with that section, and every
one after it, marked absent.
"""

import logging
import struct

from . import ms3d_layouts as layouts
from .ms3d_constants import (
    MS3D_MAGIC, MS3D_VERSION,
    COMMENTS_SUB_VERSION, VERTEX_EX_SUB_VERSIONS,
    JOINT_EX_SUB_VERSION, MODEL_EX_SUB_VERSION,
    MAX_MODEL_COMMENTS,
)
from .ms3d_errors import (
    FormatError, InvalidCommentCountError, InvalidHeaderError,
    StringEncodingError, TruncatedError, UnsupportedVersionError,
)
from .ms3d_flags import convert_flags
from .ms3d_model import (
    Header, Vertex, Triangle, Group, Material, KeyFrameData,
    KeyFrameRot, KeyFramePos, Joint, Comment, Comments,
    VertexEx1, VertexEx2, VertexEx3, VertexExInfo,
    JointEx, JointExInfo, ModelEx, ModelExInfo, Model,
)
from .ms3d_options import DecodeOptions

_log = logging.getLogger("ms3d_reader")


def convert_string(raw, field="string", offset=None):
    """Decode a fixed-size byte slot holding an optional C string.

    The first NUL byte ends the string; without one the whole slot is
    used. The bytes must be valid UTF-8.
    """
    raw = bytes(raw)
    end = raw.find(b"\0")
    if end != -1:
        raw = raw[:end]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise StringEncodingError(field, raw, offset) from exc


class Ms3dReader:
    """Decodes one MS3D model from a ByteSource.

    Usage:
        reader = Ms3dReader(BufferSource(data))
        model = reader.read_model()

    A reader is single-use: it consumes its source.
    """

    def __init__(self, source, options=None):
        self.source = source
        self.options = options if options is not None else DecodeOptions()

    def read_model(self):
        """Read and validate the entire file.

        Returns:
            Model instance

        Raises:
            DecodeError: on truncated data or any format violation
        """
        header = self._read_header()
        vertices = self._read_vertices()
        triangles = self._read_triangles()
        groups = self._read_groups()
        materials = self._read_materials()
        key_frame_data = self._read_key_frame_data()
        joints = self._read_joints()
        comments = self._read_comments()

        vertex_ex_info = VertexExInfo()
        joint_ex_info = JointExInfo()
        model_ex_info = ModelExInfo()

        sub_version = self._read_tail_sub_version("vertex ex")
        if sub_version is not None:
            vertex_ex_info = self._read_vertex_ex_info(sub_version, len(vertices))
            sub_version = self._read_tail_sub_version("joint ex")
        if sub_version is not None:
            joint_ex_info = self._read_joint_ex_info(sub_version, len(joints))
            sub_version = self._read_tail_sub_version("model ex")
        if sub_version is not None:
            model_ex_info = self._read_model_ex_info(sub_version)

        return Model(
            header=header,
            vertices=vertices,
            triangles=triangles,
            groups=groups,
            materials=materials,
            key_frame_data=key_frame_data,
            joints=joints,
            comments=comments,
            vertex_ex_info=vertex_ex_info,
            joint_ex_info=joint_ex_info,
            model_ex_info=model_ex_info,
        )

    # ---- Core sections ----

    def _read_header(self):
        offset = self.source.offset
        raw = self._read_layout(layouts.HEADER)
        if raw.id != MS3D_MAGIC:
            raise InvalidHeaderError(MS3D_MAGIC, raw.id, offset)
        if raw.version != MS3D_VERSION:
            raise UnsupportedVersionError("MS3D version", raw.version, (MS3D_VERSION,), offset)
        return Header(magic=raw.id, version=raw.version)

    def _read_vertices(self):
        count = self._read_u16()
        vertices = self._read_list(count, self._read_vertex)
        _log.debug("Read %d vertices", count)
        return vertices

    def _read_vertex(self):
        offset = self.source.offset
        raw = self._read_layout(layouts.VERTEX)
        return Vertex(
            flags=convert_flags(raw.flags, Vertex.ALLOWED_FLAGS, "vertex", offset),
            vertex=raw.vertex,
            bone_id=raw.bone_id,
            reference_count=raw.reference_count,
        )

    def _read_triangles(self):
        count = self._read_u16()
        triangles = self._read_list(count, self._read_triangle)
        _log.debug("Read %d triangles", count)
        return triangles

    def _read_triangle(self):
        offset = self.source.offset
        raw = self._read_layout(layouts.TRIANGLE)
        normals = raw.vertex_normals
        return Triangle(
            # Stored as u16; the high byte is unused
            flags=convert_flags(raw.flags & 0xFF, Triangle.ALLOWED_FLAGS, "triangle", offset),
            vertex_indices=raw.vertex_indices,
            vertex_normals=(normals[0:3], normals[3:6], normals[6:9]),
            s=raw.s,
            t=raw.t,
            smoothing_group=raw.smoothing_group,
            group_index=raw.group_index,
        )

    def _read_groups(self):
        count = self._read_u16()
        groups = self._read_list(count, self._read_group)
        _log.debug("Read %d groups", count)
        return groups

    def _read_group(self):
        """Read a group: fixed prefix, triangle index array, fixed suffix."""
        offset = self.source.offset
        prefix = self._read_layout(layouts.GROUP_PREFIX)
        flags = convert_flags(prefix.flags, Group.ALLOWED_FLAGS, "group", offset)
        name = convert_string(prefix.name, "group name", offset)

        num_triangles = prefix.num_triangles
        data = self.source.next_exact(2 * num_triangles)
        triangle_indices = struct.unpack_from(f"<{num_triangles}H", data)

        suffix = self._read_layout(layouts.GROUP_SUFFIX)
        return Group(
            flags=flags,
            name=name,
            triangle_indices=triangle_indices,
            material_index=suffix.material_index,
        )

    def _read_materials(self):
        count = self._read_u16()
        materials = self._read_list(count, self._read_material)
        _log.debug("Read %d materials", count)
        return materials

    def _read_material(self):
        offset = self.source.offset
        raw = self._read_layout(layouts.MATERIAL)
        return Material(
            name=convert_string(raw.name, "material name", offset),
            ambient=raw.ambient,
            diffuse=raw.diffuse,
            specular=raw.specular,
            emissive=raw.emissive,
            shininess=raw.shininess,
            transparency=raw.transparency,
            mode=raw.mode,
            texture=convert_string(raw.texture, "material texture", offset),
            alphamap=convert_string(raw.alphamap, "material alphamap", offset),
        )

    def _read_key_frame_data(self):
        raw = self._read_layout(layouts.KEY_FRAME_DATA)
        return KeyFrameData(
            animation_fps=raw.animation_fps,
            current_time=raw.current_time,
            total_frames=raw.total_frames,
        )

    def _read_joints(self):
        count = self._read_u16()
        joints = self._read_list(count, self._read_joint)
        _log.debug("Read %d joints", count)
        return joints

    def _read_joint(self):
        offset = self.source.offset
        prefix = self._read_layout(layouts.JOINT_PREFIX)
        flags = convert_flags(prefix.flags, Joint.ALLOWED_FLAGS, "joint", offset)
        name = convert_string(prefix.name, "joint name", offset)
        parent_name = convert_string(prefix.parent_name, "joint parent name", offset)

        key_frames_rot = self._read_list(prefix.num_key_frames_rot, self._read_key_frame_rot)
        key_frames_trans = self._read_list(prefix.num_key_frames_trans, self._read_key_frame_pos)

        return Joint(
            flags=flags,
            name=name,
            parent_name=parent_name,
            rotation=prefix.rotation,
            position=prefix.position,
            key_frames_rot=key_frames_rot,
            key_frames_trans=key_frames_trans,
        )

    def _read_key_frame_rot(self):
        raw = self._read_layout(layouts.KEY_FRAME_ROT)
        return KeyFrameRot(time=raw.time, rotation=raw.rotation)

    def _read_key_frame_pos(self):
        raw = self._read_layout(layouts.KEY_FRAME_POS)
        return KeyFramePos(time=raw.time, position=raw.position)

    # ---- Comments ----

    def _read_comments(self):
        """Read the comments block.

        Format:
            i32 sub-version (1)
            u32 group comment count, then that many comments
            i32 material comment count, then that many comments
            i32 joint comment count, then that many comments
            i32 model comment count (0 or 1), then that many comments

        Each comment is (i32 index, i32 length) followed by ``length``
        bytes of UTF-8 text.
        """
        offset = self.source.offset
        sub_version = self._read_i32()
        if sub_version != COMMENTS_SUB_VERSION:
            raise UnsupportedVersionError(
                "comments sub-version", sub_version, (COMMENTS_SUB_VERSION,), offset
            )

        group_comments = self._read_list(self._read_u32(), self._read_comment)
        material_comments = self._read_list(
            self._read_comment_count("material"), self._read_comment
        )
        joint_comments = self._read_list(
            self._read_comment_count("joint"), self._read_comment
        )

        offset = self.source.offset
        num_model_comments = self._read_comment_count("model")
        if num_model_comments > MAX_MODEL_COMMENTS:
            raise InvalidCommentCountError("model", num_model_comments, offset)
        model_comment = self._read_comment() if num_model_comments else None

        _log.debug(
            "Read comments: %d group, %d material, %d joint, %d model",
            len(group_comments), len(material_comments), len(joint_comments),
            num_model_comments,
        )
        return Comments(
            sub_version=sub_version,
            group_comments=group_comments,
            material_comments=material_comments,
            joint_comments=joint_comments,
            model_comment=model_comment,
        )

    def _read_comment_count(self, category):
        offset = self.source.offset
        count = self._read_i32()
        if count < 0:
            raise InvalidCommentCountError(category, count, offset)
        return count

    def _read_comment(self):
        offset = self.source.offset
        prefix = self._read_layout(layouts.COMMENT_PREFIX)
        if prefix.comment_length < 0:
            raise FormatError(f"Negative comment length {prefix.comment_length}", offset)
        raw = bytes(self.source.next_exact(prefix.comment_length))
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StringEncodingError("comment", raw, offset) from exc
        return Comment(index=prefix.index, comment=text)

    # ---- Ex-info sections ----

    def _read_tail_sub_version(self, section):
        """Read the sub-version tag opening an optional trailing section.

        Returns:
            the tag, or None if the source ended exactly before it
        """
        try:
            return self._read_i32()
        except TruncatedError as exc:
            if exc.available or self.options.require_ex_info:
                raise
            _log.info("No %s info in file; remaining ex-info sections absent", section)
            return None

    def _read_vertex_ex_info(self, sub_version, count):
        offset = self.source.offset - layouts.I32.size
        layout_and_type = {
            1: (layouts.VERTEX_EX_1, VertexEx1),
            2: (layouts.VERTEX_EX_2, VertexEx2),
            3: (layouts.VERTEX_EX_3, VertexEx3),
        }.get(sub_version)
        if layout_and_type is None:
            raise UnsupportedVersionError(
                "vertex ex sub-version", sub_version, VERTEX_EX_SUB_VERSIONS, offset
            )
        layout, record_type = layout_and_type

        vertex_ex = self._read_list(
            count, lambda: record_type(*self._read_layout(layout))
        )
        _log.debug("Read %d vertex ex records (sub-version %d)", count, sub_version)
        return VertexExInfo(sub_version=sub_version, vertex_ex=vertex_ex)

    def _read_joint_ex_info(self, sub_version, count):
        offset = self.source.offset - layouts.I32.size
        if sub_version != JOINT_EX_SUB_VERSION:
            raise UnsupportedVersionError(
                "joint ex sub-version", sub_version, (JOINT_EX_SUB_VERSION,), offset
            )
        joint_ex = self._read_list(
            count, lambda: JointEx(color=self._read_layout(layouts.JOINT_EX).color)
        )
        _log.debug("Read %d joint ex records", count)
        return JointExInfo(sub_version=sub_version, joint_ex=joint_ex)

    def _read_model_ex_info(self, sub_version):
        offset = self.source.offset - layouts.I32.size
        if sub_version != MODEL_EX_SUB_VERSION:
            raise UnsupportedVersionError(
                "model ex sub-version", sub_version, (MODEL_EX_SUB_VERSION,), offset
            )
        raw = self._read_layout(layouts.MODEL_EX)
        return ModelExInfo(
            sub_version=sub_version,
            model_ex=ModelEx(
                joint_size=raw.joint_size,
                transparency_mode=raw.transparency_mode,
                alpha_ref=raw.alpha_ref,
            ),
        )

    # ---- Primitives ----

    def _read_layout(self, layout):
        return layout.unpack(self.source.next_exact(layout.size))

    def _read_list(self, count, read_one):
        return tuple(read_one() for _ in range(count))

    def _read_u16(self):
        return layouts.U16.unpack(self.source.next_exact(layouts.U16.size))[0]

    def _read_u32(self):
        return layouts.U32.unpack(self.source.next_exact(layouts.U32.size))[0]

    def _read_i32(self):
        return layouts.I32.unpack(self.source.next_exact(layouts.I32.size))[0]
