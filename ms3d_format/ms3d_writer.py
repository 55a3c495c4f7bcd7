"""MS3D binary file serializer.

Writes a Model back to the on-disk layout, section by section, in the same
order the reader consumes them. This is the exact inverse of ms3d_reader.py:
decoding the output of Ms3dWriter yields a Model equal to the input.
"""

import logging
import struct

from . import ms3d_layouts as layouts
from .ms3d_constants import NAME_SIZE, PATH_SIZE, MAX_SECTION_COUNT

_log = logging.getLogger("ms3d_writer")


def pack_string(text, size, field="string"):
    """Encode ``text`` into a NUL-padded fixed-size slot.

    A value that exactly fills the slot is written without terminator.

    Raises:
        ValueError: if the UTF-8 encoding is longer than ``size`` bytes or
            contains a NUL byte
    """
    data = text.encode("utf-8")
    if b"\0" in data:
        raise ValueError(f"{field} contains a NUL character: {text!r}")
    if len(data) > size:
        raise ValueError(f"{field} too long: {len(data)} bytes > {size}")
    return data.ljust(size, b"\0")


class Ms3dWriter:
    """Serializes a decoded Model.

    Usage:
        writer = Ms3dWriter(model)
        data = writer.to_bytes()
        writer.write("output.ms3d")
    """

    def __init__(self, model):
        self.model = model

    def to_bytes(self):
        """Serialize the model.

        Returns:
            bytes of the complete file

        Raises:
            ValueError: if the model holds values the format cannot store
        """
        model = self.model
        parts = [
            layouts.HEADER.pack(model.header.magic, model.header.version),
            self._serialize_vertices(),
            self._serialize_triangles(),
            self._serialize_groups(),
            self._serialize_materials(),
            self._serialize_key_frame_data(),
            self._serialize_joints(),
            self._serialize_comments(),
            self._serialize_ex_info(),
        ]
        data = b"".join(parts)
        _log.debug("Serialized model: %d bytes", len(data))
        return data

    def write(self, filepath):
        """Serialize and write the complete file to disk."""
        data = self.to_bytes()
        with open(filepath, "wb") as f:
            f.write(data)

    def _serialize_vertices(self):
        vertices = self.model.vertices
        out = [self._pack_count(len(vertices), "vertices")]
        for v in vertices:
            out.append(layouts.VERTEX.pack(
                int(v.flags), v.vertex, v.bone_id, v.reference_count,
            ))
        return b"".join(out)

    def _serialize_triangles(self):
        triangles = self.model.triangles
        out = [self._pack_count(len(triangles), "triangles")]
        for tri in triangles:
            normals = tuple(c for normal in tri.vertex_normals for c in normal)
            out.append(layouts.TRIANGLE.pack(
                int(tri.flags), tri.vertex_indices, normals, tri.s, tri.t,
                tri.smoothing_group, tri.group_index,
            ))
        return b"".join(out)

    def _serialize_groups(self):
        groups = self.model.groups
        out = [self._pack_count(len(groups), "groups")]
        for group in groups:
            indices = group.triangle_indices
            out.append(layouts.GROUP_PREFIX.pack(
                int(group.flags),
                pack_string(group.name, NAME_SIZE, "group name"),
                self._check_count(len(indices), "group triangles"),
            ))
            out.append(struct.pack(f"<{len(indices)}H", *indices))
            out.append(layouts.GROUP_SUFFIX.pack(group.material_index))
        return b"".join(out)

    def _serialize_materials(self):
        materials = self.model.materials
        out = [self._pack_count(len(materials), "materials")]
        for mat in materials:
            out.append(layouts.MATERIAL.pack(
                pack_string(mat.name, NAME_SIZE, "material name"),
                mat.ambient, mat.diffuse, mat.specular, mat.emissive,
                mat.shininess, mat.transparency, mat.mode,
                pack_string(mat.texture, PATH_SIZE, "material texture"),
                pack_string(mat.alphamap, PATH_SIZE, "material alphamap"),
            ))
        return b"".join(out)

    def _serialize_key_frame_data(self):
        kfd = self.model.key_frame_data
        return layouts.KEY_FRAME_DATA.pack(
            kfd.animation_fps, kfd.current_time, kfd.total_frames,
        )

    def _serialize_joints(self):
        joints = self.model.joints
        out = [self._pack_count(len(joints), "joints")]
        for joint in joints:
            out.append(layouts.JOINT_PREFIX.pack(
                int(joint.flags),
                pack_string(joint.name, NAME_SIZE, "joint name"),
                pack_string(joint.parent_name, NAME_SIZE, "joint parent name"),
                joint.rotation,
                joint.position,
                self._check_count(len(joint.key_frames_rot), "rotation keyframes"),
                self._check_count(len(joint.key_frames_trans), "position keyframes"),
            ))
            for key in joint.key_frames_rot:
                out.append(layouts.KEY_FRAME_ROT.pack(key.time, key.rotation))
            for key in joint.key_frames_trans:
                out.append(layouts.KEY_FRAME_POS.pack(key.time, key.position))
        return b"".join(out)

    def _serialize_comments(self):
        """Serialize the comments block (u32 count first, then i32 counts)."""
        comments = self.model.comments
        out = [layouts.I32.pack(comments.sub_version)]

        out.append(layouts.U32.pack(len(comments.group_comments)))
        out.extend(self._pack_comment(c) for c in comments.group_comments)
        out.append(layouts.I32.pack(len(comments.material_comments)))
        out.extend(self._pack_comment(c) for c in comments.material_comments)
        out.append(layouts.I32.pack(len(comments.joint_comments)))
        out.extend(self._pack_comment(c) for c in comments.joint_comments)

        if comments.model_comment is None:
            out.append(layouts.I32.pack(0))
        else:
            out.append(layouts.I32.pack(1))
            out.append(self._pack_comment(comments.model_comment))
        return b"".join(out)

    def _pack_comment(self, comment):
        data = comment.comment.encode("utf-8")
        return layouts.COMMENT_PREFIX.pack(comment.index, len(data)) + data

    def _serialize_ex_info(self):
        """Serialize the trailing ex-info sections up to the first absent one.

        Raises:
            ValueError: if a present section follows an absent one, or a
                section's record count does not match its owner
        """
        model = self.model
        sections = [
            (model.vertex_ex_info, "vertex ex", self._pack_vertex_ex_info),
            (model.joint_ex_info, "joint ex", self._pack_joint_ex_info),
            (model.model_ex_info, "model ex", self._pack_model_ex_info),
        ]

        out = []
        missing = None
        for info, name, pack in sections:
            if not info.is_present:
                missing = missing or name
                continue
            if missing is not None:
                raise ValueError(f"Cannot write {name} info after absent {missing} info")
            out.append(layouts.I32.pack(info.sub_version))
            out.append(pack(info))
        return b"".join(out)

    def _pack_vertex_ex_info(self, info):
        if len(info.vertex_ex) != len(self.model.vertices):
            raise ValueError(
                f"Vertex ex count {len(info.vertex_ex)} does not match "
                f"vertex count {len(self.model.vertices)}"
            )
        layout = {
            1: layouts.VERTEX_EX_1,
            2: layouts.VERTEX_EX_2,
            3: layouts.VERTEX_EX_3,
        }.get(info.sub_version)
        if layout is None:
            raise ValueError(f"Unsupported vertex ex sub-version {info.sub_version}")

        out = []
        for ex in info.vertex_ex:
            if layout is layouts.VERTEX_EX_1:
                out.append(layout.pack(ex.bone_ids, ex.weights))
            else:
                out.append(layout.pack(ex.bone_ids, ex.weights, ex.extra))
        return b"".join(out)

    def _pack_joint_ex_info(self, info):
        if len(info.joint_ex) != len(self.model.joints):
            raise ValueError(
                f"Joint ex count {len(info.joint_ex)} does not match "
                f"joint count {len(self.model.joints)}"
            )
        return b"".join(layouts.JOINT_EX.pack(ex.color) for ex in info.joint_ex)

    def _pack_model_ex_info(self, info):
        ex = info.model_ex
        if ex is None:
            raise ValueError("Model ex info is present but has no record")
        return layouts.MODEL_EX.pack(ex.joint_size, ex.transparency_mode, ex.alpha_ref)

    def _check_count(self, count, what):
        if count > MAX_SECTION_COUNT:
            raise ValueError(f"Too many {what}: {count} > {MAX_SECTION_COUNT}")
        return count

    def _pack_count(self, count, what):
        return layouts.U16.pack(self._check_count(count, what))
