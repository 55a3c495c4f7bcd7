"""Decoded MS3D model tree.

Every record is a frozen dataclass and every sequence a tuple, so a model
returned by the reader cannot be modified. The model owns all records; no
record refers back to its parent.
"""

import sys
from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import ClassVar, Optional, Tuple, Union

from .ms3d_constants import ABSENT_SUB_VERSION, MS3D_MAGIC, MS3D_VERSION
from .ms3d_flags import (
    Flags, VERTEX_FLAGS, TRIANGLE_FLAGS, GROUP_FLAGS, JOINT_FLAGS,
)


Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Header:
    magic: bytes = MS3D_MAGIC
    version: int = MS3D_VERSION


@dataclass(frozen=True)
class Vertex:
    ALLOWED_FLAGS: ClassVar[Flags] = VERTEX_FLAGS

    flags: Flags
    vertex: Vec3
    bone_id: int            # -1 = not bound to a joint
    reference_count: int


@dataclass(frozen=True)
class Triangle:
    ALLOWED_FLAGS: ClassVar[Flags] = TRIANGLE_FLAGS

    flags: Flags
    vertex_indices: Tuple[int, int, int]
    vertex_normals: Tuple[Vec3, Vec3, Vec3]
    s: Vec3                 # texture u per corner
    t: Vec3                 # texture v per corner
    smoothing_group: int
    group_index: int


@dataclass(frozen=True)
class Group:
    ALLOWED_FLAGS: ClassVar[Flags] = GROUP_FLAGS

    flags: Flags
    name: str
    triangle_indices: Tuple[int, ...]
    material_index: int     # -1 = no material


@dataclass(frozen=True)
class Material:
    """Surface properties and texture references of a group."""
    name: str
    ambient: Vec4
    diffuse: Vec4
    specular: Vec4
    emissive: Vec4
    shininess: float
    transparency: float
    mode: int
    texture: str
    alphamap: str

    @property
    def texture_path(self) -> Optional[PureWindowsPath]:
        """Texture file as a Windows path, or None if the slot is empty."""
        return PureWindowsPath(self.texture) if self.texture else None

    @property
    def alphamap_path(self) -> Optional[PureWindowsPath]:
        return PureWindowsPath(self.alphamap) if self.alphamap else None


@dataclass(frozen=True)
class KeyFrameData:
    animation_fps: float
    current_time: float
    total_frames: int


@dataclass(frozen=True)
class KeyFrameRot:
    time: float
    rotation: Vec3          # euler angles, radians


@dataclass(frozen=True)
class KeyFramePos:
    time: float
    position: Vec3


@dataclass(frozen=True)
class Joint:
    ALLOWED_FLAGS: ClassVar[Flags] = JOINT_FLAGS

    flags: Flags
    name: str
    parent_name: str        # "" for root joints
    rotation: Vec3
    position: Vec3
    key_frames_rot: Tuple[KeyFrameRot, ...] = ()
    key_frames_trans: Tuple[KeyFramePos, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parent_name


@dataclass(frozen=True)
class Comment:
    index: int
    comment: str


@dataclass(frozen=True)
class Comments:
    sub_version: int = 1
    group_comments: Tuple[Comment, ...] = ()
    material_comments: Tuple[Comment, ...] = ()
    joint_comments: Tuple[Comment, ...] = ()
    model_comment: Optional[Comment] = None


@dataclass(frozen=True)
class VertexEx1:
    bone_ids: Tuple[int, int, int]
    weights: Tuple[int, int, int]


@dataclass(frozen=True)
class VertexEx2:
    bone_ids: Tuple[int, int, int]
    weights: Tuple[int, int, int]
    extra: int


@dataclass(frozen=True)
class VertexEx3:
    bone_ids: Tuple[int, int, int]
    weights: Tuple[int, int, int]
    extra: Tuple[int, int]


VertexEx = Union[VertexEx1, VertexEx2, VertexEx3]


@dataclass(frozen=True)
class VertexExInfo:
    """Extra skinning data, one record per vertex.

    The sub-version selects the record type: 1 -> VertexEx1,
    2 -> VertexEx2, 3 -> VertexEx3. Sub-version 0 means the section
    is not in the file.
    """
    sub_version: int = ABSENT_SUB_VERSION
    vertex_ex: Tuple[VertexEx, ...] = ()

    @property
    def is_present(self) -> bool:
        return self.sub_version != ABSENT_SUB_VERSION


@dataclass(frozen=True)
class JointEx:
    color: Vec3


@dataclass(frozen=True)
class JointExInfo:
    sub_version: int = ABSENT_SUB_VERSION
    joint_ex: Tuple[JointEx, ...] = ()

    @property
    def is_present(self) -> bool:
        return self.sub_version != ABSENT_SUB_VERSION


@dataclass(frozen=True)
class ModelEx:
    joint_size: float
    transparency_mode: int
    alpha_ref: float


@dataclass(frozen=True)
class ModelExInfo:
    sub_version: int = ABSENT_SUB_VERSION
    model_ex: Optional[ModelEx] = None

    @property
    def is_present(self) -> bool:
        return self.sub_version != ABSENT_SUB_VERSION


@dataclass(frozen=True)
class Model:
    """Root container for a decoded MS3D file."""
    header: Header
    vertices: Tuple[Vertex, ...]
    triangles: Tuple[Triangle, ...]
    groups: Tuple[Group, ...]
    materials: Tuple[Material, ...]
    key_frame_data: KeyFrameData
    joints: Tuple[Joint, ...]
    comments: Comments = field(default_factory=Comments)
    vertex_ex_info: VertexExInfo = field(default_factory=VertexExInfo)
    joint_ex_info: JointExInfo = field(default_factory=JointExInfo)
    model_ex_info: ModelExInfo = field(default_factory=ModelExInfo)

    def find_joint(self, name: str) -> Optional[Joint]:
        for joint in self.joints:
            if joint.name == name:
                return joint
        return None


def dump_model(model, file=None):
    """Print a summary of a decoded model for debugging."""
    out = file if file is not None else sys.stdout

    def emit(text=""):
        print(text, file=out)

    emit(f"=== MS3D model (version {model.header.version}) ===")
    emit(f"Vertices:  {len(model.vertices)}")
    emit(f"Triangles: {len(model.triangles)}")
    emit(f"Groups:    {len(model.groups)}")
    emit(f"Materials: {len(model.materials)}")
    emit(f"Joints:    {len(model.joints)}")
    kfd = model.key_frame_data
    emit(f"Animation: {kfd.total_frames} frames @ {kfd.animation_fps:g} fps "
         f"(current {kfd.current_time:g})")
    emit()

    for i, group in enumerate(model.groups):
        material = "none"
        if 0 <= group.material_index < len(model.materials):
            material = repr(model.materials[group.material_index].name)
        emit(f"  group {i} {group.name!r}: {len(group.triangle_indices)} triangles, "
             f"material {material}")

    for i, mat in enumerate(model.materials):
        emit(f"  material {i} {mat.name!r}: texture={mat.texture!r} "
             f"alphamap={mat.alphamap!r}")

    for i, joint in enumerate(model.joints):
        parent = repr(joint.parent_name) if not joint.is_root else "<root>"
        emit(f"  joint {i} {joint.name!r} -> {parent}: "
             f"{len(joint.key_frames_rot)} rot / {len(joint.key_frames_trans)} pos keys")

    comments = model.comments
    emit()
    emit(f"Comments: {len(comments.group_comments)} group, "
         f"{len(comments.material_comments)} material, "
         f"{len(comments.joint_comments)} joint, "
         f"model={'yes' if comments.model_comment else 'no'}")

    for name, info in (("Vertex ex", model.vertex_ex_info),
                       ("Joint ex", model.joint_ex_info),
                       ("Model ex", model.model_ex_info)):
        state = f"sub-version {info.sub_version}" if info.is_present else "absent"
        emit(f"{name}: {state}")
