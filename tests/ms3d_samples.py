"""Sample models shared by the MS3D tests.

All float values are exactly representable as 32-bit floats so that a
model survives an encode/decode cycle unchanged.
"""

from dataclasses import replace

from ms3d_format import (
    Flags, Model, Header, Vertex, Triangle, Group, Material, KeyFrameData,
    KeyFrameRot, KeyFramePos, Joint, Comment, Comments,
    VertexEx3, VertexExInfo, JointEx, JointExInfo, ModelEx, ModelExInfo,
    encode_to_bytes,
)
from ms3d_format import ms3d_layouts as layouts


def make_model():
    vertices = (
        Vertex(Flags.SELECTED, (0.0, 1.0, 2.0), -1, 1),
        Vertex(Flags.HIDDEN | Flags.SELECTED2, (0.5, -1.5, 3.25), 0, 2),
        Vertex(Flags.NONE, (1.0, 0.0, -0.5), 1, 0),
    )
    triangles = (
        Triangle(
            flags=Flags.SELECTED,
            vertex_indices=(0, 1, 2),
            vertex_normals=((0.0, 0.0, 1.0), (0.0, 1.0, 0.0), (1.0, 0.0, 0.0)),
            s=(0.0, 1.0, 0.5),
            t=(0.0, 0.0, 1.0),
            smoothing_group=1,
            group_index=0,
        ),
    )
    groups = (
        Group(Flags.SELECTED, "body", (0,), 0),
        Group(Flags.HIDDEN, "empty", (), -1),
    )
    materials = (
        Material(
            name="skin",
            ambient=(0.25, 0.25, 0.25, 1.0),
            diffuse=(0.75, 0.5, 0.25, 1.0),
            specular=(0.0, 0.0, 0.0, 1.0),
            emissive=(0.0, 0.0, 0.0, 1.0),
            shininess=12.5,
            transparency=1.0,
            mode=0,
            texture=".\\textures\\skin.bmp",
            alphamap="",
        ),
    )
    joints = (
        Joint(
            flags=Flags.NONE,
            name="root",
            parent_name="",
            rotation=(0.0, 0.0, 0.0),
            position=(0.0, 0.0, 0.0),
            key_frames_rot=(KeyFrameRot(0.0, (0.0, 0.0, 0.0)),),
            key_frames_trans=(),
        ),
        Joint(
            flags=Flags.SELECTED | Flags.DIRTY,
            name="arm",
            parent_name="root",
            rotation=(0.0, 1.5, 0.0),
            position=(2.0, 0.0, 0.0),
            key_frames_rot=(
                KeyFrameRot(0.0, (0.0, 0.0, 0.0)),
                KeyFrameRot(1.0, (0.0, 0.5, 0.0)),
            ),
            key_frames_trans=(KeyFramePos(0.5, (0.0, 0.25, 0.0)),),
        ),
    )
    comments = Comments(
        sub_version=1,
        group_comments=(Comment(0, "hello"),),
        material_comments=(),
        joint_comments=(Comment(1, "bone ü"),),
        model_comment=Comment(0, "made by hand"),
    )
    return Model(
        header=Header(),
        vertices=vertices,
        triangles=triangles,
        groups=groups,
        materials=materials,
        key_frame_data=KeyFrameData(24.0, 1.0, 30),
        joints=joints,
        comments=comments,
        vertex_ex_info=VertexExInfo(3, (
            VertexEx3((0, -1, -1), (100, 0, 0), (0, 0)),
            VertexEx3((0, 1, -1), (50, 50, 0), (1, 2)),
            VertexEx3((1, -1, -1), (100, 0, 0), (0, 0xFFFFFFFF)),
        )),
        joint_ex_info=JointExInfo(1, (
            JointEx((1.0, 0.0, 0.0)),
            JointEx((0.0, 1.0, 0.0)),
        )),
        model_ex_info=ModelExInfo(1, ModelEx(1.0, 2, 0.5)),
    )


def without_ex_info(model):
    """Same model as written by a MilkShape version without ex-info."""
    return replace(
        model,
        vertex_ex_info=VertexExInfo(),
        joint_ex_info=JointExInfo(),
        model_ex_info=ModelExInfo(),
    )


def make_empty_model(**changes):
    """A model with no records at all, optionally with some sections set."""
    model = Model(
        header=Header(),
        vertices=(),
        triangles=(),
        groups=(),
        materials=(),
        key_frame_data=KeyFrameData(30.0, 0.0, 0),
        joints=(),
    )
    return replace(model, **changes)


# Offsets inside an encoded file whose earlier sections are all empty
VERTEX_OFFSET = layouts.HEADER.size + layouts.U16.size
TRIANGLE_OFFSET = layouts.HEADER.size + 2 * layouts.U16.size
GROUP_OFFSET = layouts.HEADER.size + 3 * layouts.U16.size
MATERIAL_OFFSET = layouts.HEADER.size + 4 * layouts.U16.size
JOINT_OFFSET = (
    layouts.HEADER.size + 5 * layouts.U16.size + layouts.KEY_FRAME_DATA.size
)


def encode(model):
    return bytearray(encode_to_bytes(model))
