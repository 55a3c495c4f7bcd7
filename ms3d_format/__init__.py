"""MilkShape 3D (.ms3d) model reader and writer.

Entry points:
    decode_from_bytes(data)     -> Model, from an in-memory buffer
    decode_from_stream(stream)  -> Model, from a binary file object
    read_file(filepath)         -> Model, opening and closing the file
    encode_to_bytes(model)      -> bytes
    write_file(model, filepath)
"""

from .ms3d_errors import (
    DecodeError, TruncatedError, FormatError, InvalidHeaderError,
    UnsupportedVersionError, InvalidFlagsError, InvalidCommentCountError,
    StringEncodingError,
)
from .ms3d_flags import Flags
from .ms3d_model import (
    Model, Header, Vertex, Triangle, Group, Material, KeyFrameData,
    KeyFrameRot, KeyFramePos, Joint, Comment, Comments,
    VertexEx1, VertexEx2, VertexEx3, VertexExInfo,
    JointEx, JointExInfo, ModelEx, ModelExInfo,
    dump_model,
)
from .ms3d_options import DecodeOptions
from .ms3d_reader import Ms3dReader
from .ms3d_source import ByteSource, BufferSource, StreamSource
from .ms3d_writer import Ms3dWriter


def decode_from_bytes(data, options=None):
    """Decode a model from a bytes-like object without copying it."""
    return Ms3dReader(BufferSource(data), options).read_model()


def decode_from_stream(stream, options=None):
    """Decode a model from a binary stream.

    The stream is read from its current position and is not closed.
    """
    return Ms3dReader(StreamSource(stream), options).read_model()


def read_file(filepath, options=None):
    """Decode the model stored at ``filepath``."""
    with open(filepath, "rb") as f:
        return decode_from_stream(f, options)


def encode_to_bytes(model):
    return Ms3dWriter(model).to_bytes()


def write_file(model, filepath):
    Ms3dWriter(model).write(filepath)
