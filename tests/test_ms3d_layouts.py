import struct
import unittest

from ms3d_format import ms3d_layouts as layouts
from ms3d_format.ms3d_layouts import RawLayout


class LayoutSizeTest(unittest.TestCase):
    def test_documented_widths(self):
        self.assertEqual(layouts.HEADER.size, 14)
        self.assertEqual(layouts.VERTEX.size, 15)
        self.assertEqual(layouts.TRIANGLE.size, 70)
        self.assertEqual(layouts.MATERIAL.size, 361)
        self.assertEqual(layouts.KEY_FRAME_ROT.size, 16)
        self.assertEqual(layouts.KEY_FRAME_POS.size, 16)

    def test_other_widths(self):
        self.assertEqual(layouts.GROUP_PREFIX.size, 35)
        self.assertEqual(layouts.GROUP_SUFFIX.size, 1)
        self.assertEqual(layouts.KEY_FRAME_DATA.size, 12)
        self.assertEqual(layouts.JOINT_PREFIX.size, 93)
        self.assertEqual(layouts.COMMENT_PREFIX.size, 8)
        self.assertEqual(layouts.VERTEX_EX_1.size, 6)
        self.assertEqual(layouts.VERTEX_EX_2.size, 10)
        self.assertEqual(layouts.VERTEX_EX_3.size, 14)
        self.assertEqual(layouts.JOINT_EX.size, 12)
        self.assertEqual(layouts.MODEL_EX.size, 12)


class RawLayoutTest(unittest.TestCase):
    def test_groups_repeated_fields(self):
        data = struct.pack("<B3fbB", 1, 1.0, 2.0, 3.0, -1, 7)
        record = layouts.VERTEX.unpack(data)
        self.assertEqual(record.flags, 1)
        self.assertEqual(record.vertex, (1.0, 2.0, 3.0))
        self.assertEqual(record.bone_id, -1)
        self.assertEqual(record.reference_count, 7)

    def test_bytes_field_is_single_value(self):
        record = layouts.HEADER.unpack(b"MS3D000000" + struct.pack("<i", 4))
        self.assertEqual(record.id, b"MS3D000000")
        self.assertEqual(record.version, 4)

    def test_unaligned_offset(self):
        # Float fields starting at odd offsets
        data = b"\xaa" + struct.pack("<f3f", 0.5, 1.0, -2.0, 4.25)
        record = layouts.KEY_FRAME_POS.unpack(data, 1)
        self.assertEqual(record.time, 0.5)
        self.assertEqual(record.position, (1.0, -2.0, 4.25))

    def test_unpack_copies_out_of_buffer(self):
        buf = bytearray(struct.pack("<f3f", 0.5, 1.0, 2.0, 3.0))
        record = layouts.KEY_FRAME_ROT.unpack(memoryview(buf))
        buf[:] = bytes(len(buf))
        self.assertEqual(record.time, 0.5)
        self.assertEqual(record.rotation, (1.0, 2.0, 3.0))

    def test_pack_inverts_unpack(self):
        data = layouts.JOINT_EX.pack((1.0, 0.5, 0.25))
        self.assertEqual(layouts.JOINT_EX.unpack(data).color, (1.0, 0.5, 0.25))

    def test_pack_rejects_wrong_group_length(self):
        with self.assertRaises(ValueError):
            layouts.JOINT_EX.pack((1.0, 0.5))

    def test_rejects_bad_format_code(self):
        with self.assertRaises(ValueError):
            RawLayout("Broken", [("field", "3")])


if __name__ == "__main__":
    unittest.main()
