import os
import re
import unittest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class ProjectMetadataTest(unittest.TestCase):
    def test_readme_is_user_documentation(self):
        with open(os.path.join(ROOT, "pyproject.toml"), encoding="utf-8") as f:
            match = re.search(r'^readme = "([^"]+)"$', f.read(), re.MULTILINE)
        self.assertIsNotNone(match)
        self.assertEqual(match.group(1), "README.md")
        with open(os.path.join(ROOT, match.group(1)), encoding="utf-8") as f:
            self.assertIn("decode_from_bytes", f.read())


if __name__ == "__main__":
    unittest.main()
