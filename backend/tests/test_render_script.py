"""Test cases for the render_template command-line script."""

import io
import json
import runpy
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from loguru import logger

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "render_template.py"

TEMPLATE = {
    "name": "memo",
    "sections": [
        {"id": "body", "title": "גוף", "content": "לחץ: {{pressure}} בר", "required": True, "order": 1},
    ],
    "placeholders": {"pressure": "number"},
    "styles": {"default": {}},
    "rtl": True,
}


class RenderScriptTest(unittest.TestCase):
    """Bad input ends with a one-line error and exit status 1."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.main = runpy.run_path(str(SCRIPT), run_name="render_template")["main"]

    def tearDown(self):
        self._tmp.cleanup()
        logger.remove()
        logger.add(sys.stderr)

    def write(self, name, text):
        path = self.dir / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    def run_script(self, *args):
        stdout, stderr = io.StringIO(), io.StringIO()
        with mock.patch.object(sys, "argv", ["render_template.py", *args]), \
                mock.patch.object(sys, "stdout", stdout), \
                mock.patch.object(sys, "stderr", stderr):
            try:
                self.main()
                code = 0
            except SystemExit as e:
                code = e.code
        return code, stdout.getvalue(), stderr.getvalue()

    def test_renders_sections(self):
        template = self.write("memo.json", json.dumps(TEMPLATE))
        values = self.write("values.json", json.dumps({"pressure": 7.5}))
        code, out, _ = self.run_script(template, values)
        self.assertEqual(code, 0)
        self.assertIn("# גוף", out)
        self.assertIn("לחץ: 7.5 בר", out)

    def test_malformed_json(self):
        template = self.write("memo.json", "{not json")
        values = self.write("values.json", "{}")
        code, _, err = self.run_script(template, values)
        self.assertEqual(code, 1)
        self.assertIn("Render failed", err)
        self.assertNotIn("Traceback", err)

    def test_missing_file(self):
        values = self.write("values.json", "{}")
        code, _, err = self.run_script(str(self.dir / "missing.json"), values)
        self.assertEqual(code, 1)
        self.assertIn("Render failed", err)

    def test_invalid_template(self):
        broken = dict(TEMPLATE, placeholders={})
        template = self.write("memo.json", json.dumps(broken))
        values = self.write("values.json", json.dumps({"pressure": 7.5}))
        code, _, err = self.run_script(template, values)
        self.assertEqual(code, 1)
        self.assertIn("Undeclared placeholder", err)


if __name__ == "__main__":
    unittest.main()
