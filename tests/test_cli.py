"""Tests for the command line interface."""

import io
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from exim.binary_file import PointerWidth
from exim.cli import main, parse_inputs
from exim.mbm import MBM, MBMEntry, serialize_mbm
from exim.table import Table, serialize_table


class CliTestCase(unittest.TestCase):
    """Run main while capturing its output."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _path(self, *parts):
        return os.path.join(self.temp_dir, *parts)

    def _write(self, name, data):
        path = self._path(name)
        with open(path, "wb") as f:
            f.write(data)
        return path

    def _run(self, argv):
        """Return (exit status, stdout, stderr)."""
        with redirect_stdout(io.StringIO()) as out, redirect_stderr(io.StringIO()) as err:
            status = main(argv)
        return status, out.getvalue(), err.getvalue()


class TestArgumentValidation(CliTestCase):
    """User errors print a message and exit with status 0."""

    def test_no_arguments(self):
        """Without arguments, credits and usage are printed."""
        status, out, _ = self._run([])
        self.assertEqual(status, 0)
        self.assertIn("ExIm for Etrian Odyssey, by Rea", out)
        self.assertIn("Usage: exim [mode] [input] [output]", out)

    def test_help(self):
        """--help prints the usage."""
        status, out, _ = self._run(["--help"])
        self.assertEqual(status, 0)
        self.assertIn("Usage:", out)

    def test_no_mode(self):
        """A missing mode prints the usage without credits."""
        status, out, err = self._run(["a.tbl", "b.json"])
        self.assertEqual(status, 0)
        self.assertIn("No mode detected.", err)
        self.assertIn("Usage:", out)
        self.assertNotIn("by Rea", out)

    def test_both_modes(self):
        """-e and -i together are ambiguous."""
        status, _, err = self._run(["-e", "-i", "a", "b"])
        self.assertEqual(status, 0)
        self.assertIn("Ambiguous mode", err)

    def test_single_path(self):
        """One path is not enough."""
        status, out, err = self._run(["-e", "only_one_path"])
        self.assertEqual(status, 0)
        self.assertIn("Wrong number of arguments.", err)
        self.assertIn("Usage:", out)

    def test_unknown_option(self):
        """Unknown options are usage errors."""
        status, _, err = self._run(["-e", "a", "b", "--unknown"])
        self.assertEqual(status, 0)
        self.assertIn("Unrecognized arguments", err)

    def test_missing_input(self):
        """A missing input is reported without usage and creates nothing."""
        output_path = self._path("out.json")
        status, out, err = self._run(["-e", self._path("missing.tbl"), output_path])
        self.assertEqual(status, 0)
        self.assertIn("The input file does not exist.", err)
        self.assertNotIn("Usage:", out)
        self.assertFalse(os.path.exists(output_path))


class TestConversion(CliTestCase):
    """Complete conversions through the command line."""

    def test_table_roundtrip_long(self):
        """Export then import a long-pointer table into new directories."""
        data = serialize_table(Table(["Sword", "Shield"]), PointerWidth.LONG)
        path = self._write("item.tbl", data)
        json_path = self._path("json", "item.json")
        output_path = self._path("out", "item.tbl")

        status, out, _ = self._run(["--export", path, json_path, "--long"])
        self.assertEqual(status, 0)
        self.assertIn("Created a directory", out)
        self.assertTrue(os.path.isfile(json_path))

        status, _, _ = self._run(["-i", json_path, output_path, "-l"])
        self.assertEqual(status, 0)
        with open(output_path, "rb") as f:
            self.assertEqual(f.read(), data)

    def test_mbm_legacy_roundtrip(self):
        """The bare payload layout imports back to the same bank."""
        data = serialize_mbm(MBM([MBMEntry(0, "Hello"), MBMEntry(1, None)]))
        path = self._write("talk.mbm", data)
        json_path = self._path("talk.json")
        output_path = self._path("talk_new.mbm")

        self.assertEqual(self._run(["-e", path, json_path, "--legacy-envelope"])[0], 0)
        with open(json_path, encoding="utf-8") as f:
            self.assertIn("MBM", f.readline())
        self.assertEqual(self._run(["-i", json_path, output_path])[0], 0)
        with open(output_path, "rb") as f:
            self.assertEqual(f.read(), data)

    def test_unsupported_extension(self):
        """Unknown extensions exit with status 1."""
        path = self._write("data.bin", b"\x00")
        status, _, err = self._run(["-e", path, self._path("data.json")])
        self.assertEqual(status, 1)
        self.assertIn("Error:", err)
        self.assertIn("unsupported extension", err)

    def test_pointer_width_mismatch(self):
        """Importing a long-pointer export without -l exits with status 1."""
        path = self._write("item.tbl", serialize_table(Table(["a"]), PointerWidth.LONG))
        json_path = self._path("item.json")
        output_path = self._path("new.tbl")
        self.assertEqual(self._run(["-e", path, json_path, "-l"])[0], 0)
        status, _, err = self._run(["-i", json_path, output_path])
        self.assertEqual(status, 1)
        self.assertIn("long pointers", err)
        self.assertFalse(os.path.exists(output_path))

    def test_malformed_envelope(self):
        """An empty JSON file exits with status 1."""
        path = self._write("empty.json", b"")
        status, _, err = self._run(["-i", path, self._path("out.tbl")])
        self.assertEqual(status, 1)
        self.assertIn("empty", err)

    def test_output_is_a_directory(self):
        """An output path naming a directory exits with status 1."""
        path = self._write("item.tbl", serialize_table(Table(["a"]), PointerWidth.SHORT))
        output_dir = self._path("existing")
        os.mkdir(output_dir)
        status, _, err = self._run(["-e", path, output_dir])
        self.assertEqual(status, 1)
        self.assertIn("Error:", err)
        self.assertTrue(os.path.isdir(output_dir))

    def test_default_export_has_tag_line(self):
        """The first line names the file kind."""
        path = self._write("talk.mbm", serialize_mbm(MBM([MBMEntry(0, "Hello")])))
        json_path = self._path("talk.json")
        self.assertEqual(self._run(["-e", path, json_path])[0], 0)
        with open(json_path, encoding="utf-8") as f:
            self.assertEqual(f.readline().strip(), "OriginTablets.Types.MBM")

    def test_arguments_in_any_order(self):
        """Flags may come between paths."""
        path = self._write("item.tbl", serialize_table(Table(["a"]), PointerWidth.SHORT))
        json_path = self._path("item.json")
        status, _, _ = self._run([path, "-e", json_path])
        self.assertEqual(status, 0)
        self.assertTrue(os.path.isfile(json_path))


class TestParseInputs(unittest.TestCase):
    """Test parse_inputs."""

    def test_defaults(self):
        """Optional flags default to False."""
        args = parse_inputs().parse_intermixed_args(["-e", "a", "b"])
        self.assertTrue(args.export)
        self.assertFalse(args.import_)
        self.assertEqual(args.paths, ["a", "b"])
        self.assertFalse(args.long)
        self.assertFalse(args.legacy_envelope)


if __name__ == "__main__":
    unittest.main()
