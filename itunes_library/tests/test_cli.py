#!/usr/bin/env python3
"""
Tests for the command-line interface
"""

import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from loguru import logger
from typer.testing import CliRunner

from itunes_library.cli.main import app
from itunes_library.core.config import ConfigurationManager
from itunes_library.core.library import ItunesLibrary

LIBRARY_XML = """<?xml version="1.0" encoding="UTF-8"?>
<plist version="1.0">
<dict>
    <key>Major Version</key><integer>1</integer>
    <key>Application Version</key><string>12.9</string>
    <key>Tracks</key>
    <dict>
        <key>1</key>
        <dict>
            <key>Track ID</key><integer>1</integer>
            <key>Name</key><string>Alpha</string>
            <key>Artist</key><string>Band</string>
        </dict>
        <key>2</key>
        <dict>
            <key>Track ID</key><integer>2</integer>
            <key>Name</key><string>Beta</string>
        </dict>
    </dict>
    <key>Playlists</key>
    <array>
        <dict>
            <key>Playlist ID</key><integer>10</integer>
            <key>Name</key><string>Mix</string>
            <key>Playlist Items</key>
            <array>
                <dict><key>Track ID</key><integer>2</integer></dict>
                <dict><key>Track ID</key><integer>1</integer></dict>
            </array>
        </dict>
    </array>
</dict>
</plist>
"""


class TestCLI(unittest.TestCase):
    """Test CLI functionality"""

    def setUp(self) -> None:
        """Set up a temporary library file and a runner"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.dir_path = Path(self.temp_dir.name)
        self.xml_path = str(self.dir_path / "Library.xml")
        Path(self.xml_path).write_text(LIBRARY_XML, encoding="utf-8")
        self.runner = CliRunner()

        config_path = self.dir_path / "config.yml"
        config_path.write_text("logging:\n  level: ERROR\n", encoding="utf-8")
        config = ConfigurationManager(str(config_path))
        self.config_patch = patch(
            "itunes_library.cli.main.get_config", return_value=config
        )
        self.library_patch = patch(
            "itunes_library.cli.main.ItunesLibrary",
            side_effect=lambda: ItunesLibrary(config=config),
        )
        self.config_patch.start()
        self.library_patch.start()

    def tearDown(self) -> None:
        self.library_patch.stop()
        self.config_patch.stop()
        self.temp_dir.cleanup()
        # The CLI points loguru at the runner's captured stderr
        logger.remove()
        logger.add(sys.stderr)

    def test_summary(self) -> None:
        result = self.runner.invoke(app, ["summary", self.xml_path])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Library Summary", result.output)
        self.assertIn("12.9", result.output)
        self.assertIn("Playlists", result.output)

    def test_tracks(self) -> None:
        result = self.runner.invoke(app, ["tracks", self.xml_path])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Alpha", result.output)
        self.assertIn("Beta", result.output)

    def test_tracks_limit(self) -> None:
        result = self.runner.invoke(app, ["tracks", self.xml_path, "--limit", "1"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Alpha", result.output)
        self.assertNotIn("Beta", result.output)
        self.assertIn("1 more", result.output)

    def test_track(self) -> None:
        result = self.runner.invoke(app, ["track", self.xml_path, "1"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Alpha", result.output)
        self.assertIn("Band", result.output)

    def test_track_not_found(self) -> None:
        result = self.runner.invoke(app, ["track", self.xml_path, "99"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("No track found", result.output)

    def test_playlists(self) -> None:
        result = self.runner.invoke(app, ["playlists", self.xml_path])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Mix", result.output)

    def test_playlist_resolved(self) -> None:
        result = self.runner.invoke(app, ["playlist", self.xml_path, "10"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertLess(result.output.index("Beta"), result.output.index("Alpha"))

    def test_playlist_raw(self) -> None:
        result = self.runner.invoke(app, ["playlist", self.xml_path, "10", "--raw"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Track ID", result.output)
        self.assertNotIn("Alpha", result.output)

    def test_playlist_raw_non_mapping_item(self) -> None:
        Path(self.xml_path).write_text(
            LIBRARY_XML.replace(
                "<dict><key>Track ID</key><integer>1</integer></dict>",
                "<string>stray</string>",
            ),
            encoding="utf-8",
        )

        result = self.runner.invoke(app, ["playlist", self.xml_path, "10", "--raw"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("2 items", result.output)

    def test_playlist_not_found(self) -> None:
        result = self.runner.invoke(app, ["playlist", self.xml_path, "11"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("No playlist found", result.output)

    def test_missing_file(self) -> None:
        missing = str(self.dir_path / "missing.xml")

        result = self.runner.invoke(app, ["summary", missing])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not load library", result.output)

    def test_malformed_file(self) -> None:
        Path(self.xml_path).write_text("garbage", encoding="utf-8")

        result = self.runner.invoke(app, ["tracks", self.xml_path])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not load library", result.output)


if __name__ == "__main__":
    unittest.main()
