"""Tests for the framelayout subcommand dispatcher."""

import pytest

from framelayout.main import main


class TestDispatcher:
    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
        assert "inspect" in capsys.readouterr().out

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit) as exc:
            main(["render"])
        assert exc.value.code != 0

    def test_inspect_dispatches(self, manifest_file, capsys):
        main(["inspect", "--manifest", str(manifest_file)])
        assert capsys.readouterr().out.startswith("Timeline: 3 clips")

    def test_inspect_requires_manifest(self):
        with pytest.raises(SystemExit):
            main(["inspect"])

    def test_preview_dispatches(self, manifest_file, tmp_path, capsys):
        out = tmp_path / "frame.png"
        main(["preview", "--manifest", str(manifest_file), "--output", str(out),
              "--frame", "0", "--scale", "0.1"])
        assert out.exists()

    def test_preview_requires_output(self, manifest_file):
        with pytest.raises(SystemExit):
            main(["preview", "--manifest", str(manifest_file)])
