"""Tests for the console entry point."""

from dicenotation.__main__ import main


class TestMain:
    def test_rolls_expression(self, capsys) -> None:
        assert main(["dicenotation", "3d[2,2]", "--times", "2"]) == 0
        assert capsys.readouterr().out == "3D[2,2]: 6, 6 (min 6, max 6)\n"

    def test_reports_errors(self, capsys) -> None:
        assert main(["dicenotation", "2dz", "d[1,1]+4"]) == 1
        out = capsys.readouterr().out.splitlines()
        assert out[0].startswith("error: the submitted expression `2dz`")
        assert out[1] == "D[1,1]+4: 5 (min 5, max 5)"

    def test_settings_file(self, tmp_path, capsys) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("default_sides: 1\n")
        assert main(["dicenotation", "--settings", str(path), "d"]) == 1
        assert capsys.readouterr().out.startswith("error: ")

    def test_missing_settings_file(self, tmp_path, capsys) -> None:
        assert main(["dicenotation", "--settings", str(tmp_path / "nope.yaml"), "d6"]) == 1
        assert capsys.readouterr().out.startswith("error: ")
