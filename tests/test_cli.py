"""Tests for the jstemplate command line."""

import json

import pytest

from jstemplate.cli import main

PAGE = """<html><body>
<h1 data-jst-content="$this.title"></h1>
<div id="row"><span data-jst-content="$this.name"></span></div>
<div data-jst-include="#card"></div>
</body></html>"""


@pytest.fixture
def files(tmp_path):
    template = tmp_path / "page.html"
    template.write_text(PAGE, encoding="utf-8")
    data = tmp_path / "data.json"
    data.write_text(json.dumps({"title": "Orders", "name": "Ann"}))
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "card.html").write_text('<section id="card"><b data-jst-content="$this.name"></b></section>')
    return tmp_path


class TestMain:

    def test_renders_document(self, files, capsys):
        assert main([str(files / "page.html"), str(files / "data.json")]) == 0
        out = capsys.readouterr().out
        assert ">Orders</h1>" in out
        assert ">Ann</span>" in out

    def test_renders_template_clone(self, files, capsys):
        assert main([str(files / "page.html"), str(files / "data.json"), "--id", "row"]) == 0
        out = capsys.readouterr().out
        assert ">Ann</span>" in out
        assert "<h1" not in out
        assert 'id="row"' not in out

    def test_templates_directory(self, files, capsys):
        args = [str(files / "page.html"), str(files / "data.json"), "--templates", str(files / "templates")]
        assert main(args) == 0
        assert ">Ann</b></section>" in capsys.readouterr().out

    def test_output_file(self, files, capsys):
        output = files / "out.html"
        assert main([str(files / "page.html"), str(files / "data.json"), "-o", str(output)]) == 0
        assert ">Orders</h1>" in output.read_text(encoding="utf-8")
        assert "Wrote" in capsys.readouterr().out

    def test_config_directory(self, files, capsys):
        configs = files / "configs"
        configs.mkdir()
        (configs / "engine.json").write_text(json.dumps({"default_value": "?"}))
        (files / "empty.json").write_text("{}")
        assert main([str(files / "page.html"), str(files / "empty.json"), "--config", str(configs)]) == 0
        assert ">?</h1>" in capsys.readouterr().out

    def test_missing_data_file(self, files, capsys):
        assert main([str(files / "page.html"), str(files / "nope.json")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_unknown_template_id(self, files, capsys):
        assert main([str(files / "page.html"), str(files / "data.json"), "--id", "nope"]) == 1
        assert "nope" in capsys.readouterr().err
