"""Tests for the command line interface."""

import json

from click.testing import CliRunner

from llm_dom_serializer.cli.runner import build_config, cli


def snapshot(value="Ada"):
    return {
        "nodeId": 0,
        "nodeType": 9,
        "nodeName": "#document",
        "children": [
            {
                "nodeId": 1,
                "nodeName": "INPUT",
                "attributes": {"type": "text", "value": value},
                "bounds": {"x": 0, "y": 0, "width": 200, "height": 20},
            },
            {
                "nodeId": 2,
                "nodeName": "A",
                "attributes": {"href": "/help"},
                "children": [{"nodeId": 3, "nodeType": 3, "nodeValue": "Help"}],
            },
        ],
    }


def write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestSerializeCommand:
    def test_json_output(self, tmp_path):
        path = write(tmp_path, "page.json", snapshot())

        result = CliRunner().invoke(cli, ["serialize", path, "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [e["node_id"] for e in data["elements"]] == [1, 2]
        assert data["stats"]["interactive_elements"] == 2
        assert all(e["is_new"] for e in data["elements"])

    def test_previous_snapshot(self, tmp_path):
        before = write(tmp_path, "before.json", snapshot("Ada"))
        after = write(tmp_path, "after.json", snapshot("Grace"))

        result = CliRunner().invoke(cli, ["serialize", after, "--previous", before, "--json"])

        assert result.exit_code == 0, result.output
        new = [e["node_id"] for e in json.loads(result.output)["elements"] if e["is_new"]]
        assert new == [1]

    def test_max_elements(self, tmp_path):
        path = write(tmp_path, "page.json", snapshot())

        result = CliRunner().invoke(cli, ["serialize", path, "--json", "--max-elements", "1"])

        assert [e["node_id"] for e in json.loads(result.output)["elements"]] == [1]

    def test_text_output(self, tmp_path):
        path = write(tmp_path, "page.json", snapshot())

        result = CliRunner().invoke(cli, ["serialize", path])

        assert result.exit_code == 0, result.output
        assert "Serialization Summary" in result.output
        assert "Help" in result.output

    def test_malformed_snapshot(self, tmp_path):
        path = write(tmp_path, "broken.json", {"nodeName": "DIV"})

        result = CliRunner().invoke(cli, ["serialize", path])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestInfoCommand:
    def test_info(self):
        result = CliRunner().invoke(cli, ["info"])

        assert result.exit_code == 0, result.output
        assert "max_interactive_elements" in result.output


def test_build_config_overrides():
    config = build_config(no_paint_order=True, no_bbox=True, max_elements=5)

    assert not config.enable_paint_order_filtering
    assert not config.enable_bounding_box_filtering
    assert config.max_interactive_elements == 5
