import json
import textwrap

import pytest

from model_validation.checker import check_files
from model_validation.checker.run_check import find_data_files, main

DESCRIPTOR = textwrap.dedent(
    """\
    model_validation_format: 0.1.0
    root: Order
    types:
      Order:
        properties:
          id: {type: str, required: true}
          lines: {type: "list[OrderLine]"}
      OrderLine:
        properties:
          sku: {type: str, required: true}
          quantity: {type: int, display_name: Quantity, range: [1, 100]}
    """
)

VALID_ORDER = "id: AB-1\nlines:\n  - sku: x\n    quantity: 3\n"
INVALID_ORDER = "id: AB-1\nlines:\n  - sku: x\n    quantity: 0\n"


@pytest.fixture
def descriptor_path(tmp_path):
    path = tmp_path / "order.model.yaml"
    path.write_text(DESCRIPTOR)
    return path


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


def run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_valid_file(descriptor_path, data_dir, capsys):
    (data_dir / "order.yaml").write_text(VALID_ORDER)

    code = run_main([str(data_dir), "-d", str(descriptor_path)])

    assert code == 0
    assert "Validation succeeded with no errors." in capsys.readouterr().out


def test_invalid_file_human_output(descriptor_path, data_dir, capsys):
    data_file = data_dir / "order.yaml"
    data_file.write_text(INVALID_ORDER)

    code = run_main([str(data_file), "-d", str(descriptor_path)])

    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR: lines[0].quantity: The field Quantity must be between 1 and 100." in out
    assert f"({data_file}:4:15 at /lines/0/quantity)" in out


def test_json_output(descriptor_path, data_dir, capsys):
    (data_dir / "a.yaml").write_text(INVALID_ORDER)
    (data_dir / "b.json").write_text(json.dumps({"id": "AB-2", "lines": []}))

    code = run_main([str(data_dir), "-d", str(descriptor_path), "--format", "json"])

    output = json.loads(capsys.readouterr().out)
    assert code == 1
    assert (output["files"], output["errors"], output["warnings"]) == (2, 1, 0)
    error = output["results"][0]["errors"][0]
    assert error == {
        "message": "The field Quantity must be between 1 and 100.",
        "key": "lines[0].quantity",
        "line": 4,
        "column": 15,
        "yaml_path": "/lines/0/quantity",
    }
    assert output["results"][1]["errors"] == []


def test_github_actions_output(descriptor_path, data_dir, capsys):
    data_file = data_dir / "order.yaml"
    data_file.write_text("lines: []\n")

    code = run_main([str(data_file), "-d", str(descriptor_path), "--format", "github-actions"])

    assert code == 1
    assert capsys.readouterr().out.strip() == f"::error file={data_file},line=1::The id field is required."


def test_explicit_type(descriptor_path, data_dir, capsys):
    (data_dir / "line.yaml").write_text("sku: ''\nquantity: 2\n")

    code = run_main([str(data_dir), "-d", str(descriptor_path), "--type", "OrderLine"])

    assert code == 1
    assert "ERROR: sku: The sku field is required." in capsys.readouterr().out


def test_no_data_files(descriptor_path, data_dir, capsys):
    code = run_main([str(data_dir), "-d", str(descriptor_path)])

    assert code == 1
    assert "No data files found." in capsys.readouterr().err


def test_invalid_descriptor(tmp_path, data_dir, capsys):
    (data_dir / "order.yaml").write_text(VALID_ORDER)
    descriptor_path = tmp_path / "broken.yaml"
    descriptor_path.write_text("model_validation_format: 0.1.0\ntypes: []\n")

    code = run_main([str(data_dir), "-d", str(descriptor_path)])

    assert code == 2
    assert "Descriptor schema validation failed" in capsys.readouterr().err


def test_invalid_max_errors(descriptor_path, data_dir, capsys):
    (data_dir / "order.yaml").write_text(VALID_ORDER)

    code = run_main([str(data_dir), "-d", str(descriptor_path), "--max-errors", "0"])

    assert code == 2
    assert "max_model_errors must be at least 1" in capsys.readouterr().err


def test_check_files_reports_unreadable_documents(descriptor_path, data_dir):
    bad = data_dir / "bad.yaml"
    bad.write_text("id: [unclosed\n")
    empty = data_dir / "empty.yaml"
    empty.write_text("")

    bad_result, empty_result = check_files(descriptor_path, [bad, empty])

    assert bad_result.has_errors
    assert "Failed to parse YAML" in bad_result.errors[0]["message"]
    assert not empty_result.has_errors
    assert empty_result.warnings == [{"message": "Document is empty"}]


def test_find_data_files(tmp_path):
    (tmp_path / "nested").mkdir()
    (tmp_path / "a.yaml").write_text("")
    (tmp_path / "nested" / "b.yml").write_text("")
    (tmp_path / "nested" / "c.json").write_text("{}")
    (tmp_path / "notes.txt").write_text("")

    files = find_data_files([str(tmp_path), str(tmp_path / "a.yaml"), str(tmp_path / "missing")])

    assert files == [tmp_path / "a.yaml", tmp_path / "nested" / "b.yml", tmp_path / "nested" / "c.json"]
