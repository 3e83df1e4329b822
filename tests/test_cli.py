"""Tests for the lbconv command line."""

from click.testing import CliRunner

from lbconv.cli import main


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_detect(tmp_path, brace_dump):
    runner = CliRunner()
    path = _write(tmp_path, "bigip.conf", brace_dump)

    result = runner.invoke(main, ["--config", str(tmp_path), "detect", path])

    assert result.exit_code == 0
    assert "brace" in result.output


def test_inspect_reports_dangling_with_exit_code(tmp_path, config_edit_dump):
    runner = CliRunner()
    path = _write(tmp_path, "fad.conf", config_edit_dump)

    result = runner.invoke(main, ["--config", str(tmp_path), "inspect", path])

    assert result.exit_code == 1
    assert "Virtual Servers" in result.output
    assert "missing_pool" in result.output
    assert "Diagnostics" in result.output


def test_inspect_clean_config(tmp_path):
    runner = CliRunner()
    path = _write(
        tmp_path,
        "clean.conf",
        "ltm node /Common/n1 {\n    address 10.0.0.1\n}\n"
        "ltm pool /Common/p1 {\n    members {\n        /Common/n1:80 {\n            address 10.0.0.1\n        }\n    }\n}\n"
        "ltm virtual /Common/v1 {\n    destination /Common/10.0.0.5:80\n    pool /Common/p1\n}\n",
    )

    result = runner.invoke(main, ["--config", str(tmp_path), "inspect", "--dialect", "brace", path])

    assert result.exit_code == 0
    assert "v1" in result.output


def test_inspect_unterminated_exits_2(tmp_path):
    runner = CliRunner()
    path = _write(tmp_path, "broken.conf", "config load-balance pool\n  edit p\n")

    result = runner.invoke(main, ["--config", str(tmp_path), "inspect", path])

    assert result.exit_code == 2
    assert "Error" in result.output


def test_inspect_missing_file_exits_2(tmp_path):
    runner = CliRunner()

    result = runner.invoke(main, ["--config", str(tmp_path), "inspect", str(tmp_path / "nope.conf")])

    assert result.exit_code == 2


def test_inspect_prints_status_literally(tmp_path):
    runner = CliRunner()
    path = _write(
        tmp_path,
        "odd.conf",
        "config load-balance virtual-server\n"
        '  edit "vs"\n'
        '    set status "[/x]"\n'
        "  next\n"
        "end\n",
    )

    result = runner.invoke(main, ["--config", str(tmp_path), "inspect", "--dialect", "config-edit", path])

    assert result.exit_code == 0
    assert "[/x]" in result.output
