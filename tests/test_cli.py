"""CLI behaviour tests."""

from __future__ import annotations

import json

import pytest

from compmeta.cli import _build_parser, main


def test_cli_accepts_verbose_before_and_after_command() -> None:
    parser = _build_parser()

    assert parser.parse_args(["--verbose", "extract"]).verbose is True
    assert parser.parse_args(["extract", "--verbose"]).verbose is True
    assert parser.parse_args(["extract"]).verbose is False


def test_cli_accepts_quiet_flag() -> None:
    parser = _build_parser()

    assert parser.parse_args(["-q", "extract"]).quiet is True
    assert parser.parse_args(["extract", "--quiet"]).quiet is True
    assert parser.parse_args(["extract"]).quiet is False


def test_cli_extract_defaults() -> None:
    args = _build_parser().parse_args(["extract"])

    assert args.command == "extract"
    assert args.path == "."
    assert args.config is None
    assert args.log_file is None


def test_cli_extract_writes_artifacts(project_builder, capsys) -> None:
    project_builder.component(
        "button.tsx",
        "export const Button = ({ label }: { label: string }) => <button>{label}</button>\n",
    )

    main(["extract", str(project_builder.path())])

    output_dir = project_builder.path() / "src" / "compmeta" / "generated"
    payload = json.loads((output_dir / "meta.json").read_text(encoding="utf-8"))
    assert [component["displayName"] for component in payload["components"]] == ["Button"]
    assert (output_dir / "registry.ts").exists()
    out = capsys.readouterr().out
    assert "Button (1 props: label)" in out


def test_cli_reports_fatal_config_errors(project_builder, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(project_builder.path()), "--config", str(project_builder.path() / "missing.yml")])

    assert excinfo.value.code == 1
    assert "Config file not found" in capsys.readouterr().err
