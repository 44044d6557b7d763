"""Tests for guvnr.yaml loading."""

import pytest

from guvnr.config import DEFAULT_MAX_NEW_TODOS, GuvnrConfig, load_config
from guvnr.core.scanner import ScanMode
from guvnr.errors import EXIT_CODES, ConfigError, exit_code_for


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path)

    assert config == GuvnrConfig()
    assert config.max_new_todos == DEFAULT_MAX_NEW_TODOS


def test_full_config(tmp_path):
    (tmp_path / "guvnr.yaml").write_text(
        'version: "1.0"\n'
        "project:\n"
        "  name: acme\n"
        "  description: Order service\n"
        "security:\n"
        "  scan_mode: strict\n"
        "  enforce: true\n"
        "  exclude:\n"
        "    - generated/\n"
        "  max_new_todos: 5\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.version == "1.0"
    assert config.project_name == "acme"
    assert config.project_description == "Order service"
    assert config.scan_mode == ScanMode.STRICT
    assert config.enforce is True
    assert config.exclude == ["generated/"]
    assert config.max_new_todos == 5
    assert config.path == tmp_path / "guvnr.yaml"


def test_yml_extension(tmp_path):
    (tmp_path / "guvnr.yml").write_text("project:\n  name: short\n", encoding="utf-8")

    assert load_config(tmp_path).project_name == "short"


@pytest.mark.parametrize("content", [
    "version: [unclosed\n",
    "- a\n- b\n",
    "security:\n  scan_mode: paranoid\n",
    "security: yes\n",
    "security:\n  max_new_todos: -1\n",
])
def test_bad_config_raises(tmp_path, content):
    (tmp_path / "guvnr.yaml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        load_config(tmp_path)

    assert exc_info.value.code == "GUVNR-CONFIG-300"
    assert exit_code_for(exc_info.value) == EXIT_CODES["CONFIG_ERROR"]
