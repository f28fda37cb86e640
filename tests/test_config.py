import pytest
from ruamel.yaml import YAML

from aspire2coolify.api import token as token_module
from aspire2coolify.api.token import resolve_token, resolve_api_url, validate_credentials
from aspire2coolify.config.loader import (
    ConfigError, config_from_dict, create_config_template, find_config, get_default_config,
    load_config, load_config_file,
)


def test_defaults():
    config = get_default_config()
    assert config.coolify.server_id is None
    assert config.coolify.skip_existing is False
    assert config.github is None
    assert config.output.include_comments is True
    assert config.output.format == "shell"
    assert config.defaults.build_pack is None


def test_yaml_file_with_camel_case_keys(tmp_path):
    path = tmp_path / "aspire2coolify.yaml"
    path.write_text(
        "coolify:\n"
        "  apiUrl: https://coolify.example.com\n"
        "  serverId: srv-1\n"
        "  environmentName: staging\n"
        "  skipExisting: true\n"
        "  somethingElse: ignored\n"
        "github:\n"
        "  repository: https://github.com/o/r\n"
        "  branch: develop\n"
        "  appUuid: gh-1\n"
        "output:\n"
        "  includeComments: false\n"
        "  format: yaml\n",
        encoding="utf-8",
    )
    config = load_config_file(path)

    assert config.source == path
    assert config.coolify.api_url == "https://coolify.example.com"
    assert config.coolify.server_id == "srv-1"
    assert config.coolify.environment_name == "staging"
    assert config.coolify.skip_existing is True
    assert (config.github.repository, config.github.branch, config.github.app_uuid) == (
        "https://github.com/o/r", "develop", "gh-1",
    )
    assert config.output.include_comments is False
    assert config.output.format == "yaml"


def test_json_file_is_accepted(tmp_path):
    path = tmp_path / "aspire2coolify.json"
    path.write_text('{"coolify": {"project_id": "p-1"}, "defaults": {"build_pack": "static"}}', encoding="utf-8")
    config = load_config_file(path)
    assert config.coolify.project_id == "p-1"
    assert config.defaults.build_pack == "static"


def test_github_section_without_repository_is_ignored():
    assert config_from_dict({"github": {"branch": "main"}}).github is None


@pytest.mark.parametrize("content", [
    "coolify: [1, 2]\n",
    "- just\n- a list\n",
    "coolify: {server_id: [unclosed\n",
    "output:\n  format: xml\n",
])
def test_bad_files_raise_config_error(tmp_path, content):
    path = tmp_path / "aspire2coolify.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_file(path)


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_config_file(tmp_path / "nope.yaml")


def test_search_order_and_fallback(tmp_path):
    assert find_config(tmp_path) is None
    assert load_config(tmp_path).source is None

    (tmp_path / ".aspire2coolifyrc").write_text("coolify:\n  server_id: rc\n", encoding="utf-8")
    (tmp_path / "aspire2coolify.yml").write_text("coolify:\n  server_id: yml\n", encoding="utf-8")
    assert find_config(tmp_path).name == "aspire2coolify.yml"
    assert load_config(tmp_path).coolify.server_id == "yml"

    program = tmp_path / "Program.cs"
    program.write_text("", encoding="utf-8")
    assert find_config(program).name == "aspire2coolify.yml"


def test_template_is_valid_yaml_that_loads(tmp_path):
    template = create_config_template()
    assert isinstance(YAML(typ="safe").load(template), dict)

    path = tmp_path / "aspire2coolify.yaml"
    path.write_text(template, encoding="utf-8")
    config = load_config_file(path)
    assert config.output.format == "shell"


# --- CREDENTIALS ---

@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("COOLIFY_TOKEN", raising=False)
    monkeypatch.delenv("COOLIFY_API_URL", raising=False)
    monkeypatch.setattr(token_module, "_interactive", lambda: False)
    return monkeypatch


def test_token_priority(clean_env):
    assert resolve_token("cli", "config") == "cli"
    assert resolve_token(None, "config") == "config"
    clean_env.setenv("COOLIFY_TOKEN", "env")
    assert resolve_token(None, "config") == "env"
    assert resolve_token("cli", "config") == "cli"


def test_api_url_priority(clean_env):
    assert resolve_api_url(None, None) is None
    clean_env.setenv("COOLIFY_API_URL", "https://env")
    assert resolve_api_url(None, "https://config") == "https://env"


def test_prompt_only_when_interactive_and_allowed(clean_env):
    clean_env.setattr(token_module, "_interactive", lambda: True)
    clean_env.setattr(token_module, "prompt_for_token", lambda: "typed")
    assert resolve_token() == "typed"
    assert resolve_token(prompt=False) is None


def test_validate_credentials():
    assert validate_credentials("https://x", "t") == (True, [])
    valid, errors = validate_credentials(None, None)
    assert not valid
    assert len(errors) == 2
    assert "COOLIFY_API_URL" in errors[0]
    assert "COOLIFY_TOKEN" in errors[1]
