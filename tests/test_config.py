from __future__ import annotations

from pathlib import Path

import pytest

from townsite.config import DEFAULT_DATASETTE_URL, ConfigError, SiteSettings, load_settings


def test_defaults_without_file_or_environment(tmp_path: Path) -> None:
    settings = load_settings(environ={}, cwd=tmp_path)

    assert settings == SiteSettings()
    assert settings.datasette_url == DEFAULT_DATASETTE_URL
    assert settings.sample_size == 3
    assert settings.tag_limit == 20


def test_precedence_file_then_environment_then_cli(tmp_path: Path) -> None:
    (tmp_path / "site.yml").write_text(
        "datasette_url: http://from-file.test\n"
        "site_name: example.town\n"
        "region: North Side\n"
        "content_dir: out\n",
        encoding="utf-8",
    )
    env = {"DATASETTE_URL": "http://from-env.test", "RATE_LIMIT": "0.5"}

    from_env = load_settings(environ=env, cwd=tmp_path)
    from_cli = load_settings("http://from-cli.test", environ=env, cwd=tmp_path)

    assert from_env.datasette_url == "http://from-env.test"
    assert from_env.site_name == "example.town"
    assert from_env.region == "North Side"
    assert from_env.content_dir == Path("out")
    assert from_env.rate_limit == 0.5
    assert from_cli.datasette_url == "http://from-cli.test"


def test_site_config_env_var_points_at_file(tmp_path: Path) -> None:
    custom = tmp_path / "custom.yaml"
    custom.write_text("tag_limit: 5\n", encoding="utf-8")

    assert load_settings(environ={"SITE_CONFIG": str(custom)}, cwd=tmp_path).tag_limit == 5


def test_explicit_missing_site_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(environ={"SITE_CONFIG": str(tmp_path / "nope.yml")}, cwd=tmp_path)


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "unknown_key: 1\n",
        "site_name: [unclosed\n",
        "sample_size: soon\n",
        "tag_limit: 2.5\n",
        "timeout: [1]\n",
        "site_name: {a: 1}\n",
    ],
)
def test_bad_site_file(tmp_path: Path, content: str) -> None:
    (tmp_path / "site.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(environ={}, cwd=tmp_path)


@pytest.mark.parametrize("url", ["ftp://example.test", "not a url", "localhost:8001"])
def test_invalid_url_is_rejected(tmp_path: Path, url: str) -> None:
    with pytest.raises(ConfigError):
        load_settings(url, environ={}, cwd=tmp_path)


def test_bad_numeric_environment_value(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(environ={"HTTP_TIMEOUT": "soon"}, cwd=tmp_path)


def test_site_file_values_are_cast(tmp_path: Path) -> None:
    (tmp_path / "site.yml").write_text(
        'sample_size: "5"\ntimeout: 10\nsite_name: 560005\ntoken:\n',
        encoding="utf-8",
    )

    settings = load_settings(environ={}, cwd=tmp_path)

    assert settings.sample_size == 5
    assert settings.timeout == 10.0
    assert settings.site_name == "560005"
    assert settings.token is None
