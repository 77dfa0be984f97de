from __future__ import annotations

from pathlib import Path

import pytest

from unionwatch.config import (
    ConfigurationError,
    CustomFieldSetting,
    MissingConfigurationError,
    get_database_config,
    get_firebase_config,
    get_gemini_config,
    get_ingest_config,
    get_storage_config,
    get_store_backend,
    require_env_var,
    require_env_vars,
)
from unionwatch.config.env import float_env_var, optional_env_var
from unionwatch.config.gemini import DEFAULT_GEMINI_MODEL
from unionwatch.config.ingest import DEFAULT_BATCH_COOLDOWN_SECONDS


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRST_VAR", raising=False)
    monkeypatch.setenv("SECOND_VAR", "  ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["FIRST_VAR", "SECOND_VAR"])

    assert exc.value.names == ("FIRST_VAR", "SECOND_VAR")
    assert "FIRST_VAR, SECOND_VAR" in str(exc.value)


def test_require_env_var_returns_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_var("EXAMPLE_VAR") == "value"


def test_optional_env_var_strips_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PADDED_VAR", "  padded ")
    monkeypatch.setenv("BLANK_VAR", "")

    assert optional_env_var("PADDED_VAR") == "padded"
    assert optional_env_var("BLANK_VAR", "fallback") == "fallback"


@pytest.mark.parametrize("raw", ["abc", "-1"])
def test_float_env_var_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("COOLDOWN", raw)

    with pytest.raises(ConfigurationError):
        float_env_var("COOLDOWN", 1.0)


def test_gemini_config_prefers_explicit_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")

    assert get_gemini_config(api_key="from-settings").api_key == "from-settings"
    assert get_gemini_config(api_key="   ").api_key == "from-env"


def test_gemini_config_requires_a_key() -> None:
    with pytest.raises(MissingConfigurationError):
        get_gemini_config()


def test_gemini_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "secret")

    config = get_gemini_config()

    assert config.model == DEFAULT_GEMINI_MODEL
    assert config.resilience.ratelimit is not None
    assert "POST" in config.resilience.retry.allowed_methods


def test_firebase_config_trims_trailing_slash(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIREBASE_DB_URL", "https://example.firebaseio.com/")
    monkeypatch.setenv("FIREBASE_SECRET", "s3cret")

    config = get_firebase_config()

    assert config.db_url == "https://example.firebaseio.com"
    assert config.collection == "sindicatos"
    assert config.resilience.base_url == "https://example.firebaseio.com/"


def test_firebase_config_requires_url_and_secret() -> None:
    with pytest.raises(MissingConfigurationError) as exc:
        get_firebase_config()

    assert "FIREBASE_DB_URL" in str(exc.value)
    assert "FIREBASE_SECRET" in str(exc.value)


def test_store_backend_selection(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_store_backend() == "firebase"

    monkeypatch.setenv("UNIONWATCH_STORE", " SQLite ")
    assert get_store_backend() == "sqlite"

    monkeypatch.setenv("UNIONWATCH_STORE", "mongo")
    with pytest.raises(ConfigurationError):
        get_store_backend()


def test_database_config_defaults_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("UNIONWATCH_DATA_DIR", str(tmp_path))

    config = get_database_config()

    assert config.uri == f"sqlite+pysqlite:///{tmp_path.resolve() / 'unionwatch.db'}"
    assert get_storage_config().database_path().parent == tmp_path.resolve()


def test_database_config_prefers_env_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_ingest_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_ingest_config().batch_cooldown_seconds == DEFAULT_BATCH_COOLDOWN_SECONDS

    monkeypatch.setenv("UNIONWATCH_BATCH_COOLDOWN_SECONDS", "0.5")
    monkeypatch.setenv("UNIONWATCH_EVENT_CATEGORIES", "Paro, toma,paro,")

    config = get_ingest_config()

    assert config.batch_cooldown_seconds == 0.5
    assert config.extra_event_categories == ("paro", "toma")


def test_ingest_config_reads_custom_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "UNIONWATCH_CUSTOM_FIELDS", "datosBasicos.afiliados:Number, root.fundacion:date,,"
    )

    config = get_ingest_config()

    assert config.custom_fields == (
        CustomFieldSetting(section="datosBasicos", key="afiliados", type="number"),
        CustomFieldSetting(section="root", key="fundacion", type="date"),
    )


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("afiliados", "section.key"),
        ("sede.afiliados", "section.key"),
        ("datosBasicos.", "section.key"),
        ("root.fundacion:fecha", "unknown type"),
    ],
)
def test_ingest_config_rejects_bad_custom_fields(
    monkeypatch: pytest.MonkeyPatch, raw: str, message: str
) -> None:
    monkeypatch.setenv("UNIONWATCH_CUSTOM_FIELDS", raw)

    with pytest.raises(ConfigurationError, match=message):
        get_ingest_config()
