from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config import Settings
from src.core import ConfigurationException
from src.shared.api.permissions import has_permission
from src.tickets.infrastructure import YAMLCategoryConfigProvider

ROOT = Path(__file__).resolve().parents[1]


def test_settings_defaults(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.default_sla_hours == 24
    assert settings.default_category_code == "internet_issue"
    assert settings.system_author_name == "System"
    assert not settings.is_sqlite


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./data/test.db")
    monkeypatch.setenv("DEFAULT_SLA_HOURS", "12")
    settings = Settings(_env_file=None)

    assert settings.is_sqlite
    assert settings.default_sla_hours == 12


def test_invalid_environment_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="qa")


def test_load_category_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "categories.yaml"
    config_path.write_text(
        """
categories:
  - code: internet_issue
    name: Internet Issue
    sla_hours: 4
  - code: billing
    name: Billing
    sla_hours: 24
    description: Invoices and payments
""".strip(),
        encoding="utf-8",
    )

    config = YAMLCategoryConfigProvider(config_path).load()
    assert [c.code for c in config.categories] == ["internet_issue", "billing"]
    assert config.categories[1].to_domain().description == "Invoices and payments"


def test_shipped_category_yaml_is_valid() -> None:
    config = YAMLCategoryConfigProvider(ROOT / "categories.yaml").load()
    assert "internet_issue" in {c.code for c in config.categories}


def test_missing_category_yaml_yields_empty_catalog(tmp_path: Path) -> None:
    assert YAMLCategoryConfigProvider(tmp_path / "nope.yaml").load().categories == []


@pytest.mark.parametrize(
    "body",
    [
        "categories:\n  - code: a\n    name: A\n    sla_hours: 0\n",
        "categories:\n  - code: a\n    name: A\n    sla_hours: 1\n  - code: a\n    name: B\n    sla_hours: 2\n",
        "categories: [unclosed\n",
    ],
)
def test_invalid_category_yaml(tmp_path: Path, body: str) -> None:
    config_path = tmp_path / "categories.yaml"
    config_path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigurationException):
        YAMLCategoryConfigProvider(config_path).load()


@pytest.mark.parametrize(
    "role, permission, allowed",
    [
        ("admin", "manage_network", True),
        ("manager", "delete_records", True),
        ("manager", "manage_network", False),
        ("technician", "manage_network", True),
        ("technician", "delete_records", False),
        ("support", "delete_records", False),
        ("ADMIN", "manage_settings", True),
        (None, "delete_records", False),
        ("intern", "delete_records", False),
    ],
)
def test_role_permissions(role, permission, allowed) -> None:
    assert has_permission(role, permission) is allowed
