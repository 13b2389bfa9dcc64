"""Alembic migrations against a throwaway SQLite file."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from click.testing import CliRunner
from sqlalchemy import create_engine, inspect

from studentms.cli.main import cli
from studentms.models import Base

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"


def _config(db_path: Path) -> Config:
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    return cfg


def _tables(db_path: Path) -> dict[str, set[str]]:
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        return {
            name: {col["name"] for col in inspector.get_columns(name)}
            for name in inspector.get_table_names()
        }
    finally:
        engine.dispose()


def test_upgrade_matches_models(tmp_path):
    db_path = tmp_path / "migrated.db"
    command.upgrade(_config(db_path), "head")

    tables = _tables(db_path)
    assert len(Base.metadata.tables) == 9
    for name, table in Base.metadata.tables.items():
        assert name in tables, name
        assert tables[name] == {col.name for col in table.columns}, name


def test_upgrade_keeps_unique_email(tmp_path):
    db_path = tmp_path / "migrated.db"
    command.upgrade(_config(db_path), "head")

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        indexes = {ix["name"]: ix for ix in inspect(engine).get_indexes("users")}
    finally:
        engine.dispose()
    assert indexes["ix_users_email"]["unique"]
    assert indexes["ix_users_username"]["unique"]


def test_downgrade_to_base(tmp_path):
    db_path = tmp_path / "migrated.db"
    cfg = _config(db_path)
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    assert set(_tables(db_path)) == {"alembic_version"}


def test_cli_migrate(tmp_path):
    db_path = tmp_path / "cli.db"
    result = CliRunner().invoke(
        cli,
        [
            "migrate",
            "--config", str(ALEMBIC_INI),
            "--database-url", f"sqlite+aiosqlite:///{db_path}",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "users" in _tables(db_path)
