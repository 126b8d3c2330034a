import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlmodel import SQLModel

VERSIONS = Path(__file__).resolve().parent.parent / "alembic" / "versions"


def _load_revision():
    path = next(VERSIONS.glob("*_create_storefront_tables.py"))
    spec = importlib.util.spec_from_file_location("create_storefront_tables", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def migrated():
    engine = sa.create_engine("sqlite://")
    revision = _load_revision()
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()
        yield conn, revision


def test_upgrade_matches_models(migrated):
    conn, _ = migrated
    inspector = sa.inspect(conn)

    for table in SQLModel.metadata.sorted_tables:
        migrated_columns = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated_columns == set(table.columns.keys()), table.name


def test_order_reference_and_transaction_are_unique(migrated):
    conn, _ = migrated
    indexes = {ix["name"]: ix for ix in sa.inspect(conn).get_indexes("order")}

    assert indexes["ix_order_order_id"]["unique"]
    assert indexes["ix_order_payment_transaction_id"]["unique"]
    assert not indexes["ix_order_payment_merchant_uid"]["unique"]


def test_downgrade_drops_everything(migrated):
    conn, revision = migrated

    with Operations.context(MigrationContext.configure(conn)):
        revision.downgrade()

    assert sa.inspect(conn).get_table_names() == []
