import pytest
from sqlalchemy import Connection

from billdesk.repositories.sqlalchemy import (
    SQLAlchemyBillSequenceRepository,
    SQLAlchemyCustomerBillRepository,
    SQLAlchemyInventoryRepository,
    SQLAlchemyManualBillRepository,
)


@pytest.fixture()
def bill_repo(db_connection: Connection) -> SQLAlchemyCustomerBillRepository:
    return SQLAlchemyCustomerBillRepository(db_connection)


@pytest.fixture()
def inventory_repo(db_connection: Connection) -> SQLAlchemyInventoryRepository:
    return SQLAlchemyInventoryRepository(db_connection)


@pytest.fixture()
def sequence_repo(db_connection: Connection) -> SQLAlchemyBillSequenceRepository:
    return SQLAlchemyBillSequenceRepository(db_connection)


@pytest.fixture()
def manual_bill_repo(db_connection: Connection) -> SQLAlchemyManualBillRepository:
    return SQLAlchemyManualBillRepository(db_connection)
