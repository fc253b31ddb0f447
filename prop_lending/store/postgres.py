"""PostgreSQL-backed repositories."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from prop_lending.config import PostgresConfig
from prop_lending.exceptions import EntityNotFoundError, ReferentialIntegrityError, RepositoryError
from prop_lending.models import (
    ENCUMBERING_LOAN_STATUSES,
    Loan,
    LoanStatus,
    PaymentStatus,
    Property,
    PropertyStatus,
    ScheduledPayment,
)
from prop_lending.sinks.serialization import record_to_dict
from prop_lending.store.base import LoanRepository, PropertyRepository

logger = logging.getLogger(__name__)

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS properties (
    property_id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    location TEXT NOT NULL DEFAULT '',
    image_url TEXT NOT NULL DEFAULT '',
    value DOUBLE PRECISION NOT NULL CHECK (value > 0),
    status TEXT NOT NULL,
    token_id TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_properties_owner ON properties (lower(owner));
CREATE TABLE IF NOT EXISTS loans (
    loan_id TEXT PRIMARY KEY,
    borrower TEXT NOT NULL,
    property_id TEXT NOT NULL REFERENCES properties (property_id),
    token_id TEXT,
    chain_loan_id TEXT,
    amount DOUBLE PRECISION NOT NULL,
    interest_rate DOUBLE PRECISION NOT NULL,
    term_months INTEGER NOT NULL,
    collateral_amount DOUBLE PRECISION NOT NULL,
    loan_to_value DOUBLE PRECISION NOT NULL,
    status TEXT NOT NULL,
    start_date DATE,
    repayment_schedule JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_loans_borrower ON loans (lower(borrower));
CREATE INDEX IF NOT EXISTS idx_loans_property ON loans (property_id);
"""


def create_schema(conn: psycopg.Connection) -> None:
    """Create the lending tables if they do not exist."""
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_DDL)
        conn.commit()
    except psycopg.Error as e:
        conn.rollback()
        raise RepositoryError(f"Cannot create lending schema: {e}") from e
    logger.info("Lending schema ensured")


def schedule_to_json(schedule: list[ScheduledPayment]) -> list[dict[str, Any]]:
    """Serialize a schedule for a JSONB column."""
    return [record_to_dict(entry) for entry in schedule]


def schedule_from_json(data: list[dict[str, Any]] | None) -> list[ScheduledPayment]:
    """Rebuild a schedule from its JSONB representation."""
    return [
        ScheduledPayment(
            due_date=date.fromisoformat(entry["due_date"]),
            amount=float(entry["amount"]),
            status=PaymentStatus(entry["status"]),
            paid_date=date.fromisoformat(entry["paid_date"]) if entry.get("paid_date") else None,
        )
        for entry in data or []
    ]


class _PostgresRepository:
    """Connection handling shared by the PostgreSQL repositories."""

    def __init__(
        self,
        config: PostgresConfig | None = None,
        conn: psycopg.Connection | None = None,
    ) -> None:
        if conn is None:
            config = config or PostgresConfig()
            try:
                conn = psycopg.connect(config.connection_string)
            except psycopg.Error as e:
                raise RepositoryError(f"Cannot connect to {config.host}:{config.port}: {e}") from e
        self._conn = conn

    def _execute(self, sql: str, params: tuple, fetch: Callable[[Any], Any]) -> Any:
        """Run one statement in its own transaction.

        Commits on success, reads included, and rolls back on any error.
        """
        try:
            with self._conn.cursor(row_factory=dict_row) as cur:
                cur.execute(sql, params)
                result = fetch(cur)
            self._conn.commit()
            return result
        except psycopg.errors.ForeignKeyViolation as e:
            self._conn.rollback()
            raise ReferentialIntegrityError(str(e)) from e
        except psycopg.errors.UniqueViolation as e:
            self._conn.rollback()
            raise RepositoryError(f"Duplicate record: {e}") from e
        except psycopg.Error as e:
            self._conn.rollback()
            raise RepositoryError(f"Query failed: {e}") from e

    def _fetchall(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        return self._execute(sql, params, lambda cur: cur.fetchall())

    def _fetchone(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        return self._execute(sql, params, lambda cur: cur.fetchone())

    def ensure_schema(self) -> None:
        """Create the lending tables on this connection if needed."""
        create_schema(self._conn)

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()


class PostgresPropertyRepository(_PostgresRepository, PropertyRepository):
    """Property repository stored in the ``properties`` table."""

    def get(self, property_id: str) -> Property | None:
        row = self._fetchone("SELECT * FROM properties WHERE property_id = %s", (property_id,))
        return self._to_property(row) if row else None

    def list_all(self) -> list[Property]:
        rows = self._fetchall("SELECT * FROM properties ORDER BY created_at")
        return [self._to_property(r) for r in rows]

    def list_by_owner(self, owner: str) -> list[Property]:
        rows = self._fetchall(
            "SELECT * FROM properties WHERE lower(owner) = lower(%s) ORDER BY created_at",
            (owner,),
        )
        return [self._to_property(r) for r in rows]

    def list_by_status(self, status: PropertyStatus) -> list[Property]:
        rows = self._fetchall(
            "SELECT * FROM properties WHERE status = %s ORDER BY created_at",
            (PropertyStatus(status).value,),
        )
        return [self._to_property(r) for r in rows]

    def add(self, prop: Property) -> Property:
        if prop.created_at is None:
            prop.created_at = datetime.now()
        row = self._fetchone(
            """
            INSERT INTO properties (
                property_id, owner, title, description, location, image_url,
                value, status, token_id, created_at, updated_at
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (
                prop.property_id,
                prop.owner,
                prop.title,
                prop.description,
                prop.location,
                prop.image_url,
                prop.value,
                prop.status.value,
                prop.token_id,
                prop.created_at,
                prop.updated_at,
            ),
        )
        return self._to_property(row) if row else prop

    def update_status(
        self,
        property_id: str,
        status: PropertyStatus,
        token_id: str | None = None,
    ) -> Property:
        row = self._fetchone(
            """
            UPDATE properties
            SET status = %s, token_id = COALESCE(%s, token_id), updated_at = %s
            WHERE property_id = %s
            RETURNING *
            """,
            (PropertyStatus(status).value, token_id, datetime.now(), property_id),
        )
        if row is None:
            raise EntityNotFoundError(f"Property {property_id} not found")
        return self._to_property(row)

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS n FROM properties")
        return int(row["n"]) if row else 0

    @staticmethod
    def _to_property(row: dict[str, Any]) -> Property:
        return Property(
            property_id=row["property_id"],
            owner=row["owner"],
            title=row["title"],
            value=float(row["value"]),
            status=PropertyStatus(row["status"]),
            description=row.get("description") or "",
            location=row.get("location") or "",
            image_url=row.get("image_url") or "",
            token_id=row.get("token_id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class PostgresLoanRepository(_PostgresRepository, LoanRepository):
    """Loan repository stored in the ``loans`` table.

    The repayment schedule lives in a JSONB column; the encumbrance total is a
    single aggregate query.
    """

    def get(self, loan_id: str) -> Loan | None:
        row = self._fetchone("SELECT * FROM loans WHERE loan_id = %s", (loan_id,))
        return self._to_loan(row) if row else None

    def list_all(self) -> list[Loan]:
        rows = self._fetchall("SELECT * FROM loans ORDER BY created_at")
        return [self._to_loan(r) for r in rows]

    def list_by_borrower(self, borrower: str) -> list[Loan]:
        rows = self._fetchall(
            "SELECT * FROM loans WHERE lower(borrower) = lower(%s) ORDER BY created_at",
            (borrower,),
        )
        return [self._to_loan(r) for r in rows]

    def list_by_property(self, property_id: str) -> list[Loan]:
        rows = self._fetchall(
            "SELECT * FROM loans WHERE property_id = %s ORDER BY created_at",
            (property_id,),
        )
        return [self._to_loan(r) for r in rows]

    def add(self, loan: Loan) -> Loan:
        if loan.created_at is None:
            loan.created_at = datetime.now()
        row = self._fetchone(
            """
            INSERT INTO loans (
                loan_id, borrower, property_id, token_id, chain_loan_id, amount,
                interest_rate, term_months, collateral_amount, loan_to_value, status,
                start_date, repayment_schedule, created_at, updated_at
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (
                loan.loan_id,
                loan.borrower,
                loan.property_id,
                loan.token_id,
                loan.chain_loan_id,
                loan.amount,
                loan.interest_rate,
                loan.term_months,
                loan.collateral_amount,
                loan.loan_to_value,
                loan.status.value,
                loan.start_date,
                Jsonb(schedule_to_json(loan.repayment_schedule)),
                loan.created_at,
                loan.updated_at,
            ),
        )
        return self._to_loan(row) if row else loan

    def update_status(self, loan_id: str, status: LoanStatus) -> Loan:
        row = self._fetchone(
            """
            UPDATE loans
            SET status = %s, updated_at = %s
            WHERE loan_id = %s
            RETURNING *
            """,
            (LoanStatus(status).value, datetime.now(), loan_id),
        )
        if row is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        return self._to_loan(row)

    def activate(
        self,
        loan_id: str,
        start_date: date,
        schedule: list[ScheduledPayment],
        chain_loan_id: str | None = None,
    ) -> Loan:
        row = self._fetchone(
            """
            UPDATE loans
            SET status = %s, start_date = %s, repayment_schedule = %s,
                chain_loan_id = COALESCE(%s, chain_loan_id), updated_at = %s
            WHERE loan_id = %s
            RETURNING *
            """,
            (
                LoanStatus.ACTIVE.value,
                start_date,
                Jsonb(schedule_to_json(schedule)),
                chain_loan_id,
                datetime.now(),
                loan_id,
            ),
        )
        if row is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        return self._to_loan(row)

    def update_schedule(self, loan_id: str, schedule: list[ScheduledPayment]) -> Loan:
        row = self._fetchone(
            """
            UPDATE loans
            SET repayment_schedule = %s, updated_at = %s
            WHERE loan_id = %s
            RETURNING *
            """,
            (Jsonb(schedule_to_json(schedule)), datetime.now(), loan_id),
        )
        if row is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        return self._to_loan(row)

    def count(self) -> int:
        row = self._fetchone("SELECT COUNT(*) AS n FROM loans")
        return int(row["n"]) if row else 0

    def encumbered_amount(self, property_id: str) -> float:
        row = self._fetchone(
            """
            SELECT COALESCE(SUM(amount), 0) AS total
            FROM loans
            WHERE property_id = %s AND status = ANY(%s)
            """,
            (property_id, sorted(s.value for s in ENCUMBERING_LOAN_STATUSES)),
        )
        return float(row["total"]) if row else 0.0

    @staticmethod
    def _to_loan(row: dict[str, Any]) -> Loan:
        return Loan(
            loan_id=row["loan_id"],
            borrower=row["borrower"],
            property_id=row["property_id"],
            amount=float(row["amount"]),
            interest_rate=float(row["interest_rate"]),
            term_months=int(row["term_months"]),
            collateral_amount=float(row["collateral_amount"]),
            loan_to_value=float(row["loan_to_value"]),
            status=LoanStatus(row["status"]),
            token_id=row.get("token_id"),
            chain_loan_id=row.get("chain_loan_id"),
            start_date=row.get("start_date"),
            repayment_schedule=schedule_from_json(row.get("repayment_schedule")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
