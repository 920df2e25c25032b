"""Graph store connection (Memgraph / Neo4j over bolt).

Usage::

    from agrihub.db.connection import GraphStore

    store = GraphStore.connect()
    rows = store.read_query("MATCH (f:Farm) RETURN f.farmName AS farmName", {})
    store.close()

Rows come back as plain ``dict`` objects keyed by the ``RETURN`` aliases.
The store is schema-flexible, so any key may be absent, ``None`` or of an
unexpected type; use :mod:`agrihub.db.records` to read them.
"""

from __future__ import annotations

from typing import Any, Optional

from neo4j import Driver, GraphDatabase, ManagedTransaction, ResultSummary
from neo4j.exceptions import DriverError, Neo4jError

from agrihub.config import settings
from agrihub.errors import QueryError

Row = dict[str, Any]


class GraphStore:
    """Parameterised read/write query execution against the graph database."""

    def __init__(self, driver: Driver) -> None:
        self._driver = driver

    @classmethod
    def connect(
        cls,
        uri: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> "GraphStore":
        """Open a driver and verify connectivity.

        Raises:
            QueryError: If the database cannot be reached.
        """
        driver = GraphDatabase.driver(
            uri or settings.memgraph_uri,
            auth=(username or settings.memgraph_username, password or settings.memgraph_password),
            connection_timeout=settings.request_timeout,
        )
        try:
            driver.verify_connectivity()
        except (DriverError, Neo4jError) as exc:
            driver.close()
            raise QueryError(f"failed to connect to graph store: {exc}") from exc
        print("[DB] Graph store initialised.")
        return cls(driver)

    def read_query(self, query: str, params: Optional[dict[str, Any]] = None) -> list[Row]:
        """Run a read query and return every row.

        Raises:
            QueryError: On connectivity or query failure.
        """

        def work(tx: ManagedTransaction) -> list[Row]:
            result = tx.run(query, params or {})
            return [record.data() for record in result]

        try:
            with self._driver.session() as session:
                return session.execute_read(work)
        except (DriverError, Neo4jError) as exc:
            raise QueryError(f"read query failed: {exc}") from exc

    def write_query(self, query: str, params: Optional[dict[str, Any]] = None) -> ResultSummary:
        """Run a write query and return its summary.

        Raises:
            QueryError: On connectivity or query failure.
        """

        def work(tx: ManagedTransaction) -> ResultSummary:
            return tx.run(query, params or {}).consume()

        try:
            with self._driver.session() as session:
                return session.execute_write(work)
        except (DriverError, Neo4jError) as exc:
            raise QueryError(f"write query failed: {exc}") from exc

    def close(self) -> None:
        self._driver.close()
