from __future__ import annotations

import threading

from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy import event
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.pool import QueuePool
from sqlalchemy.orm import scoped_session, sessionmaker

from occupancy.context.core import StoppableService


from typing import Any
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Iterator
    from sqlalchemy.engine import Connection


SERIALIZABLE = 'SERIALIZABLE'


class SessionProvider(StoppableService):
    """Global session utility. On PostgreSQL it provides a SERIALIZABLE
    session to occupancy. If you want to override this provider, be sure to
    set the isolation_level to SERIALIZABLE as well.

    The availability check is a read followed by a write. Two transactions
    claiming overlapping ranges on the same property must not both succeed,
    which the services guarantee through property locks and, on PostgreSQL,
    through advisory locks. Write units holding advisory locks run at READ
    COMMITTED, so their reads see whatever the unit they waited for has
    committed. Everything else runs at the configured isolation level.

    SQLite is supported for testing and single process use. Pysqlite only
    begins a transaction once something is written, so the provider emits
    BEGIN itself on SQLite connections, putting the availability check
    into the same transaction as the write.

    SQLite locks the whole file for writing. A write unit upgrading its
    read lock fails at once if another unit holds the write lock, so write
    units on the same SQLite database take turns within the process, no
    matter which properties they touch.

    """

    def __init__(
        self,
        dsn: str,
        isolation_level: str = SERIALIZABLE,
        engine_config: dict[str, Any] | None = None,
        session_config: dict[str, Any] | None = None
    ):
        assert dsn, 'No database configured, set settings.dsn'

        self.dsn = dsn
        self.url = make_url(dsn)

        if self.is_postgres:
            self.assert_valid_postgres_version(dsn)

            self.engine = create_engine(
                dsn, poolclass=QueuePool, pool_size=5, max_overflow=5,
                isolation_level=isolation_level,
                **(engine_config or {})
            )
        else:
            self.engine = create_engine(dsn, **(engine_config or {}))

            if self.is_sqlite:
                self.enable_sqlite_transactions()

        # the services return entities after committing, which must not
        # load anything again on access
        session_config = {
            'expire_on_commit': False,
            **(session_config or {})
        }

        self.session = scoped_session(sessionmaker(
            bind=self.engine, **session_config
        ))

    sqlite_writers: dict[str, threading.Lock] = {}
    sqlite_writers_lock = threading.Lock()

    @property
    def is_postgres(self) -> bool:
        return self.url.get_backend_name() == 'postgresql'

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == 'sqlite'

    def enable_sqlite_transactions(self) -> None:

        def disable_pysqlite_transactions(
            dbapi_connection: Any,
            connection_record: Any
        ) -> None:
            dbapi_connection.isolation_level = None

        def begin(connection: Connection) -> None:
            connection.exec_driver_sql('BEGIN')

        event.listen(self.engine, 'connect', disable_pysqlite_transactions)
        event.listen(self.engine, 'begin', begin)

    @contextmanager
    def writing(self) -> Iterator[None]:
        """ Holds the writer lock of the database during a write unit. Only
        SQLite needs one, other databases return at once.

        """
        if not self.is_sqlite:
            yield
            return

        with self.sqlite_writers_lock:
            lock = self.sqlite_writers.setdefault(
                self.url.database or '', threading.Lock()
            )

        with lock:
            yield

    def stop_service(self) -> None:
        """ Called by the context when the session provider is being
        discarded (mostly in testing).

        This makes sure that replacing the session provider on the context
        doesn't leave behind any idle connections.

        """

        self.session.remove()
        self.engine.dispose()

    def get_postgres_version(self, dsn: str) -> tuple[str, int]:
        """ Returns the postgres version as a tuple (string, integer).

        Uses it's own connection to be independent from any session.

        """
        query = text("""
            SELECT current_setting('server_version'),
                   current_setting('server_version_num')
        """)

        engine = create_engine(dsn)

        try:
            with engine.connect() as connection:
                result = connection.execute(query).first()
            assert result is not None
            version, number = result
            return version, int(number)
        finally:
            engine.dispose()

    def assert_valid_postgres_version(self, dsn: str) -> str:
        v, n = self.get_postgres_version(dsn)

        if n < 90100:
            raise RuntimeError(f'PostgreSQL 9.1+ is required, got {v}')

        return dsn
