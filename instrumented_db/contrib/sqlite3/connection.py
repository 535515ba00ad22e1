import sqlite3

from ...ext.sql import IsolationLevel
from ..dbapi import DbApiConnection
from ..dbapi import DbApiProviderFactory


# collection name -> sqlite_master type
SCHEMA_COLLECTIONS = {
    "tables": "table",
    "indexes": "index",
    "views": "view",
    "triggers": "trigger",
}


class SQLiteConnection(DbApiConnection):
    """Connection over the built-in sqlite module.

    The driver's implicit transactions are turned off (``isolation_level=None``)
    so that transactions only exist between :meth:`begin_transaction` and
    commit or rollback, and cover DDL as well. SQLite transactions are always
    serializable: weaker levels are upgraded, and ``SERIALIZABLE`` also takes
    the write lock up front.
    """

    begin_statements = {
        IsolationLevel.UNSPECIFIED: "BEGIN",
        IsolationLevel.READ_COMMITTED: "BEGIN",
        IsolationLevel.REPEATABLE_READ: "BEGIN",
        IsolationLevel.SERIALIZABLE: "BEGIN IMMEDIATE",
    }

    def __init__(self, database=":memory:", **connect_kwargs):
        connect_kwargs.setdefault("isolation_level", None)
        super(SQLiteConnection, self).__init__(sqlite3, database, **connect_kwargs)

    @property
    def database(self):
        return "main"

    @property
    def server_version(self):
        return sqlite3.sqlite_version

    @property
    def connection_timeout(self):
        return int(self._connect_kwargs.get("timeout", 5))

    def get_schema(self, collection_name=None, restriction_values=None):
        """Describe the database objects of one collection.

        Without a collection name, return the collection names. The only
        restriction understood is the object name, as first value.
        """
        if collection_name is None:
            return sorted(SCHEMA_COLLECTIONS)

        try:
            object_type = SCHEMA_COLLECTIONS[collection_name.lower()]
        except KeyError:
            raise ValueError("unknown schema collection %r" % (collection_name,))

        query = "SELECT type, name, tbl_name, sql FROM sqlite_master WHERE type = ?"
        parameters = [object_type]
        if restriction_values and restriction_values[0] is not None:
            query += " AND name = ?"
            parameters.append(restriction_values[0])

        cursor = self.raw_connection.execute(query + " ORDER BY name", parameters)
        try:
            return [dict(zip(("type", "name", "tbl_name", "sql"), row)) for row in cursor.fetchall()]
        finally:
            cursor.close()


class SQLiteProviderFactory(DbApiProviderFactory):
    connection_class = SQLiteConnection

    def __init__(self, **connect_kwargs):
        super(SQLiteProviderFactory, self).__init__(sqlite3, **connect_kwargs)

    def create_connection(self):
        return self.connection_class(**self._connect_kwargs)
