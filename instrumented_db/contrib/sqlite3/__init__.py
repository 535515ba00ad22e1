"""
Instrumented connections over the built-in sqlite module.


Usage
~~~~~

Open an instrumented connection in one call::

    from instrumented_db.contrib.sqlite3 import connect

    db = connect(":memory:", handler=MyHandler())
    db.execute("CREATE TABLE users (id INTEGER, name TEXT)")
    db.execute("INSERT INTO users VALUES (?, ?)", 1, "alice")

    with db.execute_reader("SELECT * FROM users") as reader:
        for row in reader:
            print(row)

Or go through a provider factory, the way generic code discovers drivers::

    from instrumented_db.contrib.sqlite3 import provider_factory

    factory = provider_factory(handler=MyHandler())
    db = factory.create_connection()
    db.open()


Global Configuration
~~~~~~~~~~~~~~~~~~~~

Set ``INSTRUMENTED_DB_ENABLED=false`` to get plain, uninstrumented
connections from both helpers.
"""
from ...connection import InstrumentedConnection
from ...provider_factory import InstrumentedProviderFactory
from .connection import SQLiteConnection
from .connection import SQLiteProviderFactory


def connect(database=":memory:", handler=None, **connect_kwargs):
    """Open a sqlite connection and return it instrumented with ``handler``."""
    native = SQLiteConnection(database, **connect_kwargs)
    native.open()
    return InstrumentedConnection(native, handler)


def provider_factory(handler=None, **connect_kwargs):
    return InstrumentedProviderFactory(SQLiteProviderFactory(**connect_kwargs), handler)


__all__ = ["SQLiteConnection", "SQLiteProviderFactory", "connect", "provider_factory"]
