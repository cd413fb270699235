from sqlalchemy import event

from library_api.extensions import db


def _is_sqlite(app) -> bool:
    return app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite")


def configure_sqlite(app):
    """
    SQLite engine tuning, applied only when the database URI is SQLite.

    - pysqlite's own BEGIN handling is switched off and every transaction is
      opened with BEGIN IMMEDIATE, so concurrent writers queue on the busy
      timeout at transaction start. With a deferred BEGIN two connections can
      both hold SHARED and then fail the upgrade to RESERVED ("database is locked").
    - foreign keys are enforced.
    """
    if not _is_sqlite(app):
        return

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        app.logger.info("[db_sqlite] BEGIN IMMEDIATE + foreign_keys enabled")
