from dotenv import load_dotenv
import logging
import os
from benchsession.execution.observability import ObservabilitySettings, make_json_event_logger
from benchsession.execution.postgres import PostgresSessionConnector


def main():
    # Load environment variables from .env file
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    # Build connection string from environment variables
    db_host = os.getenv("PG_HOST", "127.0.0.1")
    db_port = os.getenv("PG_PORT", "5432")
    db_name = os.getenv("PG_DB", "pagila")
    db_user = os.getenv("PG_USER", "postgres")
    db_password = os.getenv("PG_PASSWORD", "password")

    connection_string = f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    # Every connection handed out has the session script applied; events go to the log
    connector = PostgresSessionConnector(
        connection_string,
        connect_timeout_seconds=5,
        observability_settings=ObservabilitySettings(
            event_observer=make_json_event_logger(logger=logging.getLogger("benchsession.sample")),
            metadata={"sample": "postgres"},
        ),
    )

    with connector.connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT name, setting FROM pg_settings WHERE name IN ('standard_conforming_strings', 'client_min_messages')")
            for name, setting in cur.fetchall():
                print(f"{name} = {setting}")


if __name__ == "__main__":
    main()
