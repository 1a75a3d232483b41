from dotenv import load_dotenv
import os
from benchsession.execution.mssql import MsSqlSessionConnector


def main():
    # Load environment variables from .env file
    load_dotenv()

    # Build connection string from environment variables
    db_host = os.getenv("MSSQL_HOST", "127.0.0.1")
    db_port = os.getenv("MSSQL_PORT", "1433")
    db_name = os.getenv("MSSQL_DB", "master")
    db_user = os.getenv("MSSQL_USER", "sa")
    db_password = os.getenv("MSSQL_PASSWORD", "password")
    db_driver = os.getenv("MSSQL_DRIVER", "ODBC Driver 18 for SQL Server")

    connection_string = (
        f"mssql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
        f"?driver={db_driver.replace(' ', '+')}&encrypt=no&trust_server_certificate=yes&app=benchsession"
    )

    connector = MsSqlSessionConnector(connection_info=connection_string)

    with connector.connection() as conn:
        cursor = conn.cursor()
        try:
            for option in ("ANSI_NULLS", "ARITHABORT", "QUOTED_IDENTIFIER", "NUMERIC_ROUNDABORT"):
                cursor.execute("SELECT CAST(SESSIONPROPERTY(?) AS INT)", [option])
                print(f"{option} = {cursor.fetchone()[0]}")
        finally:
            cursor.close()


if __name__ == "__main__":
    main()
