# Setup module for the EventCal API, creates the database and the events table
import logging
import database

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ["events"]


def check_db_is_setup():
    """Check if the eventcal database exists and contains all required tables."""
    db_cursor = database.get_cursor()
    db_cursor.execute("SHOW DATABASES")
    databases = [db[0] for db in db_cursor.fetchall()]

    if database.MYSQL_DATABASE not in databases:
        return False

    db_cursor.execute(f"USE {database.MYSQL_DATABASE}")
    db_cursor.execute("SHOW TABLES")
    tables = [table[0] for table in db_cursor.fetchall()]

    database.get_connection().commit()

    return all(table in tables for table in REQUIRED_TABLES)


def create_db_and_scheme():
    """Create the eventcal database and the events table."""
    db_cursor = database.get_cursor()

    db_cursor.execute(f"CREATE DATABASE IF NOT EXISTS {database.MYSQL_DATABASE};")
    db_cursor.execute(f"USE {database.MYSQL_DATABASE};")
    # All datetimes are stored as naive UTC
    db_cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS events (
            id                   INT          AUTO_INCREMENT PRIMARY KEY,
            title                VARCHAR(100) NOT NULL,
            description          VARCHAR(500) NULL,
            start_time           DATETIME(6)  NOT NULL,
            end_time             DATETIME(6)  NOT NULL,
            location             VARCHAR(255) NULL,
            color                CHAR(7)      NOT NULL DEFAULT '#1f2937',
            all_day              BOOLEAN      NOT NULL DEFAULT FALSE,
            is_recurring         BOOLEAN      NOT NULL DEFAULT FALSE,
            recurrence_pattern   ENUM('daily','weekly','monthly','yearly') NULL,
            recurrence_end       DATE         NULL,
            created_at           DATETIME     NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at           DATETIME     NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            INDEX idx_events_range (start_time, end_time),
            INDEX idx_events_recurring (is_recurring, start_time)
        );
        """
    )

    database.get_connection().commit()


def setup_database():
    """Ensure the database is configured, create schema if needed."""
    logger.info("Checking if the database is set up...")
    if not check_db_is_setup():
        logger.info("Database not found or incomplete. Setting up...")
        create_db_and_scheme()
        logger.info("Database and tables created successfully.")
        return True
    else:
        logger.info("Database is already set up.")
        return False
