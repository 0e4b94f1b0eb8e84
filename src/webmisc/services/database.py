"""
SQL script execution.
"""

import logging
import os
from typing import Any, Optional

logger = logging.getLogger(__name__)


def exec_file_query(
    connection: Any,
    sql_file: str,
    old_prefix: Optional[str] = None,
    new_prefix: Optional[str] = None
) -> bool:
    """
    Execute every statement of an SQL file.

    Table prefixes are rewritten only when both ``old_prefix`` and
    ``new_prefix`` are given.

    Args:
        connection: DB-API connection (``executescript`` is used when the
            driver offers it, as sqlite3 does)
        sql_file: Path to the SQL script
        old_prefix: Table prefix used in the script
        new_prefix: Table prefix to substitute

    Returns:
        bool: True if the script ran and was committed, False if the file
            is missing or the database rejected it (rolled back)
    """
    if not os.path.isfile(sql_file):
        logger.warning(f"SQL file not found: {sql_file}")
        return False

    with open(sql_file, 'r', encoding='utf-8') as f:
        script = f.read()

    if old_prefix is not None and new_prefix is not None:
        script = script.replace(old_prefix, new_prefix)

    # PEP 249 optional extension: drivers expose their exception classes
    # on the connection
    error_cls = getattr(connection, 'Error', Exception)

    try:
        if hasattr(connection, 'executescript'):
            connection.executescript(script)
        else:
            cursor = connection.cursor()
            try:
                cursor.execute(script)
            finally:
                cursor.close()
        connection.commit()
    except error_cls as e:
        connection.rollback()
        logger.error(f"Failed to execute SQL file {sql_file}: {e}")
        return False

    logger.info(f"Executed SQL file {sql_file}")
    return True
