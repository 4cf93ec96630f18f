"""
Company lookup used by the job wizard.

Jobs reference companies by id, but the wizard collects a free-text
company name; it is matched case-insensitively or created on the fly.
"""

import logging

from sqlalchemy import text

logger = logging.getLogger(__name__)


def find_or_create_company(db, name: str) -> int:
    """
    Resolve a company name to its id inside the caller's transaction.

    Args:
        db: Open SQLAlchemy session
        name: Company name as typed (surrounding whitespace ignored)

    Returns:
        company_id of the existing or newly inserted company
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Company name is required")

    row = db.execute(
        text("SELECT company_id FROM companies WHERE LOWER(name) = LOWER(:name) LIMIT 1"),
        {"name": name}
    ).fetchone()
    if row:
        return row[0]

    row = db.execute(
        text("""
            INSERT INTO companies (name, country, is_active)
            VALUES (:name, 'Indonesia', TRUE)
            RETURNING company_id
        """),
        {"name": name}
    ).fetchone()
    logger.info("Created company '%s' (id=%d)", name, row[0])
    return row[0]
