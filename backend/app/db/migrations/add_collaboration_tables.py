"""
Migration script for collaborator status, invitations and share links.

Collaborators added before invitations existed were always active, so the
new `status` column defaults to ACTIVE. Invitation and share link tables
are created if missing.
"""
from sqlalchemy import inspect, text
from app.db.base import Base
from app.db.session import engine as default_engine
from app.models.trip import TripInvitation
from app.models.share_link import ShareLink

# SQLAlchemy stores enum names, not values
STATUS_DDL = "VARCHAR(13) NOT NULL DEFAULT 'ACTIVE'"


def add_status_column(engine) -> bool:
    """Add trip_collaborators.status. Returns True if the column was added."""
    existing = {column["name"] for column in inspect(engine).get_columns("trip_collaborators")}
    if "status" in existing:
        print("status column already exists, skipping column creation")
        return False
    with engine.begin() as connection:
        connection.execute(text(f"ALTER TABLE trip_collaborators ADD COLUMN status {STATUS_DDL}"))
    print("Added status column to trip_collaborators table")
    return True


def create_tables(engine) -> list:
    """Create the invitation and share link tables. Returns the names created."""
    existing = set(inspect(engine).get_table_names())
    tables = [TripInvitation.__table__, ShareLink.__table__]
    missing = [table for table in tables if table.name not in existing]
    Base.metadata.create_all(bind=engine, tables=missing)
    for table in missing:
        print(f"Created {table.name} table")
    return [table.name for table in missing]


def migrate(engine=None):
    """Add collaborator status and the collaboration tables."""
    engine = engine or default_engine
    add_status_column(engine)
    create_tables(engine)
    print("Migration completed successfully!")

if __name__ == "__main__":
    migrate()
