"""
Migration script to add collaborator columns to the expenses table.

Older expenses only carry free-text `payer` / `split_with`. This adds the
`payer_user_id` / `split_user_ids` columns and fills in a missing
`split_with` with the trip's members, which is what the old client assumed
for such rows. Settlement skips expenses without a split otherwise.
"""
from sqlalchemy import inspect, text
from sqlalchemy.orm import Session
from app.db.session import SessionLocal, engine as default_engine
from app.models.expense import Expense
from app.models.trip import Trip

NEW_COLUMNS = {
    "payer_user_id": "INTEGER NULL",
    "split_user_ids": "JSON NULL",
}


def add_columns(engine) -> list:
    """Add missing columns. Returns the names of the columns added."""
    existing = {column["name"] for column in inspect(engine).get_columns("expenses")}
    added = []
    with engine.begin() as connection:
        for name, ddl in NEW_COLUMNS.items():
            if name in existing:
                print(f"{name} column already exists, skipping column creation")
                continue
            connection.execute(text(f"ALTER TABLE expenses ADD COLUMN {name} {ddl}"))
            print(f"Added {name} column to expenses table")
            added.append(name)
    return added


def backfill_split_with(db: Session) -> int:
    """Give legacy expenses without a split the trip's members. Returns rows updated."""
    expenses = db.query(Expense).filter(
        Expense.payer_user_id.is_(None),
        Expense.payer.isnot(None)
    ).all()
    
    updated = 0
    for expense in expenses:
        if expense.split_with:
            continue
        trip = db.query(Trip).filter(Trip.id == expense.trip_id).first()
        members = list(trip.members or []) if trip else []
        if not members:
            continue
        expense.split_with = members
        updated += 1
    
    db.commit()
    print(f"Backfilled split_with for {updated} expenses")
    return updated


def migrate(engine=None):
    """Add collaborator columns and backfill legacy splits."""
    engine = engine or default_engine
    add_columns(engine)
    
    db = SessionLocal(bind=engine)
    try:
        backfill_split_with(db)
        print("Migration completed successfully!")
    except Exception as e:
        db.rollback()
        print(f"Migration failed: {e}")
        raise
    finally:
        db.close()

if __name__ == "__main__":
    migrate()
