"""
Run migrations: collaborator columns on expenses, then collaboration tables.
"""
import sys
import os

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.db.migrations import add_collaborator_columns_to_expenses, add_collaboration_tables

if __name__ == "__main__":
    add_collaborator_columns_to_expenses.migrate()
    add_collaboration_tables.migrate()
