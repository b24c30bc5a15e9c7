"""
Drop and recreate every table for local development.
Use `alembic upgrade head` for real deployments.
"""
import sys
from sqlalchemy import inspect
from app.database import Base, engine, database_url
import app.models  # noqa: F401

if __name__ == "__main__":
    if not database_url.startswith("sqlite") and "--force" not in sys.argv:
        print(f"Refusing to recreate non-SQLite database {engine.url!r}; pass --force to continue")
        sys.exit(1)

    print("Dropping existing tables...")
    Base.metadata.drop_all(bind=engine)

    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    tables = inspect(engine).get_table_names()
    print(f"Created tables: {', '.join(sorted(tables))}")
