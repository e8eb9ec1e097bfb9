"""Create the CMS tables (content, versions, revision counters, users)."""
import sys
import os
import argparse
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cms.database import engine, Base
import cms.models  # noqa: F401 - registers all models


def init_db(reset: bool = False):
    if reset:
        print("Dropping existing tables...")
        Base.metadata.drop_all(bind=engine)
    print("Creating tables:", ", ".join(sorted(Base.metadata.tables)))
    Base.metadata.create_all(bind=engine)
    print("Database initialized successfully.")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Drop all tables first (destroys version history)")
    args = parser.parse_args()
    init_db(reset=args.reset)


if __name__ == "__main__":
    main()
