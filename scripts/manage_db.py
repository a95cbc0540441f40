"""
Create or reset the NeuralPrep study database.

"reset" is DANGEROUS: it deletes all performance history and sessions.

Usage:
    python -m scripts.manage_db init
    python -m scripts.manage_db reset
"""

import argparse
import logging

from neuralprep import settings
from neuralprep.sm2.database import StudyDatabase

logger = logging.getLogger("scripts.manage_db")


def main():
    parser = argparse.ArgumentParser(description="Manage the NeuralPrep study database")
    parser.add_argument("action", choices=["init", "reset"])
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument("--yes", action="store_true", help="Skip the reset confirmation prompt")
    args = parser.parse_args()

    settings.configure_logging()
    database = StudyDatabase(args.database_url)

    if args.action == "init":
        database.init_db()
        logger.info("Database schema ready")
        return

    print("This will DELETE all performance records, sessions and templates.")
    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("Cancelled. No changes made.")
            return

    database.reset_db()
    logger.info("Database reset complete")


if __name__ == "__main__":
    main()
