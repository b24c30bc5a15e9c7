"""
Suspend seller subscriptions whose next payment date has passed.
Meant to run from cron, e.g. daily:

    python suspend_overdue_subscriptions.py [--grace-days N]
"""
import argparse
import logging
from app.database import SessionLocal
from app.services.subscription_service import suspend_overdue_subscriptions
from app.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--grace-days", type=int, default=None, help="Days past due before suspending (default: SUBSCRIPTION_GRACE_DAYS)")
    args = parser.parse_args(argv)

    configure_logging()
    db = SessionLocal()
    try:
        suspended = suspend_overdue_subscriptions(db, grace_days=args.grace_days)
        for subscription in suspended:
            logger.info(f"Suspended subscription {subscription.id} (user {subscription.user_id}, due {subscription.next_payment_date})")
        print(f"Suspended {len(suspended)} subscription(s)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
