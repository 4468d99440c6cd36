"""
Seed a local database with an open enquiry and a funded broker wallet.

Usage: python init_enquiry.py [enquiry_id] [broker_id]
"""
import asyncio
import logging
import sys

from credit_auction.core.logging import configure_logging
from credit_auction.infrastructure.database import get_session, init_db
from credit_auction.modules.enquiries import EnquiryService
from credit_auction.modules.wallets import WalletService

logger = logging.getLogger("credit_auction.init_enquiry")

DEFAULT_ENQUIRY_ID = "enquiry-demo-001"
DEFAULT_BROKER_ID = "broker-demo-001"


async def create_default_enquiry(enquiry_id: str, broker_id: str) -> None:
    """Register the enquiry if it is missing and open the broker's wallet."""
    await init_db()

    async for db in get_session():
        enquiries = EnquiryService.with_session(db)
        if await enquiries.get(enquiry_id) is None:
            await enquiries.register(enquiry_id=enquiry_id)
            logger.info("Registered enquiry %s", enquiry_id)
        else:
            logger.info("Enquiry %s already exists", enquiry_id)

        wallet = await WalletService.with_session(db).ensure_wallet(broker_id)
        logger.info("Broker %s wallet %s holds %s credits", broker_id, wallet.wallet_id, wallet.balance)


if __name__ == "__main__":
    configure_logging()
    args = sys.argv[1:]
    asyncio.run(
        create_default_enquiry(
            args[0] if args else DEFAULT_ENQUIRY_ID,
            args[1] if len(args) > 1 else DEFAULT_BROKER_ID,
        )
    )
