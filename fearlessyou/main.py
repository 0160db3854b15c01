"""
Application bootstrap for FearlessYou.

A presentation layer calls ``open_session()`` once at launch, registers its
snapshot listener on the returned manager and forwards user intents to it.
``close_session()`` is called when the app goes to the background or exits.
"""

from typing import Optional

import structlog

from .challenge import ChallengeManager
from .config import get_config, setup_directories
from .database import close_database, create_progress_store
from .utils.logging import setup_logging

logger: Optional[structlog.BoundLogger] = None


def open_session(configure_logging: bool = True) -> ChallengeManager:
    """Configure the application and start a challenge session."""
    global logger
    if configure_logging:
        logger = setup_logging()
    else:
        logger = structlog.get_logger("fearlessyou")

    setup_directories()

    manager = ChallengeManager(store=create_progress_store(), config=get_config())
    snapshot = manager.start()
    logger.info("FearlessYou session opened", wallet=snapshot.wallet,
                completed=len(snapshot.completed))
    return manager


async def close_session(manager: ChallengeManager):
    """Save progress and release resources."""
    await manager.close()
    close_database()
    if logger:
        logger.info("FearlessYou session closed")
