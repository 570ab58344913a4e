import logging
import random
import time

from fastapi import Depends

from config import Settings, get_settings
from errors import PaymentFailed

logger = logging.getLogger(__name__)

# a draw at or below this fails, giving an 80% success rate
FAILURE_THRESHOLD = 0.2


class PaymentSimulator:
    """Stand-in for a payment gateway: waits, then succeeds 80% of the time.

    Nothing is recorded, so a failed payment can simply be submitted again.
    """

    def __init__(self, delay: float = 2.0, rng=None, sleep=time.sleep):
        self.delay = delay
        self.rng = rng or random.Random()
        self.sleep = sleep

    def attempt(self) -> bool:
        return self.rng.random() > FAILURE_THRESHOLD

    def process_payment(self) -> None:
        if self.delay > 0:
            self.sleep(self.delay)
        if not self.attempt():
            logger.info("Simulated payment declined")
            raise PaymentFailed()
        logger.info("Simulated payment accepted")


def get_payment_simulator(settings: Settings = Depends(get_settings)) -> PaymentSimulator:
    return PaymentSimulator(delay=settings.PAYMENT_DELAY_SECONDS)
