import asyncio
import logging

from actions import BACKSTOP_DELAY_SECONDS, Outcome, choose_operation, next_delay


class AccountWorker:
    """Endless action loop for one account.

    Each iteration picks an operation at random, runs it and pauses for as
    long as the outcome calls for. Exceptions the executor does not handle
    are logged and followed by a fixed pause, so the loop only ends when
    ``stop_event`` is set.
    """

    def __init__(self, index, chain, config, executor, rng, stop_event=None, sleep=None):
        self.index = index
        self.chain = chain
        self.config = config
        self.executor = executor
        self.rng = rng
        self.stop_event = stop_event or asyncio.Event()
        self._sleep = sleep

    @property
    def log_prefix(self):
        return "[Account #{} | {}...]".format(self.index + 1, self.chain.address[:6])

    async def run(self):
        logging.info("{} Worker started.".format(self.log_prefix))
        while not self.stop_event.is_set():
            try:
                kind = choose_operation(self.rng)
                outcome = await self.executor.execute(self.chain, kind, self.log_prefix)
                delay = next_delay(outcome, self.config, self.rng)
                self.log_delay(outcome, delay)
                await self.pause(delay)
            except Exception as e:
                logging.critical("{} Unexpected error in worker loop, resuming in {} seconds. Error: {}".format(
                    self.log_prefix,
                    BACKSTOP_DELAY_SECONDS,
                    e
                ))
                await self.pause(BACKSTOP_DELAY_SECONDS)
        logging.info("{} Worker stopped.".format(self.log_prefix))

    def log_delay(self, outcome, delay):
        if outcome is Outcome.SUCCESS:
            logging.info("{} Action successful. Next action in ~{:.1f} minutes.".format(self.log_prefix, delay / 60))
        elif outcome is Outcome.INSUFFICIENT_RESOURCES:
            logging.info("{} Pausing for {} hours due to insufficient funds.".format(
                self.log_prefix,
                self.config.long_delay_hours
            ))
        else:
            logging.info("{} Action failed or was skipped. Trying another action in {} seconds...".format(
                self.log_prefix,
                delay
            ))

    async def pause(self, seconds):
        if self._sleep is not None:
            await self._sleep(seconds)
            return
        try:
            await asyncio.wait_for(self.stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
