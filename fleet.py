import asyncio
import logging
import random
import signal
import sys
from concurrent.futures import ThreadPoolExecutor

from config import ConfigError, load_config, load_private_keys
from core import Web3Chain, set_logging
from executor import OperationExecutor
from worker import AccountWorker


async def run_fleet(private_keys, config, chain_factory=None, stop_event=None, sleep=None, rng_factory=None):
    """Run one independent worker per private key until ``stop_event`` is set."""
    if not private_keys:
        raise ConfigError("No private keys to run")
    chain_factory = chain_factory or (lambda private_key: Web3Chain.from_private_key(private_key, config))
    rng_factory = rng_factory or random.Random
    stop_event = stop_event or asyncio.Event()
    logging.info("Found {} account(s) to process.".format(len(private_keys)))
    # one thread per account, a chain call holds its thread until confirmed
    asyncio.get_running_loop().set_default_executor(
        ThreadPoolExecutor(max_workers=len(private_keys), thread_name_prefix="account")
    )
    tasks = [
        asyncio.create_task(_supervise(index, private_key, config, chain_factory, stop_event, sleep, rng_factory))
        for index, private_key in enumerate(private_keys)
    ]
    await asyncio.gather(*tasks)


async def _supervise(index, private_key, config, chain_factory, stop_event, sleep, rng_factory):
    try:
        chain = await asyncio.to_thread(chain_factory, private_key)
        rng = rng_factory()
        worker = AccountWorker(index, chain, config, OperationExecutor(config, rng), rng, stop_event, sleep)
        await worker.run()
    except Exception as e:
        logging.error("FATAL ERROR in worker for Account #{}. The worker has stopped. Error: {}".format(index + 1, e))


async def serve(private_keys, config):
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            pass
    await run_fleet(private_keys, config, stop_event=stop_event)


def main():
    try:
        config = load_config()
        set_logging(config.log_file, config.log_level, folder=config.log_dir)
        logging.info("Starting multi-account swap/wrap bot...")
        private_keys = load_private_keys()
    except (ValueError, OSError) as e:
        print("FATAL ERROR: {}. Please check your configuration.".format(e), file=sys.stderr)
        return 1
    asyncio.run(serve(private_keys, config))
    return 0


if __name__ == '__main__':
    sys.exit(main())
