import asyncio
import logging
from decimal import ROUND_CEILING

from actions import OperationKind, Outcome, classify_error
from core import CHAIN_ERRORS, describe_error, from_token_decimals, to_token_decimals


class OperationExecutor:
    """Runs one operation for an account and reports its outcome.

    Chain calls are blocking, so each one runs in a worker thread. Errors in
    ``CHAIN_ERRORS`` are classified into an outcome; anything else is left
    for the caller.
    """

    def __init__(self, config, rng):
        self.config = config
        self.rng = rng

    async def execute(self, chain, kind, log_prefix):
        if kind is OperationKind.SWAP_A_TO_B:
            return await self.perform_swap(chain, self.config.token_a_address, self.config.token_b_address, log_prefix)
        elif kind is OperationKind.SWAP_B_TO_A:
            return await self.perform_swap(chain, self.config.token_b_address, self.config.token_a_address, log_prefix)
        elif kind is OperationKind.WRAP:
            return await self.perform_wrap(chain, log_prefix)
        elif kind is OperationKind.UNWRAP:
            return await self.perform_unwrap(chain, log_prefix)
        raise ValueError("Unknown operation {}".format(kind))

    async def perform_swap(self, chain, token_in, token_out, log_prefix):
        symbol_in, symbol_out = self.symbol(token_in), self.symbol(token_out)
        amount = self.rng.uniform(self.config.min_swap_amount, self.config.max_swap_amount)
        amount_in = self.to_base_units(amount, self.config.min_swap_amount, self.config.max_swap_amount)
        logging.info("{} Initiating swap: {:.4f} {} -> {}".format(log_prefix, amount, symbol_in, symbol_out))
        try:
            logging.info("{} Approving router to spend {}...".format(log_prefix, symbol_in))
            await asyncio.to_thread(chain.approve, token_in, self.config.router_address, amount_in)
            logging.info("{} Approval successful.".format(log_prefix))
            logging.info("{} Sending swap transaction...".format(log_prefix))
            tx_hash = await asyncio.to_thread(
                chain.exact_input_single,
                token_in,
                token_out,
                self.config.fee_tier,
                amount_in
            )
        except CHAIN_ERRORS as e:
            return self.failed('Swap', e, log_prefix)
        logging.info("{} Swap successful! Tx: {}".format(log_prefix, tx_hash))
        return Outcome.SUCCESS

    async def perform_wrap(self, chain, log_prefix):
        amount = self.rng.uniform(self.config.min_wrap_amount, self.config.max_wrap_amount)
        logging.info("{} Initiating wrap: {:.4f} native -> {}".format(
            log_prefix,
            amount,
            self.config.wrapped_token_symbol
        ))
        amount_in = self.to_base_units(amount, self.config.min_wrap_amount, self.config.max_wrap_amount)
        try:
            tx_hash = await asyncio.to_thread(chain.deposit, amount_in)
        except CHAIN_ERRORS as e:
            return self.failed('Wrap', e, log_prefix)
        logging.info("{} Wrap successful! Tx: {}".format(log_prefix, tx_hash))
        return Outcome.SUCCESS

    async def perform_unwrap(self, chain, log_prefix):
        symbol = self.config.wrapped_token_symbol
        decimals = self.config.token_decimals
        logging.info("{} Initiating unwrap: {} -> native".format(log_prefix, symbol))
        try:
            balance = await asyncio.to_thread(chain.balance_of, self.config.wrapped_token_address)
            if balance == 0:
                logging.info("{} Unwrap skipped, account holds no {}.".format(log_prefix, symbol))
                return Outcome.FAILURE
            logging.info("{} Current {} balance: {}".format(log_prefix, symbol, from_token_decimals(balance, decimals)))
            amount = self.rng.uniform(self.config.min_wrap_amount, self.config.max_wrap_amount)
            amount_out = min(
                self.to_base_units(amount, self.config.min_wrap_amount, self.config.max_wrap_amount),
                balance
            )
            logging.info("{} Attempting to unwrap {} {}...".format(
                log_prefix,
                from_token_decimals(amount_out, decimals),
                symbol
            ))
            tx_hash = await asyncio.to_thread(chain.withdraw, amount_out)
        except CHAIN_ERRORS as e:
            return self.failed('Unwrap', e, log_prefix)
        logging.info("{} Unwrap successful! Tx: {}".format(log_prefix, tx_hash))
        return Outcome.SUCCESS

    def failed(self, label, e, log_prefix):
        logging.debug(e)
        outcome = classify_error(e)
        if outcome is Outcome.INSUFFICIENT_RESOURCES:
            logging.error("{} {} failed: {}. Pausing account.".format(log_prefix, label, describe_error(e)))
        else:
            logging.error("{} {} failed: {}".format(log_prefix, label, describe_error(e)))
        return outcome

    def symbol(self, token_address):
        if token_address == self.config.token_a_address:
            return self.config.token_a_symbol
        elif token_address == self.config.token_b_address:
            return self.config.token_b_symbol
        return token_address

    def to_base_units(self, amount, low, high):
        decimals = self.config.token_decimals
        low_units = to_token_decimals(str(low), decimals, ROUND_CEILING)
        high_units = to_token_decimals(str(high), decimals)
        return min(max(to_token_decimals(amount, decimals), low_units), high_units)
