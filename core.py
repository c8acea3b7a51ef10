import json
import logging
import os
import sys
import time
from decimal import ROUND_DOWN, Decimal, localcontext
from logging.handlers import TimedRotatingFileHandler

from web3 import Web3
from web3.exceptions import Web3Exception
from web3_multi_provider import MultiProvider

for package in ('web3', 'web3_multi_provider', 'urllib3',):
    logging.getLogger(package).setLevel(logging.ERROR)

ROUTER_ABI = json.loads('''[
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "address", "name": "tokenIn", "type": "address"},
                    {"internalType": "address", "name": "tokenOut", "type": "address"},
                    {"internalType": "uint24", "name": "fee", "type": "uint24"},
                    {"internalType": "address", "name": "recipient", "type": "address"},
                    {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
                    {"internalType": "uint256", "name": "amountOutMinimum", "type": "uint256"},
                    {"internalType": "uint160", "name": "sqrtPriceLimitX96", "type": "uint160"}
                ],
                "internalType": "struct ISwapRouter.ExactInputSingleParams",
                "name": "params",
                "type": "tuple"
            }
        ],
        "name": "exactInputSingle",
        "outputs": [{"internalType": "uint256", "name": "amountOut", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function"
    }
]''')

ERC20_ABI = json.loads('''[
    {
        "constant": false,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function"
    },
    {
        "constant": true,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"}
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": true,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    }
]''')

WRAPPED_TOKEN_ABI = ERC20_ABI + json.loads('''[
    {
        "inputs": [],
        "name": "deposit",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function"
    },
    {
        "inputs": [{"name": "wad", "type": "uint256"}],
        "name": "withdraw",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]''')


class ChainError(Exception):
    """Raised when a chain interaction could not be completed."""


class TransactionReverted(ChainError):
    def __init__(self, tx_hash):
        super().__init__("Transaction {} reverted".format(tx_hash))
        self.tx_hash = tx_hash


# errors an operation attempt turns into an outcome; everything else is unexpected
CHAIN_ERRORS = (Web3Exception, ValueError, ChainError)


def broadcast_transaction(web3, account, tx, receipt_timeout=120, attempts=18):
    logging.debug("Broadcasting TX: {}".format(tx))
    tx_hash = None
    while attempts > 0:
        signed_tx = account.sign_transaction(tx)
        try:
            tx_hash = web3.eth.send_raw_transaction(signed_tx.rawTransaction)
        except CHAIN_ERRORS as e:
            if "nonce too low" in str(e).lower():
                logging.debug(e)
                attempts -= 1
                tx['nonce'] = get_nonce(web3, account.address)
                continue
            elif "already known" in str(e).lower():
                tx_hash = signed_tx.hash
            else:
                raise
        break
    if tx_hash is None:
        raise ChainError("Could not find a usable nonce for {}".format(account.address))
    tx_receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=receipt_timeout)
    logging.debug("Confirmed TX: {}".format(tx_receipt))
    if tx_receipt['status'] != 1:
        raise TransactionReverted(web3.to_hex(tx_receipt['transactionHash']))
    return web3.to_hex(tx_receipt['transactionHash'])


def describe_error(e):
    message = str(getattr(e, 'reason', None) or getattr(e, 'message', None) or e)
    if 'insufficient funds for gas' in message.lower():
        return 'Not enough native balance'
    elif 'exceeds balance' in message.lower():
        return 'Not enough tokens'
    return message


def from_token_decimals(amount, decimals):
    return amount / 10 ** decimals


def get_nonce(web3, address, attempts=18):
    while attempts > 0:
        try:
            return web3.eth.get_transaction_count(Web3.to_checksum_address(address), 'pending')
        except CHAIN_ERRORS as e:
            logging.debug(e)
            time.sleep(1)
            attempts -= 1
    raise ChainError("Could not get the nonce for {}".format(address))


def load_contract(web3, address, abi=None):
    return web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi or ERC20_ABI)


def load_web3(rpc_urls):
    return Web3(MultiProvider(list(rpc_urls)))


def set_logging(filename='app', level='INFO', backup_count=7, folder='./data/logs'):
    if hasattr(logging, level.upper()):
        os.makedirs(folder, exist_ok=True)
        logging.basicConfig(
            format='%(asctime)s %(name)s %(levelname)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            level=getattr(logging, level.upper()),
            handlers=[
                TimedRotatingFileHandler(
                    os.path.join(folder, "{}.log".format(filename)),
                    when="midnight",
                    interval=1,
                    backupCount=backup_count
                ),
                logging.StreamHandler(sys.stdout)
            ]
        )
        return True
    raise ValueError("Invalid logging level")


def to_token_decimals(amount, decimals, rounding=ROUND_DOWN):
    with localcontext() as ctx:
        ctx.prec = 100
        return int(Decimal(amount).scaleb(decimals).to_integral_value(rounding=rounding))


class Web3Chain:
    """Chain operations for a single account.

    Mutating calls block until the transaction is confirmed and return its
    hash. Failures surface as one of ``CHAIN_ERRORS``.
    """

    def __init__(self, web3, account, config):
        self.web3 = web3
        self.account = account
        self.config = config

    @classmethod
    def from_private_key(cls, private_key, config):
        web3 = load_web3(config.rpc_urls)
        return cls(web3, web3.eth.account.from_key(private_key), config)

    @property
    def address(self):
        return self.account.address

    def balance_of(self, token_address):
        return load_contract(self.web3, token_address).functions.balanceOf(self.address).call()

    def approve(self, token_address, spender_address, amount):
        tx = load_contract(self.web3, token_address).functions.approve(
            Web3.to_checksum_address(spender_address),
            amount
        ).build_transaction(self._tx_params())
        return self._broadcast(tx)

    def exact_input_single(self, token_in, token_out, fee, amount_in):
        router_contract = load_contract(self.web3, self.config.router_address, ROUTER_ABI)
        tx = router_contract.functions.exactInputSingle((
            Web3.to_checksum_address(token_in),
            Web3.to_checksum_address(token_out),
            fee,
            self.address,
            amount_in,
            0,
            0,
        )).build_transaction(self._tx_params())
        return self._broadcast(tx)

    def deposit(self, amount):
        wrapped_contract = load_contract(self.web3, self.config.wrapped_token_address, WRAPPED_TOKEN_ABI)
        tx = wrapped_contract.functions.deposit().build_transaction(self._tx_params(value=amount))
        return self._broadcast(tx)

    def withdraw(self, amount):
        wrapped_contract = load_contract(self.web3, self.config.wrapped_token_address, WRAPPED_TOKEN_ABI)
        tx = wrapped_contract.functions.withdraw(amount).build_transaction(self._tx_params())
        return self._broadcast(tx)

    def _broadcast(self, tx):
        return broadcast_transaction(self.web3, self.account, tx, self.config.receipt_timeout)

    def _tx_params(self, value=0):
        tx_params = {
            "from": self.address,
            "nonce": get_nonce(self.web3, self.address)
        }
        if value:
            tx_params['value'] = value
        return tx_params
