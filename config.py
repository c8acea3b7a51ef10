import os
from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from dotenv import load_dotenv
from web3 import Web3


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable bot setup."""


DEFAULTS = {
    'RPC_URL': "https://dream-rpc.somnia.network",
    'ROUTER_ADDRESS': "0x6AAC14f090A35EeA150705f72D90E4CDC4a49b2C",
    'TOKEN_A_ADDRESS': "0x33E7fAB0a8a5da1A923180989bD617c9c2D1C493",
    'TOKEN_B_ADDRESS': "0x9beaA0016c22B646Ac311Ab171270B0ECf23098F",
    'WRAPPED_TOKEN_ADDRESS': "0x4A3BC48C156384f9564Fd65A53a2f3D534D8f2b7",
    'TOKEN_A_SYMBOL': "PING",
    'TOKEN_B_SYMBOL': "PONG",
    'WRAPPED_TOKEN_SYMBOL': "WSTT",
    'FEE_TIER': "500",
    'TOKEN_DECIMALS': "18",
    'MIN_SWAP_AMOUNT': "10",
    'MAX_SWAP_AMOUNT': "15",
    'MIN_WRAP_AMOUNT': "0.1",
    'MAX_WRAP_AMOUNT': "0.5",
    'MIN_DELAY_SECONDS': "300",
    'MAX_DELAY_SECONDS': "600",
    'LONG_DELAY_HOURS': "4",
    'RECEIPT_TIMEOUT': "120",
    'LOG_LEVEL': "INFO",
    'LOG_FILE': "activity-bot",
    'LOG_DIR': "./data/logs",
}


@dataclass(frozen=True)
class Config:
    rpc_urls: tuple
    router_address: str
    token_a_address: str
    token_b_address: str
    wrapped_token_address: str
    fee_tier: int = 500
    token_decimals: int = 18
    min_swap_amount: float = 10
    max_swap_amount: float = 15
    min_wrap_amount: float = 0.1
    max_wrap_amount: float = 0.5
    min_delay_seconds: float = 300
    max_delay_seconds: float = 600
    long_delay_hours: float = 4
    receipt_timeout: float = 120
    token_a_symbol: str = "PING"
    token_b_symbol: str = "PONG"
    wrapped_token_symbol: str = "WSTT"
    log_level: str = "INFO"
    log_file: str = "activity-bot"
    log_dir: str = "./data/logs"

    def __post_init__(self):
        if not self.rpc_urls:
            raise ConfigError("At least one RPC_URL is required")
        if not 0 <= self.fee_tier < 2 ** 24:
            raise ConfigError("FEE_TIER must fit in a uint24")
        if self.token_decimals < 0:
            raise ConfigError("TOKEN_DECIMALS can't be negative")
        for label, low, high in (
                ('swap amount', self.min_swap_amount, self.max_swap_amount),
                ('wrap amount', self.min_wrap_amount, self.max_wrap_amount),
                ('delay', self.min_delay_seconds, self.max_delay_seconds),
        ):
            if low < 0:
                raise ConfigError("Minimum {} can't be negative".format(label))
            if low > high:
                raise ConfigError("Minimum {} ({}) is above the maximum ({})".format(label, low, high))
        scale = Decimal(10) ** self.token_decimals
        for label, low, high in (
                ('swap amount', self.min_swap_amount, self.max_swap_amount),
                ('wrap amount', self.min_wrap_amount, self.max_wrap_amount),
        ):
            if (Decimal(str(low)) * scale).to_integral_value(ROUND_CEILING) > \
                    (Decimal(str(high)) * scale).to_integral_value(ROUND_FLOOR):
                raise ConfigError("The {} range holds no whole base unit at {} decimals".format(
                    label,
                    self.token_decimals
                ))
        if self.long_delay_hours < 0:
            raise ConfigError("LONG_DELAY_HOURS can't be negative")
        if self.receipt_timeout <= 0:
            raise ConfigError("RECEIPT_TIMEOUT must be positive")


def _get(environ, name):
    value = environ.get(name)
    if value is None or not value.strip():
        return DEFAULTS[name]
    return value.strip()


def _get_float(environ, name):
    try:
        return float(_get(environ, name))
    except ValueError:
        raise ConfigError("Invalid float for {}".format(name))


def _get_int(environ, name):
    try:
        return int(_get(environ, name))
    except ValueError:
        raise ConfigError("Invalid integer for {}".format(name))


def _get_address(environ, name):
    try:
        return Web3.to_checksum_address(_get(environ, name))
    except ValueError:
        raise ConfigError("Invalid address for {}: {}".format(name, _get(environ, name)))


def load_config(environ=None):
    if environ is None:
        load_dotenv()
        environ = os.environ
    return Config(
        rpc_urls=tuple(url.strip() for url in _get(environ, 'RPC_URL').split(',') if url.strip()),
        router_address=_get_address(environ, 'ROUTER_ADDRESS'),
        token_a_address=_get_address(environ, 'TOKEN_A_ADDRESS'),
        token_b_address=_get_address(environ, 'TOKEN_B_ADDRESS'),
        wrapped_token_address=_get_address(environ, 'WRAPPED_TOKEN_ADDRESS'),
        fee_tier=_get_int(environ, 'FEE_TIER'),
        token_decimals=_get_int(environ, 'TOKEN_DECIMALS'),
        min_swap_amount=_get_float(environ, 'MIN_SWAP_AMOUNT'),
        max_swap_amount=_get_float(environ, 'MAX_SWAP_AMOUNT'),
        min_wrap_amount=_get_float(environ, 'MIN_WRAP_AMOUNT'),
        max_wrap_amount=_get_float(environ, 'MAX_WRAP_AMOUNT'),
        min_delay_seconds=_get_float(environ, 'MIN_DELAY_SECONDS'),
        max_delay_seconds=_get_float(environ, 'MAX_DELAY_SECONDS'),
        long_delay_hours=_get_float(environ, 'LONG_DELAY_HOURS'),
        receipt_timeout=_get_float(environ, 'RECEIPT_TIMEOUT'),
        token_a_symbol=_get(environ, 'TOKEN_A_SYMBOL'),
        token_b_symbol=_get(environ, 'TOKEN_B_SYMBOL'),
        wrapped_token_symbol=_get(environ, 'WRAPPED_TOKEN_SYMBOL'),
        log_level=_get(environ, 'LOG_LEVEL').upper(),
        log_file=_get(environ, 'LOG_FILE'),
        log_dir=_get(environ, 'LOG_DIR'),
    )


def load_private_keys(environ=None):
    if environ is None:
        load_dotenv()
        environ = os.environ
    private_keys = [key.strip() for key in (environ.get('PRIVATE_KEYS') or '').split(',')]
    private_keys = [key for key in private_keys if key]
    if not private_keys:
        raise ConfigError("No PRIVATE_KEYS found in the environment or .env file")
    return private_keys
