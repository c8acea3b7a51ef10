"""Unit tests for environment configuration."""

import unittest

from config import Config, ConfigError, load_config, load_private_keys


class LoadConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = load_config({})
        self.assertEqual(config.rpc_urls, ("https://dream-rpc.somnia.network",))
        self.assertEqual(config.fee_tier, 500)
        self.assertEqual(config.token_decimals, 18)
        self.assertEqual((config.min_swap_amount, config.max_swap_amount), (10.0, 15.0))
        self.assertEqual((config.min_wrap_amount, config.max_wrap_amount), (0.1, 0.5))
        self.assertEqual((config.min_delay_seconds, config.max_delay_seconds), (300.0, 600.0))
        self.assertEqual(config.long_delay_hours, 4.0)

    def test_overrides_and_rpc_list(self) -> None:
        config = load_config({
            'RPC_URL': "http://a:8545, http://b:8545,",
            'MIN_DELAY_SECONDS': "10",
            'MAX_DELAY_SECONDS': "20",
            'LOG_LEVEL': "debug",
        })
        self.assertEqual(config.rpc_urls, ("http://a:8545", "http://b:8545"))
        self.assertEqual((config.min_delay_seconds, config.max_delay_seconds), (10.0, 20.0))
        self.assertEqual(config.log_level, "DEBUG")

    def test_addresses_are_checksummed(self) -> None:
        config = load_config({'ROUTER_ADDRESS': "0x6aac14f090a35eea150705f72d90e4cdc4a49b2c"})
        self.assertEqual(config.router_address, "0x6AAC14f090A35EeA150705f72D90E4CDC4a49b2C")

    def test_invalid_float(self) -> None:
        with self.assertRaises(ConfigError):
            load_config({'MIN_SWAP_AMOUNT': "ten"})

    def test_invalid_address(self) -> None:
        with self.assertRaises(ConfigError):
            load_config({'TOKEN_A_ADDRESS': "0x1234"})

    def test_inverted_range(self) -> None:
        with self.assertRaises(ConfigError):
            load_config({'MIN_WRAP_AMOUNT': "1", 'MAX_WRAP_AMOUNT': "0.5"})

    def test_range_narrower_than_one_base_unit(self) -> None:
        with self.assertRaises(ConfigError):
            load_config({'TOKEN_DECIMALS': "0", 'MIN_SWAP_AMOUNT': "10.2", 'MAX_SWAP_AMOUNT': "10.4",
                         'MIN_WRAP_AMOUNT': "1", 'MAX_WRAP_AMOUNT': "2"})

    def test_whole_units_accept_integer_range(self) -> None:
        config = load_config({'TOKEN_DECIMALS': "0", 'MIN_WRAP_AMOUNT': "1", 'MAX_WRAP_AMOUNT': "2"})
        self.assertEqual(config.token_decimals, 0)

    def test_fee_tier_must_fit_uint24(self) -> None:
        with self.assertRaises(ConfigError):
            load_config({'FEE_TIER': str(2 ** 24)})

    def test_config_is_immutable(self) -> None:
        config = load_config({})
        with self.assertRaises(AttributeError):
            config.max_delay_seconds = 1

    def test_config_error_is_value_error(self) -> None:
        self.assertTrue(issubclass(ConfigError, ValueError))
        with self.assertRaises(ValueError):
            Config(rpc_urls=(), router_address="", token_a_address="", token_b_address="",
                   wrapped_token_address="")


class LoadPrivateKeysTests(unittest.TestCase):
    def test_keys_are_split_and_trimmed(self) -> None:
        keys = load_private_keys({'PRIVATE_KEYS': " 0xaa, 0xbb ,,"})
        self.assertEqual(keys, ["0xaa", "0xbb"])

    def test_missing_keys(self) -> None:
        with self.assertRaises(ConfigError):
            load_private_keys({})

    def test_blank_keys(self) -> None:
        with self.assertRaises(ConfigError):
            load_private_keys({'PRIVATE_KEYS': " , "})


if __name__ == "__main__":
    unittest.main()
