"""In-memory stand-ins for the chain and the random source."""

from config import Config

ADDRESS = "0xabcdef0123456789abcdef0123456789abcdef01"


def make_config(**overrides):
    values = dict(
        rpc_urls=("http://localhost:8545",),
        router_address="0x6AAC14f090A35EeA150705f72D90E4CDC4a49b2C",
        token_a_address="0x33E7fAB0a8a5da1A923180989bD617c9c2D1C493",
        token_b_address="0x9beaA0016c22B646Ac311Ab171270B0ECf23098F",
        wrapped_token_address="0x4A3BC48C156384f9564Fd65A53a2f3D534D8f2b7",
    )
    values.update(overrides)
    return Config(**values)


class StubRandom:
    """Returns scripted values; ``uniform`` falls back to the lower bound."""

    def __init__(self, uniforms=(), choices=()):
        self.uniforms = list(uniforms)
        self.choices = list(choices)

    def uniform(self, low, high):
        if self.uniforms:
            return self.uniforms.pop(0)
        return low

    def choice(self, seq):
        if self.choices:
            return self.choices.pop(0)
        return seq[0]


class FakeChain:
    def __init__(self, address=ADDRESS, balance=0, errors=None):
        self.address = address
        self.balance = balance
        self.errors = dict(errors or {})
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.errors:
            raise self.errors[name]

    def balance_of(self, token_address):
        self._record('balance_of', token_address)
        return self.balance

    def approve(self, token_address, spender_address, amount):
        self._record('approve', token_address, spender_address, amount)
        return "0xapprove"

    def exact_input_single(self, token_in, token_out, fee, amount_in):
        self._record('exact_input_single', token_in, token_out, fee, amount_in)
        return "0xswap"

    def deposit(self, amount):
        self._record('deposit', amount)
        return "0xdeposit"

    def withdraw(self, amount):
        self._record('withdraw', amount)
        return "0xwithdraw"

    def call_names(self):
        return [call[0] for call in self.calls]


class RecordingSleep:
    """Records requested pauses and sets ``stop_event`` after ``limit`` of them."""

    def __init__(self, stop_event, limit=1):
        self.stop_event = stop_event
        self.limit = limit
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)
        if len(self.delays) >= self.limit:
            self.stop_event.set()
