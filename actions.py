from enum import Enum

FAILURE_DELAY_SECONDS = 5
BACKSTOP_DELAY_SECONDS = 300

INSUFFICIENT_RESOURCES_MARKERS = (
    'insufficient funds',
    'exceeds balance',
    'gas required exceeds allowance',
)


class OperationKind(Enum):
    SWAP_A_TO_B = 'swap_a_to_b'
    SWAP_B_TO_A = 'swap_b_to_a'
    WRAP = 'wrap'
    UNWRAP = 'unwrap'


class Outcome(Enum):
    SUCCESS = 'success'
    INSUFFICIENT_RESOURCES = 'insufficient_resources'
    FAILURE = 'failure'


def choose_operation(rng):
    return rng.choice(list(OperationKind))


def classify_error(error):
    """Decide whether a failed chain call ran out of funds or gas.

    Providers report these conditions with different error shapes, so the
    reason, message and string form of the error are all searched.
    """
    parts = (getattr(error, 'reason', None), getattr(error, 'message', None), str(error))
    text = ' '.join(str(part) for part in parts if part).lower()
    if any(marker in text for marker in INSUFFICIENT_RESOURCES_MARKERS):
        return Outcome.INSUFFICIENT_RESOURCES
    return Outcome.FAILURE


def next_delay(outcome, config, rng):
    if outcome is Outcome.SUCCESS:
        return rng.uniform(config.min_delay_seconds, config.max_delay_seconds)
    elif outcome is Outcome.INSUFFICIENT_RESOURCES:
        return config.long_delay_hours * 3600
    return FAILURE_DELAY_SECONDS
