# Checkout suggestions for x01 finishes.
# Double-out uses a fixed table of canonical routes; simple-out is searched on demand
# in a fixed priority order so the same score always shows the same hint.

import logging

logger = logging.getLogger(__name__)

MAX_CHECKOUT = 170

# Canonical double-out routes. "Bull" here is the 50 (bullseye) finish.
# Missing scores (159, 162, 163, 165, 166, 168, 169 and 1) cannot be finished in three darts.
CHECKOUT_MAP = {
    170: "T20 T20 Bull",
    167: "T20 T19 Bull",
    164: "T20 T18 Bull",
    161: "T20 T17 Bull",
    160: "T20 T20 D20",
    158: "T20 T20 D19",
    157: "T20 T19 D20",
    156: "T20 T20 D18",
    155: "T20 T19 D19",
    154: "T20 T18 D20",
    153: "T20 T19 D18",
    152: "T20 T20 D16",
    151: "T20 T17 D20",
    150: "T20 T18 D18",
    149: "T20 T19 D16",
    148: "T20 T20 D14",
    147: "T20 T17 D18",
    146: "T20 T18 D16",
    145: "T20 T19 D14",
    144: "T20 T20 D12",
    143: "T20 T17 D16",
    142: "T20 T14 D20",
    141: "T20 T19 D12",
    140: "T20 T20 D10",
    139: "T20 T13 D20",
    138: "T20 T18 D12",
    137: "T20 T19 D10",
    136: "T20 T20 D8",
    135: "T20 T17 D12",
    134: "T20 T14 D16",
    133: "T20 T19 D8",
    132: "T20 T16 D12",
    131: "T20 T13 D16",
    130: "T20 T18 D8",
    129: "T19 T16 D12",
    128: "T18 T14 D16",
    127: "T20 T17 D8",
    126: "T19 T19 D6",
    125: "T20 T19 D4",
    124: "T20 T14 D11",
    123: "T19 T16 D9",
    122: "T18 T18 D7",
    121: "T20 T11 D14",
    120: "T20 S20 D20",
    119: "T19 T12 D13",
    118: "T20 S18 D20",
    117: "T20 S17 D20",
    116: "T20 S16 D20",
    115: "T20 S15 D20",
    114: "T20 S14 D20",
    113: "T20 S13 D20",
    112: "T20 T12 D8",
    111: "T20 S11 D20",
    110: "T20 S10 D20",
    109: "T20 S9 D20",
    108: "T20 S8 D20",
    107: "T19 S10 D20",
    106: "T20 S6 D20",
    105: "T20 S5 D20",
    104: "T18 S10 D20",
    103: "T19 S6 D20",
    102: "T20 S10 D16",
    101: "T17 S10 D20",
    100: "T20 D20",
    99: "T19 S10 D16",
    98: "T20 D19",
    97: "T19 D20",
    96: "T20 D18",
    95: "T19 D19",
    94: "T18 D20",
    93: "T19 D18",
    92: "T20 D16",
    91: "T17 D20",
    90: "T18 D18",
    89: "T19 D16",
    88: "T20 D14",
    87: "T17 D18",
    86: "T18 D16",
    85: "T19 D14",
    84: "T20 D12",
    83: "T17 D16",
    82: "T14 D20",
    81: "T19 D12",
    80: "T20 D10",
    79: "T13 D20",
    78: "T18 D12",
    77: "T19 D10",
    76: "T20 D8",
    75: "T17 D12",
    74: "T14 D16",
    73: "T19 D8",
    72: "T16 D12",
    71: "T13 D16",
    70: "T18 D8",
    69: "T19 D6",
    68: "T20 D4",
    67: "T17 D8",
    66: "T10 D18",
    65: "T19 D4",
    64: "T16 D8",
    63: "T13 D12",
    62: "T10 D16",
    61: "T15 D8",
    60: "S20 D20",
    59: "S19 D20",
    58: "S18 D20",
    57: "S17 D20",
    56: "S16 D20",
    55: "S15 D20",
    54: "S14 D20",
    53: "S13 D20",
    52: "S12 D20",
    51: "S11 D20",
    50: "S10 D20",
    49: "S9 D20",
    48: "S8 D20",
    47: "S7 D20",
    46: "S6 D20",
    45: "S5 D20",
    44: "S4 D20",
    43: "S3 D20",
    42: "S10 D16",
    41: "S9 D16",
    40: "D20",
    39: "S7 D16",
    38: "D19",
    37: "S5 D16",
    36: "D18",
    35: "S3 D16",
    34: "D17",
    33: "S1 D16",
    32: "D16",
    31: "S7 D12",
    30: "D15",
    29: "S5 D12",
    28: "D14",
    27: "S3 D12",
    26: "D13",
    25: "S1 D12",
    24: "D12",
    23: "S3 D10",
    22: "D11",
    21: "S5 D8",
    20: "D10",
    19: "S3 D8",
    18: "D9",
    17: "S1 D8",
    16: "D8",
    15: "S3 D6",
    14: "D7",
    13: "S1 D6",
    12: "D6",
    11: "S3 D4",
    10: "D5",
    9: "S1 D4",
    8: "D4",
    7: "S3 D2",
    6: "D3",
    5: "S1 D2",
    4: "D2",
    3: "S1 D1",
    2: "D1",
}

# In simple mode the 25 ring is "Bull" and the 50 is "Bullseye".
SINGLE_BULL = 25
BULLSEYE = 50


def _finisher(remaining):
    """Label of the single dart scoring exactly `remaining` (single bed or bull), else None."""
    if 1 <= remaining <= 20:
        return f"S{remaining}"
    if remaining == SINGLE_BULL:
        return "Bull"
    if remaining == BULLSEYE:
        return "Bullseye"
    return None


def _simple_route(score):
    # Order matters: the first matching branch is the hint the player sees.
    single = _finisher(score)
    if single:
        return [single]

    for first in range(20, 0, -1):
        last = _finisher(score - first)
        if last:
            return [f"S{first}", last]

    if score > SINGLE_BULL:
        last = _finisher(score - SINGLE_BULL)
        if last:
            return ["Bull", last]

    if score > BULLSEYE:
        last = _finisher(score - BULLSEYE)
        if last:
            return ["Bullseye", last]

    for d in range(20, 0, -1):
        remaining = score - d * 2
        if remaining == 0:
            return [f"D{d}"]
        last = _finisher(remaining)
        if last:
            return [f"D{d}", last]

    for t in range(20, 0, -1):
        remaining = score - t * 3
        if remaining == 0:
            return [f"T{t}"]
        last = _finisher(remaining)
        if last:
            return [f"T{t}", last]

    for first in range(20, 0, -1):
        for second in range(20, 0, -1):
            last = _finisher(score - first - second)
            if last:
                return [f"S{first}", f"S{second}", last]

    # No bullseye finish on this branch; only the single bull.
    for t in range(20, 9, -1):
        for s in range(20, 0, -1):
            remaining = score - t * 3 - s
            if 1 <= remaining <= 20 or remaining == SINGLE_BULL:
                return [f"T{t}", f"S{s}", _finisher(remaining)]
            if remaining == 0:
                return [f"T{t}", f"S{s}"]

    if score >= 120:
        after_first = score - 60
        if after_first >= 60:
            after_second = after_first - 60
            if 1 <= after_second <= 20:
                return ["T20", "T20", f"S{after_second}"]
            if after_second == 0:
                return ["T20", "T20"]
            if after_second <= 60 and after_second % 3 == 0:
                return ["T20", "T20", f"T{after_second // 3}"]
        for t2 in range(20, 0, -1):
            remaining = after_first - t2 * 3
            if remaining == 0:
                return ["T20", f"T{t2}"]
            last = _finisher(remaining)
            if last:
                return ["T20", f"T{t2}", last]

    return None


def suggest_checkout(remaining, finish_mode="double"):
    """
    Return the suggested route for `remaining` as a list of labels, or None.

    Only scores 1..170 get a hint in either mode.
    """
    if remaining is None or remaining < 1 or remaining > MAX_CHECKOUT:
        return None
    if finish_mode == "simple":
        route = _simple_route(remaining)
    else:
        route = CHECKOUT_MAP.get(remaining)
        route = route.split() if route else None
    logger.debug("Checkout for %s (%s): %s", remaining, finish_mode, route)
    return route


def format_checkout(route):
    if not route:
        return None
    return " ".join(route)
