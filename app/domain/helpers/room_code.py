from __future__ import annotations

import random

# No 0/O, 1/I: easy to read aloud and type
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 5
MAX_ROOM_CODE_ATTEMPTS = 30


def gen_room_code(rng: random.Random, n: int = ROOM_CODE_LENGTH) -> str:
    return "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(n))
