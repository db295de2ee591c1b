"""Pronounceable NPC name generator.

Alternates runs of consonants with single vowels. A name opens with one
consonant and a vowel; after each vowel the run counter restarts at a random
0 or 1 and is then decremented, so every later run is two or three consonants
long. Output is lowercase, 3 to 7 letters.

Pure function of the random source: pass a seeded `random.Random` for
reproducible names.
"""

from __future__ import annotations

import random
from typing import Optional

VOWELS = "aeiou"
CONSONANTS = "bcdfghjklnpqrstz"

MIN_LENGTH = 3
# Exclusive upper bound of the raw length draw
LENGTH_DRAW = 8


def generate_name(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    length = max(rng.randrange(LENGTH_DRAW), MIN_LENGTH)
    run = 1
    letters = []
    for _ in range(length):
        if run == 2:
            pool = VOWELS
            run = rng.randrange(2)
        else:
            pool = CONSONANTS
        c = rng.choice(pool)
        letters.append(c)
        if c in CONSONANTS:
            run += 1
        else:
            run -= 1
    return "".join(letters)
