"""Human-readable instance name generation."""

import random
import uuid

_ADJECTIVES = (
    "amber", "bold", "brave", "calm", "clever", "crisp", "eager", "fancy",
    "gentle", "happy", "jolly", "keen", "lively", "lucky", "mellow", "noble",
    "proud", "quiet", "rapid", "shiny", "silent", "steady", "swift", "witty",
)

_NOUNS = (
    "badger", "beacon", "canyon", "comet", "falcon", "forest", "glacier",
    "harbor", "heron", "island", "lagoon", "meadow", "otter", "panda",
    "pebble", "prairie", "raven", "river", "summit", "thistle", "tiger",
    "valley", "walrus", "willow",
)


class BasicNameGenerator:
    """Generates ``adjective<sep>noun<sep>suffix`` names.

    The suffix is random, so repeated calls yield distinct names. Generated
    names start with a letter and stay within Bigtable's 33 character limit
    for instance ids.
    """

    def __init__(self, rng: random.Random = None):
        self._rng = rng or random.SystemRandom()

    def instance_name_with_separator(self, separator: str) -> str:
        adjective = self._rng.choice(_ADJECTIVES)
        noun = self._rng.choice(_NOUNS)
        suffix = uuid.uuid4().hex[:6]
        return separator.join((adjective, noun, suffix))


basic = BasicNameGenerator()
