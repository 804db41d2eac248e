from collections import namedtuple

import eth_abi
from web3 import Web3

ADVENTURER_CLASSES = (
    "Fighter",
    "Rogue",
    "Wizard",
    "Cleric",
    "Ranger",
    "Bard",
    "Paladin",
    "Druid",
)

ABILITIES = ("strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma")

AdventurerAttributes = namedtuple("AdventurerAttributes", ("adventurer_class",) + ABILITIES)


def expand(randomness: int, count: int) -> list:
    """Derive ``count`` independent uint256 words from one random value."""
    words = []
    for i in range(count):
        digest = Web3.keccak(eth_abi.encode(["uint256", "uint256"], [randomness, i]))
        words.append(int.from_bytes(digest, byteorder="big"))
    return words


def roll_3d6(word: int) -> int:
    return sum((word >> (8 * i)) % 6 + 1 for i in range(3))


def derive_attributes(randomness: int) -> AdventurerAttributes:
    words = expand(randomness, len(ABILITIES) + 1)
    adventurer_class = ADVENTURER_CLASSES[words[0] % len(ADVENTURER_CLASSES)]
    scores = [roll_3d6(word) for word in words[1:]]
    return AdventurerAttributes(adventurer_class, *scores)


def token_metadata(token_id: int, attributes: AdventurerAttributes, image_base_uri: str = "") -> dict:
    traits = [{"trait_type": "Class", "value": attributes.adventurer_class}]
    for ability in ABILITIES:
        traits.append(
            {
                "trait_type": ability.capitalize(),
                "value": getattr(attributes, ability),
                "max_value": 18,
            }
        )
    return {
        "name": f"Forgotten Adventurer #{token_id}",
        "description": f"A forgotten {attributes.adventurer_class.lower()}, rolled from verifiable randomness.",
        "image": f"{image_base_uri.rstrip('/')}/{token_id}.png" if image_base_uri else "",
        "attributes": traits,
    }
