"""Short unique codes that attendees type in to identify themselves."""

import random

from hackvote.models import Role

CODE_PREFIX = "GDG"

# No 0/O or 1/I, so codes survive being read aloud or copied by hand
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

ROLE_LETTERS = {
    Role.PARTICIPANT: "P",
    Role.JUDGE: "J",
    Role.ADMIN: "A",
}


def generate_unique_code(role: Role, index: int, rng: random.Random | None = None) -> str:
    """Build a code like "GDG-P07K3MZ".

    The role letter and zero-padded index make codes unique per event; the
    four random characters make them hard to guess.
    """
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(CODE_ALPHABET) for _ in range(4))
    return f"{CODE_PREFIX}-{ROLE_LETTERS[role]}{index:02d}{suffix}"


def role_from_code(code: str) -> Role | None:
    """Recover the role encoded in a code, or None if it isn't one of ours."""
    prefix = f"{CODE_PREFIX}-"
    if not code.startswith(prefix) or len(code) <= len(prefix):
        return None
    letter = code[len(prefix)]
    for role, role_letter in ROLE_LETTERS.items():
        if role_letter == letter:
            return role
    return None
