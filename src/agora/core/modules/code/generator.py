import random

# Excludes visually confusable characters: 0/O and 1/I
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_CODE_LENGTH = 6


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Generate a random session code of the given length."""
    return "".join(random.choice(CODE_ALPHABET) for _ in range(length))
