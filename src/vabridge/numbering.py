"""Virtual account number derivation.

A VA number is generated exactly once, when the VA is created at the bank.
Updates and deletions reuse the number already stored for the VA, minus the
bank's prefix digits.
"""

import hashlib

from vabridge.exceptions import ValidationError

# Decimal digits taken from each SHA-256 block
BLOCK_DIGITS = 18


def account_seed(payer_number: str, bill_type_code: str) -> str:
    """Return the seed used for a payer's VA number on a bill type.

    The order is fixed: payer number first, then bill-type code.
    """
    return f"{payer_number}{bill_type_code}"


def generate(seed: str, length: int) -> str:
    """Derive a numeric account number of exactly `length` digits from `seed`.

    Digits come from chained SHA-256 digests of `"<seed>:<block>"`, each
    reduced to `BLOCK_DIGITS` zero-padded decimal digits. The same seed and
    length always produce the same number, and a shorter number is a prefix
    of a longer one for the same seed.

    Raises:
        ValidationError: if the seed is empty or the length is not positive
    """
    if not seed:
        raise ValidationError({"seed": ["Seed cannot be empty"]})
    if length is None or length < 1:
        raise ValidationError({"length": [f"Length must be at least 1, got {length}"]})

    digits = []
    block = 0
    while sum(len(chunk) for chunk in digits) < length:
        digest = hashlib.sha256(f"{seed}:{block}".encode("utf-8")).hexdigest()
        digits.append(str(int(digest, 16) % 10**BLOCK_DIGITS).zfill(BLOCK_DIGITS))
        block += 1

    return "".join(digits)[:length]


def strip_prefix(number: str, prefix_digits: int) -> str:
    """Remove the bank prefix from a stored VA number."""
    if not number:
        raise ValidationError({"number": ["Virtual account number is empty"]})
    if prefix_digits < 0 or len(number) <= prefix_digits:
        raise ValidationError(
            {
                "number": [
                    f"Virtual account number `{number}` is too short "
                    f"for a {prefix_digits}-digit prefix"
                ]
            }
        )

    return number[prefix_digits:]
