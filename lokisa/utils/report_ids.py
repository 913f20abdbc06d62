"""
Report ID generation.

Report IDs are short, URL-safe nanoid strings shared in emails. 10
characters over nanoid's 64 symbol alphabet gives 60 bits; repositories
still guard the unique constraint and regenerate on collision.
"""

from nanoid import generate

REPORT_ID_LENGTH = 10


def generate_report_id(length: int = REPORT_ID_LENGTH) -> str:
    return generate(size=length)
