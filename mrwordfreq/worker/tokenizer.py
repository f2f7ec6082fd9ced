"""
Turns raw chunk bytes into normalized word tokens.

A token is a maximal run of letters or digits, lowercased. Chunks are
tokenized independently: a word split across a chunk boundary becomes
two tokens, one in each chunk.
"""

import re
from collections import defaultdict
from typing import Dict, Iterator, List

# Letters and digits of any script; \w without the underscore
WORD_RUN = re.compile(r'[^\W_]+')


def iter_tokens(data: bytes) -> Iterator[str]:
    """Yield tokens from `data` in order of appearance"""
    # Undecodable bytes, including a multi-byte character cut by a chunk
    # boundary, become U+FFFD and separate words
    text = data.decode('utf-8', errors='replace')
    # Fold case first; lower() can emit combining marks that are not letters
    for match in WORD_RUN.finditer(text.lower()):
        yield match.group()


def normalize(data: bytes) -> List[str]:
    """Tokenize a chunk of bytes"""
    return list(iter_tokens(data))


def count_tokens(data: bytes) -> Dict[str, int]:
    """Build a frequency table for a chunk of bytes"""
    table = defaultdict(int)
    for token in iter_tokens(data):
        table[token] += 1
    return dict(table)
