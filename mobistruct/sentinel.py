'''
# Sentinel values

Many fields of the headers are mandatory from the point of view of the layout
(they always occupy 4 bytes) but optional from the point of view of the data:
a reserved bit pattern is written in place of a real value to say "absent".

The format uses two different conventions, do not mix them up:

 1. all-ones (0xffffffff) means absent: used by the indices of the MOBI header,
    the DRM offset/count and a few others
 2. zero means absent: used by the offsets of the Palm database header

Each convention has its own pair of helpers.
'''
from typing import Optional


ALL_ONES = 0xffffffff


def decode_optional(raw: int) -> Optional[int]:
    '''All-ones convention: 0xffffffff becomes None.'''
    return None if raw == ALL_ONES else raw


def encode_optional(value: Optional[int]) -> int:
    return ALL_ONES if value is None else value


def decode_nonzero(raw: int) -> Optional[int]:
    '''Zero convention: 0 becomes None.'''
    return None if raw == 0 else raw


def encode_nonzero(value: Optional[int]) -> int:
    return 0 if value is None else value
