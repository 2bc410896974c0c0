'''
# PalmDOC compression

Byte oriented variant of LZ77 used by the text records of PalmDOC/MOBI books:
each record (4096 bytes of text at most) is compressed on its own, the
decompression reads one byte "c" at a time and

  c == 0x00, 0x09 <= c <= 0x7f   literal byte
  0x01 <= c <= 0x08              the next c bytes are literal
  0x80 <= c <= 0xbf              back-reference, with the following byte forms
                                 the 16 bits pair 10dddddd dddddlll
                                 (distance d up to 2047, length l + 3)
  0xc0 <= c <= 0xff              a space followed by c ^ 0x80

A back-reference can have a length bigger than its distance: the bytes copied
become the source of the next ones of the same copy (like "A" with distance 1
and length 8 giving "AAAAAAAA").
'''
import logging

from bitstring import Bits

from ..exceptions import (
    CorruptBackReferenceException,
    TruncatedException,
    UnrecoverableException,
)


logger = logging.getLogger(__name__)

MIN_LENGTH = 3


def split_pair(first: int, second: int):
    '''Returns (distance, length) of a back-reference: the two identification
    bits are dropped, then 11 bits of distance and 3 of length.'''
    pair = Bits(uint=((first & 0x3f) << 8) | second, length=16)

    return pair[2:13].uint, pair[13:].uint + MIN_LENGTH


def copy_back(output: bytearray, distance: int, length: int):
    '''Append "length" bytes starting "distance" bytes before the end of output,
    one at a time since the source can overlap what is being written.'''
    for _ in range(length):
        output.append(output[-distance])


def decompress(record: bytes, base: int = 0) -> bytes:
    '''Decompress a whole record, "base" is the offset of the record
    in the file (used only for the errors).

    The record can have any length, usually the slice between two offsets
    of the database: a slice cut in the middle of an opcode raises
    TruncatedException. The output is not cut to any declared length.'''
    data = bytes(record)
    size = len(data)
    output = bytearray()
    position = 0

    def _take(n):
        nonlocal position
        if position + n > size:
            raise TruncatedException(base + position, n, size - position)

        chunk = data[position:position + n]
        position += n

        return chunk

    while position < size:
        opcode_offset = position
        c = _take(1)[0]

        if c == 0x00 or 0x09 <= c <= 0x7f:
            output.append(c)
        elif 0x01 <= c <= 0x08:
            output += _take(c)
        elif 0x80 <= c <= 0xbf:
            distance, length = split_pair(c, _take(1)[0])

            if distance == 0 or distance > len(output):
                raise CorruptBackReferenceException(base + opcode_offset, distance, len(output))

            copy_back(output, distance, length)
        elif 0xc0 <= c <= 0xff:
            output.append(0x20)
            output.append(c ^ 0x80)
        else:
            raise UnrecoverableException(f'opcode 0x{c:02x} is not handled')

    logger.debug('decompressed %d bytes into %d' % (size, len(output)))

    return bytes(output)
