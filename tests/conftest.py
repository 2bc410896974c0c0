import logging
import os
import struct

import pytest


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)


def build_palmdb(records, name=b'test-book', type_creator=b'BOOKMOBI', app_info_offset=0):
    '''Palm database with the given records' data, written by hand.'''
    n = len(records)
    header = struct.pack(
        '>32sHHiiiIII8sIIH',
        name, 0x0010, 0x0000,
        0x5c000000, 0x5c000001, -1,
        7, app_info_offset, 0,
        type_creator, 0x77, 0, n)

    offset = len(header) + 8 * n + 2
    entries = b''
    for index, data in enumerate(records):
        entries += struct.pack('>IB', offset, 0x40) + (2 * index).to_bytes(3, 'big')
        offset += len(data)

    return header + entries + b'\x00\x00' + b''.join(records)


def build_mobi_header(text_length=0, record_count=0, compression=2, record_size=4096, encryption=0,
                      magic=b'MOBI', header_len=232, extension=None, exth_flags=0,
                      full_name_offset=0, full_name_length=0):
    '''PalmDOC header followed by the MOBI header.'''
    palmdoc = struct.pack('>HHIHHHH', compression, 0, text_length, record_count, record_size, encryption, 0)

    mobi = struct.pack('>4sIIIII', magic, header_len, 2, 65001, 0xcafe, 6)
    mobi += struct.pack('>10I', *([0xffffffff] * 10))
    mobi += struct.pack('>III', record_count + 1, full_name_offset, full_name_length)
    mobi += struct.pack('>III', 0x09, 0x0904, 0x0908)
    mobi += struct.pack('>II', 6, record_count + 2)
    mobi += struct.pack('>IIII', 0, 0, 0, 0)
    mobi += struct.pack('>I', exth_flags)
    mobi += b'\x00' * 32 + struct.pack('>I', 0xffffffff)
    mobi += struct.pack('>IIII', 0xffffffff, 0xffffffff, 0, 0)
    mobi += b'\x00' * 8
    mobi += struct.pack('>HH', 1, record_count)
    mobi += struct.pack('>I', 1)
    mobi += struct.pack('>IIII', record_count + 3, 1, record_count + 4, 1)
    mobi += b'\x00' * 8 + struct.pack('>I', 0xffffffff)
    mobi += struct.pack('>II', 0, 0xffffffff)
    mobi += struct.pack('>I', 0xffffffff)
    mobi += struct.pack('>II', 0, 0xffffffff)
    assert len(mobi) == 232

    if extension is None:
        extension = b'\xff' * max(header_len - 232, 0)

    return palmdoc + mobi + extension


def build_exth(tags, header_len=None, n_tags=None):
    '''tags is a list of (code, payload)'''
    body = b''.join(struct.pack('>II', code, len(payload) + 8) + payload for code, payload in tags)
    header_len = 12 + len(body) if header_len is None else header_len
    n_tags = len(tags) if n_tags is None else n_tags

    return b'EXTH' + struct.pack('>II', header_len, n_tags) + body + b'\x00' * (header_len % 4)


def build_book(text_records, tags=None, compression=2, full_name=b'A Test Book', text_length=None):
    exth = build_exth(tags) if tags is not None else b''
    full_name_offset = 16 + 232 + len(exth)

    record0 = build_mobi_header(
        text_length=text_length if text_length is not None else sum(len(_) for _ in text_records),
        record_count=len(text_records),
        compression=compression,
        exth_flags=0x50 if tags is not None else 0x10,
        full_name_offset=full_name_offset,
        full_name_length=len(full_name),
    ) + exth + full_name + b'\x00\x00'

    return build_palmdb([record0] + list(text_records))


def pair(distance, length):
    '''Encode a back-reference of the PalmDOC compression'''
    value = (distance << 3) | (length - 3)
    return bytes([0x80 | (value >> 8), value & 0xff])


@pytest.fixture
def palmdb_data():
    return build_palmdb([b'first record', b'second', b'3rd'])


@pytest.fixture
def mobi_header_data():
    return build_mobi_header(text_length=8192, record_count=2)


@pytest.fixture
def book_data():
    records = [
        b'Hello' + bytes([0xf7]) + b'orld',  # "Hello world"
        b'ab' + pair(2, 6) + b'!',           # "abababab!"
        b'\x03\x80\x81\x82',                 # literal bytes
    ]
    tags = [
        (100, b'Jane Doe'),
        (204, (201).to_bytes(4, 'big')),
        (203, (1).to_bytes(4, 'big')),
        (9999, b'\x01\x02\x03'),
    ]

    return build_book(records, tags=tags)
