'''
Reading of a whole MOBI file: the headers are unpacked one after the other
(each one starts where the previous left the stream), then the text records
are decompressed independently and joined in order.
'''
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from ...compression import palmdoc
from ...containers.palmdb import PalmDatabase
from ...enum import Compliant
from ...exceptions import LayoutException, UnrecoverableException
from ...streams import Stream
from . import MobiHeader
from .enum import CompressionType, EncryptionType
from .exth import ExthHeader


logger = logging.getLogger(__name__)


class MobiBook(object):
    '''The "source" can be a path, the raw bytes or a binary file object
    (that must stay open while the book is used).

        book = MobiBook('/path/to/book.mobi')
        book.header.palmdoc.text_length.value
        book.exth.get(ExthType.AUTHOR)
        book.text()
    '''

    def __init__(self, source, compliant=Compliant.INHERIT, max_workers=None):
        self.stream = source if isinstance(source, Stream) else Stream(source)
        self.max_workers = max_workers

        self.database = PalmDatabase(compliant=compliant)
        self.database.unpack(self.stream)

        if len(self.database.records) == 0:
            raise LayoutException('the database doesn\'t have records')

        first = self.database.records[0].data_offset.value
        logger.debug('MOBI header at offset 0x%x' % first)
        self.stream.seek(first)

        self.header = MobiHeader(compliant=compliant)
        self.header.unpack(self.stream)

        # the EXTH header follows immediately the MOBI header
        self.exth: Optional[ExthHeader] = None
        if self.header.has_exth:
            logger.debug('EXTH header at offset 0x%x' % self.stream.tell())
            self.exth = ExthHeader(compliant=compliant)
            self.exth.unpack(self.stream)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.database.get_name()!r})>'

    def read_record(self, index) -> bytes:
        if not 0 <= index < len(self.database.records):
            raise IndexError(f'record {index} doesn\'t exist')

        start, end = self.database.record_range(index)
        if end is not None and end < start:
            raise LayoutException(f'record {index} starts at 0x{start:x} but the next one at 0x{end:x}')

        with self.stream.preserve():
            self.stream.seek(start)
            if end is None:
                return self.stream.read_all()

            return self.stream.read_exact(end - start)

    @property
    def full_name(self) -> bytes:
        '''The complete title, stored in the first record'''
        header = self.header
        offset = header.full_name_offset.value

        return self.read_record(0)[offset:offset + header.full_name_length.value]

    def text_records(self) -> List[int]:
        '''Indices of the records containing the text'''
        count = self.header.palmdoc.record_count.value
        available = len(self.database.records) - 1

        if count > available:
            logger.warning(f'the header declares {count} text records but only {available} exist')
            count = available

        return list(range(1, count + 1))

    def _check_decodable(self):
        encryption = self.header.palmdoc.encryption.value
        if encryption != EncryptionType.NONE:
            raise UnrecoverableException(f'the text is encrypted ({encryption!r})')

        compression = self.header.palmdoc.compression.value
        if compression not in (CompressionType.NONE, CompressionType.UNCOMPRESSED, CompressionType.PALMDOC):
            raise UnrecoverableException(f'compression {compression!r} is not supported')

    def decompress_record(self, index) -> bytes:
        self._check_decodable()

        return self._decode(index, self.read_record(index))

    def _decode(self, index, data) -> bytes:
        if self.header.palmdoc.compression.value != CompressionType.PALMDOC:
            return data

        start, _ = self.database.record_range(index)
        logger.debug('decompressing record %d (%d bytes)' % (index, len(data)))

        return palmdoc.decompress(data, base=start)

    def text(self) -> bytes:
        '''All the text, not cut to the text_length of the header.

        The records are read sequentially (they share the stream) but
        decompressed concurrently; the result respects their order.'''
        self._check_decodable()

        indices = self.text_records()
        records = [self.read_record(_) for _ in indices]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            chunks = list(executor.map(self._decode, indices, records))

        return b''.join(chunks)
