'''
# EXTH header

Optional block of metadata following the MOBI header (bit 0x40 of exth_flags):
a small header followed by a list of type-length-value records

  .----------------------------------------------.
  | "EXTH" | header_len | n_tags                 |
  | type | length | data (length - 8 bytes)      |
  | type | length | data                         |
    ...
  | padding                                      |
  '----------------------------------------------'

header_len counts also the 12 bytes of the header itself, the length of each
record counts its 8 bytes of framing.
'''
from typing import List

from ... import fields
from ...core import Chunk
from ...properties import Dependency, DeltaDependency, LengthOf, ModuloDependency, PropertyDescriptor, SizeOf
from .enum import ExthType, CreatorSoftware, Language


EXTH_HEADER_LEN = 12
EXTH_RECORD_FRAME_LEN = 8


def _text():
    return (fields.TextField, (), {})


def _u32():
    return (fields.StructField, ('I',), {})


type2field = {
    ExthType.AUTHOR:                  _text(),
    ExthType.PUBLISHER:               _text(),
    ExthType.CONTRIBUTOR:             _text(),
    ExthType.PUBLISHING_DATE:         _text(),  # not parsed, it's a string like the others
    ExthType.SOURCE:                  _text(),
    ExthType.ASIN:                    _text(),
    ExthType.KF8_COVER_URI:           _text(),
    ExthType.CDE_TYPE:                _text(),
    ExthType.UPDATED_TITLE:           _text(),
    ExthType.LANGUAGE:                (fields.StructField, ('H',), {'enum': Language}),
    ExthType.CREATOR_SOFTWARE:        (fields.StructField, ('I',), {'enum': CreatorSoftware}),
    ExthType.CREATOR_MAJOR_VERSION:   _u32(),
    ExthType.CREATOR_MINOR_VERSION:   _u32(),
    ExthType.CREATOR_BUILD_NUMBER:    _u32(),
    ExthType.COVER_OFFSET:            _u32(),
    ExthType.THUMBNAIL_OFFSET:        _u32(),
    ExthType.START_READING_AT_OFFSET: _u32(),
    ExthType.USED_BUT_UNKNOWN:        _u32(),
    ExthType.HAS_FAKE_COVER:          (fields.BooleanField, (), {}),
    # whatever else is kept as it is
    fields.SelectField.Type.DEFAULT:  (fields.BlobField, (), {}),
}


class ExthRecord(Chunk):
    tag_type   = fields.StructField('I', enum=ExthType)
    tag_length = fields.StructField('I', equals_to=SizeOf('.data', extra=EXTH_RECORD_FRAME_LEN))
    data       = fields.SelectField(
        'tag_type', type2field, DeltaDependency(EXTH_RECORD_FRAME_LEN, '.tag_length'))

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.tag_type.value!r}, {self.payload!r})>'

    @classmethod
    def build(cls, tag_type, payload):
        '''Create a record from scratch, the payload must be of the kind
        the type requires (bytes for the unknown ones).'''
        record = cls()
        record.tag_type.value = tag_type if isinstance(tag_type, ExthType) else ExthType(tag_type)
        record.data.rebuild()
        record.data.value = payload
        record.tag_length.value = record.data.size + EXTH_RECORD_FRAME_LEN

        return record

    @property
    def code(self) -> int:
        return self.tag_type.value.value

    @property
    def payload(self):
        return self.data.value

    @property
    def is_raw(self) -> bool:
        '''True when the payload wasn't interpreted (the type is unknown
        or doesn't have an interpretation)'''
        return type(self.data.field) is fields.BlobField

    def text(self, encoding='utf-8') -> str:
        if not isinstance(self.data.field, fields.TextField):
            raise ValueError(f'{self.tag_type.value!r} is not a text record')

        return self.data.field.decode(encoding)


class ExthRecordsField(fields.ArrayField):
    '''The records of the EXTH header: at most "n" of them are read from a region
    of "bound" bytes, the reading stops (without errors) at the first record
    that doesn't fit. Whatever remains of the region is kept in "trailing".'''

    bound = PropertyDescriptor('bound', int)

    def __init__(self, element, n, bound, **kw):
        self.bound = bound
        self.trailing = b''
        super().__init__(element, n=n, **kw)

    def _get_size(self):
        return super()._get_size() + len(self.trailing)

    def _get_raw(self) -> bytes:
        return super()._get_raw() + self.trailing

    def _fits(self, region):
        '''Check there is a whole record at the actual position of the region'''
        available = len(region.getvalue()) - region.obj.tell()
        if available < EXTH_RECORD_FRAME_LEN:
            return False

        with region.preserve():
            header = region.read_exact(EXTH_RECORD_FRAME_LEN)

        length = int.from_bytes(header[4:], 'big')

        return EXTH_RECORD_FRAME_LEN <= length <= available

    def unpack(self, stream):
        n = self.n
        region = stream.carve(self.bound)

        self.value = []
        self.trailing = b''

        for index in range(n):
            if not self._fits(region):
                self.logger.warning(f'only {index} records of {n} fit in {self.bound} bytes')
                break
            self.append(self.unpack_element(index, region))

        self.trailing = region.read_all()

    def pack(self, stream):
        super().pack(stream)
        stream.write(self.trailing)


class ExthHeader(Chunk):
    magic      = fields.StringField(4, default=b'EXTH', is_magic=True)
    header_len = fields.StructField('I', equals_to=SizeOf('.tags', extra=EXTH_HEADER_LEN))
    n_tags     = fields.StructField('I', equals_to=LengthOf('.tags'))
    tags       = ExthRecordsField(
        ExthRecord(),
        n=Dependency('.n_tags'),
        bound=DeltaDependency(EXTH_HEADER_LEN, '.header_len'))
    # NOTE: header_len % 4 and not the complement, it's what the files we know do
    padding    = fields.StringField(ModuloDependency(4, '.header_len'))

    def __iter__(self):
        return iter(self.tags)

    def get(self, tag_type) -> List[ExthRecord]:
        '''All the records with the given type (some can be repeated)'''
        tag_type = ExthType(tag_type)

        return [_ for _ in self.tags if _.tag_type.value is tag_type]

    def append(self, tag_type, payload) -> ExthRecord:
        record = ExthRecord.build(tag_type, payload)
        self.tags.append(record)

        return record
