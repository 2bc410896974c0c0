'''
# MOBI format

E-book format derived from the PalmDOC one: it lives inside a Palm database
(see mobistruct.containers.palmdb) whose type/creator is "BOOKMOBI".

The first record contains the headers describing the book

  .---------------------------------------.
  | PalmDOC header (16 bytes)             |
  | MOBI header (232 bytes + extension)   |  <- header_len counts from "MOBI"
  | EXTH header (optional, exth_flags)    |
  | ...                                   |
  | full name                             |
  '---------------------------------------'

the following records (up to PalmDOC's record_count) contain the text,
each one compressed independently (see mobistruct.compression.palmdoc).

Reference is at <https://wiki.mobileread.com/wiki/MOBI>.
'''
from ... import fields
from ...core import Chunk
from ...enum import Compliant
from ...exceptions import UnsupportedRecordSizeException
from ...properties import DeltaDependency
from .enum import (
    CompressionType,
    EncryptionType,
    MobiType,
    TextEncoding,
    Language,
)


RECORD_SIZE = 4096
MOBI_HEADER_FIXED_LEN = 232
EXTH_FLAG = 0x40


class PalmDocHeader(Chunk):
    compression  = fields.StructField('H', enum=CompressionType, default=CompressionType.PALMDOC)
    unused       = fields.StructField('H')
    text_length  = fields.StructField('I')  # uncompressed
    record_count = fields.StructField('H')  # number of text records
    record_size  = fields.StructField('H', default=RECORD_SIZE)
    encryption   = fields.StructField('H', enum=EncryptionType, default=EncryptionType.NONE)
    unknown      = fields.StructField('H')

    def validate(self):
        '''The only tiling supported is the one with records of 4096 bytes'''
        record_size = self.record_size.value
        if record_size == RECORD_SIZE:
            return

        self.logger.warning(f'record size {record_size} is not {RECORD_SIZE}')
        if self.is_compliant(Compliant.TILING):
            raise UnsupportedRecordSizeException(record_size, chain=['record_size'])


class HuffmanDescriptor(Chunk):
    '''Where to find the tables for the HUFF/CDIC compression'''
    record_offset = fields.StructField('I')
    record_count  = fields.StructField('I')
    table_offset  = fields.StructField('I')
    table_length  = fields.StructField('I')


class DrmDescriptor(Chunk):
    drm_offset = fields.OptionalField()  # 0xffffffff means absent
    drm_count  = fields.OptionalField()  # 0xffffffff means absent
    drm_size   = fields.StructField('I')
    drm_flags  = fields.StructField('I')

    @property
    def n_records(self) -> int:
        return self.drm_count.value or 0


class RecordPair(Chunk):
    number = fields.StructField('I')
    count  = fields.StructField('I', default=1)


class CompilationDescriptor(Chunk):
    data_section_count = fields.StructField('I')
    data_sections      = fields.OptionalField()  # 0xffffffff means absent


class MobiHeader(Chunk):
    '''Header of the book, at the start of the first record.

    The layout after the magic is 232 bytes long; "header_len" can declare more
    (newer versions of the format): the excess is kept as it is in "extension".

    The indices use 0xffffffff to indicate they are absent.
    '''
    palmdoc               = PalmDocHeader()
    magic                 = fields.StringField(4, default=b'MOBI', is_magic=True)
    header_len            = fields.StructField('I', default=MOBI_HEADER_FIXED_LEN)
    content_type          = fields.StructField('I', enum=MobiType, default=MobiType.MOBIPOCKET_BOOK)
    text_encoding         = fields.StructField('I', enum=TextEncoding, default=TextEncoding.UTF8)
    unique_id             = fields.StructField('I')
    file_version          = fields.StructField('I', default=6)
    orthographic_index    = fields.OptionalField()
    inflection_index      = fields.OptionalField()
    index_names           = fields.OptionalField()
    index_keys            = fields.OptionalField()
    extra_indices         = fields.ArrayField(fields.OptionalField(), n=6)
    first_non_book_record = fields.StructField('I')
    full_name_offset      = fields.StructField('I')
    full_name_length      = fields.StructField('I')
    locale                = fields.StructField('I', enum=Language, default=Language.EN)
    dictionary_input      = fields.StructField('I', enum=Language, default=Language.EN)
    dictionary_output     = fields.StructField('I', enum=Language, default=Language.EN)
    min_version           = fields.StructField('I', default=6)
    first_image_record    = fields.StructField('I')
    huffman               = HuffmanDescriptor()
    exth_flags            = fields.StructField('I')
    reserved_0            = fields.StringField(32)
    reserved_1            = fields.StructField('I', default=0xffffffff)
    drm                   = DrmDescriptor()
    reserved_2            = fields.StringField(8)
    first_content_record  = fields.StructField('H', default=1)
    last_content_record   = fields.StructField('H')
    reserved_3            = fields.StructField('I', default=1)
    fcis                  = RecordPair()
    flis                  = RecordPair()
    reserved_4            = fields.StringField(8)
    reserved_5            = fields.StructField('I', default=0xffffffff)
    compilation           = CompilationDescriptor()
    reserved_6            = fields.StructField('I', default=0xffffffff)
    extra_record_data_flags = fields.StructField('I')
    indx_record           = fields.OptionalField()
    extension             = fields.StringField(DeltaDependency(MOBI_HEADER_FIXED_LEN, '.header_len'))

    @property
    def has_exth(self) -> bool:
        return bool(self.exth_flags.value & EXTH_FLAG)

    @property
    def indices(self):
        '''All the ten index references, in order'''
        return [
            self.orthographic_index.value,
            self.inflection_index.value,
            self.index_names.value,
            self.index_keys.value,
        ] + [_.value for _ in self.extra_indices]
