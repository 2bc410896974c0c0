'''
# Palm Database

Generic container used by the Palm OS: a header with a name and some timestamps
followed by a table of records; each entry of the table says where the data
of the record starts in the file.

  .----------------------------.
  | header (78 bytes)          |
  | record entry 0 (8 bytes)   |
  | record entry 1             |
    ...
  | record entry N-1           |
  | gap (2 bytes, zero)        |
  | record 0 data              |
    ...
  '----------------------------'

The length of a record is implicit: it ends where the next one starts (the last
one ends with the file). All the integers are big endian.

Offsets of the app info and sort info blocks use 0 to indicate their absence.
'''
from typing import List, Optional, Tuple

from ..core import Chunk
from .. import fields
from ..enum import Compliant
from ..exceptions import LayoutException
from ..properties import Dependency, LengthOf


MOBI_TYPE_CREATOR = b'BOOKMOBI'
MAX_RECORDS = 0xffff


class RecordEntry(Chunk):
    data_offset = fields.StructField('I')
    attributes  = fields.StructField('B')
    uid         = fields.UInt24Field()


class PalmDatabase(Chunk):
    db_name             = fields.StringField(32)  # NUL terminated
    attributes          = fields.StructField('H')
    version             = fields.StructField('H')
    creation_date       = fields.TimestampField()
    modification_date   = fields.TimestampField()
    backup_date         = fields.TimestampField()
    modification_number = fields.StructField('I')
    app_info_offset     = fields.NonZeroField()  # zero means absent
    sort_info_offset    = fields.NonZeroField()  # zero means absent
    type_creator        = fields.StringField(8, default=MOBI_TYPE_CREATOR, is_magic=True)
    unique_id_seed      = fields.StructField('I')
    next_record_list_id = fields.StructField('I')
    n_records           = fields.StructField('H', equals_to=LengthOf('.records'))
    records             = fields.ArrayField(RecordEntry(), n=Dependency('.n_records'))
    gap                 = fields.StringField(2, default=b'\x00\x00')  # kept as read, zeros when synthesized

    def get_name(self) -> bytes:
        '''The name without the terminator and what follows it.'''
        return self.db_name.value.split(b'\x00', 1)[0]

    def set_name(self, name: bytes):
        if len(name) > 31:
            raise ValueError('the name of the database can be at most 31 bytes')

        self.db_name.value = name.ljust(32, b'\x00')

    @property
    def offsets(self) -> List[int]:
        return [entry.data_offset.value for entry in self.records]

    def record_range(self, index) -> Tuple[int, Optional[int]]:
        '''Start and end of the record's data, the end is None for the last one.'''
        offsets = self.offsets
        end = offsets[index + 1] if index + 1 < len(offsets) else None

        return offsets[index], end

    def add_record(self, data_offset, attributes=0, uid=None):
        entry = self.records.instance_element()
        entry.data_offset.value = data_offset
        entry.attributes.value = attributes
        entry.uid.value = uid if uid is not None else len(self.records)

        self.records.append(entry)

        return entry

    def pack(self, stream=None):
        # the count must fit in the 16 bits of n_records
        if len(self.records) > MAX_RECORDS:
            raise LayoutException(f'too many records: {len(self.records)}')

        return super().pack(stream)

    def validate(self):
        problems = []

        offsets = self.offsets
        for index in range(1, len(offsets)):
            if offsets[index] < offsets[index - 1]:
                problems.append(f'record {index} starts at 0x{offsets[index]:x} before the previous one')

        for problem in problems:
            self.logger.warning(problem)

        if problems and self.is_compliant(Compliant.LAYOUT):
            raise LayoutException('; '.join(problems))
