import pytest

from mobistruct.core import Chunk
from mobistruct.enum import Compliant, OpenEnum
from mobistruct.exceptions import MagicException, TruncatedException, Utf8DecodeException
from mobistruct.fields import (
    StructField,
    StringField,
    SelectField,
    ArrayField,
    BlobField,
    TextField,
    BooleanField,
    UInt24Field,
    TimestampField,
    OptionalField,
    NonZeroField,
)
from mobistruct.properties import Dependency
from mobistruct.streams import Stream


class DummyEnum(OpenEnum):
    NONE = 0
    FIRST = 1
    SECOND = 2


def test_structfield_conversion_raw_value():
    """Check that the attributes "value" and "raw" are the analogous
    of the integers and bytes representation for a field."""
    field = StructField('I')

    assert field.size == 4
    assert field.raw == b'\x00\x00\x00\x00'
    assert field.value == 0

    field.value = 0xcafe

    assert field.value == 0xcafe
    assert field.raw == b'\x00\x00\xca\xfe'


def test_structfield_unpack():
    field = StructField('I')
    field.unpack(Stream(b'\x01\x02\x03\x04'))

    assert field.value == 0x01020304


def test_structfield_truncated():
    field = StructField('I')

    with pytest.raises(TruncatedException) as excinfo:
        field.unpack(Stream(b'\x01\x02'))

    assert excinfo.value.offset == 0
    assert excinfo.value.got == 2


def test_structfield_enum():
    field = StructField('I', enum=DummyEnum)

    assert field.value == DummyEnum.NONE

    field.value = DummyEnum.SECOND

    assert field.value == DummyEnum.SECOND
    assert field.raw == b'\x00\x00\x00\x02'


def test_structfield_enum_unknown_value():
    """An unknown value doesn't stop the unpacking and is packed back as it was."""
    field = StructField('I', enum=DummyEnum)
    field.unpack(Stream(b'\x00\x00\x12\x34'))

    assert field.value.is_unknown
    assert field.value.value == 0x1234
    assert field.value is DummyEnum(0x1234)
    assert field.raw == b'\x00\x00\x12\x34'

    assert not DummyEnum.FIRST.is_unknown


def test_structfield_enum_must_be_open():
    from enum import Enum

    class Closed(Enum):
        A = 0

    with pytest.raises(ValueError):
        StructField('I', enum=Closed)


def test_stringfield():
    field = StringField(0x10)

    assert field.size == 0x10
    assert len(field.raw) == field.size
    assert field.raw == b'\x00' * field.size

    with pytest.raises(ValueError):
        field.value = b'kebab'

    with pytest.raises(ValueError):
        field.value = 'not bytes'

    data = b''.join([bytes([_]) for _ in range(0x10)])

    field.value = data

    assert field.value == data
    assert field.raw == data


def test_stringfield_needs_length():
    with pytest.raises(ValueError):
        StringField()


def test_magic():
    class Magic(Chunk):
        magic = StringField(4, default=b'MOBI', is_magic=True)

    assert Magic(b'MOBI').magic.value == b'MOBI'

    with pytest.raises(MagicException) as excinfo:
        Magic(b'MOBX')

    assert excinfo.value.chain == ['magic']

    lax = Magic(compliant=Compliant.NONE)
    lax.unpack(Stream(b'MOBX'))

    assert lax.magic.value == b'MOBX'


def test_sentinel_fields():
    optional = OptionalField()

    assert optional.value is None
    assert optional.raw == b'\xff\xff\xff\xff'

    optional.unpack(Stream(b'\x00\x00\x00\x00'))
    assert optional.value == 0

    nonzero = NonZeroField()

    assert nonzero.value is None
    assert nonzero.raw == b'\x00\x00\x00\x00'

    nonzero.unpack(Stream(b'\xff\xff\xff\xff'))
    assert nonzero.value == 0xffffffff


def test_uint24():
    field = UInt24Field()
    field.unpack(Stream(b'\x01\x02\x03'))

    assert field.value == 0x010203
    assert field.size == 3

    field.value = 0xffffff
    assert field.raw == b'\xff\xff\xff'


def test_boolean_keeps_integer():
    field = BooleanField()

    field.unpack(Stream(b'\x00\x00\x00\x01'))
    assert field.value is True

    field.unpack(Stream(b'\x00\x00\x00\x02'))
    assert field.value is False
    assert field.raw == b'\x00\x00\x00\x02'

    field.value = True
    assert field.raw == b'\x00\x00\x00\x01'


def test_timestamp():
    field = TimestampField()
    field.unpack(Stream(b'\xff\xff\xff\xff'))

    assert field.value == -1
    assert field.as_datetime().year == 1969


def test_textfield_decode():
    field = TextField()
    field.unpack(Stream('café'.encode('utf-8')))

    assert field.decode() == 'café'

    field.value = b'\xff\xfe'
    with pytest.raises(Utf8DecodeException):
        field.decode()


def test_selectfield():
    type2field = {
        DummyEnum.FIRST: (StructField, ('I',), {}),
        DummyEnum.SECOND: (TextField, (), {}),
        SelectField.Type.DEFAULT: (BlobField, (), {}),
    }

    class DummyChunk(Chunk):
        tag = StructField('B', enum=DummyEnum)
        length = StructField('B')
        data = SelectField('tag', type2field, Dependency('.length'))
        trailer = StringField(1)

    first = DummyChunk(b'\x01\x04\xca\xfe\xba\xbe!')
    assert first.data.value == 0xcafebabe
    assert first.trailer.value == b'!'

    second = DummyChunk(b'\x02\x03abc!')
    assert isinstance(second.data.field, TextField)
    assert second.data.value == b'abc'

    unknown = DummyChunk(b'\x09\x02\x01\x02!')
    assert type(unknown.data.field) is BlobField
    assert unknown.data.value == b'\x01\x02'


def test_selectfield_keeps_excess():
    type2field = {
        DummyEnum.FIRST: (StructField, ('H',), {}),
        SelectField.Type.DEFAULT: (BlobField, (), {}),
    }

    class DummyChunk(Chunk):
        tag = StructField('B', enum=DummyEnum)
        length = StructField('B')
        data = SelectField('tag', type2field, Dependency('.length'))

    data = b'\x01\x04\x00\x07\xaa\xbb'
    chunk = DummyChunk(data)

    assert chunk.data.value == 7
    assert chunk.data.size == 4
    assert chunk.pack() == data


def test_selectfield_truncated_payload():
    type2field = {
        DummyEnum.FIRST: (StructField, ('I',), {}),
        SelectField.Type.DEFAULT: (BlobField, (), {}),
    }

    class DummyChunk(Chunk):
        tag = StructField('B', enum=DummyEnum)
        length = StructField('B')
        data = SelectField('tag', type2field, Dependency('.length'))

    with pytest.raises(TruncatedException) as excinfo:
        DummyChunk(b'\x01\x02\x00\x07')

    assert excinfo.value.chain == ['data']
    assert excinfo.value.offset == 2


def test_arrayfield():
    length = 10
    array = ArrayField(StructField('I'), n=length)

    # check some basic property
    assert isinstance(array.value, list)
    assert len(array.value) == length
    assert len(array) == length

    # check that the elements are not duplicated
    assert array[0] is not array[1]
    assert array[0].father is array

    # check the value are all zero
    for field in array:
        assert field.value == 0

    # set one and check is actually changed
    array[3].value = 0xcafebabe
    assert [_.value for _ in array] == [
        0, 0, 0, 0xcafebabe, 0, 0, 0, 0, 0, 0,
    ]

    array.clear()

    assert len(array) == 0


def test_arrayfield_error_chain():
    class Table(Chunk):
        entries = ArrayField(StructField('H'), n=3)

    with pytest.raises(TruncatedException) as excinfo:
        Table(b'\x00\x01\x00\x02\x00')

    assert excinfo.value.chain == ['entries', '2']
    assert excinfo.value.offset == 4


def test_uint24_high_values():
    field = UInt24Field()
    field.unpack(Stream(b'\xab\xcd\xef'))

    assert field.value == 0xabcdef
    assert field.raw == b'\xab\xcd\xef'
