"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable: it knows how many bytes it needs and how to turn them into a value.
"""
import logging
import struct
from datetime import datetime, timezone
from enum import Flag, auto

from bitstring import Bits

from .enum import Compliant, DEFAULT_COMPLIANT, OpenEnum
from .meta import FieldBase, Endianess
from .properties import PropertyDescriptor
from .sentinel import decode_optional, encode_optional, decode_nonzero, encode_nonzero
from .exceptions import MagicException, MobiStructException, Utf8DecodeException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.BIG_ENDIAN, compliant=Compliant.INHERIT, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.compliant = compliant
        self.is_magic = is_magic

        self.init()

    def init(self):
        self.value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def __eq__(self, other):
        return type(self) is type(other) and self.value == other.value

    def is_compliant(self, level):
        '''Walk up the hierarchy until some instance decides about the level.'''
        instance = self
        while instance is not None:
            if instance.compliant & level:
                return True
            if not instance.compliant & Compliant.INHERIT:
                return False

            instance = instance.father

        return bool(DEFAULT_COMPLIANT & level)

    def check_magic(self, value):
        if not self.is_magic or value == self.default:
            return

        self.logger.warning(f'the magic for \'{self.name}\' doesn\'t correspond: {value!r} != {self.default!r}')
        if self.is_compliant(Compliant.MAGIC):
            raise MagicException(f'expected magic {self.default!r}, found {value!r}')

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def _update_value(self):
        '''This is used to update the value before packing'''
        pass

    def pack(self, stream):
        self._update_value()
        self.offset = stream.tell()
        stream.write(self.raw)

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.

    The "enum" argument takes a subclass of OpenEnum so to have directly a representation
    of the integer value of the field itself; "equals_to" takes a Dependency that
    is used to recalculate the value when packing.
    """

    def __init__(self, format, default=0, equals_to=None, enum=None, **kw):
        if enum is not None and not issubclass(enum, OpenEnum):
            raise ValueError(f'enum {enum!r} must be a subclass of OpenEnum')

        self.format = format
        self.enum = enum
        self.equals_to = equals_to
        super().__init__(default=default, **kw)

    def __repr__(self):
        if not self.enum:
            return '<%s(%s)>' % (self.__class__.__name__, self._get_encoder()(self.value))

        return f'<{self.__class__.__name__}({self.value!r})>'

    def __str__(self):
        if self.value is None:
            return 'None'
        width = self.size * 2  # we want to be as large as possible
        formatter = '0x%%0%dx' % width
        return formatter % (self._to_int(self.value),)

    def _get_encoder(self):
        return str if self.value is None else hex

    def value_from_default(self):
        if self.enum and not isinstance(self.default, self.enum):
            return self.enum(self.default)

        return super().value_from_default()

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _from_int(self, value: int):
        if not self.enum:
            return value

        member = self.enum(value)
        if member.is_unknown:
            self.logger.warning(f'enum {self.enum.__name__} doesn\'t have element with value 0x{value:x} in it')

        return member

    def _to_int(self, value) -> int:
        return value.value if self.enum else value

    def _get_raw(self) -> bytes:
        return struct.pack(self.get_format(), self._to_int(self.value))

    def _update_value(self):
        if self.equals_to is not None:
            self.value = self.equals_to.resolve(self)

    def unpack(self, stream):
        raw = stream.read_exact(self.size)
        value = self._from_int(struct.unpack(self.get_format(), raw)[0])

        self.check_magic(value)

        self.value = value


class SentinelField(StructField):
    '''A 32 bits integer that can be absent: a reserved value is used as None.
    The subclasses indicate which convention they use.'''
    decode = None
    encode = None

    def __init__(self, default=None, **kw):
        super().__init__('I', default=default, **kw)

    def _from_int(self, value: int):
        return self.decode(value)

    def _to_int(self, value) -> int:
        return self.encode(value)


class OptionalField(SentinelField):
    '''0xffffffff means absent'''
    decode = staticmethod(decode_optional)
    encode = staticmethod(encode_optional)


class NonZeroField(SentinelField):
    '''0 means absent'''
    decode = staticmethod(decode_nonzero)
    encode = staticmethod(encode_nonzero)


class TimestampField(StructField):
    '''Seconds since the epoch, signed.'''

    def __init__(self, **kw):
        super().__init__('i', **kw)

    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.value, tz=timezone.utc)


class BooleanField(StructField):
    '''Integer that is True only when equals to one; the integer read
    is remembered so that packing gives back the same bytes.'''

    def __init__(self, format='I', default=False, **kw):
        self._integer = int(default)
        super().__init__(format, default=default, **kw)

    def _from_int(self, value: int):
        self._integer = value
        return value == 1

    def _to_int(self, value) -> int:
        if bool(value) == (self._integer == 1):
            return self._integer

        return int(bool(value))


class UInt24Field(Field):
    '''Three bytes unsigned integer (struct doesn't have it).'''

    def __init__(self, default=0, **kw):
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def _get_size(self):
        return 3

    def _get_raw(self) -> bytes:
        bits = Bits(uint=self.value, length=24)
        return bits.bytes if self.endianess == Endianess.BIG_ENDIAN else bits.bytes[::-1]

    def unpack(self, stream):
        raw = stream.read_exact(self.size)
        if self.endianess == Endianess.LITTLE_ENDIAN:
            raw = raw[::-1]

        self.value = Bits(raw).uint


class StringField(Field):
    """Represent a contiguous chunk of bytes: the length can be fixed or
    depending on some other field."""

    length = PropertyDescriptor('length', int)

    def __init__(self, n=None, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError(f"StringField must have 'n' or 'default' indicated!")

        self.length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return len(self.value)

    def value_from_default(self):
        if self.default is not None:
            return self.default

        return b'\x00' * (self.length or 0)

    def _get_size(self):
        return len(self.value)

    def _get_raw(self) -> bytes:
        return self.value

    def _set_value(self, value) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise ValueError(f'{self.__class__.__name__} accepts only binary strings')

        if not StringField.length.is_dependency(self) and len(value) != self.length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        super()._set_value(bytes(value))

    def _update_value(self):
        '''When the length depends on another field we pad (or cut) the value to it'''
        if not StringField.length.is_dependency(self):
            return

        length = self.length
        self.value = self.value[:length].ljust(length, b'\x00')

    def unpack(self, stream):
        value = stream.read_exact(self.length)

        self.check_magic(value)

        self.value = value


class BlobField(Field):
    '''Takes as much stream as possible'''

    def __init__(self, default=b'', **kw):
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def _get_size(self):
        return len(self.value)

    def _get_raw(self) -> bytes:
        return self.value

    def unpack(self, stream):
        self.value = stream.read_all()


class TextField(BlobField):
    '''Bytes that are meant to be text: they are not validated when unpacking,
    decoding them is left to who needs the text.'''

    def decode(self, encoding='utf-8') -> str:
        try:
            return self.value.decode(encoding)
        except UnicodeDecodeError as e:
            raise Utf8DecodeException(f'{self.name or "text"} is not valid {encoding}: {e.reason}') from e


class ArrayField(Field):
    '''Un/Pack an array of fields.

    The number of elements is indicated via the parameter named "n", an integer
    or a Dependency. This class behaves a little like a list in python.
    '''

    n = PropertyDescriptor('n', int)

    def __init__(self, element, n=0, **kw):
        self.element = element
        self.n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return [self.instance_element() for _ in range(self.n or 0)]

    def _get_size(self):
        return sum(element.size for element in self.value)

    def _get_raw(self) -> bytes:
        return b''.join(element.raw for element in self.value)

    def instance_element(self):
        return self.element.create(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self.value.append(element)

    def clear(self):
        self.value.clear()

    def unpack_element(self, index, stream):
        element = self.instance_element()
        element.offset = stream.tell()
        try:
            element.unpack(stream)
        except MobiStructException as e:
            e.chain.insert(0, str(index))
            raise

        return element

    def unpack(self, stream):
        n = self.n
        self.logger.debug('unpacking %d elements for \'%s\'' % (n, self.name))

        self.value = []
        for index in range(n):
            self.append(self.unpack_element(index, stream))

    def pack(self, stream):
        self.offset = stream.tell()
        for element in self.value:
            element.pack(stream)


class SelectField(Field):
    """Allow to select the kind of final field based on another field in the parent chunk.
    You need to pass the name of the field to use as key, a dictionary with the mapping
    between key and (class, args, kwargs) of the field and the number of bytes
    the field occupies. You can use Type.DEFAULT as a default.

    The selected field is unpacked from exactly "n" bytes: whatever it doesn't consume
    is kept aside so that the packing gives back the same bytes.

        type2field = {
            DummyType.FIRST: (fields.StructField, ('I',), {}),
            DummyType.SECOND: (fields.TextField, (), {}),
            fields.SelectField.Type.DEFAULT: (fields.BlobField, (), {}),
        }

        class DummyChunk(Chunk):
            type = fields.StructField('I', enum=DummyType)
            length = fields.StructField('I')
            data = fields.SelectField('type', type2field, Dependency('.length'))
    """
    class Type(Flag):
        DEFAULT = auto()

    length = PropertyDescriptor('length', int)

    def __init__(self, key, mapping, n, **kwargs):
        self._key = key
        self._mapping = mapping
        self.length = n
        self._extra = b''

        super().__init__(**kwargs)

    def __repr__(self):
        return f'<{self.__class__.__name__}{self.field!r}>'

    @property
    def field(self):
        return self._field

    def init(self):
        self._field = self._build(self._select(self.default))
        self._extra = b''

    def _select(self, key):
        return key if key in self._mapping else SelectField.Type.DEFAULT

    def _build(self, key):
        field_class, args, kwargs = self._mapping[key]
        field = field_class(*args, **kwargs)
        field.name = self.name
        field.father = self.father

        return field

    def rebuild(self):
        '''Select again the field from the actual value of the key.'''
        key = getattr(self.father, self._key).value
        self._field = self._build(self._select(key))
        self._extra = b''

    def _get_value(self):
        return self._field.value

    def _set_value(self, value):
        self._field.value = value

    def _get_raw(self) -> bytes:
        return self._field.raw + self._extra

    def _get_size(self) -> int:
        return len(self.raw)

    def unpack(self, stream):
        key = getattr(self.father, self._key).value
        self.logger.debug('resolving key \'%s\' to %r' % (self._key, key))

        payload = stream.carve(self.length)

        self._field = self._build(self._select(key))
        self._field.offset = payload.tell()
        self._field.unpack(payload)

        self._extra = payload.read_all()
        if self._extra:
            self.logger.debug(f'{len(self._extra)} bytes not consumed by {self._field!r}')
