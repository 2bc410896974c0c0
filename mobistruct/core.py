"""
Core module for the abstraction of a file format

"""
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import MobiStructException
from .properties import get_root_from_chunk


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: a Chunk is
    a sequence of fields (and sub-chunks) declared in the class body, in the
    order they appear in the binary data.

        class Entry(Chunk):
            data_offset = fields.StructField('I')
            attributes  = fields.StructField('B')

    If some data (a path, bytes or a binary file) is passed to the constructor
    the chunk is unpacked from it.
    """

    def __init__(self, source=None, **kwargs):
        super().__init__(**kwargs)

        if source is not None:
            stream = source if isinstance(source, Stream) else Stream(source)
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
            self.unpack(stream)

    def init(self):
        '''the fields are created the first time they are accessed'''
        pass

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    @property
    def root(self):
        '''Obtain the final father of this chunk'''
        return get_root_from_chunk(self)

    def _get_size(self):
        '''the size MUST be derived from the subchunks'''
        return sum(field.size for _, field in self.get_fields())

    def _get_raw(self) -> bytes:
        return b''.join(field.raw for _, field in self.get_fields())

    def _get_value(self):
        return {name: field.value for name, field in self.get_fields()}

    def _set_value(self, value):
        for name, field_value in value.items():
            setattr(self, name, field_value)

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        return {name: (field.offset, field.size) for name, field in self.get_fields()}

    def pack(self, stream=None):
        '''Encode the chunk, field after field: the fields with a dependency
        recalculate their value just before being written.

        If no stream is passed the packed bytes are returned.'''
        own_stream = stream is None
        stream = Stream(b'') if own_stream else stream

        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            self.logger.debug('packing %s.%s at offset 0x%x' % (self.__class__.__name__, field_name, stream.tell()))
            field.pack(stream)

        return stream.getvalue() if own_stream else None

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        The fields are read one after the other starting from the actual position
        of the stream; when a field fails its name is added to the chain of the
        exception, that is raised again unchanged otherwise.
        '''
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            field.offset = stream.tell()
            self.logger.debug('unpacking %s.%s at offset 0x%x' % (self.__class__.__name__, field_name, field.offset))

            try:
                field.unpack(stream)
            except MobiStructException as e:
                e.chain.insert(0, field_name)
                raise

        if hasattr(self, 'validate'):
            self.validate()
