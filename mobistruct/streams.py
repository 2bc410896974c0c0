import io
import logging
from contextlib import contextmanager

from .exceptions import TruncatedException


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file object to
    uniform its properties: mainly we need a read_exact() that
    raises with the absolute offset of the failure.

    The "base" parameter is the absolute offset of the first byte
    of the wrapped data, used when a stream is carved out of another one.'''
    def __init__(self, obj, base=0):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self._owned = False
        self.base = base
        self.obj = obj

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_file)

        init_method()

    def __repr__(self):
        return f'<{self.__class__.__name__}({self._type.__name__}, base=0x{self.base:x})>'

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __del__(self):
        if self.__dict__.get('_owned'):
            self.obj.close()

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'' % self.obj)
        self.obj = open(self.obj, 'rb')
        self._owned = True

    def init_PosixPath(self):
        self.obj = str(self.obj)
        self.init_str()

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def init_file(self):
        '''Whatever binary file object (the caller keeps the ownership)'''
        if not (hasattr(self.obj, 'read') and hasattr(self.obj, 'seek')):
            raise ValueError('\'%s\' is the wrong kind of object to use as a stream' % self._type.__name__)

    def tell(self):
        '''The absolute offset'''
        return self.base + self.obj.tell()

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset - self.base)

        return self

    def read_exact(self, n):
        offset = self.tell()
        data = self.obj.read(n)

        if len(data) != n:
            raise TruncatedException(offset, n, len(data))

        return data

    def read_all(self):
        return self.obj.read()

    def write(self, data):
        return self.obj.write(data)

    def carve(self, n):
        '''Read exactly n bytes and return them as a new stream
        that remembers where they were.'''
        base = self.tell()

        return Stream(self.read_exact(n), base=base)

    def getvalue(self):
        return self.obj.getvalue()

    @contextmanager
    def preserve(self):
        '''Restore the position on exit.'''
        position = self.obj.tell()
        try:
            yield self
        finally:
            self.obj.seek(position)
