class MobiStructException(Exception):
    '''Base class to extend in order to throw exception in mobistruct.

    The attribute "chain" is the list of field names leading from the
    outermost chunk to the field that caused the exception: each chunk
    prepends its own field name while the exception propagates.
    '''

    def __init__(self, message='', chain=None):
        self.message = message
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        if not self.chain:
            return self.message

        return '%s (at %s)' % (self.message, '.'.join(self.chain))


class UnpackException(MobiStructException):
    pass


class TruncatedException(UnpackException):
    '''The data ended before a field (or an opcode) was completely read.'''

    def __init__(self, offset, wanted, got, chain=None):
        self.offset = offset
        self.wanted = wanted
        self.got = got
        super().__init__(
            'truncated at offset 0x%x: wanted %d bytes, got %d' % (offset, wanted, got),
            chain=chain)


class MagicException(UnpackException):
    pass


class UnsupportedRecordSizeException(UnpackException):

    def __init__(self, record_size, chain=None):
        self.record_size = record_size
        super().__init__(f'record size {record_size} is not supported', chain=chain)


class CorruptBackReferenceException(UnpackException):
    '''A back-reference points before the start of the decompressed output.'''

    def __init__(self, offset, distance, available, chain=None):
        self.offset = offset
        self.distance = distance
        self.available = available
        super().__init__(
            f'back-reference at offset 0x{offset:x} has distance {distance} '
            f'but only {available} bytes were produced',
            chain=chain)


class LayoutException(UnpackException):
    pass


class Utf8DecodeException(MobiStructException):
    '''Raised by the callers that want text out of a string payload.'''
    pass


class UnrecoverableException(MobiStructException):
    '''This is useful when is not possible to let an unknown value
    slip through the parsing.'''
    pass
