import copy
import logging
from enum import Enum, auto


logger = logging.getLogger(__name__)


class Endianess(Enum):
    LITTLE_ENDIAN = auto()
    BIG_ENDIAN    = auto()


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk: the field declared in the class body
    is a template, each chunk instance gets its own copy the first time it's accessed."""

    def __init__(self, field_instance: "FieldBase", field_name: str):
        self.field = field_instance
        self.field.name = field_name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.field.name not in data:
            logger.debug("create new field for field named '%s'", self.field.name)
            data[self.field.name] = self.field.create(father=instance)

        return data[self.field.name]

    def __set__(self, instance, value):
        data = instance.__dict__

        # if the value is a field then it replaces the old one
        if isinstance(value, FieldBase):
            value.father = instance
            value.name = self.field.name
            data[self.field.name] = value
        # otherwise delegate to the field
        else:
            self.__get__(instance).value = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if getattr(cls, name, None) is not None:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        setattr(cls, name, FieldDescriptor(self, name))

    def create(self, father):
        instance = copy.deepcopy(self)
        instance.father = father
        return instance


class Meta(object):
    """Class containing metadata about the abstraction"""

    def __init__(self):
        self.fields = []


class MetaChunk(type):
    '''Collects the fields declared in the class body (in order of declaration),
    much like the Django models do.'''

    def __new__(mcs, name, bases, attrs):
        declared = [(_k, _v) for _k, _v in attrs.items() if isinstance(_v, FieldBase)]
        plain_attrs = {_k: _v for _k, _v in attrs.items() if not isinstance(_v, FieldBase)}

        new_cls = super().__new__(mcs, name, bases, plain_attrs)
        new_cls._meta = Meta()

        # handle inheritance, the descriptors are found via the MRO
        for parent in bases:
            if isinstance(parent, MetaChunk):
                new_cls._meta.fields.extend(parent._meta.fields)

        for field_name, field in declared:
            logger.debug('adding field \'%s\' to %s' % (field_name, name))
            new_cls._meta.fields.append(field_name)
            field.contribute_to_chunk(new_cls, field_name)

        return new_cls
