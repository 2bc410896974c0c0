import logging


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        instance = instance.father

    return instance


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the length of the string contained in the field named 'data'
    read from the field named 'length' at unpacking time.

    The expression is resolved like a python module path:

     - '.name' indicates a field at the same level (i.e. a field of the father)
     - 'name' indicates a field starting from the root chunk

    Subclasses can transform the resolved value overriding _do_resolve().
    '''
    def __init__(self, expression):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def resolve_field(self, instance):
        self.logger.debug('trying to resolve \'%s\' for %s' % (self.expression, instance.__class__.__name__))

        # '.miao'.split(".") -> ['', 'miao']
        # 'miao'.split(".") -> ['miao']
        fields_path = self.expression.split('.')

        if fields_path[0] == '':  # relative dependency
            field = instance.father
            fields_path = fields_path[1:]
        else:
            field = get_root_from_chunk(instance)

        if field is None:
            raise AttributeError(f'{self!r} can\'t be resolved for a field without father')

        for component_name in fields_path:
            field = getattr(field, component_name)

        self.logger.debug(' resolved as field %s' % field.__class__.__name__)

        return field

    def _do_resolve(self, field):
        return field.value

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        value = self._do_resolve(self.resolve_field(instance))

        self.logger.debug(' resolved with value %s' % (value,))

        return value


class DeltaDependency(Dependency):
    '''The value of the field minus a constant, never below zero
    (think of a length that includes a header of known size).'''

    def __init__(self, delta, expression):
        super().__init__(expression)
        self._delta = delta

    def _do_resolve(self, field):
        return max(field.value - self._delta, 0)


class ModuloDependency(Dependency):

    def __init__(self, modulo, expression):
        super().__init__(expression)
        self._modulo = modulo

    def _do_resolve(self, field):
        return field.value % self._modulo


class LengthOf(Dependency):
    '''Number of elements of an ArrayField.'''

    def _do_resolve(self, field):
        return len(field)


class SizeOf(Dependency):
    '''Size in bytes of a field, plus a constant.'''

    def __init__(self, expression, extra=0):
        super().__init__(expression)
        self._extra = extra

    def _do_resolve(self, field):
        return field.size + self._extra


class PropertyDescriptor(object):
    """This the glue for dependency management: the attribute can be
    a plain value or a Dependency resolved at access time."""

    def __init__(self, name: str, _type: type):
        self.name = name
        self.type = _type

    def __get__(self, instance, owner):
        if instance is None:
            return self

        data = instance.__dict__
        if self.name not in data:
            raise AttributeError(f"no '{self.name}' here!")

        value = data[self.name]

        if isinstance(value, Dependency):
            if instance.father is None:
                return None

            return value.resolve(instance)

        return value

    def __set__(self, instance, value):
        if not isinstance(value, (self.type, Dependency)):
            raise ValueError(f"A property must be of type {self.type} or a Dependency")

        instance.__dict__[self.name] = value

    def is_dependency(self, instance):
        return isinstance(instance.__dict__.get(self.name), Dependency)
