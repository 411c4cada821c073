import logging


class FieldDescriptor(object):
    """Wrapper around field access of a Chunk related class: the class holds
    the plan, the instance holds the value."""

    def __init__(self, field_instance: "Field", field_name: str):
        self.logger = logging.getLogger(f"{self.__module__}.{self.__class__.__name__}")
        self.field = field_instance
        self.name = field_name

    def __get__(self, instance, type=None):
        if instance is None:
            return self.field

        data = instance.__dict__

        if self.name not in data:
            self.logger.debug("initialize value for field named '%s'", self.name)
            data[self.name] = self.field.value_from_default()

        return data[self.name]

    def __set__(self, instance, value):
        self.logger.debug("__set__ from %s for field named '%s'", instance.__class__.__name__, self.name)
        instance.__dict__[self.name] = value


class FieldBase(object):

    def contribute_to_chunk(self, cls, name):
        if not getattr(cls, name, None):
            setattr(cls, name, FieldDescriptor(self, name))
        else:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')


class Meta(object):
    """Class containing metadata about the parser"""

    def __init__(self):
        self.fields = []
        self.plans = {}
        self.type_id = None
        self.log = False
        self.dispatch = None
        self.namespace = {}


class MetaChunk(type):

    def __new__(cls, names, bases, attrs):
        '''Same trick Django uses for its models: the fields are removed from the
        class attributes and replaced with descriptors, remembering the order.'''
        module = attrs.pop('__module__')
        classcell = attrs.pop('__classcell__', None)

        new_attrs = {
            '__module__': module,
        }
        if classcell is not None:
            new_attrs['__classcell__'] = classcell
        new_cls = super(MetaChunk, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaChunk)]
        for parent in parents:
            for obj_name in parent._meta.fields:
                new_cls.add_to_class(obj_name, parent._meta.plans[obj_name])

        for obj_name, obj in attrs.items():
            new_cls.add_to_class(obj_name, obj)

        cls.logger = logging.getLogger(__name__)

        return new_cls

    def add_to_class(cls, name, value):
        if hasattr(value, 'contribute_to_chunk'):
            cls.logger.debug('contribute_to_chunk() found for field \'%s\'' % name)
            cls._meta.fields.append(name)
            cls._meta.plans[name] = value
            value.contribute_to_chunk(cls, name)
        else:
            setattr(cls, name, value)
