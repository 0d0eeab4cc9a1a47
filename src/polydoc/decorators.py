"""
Build models from class declarations.

    @odm.adapt_class
    class Post:
        schema = {"id": str, "parent": str, "title": str}
        index = ["title", ("path", lambda doc: [doc("parent"), doc("id")])]
        options = {"enforce_extra": "remove"}

        def pre_save(self):
            self["title"] = self["title"].strip()

        def init(self):
            self.setdefault("title", "")

        def summary(self):
            return self["title"][:20]

    # With a custom model name:
    @odm.adapt_named_class("posts")
    class Post: ...
"""
from __future__ import annotations

import logging
import types
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Union

from .errors import SchemaConstructionError

if TYPE_CHECKING:
    from .document import Document
    from .model import Model
    from .odm import PolyDoc

logger = logging.getLogger(__name__)

# Class attributes consumed when building the model, never copied onto it
STATIC_EXCLUDE = frozenset({"name", "schema", "options", "index"})
# The constructor stays with the class
INSTANCE_EXCLUDE = frozenset({"__init__"})


@dataclass
class ClassDescriptor:
    """The members of a model class, split by where they get copied."""
    cls: type
    static_members: Dict[str, Any] = field(default_factory=dict)
    instance_members: Dict[str, Callable] = field(default_factory=dict)

    @property
    def schema(self) -> Any:
        try:
            return self.cls.schema
        except AttributeError:
            raise SchemaConstructionError(
                f"Class {self.cls.__name__} must declare a `schema` attribute"
            ) from None

    @property
    def options(self) -> Optional[Dict[str, Any]]:
        return getattr(self.cls, "options", None)

    @property
    def index(self) -> list:
        return list(getattr(self.cls, "index", None) or [])


def describe_class(cls: type) -> ClassDescriptor:
    """
    Enumerate the members of `cls` and its bases (excluding `object`).

    Plain functions become document methods; static methods, class methods
    and data attributes are copied onto the model. Dunder names are never
    members.
    """
    descriptor = ClassDescriptor(cls)

    for klass in reversed(cls.__mro__[:-1]):
        for name, value in vars(klass).items():
            if name.startswith("__") and name.endswith("__"):
                continue

            if isinstance(value, (staticmethod, classmethod)):
                target = descriptor.static_members
            elif isinstance(value, types.FunctionType):
                target = descriptor.instance_members
            elif hasattr(value, "__get__") and not callable(value):
                logger.debug(f"{cls.__name__}.{name}: descriptors are not copied")
                continue
            else:
                target = descriptor.static_members

            # A subclass may turn a method into data or the other way round
            descriptor.static_members.pop(name, None)
            descriptor.instance_members.pop(name, None)
            target[name] = value

    for name in INSTANCE_EXCLUDE:
        descriptor.instance_members.pop(name, None)
    for name in STATIC_EXCLUDE:
        descriptor.static_members.pop(name, None)

    return descriptor


def _bind_static(value: Any, model: Model) -> Any:
    if isinstance(value, staticmethod):
        return value.__func__
    if isinstance(value, classmethod):
        return types.MethodType(value.__func__, model)
    return value


def _document_initializer(descriptor: ClassDescriptor) -> Callable[[Document], None]:
    members = descriptor.instance_members

    def initialize(doc: Document) -> None:
        for name, fn in members.items():
            setattr(doc, name, types.MethodType(fn, doc))
        # Optional per-document constructor
        init = doc.__dict__.get("init")
        if callable(init):
            init()

    return initialize


def build_model(odm: PolyDoc, cls: type, name: Optional[str] = None) -> Model:
    """Create a model from `cls` and wire its methods, hooks and indexes."""
    descriptor = describe_class(cls)

    model = odm.create_model(name or cls.__name__, descriptor.schema, descriptor.options)

    model.on_document_init(_document_initializer(descriptor))

    for member, value in descriptor.static_members.items():
        setattr(model, member, _bind_static(value, model))

    # TODO: register pre_delete as a delete hook the same way
    pre_save = descriptor.instance_members.get("pre_save")
    if pre_save is not None:
        model.pre("save", pre_save)

    for entry in descriptor.index:
        args = list(entry) if isinstance(entry, (list, tuple)) else [entry]
        model.ensure_index(*args)

    return model


class ClassAdapter:
    """The class-to-model entry points of one facade"""

    def __init__(self, odm: PolyDoc):
        self.odm = odm

    def adapt_class(self, cls: type, name: Optional[str] = None) -> Model:
        return build_model(self.odm, cls, name)

    def adapt_named_class(self, name: str) -> Callable[[type], Model]:
        def adapter(cls: type) -> Model:
            return build_model(self.odm, cls, name)

        return adapter

    def create_model_from_class(
        self, cls_or_name: Union[type, str], name: Optional[str] = None
    ) -> Union[Model, Callable[[type], Model]]:
        """Decorator with or without a model name, or a plain function call."""
        if isinstance(cls_or_name, str):
            return self.adapt_named_class(cls_or_name)
        return self.adapt_class(cls_or_name, name)
