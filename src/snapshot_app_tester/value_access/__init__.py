"""Value access domain exports."""

from .value_models import ValueField, ValueSnapshot
from .value_store_accessor import UnknownValueError, ValueStoreAccessor

__all__ = ["ValueField", "ValueSnapshot", "UnknownValueError", "ValueStoreAccessor"]
