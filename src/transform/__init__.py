"""Source-to-source module transformation for minibundle."""

from transform.bindings import find_references
from transform.commonjs import transform_module
from transform.profile import TargetProfile

__all__ = ["TargetProfile", "find_references", "transform_module"]
