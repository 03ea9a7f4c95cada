"""Bundle emission for minibundle."""

from bundle.emitter import emit_bundle

__all__ = ["emit_bundle"]
