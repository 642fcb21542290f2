"""
AIDL parcelable declaration.
"""

from __future__ import annotations

from typing import Any

from ..features import FeatureFlag
from .base import FeatureGenerator, GenerationContext


class AidlGenerator(FeatureGenerator):
    """Block comment with the ``parcelable Foo;`` declaration for ``Foo.aidl``."""

    feature = FeatureFlag.AIDL
    template_name = "aidl.java.jinja2"

    def prepare_context(self, ctx: GenerationContext) -> dict[str, Any] | None:
        model = ctx.model
        return {
            "aidl_file": f"{model.name}.aidl",
            "package": model.package,
            "declaration": f"parcelable {model.name};",
        }
