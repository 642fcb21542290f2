"""
Feature flags and their resolution.

A feature is one derivable capability (constructor, builder, ...). Raw
tokens of the shape ``[no-|hidden-]<feature>`` are merged with flags
recovered from a previous run and with ``@DataClass(genX = ...)``
annotation parameters, then prerequisites are promoted along a fixed
dependency graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from graphlib import TopologicalSorter

from ..utils import upper_camel
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class FeatureFlag(str, Enum):
    """Generatable features, declared in generation order."""

    CONSTRUCTOR = "constructor"
    COPY_CONSTRUCTOR = "copy-constructor"
    GETTERS = "getters"
    SETTERS = "setters"
    TO_STRING = "to-string"
    EQUALS_HASH_CODE = "equals-hash-code"
    FOR_EACH_FIELD = "for-each-field"
    WITHERS = "withers"
    PARCELABLE = "parcelable"
    BUILD_UPON = "build-upon"
    BUILDER = "builder"
    AIDL = "aidl"

    @property
    def kebab_case(self) -> str:
        return self.value

    @property
    def annotation_param(self) -> str:
        """Name of the ``@DataClass`` parameter requesting this feature."""
        return "gen" + "".join(upper_camel(part) for part in self.value.split("-"))

    @property
    def description(self) -> str:
        return FEATURE_DESCRIPTIONS[self]


FEATURE_DESCRIPTIONS: dict[FeatureFlag, str] = {
    FeatureFlag.CONSTRUCTOR: "an all-argument constructor",
    FeatureFlag.COPY_CONSTRUCTOR: "a copy constructor",
    FeatureFlag.GETTERS: "getters",
    FeatureFlag.SETTERS: "chainable setters",
    FeatureFlag.TO_STRING: "toString()",
    FeatureFlag.EQUALS_HASH_CODE: "equals(Object) and hashCode()",
    FeatureFlag.FOR_EACH_FIELD: "a forEachField(..) iteration helper",
    FeatureFlag.WITHERS: "immutable-update withFoo(..) methods",
    FeatureFlag.PARCELABLE: "Parcelable serialization",
    FeatureFlag.BUILD_UPON: "a buildUpon() method returning a pre-filled builder",
    FeatureFlag.BUILDER: "a fluent Builder",
    FeatureFlag.AIDL: "an AIDL parcelable declaration comment",
}

# Prerequisites of each feature; promotion follows these edges transitively
FEATURE_DEPENDENCIES: dict[FeatureFlag, tuple[FeatureFlag, ...]] = {
    FeatureFlag.COPY_CONSTRUCTOR: (FeatureFlag.CONSTRUCTOR,),
    FeatureFlag.WITHERS: (FeatureFlag.CONSTRUCTOR,),
    FeatureFlag.PARCELABLE: (FeatureFlag.CONSTRUCTOR,),
    FeatureFlag.BUILDER: (FeatureFlag.CONSTRUCTOR,),
    FeatureFlag.BUILD_UPON: (FeatureFlag.BUILDER,),
    FeatureFlag.AIDL: (FeatureFlag.PARCELABLE,),
}

# Dependents before their prerequisites
_PROMOTION_ORDER: tuple[FeatureFlag, ...] = tuple(reversed(tuple(TopologicalSorter({f: set(FEATURE_DEPENDENCIES.get(f, ())) for f in FeatureFlag}).static_order())))

PREFIX_NO = "no"
PREFIX_HIDDEN = "hidden"

MODIFIER_NO_FULL_QUALIFIERS = "no-full-qualifiers"
MODIFIER_BUILDER_PROTECTED_SETTERS = "builder-protected-setters"
GLOBAL_MODIFIERS = (MODIFIER_NO_FULL_QUALIFIERS, MODIFIER_BUILDER_PROTECTED_SETTERS)


class Resolution(str, Enum):
    """Three-state resolution of a feature."""

    ABSENT = "absent"
    ENABLED = "enabled"
    RESTRICTED = "restricted"  # Enabled, with @hide on every generated member

    @property
    def is_enabled(self) -> bool:
        return self is not Resolution.ABSENT


@dataclass(frozen=True)
class ResolvedFlags:
    """Final decision for every known feature.

    Attributes:
        states: Resolution per feature, prerequisites promoted
        requested: Resolution per feature that was explicitly mentioned
            (tokens or recovered marker), before promotion
        promoted: Features enabled only because another feature needs them
        full_qualifiers: Refer to library classes by fully qualified name
        builder_protected_setters: Emit builder setters as protected
    """

    states: Mapping[FeatureFlag, Resolution]
    requested: Mapping[FeatureFlag, Resolution] = field(default_factory=dict)
    promoted: frozenset[FeatureFlag] = frozenset()
    full_qualifiers: bool = True
    builder_protected_setters: bool = False

    def __call__(self, feature: FeatureFlag) -> bool:
        return self.states.get(feature, Resolution.ABSENT).is_enabled

    def is_restricted(self, feature: FeatureFlag) -> bool:
        return self.states.get(feature, Resolution.ABSENT) is Resolution.RESTRICTED

    def is_promoted(self, feature: FeatureFlag) -> bool:
        return feature in self.promoted

    def enabled_features(self) -> list[FeatureFlag]:
        return [feature for feature in FeatureFlag if self(feature)]

    def to_tokens(self) -> list[str]:
        """Serialize the requested flags back into CLI tokens.

        The inverse of ``FlagResolver.resolve`` for update-only runs: parsing
        these tokens again yields the same ``requested`` mapping and global
        modifiers, hence the same ``states``.
        """
        tokens = []
        for feature in FeatureFlag:
            resolution = self.requested.get(feature)
            if resolution is None:
                continue
            tokens.append(format_token(feature, resolution))
        if not self.full_qualifiers:
            tokens.append(f"--{MODIFIER_NO_FULL_QUALIFIERS}")
        if self.builder_protected_setters:
            tokens.append(f"--{MODIFIER_BUILDER_PROTECTED_SETTERS}")
        return tokens


def format_token(feature: FeatureFlag, resolution: Resolution) -> str:
    """Render a single feature resolution as a CLI token."""
    if resolution is Resolution.ABSENT:
        return f"--{PREFIX_NO}-{feature.kebab_case}"
    if resolution is Resolution.RESTRICTED:
        return f"--{PREFIX_HIDDEN}-{feature.kebab_case}"
    return f"--{feature.kebab_case}"


_FEATURES_BY_NAME: dict[str, FeatureFlag] = {feature.kebab_case: feature for feature in FeatureFlag}


def parse_token(token: str) -> tuple[FeatureFlag, Resolution] | str:
    """Parse one raw flag token.

    Args:
        token: e.g. "--builder", "--no-setters", "hidden-getters",
            "--no-full-qualifiers"

    Returns:
        A (feature, resolution) pair, or the name of a global modifier

    Raises:
        ConfigurationError: If the token names nothing known
    """
    name = token.lstrip("-")
    if name in GLOBAL_MODIFIERS:
        return name
    if name in _FEATURES_BY_NAME:
        return _FEATURES_BY_NAME[name], Resolution.ENABLED
    prefix, _, rest = name.partition("-")
    if rest in _FEATURES_BY_NAME:
        if prefix == PREFIX_NO:
            return _FEATURES_BY_NAME[rest], Resolution.ABSENT
        if prefix == PREFIX_HIDDEN:
            return _FEATURES_BY_NAME[rest], Resolution.RESTRICTED
    raise ConfigurationError(f"Unknown flag '{token}'. Known features: {', '.join(_FEATURES_BY_NAME)}")


class FlagResolver:
    """Turns raw tokens plus recovered state into ``ResolvedFlags``."""

    def resolve(
        self,
        tokens: Sequence[str],
        previous_tokens: Sequence[str] | None = None,
        annotation_flags: Mapping[str, bool] | None = None,
    ) -> ResolvedFlags:
        """Resolve the final state of every feature.

        Args:
            tokens: Explicit tokens from the command line
            previous_tokens: Tokens recovered from the previous marker, for
                update-only runs
            annotation_flags: ``genX`` parameters of a ``@DataClass``
                annotation on the class

        Returns:
            The resolved flags

        Raises:
            ConfigurationError: On unknown or contradictory tokens
        """
        explicit, explicit_modifiers = self._parse_all(tokens, strict=True)
        previous, previous_modifiers = self._parse_all(previous_tokens or (), strict=False)
        from_annotation = self._from_annotation(annotation_flags or {})

        requested = {**previous, **explicit}
        states = {feature: Resolution.ABSENT for feature in FeatureFlag}
        states.update(previous)
        states.update(from_annotation)
        states.update(explicit)

        promoted = self._promote(states)

        modifiers = previous_modifiers | explicit_modifiers
        resolved = ResolvedFlags(
            states=states,
            requested={feature: requested[feature] for feature in FeatureFlag if feature in requested},
            promoted=frozenset(promoted),
            full_qualifiers=MODIFIER_NO_FULL_QUALIFIERS not in modifiers,
            builder_protected_setters=MODIFIER_BUILDER_PROTECTED_SETTERS in modifiers,
        )
        logger.debug("Resolved features: %s", ", ".join(f"{f.kebab_case}={s.value}" for f, s in states.items()))
        return resolved

    def _parse_all(self, tokens: Iterable[str], strict: bool) -> tuple[dict[FeatureFlag, Resolution], set[str]]:
        """Parse a token list; ``strict`` rejects contradictory repeats."""
        features: dict[FeatureFlag, Resolution] = {}
        modifiers: set[str] = set()
        for token in tokens:
            parsed = parse_token(token)
            if isinstance(parsed, str):
                modifiers.add(parsed)
                continue
            feature, resolution = parsed
            if strict and feature in features and features[feature] is not resolution:
                raise ConfigurationError(f"Conflicting flags for '{feature.kebab_case}': {format_token(feature, features[feature])} and {token}")
            features[feature] = resolution
        return features, modifiers

    def _from_annotation(self, annotation_flags: Mapping[str, bool]) -> dict[FeatureFlag, Resolution]:
        features = {}
        for feature in FeatureFlag:
            value = annotation_flags.get(feature.annotation_param)
            if value is None:
                continue
            features[feature] = Resolution.ENABLED if value else Resolution.ABSENT
        return features

    def _promote(self, states: dict[FeatureFlag, Resolution]) -> set[FeatureFlag]:
        """Enable prerequisites of enabled features, in place."""
        promoted = set()
        for feature in _PROMOTION_ORDER:
            if not states[feature].is_enabled:
                continue
            for prerequisite in FEATURE_DEPENDENCIES.get(feature, ()):
                if not states[prerequisite].is_enabled:
                    logger.info("Enabling '%s', required by '%s'", prerequisite.kebab_case, feature.kebab_case)
                    states[prerequisite] = Resolution.ENABLED
                    promoted.add(prerequisite)
        return promoted
