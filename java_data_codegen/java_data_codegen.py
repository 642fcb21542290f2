import json
import logging

import click

from . import __version__
from .cli_utils import CODEGEN_NAME
from .pipeline import CodeGeneratorConfig, PipelineGenerator
from .pipeline.errors import CodegenError, ConfigurationError
from .pipeline.features import MODIFIER_BUILDER_PROTECTED_SETTERS, MODIFIER_NO_FULL_QUALIFIERS, FeatureFlag


FIELD_MODIFIERS = [
    ("transient", "ignore the field completely"),
    ("@Nullable", "accept null, and parcel the field's null bit"),
    ("@NonNull", "reject null input"),
    ("@DataClass.Enum", "parcel the field as an enum ordinal"),
    ("@DataClass.PluralOf(..)", "singular name for the builder's addFoo(..)"),
    ("@DataClass.ParcelWith(..)", "custom Parcelling class for the field"),
    ("= <initializer>;", "default value, the field becomes optional"),
    ("@hide (in javadoc)", "hide every member generated for the field"),
]

HOOK_METHODS = [
    ("void onConstructed()", "called at the end of the constructor"),
    ("void parcelFoo(Parcel dest, int flags)", "custom parcelling of mFoo"),
    ("static T unparcelFoo(Parcel in)", "custom unparcelling of mFoo"),
    ("String fooToString()", "custom toString() of mFoo"),
    ("T lazyInitFoo()", "lazy initialization in getFoo()"),
    ("T defaultFoo()", "default value, usable with final fields"),
    ("static class Builder extends BaseBuilder", "extend the generated builder"),
]


def _epilog() -> str:
    lines = ["\b", "Features (prefix with no- to disable, hidden- to add @hide):"]
    lines.extend(f"  --{feature.kebab_case:<20} {feature.description}" for feature in FeatureFlag)
    lines.extend(["", "\b", "Field modifiers and annotations:"])
    lines.extend(f"  {modifier:<26} {description}" for modifier, description in FIELD_MODIFIERS)
    lines.extend(["", "\b", "Methods you can define (a hand-written member always wins):"])
    lines.extend(f"  {signature:<42} {description}" for signature, description in HOOK_METHODS)
    return "\n".join(lines)


@click.command(
    context_settings={"ignore_unknown_options": True},
    epilog=_epilog(),
)
@click.option("--update-only", is_flag=True, default=False, help="Only refresh files that were generated before, with their recorded flags")
@click.option("--no-full-qualifiers", is_flag=True, default=False, help="Refer to library classes by simple name")
@click.option("--builder-protected-setters", is_flag=True, default=False, help="Make builder setters protected")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="JSON configuration file")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every generation step")
@click.version_option(__version__, prog_name=CODEGEN_NAME)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def java_data_codegen(update_only, no_full_qualifiers, builder_protected_setters, config, verbose, args):
    """Regenerate the boilerplate of a Java data class.

    ARGS are feature flags followed by the Java file to process.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if not args:
        raise click.UsageError("Missing the Java file to process")
    *tokens, path = args

    if no_full_qualifiers:
        tokens.append(f"--{MODIFIER_NO_FULL_QUALIFIERS}")
    if builder_protected_setters:
        tokens.append(f"--{MODIFIER_BUILDER_PROTECTED_SETTERS}")

    if config is not None:
        with open(config) as f:
            config = CodeGeneratorConfig.from_dict(json.load(f))
    else:
        config = CodeGeneratorConfig()

    codegen = PipelineGenerator(config)
    try:
        written = codegen.run(path, tokens, update_only=update_only)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e
    except CodegenError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.FileError(path, hint=str(e)) from e

    if not written:
        click.echo(f"{path}: nothing to update")
