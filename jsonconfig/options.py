"""Options controlling how configs are loaded, created and serialized."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SerializerOptions(BaseModel):
    """Switches of the JSON dialect used to read and write config files.

    Instances are frozen, so one dialect can be shared by many
    ``JsonConfigOptions`` bundles.
    """

    model_config = ConfigDict(frozen=True)

    # Reading
    allow_trailing_commas: bool = True
    skip_comments: bool = True
    case_insensitive: bool = True
    numbers_from_string: bool = True
    # Reading and writing
    named_float_literals: bool = True
    enum_as_string: bool = True
    # Writing
    relaxed_escaping: bool = True
    write_indented: bool = True
    indent: int = Field(default=2, ge=0)


# Strict JSON, compact output, enums by value
PLAIN_DIALECT = SerializerOptions(
    allow_trailing_commas=False,
    skip_comments=False,
    case_insensitive=False,
    numbers_from_string=False,
    named_float_literals=False,
    enum_as_string=False,
    relaxed_escaping=False,
    write_indented=False,
)


class JsonConfigOptions(BaseModel):
    """Options bundle bound to a config when it is read or created."""

    create_if_missing: bool = Field(
        default=True, description="Create a default config when the file does not exist"
    )
    save_on_create: bool = Field(default=True, description="Save a newly created config immediately")
    atomic_write: bool = Field(
        default=False, description="Write to a temporary file and rename it over the target"
    )
    serializer_options: SerializerOptions = Field(default_factory=SerializerOptions)

    @classmethod
    def from_options(cls, options: "JsonConfigOptions") -> "JsonConfigOptions":
        """Copy another bundle. The serializer options object is shared, not copied."""
        return options.model_copy()


# Global instance, created on first lookup
_global_options: Optional[JsonConfigOptions] = None


def get_global_options() -> JsonConfigOptions:
    """Return the process-wide default options.

    Config types without their own ``default_options`` look this up on
    every call, so replacing or mutating it affects later loads.
    """
    global _global_options
    if _global_options is None:
        _global_options = JsonConfigOptions()
    return _global_options


def set_global_options(options: JsonConfigOptions) -> None:
    """Replace the process-wide default options."""
    global _global_options
    _global_options = options


def reset_global_options() -> None:
    """Drop the process-wide options so the next lookup recreates the defaults."""
    global _global_options
    _global_options = None
