"""Configuration classes for lenient HTML parsing.

Configuration is split per processing layer (tokenizer, tree builder, global
settings) and combined in the immutable :class:`ParserConfig`. Every component
configuration validates itself on construction.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class TokenizerConfig:
    """Configuration for the tokenizer."""

    # Treat <!...> and <?...> as comments; otherwise they are literal text
    recognize_bogus_comments: bool = True

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if not isinstance(self.recognize_bogus_comments, bool):
            raise ValueError("recognize_bogus_comments must be a bool")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    preserve_tag_case: bool = False
    drop_whitespace_text: bool = False

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not isinstance(self.preserve_tag_case, bool):
            raise ValueError("preserve_tag_case must be a bool")
        if not isinstance(self.drop_whitespace_text, bool):
            raise ValueError("drop_whitespace_text must be a bool")


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: Optional[str] = None  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_diagnostics: bool = True
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if (
            self.logging_level is not None
            and self.logging_level not in VALID_LOGGING_LEVELS
        ):
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")


COMPONENT_CLASSES: Dict[str, type] = {
    "tokenizer": TokenizerConfig,
    "tree": TreeConfig,
    "global_": GlobalConfig,
}
COMPONENT_FIELDS = list(COMPONENT_CLASSES)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for the lenient HTML parser.

    Instances are frozen and therefore safe to share between threads; use
    :meth:`override` to derive a modified copy.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        for field_name in COMPONENT_FIELDS:
            component = getattr(self, field_name)
            expected = COMPONENT_CLASSES[field_name]
            if not isinstance(component, expected):
                raise ConfigValidationError(
                    f"{field_name} must be a {expected.__name__}",
                    field_name=field_name,
                )
            try:
                component.__post_init__()
            except ValueError as e:
                raise ConfigValidationError(str(e), field_name=field_name) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use the
                ``component__field`` notation

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig().override(tree__preserve_tag_case=True)
            >>> config.tree.preserve_tag_case
            True
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" not in key:
                nested_overrides[key] = value
                continue
            # "global_" ends in an underscore, so match on known prefixes
            component = next(
                (name for name in COMPONENT_FIELDS if key.startswith(name + "__")),
                None,
            )
            if component is None:
                raise ConfigValidationError(
                    f"Unknown configuration component in: {key}",
                    field_name=key,
                    suggestions=list(COMPONENT_FIELDS),
                )
            field_name = key[len(component) + 2:]
            nested_overrides.setdefault(component, {})[field_name] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in COMPONENT_FIELDS and isinstance(value, dict):
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for field_name in COMPONENT_FIELDS:
            component = getattr(self, field_name)
            result[field_name] = {
                name: getattr(component, name)
                for name in component.__dataclass_fields__
            }
        result["name"] = self.name
        result["description"] = self.description
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys raise :class:`ConfigValidationError`; missing keys keep
        their defaults.
        """
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in COMPONENT_FIELDS:
                component_class = COMPONENT_CLASSES[key]
                try:
                    field_values[key] = component_class(**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                field_values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def web_scraping(cls) -> "ParserConfig":
        """Create preset for content extraction from scraped pages.

        Whitespace-only text between tags is dropped, so the forest only
        holds text a reader would see.
        """
        return cls(
            tree=TreeConfig(drop_whitespace_text=True),
            name="web_scraping",
            description="Drops whitespace-only text runs between tags",
        )

    @classmethod
    def source_faithful(cls) -> "ParserConfig":
        """Create preset that keeps tag names as written in the source."""
        return cls(
            tree=TreeConfig(preserve_tag_case=True),
            name="source_faithful",
            description="Keeps the original case of tag names",
        )
