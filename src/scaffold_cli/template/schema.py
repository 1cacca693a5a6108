"""Pydantic schema for a template's ``.scaffold/config.json``.

The file declares optional display metadata, extra ignore patterns and an
ordered list of prompts. Loading happens in two passes:

- a structural pass (pydantic) that checks shapes, types and per-field
  constraints such as the prompt name pattern;
- a cross-field pass for rules that span fields, such as "``initialValue``
  must be one of the declared options" and "prompt names are unique". It reads
  the decoded JSON, so it runs even when the structural pass fails.

Both passes report every problem they find as a :class:`ConfigIssue`, so a
template author sees all mistakes at once.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    field_validator,
)

from scaffold_cli.core.config import CONFIG_DIR, CONFIG_FILE, ENV_PREFIX
from scaffold_cli.errors import ConfigIssue, ConfigValidationError, InvalidConfigJSONError

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
PROMPT_TYPES: tuple[str, ...] = ("text", "password", "select", "confirm", "multiselect")


class _SchemaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PromptOption(_SchemaModel):
    """One selectable choice of a select or multiselect prompt."""

    value: str
    label: str
    hint: str | None = None

    @classmethod
    def normalize(cls, entry: "str | PromptOption") -> "PromptOption":
        """Expand the bare-string shorthand into a full option."""
        if isinstance(entry, str):
            return cls(value=entry, label=entry)
        return entry


OptionEntry = Union[str, PromptOption]


class BasePrompt(_SchemaModel):
    """Fields shared by every prompt kind."""

    name: str
    message: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError(
                "must be a valid environment variable name (letters, numbers, underscore; "
                "not starting with a number)"
            )
        return value

    @property
    def env_key(self) -> str:
        """Environment variable that carries this prompt's answer."""
        return f"{ENV_PREFIX}{self.name.upper()}"


class TextPrompt(BasePrompt):
    type: Literal["text"]
    placeholder: str | None = None
    initial_value: str | None = Field(default=None, alias="initialValue")


class PasswordPrompt(BasePrompt):
    # No initial_value: a password never has a static default.
    type: Literal["password"]
    mask: str | None = Field(default=None, min_length=1, max_length=1)


class ChoicePrompt(BasePrompt):
    options: list[OptionEntry]
    max_items: StrictInt | None = Field(default=None, alias="maxItems", gt=0)

    @field_validator("options")
    @classmethod
    def _check_options(cls, value: list[OptionEntry]) -> list[OptionEntry]:
        if not value:
            raise ValueError("needs at least one option")
        return value

    def normalized_options(self) -> list[PromptOption]:
        return [PromptOption.normalize(entry) for entry in self.options]

    def option_values(self) -> list[str]:
        return [option.value for option in self.normalized_options()]


class SelectPrompt(ChoicePrompt):
    type: Literal["select"]
    initial_value: str | None = Field(default=None, alias="initialValue")


class ConfirmPrompt(BasePrompt):
    type: Literal["confirm"]
    active: str | None = None
    inactive: str | None = None
    initial_value: StrictBool | None = Field(default=None, alias="initialValue")


class MultiSelectPrompt(ChoicePrompt):
    type: Literal["multiselect"]
    initial_value: list[str] | None = Field(default=None, alias="initialValue")
    required: StrictBool | None = None


Prompt = Annotated[
    Union[TextPrompt, PasswordPrompt, SelectPrompt, ConfirmPrompt, MultiSelectPrompt],
    Field(discriminator="type"),
]


class ScaffoldConfig(_SchemaModel):
    """Top-level contents of ``.scaffold/config.json``."""

    name: str | None = None
    description: str | None = None
    ignore: list[str] = Field(default_factory=list)
    prompts: list[Prompt] = Field(default_factory=list)


def _issue_path(loc: tuple[Any, ...]) -> str:
    parts: list[str] = []
    for index, part in enumerate(loc):
        # Drop the union member names pydantic inserts into error locations
        # (``prompts.0.select.options`` -> ``prompts.0.options``).
        if index > 0 and isinstance(loc[index - 1], int) and part in PROMPT_TYPES:
            continue
        if part in ("str", "PromptOption"):
            continue
        parts.append(str(part))
    return ".".join(parts) or "<root>"


def _issues_from_validation(exc: ValidationError) -> list[ConfigIssue]:
    issues: list[ConfigIssue] = []
    for error in exc.errors():
        message = error["msg"]
        ctx = error.get("ctx") or {}
        if error["type"] == "value_error" and "error" in ctx:
            message = str(ctx["error"])
        issue = ConfigIssue(_issue_path(tuple(error["loc"])), message)
        if issue not in issues:
            issues.append(issue)
    return issues


def _raw_option_values(options: Any) -> list[str] | None:
    """Option values of a raw ``options`` list, or None if it is malformed."""
    if not isinstance(options, list) or not options:
        return None
    values: list[str] = []
    for entry in options:
        if isinstance(entry, str):
            values.append(entry)
        elif isinstance(entry, dict) and isinstance(entry.get("value"), str):
            values.append(entry["value"])
        else:
            return None
    return values


def _cross_field_issues(prompts: Any) -> list[ConfigIssue]:
    """Check raw prompt dicts for rules pydantic cannot express per field.

    Works on the decoded JSON so it also runs when the structural pass fails;
    entries too malformed to judge are skipped.
    """
    if not isinstance(prompts, list):
        return []
    issues: list[ConfigIssue] = []
    seen: dict[str, int] = {}

    for index, prompt in enumerate(prompts):
        if not isinstance(prompt, dict):
            continue
        base = f"prompts.{index}"
        kind = prompt.get("type")
        initial_value = prompt.get("initialValue")
        values = _raw_option_values(prompt.get("options"))

        if values is not None and kind == "select" and isinstance(initial_value, str):
            if initial_value not in values:
                issues.append(
                    ConfigIssue(
                        f"{base}.initialValue",
                        f"{initial_value!r} is not one of the option values {values}",
                    )
                )
        elif values is not None and kind == "multiselect" and isinstance(initial_value, list):
            for position, value in enumerate(initial_value):
                if isinstance(value, str) and value not in values:
                    issues.append(
                        ConfigIssue(
                            f"{base}.initialValue.{position}",
                            f"{value!r} is not one of the option values {values}",
                        )
                    )

        name = prompt.get("name")
        if not isinstance(name, str):
            continue
        # Names collide once upper-cased into SCAFFOLD_<NAME>.
        key = name.upper()
        if key in seen:
            issues.append(
                ConfigIssue(
                    f"{base}.name",
                    f"prompt names must be unique; {name!r} duplicates prompts.{seen[key]}",
                )
            )
        else:
            seen[key] = index

    return issues


def _issue_order(issue: ConfigIssue) -> int:
    parts = issue.path.split(".")
    if len(parts) > 1 and parts[0] == "prompts" and parts[1].isdigit():
        return int(parts[1])
    return -1


def _merge_issues(structural: list[ConfigIssue], cross_field: list[ConfigIssue]) -> list[ConfigIssue]:
    merged = structural + [issue for issue in cross_field if issue not in structural]
    return sorted(merged, key=_issue_order)


def validate_config(config: ScaffoldConfig) -> list[ConfigIssue]:
    """Check the rules that relate several fields of a structurally valid config."""
    return _cross_field_issues(
        [prompt.model_dump(by_alias=True, exclude_none=True) for prompt in config.prompts]
    )


def parse_config(raw: Any, source: Path | None = None) -> ScaffoldConfig:
    """Validate already-decoded JSON and return the config.

    Structural and cross-field issues are reported together, ordered by the
    prompt they belong to.

    Raises:
        ConfigValidationError: listing every structural or semantic issue.
    """
    raw_prompts = raw.get("prompts") if isinstance(raw, dict) else None
    try:
        config = ScaffoldConfig.model_validate(raw)
    except ValidationError as exc:
        issues = _merge_issues(_issues_from_validation(exc), _cross_field_issues(raw_prompts))
        raise ConfigValidationError(issues, source) from exc

    issues = validate_config(config)
    if issues:
        raise ConfigValidationError(issues, source)
    return config


def config_path_for(template_root: Path) -> Path:
    return template_root / CONFIG_DIR / CONFIG_FILE


def load_config(template_root: Path) -> ScaffoldConfig:
    """Load ``.scaffold/config.json`` from *template_root*.

    A missing file is not an error and yields an empty config.
    """
    config_path = config_path_for(template_root)
    if not config_path.is_file():
        logger.debug("No scaffold config at %s", config_path)
        return ScaffoldConfig()

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidConfigJSONError(config_path, str(exc)) from exc

    config = parse_config(raw, source=config_path)
    logger.debug(
        "Loaded scaffold config %s (%d ignore pattern(s), %d prompt(s))",
        config_path,
        len(config.ignore),
        len(config.prompts),
    )
    return config


__all__ = [
    "BasePrompt",
    "ChoicePrompt",
    "ConfirmPrompt",
    "MultiSelectPrompt",
    "NAME_PATTERN",
    "PasswordPrompt",
    "Prompt",
    "PromptOption",
    "ScaffoldConfig",
    "SelectPrompt",
    "TextPrompt",
    "config_path_for",
    "load_config",
    "parse_config",
    "validate_config",
]
