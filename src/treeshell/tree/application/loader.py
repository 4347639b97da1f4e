"""
Command tree documents.

Loads command trees from YAML or JSON documents. A document holds either a
single node or a list of nodes, each one standing for one input line.

Example (YAML):

    - op: "|"
      left: {verb: echo, params: [hi]}
      right: {verb: wc, params: [-l], stdout: count.txt}
    - verb: echo
      params: [{var: HOME}]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from treeshell.shared.domain.exceptions import TreeDocumentError
from treeshell.tree.domain.enums import Operator
from treeshell.tree.domain.models import CommandNode, SimpleCommand, Word, WordPart, combine


class PartSchema(BaseModel):
    """One word part; `{var: NAME}` is shorthand for an expanded part."""

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    text: str
    expand: bool = False

    @model_validator(mode="before")
    @classmethod
    def _expand_var_shorthand(cls, data: Any) -> Any:
        if isinstance(data, dict) and "var" in data:
            if set(data) != {"var"}:
                raise ValueError("'var' cannot be combined with other keys")
            return {"text": data["var"], "expand": True}
        return data


PartLike = Union[str, PartSchema]
WordSchema = Union[str, PartSchema, list[PartLike]]


class SimpleSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    kind: Literal["simple"] = "simple"
    verb: WordSchema
    params: list[WordSchema] = Field(default_factory=list)
    stdin: Optional[WordSchema] = None
    stdout: Optional[WordSchema] = None
    stderr: Optional[WordSchema] = None
    stdout_append: bool = False
    stderr_append: bool = False


class OperatorSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["operator"] = "operator"
    op: Operator
    left: NodeSchema
    right: NodeSchema


NodeSchema = Annotated[Union[SimpleSchema, OperatorSchema], Field(discriminator="kind")]

OperatorSchema.model_rebuild()


class _Document(BaseModel):
    nodes: list[NodeSchema]


def _to_word(schema: WordSchema) -> Word:
    if isinstance(schema, str):
        return Word.literal(schema)
    if isinstance(schema, PartSchema):
        return Word((WordPart(schema.text, schema.expand),))
    if not schema:
        raise TreeDocumentError("A word needs at least one part")
    return Word.of(*(p if isinstance(p, str) else WordPart(p.text, p.expand) for p in schema))


def _optional_word(schema: Optional[WordSchema]) -> Optional[Word]:
    return _to_word(schema) if schema is not None else None


def to_node(schema: Union[SimpleSchema, OperatorSchema]) -> CommandNode:
    """Convert a validated schema into an immutable command tree."""
    if isinstance(schema, OperatorSchema):
        return combine(schema.op, to_node(schema.left), to_node(schema.right))
    return SimpleCommand(
        verb=_to_word(schema.verb),
        params=tuple(_to_word(p) for p in schema.params),
        stdin=_optional_word(schema.stdin),
        stdout=_optional_word(schema.stdout),
        stderr=_optional_word(schema.stderr),
        stdout_append=schema.stdout_append,
        stderr_append=schema.stderr_append,
    )


def _tag_kinds(data: Any) -> Any:
    """Fill in the discriminator so authors never have to write it."""
    if not isinstance(data, dict):
        return data
    tagged = {key: _tag_kinds(value) if key in ("left", "right") else value for key, value in data.items()}
    tagged.setdefault("kind", "operator" if "op" in data else "simple")
    return tagged


def parse_trees(data: Any) -> list[CommandNode]:
    """
    Validate decoded document data and build command trees.

    Args:
        data: A node mapping or a list of node mappings

    Returns:
        Command trees in document order

    Raises:
        TreeDocumentError: If the data does not describe valid trees
    """
    nodes = data if isinstance(data, list) else [data]
    try:
        document = _Document.model_validate({"nodes": [_tag_kinds(n) for n in nodes]})
    except ValidationError as e:
        raise TreeDocumentError(
            f"Invalid command tree document: {e.error_count()} problem(s)",
            context={"errors": e.errors(include_url=False)},
        ) from e
    return [to_node(node) for node in document.nodes]


def load_trees(path: str | Path) -> list[CommandNode]:
    """
    Load command trees from a YAML or JSON file.

    Files ending in `.json` are decoded as JSON, anything else as YAML.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TreeDocumentError(f"Cannot read {path}: {e.strerror}", context={"path": str(path)}) from e

    try:
        data = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TreeDocumentError(f"Cannot decode {path}: {e}", context={"path": str(path)}) from e

    if data is None:
        return []
    return parse_trees(data)
