"""
Parser Configuration.

Options of a conversion pass, resolved from explicit overrides layered over the
``[tool.svelte_ast_bridge]`` table of the nearest ``pyproject.toml``.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

SourceType = Literal["module", "script"]
SchemaVersion = Literal["auto", "legacy", "modern"]


class ParserConfig(BaseModel):
  """
  Configuration of one conversion pass.
  """

  source_type: SourceType = Field("module", description="ECMAScript source type of the embedded scripts.")
  schema_version: SchemaVersion = Field("auto", description="Foreign AST schema version; 'auto' detects it.")
  analyze_scope: bool = Field(True, description="Resolve script scopes and run the scope restore phases.")
  file_path: Optional[Path] = Field(None, description="Path of the template file, used in log messages.")

  @field_validator("source_type", "schema_version", mode="before")
  @classmethod
  def normalize_choice(cls, v: Any) -> Any:
    """
    Lowercases and strips string choices before validation.

    Args:
        v: Raw value.

    Returns:
        The normalized value.
    """
    if isinstance(v, str):
      return v.lower().strip()
    return v

  @classmethod
  def load(
    cls,
    source_type: Optional[str] = None,
    schema_version: Optional[str] = None,
    analyze_scope: Optional[bool] = None,
    file_path: Optional[Path] = None,
    search_path: Optional[Path] = None,
  ) -> "ParserConfig":
    """
    Loads configuration from pyproject.toml and applies explicit overrides.

    Args:
        source_type (Optional[str]): Override for the source type.
        schema_version (Optional[str]): Override for the schema version.
        analyze_scope (Optional[bool]): Override for scope analysis.
        file_path (Optional[Path]): Template file being converted.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        ParserConfig: The resolved configuration.
    """
    start_dir = search_path or (file_path.parent if file_path else Path.cwd())
    toml_config, _ = _load_toml_settings(start_dir)

    values: Dict[str, Any] = {}
    for key, override in (
      ("source_type", source_type),
      ("schema_version", schema_version),
      ("analyze_scope", analyze_scope),
    ):
      if override is not None:
        values[key] = override
      elif key in toml_config:
        values[key] = toml_config[key]
    if file_path is not None:
      values["file_path"] = file_path
    return cls(**values)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts the tool table.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()
  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      with open(toml_path, "rb") as f:
        data = tomllib.load(f)
      return data.get("tool", {}).get("svelte_ast_bridge", {}), parent
  return {}, None
