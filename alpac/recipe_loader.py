"""
配方读取

支持 YAML、TOML 和 JSON 格式的 ingredients 文件。
"""

import json
from pathlib import Path
from typing import Union

import toml
import yaml
from loguru import logger

from alpac.exceptions import RecipeParseError
from alpac.models import Recipe

RECIPE_FILENAMES = (
    "ingredients.yaml",
    "ingredients.yml",
    "ingredients.toml",
    "ingredients.json",
)

_STR_TAG = "tag:yaml.org,2002:str"
_MERGE_TAG = "tag:yaml.org,2002:merge"


class RecipeLoader(yaml.SafeLoader):
    """
    映射的标量键按原文保留为字符串

    未加引号的 1.10 不会变成浮点数 1.1，版本号与文件中写的一致。
    """

    def construct_mapping(self, node, deep=False):
        for key_node, _ in node.value:
            if isinstance(key_node, yaml.ScalarNode) and key_node.tag not in (
                _STR_TAG,
                _MERGE_TAG,
            ):
                key_node.tag = _STR_TAG
        return super().construct_mapping(node, deep=deep)


def find_recipe_file(recipe_dir: Union[str, Path]) -> Path:
    """在配方目录中查找 ingredients 文件"""
    directory = Path(recipe_dir)
    if not directory.is_dir():
        raise RecipeParseError(
            f"配方目录不存在: {directory}", context={"path": str(directory)}
        )
    for name in RECIPE_FILENAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    raise RecipeParseError(
        f"目录 '{directory}' 中没有 ingredients 文件",
        context={"path": str(directory)},
    )


def load_recipe(path: Union[str, Path]) -> Recipe:
    """
    读取配方

    Args:
        path: 配方目录或配方文件路径

    Returns:
        解析后的 Recipe
    """
    path = Path(path)
    if path.is_dir():
        path = find_recipe_file(path)
    elif not path.is_file():
        raise RecipeParseError(f"配方文件不存在: {path}", context={"path": str(path)})

    suffix = path.suffix.lower()
    logger.debug(f"[配方] 读取 {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if suffix in (".yaml", ".yml"):
            data = yaml.load(text, Loader=RecipeLoader)
        elif suffix == ".toml":
            data = toml.loads(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            raise RecipeParseError(
                f"不支持的配方文件格式: {suffix}", context={"path": str(path)}
            )
    except (OSError, UnicodeDecodeError, yaml.YAMLError, toml.TomlDecodeError, ValueError) as e:
        raise RecipeParseError(
            f"无法解析配方文件 {path}: {e}", context={"path": str(path)}
        ) from e

    return Recipe.from_dict(data)
