"""Tests for reading ingredients files in each supported format."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

import pytest
import toml
import yaml

from alpac.exceptions import RecipeParseError
from alpac.recipe_loader import find_recipe_file, load_recipe


class TestLoadRecipe:
    @pytest.mark.parametrize(
        "filename,dump",
        [
            ("ingredients.yaml", yaml.safe_dump),
            ("ingredients.toml", toml.dumps),
            ("ingredients.json", json.dumps),
        ],
    )
    def test_formats(self, tmp_path: Path, recipe_data: Dict, filename, dump):
        (tmp_path / filename).write_text(dump(recipe_data))
        recipe = load_recipe(tmp_path)
        assert recipe.name == "fox"
        assert sorted(recipe.list_versions()) == ["1.0", "2.0"]

    def test_loads_file_path(self, tmp_path: Path):
        path = tmp_path / "custom.yml"
        path.write_text("name: solo\n")
        assert load_recipe(path).list_versions() == []

    def test_unquoted_yaml_versions(self, tmp_path: Path):
        (tmp_path / "ingredients.yaml").write_text(
            "name: x\nsources:\n  1.5:\n    url: https://example.org/x.bin\n"
        )
        assert load_recipe(tmp_path).list_versions() == ["1.5"]

    def test_unquoted_yaml_versions_keep_their_text(self, tmp_path: Path):
        (tmp_path / "ingredients.yaml").write_text(
            "name: x\n"
            "sources:\n"
            "  1.10:\n"
            "    url: https://example.org/x-1.10.bin\n"
            "  1.9:\n"
            "    url: https://example.org/x-1.9.bin\n"
            "  2:\n"
            "    url: https://example.org/x-2.bin\n"
        )
        recipe = load_recipe(tmp_path)
        assert recipe.list_versions() == ["1.10", "1.9", "2"]
        assert recipe.resolve("1.10").filename() == "x-1.10.bin"
        assert recipe.sorted_versions() == ["2", "1.10", "1.9"]

    def test_yaml_merge_keys_still_work(self, tmp_path: Path):
        (tmp_path / "ingredients.yaml").write_text(
            "name: x\n"
            "base: &base\n"
            "  url: https://example.org/x.bin\n"
            "sources:\n"
            "  1.0:\n"
            "    <<: *base\n"
            "    size: 3\n"
        )
        recipe = load_recipe(tmp_path)
        assert recipe.resolve("1.0").location == "https://example.org/x.bin"
        assert recipe.resolve("1.0").size_hint == 3

    def test_yaml_preferred_over_json(self, tmp_path: Path):
        (tmp_path / "ingredients.yaml").write_text("name: from-yaml\n")
        (tmp_path / "ingredients.json").write_text('{"name": "from-json"}')
        assert find_recipe_file(tmp_path).name == "ingredients.yaml"

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(RecipeParseError):
            load_recipe(tmp_path / "nope")

    def test_directory_without_recipe(self, tmp_path: Path):
        with pytest.raises(RecipeParseError):
            load_recipe(tmp_path)

    def test_invalid_yaml(self, tmp_path: Path):
        (tmp_path / "ingredients.yaml").write_text("name: [unclosed\n")
        with pytest.raises(RecipeParseError):
            load_recipe(tmp_path)

    def test_unsupported_suffix(self, tmp_path: Path):
        path = tmp_path / "recipe.ini"
        path.write_text("[x]")
        with pytest.raises(RecipeParseError):
            load_recipe(path)
