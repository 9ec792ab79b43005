"""Tests for the slash-delimited path helpers."""

from gitgud.path_utils import (
    ancestor_dirs,
    get_base_name,
    get_parent_path,
    is_within,
    normalize_path,
    rebase_path,
)


class TestParentAndBase:
    def test_top_level_path_has_empty_parent(self) -> None:
        assert get_parent_path("README.md") == ""
        assert get_base_name("README.md") == "README.md"

    def test_nested_path(self) -> None:
        assert get_parent_path("src/lib/app.js") == "src/lib"
        assert get_base_name("src/lib/app.js") == "app.js"

    def test_ancestors_nearest_first(self) -> None:
        assert ancestor_dirs("a/b/c.txt") == ["a/b", "a"]
        assert ancestor_dirs("c.txt") == []


class TestNormalizePath:
    def test_strips_leading_dot_slash_and_trailing_slash(self) -> None:
        assert normalize_path("./src/") == "src"
        assert normalize_path("././a.txt") == "a.txt"

    def test_dos_backslashes_become_slashes(self) -> None:
        assert normalize_path("src\\app.js", dos=True) == "src/app.js"

    def test_backslashes_kept_outside_dos(self) -> None:
        assert normalize_path("src\\app.js") == "src\\app.js"

    def test_single_character_paths_untouched(self) -> None:
        assert normalize_path(".") == "."
        assert normalize_path("/") == "/"


class TestContainment:
    def test_is_within_matches_root_and_children_only(self) -> None:
        assert is_within("src", "src")
        assert is_within("src/a.js", "src")
        assert not is_within("srcx/a.js", "src")

    def test_rebase_path(self) -> None:
        assert rebase_path("src/lib/a.js", "src", "dist") == "dist/lib/a.js"
