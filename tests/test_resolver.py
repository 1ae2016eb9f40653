"""Tests for module specifier resolution and alias configuration."""

import json
import os
from pathlib import Path

import pytest

from filedeps.graph import AliasTable, ImportResolver, canonical_path, load_alias_table
from filedeps.graph.import_resolver import (
    RESOLUTION_SUFFIXES,
    build_alias_table,
    find_config_file,
    merge_configs,
    parse_config_text,
    resolution_suffixes,
    strip_json_comments,
)


def _p(root: Path, relative: str) -> str:
    return canonical_path(root / relative)


class TestRelativeResolution:
    """Tests for ./ and ../ specifiers."""

    def test_resolves_sibling_with_extension(self, write_files):
        """Test a sibling file is found by extension probing."""
        root = write_files({"src/a.ts": "", "src/b.ts": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./b", root / "src/a.ts") == _p(root, "src/b.ts")

    def test_resolves_parent_directory(self, write_files):
        """Test ../ walks up from the importing file's directory."""
        root = write_files({"src/deep/a.ts": "", "src/util.js": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("../util", root / "src/deep/a.ts") == _p(root, "src/util.js")

    def test_exact_filename_wins(self, write_files):
        """Test a specifier with an explicit extension resolves directly."""
        root = write_files({"src/a.ts": "", "src/data.js": "", "src/data.js.ts": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./data.js", root / "src/a.ts") == _p(root, "src/data.js")

    def test_bare_file_beats_index_file(self, write_files):
        """Test util.ts is preferred over util/index.ts."""
        root = write_files({
            "src/a.ts": "",
            "src/util.ts": "",
            "src/util/index.ts": "",
        })
        resolver = ImportResolver(root)

        assert resolver.resolve("./util", root / "src/a.ts") == _p(root, "src/util.ts")

    def test_extension_priority(self, write_files):
        """Test .ts is probed before .tsx, .js and .jsx."""
        root = write_files({"a.ts": "", "b.tsx": "", "b.js": "", "c.jsx": "", "c.js": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./b", root / "a.ts") == _p(root, "b.tsx")
        assert resolver.resolve("./c", root / "a.ts") == _p(root, "c.js")

    def test_configured_extensions_are_probed(self, write_files):
        """Test extra indexed extensions resolve after the default ones."""
        root = write_files({
            "a.ts": "",
            "esm.mts": "",
            "both.mts": "",
            "both.ts": "",
            "pkg/index.cjs": "",
        })
        resolver = ImportResolver(root, extensions=[".ts", ".tsx", ".js", ".jsx", ".mts", ".cjs"])

        assert resolver.resolve("./esm", root / "a.ts") == _p(root, "esm.mts")
        assert resolver.resolve("./both", root / "a.ts") == _p(root, "both.ts")
        assert resolver.resolve("./pkg", root / "a.ts") == _p(root, "pkg/index.cjs")

    def test_unconfigured_extensions_are_not_probed(self, write_files):
        """Test the default resolver ignores extensions it does not index."""
        root = write_files({"a.ts": "", "esm.mts": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./esm", root / "a.ts") is None
        assert resolver.resolve("./esm.mts", root / "a.ts") == _p(root, "esm.mts")

    def test_resolution_suffix_order(self):
        """Test extra extensions never reorder the default probes."""
        suffixes = resolution_suffixes([".mts", ".ts", ".mts"])

        assert suffixes == (
            "", ".ts", ".tsx", ".js", ".jsx", ".mts",
            "/index.ts", "/index.tsx", "/index.js", "/index.jsx", "/index.mts",
        )
        assert resolution_suffixes() == RESOLUTION_SUFFIXES

    def test_directory_index_fallback(self, write_files):
        """Test a directory import resolves to its index file."""
        root = write_files({"a.ts": "", "components/index.tsx": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./components", root / "a.ts") == _p(
            root, "components/index.tsx"
        )

    def test_directory_is_not_a_file(self, write_files):
        """Test a bare directory without an index does not resolve."""
        root = write_files({"a.ts": "", "empty/readme.md": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./empty", root / "a.ts") is None

    def test_missing_file(self, write_files):
        """Test an unresolvable relative import yields None."""
        root = write_files({"a.ts": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./missing", root / "a.ts") is None

    def test_resolution_follows_file_system(self, write_files):
        """Test a specifier resolves once the file is created."""
        root = write_files({"a.ts": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("./later", root / "a.ts") is None
        (root / "later.ts").write_text("")
        assert resolver.resolve("./later", root / "a.ts") == _p(root, "later.ts")

    def test_package_specifier_without_alias(self, write_files):
        """Test bare package names never resolve."""
        root = write_files({"a.ts": "", "lodash.ts": ""})
        resolver = ImportResolver(root)

        assert resolver.resolve("lodash", root / "a.ts") is None


class TestAliasResolution:
    """Tests for alias prefix substitution."""

    def test_longest_prefix_wins(self, write_files):
        """Test @/components beats @/ for @/components/Button."""
        root = write_files({
            "src/components/Button.ts": "",
            "src/ui/Button.ts": "",
            "src/main.ts": "",
        })
        table = AliasTable(base_dir=root)
        table.aliases["@/"] = str(root / "src") + "/"
        table.aliases["@/components"] = str(root / "src/ui") + "/"
        resolver = ImportResolver(root, table)

        assert resolver.resolve("@/components/Button", root / "src/main.ts") == _p(
            root, "src/ui/Button.ts"
        )
        assert resolver.resolve("@/main", root / "src/main.ts") == _p(root, "src/main.ts")

    def test_normalized_duplicate_keeps_first_registered(self, tmp_path):
        """Test aliases colliding after normalization keep the first entry."""
        config = {
            "compilerOptions": {
                "paths": {"@/*": ["first/*"], "@/": ["second/"]},
            }
        }
        table = build_alias_table(config, tmp_path)

        assert table.aliases == {"@/": os.path.join(str(tmp_path), "first/")}
        assert table.match("@/x") == ("@/", os.path.join(str(tmp_path), "first/"))

    def test_shorter_alias_still_matches(self, tmp_path):
        """Test a shorter alias applies when the longer one does not match."""
        table = AliasTable(base_dir=tmp_path)
        table.aliases["@"] = "/short/"
        table.aliases["@lib/"] = "/lib/"

        assert table.match("@lib/x") == ("@lib/", "/lib/")
        assert table.match("@other") == ("@", "/short/")

    def test_exact_alias_match(self, write_files):
        """Test a specifier equal to an alias resolves to its target."""
        root = write_files({"src/container.ts": "", "src/main.ts": ""})
        table = AliasTable(base_dir=root)
        table.aliases["@container"] = str(root / "src/container")
        resolver = ImportResolver(root, table)

        assert resolver.resolve("@container", root / "src/main.ts") == _p(
            root, "src/container.ts"
        )

    def test_no_alias_match(self, tmp_path):
        """Test specifiers matching no alias fail to resolve."""
        table = AliasTable(base_dir=tmp_path)
        table.aliases["@/"] = str(tmp_path) + "/"
        resolver = ImportResolver(tmp_path, table)

        assert table.match("~/x") is None
        assert resolver.resolve("~/x", tmp_path / "a.ts") is None

    def test_alias_patterns(self, tmp_path):
        """Test alias patterns include slash-stripped forms."""
        table = AliasTable(base_dir=tmp_path)
        table.aliases["@/"] = "/src/"
        table.aliases["@lib"] = "/lib"

        assert table.alias_patterns() == ["@/", "@", "@lib"]

    def test_reference_record(self, write_files):
        """Test Reference records carry the raw and resolved forms."""
        root = write_files({"a.ts": "", "b.ts": ""})
        resolver = ImportResolver(root)

        ref = resolver.reference("./b", root / "a.ts")
        assert ref.raw_specifier == "./b"
        assert ref.resolved_path == _p(root, "b.ts")
        assert ref.is_local

        external = resolver.reference("react", root / "a.ts", is_local=False)
        assert external.resolved_path is None
        assert not external.is_local


class TestConfigParsing:
    """Tests for tsconfig text handling."""

    def test_strip_comments_and_trailing_commas(self):
        """Test line/block comments and trailing commas are removed."""
        text = """{
  // compiler settings
  "compilerOptions": {
    /* paths block */
    "baseUrl": ".",
    "paths": { "@/*": ["./src/*"], },
  },
}"""
        data = parse_config_text(text)

        assert data == {"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["./src/*"]}}}

    def test_comment_markers_inside_strings_survive(self):
        """Test // and /* inside string values are kept."""
        text = '{"url": "http://example.com/a", "glob": "src/*", "x": 1, // tail\n}'

        assert json.loads(strip_json_comments(text)) == {
            "url": "http://example.com/a",
            "glob": "src/*",
            "x": 1,
        }

    def test_non_object_root_rejected(self):
        """Test a non-object configuration is an error."""
        with pytest.raises(ValueError):
            parse_config_text("[1, 2]")

    def test_wildcard_and_base_url_normalization(self, tmp_path):
        """Test wildcard aliases and ./ base URLs are normalized."""
        config = {
            "compilerOptions": {
                "baseUrl": "./src",
                "paths": {
                    "@/*": ["./*"],
                    "@components/*": ["components/*"],
                    "@lib": ["lib/index"],
                    "~*": ["vendor/*"],
                    "bad": [],
                },
            }
        }
        table = build_alias_table(config, tmp_path)

        src = os.path.join(str(tmp_path), "src")
        assert table.aliases == {
            "@/": os.path.join(src, ""),
            "@components/": os.path.join(src, "components/"),
            "@lib": os.path.join(src, "lib/index"),
            "~": os.path.join(src, "vendor/"),
        }
        assert table.base_url == "./src"

    def test_dot_base_url(self, tmp_path):
        """Test a "." base URL resolves against the config directory."""
        config = {"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}}
        table = build_alias_table(config, tmp_path)

        assert table.aliases == {"@/": os.path.join(str(tmp_path), "src/")}

    def test_merge_configs_derived_wins(self):
        """Test derived paths override base paths on collision."""
        base = {
            "compilerOptions": {"baseUrl": ".", "strict": True, "paths": {"@/*": ["base/*"], "#b": ["b"]}},
            "include": ["base"],
        }
        derived = {
            "extends": "./base.json",
            "compilerOptions": {"paths": {"@/*": ["derived/*"]}},
        }
        merged = merge_configs(base, derived)

        assert merged["include"] == ["base"]
        assert merged["compilerOptions"]["strict"] is True
        assert merged["compilerOptions"]["baseUrl"] == "."
        assert merged["compilerOptions"]["paths"] == {"@/*": ["derived/*"], "#b": ["b"]}


class TestLoadAliasTable:
    """Tests for configuration discovery and loading."""

    def test_missing_config_yields_empty_table(self, tmp_path):
        """Test a project without tsconfig has no aliases."""
        table = load_alias_table(tmp_path)

        assert len(table) == 0
        assert table.base_dir == tmp_path

    def test_malformed_config_yields_empty_table(self, write_files):
        """Test an unparsable tsconfig falls back to an empty table."""
        root = write_files({"tsconfig.json": "{ not json"})

        assert len(load_alias_table(root)) == 0

    def test_root_config(self, write_files):
        """Test aliases from a root tsconfig.json."""
        root = write_files({
            "tsconfig.json": """{
  "compilerOptions": {
    "baseUrl": ".",
    // aliases
    "paths": {"@/*": ["./src/*"], "@components": ["src/components/index"],},
  },
}""",
        })
        table = load_alias_table(root)

        assert table.match("@/x") == ("@/", os.path.join(str(root), "src/"))
        assert table.match("@components") == (
            "@components",
            os.path.join(str(root), "src/components/index"),
        )

    def test_extends_merges_base(self, write_files):
        """Test a single level of extends is merged with derived precedence."""
        root = write_files({
            "tsconfig.base.json": json.dumps({
                "compilerOptions": {
                    "baseUrl": ".",
                    "paths": {"@/*": ["base/*"], "@shared/*": ["shared/*"]},
                }
            }),
            "tsconfig.json": json.dumps({
                "extends": "./tsconfig.base",
                "compilerOptions": {"paths": {"@/*": ["src/*"]}},
            }),
        })
        table = load_alias_table(root)

        assert table.aliases == {
            "@/": os.path.join(str(root), "src/"),
            "@shared/": os.path.join(str(root), "shared/"),
        }

    def test_missing_extends_target_is_ignored(self, write_files):
        """Test an extends reference to a package is ignored."""
        root = write_files({
            "tsconfig.json": json.dumps({
                "extends": "@tsconfig/node18/tsconfig.json",
                "compilerOptions": {"paths": {"@/*": ["src/*"]}},
            }),
        })

        assert list(load_alias_table(root).aliases) == ["@/"]

    def test_common_subdirectory_config(self, write_files):
        """Test a tsconfig in a common sub-directory is used as the base."""
        root = write_files({
            "frontend/tsconfig.json": json.dumps({
                "compilerOptions": {"paths": {"@/*": ["src/*"]}}
            }),
        })
        table = load_alias_table(root)

        assert table.base_dir == root / "frontend"
        assert table.aliases == {"@/": os.path.join(str(root / "frontend"), "src/")}

    def test_subfolder_scan_skips_excluded(self, write_files):
        """Test the one-level scan ignores dependency and hidden folders."""
        root = write_files({
            "node_modules/tsconfig.json": json.dumps({"compilerOptions": {"paths": {"@x": ["x"]}}}),
            ".hidden/tsconfig.json": json.dumps({"compilerOptions": {"paths": {"@h": ["h"]}}}),
            "web/tsconfig.json": json.dumps({"compilerOptions": {"paths": {"@w": ["w"]}}}),
        })

        assert find_config_file(root) == root / "web" / "tsconfig.json"
        assert list(load_alias_table(root).aliases) == ["@w"]

    def test_tsconfig_preferred_over_jsconfig(self, write_files):
        """Test tsconfig.json is found before jsconfig.json."""
        root = write_files({
            "tsconfig.json": json.dumps({"compilerOptions": {"paths": {"@t": ["t"]}}}),
            "jsconfig.json": json.dumps({"compilerOptions": {"paths": {"@j": ["j"]}}}),
        })

        assert find_config_file(root) == root / "tsconfig.json"

    def test_resolver_load_aliases(self, write_files):
        """Test ImportResolver picks up aliases from disk."""
        root = write_files({
            "tsconfig.json": json.dumps({"compilerOptions": {"paths": {"@/*": ["src/*"]}}}),
            "src/lib/util.ts": "",
        })
        resolver = ImportResolver(root)
        resolver.load_aliases()

        assert resolver.resolve("@/lib/util", root / "src/main.ts") == _p(root, "src/lib/util.ts")
