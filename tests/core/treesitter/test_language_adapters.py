"""
Unit tests for the Rust, Go, C, JSON, CSS and HTML skeleton adapters.
"""

from code_skeleton.core import skeletonizer
from code_skeleton.core.models import Language
from code_skeleton.core.skeletonizer import skeletonize
from code_skeleton.core.treesitter.c_adapter import should_keep_c_comment
from code_skeleton.core.treesitter.json_adapter import summarize_large_json


class TestRustAdapter:
    """Test Rust item summaries."""

    def test_items(self):
        code = """\
use std::collections::HashMap;

/// A user record.
#[derive(Debug, Clone)]
pub struct User {
    pub id: u64,
    pub name: String,
}

pub enum Role { Admin, Member, Guest }

pub trait Greeter {
    fn greet(&self) -> String;
}

impl Greeter for User {
    fn greet(&self) -> String {
        format_name(&self.name)
    }
}

pub fn make_user(id: u64) -> User {
    let name = load_name(id);
    User { id, name }
}
"""
        result = skeletonize(code, "rs")

        assert result.language == Language.RUST
        assert result.skeleton.splitlines() == [
            "use std::collections::HashMap;",
            "/// A user record.",
            "#[derive(Debug, Clone)]",
            "pub struct User { id, name }",
            "pub enum Role { Admin, Member, Guest }",
            "pub trait Greeter",
            "    fn greet(&self) -> String;",
            "impl Greeter for User",
            "    fn greet(&self) -> String",
            "    // Calls: format_name",
            "pub fn make_user(id: u64) -> User",
            "// Calls: load_name",
        ]

    def test_many_struct_fields(self):
        fields = "".join(f"    f{i}: u8,\n" for i in range(10))
        skeleton = skeletonize(f"struct Wide {{\n{fields}}}\n", "rs").skeleton

        assert skeleton == "struct Wide { f0, f1, f2, f3, f4, f5, f6, f7, ..., +2 more }"


class TestGoAdapter:
    """Test Go declarations and method families."""

    CODE = """\
package config

import "fmt"

type Config struct {
	values map[string]interface{}
}

func (c *Config) Get(key string) interface{} {
	return c.values[key]
}

func (c *Config) GetString(key string) string {
	return fmt.Sprint(c.Get(key))
}

func (c *Config) GetInt(key string) int { return 0 }
func (c *Config) GetBool(key string) bool { return false }
func (c *Config) GetFloat(key string) float64 { return 0 }

func New() *Config {
	return &Config{values: map[string]interface{}{}}
}
"""

    def test_method_family_collapses(self):
        lines = skeletonize(self.CODE, "go").skeleton.splitlines()

        assert lines[0] == "package config"
        assert 'import "fmt"' in lines
        base = lines.index("func (c *Config) Get(key string) interface{}")
        assert lines[base + 1] == "// Get variants: GetString, GetInt, GetBool, GetFloat (4 methods)"
        assert not any(line.startswith("func (c *Config) GetString") for line in lines)
        assert "func New() *Config" in lines

    def test_small_groups_are_not_collapsed(self):
        code = (
            "package p\n\n"
            "func (s *S) GetA() int { return 1 }\n"
            "func (s *S) GetB() int { return 2 }\n"
        )
        lines = skeletonize(code, "go").skeleton.splitlines()

        assert "func (s *S) GetA() int" in lines
        assert "func (s *S) GetB() int" in lines
        assert not any("variants" in line for line in lines)

    def test_large_family_counts_hidden_variants(self):
        names = [f"Get{suffix}" for suffix in "ABCDEFGHIJ"]
        code = "package p\n\nfunc (s *S) Get() int { return 0 }\n" + "".join(
            f"func (s *S) {name}() int {{ return 0 }}\n" for name in names
        )
        lines = skeletonize(code, "go").skeleton.splitlines()

        base = lines.index("func (s *S) Get() int")
        assert lines[base + 1] == f"// Get variants: {', '.join(names[:8])}, ... (+2 methods)"


class TestCAdapter:
    """Test C include summaries and function annotations."""

    def test_translation_unit(self):
        code = """\
#include <stdio.h>
#include "util.h"

#define MAX_LEN 64

typedef struct { int x; int y; } Point;

struct Node { int value; struct Node *next; };

static int add(int a, int b) {
    return helper(a) + b;
}

int main(void) {
    printf("%d\\n", add(1, 2));
    return 0;
}
"""
        skeleton = skeletonize(code, "c").skeleton
        lines = skeleton.splitlines()

        assert lines[:3] == ["// Includes: total=2 system=1 local=1", "#include <stdio.h>", '#include "util.h"']
        assert "#define MAX_LEN 64" in lines
        assert "typedef struct { int x; int y; } Point;" in lines
        assert "struct Node { /* 2 fields */ };" in lines
        assert "static int add(int a, int b)\n{\n    // Calls: helper\n}" in skeleton
        assert skeleton.endswith("int main(void)\n{\n    // Calls: printf, add\n}")

    def test_comment_retention(self):
        assert should_keep_c_comment("// TODO: free the buffer")
        assert should_keep_c_comment("/* BUG: off by one */")
        assert not should_keep_c_comment("// debug print")
        assert not should_keep_c_comment("// denote short")
        assert not should_keep_c_comment("// result = compute_checksum(buffer);")
        assert should_keep_c_comment("// the parser keeps a single lookahead token")

    def test_long_callee_is_truncated(self):
        name = "initialize_the_subsystem_with_every_default_option_enabled"
        code = f"void boot(void) {{\n    {name}();\n}}\n"
        skeleton = skeletonize(code, "c").skeleton

        assert f"// Calls: {name[:40]}..." in skeleton

    def test_header_prototypes_and_guards(self):
        code = """\
#ifndef UTIL_H
#define UTIL_H

int parse(const char *text);

#endif
"""
        lines = skeletonize(code, "h").skeleton.splitlines()

        assert lines == ["#ifndef UTIL_H", "#define UTIL_H", "int parse(const char *text);", "#endif"]


class TestJsonAdapter:
    """Test JSON config summaries."""

    def test_package_manifest(self):
        code = (
            '{"name": "app", "version": "1.0.0", "private": true,'
            ' "scripts": {"build": "vite build", "test": "vitest"},'
            ' "dependencies": {"react": "^18.2.0"},'
            ' "files": ["dist", "src"], "config": {"a": 1}}'
        )
        assert skeletonize(code, "json").skeleton.splitlines() == [
            "name: app",
            "version: 1.0.0",
            "private: true",
            "scripts: build, test",
            "dependencies: react@^18.2.0",
            'files: ["dist", "src"]',
            "config: object",
        ]

    def test_long_and_mixed_arrays(self):
        code = '{"list": [1, 2, 3, 4, 5], "mixed": [1, {"a": 1}]}'
        assert skeletonize(code, "json").skeleton.splitlines() == ["list: array[5]", "mixed: array[2]"]

    def test_references(self):
        code = '{"references": [{"path": "./packages/core"}, {"path": "./packages/ui"}]}'
        assert skeletonize(code, "json").skeleton == 'references: ["./packages/core", "./packages/ui"]'

    def test_large_document_scan(self):
        content = '{"a": 1, "b": {"c": "x"}, "d": [1, 2], "e": "s", "f": null, "g": true}'
        assert summarize_large_json(content).splitlines() == [
            "a: number",
            "b: object",
            "d: array",
            "e: string",
            "f: null",
            "g: boolean",
        ]

    def test_large_array_document(self):
        assert summarize_large_json("  [1, 2, 3]") == "array[...]"

    def test_large_document_skips_parser(self, monkeypatch):
        parsed = []

        def spy(source, language_id):
            parsed.append(len(source))
            raise AssertionError("large documents must not be parsed")

        monkeypatch.setattr(skeletonizer, "parse_bytes", spy)
        entries = ",".join(f'"key_{i}": {{"blob": "{"x" * 200_000}"}}' for i in range(13))
        result = skeletonize("{" + entries + "}", "json")

        assert parsed == []
        assert result.language == Language.JSON
        assert result.skeleton.splitlines()[0] == "key_0: object"
        assert result.skeleton.endswith("...")


class TestCssAdapter:
    """Test stylesheet rule summaries."""

    def test_rules(self):
        code = (
            "@import url('base.css');\n"
            ".btn, .link { color: red; padding: 0; }\n"
            "@media (max-width: 600px) { .btn { color: blue; } }\n"
        )
        lines = skeletonize(code, "css").skeleton.splitlines()

        assert lines[0] == "@import url('base.css');"
        assert lines[1] == ".btn, .link props=2"
        assert lines[2].startswith("@media (max-width: 600px)")

    def test_other_at_rules_keep_header(self):
        code = (
            "@supports (display: grid) { .grid { display: grid; } }\n"
            "@font-face { font-family: Inter; src: url(inter.woff2); }\n"
            ".grid { gap: 4px; }\n"
        )
        lines = skeletonize(code, "css").skeleton.splitlines()

        assert lines == ["@supports (display: grid) {...}", "@font-face {...}", ".grid props=1"]


class TestHtmlAdapter:
    """Test HTML document outlines."""

    def test_document_frame(self):
        code = (
            "<!DOCTYPE html>\n<html>\n<head><title>Hi</title></head>\n<body>\n"
            '<div id="root"><p>a</p><p>b</p></div>\n<span></span>\n</body>\n</html>\n'
        )
        assert skeletonize(code, "html").skeleton.splitlines() == [
            "<!DOCTYPE html>",
            "<html>",
            "  <head>",
            "    <title>...</title>",
            "  </head>",
            "  <body>",
            "    <div> <!-- 2 children --></div>",
            "    <span></span>",
            "  </body>",
            "</html>",
        ]
