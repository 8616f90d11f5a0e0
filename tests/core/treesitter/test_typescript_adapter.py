"""
Unit tests for the TypeScript/JavaScript skeleton adapter.
"""

from code_skeleton.core.models import SkeletonOptions
from code_skeleton.core.skeletonizer import skeletonize

NO_SUMMARY = SkeletonOptions(import_summary_only=False)


def _lines(code: str, extension: str = "ts", path: str = None, options: SkeletonOptions = NO_SUMMARY):
    return skeletonize(code, extension, path=path, options=options).skeleton.splitlines()


APP_COMPONENT = """\
import { Button } from '@ui/kit';
import { invoke } from '@tauri-apps/api/core';
import { useState, useEffect } from 'react';
import Sidebar from './Sidebar';

export default function App() {
  const [count, setCount] = useState(0);
  const [items, setItems] = useState([]);
  useEffect(() => {
    invoke('load_items');
  }, []);
  const handleSave = async () => {
    await invoke('save_items', { items });
  };
  return (
    <div className="app">
      <Sidebar open={true} />
      {items.map(item => <Row key={item.id} item={item} />)}
      {count > 0 && <Modal onClose={handleSave} />}
      <Button onClick={handleSave} />
    </div>
  );
}
"""


class TestExports:
    """Test export gating of top-level declarations."""

    def test_non_exported_declarations_are_omitted(self):
        code = (
            "import { api } from './api';\n"
            "import axios from 'axios';\n"
            "\n"
            "interface Internal { a: number }\n"
            "export interface User { id: string; name: string }\n"
            "function helper(x: number): number { return x * 2; }\n"
            "export function getUser(id: string): Promise<User> {\n"
            "  return api.fetch(id);\n"
            "}\n"
            'export const VERSION = "1.0";\n'
        )
        lines = _lines(code, path="src/users.ts")

        assert lines == [
            "// External: axios",
            "import { api } from './api';",
            "import axios from 'axios';",
            "export interface User { id: string; name: string }",
            "export function getUser(id: string): Promise<User>",
            "// Calls: api.fetch",
            'export const VERSION = "1.0"',
        ]

    def test_entrypoint_keeps_everything(self):
        code = "function helper() {}\nexport const answer = 42;\n"
        lines = _lines(code, extension="tsx", path="src/App.tsx")

        assert "function helper()" in lines
        assert "export const answer = 42" in lines

    def test_template_render_call_is_not_an_entrypoint(self):
        code = (
            "export function shown() {}\n"
            "function hidden() {}\n"
            "const html = tpl.render({ a: 1 });\n"
        )
        lines = _lines(code, path="src/view.ts")

        assert "export function shown()" in lines
        assert "function hidden()" not in lines

    def test_mount_calls_mark_entrypoint(self):
        for mount in ("createRoot(el).render(view);", "ReactDOM.render(view, el);"):
            code = f"export function shown() {{}}\nfunction hidden() {{}}\n{mount}\n"
            lines = _lines(code, path="src/boot.ts")

            assert "function hidden()" in lines

    def test_module_without_exports_keeps_everything(self):
        code = "function helper() {}\nconst limit = 10;\n"
        assert _lines(code, extension="js") == ["function helper()", "const limit = 10"]

    def test_type_alias(self):
        lines = _lines("export type Id = string;\n")
        assert lines[0].startswith("export type Id = string")

    def test_commonjs_exports(self):
        lines = _lines("function a() {}\nmodule.exports = { a };\n", extension="js")
        assert "module.exports = { a };" in lines


class TestClasses:
    """Test class member signatures."""

    def test_private_members_are_skipped(self):
        code = (
            "export class Store {\n"
            "  private cache: Map<string, string> = new Map();\n"
            "  #secret = 1;\n"
            "  public name: string;\n"
            "  constructor(private readonly api: Api) {}\n"
            "  private reset(): void {}\n"
            "  async load(id: string): Promise<void> {}\n"
            "  static Item = class {\n"
            "    render() {}\n"
            "  };\n"
            "}\n"
        )
        lines = _lines(code, path="src/store.ts")

        assert lines[0] == "export class Store"
        assert any(line.startswith("  public name: string") for line in lines)
        assert "  constructor(private readonly api: Api)" in lines
        assert "  async load(id: string): Promise<void>" in lines
        assert "  static Item = class" in lines
        assert "    render()" in lines
        assert not any("cache" in line or "secret" in line or "reset" in line for line in lines)


class TestComponents:
    """Test JSX component summaries."""

    def test_entrypoint_component(self):
        lines = _lines(APP_COMPONENT, extension="tsx", path="src/App.tsx")

        assert lines[:3] == [
            "// External: @tauri-apps/api/core",
            "// External: @ui/kit",
            "// External: react",
        ]
        assert "export default function App()" in lines
        assert "// useState: count=0, items=[]" in lines
        assert "// Effect: useEffect([]) -> invoke(load_items)" in lines
        assert "// Handler: async handleSave() -> invoke(save_items)" in lines
        assert lines[-1] == "// Render: Layout -> Sidebar[open], Row*[item], Modal?[onClose]"

    def test_non_entrypoint_component_only_renders(self):
        code = (
            "import { useState } from 'react';\n"
            "export function Panel({ title }: Props) {\n"
            "  const [open, setOpen] = useState(false);\n"
            "  return <section><Header title={title} />{open ? <Body /> : null}</section>;\n"
            "}\n"
        )
        lines = _lines(code, extension="tsx", path="src/components/Panel.tsx")

        assert "export function Panel({ title }: Props)" in lines
        assert "// Render: Layout -> Header[title], Body?" in lines
        assert not any(line.startswith("// useState") for line in lines)


class TestBodyInsights:
    """Test annotations for non-component functions."""

    def test_flow_strings_and_calls(self):
        code = (
            "export function process(items: string[]) {\n"
            "  for (const item of items) {\n"
            '    if (item === "STOP_SIGNAL") {\n'
            "      break;\n"
            "    }\n"
            "  }\n"
            "  try { send(items); } catch (e) { log(e); }\n"
            "}\n"
        )
        lines = _lines(code, path="src/process.ts")

        assert lines[0] == "export function process(items: string[])"
        assert "// Calls: send, log" in lines
        assert any(line.startswith("// Flow: for (") for line in lines)
        assert "// Flow: try/catch" in lines
        assert "// Strings: STOP_SIGNAL" in lines

    def test_boundary_insights(self):
        code = (
            "import { invoke } from '@tauri-apps/api/core';\n"
            "import { listen } from '@tauri-apps/api/event';\n"
            "export async function refresh() {\n"
            "  await invoke('refresh_index');\n"
            "  await listen('index-updated', () => {});\n"
            "  await navigator.clipboard.writeText('x');\n"
            "}\n"
        )
        lines = _lines(code, path="src/refresh.ts")

        assert "export async function refresh()" in lines
        assert "// Invokes: refresh_index" in lines
        assert "// Listens: index-updated" in lines
        assert "// Clipboard: clipboard.writeText" in lines


class TestImportsAndTopLevel:
    """Test the import summary and file-scope statements."""

    def test_import_summary(self):
        code = (
            "import React, { useState } from 'react';\n"
            "import type { User } from './types';\n"
            "import './styles.css';\n"
            "import { useEffect } from 'react';\n"
            "export const a = 1;\n"
        )
        lines = _lines(code, options=SkeletonOptions(import_summary_only=True))

        assert lines == [
            "// Imports (summary)",
            "// Import: react -> React, useState, useEffect",
            "// Import (type): ./types -> User",
            "// Import: ./styles.css (side-effect)",
            "export const a = 1",
        ]

    def test_top_level_calls(self):
        code = "main();\nawait boot();\n(function () { run(); })();\n"
        assert _lines(code, extension="js") == ["main(...)", "await boot(...)", "IIFE(...)"]

    def test_long_iife_is_unwrapped(self):
        body = "".join(f"  const value{i} = {i};\n" for i in range(30))
        code = "(function () {\n  function init() {\n    setup();\n  }\n" + body + "})();\n"
        lines = _lines(code, extension="js")

        assert lines[0] == "IIFE {"
        assert "  function init()" in lines
        assert "  // Calls: setup" in lines
        assert "  const value0 = 0" in lines
        assert lines[-1] == "}"
