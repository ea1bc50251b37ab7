"""
Unit tests for the layout extraction pipeline.
"""

from layout_schema import (
    CompilerConfig,
    LayoutSchema,
    compile_layout,
    compile_layout_schema,
    extract_layout_schema,
    extract_layout_schemas,
)
from layout_schema.extractor import extract_layout_metadata
from layout_schema.schema.diagnostics import DiagnosticKind
from layout_schema.schema.normalizer import FALLBACK_DOCUMENT


LAYOUT_SOURCE = '''
import { z } from "zod";

const layoutId = "headline-with-points";
const layoutName = "Headline With Points";
const layoutDescription = "A headline and up to five short points.";

const PointSchema = z.object({
  text: z.string().min(5).max(120),
  emphasis: z.boolean().optional(),
});

const Schema = z.object({
  headline: z.string().min(3).max(60).default("Key takeaways"),
  points: z.array(PointSchema).min(1).max(5),
  layout: z.enum(["list", "grid"]).default("list"),
});

export default function HeadlineWithPoints({ data }) {
  return <h1>{data.headline}</h1>;
}
'''


def _walk(node, visit):
    if not isinstance(node, dict):
        return
    visit(node)
    for prop in (node.get("properties") or {}).values():
        _walk(prop, visit)
    _walk(node.get("items"), visit)


class TestCompileLayout:
    """Test compile_layout end to end."""

    def test_layout_source(self):
        """Test compiling a complete layout source."""
        result = compile_layout(LAYOUT_SOURCE)

        assert result.used_fallback is False
        assert result.main_name == "Schema"
        assert result.declarations == ["PointSchema", "Schema"]
        assert result.diagnostics == []
        assert result.schema == {
            "type": "object",
            "properties": {
                "headline": {"type": "string", "minLength": 3, "maxLength": 60},
                "points": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "text": {"type": "string", "minLength": 5, "maxLength": 120},
                            "emphasis": {"type": "boolean"},
                        },
                        "required": ["text"],
                        "additionalProperties": False,
                    },
                    "minItems": 1,
                    "maxItems": 5,
                },
                "layout": {"type": "string", "enum": ["list", "grid"]},
            },
            "required": ["headline", "points", "layout"],
            "additionalProperties": False,
        }

    def test_every_object_closed_and_every_array_has_items(self):
        """Test the strict-mode shape of a compiled document."""
        problems = []

        def visit(node):
            if node.get("type") == "object" and node.get("additionalProperties") is not False:
                problems.append(node)
            if node.get("type") == "array" and "items" not in node:
                problems.append(node)

        _walk(compile_layout_schema(LAYOUT_SOURCE), visit)
        assert problems == []

    def test_no_defaults_in_output(self):
        """Test that default values never reach the document."""
        assert "default" not in repr(compile_layout_schema(LAYOUT_SOURCE))

    def test_deterministic(self):
        """Test that compiling twice gives equal documents."""
        assert compile_layout_schema(LAYOUT_SOURCE) == compile_layout_schema(LAYOUT_SOURCE)

    def test_prose_uses_fallback(self):
        """Test a source without any schema declaration."""
        result = compile_layout("This slide shows a chart. No code here.")

        assert result.used_fallback is True
        assert result.main_name is None
        assert result.schema == FALLBACK_DOCUMENT
        assert result.diagnostics[0].kind == DiagnosticKind.NO_MAIN_DECLARATION

    def test_malformed_declaration_does_not_stop_compilation(self):
        """Test that a broken declaration is skipped."""
        source = (
            "const BrokenSchema = z.object({\n"
            "  title: z.string()\n"
            "const Schema = z.object({ heading: z.string().max(60) });\n"
        )
        result = compile_layout(source)

        assert result.used_fallback is False
        assert result.schema["properties"] == {"heading": {"type": "string", "maxLength": 60}}
        assert DiagnosticKind.EXTRACTION_FAILURE in [d.kind for d in result.diagnostics]

    def test_empty_object_uses_fallback(self):
        """Test an entry point without properties."""
        result = compile_layout("const Schema = z.object({});")

        assert result.used_fallback is True
        assert result.schema == FALLBACK_DOCUMENT
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.EMPTY_SCHEMA]

    def test_unknown_entry_uses_fallback(self):
        """Test an entry point with an unsupported constructor."""
        result = compile_layout("const Schema = z.union([z.string(), z.number()]);")

        assert result.used_fallback is True
        assert result.schema == FALLBACK_DOCUMENT

    def test_array_entry_point(self):
        """Test an entry point that is not an object."""
        result = compile_layout("const Schema = z.array(z.string().max(30)).max(6);")

        assert result.used_fallback is False
        assert result.schema == {
            "type": "array",
            "items": {"type": "string", "maxLength": 30},
            "maxItems": 6,
        }

    def test_self_referencing_entry(self):
        """Test that an entry point referring to itself terminates."""
        source = "const Schema = z.object({ title: z.string(), next: Schema.optional() });"
        result = compile_layout(source)

        assert result.used_fallback is False
        assert result.schema["required"] == ["title"]
        assert result.schema["properties"]["next"] == {
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        }
        assert DiagnosticKind.REFERENCE_CYCLE in [d.kind for d in result.diagnostics]

    def test_internal_error_uses_fallback(self, monkeypatch):
        """Test that unexpected errors are answered with the fallback document."""
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("layout_schema.extractor.compile_expression", boom)
        result = compile_layout(LAYOUT_SOURCE)

        assert result.used_fallback is True
        assert result.schema == FALLBACK_DOCUMENT
        assert result.diagnostics[-1].kind == DiagnosticKind.INTERNAL_ERROR

    def test_custom_config(self):
        """Test compiling with configured entry names."""
        source = (
            "const CardSchema = z.object({ a: z.string() });\n"
            "const OtherSchema = z.object({ b: z.string() });\n"
        )
        config = CompilerConfig(entry_names=["CardSchema"])
        assert list(compile_layout_schema(source, config)["properties"]) == ["a"]


class TestLayoutRecord:
    """Test layout metadata and records."""

    def test_metadata(self):
        """Test reading the layout id, name and description."""
        assert extract_layout_metadata(LAYOUT_SOURCE) == {
            "id": "headline-with-points",
            "name": "Headline With Points",
            "description": "A headline and up to five short points.",
        }

    def test_metadata_keeps_other_quotes(self):
        """Test that quotes of another kind stay inside the value."""
        source = (
            "const layoutName = 'The \"Big\" Number';\n"
            "const layoutDescription = \"Shows a team's key metrics\";\n"
            "const layoutId = `quote-\\`mark`;\n"
        )
        assert extract_layout_metadata(source) == {
            "id": "quote-`mark",
            "name": 'The "Big" Number',
            "description": "Shows a team's key metrics",
        }

    def test_metadata_defaults(self):
        """Test defaults for a source without metadata."""
        assert extract_layout_metadata("const Schema = z.object({a: z.string()})") == {
            "id": "unknown",
            "name": "Unknown Layout",
            "description": "",
        }

    def test_layout_schema(self):
        """Test the layout record."""
        layout = extract_layout_schema(LAYOUT_SOURCE)

        assert isinstance(layout, LayoutSchema)
        assert layout.id == "headline-with-points"
        assert layout.json_schema == compile_layout_schema(LAYOUT_SOURCE)
        assert layout.model_dump()["json_schema"]["type"] == "object"

    def test_many_layouts_keep_order(self):
        """Test concurrent extraction of several sources."""
        sources = [
            LAYOUT_SOURCE,
            "plain text",
            'const layoutId = "third";\nconst Schema = z.object({ c: z.number() });',
        ]

        layouts = extract_layout_schemas(sources, max_workers=3)

        assert [layout.id for layout in layouts] == ["headline-with-points", "unknown", "third"]
        assert layouts[1].json_schema == FALLBACK_DOCUMENT
        assert layouts[2].json_schema["properties"] == {"c": {"type": "number"}}
