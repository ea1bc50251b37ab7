#!/usr/bin/env python3
"""
Demo: Compile a generated slide layout.

This walks a layout source through the pipeline:
- Declaration table and entry point
- Compiled schema (references inlined, defaults removed)
- Response schema for a structured-output call
- Validation of two pieces of generated content
"""

import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from layout_schema import compile_layout, extract_layout_schema
from layout_schema.schema import build_response_schema
from layout_schema.validation import format_validation_errors, validate


LAYOUT_SOURCE = '''
import { z } from "zod";

const layoutId = "team-intro";
const layoutName = "Team Introduction";
const layoutDescription = "Slide title plus up to three team members with photos.";

const PhotoSchema = z.object({
  __image_url__: z.string(),
  __image_prompt__: z.string().min(10).max(80),
});

const MemberSchema = z.object({
  name: z.string().min(2).max(40),
  role: z.string().max(40),
  photo: PhotoSchema.optional(),
});

const Schema = z.object({
  title: z.string().min(3).max(60).default("Meet the team"),
  members: z.array(MemberSchema).min(1).max(3),
});

export default function TeamIntro({ data }) {
  return <h1>{data.title}</h1>;
}
'''


def main():
    print("=" * 60)
    print("layout-schema Demo: Team Introduction Layout")
    print("=" * 60)

    result = compile_layout(LAYOUT_SOURCE)

    print(f"\nDeclarations: {', '.join(result.declarations)}")
    print(f"Entry point: {result.main_name}")
    print(f"Fallback used: {result.used_fallback}")

    print("\nSchema:")
    print(json.dumps(result.schema, indent=2))

    print("\n" + "=" * 60)
    print("Response Schema")
    print("=" * 60)
    print(json.dumps(build_response_schema(result.schema), indent=2))

    layout = extract_layout_schema(LAYOUT_SOURCE)
    print(f"\nLayout record: {layout.id} ({layout.name})")

    outputs = [
        '{"title": "Meet the team", "members": [{"name": "Ada", "role": "CTO"}]}',
        '{"title": "Hi", "members": [], "subtitle": "extra"}',
    ]

    for i, output in enumerate(outputs, 1):
        print("\n" + "=" * 60)
        print(f"Content {i}/{len(outputs)}")
        print("=" * 60)
        print(f"Output: {output}")

        validation = validate(output, result.schema)
        print(f"Valid: {'✓' if validation.is_valid else '✗'} {validation.is_valid}")
        if not validation.is_valid:
            print(format_validation_errors(validation.errors))


if __name__ == "__main__":
    main()
