"""CLI wrapper: Write the OpenAPI document of the HTTP API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Export the Condition Studio OpenAPI document")
    parser.add_argument(
        "-o", "--output", type=Path, default=Path("openapi.json"), help="Output file"
    )
    args = parser.parse_args(argv)

    from condition_studio.main import create_app

    openapi_schema = create_app().openapi()
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(openapi_schema, f, indent=2)
        f.write("\n")

    print(f"[OK] OpenAPI schema generated: {args.output}")
    print(f"   Endpoints: {len(openapi_schema['paths'])} paths")
