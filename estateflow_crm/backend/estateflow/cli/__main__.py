# backend/estateflow/cli/__main__.py
from __future__ import annotations

import argparse

from estateflow.cli.seed_demo import seed_demo


def main() -> None:
    p = argparse.ArgumentParser(prog="estateflow.cli", description="Seed demo agents and listings.")
    p.add_argument("--no-properties", action="store_true", help="seed agents only")
    p.add_argument("--no-create-schema", action="store_true", help="assume migrations already ran")
    args = p.parse_args()

    out = seed_demo(create_schema=(not args.no_create_schema), with_properties=(not args.no_properties))
    print(
        {
            "ok": True,
            "agents_created": out.agents_created,
            "properties_created": out.properties_created,
            "property_ids": out.property_ids,
        }
    )


if __name__ == "__main__":
    main()
