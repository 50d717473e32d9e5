# backend/healthcheck/cli/__main__.py
from __future__ import annotations

import argparse
from pathlib import Path

from healthcheck.cli.seed_demo import load_json_list, seed_demo
from healthcheck.logging_config import configure_logging


def main() -> None:
    p = argparse.ArgumentParser(description="Seed the Plant HealthCheck database with templates and inspection history")
    p.add_argument("--templates-file", type=Path, default=None, help="JSON list (or {'templates': [...]})")
    p.add_argument("--equipments-file", type=Path, default=None, help="JSON list (or {'equipments': [...]})")
    p.add_argument("--random-seed", type=int, default=None)
    p.add_argument("--history-months", type=int, default=6)
    p.add_argument("--target-checklists", type=int, default=127)
    p.add_argument("--log-level", default=None)
    args = p.parse_args()

    configure_logging(args.log_level)

    out = seed_demo(
        templates=load_json_list(args.templates_file, "templates") if args.templates_file else None,
        equipments=load_json_list(args.equipments_file, "equipments") if args.equipments_file else None,
        random_seed=args.random_seed,
        history_months=args.history_months,
        target_checklists=args.target_checklists,
    )
    print(
        {
            "ok": True,
            "templates": out.templates,
            "template_errors": out.template_errors,
            "equipments": out.equipments,
            "checklists": out.checklists,
            "active_alerts": out.active_alerts,
        }
    )


if __name__ == "__main__":
    main()
