# ingest_cli.py

from __future__ import annotations

import argparse
from pathlib import Path

from funda_ingest.core.fetch import ListingApiClient, extract_tiny_ids
from funda_ingest.core.log import configure_logging
from funda_ingest.inputs.inputs import InputsLoader
from funda_ingest.tools.batch_fetch import benchmark, run_batch_fetch_tool, write_result


def _split_csv(val: str | None) -> list[str] | None:
    if not val:
        return None
    return [v.strip() for v in val.split(",") if v.strip()]


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Funda listing batch ingest")
    p.add_argument("--tiny-ids", type=str, default=None, help="Comma-separated listing tiny ids")
    p.add_argument("--urls", type=str, default=None, help="Comma-separated listing URLs")
    p.add_argument("--config", type=str, default=None, help="Optional JSON inputs file")
    p.add_argument("--delay", type=float, default=None, help="Minimum seconds between request starts")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument("--out", type=str, default=None, help="Write the batch result JSON here")
    p.add_argument("--pretty", type=int, choices=(0, 1), default=None, help="Print sample records")
    p.add_argument("--benchmark", type=int, choices=(0, 1), default=None, help="Print throughput figures only")

    args = p.parse_args(argv)
    configure_logging()

    loader = InputsLoader()
    cfg = loader.load(args.config) if args.config else loader.load_json("{}")
    cfg = loader.with_overrides(
        cfg,
        tiny_ids=_split_csv(args.tiny_ids),
        urls=_split_csv(args.urls),
        out=args.out,
        pretty=None if args.pretty is None else bool(args.pretty),
        benchmark=None if args.benchmark is None else bool(args.benchmark),
        min_delay_s=args.delay,
        timeout_s=args.timeout,
    )

    ids = list(dict.fromkeys([*cfg.run.tiny_ids, *extract_tiny_ids(cfg.run.urls)]))
    if not ids:
        p.print_usage()
        print("error: no tiny ids given (use --tiny-ids, --urls or --config)")
        return 2

    if cfg.run.benchmark:
        with ListingApiClient(cfg.policy) as client:
            report = benchmark(ids, client.fetch_or_none, min_delay_s=cfg.policy.min_delay_s)
        print(
            f"benchmark: {report.requests_issued} requests in {report.total_s:.2f}s, "
            f"avg={report.avg_time_per_request_s:.3f}s, success={report.success_rate:.0%}, "
            f"~{report.estimated_s_per_1000 / 60:.1f} min per 1000"
        )
        return 0

    result = run_batch_fetch_tool(tiny_ids=ids, policy=cfg.policy)

    # Minimal console summary
    print(result.summary())

    if cfg.run.pretty:
        for record in result.records[:3]:
            print(record.summary())

    if cfg.run.out:
        path = write_result(result, Path(cfg.run.out))
        print(f"wrote {path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
