"""CLI entrypoint for bus demos."""

from __future__ import annotations

from argparse import ArgumentParser

from stickybus.demo.runner import SCENARIOS, run_scenario


def main(argv: list[str] | None = None) -> None:
    parser = ArgumentParser(description="Run stickybus demo scenarios.")
    parser.add_argument("scenario", choices=sorted(SCENARIOS), help="Scenario to run.")
    parser.add_argument(
        "--metrics", action="store_true", help="Print counters after the scenario."
    )
    args = parser.parse_args(argv)

    result = run_scenario(args.scenario, configure=True)
    for subscriber, events in result.observed.items():
        threads = ", ".join(sorted(result.threads[subscriber]))
        print(f"{subscriber}: {events} (threads: {threads})")
    if args.metrics:
        print(result.metrics, end="")


if __name__ == "__main__":
    main()
